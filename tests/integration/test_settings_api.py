"""Integration tests for the tenant setting endpoints."""

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def tenant(create_tenant):
    return await create_tenant("Acme", slug="acme")


async def create_setting(client, key: str, **fields):
    response = await client.post(
        "/v1/tenants/acme/settings", json={"setting_key": key, **fields}
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_create_and_get_typed(authenticated_client, tenant):
    created = await create_setting(
        authenticated_client, "max_upload", setting_value="25", setting_type="number"
    )

    fetched = await authenticated_client.get("/v1/tenants/acme/settings/max_upload")

    assert created["setting_name"] == "max_upload"
    assert created["tenant_id"] == tenant["id"]
    assert fetched.json()["data"]["typed_value"] == 25


@pytest.mark.asyncio
async def test_missing_key(authenticated_client, tenant):
    response = await authenticated_client.post("/v1/tenants/acme/settings", json={})

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "setting_key"


@pytest.mark.asyncio
async def test_duplicate_key(authenticated_client, tenant):
    await create_setting(authenticated_client, "theme")

    response = await authenticated_client.post(
        "/v1/tenants/acme/settings", json={"setting_key": "theme"}
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_set_value_upserts(authenticated_client, tenant, runner):
    created = await authenticated_client.put(
        "/v1/tenants/acme/settings/features", json={"value": {"beta": True}}
    )
    await runner.drain()
    overwritten = await authenticated_client.put(
        "/v1/tenants/acme/settings/features", json={"value": "plain"}
    )

    assert created.json()["data"]["setting_value"] == '{"beta": true}'
    assert created.json()["data"]["setting_type"] == "string"
    assert overwritten.json()["data"]["setting_value"] == "plain"
    assert overwritten.json()["data"]["id"] == created.json()["data"]["id"]


@pytest.mark.asyncio
async def test_readonly_rejects_writes(authenticated_client, tenant):
    await create_setting(authenticated_client, "locked", setting_value="a", is_readonly=True)

    response = await authenticated_client.put(
        "/v1/tenants/acme/settings/locked", json={"value": "b"}
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "conflict"


@pytest.mark.asyncio
async def test_bulk_and_values(authenticated_client, tenant, runner):
    await create_setting(
        authenticated_client, "enabled", setting_value="false", setting_type="boolean", is_public=True
    )
    await create_setting(authenticated_client, "secret", setting_value="s3cr3t")

    bulk = await authenticated_client.put(
        "/v1/tenants/acme/settings/bulk", json={"settings": {"enabled": "yes", "color": "red"}}
    )
    await runner.drain()
    values = await authenticated_client.get("/v1/tenants/acme/settings/values")
    public = await authenticated_client.get(
        "/v1/tenants/acme/settings/values", params={"public_only": "true"}
    )

    assert [s["setting_key"] for s in bulk.json()["data"]] == ["enabled", "color"]
    assert values.json()["data"] == {"enabled": True, "secret": "s3cr3t", "color": "red"}
    assert public.json()["data"] == {"enabled": True}


@pytest.mark.asyncio
async def test_list_filters(authenticated_client, tenant):
    await create_setting(authenticated_client, "a", category="ui", is_public=True)
    await create_setting(authenticated_client, "b", category="billing")

    ui = await authenticated_client.get("/v1/tenants/acme/settings", params={"category": "ui"})
    public = await authenticated_client.get(
        "/v1/tenants/acme/settings", params={"is_public": "false"}
    )

    assert [s["setting_key"] for s in ui.json()["data"]["items"]] == ["a"]
    assert [s["setting_key"] for s in public.json()["data"]["items"]] == ["b"]


@pytest.mark.asyncio
async def test_delete(authenticated_client, tenant, runner):
    await create_setting(authenticated_client, "gone")

    deleted = await authenticated_client.delete("/v1/tenants/acme/settings/gone")
    await runner.drain()
    missing = await authenticated_client.get("/v1/tenants/acme/settings/gone")

    assert deleted.status_code == 200
    assert missing.status_code == 404
