"""Integration tests for the quota endpoints."""

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def tenant(create_tenant):
    return await create_tenant("Acme", slug="acme")


@pytest.mark.asyncio
async def test_storage_quota_scenario(authenticated_client, tenant, runner):
    """Test 600 of 1000 used: +500 is refused and +300 allowed."""
    created = await authenticated_client.post(
        "/v1/tenants/acme/quotas",
        json={"quota_type": "storage", "max_value": 1000, "unit": "bytes"},
    )
    used = await authenticated_client.post(
        "/v1/tenants/acme/quotas/usage", json={"quota_type": "storage", "delta": 600}
    )
    await runner.drain()
    assert created.status_code == 201
    assert created.json()["data"]["tenant_id"] == tenant["id"]
    assert used.json()["data"]["current_used"] == 600
    assert used.json()["data"]["remaining"] == 400

    refused = await authenticated_client.post(
        "/v1/tenants/acme/quotas/check", json={"quota_type": "storage", "amount": 500}
    )
    allowed = await authenticated_client.post(
        "/v1/tenants/acme/quotas/check", json={"quota_type": "storage", "amount": 300}
    )

    assert refused.json()["data"]["allowed"] is False
    assert allowed.json()["data"]["allowed"] is True


@pytest.mark.asyncio
async def test_usage_reporting(authenticated_client, tenant, runner):
    await authenticated_client.post(
        "/v1/tenants/acme/quotas", json={"quota_type": "users", "max_value": 3}
    )

    updated = await authenticated_client.post(
        "/v1/tenants/acme/quotas/usage", json={"quota_type": "users", "delta": 3}
    )
    await runner.drain()
    usage = await authenticated_client.get(
        "/v1/tenants/acme/quotas/usage", params={"quota_type": "users"}
    )

    assert updated.json()["data"]["current_used"] == 3
    assert usage.json()["data"] == {
        "tenant_id": tenant["id"],
        "quota_type": "users",
        "used": 3,
        "limit": 3,
        "exceeded": True,
    }


@pytest.mark.asyncio
async def test_usage_defaults_without_quota(authenticated_client, tenant):
    usage = await authenticated_client.get("/v1/tenants/acme/quotas/usage")

    assert usage.json()["data"]["quota_type"] == "storage"
    assert usage.json()["data"]["used"] == 0
    assert usage.json()["data"]["limit"] == 10 * 1024 * 1024 * 1024


@pytest.mark.asyncio
async def test_quota_crud(authenticated_client, tenant, runner):
    created = (
        await authenticated_client.post(
            "/v1/tenants/acme/quotas", json={"quota_type": "projects", "max_value": 5}
        )
    ).json()["data"]

    updated = await authenticated_client.put(
        f"/v1/quotas/{created['id']}", json={"max_value": 10}
    )
    summary = await authenticated_client.get("/v1/tenants/acme/quotas/summary")
    listed = await authenticated_client.get("/v1/tenants/acme/quotas")
    deleted = await authenticated_client.delete(f"/v1/quotas/{created['id']}")
    await runner.drain()
    missing = await authenticated_client.get(f"/v1/quotas/{created['id']}")

    assert updated.json()["data"]["max_value"] == 10
    assert [q["quota_type"] for q in summary.json()["data"]] == ["projects"]
    assert listed.json()["data"]["total"] == 1
    assert deleted.status_code == 200
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_type(authenticated_client, tenant):
    await authenticated_client.post("/v1/tenants/acme/quotas", json={"quota_type": "users"})

    response = await authenticated_client.post(
        "/v1/tenants/acme/quotas", json={"quota_type": "users"}
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_missing_type(authenticated_client, tenant):
    response = await authenticated_client.post("/v1/tenants/acme/quotas", json={"max_value": 1})

    assert response.status_code == 400
    assert response.json()["details"]["field"] == "quota_type"


@pytest.mark.asyncio
async def test_unknown_tenant(authenticated_client):
    response = await authenticated_client.get("/v1/tenants/ghost/quotas")

    assert response.status_code == 404
