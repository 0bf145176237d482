"""Integration tests for the system initialization endpoints."""

import pytest

from tenancy.config.settings import InitializationConfig

SEED_STEPS = [
    "roles",
    "permissions",
    "tenants",
    "users",
    "menus",
    "casbin_policies",
    "organizations",
]


@pytest.mark.asyncio
async def test_fresh_system_is_not_initialized(authenticated_client):
    response = await authenticated_client.get("/v1/sys/initialize")

    assert response.status_code == 200
    assert response.json()["data"]["is_initialized"] is False
    assert response.json()["data"]["statuses"] == []


@pytest.mark.asyncio
async def test_initialize_seeds_default_tenant(authenticated_client, runner):
    response = await authenticated_client.post("/v1/sys/initialize")
    await runner.drain()

    state = response.json()["data"]
    assert response.status_code == 200
    assert state["is_initialized"] is True
    assert [s["component"] for s in state["statuses"]] == SEED_STEPS
    assert {s["status"] for s in state["statuses"]} == {"initialized"}

    tenant = await authenticated_client.get("/v1/tenants/ncobase")
    users = await authenticated_client.get("/v1/tenants/ncobase/users")
    status = await authenticated_client.get("/v1/sys/initialize")

    assert tenant.status_code == 200
    assert users.json()["data"]["total"] == 3
    assert all(len(u["role_ids"]) == 1 for u in users.json()["data"]["items"])
    assert status.json()["data"]["is_initialized"] is True


@pytest.mark.asyncio
async def test_repeat_is_conflict(authenticated_client):
    await authenticated_client.post("/v1/sys/initialize")

    response = await authenticated_client.post("/v1/sys/initialize")

    assert response.status_code == 409
    assert response.json()["error_code"] == "conflict"


@pytest.mark.asyncio
async def test_rerun_with_allow_skips_everything(authenticated_client):
    await authenticated_client.post("/v1/sys/initialize")

    response = await authenticated_client.post(
        "/v1/sys/initialize", json={"allow_reinitialization": True}
    )

    assert response.status_code == 200
    assert {s["status"] for s in response.json()["data"]["statuses"]} == {"skipped"}


@pytest.mark.asyncio
async def test_reset_not_allowed(authenticated_client):
    response = await authenticated_client.post("/v1/sys/initialize/reset")

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_reset_when_allowed(authenticated_client, test_app, test_settings):
    test_app.state.settings = test_settings.model_copy(
        update={
            "initialization": InitializationConfig(
                allow_reinitialization=True, password_hash_rounds=4
            )
        }
    )
    await authenticated_client.post("/v1/sys/initialize")

    reset = await authenticated_client.post("/v1/sys/initialize/reset")

    assert reset.status_code == 200
    assert reset.json()["data"]["is_initialized"] is False
    assert reset.json()["data"]["statuses"] == []


@pytest.mark.asyncio
async def test_requires_authentication(test_client):
    response = await test_client.post("/v1/sys/initialize")

    assert response.status_code == 401
