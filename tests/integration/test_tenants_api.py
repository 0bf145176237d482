"""Integration tests for the tenant endpoints."""

import pytest


class TestTenantCrud:
    """Tests for /v1/tenants."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, authenticated_client, create_tenant):
        tenant = await create_tenant("Acme Corporation", slug="acme")

        by_id = await authenticated_client.get(f"/v1/tenants/{tenant['id']}")
        by_slug = await authenticated_client.get("/v1/tenants/acme")

        assert by_id.status_code == 200
        body = by_id.json()
        assert body["code"] == 0
        assert body["message"] == "ok"
        assert body["data"]["slug"] == "acme"
        assert by_slug.json()["data"]["id"] == tenant["id"]

    @pytest.mark.asyncio
    async def test_slug_is_derived(self, create_tenant):
        tenant = await create_tenant("Globex Holdings")

        assert tenant["slug"] == "globex-holdings"
        assert tenant["is_expired"] is False

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, authenticated_client):
        response = await authenticated_client.post("/v1/tenants", json={"name": ""})

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "invalid_request"
        assert body["details"] == {"field": "name"}

    @pytest.mark.asyncio
    async def test_bad_slug_is_validation_error(self, authenticated_client):
        response = await authenticated_client.post(
            "/v1/tenants", json={"name": "Bad", "slug": "-bad-"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, authenticated_client, create_tenant):
        await create_tenant("Acme", slug="acme")

        response = await authenticated_client.post(
            "/v1/tenants", json={"name": "Other", "slug": "acme"}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "already_exists"

    @pytest.mark.asyncio
    async def test_update(self, authenticated_client, create_tenant, runner):
        tenant = await create_tenant("Before")

        response = await authenticated_client.put(
            f"/v1/tenants/{tenant['id']}", json={"title": "Renamed", "disabled": True}
        )
        await runner.drain()
        fetched = await authenticated_client.get(f"/v1/tenants/{tenant['id']}")

        assert response.status_code == 200
        assert fetched.json()["data"]["title"] == "Renamed"
        assert fetched.json()["data"]["disabled"] is True

    @pytest.mark.asyncio
    async def test_update_missing(self, authenticated_client):
        response = await authenticated_client.put("/v1/tenants/missing", json={"title": "x"})

        assert response.status_code == 404
        assert response.json()["details"]["entity"] == "Tenant"

    @pytest.mark.asyncio
    async def test_delete(self, authenticated_client, create_tenant, runner):
        tenant = await create_tenant("Doomed")

        deleted = await authenticated_client.delete(f"/v1/tenants/{tenant['id']}")
        await runner.drain()
        fetched = await authenticated_client.get(f"/v1/tenants/{tenant['id']}")

        assert deleted.status_code == 200
        assert deleted.json()["data"] is None
        assert fetched.status_code == 404


class TestTenantListing:
    """Tests for tenant pagination and filters."""

    @pytest.mark.asyncio
    async def test_cursor_pagination(self, authenticated_client, create_tenant):
        for i in range(5):
            await create_tenant(f"Tenant {i}")

        first = (await authenticated_client.get("/v1/tenants", params={"limit": 2})).json()["data"]
        second = (
            await authenticated_client.get(
                "/v1/tenants", params={"limit": 2, "cursor": first["cursor"]}
            )
        ).json()["data"]

        assert first["total"] == 5
        assert len(first["items"]) == 2
        assert first["has_next"] is True
        assert first["has_prev"] is False
        assert second["has_prev"] is True
        assert not {t["id"] for t in first["items"]} & {t["id"] for t in second["items"]}

    @pytest.mark.asyncio
    async def test_filters(self, authenticated_client, create_tenant):
        await create_tenant("Public", type="public")
        await create_tenant("Private")

        response = await authenticated_client.get("/v1/tenants", params={"type": "public"})

        assert [t["name"] for t in response.json()["data"]["items"]] == ["Public"]

    @pytest.mark.asyncio
    async def test_malformed_cursor(self, authenticated_client):
        response = await authenticated_client.get("/v1/tenants", params={"cursor": "a"})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "cursor"


class TestUserTenants:
    """Tests for /v1/users/{user}/tenants."""

    @pytest.mark.asyncio
    async def test_user_tenants(self, authenticated_client, create_tenant, runner):
        tenant = await create_tenant("Home")
        await authenticated_client.post(
            f"/v1/tenants/{tenant['id']}/users", json={"user_id": "u-1"}
        )
        await runner.drain()

        listed = await authenticated_client.get("/v1/users/u-1/tenants")
        single = await authenticated_client.get("/v1/users/u-1/tenant")

        assert [t["id"] for t in listed.json()["data"]] == [tenant["id"]]
        assert single.json()["data"]["id"] == tenant["id"]

    @pytest.mark.asyncio
    async def test_user_without_tenant(self, authenticated_client):
        response = await authenticated_client.get("/v1/users/nobody/tenant")

        assert response.status_code == 404
