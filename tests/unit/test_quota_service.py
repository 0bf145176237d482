"""Unit tests for QuotaService."""

import pytest

from tenancy.core.exceptions import AlreadyExistsError, FieldRequiredError, NotFoundError
from tenancy.db.models.tenant import QuotaType, QuotaUnit
from tenancy.db.schemas.quota import QuotaCreate, QuotaUpdate
from tenancy.services.quota import DEFAULT_QUOTA_LIMIT, QuotaService


@pytest.fixture
def service(db_session, fake_redis, service_kwargs):
    return QuotaService(db_session, fake_redis, **service_kwargs)


class TestQuotaCrud:
    """Tests for quota creation, lookup and updates."""

    @pytest.mark.asyncio
    async def test_create_defaults_name(self, service):
        quota = await service.create(
            QuotaCreate(tenant_id="t-1", quota_type=QuotaType.USERS, max_value=100)
        )

        assert quota.quota_name == "users quota"
        assert quota.unit == QuotaUnit.COUNT
        assert quota.remaining == 100
        assert quota.utilization_percent == 0.0

    @pytest.mark.asyncio
    async def test_create_requires_tenant_and_type(self, service):
        with pytest.raises(FieldRequiredError) as exc_info:
            await service.create(QuotaCreate(quota_type=QuotaType.USERS))
        assert exc_info.value.field == "tenant_id"

        with pytest.raises(FieldRequiredError) as exc_info:
            await service.create(QuotaCreate(tenant_id="t-1"))
        assert exc_info.value.field == "quota_type"

    @pytest.mark.asyncio
    async def test_one_quota_per_type(self, service):
        await service.create(QuotaCreate(tenant_id="t-1", quota_type=QuotaType.USERS))

        with pytest.raises(AlreadyExistsError):
            await service.create(QuotaCreate(tenant_id="t-1", quota_type=QuotaType.USERS))

    @pytest.mark.asyncio
    async def test_get_and_update(self, service, runner):
        created = await service.create(
            QuotaCreate(tenant_id="t-1", quota_type=QuotaType.PROJECTS, max_value=5)
        )
        await service.get(created.id)
        await runner.drain()

        updated = await service.update(created.id, QuotaUpdate(max_value=8, current_used=6))
        await runner.drain()

        assert updated.max_value == 8
        fetched = await service.get(created.id)
        assert fetched.current_used == 6
        assert fetched.utilization_percent == 75.0

    @pytest.mark.asyncio
    async def test_get_by_tenant_and_type(self, service):
        created = await service.create(QuotaCreate(tenant_id="t-1", quota_type=QuotaType.API_CALLS))

        found = await service.get_by_tenant_and_type("t-1", "api_calls")

        assert found.id == created.id
        with pytest.raises(NotFoundError):
            await service.get_by_tenant_and_type("t-1", QuotaType.STORAGE)

    @pytest.mark.asyncio
    async def test_delete(self, service, runner):
        created = await service.create(QuotaCreate(tenant_id="t-1", quota_type=QuotaType.USERS))

        await service.delete(created.id)
        await runner.drain()

        with pytest.raises(NotFoundError):
            await service.get(created.id)
        with pytest.raises(NotFoundError):
            await service.delete(created.id)

    @pytest.mark.asyncio
    async def test_list_filters_by_tenant(self, service):
        await service.create(QuotaCreate(tenant_id="t-1", quota_type=QuotaType.USERS))
        await service.create(QuotaCreate(tenant_id="t-1", quota_type=QuotaType.STORAGE))
        await service.create(QuotaCreate(tenant_id="t-2", quota_type=QuotaType.USERS))

        page = await service.list_quotas(tenant_id="t-1")
        by_type = await service.list_quotas(quota_type=QuotaType.USERS)

        assert page.total == 2
        assert {q.tenant_id for q in by_type.items} == {"t-1", "t-2"}
        assert len(await service.get_tenant_quota_summary("t-1")) == 2


class TestQuotaEnforcement:
    """Tests for limit checks and usage accounting."""

    @pytest.mark.asyncio
    async def test_storage_scenario(self, service, runner):
        """Test 600 of 1000 used: +500 is refused, +300 allowed."""
        await service.create(
            QuotaCreate(
                tenant_id="acme",
                quota_type=QuotaType.STORAGE,
                max_value=1000,
                current_used=600,
            )
        )

        assert await service.check_quota_limit("acme", QuotaType.STORAGE, 500) is False
        assert await service.check_quota_limit("acme", QuotaType.STORAGE, 300) is True
        assert await service.check_quota_limit("acme", QuotaType.STORAGE, 400) is True

        await service.update_usage("acme", QuotaType.STORAGE, 400)
        await runner.drain()

        assert await service.get_usage("acme", QuotaType.STORAGE) == 1000
        assert await service.is_quota_exceeded("acme", QuotaType.STORAGE) is True

    @pytest.mark.asyncio
    async def test_absent_quota_is_unrestricted(self, service):
        assert await service.check_quota_limit("t-1", QuotaType.USERS, 10**9) is True
        assert await service.is_quota_exceeded("t-1", QuotaType.USERS) is False
        assert await service.get_usage("t-1", QuotaType.USERS) == 0

    @pytest.mark.asyncio
    async def test_disabled_quota_is_unrestricted(self, service):
        await service.create(
            QuotaCreate(
                tenant_id="t-1",
                quota_type=QuotaType.USERS,
                max_value=1,
                current_used=5,
                enabled=False,
            )
        )

        assert await service.check_quota_limit("t-1", QuotaType.USERS, 1) is True
        assert await service.is_quota_exceeded("t-1", QuotaType.USERS) is False

    @pytest.mark.asyncio
    async def test_default_ceilings(self, service):
        assert await service.get_quota("t-1", QuotaType.STORAGE) == DEFAULT_QUOTA_LIMIT
        assert await service.get_quota("t-1", QuotaType.USERS) == 0

    @pytest.mark.asyncio
    async def test_update_usage_auto_creates(self, service):
        """Test the first usage report creates a bytes quota with the default ceiling."""
        quota = await service.update_usage("t-1", QuotaType.STORAGE, 2048)

        assert quota.current_used == 2048
        assert quota.max_value == DEFAULT_QUOTA_LIMIT
        assert quota.unit == QuotaUnit.BYTES
        assert quota.quota_name == "storage quota"

    @pytest.mark.asyncio
    async def test_update_usage_never_negative(self, service, runner):
        await service.update_usage("t-1", QuotaType.API_CALLS, 5)

        released = await service.update_usage("t-1", QuotaType.API_CALLS, -50)
        await runner.drain()

        assert released.current_used == 0
        assert await service.get_usage("t-1", QuotaType.API_CALLS) == 0

    @pytest.mark.asyncio
    async def test_auto_create_with_negative_delta(self, service):
        quota = await service.update_usage("t-1", QuotaType.PROJECTS, -3)

        assert quota.current_used == 0

    @pytest.mark.asyncio
    async def test_update_usage_requires_tenant(self, service):
        with pytest.raises(FieldRequiredError):
            await service.update_usage("", QuotaType.USERS, 1)

    @pytest.mark.asyncio
    async def test_exceeded_at_exact_limit(self, service):
        await service.create(
            QuotaCreate(tenant_id="t-1", quota_type=QuotaType.USERS, max_value=3, current_used=3)
        )

        assert await service.is_quota_exceeded("t-1", QuotaType.USERS) is True
        assert await service.check_quota_limit("t-1", QuotaType.USERS, 0) is True
        assert await service.check_quota_limit("t-1", QuotaType.USERS, 1) is False
