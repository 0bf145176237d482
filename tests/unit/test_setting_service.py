"""Unit tests for SettingService and value coercion."""

import pytest

from tenancy.core.exceptions import (
    AlreadyExistsError,
    FieldRequiredError,
    NotFoundError,
    SettingReadOnlyError,
)
from tenancy.db.models.tenant import SettingScope, SettingType
from tenancy.db.schemas.setting import SettingCreate, SettingUpdate
from tenancy.services.setting import SettingService, coerce_setting_value, to_setting_text


@pytest.fixture
def service(db_session, fake_redis, service_kwargs):
    return SettingService(db_session, fake_redis, **service_kwargs)


class TestCoercion:
    """Tests for coerce_setting_value."""

    @pytest.mark.parametrize(
        ("raw", "setting_type", "expected"),
        [
            ("42", "number", 42),
            ("2.5", "number", 2.5),
            ("many", "number", "many"),
            ("Yes", "boolean", True),
            ("off", "boolean", False),
            ("maybe", "boolean", "maybe"),
            ('{"a": 1}', "json", {"a": 1}),
            ("[1, 2]", "array", [1, 2]),
            ("{broken", "json", "{broken"),
            ("plain", "string", "plain"),
        ],
    )
    def test_coerce(self, raw, setting_type, expected):
        assert coerce_setting_value(raw, setting_type) == expected

    def test_empty_uses_default(self):
        assert coerce_setting_value("", "number", "7") == 7
        assert coerce_setting_value(None, "boolean", "true") is True
        assert coerce_setting_value(None, "string") is None

    def test_to_setting_text(self):
        assert to_setting_text("abc") == "abc"
        assert to_setting_text(None) is None
        assert to_setting_text(True) == "true"
        assert to_setting_text({"k": [1]}) == '{"k": [1]}'


class TestSettingCrud:
    """Tests for setting rows."""

    @pytest.mark.asyncio
    async def test_create_defaults_name_and_types_value(self, service):
        setting = await service.create(
            SettingCreate(
                tenant_id="t-1",
                setting_key="max_upload_mb",
                setting_value="25",
                setting_type=SettingType.NUMBER,
            )
        )

        assert setting.setting_name == "max_upload_mb"
        assert setting.scope == SettingScope.TENANT
        assert setting.typed_value == 25

    @pytest.mark.asyncio
    async def test_create_requires_key(self, service):
        with pytest.raises(FieldRequiredError) as exc_info:
            await service.create(SettingCreate(tenant_id="t-1"))

        assert exc_info.value.field == "setting_key"

    @pytest.mark.asyncio
    async def test_key_unique_per_tenant(self, service):
        await service.create(SettingCreate(tenant_id="t-1", setting_key="theme"))
        await service.create(SettingCreate(tenant_id="t-2", setting_key="theme"))

        with pytest.raises(AlreadyExistsError):
            await service.create(SettingCreate(tenant_id="t-1", setting_key="theme"))

    @pytest.mark.asyncio
    async def test_get_by_key_and_update(self, service, runner):
        created = await service.create(SettingCreate(tenant_id="t-1", setting_key="theme"))
        await service.get_by_key("t-1", "theme")
        await runner.drain()

        await service.update(created.id, SettingUpdate(setting_value="dark", category="ui"))
        await runner.drain()

        fetched = await service.get_by_key("t-1", "theme")
        assert fetched.setting_value == "dark"
        assert fetched.category == "ui"

    @pytest.mark.asyncio
    async def test_readonly_value_rejected_on_update(self, service):
        created = await service.create(
            SettingCreate(tenant_id="t-1", setting_key="plan", setting_value="pro", is_readonly=True)
        )

        with pytest.raises(SettingReadOnlyError):
            await service.update(created.id, SettingUpdate(setting_value="free"))

        renamed = await service.update(created.id, SettingUpdate(setting_name="Plan"))
        assert renamed.setting_name == "Plan"

    @pytest.mark.asyncio
    async def test_delete(self, service, runner):
        created = await service.create(SettingCreate(tenant_id="t-1", setting_key="theme"))

        await service.delete(created.id)
        await runner.drain()

        with pytest.raises(NotFoundError):
            await service.get(created.id)

    @pytest.mark.asyncio
    async def test_list_filters(self, service):
        await service.create(
            SettingCreate(tenant_id="t-1", setting_key="a", category="ui", is_public=True)
        )
        await service.create(
            SettingCreate(tenant_id="t-1", setting_key="b", scope=SettingScope.FEATURE)
        )

        assert (await service.list_settings(tenant_id="t-1")).total == 2
        assert [s.setting_key for s in (await service.list_settings(category="ui")).items] == ["a"]
        features = await service.list_settings(tenant_id="t-1", scope=SettingScope.FEATURE)
        assert [s.setting_key for s in features.items] == ["b"]
        public = await service.list_settings(tenant_id="t-1", is_public=True)
        assert public.total == 1


class TestSettingValues:
    """Tests for set_setting and typed reads."""

    @pytest.mark.asyncio
    async def test_set_setting_creates_string_row(self, service):
        setting = await service.set_setting("t-1", "greeting", "hello")

        assert setting.setting_type == SettingType.STRING
        assert setting.setting_value == "hello"
        assert await service.get_setting_value("t-1", "greeting") == "hello"

    @pytest.mark.asyncio
    async def test_set_setting_overwrites(self, service, runner):
        await service.create(
            SettingCreate(tenant_id="t-1", setting_key="limit", setting_type=SettingType.NUMBER)
        )

        await service.set_setting("t-1", "limit", 10)
        await runner.drain()

        assert await service.get_setting_value("t-1", "limit") == 10

    @pytest.mark.asyncio
    async def test_set_setting_readonly(self, service):
        await service.create(SettingCreate(tenant_id="t-1", setting_key="plan", is_readonly=True))

        with pytest.raises(SettingReadOnlyError):
            await service.set_setting("t-1", "plan", "free")

    @pytest.mark.asyncio
    async def test_set_setting_requires_ids(self, service):
        with pytest.raises(FieldRequiredError):
            await service.set_setting("", "k", "v")
        with pytest.raises(FieldRequiredError):
            await service.set_setting("t-1", "", "v")

    @pytest.mark.asyncio
    async def test_bulk_update(self, service):
        results = await service.bulk_update("t-1", {"a": "1", "b": "2"})

        assert [r.setting_key for r in results] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_bulk_update_stops_at_readonly(self, service):
        await service.create(SettingCreate(tenant_id="t-1", setting_key="locked", is_readonly=True))

        with pytest.raises(SettingReadOnlyError):
            await service.bulk_update("t-1", {"first": "x", "locked": "y", "never": "z"})

        values = await service.get_tenant_settings("t-1")
        assert "first" in values
        assert "never" not in values

    @pytest.mark.asyncio
    async def test_missing_value(self, service):
        with pytest.raises(NotFoundError):
            await service.get_setting_value("t-1", "absent")

    @pytest.mark.asyncio
    async def test_tenant_settings_map(self, service):
        await service.create(
            SettingCreate(
                tenant_id="t-1",
                setting_key="beta",
                setting_value="true",
                setting_type=SettingType.BOOLEAN,
                is_public=True,
            )
        )
        await service.create(
            SettingCreate(
                tenant_id="t-1",
                setting_key="seats",
                default_value="5",
                setting_type=SettingType.NUMBER,
            )
        )

        assert await service.get_tenant_settings("t-1") == {"beta": True, "seats": 5}
        assert await service.get_tenant_settings("t-1", public_only=True) == {"beta": True}
