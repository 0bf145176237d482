"""Join rows between tenants and the entities scoped to them."""

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IdMixin, ProvenanceMixin


class TenantGroup(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "tenant_groups"

    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    group_id: Mapped[str] = mapped_column(String(36), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "group_id", name="uq_tenant_group"),
        Index("idx_tenant_group_group", "group_id"),
    )


class TenantMenu(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "tenant_menus"

    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    menu_id: Mapped[str] = mapped_column(String(36), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "menu_id", name="uq_tenant_menu"),
        Index("idx_tenant_menu_menu", "menu_id"),
    )


class TenantDictionary(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "tenant_dictionaries"

    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    dictionary_id: Mapped[str] = mapped_column(String(36), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "dictionary_id", name="uq_tenant_dictionary"),
        Index("idx_tenant_dictionary_dictionary", "dictionary_id"),
    )


class TenantOption(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "tenant_options"

    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    option_id: Mapped[str] = mapped_column(String(36), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "option_id", name="uq_tenant_option"),
        Index("idx_tenant_option_option", "option_id"),
    )


class UserTenant(IdMixin, ProvenanceMixin, Base):
    """Membership of a user in a tenant."""

    __tablename__ = "user_tenants"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "tenant_id", name="uq_user_tenant"),
        Index("idx_user_tenant_tenant", "tenant_id"),
    )


class UserTenantRole(IdMixin, ProvenanceMixin, Base):
    """Role granted to a user inside one tenant."""

    __tablename__ = "user_tenant_roles"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    role_id: Mapped[str] = mapped_column(String(36), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "tenant_id", "role_id", name="uq_user_tenant_role"),
        Index("idx_user_tenant_role_tenant_role", "tenant_id", "role_id"),
    )
