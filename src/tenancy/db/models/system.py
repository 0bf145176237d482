"""Access and system tables populated by the seed sequence.

In a full deployment these belong to neighbouring modules (access control,
users, menus, organization). Only the columns the seed sequence and the
group lookup read or write are modelled here.
"""

from typing import Any

from sqlalchemy import Boolean, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IdMixin, PortableJSON, ProvenanceMixin


class Role(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    description: Mapped[str | None] = mapped_column(Text)
    extras: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON, default=dict)


class Permission(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)


class RolePermission(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "role_permissions"

    role_id: Mapped[str] = mapped_column(String(36), nullable=False)
    permission_id: Mapped[str] = mapped_column(String(36), nullable=False)

    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),)


class PolicyRule(IdMixin, Base):
    """Casbin-compatible policy tuple (p_type, v0..v5)."""

    __tablename__ = "policy_rules"

    p_type: Mapped[str] = mapped_column(String(10), nullable=False, default="p")
    v0: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    v1: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    v2: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    v3: Mapped[str | None] = mapped_column(String(255))
    v4: Mapped[str | None] = mapped_column(String(255))
    v5: Mapped[str | None] = mapped_column(String(255))

    __table_args__ = (Index("idx_policy_rule_subject_domain", "v0", "v1"),)


class User(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True)
    phone: Mapped[str | None] = mapped_column(String(50))
    password_hash: Mapped[str | None] = mapped_column(String(255))
    is_certified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Menu(IdMixin, ProvenanceMixin, Base):
    __tablename__ = "menus"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="menu")
    path: Mapped[str | None] = mapped_column(String(255))
    icon: Mapped[str | None] = mapped_column(String(100))
    perms: Mapped[str | None] = mapped_column(String(255))
    parent_id: Mapped[str | None] = mapped_column(String(36))
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Group(IdMixin, ProvenanceMixin, Base):
    """Organization unit (group, company, department, team)."""

    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="group")
    parent_id: Mapped[str | None] = mapped_column(String(36))
    tenant_id: Mapped[str | None] = mapped_column(String(36))
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (Index("idx_group_parent", "parent_id"),)


class SystemOption(IdMixin, ProvenanceMixin, Base):
    """System-wide key/value option."""

    __tablename__ = "system_options"

    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="string")
    value: Mapped[str | None] = mapped_column(Text)
    autoload: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
