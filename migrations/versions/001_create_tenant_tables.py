"""Create tenant tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _provenance() -> list[sa.Column]:
    return [
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.Column("updated_by", sa.String(36), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _binding(table: str, left: str, right: str, unique_name: str, index_name: str) -> None:
    op.create_table(
        table,
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(left, sa.String(36), nullable=False),
        sa.Column(right, sa.String(36), nullable=False),
        *_provenance(),
        sa.UniqueConstraint(left, right, name=unique_name),
    )
    op.create_index(index_name, table, [right])


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("type", sa.String(50), nullable=False, server_default="private"),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("url", sa.String(512), nullable=True),
        sa.Column("logo", sa.String(512), nullable=True),
        sa.Column("logo_alt", sa.String(255), nullable=True),
        sa.Column("keywords", sa.String(512), nullable=True),
        sa.Column("copyright", sa.String(255), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("disabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("extras", postgresql.JSONB, nullable=True),
        sa.Column("expired_at", sa.DateTime(timezone=True), nullable=True),
        *_provenance(),
    )
    op.create_index("idx_tenant_type", "tenants", ["type"])

    op.create_table(
        "tenant_quotas",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), nullable=False),
        sa.Column("quota_type", sa.String(50), nullable=False),
        sa.Column("quota_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("max_value", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("current_used", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("unit", sa.String(20), nullable=False, server_default="count"),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("extras", postgresql.JSONB, nullable=True),
        *_provenance(),
        sa.UniqueConstraint("tenant_id", "quota_type", name="uq_tenant_quota_type"),
    )
    op.create_index("idx_tenant_quota_tenant", "tenant_quotas", ["tenant_id"])

    op.create_table(
        "tenant_billing",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), nullable=False),
        sa.Column("billing_period", sa.String(20), nullable=False, server_default="monthly"),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("amount", sa.Float, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("invoice_number", sa.String(64), nullable=False, unique=True),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("usage_details", postgresql.JSONB, nullable=True),
        sa.Column("extras", postgresql.JSONB, nullable=True),
        *_provenance(),
    )
    op.create_index("idx_tenant_billing_tenant", "tenant_billing", ["tenant_id"])
    # Overdue sweep scans pending rows by due date
    op.create_index("idx_tenant_billing_status_due", "tenant_billing", ["status", "due_date"])

    op.create_table(
        "tenant_settings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), nullable=False),
        sa.Column("setting_key", sa.String(255), nullable=False),
        sa.Column("setting_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("setting_value", sa.Text, nullable=True),
        sa.Column("default_value", sa.Text, nullable=True),
        sa.Column("setting_type", sa.String(20), nullable=False, server_default="string"),
        sa.Column("scope", sa.String(20), nullable=False, server_default="tenant"),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_required", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_readonly", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("validation", postgresql.JSONB, nullable=True),
        sa.Column("extras", postgresql.JSONB, nullable=True),
        *_provenance(),
        sa.UniqueConstraint("tenant_id", "setting_key", name="uq_tenant_setting_key"),
    )
    op.create_index("idx_tenant_setting_tenant", "tenant_settings", ["tenant_id"])

    _binding("tenant_groups", "tenant_id", "group_id", "uq_tenant_group", "idx_tenant_group_group")
    _binding("tenant_menus", "tenant_id", "menu_id", "uq_tenant_menu", "idx_tenant_menu_menu")
    _binding(
        "tenant_dictionaries",
        "tenant_id",
        "dictionary_id",
        "uq_tenant_dictionary",
        "idx_tenant_dictionary_dictionary",
    )
    _binding(
        "tenant_options", "tenant_id", "option_id", "uq_tenant_option", "idx_tenant_option_option"
    )
    _binding("user_tenants", "user_id", "tenant_id", "uq_user_tenant", "idx_user_tenant_tenant")

    op.create_table(
        "user_tenant_roles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("tenant_id", sa.String(36), nullable=False),
        sa.Column("role_id", sa.String(36), nullable=False),
        *_provenance(),
        sa.UniqueConstraint("user_id", "tenant_id", "role_id", name="uq_user_tenant_role"),
    )
    op.create_index(
        "idx_user_tenant_role_tenant_role", "user_tenant_roles", ["tenant_id", "role_id"]
    )


def downgrade() -> None:
    op.drop_table("user_tenant_roles")
    op.drop_table("user_tenants")
    op.drop_table("tenant_options")
    op.drop_table("tenant_dictionaries")
    op.drop_table("tenant_menus")
    op.drop_table("tenant_groups")
    op.drop_table("tenant_settings")
    op.drop_table("tenant_billing")
    op.drop_table("tenant_quotas")
    op.drop_table("tenants")
