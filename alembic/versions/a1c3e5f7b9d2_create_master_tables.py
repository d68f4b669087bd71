"""create_master_tables

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-19 00:00:00.000000

Master database: super_admins and tenants.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic
revision: str = "a1c3e5f7b9d2"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None


def upgrade() -> None:
    op.create_table(
        "super_admins",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="super_admin"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lock_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_super_admins_id"), "super_admins", ["id"], unique=False)
    op.create_index(op.f("ix_super_admins_email"), "super_admins", ["email"], unique=True)

    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_name", sa.String(100), nullable=False),
        sa.Column("subdomain", sa.String(30), nullable=False),
        sa.Column("email", sa.String(254), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("branding", sa.JSON(), nullable=False),
        sa.Column("plan", sa.String(20), nullable=False, server_default="basic"),
        sa.Column("subscription_status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("subscription_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("subscription_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_users", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("max_recruiters", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("admin_username", sa.String(50), nullable=False),
        sa.Column("admin_temp_password", sa.String(255), nullable=False),
        sa.Column("password_changed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["created_by_id"], ["super_admins.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("subdomain"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("admin_username"),
    )
    op.create_index(op.f("ix_tenants_id"), "tenants", ["id"], unique=False)
    op.create_index("idx_tenant_subdomain", "tenants", ["subdomain"], unique=False)
    op.create_index("idx_tenant_is_active", "tenants", ["is_active"], unique=False)
    op.create_index("idx_tenant_subscription_status", "tenants", ["subscription_status"], unique=False)
    op.create_index("idx_tenant_created_at", "tenants", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_tenant_created_at", table_name="tenants")
    op.drop_index("idx_tenant_subscription_status", table_name="tenants")
    op.drop_index("idx_tenant_is_active", table_name="tenants")
    op.drop_index("idx_tenant_subdomain", table_name="tenants")
    op.drop_index(op.f("ix_tenants_id"), table_name="tenants")
    op.drop_table("tenants")

    op.drop_index(op.f("ix_super_admins_email"), table_name="super_admins")
    op.drop_index(op.f("ix_super_admins_id"), table_name="super_admins")
    op.drop_table("super_admins")
