"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "api_groups",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("base_url", sa.String(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_api_groups_is_default", "api_groups", ["is_default"])

    op.create_table(
        "user_groups",
        sa.Column("email", sa.String(), primary_key=True),
        sa.Column("group_id", sa.String(), sa.ForeignKey("api_groups.id"), primary_key=True),
    )
    op.create_index("ix_user_groups_group_id", "user_groups", ["group_id"])

    op.create_table(
        "endpoints",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("text", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("verb", sa.String(), nullable=False),
        sa.Column("base_url", sa.String(), nullable=False),
        sa.Column("path", sa.String(), nullable=False),
        sa.Column("group_id", sa.String(), sa.ForeignKey("api_groups.id"), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_endpoints_group_id", "endpoints", ["group_id"])

    op.create_table(
        "parameters",
        sa.Column("endpoint_id", sa.String(), sa.ForeignKey("endpoints.id"), primary_key=True),
        sa.Column("name", sa.String(), primary_key=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False),
    )

    op.create_table(
        "parameter_alternatives",
        sa.Column("endpoint_id", sa.String(), primary_key=True),
        sa.Column("parameter_name", sa.String(), primary_key=True),
        sa.Column("alternative", sa.String(), primary_key=True),
        sa.ForeignKeyConstraint(["endpoint_id", "parameter_name"], ["parameters.endpoint_id", "parameters.name"]),
    )

    op.create_table(
        "user_endpoints",
        sa.Column("email", sa.String(), primary_key=True),
        sa.Column("endpoint_id", sa.String(), sa.ForeignKey("endpoints.id"), primary_key=True),
    )
    op.create_index("ix_user_endpoints_endpoint_id", "user_endpoints", ["endpoint_id"])

    op.create_table(
        "tenants",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("credit_balance", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "tenant_users",
        sa.Column("tenant_id", sa.String(), sa.ForeignKey("tenants.id"), primary_key=True),
        sa.Column("email", sa.String(), primary_key=True),
        sa.Column("role", sa.String(), nullable=False),
    )

    op.create_table(
        "user_preferences",
        sa.Column("email", sa.String(), primary_key=True),
        sa.Column("hidden_defaults", sa.Text(), nullable=False),
        sa.Column("credit_balance", sa.BigInteger(), nullable=False),
        sa.Column("default_tenant_id", sa.String(), sa.ForeignKey("tenants.id"), nullable=True),
    )

    op.create_table(
        "api_keys",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("key_hash", sa.String(), nullable=False, unique=True),
        sa.Column("key_prefix", sa.String(), nullable=False),
        sa.Column("key_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), sa.ForeignKey("tenants.id"), nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_used", sa.DateTime(timezone=True), nullable=True),
        sa.Column("usage_count", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
    )
    op.create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"])
    op.create_index("ix_api_keys_email", "api_keys", ["email"])

    op.create_table(
        "api_usage_logs",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("key_id", sa.String(), sa.ForeignKey("api_keys.id"), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("endpoint_path", sa.String(), nullable=False),
        sa.Column("method", sa.String(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("response_status", sa.Integer(), nullable=True),
        sa.Column("response_time_ms", sa.BigInteger(), nullable=True),
        sa.Column("request_size", sa.BigInteger(), nullable=True),
        sa.Column("response_size", sa.BigInteger(), nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("request_id", sa.String(), nullable=True),
        sa.Column("input_tokens", sa.Integer(), nullable=True),
        sa.Column("output_tokens", sa.Integer(), nullable=True),
        sa.Column("total_tokens", sa.Integer(), nullable=True),
        sa.Column("model_used", sa.String(), nullable=True),
    )
    op.create_index("ix_api_usage_logs_key_id", "api_usage_logs", ["key_id"])

    op.create_table(
        "domains",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("domain", sa.String(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("email", "domain"),
    )

    op.create_table(
        "reference_data",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_reference_data_email", "reference_data", ["email"])


def downgrade() -> None:
    op.drop_table("reference_data")
    op.drop_table("domains")
    op.drop_table("api_usage_logs")
    op.drop_table("api_keys")
    op.drop_table("user_preferences")
    op.drop_table("tenant_users")
    op.drop_table("tenants")
    op.drop_table("user_endpoints")
    op.drop_table("parameter_alternatives")
    op.drop_table("parameters")
    op.drop_table("endpoints")
    op.drop_table("user_groups")
    op.drop_table("api_groups")
