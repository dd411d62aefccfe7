"""init

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-01 00:00:00
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.Text()),
        sa.Column("password_hash", sa.String(length=255)),
        sa.Column("membership_tier", sa.String(length=20)),
        sa.Column("loyalty_points", sa.Integer()),
        *_timestamps(),
    )
    op.create_index("ix_customers_email", "customers", ["email"], unique=True)

    op.create_table(
        "restaurants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.Text()),
        sa.Column("description", sa.Text()),
        sa.Column("cuisine", sa.String(length=100)),
        sa.Column("price_range", sa.String(length=10)),
        sa.Column("location", sa.Text()),
        sa.Column("address", sa.Text()),
        sa.Column("image_url", sa.Text()),
        sa.Column("rating", sa.Numeric(2, 1)),
        sa.Column("review_count", sa.Integer()),
        sa.Column("is_popular", sa.Boolean()),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("is_approved", sa.Boolean()),
        sa.Column("is_active", sa.Boolean()),
        *_timestamps(),
    )

    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255)),
        sa.Column("hashed_password", sa.String(length=255)),
        sa.Column("role", sa.String(length=20)),
        sa.Column("is_active", sa.Boolean()),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_admin_users_email", "admin_users", ["email"], unique=True)

    op.create_table(
        "admin_refresh_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admin_users.id"), index=True),
        sa.Column("token_hash", sa.String(length=255), unique=True, index=True),
        sa.Column("expires_at", sa.DateTime(timezone=True)),
        sa.Column("revoked_at", sa.DateTime(timezone=True)),
        sa.Column("last_used_at", sa.DateTime(timezone=True)),
        sa.Column("ip", sa.String(length=64)),
        sa.Column("user_agent", sa.String(length=255)),
        *_timestamps(),
    )

    op.create_table(
        "support_conversations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), index=True),
        sa.Column("title", sa.Text()),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("channel", sa.String(length=20)),
        sa.Column("is_handled_by_ai", sa.Boolean()),
        sa.Column("escalated_at", sa.DateTime(timezone=True)),
        sa.Column("escalation_reason", sa.Text()),
        sa.Column("last_message_at", sa.DateTime(timezone=True)),
        sa.Column("resolved_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )

    op.create_table(
        "support_messages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "conversation_id",
            sa.Integer(),
            sa.ForeignKey("support_conversations.id", ondelete="CASCADE"),
            index=True,
        ),
        sa.Column("role", sa.String(length=20)),
        sa.Column("content", sa.Text()),
        sa.Column("rag_source_ids", postgresql.JSONB()),
        sa.Column("ai_model_version", sa.String(length=100)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "support_tickets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "conversation_id",
            sa.Integer(),
            sa.ForeignKey("support_conversations.id"),
            index=True,
        ),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), index=True),
        sa.Column("ticket_number", sa.String(length=20), nullable=False),
        sa.Column("subject", sa.Text()),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(length=30)),
        sa.Column("priority", sa.String(length=20)),
        sa.Column("status", sa.String(length=20)),
        sa.Column("assigned_agent_id", sa.Integer(), sa.ForeignKey("admin_users.id")),
        sa.Column("assigned_at", sa.DateTime(timezone=True)),
        sa.Column("resolution", sa.Text()),
        sa.Column("resolved_at", sa.DateTime(timezone=True)),
        sa.Column("support_bundle", postgresql.JSONB()),
        *_timestamps(),
    )
    op.create_index(
        "ix_support_tickets_ticket_number", "support_tickets", ["ticket_number"], unique=True
    )
    op.create_index("ix_support_tickets_status", "support_tickets", ["status"], unique=False)

    op.create_table(
        "knowledge_base",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.Text()),
        sa.Column("content", sa.Text()),
        sa.Column("category", sa.String(length=50)),
        sa.Column("subcategory", sa.String(length=100)),
        sa.Column("keywords", postgresql.JSONB()),
        sa.Column("is_public", sa.Boolean()),
        sa.Column("is_active_for_ai", sa.Boolean()),
        sa.Column("view_count", sa.Integer()),
        sa.Column("helpful_count", sa.Integer()),
        sa.Column("not_helpful_count", sa.Integer()),
        *_timestamps(),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("admin_id", sa.Integer(), sa.ForeignKey("admin_users.id")),
        sa.Column("entity", sa.String(length=100)),
        sa.Column("entity_id", sa.Integer()),
        sa.Column("action", sa.String(length=20)),
        sa.Column("before_json", postgresql.JSONB()),
        sa.Column("after_json", postgresql.JSONB()),
        sa.Column("ip", sa.String(length=64)),
        sa.Column("user_agent", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "app_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("level", sa.String(length=20)),
        sa.Column("event_type", sa.String(length=100), index=True),
        sa.Column("message", sa.Text()),
        sa.Column("conversation_id", sa.Integer(), index=True),
        sa.Column("data", postgresql.JSONB()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("app_logs")
    op.drop_table("audit_logs")
    op.drop_table("knowledge_base")
    op.drop_index("ix_support_tickets_status", table_name="support_tickets")
    op.drop_index("ix_support_tickets_ticket_number", table_name="support_tickets")
    op.drop_table("support_tickets")
    op.drop_table("support_messages")
    op.drop_table("support_conversations")
    op.drop_table("admin_refresh_tokens")
    op.drop_index("ix_admin_users_email", table_name="admin_users")
    op.drop_table("admin_users")
    op.drop_table("restaurants")
    op.drop_index("ix_customers_email", table_name="customers")
    op.drop_table("customers")
