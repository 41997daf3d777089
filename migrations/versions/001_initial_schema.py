"""Initial schema: subscription store and erasure audit entries

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

# revision identifiers
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Subscription store
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=True),
        sa.Column("level", sa.String(100), nullable=False, server_default=""),
        sa.Column("paystate", sa.String(1), nullable=False, server_default="P"),
        sa.Column("processor", sa.String(255), nullable=False, server_default=""),
        sa.Column("processor_key", sa.String(255), nullable=False, server_default=""),
        sa.Column("payment_token", sa.String(255), nullable=True),
        sa.Column("net_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("ip", sa.String(255), nullable=False, server_default=""),
        sa.Column("ua", sa.String(512), nullable=False, server_default=""),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("created_on", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_subscriptions_user", "subscriptions", ["user_id"])
    op.create_index(
        "idx_subscriptions_paystate_created", "subscriptions", ["paystate", "created_on"]
    )

    # No ON DELETE CASCADE: dependents are erased explicitly before their parents
    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "subscription_id",
            sa.Integer,
            sa.ForeignKey("subscriptions.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("display_number", sa.String(64), nullable=False),
        sa.Column("invoice_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("gross_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("html", sa.Text, nullable=False, server_default=""),
    )

    op.create_table(
        "credit_notes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "invoice_id", sa.Integer, sa.ForeignKey("invoices.id"), nullable=False, unique=True
        ),
        sa.Column("display_number", sa.String(64), nullable=False),
        sa.Column("credit_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("html", sa.Text, nullable=False, server_default=""),
    )

    op.create_table(
        "subscription_users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, nullable=True, unique=True),
        sa.Column("isbusiness", sa.Integer, nullable=False, server_default="0"),
        sa.Column("businessname", sa.String(255), nullable=False, server_default=""),
        sa.Column("occupation", sa.String(255), nullable=False, server_default=""),
        sa.Column("vatnumber", sa.String(255), nullable=False, server_default=""),
        sa.Column("viesregistered", sa.Integer, nullable=False, server_default="0"),
        sa.Column("taxauthority", sa.String(255), nullable=False, server_default=""),
        sa.Column("address1", sa.String(255), nullable=False, server_default=""),
        sa.Column("address2", sa.String(255), nullable=False, server_default=""),
        sa.Column("city", sa.String(255), nullable=False, server_default=""),
        sa.Column("state", sa.String(255), nullable=False, server_default=""),
        sa.Column("zip", sa.String(255), nullable=False, server_default=""),
        sa.Column("country", sa.String(8), nullable=False, server_default=""),
        sa.Column("params", JSON_TYPE, nullable=False),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("needs_logout", sa.Integer, nullable=False, server_default="0"),
    )

    # Erasure audit trail (append-only)
    op.create_table(
        "erasure_audit_entries",
        sa.Column("entry_id", sa.Uuid(), primary_key=True),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("subject_id", sa.Integer, nullable=False),
        sa.Column("actor_id", sa.String(255), nullable=False),
        sa.Column("request_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("outcome", JSON_TYPE, nullable=False),
        sa.Column("domain_status", JSON_TYPE, nullable=False),
    )
    op.create_index("idx_erasure_audit_subject", "erasure_audit_entries", ["subject_id"])
    op.create_index("idx_erasure_audit_recorded", "erasure_audit_entries", ["recorded_at"])


def downgrade() -> None:
    op.drop_table("erasure_audit_entries")
    op.drop_table("subscription_users")
    op.drop_table("credit_notes")
    op.drop_table("invoices")
    op.drop_table("subscriptions")
