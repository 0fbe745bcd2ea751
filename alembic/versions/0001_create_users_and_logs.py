"""create users and logs tables

Revision ID: 0001_create_users_and_logs
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_create_users_and_logs"
down_revision = None
branch_labels = None
depends_on = None


def _resource_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(length=27), nullable=False),
        sa.Column("owner_uuid", sa.String(length=27), nullable=True),
        sa.Column("modified_by_user_uuid", sa.String(length=27), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        *_resource_columns(),
        sa.Column("email", sa.String(length=255), nullable=True, unique=True),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_users_uuid", "users", ["uuid"], unique=True)

    op.create_table(
        "logs",
        *_resource_columns(),
        sa.Column("object_uuid", sa.String(length=255), nullable=False),
        sa.Column("object_owner_uuid", sa.String(length=27), nullable=True),
        sa.Column("event_type", sa.String(length=64), nullable=True),
        sa.Column("event_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("summary", sa.Text, nullable=True),
        sa.Column("properties", sa.JSON, nullable=False),
    )
    op.create_index("ix_logs_uuid", "logs", ["uuid"], unique=True)
    op.create_index("ix_logs_object_uuid", "logs", ["object_uuid"])
    op.create_index("ix_logs_event_at", "logs", ["event_at"])


def downgrade() -> None:
    op.drop_index("ix_logs_event_at", table_name="logs")
    op.drop_index("ix_logs_object_uuid", table_name="logs")
    op.drop_index("ix_logs_uuid", table_name="logs")
    op.drop_table("logs")
    op.drop_index("ix_users_uuid", table_name="users")
    op.drop_table("users")
