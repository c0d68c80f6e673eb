"""create sync_queue table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sync_queue",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("entry_kind", sa.String(20), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("target_entity_id", sa.String(255), nullable=False),
        sa.Column("store_view_id", sa.Integer, nullable=False),
        sa.Column("type_metadata", sa.String(255), nullable=False, server_default=""),
        sa.Column("value", sa.Text, nullable=True),
        sa.Column("asset_id", sa.Integer, nullable=False),
        sa.Column("worker_id", sa.String(255), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.Column("started_at", sa.DateTime, nullable=True),
        sa.Column("finished_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_sync_queue_entry_kind", "sync_queue", ["entry_kind"])
    op.create_index("ix_sync_queue_status", "sync_queue", ["status"])
    op.create_index("ix_sync_queue_target_entity_id", "sync_queue", ["target_entity_id"])
    op.create_index("ix_sync_queue_created_at", "sync_queue", ["created_at"])
    op.create_index(
        "uq_sync_queue_active_entry",
        "sync_queue",
        ["entry_kind", "target_entity_id", "type_metadata", "action"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending', 'processing')"),
        sqlite_where=sa.text("status IN ('pending', 'processing')"),
    )


def downgrade() -> None:
    op.drop_index("uq_sync_queue_active_entry", table_name="sync_queue")
    op.drop_index("ix_sync_queue_created_at", table_name="sync_queue")
    op.drop_index("ix_sync_queue_target_entity_id", table_name="sync_queue")
    op.drop_index("ix_sync_queue_status", table_name="sync_queue")
    op.drop_index("ix_sync_queue_entry_kind", table_name="sync_queue")
    op.drop_table("sync_queue")
