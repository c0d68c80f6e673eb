from sqlalchemy import Column, String, Integer, DateTime, Text, Index, text
from sqlalchemy.orm import declarative_base
from datetime import datetime
import uuid

Base = declarative_base()

ACTIVE_STATUS_PREDICATE = text("status IN ('pending', 'processing')")


class QueueEntryModel(Base):
    """
    SQLAlchemy model for synchronization queue entries.

    Asset and product entries share the table and are told apart by
    ``entry_kind``. The partial unique index ``uq_sync_queue_active_entry``
    guarantees that at most one pending or processing entry exists per
    (kind, target, type metadata, action), which closes the race between
    concurrent sync passes that both checked "not queued" before inserting.
    """

    __tablename__ = "sync_queue"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    entry_kind = Column(String(20), nullable=False, default="asset", index=True)
    action = Column(String(20), nullable=False, default="insert/update")
    status = Column(String(20), nullable=False, default="pending", index=True)
    target_entity_id = Column(String(255), nullable=False, index=True)
    store_view_id = Column(Integer, nullable=False, default=0)
    type_metadata = Column(String(255), nullable=False, default="", server_default="")
    value = Column(Text, nullable=True)
    asset_id = Column(Integer, nullable=False, default=0)
    worker_id = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    started_at = Column(DateTime, nullable=True)
    finished_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index(
            "uq_sync_queue_active_entry",
            "entry_kind", "target_entity_id", "type_metadata", "action",
            unique=True,
            postgresql_where=ACTIVE_STATUS_PREDICATE,
            sqlite_where=ACTIVE_STATUS_PREDICATE,
        ),
    )

    def __repr__(self):
        return (f"<QueueEntry(id={self.id}, kind={self.entry_kind}, target={self.target_entity_id}, "
                f"type={self.type_metadata}, status={self.status})>")
