from datetime import datetime
from typing import Optional, Tuple
from dataclasses import dataclass
from enum import Enum

from domain.value_objects import ActionResult


class QueueAction(Enum):
    INSERT_UPDATE = "insert/update"
    DELETE = "delete"


class QueueStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


class QueueEntryKind(Enum):
    ASSET = "asset"
    PRODUCT = "product"


ACTIVE_STATUSES: Tuple[QueueStatus, ...] = (QueueStatus.PENDING, QueueStatus.PROCESSING)


@dataclass
class QueueEntry:
    """
    Durable unit of pending synchronization work.

    An entry is created PENDING by the product sync pass, claimed by a drain
    worker (PROCESSING) and ends DONE or ERROR. Both terminal states are final,
    re-attempting work means enqueuing a new entry.

    Attributes:
        id: Unique identifier, assigned by the store on first save
        action: Whether the target should be inserted/updated or deleted
        status: Current processing status
        target_entity_id: PIM side identifier of the affected entity
        store_view_id: Storefront scope the operation applies to
        type_metadata: Encoded routing token, empty for product entries
        value: Handler payload, e.g. the video URL
        asset_id: Catalog identifier once materialized, 0 until then
        worker_id: Worker that claimed the entry
        error_message: Last failure cause
        created_at: Timestamp when the entry was created
        updated_at: Timestamp when the entry was last updated
        started_at: Timestamp when a worker claimed the entry
        finished_at: Timestamp when the entry reached a terminal status
    """

    id: Optional[str] = None
    action: QueueAction = QueueAction.INSERT_UPDATE
    status: QueueStatus = QueueStatus.PENDING
    target_entity_id: str = ""
    store_view_id: int = 0
    type_metadata: str = ""
    value: Optional[str] = None
    asset_id: int = 0
    worker_id: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    kind = QueueEntryKind.ASSET

    def is_pending(self) -> bool:
        return self.status == QueueStatus.PENDING

    def start_processing(self, worker_id: str) -> None:
        """
        Mark the entry as claimed by a drain worker.

        Args:
            worker_id: Identifier of the worker taking this entry
        """
        self.status = QueueStatus.PROCESSING
        self.worker_id = worker_id
        self.started_at = datetime.utcnow()
        self.updated_at = datetime.utcnow()

    def complete(self, result: ActionResult, message: Optional[str] = None) -> None:
        """
        Apply a handler outcome. SUCCESS and SKIPPED finish the entry, ERROR fails it.

        Args:
            result: Outcome returned by the asset handler
            message: Optional diagnostic message stored with ERROR outcomes
        """
        if result == ActionResult.ERROR:
            self.fail(message or "Asset handler reported an error")
            return

        self.status = QueueStatus.DONE
        self.error_message = None
        self.finished_at = datetime.utcnow()
        self.updated_at = datetime.utcnow()

    def fail(self, error_message: str) -> None:
        self.status = QueueStatus.ERROR
        self.error_message = error_message
        self.finished_at = datetime.utcnow()
        self.updated_at = datetime.utcnow()


@dataclass
class AssetQueueEntry(QueueEntry):
    """Queue entry importing a single asset (image, video) onto a catalog entity."""

    kind = QueueEntryKind.ASSET


@dataclass
class ProductQueueEntry(QueueEntry):
    """Queue entry importing a whole product; ``type_metadata`` is always empty."""

    kind = QueueEntryKind.PRODUCT

    @classmethod
    def equivalent_to(cls, entry: QueueEntry) -> "ProductQueueEntry":
        """
        Build the product entry that would import the base entity of an asset entry.

        Args:
            entry: Asset entry whose target product is not published yet

        Returns:
            ProductQueueEntry: Unsaved PENDING product entry for the same target
        """
        return cls(
            action=entry.action,
            status=QueueStatus.PENDING,
            target_entity_id=entry.target_entity_id,
            store_view_id=entry.store_view_id,
        )


def entry_class_for(kind: QueueEntryKind):
    return AssetQueueEntry if kind == QueueEntryKind.ASSET else ProductQueueEntry
