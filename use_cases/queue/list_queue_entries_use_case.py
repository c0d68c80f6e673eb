from typing import Dict, Any, List, Optional
from dataclasses import dataclass

from domain.entities.queue_entry import QueueEntry, QueueEntryKind, QueueStatus
from domain.exceptions import EntityNotFoundException
from interfaces.repositories.queue_entry_repository_interface import (
    QueueEntryRepositoryInterface,
    QueueEntryCriteria
)


@dataclass
class ListQueueEntriesRequest:
    """
    Request data structure for listing queue entries.

    Attributes:
        status: Optional status filter
        target_entity_id: Optional PIM identifier filter
        kind: Optional entry kind filter
        offset: Number of entries to skip for pagination
        limit: Maximum number of entries to return
    """
    status: Optional[QueueStatus] = None
    target_entity_id: Optional[str] = None
    kind: Optional[QueueEntryKind] = None
    offset: int = 0
    limit: int = 50


@dataclass
class ListQueueEntriesResponse:
    entries: List[Dict[str, Any]]
    offset: int
    limit: int


@dataclass
class QueueStatisticsResponse:
    """
    Response data structure for queue statistics.

    Attributes:
        counts: Number of entries per status value
        total: Number of entries in the store
        stale_processing: Entries processing for longer than the stale threshold
        stale_threshold_minutes: Threshold used for the stale count
    """
    counts: Dict[str, int]
    total: int
    stale_processing: int
    stale_threshold_minutes: int


class ListQueueEntriesUseCase:
    """
    Read-only queue inspection for operators.

    Lists entries with filters, loads single entries and computes status
    statistics including the number of entries stuck in processing.
    """

    def __init__(self, queue_repository: QueueEntryRepositoryInterface, stale_processing_minutes: int = 60):
        self.queue_repository = queue_repository
        self.stale_processing_minutes = stale_processing_minutes

    async def execute(self, request: ListQueueEntriesRequest) -> ListQueueEntriesResponse:
        criteria = QueueEntryCriteria(
            kind=request.kind,
            target_entity_id=request.target_entity_id,
            statuses=[request.status] if request.status else [],
            offset=request.offset,
            limit=request.limit
        )

        entries = await self.queue_repository.find(criteria)

        return ListQueueEntriesResponse(
            entries=[self._create_entry_summary(entry) for entry in entries],
            offset=request.offset,
            limit=request.limit
        )

    async def get_entry(self, entry_id: str) -> Dict[str, Any]:
        """
        Load a single queue entry.

        Args:
            entry_id: Queue entry identifier

        Returns:
            Dict[str, Any]: Entry data for API response

        Raises:
            EntityNotFoundException: If the entry does not exist
        """
        entry = await self.queue_repository.find_by_id(entry_id)
        if entry is None:
            raise EntityNotFoundException("Queue entry", entry_id)

        return self._create_entry_summary(entry)

    async def get_statistics(self) -> QueueStatisticsResponse:
        counts = await self.queue_repository.count_by_status()
        stale_entries = await self.queue_repository.find_stale_processing_entries(self.stale_processing_minutes)

        return QueueStatisticsResponse(
            counts={status.value: counts.get(status, 0) for status in QueueStatus},
            total=sum(counts.values()),
            stale_processing=len(stale_entries),
            stale_threshold_minutes=self.stale_processing_minutes
        )

    def _create_entry_summary(self, entry: QueueEntry) -> Dict[str, Any]:
        return {
            "id": entry.id,
            "kind": entry.kind.value,
            "action": entry.action.value,
            "status": entry.status.value,
            "target_entity_id": entry.target_entity_id,
            "store_view_id": entry.store_view_id,
            "type_metadata": entry.type_metadata,
            "value": entry.value,
            "asset_id": entry.asset_id,
            "worker_id": entry.worker_id,
            "error_message": entry.error_message,
            "created_at": entry.created_at.isoformat() if entry.created_at else None,
            "updated_at": entry.updated_at.isoformat() if entry.updated_at else None,
            "started_at": entry.started_at.isoformat() if entry.started_at else None,
            "finished_at": entry.finished_at.isoformat() if entry.finished_at else None
        }
