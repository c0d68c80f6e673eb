import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from interfaces.schemas.queue_schemas import (
    QueueEntryListResponse,
    QueueEntryResponse,
    QueueStatisticsResponse,
    QueueStatusEnum,
    QueueEntryKindEnum
)
from infra.dependencies.database import get_list_queue_entries_use_case
from domain.entities.queue_entry import QueueStatus, QueueEntryKind
from domain.exceptions import EntityNotFoundException, QueueException
from use_cases.queue.list_queue_entries_use_case import ListQueueEntriesUseCase, ListQueueEntriesRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/queue", tags=["Queue"])


@router.get("/entries", response_model=QueueEntryListResponse)
async def list_queue_entries(
        status_filter: Optional[QueueStatusEnum] = Query(None, alias="status", description="Filter by entry status"),
        target_entity_id: Optional[str] = Query(None, description="Filter by PIM identifier"),
        kind: Optional[QueueEntryKindEnum] = Query(None, description="Filter by entry kind"),
        limit: int = Query(50, ge=1, le=500, description="Maximum number of entries"),
        offset: int = Query(0, ge=0, description="Number of entries to skip"),
        use_case: ListQueueEntriesUseCase = Depends(get_list_queue_entries_use_case)
):
    """
    List queue entries, oldest first.

    Supports filtering by status, target entity and kind with offset based
    pagination.
    """
    request = ListQueueEntriesRequest(
        status=QueueStatus(status_filter.value) if status_filter else None,
        target_entity_id=target_entity_id,
        kind=QueueEntryKind(kind.value) if kind else None,
        offset=offset,
        limit=limit
    )

    try:
        response = await use_case.execute(request)
    except QueueException as e:
        logger.error(f"Listing queue entries failed: {e.details}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    return QueueEntryListResponse(entries=response.entries, offset=response.offset, limit=response.limit)


@router.get("/entries/{entry_id}", response_model=QueueEntryResponse)
async def get_queue_entry(
        entry_id: str,
        use_case: ListQueueEntriesUseCase = Depends(get_list_queue_entries_use_case)
):
    try:
        entry = await use_case.get_entry(entry_id)
    except EntityNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except QueueException as e:
        logger.error(f"Loading queue entry {entry_id} failed: {e.details}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    return QueueEntryResponse(entry=entry)


@router.get("/statistics", response_model=QueueStatisticsResponse)
async def get_queue_statistics(
        use_case: ListQueueEntriesUseCase = Depends(get_list_queue_entries_use_case)
):
    """
    Count entries per status and report entries stuck in processing.
    """
    try:
        statistics = await use_case.get_statistics()
    except QueueException as e:
        logger.error(f"Computing queue statistics failed: {e.details}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)

    return QueueStatisticsResponse(
        counts=statistics.counts,
        total=statistics.total,
        stale_processing=statistics.stale_processing,
        stale_threshold_minutes=statistics.stale_threshold_minutes
    )
