from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Dict
from domain.entities.queue_entry import QueueEntry, QueueEntryKind, QueueStatus, QueueAction


@dataclass
class QueueEntryCriteria:
    """
    Filter used to look up queue entries.

    Every attribute left as None (or empty for statuses) is not filtered on.
    Results are ordered by creation time, oldest first.
    """
    kind: Optional[QueueEntryKind] = None
    target_entity_id: Optional[str] = None
    type_metadata: Optional[str] = None
    action: Optional[QueueAction] = None
    store_view_id: Optional[int] = None
    statuses: List[QueueStatus] = field(default_factory=list)
    offset: int = 0
    limit: Optional[int] = None


class QueueEntryRepositoryInterface(ABC):
    """
    Repository interface for QueueEntry entity operations.

    This interface defines the contract for the durable synchronization queue,
    following the Repository pattern to abstract data access concerns from
    the queue and product sync use cases.

    Implementations must enforce that at most one entry per deduplication key
    is pending or processing at a time, and report a violation through
    DuplicateQueueEntryException instead of storing a second entry.
    """

    @abstractmethod
    def create(self, kind: QueueEntryKind = QueueEntryKind.ASSET) -> QueueEntry:
        """
        Build a new, unsaved queue entry.

        Args:
            kind: Entry variant to build

        Returns:
            QueueEntry: PENDING entry without identifier
        """
        pass

    @abstractmethod
    async def save(self, entry: QueueEntry) -> QueueEntry:
        """
        Insert or update a queue entry.

        Args:
            entry: Entry to persist, inserted when it has no identifier yet

        Returns:
            QueueEntry: Persisted entry with identifier and timestamps

        Raises:
            DuplicateQueueEntryException: If an equivalent entry is already active
            QueueException: If the store cannot persist the entry
        """
        pass

    @abstractmethod
    async def find(self, criteria: QueueEntryCriteria) -> List[QueueEntry]:
        """
        Find queue entries matching the given criteria.

        Args:
            criteria: Filter, ordering is oldest first

        Returns:
            List[QueueEntry]: Matching entries
        """
        pass

    @abstractmethod
    async def find_by_id(self, entry_id: str) -> Optional[QueueEntry]:
        """
        Find a queue entry by its unique identifier.

        Args:
            entry_id: Unique identifier of the entry

        Returns:
            Optional[QueueEntry]: Entry if found, None otherwise
        """
        pass

    @abstractmethod
    async def claim(self, entry_id: str, worker_id: str) -> bool:
        """
        Atomically move a PENDING entry to PROCESSING for a worker.

        Args:
            entry_id: Queue entry identifier
            worker_id: Worker identifier

        Returns:
            bool: True if this worker claimed the entry, False if another one did
        """
        pass

    @abstractmethod
    async def find_stale_processing_entries(self, timeout_minutes: int = 60) -> List[QueueEntry]:
        """
        Find entries that have been processing for longer than the timeout.

        Args:
            timeout_minutes: Processing time after which an entry is considered stuck

        Returns:
            List[QueueEntry]: Entries whose worker most likely died
        """
        pass

    @abstractmethod
    async def count_by_status(self) -> Dict[QueueStatus, int]:
        """
        Count entries per status.

        Returns:
            Dict[QueueStatus, int]: Number of entries for every status
        """
        pass
