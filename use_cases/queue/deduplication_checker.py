import logging

from domain.entities.queue_entry import QueueEntry, ACTIVE_STATUSES
from interfaces.repositories.queue_entry_repository_interface import (
    QueueEntryRepositoryInterface,
    QueueEntryCriteria
)


class QueueDeduplicationChecker:
    """
    Tells whether equivalent work is already waiting in the queue.

    Two entries are equivalent when they share kind, target entity, type
    metadata and action. Only pending and processing entries count, finished
    work never blocks a new entry.

    The check is advisory: under concurrent writers the store's unique index
    is what finally rejects a duplicate insert.
    """

    def __init__(self, queue_repository: QueueEntryRepositoryInterface):
        self.queue_repository = queue_repository
        self.logger = logging.getLogger(__name__)

    async def is_already_queued(self, candidate: QueueEntry) -> bool:
        """
        Check for an active entry equivalent to the candidate.

        Args:
            candidate: Unsaved entry describing the work to enqueue

        Returns:
            bool: True if an equivalent entry is pending or processing
        """
        criteria = QueueEntryCriteria(
            kind=candidate.kind,
            target_entity_id=candidate.target_entity_id,
            type_metadata=candidate.type_metadata or "",
            action=candidate.action,
            statuses=list(ACTIVE_STATUSES),
            limit=1
        )

        matches = await self.queue_repository.find(criteria)

        if matches:
            self.logger.debug(
                f"Entry for target {candidate.target_entity_id} type '{candidate.type_metadata}' "
                f"is already queued as {matches[0].id}"
            )
            return True

        return False
