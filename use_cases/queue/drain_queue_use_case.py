import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from domain.entities.queue_entry import QueueEntry, QueueEntryKind, QueueStatus
from domain.value_objects import ActionResult, ExecutionContext, ExecutionArea
from domain.exceptions import FormatException, UnsupportedTypeException, QueueException
from interfaces.repositories.queue_entry_repository_interface import (
    QueueEntryRepositoryInterface,
    QueueEntryCriteria
)
from use_cases.queue.strategy_dispatcher import AssetStrategyDispatcher


@dataclass
class DrainQueueRequest:
    """
    Request data structure for a single drain cycle.

    Attributes:
        worker_id: Identifier of the worker running the cycle
        limit: Maximum number of pending entries to pick up
    """
    worker_id: str
    limit: int = 50


@dataclass
class DrainQueueResponse:
    """
    Response data structure summarizing a drain cycle.

    Attributes:
        processed: Entries claimed and handled by this cycle
        succeeded: Entries whose handler returned SUCCESS
        skipped: Entries finished without work (SKIPPED or unsupported type)
        failed: Entries that ended in ERROR
    """
    processed: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0


class DrainQueueUseCase:
    """
    Use case for draining pending asset entries through their handlers.

    Entries are claimed with a compare-and-set update so that concurrent
    workers never run the same entry twice. Each handler runs under a bounded
    timeout and a failing entry is recorded as ERROR without affecting the
    rest of the batch.
    """

    def __init__(self,
                 queue_repository: QueueEntryRepositoryInterface,
                 dispatcher: AssetStrategyDispatcher,
                 max_concurrent_entries: int = 4,
                 entry_timeout_seconds: int = 120):
        """
        Initialize the drain use case.

        Args:
            queue_repository: Repository for queue entry persistence
            dispatcher: Dispatcher resolving the handler for each entry
            max_concurrent_entries: Maximum number of handlers running at once
            entry_timeout_seconds: Seconds a single handler invocation may run
        """
        self.queue_repository = queue_repository
        self.dispatcher = dispatcher
        self.max_concurrent_entries = max_concurrent_entries
        self.entry_timeout_seconds = entry_timeout_seconds
        self.logger = logging.getLogger(__name__)

    async def execute(self, request: DrainQueueRequest) -> DrainQueueResponse:
        """
        Run one drain cycle.

        Args:
            request: Worker identity and batch size

        Returns:
            DrainQueueResponse: Counts of handled entries per outcome

        Raises:
            QueueException: If pending entries cannot be read from the store
        """
        pending_entries = await self.queue_repository.find(
            QueueEntryCriteria(
                kind=QueueEntryKind.ASSET,
                statuses=[QueueStatus.PENDING],
                limit=request.limit
            )
        )

        response = DrainQueueResponse()
        if not pending_entries:
            return response

        self.logger.info(f"Worker {request.worker_id} draining {len(pending_entries)} pending entries")

        semaphore = asyncio.Semaphore(self.max_concurrent_entries)
        context = ExecutionContext(area=ExecutionArea.ADMIN, worker_id=request.worker_id)

        async def _bounded(entry: QueueEntry) -> Optional[ActionResult]:
            async with semaphore:
                return await self._process_entry(entry, context)

        results = await asyncio.gather(
            *[_bounded(entry) for entry in pending_entries],
            return_exceptions=True
        )

        for entry, result in zip(pending_entries, results):
            if isinstance(result, Exception):
                self.logger.error(f"Entry {entry.id} aborted: {type(result).__name__}: {str(result)}")
                response.processed += 1
                response.failed += 1
                continue
            if result is None:
                continue
            response.processed += 1
            if result == ActionResult.SUCCESS:
                response.succeeded += 1
            elif result == ActionResult.SKIPPED:
                response.skipped += 1
            else:
                response.failed += 1

        self.logger.info(
            f"Worker {request.worker_id} drain finished: processed={response.processed} "
            f"succeeded={response.succeeded} skipped={response.skipped} failed={response.failed}"
        )

        return response

    async def _process_entry(self, entry: QueueEntry, context: ExecutionContext) -> Optional[ActionResult]:
        if not entry.is_pending():
            return None

        try:
            claimed = await self.queue_repository.claim(entry.id, context.worker_id)
        except QueueException as e:
            self.logger.error(f"Could not claim entry {entry.id}: {e.message} {e.details or ''}")
            return None

        if not claimed:
            self.logger.debug(f"Entry {entry.id} was claimed by another worker")
            return None

        entry.start_processing(context.worker_id)

        try:
            strategy = self.dispatcher.resolve(entry.type_metadata)
        except UnsupportedTypeException as e:
            self.logger.warning(f"Skipping entry {entry.id} for target {entry.target_entity_id}: {e.message}")
            entry.complete(ActionResult.SKIPPED)
            return await self._finish(entry, ActionResult.SKIPPED)
        except FormatException as e:
            self.logger.error(f"Entry {entry.id} for target {entry.target_entity_id} is malformed: {e.message}")
            entry.fail(e.message)
            return await self._finish(entry, ActionResult.ERROR)

        try:
            result = await asyncio.wait_for(strategy.execute(context, entry), timeout=self.entry_timeout_seconds)
        except asyncio.TimeoutError:
            message = f"Handler timed out after {self.entry_timeout_seconds}s"
            self.logger.error(f"Entry {entry.id} for target {entry.target_entity_id}: {message}")
            entry.fail(message)
            return await self._finish(entry, ActionResult.ERROR)
        except Exception as e:
            self.logger.error(
                f"Entry {entry.id} for target {entry.target_entity_id} failed: {type(e).__name__}: {str(e)}"
            )
            entry.fail(f"{type(e).__name__}: {str(e)}")
            return await self._finish(entry, ActionResult.ERROR)

        entry.complete(result, message=f"{type(strategy).__name__} returned ERROR")
        return await self._finish(entry, result)

    async def _finish(self, entry: QueueEntry, result: ActionResult) -> ActionResult:
        try:
            await self.queue_repository.save(entry)
        except QueueException as e:
            self.logger.error(f"Could not record outcome of entry {entry.id}: {e.message} {e.details or ''}")
            return ActionResult.ERROR

        self.logger.info(f"Entry {entry.id} for target {entry.target_entity_id} finished as {entry.status.value}")
        return result
