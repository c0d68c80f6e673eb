import asyncio
import uuid
import logging
from typing import Dict, Any, Optional
from datetime import datetime

from interfaces.repositories.queue_entry_repository_interface import QueueEntryRepositoryInterface
from use_cases.queue.drain_queue_use_case import (
    DrainQueueUseCase,
    DrainQueueRequest,
    DrainQueueResponse
)


class QueueDrainWorker:
    """
    Polling worker that drains pending asset entries.

    Every cycle claims up to ``batch_size`` pending entries and runs them
    through the drain use case. While the queue stays empty the poll interval
    doubles up to ``max_poll_interval``; it resets as soon as work shows up.
    Entries stuck in processing are reported, never reset, since retry policy
    is left to operators.
    """

    def __init__(self,
                 drain_use_case: DrainQueueUseCase,
                 queue_repository: QueueEntryRepositoryInterface,
                 worker_id: Optional[str] = None,
                 batch_size: int = 50,
                 poll_interval: int = 10,
                 max_poll_interval: int = 60,
                 stale_processing_minutes: int = 60):
        """
        Initialize the drain worker.

        Args:
            drain_use_case: Use case running a single drain cycle
            queue_repository: Repository used for the stale entry report
            worker_id: Optional unique identifier for this worker instance
            batch_size: Maximum number of entries per drain cycle
            poll_interval: Base interval in seconds between drain cycles
            max_poll_interval: Upper bound for the adaptive poll interval
            stale_processing_minutes: Processing time after which an entry is reported as stale
        """
        self.drain_use_case = drain_use_case
        self.queue_repository = queue_repository
        self.worker_id = worker_id or f"drain-worker-{uuid.uuid4().hex[:8]}"
        self.batch_size = batch_size
        self.poll_interval = poll_interval
        self.max_poll_interval = max_poll_interval
        self.stale_processing_minutes = stale_processing_minutes
        self.logger = logging.getLogger(__name__)

        self.is_running = False
        self.shutdown_requested = False
        self.current_poll_interval = poll_interval
        self.cycles_count = 0
        self.processed_entries_count = 0
        self.failed_entries_count = 0
        self.last_cycle_at: Optional[datetime] = None

        self.main_task = None

    async def start(self) -> None:
        """Run drain cycles until stop() is requested."""
        self.is_running = True
        self.shutdown_requested = False

        self.logger.info(f"Starting queue drain worker {self.worker_id} "
                         f"(batch size {self.batch_size}, poll interval {self.poll_interval}s)")

        await self._report_stale_entries()

        self.main_task = asyncio.create_task(self._run_polling_loop())
        try:
            await self.main_task
        except asyncio.CancelledError:
            pass
        finally:
            self.logger.info(f"Queue drain worker {self.worker_id} loop finished")

    async def _run_polling_loop(self) -> None:
        while self.is_running and not self.shutdown_requested:
            try:
                response = await self.drain_once()
                self.current_poll_interval = self._next_poll_interval(response.processed)
            except Exception as e:
                self.logger.error(f"Error in drain cycle of worker {self.worker_id}: {str(e)}")
                self.current_poll_interval = min(self.current_poll_interval * 2, self.max_poll_interval)

            if not self.shutdown_requested:
                await asyncio.sleep(self.current_poll_interval)

    async def drain_once(self) -> DrainQueueResponse:
        """
        Run a single drain cycle and update the worker counters.

        Returns:
            DrainQueueResponse: Outcome counts of the cycle
        """
        response = await self.drain_use_case.execute(
            DrainQueueRequest(worker_id=self.worker_id, limit=self.batch_size)
        )

        self.cycles_count += 1
        self.processed_entries_count += response.processed
        self.failed_entries_count += response.failed
        self.last_cycle_at = datetime.utcnow()

        return response

    def _next_poll_interval(self, processed: int) -> int:
        if processed > 0:
            return self.poll_interval
        return min(self.current_poll_interval * 2, self.max_poll_interval)

    async def _report_stale_entries(self) -> None:
        try:
            stale_entries = await self.queue_repository.find_stale_processing_entries(self.stale_processing_minutes)
        except Exception as e:
            self.logger.warning(f"Could not check for stale processing entries: {str(e)}")
            return

        for entry in stale_entries:
            self.logger.warning(
                f"Entry {entry.id} for target {entry.target_entity_id} has been processing since "
                f"{entry.started_at} on worker {entry.worker_id}"
            )

    async def stop(self) -> None:
        """Stop the polling loop and wait for the current cycle to be cancelled."""
        self.logger.info(f"Stopping queue drain worker {self.worker_id}")
        self.shutdown_requested = True

        if self.main_task and not self.main_task.done():
            try:
                self.main_task.cancel()
                await asyncio.wait_for(self.main_task, timeout=8)
            except (asyncio.CancelledError, asyncio.TimeoutError):
                pass

        self.is_running = False
        self.logger.info(f"Queue drain worker {self.worker_id} stopped. "
                         f"Processed: {self.processed_entries_count}, Failed: {self.failed_entries_count}")

    def get_worker_status(self) -> Dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "is_running": self.is_running,
            "shutdown_requested": self.shutdown_requested,
            "cycles": self.cycles_count,
            "processed_entries": self.processed_entries_count,
            "failed_entries": self.failed_entries_count,
            "current_poll_interval": self.current_poll_interval,
            "last_cycle_at": self.last_cycle_at.isoformat() if self.last_cycle_at else None
        }
