import asyncio
import signal
import sys
import logging
from typing import List, Optional
from datetime import datetime

from infra.settings.settings import get_settings
from infra.integration.sync_service_manager import SyncServiceManager
from use_cases.workers.queue_drain_worker import QueueDrainWorker

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class WorkerManager:
    """
    Manager coordinating the queue drain workers of one process.

    Builds the shared service manager, starts the requested number of drain
    workers and shuts them down gracefully on SIGINT/SIGTERM.
    """

    def __init__(self,
                 num_workers: int = 1,
                 worker_id_prefix: Optional[str] = None,
                 service_manager: Optional[SyncServiceManager] = None):
        self.num_workers = max(1, num_workers)
        self.worker_id_prefix = worker_id_prefix or "drain-worker"
        self.settings = get_settings()
        self.service_manager = service_manager or SyncServiceManager(self.settings)

        self.workers: List[QueueDrainWorker] = []
        self.worker_tasks: List[asyncio.Task] = []
        self.is_running = False
        self.shutdown_requested = False
        self.start_time = None

        logging.getLogger('asyncio').setLevel(logging.ERROR)
        logging.getLogger('aiohttp').setLevel(logging.WARNING)
        logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    async def initialize_dependencies(self) -> None:
        logger.info("Initializing worker dependencies...")
        await self.service_manager.initialize()

        for index in range(self.num_workers):
            worker_id = f"{self.worker_id_prefix}-{index + 1}"
            self.workers.append(self.service_manager.build_drain_worker(worker_id))

        logger.info(f"Created {len(self.workers)} drain workers")

    async def run(self) -> None:
        """Start every worker and wait until all of them stop."""
        await self.initialize_dependencies()

        self.is_running = True
        self.start_time = datetime.utcnow()

        self.worker_tasks = [asyncio.create_task(worker.start()) for worker in self.workers]

        try:
            await asyncio.gather(*self.worker_tasks, return_exceptions=True)
        finally:
            await self._cleanup_resources()

    async def run_once(self) -> int:
        """
        Run a single drain cycle, for deployments where an external scheduler triggers draining.

        Returns:
            int: Number of entries that ended in ERROR
        """
        await self.initialize_dependencies()

        try:
            response = await self.workers[0].drain_once()
            logger.info(f"Drain cycle finished: processed={response.processed} succeeded={response.succeeded} "
                        f"skipped={response.skipped} failed={response.failed}")
            return response.failed
        finally:
            await self._cleanup_resources()

    async def shutdown(self) -> None:
        if self.shutdown_requested:
            return

        self.shutdown_requested = True
        logger.info("Shutdown requested, stopping drain workers...")

        await asyncio.gather(*[worker.stop() for worker in self.workers], return_exceptions=True)
        self.is_running = False

    async def _cleanup_resources(self) -> None:
        try:
            await asyncio.wait_for(self.service_manager.close(), timeout=15)
        except asyncio.TimeoutError:
            logger.warning("Resource cleanup timed out")

        logger.info("Resource cleanup completed")


def setup_signal_handlers(worker_manager: WorkerManager) -> None:
    """
    Setup system signal handlers for graceful shutdown.
    """

    def signal_handler(signum, frame):
        logger.info(f"Received shutdown signal {signum}")
        asyncio.create_task(worker_manager.shutdown())

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


async def main() -> None:
    """
    Main entry point for the queue drain worker service.
    """
    import argparse

    parser = argparse.ArgumentParser(description="PIM Asset Sync Queue Drain Worker")
    parser.add_argument("--workers", type=int, default=1, help="Number of worker instances")
    parser.add_argument("--worker-id-prefix", type=str, help="Worker ID prefix")
    parser.add_argument("--once", action="store_true", help="Run a single drain cycle and exit")

    args = parser.parse_args()

    settings = get_settings()
    logger.info("PIM Asset Sync - Queue Drain Worker")
    logger.info(f"Workers: {args.workers}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database.host}:{settings.database.port}/{settings.database.name}")
    logger.info(f"Catalog adapter: {settings.catalog.adapter or 'not configured'}")

    worker_manager = WorkerManager(
        num_workers=1 if args.once else args.workers,
        worker_id_prefix=args.worker_id_prefix
    )

    try:
        if args.once:
            failed = await worker_manager.run_once()
            sys.exit(1 if failed else 0)

        setup_signal_handlers(worker_manager)
        await worker_manager.run()
    except Exception as e:
        logger.error(f"Fatal error in worker service: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
