import asyncio
import logging
from typing import Optional

from infra.settings.settings import Settings, get_settings
from infra.databases.database_connection import DatabaseConnection
from infra.repositories.queue_entry_repository import QueueEntryRepository
from infra.gateways.youtube_gateway import YouTubeGateway
from infra.gateways.vimeo_gateway import VimeoGateway
from infra.services.image_content_validator import ImageContentValidator
from infra.integration.catalog_adapter import CatalogAdapter, load_catalog_adapter
from domain.value_objects import AssetFamily, VideoProvider
from domain.exceptions import ConfigurationException
from use_cases.queue.deduplication_checker import QueueDeduplicationChecker
from use_cases.queue.strategy_dispatcher import AssetStrategyDispatcher
from use_cases.queue.drain_queue_use_case import DrainQueueUseCase
from use_cases.queue.list_queue_entries_use_case import ListQueueEntriesUseCase
from use_cases.strategies.product_video_strategy import ProductVideoStrategy
from use_cases.product_sync.video_modifier import VideoModifier
from use_cases.product_sync.category_link_listener import CategoryLinkListener
from use_cases.product_sync.sync_product_use_case import SyncProductUseCase
from use_cases.workers.queue_drain_worker import QueueDrainWorker

logger = logging.getLogger(__name__)


class SyncServiceManager:
    """
    Central wiring of the synchronization service.

    Owns the database connection and builds repositories, gateways, use
    cases and workers from the application settings. The catalog adapter is
    loaded lazily because the inspection API does not need it.
    """

    def __init__(self, settings: Settings, catalog_adapter: Optional[CatalogAdapter] = None):
        self.settings = settings
        self._catalog_adapter = catalog_adapter
        self._db_connection: Optional[DatabaseConnection] = None
        self._queue_repository: Optional[QueueEntryRepository] = None
        self._initialized = False
        self._init_lock: Optional[asyncio.Lock] = None

    async def initialize(self) -> None:
        """
        Open the database connection and check that it is reachable.

        Concurrent callers share a single connection: the first one builds it
        while the others wait on the lock and return once it is ready.
        """
        if self._initialized:
            return

        if self._init_lock is None:
            self._init_lock = asyncio.Lock()

        async with self._init_lock:
            if self._initialized:
                return

            self._db_connection = DatabaseConnection(
                database_url=self.settings.database.url,
                echo=self.settings.database.echo,
                pool_size=self.settings.database.pool_size,
                max_overflow=self.settings.database.max_overflow,
                pool_timeout=self.settings.database.pool_timeout,
                pool_recycle=self.settings.database.pool_recycle
            )
            self._db_connection.initialize()

            if await self._db_connection.health_check():
                logger.info("✅ Queue store database connected")
            else:
                logger.warning("❌ Queue store database is not healthy")

            self._queue_repository = QueueEntryRepository(self._db_connection.session_factory)
            self._initialized = True
            logger.info("✅ Sync service manager initialized")

    @property
    def database(self) -> DatabaseConnection:
        self._ensure_initialized()
        return self._db_connection

    def get_queue_repository(self) -> QueueEntryRepository:
        self._ensure_initialized()
        return self._queue_repository

    def get_catalog_adapter(self) -> CatalogAdapter:
        if self._catalog_adapter is None:
            self._catalog_adapter = load_catalog_adapter(self.settings.catalog.adapter)
        return self._catalog_adapter

    def get_deduplication_checker(self) -> QueueDeduplicationChecker:
        return QueueDeduplicationChecker(self.get_queue_repository())

    def build_dispatcher(self) -> AssetStrategyDispatcher:
        """
        Build the dispatcher with every supported asset handler registered.

        Returns:
            AssetStrategyDispatcher: Dispatcher with the video strategy registered
        """
        adapter = self.get_catalog_adapter()
        video_settings = self.settings.video

        video_strategy = ProductVideoStrategy(
            product_repository=adapter.product_repository,
            execution_scope=adapter.execution_scope,
            deduplication_checker=self.get_deduplication_checker(),
            video_gateways={
                VideoProvider.YOUTUBE: YouTubeGateway(
                    api_url=video_settings.youtube_api_url,
                    timeout=video_settings.request_timeout_seconds
                ),
                VideoProvider.VIMEO: VimeoGateway(
                    oembed_url=video_settings.vimeo_oembed_url,
                    timeout=video_settings.request_timeout_seconds
                ),
            },
            content_validator=ImageContentValidator(),
            youtube_api_key=video_settings.youtube_api_key
        )

        dispatcher = AssetStrategyDispatcher()
        dispatcher.register(AssetFamily.VIDEO, video_strategy)
        return dispatcher

    def build_drain_use_case(self) -> DrainQueueUseCase:
        return DrainQueueUseCase(
            queue_repository=self.get_queue_repository(),
            dispatcher=self.build_dispatcher(),
            max_concurrent_entries=self.settings.queue.max_concurrent_entries,
            entry_timeout_seconds=self.settings.queue.entry_timeout_seconds
        )

    def build_drain_worker(self, worker_id: Optional[str] = None) -> QueueDrainWorker:
        queue_settings = self.settings.queue
        return QueueDrainWorker(
            drain_use_case=self.build_drain_use_case(),
            queue_repository=self.get_queue_repository(),
            worker_id=worker_id,
            batch_size=queue_settings.drain_batch_size,
            poll_interval=queue_settings.poll_interval_seconds,
            max_poll_interval=queue_settings.max_poll_interval_seconds,
            stale_processing_minutes=queue_settings.stale_processing_minutes
        )

    def build_sync_product_use_case(self) -> SyncProductUseCase:
        """
        Build the product sync pass with the video modifier and category listener.

        Returns:
            SyncProductUseCase: Use case ready to synchronize PIM products
        """
        adapter = self.get_catalog_adapter()
        queue_repository = self.get_queue_repository()

        return SyncProductUseCase(
            product_repository=adapter.product_repository,
            modifiers=[VideoModifier(queue_repository, self.get_deduplication_checker())],
            listeners=[CategoryLinkListener(adapter.category_repository, adapter.category_link_gateway)],
            execution_scope=adapter.execution_scope,
            default_store_view_id=self.settings.catalog.default_store_view_id
        )

    def build_list_queue_entries_use_case(self) -> ListQueueEntriesUseCase:
        return ListQueueEntriesUseCase(
            queue_repository=self.get_queue_repository(),
            stale_processing_minutes=self.settings.queue.stale_processing_minutes
        )

    async def close(self) -> None:
        if self._db_connection:
            await asyncio.gather(self._db_connection.close(), return_exceptions=True)

        self._initialized = False
        logger.info("✅ Sync service manager closed")

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise ConfigurationException("Sync service manager is not initialized. Call initialize() first.")


_sync_service_manager: Optional[SyncServiceManager] = None


def get_sync_service_manager() -> SyncServiceManager:
    """Get or create the process wide service manager."""
    global _sync_service_manager

    if _sync_service_manager is None:
        _sync_service_manager = SyncServiceManager(get_settings())

    return _sync_service_manager


async def startup_handler() -> None:
    manager = get_sync_service_manager()
    await manager.initialize()
    logger.info("✅ Sync service initialized on startup")


async def shutdown_handler() -> None:
    global _sync_service_manager
    if _sync_service_manager:
        try:
            await _sync_service_manager.close()
        finally:
            _sync_service_manager = None
