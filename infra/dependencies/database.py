"""
FastAPI dependencies for the queue store and the use cases built on it.
"""
from infra.integration.sync_service_manager import SyncServiceManager, get_sync_service_manager
from use_cases.queue.list_queue_entries_use_case import ListQueueEntriesUseCase


async def get_service_manager() -> SyncServiceManager:
    """
    Dependency returning the initialized service manager.
    """
    manager = get_sync_service_manager()
    await manager.initialize()
    return manager


async def get_list_queue_entries_use_case() -> ListQueueEntriesUseCase:
    manager = await get_service_manager()
    return manager.build_list_queue_entries_use_case()
