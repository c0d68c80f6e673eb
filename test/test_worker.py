import pytest
from unittest.mock import Mock, AsyncMock

from worker import WorkerManager
from use_cases.queue.drain_queue_use_case import DrainQueueResponse


def _mock_worker(worker_id):
    worker = Mock()
    worker.worker_id = worker_id
    worker.start = AsyncMock()
    worker.stop = AsyncMock()
    worker.drain_once = AsyncMock(return_value=DrainQueueResponse(processed=3, succeeded=2, failed=1))
    return worker


class TestWorkerManager:

    @pytest.fixture
    def service_manager(self):
        manager = Mock()
        manager.initialize = AsyncMock()
        manager.close = AsyncMock()
        manager.build_drain_worker = Mock(side_effect=_mock_worker)
        return manager

    def test_init_with_zero_workers_should_use_one(self, service_manager):
        manager = WorkerManager(num_workers=0, service_manager=service_manager)

        assert manager.num_workers == 1
        assert manager.worker_id_prefix == "drain-worker"

    @pytest.mark.asyncio
    async def test_initialize_dependencies_should_build_numbered_workers(self, service_manager):
        manager = WorkerManager(num_workers=3, worker_id_prefix="node-a", service_manager=service_manager)

        await manager.initialize_dependencies()

        service_manager.initialize.assert_called_once()
        assert [worker.worker_id for worker in manager.workers] == ["node-a-1", "node-a-2", "node-a-3"]

    @pytest.mark.asyncio
    async def test_run_should_start_workers_and_close_resources(self, service_manager):
        manager = WorkerManager(num_workers=2, service_manager=service_manager)

        await manager.run()

        for worker in manager.workers:
            worker.start.assert_called_once()
        service_manager.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_run_once_should_return_failed_count(self, service_manager):
        manager = WorkerManager(service_manager=service_manager)

        failed = await manager.run_once()

        assert failed == 1
        manager.workers[0].drain_once.assert_called_once()
        service_manager.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_run_once_with_failing_cycle_should_still_close_resources(self, service_manager):
        service_manager.build_drain_worker.side_effect = None
        failing_worker = _mock_worker("drain-worker-1")
        failing_worker.drain_once.side_effect = RuntimeError("queue store unavailable")
        service_manager.build_drain_worker.return_value = failing_worker
        manager = WorkerManager(service_manager=service_manager)

        with pytest.raises(RuntimeError):
            await manager.run_once()

        service_manager.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_shutdown_should_stop_every_worker_once(self, service_manager):
        manager = WorkerManager(num_workers=2, service_manager=service_manager)
        await manager.initialize_dependencies()

        await manager.shutdown()
        await manager.shutdown()

        for worker in manager.workers:
            worker.stop.assert_called_once()
        assert manager.is_running is False
