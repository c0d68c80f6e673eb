import pytest
from unittest.mock import Mock, AsyncMock

from use_cases.workers.queue_drain_worker import QueueDrainWorker
from use_cases.queue.drain_queue_use_case import DrainQueueResponse
from domain.entities.queue_entry import AssetQueueEntry


class TestQueueDrainWorker:

    @pytest.fixture
    def drain_use_case(self):
        use_case = Mock()
        use_case.execute = AsyncMock(return_value=DrainQueueResponse())
        return use_case

    @pytest.fixture
    def worker(self, drain_use_case, mock_queue_repository):
        return QueueDrainWorker(
            drain_use_case=drain_use_case,
            queue_repository=mock_queue_repository,
            worker_id="worker-1",
            batch_size=20,
            poll_interval=0.01,
            max_poll_interval=0.04
        )

    def test_init_without_worker_id_should_generate_one(self, drain_use_case, mock_queue_repository):
        worker = QueueDrainWorker(drain_use_case, mock_queue_repository)

        assert worker.worker_id.startswith("drain-worker-")

    @pytest.mark.asyncio
    async def test_drain_once_should_pass_identity_and_update_counters(self, worker, drain_use_case):
        drain_use_case.execute.return_value = DrainQueueResponse(processed=3, succeeded=2, failed=1)

        response = await worker.drain_once()

        request = drain_use_case.execute.call_args[0][0]
        assert request.worker_id == "worker-1"
        assert request.limit == 20
        assert response.processed == 3
        assert worker.cycles_count == 1
        assert worker.processed_entries_count == 3
        assert worker.failed_entries_count == 1
        assert worker.last_cycle_at is not None

    def test_next_poll_interval_should_back_off_while_idle_and_reset_on_work(self, worker):
        worker.current_poll_interval = worker._next_poll_interval(0)
        assert worker.current_poll_interval == 0.02

        worker.current_poll_interval = worker._next_poll_interval(0)
        worker.current_poll_interval = worker._next_poll_interval(0)
        assert worker.current_poll_interval == 0.04

        assert worker._next_poll_interval(5) == 0.01

    @pytest.mark.asyncio
    async def test_start_should_run_cycles_until_shutdown_requested(self, worker, drain_use_case):
        calls = []

        async def _execute(request):
            calls.append(request)
            if len(calls) == 2:
                worker.shutdown_requested = True
            return DrainQueueResponse(processed=1, succeeded=1)

        drain_use_case.execute.side_effect = _execute

        await worker.start()

        assert len(calls) == 2
        assert worker.processed_entries_count == 2

    @pytest.mark.asyncio
    async def test_start_should_survive_failing_cycle(self, worker, drain_use_case):
        calls = []

        async def _execute(request):
            calls.append(request)
            if len(calls) == 1:
                raise RuntimeError("queue store unavailable")
            worker.shutdown_requested = True
            return DrainQueueResponse()

        drain_use_case.execute.side_effect = _execute

        await worker.start()

        assert len(calls) == 2
        assert worker.cycles_count == 1

    @pytest.mark.asyncio
    async def test_start_should_report_stale_entries_without_changing_them(
            self, worker, drain_use_case, mock_queue_repository):
        stuck = AssetQueueEntry(id="stuck", target_entity_id="pim-1", worker_id="worker-0")
        mock_queue_repository.find_stale_processing_entries.return_value = [stuck]

        async def _stop(request):
            worker.shutdown_requested = True
            return DrainQueueResponse()

        drain_use_case.execute.side_effect = _stop

        await worker.start()

        mock_queue_repository.find_stale_processing_entries.assert_called_once_with(60)
        mock_queue_repository.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_stop_should_mark_worker_stopped(self, worker):
        await worker.stop()

        status = worker.get_worker_status()
        assert status["worker_id"] == "worker-1"
        assert status["is_running"] is False
        assert status["shutdown_requested"] is True
        assert status["last_cycle_at"] is None
