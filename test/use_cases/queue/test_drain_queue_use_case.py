import pytest
import asyncio
from unittest.mock import Mock, AsyncMock

from use_cases.queue.drain_queue_use_case import DrainQueueUseCase, DrainQueueRequest
from use_cases.queue.strategy_dispatcher import AssetStrategyDispatcher
from domain.entities.queue_entry import AssetQueueEntry, QueueEntryKind, QueueStatus
from domain.value_objects import ActionResult, AssetFamily, ExecutionArea
from domain.exceptions import (
    FormatException,
    NotYetPublishedException,
    QueueException,
    UnsupportedTypeException
)
from interfaces.repositories.queue_entry_repository_interface import QueueEntryCriteria


def _entry(entry_id, type_metadata="catalog_product/video_youtube"):
    return AssetQueueEntry(
        id=entry_id,
        target_entity_id=f"pim-{entry_id}",
        type_metadata=type_metadata,
        value="https://youtube.com/watch?v=abc123"
    )


class TestDrainQueueUseCase:

    @pytest.fixture
    def strategy(self):
        strategy = Mock()
        strategy.execute = AsyncMock(return_value=ActionResult.SUCCESS)
        return strategy

    @pytest.fixture
    def dispatcher(self, strategy):
        dispatcher = Mock()
        dispatcher.resolve = Mock(return_value=strategy)
        return dispatcher

    @pytest.fixture
    def use_case(self, mock_queue_repository, dispatcher):
        return DrainQueueUseCase(
            queue_repository=mock_queue_repository,
            dispatcher=dispatcher,
            max_concurrent_entries=2,
            entry_timeout_seconds=1
        )

    @pytest.mark.asyncio
    async def test_execute_without_pending_entries_should_return_empty_response(self, use_case, mock_queue_repository):
        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1", limit=10))

        assert response.processed == 0
        criteria = mock_queue_repository.find.call_args[0][0]
        assert criteria.kind == QueueEntryKind.ASSET
        assert criteria.statuses == [QueueStatus.PENDING]
        assert criteria.limit == 10
        mock_queue_repository.claim.assert_not_called()

    @pytest.mark.asyncio
    async def test_execute_with_successful_handler_should_mark_entry_done(
            self, use_case, mock_queue_repository, strategy):
        entry = _entry("1")
        mock_queue_repository.find.return_value = [entry]

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.processed == 1
        assert response.succeeded == 1
        assert entry.status == QueueStatus.DONE
        assert entry.worker_id == "worker-1"
        mock_queue_repository.claim.assert_called_once_with("1", "worker-1")
        mock_queue_repository.save.assert_called_once_with(entry)

        context = strategy.execute.call_args[0][0]
        assert context.area == ExecutionArea.ADMIN
        assert context.worker_id == "worker-1"

    @pytest.mark.asyncio
    async def test_execute_with_skipped_handler_should_mark_entry_done_and_count_skipped(
            self, use_case, mock_queue_repository, strategy):
        entry = _entry("1")
        mock_queue_repository.find.return_value = [entry]
        strategy.execute.return_value = ActionResult.SKIPPED

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.skipped == 1
        assert entry.status == QueueStatus.DONE

    @pytest.mark.asyncio
    async def test_execute_with_error_result_should_mark_entry_error(
            self, use_case, mock_queue_repository, strategy):
        entry = _entry("1")
        mock_queue_repository.find.return_value = [entry]
        strategy.execute.return_value = ActionResult.ERROR

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.failed == 1
        assert entry.status == QueueStatus.ERROR
        assert entry.error_message is not None

    @pytest.mark.asyncio
    async def test_execute_with_entry_claimed_elsewhere_should_not_process_it(
            self, use_case, mock_queue_repository, strategy):
        mock_queue_repository.find.return_value = [_entry("1")]
        mock_queue_repository.claim.return_value = False

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.processed == 0
        strategy.execute.assert_not_called()
        mock_queue_repository.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_execute_with_unsupported_type_should_finish_entry_as_skipped(
            self, use_case, mock_queue_repository, dispatcher):
        entry = _entry("1", type_metadata="catalog_product/image_main")
        mock_queue_repository.find.return_value = [entry]
        dispatcher.resolve.side_effect = UnsupportedTypeException("catalog_product/image_main")

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.skipped == 1
        assert entry.status == QueueStatus.DONE

    @pytest.mark.asyncio
    async def test_execute_with_malformed_type_should_mark_entry_error(
            self, use_case, mock_queue_repository, dispatcher):
        entry = _entry("1", type_metadata="broken")
        mock_queue_repository.find.return_value = [entry]
        dispatcher.resolve.side_effect = FormatException("broken", "expected '<entity_type>/<asset_type>'")

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.failed == 1
        assert entry.status == QueueStatus.ERROR
        assert "broken" in entry.error_message

    @pytest.mark.asyncio
    async def test_execute_with_raising_handler_should_not_block_other_entries(
            self, use_case, mock_queue_repository, strategy):
        failing = _entry("1")
        succeeding = _entry("2")
        mock_queue_repository.find.return_value = [failing, succeeding]

        async def _execute(context, entry):
            if entry.id == "1":
                raise NotYetPublishedException(entry.target_entity_id)
            return ActionResult.SUCCESS

        strategy.execute.side_effect = _execute

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.processed == 2
        assert response.failed == 1
        assert response.succeeded == 1
        assert failing.status == QueueStatus.ERROR
        assert "pim-1" in failing.error_message
        assert succeeding.status == QueueStatus.DONE

    @pytest.mark.asyncio
    async def test_execute_with_slow_handler_should_mark_entry_error_on_timeout(
            self, mock_queue_repository, dispatcher, strategy):
        use_case = DrainQueueUseCase(mock_queue_repository, dispatcher, entry_timeout_seconds=0.05)
        entry = _entry("1")
        mock_queue_repository.find.return_value = [entry]

        async def _slow(context, queue_entry):
            await asyncio.sleep(1)
            return ActionResult.SUCCESS

        strategy.execute.side_effect = _slow

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.failed == 1
        assert entry.status == QueueStatus.ERROR
        assert "timed out" in entry.error_message

    @pytest.mark.asyncio
    async def test_execute_should_limit_concurrent_handlers(self, use_case, mock_queue_repository, strategy):
        mock_queue_repository.find.return_value = [_entry(str(index)) for index in range(5)]
        running = 0
        peak = 0

        async def _execute(context, entry):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return ActionResult.SUCCESS

        strategy.execute.side_effect = _execute

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.succeeded == 5
        assert peak <= 2

    @pytest.mark.asyncio
    async def test_execute_with_failing_outcome_save_should_count_entry_as_failed(
            self, use_case, mock_queue_repository):
        mock_queue_repository.find.return_value = [_entry("1")]
        mock_queue_repository.save.side_effect = QueueException("save", "database is gone")

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.failed == 1

    @pytest.mark.asyncio
    async def test_execute_with_failing_claim_should_still_process_other_entries(
            self, use_case, mock_queue_repository):
        broken = _entry("1")
        healthy = _entry("2")
        mock_queue_repository.find.return_value = [broken, healthy]

        async def _claim(entry_id, worker_id):
            if entry_id == "1":
                raise QueueException("claim", "connection reset")
            return True

        mock_queue_repository.claim.side_effect = _claim

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.processed == 1
        assert response.succeeded == 1
        assert response.failed == 0
        assert broken.status == QueueStatus.PENDING
        assert healthy.status == QueueStatus.DONE
        mock_queue_repository.save.assert_called_once_with(healthy)

    @pytest.mark.asyncio
    async def test_execute_with_unexpected_error_in_entry_should_count_it_as_failed(
            self, use_case, mock_queue_repository):
        mock_queue_repository.find.return_value = [_entry("1"), _entry("2")]

        async def _claim(entry_id, worker_id):
            if entry_id == "1":
                raise RuntimeError("driver crashed")
            return True

        mock_queue_repository.claim.side_effect = _claim

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.processed == 2
        assert response.succeeded == 1
        assert response.failed == 1

    @pytest.mark.asyncio
    async def test_execute_with_entry_no_longer_pending_should_not_claim_it(
            self, use_case, mock_queue_repository, strategy):
        entry = _entry("1")
        entry.status = QueueStatus.DONE
        mock_queue_repository.find.return_value = [entry]

        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        assert response.processed == 0
        mock_queue_repository.claim.assert_not_called()
        strategy.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_execute_against_store_should_persist_outcomes(self, queue_repository):
        strategy = Mock()

        async def _execute(context, entry):
            entry.asset_id = 77
            return ActionResult.SUCCESS

        strategy.execute = AsyncMock(side_effect=_execute)
        dispatcher = AssetStrategyDispatcher()
        dispatcher.register(AssetFamily.VIDEO, strategy)

        queued = await queue_repository.save(AssetQueueEntry(
            target_entity_id="pim-1",
            type_metadata="catalog_product/video_youtube",
            value="https://youtube.com/watch?v=abc123"
        ))
        unsupported = await queue_repository.save(AssetQueueEntry(
            target_entity_id="pim-2",
            type_metadata="catalog_product/image_main",
            value="https://cdn.test/main.jpg"
        ))

        use_case = DrainQueueUseCase(queue_repository, dispatcher)
        response = await use_case.execute(DrainQueueRequest(worker_id="worker-1"))

        done = await queue_repository.find_by_id(queued.id)
        skipped = await queue_repository.find_by_id(unsupported.id)
        assert response.succeeded == 1
        assert response.skipped == 1
        assert done.status == QueueStatus.DONE
        assert done.asset_id == 77
        assert done.worker_id == "worker-1"
        assert skipped.status == QueueStatus.DONE
        assert await queue_repository.find(QueueEntryCriteria(statuses=[QueueStatus.PENDING])) == []
