import pytest
from datetime import datetime

from use_cases.queue.list_queue_entries_use_case import ListQueueEntriesUseCase, ListQueueEntriesRequest
from domain.entities.queue_entry import AssetQueueEntry, QueueEntryKind, QueueStatus
from domain.exceptions import EntityNotFoundException


class TestListQueueEntriesUseCase:

    @pytest.fixture
    def use_case(self, mock_queue_repository):
        return ListQueueEntriesUseCase(mock_queue_repository, stale_processing_minutes=30)

    @pytest.mark.asyncio
    async def test_execute_should_translate_request_into_criteria(self, use_case, mock_queue_repository):
        request = ListQueueEntriesRequest(
            status=QueueStatus.ERROR,
            target_entity_id="pim-42",
            kind=QueueEntryKind.ASSET,
            offset=10,
            limit=5
        )

        response = await use_case.execute(request)

        criteria = mock_queue_repository.find.call_args[0][0]
        assert criteria.statuses == [QueueStatus.ERROR]
        assert criteria.target_entity_id == "pim-42"
        assert criteria.kind == QueueEntryKind.ASSET
        assert criteria.offset == 10
        assert criteria.limit == 5
        assert response.entries == []
        assert response.offset == 10

    @pytest.mark.asyncio
    async def test_execute_without_status_should_not_filter_statuses(self, use_case, mock_queue_repository):
        await use_case.execute(ListQueueEntriesRequest())

        assert mock_queue_repository.find.call_args[0][0].statuses == []

    @pytest.mark.asyncio
    async def test_get_entry_should_return_summary(self, use_case, mock_queue_repository, youtube_asset_entry):
        youtube_asset_entry.created_at = datetime(2026, 10, 19, 8, 30)
        mock_queue_repository.find_by_id.return_value = youtube_asset_entry

        summary = await use_case.get_entry("entry-123")

        assert summary["id"] == "entry-123"
        assert summary["kind"] == "asset"
        assert summary["action"] == "insert/update"
        assert summary["status"] == "pending"
        assert summary["type_metadata"] == "catalog_product/video_youtube"
        assert summary["created_at"] == "2026-10-19T08:30:00"
        assert summary["finished_at"] is None

    @pytest.mark.asyncio
    async def test_get_entry_with_unknown_id_should_raise_not_found(self, use_case):
        with pytest.raises(EntityNotFoundException) as exc_info:
            await use_case.get_entry("missing")

        assert exc_info.value.identifier == "missing"

    @pytest.mark.asyncio
    async def test_get_statistics_should_fill_missing_statuses(self, use_case, mock_queue_repository):
        mock_queue_repository.count_by_status.return_value = {QueueStatus.PENDING: 3, QueueStatus.ERROR: 1}
        mock_queue_repository.find_stale_processing_entries.return_value = [AssetQueueEntry(id="stuck")]

        statistics = await use_case.get_statistics()

        assert statistics.counts == {"pending": 3, "processing": 0, "done": 0, "error": 1}
        assert statistics.total == 4
        assert statistics.stale_processing == 1
        assert statistics.stale_threshold_minutes == 30
        mock_queue_repository.find_stale_processing_entries.assert_called_once_with(30)
