from domain.entities.queue_entry import (
    AssetQueueEntry,
    ProductQueueEntry,
    QueueAction,
    QueueEntryKind,
    QueueStatus,
    ACTIVE_STATUSES,
    entry_class_for
)
from domain.value_objects import ActionResult


class TestQueueEntry:

    def test_new_entry_should_be_pending_without_asset(self):
        entry = AssetQueueEntry()

        assert entry.is_pending()
        assert entry.status in ACTIVE_STATUSES
        assert entry.asset_id == 0
        assert entry.id is None

    def test_start_processing_should_record_worker_and_start_time(self):
        entry = AssetQueueEntry()

        entry.start_processing("worker-1")

        assert entry.status == QueueStatus.PROCESSING
        assert entry.worker_id == "worker-1"
        assert entry.started_at is not None
        assert entry.status in ACTIVE_STATUSES

    def test_complete_with_success_should_mark_entry_done(self):
        entry = AssetQueueEntry(status=QueueStatus.PROCESSING)

        entry.complete(ActionResult.SUCCESS)

        assert entry.status == QueueStatus.DONE
        assert not entry.is_pending()
        assert entry.finished_at is not None

    def test_complete_with_skipped_should_mark_entry_done(self):
        entry = AssetQueueEntry(status=QueueStatus.PROCESSING)

        entry.complete(ActionResult.SKIPPED)

        assert entry.status == QueueStatus.DONE

    def test_complete_with_error_should_mark_entry_error_with_message(self):
        entry = AssetQueueEntry(status=QueueStatus.PROCESSING)

        entry.complete(ActionResult.ERROR, message="provider down")

        assert entry.status == QueueStatus.ERROR
        assert entry.error_message == "provider down"
        assert entry.status not in ACTIVE_STATUSES


class TestProductQueueEntry:

    def test_equivalent_to_should_copy_action_target_and_store(self):
        asset_entry = AssetQueueEntry(
            action=QueueAction.DELETE,
            status=QueueStatus.PROCESSING,
            target_entity_id="pim-7",
            store_view_id=3,
            type_metadata="catalog_product/video_youtube",
            value="https://youtube.com/watch?v=x"
        )

        product_entry = ProductQueueEntry.equivalent_to(asset_entry)

        assert product_entry.kind == QueueEntryKind.PRODUCT
        assert product_entry.status == QueueStatus.PENDING
        assert product_entry.action == QueueAction.DELETE
        assert product_entry.target_entity_id == "pim-7"
        assert product_entry.store_view_id == 3
        assert product_entry.type_metadata == ""
        assert product_entry.value is None

    def test_entry_class_for_should_map_kinds_to_variants(self):
        assert entry_class_for(QueueEntryKind.ASSET) is AssetQueueEntry
        assert entry_class_for(QueueEntryKind.PRODUCT) is ProductQueueEntry
