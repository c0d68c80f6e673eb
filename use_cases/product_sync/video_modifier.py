import logging
from typing import Tuple

from domain.entities.product import Product, PimProduct
from domain.entities.queue_entry import QueueAction, QueueEntryKind, QueueStatus
from domain.value_objects import TypeMetadata, get_complete_video_url
from domain.exceptions import UnsupportedFormatException, DuplicateQueueEntryException
from interfaces.modifiers.data_modifier_interface import DataModifierInterface
from interfaces.repositories.queue_entry_repository_interface import QueueEntryRepositoryInterface
from use_cases.queue.deduplication_checker import QueueDeduplicationChecker


class VideoModifier(DataModifierInterface):
    """
    Reconciles the PIM video of a product with the catalog media gallery.

    A missing PIM video removes every external video entry from the
    in-memory gallery. A video whose URL already sits in the gallery leaves
    the product untouched. Any other video is enqueued as an asset entry for
    the drain cycle, unless equivalent work is already queued.
    """

    def __init__(self,
                 queue_repository: QueueEntryRepositoryInterface,
                 deduplication_checker: QueueDeduplicationChecker):
        self.queue_repository = queue_repository
        self.deduplication_checker = deduplication_checker
        self.logger = logging.getLogger(__name__)

    async def handle(self, product: Product, pim_product: PimProduct) -> Tuple[Product, PimProduct]:
        video = pim_product.video
        delete_video = video is None
        new_video_url = None

        if not delete_video:
            try:
                new_video_url = get_complete_video_url(video.format, video.link)
            except UnsupportedFormatException as e:
                self.logger.error(f"Could not process video element of product {pim_product.pim_id}: {e.message}")
                return product, pim_product

        if delete_video:
            product.media_gallery_entries = [
                gallery_entry for gallery_entry in product.media_gallery_entries
                if not gallery_entry.is_external_video()
            ]
            return product, pim_product

        for video_entry in product.external_video_entries():
            if video_entry.get_video_url() == new_video_url:
                return product, pim_product

        asset_entry = self.queue_repository.create(QueueEntryKind.ASSET)
        asset_entry.action = QueueAction.INSERT_UPDATE
        asset_entry.store_view_id = product.store_id
        asset_entry.target_entity_id = pim_product.pim_id
        asset_entry.type_metadata = TypeMetadata.for_video(video.format).encode()
        asset_entry.status = QueueStatus.PENDING
        asset_entry.value = new_video_url
        asset_entry.asset_id = 0

        if await self.deduplication_checker.is_already_queued(asset_entry):
            return product, pim_product

        try:
            saved_entry = await self.queue_repository.save(asset_entry)
            self.logger.info(
                f"Queued video {new_video_url} for product {pim_product.pim_id} as entry {saved_entry.id}"
            )
        except DuplicateQueueEntryException:
            self.logger.info(f"Video {new_video_url} for product {pim_product.pim_id} was queued concurrently")

        return product, pim_product
