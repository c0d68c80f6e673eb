import base64
import logging
from typing import Dict, Optional
from urllib.parse import urlparse

from domain.entities.queue_entry import QueueEntry, ProductQueueEntry
from domain.entities.product import Product, MediaGalleryEntry, ImageContent, VideoContent
from domain.value_objects import (
    ActionResult,
    AssetKind,
    ExecutionContext,
    TypeMetadata,
    VideoMetadata,
    VideoProvider,
    EXTERNAL_VIDEO_MEDIA_TYPE,
    select_thumbnail_url
)
from domain.exceptions import (
    ConfigurationException,
    EntityNotFoundException,
    FormatException,
    InputException,
    NotYetPublishedException,
    StateException,
    UnsupportedTypeException,
    VideoApiException
)
from interfaces.strategies.asset_handler_strategy_interface import AssetHandlerStrategyInterface
from interfaces.repositories.catalog_product_repository_interface import CatalogProductRepositoryInterface
from interfaces.services.execution_scope_interface import ExecutionScopeInterface
from interfaces.services.image_content_validator_interface import ImageContentValidatorInterface
from interfaces.gateways.video_provider_gateway_interface import VideoProviderGatewayInterface
from use_cases.queue.deduplication_checker import QueueDeduplicationChecker


class ProductVideoStrategy(AssetHandlerStrategyInterface):
    """
    Imports an external video from a queue entry into a product media gallery.

    The handler resolves the target product, reads the video metadata from
    the provider, downloads its preview image and appends a new external
    video entry to the gallery. The catalog identifier of the new entry is
    written back to the queue entry's ``asset_id``.

    Business failures of the provider API end as ActionResult.ERROR. Broken
    preview downloads, invalid image content and failed saves raise, since
    they indicate a problem outside the single video.
    """

    THUMBNAIL_MIME_TYPE = "image/jpeg"

    def __init__(self,
                 product_repository: CatalogProductRepositoryInterface,
                 execution_scope: ExecutionScopeInterface,
                 deduplication_checker: QueueDeduplicationChecker,
                 video_gateways: Dict[VideoProvider, VideoProviderGatewayInterface],
                 content_validator: ImageContentValidatorInterface,
                 youtube_api_key: str = ""):
        """
        Initialize the video strategy with its catalog and provider collaborators.

        Args:
            product_repository: Catalog repository used to load and save the target product
            execution_scope: Catalog scope switcher (privilege area, current store)
            deduplication_checker: Checker consulted when the target product is missing
            video_gateways: Metadata gateway per video provider
            content_validator: Validator for the preview image payload
            youtube_api_key: YouTube Data API key, empty when not configured
        """
        self.product_repository = product_repository
        self.execution_scope = execution_scope
        self.deduplication_checker = deduplication_checker
        self.video_gateways = video_gateways
        self.content_validator = content_validator
        self.youtube_api_key = youtube_api_key
        self.logger = logging.getLogger(__name__)

    async def execute(self, context: ExecutionContext, entry: Optional[QueueEntry]) -> ActionResult:
        try:
            self.execution_scope.apply_area(context.area)
        except Exception as e:
            self.logger.warning(f"Could not apply execution area '{context.area.value}': {str(e)}")

        if entry is None:
            raise ConfigurationException("Queue entry is required for the product video strategy")

        self.execution_scope.set_current_store(entry.store_view_id)

        try:
            product = await self.product_repository.get_by_pim_id(entry.target_entity_id)
        except EntityNotFoundException:
            if await self.deduplication_checker.is_already_queued(ProductQueueEntry.equivalent_to(entry)):
                self.logger.info(
                    f"Product {entry.target_entity_id} is not published yet but already queued, "
                    f"skipping video entry {entry.id}"
                )
                return ActionResult.SKIPPED

            raise NotYetPublishedException(entry.target_entity_id)

        try:
            asset_kind = TypeMetadata.decode(entry.type_metadata).asset_kind()
        except (FormatException, UnsupportedTypeException) as e:
            self.logger.warning(f"Skipping video entry {entry.id}: {e.message}")
            return ActionResult.SKIPPED

        if asset_kind is AssetKind.VIDEO_YOUTUBE:
            return await self._create_youtube_video_element(entry, product)

        if asset_kind is AssetKind.VIDEO_VIMEO:
            return await self._create_vimeo_video_element(entry, product)

        return ActionResult.SKIPPED

    async def _create_youtube_video_element(self, entry: QueueEntry, product: Product) -> ActionResult:
        if not self.youtube_api_key:
            self.logger.error("No YouTube API key configured")
            return ActionResult.ERROR

        url = entry.value or ""
        video_id = self._extract_youtube_video_id(url)
        if not video_id:
            self.logger.error(f"No YouTube video id found in '{url}' for entry {entry.id}")
            return ActionResult.ERROR

        try:
            response = await self.video_gateways[VideoProvider.YOUTUBE].fetch_video_data(
                video_id, api_key=self.youtube_api_key
            )
        except VideoApiException as e:
            self.logger.error(f"Could not retrieve video data from YouTube API for video {video_id}: "
                              f"{e.reason} {e.details or ''}")
            return ActionResult.ERROR

        items = response.get("items")
        if not items or not isinstance(items, list):
            self.logger.error(f"No items retrieved from YouTube API using video id {video_id}")
            return ActionResult.ERROR

        item = items[0] if isinstance(items[0], dict) else {}
        if item.get("id") != video_id:
            self.logger.error(f"Wrong video returned by YouTube API for video with id {video_id}")
            return ActionResult.ERROR

        snippet = item.get("snippet") or {}
        thumbnail_url = select_thumbnail_url(snippet.get("thumbnails"))
        if not thumbnail_url:
            self.logger.error(f"No thumbnail returned by YouTube API for video with id {video_id}")
            return ActionResult.ERROR

        metadata = VideoMetadata(
            provider=VideoProvider.YOUTUBE,
            video_id=video_id,
            title=snippet.get("title") or "",
            description=snippet.get("description") or "",
            thumbnail_url=thumbnail_url
        )

        entry.asset_id = await self._add_video_for_product(product, url, metadata)
        self.logger.info(f"Added YouTube video {video_id} to product {product.sku} as entry {entry.asset_id}")
        return ActionResult.SUCCESS

    async def _create_vimeo_video_element(self, entry: QueueEntry, product: Product) -> ActionResult:
        url = entry.value or ""
        video_id = self._extract_vimeo_video_id(url)
        if not video_id:
            self.logger.error(f"No Vimeo video id found in '{url}' for entry {entry.id}")
            return ActionResult.ERROR

        try:
            response = await self.video_gateways[VideoProvider.VIMEO].fetch_video_data(video_id)
        except VideoApiException as e:
            self.logger.error(f"Could not retrieve video data from Vimeo for video {video_id}: "
                              f"{e.reason} {e.details or ''}")
            return ActionResult.ERROR

        if str(response.get("video_id", "")) != video_id:
            self.logger.error(f"Wrong video returned by Vimeo for video with id {video_id}")
            return ActionResult.ERROR

        thumbnail_url = response.get("thumbnail_url")
        if not thumbnail_url:
            self.logger.error(f"No thumbnail returned by Vimeo for video with id {video_id}")
            return ActionResult.ERROR

        metadata = VideoMetadata(
            provider=VideoProvider.VIMEO,
            video_id=video_id,
            title=response.get("title") or "",
            description=response.get("description") or "",
            thumbnail_url=thumbnail_url
        )

        entry.asset_id = await self._add_video_for_product(product, url, metadata)
        self.logger.info(f"Added Vimeo video {video_id} to product {product.sku} as entry {entry.asset_id}")
        return ActionResult.SUCCESS

    async def _add_video_for_product(self, product: Product, video_url: str, metadata: VideoMetadata) -> int:
        """
        Append a new external video entry to the product and persist it.

        Args:
            product: Target catalog product
            video_url: Canonical video URL stored on the entry
            metadata: Provider metadata of the video

        Returns:
            int: Catalog identifier of the new media gallery entry

        Raises:
            ThumbnailFetchException: If the preview image cannot be downloaded
            InputException: If the preview image is not valid image content
            StateException: If the product cannot be saved or the new entry is missing afterwards
        """
        video_entry = await self._create_video_entry(video_url, metadata)

        if not self.content_validator.is_valid(video_entry.content):
            raise InputException("The image content is not valid.")

        existing_entry_ids = product.media_gallery_entry_ids()
        product.media_gallery_entries = list(product.media_gallery_entries) + [video_entry]

        try:
            saved_product = await self.product_repository.save(product)
        except InputException:
            raise
        except Exception as e:
            raise StateException("Cannot save product.", str(e))

        for gallery_entry in saved_product.media_gallery_entries:
            if gallery_entry.id is not None and gallery_entry.id not in existing_entry_ids:
                return gallery_entry.id

        raise StateException("Failed to save new media gallery entry.")

    async def _create_video_entry(self, video_url: str, metadata: VideoMetadata) -> MediaGalleryEntry:
        gateway = self.video_gateways[metadata.provider]
        thumbnail = await gateway.fetch_thumbnail(metadata.thumbnail_url)

        image_content = ImageContent(
            name=f"{metadata.provider.value}_{metadata.video_id}",
            type=self.THUMBNAIL_MIME_TYPE,
            base64_encoded_data=base64.b64encode(thumbnail).decode("ascii")
        )

        return MediaGalleryEntry(
            media_type=EXTERNAL_VIDEO_MEDIA_TYPE,
            label=metadata.title,
            disabled=False,
            types=[],
            content=image_content,
            video_content=VideoContent(
                video_provider=metadata.provider.value,
                video_url=video_url,
                video_title=metadata.title,
                video_description=metadata.description,
                video_metadata=None
            )
        )

    @staticmethod
    def _extract_youtube_video_id(url: str) -> str:
        if "v=" not in url:
            return ""
        return url.split("v=", 1)[1].split("&", 1)[0]

    @staticmethod
    def _extract_vimeo_video_id(url: str) -> str:
        path = urlparse(url).path if "://" in url else url
        return path.rstrip("/").split("/")[-1]
