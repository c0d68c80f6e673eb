from typing import Optional, List, Dict, Any, Set
from dataclasses import dataclass, field

from domain.value_objects import EXTERNAL_VIDEO_MEDIA_TYPE, VideoDescriptor


@dataclass
class ImageContent:
    """
    Base64 encoded image payload attached to a new media gallery entry.

    Attributes:
        name: File name without path, e.g. ``youtube_abc123``
        type: MIME type of the decoded image
        base64_encoded_data: Image bytes encoded as base64 text
    """
    name: str
    type: str
    base64_encoded_data: str


@dataclass
class VideoContent:
    """External video record linked to a media gallery entry."""
    video_provider: str
    video_url: str
    video_title: str = ""
    video_description: str = ""
    video_metadata: Optional[str] = None
    media_type: str = EXTERNAL_VIDEO_MEDIA_TYPE


@dataclass
class MediaGalleryEntry:
    """
    Single item of a product media gallery.

    Attributes:
        id: Catalog assigned identifier, None until the product is saved
        media_type: Media type tag, ``image`` or ``external-video``
        label: Display label
        position: Sort position inside the gallery
        disabled: Whether the entry is hidden on the storefront
        types: Image roles (image, small_image, thumbnail)
        content: Image payload for entries that are not persisted yet
        video_content: Video record for external video entries
    """
    id: Optional[int] = None
    media_type: str = "image"
    label: str = ""
    position: int = 0
    disabled: bool = False
    types: List[str] = field(default_factory=list)
    content: Optional[ImageContent] = None
    video_content: Optional[VideoContent] = None

    def is_external_video(self) -> bool:
        return self.media_type == EXTERNAL_VIDEO_MEDIA_TYPE

    def get_video_url(self) -> Optional[str]:
        return self.video_content.video_url if self.video_content else None


@dataclass
class Product:
    """
    Catalog side projection of a product.

    The instance owns its media gallery entries for the duration of a sync or
    handler pass; persistence belongs to the catalog repository.
    """
    sku: str
    id: Optional[int] = None
    store_id: int = 0
    pim_id: Optional[str] = None
    media_gallery_entries: List[MediaGalleryEntry] = field(default_factory=list)
    category_ids: List[int] = field(default_factory=list)

    def media_gallery_entry_ids(self) -> Set[int]:
        return {entry.id for entry in self.media_gallery_entries if entry.id is not None}

    def external_video_entries(self) -> List[MediaGalleryEntry]:
        return [entry for entry in self.media_gallery_entries if entry.is_external_video()]


@dataclass
class PimProduct:
    """
    Product descriptor as published by the PIM.

    Fields are arbitrary keyed data; the ones the synchronization relies on are
    ``pimcore_id``, ``category_ids`` and ``video``.
    """
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def pim_id(self) -> str:
        return str(self.data.get("pimcore_id", ""))

    @property
    def category_ids(self) -> List[int]:
        return list(self.data.get("category_ids") or [])

    @property
    def video(self) -> Optional[VideoDescriptor]:
        return VideoDescriptor.from_dict(self.data.get("video"))
