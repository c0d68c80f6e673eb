import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple

from domain.exceptions import FormatException, UnsupportedTypeException, UnsupportedFormatException


PRODUCT_ENTITY_TYPE = "catalog_product"
EXTERNAL_VIDEO_MEDIA_TYPE = "external-video"

_SEGMENT_PATTERN = re.compile(r"^[a-z0-9_]+$")
_TOKEN_SEPARATOR = "/"


class ActionResult(Enum):
    """Outcome of a single asset handler invocation."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


class ExecutionArea(Enum):
    ADMIN = "adminhtml"
    STOREFRONT = "frontend"


@dataclass(frozen=True)
class ExecutionContext:
    """
    Execution scope handed to asset handlers.

    Attributes:
        area: Privilege area the handler should run in, admin by default
        worker_id: Identifier of the drain worker running the handler
    """
    area: ExecutionArea = ExecutionArea.ADMIN
    worker_id: Optional[str] = None


class AssetFamily(Enum):
    VIDEO = "video"


class VideoProvider(Enum):
    """Video hosting providers a PIM video descriptor may reference."""
    YOUTUBE = "youtube"
    VIMEO = "vimeo"

    @classmethod
    def from_format(cls, video_format: str) -> "VideoProvider":
        """
        Resolve the provider for a PIM video format string.

        Raises:
            UnsupportedFormatException: If the format is not a known provider
        """
        for provider in cls:
            if provider.value == video_format:
                return provider
        raise UnsupportedFormatException(str(video_format))

    def watch_url(self, link: str) -> str:
        if self is VideoProvider.YOUTUBE:
            return f"https://youtube.com/watch?v={link}"
        return f"https://vimeo.com/{link}"


class AssetKind(Enum):
    """
    Every asset kind the queue can route.

    The value is the asset tag stored inside the type metadata token.
    """
    VIDEO_YOUTUBE = "video_youtube"
    VIDEO_VIMEO = "video_vimeo"

    @property
    def family(self) -> AssetFamily:
        return _KIND_FAMILIES[self]

    @property
    def provider(self) -> Optional[VideoProvider]:
        return _KIND_PROVIDERS.get(self)

    @classmethod
    def for_video_provider(cls, provider: VideoProvider) -> "AssetKind":
        for kind, kind_provider in _KIND_PROVIDERS.items():
            if kind_provider is provider:
                return kind
        raise UnsupportedFormatException(provider.value)


_KIND_FAMILIES = {
    AssetKind.VIDEO_YOUTUBE: AssetFamily.VIDEO,
    AssetKind.VIDEO_VIMEO: AssetFamily.VIDEO,
}

_KIND_PROVIDERS = {
    AssetKind.VIDEO_YOUTUBE: VideoProvider.YOUTUBE,
    AssetKind.VIDEO_VIMEO: VideoProvider.VIMEO,
}


@dataclass(frozen=True)
class TypeMetadata:
    """
    Routing token identifying an entity type and its asset sub-types.

    Encoded form is ``<entity_type>/<tag>[/<tag>...]``, for example
    ``catalog_product/video_youtube``. Tag order is significant, callers
    pass tags in canonical order.

    Attributes:
        entity_type: Catalog entity type the asset belongs to
        asset_types: Ordered asset sub-type tags
    """
    entity_type: str
    asset_types: Tuple[str, ...]

    def __post_init__(self):
        if not self.asset_types:
            raise FormatException(self.entity_type, "at least one asset type is required")
        for segment in (self.entity_type,) + tuple(self.asset_types):
            if not isinstance(segment, str) or not _SEGMENT_PATTERN.match(segment):
                raise FormatException(str(segment), "segments must match [a-z0-9_]+")

    @classmethod
    def for_video(cls, video_format: str) -> "TypeMetadata":
        """
        Build the token used for product video assets of a PIM video format.

        Raises:
            UnsupportedFormatException: If the format is not a known provider
        """
        provider = VideoProvider.from_format(video_format)
        return cls(PRODUCT_ENTITY_TYPE, (AssetKind.for_video_provider(provider).value,))

    def encode(self) -> str:
        return _TOKEN_SEPARATOR.join((self.entity_type,) + tuple(self.asset_types))

    @classmethod
    def decode(cls, token: str) -> "TypeMetadata":
        """
        Decode a token produced by encode().

        Args:
            token: Encoded type metadata string

        Returns:
            TypeMetadata: Decoded entity type and asset tags

        Raises:
            FormatException: If the token is empty or structurally invalid
        """
        if not token or not isinstance(token, str):
            raise FormatException(str(token), "token is empty")

        segments = token.split(_TOKEN_SEPARATOR)
        if len(segments) < 2:
            raise FormatException(token, "expected '<entity_type>/<asset_type>'")

        for segment in segments:
            if not _SEGMENT_PATTERN.match(segment):
                raise FormatException(token, f"invalid segment '{segment}'")

        return cls(segments[0], tuple(segments[1:]))

    def asset_kind(self) -> AssetKind:
        """
        Map the asset tags onto exactly one known asset kind.

        Raises:
            UnsupportedTypeException: If no tag names a known kind
        """
        known = {kind.value: kind for kind in AssetKind}
        for tag in self.asset_types:
            if tag in known:
                return known[tag]
        raise UnsupportedTypeException(self.encode())


@dataclass(frozen=True)
class VideoDescriptor:
    """Desired video state as published by the PIM (format + provider link)."""
    format: str
    link: str

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["VideoDescriptor"]:
        if not data:
            return None
        return cls(format=str(data.get("format") or ""), link=str(data.get("link") or ""))

    def complete_url(self) -> str:
        return get_complete_video_url(self.format, self.link)


def get_complete_video_url(video_format: str, link: str) -> str:
    """
    Build the canonical watch URL for a PIM video descriptor.

    Args:
        video_format: Provider name as stored in the PIM (youtube, vimeo)
        link: Provider specific video identifier

    Returns:
        str: Canonical video URL

    Raises:
        UnsupportedFormatException: If the format is not youtube or vimeo
    """
    return VideoProvider.from_format(video_format).watch_url(link)


THUMBNAIL_TIERS: List[str] = ["standard", "high", "default"]


def select_thumbnail_url(thumbnails: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Pick the best available thumbnail, preferring standard over high over default.

    Args:
        thumbnails: Mapping of tier name to ``{"url": ...}`` as returned by the YouTube API

    Returns:
        Optional[str]: Thumbnail URL or None if no tier carries a URL
    """
    if not thumbnails:
        return None

    for tier in THUMBNAIL_TIERS:
        candidate = thumbnails.get(tier)
        if isinstance(candidate, dict) and candidate.get("url"):
            return candidate["url"]

    return None


@dataclass(frozen=True)
class VideoMetadata:
    """
    Provider metadata for a single external video.

    Attributes:
        provider: Provider the metadata came from
        video_id: Provider assigned video identifier
        title: Video title
        description: Video description
        thumbnail_url: URL of the preview image to download
    """
    provider: VideoProvider
    video_id: str
    title: str
    description: str
    thumbnail_url: str
