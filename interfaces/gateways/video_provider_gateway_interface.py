from abc import ABC, abstractmethod
from typing import Dict, Any, Optional


class VideoProviderGatewayInterface(ABC):
    """
    Gateway interface for third-party video metadata APIs.

    Implementations only handle transport: they return the decoded JSON
    document and leave business validation (empty result sets, mismatched
    identifiers) to the asset handler.
    """

    provider_name: str = ""

    @abstractmethod
    async def fetch_video_data(self, video_id: str, api_key: Optional[str] = None) -> Dict[str, Any]:
        """
        Fetch the provider's metadata document for a video.

        Args:
            video_id: Provider assigned video identifier
            api_key: API key for providers that require one

        Returns:
            Dict[str, Any]: Decoded JSON response

        Raises:
            VideoApiException: On network failure, timeout, HTTP error or malformed JSON
        """
        pass

    @abstractmethod
    async def fetch_thumbnail(self, url: str) -> bytes:
        """
        Download a video preview image.

        Args:
            url: Thumbnail URL taken from the metadata document

        Returns:
            bytes: Raw image bytes

        Raises:
            ThumbnailFetchException: If the download fails or the body is empty
        """
        pass
