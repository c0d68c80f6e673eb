from typing import Dict, Any, Optional

from infra.gateways.video_provider_gateway import VideoProviderGateway
from domain.exceptions import VideoApiException


class YouTubeGateway(VideoProviderGateway):
    """Client for the YouTube Data API ``videos`` endpoint."""

    provider_name = "youtube"

    def __init__(self, api_url: str = "https://www.googleapis.com/youtube/v3/videos", timeout: int = 15):
        super().__init__(timeout=timeout)
        self.api_url = api_url

    async def fetch_video_data(self, video_id: str, api_key: Optional[str] = None) -> Dict[str, Any]:
        if not api_key:
            raise VideoApiException(self.provider_name, "missing_api_key")

        params = {
            "id": video_id,
            "part": "snippet",
            "alt": "json",
            "key": api_key,
        }

        self.logger.info(f"Requesting YouTube metadata for video {video_id}")
        return await self._get_json(self.api_url, params=params)
