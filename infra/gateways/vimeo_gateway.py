from typing import Dict, Any, Optional

from infra.gateways.video_provider_gateway import VideoProviderGateway


class VimeoGateway(VideoProviderGateway):
    """
    Client for the public Vimeo oEmbed endpoint.

    oEmbed needs no API key, the ``api_key`` argument is accepted and ignored.
    """

    provider_name = "vimeo"

    def __init__(self, oembed_url: str = "https://vimeo.com/api/oembed.json", timeout: int = 15):
        super().__init__(timeout=timeout)
        self.oembed_url = oembed_url

    async def fetch_video_data(self, video_id: str, api_key: Optional[str] = None) -> Dict[str, Any]:
        params = {"url": f"https://vimeo.com/{video_id}"}

        self.logger.info(f"Requesting Vimeo oEmbed metadata for video {video_id}")
        return await self._get_json(self.oembed_url, params=params)
