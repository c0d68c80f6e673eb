import asyncio
import aiohttp
import logging
import json
from typing import Dict, Any, Optional

from interfaces.gateways.video_provider_gateway_interface import VideoProviderGatewayInterface
from domain.exceptions import VideoApiException, ThumbnailFetchException


class VideoProviderGateway(VideoProviderGatewayInterface):
    """
    Shared aiohttp transport for video provider gateways.

    Subclasses build the provider specific metadata request; this class owns
    the bounded timeouts, JSON decoding and thumbnail download.
    """

    provider_name = ""

    def __init__(self, timeout: int = 15):
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(url, params=params) as response:
                    response_text = await response.text()

                    if response.status != 200:
                        self.logger.error(f"{self.provider_name} API returned status {response.status}")
                        raise VideoApiException(self.provider_name, "http_status",
                                                f"HTTP {response.status}: {response_text[:200]}")

                    try:
                        data = json.loads(response_text)
                    except json.JSONDecodeError as e:
                        raise VideoApiException(self.provider_name, "malformed_json", str(e))

                    if not isinstance(data, dict):
                        raise VideoApiException(self.provider_name, "malformed_json",
                                                "Response body is not a JSON object")

                    return data

        except VideoApiException:
            raise
        except asyncio.TimeoutError:
            raise VideoApiException(self.provider_name, "timeout", f"No response within {self.timeout}s")
        except aiohttp.ClientError as e:
            raise VideoApiException(self.provider_name, "network", str(e))

    async def fetch_thumbnail(self, url: str) -> bytes:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise ThumbnailFetchException(url, f"HTTP {response.status}")

                    content = await response.read()

        except ThumbnailFetchException:
            raise
        except asyncio.TimeoutError:
            raise ThumbnailFetchException(url, f"No response within {self.timeout}s")
        except aiohttp.ClientError as e:
            raise ThumbnailFetchException(url, str(e))

        if not content:
            raise ThumbnailFetchException(url, "Empty response body")

        self.logger.debug(f"Downloaded {len(content)} bytes thumbnail from {url}")
        return content
