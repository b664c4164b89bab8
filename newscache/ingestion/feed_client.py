"""HTTP client for the remote news feed."""

import logging
from typing import Any, Dict, Optional

import httpx

from ..exceptions import FeedError, FeedPayloadError, FeedTransportError
from .models import FeedResponse, FeedResult

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Api-Key"


class FeedClient:
    """Fetch category feeds from ``GET {base_url}/feed?category=``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize feed client."""
        self.base_url = base_url
        self.timeout = timeout
        self.api_key = api_key
        self.transport = transport

    @classmethod
    def from_config(cls, feed_config: Dict[str, Any]) -> "FeedClient":
        """Build a client from ``Config.get_feed_config()``."""
        return cls(
            base_url=feed_config["base_url"],
            timeout=feed_config.get("timeout", 30.0),
            api_key=feed_config.get("api_key"),
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers[API_KEY_HEADER] = self.api_key
        return headers

    async def fetch_payload(self, category: str) -> FeedResponse:
        """
        Fetch and validate one category feed.

        Raises:
            FeedTransportError: On network failures and non-2xx responses
            FeedPayloadError: When the body is not a feed document
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._headers(),
                transport=self.transport,
            ) as client:
                response = await client.get("/feed", params={"category": category})
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FeedTransportError(f"HTTP error: {e}") from e

        try:
            # Invalid JSON and schema mismatches are both ValueErrors
            return FeedResponse.model_validate(response.json())
        except ValueError as e:
            raise FeedPayloadError(f"Malformed feed response: {e}") from e

    async def fetch_feed(self, category: str) -> FeedResult:
        """
        Fetch and parse one category feed.

        Network and payload problems are reported in the result, never raised.
        """
        try:
            payload = await self.fetch_payload(category)
        except FeedError as e:
            logger.warning("Feed request for %s failed: %s", category, e)
            return FeedResult(category=category, success=False, error=str(e))

        if payload.category and payload.category != category:
            logger.debug("Feed for %s answered with category %s", category, payload.category)

        return FeedResult(
            category=category,
            success=True,
            articles=payload.articles,
            item_count=len(payload.articles),
        )
