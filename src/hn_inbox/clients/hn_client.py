"""Hacker News item-store client."""

import logging
from typing import Any, List, Optional

import httpx

from hn_inbox.core.config import HackerNewsConfig
from hn_inbox.core.errors import NetworkError, ParseError, UpstreamError
from hn_inbox.models.hn_models import Item, Story

logger = logging.getLogger(__name__)


class HackerNewsClient:
    """Async wrapper around the Hacker News Firebase API."""

    def __init__(self, config: HackerNewsConfig, http_client: Optional[httpx.AsyncClient] = None):
        """Initialize the client; the HTTP client is created lazily if not given."""
        self.config = config
        self._http = http_client

    def _get_http(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http is None:
            self._http = httpx.AsyncClient(base_url=self.config.api_base)
        return self._http

    async def _get_json(self, path: str) -> Any:
        """GET a JSON document from the item store, translating httpx errors."""
        http = self._get_http()
        try:
            response = await http.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise UpstreamError(f"Item store returned {status} for {path}", status) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Network error reaching item store: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"Item store sent invalid JSON for {path}") from e

    async def fetch_top_story_ids(self, limit: Optional[int] = None) -> List[int]:
        """Fetch the ranked list of top story ids, truncated to the configured limit."""
        limit = limit or self.config.top_stories_limit
        story_ids = await self._get_json('/topstories.json')
        if not isinstance(story_ids, list):
            raise ParseError("Top stories payload is not a list")
        logger.debug("Fetched %d top story ids", len(story_ids))
        return story_ids[:limit]

    async def fetch_item(self, item_id: int) -> Optional[Item]:
        """Fetch one item; returns None when the store has no such item."""
        data = await self._get_json(f'/item/{item_id}.json')
        if data is None:
            return None
        return Item.from_payload(data)

    async def fetch_story(self, story_id: int) -> Optional[Story]:
        """Fetch one story; returns None for missing items or non-story types."""
        item = await self.fetch_item(story_id)
        if item is None or item.is_gone or item.type != 'story':
            return None
        return Story.from_item(item)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
