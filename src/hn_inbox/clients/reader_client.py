"""Article reader proxy client."""

from typing import Optional

import httpx

from hn_inbox.core.config import ReaderConfig
from hn_inbox.core.errors import NetworkError, UpstreamError


class ArticleReaderClient:
    """Fetches extracted plain text for an article URL through a reader proxy."""

    def __init__(self, config: ReaderConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._http = http_client

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self._http

    async def fetch_article(self, url: str) -> str:
        """Return the reader's plain-text rendition of `url`."""
        reader_url = f"{self.config.base_url.rstrip('/')}/{url}"
        try:
            response = await self._get_http().get(reader_url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise UpstreamError(f"Article reader returned {status}", status) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Network error reaching article reader: {e}") from e
        return response.text

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
