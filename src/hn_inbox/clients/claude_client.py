"""Summarizer client for the Anthropic Messages API."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import anthropic

from hn_inbox.core.config import SummarizerConfig
from hn_inbox.core.constants import Constants
from hn_inbox.core.errors import ConfigError, NetworkError, UpstreamError
from hn_inbox.models.ai_models import TokenUsage

logger = logging.getLogger(__name__)


@dataclass
class SummarizerResponse:
    """Text and usage returned by one summarizer call."""
    text: str
    usage: TokenUsage
    model: str


class ClaudeClient:
    """Wraps anthropic.AsyncAnthropic; one SDK client per API key."""

    def __init__(self, config: SummarizerConfig):
        """Initialize the summarizer client."""
        self.config = config
        self._clients: Dict[str, anthropic.AsyncAnthropic] = {}

    def _get_client(self, api_key: str) -> anthropic.AsyncAnthropic:
        """Get or create the SDK client for an API key. Retries are disabled."""
        client = self._clients.get(api_key)
        if client is None:
            client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
            self._clients[api_key] = client
        return client

    async def complete(self, prompt: str, api_key: str, max_tokens: Optional[int] = None,
                       model: Optional[str] = None) -> SummarizerResponse:
        """Send a single-turn prompt and return the reply text with usage."""
        if not api_key:
            raise ConfigError(Constants.NO_API_KEY_MESSAGE)

        model = model or self.config.model
        max_tokens = max_tokens or self.config.discussion_max_tokens

        try:
            response = await self._get_client(api_key).messages.create(
                model=model,
                max_tokens=max_tokens,
                messages=[{'role': 'user', 'content': prompt}],
            )
        except anthropic.APIStatusError as e:
            message = self._extract_error_message(e)
            logger.error("Claude API error (%s): %s", e.status_code, message)
            raise UpstreamError(message, e.status_code) from e
        except anthropic.APIConnectionError as e:
            logger.error("Network error calling Claude API: %s", e)
            raise NetworkError(
                f"Network error: {e}. Check your internet connection."
            ) from e

        return SummarizerResponse(
            text=self._extract_text(response),
            usage=TokenUsage.from_api(getattr(response, 'usage', None)),
            model=model,
        )

    @staticmethod
    def _extract_error_message(error: anthropic.APIStatusError) -> str:
        """Pull `error.message` out of a structured error body, with a generic fallback."""
        body = getattr(error, 'body', None)
        if isinstance(body, dict):
            detail = body.get('error')
            if isinstance(detail, dict) and detail.get('message'):
                return detail['message']
        return f"Claude API error ({error.status_code})"

    @staticmethod
    def _extract_text(response) -> str:
        """Concatenate the text blocks of a Messages API response."""
        parts = []
        for block in getattr(response, 'content', None) or []:
            if getattr(block, 'type', None) == 'text':
                parts.append(block.text)
        return ''.join(parts).strip()

    async def aclose(self) -> None:
        """Close all SDK clients."""
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
