"""In-memory stand-ins for the network clients."""

import asyncio
from typing import Dict, List, Optional

from hn_inbox.clients.claude_client import SummarizerResponse
from hn_inbox.core.constants import Constants
from hn_inbox.core.errors import NetworkError
from hn_inbox.models.ai_models import TokenUsage
from hn_inbox.models.hn_models import Item, Story

API_KEY = "sk-ant-REDACTED"

DISCUSSION_REPLY = (
    '{"discussionSummary": "People argue about tabs.", '
    '"interestingComments": [{"author": "pg", "snippet": "Tabs are fine", "reason": "Contrarian"}]}'
)
ARTICLE_REPLY = '{"articleSummary": "The article compares indentation styles."}'


def comment(item_id: int, kids=(), by: str = 'user', text: str = 'hello', **extra) -> dict:
    data = {'id': item_id, 'type': 'comment', 'by': by, 'text': text, 'time': 1700000000,
            'kids': list(kids)}
    data.update(extra)
    return data


def story_payload(item_id: int, kids=(), url: Optional[str] = 'https://example.com/post',
                  **extra) -> dict:
    data = {'id': item_id, 'type': 'story', 'by': 'author', 'title': f'Story {item_id}',
            'score': 100, 'descendants': len(kids), 'time': 1700000000, 'kids': list(kids)}
    if url:
        data['url'] = url
    data.update(extra)
    return data


def make_story(item_id: int = 1, kids=(), url: Optional[str] = 'https://example.com/post') -> Story:
    return Story.from_item(Item.from_payload(story_payload(item_id, kids, url)))


class FakeHNClient:
    """Serves items from a dict and records concurrency."""

    def __init__(self, items: Dict[int, dict], failing=(), delay: float = 0,
                 top_ids: Optional[List[int]] = None, delays: Optional[Dict[int, float]] = None):
        self.items = items
        self.failing = set(failing)
        self.delay = delay
        self.delays = delays or {}
        self.top_ids = top_ids if top_ids is not None else sorted(items)
        self.requested: List[int] = []
        self.active = 0
        self.max_active = 0

    async def fetch_item(self, item_id: int) -> Optional[Item]:
        self.requested.append(item_id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(item_id, self.delay))
            if item_id in self.failing:
                raise NetworkError(f"boom {item_id}")
        finally:
            self.active -= 1
        data = self.items.get(item_id)
        return Item.from_payload(data) if data is not None else None

    async def fetch_top_story_ids(self, limit: Optional[int] = None) -> List[int]:
        return list(self.top_ids)

    async def fetch_story(self, story_id: int) -> Optional[Story]:
        item = await self.fetch_item(story_id)
        if item is None or item.is_gone or item.type != 'story':
            return None
        return Story.from_item(item)

    async def aclose(self) -> None:
        pass


class FakeSummarizer:
    """Returns canned replies in order and records every prompt."""

    def __init__(self, replies=None, error: Optional[Exception] = None,
                 usage: Optional[TokenUsage] = None):
        self.replies = list(replies or [])
        self.error = error
        self.usage = usage or TokenUsage(input=1000, output=200)
        self.calls: List[dict] = []

    async def complete(self, prompt: str, api_key: str, max_tokens: Optional[int] = None,
                       model: Optional[str] = None) -> SummarizerResponse:
        self.calls.append({'prompt': prompt, 'api_key': api_key, 'max_tokens': max_tokens})
        if self.error is not None:
            raise self.error
        text = self.replies.pop(0) if self.replies else DISCUSSION_REPLY
        return SummarizerResponse(text=text, usage=self.usage, model=Constants.DEFAULT_MODEL)

    async def aclose(self) -> None:
        pass


class FakeReader:
    def __init__(self, content: str = 'Indentation matters. ' * 20,
                 error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: List[str] = []

    async def fetch_article(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.content

    async def aclose(self) -> None:
        pass
