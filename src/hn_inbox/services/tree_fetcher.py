"""Comment tree fetching with bounded per-level fan-out."""

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from hn_inbox.clients.hn_client import HackerNewsClient
from hn_inbox.core.constants import Constants
from hn_inbox.core.errors import HNInboxError
from hn_inbox.models.hn_models import CommentNode, Item

logger = logging.getLogger(__name__)


class TreeFetcher:
    """Resolves reply ids into a nested CommentNode tree.

    The tree is walked one level at a time: all ids of a level are requested
    together, so latency grows with thread depth, not thread size. A semaphore
    shared by every caller of this fetcher caps simultaneous item requests.
    """

    def __init__(self, client: HackerNewsClient,
                 max_concurrency: int = Constants.DEFAULT_MAX_CONCURRENCY):
        """Initialize tree fetcher."""
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.client = client
        self.max_concurrency = max_concurrency
        self._limiter = asyncio.Semaphore(max_concurrency)

    async def _resolve(self, item_id: int) -> Optional[Item]:
        """Fetch one item; any failure resolves to None."""
        async with self._limiter:
            try:
                return await self.client.fetch_item(item_id)
            except HNInboxError as e:
                logger.debug("Dropping item %s: %s", item_id, e)
                return None

    async def fetch_items(self, item_ids: Sequence[int]) -> List[Optional[Item]]:
        """Fetch items concurrently; result positions match `item_ids`."""
        return list(await asyncio.gather(*(self._resolve(item_id) for item_id in item_ids)))

    async def fetch_tree(self, root_ids: Sequence[int]) -> List[CommentNode]:
        """Build the reply forest under `root_ids`.

        Missing, deleted, dead and unfetchable ids are dropped without a
        placeholder, together with everything beneath them. Survivors keep
        the relative order of their ids.
        """
        roots: List[CommentNode] = []
        # Work queue of (sibling list to append to, item id), one level at a time
        level: List[Tuple[List[CommentNode], int]] = [(roots, item_id) for item_id in root_ids]
        depth = 0
        fetched = 0

        while level:
            items = await self.fetch_items([item_id for _, item_id in level])
            fetched += len(level)

            next_level: List[Tuple[List[CommentNode], int]] = []
            for (siblings, _), item in zip(level, items):
                if item is None or item.is_gone:
                    continue
                node = CommentNode.from_item(item)
                siblings.append(node)
                next_level.extend((node.replies, kid) for kid in item.kids)

            level = next_level
            depth += 1

        logger.debug("Fetched %d items across %d levels, kept %d top-level comments",
                     fetched, depth, len(roots))
        return roots
