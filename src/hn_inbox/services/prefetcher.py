"""Background readahead of the next story's tree and summary."""

import asyncio
import logging
from typing import Dict, Optional, Sequence

from hn_inbox.formatters.thread_formatter import ThreadFormatter
from hn_inbox.handlers.cache_store import CacheStore
from hn_inbox.models.ai_models import SummaryState
from hn_inbox.models.hn_models import Story
from hn_inbox.services.summarization_service import SummaryPipeline
from hn_inbox.services.tree_fetcher import TreeFetcher

logger = logging.getLogger(__name__)


class Prefetcher:
    """Warms both cache regions for the story after the selected one.

    At most one prefetch runs per story id. Prefetch tasks are owned here and
    can be cancelled; their failures are logged and never reach the caller.
    """

    def __init__(self, tree_fetcher: TreeFetcher, pipeline: SummaryPipeline,
                 cache: CacheStore, formatter: ThreadFormatter):
        """Initialize prefetcher."""
        self.tree_fetcher = tree_fetcher
        self.pipeline = pipeline
        self.cache = cache
        self.formatter = formatter
        self._inflight: Dict[int, asyncio.Task] = {}

    def in_flight(self, story_id: int) -> bool:
        task = self._inflight.get(story_id)
        return task is not None and not task.done()

    def prefetch_next(self, current_index: int,
                      stories: Sequence[Story]) -> Optional[asyncio.Task]:
        """Schedule readahead of `stories[current_index + 1]`.

        Returns the running task when a prefetch for that story is already in
        flight, otherwise the newly scheduled one. Returns None when there is
        no next story or it is already cached in both regions.
        Must be called from inside a running event loop.
        """
        next_index = current_index + 1
        if next_index < 0 or next_index >= len(stories):
            return None

        story = stories[next_index]
        if self.in_flight(story.id):
            return self._inflight[story.id]
        if self.cache.has_tree(story.id) and self.cache.has_summary(story.id):
            return None

        task = asyncio.get_running_loop().create_task(
            self._prefetch(story), name=f"prefetch-{story.id}"
        )
        self._inflight[story.id] = task
        task.add_done_callback(lambda t, story_id=story.id: self._finished(story_id, t))
        return task

    async def _prefetch(self, story: Story) -> None:
        # Yield first so the foreground request that triggered us goes out first
        await asyncio.sleep(0)

        cached = self.cache.get_tree(story.id)
        if cached is not None:
            tree = cached.data
        else:
            tree = await self.tree_fetcher.fetch_tree(story.kids)
            self.cache.put_tree(story.id, tree, self.formatter.render_snapshot(tree))
            logger.debug("Prefetched %d comments for story %s", len(tree), story.id)

        if self.cache.has_summary(story.id):
            return

        final = await self.pipeline.run(story, tree)
        if final is not None and final.state is SummaryState.ERROR:
            logger.debug("Prefetch summary for story %s not cached: %s", story.id, final.error)

    def _finished(self, story_id: int, task: asyncio.Task) -> None:
        if self._inflight.get(story_id) is task:
            del self._inflight[story_id]
        if task.cancelled():
            logger.debug("Prefetch for story %s cancelled", story_id)
            return
        error = task.exception()
        if error is not None:
            logger.warning("Prefetch for story %s failed: %s", story_id, error)

    async def wait_for(self, story_id: int) -> None:
        """Wait for a running prefetch of `story_id`, ignoring its outcome."""
        task = self._inflight.get(story_id)
        if task is not None and not task.done():
            await asyncio.wait({task})

    def cancel(self, story_id: int) -> bool:
        task = self._inflight.get(story_id)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def cancel_all(self) -> None:
        """Cancel every running prefetch and wait for them to unwind."""
        tasks = [task for task in self._inflight.values() if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
