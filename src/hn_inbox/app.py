"""Main application orchestrator for HN Inbox."""

import argparse
import asyncio
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from hn_inbox.clients.claude_client import ClaudeClient
from hn_inbox.clients.hn_client import HackerNewsClient
from hn_inbox.clients.reader_client import ArticleReaderClient
from hn_inbox.core.config import Config
from hn_inbox.core.constants import Constants
from hn_inbox.core.errors import HNInboxError
from hn_inbox.core.logging_config import setup_logger
from hn_inbox.core.validators import CredentialValidator
from hn_inbox.formatters.thread_formatter import ThreadFormatter
from hn_inbox.formatters.usage_formatter import UsageFormatter
from hn_inbox.handlers.cache_store import CacheStore, TreeSnapshot
from hn_inbox.handlers.cost_tracker import CostLedger
from hn_inbox.handlers.state_store import StateStore
from hn_inbox.models.ai_models import SummaryState, SummaryUpdate
from hn_inbox.models.hn_models import CommentNode, Story, StoryFilter
from hn_inbox.services.prefetcher import Prefetcher
from hn_inbox.services.session import BrowsingSession
from hn_inbox.services.summarization_service import SummaryPipeline
from hn_inbox.services.tree_fetcher import TreeFetcher

logger = logging.getLogger(__name__)


class InboxOrchestrator:
    """Wires clients, caches and services together for one process.

    Envelope operations never raise: they return `{'success': True, ...}` or
    `{'success': False, 'error': message}`. Session operations raise
    HNInboxError subclasses and are meant for the CLI and other callers that
    hold a BrowsingSession.
    """

    def __init__(self, config: Config, store: Optional[StateStore] = None,
                 hn_client: Optional[HackerNewsClient] = None, reader=None, summarizer=None):
        """Initialize the orchestrator with configuration and optional overrides."""
        self.config = config
        self.store = store if store is not None else StateStore(config.cache.state_file)

        self.hn_client = hn_client or HackerNewsClient(config.hacker_news)
        self.reader = reader or ArticleReaderClient(config.reader)
        self.summarizer = summarizer or ClaudeClient(config.summarizer)

        self.cache = CacheStore(self.store, config.cache)
        self.ledger = CostLedger(self.store, config.summarizer.model)
        self.formatter = ThreadFormatter(config.user_timezone)
        self.tree_fetcher = TreeFetcher(self.hn_client, config.hacker_news.max_concurrency)
        self.pipeline = SummaryPipeline(
            self.summarizer, self.reader, self.cache, self.ledger,
            config.summarizer, credential_provider=self.get_credential,
        )
        # Separate limiter so readahead never holds up the foreground fetch
        self.prefetch_fetcher = TreeFetcher(self.hn_client, config.prefetch.max_concurrency)
        self.prefetcher = Prefetcher(self.prefetch_fetcher, self.pipeline, self.cache,
                                     self.formatter)

        logger.info("HN Inbox orchestrator initialized")
        logger.info("- Model: %s", config.summarizer.model)
        logger.info("- Max concurrent item requests: %d", config.hacker_news.max_concurrency)
        logger.info("- Prefetch enabled: %s (max %d concurrent requests)",
                    config.prefetch.enabled, config.prefetch.max_concurrency)

    def get_credential(self) -> Optional[str]:
        """Stored credential first, then ANTHROPIC_API_KEY from the environment."""
        return self.store.get(Constants.CREDENTIAL_KEY) or self.config.summarizer.api_key or None

    def set_credential(self, api_key: str) -> None:
        """Validate and store a summarizer API key; raises ConfigError when invalid."""
        self.store.set(Constants.CREDENTIAL_KEY, CredentialValidator.validate_api_key(api_key))
        logger.info("API key saved")

    @staticmethod
    def _failure(error: Exception) -> Dict[str, Any]:
        return {'success': False, 'error': str(error)}

    # Envelope operations

    async def fetch_top_stories(self) -> Dict[str, Any]:
        try:
            story_ids = await self.hn_client.fetch_top_story_ids()
        except HNInboxError as e:
            logger.error("Error fetching top stories: %s", e)
            return self._failure(e)
        return {'success': True, 'storyIds': story_ids}

    async def fetch_story(self, story_id: int) -> Dict[str, Any]:
        try:
            story = await self.hn_client.fetch_story(story_id)
        except HNInboxError as e:
            logger.error("Error fetching story %s: %s", story_id, e)
            return self._failure(e)
        return {'success': True, 'story': story.to_dict() if story else None}

    async def fetch_comment(self, comment_id: int) -> Dict[str, Any]:
        """Fetch one comment; deleted and dead comments come back as None."""
        try:
            item = await self.hn_client.fetch_item(comment_id)
        except HNInboxError as e:
            logger.error("Error fetching comment %s: %s", comment_id, e)
            return self._failure(e)
        if item is None or item.is_gone:
            return {'success': True, 'comment': None}
        return {'success': True, 'comment': CommentNode.from_item(item).to_dict()}

    async def fetch_article_content(self, url: str) -> Dict[str, Any]:
        try:
            content = await self.reader.fetch_article(url)
        except HNInboxError as e:
            logger.error("Error fetching article %s: %s", url, e)
            return self._failure(e)
        return {'success': True, 'content': content}

    async def generate_discussion_summary(self, story: Story,
                                          tree: List[CommentNode]) -> Dict[str, Any]:
        try:
            summary = await self.pipeline.generate_discussion_summary(story, tree)
        except HNInboxError as e:
            logger.error("Discussion summary error: %s", e)
            return self._failure(e)
        return {'success': True, 'summary': summary.to_dict()}

    async def generate_article_summary(self, story: Story) -> Dict[str, Any]:
        if not story.url:
            return {'success': False, 'error': 'No article URL'}
        try:
            summary = await self.pipeline.generate_article_summary(story)
        except HNInboxError as e:
            logger.error("Article summary error: %s", e)
            return self._failure(e)
        return {'success': True, 'summary': summary.to_dict()}

    async def generate_summary(self, story: Story, tree: List[CommentNode]) -> Dict[str, Any]:
        try:
            summary = await self.pipeline.generate_summary(story, tree)
        except HNInboxError as e:
            logger.error("Summary generation error: %s", e)
            return self._failure(e)
        return {'success': True, 'summary': summary.to_dict()}

    def get_cost_usage(self) -> Dict[str, Any]:
        return {'success': True, 'usage': self.ledger.current_usage(self.get_credential())}

    def reset_cost_usage(self) -> Dict[str, Any]:
        return {'success': True, 'reset': self.ledger.reset(self.get_credential())}

    # Session operations

    async def load_stories(self, session: BrowsingSession) -> List[Story]:
        """Fetch the top stories concurrently and hand them to the session."""
        story_ids = await self.hn_client.fetch_top_story_ids()
        items = await self.tree_fetcher.fetch_items(story_ids)
        stories = [
            Story.from_item(item) for item in items
            if item is not None and not item.is_gone and item.type == 'story'
        ]
        logger.info("Loaded %d of %d top stories", len(stories), len(story_ids))
        return session.set_stories(stories)

    async def open_story(self, session: BrowsingSession,
                         index: int) -> Tuple[Story, TreeSnapshot]:
        """Select a story, load its tree from cache or the network, and read ahead."""
        story = session.select(index)

        cached = self.cache.get_tree(story.id)
        if cached is None:
            tree = await self.tree_fetcher.fetch_tree(story.kids)
            cached = TreeSnapshot(data=tree, snapshot=self.formatter.render_snapshot(tree))
            self.cache.put_tree(story.id, cached.data, cached.snapshot)
        else:
            logger.debug("Tree cache hit for story %s", story.id)

        session.mark_as_read(story.id)
        if self.config.prefetch.enabled:
            self.prefetcher.prefetch_next(index, session.filtered)
        return story, cached

    async def stream_summary(self, story: Story, tree: List[CommentNode],
                             credential: Optional[str] = None) -> AsyncIterator[SummaryUpdate]:
        """Progressive summary updates; reuses a prefetch already running for the story."""
        await self.prefetcher.wait_for(story.id)
        async for update in self.pipeline.summarize(story, tree, credential):
            yield update

    async def refresh_story(self, story: Story) -> Story:
        """Drop cached tree and summary and re-fetch the story's metadata."""
        self.prefetcher.cancel(story.id)
        self.cache.invalidate(story.id)
        fresh = await self.hn_client.fetch_story(story.id)
        return fresh or story

    async def aclose(self) -> None:
        """Cancel readahead, close clients and flush pending state."""
        await self.prefetcher.cancel_all()
        await self.hn_client.aclose()
        await self.reader.aclose()
        await self.summarizer.aclose()
        await self.store.flush()


async def _show_story(orchestrator: InboxOrchestrator, story: Story,
                      snapshot: TreeSnapshot) -> int:
    formatter = orchestrator.formatter
    print(formatter.format_story_header(story))
    print()
    print(snapshot.snapshot)
    print()

    final = None
    async for update in orchestrator.stream_summary(story, snapshot.data):
        final = update
        if update.state is SummaryState.LOADING_DISCUSSION:
            print("Summarizing discussion...")
        elif update.state is SummaryState.DISCUSSION_READY:
            print(formatter.format_summary(update.result))
            print()
        elif update.state is SummaryState.LOADING_ARTICLE:
            print("Summarizing article...")

    if final is None or final.state is SummaryState.ERROR:
        print(f"Summary unavailable: {final.error if final else 'no result'}")
        return 1

    if final.from_cache or not story.url:
        print(formatter.format_summary(final.result))
    elif final.result.article_summary:
        print(f"Article\n  {final.result.article_summary}")
    return 0


async def run_cli(args: argparse.Namespace, config: Config) -> int:
    """Run one CLI command against a fresh orchestrator."""
    orchestrator = InboxOrchestrator(config)
    try:
        if args.set_key:
            orchestrator.set_credential(args.set_key)
            print("Settings saved successfully!")
            return 0

        if args.reset_usage:
            result = orchestrator.reset_cost_usage()
            print("Usage data reset" if result['reset'] else "No usage data to reset")
            return 0

        if args.usage:
            usage = orchestrator.get_cost_usage()['usage']
            formatter = UsageFormatter(args.format, config.user_timezone)
            print(formatter.format(usage, config.summarizer.model))
            return 0

        if args.story:
            story = await orchestrator.hn_client.fetch_story(args.story)
            if story is None:
                print(f"Story {args.story} not found")
                return 1
            if args.refresh:
                story = await orchestrator.refresh_story(story)
            session = BrowsingSession(orchestrator.store)
            session.filter = StoryFilter()
            session.set_stories([story])
            story, snapshot = await orchestrator.open_story(session, 0)
            return await _show_story(orchestrator, story, snapshot)

        session = BrowsingSession(orchestrator.store)
        if args.min_points is not None or args.min_comments is not None or args.time_range:
            settings = session.filter.to_dict()
            if args.min_points is not None:
                settings['minPoints'] = args.min_points
            if args.min_comments is not None:
                settings['minComments'] = args.min_comments
            if args.time_range:
                settings['timeRange'] = args.time_range
            session.set_filter(settings)

        stories = await orchestrator.load_stories(session)

        if args.open:
            index = args.open - 1
            if args.refresh and 0 <= index < len(stories):
                orchestrator.cache.invalidate(stories[index].id)
            story, snapshot = await orchestrator.open_story(session, index)
            return await _show_story(orchestrator, story, snapshot)

        if not stories:
            print("No stories match the current filters")
            return 0
        for index, story in enumerate(stories):
            print(orchestrator.formatter.format_story_line(index, story, session.is_read(story.id)))
        return 0

    except (HNInboxError, IndexError) as e:
        print(f"Error: {e}")
        return 1
    finally:
        await orchestrator.aclose()


def build_parser() -> argparse.ArgumentParser:
    """Command line options for the `hn-inbox` script."""
    parser = argparse.ArgumentParser(description='HN Inbox - Hacker News reader with AI summaries')
    parser.add_argument('--open', type=int, metavar='N', help='Open the Nth story of the filtered list')
    parser.add_argument('--story', type=int, metavar='ID', help='Open a story by its item id')
    parser.add_argument('--refresh', action='store_true', help='Ignore cached comments and summary')
    parser.add_argument('--min-points', type=int, help='Only list stories with at least this score')
    parser.add_argument('--min-comments', type=int, help='Only list stories with at least this many comments')
    parser.add_argument('--time-range', choices=list(Constants.TIME_RANGES), help='Only list recent stories')
    parser.add_argument('--usage', action='store_true', help='Show API usage and cost')
    parser.add_argument('--format', choices=['console', 'json'], default='console',
                        help='Output format for --usage')
    parser.add_argument('--reset-usage', action='store_true', help='Delete usage data for the current key')
    parser.add_argument('--set-key', metavar='KEY', help='Save a Claude API key')
    parser.add_argument('--quiet', action='store_true', help='Only log warnings and errors')
    return parser


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Load and validate configuration
    try:
        config = Config()
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 1

    level = logging.WARNING if args.quiet else getattr(logging, config.log_level.upper())
    setup_logger(log_file=config.log_file or None, level=level)

    return asyncio.run(run_cli(args, config))


if __name__ == '__main__':
    exit(main())
