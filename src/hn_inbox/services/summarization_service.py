"""AI summarization pipeline for stories and their discussions."""

import logging
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple

from hn_inbox.core.config import SummarizerConfig
from hn_inbox.core.constants import Constants
from hn_inbox.core.errors import ConfigError, HNInboxError
from hn_inbox.formatters.thread_formatter import flatten_comments
from hn_inbox.handlers.cache_store import CacheStore
from hn_inbox.handlers.cost_tracker import CostLedger
from hn_inbox.models.ai_models import (
    InterestingComment, ParseOutcome, SummaryResult, SummaryState, SummaryUpdate
)
from hn_inbox.models.hn_models import CommentNode, Story
from hn_inbox.services.response_parser import ResponseParser

logger = logging.getLogger(__name__)


def limit_comments(comments: List[CommentNode],
                   max_count: int = Constants.MAX_DISCUSSION_COMMENTS) -> List[CommentNode]:
    """Keep the first `max_count` comments in reading order (depth-first).

    Returns pruned copies: every kept comment carries only its kept replies,
    so no subtree is rendered twice. The input tree is not modified.
    """
    count = 0

    def collect(nodes: List[CommentNode]) -> List[CommentNode]:
        nonlocal count
        kept = []
        for node in nodes:
            if count >= max_count:
                break
            count += 1
            pruned = CommentNode(node.id, node.author, node.raw_text, node.created_at)
            pruned.replies = collect(node.replies)
            kept.append(pruned)
        return kept

    return collect(comments)


def comments_text(comments: List[CommentNode], limit: bool = True) -> str:
    """Flatten a tree into the prompt's discussion block."""
    if limit:
        comments = limit_comments(comments)
    text = Constants.COMMENT_SEPARATOR.join(flatten_comments(comments))
    return text[:Constants.COMMENTS_CHAR_LIMIT]


def build_discussion_prompt(story: Story, discussion: str) -> str:
    """Prompt for the discussion-only stage."""
    source = f"URL: {story.url}" if story.url else "Discussion-only post"
    return f"""You are summarizing a Hacker News discussion. Return ONLY a JSON object in this format:

{{
  "discussionSummary": "2-3 sentence summary of the main discussion themes",
  "interestingComments": [
    {{
      "author": "username",
      "snippet": "First ~100 chars of comment",
      "reason": "One sentence why it's interesting"
    }}
  ]
}}

Story: {story.title}
{source}

HN Comments ({story.comment_count} total):
{discussion}

Provide:
1. 2-3 sentence summary of main discussion themes
2. 3-5 most interesting/insightful comments with reasons

Return ONLY the JSON, no other text."""


def build_article_prompt(story: Story, article_content: str) -> str:
    """Prompt for the article-only stage."""
    return f"""Summarize this article in 2-3 sentences. Return ONLY a JSON object:

{{
  "articleSummary": "2-3 sentence summary of the article"
}}

Article Title: {story.title}
Article URL: {story.url}

Article Content:
{article_content[:Constants.ARTICLE_CHAR_LIMIT]}

Return ONLY the JSON, no other text."""


def build_summary_prompt(story: Story, article_content: str, discussion: str) -> str:
    """Prompt for the combined single-call summary."""
    has_article = len(article_content or '') > Constants.MIN_ARTICLE_CHARS
    source = f"Article URL: {story.url}" if story.url else \
        "No article URL (Ask HN, Show HN, or discussion)"
    article_block = f"ARTICLE CONTENT:\n{article_content[:Constants.ARTICLE_CHAR_LIMIT]}\n\n" \
        if has_article else ''
    topic = 'the article content' if has_article else 'the discussion topic'

    return f"""You are helping summarize a Hacker News discussion. Please provide a structured summary in the following JSON format:

{{
  "articleSummary": "2-3 sentence summary of the article content",
  "discussionSummary": "2-3 sentence summary of the overall discussion themes",
  "interestingComments": [
    {{
      "author": "username",
      "snippet": "First ~100 chars of the comment",
      "reason": "One sentence explaining why this comment is interesting"
    }}
  ]
}}

Story Title: {story.title}
{source}

{article_block}HACKER NEWS DISCUSSION ({story.comment_count} comments):
{discussion}

Please analyze this and provide:
1. A 2-3 sentence summary of {topic}
2. A 2-3 sentence summary of the main themes in the HN discussion
3. 3-5 interesting/insightful comments with author names and reasons why they're noteworthy (look for: novel insights, expert perspectives, counterarguments, useful resources, or entertaining observations)

Return ONLY the JSON object, no other text."""


class SummaryRun:
    """State machine for one summarization of one story."""

    TRANSITIONS = {
        SummaryState.IDLE: {SummaryState.LOADING_DISCUSSION, SummaryState.READY, SummaryState.ERROR},
        SummaryState.LOADING_DISCUSSION: {SummaryState.DISCUSSION_READY, SummaryState.READY,
                                          SummaryState.ERROR},
        SummaryState.DISCUSSION_READY: {SummaryState.LOADING_ARTICLE},
        SummaryState.LOADING_ARTICLE: {SummaryState.READY, SummaryState.ERROR},
        SummaryState.READY: set(),
        SummaryState.ERROR: set(),
    }

    def __init__(self, story_id: int):
        self.story_id = story_id
        self.state = SummaryState.IDLE

    def advance(self, new_state: SummaryState) -> SummaryState:
        if new_state not in self.TRANSITIONS[self.state]:
            raise ValueError(
                f"Illegal summary transition for story {self.story_id}: "
                f"{self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        return new_state


class SummaryPipeline:
    """Two-stage progressive summarizer: discussion first, then the article.

    The summarizer is any object with an async
    `complete(prompt, api_key=..., max_tokens=...)` returning text and usage;
    the reader any object with an async `fetch_article(url)`.
    """

    def __init__(self, summarizer, reader, cache: CacheStore, ledger: CostLedger,
                 config: Optional[SummarizerConfig] = None,
                 credential_provider: Callable[[], Optional[str]] = lambda: None):
        """Initialize the pipeline with its injected collaborators."""
        self.summarizer = summarizer
        self.reader = reader
        self.cache = cache
        self.ledger = ledger
        self.config = config or SummarizerConfig()
        self.credential_provider = credential_provider
        self.parser = ResponseParser()
        self._runs: Dict[int, SummaryRun] = {}

    def state_of(self, story_id: int) -> SummaryState:
        """State of the most recent run for a story."""
        run = self._runs.get(story_id)
        return run.state if run else SummaryState.IDLE

    def _resolve_credential(self, credential: Optional[str]) -> str:
        api_key = credential or self.credential_provider()
        if not api_key:
            raise ConfigError(Constants.NO_API_KEY_MESSAGE)
        return api_key

    async def _discussion_stage(self, story: Story, tree: List[CommentNode],
                                api_key: str) -> Tuple[SummaryResult, ParseOutcome]:
        prompt = build_discussion_prompt(story, comments_text(tree))
        response = await self.summarizer.complete(
            prompt, api_key=api_key, max_tokens=self.config.discussion_max_tokens
        )
        self.ledger.track(response.usage, 'discussion_summary', story.id, credential=api_key)

        outcome = self.parser.parse(
            response.text, 'discussionSummary', Constants.DISCUSSION_FALLBACK,
            {'interestingComments': []},
        )
        comments = outcome.data.get('interestingComments')
        result = SummaryResult(
            discussion_summary=outcome.data['discussionSummary'],
            interesting_comments=[InterestingComment.from_dict(c) for c in comments]
            if isinstance(comments, list) else [],
        )
        return result, outcome

    async def _article_stage(self, story: Story, api_key: str) -> Tuple[SummaryResult, ParseOutcome]:
        article_content = await self.reader.fetch_article(story.url)
        prompt = build_article_prompt(story, article_content)
        response = await self.summarizer.complete(
            prompt, api_key=api_key, max_tokens=self.config.article_max_tokens
        )
        self.ledger.track(response.usage, 'article_summary', story.id, credential=api_key)

        outcome = self.parser.parse(response.text, 'articleSummary', Constants.ARTICLE_FALLBACK)
        return SummaryResult(article_summary=outcome.data['articleSummary']), outcome

    async def summarize(self, story: Story, tree: List[CommentNode],
                        credential: Optional[str] = None) -> AsyncIterator[SummaryUpdate]:
        """Yield progressive summary updates, ending in `ready` or `error`.

        A cached summary short-circuits both stages. The final result is
        written to the cache; errors never are.
        """
        run = SummaryRun(story.id)
        self._runs[story.id] = run

        cached = self.cache.get_summary(story.id)
        if cached is not None:
            run.advance(SummaryState.READY)
            yield SummaryUpdate(story.id, SummaryState.READY, cached, from_cache=True)
            return

        try:
            api_key = self._resolve_credential(credential)
        except ConfigError as e:
            run.advance(SummaryState.ERROR)
            yield SummaryUpdate(story.id, SummaryState.ERROR, error=str(e))
            return

        run.advance(SummaryState.LOADING_DISCUSSION)
        yield SummaryUpdate(story.id, SummaryState.LOADING_DISCUSSION)

        try:
            discussion, outcome = await self._discussion_stage(story, tree, api_key)
        except HNInboxError as e:
            logger.error("Discussion summary failed for story %s: %s", story.id, e)
            run.advance(SummaryState.ERROR)
            yield SummaryUpdate(story.id, SummaryState.ERROR, error=str(e))
            return

        if not story.url:
            self.cache.put_summary(story.id, discussion)
            run.advance(SummaryState.READY)
            yield SummaryUpdate(story.id, SummaryState.READY, discussion, degraded=outcome.degraded)
            return

        run.advance(SummaryState.DISCUSSION_READY)
        yield SummaryUpdate(story.id, SummaryState.DISCUSSION_READY, discussion,
                            degraded=outcome.degraded)

        run.advance(SummaryState.LOADING_ARTICLE)
        yield SummaryUpdate(story.id, SummaryState.LOADING_ARTICLE, discussion)

        try:
            article, article_outcome = await self._article_stage(story, api_key)
        except HNInboxError as e:
            logger.error("Article summary failed for story %s: %s", story.id, e)
            run.advance(SummaryState.ERROR)
            yield SummaryUpdate(story.id, SummaryState.ERROR, discussion, error=str(e))
            return

        final = discussion.merge(article)
        self.cache.put_summary(story.id, final)
        run.advance(SummaryState.READY)
        yield SummaryUpdate(story.id, SummaryState.READY, final,
                            degraded=outcome.degraded or article_outcome.degraded)

    async def run(self, story: Story, tree: List[CommentNode],
                  credential: Optional[str] = None) -> SummaryUpdate:
        """Drain `summarize` and return its final update."""
        final = None
        async for update in self.summarize(story, tree, credential):
            final = update
        return final

    async def generate_discussion_summary(self, story: Story, tree: List[CommentNode],
                                          credential: Optional[str] = None) -> SummaryResult:
        """Discussion stage on its own; not cached."""
        api_key = self._resolve_credential(credential)
        result, _ = await self._discussion_stage(story, tree, api_key)
        return result

    async def generate_article_summary(self, story: Story,
                                       credential: Optional[str] = None) -> SummaryResult:
        """Article stage on its own; not cached."""
        if not story.url:
            raise ValueError("No article URL")
        api_key = self._resolve_credential(credential)
        result, _ = await self._article_stage(story, api_key)
        return result

    async def generate_summary(self, story: Story, tree: List[CommentNode],
                               credential: Optional[str] = None) -> SummaryResult:
        """Single combined call covering article and discussion; result is cached."""
        cached = self.cache.get_summary(story.id)
        if cached is not None:
            return cached

        api_key = self._resolve_credential(credential)

        article_content = ''
        if story.url:
            try:
                article_content = await self.reader.fetch_article(story.url)
            except HNInboxError as e:
                logger.warning("Continuing without article for story %s: %s", story.id, e)

        logger.info("Generating summary for story: %s - %s", story.id, story.title)
        prompt = build_summary_prompt(story, article_content, comments_text(tree, limit=False))
        response = await self.summarizer.complete(
            prompt, api_key=api_key, max_tokens=self.config.combined_max_tokens
        )
        self.ledger.track(response.usage, 'full_summary', story.id, credential=api_key)

        outcome = self.parser.parse(
            response.text, 'discussionSummary', Constants.DISCUSSION_FALLBACK,
            {'interestingComments': []},
        )
        if outcome.degraded:
            # An unparseable combined reply keeps its first line as the article summary
            outcome.data['articleSummary'] = (
                self.parser.first_line(response.text) or Constants.ARTICLE_FALLBACK
            )
            outcome.data['discussionSummary'] = Constants.DISCUSSION_FALLBACK
        result = SummaryResult.from_dict(outcome.data)
        if not story.url:
            result.article_summary = None

        self.cache.put_summary(story.id, result)
        return result
