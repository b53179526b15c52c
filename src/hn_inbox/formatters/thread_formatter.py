"""Text formatting for stories and comment trees."""

import html
import re
import time
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

import pytz

from hn_inbox.core.constants import Constants
from hn_inbox.models.ai_models import SummaryResult
from hn_inbox.models.hn_models import CommentNode, Story

_PARAGRAPH = re.compile(r'<p>', re.IGNORECASE)
_TAG = re.compile(r'<[^>]+>')


def strip_html(text: str) -> str:
    """Turn comment markup into plain text: paragraphs become newlines, tags go, entities decode."""
    text = _PARAGRAPH.sub('\n', text or '')
    text = _TAG.sub('', text)
    return html.unescape(text).strip()


def flatten_comments(comments: List[CommentNode], depth: int = 0,
                     max_depth: int = Constants.MAX_FLATTEN_DEPTH) -> List[str]:
    """Flatten a tree into indented `[author]: text` lines, depth-first.

    Replies below `max_depth` are left out.
    """
    flattened = []
    for comment in comments or []:
        if comment is None:
            continue

        indent = '  ' * depth
        flattened.append(f"{indent}[{comment.author}]: {strip_html(comment.raw_text)}")

        if depth < max_depth and comment.replies:
            flattened.extend(flatten_comments(comment.replies, depth + 1, max_depth))

    return flattened


def format_time_ago(timestamp: float, now: Optional[float] = None) -> str:
    """Compact relative age such as `42s ago`, `5m ago`, `3h ago`, `2d ago`."""
    now = time.time() if now is None else now
    seconds = max(0, int(now - timestamp))

    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def story_domain(story: Story) -> str:
    """Host of the story's link, or the HN host for text posts."""
    if not story.url:
        return 'news.ycombinator.com'
    host = urlparse(story.url).hostname or ''
    return host[4:] if host.startswith('www.') else host


class ThreadFormatter:
    """Renders stories and comment trees as plain text in the user's timezone."""

    def __init__(self, timezone: str = 'UTC'):
        """Initialize thread formatter."""
        self.timezone = timezone
        self.user_timezone = pytz.timezone(timezone)

    def format_timestamp(self, timestamp: float) -> str:
        local = datetime.fromtimestamp(timestamp, self.user_timezone)
        return local.strftime('%Y-%m-%d %H:%M %Z')

    def format_story_line(self, index: int, story: Story, read: bool = False,
                          now: Optional[float] = None) -> str:
        """One line of the story list."""
        marker = ' ' if read else '*'
        return (f"{marker}{index + 1:>3}. {story.title} "
                f"({story.score} points, {story.comment_count} comments, "
                f"{story_domain(story)}, {format_time_ago(story.created_at, now)})")

    def format_story_header(self, story: Story) -> str:
        lines = [
            story.title,
            f"{story.score} points by {story.author} | {self.format_timestamp(story.created_at)}"
            f" | {story_domain(story)}",
        ]
        if story.url:
            lines.append(story.url)
        lines.append(story.discussion_url)
        return '\n'.join(lines)

    def render_snapshot(self, tree: List[CommentNode]) -> str:
        """Pre-render a whole tree, every depth included, for the tree cache."""
        if not tree:
            return "No comments yet"

        lines = []

        def walk(nodes: List[CommentNode], depth: int) -> None:
            for node in nodes:
                indent = '    ' * depth
                lines.append(f"{indent}{node.author} | {self.format_timestamp(node.created_at)}")
                for text_line in strip_html(node.raw_text).splitlines():
                    if text_line.strip():
                        lines.append(f"{indent}  {text_line.strip()}")
                lines.append('')
                walk(node.replies, depth + 1)

        walk(tree, 0)
        return '\n'.join(lines).rstrip()

    @staticmethod
    def format_summary(result: SummaryResult) -> str:
        """Render a summary for the terminal; sections missing from `result` are skipped."""
        sections = []
        if result.article_summary:
            sections.append(f"Article\n  {result.article_summary}")
        sections.append(f"Discussion\n  {result.discussion_summary}")
        if result.interesting_comments:
            lines = ["Interesting comments"]
            for comment in result.interesting_comments:
                lines.append(f"  [{comment.author}] {comment.snippet}")
                if comment.reason:
                    lines.append(f"      {comment.reason}")
            sections.append('\n'.join(lines))
        return '\n\n'.join(sections)
