"""Plain-text formatting for threads and usage reports."""

from .thread_formatter import (
    ThreadFormatter, strip_html, flatten_comments, format_time_ago, story_domain
)
from .usage_formatter import UsageFormatter, format_cost, format_tokens

__all__ = [
    'ThreadFormatter', 'strip_html', 'flatten_comments', 'format_time_ago', 'story_domain',
    'UsageFormatter', 'format_cost', 'format_tokens'
]
