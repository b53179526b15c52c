"""Clients for external services."""

from .hn_client import HackerNewsClient
from .reader_client import ArticleReaderClient
from .claude_client import ClaudeClient, SummarizerResponse

__all__ = ['HackerNewsClient', 'ArticleReaderClient', 'ClaudeClient', 'SummarizerResponse']
