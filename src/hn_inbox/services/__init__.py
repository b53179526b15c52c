"""Service layer for business logic."""

from .tree_fetcher import TreeFetcher
from .response_parser import ResponseParser
from .summarization_service import SummaryPipeline, SummaryRun, limit_comments
from .prefetcher import Prefetcher
from .session import BrowsingSession

__all__ = [
    'TreeFetcher', 'ResponseParser', 'SummaryPipeline', 'SummaryRun', 'limit_comments',
    'Prefetcher', 'BrowsingSession'
]
