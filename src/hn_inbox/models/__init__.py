"""Data models for the application."""

from .hn_models import Item, Story, CommentNode, StoryFilter
from .ai_models import (
    InterestingComment, SummaryResult, TokenUsage, CostBreakdown, UsageRecord, Ledger,
    SummaryState, ParseKind, ParseOutcome, SummaryUpdate
)

__all__ = [
    'Item', 'Story', 'CommentNode', 'StoryFilter',
    'InterestingComment', 'SummaryResult', 'TokenUsage', 'CostBreakdown', 'UsageRecord',
    'Ledger', 'SummaryState', 'ParseKind', 'ParseOutcome', 'SummaryUpdate'
]
