"""Data models for AI components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class InterestingComment:
    """A comment the summarizer called out."""
    author: str = ''
    snippet: str = ''
    reason: str = ''

    def to_dict(self) -> dict:
        return {'author': self.author, 'snippet': self.snippet, 'reason': self.reason}

    @classmethod
    def from_dict(cls, data: Any) -> 'InterestingComment':
        if not isinstance(data, dict):
            return cls(snippet=str(data))
        return cls(
            author=str(data.get('author') or ''),
            snippet=str(data.get('snippet') or ''),
            reason=str(data.get('reason') or ''),
        )


@dataclass
class SummaryResult:
    """Summary of a story's article and discussion."""
    discussion_summary: str = ''
    interesting_comments: List[InterestingComment] = field(default_factory=list)
    article_summary: Optional[str] = None

    def merge(self, other: 'SummaryResult') -> 'SummaryResult':
        """Field union: take other's article summary, keep our discussion fields."""
        return SummaryResult(
            discussion_summary=self.discussion_summary,
            interesting_comments=list(self.interesting_comments),
            article_summary=other.article_summary if other.article_summary is not None
            else self.article_summary,
        )

    def to_dict(self) -> dict:
        """Convert to the persisted camelCase shape; omits a missing article summary."""
        data = {}
        if self.article_summary is not None:
            data['articleSummary'] = self.article_summary
        data['discussionSummary'] = self.discussion_summary
        data['interestingComments'] = [c.to_dict() for c in self.interesting_comments]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'SummaryResult':
        """Create SummaryResult from dictionary."""
        comments = data.get('interestingComments') or []
        if not isinstance(comments, list):
            comments = []
        article = data.get('articleSummary')
        return cls(
            discussion_summary=str(data.get('discussionSummary') or ''),
            interesting_comments=[InterestingComment.from_dict(c) for c in comments],
            article_summary=str(article) if article is not None else None,
        )


@dataclass
class TokenUsage:
    """Token usage reported by the summarizer."""
    input: int = 0
    output: int = 0
    cache_write: int = 0
    cache_read: int = 0

    @property
    def total(self) -> int:
        return self.input + self.output + self.cache_write + self.cache_read

    @classmethod
    def from_api(cls, usage: Any) -> 'TokenUsage':
        """Read an API usage block (dict or SDK object); missing fields count as 0."""
        if usage is None:
            return cls()

        def read(name: str) -> int:
            if isinstance(usage, dict):
                value = usage.get(name)
            else:
                value = getattr(usage, name, None)
            return int(value or 0)

        return cls(
            input=read('input_tokens'),
            output=read('output_tokens'),
            cache_write=read('cache_creation_input_tokens'),
            cache_read=read('cache_read_input_tokens'),
        )

    def to_dict(self) -> dict:
        return {
            'input': self.input,
            'output': self.output,
            'cacheWrite': self.cache_write,
            'cacheRead': self.cache_read,
            'total': self.total,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TokenUsage':
        return cls(
            input=data.get('input', 0),
            output=data.get('output', 0),
            cache_write=data.get('cacheWrite', 0),
            cache_read=data.get('cacheRead', 0),
        )


@dataclass
class CostBreakdown:
    """Dollar cost per token category."""
    input: float = 0.0
    output: float = 0.0
    cache_write: float = 0.0
    cache_read: float = 0.0

    @property
    def total(self) -> float:
        return self.input + self.output + self.cache_write + self.cache_read

    def to_dict(self) -> dict:
        return {
            'input': self.input,
            'output': self.output,
            'cacheWrite': self.cache_write,
            'cacheRead': self.cache_read,
            'total': self.total,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CostBreakdown':
        return cls(
            input=data.get('input', 0.0),
            output=data.get('output', 0.0),
            cache_write=data.get('cacheWrite', 0.0),
            cache_read=data.get('cacheRead', 0.0),
        )


@dataclass
class UsageRecord:
    """One tracked summarizer request."""
    request_type: str
    story_id: Optional[int]
    model: str
    tokens: TokenUsage
    cost: CostBreakdown
    timestamp: float

    def to_dict(self) -> dict:
        return {
            'requestType': self.request_type,
            'storyId': self.story_id,
            'model': self.model,
            'tokens': self.tokens.to_dict(),
            'costs': self.cost.to_dict(),
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UsageRecord':
        return cls(
            request_type=data.get('requestType', 'unknown'),
            story_id=data.get('storyId'),
            model=data.get('model', ''),
            tokens=TokenUsage.from_dict(data.get('tokens', {})),
            cost=CostBreakdown.from_dict(data.get('costs', {})),
            timestamp=data.get('timestamp', 0.0),
        )


@dataclass
class Ledger:
    """Running usage totals for one credential."""
    total_cost: float = 0.0
    total_tokens: int = 0
    requests: List[UsageRecord] = field(default_factory=list)
    first_request: Optional[float] = None
    last_request: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            'totalCost': self.total_cost,
            'totalTokens': self.total_tokens,
            'requests': [record.to_dict() for record in self.requests],
            'firstRequest': self.first_request,
            'lastRequest': self.last_request,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Ledger':
        return cls(
            total_cost=data.get('totalCost', 0.0),
            total_tokens=data.get('totalTokens', 0),
            requests=[UsageRecord.from_dict(r) for r in data.get('requests', [])],
            first_request=data.get('firstRequest'),
            last_request=data.get('lastRequest'),
        )


class SummaryState(Enum):
    """Per-story summarization progress."""
    IDLE = "idle"
    LOADING_DISCUSSION = "loading_discussion"
    DISCUSSION_READY = "discussion_ready"
    LOADING_ARTICLE = "loading_article"
    READY = "ready"
    ERROR = "error"


class ParseKind(Enum):
    """Whether a summarizer reply was real structured output or a fallback."""
    PARSED = "parsed"
    DEGRADED = "degraded"


@dataclass
class ParseOutcome:
    """Tagged result of parsing a summarizer reply."""
    kind: ParseKind
    data: Dict[str, Any]
    tier: str  # 'strict', 'fenced' or 'heuristic'

    @property
    def degraded(self) -> bool:
        return self.kind is ParseKind.DEGRADED


@dataclass
class SummaryUpdate:
    """One step of progressive summarization."""
    story_id: int
    state: SummaryState
    result: Optional[SummaryResult] = None
    error: Optional[str] = None
    from_cache: bool = False
    degraded: bool = False

    @property
    def is_final(self) -> bool:
        return self.state in (SummaryState.READY, SummaryState.ERROR)
