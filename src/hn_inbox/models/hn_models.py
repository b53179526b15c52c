"""Data models for Hacker News content."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hn_inbox.core.constants import Constants
from hn_inbox.core.errors import ParseError


@dataclass
class Item:
    """Raw record returned by the item store."""
    id: int
    type: str = ''
    by: str = ''
    text: str = ''
    time: int = 0
    kids: List[int] = field(default_factory=list)
    deleted: bool = False
    dead: bool = False
    title: str = ''
    url: Optional[str] = None
    score: int = 0
    descendants: int = 0

    @property
    def is_gone(self) -> bool:
        """Deleted or dead items are never shown."""
        return self.deleted or self.dead

    @classmethod
    def from_payload(cls, data: Any) -> 'Item':
        """Build an Item from decoded JSON, raising ParseError on bad shapes."""
        if not isinstance(data, dict):
            raise ParseError(f"Expected an item object, got {type(data).__name__}")
        item_id = data.get('id')
        if not isinstance(item_id, int) or isinstance(item_id, bool):
            raise ParseError(f"Item payload has no integer id: {item_id!r}")

        kids = data.get('kids') or []
        if not isinstance(kids, list):
            raise ParseError(f"Item {item_id} has malformed kids")

        try:
            return cls(
                id=item_id,
                type=data.get('type') or '',
                by=data.get('by') or '',
                text=data.get('text') or '',
                time=int(data.get('time') or 0),
                kids=[kid for kid in kids if isinstance(kid, int)],
                deleted=bool(data.get('deleted', False)),
                dead=bool(data.get('dead', False)),
                title=data.get('title') or '',
                url=data.get('url') or None,
                score=int(data.get('score') or 0),
                descendants=int(data.get('descendants') or 0),
            )
        except (TypeError, ValueError) as e:
            raise ParseError(f"Item {item_id} has malformed fields: {e}") from e


@dataclass(frozen=True)
class Story:
    """Represents a top-level Hacker News story."""
    id: int
    title: str
    author: str
    score: int
    comment_count: int
    created_at: int
    url: Optional[str] = None
    kids: tuple = ()

    @property
    def discussion_url(self) -> str:
        return Constants.HN_ITEM_URL.format(id=self.id)

    @classmethod
    def from_item(cls, item: Item) -> 'Story':
        """Create a Story from an item-store record."""
        return cls(
            id=item.id,
            title=item.title,
            author=item.by or '[deleted]',
            score=item.score,
            comment_count=item.descendants,
            created_at=item.time,
            url=item.url,
            kids=tuple(item.kids),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and envelopes."""
        return {
            'id': self.id,
            'title': self.title,
            'url': self.url,
            'by': self.author,
            'score': self.score,
            'descendants': self.comment_count,
            'time': self.created_at,
            'kids': list(self.kids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Story':
        """Create Story from dictionary."""
        return cls(
            id=data['id'],
            title=data.get('title', ''),
            author=data.get('by', '[deleted]'),
            score=data.get('score', 0),
            comment_count=data.get('descendants', 0),
            created_at=data.get('time', 0),
            url=data.get('url') or None,
            kids=tuple(data.get('kids', [])),
        )


@dataclass
class CommentNode:
    """One reply and its nested replies."""
    id: int
    author: str
    raw_text: str
    created_at: int
    replies: List['CommentNode'] = field(default_factory=list)

    @classmethod
    def from_item(cls, item: Item) -> 'CommentNode':
        """Create a reply-less node from an item-store record."""
        return cls(
            id=item.id,
            author=item.by,
            raw_text=item.text,
            created_at=item.time,
        )

    def count(self) -> int:
        """Number of nodes in this subtree, including this one."""
        return 1 + sum(reply.count() for reply in self.replies)

    def to_dict(self) -> dict:
        """Convert to the item-store style dictionary used in the tree cache."""
        return {
            'id': self.id,
            'by': self.author,
            'text': self.raw_text,
            'time': self.created_at,
            'replies': [reply.to_dict() for reply in self.replies],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CommentNode':
        """Create CommentNode from dictionary."""
        return cls(
            id=data['id'],
            author=data.get('by', ''),
            raw_text=data.get('text', ''),
            created_at=data.get('time', 0),
            replies=[cls.from_dict(reply) for reply in data.get('replies', [])],
        )


@dataclass
class StoryFilter:
    """Story list filter settings."""
    min_points: int = 0
    min_comments: int = 0
    time_range: str = 'all'

    def matches(self, story: Story, now: float) -> bool:
        """Check whether a story passes the filter at time `now` (epoch seconds)."""
        if story.score < self.min_points:
            return False
        if story.comment_count < self.min_comments:
            return False

        window = Constants.TIME_RANGES.get(self.time_range)
        if window is not None and now - story.created_at > window:
            return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'minPoints': self.min_points,
            'minComments': self.min_comments,
            'timeRange': self.time_range,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoryFilter':
        return cls(
            min_points=data.get('minPoints', 0),
            min_comments=data.get('minComments', 0),
            time_range=data.get('timeRange', 'all'),
        )
