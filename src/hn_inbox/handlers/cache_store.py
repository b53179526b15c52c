"""Dual-region cache for comment trees and summaries."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from hn_inbox.core.config import CacheConfig
from hn_inbox.core.constants import Constants
from hn_inbox.handlers.state_store import StateStore
from hn_inbox.models.ai_models import SummaryResult
from hn_inbox.models.hn_models import CommentNode

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with its creation time (epoch seconds)."""
    value: T
    created_at: float


@dataclass
class TreeSnapshot:
    """Tree-region value: the raw tree plus its pre-rendered text."""
    data: List[CommentNode]
    snapshot: str


class CacheRegion(Generic[T]):
    """One keyed region with optional TTL and size bound.

    Entries are mirrored into a StateStore key after every change. Reads never
    touch the store.
    """

    def __init__(self, name: str, store: StateStore, storage_key: str,
                 encode: Callable[[CacheEntry], Dict[str, Any]],
                 decode: Callable[[Dict[str, Any]], CacheEntry],
                 ttl_seconds: int = 0, max_entries: int = 0,
                 clock: Callable[[], float] = time.time):
        self.name = name
        self.store = store
        self.storage_key = storage_key
        self.encode = encode
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.clock = clock
        self._entries: Dict[int, CacheEntry] = {}

        for key, raw in (store.get(storage_key) or {}).items():
            try:
                self._entries[int(key)] = decode(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Dropping unreadable %s cache entry %s: %s", name, key, e)

    def _expired(self, entry: CacheEntry) -> bool:
        return bool(self.ttl_seconds) and self.clock() - entry.created_at > self.ttl_seconds

    def get(self, story_id: int) -> Optional[CacheEntry]:
        entry = self._entries.get(story_id)
        if entry is None:
            return None
        if self._expired(entry):
            logger.debug("%s cache entry for %s expired", self.name, story_id)
            self.delete(story_id)
            return None
        return entry

    def put(self, story_id: int, value: Any) -> CacheEntry:
        """Insert or silently overwrite an entry."""
        entry = CacheEntry(value=value, created_at=self.clock())
        self._entries[story_id] = entry
        self._evict()
        self._persist()
        return entry

    def delete(self, story_id: int) -> bool:
        if self._entries.pop(story_id, None) is None:
            return False
        self._persist()
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._persist()

    def __contains__(self, story_id: int) -> bool:
        return self.get(story_id) is not None

    def __len__(self) -> int:
        return sum(1 for entry in self._entries.values() if not self._expired(entry))

    def _evict(self) -> None:
        if not self.max_entries:
            return
        while len(self._entries) > self.max_entries:
            oldest = min(self._entries, key=lambda key: self._entries[key].created_at)
            del self._entries[oldest]
            logger.debug("Evicted %s cache entry %s", self.name, oldest)

    def _persist(self) -> None:
        self.store.set(self.storage_key, {
            str(key): self.encode(entry) for key, entry in self._entries.items()
        })


def _encode_tree(entry: CacheEntry) -> Dict[str, Any]:
    return {
        'data': [node.to_dict() for node in entry.value.data],
        'snapshot': entry.value.snapshot,
        'timestamp': entry.created_at,
    }


def _decode_tree(raw: Dict[str, Any]) -> CacheEntry:
    return CacheEntry(
        value=TreeSnapshot(
            data=[CommentNode.from_dict(node) for node in raw['data']],
            snapshot=raw.get('snapshot', ''),
        ),
        created_at=raw.get('timestamp', 0.0),
    )


def _encode_summary(entry: CacheEntry) -> Dict[str, Any]:
    data = entry.value.to_dict()
    data['timestamp'] = entry.created_at
    return data


def _decode_summary(raw: Dict[str, Any]) -> CacheEntry:
    return CacheEntry(value=SummaryResult.from_dict(raw), created_at=raw.get('timestamp', 0.0))


class CacheStore:
    """Tree region and summary region, both keyed by story id.

    Reads and writes hit the in-memory mirror synchronously; persistence is
    flushed asynchronously by the StateStore. There is no locking: concurrent
    writers for the same key race and the last write wins.
    """

    def __init__(self, store: StateStore, config: Optional[CacheConfig] = None,
                 clock: Callable[[], float] = time.time):
        """Initialize both regions, restoring whatever the store already holds."""
        config = config or CacheConfig()
        self.store = store
        self.trees: CacheRegion[TreeSnapshot] = CacheRegion(
            'tree', store, Constants.COMMENT_CACHE_KEY, _encode_tree, _decode_tree,
            config.ttl_seconds, config.max_entries, clock,
        )
        self.summaries: CacheRegion[SummaryResult] = CacheRegion(
            'summary', store, Constants.SUMMARY_CACHE_KEY, _encode_summary, _decode_summary,
            config.ttl_seconds, config.max_entries, clock,
        )

    def get_tree(self, story_id: int) -> Optional[TreeSnapshot]:
        entry = self.trees.get(story_id)
        return entry.value if entry else None

    def put_tree(self, story_id: int, tree: List[CommentNode], snapshot: str) -> None:
        self.trees.put(story_id, TreeSnapshot(data=tree, snapshot=snapshot))

    def has_tree(self, story_id: int) -> bool:
        return story_id in self.trees

    def get_summary(self, story_id: int) -> Optional[SummaryResult]:
        entry = self.summaries.get(story_id)
        return entry.value if entry else None

    def put_summary(self, story_id: int, summary: SummaryResult) -> None:
        self.summaries.put(story_id, summary)

    def has_summary(self, story_id: int) -> bool:
        return story_id in self.summaries

    def invalidate(self, story_id: int) -> None:
        """Drop both regions for a story, e.g. on a user-initiated refresh."""
        self.trees.delete(story_id)
        self.summaries.delete(story_id)

    def clear(self) -> None:
        self.trees.clear()
        self.summaries.clear()

    def stats(self) -> Dict[str, int]:
        return {'trees': len(self.trees), 'summaries': len(self.summaries)}
