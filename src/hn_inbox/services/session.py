"""Browsing session state: story list, filters, selection and read marks."""

import logging
import time
from typing import List, Optional, Set

from hn_inbox.core.constants import Constants
from hn_inbox.core.validators import FilterValidator
from hn_inbox.handlers.state_store import StateStore
from hn_inbox.models.hn_models import Story, StoryFilter

logger = logging.getLogger(__name__)


class BrowsingSession:
    """Explicit per-caller session context.

    Holds the loaded stories, the filtered order shown to the user, the
    selected position within that order, and which stories have been read.
    Read marks and filter settings persist through the StateStore.
    """

    def __init__(self, store: StateStore):
        """Initialize the session from persisted read marks and filters."""
        self.store = store
        self.stories: List[Story] = []
        self.filtered: List[Story] = []
        self.selected_index: Optional[int] = None
        self.read_ids: Set[int] = set(store.get(Constants.READ_STORIES_KEY) or [])
        self.filter = StoryFilter.from_dict(
            FilterValidator.normalize(store.get(Constants.FILTER_SETTINGS_KEY) or {})
        )

    def set_stories(self, stories: List[Story], now: Optional[float] = None) -> List[Story]:
        self.stories = list(stories)
        return self.apply_filters(now)

    def set_filter(self, settings: dict, now: Optional[float] = None) -> List[Story]:
        """Replace the filter (camelCase settings), persist it and re-filter."""
        normalized = FilterValidator.normalize(settings)
        self.filter = StoryFilter.from_dict(normalized)
        self.store.set(Constants.FILTER_SETTINGS_KEY, normalized)
        return self.apply_filters(now)

    def apply_filters(self, now: Optional[float] = None) -> List[Story]:
        """Recompute the visible order, keeping the selection if it survives."""
        now = time.time() if now is None else now
        selected = self.selected_story
        self.filtered = [story for story in self.stories if self.filter.matches(story, now)]

        self.selected_index = None
        if selected is not None:
            for index, story in enumerate(self.filtered):
                if story.id == selected.id:
                    self.selected_index = index
                    break

        logger.debug("Filtered %d of %d stories", len(self.filtered), len(self.stories))
        return self.filtered

    @property
    def selected_story(self) -> Optional[Story]:
        if self.selected_index is None or self.selected_index >= len(self.filtered):
            return None
        return self.filtered[self.selected_index]

    def select(self, index: int) -> Story:
        if index < 0 or index >= len(self.filtered):
            raise IndexError(f"No story at position {index}")
        self.selected_index = index
        return self.filtered[index]

    @property
    def next_index(self) -> Optional[int]:
        """Position after the selection, or None at the end of the list."""
        if self.selected_index is None:
            return 0 if self.filtered else None
        index = self.selected_index + 1
        return index if index < len(self.filtered) else None

    def is_read(self, story_id: int) -> bool:
        return story_id in self.read_ids

    def mark_as_read(self, story_id: int) -> None:
        if story_id in self.read_ids:
            return
        self.read_ids.add(story_id)
        self.store.set(Constants.READ_STORIES_KEY, sorted(self.read_ids))
