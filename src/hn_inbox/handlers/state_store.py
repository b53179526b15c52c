"""Persisted key/value state backed by a JSON file."""

import asyncio
import copy
import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class StateStore:
    """In-memory state mirrored to a JSON file.

    The in-memory dict is authoritative for the running session. Writes are
    flushed in a worker thread when an event loop is running and are not
    guaranteed to have reached disk when `set` returns; `flush()` waits.
    """

    def __init__(self, state_file: Optional[str]):
        """Initialize the store; `state_file=None` keeps state in memory only."""
        self.state_file = state_file
        self._state: Dict[str, Any] = self._load()
        self._flush_lock: Optional[asyncio.Lock] = None
        self._pending: Optional[asyncio.Task] = None
        self._dirty = False

    def _load(self) -> Dict[str, Any]:
        """Load state from file, starting empty when missing or unreadable."""
        if not self.state_file or not os.path.exists(self.state_file):
            return {}
        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not load state from %s, starting fresh: %s", self.state_file, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("State file %s does not hold an object, starting fresh", self.state_file)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._state.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Update a key and schedule persistence."""
        self._state[key] = value
        self._schedule_flush()

    def delete(self, key: str) -> None:
        if key in self._state:
            del self._state[key]
            self._schedule_flush()

    def _schedule_flush(self) -> None:
        self._dirty = True
        if not self.state_file:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(self._snapshot())
            return
        if self._pending is None or self._pending.done():
            self._pending = loop.create_task(self._drain())

    def _snapshot(self) -> Dict[str, Any]:
        self._dirty = False
        return copy.deepcopy(self._state)

    def _write(self, data: Dict[str, Any]) -> None:
        """Write atomically through a temp file."""
        tmp_path = self.state_file + '.tmp'
        try:
            directory = os.path.dirname(self.state_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.state_file)
        except OSError as e:
            logger.error("Error saving state to %s: %s", self.state_file, e)

    async def flush(self) -> None:
        """Persist all pending changes, including a background flush in progress."""
        if not self.state_file:
            return
        if self._pending is not None:
            await self._pending
        await self._drain()

    async def _drain(self) -> None:
        if self._flush_lock is None:
            self._flush_lock = asyncio.Lock()
        async with self._flush_lock:
            while self._dirty:
                await asyncio.to_thread(self._write, self._snapshot())
