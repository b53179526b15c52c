"""Tests for JSON-backed state persistence."""

import json

from hn_inbox.handlers.state_store import StateStore


class TestStateStore:

    def test_missing_file_starts_empty(self, tmp_path):
        store = StateStore(str(tmp_path / 'state.json'))
        assert store.get('readStories') is None
        assert store.get('readStories', []) == []

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / 'state.json'
        path.write_text('{not json')
        assert StateStore(str(path)).get('anything') is None

    def test_non_object_file_starts_empty(self, tmp_path):
        path = tmp_path / 'state.json'
        path.write_text('[1, 2]')
        assert StateStore(str(path)).get('anything') is None

    def test_sync_set_writes_immediately(self, tmp_path):
        path = tmp_path / 'nested' / 'state.json'
        store = StateStore(str(path))
        store.set('readStories', [1, 2])
        assert json.loads(path.read_text()) == {'readStories': [1, 2]}

    def test_delete(self, tmp_path):
        path = tmp_path / 'state.json'
        store = StateStore(str(path))
        store.set('a', 1)
        store.delete('a')
        store.delete('missing')
        assert json.loads(path.read_text()) == {}

    async def test_async_set_is_flushed(self, tmp_path):
        path = tmp_path / 'state.json'
        store = StateStore(str(path))
        store.set('a', 1)
        store.set('b', {'nested': True})
        await store.flush()
        assert json.loads(path.read_text()) == {'a': 1, 'b': {'nested': True}}

    async def test_reload_sees_flushed_state(self, tmp_path):
        path = str(tmp_path / 'state.json')
        store = StateStore(path)
        store.set('credential', 'sk-ant-x')
        await store.flush()
        assert StateStore(path).get('credential') == 'sk-ant-x'

    async def test_memory_only_store(self):
        store = StateStore(None)
        store.set('a', 1)
        await store.flush()
        assert store.get('a') == 1
