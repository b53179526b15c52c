"""Tests for comment tree fetching."""

import httpx
import pytest

from hn_inbox.clients.hn_client import HackerNewsClient
from hn_inbox.core.config import HackerNewsConfig
from hn_inbox.services.tree_fetcher import TreeFetcher

from fakes import FakeHNClient, comment


def ids(nodes):
    return [node.id for node in nodes]


class TestFetchTree:

    async def test_preserves_sibling_order_at_every_level(self):
        items = {
            10: comment(10, kids=[13, 11, 12]),
            20: comment(20),
            11: comment(11), 12: comment(12), 13: comment(13, kids=[14]),
            14: comment(14),
        }
        # Earlier siblings answer last
        client = FakeHNClient(items, delays={20: 0.02, 13: 0.02, 11: 0.01})
        tree = await TreeFetcher(client).fetch_tree([20, 10])

        assert ids(tree) == [20, 10]
        assert ids(tree[1].replies) == [13, 11, 12]
        assert ids(tree[1].replies[0].replies) == [14]

    async def test_drops_deleted_and_dead_with_their_subtrees(self):
        items = {
            1: comment(1, kids=[2, 3]),
            2: comment(2, kids=[5], deleted=True),
            3: comment(3),
            4: comment(4, dead=True),
            5: comment(5),
        }
        client = FakeHNClient(items)
        tree = await TreeFetcher(client).fetch_tree([1, 4])

        assert ids(tree) == [1]
        assert ids(tree[0].replies) == [3]
        assert 5 not in client.requested

    async def test_failed_and_missing_items_are_dropped(self):
        items = {1: comment(1, kids=[2, 3, 4]), 2: comment(2), 3: comment(3)}
        client = FakeHNClient(items, failing={3})
        tree = await TreeFetcher(client).fetch_tree([1, 99])

        assert ids(tree) == [1]
        assert ids(tree[0].replies) == [2]

    async def test_undecodable_item_does_not_abort_siblings(self):
        def handler(request):
            item_id = int(request.url.path.rsplit('/', 1)[-1].split('.')[0])
            if item_id == 2:
                return httpx.Response(200, headers={'Content-Encoding': 'gzip'},
                                      content=b'{"id": 2}')
            return httpx.Response(200, json=comment(item_id))

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler),
                                 base_url='https://hn.test/v0')
        client = HackerNewsClient(HackerNewsConfig(api_base='https://hn.test/v0'), http)

        tree = await TreeFetcher(client).fetch_tree([1, 2, 3])

        assert ids(tree) == [1, 3]

    async def test_empty_root_list(self):
        client = FakeHNClient({})
        assert await TreeFetcher(client).fetch_tree([]) == []
        assert client.requested == []

    async def test_concurrency_is_bounded(self):
        items = {i: comment(i) for i in range(1, 31)}
        client = FakeHNClient(items, delay=0.01)
        tree = await TreeFetcher(client, max_concurrency=4).fetch_tree(list(items))

        assert len(tree) == 30
        assert client.max_active <= 4

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ValueError):
            TreeFetcher(FakeHNClient({}), max_concurrency=0)


class TestFetchItems:

    async def test_positions_match_ids(self):
        items = {1: comment(1), 3: comment(3)}
        client = FakeHNClient(items, failing={2})
        result = await TreeFetcher(client).fetch_items([3, 2, 1])

        assert [item.id if item else None for item in result] == [3, None, 1]
