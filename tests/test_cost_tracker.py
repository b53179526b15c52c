"""Tests for cost calculation and the usage ledger."""

import pytest

from hn_inbox.core.constants import Constants
from hn_inbox.handlers.cost_tracker import CostLedger, calculate_cost, fingerprint, get_pricing
from hn_inbox.models.ai_models import TokenUsage

KEY = "sk-ant-REDACTED"


class TestCostCalculation:

    def test_one_million_input_tokens_cost_one_dollar(self):
        cost = calculate_cost(TokenUsage(input=1_000_000))
        assert cost.input == pytest.approx(1.00)
        assert cost.total == pytest.approx(1.00)

    def test_each_category_priced_separately(self):
        cost = calculate_cost(TokenUsage(input=1000, output=2000, cache_write=4000, cache_read=10000))
        assert cost.input == pytest.approx(0.001)
        assert cost.output == pytest.approx(0.010)
        assert cost.cache_write == pytest.approx(0.005)
        assert cost.cache_read == pytest.approx(0.001)
        assert cost.total == pytest.approx(0.017)

    def test_unknown_model_is_rejected(self):
        with pytest.raises(ValueError, match="Unsupported model"):
            get_pricing('gpt-4')
        with pytest.raises(ValueError):
            CostLedger(None, model='gpt-4')

    def test_usage_from_sdk_style_object(self):
        class Usage:
            input_tokens = 10
            output_tokens = 5
            cache_creation_input_tokens = None

        usage = TokenUsage.from_api(Usage())
        assert (usage.input, usage.output, usage.cache_write, usage.cache_read) == (10, 5, 0, 0)
        assert usage.total == 15


class TestFingerprint:

    def test_length_and_suffix(self):
        assert fingerprint(KEY) == "key_29_ijklmnop"
        assert fingerprint("sk-ant-12345678") == "key_15_12345678"


class TestCostLedger:

    def test_track_accumulates(self, ledger, clock):
        ledger.track(TokenUsage(input=1_000_000), 'discussion_summary', 1, credential=KEY)
        clock.advance(60)
        ledger.track(TokenUsage(output=200_000), 'article_summary', 1, credential=KEY)

        usage = ledger.current_usage(KEY)
        assert usage['totalCost'] == pytest.approx(2.00)
        assert usage['totalTokens'] == 1_200_000
        assert usage['requestCount'] == 2
        assert usage['avgCostPerRequest'] == pytest.approx(1.00)
        assert usage['lastRequest'] - usage['firstRequest'] == 60

    def test_history_capped_at_100(self, ledger, clock):
        for story_id in range(101):
            ledger.track(TokenUsage(input=10), 'discussion_summary', story_id, credential=KEY)
            clock.advance(1)

        ledger_data = ledger.get_ledger(KEY)
        assert len(ledger_data.requests) == Constants.MAX_LEDGER_REQUESTS
        assert ledger_data.requests[0].story_id == 1
        assert ledger_data.requests[-1].story_id == 100
        # Totals keep counting past the cap
        assert ledger_data.total_tokens == 1010

    def test_recent_requests_are_last_ten(self, ledger):
        for story_id in range(15):
            ledger.track(TokenUsage(input=1), 'article_summary', story_id, credential=KEY)
        recent = ledger.current_usage(KEY)['recentRequests']
        assert [r['storyId'] for r in recent] == list(range(5, 15))

    def test_ledgers_are_per_credential(self, ledger):
        ledger.track(TokenUsage(input=100), credential=KEY)
        assert ledger.current_usage("sk-ant-someone-else")['requestCount'] == 0

    def test_falls_back_to_stored_credential(self, ledger, store):
        store.set(Constants.CREDENTIAL_KEY, KEY)
        record = ledger.track({'input_tokens': 50, 'output_tokens': 5}, 'full_summary', 3)
        assert record.tokens.total == 55
        assert ledger.current_usage(KEY)['requestCount'] == 1

    def test_without_credential_nothing_is_tracked(self, ledger, store):
        assert ledger.track(TokenUsage(input=100)) is None
        assert store.get(Constants.COST_TRACKING_KEY) is None

    def test_empty_usage_is_zeroed(self, ledger):
        assert ledger.current_usage(KEY) == {
            'totalCost': 0.0,
            'totalTokens': 0,
            'requestCount': 0,
            'avgCostPerRequest': 0.0,
            'recentRequests': [],
        }

    def test_reset(self, ledger):
        ledger.track(TokenUsage(input=100), credential=KEY)
        assert ledger.reset(KEY) is True
        assert ledger.current_usage(KEY)['requestCount'] == 0
        assert ledger.reset(KEY) is False

    def test_credential_is_not_persisted(self, ledger, store):
        ledger.track(TokenUsage(input=100), credential=KEY)
        assert KEY not in store.get(Constants.COST_TRACKING_KEY)
