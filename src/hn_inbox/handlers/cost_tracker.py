"""Cost tracking for summarizer usage."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from hn_inbox.core.constants import Constants
from hn_inbox.handlers.state_store import StateStore
from hn_inbox.models.ai_models import CostBreakdown, Ledger, TokenUsage, UsageRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelPricing:
    """Dollars per million tokens for each token category."""
    name: str
    input: float
    output: float
    cache_write: float
    cache_read: float


# Fixed pricing table; unknown models are rejected rather than guessed
PRICING = {
    'claude-haiku-4-5-20251001': ModelPricing(
        name='Claude 4.5 Haiku',
        input=1.00,
        output=5.00,
        cache_write=1.25,
        cache_read=0.10,
    ),
}


def get_pricing(model: str) -> ModelPricing:
    """Get pricing for a model, raising ValueError if it is not in the table."""
    if model not in PRICING:
        raise ValueError(f"Unsupported model: {model}")
    return PRICING[model]


def calculate_cost(usage: TokenUsage, model: str = Constants.DEFAULT_MODEL) -> CostBreakdown:
    """Price each token category separately."""
    pricing = get_pricing(model)
    per_token = Constants.TOKENS_PER_MILLION
    return CostBreakdown(
        input=usage.input * pricing.input / per_token,
        output=usage.output * pricing.output / per_token,
        cache_write=usage.cache_write * pricing.cache_write / per_token,
        cache_read=usage.cache_read * pricing.cache_read / per_token,
    )


def fingerprint(credential: str) -> str:
    """De-identify a credential as its length plus last 8 characters.

    Not collision resistant and not a security control; it only avoids
    writing the full key next to the usage data.
    """
    return f"key_{len(credential)}_{credential[-8:]}"


class CostLedger:
    """Per-credential usage ledger with bounded request history."""

    def __init__(self, store: StateStore, model: str = Constants.DEFAULT_MODEL,
                 clock: Callable[[], float] = time.time):
        """Initialize the ledger; `model` selects the pricing row."""
        get_pricing(model)
        self.store = store
        self.model = model
        self.clock = clock

    def _resolve_credential(self, credential: Optional[str]) -> Optional[str]:
        return credential or self.store.get(Constants.CREDENTIAL_KEY) or None

    def _load_all(self) -> Dict[str, Any]:
        return dict(self.store.get(Constants.COST_TRACKING_KEY) or {})

    def get_ledger(self, credential: Optional[str] = None) -> Optional[Ledger]:
        """Return the stored ledger for a credential, if any."""
        credential = self._resolve_credential(credential)
        if not credential:
            return None
        raw = self._load_all().get(fingerprint(credential))
        return Ledger.from_dict(raw) if raw else None

    def track(self, usage: Any, request_type: str = 'unknown', story_id: Optional[int] = None,
              credential: Optional[str] = None) -> Optional[UsageRecord]:
        """Record one request's usage and cost against the credential's ledger."""
        credential = self._resolve_credential(credential)
        if not credential:
            logger.warning("No API key found, usage not tracked")
            return None

        tokens = usage if isinstance(usage, TokenUsage) else TokenUsage.from_api(usage)
        now = self.clock()
        record = UsageRecord(
            request_type=request_type,
            story_id=story_id,
            model=self.model,
            tokens=tokens,
            cost=calculate_cost(tokens, self.model),
            timestamp=now,
        )

        all_ledgers = self._load_all()
        key = fingerprint(credential)
        ledger = Ledger.from_dict(all_ledgers[key]) if key in all_ledgers else Ledger(
            first_request=now, last_request=now
        )

        ledger.total_cost += record.cost.total
        ledger.total_tokens += record.tokens.total
        ledger.last_request = now
        ledger.requests.append(record)
        if len(ledger.requests) > Constants.MAX_LEDGER_REQUESTS:
            ledger.requests = ledger.requests[-Constants.MAX_LEDGER_REQUESTS:]

        all_ledgers[key] = ledger.to_dict()
        self.store.set(Constants.COST_TRACKING_KEY, all_ledgers)

        logger.info("Request tracked: $%.4f | Type: %s | Tokens: %d",
                    record.cost.total, request_type, record.tokens.total)
        return record

    def current_usage(self, credential: Optional[str] = None) -> Dict[str, Any]:
        """Aggregate totals plus the 10 most recent records, zeroed when empty."""
        ledger = self.get_ledger(credential)
        if ledger is None:
            return {
                'totalCost': 0.0,
                'totalTokens': 0,
                'requestCount': 0,
                'avgCostPerRequest': 0.0,
                'recentRequests': [],
            }

        count = len(ledger.requests)
        return {
            'totalCost': ledger.total_cost,
            'totalTokens': ledger.total_tokens,
            'requestCount': count,
            'avgCostPerRequest': ledger.total_cost / count if count else 0.0,
            'firstRequest': ledger.first_request,
            'lastRequest': ledger.last_request,
            'recentRequests': [r.to_dict() for r in ledger.requests[-Constants.RECENT_REQUESTS:]],
        }

    def reset(self, credential: Optional[str] = None) -> bool:
        """Delete the credential's ledger entirely."""
        credential = self._resolve_credential(credential)
        if not credential:
            return False
        all_ledgers = self._load_all()
        if all_ledgers.pop(fingerprint(credential), None) is None:
            return False
        self.store.set(Constants.COST_TRACKING_KEY, all_ledgers)
        logger.info("Usage data reset")
        return True
