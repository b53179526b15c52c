"""Handlers for persisted state, caching and cost tracking."""

from .state_store import StateStore
from .cache_store import CacheStore, CacheEntry, TreeSnapshot
from .cost_tracker import CostLedger, ModelPricing, PRICING, calculate_cost, fingerprint

__all__ = [
    'StateStore', 'CacheStore', 'CacheEntry', 'TreeSnapshot',
    'CostLedger', 'ModelPricing', 'PRICING', 'calculate_cost', 'fingerprint'
]
