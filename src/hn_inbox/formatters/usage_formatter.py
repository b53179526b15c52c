"""Cost and usage report formatting."""

import json
from datetime import datetime
from typing import Any, Dict

import pytz

from hn_inbox.handlers.cost_tracker import PRICING


def format_cost(cost: float) -> str:
    """Dollars with four decimals under a cent, two otherwise."""
    if cost < 0.01:
        return f"${cost:.4f}"
    return f"${cost:.2f}"


def format_tokens(tokens: int) -> str:
    """Token count with K/M suffixes."""
    if tokens >= 1_000_000:
        return f"{tokens / 1_000_000:.2f}M"
    if tokens >= 1000:
        return f"{tokens / 1000:.1f}K"
    return str(tokens)


class UsageFormatter:
    """Formats `CostLedger.current_usage()` output for the console or as JSON."""

    def __init__(self, format_type: str = 'console', timezone: str = 'UTC'):
        """Initialize formatter with output format."""
        if format_type not in ('console', 'json'):
            raise ValueError(f"Unknown format: {format_type}")
        self.format_type = format_type
        self.user_timezone = pytz.timezone(timezone)

    def _format_time(self, timestamp) -> str:
        if not timestamp:
            return '-'
        return datetime.fromtimestamp(timestamp, self.user_timezone).strftime('%Y-%m-%d %H:%M:%S %Z')

    def format(self, usage: Dict[str, Any], model: str = None) -> str:
        if self.format_type == 'json':
            return json.dumps(usage, indent=2)
        return self._format_console(usage, model)

    def _format_console(self, usage: Dict[str, Any], model: str = None) -> str:
        lines = ["API Usage"]
        if model and model in PRICING:
            pricing = PRICING[model]
            lines.append(f"- Model: {pricing.name} (${pricing.input:.2f}/M in, ${pricing.output:.2f}/M out)")
        lines.extend([
            f"- Total cost: {format_cost(usage.get('totalCost', 0.0))}",
            f"- Total tokens: {format_tokens(usage.get('totalTokens', 0))}",
            f"- Requests: {usage.get('requestCount', 0)}",
            f"- Avg cost/request: {format_cost(usage.get('avgCostPerRequest', 0.0))}",
        ])

        if usage.get('requestCount'):
            lines.append(f"- First request: {self._format_time(usage.get('firstRequest'))}")
            lines.append(f"- Last request: {self._format_time(usage.get('lastRequest'))}")

        recent = usage.get('recentRequests') or []
        if recent:
            lines.append("Recent requests:")
            for record in reversed(recent):
                lines.append(
                    f"  {self._format_time(record.get('timestamp'))}  "
                    f"{record.get('requestType', 'unknown'):<18} "
                    f"story {record.get('storyId')}  "
                    f"{format_tokens(record.get('tokens', {}).get('total', 0))} tokens  "
                    f"{format_cost(record.get('costs', {}).get('total', 0.0))}"
                )

        return '\n'.join(lines)
