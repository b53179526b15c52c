"""Parsing of structured summarizer replies."""

import json
import logging
import re
from typing import Any, Dict, Optional

from hn_inbox.models.ai_models import ParseKind, ParseOutcome

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r'```(?:json)?\s*(\{.*\})\s*```', re.DOTALL)


class ResponseParser:
    """Three-tier parser: strict JSON, fenced JSON block, then a heuristic fallback.

    `parse` never raises. The outcome is tagged so callers can tell real
    structured output from the fallback.
    """

    @staticmethod
    def _load_object(text: str) -> Optional[Dict[str, Any]]:
        try:
            data = json.loads(text)
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    @staticmethod
    def first_line(text: str) -> str:
        for line in (text or '').splitlines():
            if line.strip():
                return line.strip()
        return ''

    def parse(self, text: str, summary_field: str, fallback: str,
              defaults: Optional[Dict[str, Any]] = None) -> ParseOutcome:
        """Parse `text` into a dict that always has a non-empty `summary_field`.

        Args:
            text: Raw reply text from the summarizer
            summary_field: Key that must end up populated
            fallback: Fixed string used when nothing better is available
            defaults: Values for the other expected keys when degrading

        Returns:
            ParseOutcome tagged PARSED (strict or fenced tier) or DEGRADED
        """
        defaults = defaults or {}
        text = text or ''

        data = self._load_object(text.strip())
        tier = 'strict'
        if data is None:
            match = _FENCED_JSON.search(text)
            if match:
                data = self._load_object(match.group(1))
                tier = 'fenced'

        if data is not None:
            for key, value in defaults.items():
                data.setdefault(key, value)
            summary = data.get(summary_field)
            if not isinstance(summary, str) or not summary.strip():
                data[summary_field] = fallback
            return ParseOutcome(kind=ParseKind.PARSED, data=data, tier=tier)

        logger.warning("Summarizer reply was not JSON, using first line as %s", summary_field)
        data = dict(defaults)
        data[summary_field] = self.first_line(text) or fallback
        return ParseOutcome(kind=ParseKind.DEGRADED, data=data, tier='heuristic')
