"""Validation utilities."""

from typing import Any, Dict

from hn_inbox.core.constants import Constants
from hn_inbox.core.errors import ConfigError


class CredentialValidator:
    """Checks summarizer API keys before they are stored."""

    @staticmethod
    def validate_api_key(api_key: str) -> str:
        """Return the trimmed key or raise ConfigError."""
        api_key = (api_key or '').strip()
        if not api_key:
            raise ConfigError("Please enter an API key")
        if not api_key.startswith(Constants.API_KEY_PREFIX):
            raise ConfigError(
                f'Invalid API key format. Claude API keys start with "{Constants.API_KEY_PREFIX}"'
            )
        return api_key


class FilterValidator:
    """Normalizes persisted filter settings."""

    @staticmethod
    def normalize(settings: Dict[str, Any]) -> Dict[str, Any]:
        """Coerce filter settings, falling back to permissive defaults."""
        settings = settings or {}
        try:
            min_points = max(0, int(settings.get('minPoints', 0)))
        except (TypeError, ValueError):
            min_points = 0
        try:
            min_comments = max(0, int(settings.get('minComments', 0)))
        except (TypeError, ValueError):
            min_comments = 0

        time_range = settings.get('timeRange', 'all')
        if time_range not in Constants.TIME_RANGES:
            time_range = 'all'

        return {
            'minPoints': min_points,
            'minComments': min_comments,
            'timeRange': time_range,
        }
