"""Error taxonomy shared by clients and services."""


class HNInboxError(Exception):
    """Base class for all application errors."""


class NetworkError(HNInboxError):
    """Transport failure reaching the item store, reader or summarizer."""


class UpstreamError(HNInboxError):
    """Non-success response from an upstream service."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(HNInboxError):
    """Upstream payload could not be interpreted."""


class ConfigError(HNInboxError):
    """Required configuration (usually the API key) is missing or invalid."""
