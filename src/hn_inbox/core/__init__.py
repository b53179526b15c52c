"""Core configuration and utilities."""

from .config import (
    Config, HackerNewsConfig, ReaderConfig, SummarizerConfig, CacheConfig, PrefetchConfig
)
from .constants import Constants
from .errors import HNInboxError, NetworkError, UpstreamError, ParseError, ConfigError
from .validators import CredentialValidator, FilterValidator

__all__ = [
    'Config', 'HackerNewsConfig', 'ReaderConfig', 'SummarizerConfig', 'CacheConfig',
    'PrefetchConfig', 'Constants', 'HNInboxError', 'NetworkError', 'UpstreamError',
    'ParseError', 'ConfigError', 'CredentialValidator', 'FilterValidator'
]
