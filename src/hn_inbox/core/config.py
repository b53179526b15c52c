"""Configuration settings for HN Inbox."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from hn_inbox.core.constants import Constants

# Load environment variables
load_dotenv()


def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    return os.getenv(key, str(default)).lower() in ('true', '1', 'yes', 'on')


def env_int(key: str, default: int) -> int:
    """Get integer environment variable."""
    return int(os.getenv(key, str(default)))


@dataclass
class HackerNewsConfig:
    """Item store configuration."""
    api_base: str = os.getenv('HN_API_BASE', Constants.HN_API_BASE)
    top_stories_limit: int = env_int('HN_TOP_STORIES_LIMIT', Constants.TOP_STORIES_LIMIT)
    max_concurrency: int = env_int('HN_MAX_CONCURRENCY', Constants.DEFAULT_MAX_CONCURRENCY)

    def validate(self) -> None:
        """Validate item store configuration."""
        if not self.api_base:
            raise ValueError("HN_API_BASE is required")
        if self.top_stories_limit < 1:
            raise ValueError("HN_TOP_STORIES_LIMIT must be at least 1")
        if self.max_concurrency < 1:
            raise ValueError("HN_MAX_CONCURRENCY must be at least 1")


@dataclass
class ReaderConfig:
    """Article reader proxy configuration."""
    base_url: str = os.getenv('READER_BASE_URL', Constants.READER_BASE)

    def validate(self) -> None:
        """Validate reader configuration."""
        if not self.base_url:
            raise ValueError("READER_BASE_URL is required")


@dataclass
class SummarizerConfig:
    """Summarizer (Claude) configuration."""
    api_key: str = os.getenv('ANTHROPIC_API_KEY', '')
    model: str = os.getenv('SUMMARY_MODEL', Constants.DEFAULT_MODEL)
    discussion_max_tokens: int = env_int('DISCUSSION_MAX_TOKENS', Constants.DISCUSSION_MAX_TOKENS)
    article_max_tokens: int = env_int('ARTICLE_MAX_TOKENS', Constants.ARTICLE_MAX_TOKENS)
    combined_max_tokens: int = env_int('COMBINED_MAX_TOKENS', Constants.COMBINED_MAX_TOKENS)

    def validate(self) -> None:
        """Validate summarizer configuration.

        The API key is optional here; it can also be stored at runtime and a
        missing key is reported per request.
        """
        if self.api_key and not self.api_key.startswith(Constants.API_KEY_PREFIX):
            raise ValueError(f"ANTHROPIC_API_KEY must start with '{Constants.API_KEY_PREFIX}'")
        if not self.model:
            raise ValueError("SUMMARY_MODEL is required")
        for name, value in (('DISCUSSION_MAX_TOKENS', self.discussion_max_tokens),
                            ('ARTICLE_MAX_TOKENS', self.article_max_tokens),
                            ('COMBINED_MAX_TOKENS', self.combined_max_tokens)):
            if value < 1:
                raise ValueError(f"{name} must be at least 1")


@dataclass
class CacheConfig:
    """Cache eviction and persistence configuration.

    Both limits default to 0, which keeps entries for the whole session.
    """
    state_file: str = os.getenv('STATE_FILE', Constants.STATE_FILE)
    ttl_seconds: int = env_int('CACHE_TTL_SECONDS', 0)
    max_entries: int = env_int('CACHE_MAX_ENTRIES', 0)

    def validate(self) -> None:
        """Validate cache configuration."""
        if not self.state_file:
            raise ValueError("STATE_FILE is required")
        if self.ttl_seconds < 0:
            raise ValueError("CACHE_TTL_SECONDS must be non-negative")
        if self.max_entries < 0:
            raise ValueError("CACHE_MAX_ENTRIES must be non-negative")


@dataclass
class PrefetchConfig:
    """Readahead configuration.

    Readahead gets its own request limit so it never queues ahead of the
    story being opened.
    """
    enabled: bool = env_bool('PREFETCH_ENABLED', True)
    max_concurrency: int = env_int('PREFETCH_MAX_CONCURRENCY', Constants.DEFAULT_PREFETCH_CONCURRENCY)

    def validate(self) -> None:
        """Validate readahead configuration."""
        if self.max_concurrency < 1:
            raise ValueError("PREFETCH_MAX_CONCURRENCY must be at least 1")


@dataclass
class Config:
    """Main configuration class."""
    hacker_news: HackerNewsConfig = field(default_factory=HackerNewsConfig)
    reader: ReaderConfig = field(default_factory=ReaderConfig)
    summarizer: SummarizerConfig = field(default_factory=SummarizerConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    prefetch: PrefetchConfig = field(default_factory=PrefetchConfig)

    # Application settings
    user_timezone: str = os.getenv('USER_TIMEZONE', 'UTC')
    log_level: str = os.getenv('LOG_LEVEL', 'INFO')
    log_file: str = os.getenv('LOG_FILE', '')

    def validate(self) -> None:
        """Validate all configuration sections."""
        self.hacker_news.validate()
        self.reader.validate()
        self.summarizer.validate()
        self.cache.validate()
        self.prefetch.validate()

        if self.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError("LOG_LEVEL must be a standard logging level")
