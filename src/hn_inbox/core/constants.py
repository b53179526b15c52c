"""Constants used throughout the application."""


class Constants:
    """Application constants."""

    # Item store
    HN_API_BASE = "https://hacker-news.firebaseio.com/v0"
    HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
    TOP_STORIES_LIMIT = 100
    DEFAULT_MAX_CONCURRENCY = 8
    DEFAULT_PREFETCH_CONCURRENCY = 4

    # Article reader
    READER_BASE = "https://r.jina.ai"

    # Summarizer
    DEFAULT_MODEL = "claude-haiku-4-5-20251001"
    DISCUSSION_MAX_TOKENS = 1000
    ARTICLE_MAX_TOKENS = 1000
    COMBINED_MAX_TOKENS = 2000
    API_KEY_PREFIX = "sk-ant-"
    NO_API_KEY_MESSAGE = "No API key configured. Run `hn-inbox --set-key` to add your Claude API key."

    # Discussion shaping
    MAX_DISCUSSION_COMMENTS = 50
    MAX_FLATTEN_DEPTH = 3
    COMMENT_SEPARATOR = "\n\n---\n\n"
    COMMENTS_CHAR_LIMIT = 10000
    ARTICLE_CHAR_LIMIT = 5000
    MIN_ARTICLE_CHARS = 100  # Shorter reader output is treated as no article

    # Response parsing fallbacks
    DISCUSSION_FALLBACK = "Unable to parse discussion summary"
    ARTICLE_FALLBACK = "Summary generation failed"

    # Cost ledger
    MAX_LEDGER_REQUESTS = 100
    RECENT_REQUESTS = 10
    TOKENS_PER_MILLION = 1_000_000

    # Story filters (seconds)
    TIME_RANGES = {
        'day': 24 * 60 * 60,
        '3days': 3 * 24 * 60 * 60,
        '7days': 7 * 24 * 60 * 60,
        'all': None,
    }

    # Persisted state keys
    READ_STORIES_KEY = "readStories"
    SUMMARY_CACHE_KEY = "summaryCache"
    COMMENT_CACHE_KEY = "commentCache"
    COST_TRACKING_KEY = "costTracking"
    FILTER_SETTINGS_KEY = "filterSettings"
    CREDENTIAL_KEY = "credential"

    # File names
    STATE_FILE = "hn_inbox_state.json"
