"""HN Inbox: Hacker News reader with progressive AI summaries."""

__version__ = "0.1.0"
