"""Discogs notifier - marketplace watch-list monitoring and notification."""

__version__ = "1.0.0"

from .config import Config
from .client import DiscogsClient, walk_all
from .diff import DiffEngine, should_notify
from .dispatcher import NotificationDispatcher
from .email_service import EmailService, EmailConfig
from .listings import ListingFetcher, filter_watch_lists, parse_comment
from .rate_limiter import RateLimiter
from .repository import SnapshotTable
from .scraper import ScraperService
from .watcher_service import ListingWatcher

__all__ = [
    "Config",
    "DiscogsClient",
    "walk_all",
    "DiffEngine",
    "should_notify",
    "NotificationDispatcher",
    "EmailService",
    "EmailConfig",
    "ListingFetcher",
    "filter_watch_lists",
    "parse_comment",
    "RateLimiter",
    "SnapshotTable",
    "ScraperService",
    "ListingWatcher",
]
