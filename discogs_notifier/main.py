"""Process entry point for the Discogs notifier."""
import logging
import sys
from typing import Optional

from .client import DiscogsClient
from .config import Config
from .diff import DiffEngine
from .dispatcher import NotificationDispatcher
from .email_service import EmailService
from .exceptions import FatalCycleError
from .listings import ListingFetcher
from .rate_limiter import RateLimiter
from .watcher_service import ListingWatcher


logger = logging.getLogger(__name__)


def build_watcher(config: Config, dispatcher: NotificationDispatcher) -> ListingWatcher:
    """Wire the services for a configuration."""
    client = DiscogsClient(
        token=config.discogs_token,
        rate_limiter=RateLimiter(config.rate_limit, config.rate_period),
        user_agent=config.user_agent,
        timeout=config.request_timeout,
    )
    fetcher = ListingFetcher(
        client,
        api_base_url=config.api_base_url,
        currency=config.currency,
        notify_tag=config.notify_tag,
    )
    return ListingWatcher(
        fetcher=fetcher,
        diff_engine=DiffEngine(),
        dispatcher=dispatcher,
        username=config.discogs_username,
        retry_attempts=config.retry_attempts,
        retry_backoff=config.retry_backoff,
    )


def main(config: Optional[Config] = None) -> int:
    config = config or Config.from_env()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    email_service = EmailService(config.email_config)
    dispatcher = NotificationDispatcher(
        email_service.on_new_listing,
        max_workers=config.notify_workers,
        max_pending=config.notify_queue,
    )
    watcher = build_watcher(config, dispatcher)

    logger.info("Starting notifier")
    try:
        with dispatcher:
            watcher.run_forever()
    except KeyboardInterrupt:
        watcher.stop()
        logger.info("Interrupted, shutting down")
    except FatalCycleError:
        logger.exception("Notifier failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
