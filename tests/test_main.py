"""Tests for the process entry point."""
from unittest.mock import patch

import pytest

from discogs_notifier.config import Config
from discogs_notifier.exceptions import FatalCycleError
from discogs_notifier.main import build_watcher, main


@pytest.fixture
def config():
    return Config(
        discogs_token="token",
        discogs_username="bob",
        api_base_url="https://api.discogs.com",
        currency="AUD",
        notify_tag="notify_me",
        rate_limit=60,
        rate_period=60.0,
        user_agent="test-agent",
        request_timeout=5,
        retry_attempts=2,
        retry_backoff=0.0,
        notify_workers=1,
        notify_queue=4,
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="bob@example.com",
        smtp_pass="secret",
        email_from="bob@example.com",
        email_to="bob@example.com",
        log_level="INFO",
    )


def test_build_watcher(config):
    watcher = build_watcher(config, dispatcher=None)

    assert watcher.username == "bob"
    assert watcher.retry_attempts == 2
    assert watcher.fetcher.currency == "AUD"
    assert watcher.fetcher.client.rate_limiter.interval == 1.0
    assert len(watcher.diff_engine) == 0


def test_fatal_cycle_exits_with_error(config):
    with patch("discogs_notifier.main.build_watcher") as build:
        build.return_value.run_forever.side_effect = FatalCycleError("lists unavailable")

        assert main(config) == 1


def test_interrupt_exits_cleanly(config):
    with patch("discogs_notifier.main.build_watcher") as build:
        build.return_value.run_forever.side_effect = KeyboardInterrupt

        assert main(config) == 0
        build.return_value.stop.assert_called_once()
