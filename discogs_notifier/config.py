"""Configuration management for the Discogs notifier."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .email_service import EmailConfig


@dataclass
class Config:
    """Application configuration loaded from environment variables."""

    # Discogs configuration
    discogs_token: str
    discogs_username: str
    api_base_url: str
    currency: str
    notify_tag: str

    # Rate limiting
    rate_limit: int
    rate_period: float

    # HTTP configuration
    user_agent: str
    request_timeout: int

    # Poll loop
    retry_attempts: int
    retry_backoff: float

    # Notification delivery
    notify_workers: int
    notify_queue: int

    # SMTP configuration
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_pass: str
    email_from: str
    email_to: str

    # Logging
    log_level: str

    @property
    def email_config(self) -> EmailConfig:
        """Subset of the configuration used by the email service."""
        return EmailConfig(
            smtp_host=self.smtp_host,
            smtp_port=self.smtp_port,
            smtp_user=self.smtp_user,
            smtp_pass=self.smtp_pass,
            email_from=self.email_from,
            email_to=self.email_to,
        )

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Config":
        """Load configuration from environment variables.

        Args:
            env_file: Optional path to .env file to load

        Returns:
            Config instance

        Raises:
            KeyError: If required environment variables are missing
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Required variables
        discogs_token = os.environ["DISCOGS_TOKEN"]
        discogs_username = os.environ["DISCOGS_USERNAME"]
        smtp_user = os.environ["SMTP_USER"]
        smtp_pass = os.environ["SMTP_PASS"]

        # Optional with defaults
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if os.getenv("VERBOSE", "").lower() == "true":
            log_level = "DEBUG"

        return cls(
            discogs_token=discogs_token,
            discogs_username=discogs_username,
            api_base_url=os.getenv("API_BASE_URL", "https://api.discogs.com"),
            currency=os.getenv("CURRENCY", ""),
            notify_tag=os.getenv("NOTIFY_TAG", "notify_me"),
            rate_limit=int(os.getenv("RATE_LIMIT", "60")),
            rate_period=float(os.getenv("RATE_PERIOD", "60")),
            user_agent=os.getenv(
                "USER_AGENT",
                "discogs-notifier/1.0 (+personal script; contact owner of this account)",
            ),
            request_timeout=int(os.getenv("REQUEST_TIMEOUT", "20")),
            retry_attempts=int(os.getenv("RETRY_ATTEMPTS", "3")),
            retry_backoff=float(os.getenv("RETRY_BACKOFF", "5")),
            notify_workers=int(os.getenv("NOTIFY_WORKERS", "2")),
            notify_queue=int(os.getenv("NOTIFY_QUEUE", "32")),
            smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
            smtp_port=int(os.getenv("SMTP_PORT", "587")),
            smtp_user=smtp_user,
            smtp_pass=smtp_pass,
            email_from=os.getenv("EMAIL_FROM", smtp_user),
            email_to=os.getenv("USER_EMAIL", smtp_user),
            log_level=log_level,
        )
