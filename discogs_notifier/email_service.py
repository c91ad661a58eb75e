"""Email service for sending new listing notifications."""
import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime, UTC
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from pathlib import Path
from typing import Callable, Optional, Protocol

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .exceptions import NotificationDeliveryError
from .models import MarketSnapshot


logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class SmtpClient(Protocol):
    """Protocol for SMTP clients (allows for easier testing)."""

    def __enter__(self) -> "SmtpClient":
        ...

    def __exit__(self, *exc_info) -> None:
        ...

    def starttls(self) -> None:
        """Start TLS encryption."""
        ...

    def login(self, user: str, password: str) -> None:
        """Login to SMTP server."""
        ...

    def send_message(self, msg: MIMEMultipart) -> None:
        """Send an email message."""
        ...


@dataclass
class EmailConfig:
    """Configuration for email sending."""
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_pass: str
    email_from: str
    email_to: str


class EmailService:
    """Service for formatting and sending new listing emails."""

    def __init__(
        self,
        config: EmailConfig,
        template_dir: Optional[Path] = None,
        smtp_factory: Optional[Callable[[], SmtpClient]] = None
    ):
        """Initialize the email service.

        Args:
            config: Email configuration
            template_dir: Directory containing Jinja2 email templates
                          (defaults to the bundled templates)
            smtp_factory: Factory function for creating SMTP connections
                         (defaults to smtplib.SMTP)
        """
        self.config = config
        self.smtp_factory = smtp_factory or self._default_smtp_factory

        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "html.j2", "xml"]),
        )
        self.html_template = self.env.get_template("new_listing.html.j2")

    def _default_smtp_factory(self) -> SmtpClient:
        """Default factory for creating SMTP connections."""
        return smtplib.SMTP(self.config.smtp_host, self.config.smtp_port)

    def format_email_bodies(self, snapshot: MarketSnapshot) -> tuple[str, str]:
        """Format plain text and HTML email bodies.

        Args:
            snapshot: Snapshot of the item with a new listing

        Returns:
            Tuple of (text_body, html_body)
        """
        price = f"{snapshot.lowest_price:.2f} {snapshot.currency}".strip()
        text_lines = [
            f"New listing for {snapshot.name}",
            "",
            f"Lowest price: {price}",
            f"For sale: {snapshot.num_for_sale}",
        ]
        if snapshot.minimum_price > 0:
            text_lines.append(f"Your threshold: {snapshot.minimum_price:.2f}")
        text_lines.extend(["", snapshot.url])
        text_body = "\n".join(text_lines)

        html_body = self.html_template.render(
            item=snapshot,
            price=price,
            run_timestamp=datetime.now(UTC).isoformat(),
        )
        return text_body, html_body

    def send_email(
        self,
        subject: str,
        text_body: str,
        html_body: str
    ) -> None:
        """Send an email.

        Args:
            subject: Email subject line
            text_body: Plain text email body
            html_body: HTML email body

        Raises:
            smtplib.SMTPException: If email sending fails
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.config.email_from
        msg["To"] = self.config.email_to

        # Order matters: plain first, then HTML
        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        with self.smtp_factory() as smtp:
            smtp.starttls()
            smtp.login(self.config.smtp_user, self.config.smtp_pass)
            smtp.send_message(msg)

    def on_new_listing(self, snapshot: MarketSnapshot) -> None:
        """Notify the user of a new listing.

        Args:
            snapshot: Snapshot of the item that triggered the notification

        Raises:
            NotificationDeliveryError: If the email cannot be sent
        """
        logger.info("New listing found for %s", snapshot.name)

        subject = f"New {snapshot.name} listed!"
        text_body, html_body = self.format_email_bodies(snapshot)
        try:
            self.send_email(subject, text_body, html_body)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationDeliveryError(
                f"could not email {self.config.email_to} about {snapshot.name}: {exc}"
            ) from exc

        logger.info("Successfully notified %s", self.config.email_to)
