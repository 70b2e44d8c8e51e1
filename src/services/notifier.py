# src/services/notifier.py

"""Desktop and email delivery of price-drop alerts."""

import asyncio
import logging
import smtplib
from email.mime.text import MIMEText
from email.utils import formataddr

from plyer import notification  # type: ignore[import-untyped]

from src.config.settings import Settings
from src.errors import TransportError

logger = logging.getLogger("price_tracker.notifier")


class Notifier:
    """Sends alerts to the desktop and to the configured mailbox.

    Both channels raise :class:`TransportError` on failure; deciding
    whether a failure matters is the caller's job.
    """

    def __init__(
        self,
        email_address: str | None = None,
        email_secret: str | None = None,
        smtp_host: str | None = None,
        smtp_port: int | None = None,
    ) -> None:
        self.email_address = (
            Settings.EMAIL_ADDRESS if email_address is None else email_address
        )
        self.email_secret = (
            Settings.EMAIL_SECRET if email_secret is None else email_secret
        )
        self.smtp_host = smtp_host or Settings.SMTP_HOST
        self.smtp_port = smtp_port or Settings.SMTP_PORT

    @property
    def email_configured(self) -> bool:
        return bool(self.email_address and self.email_secret)

    def notify_desktop(self, title: str, message: str) -> None:
        """Show a native desktop notification."""
        try:
            notification.notify(
                title=title,
                message=message,
                app_name=Settings.DESKTOP_APP_NAME,
                timeout=10,
            )
        except Exception as exc:
            raise TransportError(
                f"Desktop notification failed: {exc}"
            ) from exc
        logger.debug("Desktop notification sent: %s", title)

    def _send_email(self, subject: str, message: str) -> None:
        msg = MIMEText(message, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = formataddr(
            (Settings.EMAIL_SENDER_NAME, self.email_address)
        )
        msg["To"] = self.email_address

        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as smtp:
            smtp.starttls()
            smtp.login(self.email_address, self.email_secret)
            smtp.send_message(msg)

    async def notify_email(self, subject: str, message: str) -> None:
        """Email the alert to the configured address (sent to self)."""
        if not self.email_configured:
            raise TransportError(
                "Email credentials not configured. Set EMAIL_ADDRESS "
                "and EMAIL_SECRET."
            )
        try:
            await asyncio.to_thread(self._send_email, subject, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"Email delivery failed: {exc}") from exc
        logger.debug("Email sent to %s: %s", self.email_address, subject)
