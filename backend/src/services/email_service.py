"""
Outbound email over SMTP.

Plain-text messages only. Sending is skipped entirely when MAIL_ENABLED is
false (tests and local development without a mail catcher).
"""

import logging
import smtplib
import ssl
from email.mime.text import MIMEText

from core import config

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending email through the configured SMTP server."""

    @staticmethod
    def send_email(to: str, subject: str, body: str) -> bool:
        """
        Send a plain-text email.

        Args:
            to: Recipient address
            subject: Subject line
            body: Plain-text body

        Returns:
            True if the message was handed to the SMTP server, False if mail is disabled

        Raises:
            smtplib.SMTPException, OSError: If delivery fails
        """
        if not config.MAIL_ENABLED:
            logger.info(f"Mail disabled, skipping email to {to}: {subject}")
            return False

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = config.SMTP_FROM
        msg["To"] = to

        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=10) as server:
            if config.SMTP_USE_TLS:
                server.starttls(context=ssl.create_default_context())
            if config.SMTP_USER:
                server.login(config.SMTP_USER, config.SMTP_PASSWORD)
            server.sendmail(config.SMTP_FROM, [to], msg.as_string())

        logger.info(f"Email sent to {to}: {subject}")
        return True
