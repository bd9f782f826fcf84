"""
Email Service - SMTP relay for new-report notifications.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from app.core.exceptions import RelayError
from app.core.settings import settings

logger = logging.getLogger(__name__)

SUBJECT_TEMPLATE = "Emergency Report: {title}"


class EmailService:
    """
    Sends plain-text mail through the configured SMTP account (STARTTLS)
    to the single configured recipient.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        recipient: Optional[str] = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user if user is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.sender = sender or settings.EMAIL_SENDER or self.user
        self.recipient = recipient if recipient is not None else settings.EMAIL_RECIPIENT

    def build_message(self, title: str, content: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender or ""
        msg["To"] = self.recipient or ""
        # Header values may not carry line breaks
        msg["Subject"] = SUBJECT_TEMPLATE.format(title=" ".join(title.split()))
        msg.set_content(content)
        return msg

    def send_report_email(self, title: str, content: str) -> None:
        """
        Send one notification email.

        Raises:
            RelayError: If SMTP is not configured or the send fails
        """
        if not self.user or not self.password or not self.recipient:
            logger.warning("SMTP not configured (SMTP_USER, SMTP_PASSWORD, EMAIL_RECIPIENT)")
            raise RelayError("Email relay is not configured")

        try:
            msg = self.build_message(title, content)
        except ValueError as e:
            logger.error(f"Could not build notification email: {e}")
            raise RelayError(f"Invalid email fields: {e}")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                server.starttls()
                server.login(self.user, self.password)
                server.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed for {self.user}: {str(e)}")
            raise RelayError("Email relay authentication failed")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email: {str(e)}")
            raise RelayError(f"Email send failed: {e}")

        logger.info(f"Notification email sent to {self.recipient}: {msg['Subject']}")


_email_service = None


def get_email_service() -> EmailService:
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
