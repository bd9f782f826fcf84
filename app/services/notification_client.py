"""
Notification client - best-effort calls from the reporter flow to the relay.

Each call returns a NotificationOutcome and never raises: a failed alert
is logged and the submitter is never told.
"""

import logging
from typing import Dict, List, Optional

import requests

from app.core.settings import settings
from app.models.report import NotificationOutcome

logger = logging.getLogger(__name__)


class NotificationClient:
    """
    HTTP client for the notification relay (POST /send-email, POST /alert).
    """

    NEW_REPORT_TITLE = "New Report Submitted"
    NEW_REPORT_CONTENT = "A new anonymous report has been submitted successfully."

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.RELAY_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.RELAY_API_KEY
        self.timeout = timeout or settings.RELAY_TIMEOUT_SECONDS

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-Relay-Key"] = self.api_key
        return headers

    def _post(self, channel: str, path: str, payload: Optional[Dict] = None) -> NotificationOutcome:
        try:
            resp = requests.post(
                f"{self.base_url}{path}",
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
            if resp.status_code >= 400:
                logger.warning(f"Relay {path} answered {resp.status_code}: {resp.text[:200]}")
                return NotificationOutcome(channel=channel, ok=False, error=f"HTTP {resp.status_code}")

            logger.info(f"Relay {path} response: {resp.text[:200]}")
            return NotificationOutcome(channel=channel, ok=True)
        except requests.RequestException as e:
            logger.error(f"Error in relay call {path}: {e}")
            return NotificationOutcome(channel=channel, ok=False, error=str(e))

    def send_email(self, title: str, content: str) -> NotificationOutcome:
        return self._post("email", "/send-email", {"title": title, "content": content})

    def place_alert(self) -> NotificationOutcome:
        return self._post("alert", "/alert")

    def notify_new_report(self) -> List[NotificationOutcome]:
        """
        Email first, then the voice alert. The alert is issued after the email
        call settles, whatever its outcome.
        """
        outcomes = [self.send_email(self.NEW_REPORT_TITLE, self.NEW_REPORT_CONTENT)]
        outcomes.append(self.place_alert())
        return outcomes


_notification_client = None


def get_notification_client() -> NotificationClient:
    global _notification_client
    if _notification_client is None:
        _notification_client = NotificationClient()
    return _notification_client
