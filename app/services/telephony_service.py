"""
Telephony Service - places the fixed-destination voice alert through the
Twilio REST API.
"""

import logging
from typing import Optional

import requests

from app.core.exceptions import RelayError
from app.core.settings import settings

logger = logging.getLogger(__name__)


class TelephonyService:
    """
    Voice-call client. Destination, caller ID and announcement are all
    deployment configuration; callers cannot choose them.
    """

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        to_number: Optional[str] = None,
        announcement_url: Optional[str] = None,
        api_base: Optional[str] = None,
    ):
        self.account_sid = account_sid or settings.TELEPHONY_ACCOUNT_SID
        self.auth_token = auth_token or settings.TELEPHONY_AUTH_TOKEN
        self.from_number = from_number or settings.TELEPHONY_FROM_NUMBER
        self.to_number = to_number or settings.TELEPHONY_TO_NUMBER
        self.announcement_url = announcement_url or settings.TELEPHONY_ANNOUNCEMENT_URL
        self.api_base = (api_base or settings.TELEPHONY_API_BASE).rstrip("/")

    def is_configured(self) -> bool:
        return all([self.account_sid, self.auth_token, self.from_number, self.to_number])

    def place_alert_call(self) -> str:
        """
        Place the alert call.

        Returns:
            The provider's call SID

        Raises:
            RelayError: If telephony is not configured or the provider refuses the call
        """
        if not self.is_configured():
            logger.warning("Telephony not configured (TELEPHONY_ACCOUNT_SID/AUTH_TOKEN/FROM_NUMBER/TO_NUMBER)")
            raise RelayError("Voice alert relay is not configured")

        url = f"{self.api_base}/Accounts/{self.account_sid}/Calls.json"
        data = {
            "Url": self.announcement_url,
            "To": self.to_number,
            "From": self.from_number,
        }

        try:
            resp = requests.post(url, data=data, auth=(self.account_sid, self.auth_token), timeout=10)
        except requests.RequestException as e:
            logger.error(f"Voice alert request failed: {e}")
            raise RelayError(f"Voice alert failed: {e}")

        if resp.status_code not in (200, 201):
            logger.error(f"Voice alert rejected with status {resp.status_code}: {resp.text[:300]}")
            raise RelayError(f"Voice alert rejected by provider (HTTP {resp.status_code})")

        try:
            call_sid = resp.json().get("sid")
        except ValueError:
            logger.error(f"Voice alert response is not JSON: {resp.text[:300]}")
            raise RelayError("Voice alert response could not be read")

        if not call_sid:
            raise RelayError("Voice alert response did not include a call id")

        logger.info(f"Voice alert placed: {call_sid}")
        return call_sid


_telephony_service = None


def get_telephony_service() -> TelephonyService:
    global _telephony_service
    if _telephony_service is None:
        _telephony_service = TelephonyService()
    return _telephony_service
