"""
Anchoring Service - forwards confirmed reports to the external ledger service.

Two endpoints:
- POST /upload-link-and-report {textData, url}  (report has an image)
- POST /upload-report {textData}                (text only)

Only the HTTP status is inspected. Anchoring happens after the status
update and a failure never reverts it.
"""

import logging
from typing import Dict, Optional, Tuple

import requests

from app.core.exceptions import AnchorError
from app.core.settings import settings
from app.models.report import Report

logger = logging.getLogger(__name__)


class AnchoringService:

    LINK_AND_REPORT_PATH = "/upload-link-and-report"
    REPORT_ONLY_PATH = "/upload-report"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.ANCHOR_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.ANCHOR_TIMEOUT_SECONDS

    def build_request(self, report: Report) -> Tuple[str, Dict]:
        """Pick the endpoint path and JSON body for a report."""
        if report.image_url:
            return self.LINK_AND_REPORT_PATH, {"textData": report.description, "url": report.image_url}
        return self.REPORT_ONLY_PATH, {"textData": report.description}

    def anchor_report(self, report: Report) -> None:
        """
        Send a confirmed report to the anchoring service.

        Raises:
            AnchorError: On a network failure or a non-2xx response
        """
        path, payload = self.build_request(report)
        url = f"{self.base_url}{path}"

        try:
            resp = requests.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Anchoring request for report {report.id} failed: {e}")
            raise AnchorError(f"Failed to reach anchoring service: {e}")

        if not resp.ok:
            logger.error(f"Anchoring {path} for report {report.id} returned {resp.status_code}")
            if report.image_url:
                raise AnchorError("Failed to upload image and report")
            raise AnchorError("Failed to upload report")

        logger.info(f"✅ Report {report.id} anchored via {path}")


_anchoring_service = None


def get_anchoring_service() -> AnchoringService:
    global _anchoring_service
    if _anchoring_service is None:
        _anchoring_service = AnchoringService()
    return _anchoring_service
