"""
Report service - citizen-side report submission and listing.

Flow for a submission:
1. Validate required fields (nothing touches the network on failure)
2. Upload the optional photo; an upload failure aborts the submission
3. Store the report as pending
4. Best-effort relay notifications (email, then voice alert)

Notifications never roll back or fail a stored report.
"""

import base64
import binascii
import os
import re
import time
from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging

from app.core.exceptions import ValidationError
from app.core.settings import settings
from app.models.report import (
    ImageUpload,
    Report,
    ReportCreate,
    ReportStatus,
    ReportSubmitResponse,
    RewardSummary,
)
from app.services.notification_client import NotificationClient, get_notification_client
from app.services.report_store import ReportStore, get_report_store

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def decode_image(image: ImageUpload, max_bytes: int) -> bytes:
    """
    Decode a base64 image payload.

    Accepts raw base64 or a data: URL ("data:image/png;base64,....").

    Raises:
        ValidationError: If the payload is empty, not base64, or too large
    """
    data = image.data.strip()
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]

    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image data is not valid base64")

    if not raw:
        raise ValidationError("Image data is empty")
    if len(raw) > max_bytes:
        raise ValidationError(f"Image exceeds the {max_bytes} byte limit")
    return raw


def build_image_path(filename: str, now_ms: Optional[int] = None) -> str:
    """reports/{epoch millis}-{sanitized file name}"""
    name = _UNSAFE_FILENAME_CHARS.sub("_", os.path.basename(filename)) or "image"
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"reports/{stamp}-{name}"


class ReportService:
    """
    Reporter flow: submit a report, list a submitter's reports.
    """

    def __init__(
        self,
        store: Optional[ReportStore] = None,
        notifier: Optional[NotificationClient] = None,
    ):
        self.store = store or get_report_store()
        self.notifier = notifier or get_notification_client()

    @staticmethod
    def validate_submission(report_data: ReportCreate) -> Tuple[str, str]:
        location = (report_data.location or "").strip()
        description = (report_data.description or "").strip()
        if not location or not description:
            raise ValidationError("Please fill all required fields.")
        return location, description

    def submit_report(self, report_data: ReportCreate) -> ReportSubmitResponse:
        """
        Create a new citizen report.

        Args:
            report_data: Submission from the report form

        Returns:
            ReportSubmitResponse: Stored report plus notification outcomes

        Raises:
            ValidationError: Missing location/description or bad image payload
            UploadError: Image upload failed (report not created)
            StoreError: Report row could not be written
        """
        location, description = self.validate_submission(report_data)

        image_url = None
        if report_data.image is not None:
            raw = decode_image(report_data.image, settings.MAX_IMAGE_BYTES)
            path = build_image_path(report_data.image.filename)
            image_url = self.store.upload_file(path, raw, report_data.image.content_type)

        fields = {
            "wallet_address": report_data.wallet_address or settings.DEFAULT_WALLET_ADDRESS,
            "location": location,
            "description": description,
            "image_url": image_url,
            "status": ReportStatus.PENDING.value,
            "reward_type": None,
            "reward_amount": None,
            "is_blacklisted": False,
            "category": report_data.category,
            "created_at": datetime.now(timezone.utc),
        }

        report = self.store.create_report(fields)
        logger.info(f"📝 Report {report.id} submitted (image={'yes' if image_url else 'no'})")

        notifications = self.notifier.notify_new_report()
        failed = [n.channel for n in notifications if not n.ok]
        if failed:
            logger.warning(f"⚠️ Report {report.id} stored, but notifications failed: {failed}")

        return ReportSubmitResponse(report=report, notifications=notifications)

    def list_reports(self, wallet_address: Optional[str] = None) -> List[Report]:
        """
        All reports of one submitter, newest first.
        """
        return self.store.list_reports(wallet_address=wallet_address or settings.DEFAULT_WALLET_ADDRESS)

    def reward_summary(self, wallet_address: Optional[str] = None) -> RewardSummary:
        """
        Rewards earned by a submitter across confirmed reports.
        """
        wallet = wallet_address or settings.DEFAULT_WALLET_ADDRESS
        confirmed = self.store.list_reports(
            status=ReportStatus.CONFIRMED.value,
            wallet_address=wallet,
        )
        return RewardSummary(
            wallet_address=wallet,
            confirmed_count=len(confirmed),
            total_reward=sum(r.reward_amount or 0 for r in confirmed),
        )


_report_service = None


def get_report_service() -> ReportService:
    """
    Get or create ReportService singleton instance.
    """
    global _report_service
    if _report_service is None:
        _report_service = ReportService()
    return _report_service
