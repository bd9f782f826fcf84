"""
Pydantic models for citizen reports.
These models handle validation for report submission, review actions and responses.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional, List
from enum import Enum


class ReportStatus(str, Enum):
    """
    Review status of a report.
    Starts PENDING and moves exactly once to CONFIRMED or REJECTED.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class StatusFilter(str, Enum):
    """Status filter accepted by the admin list view. ALL omits the filter."""
    ALL = "all"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class RewardType(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class ImageUpload(BaseModel):
    """Photo evidence attached to a submission, base64 encoded."""
    filename: str = Field(..., min_length=1, max_length=200, description="Original file name")
    content_type: str = Field("image/jpeg", description="MIME type of the image")
    data: str = Field(..., description="Base64 image bytes (a data: URL prefix is accepted)")


class ReportCreate(BaseModel):
    """
    Model for creating a new report (incoming POST request).
    Blank location/description are rejected by the service, not here, so the
    caller gets the same ValidationError the form shows.
    """
    location: str = Field("", max_length=500, description="Area / landmark")
    description: str = Field("", max_length=5000, description="What the citizen observed")
    wallet_address: Optional[str] = Field(None, max_length=200, description="Submitter identity (defaults to the app wallet)")
    category: Optional[str] = Field(None, max_length=50, description="Free-form tag such as dealer or user, unused by review")
    image: Optional[ImageUpload] = Field(None, description="Optional photo evidence")

    class Config:
        json_schema_extra = {
            "example": {
                "location": "Market Road, near bus stand",
                "description": "Illegal liquor being sold from a parked van every evening.",
                "image": {
                    "filename": "van.jpg",
                    "content_type": "image/jpeg",
                    "data": "/9j/4AAQSkZJRgABAQAAAQABAAD..."
                }
            }
        }
        extra = "ignore"


class Report(BaseModel):
    """
    A stored report, as returned by the API.
    Reward fields are only set once the report leaves PENDING.
    """
    id: str = Field(..., description="Firestore document ID")
    wallet_address: str
    location: str
    description: str
    image_url: Optional[str] = None
    status: ReportStatus = ReportStatus.PENDING
    reward_type: Optional[RewardType] = None
    reward_amount: Optional[float] = None
    is_blacklisted: bool = False
    category: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "Report":
        """
        Build a Report from a stored row. created_at may be an ISO string or
        a naive datetime written by another client; both are read as UTC.
        """
        fields = {k: v for k, v in data.items() if k != "id"}
        created_at = fields.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        if isinstance(created_at, datetime) and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        fields["created_at"] = created_at
        return cls(id=doc_id, **fields)

    class Config:
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "id": "k3Jd92LmQp",
                "wallet_address": "0xCbB7Fc4A9CE612C65DcB0151F29b67Cf66a4C2f2",
                "location": "Market Road, near bus stand",
                "description": "Illegal liquor being sold from a parked van every evening.",
                "image_url": "https://storage.googleapis.com/civic-guard/reports/1717000000000-van.jpg",
                "status": "confirmed",
                "reward_type": "positive",
                "reward_amount": 10,
                "is_blacklisted": False,
                "created_at": "2024-05-29T18:20:00Z"
            }
        }


class NotificationOutcome(BaseModel):
    """Result of one best-effort relay call. Callers may ignore it."""
    channel: str = Field(..., description="email | alert")
    attempted: bool = True
    ok: bool = False
    error: Optional[str] = None


class ReportSubmitResponse(BaseModel):
    report: Report
    notifications: List[NotificationOutcome] = Field(default_factory=list)


class RewardSummary(BaseModel):
    wallet_address: str
    confirmed_count: int
    total_reward: float


class ConfirmRequest(BaseModel):
    """Reward is operator-entered; omitted means the configured default."""
    reward_amount: Optional[float] = Field(None, ge=0, description="Reward to assign, must be >= 0")


class ReviewActionResponse(BaseModel):
    success: bool = True
    message: str
    report: Report
    anchored: Optional[bool] = None


class ReportDetail(BaseModel):
    report: Report
    allowed_actions: List[str]


class ReviewStats(BaseModel):
    total: int
    pending: int
    confirmed: int
    rejected: int
    blacklisted: int
    total_reward: float
