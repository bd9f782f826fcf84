"""
Report endpoints - citizen report submission and the submitter's own list.
"""

from typing import List, Optional
from fastapi import APIRouter, Query, status
import logging

from app.models.report import Report, ReportCreate, ReportSubmitResponse, RewardSummary
from app.services.report_service import get_report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ReportSubmitResponse)
def submit_report(report: ReportCreate):
    """
    Submit a new anonymous report.

    This endpoint:
    1. Rejects blank location/description (422, nothing stored)
    2. Uploads the optional photo (502 if that fails, nothing stored)
    3. Stores the report as pending
    4. Notifies the relay (email, then voice alert); failures are only logged

    Returns the created report and the notification outcomes.
    """
    logger.info(f"📝 POST /reports - image={'yes' if report.image else 'no'}")
    return get_report_service().submit_report(report)


@router.get("", response_model=List[Report])
def list_my_reports(
    wallet_address: Optional[str] = Query(None, description="Submitter identity (defaults to the app wallet)")
):
    """
    Reports filed under one submitter identity, newest first.
    """
    return get_report_service().list_reports(wallet_address)


@router.get("/rewards", response_model=RewardSummary)
def get_rewards(
    wallet_address: Optional[str] = Query(None, description="Submitter identity (defaults to the app wallet)")
):
    """
    Reward total across the submitter's confirmed reports.
    """
    return get_report_service().reward_summary(wallet_address)
