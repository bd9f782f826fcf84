"""
Admin endpoints - reviewer dashboard.

SCOPE OF ADMIN:
✅ List reports (status filter + text search)
✅ Confirm a pending report and assign its reward (then anchor it)
✅ Reject a pending report
✅ Blacklist a submitter's wallet, whatever the report status

❌ NOT edit report content
❌ NOT delete reports
❌ NOT revert a confirm/reject

Every endpoint requires a reviewer session.
"""

from fastapi import APIRouter, Body, Depends, Query
from typing import List, Optional

from app.dependencies import require_session
from app.models.report import (
    ConfirmRequest,
    Report,
    ReportDetail,
    ReviewActionResponse,
    ReviewStats,
    StatusFilter,
)
from app.services.reviewer_service import get_reviewer_service
from app.services.session_context import SessionContext
from app.services.status_workflow import StatusWorkflowEngine
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/reports", response_model=List[Report])
def list_reports(
    status: StatusFilter = Query(StatusFilter.ALL, description="all | pending | confirmed | rejected"),
    search: Optional[str] = Query(None, max_length=200, description="Matches wallet, description or location"),
    session: SessionContext = Depends(require_session),
):
    """
    Reports for review, newest first.

    `status` is applied by the store; `search` is a case-insensitive
    substring filter applied afterwards.
    """
    return get_reviewer_service().get_reports(filter_status=status, search=search)


@router.get("/reports/{report_id}", response_model=ReportDetail)
def get_report(report_id: str, session: SessionContext = Depends(require_session)):
    """
    One report plus the review actions the dashboard should offer for it.
    """
    report = get_reviewer_service().get_report(report_id)
    return ReportDetail(
        report=report,
        allowed_actions=StatusWorkflowEngine.get_allowed_actions(report.status.value),
    )


@router.post("/reports/{report_id}/confirm", response_model=ReviewActionResponse)
def confirm_report(
    report_id: str,
    request: Optional[ConfirmRequest] = Body(None),
    session: SessionContext = Depends(require_session),
):
    """
    Confirm a report and assign a reward (default 10).

    The confirmed report is then forwarded for anchoring. If anchoring
    fails the response is 502, but the report stays confirmed.

    Raises:
        404: Report not found
        409: Report already rejected, or another action is in flight
        422: Negative reward
        502: Anchoring failed (status already applied)
    """
    reward_amount = request.reward_amount if request else None
    logger.info(f"Reviewer {session.user.id} confirming report {report_id} (reward={reward_amount})")
    report = get_reviewer_service().confirm(report_id, reward_amount)
    return ReviewActionResponse(
        message="Complaint confirmed and reward assigned",
        report=report,
        anchored=True,
    )


@router.post("/reports/{report_id}/reject", response_model=ReviewActionResponse)
def reject_report(report_id: str, session: SessionContext = Depends(require_session)):
    """
    Reject a report (negative reward, amount 0).
    """
    logger.info(f"Reviewer {session.user.id} rejecting report {report_id}")
    report = get_reviewer_service().reject(report_id)
    return ReviewActionResponse(message="Complaint rejected", report=report)


@router.post("/reports/{report_id}/blacklist", response_model=ReviewActionResponse)
def blacklist_report(report_id: str, session: SessionContext = Depends(require_session)):
    """
    Blacklist the wallet that filed this report. Status is unchanged.
    """
    logger.info(f"Reviewer {session.user.id} blacklisting report {report_id}")
    report = get_reviewer_service().blacklist(report_id)
    return ReviewActionResponse(message="Wallet address blacklisted", report=report)


@router.get("/blacklist", response_model=List[Report])
def list_blacklisted(session: SessionContext = Depends(require_session)):
    """
    Reports whose wallet has been blacklisted, newest first.
    """
    return get_reviewer_service().get_blacklisted()


@router.get("/stats", response_model=ReviewStats)
def get_stats(session: SessionContext = Depends(require_session)):
    """
    Dashboard counters: reports per status, blacklisted count, rewards paid.
    """
    return get_reviewer_service().get_stats()
