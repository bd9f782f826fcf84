"""
Reviewer Service - admin-side review workflow.

DESIGN PRINCIPLES:
- Every mutation is persisted immediately, then re-read from the store
- Confirm/reject go through the status workflow engine
- Blacklisting is independent of status
- Anchoring runs after the confirm write and never reverts it
- One action per report at a time within this process (advisory only;
  reviewers on other processes race and the last write wins)
"""

from contextlib import contextmanager
from typing import List, Optional, Set
import logging
import threading

from app.core.exceptions import ActionInProgressError, AnchorError
from app.core.settings import settings
from app.models.report import Report, ReportStatus, ReviewStats, StatusFilter
from app.services.anchoring_service import AnchoringService, get_anchoring_service
from app.services.report_store import ReportStore, get_report_store
from app.services.status_workflow import StatusWorkflowEngine

logger = logging.getLogger(__name__)


def matches_search(report: Report, search: Optional[str]) -> bool:
    """
    Case-insensitive substring match on wallet address, description or location.
    An empty search matches everything.
    """
    if not search:
        return True
    term = search.lower()
    return (
        term in (report.wallet_address or "").lower()
        or term in (report.description or "").lower()
        or term in (report.location or "").lower()
    )


class ReviewerService:
    """
    Service for reviewer operations on reports.
    """

    def __init__(
        self,
        store: Optional[ReportStore] = None,
        anchoring: Optional[AnchoringService] = None,
    ):
        self.store = store or get_report_store()
        self.anchoring = anchoring or get_anchoring_service()
        self.workflow = StatusWorkflowEngine()
        self._processing: Set[str] = set()
        self._lock = threading.Lock()

    @contextmanager
    def _processing_marker(self, report_id: str):
        with self._lock:
            if report_id in self._processing:
                raise ActionInProgressError(f"Another action on report {report_id} is in progress")
            self._processing.add(report_id)
        try:
            yield
        finally:
            with self._lock:
                self._processing.discard(report_id)

    def is_processing(self, report_id: str) -> bool:
        with self._lock:
            return report_id in self._processing

    def get_reports(
        self,
        filter_status: StatusFilter = StatusFilter.ALL,
        search: Optional[str] = None,
    ) -> List[Report]:
        """
        Fetch reports for the dashboard.

        Args:
            filter_status: Store-side status filter; ALL omits it
            search: View-level substring filter applied after the fetch

        Returns:
            Reports newest first
        """
        status = None if filter_status == StatusFilter.ALL else filter_status.value
        reports = self.store.list_reports(status=status)
        return [r for r in reports if matches_search(r, search)]

    def get_report(self, report_id: str) -> Report:
        return self.store.get_report(report_id)

    def get_blacklisted(self) -> List[Report]:
        return self.store.list_reports(blacklisted=True)

    def get_stats(self) -> ReviewStats:
        reports = self.store.list_reports()
        by_status = {status: 0 for status in ReportStatus}
        for report in reports:
            by_status[report.status] += 1
        return ReviewStats(
            total=len(reports),
            pending=by_status[ReportStatus.PENDING],
            confirmed=by_status[ReportStatus.CONFIRMED],
            rejected=by_status[ReportStatus.REJECTED],
            blacklisted=sum(1 for r in reports if r.is_blacklisted),
            total_reward=sum(r.reward_amount or 0 for r in reports if r.status == ReportStatus.CONFIRMED),
        )

    def _transition(self, report_id: str, new_status: ReportStatus, reward_amount: Optional[float] = None) -> Report:
        report = self.store.get_report(report_id)
        update = self.workflow.validate_and_transition(
            current_status=report.status.value,
            new_status=new_status.value,
            reward_amount=reward_amount,
        )
        self.store.update_report(report_id, update)
        logger.info(f"✅ Report {report_id}: {report.status.value} → {new_status.value}")
        return self.store.get_report(report_id)

    def confirm(self, report_id: str, reward_amount: Optional[float] = None) -> Report:
        """
        Confirm a report, assign its reward and anchor it.

        Re-confirming an already confirmed report rewrites the reward (last
        write wins) and anchors again.

        Raises:
            InvalidTransitionError: Report was rejected
            ValidationError: Negative reward
            AnchorError: Anchoring failed; the report stays confirmed
        """
        amount = settings.DEFAULT_REWARD_AMOUNT if reward_amount is None else reward_amount

        with self._processing_marker(report_id):
            confirmed = self._transition(report_id, ReportStatus.CONFIRMED, amount)
            try:
                self.anchoring.anchor_report(confirmed)
            except AnchorError as e:
                logger.error(f"Error confirming report {report_id}: anchoring failed, status kept: {e.message}")
                raise AnchorError(f"Report confirmed, but anchoring failed: {e.message}")

        return confirmed

    def reject(self, report_id: str) -> Report:
        """
        Reject a report (negative reward, amount 0). No external forwarding.
        """
        with self._processing_marker(report_id):
            return self._transition(report_id, ReportStatus.REJECTED)

    def blacklist(self, report_id: str) -> Report:
        """
        Flag the report's submitter as untrusted. Status is left as is.
        """
        with self._processing_marker(report_id):
            self.store.get_report(report_id)
            self.store.update_report(report_id, {"is_blacklisted": True})
            logger.info(f"✅ Report {report_id} wallet blacklisted")
            return self.store.get_report(report_id)


# Global service instance (singleton pattern)
_reviewer_service = None


def get_reviewer_service() -> ReviewerService:
    """
    Get or create ReviewerService singleton instance.

    Returns:
        ReviewerService: The global reviewer service instance
    """
    global _reviewer_service
    if _reviewer_service is None:
        _reviewer_service = ReviewerService()
    return _reviewer_service
