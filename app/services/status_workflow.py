"""
Status Workflow Engine - review state machine for reports.

DESIGN PRINCIPLES:
- PENDING is the only non-terminal state
- A report leaves PENDING exactly once (CONFIRMED or REJECTED)
- CONFIRMED ↔ REJECTED is never allowed
- Reward fields are derived from the status, never set independently
- Blacklisting is orthogonal and never touches status
"""

from typing import Dict, List, Optional
import logging

from app.core.exceptions import InvalidTransitionError, ValidationError
from app.models.report import ReportStatus, RewardType

logger = logging.getLogger(__name__)


class ReviewAction:
    CONFIRM = "confirm"
    REJECT = "reject"
    BLACKLIST = "blacklist"


class StatusWorkflowEngine:
    """
    State machine for report review transitions.

    Rules:
    - PENDING → CONFIRMED | REJECTED
    - CONFIRMED, REJECTED are terminal
    """

    # Allowed transitions map: {from_status: [to_status, ...]}
    ALLOWED_TRANSITIONS: Dict[ReportStatus, List[ReportStatus]] = {
        ReportStatus.PENDING: [ReportStatus.CONFIRMED, ReportStatus.REJECTED],
        ReportStatus.CONFIRMED: [],
        ReportStatus.REJECTED: [],
    }

    @classmethod
    def is_valid_transition(cls, from_status: str, to_status: str) -> bool:
        """
        Check if a status transition is valid.

        Args:
            from_status: Current status
            to_status: Desired new status

        Returns:
            True if transition is allowed, False otherwise
        """
        try:
            from_enum = ReportStatus(from_status)
            to_enum = ReportStatus(to_status)
        except ValueError:
            return False

        # Re-applying a terminal status is allowed; it rewrites the reward fields
        if from_enum == to_enum and from_enum != ReportStatus.PENDING:
            return True

        return to_enum in cls.ALLOWED_TRANSITIONS.get(from_enum, [])

    @classmethod
    def get_allowed_transitions(cls, current_status: str) -> List[str]:
        try:
            current_enum = ReportStatus(current_status)
        except ValueError:
            return []
        return [status.value for status in cls.ALLOWED_TRANSITIONS.get(current_enum, [])]

    @classmethod
    def get_allowed_actions(cls, current_status: str) -> List[str]:
        """
        Review actions the dashboard may offer for a report.
        Blacklist is always offered; confirm/reject only while pending.
        """
        actions = []
        allowed = cls.get_allowed_transitions(current_status)
        if ReportStatus.CONFIRMED.value in allowed:
            actions.append(ReviewAction.CONFIRM)
        if ReportStatus.REJECTED.value in allowed:
            actions.append(ReviewAction.REJECT)
        actions.append(ReviewAction.BLACKLIST)
        return actions

    @classmethod
    def reward_fields_for(cls, status: str, reward_amount: Optional[float] = None) -> Dict:
        """
        Reward fields that must accompany a status.

        Args:
            status: Target status
            reward_amount: Operator-entered reward (CONFIRMED only)

        Returns:
            Dict of reward_type / reward_amount to persist with the status

        Raises:
            ValidationError: If the reward amount is missing or negative on confirm
        """
        status_enum = ReportStatus(status)

        if status_enum == ReportStatus.CONFIRMED:
            if reward_amount is None:
                raise ValidationError("Reward amount is required to confirm a report")
            if reward_amount < 0:
                raise ValidationError("Reward amount must be zero or greater")
            return {"reward_type": RewardType.POSITIVE.value, "reward_amount": reward_amount}

        if status_enum == ReportStatus.REJECTED:
            return {"reward_type": RewardType.NEGATIVE.value, "reward_amount": 0}

        return {"reward_type": None, "reward_amount": None}

    @classmethod
    def is_consistent(cls, report: Dict) -> bool:
        """Check the (status, reward_type, reward_amount) invariant on a stored report."""
        status = report.get("status")
        reward_type = report.get("reward_type")
        reward_amount = report.get("reward_amount")

        if status == ReportStatus.CONFIRMED.value:
            return reward_type == RewardType.POSITIVE.value and reward_amount is not None
        if status == ReportStatus.REJECTED.value:
            return reward_type == RewardType.NEGATIVE.value and reward_amount == 0
        if status == ReportStatus.PENDING.value:
            return reward_type is None and reward_amount is None
        return False

    @classmethod
    def validate_and_transition(
        cls,
        current_status: str,
        new_status: str,
        reward_amount: Optional[float] = None
    ) -> Dict:
        """
        Validate a transition and build the update to persist.

        Args:
            current_status: Current status
            new_status: Desired new status
            reward_amount: Reward for CONFIRMED

        Returns:
            Dict of fields to write (status + reward fields)

        Raises:
            InvalidTransitionError: If transition is invalid
        """
        if not cls.is_valid_transition(current_status, new_status):
            allowed = cls.get_allowed_transitions(current_status)
            raise InvalidTransitionError(
                f"Invalid status transition: {current_status} → {new_status}. "
                f"Allowed transitions from {current_status}: {allowed}"
            )

        update = {"status": new_status}
        update.update(cls.reward_fields_for(new_status, reward_amount))
        return update
