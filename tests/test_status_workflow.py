"""
Tests for the review state machine.
"""

import pytest

from app.core.exceptions import InvalidTransitionError, ValidationError
from app.services.status_workflow import StatusWorkflowEngine


@pytest.mark.parametrize("current, new, allowed", [
    ("pending", "confirmed", True),
    ("pending", "rejected", True),
    ("confirmed", "confirmed", True),
    ("rejected", "rejected", True),
    ("confirmed", "rejected", False),
    ("rejected", "confirmed", False),
    ("confirmed", "pending", False),
    ("pending", "pending", False),
    ("pending", "archived", False),
])
def test_transitions(current, new, allowed):
    assert StatusWorkflowEngine.is_valid_transition(current, new) is allowed


def test_confirm_update_carries_reward():
    update = StatusWorkflowEngine.validate_and_transition("pending", "confirmed", reward_amount=15)
    assert update == {"status": "confirmed", "reward_type": "positive", "reward_amount": 15}


def test_reject_update_zeroes_reward():
    update = StatusWorkflowEngine.validate_and_transition("pending", "rejected")
    assert update == {"status": "rejected", "reward_type": "negative", "reward_amount": 0}


def test_invalid_transition_raises():
    with pytest.raises(InvalidTransitionError):
        StatusWorkflowEngine.validate_and_transition("rejected", "confirmed", reward_amount=10)


@pytest.mark.parametrize("amount", [None, -5])
def test_confirm_requires_valid_reward(amount):
    with pytest.raises(ValidationError):
        StatusWorkflowEngine.validate_and_transition("pending", "confirmed", reward_amount=amount)


def test_allowed_actions():
    assert StatusWorkflowEngine.get_allowed_actions("pending") == ["confirm", "reject", "blacklist"]
    assert StatusWorkflowEngine.get_allowed_actions("rejected") == ["blacklist"]


@pytest.mark.parametrize("doc, consistent", [
    ({"status": "pending", "reward_type": None, "reward_amount": None}, True),
    ({"status": "confirmed", "reward_type": "positive", "reward_amount": 0}, True),
    ({"status": "rejected", "reward_type": "negative", "reward_amount": 0}, True),
    ({"status": "pending", "reward_type": "positive", "reward_amount": 10}, False),
    ({"status": "confirmed", "reward_type": "positive", "reward_amount": None}, False),
    ({"status": "rejected", "reward_type": "negative", "reward_amount": 5}, False),
    ({"status": "unknown"}, False),
])
def test_is_consistent(doc, consistent):
    assert StatusWorkflowEngine.is_consistent(doc) is consistent
