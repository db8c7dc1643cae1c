from types import SimpleNamespace

import pytest

from app.core.errors import (
    GoalAlreadyCompletedError,
    InvalidAmountError,
    InvalidFrequencyError,
    InvalidStatusTransitionError,
    InvalidTransitionError,
    UnknownCoinError,
)
from app.models.goal import Frequency, GoalStatus
from app.utils.goals import (
    apply_auto_completion,
    apply_goal_update,
    should_auto_complete,
    validate_goal_input,
    validate_status_transition,
)


def make_goal(status=GoalStatus.ACTIVE, invested=0.5, target=1.0, contribution=500.0, frequency=Frequency.MONTHLY):
    return SimpleNamespace(
        status=status,
        invested_amount=invested,
        target_amount=target,
        contribution_amount=contribution,
        frequency=frequency,
    )


class TestStatusTransitions:
    def test_pause_and_resume(self):
        assert validate_status_transition(GoalStatus.ACTIVE, "PAUSED", 0.5, 1.0) == GoalStatus.PAUSED
        assert validate_status_transition(GoalStatus.PAUSED, "ACTIVE", 0.5, 1.0) == GoalStatus.ACTIVE

    def test_same_status_is_noop(self):
        assert validate_status_transition(GoalStatus.PAUSED, GoalStatus.PAUSED, 0.5, 1.0) == GoalStatus.PAUSED

    def test_complete_requires_target_reached(self):
        with pytest.raises(InvalidStatusTransitionError):
            validate_status_transition(GoalStatus.ACTIVE, "COMPLETED", 0.5, 1.0)
        assert validate_status_transition(GoalStatus.PAUSED, "COMPLETED", 1.0, 1.0) == GoalStatus.COMPLETED

    @pytest.mark.parametrize("requested", ["ACTIVE", "PAUSED", "COMPLETED"])
    def test_completed_is_terminal(self, requested):
        with pytest.raises(GoalAlreadyCompletedError):
            validate_status_transition(GoalStatus.COMPLETED, requested, 1.0, 1.0)

    def test_unknown_status(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_status_transition(GoalStatus.ACTIVE, "ARCHIVED", 0.5, 1.0)
        assert exc_info.value.status_code == 422


class TestGoalUpdate:
    def test_applies_all_fields(self):
        goal = make_goal()
        changes = apply_goal_update(goal, {"contribution_amount": 1000, "frequency": "weekly", "status": "PAUSED"})

        assert set(changes) == {"contribution_amount", "frequency", "status"}
        assert goal.contribution_amount == 1000
        assert goal.frequency == Frequency.WEEKLY
        assert goal.status == GoalStatus.PAUSED

    def test_contribution_floor(self):
        goal = make_goal()
        with pytest.raises(InvalidAmountError):
            apply_goal_update(goal, {"contribution_amount": 99})
        assert goal.contribution_amount == 500.0

    def test_invalid_frequency_leaves_goal_untouched(self):
        goal = make_goal()
        with pytest.raises(InvalidFrequencyError):
            apply_goal_update(goal, {"contribution_amount": 1000, "frequency": "YEARLY"})
        assert goal.contribution_amount == 500.0
        assert goal.frequency == Frequency.MONTHLY

    def test_completed_goal_is_read_only(self):
        goal = make_goal(status=GoalStatus.COMPLETED, invested=1.0)
        with pytest.raises(GoalAlreadyCompletedError):
            apply_goal_update(goal, {"contribution_amount": 1000})

    def test_empty_update(self):
        assert apply_goal_update(make_goal(), {"frequency": None}) == {}


class TestAutoCompletion:
    def test_predicate(self):
        assert should_auto_complete(1.0, 1.0)
        assert should_auto_complete(1.001, 1.0)
        assert not should_auto_complete(0.999, 1.0)
        assert not should_auto_complete(1.0, 0)

    def test_active_goal_completes(self):
        goal = make_goal(invested=1.001)
        assert apply_auto_completion(goal) is True
        assert goal.status == GoalStatus.COMPLETED

    def test_paused_goal_is_not_auto_completed(self):
        goal = make_goal(status=GoalStatus.PAUSED, invested=1.0)
        assert apply_auto_completion(goal) is False
        assert goal.status == GoalStatus.PAUSED


class TestGoalInput:
    def test_normalizes(self):
        assert validate_goal_input("btc", 0.5, 500, "monthly") == ("BTC", Frequency.MONTHLY)

    def test_unknown_coin(self):
        with pytest.raises(UnknownCoinError) as exc_info:
            validate_goal_input("DOGE", 100, 500, "DAILY")
        assert exc_info.value.code == "INVALID_COIN"

    @pytest.mark.parametrize("target", [0, -1, 11, float("inf")])
    def test_target_bounds(self, target):
        with pytest.raises(InvalidAmountError):
            validate_goal_input("BTC", target, 500, "DAILY")

    def test_contribution_floor(self):
        with pytest.raises(InvalidAmountError):
            validate_goal_input("SOL", 10, 50, "DAILY")

    def test_frequency(self):
        with pytest.raises(InvalidFrequencyError):
            validate_goal_input("ETH", 1, 500, "HOURLY")
