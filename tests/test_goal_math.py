from datetime import datetime, timezone

import pytest

from app.core.errors import GoalDurationTooLongError, InvalidInputError
from app.models.goal import Frequency
from app.utils.goals import (
    add_months,
    calculate_estimated_completion,
    calculate_progress,
    calculate_remaining,
    next_investment_date,
)

NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


class TestProgress:
    def test_partial(self):
        assert calculate_progress(0.5, 1.0) == 50.0

    def test_exactly_at_target(self):
        assert calculate_progress(1.0, 1.0) == 100.0

    def test_overshoot_is_clamped(self):
        assert calculate_progress(1.001, 1.0) == 100.0

    def test_just_below_target_is_not_100(self):
        assert calculate_progress(0.9999999999999, 1.0) < 100.0

    def test_zero_target_returns_zero(self):
        assert calculate_progress(0.5, 0) == 0.0
        assert calculate_progress(0.5, -1) == 0.0

    def test_never_negative(self):
        assert calculate_progress(-0.1, 1.0) == 0.0

    def test_monotonic_in_invested(self):
        invested = [0, 0.1, 0.25, 0.5, 0.999, 1.0, 1.5]
        values = [calculate_progress(i, 1.0) for i in invested]
        assert values == sorted(values)

    def test_remaining(self):
        assert calculate_remaining(0.25, 1.0) == 0.75
        assert calculate_remaining(1.5, 1.0) == 0.0


class TestEstimatedCompletion:
    async def test_monthly_scenario(self, oracle):
        eta = await calculate_estimated_completion("BTC", 0.1, 500, Frequency.MONTHLY, oracle=oracle, now=NOW)

        assert eta.intervals_needed == 12
        assert eta.months_to_complete == 12
        assert eta.total_cost_reference == 6000.0
        assert eta.estimated_completion_date == datetime(2027, 1, 15, 9, 30, tzinfo=timezone.utc)

    async def test_exact_cost_does_not_round_up(self, oracle):
        eta = await calculate_estimated_completion("ETH", 0.07, 105, "MONTHLY", oracle=oracle, now=NOW)
        assert eta.total_cost_reference == 210.0
        assert eta.intervals_needed == 2

    async def test_daily(self, oracle):
        eta = await calculate_estimated_completion("BTC", 0.01, 500, "daily", oracle=oracle, now=NOW)

        assert eta.intervals_needed == 2
        assert eta.estimated_completion_date == datetime(2026, 1, 17, 9, 30, tzinfo=timezone.utc)
        assert eta.months_to_complete == 0

    async def test_weekly(self, oracle):
        eta = await calculate_estimated_completion("ETH", 1, 300, Frequency.WEEKLY, oracle=oracle, now=NOW)

        assert eta.intervals_needed == 10
        assert eta.estimated_completion_date == datetime(2026, 3, 26, 9, 30, tzinfo=timezone.utc)
        assert eta.months_to_complete == 2

    async def test_nothing_remaining(self, oracle):
        eta = await calculate_estimated_completion("BTC", 0, 500, Frequency.MONTHLY, oracle=oracle, now=NOW)
        assert eta.intervals_needed == 0
        assert eta.estimated_completion_date == NOW

    async def test_larger_contribution_never_later(self, oracle):
        dates = [
            (await calculate_estimated_completion("SOL", 20, c, Frequency.WEEKLY, oracle=oracle, now=NOW)).estimated_completion_date
            for c in (100, 250, 500, 1000, 3000)
        ]
        assert dates == sorted(dates, reverse=True)

    async def test_ten_year_horizon_is_allowed(self, oracle):
        eta = await calculate_estimated_completion("BTC", 0.1, 50, Frequency.MONTHLY, oracle=oracle, now=NOW)
        assert eta.intervals_needed == 120

    async def test_beyond_ten_years_monthly(self, oracle):
        with pytest.raises(GoalDurationTooLongError) as exc_info:
            await calculate_estimated_completion("BTC", 0.1, 49, Frequency.MONTHLY, oracle=oracle, now=NOW)
        assert exc_info.value.months == 123
        assert exc_info.value.code == "GOAL_DURATION_TOO_LONG"

    async def test_beyond_ten_years_daily(self, oracle):
        with pytest.raises(GoalDurationTooLongError):
            await calculate_estimated_completion("BTC", 10, 100, Frequency.DAILY, oracle=oracle, now=NOW)

    @pytest.mark.parametrize("contribution", [0, -100, float("nan")])
    async def test_invalid_contribution(self, oracle, contribution):
        with pytest.raises(InvalidInputError):
            await calculate_estimated_completion("BTC", 0.1, contribution, Frequency.MONTHLY, oracle=oracle, now=NOW)

    async def test_negative_remaining(self, oracle):
        with pytest.raises(InvalidInputError):
            await calculate_estimated_completion("BTC", -0.1, 500, Frequency.MONTHLY, oracle=oracle, now=NOW)


class TestCalendar:
    def test_end_of_month_clamps(self):
        assert add_months(datetime(2025, 1, 31), 1) == datetime(2025, 2, 28)

    def test_leap_year(self):
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)

    def test_year_rollover(self):
        assert add_months(datetime(2025, 11, 30), 3) == datetime(2026, 2, 28)
        assert add_months(datetime(2025, 12, 15), 1) == datetime(2026, 1, 15)

    def test_next_investment_date(self):
        assert next_investment_date("WEEKLY", NOW) == datetime(2026, 1, 22, 9, 30, tzinfo=timezone.utc)
        assert next_investment_date(Frequency.MONTHLY, NOW) == datetime(2026, 2, 15, 9, 30, tzinfo=timezone.utc)
