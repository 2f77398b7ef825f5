"""
고정비 발생 여부 판정 테스트
"""

from datetime import date
from typing import Optional

import pytest

from gyegaboo import schemas
from gyegaboo.models import RepeatType
from gyegaboo.services.recurrence import (
    PeriodState,
    RecurrenceEvaluator,
    is_due,
    period_state,
    sunday_based_weekday,
)


def _definition(
    repeat_type: RepeatType,
    start: date,
    last: Optional[date] = None,
    repeat_day: Optional[int] = None,
    end: Optional[date] = None,
) -> schemas.RecurringDefinition:
    return schemas.RecurringDefinition(
        id="def-1",
        name="테스트",
        amount=10_000,
        category="기타",
        repeat_type=repeat_type,
        repeat_day=repeat_day,
        start_date=start,
        end_date=end,
        last_processed_date=last,
    )


class TestWindow:
    def test_before_start(self):
        d = _definition(RepeatType.DAILY, start=date(2024, 1, 10))
        assert is_due(d, date(2024, 1, 9)) is False

    def test_on_start(self):
        d = _definition(RepeatType.DAILY, start=date(2024, 1, 10))
        assert is_due(d, date(2024, 1, 10)) is True

    def test_after_end(self):
        d = _definition(RepeatType.DAILY, start=date(2024, 1, 1), end=date(2024, 1, 31))
        assert is_due(d, date(2024, 1, 31)) is True
        assert is_due(d, date(2024, 2, 1)) is False


class TestDaily:
    def test_same_day_not_due(self):
        d = _definition(RepeatType.DAILY, start=date(2024, 1, 1), last=date(2024, 1, 10))
        assert is_due(d, date(2024, 1, 10)) is False

    def test_next_day_due(self):
        d = _definition(RepeatType.DAILY, start=date(2024, 1, 1), last=date(2024, 1, 10))
        assert is_due(d, date(2024, 1, 11)) is True


class TestWeekly:
    def test_sunday_based_weekday(self):
        assert sunday_based_weekday(date(2024, 1, 7)) == 0  # 일요일
        assert sunday_based_weekday(date(2024, 1, 8)) == 1  # 월요일
        assert sunday_based_weekday(date(2024, 1, 13)) == 6  # 토요일

    def test_repeat_day_must_match(self):
        d = _definition(RepeatType.WEEKLY, start=date(2024, 1, 1), repeat_day=1)
        assert is_due(d, date(2024, 1, 8)) is True
        assert is_due(d, date(2024, 1, 9)) is False

    def test_seven_days_elapsed(self):
        d = _definition(RepeatType.WEEKLY, start=date(2024, 1, 1), repeat_day=1, last=date(2024, 1, 1))
        assert is_due(d, date(2024, 1, 1)) is False
        assert is_due(d, date(2024, 1, 8)) is True

    def test_without_repeat_day(self):
        d = _definition(RepeatType.WEEKLY, start=date(2024, 1, 1), last=date(2024, 1, 3))
        assert is_due(d, date(2024, 1, 9)) is False
        assert is_due(d, date(2024, 1, 10)) is True


class TestMonthly:
    def test_repeat_day(self):
        d = _definition(RepeatType.MONTHLY, start=date(2024, 1, 1), repeat_day=15, last=date(2024, 1, 15))
        assert is_due(d, date(2024, 2, 14)) is False
        assert is_due(d, date(2024, 2, 15)) is True

    def test_once_per_month(self):
        d = _definition(RepeatType.MONTHLY, start=date(2024, 1, 1), last=date(2024, 2, 1))
        assert is_due(d, date(2024, 2, 28)) is False
        assert is_due(d, date(2024, 3, 1)) is True

    def test_year_rollover(self):
        d = _definition(RepeatType.MONTHLY, start=date(2023, 1, 1), repeat_day=10, last=date(2023, 12, 10))
        assert is_due(d, date(2024, 1, 10)) is True

    def test_day_31_skips_short_months(self):
        d = _definition(RepeatType.MONTHLY, start=date(2024, 1, 1), repeat_day=31, last=date(2024, 1, 31))
        assert is_due(d, date(2024, 2, 29)) is False
        assert is_due(d, date(2024, 3, 31)) is True


class TestYearly:
    def test_anniversary(self):
        d = _definition(RepeatType.YEARLY, start=date(2023, 6, 1), last=date(2023, 6, 1))
        assert is_due(d, date(2024, 5, 31)) is False
        assert is_due(d, date(2024, 6, 1)) is True

    def test_same_year_not_due(self):
        d = _definition(RepeatType.YEARLY, start=date(2023, 6, 1), last=date(2023, 6, 1))
        assert is_due(d, date(2023, 12, 31)) is False

    def test_first_occurrence(self):
        d = _definition(RepeatType.YEARLY, start=date(2023, 6, 1))
        assert is_due(d, date(2023, 6, 1)) is True


class TestPeriodState:
    def test_states(self):
        d = _definition(
            RepeatType.MONTHLY,
            start=date(2024, 1, 1),
            end=date(2024, 12, 31),
            last=date(2024, 3, 5),
        )
        assert period_state(d, date(2023, 12, 31)) == PeriodState.NOT_STARTED
        assert period_state(d, date(2024, 3, 20)) == PeriodState.FIRED_THIS_PERIOD
        assert period_state(d, date(2024, 4, 1)) == PeriodState.ELIGIBLE_UNFIRED
        assert period_state(d, date(2025, 1, 1)) == PeriodState.EXPIRED


@pytest.mark.parametrize("repeat_type", list(RepeatType))
def test_evaluator_matches_function(repeat_type):
    evaluator = RecurrenceEvaluator()
    d = _definition(repeat_type, start=date(2024, 1, 1))
    target = date(2024, 1, 1)
    assert evaluator.is_due(d, target) == is_due(d, target)
    assert evaluator.period_state(d, target) == period_state(d, target)
