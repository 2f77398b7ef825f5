"""
고정비 발생 여부 판정

기준 날짜는 항상 인자로 받는다 (내부에서 시계를 읽지 않음).
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional, Protocol

from ..models import RepeatType

WEEKLY_MIN_ELAPSED_DAYS = 7


class RecurrenceSchedule(Protocol):
    repeat_type: RepeatType
    repeat_day: Optional[int]
    start_date: dt.date
    end_date: Optional[dt.date]
    last_processed_date: Optional[dt.date]


class PeriodState(str, Enum):
    NOT_STARTED = "not_started"
    ELIGIBLE_UNFIRED = "eligible_unfired"
    FIRED_THIS_PERIOD = "fired_this_period"
    EXPIRED = "expired"


def sunday_based_weekday(d: dt.date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return d.isoweekday() % 7


def _anniversary_reached(start: dt.date, target: dt.date) -> bool:
    return (target.month, target.day) >= (start.month, start.day)


def within_window(definition: RecurrenceSchedule, target: dt.date) -> bool:
    if target < definition.start_date:
        return False
    if definition.end_date is not None and target > definition.end_date:
        return False
    return True


def _period_elapsed(definition: RecurrenceSchedule, target: dt.date) -> bool:
    last = definition.last_processed_date
    if last is None:
        return True

    if definition.repeat_type == RepeatType.DAILY:
        return target > last
    if definition.repeat_type == RepeatType.WEEKLY:
        return (target - last).days >= WEEKLY_MIN_ELAPSED_DAYS
    if definition.repeat_type == RepeatType.MONTHLY:
        return (target.year, target.month) > (last.year, last.month)
    if definition.repeat_type == RepeatType.YEARLY:
        return target.year > last.year and _anniversary_reached(definition.start_date, target)
    return False


def _day_matches(definition: RecurrenceSchedule, target: dt.date) -> bool:
    if definition.repeat_day is None:
        return True
    if definition.repeat_type == RepeatType.WEEKLY:
        return sunday_based_weekday(target) == definition.repeat_day
    if definition.repeat_type == RepeatType.MONTHLY:
        return target.day == definition.repeat_day
    return True


def is_due(definition: RecurrenceSchedule, target_date: dt.date) -> bool:
    """Return True when an occurrence must be materialized for ``target_date``.

    - Outside [start_date, end_date] nothing is due.
    - daily: once per calendar day.
    - weekly: on ``repeat_day`` (0 = Sunday) when set, at least 7 days after
      the previous occurrence.
    - monthly: on ``repeat_day`` (day of month) when set, once per calendar
      month.
    - yearly: once per calendar year, not before the start date's anniversary.
    """
    if not within_window(definition, target_date):
        return False
    if not _day_matches(definition, target_date):
        return False
    return _period_elapsed(definition, target_date)


def period_state(definition: RecurrenceSchedule, target_date: dt.date) -> PeriodState:
    """Classify ``target_date`` for one definition (diagnostics only)."""
    if target_date < definition.start_date:
        return PeriodState.NOT_STARTED
    if definition.end_date is not None and target_date > definition.end_date:
        return PeriodState.EXPIRED
    if _period_elapsed(definition, target_date):
        return PeriodState.ELIGIBLE_UNFIRED
    return PeriodState.FIRED_THIS_PERIOD


class RecurrenceEvaluator:
    """Object wrapper around :func:`is_due` for injection into the scheduler."""

    def is_due(self, definition: RecurrenceSchedule, target_date: dt.date) -> bool:
        return is_due(definition, target_date)

    def period_state(self, definition: RecurrenceSchedule, target_date: dt.date) -> PeriodState:
        return period_state(definition, target_date)

    def within_window(self, definition: RecurrenceSchedule, target_date: dt.date) -> bool:
        return within_window(definition, target_date)
