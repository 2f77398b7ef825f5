"""
RecurrenceRuleParser 테스트
"""

from datetime import date

import pytest

from gyegaboo.models import RepeatType, TxnType
from gyegaboo.services.recurrence_parser import RecurrenceRuleParser

TODAY = date(2025, 1, 10)


class TestRecurrenceRuleParser:
    @pytest.fixture
    def parser(self):
        return RecurrenceRuleParser()

    def test_monthly_maintenance_fee(self, parser):
        """매월 관리비 10만원 고정비 추가해줘"""
        draft = parser.parse("매월 관리비 10만원 고정비 추가해줘", 100_000, "기타", TxnType.EXPENSE, TODAY)
        assert draft is not None
        assert draft.repeat_type == RepeatType.MONTHLY
        assert draft.name == "관리비"
        assert draft.start_date == TODAY
        assert draft.amount == 100_000
        assert draft.category == "기타"
        assert draft.type == TxnType.EXPENSE
        assert draft.repeat_day is None
        assert draft.end_date is None

    def test_monthly_with_day(self, parser):
        draft = parser.parse("매월 25일 월세 50만원", 500_000, "기타", TxnType.EXPENSE, TODAY)
        assert draft.repeat_type == RepeatType.MONTHLY
        assert draft.repeat_day == 25
        assert draft.name == "월세"

    def test_weekly_with_weekday(self, parser):
        """요일은 0=일요일 기준"""
        draft = parser.parse("매주 월요일 헬스 3만원", 30_000, "기타", TxnType.EXPENSE, TODAY)
        assert draft.repeat_type == RepeatType.WEEKLY
        assert draft.repeat_day == 1
        assert draft.name == "헬스"

    def test_daily(self, parser):
        draft = parser.parse("매일 커피 4500원", 4_500, "식비", TxnType.EXPENSE, TODAY)
        assert draft.repeat_type == RepeatType.DAILY
        assert draft.repeat_day is None

    def test_yearly(self, parser):
        draft = parser.parse("매년 자동차 보험 120만원", 1_200_000, "기타", TxnType.EXPENSE, TODAY)
        assert draft.repeat_type == RepeatType.YEARLY
        assert draft.name == "자동차 보험"

    def test_english_cadence(self, parser):
        assert parser.extract_repeat_type("gym weekly 30000") == RepeatType.WEEKLY
        assert parser.extract_repeat_type("netflix subscription 17000") == RepeatType.MONTHLY

    def test_end_date_marker(self, parser):
        draft = parser.parse(
            "매월 넷플릭스 17000원 구독 2025-12-31까지", 17_000, "기타", TxnType.EXPENSE, TODAY
        )
        assert draft.end_date == date(2025, 12, 31)
        assert draft.start_date == TODAY
        assert draft.name == "넷플릭스"

    def test_explicit_start_and_tilde_end(self, parser):
        draft = parser.parse(
            "매월 적금 2025-02-01 ~2025-06-30 20만원", 200_000, "기타", TxnType.EXPENSE, TODAY
        )
        assert draft.start_date == date(2025, 2, 1)
        assert draft.end_date == date(2025, 6, 30)

    def test_end_before_start_is_dropped(self, parser):
        draft = parser.parse("매월 적금 20만원 2024-12-31까지", 200_000, "기타", TxnType.EXPENSE, TODAY)
        assert draft.end_date is None

    def test_name_falls_back_to_category(self, parser):
        draft = parser.parse("매월 10만원 고정비", 100_000, "기타", TxnType.EXPENSE, TODAY)
        assert draft.name == "기타"

    def test_description_keeps_input_text(self, parser):
        text = "매월 관리비 10만원 고정비 추가해줘"
        draft = parser.parse(text, 100_000, "기타", TxnType.EXPENSE, TODAY)
        assert draft.description == text

    def test_no_amount(self, parser):
        assert parser.parse("매월 관리비", None, "기타", TxnType.EXPENSE, TODAY) is None
        assert parser.parse("매월 관리비", 0, "기타", TxnType.EXPENSE, TODAY) is None
