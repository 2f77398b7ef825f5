"""
고정비(반복 항목) 규칙 기반 파서

금액/유형/카테고리는 호출자가 AmountCategoryDateParser로 먼저 구해서 넘긴다.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Optional, Sequence

from ..models import RepeatType, TxnType
from ..schemas import RecurringDefinitionDraft
from ..utils.normalization import collapse_whitespace
from .entry_parser import ISO_DATE_RE, remove_words, strip_amount_tokens
from .vocabulary import (
    RECURRENCE_MARKERS,
    REPEAT_TYPE_RULES,
    REQUEST_FILLERS,
    WEEKDAY_NAMES,
    Predicate,
    first_match,
)

DAY_OF_MONTH_RE = re.compile(r"(?<![\d,.])(\d{1,2})\s*일(?!요일)")
# "~2025-12-31", "2025-12-31까지", "until 2025-12-31"
END_DATE_RE = re.compile(
    r"(?:~\s*|until\s+)(\d{4})-(\d{1,2})-(\d{1,2})"
    r"|(\d{4})-(\d{1,2})-(\d{1,2})\s*까지",
    re.IGNORECASE,
)
WEEKDAY_TOKEN_RE = re.compile(
    r"[일월화수목금토]요일|(?:sun|mon|tues|wednes|thurs|fri|satur)day",
    re.IGNORECASE,
)


def _safe_date(year: str, month: str, day: str) -> Optional[dt.date]:
    try:
        return dt.date(int(year), int(month), int(day))
    except ValueError:
        return None


class RecurrenceRuleParser:
    """자연어에서 반복 주기, 반복일, 시작/만료일, 이름을 추출"""

    def __init__(
        self,
        repeat_type_rules: Sequence[tuple[RepeatType, Predicate]] = REPEAT_TYPE_RULES,
        default_repeat_type: RepeatType = RepeatType.MONTHLY,
    ) -> None:
        self.repeat_type_rules = list(repeat_type_rules)
        self.default_repeat_type = default_repeat_type

    def parse(
        self,
        text: str,
        amount: Optional[int],
        category: str,
        type_: TxnType,
        today: dt.date,
    ) -> Optional[RecurringDefinitionDraft]:
        """
        고정비 초안 생성

        Args:
            text: 사용자 입력 (예: "매월 관리비 10만원 고정비 추가해줘")
            amount: 호출자가 추출한 금액 (양수여야 함)
            category: 호출자가 추출한 카테고리
            type_: 수입/지출
            today: 시작일 기본값

        Returns:
            RecurringDefinitionDraft, 금액이 없으면 None
        """
        if not amount or amount <= 0:
            return None

        repeat_type = self.extract_repeat_type(text)
        start_date = self.extract_start_date(text, today)
        end_date = self.extract_end_date(text)
        if end_date is not None and end_date < start_date:
            end_date = None

        return RecurringDefinitionDraft(
            name=self.extract_name(text) or category,
            amount=amount,
            category=category,
            description=text.strip(),
            type=type_,
            repeat_type=repeat_type,
            repeat_day=self.extract_repeat_day(text, repeat_type),
            start_date=start_date,
            end_date=end_date,
        )

    def extract_repeat_type(self, text: str) -> RepeatType:
        return first_match(self.repeat_type_rules, text or "") or self.default_repeat_type

    def extract_repeat_day(self, text: str, repeat_type: RepeatType) -> Optional[int]:
        if repeat_type == RepeatType.WEEKLY:
            return first_match(WEEKDAY_NAMES, text or "")
        if repeat_type == RepeatType.MONTHLY:
            for match in DAY_OF_MONTH_RE.finditer(text or ""):
                day = int(match.group(1))
                if 1 <= day <= 31:
                    return day
        return None

    def extract_start_date(self, text: str, today: dt.date) -> dt.date:
        end_spans = [m.span() for m in END_DATE_RE.finditer(text or "")]
        for match in ISO_DATE_RE.finditer(text or ""):
            start, _ = match.span()
            if any(s <= start < e for s, e in end_spans):
                continue
            parsed = _safe_date(match.group(1), match.group(2), match.group(3))
            if parsed is not None:
                return parsed
        return today

    def extract_end_date(self, text: str) -> Optional[dt.date]:
        match = END_DATE_RE.search(text or "")
        if not match:
            return None
        if match.group(1):
            return _safe_date(match.group(1), match.group(2), match.group(3))
        return _safe_date(match.group(4), match.group(5), match.group(6))

    def extract_name(self, text: str) -> str:
        cleaned = END_DATE_RE.sub(" ", text or "")
        cleaned = ISO_DATE_RE.sub(" ", cleaned)
        cleaned = DAY_OF_MONTH_RE.sub(" ", cleaned)
        cleaned = WEEKDAY_TOKEN_RE.sub(" ", cleaned)
        cleaned = strip_amount_tokens(cleaned)
        cleaned = remove_words(cleaned, RECURRENCE_MARKERS + REQUEST_FILLERS)
        cleaned = re.sub(r"[~,]", " ", cleaned)
        return collapse_whitespace(cleaned)
