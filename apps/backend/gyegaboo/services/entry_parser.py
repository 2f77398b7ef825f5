"""
자연어 가계부 항목 파서 (규칙 기반)

책임:
- 금액 추출 (만/천 단위 포함)
- 날짜 추출 (오늘/어제/YYYY-MM-DD/M/D)
- 수입/지출 판별
- 카테고리 판별 (순서 있는 키워드 표, 처음 일치 우선)
- 설명 정리
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from ..models import TxnType
from ..schemas import LedgerEntryDraft
from ..utils.normalization import collapse_whitespace
from .vocabulary import (
    CATEGORY_RULES,
    DEFAULT_CATEGORY,
    INCOME_KEYWORDS,
    TODAY_WORDS,
    TYPE_WORDS,
    YESTERDAY_WORDS,
    Predicate,
    contains_any,
    first_match,
)

ISO_DATE_RE = re.compile(r"(?<!\d)(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)")
MONTH_DAY_RE = re.compile(r"(?<![\d/-])(\d{1,2})/(\d{1,2})(?![\d/])")
# "15일", "3월", "15일에", "6월까지" 같은 날짜 표현 ("일식", "월세", "월요일"은 제외)
DAY_MONTH_TOKEN_RE = re.compile(r"(?<![\d,.])\d{1,2}\s*(?:일|월)(?=까지|부터|마다|에|[^가-힣]|$)")
# 쉼표 묶음은 자릿수와 관계없이 숫자로 합친다 ("12,34" → 1234)
AMOUNT_RE = re.compile(r"(\d+(?:,\d+)+|\d+(?:\.\d+)?)\s*(만|천)?\s*원?")

MAGNITUDES = {"만": 10_000, "천": 1_000}


def mask_date_tokens(text: str) -> str:
    """Blank out date-like tokens so they are never read as amounts.

    Positions are preserved (tokens are replaced by spaces of equal length).
    """
    blank = lambda m: " " * len(m.group(0))  # noqa: E731
    masked = ISO_DATE_RE.sub(blank, text)
    masked = MONTH_DAY_RE.sub(blank, masked)
    return DAY_MONTH_TOKEN_RE.sub(blank, masked)


def amount_from_match(match: re.Match[str]) -> Optional[int]:
    raw = match.group(1).replace(",", "")
    try:
        value = Decimal(raw)
    except InvalidOperation:
        return None
    magnitude = match.group(2)
    if magnitude:
        value *= MAGNITUDES[magnitude]
    return int(value)


def strip_amount_tokens(text: str) -> str:
    return AMOUNT_RE.sub(" ", mask_date_tokens(text)) if text else text


def remove_words(text: str, words: Sequence[str]) -> str:
    if not words:
        return text
    pattern = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.sub(pattern, " ", text, flags=re.IGNORECASE)


class AmountCategoryDateParser:
    """
    규칙 기반 가계부 항목 파서

    외부 서비스 없이 항상 동작해야 하는 대체 경로다. 모든 메서드는 순수 함수이며
    "오늘"은 호출자가 넘겨준다.
    """

    def __init__(
        self,
        category_rules: Sequence[tuple[str, Predicate]] = CATEGORY_RULES,
        default_category: str = DEFAULT_CATEGORY,
    ) -> None:
        self.category_rules = list(category_rules)
        self.default_category = default_category
        self._is_income = contains_any(INCOME_KEYWORDS)

    def parse(self, text: str, today: dt.date) -> Optional[LedgerEntryDraft]:
        """
        텍스트에서 가계부 항목 초안 추출

        Args:
            text: 사용자 입력 (예: "오늘 커피 5000원 지출했어")
            today: 기준 날짜

        Returns:
            LedgerEntryDraft, 금액을 찾지 못하면 None
        """
        amount = self.extract_amount(text)
        if amount is None:
            return None

        category = self.extract_category(text)
        return LedgerEntryDraft(
            date=self.extract_date(text, today),
            amount=amount,
            category=category,
            description=self.extract_description(text, category),
            type=self.extract_type(text),
        )

    def extract_amount(self, text: str) -> Optional[int]:
        if not text:
            return None
        match = AMOUNT_RE.search(mask_date_tokens(text))
        if not match:
            return None
        amount = amount_from_match(match)
        if amount is None or amount <= 0:
            return None
        return amount

    def extract_date(self, text: str, today: dt.date) -> dt.date:
        lowered = (text or "").lower()
        if any(w in lowered for w in TODAY_WORDS):
            return today
        if any(w in lowered for w in YESTERDAY_WORDS):
            return today - dt.timedelta(days=1)

        iso = ISO_DATE_RE.search(lowered)
        if iso:
            try:
                return dt.date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
            except ValueError:
                pass

        md = MONTH_DAY_RE.search(lowered)
        if md:
            try:
                return dt.date(today.year, int(md.group(1)), int(md.group(2)))
            except ValueError:
                pass

        return today

    def extract_type(self, text: str) -> TxnType:
        return TxnType.INCOME if self._is_income((text or "").lower()) else TxnType.EXPENSE

    def extract_category(self, text: str) -> str:
        return first_match(self.category_rules, text or "") or self.default_category

    def extract_description(self, text: str, category: str) -> str:
        cleaned = ISO_DATE_RE.sub(" ", text or "")
        cleaned = MONTH_DAY_RE.sub(" ", cleaned)
        cleaned = DAY_MONTH_TOKEN_RE.sub(" ", cleaned)
        cleaned = AMOUNT_RE.sub(" ", cleaned)
        cleaned = remove_words(cleaned, TODAY_WORDS + YESTERDAY_WORDS + TYPE_WORDS)
        cleaned = collapse_whitespace(cleaned)
        return cleaned or category
