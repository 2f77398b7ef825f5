"""
자연어 → 가계부 항목/고정비 추출 엔진

모델 기반 해석기를 먼저 시도하고, 해석기가 없거나 실패하거나 결과가 비어 있으면
규칙 기반 파서로 대체한다. 저장은 하지 않는다.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from .. import schemas
from ..errors import InterpreterUnavailable
from ..models import RepeatType, TxnType
from ..providers.interpreters import (
    ImageInterpreter,
    NullImageInterpreter,
    TextInterpreter,
    guess_mime_type,
)
from ..utils.normalization import normalize_input_text, normalize_label
from .entry_parser import AmountCategoryDateParser
from .recurrence_parser import RecurrenceRuleParser
from .vocabulary import ALL_CATEGORIES, DEFAULT_CATEGORY, has_recurrence_keyword

logger = logging.getLogger(__name__)

ENTRY_TOOL_NAME = "create_ledger_entry"
RECURRING_TOOL_NAME = "create_recurring_definition"

_TYPE_PROPERTY = {"type": "string", "description": "유형", "enum": [t.value for t in TxnType]}
_CATEGORY_PROPERTY = {
    "type": "string",
    "description": "카테고리 (지출: 식비, 교통비, 쇼핑, 의료비, 기타 / 수입: 급여, 부수입)",
    "enum": list(ALL_CATEGORIES),
}

ENTRY_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": ENTRY_TOOL_NAME,
        "description": "가계부 항목(지출 또는 수입)을 생성합니다. 항목이 여러 개면 여러 번 호출합니다.",
        "parameters": {
            "type": "object",
            "properties": {
                "date": {"type": "string", "description": "날짜 (YYYY-MM-DD). 명시되지 않으면 오늘."},
                "amount": {"type": "number", "description": "금액 (원 단위)"},
                "category": _CATEGORY_PROPERTY,
                "description": {"type": "string", "description": "설명"},
                "type": _TYPE_PROPERTY,
            },
            "required": ["amount", "category", "description", "type"],
        },
    },
}

RECURRING_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": RECURRING_TOOL_NAME,
        "description": "고정비(매일/매주/매월/매년 반복되는 지출 또는 수입)를 생성합니다.",
        "parameters": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "고정비 이름 (예: 관리비, 월세, 통신비)"},
                "amount": {"type": "number", "description": "금액 (원 단위)"},
                "category": _CATEGORY_PROPERTY,
                "description": {"type": "string", "description": "설명"},
                "type": _TYPE_PROPERTY,
                "repeat_type": {
                    "type": "string",
                    "description": "반복 유형",
                    "enum": [r.value for r in RepeatType],
                },
                "repeat_day": {
                    "type": "integer",
                    "description": "반복일 (weekly: 0=일요일..6=토요일, monthly: 1-31, 그 외 생략)",
                },
                "start_date": {"type": "string", "description": "시작일 (YYYY-MM-DD). 명시되지 않으면 오늘."},
                "end_date": {"type": "string", "description": "만료일 (YYYY-MM-DD, 선택)"},
            },
            "required": ["name", "amount", "category", "type", "repeat_type"],
        },
    },
}

ENTRY_PROMPT = """당신은 가계부 관리 어시스턴트입니다. 사용자의 자연어 입력을 분석하여 가계부 항목을 추출하고
create_ledger_entry 함수를 호출하세요.
오늘 날짜는 {today}입니다. 날짜가 명시되지 않으면 오늘 날짜를 사용하세요.
카테고리 목록: 식비, 교통비, 쇼핑, 의료비, 기타 (지출용) / 급여, 부수입 (수입용)"""

RECURRING_PROMPT = """당신은 가계부 관리 어시스턴트입니다. 사용자의 자연어 입력에서 고정비(반복되는 수입/지출)
정보를 추출하여 create_recurring_definition 함수를 호출하세요.
오늘 날짜는 {today}입니다. 시작일이 명시되지 않으면 오늘 날짜를 사용하세요.
repeat_type이 weekly이면 repeat_day는 0(일요일)부터 6(토요일)까지,
monthly이면 1부터 31까지입니다."""

IMAGE_PROMPT = """이 이미지는 영수증이나 가계부 관련 문서입니다. 이미지에 있는 각 항목마다
create_ledger_entry 함수를 호출하세요. 오늘 날짜는 {today}입니다.
날짜가 명시되지 않으면 오늘 날짜를 사용하세요. 카테고리 목록: 식비, 교통비, 쇼핑, 의료비, 기타"""

IMAGE_DEFAULT_DESCRIPTION = "영수증에서 추출된 항목"


def _finite_int(value: Any) -> Optional[int]:
    """JSON 숫자를 정수로. bool, inf, NaN은 None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


def _coerce_amount(value: Any) -> Optional[int]:
    if isinstance(value, str):
        try:
            value = float(value.replace(",", "").strip())
        except ValueError:
            return None
    return _finite_int(value)


def _coerce_date(value: Any, default: Optional[dt.date]) -> Optional[dt.date]:
    if isinstance(value, str) and value.strip():
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError:
            return default
    return default


def _coerce_category(value: Any) -> str:
    label = normalize_label(value)
    return label if label in ALL_CATEGORIES else DEFAULT_CATEGORY


def _coerce_enum(enum_cls, value: Any, default):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        return default


def entry_draft_from_arguments(
    args: dict[str, Any],
    today: dt.date,
    default_description: str = "",
) -> Optional[schemas.LedgerEntryDraft]:
    amount = _coerce_amount(args.get("amount"))
    if amount is None or amount <= 0:
        return None
    try:
        return schemas.LedgerEntryDraft(
            date=_coerce_date(args.get("date"), today),
            amount=amount,
            category=_coerce_category(args.get("category")),
            description=str(args.get("description") or default_description),
            type=_coerce_enum(TxnType, args.get("type"), TxnType.EXPENSE),
        )
    except ValidationError:
        return None


def recurring_draft_from_arguments(
    args: dict[str, Any],
    today: dt.date,
) -> Optional[schemas.RecurringDefinitionDraft]:
    amount = _coerce_amount(args.get("amount"))
    name = normalize_label(args.get("name"))
    if amount is None or amount <= 0 or not name:
        return None
    repeat_day = args.get("repeat_day")
    try:
        return schemas.RecurringDefinitionDraft(
            name=name,
            amount=amount,
            category=_coerce_category(args.get("category")),
            description=str(args.get("description") or ""),
            type=_coerce_enum(TxnType, args.get("type"), TxnType.EXPENSE),
            repeat_type=_coerce_enum(RepeatType, args.get("repeat_type"), RepeatType.MONTHLY),
            repeat_day=_finite_int(repeat_day),
            start_date=_coerce_date(args.get("start_date"), today),
            end_date=_coerce_date(args.get("end_date"), None),
        )
    except ValidationError:
        return None


class TransactionExtractionEngine:
    """
    해석기 우선, 규칙 기반 대체 추출 엔진

    Args:
        text_interpreter: 모델 기반 텍스트 해석기 (없으면 NullTextInterpreter)
        image_interpreter: 영수증 이미지 해석기 (선택)
    """

    def __init__(
        self,
        text_interpreter: TextInterpreter,
        image_interpreter: Optional[ImageInterpreter] = None,
        entry_parser: Optional[AmountCategoryDateParser] = None,
        recurrence_parser: Optional[RecurrenceRuleParser] = None,
    ) -> None:
        self.text_interpreter = text_interpreter
        self.image_interpreter = image_interpreter or NullImageInterpreter()
        self.entry_parser = entry_parser or AmountCategoryDateParser()
        self.recurrence_parser = recurrence_parser or RecurrenceRuleParser()

    # ----- one-off entries -----------------------------------------------

    def interpret_as_entries(self, text: str, today: dt.date) -> list[schemas.LedgerEntryDraft]:
        """텍스트에서 가계부 항목 초안 추출. 추출할 수 없으면 빈 리스트."""
        text = normalize_input_text(text)
        calls = self._ask_interpreter(ENTRY_PROMPT.format(today=today.isoformat()), text, [ENTRY_TOOL])
        drafts = [
            d
            for d in (entry_draft_from_arguments(c.arguments, today) for c in calls if c.name == ENTRY_TOOL_NAME)
            if d is not None
        ]
        if drafts:
            return drafts

        draft = self.entry_parser.parse(text, today)
        return [draft] if draft else []

    # ----- recurring definitions -----------------------------------------

    def interpret_as_recurring(self, text: str, today: dt.date) -> Optional[schemas.RecurringDefinitionDraft]:
        """텍스트에서 고정비 초안 추출. 반복 키워드가 없거나 금액이 없으면 None."""
        text = normalize_input_text(text)
        if not has_recurrence_keyword(text):
            return None

        calls = self._ask_interpreter(RECURRING_PROMPT.format(today=today.isoformat()), text, [RECURRING_TOOL])
        for call in calls:
            if call.name != RECURRING_TOOL_NAME:
                continue
            draft = recurring_draft_from_arguments(call.arguments, today)
            if draft is not None:
                if not draft.description:
                    draft.description = text.strip()
                return draft

        return self._recurring_from_rules(text, today)

    def _recurring_from_rules(self, text: str, today: dt.date) -> Optional[schemas.RecurringDefinitionDraft]:
        amount = self.entry_parser.extract_amount(text)
        if amount is None:
            return None
        try:
            return self.recurrence_parser.parse(
                text,
                amount,
                self.entry_parser.extract_category(text),
                self.entry_parser.extract_type(text),
                today,
            )
        except ValidationError:
            logger.warning("rule-based recurrence parse produced an invalid draft for %r", text, exc_info=True)
            return None

    # ----- receipt images --------------------------------------------------

    def interpret_image_as_entries(
        self,
        image: bytes,
        filename: str,
        today: dt.date,
    ) -> list[schemas.LedgerEntryDraft]:
        """영수증 이미지에서 항목 추출. 해석기가 없거나 실패하면 빈 리스트."""
        if not image:
            return []
        try:
            calls = self.image_interpreter.complete_image(
                IMAGE_PROMPT.format(today=today.isoformat()),
                image,
                guess_mime_type(filename),
                [ENTRY_TOOL],
            )
        except InterpreterUnavailable as exc:
            logger.warning("image interpreter unavailable: %s", exc)
            return []
        except Exception:
            logger.warning("image interpreter failed for %s", filename, exc_info=True)
            return []

        drafts = []
        for call in calls:
            if call.name != ENTRY_TOOL_NAME:
                continue
            draft = entry_draft_from_arguments(call.arguments, today, IMAGE_DEFAULT_DESCRIPTION)
            if draft is not None:
                drafts.append(draft)
        return drafts

    # ----- statistics ------------------------------------------------------

    @staticmethod
    def statistics(entries: Iterable[schemas.LedgerEntryDraft]) -> schemas.Statistics:
        """수입/지출 합계, 잔액, 카테고리별 금액과 비율(수입+지출 대비 %)"""
        total_income = 0
        total_expense = 0
        by_category: dict[str, int] = {}
        for entry in entries:
            if entry.type == TxnType.INCOME:
                total_income += entry.amount
            else:
                total_expense += entry.amount
            by_category[entry.category] = by_category.get(entry.category, 0) + entry.amount

        total = total_income + total_expense
        breakdown = [
            schemas.CategoryBreakdownItem(
                category=category,
                amount=amount,
                percentage=(amount / total) * 100 if total > 0 else 0.0,
            )
            for category, amount in by_category.items()
        ]
        return schemas.Statistics(
            total_income=total_income,
            total_expense=total_expense,
            balance=total_income - total_expense,
            category_breakdown=breakdown,
        )

    # ----- internals ---------------------------------------------------------

    def _ask_interpreter(self, prompt: str, text: str, tools: list[dict[str, Any]]) -> list[schemas.ToolCall]:
        try:
            return list(self.text_interpreter.complete(prompt, text, tools))
        except InterpreterUnavailable as exc:
            logger.warning("text interpreter unavailable, using rule-based parser: %s", exc)
        except Exception:
            logger.warning("text interpreter failed, using rule-based parser", exc_info=True)
        return []
