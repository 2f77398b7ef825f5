"""
가계부 텍스트 해석용 고정 어휘

카테고리/반복 주기 판별은 (라벨, 판별 함수) 쌍의 순서 있는 목록으로 표현하고
앞에서부터 평가하여 처음 일치한 라벨을 사용한다. 키워드가 여러 카테고리에
걸칠 수 있으므로 선언 순서가 곧 우선순위다.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence, TypeVar

from ..models import RepeatType, TxnType

Predicate = Callable[[str], bool]
T = TypeVar("T")


def contains_any(keywords: Iterable[str]) -> Predicate:
    """Build a predicate matching lower-cased text that contains any keyword."""
    needles = tuple(k.lower() for k in keywords)

    def _match(lowered: str) -> bool:
        return any(n in lowered for n in needles)

    return _match


def first_match(rules: Sequence[tuple[T, Predicate]], text: str) -> Optional[T]:
    lowered = text.lower()
    for label, predicate in rules:
        if predicate(lowered):
            return label
    return None


# --- Categories -------------------------------------------------------------

DEFAULT_CATEGORY = "기타"

EXPENSE_CATEGORIES: tuple[str, ...] = ("식비", "교통비", "쇼핑", "의료비", "기타")
INCOME_CATEGORIES: tuple[str, ...] = ("급여", "부수입")
ALL_CATEGORIES: tuple[str, ...] = EXPENSE_CATEGORIES + INCOME_CATEGORIES

CATEGORY_RULES: list[tuple[str, Predicate]] = [
    ("식비", contains_any(["커피", "음식", "식사", "카페", "맛집", "식당", "치킨", "피자", "햄버거"])),
    ("교통비", contains_any(["지하철", "버스", "택시", "기차", "교통", "주차"])),
    ("쇼핑", contains_any(["쇼핑", "옷", "신발", "가방", "온라인"])),
    ("의료비", contains_any(["병원", "약", "의료", "치과"])),
    ("급여", contains_any(["급여", "월급", "연봉"])),
    ("부수입", contains_any(["부수입", "용돈", "선물"])),
]


def categories_for(type_: TxnType) -> tuple[str, ...]:
    return INCOME_CATEGORIES if type_ == TxnType.INCOME else EXPENSE_CATEGORIES


# --- Income / expense -------------------------------------------------------

INCOME_KEYWORDS: tuple[str, ...] = ("수입", "입금", "급여", "income", "deposit", "salary")

# 설명에서 제거하는 유형 표시 단어
TYPE_WORDS: tuple[str, ...] = ("지출", "수입", "입금")

# --- Date words -------------------------------------------------------------

TODAY_WORDS: tuple[str, ...] = ("오늘", "today")
YESTERDAY_WORDS: tuple[str, ...] = ("어제", "yesterday")

# --- Recurrence -------------------------------------------------------------

RECURRING_KEYWORDS: tuple[str, ...] = (
    "고정비",
    "매월",
    "매주",
    "매일",
    "매년",
    "반복",
    "정기",
    "구독",
    "월세",
    "관리비",
    "통신비",
    "보험",
    "every day",
    "every week",
    "every month",
    "every year",
    "daily",
    "weekly",
    "monthly",
    "yearly",
    "subscription",
)

# 고정비 이름에서 제거하는 반복 표시 단어
RECURRENCE_MARKERS: tuple[str, ...] = (
    "고정비", "매월", "매주", "매일", "매년", "반복", "정기", "구독",
    "every day", "every week", "every month", "every year",
    "daily", "weekly", "monthly", "yearly", "subscription", "until",
)

REPEAT_TYPE_RULES: list[tuple[RepeatType, Predicate]] = [
    (RepeatType.DAILY, contains_any(["매일", "일일", "daily", "every day"])),
    (RepeatType.WEEKLY, contains_any(["매주", "주간", "weekly", "every week"])),
    (RepeatType.YEARLY, contains_any(["매년", "연간", "yearly", "every year"])),
]

# 0 = 일요일 .. 6 = 토요일
WEEKDAY_NAMES: list[tuple[int, Predicate]] = [
    (0, contains_any(["일요일", "sunday"])),
    (1, contains_any(["월요일", "monday"])),
    (2, contains_any(["화요일", "tuesday"])),
    (3, contains_any(["수요일", "wednesday"])),
    (4, contains_any(["목요일", "thursday"])),
    (5, contains_any(["금요일", "friday"])),
    (6, contains_any(["토요일", "saturday"])),
]

# 대화 라우팅
STATISTICS_KEYWORDS: tuple[str, ...] = ("통계", "얼마", "총", "잔액")
REQUEST_FILLERS: tuple[str, ...] = ("추가해줘", "추가해 줘", "추가해주세요", "등록해줘", "등록해주세요", "추가", "등록")


def has_recurrence_keyword(text: str) -> bool:
    return contains_any(RECURRING_KEYWORDS)(text.lower())
