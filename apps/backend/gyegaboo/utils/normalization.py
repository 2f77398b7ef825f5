"""
정규화 유틸리티 함수

사용자 입력과 모델 응답을 정규화하여 규칙 기반 파서의 매칭 정확도를 높입니다.
"""

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def normalize_input_text(value: str | None) -> str:
    """
    자연어 입력 정규화

    - NFKC 정규화 (전각 숫자/쉼표를 반각으로, 한글 자모 통일)
    - 연속 공백을 하나로

    Example:
        >>> normalize_input_text("커피  ５，０００원")
        "커피 5,000원"
    """
    if not value:
        return ""
    return collapse_whitespace(unicodedata.normalize("NFKC", value))


def normalize_label(value: object) -> str:
    """
    카테고리/이름 같은 짧은 라벨 정규화

    문자열이 아니면 빈 문자열을 반환한다.

    Example:
        >>> normalize_label(" 식비 ")
        "식비"
        >>> normalize_label(None)
        ""
    """
    if not isinstance(value, str):
        return ""
    return unicodedata.normalize("NFKC", value).strip()
