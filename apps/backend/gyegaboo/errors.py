"""
가계부 도메인 예외

- LedgerError: 도메인 예외의 공통 부모
- RecurringDefinitionNotFound: 고정비가 없거나 비활성 상태 (요청 단위 오류)
- InterpreterError / InterpreterUnavailable: 모델 기반 해석기 실패 (항상 규칙 기반으로 대체)
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for ledger domain errors."""


class RecurringDefinitionNotFound(LedgerError):
    def __init__(self, definition_id: str) -> None:
        super().__init__(f"Recurring definition not found or inactive: {definition_id}")
        self.definition_id = definition_id


class InterpreterError(LedgerError):
    """The model-backed interpreter failed to produce a usable answer."""


class InterpreterUnavailable(InterpreterError):
    """No interpreter is configured, or the backend could not be reached in time."""
