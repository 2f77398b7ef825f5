"""
Services 패키지

고정비 스케줄링, 자연어 추출, 대화 처리 서비스를 제공합니다.
"""

from .assistant import LedgerAssistant
from .extraction_engine import TransactionExtractionEngine
from .recurrence import PeriodState, RecurrenceEvaluator, is_due, period_state
from .recurring_scheduler import KeyedLocks, RecurringScheduler
from .storage import SqlAlchemyStorage, Storage

__all__ = [
    "LedgerAssistant",
    "TransactionExtractionEngine",
    "PeriodState",
    "RecurrenceEvaluator",
    "is_due",
    "period_state",
    "KeyedLocks",
    "RecurringScheduler",
    "SqlAlchemyStorage",
    "Storage",
]
