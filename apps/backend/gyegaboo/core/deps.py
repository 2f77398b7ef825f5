from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from ..providers.interpreters import (
    ImageInterpreter,
    TextInterpreter,
    build_image_interpreter,
    build_text_interpreter,
)
from ..services.assistant import LedgerAssistant
from ..services.extraction_engine import TransactionExtractionEngine
from ..services.recurring_scheduler import KeyedLocks, RecurringScheduler
from ..services.storage import SqlAlchemyStorage, Storage


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return SqlAlchemyStorage(db)


@lru_cache
def get_recurring_locks() -> KeyedLocks:
    """Process-wide lock table so concurrent requests serialize per definition."""
    return KeyedLocks()


@lru_cache
def get_text_interpreter() -> TextInterpreter:
    return build_text_interpreter(settings)


@lru_cache
def get_image_interpreter() -> ImageInterpreter:
    return build_image_interpreter(settings)


def get_scheduler(storage: Storage = Depends(get_storage)) -> RecurringScheduler:
    return RecurringScheduler(storage, locks=get_recurring_locks())


def get_extraction_engine(
    text_interpreter: TextInterpreter = Depends(get_text_interpreter),
    image_interpreter: ImageInterpreter = Depends(get_image_interpreter),
) -> TransactionExtractionEngine:
    return TransactionExtractionEngine(text_interpreter, image_interpreter)


def get_assistant(
    engine: TransactionExtractionEngine = Depends(get_extraction_engine),
    storage: Storage = Depends(get_storage),
) -> LedgerAssistant:
    return LedgerAssistant(engine, storage)
