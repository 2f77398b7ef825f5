"""
고정비 스케줄러

책임:
- 활성 고정비마다 발생 여부 판정
- 발생 시 가계부 항목 생성 후 마지막 처리일 갱신
- 같은 고정비에 대한 동시 처리 직렬화 (고정비 단위 잠금)
"""

from __future__ import annotations

import datetime as dt
import logging
from contextlib import contextmanager
from threading import Lock
from typing import Iterator, Optional

from .. import schemas
from ..errors import RecurringDefinitionNotFound
from .recurrence import RecurrenceEvaluator
from .storage import Storage

logger = logging.getLogger(__name__)


class KeyedLocks:
    """One lock per key, created on first use."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    def _lock_for(self, key: str) -> Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield


class RecurringScheduler:
    """
    고정비 → 가계부 항목 구체화

    평가 → 항목 생성 → 마지막 처리일 갱신을 고정비 하나 단위의 임계 구역으로
    처리한다. 항목 생성 후 처리일 갱신이 실패하면 다음 평가에서 다시 발생 대상이
    되므로 보장 수준은 최소 1회(at-least-once)다.
    """

    def __init__(
        self,
        storage: Storage,
        locks: Optional[KeyedLocks] = None,
        evaluator: Optional[RecurrenceEvaluator] = None,
    ) -> None:
        self.storage = storage
        self.locks = locks or KeyedLocks()
        self.evaluator = evaluator or RecurrenceEvaluator()

    def process_due(self, target_date: dt.date) -> list[schemas.LedgerEntry]:
        """
        기준 날짜에 발생해야 하는 모든 고정비 처리

        Args:
            target_date: 기준 날짜 (호출자가 자신의 시간대로 결정)

        Returns:
            새로 생성된 가계부 항목 (고정비 순회 순서)
        """
        created: list[schemas.LedgerEntry] = []
        for definition in self.storage.list_active_recurring():
            with self.locks.hold(definition.id):
                # 잠금 대기 중 다른 요청이 처리했을 수 있으므로 다시 읽는다
                current = self.storage.get_recurring(definition.id)
                if current is None or not current.is_active:
                    continue
                if not self.evaluator.is_due(current, target_date):
                    continue
                created.append(self._materialize(current, target_date))

        if created:
            logger.info("recurring: materialized %d entries for %s", len(created), target_date.isoformat())
        return created

    def process_one(self, definition_id: str, target_date: dt.date) -> schemas.LedgerEntry:
        """
        특정 고정비 수동 처리 (발생 여부와 관계없이 항상 생성)

        기준 날짜가 시작일~만료일 범위 밖이면 항목만 만들고 마지막 처리일은 그대로 둔다.

        Raises:
            RecurringDefinitionNotFound: 고정비가 없거나 비활성 상태
        """
        with self.locks.hold(definition_id):
            definition = self.storage.get_recurring(definition_id)
            if definition is None or not definition.is_active:
                raise RecurringDefinitionNotFound(definition_id)
            entry = self._materialize(definition, target_date)

        logger.info("recurring: manually processed %s for %s", definition_id, target_date.isoformat())
        return entry

    def _materialize(self, definition: schemas.RecurringDefinition, target_date: dt.date) -> schemas.LedgerEntry:
        draft = schemas.LedgerEntryDraft(
            date=target_date,
            amount=definition.amount,
            category=definition.category,
            description=definition.description,
            type=definition.type,
        )
        entry = self.storage.create_ledger_entry(draft, definition.created_by, recurring_id=definition.id)
        if not self.evaluator.within_window(definition, target_date):
            # 마지막 처리일은 [시작일, 만료일] 안에서만 움직인다
            return entry
        try:
            self.storage.update_recurring_last_processed(definition.id, target_date)
        except Exception:
            # 항목은 이미 생성됨: 다음 평가에서 중복 생성될 수 있으므로 운영자가 대조할 수 있게 남긴다
            logger.error(
                "recurring marker update failed after entry creation "
                "(definition=%s, date=%s, entry=%s); occurrence may be duplicated",
                definition.id,
                target_date.isoformat(),
                entry.id,
                exc_info=True,
            )
        return entry
