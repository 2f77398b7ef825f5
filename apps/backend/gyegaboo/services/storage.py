"""
가계부 저장소 인터페이스와 SQLAlchemy 구현

핵심 로직(스케줄러, 대화 처리)은 Storage 프로토콜에만 의존한다.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional, Protocol

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models, schemas


class Storage(Protocol):
    def list_active_recurring(self) -> list[schemas.RecurringDefinition]: ...

    def get_recurring(self, definition_id: str) -> Optional[schemas.RecurringDefinition]: ...

    def update_recurring_last_processed(self, definition_id: str, processed_on: dt.date) -> None: ...

    def create_ledger_entry(
        self,
        draft: schemas.LedgerEntryDraft,
        owner_id: Optional[int],
        recurring_id: Optional[str] = None,
    ) -> schemas.LedgerEntry: ...

    def list_ledger_entries(self) -> list[schemas.LedgerEntry]: ...

    def create_recurring(
        self,
        draft: schemas.RecurringDefinitionDraft,
        owner_id: Optional[int],
    ) -> schemas.RecurringDefinition: ...


class SqlAlchemyStorage:
    """Storage backed by one SQLAlchemy session; every write commits."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list_active_recurring(self) -> list[schemas.RecurringDefinition]:
        rows = (
            self.db.query(models.RecurringDefinition)
            .filter(models.RecurringDefinition.is_active.is_(True))
            .order_by(models.RecurringDefinition.created_at.asc(), models.RecurringDefinition.id.asc())
            .all()
        )
        return [schemas.RecurringDefinition.model_validate(r) for r in rows]

    def get_recurring(self, definition_id: str) -> Optional[schemas.RecurringDefinition]:
        row = (
            self.db.query(models.RecurringDefinition)
            .filter(models.RecurringDefinition.id == definition_id)
            .populate_existing()
            .first()
        )
        if not row:
            return None
        return schemas.RecurringDefinition.model_validate(row)

    def update_recurring_last_processed(self, definition_id: str, processed_on: dt.date) -> None:
        # 마커는 앞으로만 이동 (동시 처리 시 더 늦은 날짜가 덮어쓰이지 않도록)
        try:
            (
                self.db.query(models.RecurringDefinition)
                .filter(
                    models.RecurringDefinition.id == definition_id,
                    or_(
                        models.RecurringDefinition.last_processed_date.is_(None),
                        models.RecurringDefinition.last_processed_date < processed_on,
                    ),
                )
                .update(
                    {models.RecurringDefinition.last_processed_date: processed_on},
                    synchronize_session=False,
                )
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def create_ledger_entry(
        self,
        draft: schemas.LedgerEntryDraft,
        owner_id: Optional[int],
        recurring_id: Optional[str] = None,
    ) -> schemas.LedgerEntry:
        row = models.LedgerEntry(
            date=draft.date,
            amount=draft.amount,
            category=draft.category,
            description=draft.description,
            type=draft.type,
            image_url=draft.image_url,
            created_by=owner_id,
            recurring_id=recurring_id,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return schemas.LedgerEntry.model_validate(row)

    def list_ledger_entries(self) -> list[schemas.LedgerEntry]:
        rows = (
            self.db.query(models.LedgerEntry)
            .order_by(models.LedgerEntry.date.desc(), models.LedgerEntry.created_at.desc())
            .all()
        )
        return [schemas.LedgerEntry.model_validate(r) for r in rows]

    def create_recurring(
        self,
        draft: schemas.RecurringDefinitionDraft,
        owner_id: Optional[int],
    ) -> schemas.RecurringDefinition:
        row = models.RecurringDefinition(
            name=draft.name,
            amount=draft.amount,
            category=draft.category,
            description=draft.description,
            type=draft.type,
            repeat_type=draft.repeat_type,
            repeat_day=draft.repeat_day,
            start_date=draft.start_date,
            end_date=draft.end_date,
            is_active=draft.is_active,
            created_by=owner_id,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return schemas.RecurringDefinition.model_validate(row)
