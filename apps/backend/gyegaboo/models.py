from __future__ import annotations

import datetime as dt
import uuid
from zoneinfo import ZoneInfo
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from .core.config import settings
from .core.database import Base


try:
    LOCAL_ZONE = ZoneInfo(getattr(settings, "TIMEZONE", "Asia/Seoul"))
except Exception:
    LOCAL_ZONE = ZoneInfo("Asia/Seoul")


def now_local_naive() -> dt.datetime:
    """Return naive datetime normalized to configured local timezone."""
    return dt.datetime.now(LOCAL_ZONE).replace(tzinfo=None)


def today_local() -> dt.date:
    """Today's calendar date in the configured timezone.

    Only request boundaries call this; the scheduler and parsers always take
    the date as an argument.
    """
    return dt.datetime.now(LOCAL_ZONE).date()


def new_id() -> str:
    return uuid.uuid4().hex


class TimestampMixin:
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=now_local_naive, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime, default=now_local_naive, onupdate=now_local_naive, nullable=False)


class User(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)


class TxnType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class RepeatType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class LedgerEntry(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[TxnType] = mapped_column(SAEnum(TxnType), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500))
    created_by: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"))
    # 고정비에서 생성된 항목이면 원본 고정비 id
    recurring_id: Mapped[str | None] = mapped_column(ForeignKey("recurringdefinition.id", ondelete="SET NULL"))

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_ledger_amount_positive"),
        Index("ix_ledger_date", "date"),
        Index("ix_ledger_created_by_date", "created_by", "date"),
    )


class RecurringDefinition(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[TxnType] = mapped_column(SAEnum(TxnType), nullable=False)
    repeat_type: Mapped[RepeatType] = mapped_column(SAEnum(RepeatType), nullable=False)
    repeat_day: Mapped[int | None] = mapped_column(Integer)  # weekly 0=Sun..6=Sat, monthly 1-31
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date | None] = mapped_column(Date)
    last_processed_date: Mapped[dt.date | None] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"))

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_recurring_amount_positive"),
        CheckConstraint(
            "repeat_day IS NULL"
            " OR (repeat_type = 'WEEKLY' AND repeat_day BETWEEN 0 AND 6)"
            " OR (repeat_type = 'MONTHLY' AND repeat_day BETWEEN 1 AND 31)",
            name="ck_recurring_repeat_day",
        ),
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="ck_recurring_date_range",
        ),
        Index("ix_recurring_active", "is_active"),
    )
