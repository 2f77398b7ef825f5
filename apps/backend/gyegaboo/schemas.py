from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .models import TxnType, RepeatType


# LedgerEntry Schemas
class LedgerEntryDraft(BaseModel):
    """A ledger entry that has not been persisted yet (no id)."""

    date: dt.date
    amount: int
    category: str
    description: str = ""
    type: TxnType = TxnType.EXPENSE
    image_url: Optional[str] = None

    @field_validator("amount")
    def amount_positive(cls, v: int):
        if v <= 0:
            raise ValueError("amount must be positive")
        return v

    @field_validator("category")
    def category_not_blank(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("category must not be empty")
        return v

    @model_validator(mode="after")
    def description_falls_back_to_category(self):
        text = (self.description or "").strip()
        self.description = text or self.category
        return self


class LedgerEntry(LedgerEntryDraft):
    id: str
    created_by: Optional[int] = None
    recurring_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# RecurringDefinition Schemas
class RecurringDefinitionDraft(BaseModel):
    name: str
    amount: int
    category: str
    description: str = ""
    type: TxnType = TxnType.EXPENSE
    repeat_type: RepeatType = RepeatType.MONTHLY
    repeat_day: Optional[int] = None
    start_date: dt.date
    end_date: Optional[dt.date] = None
    is_active: bool = True

    @field_validator("amount")
    def amount_positive(cls, v: int):
        if v <= 0:
            raise ValueError("amount must be positive")
        return v

    @field_validator("name", "category")
    def not_blank(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @model_validator(mode="after")
    def validate_schedule(self):
        if self.repeat_type in (RepeatType.DAILY, RepeatType.YEARLY):
            # 일간/연간은 반복일을 사용하지 않음
            self.repeat_day = None
        elif self.repeat_day is not None:
            if self.repeat_type == RepeatType.WEEKLY and not (0 <= self.repeat_day <= 6):
                raise ValueError("weekly repeat_day must be between 0 (Sun) and 6 (Sat)")
            if self.repeat_type == RepeatType.MONTHLY and not (1 <= self.repeat_day <= 31):
                raise ValueError("monthly repeat_day must be between 1 and 31")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class RecurringDefinition(RecurringDefinitionDraft):
    id: str
    last_processed_date: Optional[dt.date] = None
    created_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


# Statistics
class CategoryBreakdownItem(BaseModel):
    category: str
    amount: int
    percentage: float


class Statistics(BaseModel):
    total_income: int = 0
    total_expense: int = 0
    balance: int = 0
    category_breakdown: list[CategoryBreakdownItem] = Field(default_factory=list)


# Extraction / conversation
class ToolCall(BaseModel):
    """One structured function call returned by a model-backed interpreter."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ExtractionResult(BaseModel):
    items: list[LedgerEntryDraft] = Field(default_factory=list)
    recurring: Optional[RecurringDefinitionDraft] = None
    message: str


class AssistantReply(BaseModel):
    """Conversation answer after the extracted drafts have been saved."""

    message: str
    items: list[LedgerEntry] = Field(default_factory=list)
    recurring: Optional[RecurringDefinition] = None
    statistics: Optional[Statistics] = None


# Requests
class ProcessRecurringRequest(BaseModel):
    target_date: Optional[dt.date] = None


class ProcessRecurringResult(BaseModel):
    items: list[LedgerEntry]
    count: int


class ProcessOneResult(BaseModel):
    item: LedgerEntry


class InterpretRequest(BaseModel):
    text: str
    today: Optional[dt.date] = None

    @field_validator("text")
    def text_not_blank(cls, v: str):
        if not v.strip():
            raise ValueError("text must not be empty")
        return v


class ChatRequest(InterpretRequest):
    user_id: Optional[int] = None
