from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from .core.deps import get_assistant, get_extraction_engine, get_scheduler, get_storage
from .errors import RecurringDefinitionNotFound
from .models import today_local
from .schemas import (
    AssistantReply,
    ChatRequest,
    InterpretRequest,
    LedgerEntryDraft,
    ProcessOneResult,
    ProcessRecurringRequest,
    ProcessRecurringResult,
    RecurringDefinitionDraft,
    Statistics,
)
from .services.assistant import LedgerAssistant
from .services.extraction_engine import TransactionExtractionEngine
from .services.recurring_scheduler import RecurringScheduler
from .services.storage import Storage

router = APIRouter()


def _resolve_today(value: Optional[dt.date]) -> dt.date:
    return value or today_local()


# ----- recurring ---------------------------------------------------------------


@router.post("/recurring/process", response_model=ProcessRecurringResult)
def process_recurring(
    payload: Optional[ProcessRecurringRequest] = Body(default=None),
    scheduler: RecurringScheduler = Depends(get_scheduler),
):
    target = _resolve_today(payload.target_date if payload else None)
    items = scheduler.process_due(target)
    return ProcessRecurringResult(items=items, count=len(items))


@router.post("/recurring/{definition_id}/process", response_model=ProcessOneResult)
def process_recurring_one(
    definition_id: str,
    payload: Optional[ProcessRecurringRequest] = Body(default=None),
    scheduler: RecurringScheduler = Depends(get_scheduler),
):
    target = _resolve_today(payload.target_date if payload else None)
    try:
        item = scheduler.process_one(definition_id, target)
    except RecurringDefinitionNotFound:
        raise HTTPException(status_code=404, detail="RecurringDefinition not found")
    return ProcessOneResult(item=item)


# ----- natural language ----------------------------------------------------------


@router.post("/ai/entries", response_model=list[LedgerEntryDraft])
def interpret_entries(
    payload: InterpretRequest,
    engine: TransactionExtractionEngine = Depends(get_extraction_engine),
):
    return engine.interpret_as_entries(payload.text, _resolve_today(payload.today))


@router.post("/ai/recurring", response_model=Optional[RecurringDefinitionDraft])
def interpret_recurring(
    payload: InterpretRequest,
    engine: TransactionExtractionEngine = Depends(get_extraction_engine),
):
    return engine.interpret_as_recurring(payload.text, _resolve_today(payload.today))


@router.post("/ai/chat", response_model=AssistantReply)
def chat(
    payload: ChatRequest,
    assistant: LedgerAssistant = Depends(get_assistant),
):
    return assistant.handle(payload.text, payload.user_id, _resolve_today(payload.today))


# ----- statistics --------------------------------------------------------------


@router.get("/statistics", response_model=Statistics)
def get_statistics(
    storage: Storage = Depends(get_storage),
    engine: TransactionExtractionEngine = Depends(get_extraction_engine),
):
    return engine.statistics(storage.list_ledger_entries())
