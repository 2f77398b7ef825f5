"""
가계부 대화 처리

사용자 문장을 통계 조회 / 고정비 추가 / 항목 추가 중 하나로 라우팅한다.
추출은 TransactionExtractionEngine에, 저장은 Storage에 맡긴다.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from .. import schemas
from .extraction_engine import TransactionExtractionEngine
from .storage import Storage
from .vocabulary import STATISTICS_KEYWORDS, contains_any, has_recurrence_keyword

logger = logging.getLogger(__name__)

HELP_MESSAGE = (
    "가계부를 관리하는 데 도움이 필요하시면 언제든지 말씀해주세요. "
    '예: "오늘 커피 5000원 지출" 또는 "매월 관리비 10만원 고정비 추가"'
)

_asks_statistics = contains_any(STATISTICS_KEYWORDS)


def _won(amount: int) -> str:
    return f"{amount:,}원"


def statistics_message(stats: schemas.Statistics) -> str:
    return (
        f"현재 총 수입: {_won(stats.total_income)}\n"
        f"총 지출: {_won(stats.total_expense)}\n"
        f"잔액: {_won(stats.balance)}"
    )


class LedgerAssistant:
    """대화형 가계부 입력 처리"""

    def __init__(self, engine: TransactionExtractionEngine, storage: Storage) -> None:
        self.engine = engine
        self.storage = storage

    def wants_statistics(self, text: str) -> bool:
        # "총 5만원 지출"처럼 금액이 있으면 항목 추가로 본다
        return _asks_statistics(text.lower()) and self.engine.entry_parser.extract_amount(text) is None

    def extract(self, text: str, today: dt.date) -> schemas.ExtractionResult:
        """저장 없이 추출 결과와 안내 메시지만 반환"""
        if self.wants_statistics(text):
            return schemas.ExtractionResult(message="통계를 조회합니다.")

        if has_recurrence_keyword(text):
            draft = self.engine.interpret_as_recurring(text, today)
            if draft is not None:
                return schemas.ExtractionResult(
                    recurring=draft,
                    message=f'고정비 "{draft.name}" ({_won(draft.amount)})를 추가할 수 있습니다.',
                )

        items = self.engine.interpret_as_entries(text, today)
        if items:
            return schemas.ExtractionResult(items=items, message=f"{len(items)}개의 항목을 찾았습니다.")
        return schemas.ExtractionResult(message=HELP_MESSAGE)

    def handle(self, text: str, user_id: Optional[int], today: dt.date) -> schemas.AssistantReply:
        """
        사용자 문장 처리 후 저장

        Args:
            text: 사용자 입력
            user_id: 생성자 (없으면 소유자 없음)
            today: 호출자 시간대 기준 오늘
        """
        if self.wants_statistics(text):
            stats = self.engine.statistics(self.storage.list_ledger_entries())
            return schemas.AssistantReply(message=statistics_message(stats), statistics=stats)

        extracted = self.extract(text, today)

        if extracted.recurring is not None:
            saved = self.storage.create_recurring(extracted.recurring, user_id)
            logger.info("assistant: recurring definition %s created", saved.id)
            return schemas.AssistantReply(
                message=f'고정비 "{saved.name}"가 추가되었습니다.',
                recurring=saved,
            )

        if extracted.items:
            saved_items = [self.storage.create_ledger_entry(d, user_id) for d in extracted.items]
            logger.info("assistant: %d ledger entries created", len(saved_items))
            return schemas.AssistantReply(
                message=f"{len(saved_items)}개의 항목이 추가되었습니다.",
                items=saved_items,
            )

        return schemas.AssistantReply(message=extracted.message)
