import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.database import SessionLocal, init_db
from .core.deps import get_recurring_locks
from .core.logging import configure_logging
from .models import today_local
from .routers import router
from .services.recurring_scheduler import RecurringScheduler
from .services.storage import SqlAlchemyStorage

logger = logging.getLogger(__name__)


def process_recurring_on_startup() -> int:
    """서버 시작 시 오늘 발생해야 하는 고정비 처리. 생성된 항목 수 반환."""
    db = SessionLocal()
    try:
        scheduler = RecurringScheduler(SqlAlchemyStorage(db), locks=get_recurring_locks())
        created = scheduler.process_due(today_local())
    except Exception:
        logger.exception("startup recurring processing failed")
        return 0
    finally:
        db.close()
    return len(created)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    init_db()
    if settings.PROCESS_RECURRING_ON_STARTUP:
        count = process_recurring_on_startup()
        logger.info("startup: %d recurring entries created", count)
    yield


app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)

# CORS (프론트엔드 연결 준비)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(router, prefix="/api")
