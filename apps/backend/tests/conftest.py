from __future__ import annotations

import os
import tempfile
from typing import Generator, Any

# 앱 import 전에 설정: 사용자 DB/키를 건드리지 않도록
_fd, _APP_DB_PATH = tempfile.mkstemp(prefix="gyegaboo_app_", suffix=".sqlite3")
os.close(_fd)
os.environ.setdefault("GYEGABOO_DATABASE_URL", f"sqlite:///{_APP_DB_PATH}")
os.environ["GYEGABOO_OPENAI_API_KEY"] = ""
os.environ["GYEGABOO_PROCESS_RECURRING_ON_STARTUP"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from gyegaboo.core.database import Base, get_db
from gyegaboo.core.deps import get_image_interpreter, get_text_interpreter
from gyegaboo.main import app
from gyegaboo.providers import NullImageInterpreter, NullTextInterpreter
from gyegaboo.services.storage import SqlAlchemyStorage
from gyegaboo import models


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # 사용자 환경을 건드리지 않도록 임시 파일 SQLite 사용
    fd, path = tempfile.mkstemp(prefix="gyegaboo_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    for p in (path, _APP_DB_PATH):
        try:
            os.remove(p)
        except OSError:
            pass


@pytest.fixture(scope="session")
def db_engine(test_db_url: str):
    eng = create_engine(test_db_url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Any, Any, Any]:
    TestingSessionLocal = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    # 간단 시드: demo user(1)
    session.add(models.User(username="demo", is_active=True))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        # 테이블 데이터 정리 (자식 테이블부터)
        with db_engine.begin() as conn:
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())


@pytest.fixture()
def demo_user(db_session) -> models.User:
    return db_session.query(models.User).filter(models.User.username == "demo").one()


@pytest.fixture()
def storage(db_session) -> SqlAlchemyStorage:
    return SqlAlchemyStorage(db_session)


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    # FastAPI DI override
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_text_interpreter] = NullTextInterpreter
    app.dependency_overrides[get_image_interpreter] = NullImageInterpreter
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    # lifespan(테이블 생성/시작 시 고정비 처리)은 실행하지 않는다
    yield TestClient(app)
