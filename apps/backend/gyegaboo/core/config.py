from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "Gyegaboo Backend"
    ENV: str = "dev"

    # 기본 SQLite 파일 DB
    # apps/backend/gyegaboo.sqlite3를 절대경로로 지정하여 CWD에 따른 경로 문제 방지
    _default_db_path = Path(__file__).resolve().parents[2] / "gyegaboo.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"

    CORS_ORIGINS: list[str] = ["*"]
    TIMEZONE: str = "Asia/Seoul"
    LOG_LEVEL: str = "INFO"

    # OpenAI 호환 API (키가 없으면 규칙 기반 파서만 사용)
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_VISION_MODEL: str = "gpt-4o"
    INTERPRETER_TIMEOUT_SEC: float = 10.0

    # 서버 시작 시 오늘 날짜 기준으로 고정비 처리
    PROCESS_RECURRING_ON_STARTUP: bool = True

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="GYEGABOO_", case_sensitive=False)


settings = Settings()
