"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./fund_documents.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Document diff
    DIFF_VALUE_MAX_LENGTH: int = 200

    # Templates
    DEFAULT_TEMPLATE_VERSION: str = "1.0.0"
    TEMPLATE_DIR: str = str(Path(__file__).resolve().parent / "templates")

    # 동시 생성 요청으로 버전 번호가 충돌할 때 재시도 횟수
    VERSION_RESERVE_RETRIES: int = 3

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
