# rbac_admin/config.py
import logging
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수(RBAC_ 접두사) 또는 .env 파일에서 읽어오는 애플리케이션 설정."""

    model_config = SettingsConfigDict(
        env_prefix="RBAC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    APP_NAME: str = "RBAC Admin"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///rbac_admin.db"

    # Pagination
    MAX_PAGE_SIZE: int = 100
    DEFAULT_PAGE_SIZE: int = 20
    ALLOWED_PAGE_SIZES: List[int] = [5, 10, 20, 30, 50, 100]

    # Bulk / search limits
    BULK_OPERATION_LIMIT: int = 1000
    SEARCH_MIN_LENGTH: int = 2
    SEARCH_MAX_LENGTH: int = 100

    # Bootstrap (초기 관리자 계정, 사용자가 하나도 없을 때만 생성)
    BOOTSTRAP_ADMIN_NAME: str = "Administrator"
    BOOTSTRAP_ADMIN_EMAIL: str = "admin@example.com"
    BOOTSTRAP_ADMIN_PASSWORD: str = "admin12345"


@lru_cache()
def get_settings() -> Settings:
    """프로세스 전체에서 공유하는 Settings 인스턴스를 반환합니다."""
    return Settings()


def configure_logging(settings: Settings = None) -> None:
    """루트 로거의 레벨과 출력 형식을 설정합니다. 시작 시 한 번만 호출합니다."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
