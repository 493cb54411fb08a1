from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """설정값이 없거나 서로 충돌할 때"""
    pass


def _normalize_scheme(url: str) -> str:
    # SQLAlchemy는 'postgres://' 스킴을 더 이상 받지 않습니다.
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


class Settings(BaseSettings):
    # Database
    database_url: Optional[str] = None
    postgres_user: Optional[str] = None
    postgres_password: Optional[str] = None
    postgres_db: Optional[str] = None
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # App
    log_level: str = "INFO"
    server_host: str = ""
    server_port: int = 8000
    bootstrap_admin_user_id: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )

    def build_postgres_url(self) -> Optional[str]:
        """
        개별 POSTGRES_* 값으로 연결 문자열을 조립합니다.

        POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB 중 하나라도 비어 있으면
        None을 반환합니다. 호스트와 포트는 기본값을 사용할 수 있습니다.
        """
        required = (self.postgres_user, self.postgres_password, self.postgres_db)
        if any(value is None or value == "" for value in required):
            return None
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    def get_database_url(self) -> str:
        """
        검증된 데이터베이스 연결 문자열을 반환합니다.

        Returns:
            조립된 URL과 DATABASE_URL 중 정의된 쪽. 둘 다 정의되어 있으면 두 값이 같아야 합니다.

        Raises:
            ConfigurationError: 두 URL이 서로 다르거나, 어느 쪽도 정의되지 않았을 때.
        """
        constructed = self.build_postgres_url()
        explicit = _normalize_scheme(self.database_url) if self.database_url else None

        if (constructed is None) != (explicit is None):
            return constructed or explicit

        if constructed and explicit:
            if constructed == explicit:
                return constructed
            raise ConfigurationError(
                "\n".join([
                    "Conflicting database URLs detected:",
                    f"  Constructed: {constructed}",
                    f"  Explicit:    {explicit}",
                ])
            )

        raise ConfigurationError("No database configuration found.")


@lru_cache
def get_settings() -> Settings:
    return Settings()
