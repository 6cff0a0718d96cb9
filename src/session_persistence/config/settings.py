"""Runtime settings loaded from environment variables."""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    persistence_lifetime_days: PositiveInt = Field(
        default=30,
        validation_alias="PERSISTENCE_LIFETIME_DAYS",
    )
    persistence_code_length: Annotated[int, Field(ge=16, le=255)] = Field(
        default=64,
        validation_alias="PERSISTENCE_CODE_LENGTH",
    )
    persistence_code_max_attempts: PositiveInt = Field(
        default=10,
        validation_alias="PERSISTENCE_CODE_MAX_ATTEMPTS",
    )
    persistence_cookie_name: NonEmptyStr = Field(
        default="remember_token",
        validation_alias="PERSISTENCE_COOKIE_NAME",
    )
    persistence_cookie_secure: bool = Field(
        default=True,
        validation_alias="PERSISTENCE_COOKIE_SECURE",
    )

    @property
    def persistence_lifetime(self) -> timedelta:
        return timedelta(days=self.persistence_lifetime_days)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
