"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from formlogic.exceptions import SettingsError


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "formlogic"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    format_locale: str = Field(
        default="en_US",
        validation_alias="FORMAT_LOCALE",
        description="Locale used to format computed values, e.g. 'en_US', 'fr-FR'.",
    )
    format_currency: str = Field(
        default="USD",
        validation_alias="FORMAT_CURRENCY",
        description="ISO 4217 currency code used by the 'currency' format.",
    )
    null_display: str | None = Field(
        default=None,
        validation_alias="NULL_DISPLAY",
        description="Text displayed for null computed values.",
    )

    @field_validator("format_locale")
    @classmethod
    def _normalize_locale(cls, value: str) -> str:
        """Accept BCP 47 style locale tags.

        Args:
            value (str): Raw locale identifier.

        Returns:
            str: Locale identifier using '_' as separator.
        """
        return value.strip().replace("-", "_")

    @field_validator("format_currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        """Upper-case the currency code.

        Args:
            value (str): Raw currency code.

        Raises:
            ValueError: If the code is not three letters long.

        Returns:
            str: Normalized currency code.
        """
        code = value.strip().upper()
        if len(code) != 3 or not code.isalpha():  # noqa: PLR2004
            raise ValueError("FORMAT_CURRENCY must be a 3-letter ISO 4217 code")  # noqa: TRY003
        return code


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        raise SettingsError(exc=exc) from exc
