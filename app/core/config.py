"""i18n engine configuration settings."""

from typing import Optional

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .currencies import ISO_4217_CODES


class I18nSettings(BaseSettings):
    """Translation engine configuration settings.

    Values here become the defaults of every engine built through
    ``EngineConfig.from_settings``; engines created directly can still
    override any of them.
    """

    DEFAULT_CURRENCY_CODE: str = Field(default="USD", alias="I18N_DEFAULT_CURRENCY")
    DEFAULT_TIMEZONE: str = Field(default="UTC", alias="I18N_DEFAULT_TIMEZONE")
    REQUIRE_COMPLETE_STRINGS: bool = Field(
        default=False, alias="I18N_REQUIRE_COMPLETE_STRINGS"
    )
    ALLOW_PARTIAL_REGISTRATION: bool = Field(
        default=True, alias="I18N_ALLOW_PARTIAL_REGISTRATION"
    )
    DEFAULT_INSTANCE_KEY: str = Field(default="default", alias="I18N_INSTANCE_KEY")
    MAX_TEMPLATE_LENGTH: int = Field(default=10000, alias="I18N_MAX_TEMPLATE_LENGTH")
    TRANSLATIONS_DIR: Optional[str] = Field(
        default=None, alias="I18N_TRANSLATIONS_DIR"
    )

    @field_validator("DEFAULT_CURRENCY_CODE", mode="before")
    @classmethod
    def validate_currency_code(cls, v: str) -> str:
        """Normalize and validate the default currency code.

        Args:
            cls: The class itself.
            v: Raw currency code value.

        Returns:
            Upper-cased currency code.

        Raises:
            ValueError: If the code is not an ISO 4217 currency code.
        """
        code = str(v).strip().upper()
        if code not in ISO_4217_CODES:
            raise ValueError(f"Invalid currency code: {v}")
        return code

    @field_validator("DEFAULT_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Invalid timezone: {v}")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """i18n engine configuration settings."""

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"

    i18n: I18nSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production."""
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        if "i18n" not in kwargs:
            kwargs["i18n"] = I18nSettings()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create the settings instance
settings = Settings()
