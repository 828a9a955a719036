"""Typed settings loader for the CWA forecast service."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError
from .regions import CITY_DISTRICTS, NATIONWIDE_DATASET_ID


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    cwa_api_base_url: AnyUrl = Field(
        default=AnyUrl("https://opendata.cwa.gov.tw/api"),
        alias="CWA_API_BASE_URL",
    )
    cwa_api_key: str | None = Field(default=None, alias="CWA_API_KEY", repr=False)
    cwa_timeout_seconds: float = Field(default=15.0, alias="CWA_TIMEOUT_SECONDS")
    cwa_element_names: str = Field(default="T,PoP12h,RH,WS,Wx", alias="CWA_ELEMENT_NAMES")

    forecast_default_city: str = Field(default="基隆市", alias="FORECAST_DEFAULT_CITY")
    forecast_allow_nationwide_fallback: bool = Field(
        default=True,
        alias="FORECAST_ALLOW_NATIONWIDE_FALLBACK",
    )
    forecast_nationwide_dataset_id: str = Field(
        default=NATIONWIDE_DATASET_ID,
        alias="FORECAST_NATIONWIDE_DATASET_ID",
    )
    forecast_journal_raw_payloads: bool = Field(
        default=True,
        alias="FORECAST_JOURNAL_RAW_PAYLOADS",
    )
    forecast_max_print: int = Field(default=14, alias="FORECAST_MAX_PRINT")

    journal_dir: Path = Field(default=Path("./data/journal"), alias="JOURNAL_DIR")
    raw_payload_dir: Path = Field(default=Path("./data/raw"), alias="RAW_PAYLOAD_DIR")

    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=3000, alias="API_PORT")

    @field_validator("cwa_api_key", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat an empty env-string key as unset."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @model_validator(mode="after")
    def validate_ranges(self) -> Settings:
        """Validate numeric ranges and the default city."""
        if self.cwa_timeout_seconds <= 0:
            raise ValueError("CWA_TIMEOUT_SECONDS must be > 0.")
        if self.forecast_max_print <= 0:
            raise ValueError("FORECAST_MAX_PRINT must be > 0.")
        if not (0 < self.api_port < 65536):
            raise ValueError("API_PORT must be between 1 and 65535.")
        if not self.forecast_nationwide_dataset_id.strip():
            raise ValueError("FORECAST_NATIONWIDE_DATASET_ID must not be empty.")
        if self.forecast_default_city not in CITY_DISTRICTS:
            raise ValueError(
                f"FORECAST_DEFAULT_CITY {self.forecast_default_city!r} is not a supported city."
            )
        return self

    @property
    def element_names(self) -> list[str]:
        """Element codes requested from the datastore; empty means no filter."""
        return [name.strip() for name in self.cwa_element_names.split(",") if name.strip()]

    def require_api_key(self) -> str:
        """Return the CWA key, raising ConfigError when it is not configured."""
        if not self.cwa_api_key:
            raise ConfigError("CWA_API_KEY is not set; add it to the environment or .env.")
        return self.cwa_api_key

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for journaling (no credentials)."""
        return {
            "app_env": self.app_env,
            "base_url": str(self.cwa_api_base_url),
            "api_key_configured": bool(self.cwa_api_key),
            "timeout_seconds": self.cwa_timeout_seconds,
            "element_names": self.element_names,
            "default_city": self.forecast_default_city,
            "allow_nationwide_fallback": self.forecast_allow_nationwide_fallback,
            "nationwide_dataset_id": self.forecast_nationwide_dataset_id,
            "raw_journaling": self.forecast_journal_raw_payloads,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
    return settings
