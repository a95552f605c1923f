"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field, field_validator

from forecast_api.config.defaults import (
    CWA_API_BASE_URL,
    DEFAULT_PORT,
    TARGET_CITY,
    TOWNSHIP_DATASET_ID,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ServiceConfig(BaseModel):
    model_config = {"extra": "forbid"}

    api_key: str = ""
    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    base_url: str = CWA_API_BASE_URL
    dataset_id: str = TOWNSHIP_DATASET_ID
    target_city: str = TARGET_CITY
    log_level: str = "INFO"

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())

    @property
    def dataset_url(self) -> str:
        return f"{self.base_url}/v1/rest/datastore/{self.dataset_id}"
