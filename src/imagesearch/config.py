"""Environment-based configuration for imagesearch."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LIST_URL = "https://s3.amazonaws.com/clarifai-data/backend/api-take-home/images.txt"
DEFAULT_CLASSIFIER_URL = "https://api.clarifai.com/v2/models/aaa03c23b3724a16a56b629203edc62c/outputs"


class Settings(BaseSettings):
    """Application settings loaded from IMAGESEARCH_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGESEARCH_",
        case_sensitive=False,
    )

    # Classifier
    api_key: str | None = None
    classifier_url: str = DEFAULT_CLASSIFIER_URL
    request_timeout: float = Field(default=50.0, gt=0)

    # Candidate list
    list_url: str = DEFAULT_LIST_URL

    # Index
    index_path: str = "index.json"

    # Build pass
    on_error: Literal["abort", "skip"] = "abort"
    max_workers: int = Field(default=1, ge=1)
    progress_every: int = Field(default=20, ge=1)
    build_deadline: float | None = Field(default=None, ge=0)

    # Query server
    host: str = "127.0.0.1"
    port: int = 8082

    # Query server authentication (None = disabled)
    search_token: str | None = None


def get_settings(**overrides: Any) -> Settings:
    """Create and return application settings.

    Keyword overrides take precedence over the environment; ``None`` values are ignored
    so optional CLI flags fall through to the environment or defaults.
    """
    return Settings(**{key: value for key, value in overrides.items() if value is not None})
