"""Configuration module.

Settings are read from environment variables (case-insensitive) and an
optional .env file.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1"


class Settings(BaseSettings):
    """Settings for the model provider and the target API."""

    # Model provider
    gemini_api_key: Optional[str] = Field(None, description="Google Gemini API key")
    gemini_model: str = Field(DEFAULT_GEMINI_MODEL, description="Gemini model name")
    gemini_base_url: str = Field(DEFAULT_GEMINI_BASE_URL, description="Gemini API base URL")

    # Target API
    api_base_url: Optional[str] = Field(
        None, description="Base URL function calls are dispatched to"
    )
    api_docs_url: Optional[str] = Field(
        None, description="Location of the API description, e.g. http://localhost:8080/v3/api-docs"
    )

    request_timeout: float = Field(30.0, description="Timeout in seconds for network calls")
    log_level: str = Field("INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )
