from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the Prompt Grid backend."""

    #----------------------------------------------------------
    # Application settings
    #----------------------------------------------------------
    app_name: str = Field(
        default="Prompt Grid Backend",
        description="Title reported by the FastAPI application.",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level applied at startup.",
    )

    allowed_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware.",
    )

    #----------------------------------------------------------
    # Outbound HTTP settings
    #----------------------------------------------------------
    request_timeout_seconds: Optional[float] = Field(
        default=120.0,
        description="Timeout for a single provider call. None disables the timeout.",
    )

    #----------------------------------------------------------
    # Diagnostics
    #----------------------------------------------------------
    prompt_log_chars: int = Field(
        default=20,
        ge=0,
        description="Number of prompt characters kept in log lines.",
    )
    raw_body_log_chars: int = Field(
        default=500,
        ge=0,
        description="Number of raw provider response characters kept in debug logs.",
    )
    error_body_prefix_chars: int = Field(
        default=100,
        ge=0,
        description="Number of raw body characters echoed when a provider returns invalid JSON.",
    )
    google_billing_url: str = Field(
        default="https://console.cloud.google.com/billing/linkedaccount",
        description="Billing console link appended to Imagen billing errors.",
    )

    model_config = SettingsConfigDict(
        env_prefix="PROMPTGRID_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
