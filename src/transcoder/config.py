"""Transcoder configuration loaded from environment variables."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class TranscoderConfig(BaseSettings):
    """Transcoder configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Codec behaviour
    unknown_activity: str = Field(
        default="Unknown",
        description="Display name used when a stripe has neither label nor activity",
    )
    merge_code_scope: Literal["name", "run"] = Field(
        default="name",
        description=(
            "'name' gives one merge code per display name; "
            "'run' gives a fresh code to every contiguous merged block"
        ),
    )

    # Generation service (OpenAI chat completions)
    openai_api_key: str = Field(
        default="",
        description="API key for the schedule generation service",
    )
    openai_url: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Chat completions endpoint",
    )
    openai_model: str = Field(
        default="gpt-4o",
        description="Model used for calendar recognition and schedule generation",
    )
    openai_temperature: float = Field(
        default=0.3,
        description="Sampling temperature; kept low for consistent structured output",
    )
    request_timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for a single generation request",
    )
    generation_max_attempts: int = Field(
        default=3,
        description="Attempts per generation request before giving up on transient errors",
    )
    generation_retry_wait_seconds: float = Field(
        default=5.0,
        description="Fixed wait between retried generation requests",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: TranscoderConfig | None = None


def get_config() -> TranscoderConfig:
    """Get the transcoder configuration singleton.

    Returns:
        TranscoderConfig: Transcoder configuration instance
    """
    global _config
    if _config is None:
        _config = TranscoderConfig()
    return _config
