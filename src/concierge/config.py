"""Configuration management for the call core."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from concierge.errors import ConfigurationError


class Settings(BaseSettings):
    """Call session settings, read from ``CONCIERGE_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="CONCIERGE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Branding
    brand_name: str = Field(default="Aurora Collective", description="Brand the agent speaks for")
    agent_name: str = Field(default="Aurora Agent", description="Display name for agent turns")

    # Scripted session messages
    welcome_message: str = Field(
        default=(
            "You are connected to Aurora Collective's virtual concierge. Tap start to launch a live support call."
        ),
        description="System turn seeded into every fresh transcript",
    )
    greeting_message: str = Field(
        default="Hi there! You're connected to Aurora Collective. How can I help today?",
        description="Agent turn appended when the call becomes active",
    )
    farewell_message: str = Field(
        default="Thank you for contacting Aurora Collective. Goodbye!",
        description="Agent turn appended when the call ends",
    )
    capture_failure_message: str = Field(
        default="We couldn't access the microphone. Please check your browser permissions.",
        description="System turn appended when capture acquisition fails",
    )
    input_error_message: str = Field(
        default="We encountered an issue with voice recognition. You can continue by typing below.",
        description="System turn appended when streaming input reports an error",
    )
    escalation_notice: str = Field(
        default="Live escalation requested. Routing to specialist...",
        description="Banner shown while escalation is requested",
    )
    speech_unavailable_notice: str = Field(
        default=(
            "Voice recognition is not supported in this environment. "
            "You can still interact using the message field below."
        ),
        description="Notice shown when no streaming input is configured",
    )

    # Streaming input
    restart_delay_seconds: float = Field(
        default=0.25, ge=0, description="Pause before restarting streaming input after end-of-stream"
    )

    # Data and logging
    orders_path: Path | None = Field(default=None, description="YAML or JSON order dataset for the console")
    log_level: str = Field(default="INFO", description="Log level")


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, applying non-None overrides."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**updates)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid concierge settings: {exc}") from exc
