"""
Slack Guard Settings Configuration

This module provides centralized configuration management using Pydantic settings.
Configuration is loaded from .env by default; alternative YAML loading is supported.

The channel policy is not part of the cached root settings: it is read through
ChannelPolicySettings on every check, so edits take effect on the next message.
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slack_guard.guardrails.constants import MAX_MESSAGE_LENGTH


class ChannelPolicySettings(BaseSettings):
    """
    Channel policy string for the add-message tool.

    Empty or unset denies every channel; "true"/"1" allows all; a comma
    separated list is an allow-list, or a deny-list when entries are "!"-prefixed.
    """

    model_config = SettingsConfigDict(
        env_prefix="SLACK_MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    add_message_tool: str = Field(
        default="",
        description="Channel policy for outbound messages",
    )


class GuardrailSettings(BaseSettings):
    """Limits and defaults applied by the message pipeline."""

    model_config = SettingsConfigDict(env_prefix="GUARDRAIL_", extra="ignore")

    max_message_length: int = Field(
        default=MAX_MESSAGE_LENGTH,
        ge=1,
        le=MAX_MESSAGE_LENGTH,
        description="Max message length in characters (Slack's own limit)",
    )
    default_content_type: str = Field(
        default="text/markdown",
        description="Content type used when a request does not specify one",
    )

    @field_validator("default_content_type")
    @classmethod
    def validate_content_type(cls, v: str) -> str:
        allowed = ("text/plain", "text/markdown")
        if v.lower() not in allowed:
            raise ValueError(f"default_content_type must be one of {allowed}")
        return v.lower()


class LoggingSettings(BaseSettings):
    """Logging configuration: level and format (json/console)."""

    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_format: str = Field(default="json", description="Format: 'json' or 'console'")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = ("json", "console")
        if v.lower() not in allowed:
            raise ValueError(f"log_format must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        u = v.upper()
        if u not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return u


class Settings(BaseSettings):
    """
    Root settings class. Loads from .env by default; supports creation from YAML.

    Nested models: guardrails, logging.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    guardrails: GuardrailSettings = Field(default_factory=GuardrailSettings, description="Guardrail config")
    logging: LoggingSettings = Field(default_factory=LoggingSettings, description="Logging config")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """
        Create Settings from a YAML file. Top-level keys should match
        nested model names (guardrails, logging).
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        kwargs: dict[str, Any] = {}
        for name, model_class in [
            ("guardrails", GuardrailSettings),
            ("logging", LoggingSettings),
        ]:
            if name in data and isinstance(data[name], dict):
                kwargs[name] = model_class.model_validate(data[name])
        return cls(**kwargs)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance (loads from .env)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Force reload of settings from environment."""
    global _settings
    _settings = Settings()
    return _settings


def current_channel_policy() -> str:
    """Read the channel policy string from the environment. Never cached."""
    return ChannelPolicySettings().add_message_tool
