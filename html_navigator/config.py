"""
Runtime settings for html_navigator.

Values come from HTML_NAVIGATOR_* environment variables (a local .env file is
loaded first via python-dotenv), falling back to the defaults below:

    HTML_NAVIGATOR_DECIMAL_SEPARATOR         default decimal separator for parse_price()
    HTML_NAVIGATOR_LINK_BASE_URL             base used to validate relative hrefs
    HTML_NAVIGATOR_IGNORED_LINK_EXTENSIONS   comma-separated image extensions find_links() skips
    HTML_NAVIGATOR_LOG_LEVEL                 package log level name
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "HTML_NAVIGATOR_"


class Settings(BaseModel):
    """Tunable defaults shared by Node and the extractors."""
    decimal_separator: str = Field(default=".", min_length=1, max_length=1)
    link_base_url: str = "http://example.com"
    ignored_link_extensions: list[str] = Field(
        default_factory=lambda: ["jpg", "jpeg", "gif", "png"]
    )
    log_level: str = "INFO"

    @field_validator("ignored_link_extensions", mode="before")
    @classmethod
    def _split_extensions(cls, value):
        # Environment variables arrive as "jpg, png"
        if isinstance(value, str):
            value = value.split(",")
        return [item.strip().lower().lstrip(".") for item in value if item.strip()]

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"Unknown log level: {value}")
        return value

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env_file: Optional path to a .env file (default: search from cwd)

    Returns:
        Validated Settings instance
    """
    load_dotenv(env_file)

    values = {}
    for field_name in Settings.model_fields:
        raw = os.getenv(ENV_PREFIX + field_name.upper())
        if raw is not None:
            values[field_name] = raw
    return Settings(**values)


# Process-wide settings, loaded on first use
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the shared Settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached Settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
