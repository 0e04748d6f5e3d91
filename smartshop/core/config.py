"""Configuration management for SmartShop.

Provides centralized configuration loading from config.toml with type-safe
access via Pydantic models. Secrets (AUTH_SECRET, OPENAI_API_KEY) come from
the environment, optionally via a .env file.
"""

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


# =============================================================================
# Pydantic Configuration Models
# =============================================================================


class AppConfig(BaseModel):
    """Application-level configuration."""

    name: str = "smartshop"
    host: str = "0.0.0.0"
    port: int = 5001
    debug: bool = False
    environment: str = "development"


class ChatConfig(BaseModel):
    """Chat form behaviour."""

    debounce_seconds: float = 2.0
    id_length: int = 7
    id_alphabet: str = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
    # SSE polling for store changes, same cadence as the job stream
    stream_poll_interval: float = 0.5
    stream_keepalive_seconds: float = 15.0
    # Open chat runtimes kept in memory; least recently used are closed first
    max_open_chats: int = 256


class LLMConfig(BaseModel):
    """LLM configuration."""

    chat_model: str = "gpt-4.1"
    chat_temperature: float = 0.0


class AuthSettings(BaseModel):
    """Authentication settings."""

    sign_in_page: str = "/login"
    new_user_page: str = "/signup"
    session_days: int = 30


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_logs: bool = False


class Config(BaseModel):
    """Root configuration model."""

    app: AppConfig = Field(default_factory=AppConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================


def _find_config_file() -> Optional[Path]:
    """Find config.toml in standard locations."""
    search_paths = [
        Path.cwd() / "config.toml",  # Current working directory
        Path(__file__).parent.parent.parent / "config.toml",  # Project root
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


@lru_cache(maxsize=1)
def load_config() -> Config:
    """Load configuration from config.toml.

    Uses lru_cache to ensure config is only loaded once per process.

    Returns:
        Config instance with all settings
    """
    load_dotenv()

    config_path = _find_config_file()

    if config_path:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return Config.model_validate(data)

    # Return defaults if no config file found
    return Config()


def get_auth_secret() -> Optional[str]:
    """Secret used to sign session cookies (AUTH_SECRET)."""
    load_dotenv()
    return os.environ.get("AUTH_SECRET")


# =============================================================================
# Convenience Functions
# =============================================================================


def get_config() -> Config:
    """Get the loaded configuration (alias for load_config)."""
    return load_config()
