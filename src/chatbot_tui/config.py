"""Configuration loading and validation for the chatbot TUI."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
import re
import tomllib
from typing import Any
from urllib.parse import urlparse

from platformdirs import user_config_path, user_state_path
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import ConfigValidationError

LOGGER = logging.getLogger(__name__)

APP_NAME = "chatbot-tui"

CONFIG_DIR = user_config_path(APP_NAME)
CONFIG_PATH = CONFIG_DIR / "config.toml"
STATE_DIR = user_state_path(APP_NAME)

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _require_non_empty(value: Any, label: str = "String value") -> str:
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string.")
    normalized = value.strip()
    if not normalized:
        raise ValueError(f"{label} must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Window title and terminal class name."""

    model_config = ConfigDict(populate_by_name=True)
    title: str = "Franchise Middle East AI Bot (Demo)"
    window_class: str = Field(default="chatbot-tui", alias="class")

    @field_validator("title", "window_class", mode="before")
    @classmethod
    def _validate_non_empty_string(cls, value: Any) -> str:
        return _require_non_empty(value)


class ServiceConfig(BaseModel):
    """Remote chat service endpoint."""

    base_url: str = "https://franchise-ai-agent-backend.onrender.com"
    chat_path: str = "/chat"
    timeout: float = Field(default=120.0, gt=0, le=3600)

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> str:
        normalized = _require_non_empty(value, "base_url").rstrip("/")
        parsed = urlparse(normalized)
        if parsed.scheme.lower() not in {"http", "https"}:
            raise ValueError("base_url must use http or https scheme.")
        if not parsed.hostname:
            raise ValueError("base_url must include a hostname.")
        return normalized

    @field_validator("chat_path", mode="before")
    @classmethod
    def _validate_chat_path(cls, value: Any) -> str:
        normalized = _require_non_empty(value, "chat_path")
        if not normalized.startswith("/"):
            normalized = f"/{normalized}"
        return normalized


class SessionConfig(BaseModel):
    """Where the session identifier is kept between runs."""

    persist: bool = True
    store_path: str = str(STATE_DIR / "store.json")

    @field_validator("store_path", mode="before")
    @classmethod
    def _validate_store_path(cls, value: Any) -> str:
        return _require_non_empty(value, "store_path")


class AttachmentsConfig(BaseModel):
    """Limits applied when staging a file."""

    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1, le=100 * 1024 * 1024)


class UIConfig(BaseModel):
    """Bubble colours and timestamp display."""

    show_timestamps: bool = True
    user_message_color: str = "#3b82f6"
    bot_message_color: str = "#e5e7eb"

    @field_validator("user_message_color", "bot_message_color", mode="before")
    @classmethod
    def _validate_hex_color(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        normalized = value.strip()
        if not HEX_COLOR_PATTERN.match(normalized):
            raise ValueError("Color must use #RGB or #RRGGBB format.")
        return normalized


class KeybindsConfig(BaseModel):
    """Key bound to each app action."""

    send_message: str = "ctrl+enter"
    attach_file: str = "ctrl+o"
    remove_attachment: str = "ctrl+x"
    quit: str = "ctrl+q"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        return _require_non_empty(value, "Keybind")


class LoggingConfig(BaseModel):
    """Log level, format, and optional log file."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = str(STATE_DIR / "app.log")

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        return _require_non_empty(value, "log_file_path")


class Config(BaseModel):
    """Every config section, validated together."""

    model_config = ConfigDict(populate_by_name=True)
    app: AppConfig = AppConfig()
    service: ServiceConfig = ServiceConfig()
    session: SessionConfig = SessionConfig()
    attachments: AttachmentsConfig = AttachmentsConfig()
    ui: UIConfig = UIConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _validate_distinct_keybinds(self) -> Config:
        bound = list(self.keybinds.model_dump().values())
        if len(bound) != len(set(bound)):
            raise ValueError("keybinds must not map two actions to the same key.")
        return self


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump(by_alias=True)


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Overlay user values onto defaults, section by section."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort enforcement of private file permissions on POSIX systems."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Return validated config, or the defaults when the file has bad values."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump(by_alias=True)
    except ValidationError as exc:
        LOGGER.warning("Invalid config values, falling back to defaults: %s", exc)
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Read ``config.toml`` (or ``config_path``), merge it onto the defaults,
    and validate the result.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning("Unreadable config file %s: %s", target_path, exc)
            raw_data = {}

    return _validate_config(_deep_merge(DEFAULT_CONFIG, raw_data))
