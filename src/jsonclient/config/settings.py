# src/jsonclient/config/settings.py
"""
Settings (Pydantic).

Settings are loaded from `src/jsonclient/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `JSONCLIENT_CONFIG_PATH` (replaces the packaged defaults)
- environment variables (e.g., `JSONCLIENT_AUTHORIZATION`, `JSONCLIENT_LOG_LEVEL`)

Only `build_client()` and the CLI read settings; the process-wide default client does not.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from jsonclient.core.env import load_dotenv_if_present

DEFAULT_USER_AGENT = "jsonclient/0.1.0"


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `jsonclient.config`."""
    text = resources.files("jsonclient.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "jsonclient"
    log_level: str = "INFO"


class ClientSettings(BaseModel):
    timeout_seconds: float = Field(15, gt=0)
    follow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    # Sent verbatim as the Authorization header on POST (e.g. "Bearer xyz").
    authorization_header: str = ""
    # Empty means compact JSON.
    indent: str = ""


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload."""
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("JSONCLIENT_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    authorization = os.getenv("JSONCLIENT_AUTHORIZATION")
    if authorization:
        data.setdefault("client", {})["authorization_header"] = authorization

    # An explicitly empty JSONCLIENT_INDENT switches back to compact output.
    indent = os.getenv("JSONCLIENT_INDENT")
    if indent is not None:
        data.setdefault("client", {})["indent"] = indent

    timeout = os.getenv("JSONCLIENT_TIMEOUT_SECONDS")
    if timeout:
        data.setdefault("client", {})["timeout_seconds"] = timeout

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("JSONCLIENT_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
