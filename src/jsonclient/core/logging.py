"""
Logging configuration.

We use a YAML logging config (`src/jsonclient/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `JSONCLIENT_LOG_LEVEL`).

The library itself never calls this; applications (and the CLI) opt in.
"""

from __future__ import annotations

import logging.config

from jsonclient.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure the Python logging system based on packaged YAML config + settings."""
    config = get_logging_config()

    level = (level or get_settings().app.log_level).upper()
    config = dict(config)
    config["root"] = {**config.get("root", {}), "level": level}
    config["handlers"] = {
        name: ({**handler, "level": level} if isinstance(handler, dict) and "level" in handler else handler)
        for name, handler in config.get("handlers", {}).items()
    }

    logging.config.dictConfig(config)
