"""
`.env` loading.

Developers often keep credentials (e.g. `JSONCLIENT_AUTHORIZATION`) in a repo-local `.env` file.
`load_dotenv_if_present()` loads it once, without overriding env vars already set in the process.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `.env` once if present; returns the loaded env path (or None).

    `JSONCLIENT_ENV_FILE` points at an explicit file; otherwise `.env` is searched for
    upwards from the current directory.
    """
    explicit = os.getenv("JSONCLIENT_ENV_FILE")
    if explicit:
        env_path = Path(explicit).expanduser().resolve()
    else:
        found = find_dotenv(usecwd=True)
        if not found:
            return None
        env_path = Path(found)

    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path
