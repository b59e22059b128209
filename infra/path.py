# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "Cronograma"
COMPANY_NAME = "Cronograma"


def user_data_dir() -> Path:
    """
    Per-user data directory:

    Windows:  %APPDATA%\\Cronograma\\Cronograma
    macOS:    ~/Library/Application Support/Cronograma/Cronograma
    Linux:    $XDG_DATA_HOME/Cronograma/Cronograma (~/.local/share by default)
    """
    try:
        if sys.platform.startswith("win"):
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

        path = base / COMPANY_NAME / APP_NAME
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        fallback = Path.home() / f".{APP_NAME.lower()}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def default_db_path() -> Path:
    return user_data_dir() / "cronograma.db"
