# infra/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from core.services.schedule.pipeline import BLOCKED_POLICY_FLAG, BLOCKED_POLICY_REJECT
from infra.path import default_db_path, user_data_dir

_BLOCKED_POLICIES = (BLOCKED_POLICY_FLAG, BLOCKED_POLICY_REJECT)


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings read from the environment.

    CRONOGRAMA_DB_URL        SQLAlchemy URL (default: sqlite file in the user data dir)
    CRONOGRAMA_LOG_LEVEL     root log level name (default: INFO)
    CRONOGRAMA_LOG_DIR       directory for rotating log files
    CRONOGRAMA_BLOCKED_POLICY  "flag" marks conflicting tasks blocked, "reject" refuses the edit
    """
    db_url: str
    log_level: int = logging.INFO
    log_dir: Optional[Path] = None
    blocked_policy: str = BLOCKED_POLICY_FLAG

    @property
    def rejects_blocked(self) -> bool:
        return self.blocked_policy == BLOCKED_POLICY_REJECT


def _log_level(raw: Optional[str]) -> int:
    if not raw:
        return logging.INFO
    value = raw.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {raw!r}")
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    db_url = (env.get("CRONOGRAMA_DB_URL") or "").strip()
    if not db_url:
        db_url = f"sqlite:///{default_db_path().as_posix()}"

    policy = (env.get("CRONOGRAMA_BLOCKED_POLICY") or BLOCKED_POLICY_FLAG).strip().lower()
    if policy not in _BLOCKED_POLICIES:
        raise ValueError(
            f"CRONOGRAMA_BLOCKED_POLICY must be one of {', '.join(_BLOCKED_POLICIES)}; got {policy!r}"
        )

    log_dir_raw = (env.get("CRONOGRAMA_LOG_DIR") or "").strip()
    return Settings(
        db_url=db_url,
        log_level=_log_level(env.get("CRONOGRAMA_LOG_LEVEL")),
        log_dir=Path(log_dir_raw) if log_dir_raw else None,
        blocked_policy=policy,
    )


def default_log_dir() -> Path:
    return user_data_dir() / "logs"


__all__ = [
    "Settings",
    "load_settings",
    "default_log_dir",
    "BLOCKED_POLICY_FLAG",
    "BLOCKED_POLICY_REJECT",
]
