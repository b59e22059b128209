from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config

from infra.config import load_settings

logger = logging.getLogger(__name__)


def _project_dir() -> Path:
    # infra/migrate.py -> infra -> project root
    return Path(__file__).resolve().parents[1]


def alembic_config(db_url: str) -> Config:
    script_location = _project_dir() / "migration"
    alembic_ini = script_location / "alembic.ini"

    if not script_location.exists():
        raise RuntimeError(f"Alembic script_location missing: {script_location}")
    if not alembic_ini.exists():
        raise RuntimeError(f"Alembic config missing: {alembic_ini}")

    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(script_location))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def run_migrations(db_url: Optional[str] = None, revision: str = "head") -> None:
    url = db_url or load_settings().db_url
    logger.info("Upgrading database schema to %s", revision)
    command.upgrade(alembic_config(url), revision)
