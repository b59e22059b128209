# infra/db/base.py
from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from infra.config import load_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

SessionLocal = sessionmaker(autoflush=False, autocommit=False, future=True)


@lru_cache(maxsize=None)
def get_engine(db_url: str | None = None) -> Engine:
    url = db_url or load_settings().db_url
    logger.info("Using database at: %s", url)
    engine = create_engine(url, echo=False, future=True)
    SessionLocal.configure(bind=engine)
    return engine
