# infra/logging_config.py
from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from infra.config import Settings, default_log_dir, load_settings
from infra.operational_support import TraceIdLogFilter


def setup_logging(settings: Optional[Settings] = None, *, console: bool = True) -> Path:
    """
    Configure root logging: a rotating file under the user data directory and
    an optional console handler, both stamped with the current trace id.
    Returns the log file path.
    """
    settings = settings or load_settings()
    log_dir: Path = settings.log_dir or default_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "cronograma.log"

    logger = logging.getLogger()
    logger.setLevel(settings.log_level)

    # repeated setup must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    trace_filter = TraceIdLogFilter()

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.addFilter(trace_filter)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] trace=%(trace_id)s %(name)s - %(message)s")
    )
    logger.addHandler(file_handler)

    if console:
        stream = logging.StreamHandler()
        stream.addFilter(trace_filter)
        stream.setFormatter(logging.Formatter("%(levelname)s [trace=%(trace_id)s]: %(message)s"))
        logger.addHandler(stream)

    logger.info("Logging initialized. Log file at %s", log_file)
    return log_file
