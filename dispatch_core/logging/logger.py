from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
REPORT_LOGGER_NAME = "dispatch.reports"


@dataclass(frozen=True)
class LoggerConfig:
    name: str = REPORT_LOGGER_NAME
    level: int = logging.INFO
    max_bytes: int = 2_000_000
    backup_count: int = 5
    console: bool = False
    log_file: Optional[str] = None

    @classmethod
    def for_reports(cls, log_file: str = "", level: str = "INFO", console: bool = False) -> "LoggerConfig":
        lvl = logging.getLevelName(str(level or "INFO").upper())
        return cls(
            level=lvl if isinstance(lvl, int) else logging.INFO,
            console=console,
            log_file=log_file or None,
        )


def _default_log_file(name: str) -> str:
    return str(Path(os.path.expanduser("~")) / ".dispatch_reports" / "logs" / f"{name.replace('.', '_')}.log")


def _writes_to(handler: logging.Handler, path: str) -> bool:
    base = getattr(handler, "baseFilename", None)
    return bool(base) and os.path.normcase(os.path.abspath(base)) == os.path.normcase(os.path.abspath(path))


def build_logger(config: LoggerConfig) -> logging.Logger:
    """Return the named logger with one rotating file handler attached.

    Calling it again with the same name and file adds nothing, so every report
    run can ask for its logger without stacking handlers.
    """
    logger = logging.getLogger(config.name)
    logger.setLevel(int(config.level))
    log_file = config.log_file or _default_log_file(config.name)
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    if not any(_writes_to(h, log_file) for h in logger.handlers):
        handler = RotatingFileHandler(
            log_file, maxBytes=int(config.max_bytes), backupCount=int(config.backup_count), encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    console = config.console or str(os.environ.get("DISPATCH_LOG_STDOUT", "")).strip() == "1"
    if console and not any(type(h) is logging.StreamHandler for h in logger.handlers):
        stream = logging.StreamHandler(stream=sys.stdout)
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(stream)

    logger.propagate = False
    return logger


def report_logger(settings, *, console: bool = False) -> logging.Logger:
    """Logger for one report run.

    With ``settings.log_file`` set (DISPATCH_LOG_FILE) runs are appended to that
    rotating file; otherwise the plain ``dispatch.reports`` logger is returned
    and the host application decides where records go.
    """
    log_file = str(getattr(settings, "log_file", "") or "")
    if not log_file and not console:
        return logging.getLogger(REPORT_LOGGER_NAME)
    return build_logger(
        LoggerConfig.for_reports(log_file=log_file, level=getattr(settings, "log_level", "INFO"), console=console)
    )
