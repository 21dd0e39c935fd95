"""File logging setup for the package loggers."""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FILE = Path("logs/echomind.log")
PACKAGE_LOGGERS = (
    "echomind_workbench.simulation",
    "echomind_workbench.workbench",
    "echomind_workbench.remote",
    "echomind_workbench.persistence",
    "echomind_workbench.notifications",
    "echomind_workbench.llm_client",
)


def _has_file_handler(logger: logging.Logger, path: Path) -> bool:
    target_path = path.resolve()
    for handler in logger.handlers:
        if not isinstance(handler, logging.FileHandler):
            continue
        handler_path = Path(getattr(handler, "baseFilename", "")).resolve()
        if handler_path == target_path:
            return True
    return False


def configure_logging(log_file: str | Path = LOG_FILE, *, level: int = logging.INFO) -> None:
    """Attach one UTF-8 file handler per package logger. Safe to call repeatedly."""
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        if not _has_file_handler(logger, path):
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        logger.setLevel(level)
        logger.propagate = False
