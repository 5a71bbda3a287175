from __future__ import annotations

import logging
from pathlib import Path

_LOG_FORMAT = '[%(levelname)s] %(threadName)s %(name)s: %(message)s'


def _ensure_stream_handler(logger: logging.Logger) -> None:
    handler_exists = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in logger.handlers
    )
    if handler_exists:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)


def _ensure_file_handler(logger: logging.Logger, log_file: Path) -> None:
    target = str(log_file.resolve())
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler) and h.baseFilename == target:
            return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(target, encoding='utf-8')
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)


def configure_logging(level_name: str | None = None, log_file: Path | None = None) -> None:
    """Configure the root logger; safe to call more than once."""

    lvl = getattr(logging, (level_name or 'INFO').upper(), logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(lvl)
    _ensure_stream_handler(root_logger)
    if log_file is not None:
        _ensure_file_handler(root_logger, Path(log_file))
