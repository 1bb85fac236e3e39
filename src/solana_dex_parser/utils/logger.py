"""
Unified logging for the parser.

The library itself only emits records; handlers are installed by the
application through ``setup_console_logging`` / ``setup_file_logging``.
Records emitted during a parse call carry the transaction signature.
"""

import json
import logging
import logging.handlers
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, Optional

LOG_DIR = Path("logs")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(tx_signature)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_SIZE_MB = 10
BACKUP_COUNT = 5

_loggers: Dict[str, logging.Logger] = {}
_file_handler_added = False

_current_signature: ContextVar[Optional[str]] = ContextVar("tx_signature", default=None)


@contextmanager
def signature_context(signature: str) -> Iterator[None]:
    """Bind ``signature`` to every record logged inside the block."""
    token = _current_signature.set(signature or None)
    try:
        yield
    finally:
        _current_signature.reset(token)


def get_signature() -> Optional[str]:
    return _current_signature.get()


class SignatureFilter(logging.Filter):
    """Filter that adds tx_signature to log records."""
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "tx_signature"):
            sig = get_signature()
            record.tx_signature = f"{sig[:16]}..." if sig else "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        signature = get_signature()
        if signature:
            log_data["signature"] = signature
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


_signature_filter = SignatureFilter()


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get or create a logger."""
    if name in _loggers:
        return _loggers[name]
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    _loggers[name] = logger
    return logger


def setup_console_logging(level: int = logging.INFO, json_format: bool = False) -> None:
    """Set up console logging."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler) and getattr(handler, "stream", None) == sys.stdout:
            return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    console_handler.addFilter(_signature_filter)
    root_logger.addHandler(console_handler)


def setup_file_logging(
    filename: str = "dex_parser.log",
    level: int = logging.INFO,
    use_rotation: bool = True,
    log_dir: Optional[Path] = None,
) -> Path:
    """Set up file logging once per process; returns the log path."""
    global _file_handler_added

    directory = Path(log_dir) if log_dir is not None else LOG_DIR
    log_path = directory / Path(filename).name
    if _file_handler_added:
        return log_path

    directory.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if use_rotation:
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_path),
            maxBytes=MAX_LOG_SIZE_MB * 1024 * 1024,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    else:
        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")

    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    file_handler.addFilter(_signature_filter)
    root_logger.addHandler(file_handler)

    _file_handler_added = True
    return log_path
