from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, TextIO

DEFAULT_LOG_PATH = "/var/log/void-auto-setup.log"

_TAGS = {
    logging.DEBUG: ("2", "[DBG ]"),
    logging.INFO: ("1;34", "[INFO]"),
    logging.WARNING: ("1;33", "[WARN]"),
    logging.ERROR: ("1;31", "[ERR ]"),
    logging.CRITICAL: ("1;31", "[ERR ]"),
}


class TagFormatter(logging.Formatter):
    """Console formatter: ``[INFO] message`` with optional ANSI color."""

    def __init__(self, *, color: bool = False) -> None:
        super().__init__(fmt="%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        code, tag = _TAGS.get(record.levelno, ("0", f"[{record.levelname[:4]}]"))
        if self.color:
            tag = f"\033[{code}m{tag}\033[0m"
        return f"{tag} {super().format(record)}"


def _isatty(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
    console_stream: Optional[TextIO] = None,
) -> str:
    """Configure logging.

    Every decision and command is recorded to /var/log/void-auto-setup.log.

    Notes:
    - Running without root (e.g. --dry-run) usually cannot write /var/log.
      We attempt the requested path first and fall back to a file in the
      current working directory.
    - The console gets short level tags instead of timestamps.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_vas_configured", False):
        return getattr(logger, "_vas_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
    except OSError:
        fallback = str(Path.cwd() / "void-auto-setup.log")
        file_handler = logging.FileHandler(fallback)
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler(console_stream)
        console.setFormatter(TagFormatter(color=_isatty(console.stream)))
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_vas_configured", True)
    setattr(logger, "_vas_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
