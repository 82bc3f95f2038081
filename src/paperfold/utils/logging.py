from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Optional, Union

_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# matplotlib and Pillow log font discovery at DEBUG
_NOISY_LOGGERS = ("matplotlib", "PIL")

_current_command: ContextVar[str] = ContextVar("paperfold_command", default="paperfold")


class _CommandFilter(logging.Filter):
    """Stamp each record with the active CLI command."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "command", None):
            record.command = _current_command.get()
        return True


def setup_logging(level: Union[str, int] = "WARNING") -> None:
    """
    Configure the root logger once with a single stderr handler.

    Calling again only changes the level.
    """
    if isinstance(level, str):
        numeric_level = _LEVELS.get(level.lower(), logging.WARNING)
    else:
        numeric_level = int(level)
    root = logging.getLogger()
    if not any(getattr(h, "_paperfold", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(command)s] %(levelname)s: %(message)s"))
        handler.addFilter(_CommandFilter())
        handler._paperfold = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(numeric_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))
    logging.captureWarnings(True)


def set_command_context(command: str) -> None:
    _current_command.set(command)


def resolve_log_level(verbose: bool, debug: bool) -> str:
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return "WARNING"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name if name is not None else "paperfold")
