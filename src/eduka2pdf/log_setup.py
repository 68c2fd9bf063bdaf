from __future__ import annotations

import logging

NOISY_LOGGERS = ("httpx", "httpcore")


class CleanFormatter(logging.Formatter):
    """Plain INFO lines, short prefixes for everything else."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info and record.levelno >= logging.ERROR:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        if record.levelno == logging.INFO:
            return message
        if record.levelno >= logging.ERROR:
            return f"❌ {message}"
        if record.levelno == logging.DEBUG:
            return f"🔍 {record.name}: {message}"
        return f"{record.levelname}: {message}"


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for CLI runs."""
    level = logging.DEBUG if verbose else logging.INFO

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(CleanFormatter())
    logging.basicConfig(level=level, handlers=[console_handler], force=True)

    # prevent httpx from logging every request
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)


__all__ = ["CleanFormatter", "setup_logging"]
