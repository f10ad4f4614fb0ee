from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Iterable, Iterator, Optional

from settings import get_settings, normalize_log_level

READING_CONTEXT_KEYS = (
    "source",
    "format",
    "row_number",
    "reason",
    "reading_count",
    "hours_with_data",
)

_configured = False


class ReadingContextFormatter(logging.Formatter):
    """Append ``key=value`` pairs for reading-source context passed via ``extra=``."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        context_keys: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.context_keys = tuple(context_keys or READING_CONTEXT_KEYS)

    def _context(self, record: logging.LogRecord) -> Iterator[str]:
        for key in self.context_keys:
            value = getattr(record, key, None)
            if value is not None:
                yield f"{key}={value}"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = " ".join(self._context(record))
        return f"{message} | {context}" if context else message


def configure_logging(level: Optional[str] = None) -> None:
    """Send diagnostics to stderr once per process; later calls are no-ops."""
    global _configured
    if _configured:
        return

    log_level = normalize_log_level(level) if level is not None else get_settings().log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "reading_context": {
                    "()": ReadingContextFormatter,
                    "fmt": "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "reading_context",
                }
            },
            "root": {"handlers": ["stderr"], "level": log_level},
        }
    )

    _configured = True
