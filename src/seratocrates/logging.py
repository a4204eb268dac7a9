"""Structured logging configuration for seratocrates.

Sets up up to three log streams:

- stderr — human-readable, only when ``console`` is requested
- ``seratocrates.log`` — human-readable, all log events
- ``skipped.log`` — JSON-formatted, only events about data left out of the
  assembled library (unknown tags, unresolved track references, orphaned,
  unnamed or duplicate crates, unreadable crate files)

Both files rotate at 10 MB with 5 backup files.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog

_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
_BACKUP_COUNT = 5

# Events that record something being left out of the assembled library.
SKIP_EVENTS = frozenset(
    {
        "unknown_tag",
        "unresolved_tracks",
        "crate_orphaned",
        "crate_unnamed",
        "duplicate_crate",
        "crate_skipped",
        "subcrates_dir_missing",
    }
)

# Shared structlog pre-processors (used for both structlog-originated
# events and stdlib-originated "foreign" events).
_shared_processors: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


class _SkipEventFilter(logging.Filter):
    """Pass only structlog events named in ``SKIP_EVENTS``."""

    def filter(self, record: logging.LogRecord) -> bool:
        return isinstance(record.msg, dict) and record.msg.get("event") in SKIP_EVENTS


def setup_logging(log_level: str = "warning", log_dir: Path | None = None, *, console: bool = False) -> None:
    """Configure structlog and stdlib logging.

    Parameters
    ----------
    log_level:
        Python log-level name (``debug``, ``info``, ``warning``, etc.).
    log_dir:
        Directory for log files.  When *None* no file handlers are created.
    console:
        Also log human-readable events to stderr.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            *_shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    human_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=_shared_processors,
    )
    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=_shared_processors,
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(human_formatter)
        root.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        main_handler = RotatingFileHandler(
            log_dir / "seratocrates.log",
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        main_handler.setFormatter(human_formatter)
        root.addHandler(main_handler)

        skipped_handler = RotatingFileHandler(
            log_dir / "skipped.log",
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        skipped_handler.setFormatter(json_formatter)
        skipped_handler.addFilter(_SkipEventFilter())
        root.addHandler(skipped_handler)

    def _excepthook(
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_tb: object,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)  # type: ignore[arg-type]
            return
        logging.getLogger("seratocrates").critical(
            "Unhandled exception",
            exc_info=(exc_type, exc_value, exc_tb),
        )

    sys.excepthook = _excepthook  # type: ignore[assignment]
