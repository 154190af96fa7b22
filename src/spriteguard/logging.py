"""Logging configuration for SpriteGuard.

Provides a setup function, a module-level logger factory and the forge
audit trail.  Uses Python's built-in logging module only.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "spriteguard"
AUDIT_LOGGER = f"{ROOT_LOGGER}.audit"

DEFAULT_FORMAT = "%(levelname)-5s | %(name)-22s | %(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)-22s | %(message)s"

# Directive excerpts in the audit trail are truncated to this many characters.
AUDIT_DIRECTIVE_CHARS = 30

_SETUP_LOCK = threading.Lock()


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter for machine-readable aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        forge = getattr(record, "forge", None)
        if forge:
            payload["forge"] = forge
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _stderr_handler(logger: logging.Logger) -> logging.StreamHandler:
    """Return the single stderr handler on *logger*, creating it if needed."""
    existing = [
        h
        for h in logger.handlers
        if isinstance(h, logging.StreamHandler)
        and not isinstance(h, logging.FileHandler)
        and getattr(h, "stream", None) is sys.stderr
    ]
    for extra in existing[1:]:
        logger.removeHandler(extra)
    if existing:
        return existing[0]
    handler = logging.StreamHandler(sys.stderr)
    logger.addHandler(handler)
    return handler


def _file_handler(logger: logging.Logger, log_file: str) -> logging.FileHandler:
    """Return the file handler writing to *log_file*, creating it if needed."""
    target = os.path.abspath(str(log_file))
    for h in logger.handlers:
        if (
            isinstance(h, logging.FileHandler)
            and getattr(h, "baseFilename", None) == target
        ):
            return h
    handler = logging.FileHandler(log_file)
    logger.addHandler(handler)
    return handler


def setup_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    log_file: str | None = None,
    json_logs: bool = False,
) -> None:
    """Configure logging for the spriteguard package.

    Handlers are attached to the ``spriteguard`` logger.  Repeated calls
    reuse existing handlers instead of stacking duplicates.

    Args:
        level: Logging level (default: INFO).
        verbose: If True, include timestamps in console output.
        log_file: Optional file path to write logs to (in addition to stderr).
        json_logs: Emit structured JSON log lines when True.
    """
    with _SETUP_LOCK:
        logger = logging.getLogger(ROOT_LOGGER)
        logger.setLevel(level)

        console = _stderr_handler(logger)
        if json_logs:
            console.setFormatter(JsonFormatter())
        else:
            console.setFormatter(
                logging.Formatter(VERBOSE_FORMAT if verbose else DEFAULT_FORMAT)
            )

        if log_file:
            file_handler = _file_handler(logger, log_file)
            file_handler.setFormatter(
                JsonFormatter() if json_logs else logging.Formatter(VERBOSE_FORMAT)
            )


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a SpriteGuard module.

    Args:
        name: Module name (e.g., ``"pipeline"``, ``"validation"``).

    Returns:
        A logger instance under the ``spriteguard`` namespace.
    """
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_forge_event(requester: str, directive: str, status: str) -> None:
    """Write one forge outcome to the audit logger.

    Args:
        requester: Identifier of whoever requested the forge.
        directive: Full directive text; only a short excerpt is logged.
        status: ``"SUCCESS"`` or ``"FAILURE"``.
    """
    excerpt = " ".join(directive.split())[:AUDIT_DIRECTIVE_CHARS]
    logging.getLogger(AUDIT_LOGGER).info(
        "[FORGE_AUDIT] requester=%s | directive=%s... | status=%s",
        requester,
        excerpt,
        status,
        extra={"forge": {"requester": requester, "status": status}},
    )
