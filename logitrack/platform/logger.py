"""
Name: Structured Logger Configuration

Responsibilities:
  - Configure JSON-structured logging
  - Automatically include request context (request_id, path, method)
  - Include stack traces for exceptions

Collaborators:
  - context.py: request-scoped context vars
  - Python logging module (stdlib)

Constraints:
  - JSON format for log aggregation compatibility
  - Never log secrets (API keys, passwords, tokens)

Notes:
  - Import as: from logitrack.platform.logger import logger
"""

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any


class JSONFormatter(logging.Formatter):
    """
    R: Format logs as JSON with automatic context enrichment.

    Includes timestamp, level, message, logger/module/function/line,
    request context, extra fields from the log call and exception info.
    """

    # R: Fields that should never be logged (security)
    SENSITIVE_KEYS = {
        "password",
        "password_hash",
        "api_key",
        "key",
        "secret",
        "token",
        "authorization",
        "jwt_secret",
    }

    INTERNAL_KEYS = {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "taskName", "message",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        from .context import get_context_dict

        log_obj.update(get_context_dict())

        for key, value in record.__dict__.items():
            if key in self.INTERNAL_KEYS:
                continue
            if key.lower() in self.SENSITIVE_KEYS:
                log_obj[key] = "***REDACTED***"
            else:
                log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_obj, default=str)


def setup_logger(name: str = "logitrack") -> logging.Logger:
    """
    R: Configure and return structured logger.

    Level comes from LOG_LEVEL (default INFO).
    """
    log = logging.getLogger(name)
    log.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    # R: Avoid duplicate handlers on reimport
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        log.addHandler(handler)

    return log


# R: Global logger instance
logger = setup_logger()
