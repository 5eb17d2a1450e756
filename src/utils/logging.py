"""
Structured Logging

Every log line is a JSON object with the same queryable fields:
ts, level, module, action, msg, plus whatever context the caller passes.

LOKI / JQ QUERIES
=================
# All errors
{project="organize-simple"} | json | level="ERROR"

# Failed operations (one line per failure, at the service boundary)
{project="organize-simple"} | json | module="json_service" action=~".*_failed"

# Refine runs and how many model calls they made
{project="organize-simple"} | json | module="llm.refinement" action="refine_done"

# Outputs that failed structured validation
{project="organize-simple"} | json | action=~".*_invalid_output"

USAGE
=====
from src.utils.logging import log, get_logger, configure_logging

MODULE = "json_service"
logger = get_logger()

log.info(logger, MODULE, "extract_start", "Extracting with schema",
         model="gpt-4", text_length=len(text))

log.error(logger, MODULE, "extract_failed", "Extraction failed",
          error=str(e), error_type=type(e).__name__)

ACTION NAMING
=============
  *_start     — beginning of an operation
  *_done      — successful completion
  *_failed    — error/failure
  *_skipped   — intentionally skipped
  *_rejected  — request refused (auth, validation)

Never pass API keys as context fields. String fields longer than
MAX_FIELD_LENGTH (prompts, raw model output) are cut, with the original
length appended.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

PROJECT = "organize-simple"
MAX_FIELD_LENGTH = 500


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _clip(value):
    if isinstance(value, str) and len(value) > MAX_FIELD_LENGTH:
        return f"{value[:MAX_FIELD_LENGTH]}... ({len(value)} chars)"
    return value


class StructuredFormatter(logging.Formatter):
    """JSON formatter. Third-party records are wrapped as module="lib"."""

    def __init__(self, pretty: bool = False):
        super().__init__()
        self.pretty = pretty

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()

        if getattr(record, "_structured", False):
            data = {
                "ts": _timestamp(),
                "level": record.levelname,
                "module": record._module,
                "action": record._action,
                "msg": msg,
            }
            for key, value in record._extra.items():
                if value is not None:
                    data[key] = value
        else:
            data = {
                "ts": _timestamp(),
                "level": record.levelname,
                "module": "lib",
                "action": record.name,
                "msg": msg,
            }

        if record.exc_info:
            data["traceback"] = self.formatException(record.exc_info)

        if self.pretty:
            return self._pretty(data)
        return json.dumps(data, default=str, separators=(",", ":"))

    def _pretty(self, data: dict) -> str:
        """Human-readable format for development."""
        ts = data["ts"][11:23]
        lvl = data["level"][0]
        mod = data["module"].upper()[:14].ljust(14)

        skip = {"ts", "level", "module", "action", "msg", "traceback"}
        ctx = " ".join(f"{k}={v}" for k, v in data.items() if k not in skip)

        line = f"{ts} {lvl} [{mod}] {data['action']}: {data['msg']}"
        if ctx:
            line += f" | {ctx}"
        if "traceback" in data:
            line += "\n" + data["traceback"]
        return line


class StructuredLogger:
    """
    Centralized structured logging.

    All methods take a stdlib logger, a module name, an action name, a
    message, and arbitrary context fields. None-valued fields are dropped.
    """

    def _log(
        self,
        logger: logging.Logger,
        level: int,
        module: str,
        action: str,
        msg: str,
        **kwargs,
    ) -> None:
        extra = {
            "_structured": True,
            "_module": module,
            "_action": action,
            "_extra": {k: _clip(v) for k, v in kwargs.items() if v is not None},
        }
        logger.log(level, msg, extra=extra)

    def info(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.INFO, module, action, msg, **kwargs)

    def warning(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.WARNING, module, action, msg, **kwargs)

    def error(
        self,
        logger: logging.Logger,
        module: str,
        action: str,
        msg: str,
        error: Optional[str] = None,
        error_type: Optional[str] = None,
        **kwargs,
    ) -> None:
        self._log(
            logger, logging.ERROR, module, action, msg,
            error=error, error_type=error_type, **kwargs,
        )

    def debug(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.DEBUG, module, action, msg, **kwargs)


# Singleton instance — import this everywhere
log = StructuredLogger()

_app_logger: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    """Get the application logger."""
    global _app_logger
    if _app_logger is None:
        _app_logger = logging.getLogger(PROJECT)
    return _app_logger


def configure_logging() -> None:
    """Configure root logger with structured formatter. Call once at startup.

    Reads from environment:
      LOG_FORMAT: "json" (default) or "pretty" (for development)
      LOG_LEVEL: "INFO" (default), "DEBUG", "WARNING", "ERROR"
    """
    pretty = os.environ.get("LOG_FORMAT", "json") == "pretty"
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(pretty=pretty))

    logging.basicConfig(level=level, handlers=[handler], force=True)

    # LangChain and the OpenAI SDK log every request at DEBUG
    for name in ("langchain", "langchain_core", "langchain_openai",
                 "langchain_text_splitters", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)

    for name in ("httpx", "httpcore", "sqlalchemy", "asyncio", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
