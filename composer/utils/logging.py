"""Structured logging for the composer orchestration layer."""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# One id per generate() call so every line of a request can be correlated
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID."""
    return _request_id.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set a new request ID, generating one if not provided."""
    if request_id is None:
        request_id = uuid.uuid4().hex[:8]
    _request_id.set(request_id)
    return request_id


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Request id plus any ``extra_data`` attached to the record."""
    context: Dict[str, Any] = {}
    request_id = get_request_id()
    if request_id:
        context["request_id"] = request_id
    context.update(getattr(record, "extra_data", None) or {})
    return context


class StructuredFormatter(logging.Formatter):
    """JSON lines, used for log files and --log-json."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_record_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Coloured single-line output for the terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        context = _record_context(record)
        request_id = context.pop("request_id", None)

        parts = [f"{self.LEVEL_COLORS.get(record.levelno, '')}{record.levelname:8}{self.RESET}"]
        if request_id:
            parts.append(f"[{request_id}]")
        parts.append(f"{record.name}: {record.getMessage()}")
        line = " ".join(parts)

        if context:
            line += " | " + ", ".join(f"{key}={value}" for key, value in context.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that accepts an ``extra_data`` mapping on every call."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra_data = {**self.extra, **kwargs.pop("extra_data", {})}

        extra = kwargs.get("extra", {})
        extra["extra_data"] = extra_data
        kwargs["extra"] = extra

        return msg, kwargs

    def with_context(self, **context) -> "ContextLogger":
        """Create a new logger with additional default context."""
        return ContextLogger(self.logger, {**self.extra, **context})


def parse_log_level(level: str) -> int:
    """Map a level name to its logging constant.

    Raises:
        ValueError: If the name is not one of LOG_LEVELS.
    """
    name = str(level).strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level!r}. Expected one of: {', '.join(LOG_LEVELS)}")
    return getattr(logging, name)


def get_logger(name: str) -> ContextLogger:
    """Get a structured logger for the given name."""
    return ContextLogger(logging.getLogger(name), {})


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """Configure the root logger.

    Args:
        level: Log level name, one of LOG_LEVELS.
        json_format: Emit JSON lines on the console instead of coloured text.
        log_file: Optional file that always receives JSON lines.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(parse_log_level(level))
    root_logger.handlers.clear()

    formatter = StructuredFormatter() if json_format else HumanFormatter()

    # stderr keeps the REPL's stdout clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)


def log_llm_call(
    logger: ContextLogger,
    provider: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
    duration_ms: int,
    success: bool = True,
    error: Optional[str] = None
) -> None:
    """Log one engine call with structured data."""
    extra = {
        "provider": provider,
        "model": model,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "duration_ms": duration_ms,
        "success": success,
    }
    if error:
        extra["error"] = error

    if success:
        logger.info(
            f"LLM call completed: {input_tokens}+{output_tokens} tokens in {duration_ms}ms",
            extra_data=extra
        )
    else:
        logger.error(f"LLM call failed: {error}", extra_data=extra)
