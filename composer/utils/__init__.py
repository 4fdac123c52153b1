"""Shared utilities: structured logging and engine output parsing."""

from .logging import get_logger, setup_logging, set_request_id, get_request_id
from .parsing import extract_json_object, coerce_int

__all__ = [
    "get_logger",
    "setup_logging",
    "set_request_id",
    "get_request_id",
    "extract_json_object",
    "coerce_int",
]
