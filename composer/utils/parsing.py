"""Parsing helpers for engine output.

Local models asked for structured output usually return clean JSON, but
smaller models still wrap it in Markdown fences or emit Python-style dicts.
"""

import ast
import json
import math
import re
from typing import Any, Dict, Optional


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Extract a JSON object from text that may contain formatting noise.

    Handles:
    - Markdown code blocks (```json ... ```)
    - Extra text before/after the object
    - Single-quoted keys and values (Python dict syntax)

    Args:
        text: Raw engine output.

    Returns:
        The parsed object, or None if no object could be recovered.
    """
    if not text or not text.strip():
        return None

    text = re.sub(r'```json\s*', '', text, flags=re.IGNORECASE)
    text = re.sub(r'```\s*', '', text)

    match = re.search(r'(\{.*\})', text, re.DOTALL)
    if not match:
        return None
    json_str = match.group(1)

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError:
        parsed = None

    if parsed is None:
        try:
            parsed = ast.literal_eval(json_str)
        except (ValueError, SyntaxError):
            parsed = None

    if parsed is None:
        # 'key': value -> "key": value
        fixed_json = re.sub(r"'(\w+)'\s*:", r'"\1":', json_str)
        try:
            parsed = json.loads(fixed_json)
        except json.JSONDecodeError:
            return None

    if not isinstance(parsed, dict):
        return None
    return parsed


def coerce_int(value: Any) -> Optional[int]:
    """Best-effort conversion of an engine-supplied number to int.

    Accepts ints, floats (rounded) and numeric strings ("7", "7.5").
    Booleans are rejected since they are ints in Python.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(round(value)) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return int(round(number)) if math.isfinite(number) else None
    return None
