"""
Canonical text form of a compiled document.

Numbers are rounded to a fixed precision and integral floats are written
as integers, so [0.0, 8.0, 16.0] becomes [0, 8, 16]. Minified output uses
compact separators without indentation.

Indented output keeps small records on one line: number lists, face tags
and rotation descriptors, so an element reads as

    {
      "from": [0, 0, 0],
      "to": [16, 16, 16],
      "rotation": {"angle": 45, "axis": "y", "origin": [8, 8, 8]},
      "faces": {
        "north": {"uv": [0, 0, 16, 16], "texture": "#stone"}
      }
    }
"""

import json
from typing import Any, Optional

import numpy as np

INDENT = 2
INLINE_SEPARATORS = (", ", ": ")


def round_numbers(value: Any, decimal_precision: int = 5) -> Any:
    """Return a copy of value with every float rounded and normalized."""
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, np.ndarray):
        value = value.tolist()
    elif isinstance(value, np.generic):
        value = value.item()

    if isinstance(value, dict):
        return {k: round_numbers(v, decimal_precision) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [round_numbers(v, decimal_precision) for v in value]
    if isinstance(value, float):
        if not np.isfinite(value):
            return None
        rounded = round(value, decimal_precision)
        if rounded.is_integer():
            return int(rounded)
        return rounded
    return value


def _is_one_liner(key: str, value: Any, parent_key: Optional[str]) -> bool:
    if isinstance(value, list):
        return not any(isinstance(v, (dict, list)) for v in value)
    if isinstance(value, dict):
        return parent_key == "faces" or key == "rotation"
    return True


def _dump(value: Any, level: int, parent_key: Optional[str] = None) -> str:
    pad = " " * (INDENT * (level + 1))
    close = " " * (INDENT * level)

    if isinstance(value, list):
        if _is_one_liner("", value, parent_key):
            return json.dumps(value, separators=INLINE_SEPARATORS)
        lines = [pad + _dump(v, level + 1) for v in value]
        return "[\n" + ",\n".join(lines) + "\n" + close + "]"

    if isinstance(value, dict):
        if not value:
            return "{}"
        lines = []
        for key, child in value.items():
            if isinstance(child, (dict, list)) and not _is_one_liner(key, child, parent_key):
                text = _dump(child, level + 1, key)
            else:
                text = json.dumps(child, separators=INLINE_SEPARATORS)
            lines.append(f"{pad}{json.dumps(key)}: {text}")
        return "{\n" + ",\n".join(lines) + "\n" + close + "}"

    return json.dumps(value)


def serialize_document(
    document: Any,
    minify: bool = False,
    decimal_precision: int = 5
) -> str:
    """
    Serialize a document to JSON text.

    Args:
        document: Compiled document
        minify: Compact output without whitespace
        decimal_precision: Decimal places kept on floats

    Returns:
        JSON text
    """
    data = round_numbers(document, decimal_precision)
    if minify:
        return json.dumps(data, separators=(",", ":"))
    return _dump(data, 0)
