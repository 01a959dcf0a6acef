"""
Syntactic type inference for attribute values.

Rules are checked in order and the first match wins. No locale handling:
"1,5" is a string, not a float. Digits are ASCII 0-9 only.
"""

import re
from typing import Optional

from xmlgraph.shared.models import DataType

_INTEGER_RE = re.compile(r"^[0-9]+$")
_FLOAT_RE = re.compile(r"^[0-9]+\.[0-9]+$")
_BOOLEAN_RE = re.compile(r"^(true|false)$", re.IGNORECASE)
# Prefix match: "2023-01-15T10:00:00Z" and "14:30:00.123" both count.
_DATETIME_RE = re.compile(
    r"^([0-9]{4}-[0-9]{2}-[0-9]{2}|[0-9]{2}:[0-9]{2}:[0-9]{2})"
)


def infer_type(value: Optional[str]) -> DataType:
    """
    Classify a raw attribute value.

    Examples:
        "42" -> integer, "3.14" -> float, "FALSE" -> boolean,
        "2023-01-15" -> datetime, "14:30:00" -> datetime, "" -> string
    """
    if not value:
        return DataType.STRING
    if _INTEGER_RE.match(value):
        return DataType.INTEGER
    if _FLOAT_RE.match(value):
        return DataType.FLOAT
    if _BOOLEAN_RE.match(value):
        return DataType.BOOLEAN
    if _DATETIME_RE.match(value):
        return DataType.DATETIME
    return DataType.STRING
