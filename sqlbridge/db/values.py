"""Portable value model shared by every adapter.

Every cell read from an engine is converted into a :class:`Value`, a small
tagged union that survives serialisation to any caller regardless of which
engine produced it. Types without a direct mapping (decimals, UUIDs, dates,
timestamps, intervals) are carried as canonical text so no precision is lost.
"""

import json
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

JSON_TYPES = ("json", "jsonb")


class ValueKind(str, Enum):
    """Tag of a portable value."""
    NULL = "null"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TEXT = "text"
    JSON = "json"


@dataclass(frozen=True)
class Value:
    """A single database cell, independent of the engine that produced it."""

    kind: ValueKind
    data: Any = None

    @classmethod
    def null(cls) -> "Value":
        return cls(ValueKind.NULL)

    @classmethod
    def integer(cls, value: int) -> "Value":
        if not INT64_MIN <= value <= INT64_MAX:
            raise OverflowError(f"{value} does not fit in a signed 64-bit integer")
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def float_(cls, value: float) -> "Value":
        return cls(ValueKind.FLOAT, float(value))

    @classmethod
    def boolean(cls, value: bool) -> "Value":
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def text(cls, value: str) -> "Value":
        return cls(ValueKind.TEXT, str(value))

    @classmethod
    def json(cls, value: Any) -> "Value":
        return cls(ValueKind.JSON, value)

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def to_python(self) -> Any:
        """Return the plain Python payload (None for Null)."""
        return self.data

    def to_json(self) -> Any:
        """Return a JSON-serialisable payload; non-finite floats become None."""
        if self.kind is ValueKind.FLOAT and not math.isfinite(self.data):
            return None
        return self.data

    @classmethod
    def from_python(cls, obj: Any) -> "Value":
        """Classify a driver-native Python object.

        Raises:
            ValueError: If the object cannot be represented (for instance
                bytes that are not valid UTF-8).
        """
        if obj is None:
            return cls.null()
        if isinstance(obj, Value):
            return obj
        # bool before int: bool is an int subclass
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            if INT64_MIN <= obj <= INT64_MAX:
                return cls.integer(obj)
            return cls.text(str(obj))
        if isinstance(obj, float):
            return cls.float_(obj)
        if isinstance(obj, str):
            return cls.text(obj)
        if isinstance(obj, Decimal):
            return cls.text(str(obj))
        if isinstance(obj, datetime):
            if obj.tzinfo is not None:
                return cls.text(obj.isoformat())
            return cls.text(obj.isoformat(sep=" "))
        if isinstance(obj, (date, time)):
            return cls.text(obj.isoformat())
        if isinstance(obj, timedelta):
            return cls.text(str(obj))
        if isinstance(obj, UUID):
            return cls.text(str(obj))
        if isinstance(obj, (dict, list, tuple)):
            return cls.json(list(obj) if isinstance(obj, tuple) else obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.text(bytes(obj).decode("utf-8"))
        return cls.text(str(obj))


def is_boolean_type(declared_type: Optional[str]) -> bool:
    """Heuristic boolean detection for engines without native booleans."""
    if not declared_type:
        return False
    lowered = declared_type.strip().lower()
    return "bool" in lowered or lowered == "tinyint(1)"


def coerce_value(raw: Any, declared_type: Optional[str] = None) -> Value:
    """Convert a raw driver value into a :class:`Value`.

    ``declared_type`` is the column type reported by the catalog. It only
    refines the classification: integers in boolean-typed columns become
    booleans and text in JSON columns is parsed. Coercion never fails the
    caller: a value that cannot be represented degrades to Null.
    """
    if raw is None:
        return Value.null()

    lowered = declared_type.strip().lower() if declared_type else ""

    try:
        if is_boolean_type(lowered) and isinstance(raw, (int, bytes)) and not isinstance(raw, bool):
            if isinstance(raw, bytes):
                raw = int.from_bytes(raw, "big")
            return Value.boolean(raw != 0)

        if lowered in JSON_TYPES and isinstance(raw, (str, bytes)):
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            try:
                return Value.json(json.loads(text))
            except ValueError:
                return Value.text(text)

        return Value.from_python(raw)
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Could not coerce {type(raw).__name__} value for type '{declared_type}': {e}")
        return Value.null()


def to_parameter(value: Any) -> Any:
    """Unwrap a caller-supplied value into something a driver can bind."""
    if isinstance(value, Value):
        value = value.to_python()
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value
