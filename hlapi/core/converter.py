"""Type tag conversion for declared arguments and typed Hyperlambda values.

Endpoint declarations associate every accepted argument with a type tag such
as ``int`` or ``date``. This module turns raw values (typically query string
text or already typed JSON values) into the Python object the tag denotes,
and renders Python objects back into their textual Hyperlambda form.
"""

import base64
import binascii
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Tuple

from hlapi.exceptions import ArgumentConversionError

# Tags that switch conversion off entirely.
PASSTHROUGH_TYPES = frozenset({"*", "x"})

_INTEGER_RANGES: Dict[str, Tuple[int, int]] = {
    "byte": (0, 2**8 - 1),
    "sbyte": (-(2**7), 2**7 - 1),
    "short": (-(2**15), 2**15 - 1),
    "ushort": (0, 2**16 - 1),
    "int": (-(2**31), 2**31 - 1),
    "uint": (0, 2**32 - 1),
    "long": (-(2**63), 2**63 - 1),
    "ulong": (0, 2**64 - 1),
}


def _to_integer(value: Any, type_tag: str) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not an integer")
    if isinstance(value, str):
        result = int(value.strip())
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} has a fractional part")
        result = int(value)
    elif isinstance(value, (int, Decimal)):
        result = int(value)
        if result != value:
            raise ValueError(f"{value} has a fractional part")
    else:
        raise ValueError(f"cannot convert {type(value).__name__}")
    low, high = _INTEGER_RANGES[type_tag]
    if not low <= result <= high:
        raise ValueError(f"{result} is out of range for {type_tag}")
    return result


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValueError(f"{value!r} is not a boolean")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return float(value)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(str(e)) from e


def _to_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"cannot convert {type(value).__name__} to date")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    result = datetime.fromisoformat(text)
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def _to_time(value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(milliseconds=value)
    if isinstance(value, str):
        text = value.strip()
        if ":" not in text:
            return timedelta(milliseconds=int(text))
        parts = [float(part) for part in text.split(":")]
        if len(parts) != 3:
            raise ValueError(f"'{value}' is not formatted as hh:mm:ss")
        return timedelta(hours=parts[0], minutes=parts[1], seconds=parts[2])
    raise ValueError(f"cannot convert {type(value).__name__} to time")


def _to_guid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value).strip())


def _to_char(value: Any) -> str:
    text = str(value)
    if len(text) != 1:
        raise ValueError(f"'{text}' is not a single character")
    return text


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError(str(e)) from e
    raise ValueError(f"cannot convert {type(value).__name__} to bytes")


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    return to_text(value)


_CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    "string": _to_string,
    "bool": _to_bool,
    "double": _to_float,
    "float": _to_float,
    "decimal": _to_decimal,
    "date": _to_date,
    "time": _to_time,
    "guid": _to_guid,
    "char": _to_char,
    "bytes": _to_bytes,
}


def is_known_type(type_tag: str) -> bool:
    """Check whether a type tag belongs to the supported vocabulary."""
    return (
        type_tag in _CONVERTERS
        or type_tag in _INTEGER_RANGES
        or type_tag in PASSTHROUGH_TYPES
    )


def convert(value: Any, type_tag: Optional[str]) -> Any:
    """Convert a value to the type denoted by a type tag.

    Args:
        value: Raw value, usually a string from the query string or a JSON scalar
        type_tag: Declared type tag; None or a pass-through tag returns the value as is

    Returns:
        Converted value

    Raises:
        ArgumentConversionError: If the tag is unknown or the value cannot be converted
    """
    if type_tag is None or type_tag in PASSTHROUGH_TYPES or value is None:
        return value
    try:
        if type_tag in _INTEGER_RANGES:
            return _to_integer(value, type_tag)
        converter = _CONVERTERS.get(type_tag)
        if converter is None:
            raise ArgumentConversionError(
                f"Unknown type declaration '{type_tag}'",
                details={"type": type_tag},
            )
        return converter(value)
    except (ValueError, TypeError, OverflowError) as e:
        raise ArgumentConversionError(
            f"Cannot convert '{value}' to '{type_tag}': {e}",
            details={"type": type_tag, "value": str(value)},
        ) from e


def type_name(value: Any) -> str:
    """Return the type tag that round-trips the given value."""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "long" if not -(2**31) <= value < 2**31 else "int"
    if isinstance(value, float):
        return "double"
    if isinstance(value, Decimal):
        return "decimal"
    if isinstance(value, datetime):
        return "date"
    if isinstance(value, timedelta):
        return "time"
    if isinstance(value, uuid.UUID):
        return "guid"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    return "string"


def to_text(value: Any) -> str:
    """Render a value in its textual Hyperlambda form."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        text = value.isoformat()
        return text[:-6] + "Z" if text.endswith("+00:00") else text
    if isinstance(value, timedelta):
        return str(int(value.total_seconds() * 1000))
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return str(value)


__all__ = [
    "PASSTHROUGH_TYPES",
    "convert",
    "is_known_type",
    "to_text",
    "type_name",
]
