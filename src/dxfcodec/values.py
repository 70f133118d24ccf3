from __future__ import annotations

import math
from enum import Enum
from typing import Any

from .errors import ParseError


class ValueKind(Enum):
    STRING = "string"
    HANDLE = "handle"
    DOUBLE = "double"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    BOOL = "bool"
    BINARY = "binary"


# (first code, last code, kind); the first matching range wins.
_CODE_RANGES: tuple[tuple[int, int, ValueKind], ...] = (
    (5, 5, ValueKind.HANDLE),
    (0, 9, ValueKind.STRING),
    (10, 59, ValueKind.DOUBLE),
    (60, 79, ValueKind.INT16),
    (90, 99, ValueKind.INT32),
    (105, 105, ValueKind.HANDLE),
    (100, 109, ValueKind.STRING),
    (110, 149, ValueKind.DOUBLE),
    (160, 169, ValueKind.INT64),
    (170, 179, ValueKind.INT16),
    (210, 239, ValueKind.DOUBLE),
    (270, 279, ValueKind.INT16),
    (280, 289, ValueKind.INT8),
    (290, 299, ValueKind.BOOL),
    (300, 309, ValueKind.STRING),
    (310, 319, ValueKind.BINARY),
    (320, 369, ValueKind.HANDLE),
    (370, 389, ValueKind.INT16),
    (390, 399, ValueKind.HANDLE),
    (400, 409, ValueKind.INT16),
    (410, 419, ValueKind.STRING),
    (420, 429, ValueKind.INT32),
    (430, 439, ValueKind.STRING),
    (440, 459, ValueKind.INT32),
    (460, 469, ValueKind.DOUBLE),
    (470, 479, ValueKind.STRING),
    (480, 481, ValueKind.HANDLE),
    (999, 999, ValueKind.STRING),
    (1004, 1004, ValueKind.BINARY),
    (1005, 1005, ValueKind.HANDLE),
    (1000, 1009, ValueKind.STRING),
    (1010, 1059, ValueKind.DOUBLE),
    (1060, 1070, ValueKind.INT16),
    (1071, 1071, ValueKind.INT32),
)

_INT_LIMITS = {
    ValueKind.INT8: (-(1 << 7), (1 << 8) - 1),
    ValueKind.INT16: (-(1 << 15), (1 << 16) - 1),
    ValueKind.INT32: (-(1 << 31), (1 << 32) - 1),
    ValueKind.INT64: (-(1 << 63), (1 << 64) - 1),
}

# Primary text, additional text and arbitrary text strings; their trailing
# blanks are content.
VERBATIM_CODES = frozenset({1, 3, *range(300, 310)})


def value_kind(code: int) -> ValueKind:
    for first, last, kind in _CODE_RANGES:
        if first <= code <= last:
            return kind
    return ValueKind.STRING


def is_valid_code(code: int) -> bool:
    return 0 <= code <= 1071


def parse_string(text: str, code: int = 1, line: int | None = None) -> str:
    return text


def parse_int(text: str, code: int = 70, line: int | None = None) -> int:
    try:
        value = int(text.strip())
    except ValueError:
        raise ParseError(code, line, text, "integer expected") from None
    limits = _INT_LIMITS.get(value_kind(code))
    if limits is not None and not limits[0] <= value <= limits[1]:
        raise ParseError(code, line, text, "integer out of range for group code")
    return value


def parse_double(text: str, code: int = 10, line: int | None = None) -> float:
    try:
        value = float(text.strip())
    except ValueError:
        raise ParseError(code, line, text, "floating point number expected") from None
    if not math.isfinite(value):
        raise ParseError(code, line, text, "finite floating point number expected")
    return value


def parse_bool(text: str, code: int = 290, line: int | None = None) -> bool:
    value = parse_int(text, code, line)
    if value not in (0, 1):
        raise ParseError(code, line, text, "boolean 0 or 1 expected")
    return bool(value)


def parse_hex(text: str, code: int = 5, line: int | None = None) -> int:
    try:
        value = int(text.strip(), 16)
    except ValueError:
        raise ParseError(code, line, text, "hexadecimal handle expected") from None
    if value < 0:
        raise ParseError(code, line, text, "negative handle")
    return value


def parse_binary(text: str, code: int = 310, line: int | None = None) -> str:
    chunk = text.strip()
    if len(chunk) % 2:
        raise ParseError(code, line, text, "odd number of hex digits in binary chunk")
    try:
        bytes.fromhex(chunk)
    except ValueError:
        raise ParseError(code, line, text, "binary chunk must be hex encoded") from None
    return chunk


def parse_value(code: int, text: str, line: int | None = None) -> Any:
    """Convert the raw text of a tag into the python value of its group code.

    Handle references stay strings (they are preserved literally); only the
    entity handle on code 5 is turned into an integer.
    """
    kind = value_kind(code)
    if code == 5:
        return parse_hex(text, code, line)
    if kind is ValueKind.DOUBLE:
        return parse_double(text, code, line)
    if kind in _INT_LIMITS:
        return parse_int(text, code, line)
    if kind is ValueKind.BOOL:
        return parse_bool(text, code, line)
    if kind is ValueKind.BINARY:
        return parse_binary(text, code, line)
    if kind is ValueKind.HANDLE:
        return text.strip()
    return text


def format_double(value: float) -> str:
    text = "%f" % value
    # %f keeps six fractional digits; tiny tolerances would collapse to zero.
    if value != 0.0 and float(text) == 0.0:
        return repr(float(value))
    return text


def format_int(value: int) -> str:
    return "%d" % int(value)


def format_handle(value: int | str) -> str:
    if isinstance(value, int):
        return "%x" % value
    return str(value)


def format_bool(value: bool | int) -> str:
    return "1" if value else "0"


def format_value(code: int, value: Any) -> str:
    kind = value_kind(code)
    if kind is ValueKind.DOUBLE:
        return format_double(value)
    if kind is ValueKind.HANDLE:
        return format_handle(value)
    if kind is ValueKind.BOOL:
        return format_bool(value)
    if kind in _INT_LIMITS:
        return format_int(value)
    return "" if value is None else str(value)
