from __future__ import annotations

from typing import Any


class DxfError(Exception):
    """Base class of every error raised by dxfcodec."""


class NullArgError(DxfError, TypeError):
    pass


class RangeError(DxfError, ValueError):
    def __init__(self, field: str, value: Any, low: int, high: int) -> None:
        super().__init__(f"{field}={value!r} is outside the range {low}..{high}")
        self.field = field
        self.value = value
        self.low = low
        self.high = high


class ValidationError(DxfError, ValueError):
    pass


class ParseError(DxfError, ValueError):
    def __init__(self, code: int | None, line: int | None, text: str, reason: str = "") -> None:
        message = f"cannot parse {text!r} for group code {code}"
        if line is not None:
            message = f"{message} in line {line}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.code = code
        self.line = line
        self.text = text


class DxfIOError(DxfError, OSError):
    pass


class ReadError(DxfIOError):
    def __init__(self, message: str, *, filename: str | None = None, line: int | None = None) -> None:
        if filename is not None:
            message = f"{message} (file: {filename}, line: {line})"
        super().__init__(message)
        self.message = message
        self.filename = filename
        self.line = line

    def __str__(self) -> str:
        # OSError formats itself as errno text once filename is set
        return self.message


class WriteError(DxfIOError):
    pass
