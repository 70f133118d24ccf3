from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import TextIO

_LABELS = {
    "error": "Error",
    "warning": "Warning",
    "info": "Info",
    "trace": "Trace",
}


@dataclass(frozen=True)
class Diagnostic:
    level: str
    operation: str
    detail: str
    filename: str | None = None
    line: int | None = None

    def format(self) -> str:
        text = f"{_LABELS.get(self.level, self.level)} in {self.operation}(): {self.detail}"
        if self.filename is not None and self.line is not None:
            return f"{text} [{self.filename}:{self.line}]"
        if self.filename is not None:
            return f"{text} [{self.filename}]"
        return text


class Diagnostics:
    """Sink for codec diagnostics.

    Subclasses only implement :meth:`emit`; the level helpers build the
    :class:`Diagnostic` record.
    """

    def emit(self, diagnostic: Diagnostic) -> None:
        raise NotImplementedError

    def error(self, operation: str, detail: str, *, filename: str | None = None, line: int | None = None) -> None:
        self.emit(Diagnostic("error", operation, detail, filename, line))

    def warn(self, operation: str, detail: str, *, filename: str | None = None, line: int | None = None) -> None:
        self.emit(Diagnostic("warning", operation, detail, filename, line))

    def info(self, operation: str, detail: str, *, filename: str | None = None, line: int | None = None) -> None:
        self.emit(Diagnostic("info", operation, detail, filename, line))

    def trace(self, operation: str, detail: str) -> None:
        self.emit(Diagnostic("trace", operation, detail))


class StderrDiagnostics(Diagnostics):
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def emit(self, diagnostic: Diagnostic) -> None:
        print(diagnostic.format(), file=self._stream or sys.stderr)


class LoggingDiagnostics(Diagnostics):
    _LEVELS = {
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "trace": logging.DEBUG,
    }

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("dxfcodec")

    def emit(self, diagnostic: Diagnostic) -> None:
        self.logger.log(self._LEVELS.get(diagnostic.level, logging.INFO), diagnostic.format())


class CollectingDiagnostics(Diagnostics):
    def __init__(self) -> None:
        self.records: list[Diagnostic] = []

    def emit(self, diagnostic: Diagnostic) -> None:
        self.records.append(diagnostic)

    def of_level(self, level: str) -> list[Diagnostic]:
        return [record for record in self.records if record.level == level]

    @property
    def warnings(self) -> list[Diagnostic]:
        return self.of_level("warning")

    @property
    def errors(self) -> list[Diagnostic]:
        return self.of_level("error")

    def messages(self, level: str | None = None) -> list[str]:
        return [
            record.format()
            for record in self.records
            if level is None or record.level == level
        ]

    def clear(self) -> None:
        self.records.clear()
