from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, TextIO

from .errors import DxfIOError, ReadError, WriteError
from .values import VERBATIM_CODES, format_value

DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class Tag:
    code: int
    value: str

    def is_marker(self, name: str | None = None) -> bool:
        return self.code == 0 and (name is None or self.value == name)

    @property
    def end_of_section(self) -> bool:
        return self.code == 0 and self.value == "ENDSEC"


class TagReader:
    """Reads ``(code, value)`` line pairs from a DXF text stream."""

    def __init__(self, stream: TextIO, *, filename: str = "<stream>", owns_stream: bool = False) -> None:
        self._stream = stream
        self._owns_stream = owns_stream
        self._pushed: list[Tag] = []
        self.filename = filename
        self.line_number = 0

    @classmethod
    def open(cls, path: str | Path, *, encoding: str = DEFAULT_ENCODING) -> "TagReader":
        try:
            stream = open(path, "r", encoding=encoding, errors="surrogateescape", newline=None)
        except OSError as exc:
            raise DxfIOError(f"cannot open {path} for reading: {exc}") from exc
        return cls(stream, filename=str(path), owns_stream=True)

    def _readline(self) -> str:
        try:
            return self._stream.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise ReadError(f"read failure: {exc}", filename=self.filename, line=self.line_number) from exc

    def next_pair(self) -> Tag | None:
        """Return the next tag, or ``None`` at the end of the stream."""
        if self._pushed:
            return self._pushed.pop()
        code_line = self._readline()
        if code_line == "":
            return None
        self.line_number += 1
        try:
            code = int(code_line.strip())
        except ValueError:
            raise ReadError(
                f"group code expected, found {code_line.strip()!r}",
                filename=self.filename,
                line=self.line_number,
            ) from None
        value_line = self._readline()
        if value_line == "":
            raise ReadError(
                f"missing value for group code {code}",
                filename=self.filename,
                line=self.line_number,
            )
        self.line_number += 1
        if code in VERBATIM_CODES:
            # text payloads keep their blanks verbatim
            value = value_line.rstrip("\r\n")
        else:
            value = value_line.rstrip()
        return Tag(code, value)

    def unread(self, tag: Tag) -> None:
        self._pushed.append(tag)

    def peek(self) -> Tag | None:
        tag = self.next_pair()
        if tag is not None:
            self.unread(tag)
        return tag

    def skip_to_marker(self) -> int:
        """Discard tags up to (not including) the next code ``0``; return the count skipped."""
        skipped = 0
        while True:
            tag = self.next_pair()
            if tag is None:
                return skipped
            if tag.code == 0:
                self.unread(tag)
                return skipped
            skipped += 1

    def __iter__(self) -> Iterator[Tag]:
        while True:
            tag = self.next_pair()
            if tag is None:
                return
            yield tag

    def close(self) -> None:
        if self._owns_stream:
            self._stream.close()

    def __enter__(self) -> "TagReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class TagWriter:
    """Writes the canonical two-line form of DXF tags."""

    def __init__(self, stream: TextIO, *, filename: str = "<stream>", owns_stream: bool = False) -> None:
        self._stream = stream
        self._owns_stream = owns_stream
        self.filename = filename
        self.last_id_code = 0

    @classmethod
    def open(cls, path: str | Path, *, encoding: str = DEFAULT_ENCODING) -> "TagWriter":
        try:
            out_path = Path(path)
            stream = open(out_path, "w", encoding=encoding, errors="surrogateescape", newline="\n")
        except OSError as exc:
            raise DxfIOError(f"cannot open {path} for writing: {exc}") from exc
        return cls(stream, filename=str(path), owns_stream=True)

    def write_pair(self, code: int, text: str) -> None:
        try:
            self._stream.write(f"{code:>3}\n{text}\n")
        except OSError as exc:
            raise WriteError(f"write failure on {self.filename}: {exc}") from exc

    def write_tag(self, code: int, value: Any) -> None:
        if code == 5 and isinstance(value, int):
            self.last_id_code = max(self.last_id_code, value)
        self.write_pair(code, format_value(code, value))

    def write_point(self, code: int, point: tuple[float, ...]) -> None:
        for axis, component in enumerate(point):
            self.write_tag(code + 10 * axis, component)

    def next_id_code(self) -> int:
        self.last_id_code += 1
        return self.last_id_code

    def close(self) -> None:
        if self._owns_stream:
            self._stream.close()

    def __enter__(self) -> "TagWriter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
