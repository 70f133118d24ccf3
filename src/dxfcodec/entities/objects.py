from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..config import CodecConfig, DxfVersion
from ..tags import Tag, TagWriter
from .base import DxfObject, Field, Marker, ReadContext, require


@dataclass(frozen=True)
class EntriesField(Field):
    """Dictionary entries: a ``3`` name followed by a ``350``/``360`` owner handle."""

    def codes(self) -> tuple[int, ...]:
        return (3, 350, 360)

    def write(self, writer: TagWriter, record: Any, config: CodecConfig) -> None:
        handle_code = 360 if record.hard_owner_flag else 350
        for name, handle in self.value_of(record):
            writer.write_tag(3, name)
            writer.write_tag(handle_code, handle)

    def read(self, record: Any, tag: Tag, ctx: ReadContext) -> None:
        entries = self.value_of(record)
        value = ctx.parse(tag)
        if tag.code == 3:
            entries.append((value, ""))
            return
        if not entries or entries[-1][1]:
            ctx.warn(f"dictionary handle {value} without an entry name")
            entries.append(("", value))
            return
        entries[-1] = (entries[-1][0], value)


@dataclass(kw_only=True)
class Dictionary(DxfObject):
    KIND: ClassVar[str] = "DICTIONARY"
    DXFTYPE: ClassVar[str] = "DICTIONARY"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbDictionary"),
        Field(280, "hard_owner_flag", since=DxfVersion.R2000, skip_default=True),
        Field(281, "duplicate_record_cloning", since=DxfVersion.R2000, skip_default=True),
        EntriesField(3, "entries"),
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        "hard_owner_flag": (0, 1),
        "duplicate_record_cloning": (0, 5),
    }

    hard_owner_flag: int = 0
    duplicate_record_cloning: int = 1
    entries: list[tuple[str, str]] = field(default_factory=list)

    def __getitem__(self, name: str) -> str:
        for key, handle in self.entries:
            if key == name:
                return handle
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self.entries)

    def add(self, name: str, handle: str) -> None:
        self.entries.append((name, handle))

    def validate_for_write(self, config: CodecConfig) -> None:
        for name, handle in self.entries:
            require(
                name != "" and handle != "",
                f"incomplete entry ({name!r}, {handle!r}) in the {self.KIND} object "
                f"with id-code: {self.id_code:x}",
            )


@dataclass(kw_only=True)
class ObjectPtr(DxfObject):
    """Application data holder; its payload lives entirely in the extended data."""

    KIND: ClassVar[str] = "OBJECT_PTR"
    DXFTYPE: ClassVar[str] = "OBJECT_PTR"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R14
