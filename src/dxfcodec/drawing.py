from __future__ import annotations

import fnmatch
import re
from collections import Counter
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from .config import CodecConfig, DxfVersion
from .diagnostics import Diagnostics, StderrDiagnostics
from .entities import DxfRecord, class_for_name, read_record, write_record
from .errors import ReadError, ValidationError
from .tags import TagReader, TagWriter

SKIPPED_SECTIONS = {"CLASSES", "TABLES", "BLOCKS", "THUMBNAILIMAGE", "ACDSDATA"}
END_OF_FILE_MARKERS = {"EOF", "ENDFILE"}

TYPE_ALIASES = {
    "MULTILEADER": "MLEADER",
    "LINE3D": "3DLINE",
    "FACE3D": "3DFACE",
    "SOLID3D": "3DSOLID",
}


class EntityList:
    """Ordered collection that owns its records; replaces per-entity ``next`` links."""

    def __init__(self, kind: str | None = None) -> None:
        self.kind = kind
        self._items: list[DxfRecord] = []

    def append(self, record: DxfRecord) -> DxfRecord:
        if self.kind is not None and record.KIND != self.kind:
            raise TypeError(f"cannot append a {record.KIND} record to a {self.kind} list")
        if any(item is record for item in self._items):
            raise ValueError(f"{record.KIND} record is already in this list")
        self._items.append(record)
        return record

    def extend(self, records: Iterable[DxfRecord]) -> None:
        for record in records:
            self.append(record)

    def remove(self, record: DxfRecord) -> None:
        for index, item in enumerate(self._items):
            if item is record:
                del self._items[index]
                return
        raise ValueError(f"{record.KIND} record is not in this list")

    def clear(self) -> int:
        count = len(self._items)
        self._items.clear()
        return count

    def __iter__(self) -> Iterator[DxfRecord]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> DxfRecord:
        return self._items[index]

    def __repr__(self) -> str:
        label = self.kind or "*"
        return f"EntityList({label!r}, {len(self._items)} records)"


def free_list(records: EntityList | None, diagnostics: Diagnostics | None = None) -> int:
    """Release every record of ``records`` and return how many there were."""
    sink = diagnostics or StderrDiagnostics()
    if records is None:
        sink.warn("free_list", "no list was given")
        return 0
    if len(records) == 0:
        sink.warn("free_list", f"the {records.kind or 'entity'} list is empty")
        return 0
    return records.clear()


def read_entity_by_name(reader: TagReader, name: str, config: CodecConfig) -> DxfRecord | None:
    """Read the record announced by ``0 <name>``; unknown names are skipped up to the next ``0``."""
    cls = class_for_name(name)
    if cls is None:
        skipped = reader.skip_to_marker()
        config.diagnostics.warn(
            "read_entity",
            f"unsupported entity {name!r}; skipped {skipped} tags",
            filename=reader.filename,
            line=reader.line_number,
        )
        return None
    return read_record(reader, cls(), config)


def _normalize_types(types: str | Iterable[str] | None) -> list[str] | None:
    if types is None:
        return None
    if isinstance(types, str):
        tokens = re.split(r"[,\s]+", types.strip())
    else:
        tokens = list(types)
    normalized = [token.strip().upper() for token in tokens if token and token.strip()]
    normalized = [TYPE_ALIASES.get(token, token) for token in normalized]
    if not normalized or any(token in {"*", "ALL"} for token in normalized):
        return None
    return normalized


class Drawing:
    """The ENTITIES and OBJECTS of one DXF file plus the configuration they are coded with."""

    def __init__(self, config: CodecConfig | None = None, *, filename: str | None = None) -> None:
        self.config = config or CodecConfig()
        self.filename = filename
        self.entities = EntityList()
        self.objects = EntityList()
        self._by_kind: dict[str, EntityList] = {}

    @property
    def version(self) -> DxfVersion:
        return self.config.acad_version_number

    @property
    def diagnostics(self) -> Diagnostics:
        return self.config.diagnostics

    def add(self, record: DxfRecord) -> DxfRecord:
        target = self.objects if record.IS_OBJECT else self.entities
        target.append(record)
        kind_list = self._by_kind.get(record.KIND)
        if kind_list is None:
            kind_list = self._by_kind[record.KIND] = EntityList(record.KIND)
        kind_list.append(record)
        return record

    def remove(self, record: DxfRecord) -> None:
        target = self.objects if record.IS_OBJECT else self.entities
        target.remove(record)
        self._by_kind[record.KIND].remove(record)

    def of_kind(self, kind: str) -> EntityList:
        kind = kind.upper()
        return self._by_kind.get(TYPE_ALIASES.get(kind, kind)) or EntityList(kind)

    def query(self, types: str | Iterable[str] | None = None) -> Iterator[DxfRecord]:
        """Yield entities of the requested kinds; ``None``, ``"*"`` or ``"ALL"`` yields every entity."""
        selected = _normalize_types(types)
        if selected is None:
            yield from self.entities
            return
        seen: set[str] = set()
        for token in selected:
            if any(ch in token for ch in "*?[]"):
                kinds = [kind for kind in self._by_kind if fnmatch.fnmatchcase(kind, token)]
            else:
                kinds = [token]
            for kind in kinds:
                if kind in seen:
                    continue
                seen.add(kind)
                for record in self.of_kind(kind):
                    if not record.IS_OBJECT:
                        yield record

    def counts(self) -> dict[str, int]:
        return dict(Counter(record.KIND for record in self.entities))

    def clear(self) -> int:
        released = self.objects.clear()
        if len(self.entities):
            released += free_list(self.entities, self.diagnostics)
        self._by_kind.clear()
        return released

    def __iter__(self) -> Iterator[DxfRecord]:
        return iter(self.entities)

    # reading -----------------------------------------------------------------

    def read_entities(self, reader: TagReader) -> int:
        """Dispatch records up to the closing ``ENDSEC``; return how many were added."""
        return self._read_records(reader, "ENTITIES")

    def read_objects(self, reader: TagReader) -> int:
        return self._read_records(reader, "OBJECTS")

    def _read_records(self, reader: TagReader, section: str) -> int:
        added = 0
        while True:
            tag = reader.next_pair()
            if tag is None:
                self.diagnostics.warn(
                    "read_section", f"end of file inside the {section} section", filename=reader.filename
                )
                return added
            if tag.code != 0:
                self.diagnostics.warn(
                    "read_section",
                    f"unexpected group code {tag.code} in the {section} section",
                    filename=reader.filename,
                    line=reader.line_number,
                )
                continue
            if tag.value == "ENDSEC":
                return added
            record = read_entity_by_name(reader, tag.value, self.config)
            if record is not None:
                self.add(record)
                added += 1

    # writing -----------------------------------------------------------------

    def write_entities(self, writer: TagWriter, *, strict: bool = False) -> int:
        """Emit every entity; a record that fails validation is reported and skipped unless ``strict``."""
        writer.last_id_code = max([writer.last_id_code] + [r.id_code for r in self.entities])
        return self._write_records(writer, self.entities, strict)

    def write_objects(self, writer: TagWriter, *, strict: bool = False) -> int:
        return self._write_records(writer, self.objects, strict)

    def _write_records(self, writer: TagWriter, records: EntityList, strict: bool) -> int:
        written = 0
        for record in records:
            try:
                write_record(writer, record, self.config)
            except ValidationError as exc:
                if strict:
                    raise
                self.diagnostics.error(f"write_{record.KIND.lower()}", f"{exc}; record skipped")
                continue
            written += 1
        return written

    def write(self, stream: TextIO, *, strict: bool = False) -> None:
        self._write(TagWriter(stream), strict)

    def saveas(self, path: str | Path, *, strict: bool = False) -> None:
        with TagWriter.open(path) as writer:
            self._write(writer, strict)
        self.filename = str(path)

    def _write(self, writer: TagWriter, strict: bool) -> None:
        writer.write_pair(0, "SECTION")
        writer.write_pair(2, "HEADER")
        writer.write_pair(9, "$ACADVER")
        writer.write_pair(1, self.version.acadver)
        writer.write_pair(0, "ENDSEC")
        writer.write_pair(0, "SECTION")
        writer.write_pair(2, "ENTITIES")
        self.write_entities(writer, strict=strict)
        writer.write_pair(0, "ENDSEC")
        if self.version >= DxfVersion.R13 and len(self.objects):
            writer.write_pair(0, "SECTION")
            writer.write_pair(2, "OBJECTS")
            self.write_objects(writer, strict=strict)
            writer.write_pair(0, "ENDSEC")
        writer.write_pair(0, "EOF")


def _read_header(reader: TagReader, config: CodecConfig) -> DxfVersion | None:
    version = None
    while True:
        tag = reader.next_pair()
        if tag is None or tag.end_of_section:
            return version
        if tag.code != 9 or tag.value.strip() != "$ACADVER":
            continue
        value = reader.next_pair()
        if value is None:
            return version
        acadver = value.value.strip()
        try:
            version = DxfVersion.from_acadver(acadver)
        except ValueError:
            if acadver > DxfVersion.R2010.acadver:
                config.diagnostics.warn(
                    "read_header",
                    f"$ACADVER {acadver} is newer than AC1024; coding as R2010",
                    filename=reader.filename,
                    line=reader.line_number,
                )
                version = DxfVersion.R2010
            else:
                config.diagnostics.warn(
                    "read_header",
                    f"unsupported $ACADVER {acadver!r}; keeping {config.version.name}",
                    filename=reader.filename,
                    line=reader.line_number,
                )


def _skip_section(reader: TagReader) -> None:
    while True:
        tag = reader.next_pair()
        if tag is None or tag.end_of_section:
            return


def read(stream: TextIO, config: CodecConfig | None = None, *, filename: str = "<stream>") -> Drawing:
    """Read a DXF text stream into a Drawing.

    The ``$ACADVER`` found in the HEADER section selects the version the
    records are decoded with; ``config`` supplies everything else.
    """
    reader = TagReader(stream, filename=filename)
    return _read(reader, config or CodecConfig())


def readfile(path: str | Path, config: CodecConfig | None = None) -> Drawing:
    with TagReader.open(path) as reader:
        drawing = _read(reader, config or CodecConfig())
    drawing.filename = str(path)
    return drawing


def _read(reader: TagReader, config: CodecConfig) -> Drawing:
    drawing = Drawing(config, filename=reader.filename)
    while True:
        tag = reader.next_pair()
        if tag is None:
            config.diagnostics.warn("read", "missing EOF marker", filename=reader.filename)
            break
        if tag.code == 0 and tag.value in END_OF_FILE_MARKERS:
            break
        if tag.code == 999:
            config.diagnostics.info("read", f"comment: {tag.value}", filename=reader.filename, line=reader.line_number)
            continue
        if tag.code != 0 or tag.value != "SECTION":
            raise ReadError(
                f"expected a SECTION, found {tag.code} {tag.value!r}",
                filename=reader.filename,
                line=reader.line_number,
            )
        name_tag = reader.next_pair()
        name = name_tag.value.strip() if name_tag is not None and name_tag.code == 2 else ""
        if name == "HEADER":
            version = _read_header(reader, config)
            if version is not None and version != config.acad_version_number:
                config = config.replace(acad_version_number=version)
                drawing.config = config
        elif name == "ENTITIES":
            drawing.read_entities(reader)
        elif name == "OBJECTS":
            drawing.read_objects(reader)
        else:
            if name not in SKIPPED_SECTIONS:
                config.diagnostics.warn(
                    "read", f"skipping unknown section {name!r}", filename=reader.filename, line=reader.line_number
                )
            _skip_section(reader)
    return drawing
