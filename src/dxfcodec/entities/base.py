from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, ClassVar

from ..config import CodecConfig, DxfVersion
from ..errors import NullArgError, ParseError, RangeError, ValidationError
from ..tags import Tag, TagReader, TagWriter
from ..values import parse_value

Point2D = tuple[float, float]
Point3D = tuple[float, float, float]

DEFAULT_LINETYPE = "BYLAYER"
DEFAULT_LAYER = "0"
COLOR_BYBLOCK = 0
COLOR_BYLAYER = 256
MODELSPACE = 0
PAPERSPACE = 1
DEFAULT_EXTRUSION: Point3D = (0.0, 0.0, 1.0)
ORIGIN: Point3D = (0.0, 0.0, 0.0)

Predicate = Callable[["DxfRecord", CodecConfig], bool]


class ReadState(Enum):
    INITIAL = "initial"
    IN_HEADER = "in-header"
    IN_KIND_BODY = "in-kind-body"
    AT_TERMINATOR = "at-terminator"


@dataclass
class ReadContext:
    reader: TagReader
    config: CodecConfig
    operation: str
    state: ReadState = ReadState.INITIAL
    group: str | None = None
    marker: str | None = None
    declared: dict[str, int] = field(default_factory=dict)
    scratch: dict[str, Any] = field(default_factory=dict)

    def parse(self, tag: Tag) -> Any:
        return parse_value(tag.code, tag.value, self.reader.line_number)

    def warn(self, detail: str) -> None:
        self.config.diagnostics.warn(
            self.operation, detail, filename=self.reader.filename, line=self.reader.line_number
        )

    def take(self, code: int, default: Any = None) -> Any:
        """Consume the next tag if it carries ``code``; otherwise leave it in place."""
        tag = self.reader.next_pair()
        if tag is None:
            return default
        if tag.code != code:
            self.reader.unread(tag)
            if tag.code != 0:
                self.warn(f"expected group code {code}, found {tag.code}")
            return default
        try:
            return self.parse(tag)
        except ParseError as exc:
            self.warn(str(exc))
            return default

    def take_point(self, code: int, dims: int = 2) -> tuple[float, ...]:
        return tuple(float(self.take(code + 10 * axis, 0.0)) for axis in range(dims))


# ---------------------------------------------------------------------------
# Tag schema


@dataclass(frozen=True)
class Field:
    """A single scalar group code bound to one attribute."""

    code: int
    attr: str
    since: DxfVersion = DxfVersion.R10
    skip_default: bool = False
    when: Predicate | None = None

    def codes(self) -> tuple[int, ...]:
        return (self.code,)

    def value_of(self, record: "DxfRecord") -> Any:
        return getattr(record, self.attr)

    def emits(self, record: "DxfRecord", config: CodecConfig) -> bool:
        if config.acad_version_number < self.since:
            return False
        if self.when is not None and not self.when(record, config):
            return False
        if self.skip_default and self.value_of(record) == record.default(self.attr):
            return False
        return True

    def write(self, writer: TagWriter, record: "DxfRecord", config: CodecConfig) -> None:
        writer.write_tag(self.code, self.value_of(record))

    def read(self, record: "DxfRecord", tag: Tag, ctx: ReadContext) -> None:
        setattr(record, self.attr, ctx.parse(tag))


@dataclass(frozen=True)
class PointField(Field):
    dims: int = 3

    def codes(self) -> tuple[int, ...]:
        return tuple(self.code + 10 * axis for axis in range(self.dims))

    def emits(self, record: "DxfRecord", config: CodecConfig) -> bool:
        if self.value_of(record) is None:
            return False
        return super().emits(record, config)

    def write(self, writer: TagWriter, record: "DxfRecord", config: CodecConfig) -> None:
        writer.write_point(self.code, tuple(self.value_of(record))[: self.dims])

    def read(self, record: "DxfRecord", tag: Tag, ctx: ReadContext) -> None:
        axis = (tag.code - self.code) // 10
        current = self.value_of(record)
        point = list(current) if current is not None else [0.0] * self.dims
        point[axis] = ctx.parse(tag)
        setattr(record, self.attr, tuple(point))


@dataclass(frozen=True)
class PointListField(Field):
    """Repeated coordinate groups; the X code opens the next point."""

    dims: int = 3

    def codes(self) -> tuple[int, ...]:
        return tuple(self.code + 10 * axis for axis in range(self.dims))

    def write(self, writer: TagWriter, record: "DxfRecord", config: CodecConfig) -> None:
        for point in self.value_of(record):
            writer.write_point(self.code, tuple(point)[: self.dims])

    def read(self, record: "DxfRecord", tag: Tag, ctx: ReadContext) -> None:
        points = self.value_of(record)
        axis = (tag.code - self.code) // 10
        value = ctx.parse(tag)
        if axis == 0:
            points.append((value,) + (0.0,) * (self.dims - 1))
            return
        if not points:
            ctx.warn(f"group code {tag.code} found before group code {self.code}")
            points.append((0.0,) * self.dims)
        point = list(points[-1])
        point[axis] = value
        points[-1] = tuple(point)


@dataclass(frozen=True)
class ListField(Field):
    """Repeated scalar values kept in input order (knots, chunks, handles)."""

    def emits(self, record: "DxfRecord", config: CodecConfig) -> bool:
        return config.acad_version_number >= self.since and (
            self.when is None or self.when(record, config)
        )

    def write(self, writer: TagWriter, record: "DxfRecord", config: CodecConfig) -> None:
        for value in self.value_of(record):
            writer.write_tag(self.code, value)

    def read(self, record: "DxfRecord", tag: Tag, ctx: ReadContext) -> None:
        self.value_of(record).append(ctx.parse(tag))


@dataclass(frozen=True)
class CountField(Field):
    """Emits the length of a list attribute; on read the declared count is checked later."""

    def value_of(self, record: "DxfRecord") -> Any:
        return len(getattr(record, self.attr))

    def emits(self, record: "DxfRecord", config: CodecConfig) -> bool:
        return config.acad_version_number >= self.since and (
            self.when is None or self.when(record, config)
        )

    def read(self, record: "DxfRecord", tag: Tag, ctx: ReadContext) -> None:
        ctx.declared[self.attr] = ctx.parse(tag)


@dataclass(frozen=True)
class Marker:
    """Subclass marker (group code 100), written for R13 and later."""

    name: str | Callable[["DxfRecord"], str]
    accepts: tuple[str, ...] = ()
    since: DxfVersion = DxfVersion.R13
    when: Predicate | None = None

    def codes(self) -> tuple[int, ...]:
        return ()

    def names(self) -> tuple[str, ...]:
        if isinstance(self.name, str):
            return (self.name,) + self.accepts
        return self.accepts

    def emits(self, record: "DxfRecord", config: CodecConfig) -> bool:
        if self.when is not None and not self.when(record, config):
            return False
        return config.acad_version_number >= self.since

    def write(self, writer: TagWriter, record: "DxfRecord", config: CodecConfig) -> None:
        name = self.name if isinstance(self.name, str) else self.name(record)
        writer.write_pair(100, name)


THICKNESS = Field(39, "thickness", skip_default=True)
EXTRUSION = PointField(210, "extrusion", since=DxfVersion.R12, skip_default=True)


# ---------------------------------------------------------------------------
# Records


_PROTOTYPES: dict[type, "DxfRecord"] = {}
_HANDLERS: dict[tuple[type, str], dict[int, Any]] = {}


def _check_bounds(owner: str, name: str, value: Any, bounds: tuple[int, int]) -> None:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise RangeError(f"{owner}.{name}", value, low, high)


@dataclass(kw_only=True)
class DxfRecord:
    """Fields and codec plumbing shared by drawable entities and non-graphical objects."""

    KIND: ClassVar[str] = ""
    DXFTYPE: ClassVar[str] = ""
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R10
    SCHEMA: ClassVar[tuple[Any, ...]] = ()
    HEADER: ClassVar[tuple[Field, ...]] = ()
    SUBCLASSES: ClassVar[tuple[str, ...]] = ()
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {}
    NOT_NULL: ClassVar[frozenset[str]] = frozenset()
    IS_OBJECT: ClassVar[bool] = False

    id_code: int = -1
    dictionary_owner_soft: str = ""
    dictionary_owner_hard: str = ""
    xdata: list[tuple[int, Any]] = field(default_factory=list)

    def __setattr__(self, name: str, value: Any) -> None:
        bounds = self.BOUNDS.get(name)
        if bounds is not None:
            _check_bounds(type(self).__name__, name, value, bounds)
        elif value is None and name in self.NOT_NULL:
            raise NullArgError(f"{type(self).__name__}.{name} must not be None")
        object.__setattr__(self, name, value)

    # accessors -----------------------------------------------------------

    @property
    def dxftype(self) -> str:
        return self.KIND

    def get(self, name: str) -> Any:
        if name not in self.field_names():
            raise AttributeError(f"{type(self).__name__} has no field {name!r}")
        value = getattr(self, name)
        bounds = self.BOUNDS.get(name)
        if bounds is not None:
            _check_bounds(type(self).__name__, name, value, bounds)
        return value

    def set(self, name: str, value: Any) -> "DxfRecord":
        if name not in self.field_names():
            raise AttributeError(f"{type(self).__name__} has no field {name!r}")
        setattr(self, name, value)
        return self

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def prototype(cls) -> "DxfRecord":
        proto = _PROTOTYPES.get(cls)
        if proto is None:
            proto = cls()
            _PROTOTYPES[cls] = proto
        return proto

    def default(self, name: str) -> Any:
        return getattr(type(self).prototype(), name)

    def out_of_range(self) -> list[str]:
        problems = []
        for name, bounds in self.BOUNDS.items():
            try:
                _check_bounds(type(self).__name__, name, getattr(self, name), bounds)
            except RangeError as exc:
                problems.append(str(exc))
        return problems

    # schema lookup ---------------------------------------------------------

    @classmethod
    def _handlers(cls, section: str) -> dict[int, Any]:
        key = (cls, section)
        table = _HANDLERS.get(key)
        if table is None:
            table = {}
            items = cls.HEADER if section == "header" else cls.SCHEMA
            for item in items:
                for code in item.codes():
                    table.setdefault(code, item)
            _HANDLERS[key] = table
        return table

    @classmethod
    def subclass_markers(cls) -> frozenset[str]:
        names = set(cls.SUBCLASSES)
        for item in cls.SCHEMA:
            if isinstance(item, Marker):
                names.update(item.names())
        return frozenset(names)

    def wire_name(self, config: CodecConfig) -> str:
        return self.DXFTYPE

    # codec hooks -----------------------------------------------------------

    def read_special(self, tag: Tag, ctx: ReadContext) -> bool:
        """Consume kind-specific structures the flat schema cannot describe."""
        return False

    def after_read(self, ctx: ReadContext) -> None:
        for attr, declared in ctx.declared.items():
            actual = len(getattr(self, attr))
            if declared != actual:
                ctx.warn(
                    f"{self.KIND} declares {declared} {attr.replace('_', ' ')} "
                    f"but {actual} were found; keeping the values present"
                )

    def read_followers(self, ctx: ReadContext) -> None:
        pass

    def validate_for_write(self, config: CodecConfig) -> None:
        pass

    def repair_defaults(self, config: CodecConfig, operation: str) -> None:
        pass

    def write_header(self, writer: TagWriter, config: CodecConfig) -> None:
        raise NotImplementedError

    def write_body(self, writer: TagWriter, config: CodecConfig) -> None:
        for item in self.SCHEMA:
            if item.emits(self, config):
                item.write(writer, self, config)

    def write_xdata(self, writer: TagWriter, config: CodecConfig) -> None:
        if config.acad_version_number < DxfVersion.R13:
            return
        for code, value in self.xdata:
            writer.write_tag(code, value)

    def write_followers(self, writer: TagWriter, config: CodecConfig) -> None:
        pass

    def _write_reactor_groups(self, writer: TagWriter, config: CodecConfig) -> None:
        if config.acad_version_number < DxfVersion.R14:
            return
        if self.dictionary_owner_soft:
            writer.write_pair(102, "{ACAD_REACTORS")
            writer.write_tag(330, self.dictionary_owner_soft)
            writer.write_pair(102, "}")
        if self.dictionary_owner_hard:
            writer.write_pair(102, "{ACAD_XDICTIONARY")
            writer.write_tag(360, self.dictionary_owner_hard)
            writer.write_pair(102, "}")


ENTITY_HEADER: tuple[Field, ...] = (
    Field(5, "id_code"),
    Field(6, "linetype"),
    Field(8, "layer"),
    Field(38, "elevation"),
    Field(39, "thickness"),
    Field(48, "linetype_scale"),
    Field(60, "visibility"),
    Field(62, "color"),
    Field(67, "paperspace"),
    Field(92, "graphics_data_size"),
    Field(160, "graphics_data_size"),
    PointField(210, "extrusion"),
    Field(284, "shadow_mode"),
    ListField(310, "binary_graphics_data"),
    Field(330, "dictionary_owner_soft"),
    Field(347, "material"),
    Field(360, "dictionary_owner_hard"),
    Field(370, "lineweight"),
    Field(390, "plot_style_name"),
    Field(420, "color_value"),
    Field(430, "color_name"),
    Field(440, "transparency"),
)

OBJECT_HEADER: tuple[Field, ...] = (
    Field(5, "id_code"),
    Field(330, "dictionary_owner_soft"),
    Field(360, "dictionary_owner_hard"),
)

_INT32_LIMIT = (1 << 31) - 1


@dataclass(kw_only=True)
class Entity(DxfRecord):
    HEADER: ClassVar[tuple[Field, ...]] = ENTITY_HEADER
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        "visibility": (0, 1),
        "paperspace": (0, 1),
        "shadow_mode": (0, 3),
    }
    NOT_NULL: ClassVar[frozenset[str]] = frozenset(
        {"linetype", "layer", "dictionary_owner_soft", "dictionary_owner_hard", "material", "plot_style_name", "color_name"}
    )

    linetype: str = DEFAULT_LINETYPE
    layer: str = DEFAULT_LAYER
    elevation: float = 0.0
    thickness: float = 0.0
    linetype_scale: float = 1.0
    visibility: int = 0
    color: int = COLOR_BYLAYER
    paperspace: int = MODELSPACE
    extrusion: Point3D = DEFAULT_EXTRUSION
    graphics_data_size: int = 0
    shadow_mode: int = 0
    binary_graphics_data: list[str] = field(default_factory=list)
    material: str = ""
    lineweight: int = 0
    plot_style_name: str = ""
    color_value: int | None = None
    color_name: str = ""
    transparency: int | None = None

    def repair_defaults(self, config: CodecConfig, operation: str) -> None:
        if self.linetype == "":
            config.diagnostics.warn(
                operation,
                f"empty linetype string for the {self.KIND} entity with id-code: {self.id_code:x}; "
                f"reset to {DEFAULT_LINETYPE}",
            )
            self.linetype = DEFAULT_LINETYPE
        if self.layer == "":
            config.diagnostics.warn(
                operation,
                f"empty layer string for the {self.KIND} entity with id-code: {self.id_code:x}; "
                f"relocated to layer {DEFAULT_LAYER}",
            )
            self.layer = DEFAULT_LAYER

    def after_read(self, ctx: ReadContext) -> None:
        super().after_read(ctx)
        if self.linetype == "":
            self.linetype = DEFAULT_LINETYPE
        if self.layer == "":
            self.layer = DEFAULT_LAYER

    def write_header(self, writer: TagWriter, config: CodecConfig) -> None:
        version = config.acad_version_number
        writer.write_pair(0, self.wire_name(config))
        if self.id_code != -1:
            writer.write_tag(5, self.id_code)
        self._write_reactor_groups(writer, config)
        if version >= DxfVersion.R13:
            writer.write_pair(100, "AcDbEntity")
        if self.paperspace == PAPERSPACE:
            writer.write_tag(67, PAPERSPACE)
        writer.write_tag(8, self.layer)
        if self.linetype != DEFAULT_LINETYPE:
            writer.write_tag(6, self.linetype)
        if version <= DxfVersion.R11 and config.flatland and self.elevation != 0.0:
            writer.write_tag(38, self.elevation)
        if self.thickness != 0.0 and 39 not in self._handlers("body"):
            writer.write_tag(39, self.thickness)
        if version >= DxfVersion.R2008 and self.material:
            writer.write_tag(347, self.material)
        if self.color != COLOR_BYLAYER:
            writer.write_tag(62, self.color)
        if version >= DxfVersion.R2002:
            writer.write_tag(370, self.lineweight)
        if version >= DxfVersion.R13:
            if self.linetype_scale != 1.0:
                writer.write_tag(48, self.linetype_scale)
            if self.visibility != 0:
                writer.write_tag(60, self.visibility)
        if version >= DxfVersion.R2000 and (self.graphics_data_size or self.binary_graphics_data):
            size_code = 160 if self.graphics_data_size > _INT32_LIMIT else 92
            writer.write_tag(size_code, self.graphics_data_size)
            for chunk in self.binary_graphics_data:
                writer.write_tag(310, chunk)
        if version >= DxfVersion.R2004:
            if self.color_value is not None:
                writer.write_tag(420, self.color_value)
            if self.color_name:
                writer.write_tag(430, self.color_name)
            if self.transparency is not None:
                writer.write_tag(440, self.transparency)
        if version >= DxfVersion.R2000 and self.plot_style_name:
            writer.write_tag(390, self.plot_style_name)
        if version >= DxfVersion.R2007 and self.shadow_mode != 0:
            writer.write_tag(284, self.shadow_mode)


@dataclass(kw_only=True)
class DxfObject(DxfRecord):
    HEADER: ClassVar[tuple[Field, ...]] = OBJECT_HEADER
    IS_OBJECT: ClassVar[bool] = True
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R13
    NOT_NULL: ClassVar[frozenset[str]] = frozenset({"dictionary_owner_soft", "dictionary_owner_hard"})

    def write_header(self, writer: TagWriter, config: CodecConfig) -> None:
        writer.write_pair(0, self.wire_name(config))
        if self.id_code != -1:
            writer.write_tag(5, self.id_code)
        self._write_reactor_groups(writer, config)


# ---------------------------------------------------------------------------
# Read / write skeletons


def _trace(config: CodecConfig, operation: str, marker: str) -> None:
    if config.debug_trace:
        config.diagnostics.trace(operation, marker)


def _resolve(record: DxfRecord, code: int, state: ReadState) -> tuple[Any, bool]:
    header = record._handlers("header")
    body = record._handlers("body")
    if state is ReadState.IN_KIND_BODY:
        if code in body:
            return body[code], True
        return header.get(code), False
    if code in header:
        return header[code], False
    return body.get(code), code in body


def _read_marker(record: DxfRecord, tag: Tag, ctx: ReadContext) -> None:
    name = tag.value.strip()
    if name in record.subclass_markers():
        ctx.state = ReadState.IN_KIND_BODY
        ctx.marker = name
    elif name != "AcDbEntity" or record.IS_OBJECT:
        ctx.warn(f"found a bad subclass marker {name!r} in a {record.KIND} record")


def _read_group(tag: Tag, ctx: ReadContext) -> None:
    value = tag.value.strip()
    if value == "}":
        ctx.group = None
    elif value.startswith("{"):
        ctx.group = value[1:]
        if ctx.group not in ("ACAD_REACTORS", "ACAD_XDICTIONARY"):
            ctx.warn(f"skipping application group {value!r}")
    else:
        ctx.warn(f"malformed 102 group marker {value!r}")


def read_record(reader: TagReader, record: DxfRecord, config: CodecConfig) -> DxfRecord:
    """Populate ``record`` from the tags that follow its ``0`` marker.

    Reading stops in front of the next ``0`` tag, which is left in the stream.
    """
    operation = f"read_{record.KIND.lower()}"
    _trace(config, operation, "enter")
    ctx = ReadContext(reader=reader, config=config, operation=operation)
    if config.acad_version_number < record.MIN_VERSION:
        ctx.warn(
            f"the {record.KIND} entity is not supported before "
            f"DXF {record.MIN_VERSION.name}; reading it anyway"
        )
    while True:
        tag = reader.next_pair()
        if tag is None:
            break
        if tag.code == 0:
            reader.unread(tag)
            break
        if ctx.state is ReadState.INITIAL:
            ctx.state = ReadState.IN_HEADER
        if tag.code == 102:
            _read_group(tag, ctx)
            continue
        if ctx.group is not None and ctx.group not in ("ACAD_REACTORS", "ACAD_XDICTIONARY"):
            continue
        if tag.code == 100:
            _read_marker(record, tag, ctx)
            continue
        if tag.code == 999:
            config.diagnostics.info(operation, f"comment: {tag.value}", filename=reader.filename, line=reader.line_number)
            continue
        if 1000 <= tag.code <= 1071:
            try:
                record.xdata.append((tag.code, ctx.parse(tag)))
            except ParseError as exc:
                ctx.warn(str(exc))
            continue
        if (ctx.state is ReadState.IN_KIND_BODY or tag.code not in record._handlers("header")) and record.read_special(tag, ctx):
            ctx.state = ReadState.IN_KIND_BODY
            continue
        handler, in_body = _resolve(record, tag.code, ctx.state)
        if handler is None:
            ctx.warn(f"unknown group code {tag.code} in a {record.KIND} record")
            continue
        if in_body:
            ctx.state = ReadState.IN_KIND_BODY
        try:
            handler.read(record, tag, ctx)
        except ParseError as exc:
            ctx.warn(f"{exc}; skipped")
        except RangeError as exc:
            ctx.warn(f"{exc}; using the default value")
            attr = getattr(handler, "attr", None)
            if attr is not None:
                setattr(record, attr, record.default(attr))
    ctx.state = ReadState.AT_TERMINATOR
    record.after_read(ctx)
    record.read_followers(ctx)
    _trace(config, operation, "exit")
    return record


def write_record(writer: TagWriter, record: DxfRecord, config: CodecConfig) -> None:
    """Emit ``record`` in canonical tag order.

    Raises ValidationError before anything is written when the record
    cannot be represented.
    """
    operation = f"write_{record.KIND.lower()}"
    _trace(config, operation, "enter")
    record.validate_for_write(config)
    if config.acad_version_number < record.MIN_VERSION:
        config.diagnostics.warn(
            operation,
            f"the {record.KIND} entity is not supported before DXF {record.MIN_VERSION.name}",
        )
    record.repair_defaults(config, operation)
    record.write_header(writer, config)
    record.write_body(writer, config)
    record.write_xdata(writer, config)
    record.write_followers(writer, config)
    _trace(config, operation, "exit")


def require(condition: bool, message: str) -> None:
    if not condition:
        raise ValidationError(message)
