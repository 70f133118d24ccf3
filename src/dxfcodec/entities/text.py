from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from ..config import CodecConfig, DxfVersion
from ..tags import Tag, TagWriter
from .base import (
    EXTRUSION,
    ORIGIN,
    THICKNESS,
    Entity,
    Field,
    Marker,
    Point3D,
    PointField,
    ReadContext,
    require,
)

MTEXT_CHUNK_SIZE = 250

ATTRIBUTE_INVISIBLE = 1
ATTRIBUTE_CONSTANT = 2
ATTRIBUTE_VERIFY = 4
ATTRIBUTE_PRESET = 8


def _aligned(text: Any, config: CodecConfig) -> bool:
    return bool(text.horizontal_justification or text.vertical_justification)


TEXT_CORE: tuple = (
    Marker("AcDbText"),
    THICKNESS,
    PointField(10, "insertion_point"),
    Field(40, "height"),
    Field(1, "text"),
    Field(50, "rotation", skip_default=True),
    Field(41, "relative_x_scale", skip_default=True),
    Field(51, "oblique_angle", skip_default=True),
    Field(7, "style", skip_default=True),
    Field(71, "text_generation_flag", skip_default=True),
    Field(72, "horizontal_justification", skip_default=True),
    PointField(11, "alignment_point", when=_aligned),
    EXTRUSION,
)


@dataclass(kw_only=True)
class Text(Entity):
    KIND: ClassVar[str] = "TEXT"
    DXFTYPE: ClassVar[str] = "TEXT"
    SCHEMA: ClassVar[tuple] = TEXT_CORE + (
        Marker("AcDbText"),
        Field(73, "vertical_justification", skip_default=True),
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        **Entity.BOUNDS,
        "horizontal_justification": (0, 5),
        "vertical_justification": (0, 3),
    }
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"text", "style"}

    insertion_point: Point3D = ORIGIN
    height: float = 1.0
    text: str = ""
    rotation: float = 0.0
    relative_x_scale: float = 1.0
    oblique_angle: float = 0.0
    style: str = "STANDARD"
    text_generation_flag: int = 0
    horizontal_justification: int = 0
    vertical_justification: int = 0
    alignment_point: Point3D | None = None

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.height > 0.0,
            f"text height must be positive for the {self.KIND} entity with id-code: {self.id_code:x}",
        )


def _require_tag(record: Any) -> None:
    require(
        record.tag != "" and " " not in record.tag,
        f"attribute tag {record.tag!r} is empty or contains blanks for the {record.KIND} entity "
        f"with id-code: {record.id_code:x}",
    )


@dataclass(kw_only=True)
class AttDef(Text):
    """An attribute template inside a block definition."""

    KIND: ClassVar[str] = "ATTDEF"
    DXFTYPE: ClassVar[str] = "ATTDEF"
    SCHEMA: ClassVar[tuple] = TEXT_CORE + (
        Marker("AcDbAttributeDefinition"),
        Field(3, "prompt"),
        Field(2, "tag"),
        Field(70, "attribute_flags"),
        Field(73, "field_length", skip_default=True),
        Field(74, "vertical_justification", skip_default=True),
    )
    NOT_NULL: ClassVar[frozenset[str]] = Text.NOT_NULL | {"prompt", "tag"}

    prompt: str = ""
    tag: str = ""
    attribute_flags: int = 0
    field_length: int = 0

    @property
    def is_invisible(self) -> bool:
        return bool(self.attribute_flags & ATTRIBUTE_INVISIBLE)

    @property
    def is_constant(self) -> bool:
        return bool(self.attribute_flags & ATTRIBUTE_CONSTANT)

    def validate_for_write(self, config: CodecConfig) -> None:
        super().validate_for_write(config)
        _require_tag(self)


@dataclass(kw_only=True)
class Attrib(Text):
    """An attribute value attached to an INSERT."""

    KIND: ClassVar[str] = "ATTRIB"
    DXFTYPE: ClassVar[str] = "ATTRIB"
    SCHEMA: ClassVar[tuple] = TEXT_CORE + (
        Marker("AcDbAttribute"),
        Field(2, "tag"),
        Field(70, "attribute_flags"),
        Field(73, "field_length", skip_default=True),
        Field(74, "vertical_justification", skip_default=True),
    )
    NOT_NULL: ClassVar[frozenset[str]] = Text.NOT_NULL | {"tag"}

    tag: str = ""
    attribute_flags: int = 0
    field_length: int = 0

    @property
    def is_invisible(self) -> bool:
        return bool(self.attribute_flags & ATTRIBUTE_INVISIBLE)

    def validate_for_write(self, config: CodecConfig) -> None:
        super().validate_for_write(config)
        _require_tag(self)


@dataclass(frozen=True)
class ChunkedTextField(Field):
    """MTEXT contents: 250 character ``3`` chunks followed by a final ``1``."""

    def codes(self) -> tuple[int, ...]:
        return (1, 3)

    def write(self, writer: TagWriter, record: Any, config: CodecConfig) -> None:
        text = self.value_of(record)
        while len(text) > MTEXT_CHUNK_SIZE:
            writer.write_tag(3, text[:MTEXT_CHUNK_SIZE])
            text = text[MTEXT_CHUNK_SIZE:]
        writer.write_tag(1, text)

    def read(self, record: Any, tag: Tag, ctx: ReadContext) -> None:
        pending = ctx.scratch.setdefault(self.attr, [])
        pending.append(ctx.parse(tag))
        if tag.code == 1:
            setattr(record, self.attr, "".join(pending))
            pending.clear()


@dataclass(kw_only=True)
class MText(Entity):
    KIND: ClassVar[str] = "MTEXT"
    DXFTYPE: ClassVar[str] = "MTEXT"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R13
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbMText"),
        PointField(10, "insertion_point"),
        Field(40, "height"),
        Field(41, "reference_width", skip_default=True),
        Field(71, "attachment_point"),
        Field(72, "drawing_direction", skip_default=True),
        ChunkedTextField(1, "text"),
        Field(7, "style", skip_default=True),
        EXTRUSION,
        PointField(11, "x_axis_direction"),
        Field(50, "rotation", skip_default=True),
        Field(73, "line_spacing_style", skip_default=True),
        Field(44, "line_spacing_factor", skip_default=True),
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        **Entity.BOUNDS,
        "attachment_point": (1, 9),
        "drawing_direction": (1, 5),
        "line_spacing_style": (1, 2),
    }
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"text", "style"}

    insertion_point: Point3D = ORIGIN
    height: float = 1.0
    reference_width: float = 0.0
    attachment_point: int = 1
    drawing_direction: int = 1
    text: str = ""
    style: str = "STANDARD"
    x_axis_direction: Point3D | None = None
    rotation: float = 0.0
    line_spacing_style: int = 1
    line_spacing_factor: float = 1.0

    def after_read(self, ctx: ReadContext) -> None:
        pending = ctx.scratch.get("text")
        if pending:
            ctx.warn("MTEXT chunks without a closing group code 1; keeping the chunks read")
            self.text = self.text + "".join(pending)
        super().after_read(ctx)

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.height > 0.0,
            f"text height must be positive for the {self.KIND} entity with id-code: {self.id_code:x}",
        )

    def plain_lines(self) -> list[str]:
        return self.text.split("\\P")
