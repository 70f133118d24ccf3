from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..config import CodecConfig, DxfVersion
from ..tags import Tag, TagWriter
from .base import (
    EXTRUSION,
    ORIGIN,
    CountField,
    Entity,
    Field,
    Marker,
    Point3D,
    PointField,
    PointListField,
    ReadContext,
    require,
)

DIMENSION_ROTATED = 0
DIMENSION_ALIGNED = 1
DIMENSION_ANGULAR = 2
DIMENSION_DIAMETER = 3
DIMENSION_RADIUS = 4
DIMENSION_ANGULAR_3POINT = 5
DIMENSION_ORDINATE = 6

_DIMENSION_MARKERS = {
    DIMENSION_ROTATED: "AcDbAlignedDimension",
    DIMENSION_ALIGNED: "AcDbAlignedDimension",
    DIMENSION_ANGULAR: "AcDb2LineAngularDimension",
    DIMENSION_DIAMETER: "AcDbDiametricDimension",
    DIMENSION_RADIUS: "AcDbRadialDimension",
    DIMENSION_ANGULAR_3POINT: "AcDb3PointAngularDimension",
    DIMENSION_ORDINATE: "AcDbOrdinateDimension",
}


def _of_type(*types: int):
    def predicate(record: Any, config: CodecConfig) -> bool:
        return record.base_type in types

    return predicate


def _type_marker(record: "Dimension") -> str:
    return _DIMENSION_MARKERS.get(record.base_type, "AcDbAlignedDimension")


@dataclass(kw_only=True)
class Dimension(Entity):
    KIND: ClassVar[str] = "DIMENSION"
    DXFTYPE: ClassVar[str] = "DIMENSION"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbDimension"),
        Field(2, "block_name"),
        PointField(10, "definition_point"),
        PointField(11, "text_midpoint"),
        PointField(12, "clone_insertion_point"),
        Field(70, "dimension_type"),
        Field(71, "attachment_point", since=DxfVersion.R2000, skip_default=True),
        Field(72, "line_spacing_style", since=DxfVersion.R2000, skip_default=True),
        Field(41, "line_spacing_factor", since=DxfVersion.R2000, skip_default=True),
        Field(42, "actual_measurement", since=DxfVersion.R2000, skip_default=True),
        Field(1, "text", skip_default=True),
        Field(53, "text_rotation", skip_default=True),
        Field(51, "horizontal_direction", skip_default=True),
        EXTRUSION,
        Field(3, "dimension_style_name"),
        Marker(_type_marker, accepts=tuple(sorted(set(_DIMENSION_MARKERS.values())))),
        PointField(13, "defpoint2", when=_of_type(0, 1, 2, 5, 6)),
        PointField(14, "defpoint3", when=_of_type(0, 1, 2, 5, 6)),
        PointField(15, "defpoint4", when=_of_type(2, 3, 4, 5)),
        PointField(16, "defpoint5", when=_of_type(2)),
        Field(40, "leader_length", when=_of_type(3, 4)),
        Field(50, "angle", when=_of_type(0)),
        Field(52, "oblique_angle", skip_default=True, when=_of_type(0, 1)),
        Marker("AcDbRotatedDimension", when=_of_type(0)),
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        **Entity.BOUNDS,
        "attachment_point": (0, 9),
        "line_spacing_style": (0, 2),
    }
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"block_name", "text", "dimension_style_name"}

    block_name: str = ""
    definition_point: Point3D = ORIGIN
    text_midpoint: Point3D = ORIGIN
    clone_insertion_point: Point3D | None = None
    dimension_type: int = DIMENSION_ROTATED
    attachment_point: int = 0
    line_spacing_style: int = 0
    line_spacing_factor: float = 1.0
    actual_measurement: float = 0.0
    text: str = ""
    text_rotation: float = 0.0
    horizontal_direction: float = 0.0
    dimension_style_name: str = "STANDARD"
    defpoint2: Point3D = ORIGIN
    defpoint3: Point3D = ORIGIN
    defpoint4: Point3D = ORIGIN
    defpoint5: Point3D = ORIGIN
    leader_length: float = 0.0
    angle: float = 0.0
    oblique_angle: float = 0.0

    @property
    def base_type(self) -> int:
        return self.dimension_type & 0x0F


@dataclass(kw_only=True)
class Leader(Entity):
    KIND: ClassVar[str] = "LEADER"
    DXFTYPE: ClassVar[str] = "LEADER"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R13
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbLeader"),
        Field(3, "dimension_style_name"),
        Field(71, "arrow_head_flag"),
        Field(72, "path_type"),
        Field(73, "creation_flag"),
        Field(74, "hookline_direction_flag"),
        Field(75, "hookline_flag"),
        Field(40, "text_annotation_height"),
        Field(41, "text_annotation_width"),
        CountField(76, "vertices"),
        PointListField(10, "vertices"),
        Field(77, "leader_color", skip_default=True),
        Field(340, "annotation_reference_hard", skip_default=True),
        EXTRUSION,
        PointField(211, "horizontal_direction"),
        PointField(212, "block_offset"),
        PointField(213, "annotation_offset"),
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        **Entity.BOUNDS,
        "arrow_head_flag": (0, 1),
        "path_type": (0, 1),
        "creation_flag": (0, 3),
        "hookline_direction_flag": (0, 1),
        "hookline_flag": (0, 1),
        "leader_color": (0, 256),
    }
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"dimension_style_name", "annotation_reference_hard"}

    dimension_style_name: str = "STANDARD"
    arrow_head_flag: int = 1
    path_type: int = 0
    creation_flag: int = 3
    hookline_direction_flag: int = 0
    hookline_flag: int = 0
    text_annotation_height: float = 0.0
    text_annotation_width: float = 0.0
    vertices: list[Point3D] = field(default_factory=list)
    leader_color: int = 0
    annotation_reference_hard: str = ""
    horizontal_direction: Point3D = (1.0, 0.0, 0.0)
    block_offset: Point3D = ORIGIN
    annotation_offset: Point3D = ORIGIN

    @property
    def number_of_vertices(self) -> int:
        return len(self.vertices)

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            len(self.vertices) >= 2,
            f"{len(self.vertices)} vertices are too few for the {self.KIND} entity "
            f"with id-code: {self.id_code:x}",
        )


@dataclass(kw_only=True)
class Tolerance(Entity):
    KIND: ClassVar[str] = "TOLERANCE"
    DXFTYPE: ClassVar[str] = "TOLERANCE"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R13
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbFcf"),
        Field(3, "dimension_style_name"),
        PointField(10, "insertion_point"),
        Field(1, "text"),
        EXTRUSION,
        PointField(11, "x_axis_direction"),
    )
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"dimension_style_name", "text"}

    dimension_style_name: str = "STANDARD"
    insertion_point: Point3D = ORIGIN
    text: str = ""
    x_axis_direction: Point3D = (1.0, 0.0, 0.0)


CONTEXT_DATA_BEGIN = "CONTEXT_DATA{"
CONTEXT_DATA_END = "}"


@dataclass(frozen=True)
class ContextDataField(Field):
    """The nested ``300 CONTEXT_DATA{`` ... ``301 }`` block, kept as raw tags."""

    def codes(self) -> tuple[int, ...]:
        return ()

    def emits(self, record: Any, config: CodecConfig) -> bool:
        return bool(self.value_of(record)) and super().emits(record, config)

    def write(self, writer: TagWriter, record: Any, config: CodecConfig) -> None:
        writer.write_pair(300, CONTEXT_DATA_BEGIN)
        for code, text in self.value_of(record):
            writer.write_pair(code, text)
        writer.write_pair(301, CONTEXT_DATA_END)


@dataclass(kw_only=True)
class MLeader(Entity):
    """A multileader; the annotation context is carried through unchanged."""

    KIND: ClassVar[str] = "MLEADER"
    DXFTYPE: ClassVar[str] = "MULTILEADER"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R2007
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbMLeader"),
        Field(270, "version", skip_default=True, since=DxfVersion.R2010),
        ContextDataField(300, "context_data"),
        Field(340, "leader_style_id"),
        Field(90, "property_override_flag"),
        Field(170, "leader_line_type"),
        Field(91, "leader_line_color"),
        Field(341, "leader_linetype_id", skip_default=True),
        Field(171, "leader_line_weight"),
        Field(290, "enable_landing"),
        Field(291, "enable_dogleg"),
        Field(41, "dogleg_length"),
        Field(342, "arrowhead_id", skip_default=True),
        Field(42, "arrowhead_size"),
        Field(172, "content_type"),
        Field(343, "text_style_id", skip_default=True),
        Field(173, "text_left_attachment_type"),
        Field(95, "text_right_attachment_type"),
        Field(174, "text_angle_type"),
        Field(175, "text_alignment_type"),
        Field(92, "text_color"),
        Field(292, "enable_frame_text"),
        Field(344, "block_content_id", skip_default=True),
        Field(93, "block_content_color"),
        PointField(10, "block_content_scale"),
        Field(43, "block_content_rotation"),
        Field(176, "block_content_connection_type"),
        Field(293, "enable_annotation_scale"),
        Field(94, "arrowhead_index", skip_default=True),
        Field(345, "arrowhead_handle", skip_default=True),
        Field(330, "block_attribute_id", skip_default=True),
        Field(177, "block_attribute_index", skip_default=True),
        Field(44, "block_attribute_width", skip_default=True),
        Field(302, "block_attribute_text_string", skip_default=True),
        Field(294, "text_direction_negative"),
        Field(178, "text_align_in_ipe"),
        Field(179, "text_attachment_point"),
        Field(271, "text_attachment_direction", since=DxfVersion.R2010),
        Field(272, "bottom_text_attachment_direction", since=DxfVersion.R2010),
        Field(273, "top_text_attachment_direction", since=DxfVersion.R2010),
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        **Entity.BOUNDS,
        "leader_line_type": (0, 2),
        "content_type": (0, 3),
        "text_angle_type": (0, 2),
        "text_alignment_type": (0, 2),
        "block_content_connection_type": (0, 1),
        "text_attachment_direction": (0, 1),
    }
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {
        "leader_style_id",
        "leader_linetype_id",
        "arrowhead_id",
        "text_style_id",
        "block_content_id",
        "arrowhead_handle",
        "block_attribute_id",
        "block_attribute_text_string",
    }

    version: int = 2
    context_data: list[tuple[int, str]] = field(default_factory=list)
    leader_style_id: str = ""
    property_override_flag: int = 0
    leader_line_type: int = 1
    leader_line_color: int = 0
    leader_linetype_id: str = ""
    leader_line_weight: int = -2
    enable_landing: bool = True
    enable_dogleg: bool = True
    dogleg_length: float = 8.0
    arrowhead_id: str = ""
    arrowhead_size: float = 4.0
    content_type: int = 2
    text_style_id: str = ""
    text_left_attachment_type: int = 1
    text_right_attachment_type: int = 1
    text_angle_type: int = 1
    text_alignment_type: int = 0
    text_color: int = 0
    enable_frame_text: bool = False
    block_content_id: str = ""
    block_content_color: int = 0
    block_content_scale: Point3D = (1.0, 1.0, 1.0)
    block_content_rotation: float = 0.0
    block_content_connection_type: int = 0
    enable_annotation_scale: bool = True
    arrowhead_index: int = 0
    arrowhead_handle: str = ""
    block_attribute_id: str = ""
    block_attribute_index: int = 0
    block_attribute_width: float = 0.0
    block_attribute_text_string: str = ""
    text_direction_negative: bool = False
    text_align_in_ipe: int = 0
    text_attachment_point: int = 1
    text_attachment_direction: int = 0
    bottom_text_attachment_direction: int = 9
    top_text_attachment_direction: int = 9

    def read_special(self, tag: Tag, ctx: ReadContext) -> bool:
        if tag.code != 300 or tag.value.strip() != CONTEXT_DATA_BEGIN:
            return False
        raw: list[tuple[int, str]] = []
        while True:
            inner = ctx.reader.next_pair()
            if inner is None or inner.code == 0:
                if inner is not None:
                    ctx.reader.unread(inner)
                ctx.warn("unterminated CONTEXT_DATA block; keeping the tags read")
                break
            if inner.code == 301 and inner.value.strip() == CONTEXT_DATA_END:
                break
            raw.append((inner.code, inner.value))
        self.context_data = raw
        return True
