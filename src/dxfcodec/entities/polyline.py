from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from ..config import CodecConfig, DxfVersion
from ..tags import Tag, TagWriter
from .base import (
    EXTRUSION,
    ORIGIN,
    THICKNESS,
    CountField,
    Entity,
    Field,
    Marker,
    Point3D,
    PointField,
    ReadContext,
    read_record,
    require,
    write_record,
)

POLYLINE_CLOSED = 1
POLYLINE_CURVE_FIT = 2
POLYLINE_SPLINE_FIT = 4
POLYLINE_3D = 8
POLYLINE_MESH = 16
POLYLINE_MESH_CLOSED_N = 32
POLYLINE_POLYFACE = 64
POLYLINE_CONTINUOUS_LINETYPE = 128

VERTEX_EXTRA = 1
VERTEX_CURVE_FIT = 2
VERTEX_SPLINE = 8
VERTEX_SPLINE_FRAME = 16
VERTEX_3D = 32
VERTEX_MESH = 64
VERTEX_POLYFACE = 128

_POLYLINE_MARKERS = ("AcDb2dPolyline", "AcDb3dPolyline", "AcDbPolygonMesh", "AcDbPolyFaceMesh")
_VERTEX_MARKERS = (
    "AcDb2dVertex",
    "AcDb3dPolylineVertex",
    "AcDbPolygonMeshVertex",
    "AcDbPolyFaceMeshVertex",
    "AcDbFaceRecord",
)


@dataclass(kw_only=True)
class Seqend(Entity):
    """Closes the child sequence of a POLYLINE or an INSERT with attributes."""

    KIND: ClassVar[str] = "SEQEND"
    DXFTYPE: ClassVar[str] = "SEQEND"


def read_children(ctx: ReadContext, child_name: str, child_cls: type) -> tuple[list, Seqend | None]:
    """Read ``child_name`` records up to and including the closing SEQEND."""
    children = []
    reader = ctx.reader
    while True:
        tag = reader.next_pair()
        if tag is None:
            ctx.warn(f"end of file before the SEQEND closing a {child_name} sequence")
            return children, None
        if tag.code == 0 and tag.value == child_name:
            children.append(read_record(reader, child_cls(), ctx.config))
        elif tag.code == 0 and tag.value == "SEQEND":
            return children, read_record(reader, Seqend(), ctx.config)
        else:
            reader.unread(tag)
            ctx.warn(f"missing SEQEND after {len(children)} {child_name} records")
            return children, None


def _vertex_marker(vertex: "Vertex") -> str:
    flag = vertex.flag
    if flag & VERTEX_POLYFACE:
        return "AcDbPolyFaceMeshVertex" if flag & VERTEX_MESH else "AcDbFaceRecord"
    if flag & VERTEX_MESH:
        return "AcDbPolygonMeshVertex"
    if flag & VERTEX_3D:
        return "AcDb3dPolylineVertex"
    return "AcDb2dVertex"


def _is_face_record(vertex: "Vertex", config: CodecConfig) -> bool:
    return bool(vertex.flag & VERTEX_POLYFACE)


@dataclass(kw_only=True)
class Vertex(Entity):
    KIND: ClassVar[str] = "VERTEX"
    DXFTYPE: ClassVar[str] = "VERTEX"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbVertex"),
        Marker(_vertex_marker, accepts=_VERTEX_MARKERS),
        PointField(10, "location"),
        Field(40, "start_width", skip_default=True),
        Field(41, "end_width", skip_default=True),
        Field(42, "bulge", skip_default=True),
        Field(70, "flag"),
        Field(50, "curve_fit_tangent_direction", skip_default=True),
        Field(71, "vertex_index_1", skip_default=True, when=_is_face_record),
        Field(72, "vertex_index_2", skip_default=True, when=_is_face_record),
        Field(73, "vertex_index_3", skip_default=True, when=_is_face_record),
        Field(74, "vertex_index_4", skip_default=True, when=_is_face_record),
        Field(91, "vertex_identifier", since=DxfVersion.R2010, skip_default=True),
    )

    location: Point3D = ORIGIN
    start_width: float = 0.0
    end_width: float = 0.0
    bulge: float = 0.0
    flag: int = 0
    curve_fit_tangent_direction: float = 0.0
    vertex_index_1: int = 0
    vertex_index_2: int = 0
    vertex_index_3: int = 0
    vertex_index_4: int = 0
    vertex_identifier: int = 0


def _polyline_marker(polyline: "Polyline") -> str:
    if polyline.flag & POLYLINE_POLYFACE:
        return "AcDbPolyFaceMesh"
    if polyline.flag & POLYLINE_MESH:
        return "AcDbPolygonMesh"
    if polyline.flag & POLYLINE_3D:
        return "AcDb3dPolyline"
    return "AcDb2dPolyline"


@dataclass(kw_only=True)
class Polyline(Entity):
    """A POLYLINE and the VERTEX records that follow it up to its SEQEND."""

    KIND: ClassVar[str] = "POLYLINE"
    DXFTYPE: ClassVar[str] = "POLYLINE"
    SCHEMA: ClassVar[tuple] = (
        Marker(_polyline_marker, accepts=_POLYLINE_MARKERS),
        Field(66, "vertices_follow"),
        PointField(10, "base_point"),
        THICKNESS,
        Field(70, "flag"),
        Field(40, "start_width", skip_default=True),
        Field(41, "end_width", skip_default=True),
        Field(71, "mesh_m_vertex_count", skip_default=True),
        Field(72, "mesh_n_vertex_count", skip_default=True),
        Field(73, "smooth_m_density", skip_default=True),
        Field(74, "smooth_n_density", skip_default=True),
        Field(75, "surface_type", skip_default=True),
        EXTRUSION,
    )

    vertices_follow: int = 1
    base_point: Point3D = ORIGIN
    flag: int = 0
    start_width: float = 0.0
    end_width: float = 0.0
    mesh_m_vertex_count: int = 0
    mesh_n_vertex_count: int = 0
    smooth_m_density: int = 0
    smooth_n_density: int = 0
    surface_type: int = 0
    vertices: list[Vertex] = field(default_factory=list)
    seqend: Seqend | None = None

    @property
    def closed(self) -> bool:
        return bool(self.flag & POLYLINE_CLOSED)

    @property
    def is_3d(self) -> bool:
        return bool(self.flag & POLYLINE_3D)

    def points(self) -> list[Point3D]:
        return [vertex.location for vertex in self.vertices]

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.vertices_follow == 1,
            f"vertices follow flag must be 1 for the {self.KIND} entity "
            f"with id-code: {self.id_code:x}, found {self.vertices_follow}",
        )
        for vertex in self.vertices:
            vertex.validate_for_write(config)

    def read_followers(self, ctx: ReadContext) -> None:
        self.vertices, self.seqend = read_children(ctx, "VERTEX", Vertex)

    def write_followers(self, writer: TagWriter, config: CodecConfig) -> None:
        for vertex in self.vertices:
            write_record(writer, vertex, config)
        seqend = self.seqend
        if seqend is None:
            seqend = Seqend(layer=self.layer, paperspace=self.paperspace)
        write_record(writer, seqend, config)


# (x, y, start width, end width, bulge)
LWVertex = tuple[float, float, float, float, float]


@dataclass(frozen=True)
class LWVerticesField(Field):
    """Inline vertex groups of a LWPOLYLINE; code 10 opens each vertex."""

    def codes(self) -> tuple[int, ...]:
        return (10, 20, 40, 41, 42)

    def write(self, writer: TagWriter, record: Any, config: CodecConfig) -> None:
        for x, y, start_width, end_width, bulge in self.value_of(record):
            writer.write_tag(10, x)
            writer.write_tag(20, y)
            if start_width or end_width:
                writer.write_tag(40, start_width)
                writer.write_tag(41, end_width)
            if bulge:
                writer.write_tag(42, bulge)

    def read(self, record: Any, tag: Tag, ctx: ReadContext) -> None:
        vertices = self.value_of(record)
        value = ctx.parse(tag)
        if tag.code == 10:
            vertices.append((value, 0.0, 0.0, 0.0, 0.0))
            return
        if not vertices:
            ctx.warn(f"group code {tag.code} found before the first vertex")
            vertices.append((0.0, 0.0, 0.0, 0.0, 0.0))
        vertex = list(vertices[-1])
        vertex[(20, 40, 41, 42).index(tag.code) + 1] = value
        vertices[-1] = tuple(vertex)


@dataclass(kw_only=True)
class LWPolyline(Entity):
    KIND: ClassVar[str] = "LWPOLYLINE"
    DXFTYPE: ClassVar[str] = "LWPOLYLINE"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R14
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbPolyline"),
        CountField(90, "vertices"),
        Field(70, "flag"),
        Field(43, "const_width", skip_default=True),
        Field(38, "elevation", skip_default=True),
        THICKNESS,
        LWVerticesField(10, "vertices"),
        EXTRUSION,
    )

    flag: int = 0
    const_width: float = 0.0
    vertices: list[LWVertex] = field(default_factory=list)

    @property
    def closed(self) -> bool:
        return bool(self.flag & POLYLINE_CLOSED)

    def points(self) -> list[tuple[float, float]]:
        return [(vertex[0], vertex[1]) for vertex in self.vertices]

    def append(self, x: float, y: float, start_width: float = 0.0, end_width: float = 0.0, bulge: float = 0.0) -> None:
        self.vertices.append((float(x), float(y), float(start_width), float(end_width), float(bulge)))

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            len(self.vertices) >= 2,
            f"{len(self.vertices)} vertices are too few for the {self.KIND} entity "
            f"with id-code: {self.id_code:x}",
        )
