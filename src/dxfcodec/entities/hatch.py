from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from ..config import CodecConfig, DxfVersion
from ..tags import Tag, TagWriter
from .base import (
    EXTRUSION,
    ORIGIN,
    CountField,
    Entity,
    Field,
    Marker,
    Point2D,
    Point3D,
    PointField,
    PointListField,
    ReadContext,
    require,
)

PATH_EXTERNAL = 1
PATH_POLYLINE = 2
PATH_DERIVED = 4
PATH_TEXTBOX = 8
PATH_OUTERMOST = 16

EDGE_LINE = 1
EDGE_ARC = 2
EDGE_ELLIPSE = 3
EDGE_SPLINE = 4


@dataclass
class LineEdge:
    start: Point2D = (0.0, 0.0)
    end: Point2D = (0.0, 0.0)

    EDGE_TYPE: ClassVar[int] = EDGE_LINE


@dataclass
class ArcEdge:
    center: Point2D = (0.0, 0.0)
    radius: float = 1.0
    start_angle: float = 0.0
    end_angle: float = 360.0
    counter_clockwise: bool = True

    EDGE_TYPE: ClassVar[int] = EDGE_ARC


@dataclass
class EllipseEdge:
    center: Point2D = (0.0, 0.0)
    major_axis: Point2D = (1.0, 0.0)
    ratio: float = 1.0
    start_angle: float = 0.0
    end_angle: float = 360.0
    counter_clockwise: bool = True

    EDGE_TYPE: ClassVar[int] = EDGE_ELLIPSE


@dataclass
class SplineEdge:
    degree: int = 3
    rational: bool = False
    periodic: bool = False
    knots: list[float] = field(default_factory=list)
    control_points: list[Point2D] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)
    fit_points: list[Point2D] = field(default_factory=list)
    start_tangent: Point2D | None = None
    end_tangent: Point2D | None = None

    EDGE_TYPE: ClassVar[int] = EDGE_SPLINE


Edge = Union[LineEdge, ArcEdge, EllipseEdge, SplineEdge]


@dataclass
class BoundaryPath:
    """One hatch boundary loop: either a bulged polyline or a chain of edges."""

    flag: int = PATH_EXTERNAL
    vertices: list[tuple[float, float, float]] = field(default_factory=list)
    closed: bool = True
    edges: list[Edge] = field(default_factory=list)
    source_handles: list[str] = field(default_factory=list)

    @property
    def is_polyline(self) -> bool:
        return bool(self.flag & PATH_POLYLINE)


@dataclass
class PatternLine:
    angle: float = 0.0
    base_point: Point2D = (0.0, 0.0)
    offset: Point2D = (0.0, 0.0)
    dashes: list[float] = field(default_factory=list)


def _take_point(ctx: ReadContext, code: int) -> Point2D:
    x, y = ctx.take_point(code, dims=2)
    return (x, y)


def _write_point(writer: TagWriter, code: int, point: Point2D) -> None:
    writer.write_tag(code, point[0])
    writer.write_tag(code + 10, point[1])


def _read_edge(ctx: ReadContext, edge_type: int) -> Edge | None:
    if edge_type == EDGE_LINE:
        return LineEdge(start=_take_point(ctx, 10), end=_take_point(ctx, 11))
    if edge_type == EDGE_ARC:
        return ArcEdge(
            center=_take_point(ctx, 10),
            radius=ctx.take(40, 1.0),
            start_angle=ctx.take(50, 0.0),
            end_angle=ctx.take(51, 360.0),
            counter_clockwise=bool(ctx.take(73, 1)),
        )
    if edge_type == EDGE_ELLIPSE:
        return EllipseEdge(
            center=_take_point(ctx, 10),
            major_axis=_take_point(ctx, 11),
            ratio=ctx.take(40, 1.0),
            start_angle=ctx.take(50, 0.0),
            end_angle=ctx.take(51, 360.0),
            counter_clockwise=bool(ctx.take(73, 1)),
        )
    if edge_type == EDGE_SPLINE:
        edge = SplineEdge(
            degree=ctx.take(94, 3),
            rational=bool(ctx.take(73, 0)),
            periodic=bool(ctx.take(74, 0)),
        )
        knot_count = ctx.take(95, 0)
        control_count = ctx.take(96, 0)
        edge.knots = [ctx.take(40, 0.0) for _ in range(knot_count)]
        for _ in range(control_count):
            edge.control_points.append(_take_point(ctx, 10))
            if edge.rational:
                edge.weights.append(ctx.take(42, 1.0))
        if ctx.config.acad_version_number >= DxfVersion.R2010:
            fit_count = ctx.take(97, 0)
            edge.fit_points = [_take_point(ctx, 11) for _ in range(fit_count)]
            if fit_count:
                edge.start_tangent = _take_point(ctx, 12)
                edge.end_tangent = _take_point(ctx, 13)
        return edge
    ctx.warn(f"unknown hatch edge type {edge_type}")
    return None


def _write_edge(writer: TagWriter, edge: Edge, config: CodecConfig) -> None:
    writer.write_tag(72, edge.EDGE_TYPE)
    if isinstance(edge, LineEdge):
        _write_point(writer, 10, edge.start)
        _write_point(writer, 11, edge.end)
    elif isinstance(edge, ArcEdge):
        _write_point(writer, 10, edge.center)
        writer.write_tag(40, edge.radius)
        writer.write_tag(50, edge.start_angle)
        writer.write_tag(51, edge.end_angle)
        writer.write_tag(73, int(edge.counter_clockwise))
    elif isinstance(edge, EllipseEdge):
        _write_point(writer, 10, edge.center)
        _write_point(writer, 11, edge.major_axis)
        writer.write_tag(40, edge.ratio)
        writer.write_tag(50, edge.start_angle)
        writer.write_tag(51, edge.end_angle)
        writer.write_tag(73, int(edge.counter_clockwise))
    else:
        writer.write_tag(94, edge.degree)
        writer.write_tag(73, int(edge.rational))
        writer.write_tag(74, int(edge.periodic))
        writer.write_tag(95, len(edge.knots))
        writer.write_tag(96, len(edge.control_points))
        for knot in edge.knots:
            writer.write_tag(40, knot)
        for index, point in enumerate(edge.control_points):
            _write_point(writer, 10, point)
            if edge.rational:
                weight = edge.weights[index] if index < len(edge.weights) else 1.0
                writer.write_tag(42, weight)
        if config.acad_version_number >= DxfVersion.R2010:
            writer.write_tag(97, len(edge.fit_points))
            for point in edge.fit_points:
                _write_point(writer, 11, point)
            if edge.fit_points:
                _write_point(writer, 12, edge.start_tangent or (0.0, 0.0))
                _write_point(writer, 13, edge.end_tangent or (0.0, 0.0))


@dataclass(frozen=True)
class BoundaryPathsField(Field):
    """Group ``91`` opens the boundary path list; every path is read in one go."""

    def write(self, writer: TagWriter, record: Any, config: CodecConfig) -> None:
        paths = self.value_of(record)
        writer.write_tag(91, len(paths))
        for path in paths:
            writer.write_tag(92, path.flag)
            if path.is_polyline:
                has_bulge = any(bulge for _, _, bulge in path.vertices)
                writer.write_tag(72, int(has_bulge))
                writer.write_tag(73, int(path.closed))
                writer.write_tag(93, len(path.vertices))
                for x, y, bulge in path.vertices:
                    writer.write_tag(10, x)
                    writer.write_tag(20, y)
                    if has_bulge:
                        writer.write_tag(42, bulge)
            else:
                writer.write_tag(93, len(path.edges))
                for edge in path.edges:
                    _write_edge(writer, edge, config)
            writer.write_tag(97, len(path.source_handles))
            for handle in path.source_handles:
                writer.write_tag(330, handle)

    def read(self, record: Any, tag: Tag, ctx: ReadContext) -> None:
        paths = self.value_of(record)
        for _ in range(ctx.parse(tag)):
            flag = ctx.take(92)
            if flag is None:
                ctx.warn(f"HATCH boundary path {len(paths) + 1} has no path type flag")
                break
            path = BoundaryPath(flag=flag)
            if path.is_polyline:
                has_bulge = ctx.take(72, 0)
                path.closed = bool(ctx.take(73, 1))
                for _ in range(ctx.take(93, 0)):
                    x, y = _take_point(ctx, 10)
                    bulge = ctx.take(42, 0.0) if has_bulge else 0.0
                    path.vertices.append((x, y, bulge))
            else:
                for _ in range(ctx.take(93, 0)):
                    edge = _read_edge(ctx, ctx.take(72, 0))
                    if edge is None:
                        break
                    path.edges.append(edge)
            for _ in range(ctx.take(97, 0)):
                path.source_handles.append(ctx.take(330, ""))
            paths.append(path)


@dataclass(frozen=True)
class PatternLinesField(Field):
    def emits(self, record: Any, config: CodecConfig) -> bool:
        return not record.solid_fill

    def write(self, writer: TagWriter, record: Any, config: CodecConfig) -> None:
        lines = self.value_of(record)
        writer.write_tag(78, len(lines))
        for line in lines:
            writer.write_tag(53, line.angle)
            writer.write_tag(43, line.base_point[0])
            writer.write_tag(44, line.base_point[1])
            writer.write_tag(45, line.offset[0])
            writer.write_tag(46, line.offset[1])
            writer.write_tag(79, len(line.dashes))
            for dash in line.dashes:
                writer.write_tag(49, dash)

    def read(self, record: Any, tag: Tag, ctx: ReadContext) -> None:
        lines = self.value_of(record)
        for _ in range(ctx.parse(tag)):
            line = PatternLine(angle=ctx.take(53, 0.0))
            line.base_point = (ctx.take(43, 0.0), ctx.take(44, 0.0))
            line.offset = (ctx.take(45, 0.0), ctx.take(46, 0.0))
            line.dashes = [ctx.take(49, 0.0) for _ in range(ctx.take(79, 0))]
            lines.append(line)


@dataclass(frozen=True)
class SeedPointsField(Field):
    def write(self, writer: TagWriter, record: Any, config: CodecConfig) -> None:
        seeds = self.value_of(record)
        writer.write_tag(98, len(seeds))
        for seed in seeds:
            _write_point(writer, 10, seed)

    def read(self, record: Any, tag: Tag, ctx: ReadContext) -> None:
        seeds = self.value_of(record)
        for _ in range(ctx.parse(tag)):
            seeds.append(_take_point(ctx, 10))


def _patterned(record: Any, config: CodecConfig) -> bool:
    return not record.solid_fill


@dataclass(kw_only=True)
class Hatch(Entity):
    KIND: ClassVar[str] = "HATCH"
    DXFTYPE: ClassVar[str] = "HATCH"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R14
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbHatch"),
        PointField(10, "elevation_point"),
        EXTRUSION,
        Field(2, "pattern_name"),
        Field(70, "solid_fill"),
        Field(71, "associative"),
        BoundaryPathsField(91, "paths"),
        Field(75, "hatch_style"),
        Field(76, "pattern_type"),
        Field(52, "pattern_angle", when=_patterned),
        Field(41, "pattern_scale", when=_patterned),
        Field(77, "pattern_double", when=_patterned),
        PatternLinesField(78, "pattern_lines"),
        Field(47, "pixel_size", skip_default=True),
        SeedPointsField(98, "seed_points"),
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        **Entity.BOUNDS,
        "solid_fill": (0, 1),
        "associative": (0, 1),
        "hatch_style": (0, 2),
        "pattern_type": (0, 2),
        "pattern_double": (0, 1),
    }
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"pattern_name"}

    elevation_point: Point3D = ORIGIN
    pattern_name: str = "SOLID"
    solid_fill: int = 1
    associative: int = 0
    paths: list[BoundaryPath] = field(default_factory=list)
    hatch_style: int = 0
    pattern_type: int = 1
    pattern_angle: float = 0.0
    pattern_scale: float = 1.0
    pattern_double: int = 0
    pattern_lines: list[PatternLine] = field(default_factory=list)
    pixel_size: float = 0.0
    seed_points: list[Point2D] = field(default_factory=list)

    def add_polyline_path(self, points, closed: bool = True, flag: int = PATH_EXTERNAL) -> BoundaryPath:
        """Append a polyline boundary from ``(x, y)`` or ``(x, y, bulge)`` points."""
        vertices = [(float(p[0]), float(p[1]), float(p[2]) if len(p) > 2 else 0.0) for p in points]
        path = BoundaryPath(flag=flag | PATH_POLYLINE, vertices=vertices, closed=closed)
        self.paths.append(path)
        return path

    def add_edge_path(self, edges, flag: int = PATH_EXTERNAL) -> BoundaryPath:
        path = BoundaryPath(flag=flag & ~PATH_POLYLINE, edges=list(edges))
        self.paths.append(path)
        return path

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            bool(self.paths),
            f"no boundary paths for the {self.KIND} entity with id-code: {self.id_code:x}",
        )
        for path in self.paths:
            if path.is_polyline:
                require(
                    len(path.vertices) >= 2,
                    f"polyline boundary with {len(path.vertices)} vertices in the {self.KIND} "
                    f"entity with id-code: {self.id_code:x}",
                )
            else:
                require(
                    bool(path.edges),
                    f"edge boundary without edges in the {self.KIND} entity with id-code: {self.id_code:x}",
                )


@dataclass(kw_only=True)
class Image(Entity):
    KIND: ClassVar[str] = "IMAGE"
    DXFTYPE: ClassVar[str] = "IMAGE"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R14
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbRasterImage"),
        Field(90, "class_version"),
        PointField(10, "insertion_point"),
        PointField(11, "u_vector"),
        PointField(12, "v_vector"),
        PointField(13, "image_size", dims=2),
        Field(340, "image_def_handle"),
        Field(70, "display_properties"),
        Field(280, "clipping"),
        Field(281, "brightness"),
        Field(282, "contrast"),
        Field(283, "fade"),
        Field(360, "image_def_reactor_handle", skip_default=True),
        Field(71, "clip_boundary_type"),
        CountField(91, "clip_boundary"),
        PointListField(14, "clip_boundary", dims=2),
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        **Entity.BOUNDS,
        "clipping": (0, 1),
        "brightness": (0, 100),
        "contrast": (0, 100),
        "fade": (0, 100),
        "clip_boundary_type": (1, 2),
    }
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"image_def_handle", "image_def_reactor_handle"}

    class_version: int = 0
    insertion_point: Point3D = ORIGIN
    u_vector: Point3D = (1.0, 0.0, 0.0)
    v_vector: Point3D = (0.0, 1.0, 0.0)
    image_size: Point2D = (1.0, 1.0)
    image_def_handle: str = ""
    display_properties: int = 7
    clipping: int = 0
    brightness: int = 50
    contrast: int = 50
    fade: int = 0
    image_def_reactor_handle: str = ""
    clip_boundary_type: int = 1
    clip_boundary: list[Point2D] = field(default_factory=list)
