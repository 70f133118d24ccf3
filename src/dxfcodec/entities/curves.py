from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar

from ..config import CodecConfig, DxfVersion
from ..tags import Tag, TagWriter
from .base import (
    DEFAULT_EXTRUSION,
    EXTRUSION,
    ORIGIN,
    THICKNESS,
    CountField,
    Entity,
    Field,
    ListField,
    Marker,
    Point3D,
    PointField,
    PointListField,
    ReadContext,
    require,
    write_record,
)
from .polyline import Polyline, Seqend, Vertex

SPLINE_CLOSED = 1
SPLINE_PERIODIC = 2
SPLINE_RATIONAL = 4
SPLINE_PLANAR = 8
SPLINE_LINEAR = 16


@dataclass(kw_only=True)
class Circle(Entity):
    KIND: ClassVar[str] = "CIRCLE"
    DXFTYPE: ClassVar[str] = "CIRCLE"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbCircle"),
        THICKNESS,
        PointField(10, "center"),
        Field(40, "radius"),
        EXTRUSION,
    )

    center: Point3D = ORIGIN
    radius: float = 1.0

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.radius > 0.0,
            f"radius must be positive for the {self.KIND} entity with id-code: {self.id_code:x}",
        )

    def area(self) -> float:
        return math.pi * self.radius * self.radius


@dataclass(kw_only=True)
class Arc(Circle):
    KIND: ClassVar[str] = "ARC"
    DXFTYPE: ClassVar[str] = "ARC"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbCircle"),
        THICKNESS,
        PointField(10, "center"),
        Field(40, "radius"),
        EXTRUSION,
        Marker("AcDbArc"),
        Field(50, "start_angle"),
        Field(51, "end_angle"),
    )

    start_angle: float = 0.0
    end_angle: float = 360.0

    def span(self) -> float:
        """Included angle in degrees, counter-clockwise from start to end."""
        return (self.end_angle - self.start_angle) % 360.0 or 360.0


@dataclass(kw_only=True)
class Ellipse(Entity):
    KIND: ClassVar[str] = "ELLIPSE"
    DXFTYPE: ClassVar[str] = "ELLIPSE"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R13
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbEllipse"),
        PointField(10, "center"),
        PointField(11, "major_axis"),
        EXTRUSION,
        Field(40, "ratio"),
        Field(41, "start_param"),
        Field(42, "end_param"),
    )

    center: Point3D = ORIGIN
    major_axis: Point3D = (1.0, 0.0, 0.0)
    ratio: float = 1.0
    start_param: float = 0.0
    end_param: float = 2.0 * math.pi

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            0.0 < self.ratio <= 1.0,
            f"minor to major axis ratio {self.ratio} out of (0, 1] for the "
            f"{self.KIND} entity with id-code: {self.id_code:x}",
        )
        require(
            any(component != 0.0 for component in self.major_axis),
            f"zero major axis for the {self.KIND} entity with id-code: {self.id_code:x}",
        )


def _has_fit_points(record, config: CodecConfig) -> bool:
    return bool(record.fit_points)


SPLINE_SCHEMA: tuple = (
    Marker("AcDbSpline"),
    EXTRUSION,
    Field(70, "flag"),
    Field(71, "degree"),
    CountField(72, "knots"),
    CountField(73, "control_points"),
    CountField(74, "fit_points"),
    Field(42, "knot_tolerance"),
    Field(43, "control_point_tolerance"),
    Field(44, "fit_tolerance", when=_has_fit_points),
    PointField(12, "start_tangent"),
    PointField(13, "end_tangent"),
    ListField(40, "knots"),
    ListField(41, "weights"),
    PointListField(10, "control_points"),
    PointListField(11, "fit_points"),
)


@dataclass(kw_only=True)
class Spline(Entity):
    KIND: ClassVar[str] = "SPLINE"
    DXFTYPE: ClassVar[str] = "SPLINE"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R13
    SCHEMA: ClassVar[tuple] = SPLINE_SCHEMA

    flag: int = 0
    degree: int = 3
    knot_tolerance: float = 0.0000001
    control_point_tolerance: float = 0.000001
    fit_tolerance: float = 0.0000000001
    start_tangent: Point3D | None = None
    end_tangent: Point3D | None = None
    knots: list[float] = field(default_factory=list)
    weights: list[float] = field(default_factory=list)
    control_points: list[Point3D] = field(default_factory=list)
    fit_points: list[Point3D] = field(default_factory=list)

    @property
    def number_of_knots(self) -> int:
        return len(self.knots)

    @property
    def number_of_control_points(self) -> int:
        return len(self.control_points)

    @property
    def number_of_fit_points(self) -> int:
        return len(self.fit_points)

    @property
    def closed(self) -> bool:
        return bool(self.flag & SPLINE_CLOSED)

    @property
    def periodic(self) -> bool:
        return bool(self.flag & SPLINE_PERIODIC)

    @property
    def rational(self) -> bool:
        return bool(self.flag & SPLINE_RATIONAL)

    @property
    def planar(self) -> bool:
        return bool(self.flag & SPLINE_PLANAR)

    @property
    def linear(self) -> bool:
        return bool(self.flag & SPLINE_LINEAR)

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.degree >= 1,
            f"degree {self.degree} is invalid for the {self.KIND} entity with id-code: {self.id_code:x}",
        )
        require(
            bool(self.control_points) or bool(self.fit_points),
            f"neither control points nor fit points for the {self.KIND} entity "
            f"with id-code: {self.id_code:x}",
        )
        if self.weights:
            require(
                len(self.weights) == len(self.control_points),
                f"{len(self.weights)} weights for {len(self.control_points)} control points "
                f"in the {self.KIND} entity with id-code: {self.id_code:x}",
            )


HELIX_SCHEMA: tuple = (
    Marker("AcDbHelix"),
    Field(90, "major_release_number"),
    Field(91, "maintenance_release_number"),
    PointField(10, "axis_base_point"),
    PointField(11, "start_point"),
    PointField(12, "axis_vector"),
    Field(40, "helix_radius"),
    Field(41, "number_of_turns"),
    Field(42, "turn_height"),
    Field(290, "handedness"),
    Field(280, "constrain"),
)

_HELIX_FIELDS = {code: item for item in HELIX_SCHEMA for code in item.codes()}


@dataclass(kw_only=True)
class Helix(Spline):
    """A SPLINE carrying helix parameters after its ``AcDbHelix`` marker."""

    KIND: ClassVar[str] = "HELIX"
    DXFTYPE: ClassVar[str] = "HELIX"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R2007
    SCHEMA: ClassVar[tuple] = SPLINE_SCHEMA + HELIX_SCHEMA
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        **Entity.BOUNDS,
        "constrain": (0, 2),
    }

    major_release_number: int = 29
    maintenance_release_number: int = 63
    axis_base_point: Point3D = ORIGIN
    start_point: Point3D = (1.0, 0.0, 0.0)
    axis_vector: Point3D = DEFAULT_EXTRUSION
    helix_radius: float = 1.0
    number_of_turns: float = 3.0
    turn_height: float = 1.0
    handedness: bool = True
    constrain: int = 0

    def read_special(self, tag: Tag, ctx: ReadContext) -> bool:
        if ctx.marker != "AcDbHelix":
            return False
        item = _HELIX_FIELDS.get(tag.code)
        if item is None:
            return False
        item.read(self, tag, ctx)
        return True


@dataclass(kw_only=True)
class Donut(Entity):
    """A filled ring written as a closed two-vertex wide POLYLINE.

    There is no DONUT type in DXF, so these are never produced by reading.
    """

    KIND: ClassVar[str] = "DONUT"
    DXFTYPE: ClassVar[str] = "POLYLINE"

    center: Point3D = ORIGIN
    outside_diameter: float = 1.0
    inside_diameter: float = 0.5

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.inside_diameter >= 0.0,
            f"negative inside diameter for the {self.KIND} entity with id-code: {self.id_code:x}",
        )
        require(
            self.outside_diameter > self.inside_diameter,
            f"outside diameter {self.outside_diameter} is not larger than inside diameter "
            f"{self.inside_diameter} for the {self.KIND} entity with id-code: {self.id_code:x}",
        )

    def to_polyline(self, writer: TagWriter | None = None) -> Polyline:
        """Build the equivalent POLYLINE; handles come from ``writer`` when this donut has one."""
        width = (self.outside_diameter - self.inside_diameter) / 2.0
        radius = (self.outside_diameter + self.inside_diameter) / 4.0
        x, y, z = self.center
        common = dict(
            layer=self.layer,
            linetype=self.linetype,
            color=self.color,
            paperspace=self.paperspace,
        )

        def next_id() -> int:
            if self.id_code == -1 or writer is None:
                return -1
            return writer.next_id_code()

        polyline = Polyline(
            id_code=self.id_code,
            base_point=(0.0, 0.0, z),
            flag=1,
            start_width=width,
            end_width=width,
            thickness=self.thickness,
            extrusion=self.extrusion,
            **common,
        )
        for dx in (-radius, radius):
            polyline.vertices.append(
                Vertex(
                    id_code=next_id(),
                    location=(x + dx, y, z),
                    start_width=width,
                    end_width=width,
                    bulge=1.0,
                    **common,
                )
            )
        polyline.seqend = Seqend(id_code=next_id(), **common)
        return polyline

    def write_header(self, writer: TagWriter, config: CodecConfig) -> None:
        pass

    def write_body(self, writer: TagWriter, config: CodecConfig) -> None:
        if self.id_code != -1:
            writer.last_id_code = max(writer.last_id_code, self.id_code)
        write_record(writer, self.to_polyline(writer), config)

    def write_xdata(self, writer: TagWriter, config: CodecConfig) -> None:
        pass
