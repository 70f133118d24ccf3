from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar

from ..config import CodecConfig, DxfVersion
from .base import EXTRUSION, ORIGIN, THICKNESS, Entity, Field, Marker, Point3D, PointField, require


@dataclass(kw_only=True)
class Line(Entity):
    KIND: ClassVar[str] = "LINE"
    DXFTYPE: ClassVar[str] = "LINE"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbLine"),
        THICKNESS,
        PointField(10, "start"),
        PointField(11, "end"),
        EXTRUSION,
    )

    start: Point3D = ORIGIN
    end: Point3D = ORIGIN

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            tuple(self.start) != tuple(self.end),
            f"start point and end point are identical for the {self.KIND} entity "
            f"with id-code: {self.id_code:x}",
        )

    def length(self) -> float:
        return math.dist(self.start, self.end)

    def midpoint(self) -> Point3D:
        return tuple((a + b) / 2.0 for a, b in zip(self.start, self.end))


@dataclass(kw_only=True)
class Line3d(Line):
    """The pre-R12 spelling of LINE; written as ``LINE`` from R12 on."""

    KIND: ClassVar[str] = "3DLINE"
    DXFTYPE: ClassVar[str] = "3DLINE"

    def wire_name(self, config: CodecConfig) -> str:
        if config.acad_version_number > DxfVersion.R11:
            return "LINE"
        return self.DXFTYPE


@dataclass(kw_only=True)
class Point(Entity):
    KIND: ClassVar[str] = "POINT"
    DXFTYPE: ClassVar[str] = "POINT"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbPoint"),
        PointField(10, "location"),
        THICKNESS,
        EXTRUSION,
        Field(50, "x_axis_angle", since=DxfVersion.R13, skip_default=True),
    )

    location: Point3D = ORIGIN
    x_axis_angle: float = 0.0


@dataclass(kw_only=True)
class Ray(Entity):
    KIND: ClassVar[str] = "RAY"
    DXFTYPE: ClassVar[str] = "RAY"
    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R13
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbRay"),
        PointField(10, "start"),
        PointField(11, "unit_vector"),
    )

    start: Point3D = ORIGIN
    unit_vector: Point3D = (1.0, 0.0, 0.0)

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            any(component != 0.0 for component in self.unit_vector),
            f"zero direction vector for the {self.KIND} entity with id-code: {self.id_code:x}",
        )


@dataclass(kw_only=True)
class XLine(Ray):
    KIND: ClassVar[str] = "XLINE"
    DXFTYPE: ClassVar[str] = "XLINE"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbXline"),
        PointField(10, "start"),
        PointField(11, "unit_vector"),
    )
