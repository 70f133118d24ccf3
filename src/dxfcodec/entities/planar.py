from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ..config import CodecConfig
from .base import EXTRUSION, ORIGIN, THICKNESS, Entity, Field, Marker, Point3D, PointField, require

_CORNERS = (
    PointField(10, "first_corner"),
    PointField(11, "second_corner"),
    PointField(12, "third_corner"),
    PointField(13, "fourth_corner"),
)


@dataclass(kw_only=True)
class Trace(Entity):
    KIND: ClassVar[str] = "TRACE"
    DXFTYPE: ClassVar[str] = "TRACE"
    SCHEMA: ClassVar[tuple] = (Marker("AcDbTrace"), THICKNESS) + _CORNERS + (EXTRUSION,)

    first_corner: Point3D = ORIGIN
    second_corner: Point3D = ORIGIN
    third_corner: Point3D = ORIGIN
    fourth_corner: Point3D = ORIGIN

    def corners(self) -> list[Point3D]:
        return [self.first_corner, self.second_corner, self.third_corner, self.fourth_corner]

    @property
    def is_triangle(self) -> bool:
        return tuple(self.third_corner) == tuple(self.fourth_corner)


@dataclass(kw_only=True)
class Solid(Trace):
    """A filled quadrilateral; the fourth corner repeats the third for a triangle."""

    KIND: ClassVar[str] = "SOLID"
    DXFTYPE: ClassVar[str] = "SOLID"


@dataclass(kw_only=True)
class Face3d(Trace):
    KIND: ClassVar[str] = "3DFACE"
    DXFTYPE: ClassVar[str] = "3DFACE"
    SCHEMA: ClassVar[tuple] = (Marker("AcDbFace"),) + _CORNERS + (
        Field(70, "invisible_edges", skip_default=True),
    )

    invisible_edges: int = 0

    def is_edge_visible(self, index: int) -> bool:
        return not self.invisible_edges & (1 << index)


@dataclass(kw_only=True)
class Shape(Entity):
    KIND: ClassVar[str] = "SHAPE"
    DXFTYPE: ClassVar[str] = "SHAPE"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbShape"),
        THICKNESS,
        PointField(10, "insertion_point"),
        Field(40, "size"),
        Field(2, "name"),
        Field(50, "rotation", skip_default=True),
        Field(41, "relative_x_scale", skip_default=True),
        Field(51, "oblique_angle", skip_default=True),
        EXTRUSION,
    )
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"name"}

    insertion_point: Point3D = ORIGIN
    size: float = 1.0
    name: str = ""
    rotation: float = 0.0
    relative_x_scale: float = 1.0
    oblique_angle: float = 0.0

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.name != "",
            f"empty shape name for the {self.KIND} entity with id-code: {self.id_code:x}",
        )
