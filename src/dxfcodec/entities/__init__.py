from __future__ import annotations

from .base import (
    COLOR_BYBLOCK,
    COLOR_BYLAYER,
    DEFAULT_LAYER,
    DEFAULT_LINETYPE,
    MODELSPACE,
    PAPERSPACE,
    DxfObject,
    DxfRecord,
    Entity,
    read_record,
    write_record,
)
from .block import EndBlk, Insert
from .curves import Arc, Circle, Donut, Ellipse, Helix, Spline
from .dimension import Dimension, Leader, MLeader, Tolerance
from .hatch import (
    ArcEdge,
    BoundaryPath,
    EllipseEdge,
    Hatch,
    Image,
    LineEdge,
    PatternLine,
    SplineEdge,
)
from .lines import Line, Line3d, Point, Ray, XLine
from .modeler import Body, ModelerGeometry, Region, Solid3d
from .objects import Dictionary, ObjectPtr
from .planar import Face3d, Shape, Solid, Trace
from .polyline import LWPolyline, Polyline, Seqend, Vertex
from .text import AttDef, Attrib, MText, Text

RECORD_CLASSES: tuple[type[DxfRecord], ...] = (
    Line,
    Line3d,
    Point,
    Circle,
    Arc,
    Ellipse,
    Spline,
    Helix,
    Polyline,
    Vertex,
    Seqend,
    LWPolyline,
    Trace,
    Solid,
    Face3d,
    Shape,
    Text,
    AttDef,
    Attrib,
    MText,
    Insert,
    EndBlk,
    Dimension,
    Leader,
    MLeader,
    Tolerance,
    Hatch,
    Image,
    Ray,
    XLine,
    Solid3d,
    Body,
    Region,
    Donut,
    Dictionary,
    ObjectPtr,
)

_BY_KIND: dict[str, type[DxfRecord]] = {cls.KIND: cls for cls in RECORD_CLASSES}

# Wire names dispatched on read. DONUT has none of its own; MLEADER is
# accepted under both spellings.
_BY_NAME: dict[str, type[DxfRecord]] = {
    cls.DXFTYPE: cls for cls in RECORD_CLASSES if cls is not Donut
}
_BY_NAME["MLEADER"] = MLeader


def class_for_name(name: str) -> type[DxfRecord] | None:
    """Codec class for the entity name found on a ``0`` tag, or ``None``."""
    return _BY_NAME.get(name.strip().upper())


def class_for_kind(kind: str) -> type[DxfRecord]:
    try:
        return _BY_KIND[kind.upper()]
    except KeyError:
        raise ValueError(f"unknown entity kind: {kind}") from None


def new_entity(kind: str, **fields) -> DxfRecord:
    """Create a record of ``kind`` initialized to its defaults."""
    return class_for_kind(kind)(**fields)


def supported_kinds() -> list[str]:
    return sorted(_BY_KIND)


__all__ = [
    "COLOR_BYBLOCK",
    "COLOR_BYLAYER",
    "DEFAULT_LAYER",
    "DEFAULT_LINETYPE",
    "MODELSPACE",
    "PAPERSPACE",
    "RECORD_CLASSES",
    "Arc",
    "ArcEdge",
    "AttDef",
    "Attrib",
    "Body",
    "BoundaryPath",
    "Circle",
    "Dictionary",
    "Dimension",
    "Donut",
    "DxfObject",
    "DxfRecord",
    "Ellipse",
    "EllipseEdge",
    "EndBlk",
    "Entity",
    "Face3d",
    "Hatch",
    "Helix",
    "Image",
    "Insert",
    "LWPolyline",
    "Leader",
    "Line",
    "Line3d",
    "LineEdge",
    "MLeader",
    "MText",
    "ModelerGeometry",
    "ObjectPtr",
    "PatternLine",
    "Point",
    "Polyline",
    "Ray",
    "Region",
    "Seqend",
    "Shape",
    "Solid",
    "Solid3d",
    "Spline",
    "SplineEdge",
    "Text",
    "Tolerance",
    "Trace",
    "Vertex",
    "XLine",
    "class_for_kind",
    "class_for_name",
    "new_entity",
    "read_record",
    "supported_kinds",
    "write_record",
]
