from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from ..config import CodecConfig
from ..tags import TagWriter
from .base import EXTRUSION, ORIGIN, Entity, Field, Marker, Point3D, PointField, ReadContext, require, write_record
from .polyline import Seqend, read_children
from .text import Attrib


@dataclass(kw_only=True)
class Insert(Entity):
    """A block reference; with ``attributes_follow`` set it owns ATTRIB records and a SEQEND."""

    KIND: ClassVar[str] = "INSERT"
    DXFTYPE: ClassVar[str] = "INSERT"
    SCHEMA: ClassVar[tuple] = (
        Marker("AcDbBlockReference", accepts=("AcDbMInsertBlock",)),
        Field(66, "attributes_follow", skip_default=True),
        Field(2, "block_name"),
        PointField(10, "insertion_point"),
        Field(41, "x_scale", skip_default=True),
        Field(42, "y_scale", skip_default=True),
        Field(43, "z_scale", skip_default=True),
        Field(50, "rotation", skip_default=True),
        Field(70, "column_count", skip_default=True),
        Field(71, "row_count", skip_default=True),
        Field(44, "column_spacing", skip_default=True),
        Field(45, "row_spacing", skip_default=True),
        EXTRUSION,
    )
    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {**Entity.BOUNDS, "attributes_follow": (0, 1)}
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"block_name"}

    attributes_follow: int = 0
    block_name: str = ""
    insertion_point: Point3D = ORIGIN
    x_scale: float = 1.0
    y_scale: float = 1.0
    z_scale: float = 1.0
    rotation: float = 0.0
    column_count: int = 1
    row_count: int = 1
    column_spacing: float = 0.0
    row_spacing: float = 0.0
    attribs: list[Attrib] = field(default_factory=list)
    seqend: Seqend | None = None

    def add_attrib(self, tag: str, text: str, **kwargs) -> Attrib:
        attrib = Attrib(tag=tag, text=text, layer=self.layer, **kwargs)
        self.attribs.append(attrib)
        self.attributes_follow = 1
        return attrib

    def get_attrib(self, tag: str) -> Attrib | None:
        for attrib in self.attribs:
            if attrib.tag == tag:
                return attrib
        return None

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.block_name != "",
            f"empty block name for the {self.KIND} entity with id-code: {self.id_code:x}",
        )
        require(
            self.attributes_follow == 1 or not self.attribs,
            f"{len(self.attribs)} attributes without the attributes follow flag for the "
            f"{self.KIND} entity with id-code: {self.id_code:x}",
        )
        for attrib in self.attribs:
            attrib.validate_for_write(config)

    def read_followers(self, ctx: ReadContext) -> None:
        if self.attributes_follow:
            self.attribs, self.seqend = read_children(ctx, "ATTRIB", Attrib)

    def write_followers(self, writer: TagWriter, config: CodecConfig) -> None:
        if not self.attributes_follow:
            return
        for attrib in self.attribs:
            write_record(writer, attrib, config)
        seqend = self.seqend
        if seqend is None:
            seqend = Seqend(layer=self.layer, paperspace=self.paperspace)
        write_record(writer, seqend, config)


@dataclass(kw_only=True)
class EndBlk(Entity):
    KIND: ClassVar[str] = "ENDBLK"
    DXFTYPE: ClassVar[str] = "ENDBLK"
    SCHEMA: ClassVar[tuple] = (Marker("AcDbBlockEnd"),)
