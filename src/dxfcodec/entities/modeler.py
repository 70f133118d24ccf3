from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from ..config import CodecConfig, DxfVersion
from .base import Entity, Field, ListField, Marker, require

_MODELER_BODY: tuple = (
    Field(70, "modeler_format_version_number", since=DxfVersion.R13),
    ListField(1, "proprietary_data"),
    ListField(3, "additional_proprietary_data"),
)

MODELER_SCHEMA: tuple = (Marker("AcDbModelerGeometry"),) + _MODELER_BODY


@dataclass(kw_only=True)
class ModelerGeometry(Entity):
    """Common layout of ACIS based entities.

    The proprietary payload lines are opaque to the codec and kept verbatim,
    including any leading or trailing blanks.
    """

    MIN_VERSION: ClassVar[DxfVersion] = DxfVersion.R13
    SCHEMA: ClassVar[tuple] = MODELER_SCHEMA

    modeler_format_version_number: int = 1
    proprietary_data: list[str] = field(default_factory=list)
    additional_proprietary_data: list[str] = field(default_factory=list)

    def validate_for_write(self, config: CodecConfig) -> None:
        require(
            self.modeler_format_version_number == 1,
            f"modeler format version number {self.modeler_format_version_number} is not 1 "
            f"for the {self.KIND} entity with id-code: {self.id_code:x}",
        )

    def acis_text(self) -> str:
        return "\n".join(self.proprietary_data + self.additional_proprietary_data)


@dataclass(kw_only=True)
class Solid3d(ModelerGeometry):
    KIND: ClassVar[str] = "3DSOLID"
    DXFTYPE: ClassVar[str] = "3DSOLID"
    SCHEMA: ClassVar[tuple] = (
        (Marker("AcDbModelerGeometry"), Marker("AcDb3dSolid", since=DxfVersion.R2008))
        + _MODELER_BODY
        + (Field(350, "history", since=DxfVersion.R2008, skip_default=True),)
    )
    NOT_NULL: ClassVar[frozenset[str]] = Entity.NOT_NULL | {"history"}

    history: str = ""


@dataclass(kw_only=True)
class Body(ModelerGeometry):
    KIND: ClassVar[str] = "BODY"
    DXFTYPE: ClassVar[str] = "BODY"


@dataclass(kw_only=True)
class Region(ModelerGeometry):
    KIND: ClassVar[str] = "REGION"
    DXFTYPE: ClassVar[str] = "REGION"
