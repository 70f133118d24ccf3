from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import IntEnum

from .diagnostics import Diagnostics, StderrDiagnostics


class DxfVersion(IntEnum):
    R10 = 10
    R11 = 11
    R12 = 12
    R13 = 13
    R14 = 14
    R2000 = 2000
    R2002 = 2002
    R2004 = 2004
    R2007 = 2007
    R2008 = 2008
    R2010 = 2010

    @property
    def acadver(self) -> str:
        return _VERSION_TO_ACADVER[self]

    @classmethod
    def from_acadver(cls, acadver: str) -> "DxfVersion":
        key = acadver.strip().upper()
        try:
            return ACADVER_TO_VERSION[key]
        except KeyError:
            raise ValueError(f"unsupported DXF version: {acadver}") from None

    @classmethod
    def parse(cls, value: "str | int | DxfVersion") -> "DxfVersion":
        if isinstance(value, DxfVersion):
            return value
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip().upper()
        if text.startswith("AC"):
            return cls.from_acadver(text)
        if text.startswith("R"):
            text = text[1:]
        try:
            return cls(int(text))
        except ValueError:
            raise ValueError(f"unsupported DXF version: {value}") from None


ACADVER_TO_VERSION: dict[str, DxfVersion] = {
    "AC1006": DxfVersion.R10,
    "AC1009": DxfVersion.R12,
    "AC1012": DxfVersion.R13,
    "AC1014": DxfVersion.R14,
    "AC1015": DxfVersion.R2000,
    "AC1018": DxfVersion.R2004,
    "AC1021": DxfVersion.R2007,
    "AC1024": DxfVersion.R2010,
}

_VERSION_TO_ACADVER: dict[DxfVersion, str] = {
    DxfVersion.R10: "AC1006",
    DxfVersion.R11: "AC1009",
    DxfVersion.R12: "AC1009",
    DxfVersion.R13: "AC1012",
    DxfVersion.R14: "AC1014",
    DxfVersion.R2000: "AC1015",
    DxfVersion.R2002: "AC1015",
    DxfVersion.R2004: "AC1018",
    DxfVersion.R2007: "AC1021",
    DxfVersion.R2008: "AC1021",
    DxfVersion.R2010: "AC1024",
}


@dataclass(frozen=True)
class CodecConfig:
    acad_version_number: DxfVersion = DxfVersion.R14
    flatland: bool = False
    debug_trace: bool = False
    diagnostics: Diagnostics = field(default_factory=StderrDiagnostics, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "acad_version_number", DxfVersion.parse(self.acad_version_number))

    @classmethod
    def for_version(cls, version: "str | int | DxfVersion", **kwargs) -> "CodecConfig":
        return cls(acad_version_number=DxfVersion.parse(version), **kwargs)

    @property
    def version(self) -> DxfVersion:
        return self.acad_version_number

    def replace(self, **changes) -> "CodecConfig":
        return dataclasses.replace(self, **changes)
