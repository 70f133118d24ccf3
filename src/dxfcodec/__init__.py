from typing import Sequence

from .config import CodecConfig, DxfVersion
from .convert import ConvertResult, to_ezdxf
from .diagnostics import (
    CollectingDiagnostics,
    Diagnostic,
    Diagnostics,
    LoggingDiagnostics,
    StderrDiagnostics,
)
from .drawing import Drawing, EntityList, free_list, read, read_entity_by_name, readfile
from .entities import DxfObject, DxfRecord, Entity, new_entity, read_record, write_record
from .errors import (
    DxfError,
    DxfIOError,
    NullArgError,
    ParseError,
    RangeError,
    ReadError,
    ValidationError,
    WriteError,
)
from .tags import Tag, TagReader, TagWriter

__all__ = [
    "read",
    "readfile",
    "Drawing",
    "EntityList",
    "free_list",
    "read_entity_by_name",
    "new_entity",
    "read_record",
    "write_record",
    "DxfRecord",
    "DxfObject",
    "Entity",
    "CodecConfig",
    "DxfVersion",
    "Diagnostic",
    "Diagnostics",
    "StderrDiagnostics",
    "LoggingDiagnostics",
    "CollectingDiagnostics",
    "Tag",
    "TagReader",
    "TagWriter",
    "DxfError",
    "DxfIOError",
    "NullArgError",
    "ParseError",
    "RangeError",
    "ReadError",
    "ValidationError",
    "WriteError",
    "to_ezdxf",
    "ConvertResult",
]


def main(argv: Sequence[str] | None = None) -> int:
    from dxfcodec.cli import main as cli_main

    return cli_main(argv)
