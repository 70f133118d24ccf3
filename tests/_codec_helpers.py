from __future__ import annotations

import io

from dxfcodec import CodecConfig, CollectingDiagnostics, TagReader, TagWriter
from dxfcodec.entities import DxfRecord, class_for_name, read_record, write_record


def make_config(version: str = "R14", **kwargs) -> CodecConfig:
    kwargs.setdefault("diagnostics", CollectingDiagnostics())
    return CodecConfig.for_version(version, **kwargs)


def emit(record: DxfRecord, config: CodecConfig | str = "R14") -> str:
    if isinstance(config, str):
        config = make_config(config)
    stream = io.StringIO()
    write_record(TagWriter(stream), record, config)
    return stream.getvalue()


def reparse(text: str, config: CodecConfig | str = "R14") -> DxfRecord:
    """Read the first record of ``text`` with the codec chosen by its ``0`` tag."""
    if isinstance(config, str):
        config = make_config(config)
    reader = TagReader(io.StringIO(text))
    marker = reader.next_pair()
    assert marker is not None and marker.code == 0
    cls = class_for_name(marker.value)
    assert cls is not None, marker.value
    return read_record(reader, cls(), config)


def pairs(text: str) -> list[tuple[int, str]]:
    lines = text.splitlines()
    return [(int(lines[i]), lines[i + 1]) for i in range(0, len(lines) - 1, 2)]


def values_of(text: str, code: int) -> list[str]:
    return [value for tag_code, value in pairs(text) if tag_code == code]
