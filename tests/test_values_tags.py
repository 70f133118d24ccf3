from __future__ import annotations

import io
from pathlib import Path

import pytest

from dxfcodec import DxfIOError, ParseError, ReadError, TagReader, TagWriter
from dxfcodec.values import (
    ValueKind,
    format_value,
    is_valid_code,
    parse_value,
    value_kind,
)


@pytest.mark.parametrize(
    ("code", "kind"),
    [
        (0, ValueKind.STRING),
        (5, ValueKind.HANDLE),
        (8, ValueKind.STRING),
        (10, ValueKind.DOUBLE),
        (62, ValueKind.INT16),
        (90, ValueKind.INT32),
        (105, ValueKind.HANDLE),
        (160, ValueKind.INT64),
        (280, ValueKind.INT8),
        (290, ValueKind.BOOL),
        (310, ValueKind.BINARY),
        (330, ValueKind.HANDLE),
        (370, ValueKind.INT16),
        (420, ValueKind.INT32),
        (999, ValueKind.STRING),
        (1005, ValueKind.HANDLE),
        (1040, ValueKind.DOUBLE),
        (1071, ValueKind.INT32),
    ],
)
def test_value_kind_partitions_group_codes(code: int, kind: ValueKind) -> None:
    assert value_kind(code) is kind


def test_is_valid_code_bounds() -> None:
    assert is_valid_code(0)
    assert is_valid_code(1071)
    assert not is_valid_code(1072)
    assert not is_valid_code(-1)


def test_parse_value_converts_by_code() -> None:
    assert parse_value(5, "5A") == 0x5A
    assert parse_value(330, " 1F ") == "1F"
    assert parse_value(10, " 1.5") == 1.5
    assert parse_value(70, "  3") == 3
    assert parse_value(290, "1") is True
    assert parse_value(1, "  keep blanks ") == "  keep blanks "
    assert parse_value(310, "0A1B") == "0A1B"


@pytest.mark.parametrize(
    ("code", "text"),
    [
        (70, "abc"),
        (70, "70000"),
        (280, "300"),
        (10, "nan"),
        (10, "one"),
        (290, "2"),
        (5, "xyz"),
        (310, "ABC"),
    ],
)
def test_parse_value_rejects_malformed_text(code: int, text: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_value(code, text, line=12)

    assert excinfo.value.code == code
    assert excinfo.value.line == 12
    assert excinfo.value.text == text
    assert "line 12" in str(excinfo.value)


def test_format_value_uses_fixed_point_doubles_and_hex_handles() -> None:
    assert format_value(10, 0.0) == "0.000000"
    assert format_value(11, 10.0) == "10.000000"
    assert format_value(40, -2.5) == "-2.500000"
    assert format_value(5, 0x5A) == "5a"
    assert format_value(330, "1F") == "1F"
    assert format_value(290, True) == "1"
    assert format_value(70, 3) == "3"
    assert format_value(1, None) == ""


def test_format_value_keeps_tiny_doubles_readable() -> None:
    text = format_value(42, 1e-10)

    assert float(text) == 1e-10


def test_tag_writer_right_aligns_codes() -> None:
    stream = io.StringIO()
    writer = TagWriter(stream)

    writer.write_pair(0, "LINE")
    writer.write_tag(10, 1.0)
    writer.write_tag(1071, 7)

    assert stream.getvalue() == "  0\nLINE\n 10\n1.000000\n1071\n7\n"


def test_tag_writer_tracks_the_largest_handle() -> None:
    writer = TagWriter(io.StringIO())

    writer.write_tag(5, 0x20)
    writer.write_tag(5, 0x10)
    writer.write_tag(330, "FF")

    assert writer.last_id_code == 0x20
    assert writer.next_id_code() == 0x21
    assert writer.next_id_code() == 0x22


def test_tag_writer_write_point_uses_axis_offsets() -> None:
    stream = io.StringIO()
    TagWriter(stream).write_point(12, (1.0, 2.0, 3.0))

    assert stream.getvalue() == " 12\n1.000000\n 22\n2.000000\n 32\n3.000000\n"


def test_tag_reader_reads_pairs_and_counts_lines() -> None:
    reader = TagReader(io.StringIO("  0\r\nLINE\r\n  8\r\n  layer one \r\n 10\r\n 1.5  \r\n"))

    first = reader.next_pair()
    second = reader.next_pair()
    third = reader.next_pair()

    assert first is not None and first.is_marker("LINE")
    assert second is not None and second.code == 8 and second.value == "  layer one"
    assert third is not None and third.code == 10 and float(third.value) == 1.5
    assert reader.line_number == 6
    assert reader.next_pair() is None


def test_tag_reader_peek_unread_and_skip() -> None:
    reader = TagReader(io.StringIO("  8\nA\n 62\n1\n 70\n0\n  0\nENDSEC\n"))

    peeked = reader.peek()
    assert peeked is not None and peeked.code == 8
    assert reader.next_pair() == peeked

    assert reader.skip_to_marker() == 2
    marker = reader.next_pair()
    assert marker is not None and marker.end_of_section


def test_tag_reader_iterates_every_pair() -> None:
    reader = TagReader(io.StringIO("  0\nSECTION\n  2\nENTITIES\n  0\nENDSEC\n"))

    assert [(tag.code, tag.value) for tag in reader] == [
        (0, "SECTION"),
        (2, "ENTITIES"),
        (0, "ENDSEC"),
    ]


def test_tag_reader_keeps_trailing_blanks_only_in_text_payloads() -> None:
    reader = TagReader(io.StringIO("100\nAcDbLine  \n  8\nWALLS \n  1\nnote  \n  3\nchunk \n304\n pad \n"))

    values = [reader.next_pair().value for _ in range(5)]

    assert values == ["AcDbLine", "WALLS", "note  ", "chunk ", " pad "]


def test_tag_reader_rejects_non_numeric_group_code() -> None:
    reader = TagReader(io.StringIO("abc\nLINE\n"), filename="bad.dxf")

    with pytest.raises(ReadError) as excinfo:
        reader.next_pair()

    assert excinfo.value.filename == "bad.dxf"
    assert excinfo.value.line == 1
    assert "group code expected" in str(excinfo.value)
    assert "line: 1" in str(excinfo.value)


def test_tag_reader_rejects_missing_value_line() -> None:
    reader = TagReader(io.StringIO("  0\n"))

    with pytest.raises(ReadError, match="missing value"):
        reader.next_pair()


def test_tag_reader_open_missing_file_raises_io_error(tmp_path: Path) -> None:
    with pytest.raises(DxfIOError):
        TagReader.open(tmp_path / "missing.dxf")


def test_tag_writer_open_and_reader_open_share_the_file(tmp_path: Path) -> None:
    path = tmp_path / "pairs.dxf"
    with TagWriter.open(path) as writer:
        writer.write_pair(0, "EOF")

    assert path.read_text(encoding="utf-8") == "  0\nEOF\n"
    with TagReader.open(path) as reader:
        tag = reader.next_pair()
    assert tag is not None and tag.is_marker("EOF")
