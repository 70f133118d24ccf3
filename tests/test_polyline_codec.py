from __future__ import annotations

import io

import pytest

from dxfcodec import CollectingDiagnostics, Drawing, ValidationError, read
from dxfcodec.entities import Donut, LWPolyline, Polyline, Seqend, Vertex
from dxfcodec.entities.polyline import POLYLINE_3D, VERTEX_3D
from tests._codec_helpers import emit, make_config, pairs, reparse, values_of
from tests._dxf_helpers import dxf_entities_of_type, dxf_entity_types, group_float


def _closed_triangle(**kwargs) -> Polyline:
    polyline = Polyline(id_code=0x20, vertices_follow=1, flag=1, **kwargs)
    for index, location in enumerate([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0)]):
        polyline.vertices.append(Vertex(id_code=0x21 + index, location=location))
    polyline.seqend = Seqend(id_code=0x24)
    return polyline


def test_polyline_with_three_vertices_round_trips_in_order() -> None:
    polyline = _closed_triangle()

    text = emit(polyline, "R12")
    parsed = reparse(text, "R12")

    assert [tag for tag in pairs(text) if tag[0] == 0] == [
        (0, "POLYLINE"),
        (0, "VERTEX"),
        (0, "VERTEX"),
        (0, "VERTEX"),
        (0, "SEQEND"),
    ]
    assert isinstance(parsed, Polyline)
    assert parsed.closed
    assert parsed.points() == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0)]
    assert [vertex.id_code for vertex in parsed.vertices] == [0x21, 0x22, 0x23]
    assert parsed.seqend is not None and parsed.seqend.id_code == 0x24
    assert parsed == polyline


def test_polyline_children_stay_attached_inside_a_drawing(tmp_path) -> None:
    drawing = Drawing(make_config("R12"))
    drawing.add(_closed_triangle())
    output = tmp_path / "triangle.dxf"

    drawing.saveas(output)
    loaded = read(io.StringIO(output.read_text(encoding="utf-8")), make_config("R12"))

    assert dxf_entity_types(output) == ["POLYLINE", "VERTEX", "VERTEX", "VERTEX", "SEQEND"]
    assert loaded.counts() == {"POLYLINE": 1}
    assert len(loaded.entities[0].vertices) == 3


def test_polyline_without_vertices_follow_flag_is_rejected() -> None:
    polyline = _closed_triangle()
    polyline.vertices_follow = 0

    with pytest.raises(ValidationError, match="vertices follow flag"):
        emit(polyline, "R12")


def test_polyline_writes_a_default_seqend_when_none_is_set() -> None:
    polyline = _closed_triangle(layer="OUTLINE")
    polyline.seqend = None

    text = emit(polyline, "R12")

    tags = pairs(text)
    assert tags[-2:] == [(0, "SEQEND"), (8, "OUTLINE")]


def test_3d_polyline_uses_3d_subclass_markers() -> None:
    polyline = Polyline(flag=POLYLINE_3D)
    polyline.vertices.append(Vertex(location=(0.0, 0.0, 1.0), flag=VERTEX_3D))
    polyline.vertices.append(Vertex(location=(2.0, 0.0, 3.0), flag=VERTEX_3D))

    text = emit(polyline, "R14")
    parsed = reparse(text, "R14")

    markers = values_of(text, 100)
    assert "AcDb3dPolyline" in markers
    assert markers.count("AcDb3dPolylineVertex") == 2
    assert markers.count("AcDbVertex") == 2
    assert parsed.is_3d
    assert parsed.points() == [(0.0, 0.0, 1.0), (2.0, 0.0, 3.0)]


def test_missing_seqend_is_reported_and_vertices_are_kept() -> None:
    sink = CollectingDiagnostics()
    text = (
        "  0\nSECTION\n  2\nENTITIES\n"
        "  0\nPOLYLINE\n  8\n0\n 66\n1\n 10\n0.0\n 20\n0.0\n 30\n0.0\n 70\n0\n"
        "  0\nVERTEX\n  8\n0\n 10\n1.0\n 20\n2.0\n 30\n0.0\n"
        "  0\nENDSEC\n  0\nEOF\n"
    )

    drawing = read(io.StringIO(text), make_config("R12", diagnostics=sink))

    polyline = drawing.entities[0]
    assert polyline.points() == [(1.0, 2.0, 0.0)]
    assert polyline.seqend is None
    assert any("missing SEQEND after 1 VERTEX records" in message for message in sink.messages("warning"))


def test_lwpolyline_round_trips_widths_and_bulges() -> None:
    lw = LWPolyline(flag=1, const_width=0.5)
    lw.append(0.0, 0.0)
    lw.append(2.0, 0.0, 0.1, 0.2, 0.5)
    lw.append(2.0, 1.0)

    text = emit(lw, "R14")
    parsed = reparse(text, "R14")

    assert values_of(text, 90) == ["3"]
    assert values_of(text, 42) == ["0.500000"]
    assert values_of(text, 40) == ["0.100000"]
    assert values_of(text, 43) == ["0.500000"]
    assert parsed == lw
    assert parsed.closed
    assert parsed.points() == [(0.0, 0.0), (2.0, 0.0), (2.0, 1.0)]


def test_lwpolyline_count_mismatch_warns_and_keeps_vertices() -> None:
    config = make_config("R14")
    text = (
        "  0\nLWPOLYLINE\n100\nAcDbEntity\n  8\n0\n100\nAcDbPolyline\n 90\n3\n 70\n0\n"
        " 10\n0.0\n 20\n0.0\n 10\n1.0\n 20\n1.0\n"
    )

    parsed = reparse(text, config)

    assert parsed.points() == [(0.0, 0.0), (1.0, 1.0)]
    assert any("declares 3 vertices but 2 were found" in message for message in config.diagnostics.messages())


def test_lwpolyline_needs_two_vertices() -> None:
    lw = LWPolyline()
    lw.append(1.0, 1.0)

    with pytest.raises(ValidationError, match="too few"):
        emit(lw, "R14")


def test_donut_is_written_as_closed_wide_polyline(tmp_path) -> None:
    donut = Donut(id_code=0x30, center=(5.0, 5.0, 0.0), outside_diameter=4.0, inside_diameter=2.0, layer="RINGS")
    drawing = Drawing(make_config("R12"))
    drawing.add(donut)
    output = tmp_path / "donut.dxf"

    drawing.saveas(output)

    assert dxf_entity_types(output) == ["POLYLINE", "VERTEX", "VERTEX", "SEQEND"]
    polyline = dxf_entities_of_type(output, "POLYLINE")[0]
    assert group_float(polyline, "70") == 1.0
    assert group_float(polyline, "40") == 1.0
    assert group_float(polyline, "41") == 1.0
    vertices = dxf_entities_of_type(output, "VERTEX")
    assert [group_float(vertex, "10") for vertex in vertices] == [3.5, 6.5]
    assert [group_float(vertex, "42") for vertex in vertices] == [1.0, 1.0]

    loaded = read(io.StringIO(output.read_text(encoding="utf-8")), make_config("R12"))
    polyline_record = loaded.entities[0]
    assert isinstance(polyline_record, Polyline)
    assert polyline_record.layer == "RINGS"
    assert [vertex.id_code for vertex in polyline_record.vertices] == [0x31, 0x32]
    assert polyline_record.seqend is not None and polyline_record.seqend.id_code == 0x33


def test_donut_without_handle_writes_no_handles() -> None:
    donut = Donut(outside_diameter=2.0, inside_diameter=0.0)

    text = emit(donut, "R12")

    assert values_of(text, 5) == []
    assert values_of(text, 0) == ["POLYLINE", "VERTEX", "VERTEX", "SEQEND"]


@pytest.mark.parametrize(("outside", "inside"), [(1.0, 2.0), (2.0, 2.0), (2.0, -1.0)])
def test_donut_rejects_inverted_diameters(outside: float, inside: float) -> None:
    donut = Donut(outside_diameter=outside, inside_diameter=inside)

    with pytest.raises(ValidationError):
        emit(donut, "R12")
