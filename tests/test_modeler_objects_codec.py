from __future__ import annotations

import io

import pytest

from dxfcodec import Drawing, ValidationError, read
from dxfcodec.entities import (
    Body,
    Dictionary,
    Dimension,
    Ellipse,
    Face3d,
    Helix,
    Leader,
    ObjectPtr,
    Region,
    Shape,
    Solid,
    Solid3d,
    Spline,
    Trace,
)
from tests._codec_helpers import emit, make_config, pairs, reparse, values_of
from tests._dxf_helpers import dxf_entity_types

ACIS_LINES = [
    "21 200 0 1  ",
    "  body $-1 -1 $-1 $1 $-1 $2 #",
    "lump $-1 -1 $-1 $-1 $3 $0 #",
]


def test_3dsolid_proprietary_data_is_reproduced_exactly_under_r14() -> None:
    solid = Solid3d(id_code=0x40, proprietary_data=list(ACIS_LINES))

    first = emit(solid, "R14")
    parsed = reparse(first, "R14")
    second = emit(parsed, "R14")

    assert "  1\n21 200 0 1  \n" in first
    assert "  1\n  body $-1 -1 $-1 $1 $-1 $2 #\n" in first
    assert values_of(first, 3) == []
    assert parsed.proprietary_data == ACIS_LINES
    assert parsed.additional_proprietary_data == []
    assert second == first


def test_3dsolid_history_and_marker_from_r2008() -> None:
    solid = Solid3d(proprietary_data=["x"], history="5C")

    r2007 = emit(solid, "R2007")
    r2008 = emit(solid, "R2008")

    assert values_of(r2007, 100) == ["AcDbEntity", "AcDbModelerGeometry"]
    assert values_of(r2007, 350) == []
    assert values_of(r2008, 100) == ["AcDbEntity", "AcDbModelerGeometry", "AcDb3dSolid"]
    assert values_of(r2008, 350) == ["5C"]
    assert reparse(r2008, "R2008") == solid


@pytest.mark.parametrize(("cls", "name"), [(Body, "BODY"), (Region, "REGION")])
def test_body_and_region_share_the_modeler_layout(cls, name: str) -> None:  # noqa: ANN001
    record = cls(proprietary_data=["a"], additional_proprietary_data=["b"])

    output = emit(record, "R14")

    assert values_of(output, 0) == [name]
    assert values_of(output, 70) == ["1"]
    assert reparse(output, "R14") == record
    assert record.acis_text() == "a\nb"


def test_modeler_tags_follow_the_subclass_markers() -> None:
    output = emit(Solid3d(proprietary_data=["a"], additional_proprietary_data=["b"], history="5C"), "R2008")

    body = [tag for tag in pairs(output) if tag[0] in (1, 3, 70, 100, 350)]

    assert body == [
        (100, "AcDbEntity"),
        (100, "AcDbModelerGeometry"),
        (100, "AcDb3dSolid"),
        (70, "1"),
        (1, "a"),
        (3, "b"),
        (350, "5C"),
    ]


def test_modeler_version_number_is_not_written_before_r13() -> None:
    output = emit(Body(proprietary_data=["a"]), "R12")

    assert values_of(output, 70) == []
    assert values_of(output, 1) == ["a"]


@pytest.mark.parametrize(
    "factory",
    [
        lambda: Ellipse(thickness=2.5),
        lambda: Spline(fit_points=[(0.0, 0.0, 0.0), (1.0, 1.0, 0.0)], thickness=2.5),
        lambda: Helix(fit_points=[(0.0, 0.0, 0.0), (1.0, 1.0, 0.0)], thickness=2.5),
        lambda: Dimension(block_name="*D1", thickness=2.5),
        lambda: Leader(vertices=[(0.0, 0.0, 0.0), (1.0, 1.0, 0.0)], thickness=2.5),
        lambda: Solid3d(proprietary_data=["abc"], thickness=2.5),
        lambda: Body(proprietary_data=["abc"], thickness=2.5),
        lambda: Region(proprietary_data=["abc"], thickness=2.5),
    ],
    ids=["ellipse", "spline", "helix", "dimension", "leader", "3dsolid", "body", "region"],
)
def test_thickness_is_written_for_kinds_without_their_own_thickness(factory) -> None:  # noqa: ANN001
    output = emit(factory(), "R2007")

    assert values_of(output, 39) == ["2.500000"]
    assert reparse(output, "R2007").thickness == 2.5


def test_modeler_version_must_be_one() -> None:
    with pytest.raises(ValidationError, match="modeler format version"):
        emit(Solid3d(modeler_format_version_number=2), "R14")


def test_trace_solid_and_face_corners() -> None:
    corners = dict(
        first_corner=(0.0, 0.0, 0.0),
        second_corner=(1.0, 0.0, 0.0),
        third_corner=(0.0, 1.0, 0.0),
        fourth_corner=(0.0, 1.0, 0.0),
    )
    solid = Solid(**corners)
    trace = Trace(**corners)
    face = Face3d(**corners, invisible_edges=0b0101)

    assert solid.is_triangle
    assert reparse(emit(solid, "R12"), "R12") == solid
    assert values_of(emit(trace, "R14"), 100) == ["AcDbEntity", "AcDbTrace"]
    face_output = emit(face, "R14")
    assert values_of(face_output, 100) == ["AcDbEntity", "AcDbFace"]
    assert values_of(face_output, 70) == ["5"]
    assert reparse(face_output, "R14") == face
    assert not face.is_edge_visible(0)
    assert face.is_edge_visible(1)


def test_shape_requires_a_name() -> None:
    shape = Shape(name="BOX", size=2.0, insertion_point=(1.0, 1.0, 0.0))

    assert reparse(emit(shape, "R12"), "R12") == shape
    with pytest.raises(ValidationError, match="empty shape name"):
        emit(Shape(), "R12")


def test_dictionary_objects_round_trip_through_a_drawing(tmp_path) -> None:
    dictionary = Dictionary(id_code=0xC, dictionary_owner_soft="0")
    dictionary.add("ACAD_GROUP", "D")
    dictionary.add("ACAD_MLINESTYLE", "17")
    drawing = Drawing(make_config("R2000"))
    drawing.add(dictionary)
    output = tmp_path / "objects.dxf"

    drawing.saveas(output)
    loaded = read(io.StringIO(output.read_text(encoding="utf-8")), make_config("R12"))

    assert dxf_entity_types(output, "OBJECTS") == ["DICTIONARY"]
    assert len(loaded.objects) == 1
    parsed = loaded.objects[0]
    assert parsed["ACAD_GROUP"] == "D"
    assert "ACAD_MLINESTYLE" in parsed
    assert "ACAD_LAYOUT" not in parsed
    assert parsed.dictionary_owner_soft == "0"
    assert list(loaded.query()) == []


def test_hard_owner_dictionary_uses_hard_handles() -> None:
    dictionary = Dictionary(hard_owner_flag=1, entries=[("ACAD_PLOTSETTINGS", "1A")])

    output = emit(dictionary, "R2000")

    assert values_of(output, 280) == ["1"]
    assert values_of(output, 360) == ["1A"]
    assert values_of(output, 350) == []
    assert reparse(output, "R2000") == dictionary
    with pytest.raises(KeyError):
        dictionary["MISSING"]


def test_dictionary_rejects_incomplete_entries() -> None:
    dictionary = Dictionary(entries=[("NAME", "")])

    with pytest.raises(ValidationError, match="incomplete entry"):
        emit(dictionary, "R2000")


def test_objects_section_is_omitted_before_r13() -> None:
    drawing = Drawing(make_config("R12"))
    drawing.add(Dictionary(entries=[("A", "1")]))
    stream = io.StringIO()

    drawing.write(stream)

    assert "OBJECTS" not in stream.getvalue()


def test_object_ptr_keeps_extended_data() -> None:
    record = ObjectPtr(id_code=0x55, xdata=[(1001, "ACME"), (1000, "payload"), (1071, 123456)])

    output = emit(record, "R14")
    parsed = reparse(output, "R14")

    assert values_of(output, 0) == ["OBJECT_PTR"]
    assert parsed == record
