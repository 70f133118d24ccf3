from __future__ import annotations

import math

import pytest

from dxfcodec import RangeError, ValidationError
from dxfcodec.entities import Arc, Circle, Ellipse, Helix, Spline
from tests._codec_helpers import emit, make_config, reparse, values_of


def test_circle_round_trips_and_requires_positive_radius() -> None:
    circle = Circle(center=(1.0, 2.0, 0.0), radius=3.0, thickness=0.5)

    text = emit(circle, "R12")

    assert values_of(text, 39) == ["0.500000"]
    assert reparse(text, "R12") == circle
    assert circle.area() == pytest.approx(math.pi * 9.0)
    with pytest.raises(ValidationError, match="radius must be positive"):
        emit(Circle(radius=0.0), "R12")


def test_arc_writes_circle_then_arc_subclass() -> None:
    arc = Arc(center=(0.0, 0.0, 0.0), radius=2.0, start_angle=350.0, end_angle=10.0)

    text = emit(arc, "R13")

    assert values_of(text, 100) == ["AcDbEntity", "AcDbCircle", "AcDbArc"]
    assert values_of(text, 50) == ["350.000000"]
    assert values_of(text, 51) == ["10.000000"]
    assert reparse(text, "R13") == arc
    assert arc.span() == pytest.approx(20.0)
    assert Arc().span() == 360.0


def test_ellipse_validates_ratio_and_warns_before_r13() -> None:
    ellipse = Ellipse(center=(1.0, 1.0, 0.0), major_axis=(2.0, 0.0, 0.0), ratio=0.5, end_param=3.0)
    config = make_config("R12")

    assert reparse(emit(ellipse, "R14"), "R14") == ellipse
    emit(ellipse, config)
    assert any("not supported before DXF R13" in message for message in config.diagnostics.messages())

    with pytest.raises(ValidationError, match="ratio"):
        emit(Ellipse(ratio=1.5), "R14")
    with pytest.raises(ValidationError, match="zero major axis"):
        emit(Ellipse(major_axis=(0.0, 0.0, 0.0)), "R14")


def _spline() -> Spline:
    return Spline(
        flag=8,
        degree=3,
        knots=[0.0, 0.0, 0.0, 1.0, 1.0, 1.0],
        control_points=[
            (0.0, 0.0, 0.0),
            (1.0, 2.0, 0.0),
            (3.0, 2.0, 0.0),
            (4.0, 0.0, 0.0),
        ],
    )


def test_spline_round_trips_counts_and_vectors() -> None:
    config = make_config("R14")
    spline = _spline()

    text = emit(spline, config)
    parsed = reparse(text, config)

    assert values_of(text, 72) == ["6"]
    assert values_of(text, 73) == ["4"]
    assert values_of(text, 74) == ["0"]
    assert values_of(text, 44) == []
    assert parsed == spline
    assert parsed.number_of_knots == 6
    assert parsed.number_of_control_points == 4
    assert parsed.planar
    assert not parsed.closed
    assert config.diagnostics.messages("warning") == []


def test_spline_tolerances_survive_fixed_point_output() -> None:
    parsed = reparse(emit(_spline(), "R14"), "R14")

    assert parsed.knot_tolerance == pytest.approx(1e-7)
    assert parsed.control_point_tolerance == pytest.approx(1e-6)


def test_spline_count_mismatch_warns_and_keeps_present_values() -> None:
    config = make_config("R14")
    text = emit(_spline(), "R14").replace(" 72\n6\n", " 72\n7\n")

    parsed = reparse(text, config)

    assert parsed.knots == [0.0, 0.0, 0.0, 1.0, 1.0, 1.0]
    assert len(parsed.control_points) == 4
    warnings = config.diagnostics.messages("warning")
    assert len(warnings) == 1
    assert "declares 7 knots but 6 were found" in warnings[0]


def test_spline_with_fit_points_writes_fit_tolerance_and_tangents() -> None:
    spline = Spline(
        fit_points=[(0.0, 0.0, 0.0), (1.0, 1.0, 0.0), (2.0, 0.0, 0.0)],
        start_tangent=(1.0, 0.0, 0.0),
        end_tangent=(0.0, -1.0, 0.0),
    )

    text = emit(spline, "R2000")
    parsed = reparse(text, "R2000")

    assert values_of(text, 74) == ["3"]
    assert len(values_of(text, 44)) == 1
    assert values_of(text, 12) == ["1.000000"]
    assert parsed.fit_points == spline.fit_points
    assert parsed.start_tangent == (1.0, 0.0, 0.0)
    assert parsed.end_tangent == (0.0, -1.0, 0.0)


def test_spline_validation() -> None:
    with pytest.raises(ValidationError, match="neither control points nor fit points"):
        emit(Spline(), "R14")
    with pytest.raises(ValidationError, match="weights"):
        spline = _spline()
        spline.weights = [1.0, 1.0]
        emit(spline, "R14")


def test_helix_keeps_spline_and_helix_groups_apart() -> None:
    helix = Helix(
        degree=3,
        knots=[0.0, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 1.0],
        control_points=[(1.0, 0.0, 0.0), (1.0, 1.0, 0.5), (-1.0, 1.0, 1.0), (-1.0, 0.0, 1.5)],
        axis_base_point=(5.0, 5.0, 0.0),
        start_point=(6.0, 5.0, 0.0),
        helix_radius=1.0,
        number_of_turns=2.0,
        turn_height=0.75,
        handedness=False,
        constrain=1,
    )

    text = emit(helix, "R2007")
    parsed = reparse(text, "R2007")

    assert values_of(text, 100) == ["AcDbEntity", "AcDbSpline", "AcDbHelix"]
    assert parsed.control_points == helix.control_points
    assert parsed.knots == helix.knots
    assert parsed.axis_base_point == (5.0, 5.0, 0.0)
    assert parsed.start_point == (6.0, 5.0, 0.0)
    assert parsed.turn_height == 0.75
    assert parsed.handedness is False
    assert parsed == helix


def test_helix_constrain_is_bounded() -> None:
    helix = Helix()

    with pytest.raises(RangeError):
        helix.constrain = 3

    assert helix.constrain == 0
