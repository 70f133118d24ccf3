from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from .config import CodecConfig
from .drawing import Drawing, readfile
from .entities import DxfRecord
from .entities.polyline import POLYLINE_3D, POLYLINE_CLOSED, POLYLINE_CONTINUOUS_LINETYPE


@dataclass(frozen=True)
class ConvertResult:
    source_path: str
    output_path: str
    total_entities: int
    written_entities: int
    skipped_entities: int
    skipped_by_type: dict[str, int]


def to_ezdxf(
    source: str | Path | Drawing,
    output_path: str | Path,
    *,
    types: str | Iterable[str] | None = None,
    dxf_version: str = "R2010",
    strict: bool = False,
    config: CodecConfig | None = None,
) -> ConvertResult:
    """Rebuild the entities of ``source`` in a fresh ezdxf document and save it.

    Kinds without an ezdxf counterpart here are counted as skipped; with
    ``strict`` any skip raises ValueError before the output is written.
    """
    ezdxf = _require_ezdxf()
    source_path, drawing = _resolve_drawing(source, config)

    dxf_doc = ezdxf.new(dxfversion=dxf_version)
    modelspace = dxf_doc.modelspace()

    total = 0
    written = 0
    skipped_by_type: dict[str, int] = {}

    for entity in drawing.query(types):
        if entity.KIND in ("VERTEX", "SEQEND"):
            continue
        total += 1
        if _write_entity_to_modelspace(modelspace, entity):
            written += 1
            continue
        skipped_by_type[entity.KIND] = skipped_by_type.get(entity.KIND, 0) + 1

    skipped = total - written
    if strict and skipped > 0:
        summary = ", ".join(f"{kind}:{count}" for kind, count in sorted(skipped_by_type.items()))
        raise ValueError(f"failed to convert {skipped} entities ({summary})")

    out_path = Path(output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    dxf_doc.saveas(str(out_path))

    return ConvertResult(
        source_path=source_path,
        output_path=str(out_path),
        total_entities=total,
        written_entities=written,
        skipped_entities=skipped,
        skipped_by_type=dict(sorted(skipped_by_type.items())),
    )


def _require_ezdxf():
    try:
        import ezdxf
    except Exception as exc:
        raise ImportError(
            "ezdxf is required for conversion. "
            'Install it with `pip install "dxfcodec[ezdxf]"`.'
        ) from exc
    return ezdxf


def _resolve_drawing(source: str | Path | Drawing, config: CodecConfig | None) -> tuple[str, Drawing]:
    if isinstance(source, Drawing):
        return source.filename or "<drawing>", source
    return str(source), readfile(source, config)


def _write_entity_to_modelspace(modelspace: Any, entity: DxfRecord) -> bool:
    try:
        return _write_entity_to_modelspace_unsafe(modelspace, entity)
    except Exception:
        return False


def _write_entity_to_modelspace_unsafe(modelspace: Any, entity: Any) -> bool:
    kind = entity.KIND
    dxfattribs = _entity_dxfattribs(entity)

    if kind in ("LINE", "3DLINE"):
        modelspace.add_line(_point3(entity.start), _point3(entity.end), dxfattribs=dxfattribs)
        return True

    if kind == "POINT":
        modelspace.add_point(_point3(entity.location), dxfattribs=dxfattribs)
        return True

    if kind == "CIRCLE":
        modelspace.add_circle(_point3(entity.center), float(entity.radius), dxfattribs=dxfattribs)
        return True

    if kind == "ARC":
        modelspace.add_arc(
            _point3(entity.center),
            float(entity.radius),
            float(entity.start_angle),
            float(entity.end_angle),
            dxfattribs=dxfattribs,
        )
        return True

    if kind == "ELLIPSE":
        modelspace.add_ellipse(
            _point3(entity.center),
            major_axis=_point3(entity.major_axis),
            ratio=float(entity.ratio),
            start_param=float(entity.start_param),
            end_param=float(entity.end_param),
            dxfattribs=dxfattribs,
        )
        return True

    if kind == "LWPOLYLINE":
        if not entity.vertices:
            return False
        lw = modelspace.add_lwpolyline(
            [tuple(vertex) for vertex in entity.vertices],
            format="xyseb",
            close=entity.closed,
            dxfattribs=dxfattribs,
        )
        if entity.const_width:
            lw.dxf.const_width = float(entity.const_width)
        return True

    if kind == "POLYLINE":
        return _write_polyline(modelspace, entity, dxfattribs)

    if kind in ("SPLINE", "HELIX"):
        return _write_spline(modelspace, entity, dxfattribs)

    if kind == "TEXT":
        if entity.text == "":
            return False
        text = modelspace.add_text(
            entity.text,
            height=float(entity.height),
            rotation=float(entity.rotation),
            dxfattribs=dxfattribs,
        )
        text.dxf.insert = _point3(entity.insertion_point)
        return True

    if kind == "MTEXT":
        if entity.text == "":
            return False
        mtext = modelspace.add_mtext(entity.text, dxfattribs=dxfattribs)
        mtext.set_location(_point3(entity.insertion_point))
        mtext.dxf.char_height = float(entity.height)
        return True

    if kind == "RAY":
        modelspace.add_ray(_point3(entity.start), _point3(entity.unit_vector), dxfattribs=dxfattribs)
        return True

    if kind == "XLINE":
        modelspace.add_xline(_point3(entity.start), _point3(entity.unit_vector), dxfattribs=dxfattribs)
        return True

    if kind in ("SOLID", "TRACE", "3DFACE"):
        corners = [_point3(point) for point in entity.corners()]
        if kind == "SOLID":
            modelspace.add_solid(corners, dxfattribs=dxfattribs)
        elif kind == "TRACE":
            modelspace.add_trace(corners, dxfattribs=dxfattribs)
        else:
            modelspace.add_3dface(corners, dxfattribs=dxfattribs)
        return True

    if kind == "HATCH":
        return _write_hatch(modelspace, entity, dxfattribs)

    return False


def _write_polyline(modelspace: Any, entity: Any, dxfattribs: dict[str, Any]) -> bool:
    points = [_point3(vertex.location) for vertex in entity.vertices]
    if len(points) < 2:
        return False
    closed = bool(entity.flag & POLYLINE_CLOSED)
    if entity.flag & POLYLINE_3D:
        modelspace.add_polyline3d(points, close=closed, dxfattribs=dxfattribs)
        return True
    if entity.flag & ~(POLYLINE_CLOSED | POLYLINE_CONTINUOUS_LINETYPE):
        # curve fitted, mesh and polyface variants
        return False
    vertices = [
        (point[0], point[1], vertex.start_width, vertex.end_width, vertex.bulge)
        for point, vertex in zip(points, entity.vertices)
    ]
    modelspace.add_lwpolyline(vertices, format="xyseb", close=closed, dxfattribs=dxfattribs)
    return True


def _write_spline(modelspace: Any, entity: Any, dxfattribs: dict[str, Any]) -> bool:
    degree = max(1, int(entity.degree))
    control_points = [_point3(point) for point in entity.control_points]
    if len(control_points) < 2:
        fit_points = [_point3(point) for point in entity.fit_points]
        if len(fit_points) < 2:
            return False
        spline = modelspace.add_spline(fit_points=fit_points, degree=degree, dxfattribs=dxfattribs)
        if entity.closed:
            spline.set_flag_state(spline.CLOSED, True)
        return True

    knots = [float(v) for v in entity.knots] or None
    weights = [float(v) for v in entity.weights]
    if entity.rational and len(weights) == len(control_points):
        modelspace.add_rational_spline(
            control_points=control_points,
            weights=weights,
            degree=degree,
            knots=knots,
            dxfattribs=dxfattribs,
        )
        return True

    modelspace.add_open_spline(
        control_points=control_points,
        degree=degree,
        knots=knots,
        dxfattribs=dxfattribs,
    )
    return True


def _write_hatch(modelspace: Any, entity: Any, dxfattribs: dict[str, Any]) -> bool:
    polyline_paths = [path for path in entity.paths if path.is_polyline and len(path.vertices) >= 2]
    if not polyline_paths:
        return False
    color = dxfattribs.pop("color", 7)
    hatch = modelspace.add_hatch(color=color, dxfattribs=dxfattribs)
    if entity.solid_fill:
        hatch.set_solid_fill(color=color)
    else:
        hatch.set_pattern_fill(entity.pattern_name or "ANSI31", color=color, scale=entity.pattern_scale)
    for path in polyline_paths:
        hatch.paths.add_polyline_path(
            [(x, y, bulge) for x, y, bulge in path.vertices],
            is_closed=path.closed,
            flags=path.flag,
        )
    return True


def _entity_dxfattribs(entity: Any) -> dict[str, Any]:
    attribs: dict[str, Any] = {"layer": entity.layer}
    color = _to_valid_aci(entity.color)
    if color is not None:
        attribs["color"] = color
    if entity.color_value is not None:
        attribs["true_color"] = int(entity.color_value) & 0xFFFFFF
    return attribs


def _to_valid_aci(value: Any) -> int | None:
    try:
        aci = int(value)
    except Exception:
        return None
    if 1 <= aci <= 255:
        return aci
    return None


def _point3(value: Any) -> tuple[float, float, float]:
    if value is None:
        return (0.0, 0.0, 0.0)
    if isinstance(value, (list, tuple)):
        if len(value) >= 3:
            return (float(value[0]), float(value[1]), float(value[2]))
        if len(value) >= 2:
            return (float(value[0]), float(value[1]), 0.0)
    raise ValueError(f"invalid point value: {value!r}")
