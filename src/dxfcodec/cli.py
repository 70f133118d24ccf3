from __future__ import annotations

import argparse
import sys
from collections import Counter
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Sequence

from .config import CodecConfig, DxfVersion
from .convert import to_ezdxf
from .diagnostics import CollectingDiagnostics, Diagnostic, Diagnostics, StderrDiagnostics
from .drawing import readfile
from .entities import supported_kinds
from .errors import DxfError


class _TeeDiagnostics(Diagnostics):
    """Collects every diagnostic and forwards errors and warnings to stderr."""

    def __init__(self) -> None:
        self.collected = CollectingDiagnostics()
        self._stderr = StderrDiagnostics()

    def emit(self, diagnostic: Diagnostic) -> None:
        self.collected.emit(diagnostic)
        if diagnostic.level in ("error", "warning"):
            self._stderr.emit(diagnostic)


def _package_version() -> str:
    try:
        return version("dxfcodec")
    except PackageNotFoundError:
        return "0.0.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dxfcodec", description="Inspect, rewrite, and convert DXF files.")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_package_version()}",
    )
    subparsers = parser.add_subparsers(dest="command")

    inspect_parser = subparsers.add_parser("inspect", help="Show basic DXF information.")
    inspect_parser.add_argument("path", help="Path to DXF file.")
    inspect_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Also print every diagnostic reported while reading.",
    )

    rewrite_parser = subparsers.add_parser(
        "rewrite",
        help="Read a DXF file and write it again in canonical tag order.",
    )
    rewrite_parser.add_argument("input_path", help="Path to input DXF file.")
    rewrite_parser.add_argument("output_path", help="Path to output DXF file.")
    rewrite_parser.add_argument(
        "--dxf-version",
        default=None,
        help="Output DXF version, e.g. R12/R14/R2000 or AC1015 (default: the input version).",
    )
    rewrite_parser.add_argument(
        "--flatland",
        action="store_true",
        help="Write elevation on group code 38 for R11 and older output.",
    )
    rewrite_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any entity cannot be written.",
    )

    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert DXF entities through ezdxf as the writing backend.",
    )
    convert_parser.add_argument("input_path", help="Path to input DXF file.")
    convert_parser.add_argument("output_path", help="Path to output DXF file.")
    convert_parser.add_argument(
        "--types",
        default=None,
        help='Entity filter passed to query(), e.g. "LINE ARC LWPOLYLINE".',
    )
    convert_parser.add_argument(
        "--dxf-version",
        default="R2010",
        help="DXF version for ezdxf.new(), e.g. R2000/R2010/R2018.",
    )
    convert_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any entity cannot be converted.",
    )
    return parser


def _run_inspect(path: str, *, verbose: bool = False) -> int:
    file_path = Path(path)
    if not file_path.exists():
        print(f"error: file not found: {file_path}", file=sys.stderr)
        return 2

    sink = CollectingDiagnostics()
    try:
        drawing = readfile(file_path, CodecConfig(diagnostics=sink))
    except (DxfError, OSError) as exc:
        print(f"error: failed to read DXF: {exc}", file=sys.stderr)
        return 2

    counts = drawing.counts()
    print(f"file: {file_path}")
    print(f"version: {drawing.version.name} ({drawing.version.acadver})")
    print(f"total_entities: {len(drawing.entities)}")
    for kind in supported_kinds():
        count = counts.get(kind, 0)
        if count > 0:
            print(f"{kind}: {count}")
    if len(drawing.objects):
        object_counts = Counter(record.KIND for record in drawing.objects)
        print(f"total_objects: {len(drawing.objects)}")
        for kind, count in sorted(object_counts.items()):
            print(f"object[{kind}]: {count}")
    print(f"warnings: {len(sink.warnings)}")
    print(f"errors: {len(sink.errors)}")
    if verbose:
        for message in sink.messages():
            print(message)
    return 0


def _run_rewrite(
    input_path: str,
    output_path: str,
    *,
    dxf_version: str | None = None,
    flatland: bool = False,
    strict: bool = False,
) -> int:
    dxf_path = Path(input_path)
    if not dxf_path.exists():
        print(f"error: file not found: {dxf_path}", file=sys.stderr)
        return 2

    sink = _TeeDiagnostics()
    try:
        drawing = readfile(dxf_path, CodecConfig(flatland=flatland, diagnostics=sink))
        if dxf_version is not None:
            drawing.config = drawing.config.replace(acad_version_number=DxfVersion.parse(dxf_version))
        out_path = Path(output_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        drawing.saveas(out_path, strict=strict)
    except (DxfError, OSError, ValueError) as exc:
        print(f"error: failed to rewrite DXF: {exc}", file=sys.stderr)
        return 2

    skipped = len(sink.collected.errors)
    print(f"input: {dxf_path}")
    print(f"output: {output_path}")
    print(f"target_version: {drawing.version.name}")
    print(f"total_entities: {len(drawing.entities)}")
    print(f"written_entities: {len(drawing.entities) - skipped}")
    print(f"skipped_entities: {skipped}")
    return 0


def _run_convert(
    input_path: str,
    output_path: str,
    *,
    types: str | None = None,
    dxf_version: str = "R2010",
    strict: bool = False,
) -> int:
    dxf_path = Path(input_path)
    if not dxf_path.exists():
        print(f"error: file not found: {dxf_path}", file=sys.stderr)
        return 2

    try:
        result = to_ezdxf(
            str(dxf_path),
            output_path,
            types=types,
            dxf_version=dxf_version,
            strict=strict,
            config=CodecConfig(diagnostics=CollectingDiagnostics()),
        )
    except Exception as exc:
        print(f"error: failed to convert DXF: {exc}", file=sys.stderr)
        return 2

    print(f"input: {result.source_path}")
    print(f"output: {result.output_path}")
    print(f"total_entities: {result.total_entities}")
    print(f"written_entities: {result.written_entities}")
    print(f"skipped_entities: {result.skipped_entities}")
    for kind, count in result.skipped_by_type.items():
        print(f"skipped[{kind}]: {count}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "inspect":
        return _run_inspect(args.path, verbose=bool(args.verbose))
    if args.command == "rewrite":
        return _run_rewrite(
            args.input_path,
            args.output_path,
            dxf_version=args.dxf_version,
            flatland=bool(args.flatland),
            strict=bool(args.strict),
        )
    if args.command == "convert":
        return _run_convert(
            args.input_path,
            args.output_path,
            types=args.types,
            dxf_version=args.dxf_version,
            strict=bool(args.strict),
        )

    parser.print_help()
    return 0

