from __future__ import annotations

from pathlib import Path

import pytest

import dxfcodec
import dxfcodec.cli as cli_module
from dxfcodec import ConvertResult, Drawing
from dxfcodec.entities import Circle, Line
from tests._codec_helpers import make_config
from tests._dxf_helpers import dxf_acadver, dxf_entity_types


def _write_sample(path: Path) -> Path:
    drawing = Drawing(make_config("R12"))
    drawing.add(Line(start=(0.0, 0.0, 0.0), end=(1.0, 0.0, 0.0)))
    drawing.add(Circle(center=(2.0, 2.0, 0.0), radius=1.0))
    drawing.saveas(path)
    return path


def test_cli_inspect_prints_version_and_counts(tmp_path: Path, capsys) -> None:
    sample = _write_sample(tmp_path / "sample.dxf")

    code = cli_module.main(["inspect", str(sample)])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out == [
        f"file: {sample}",
        "version: R12 (AC1009)",
        "total_entities: 2",
        "CIRCLE: 1",
        "LINE: 1",
        "warnings: 0",
        "errors: 0",
    ]


def test_cli_inspect_verbose_lists_diagnostics(tmp_path: Path, capsys) -> None:
    sample = tmp_path / "unknown.dxf"
    sample.write_text(
        "  0\nSECTION\n  2\nENTITIES\n  0\nWIPEOUT\n  8\n0\n  0\nENDSEC\n  0\nEOF\n",
        encoding="utf-8",
    )

    code = cli_module._run_inspect(str(sample), verbose=True)

    out = capsys.readouterr().out
    assert code == 0
    assert "total_entities: 0" in out
    assert "warnings: 1" in out
    assert "Warning in read_entity(): unsupported entity 'WIPEOUT'; skipped 1 tags" in out


def test_cli_inspect_reports_missing_and_malformed_files(tmp_path: Path, capsys) -> None:
    missing = tmp_path / "missing.dxf"
    malformed = tmp_path / "malformed.dxf"
    malformed.write_text("  0\nLINE\n  8\n0\n", encoding="utf-8")

    assert cli_module._run_inspect(str(missing)) == 2
    assert "error: file not found" in capsys.readouterr().err
    assert cli_module._run_inspect(str(malformed)) == 2
    assert "error: failed to read DXF: expected a SECTION" in capsys.readouterr().err


def test_cli_rewrite_changes_the_target_version(tmp_path: Path, capsys) -> None:
    sample = _write_sample(tmp_path / "in.dxf")
    output = tmp_path / "out" / "rewritten.dxf"

    code = cli_module.main(["rewrite", str(sample), str(output), "--dxf-version", "R14"])

    out = capsys.readouterr().out
    assert code == 0
    assert "target_version: R14" in out
    assert "written_entities: 2" in out
    assert "skipped_entities: 0" in out
    assert dxf_acadver(output) == "AC1014"
    assert dxf_entity_types(output) == ["LINE", "CIRCLE"]


def test_cli_rewrite_rejects_unknown_versions(tmp_path: Path, capsys) -> None:
    sample = _write_sample(tmp_path / "in.dxf")

    code = cli_module._run_rewrite(str(sample), str(tmp_path / "out.dxf"), dxf_version="R99")

    assert code == 2
    assert "unsupported DXF version: R99" in capsys.readouterr().err


def test_cli_rewrite_skips_invalid_entities_unless_strict(tmp_path: Path, capsys) -> None:
    sample = _write_sample(tmp_path / "in.dxf")
    broken = tmp_path / "broken.dxf"
    broken.write_text(
        sample.read_text(encoding="utf-8").replace(" 11\n1.000000\n", " 11\n0.000000\n"),
        encoding="utf-8",
    )
    output = tmp_path / "out.dxf"

    code = cli_module._run_rewrite(str(broken), str(output))

    captured = capsys.readouterr()
    assert code == 0
    assert "skipped_entities: 1" in captured.out
    assert "Error in write_line(): start point and end point are identical" in captured.err
    assert dxf_entity_types(output) == ["CIRCLE"]

    assert cli_module._run_rewrite(str(broken), str(output), strict=True) == 2
    assert "error: failed to rewrite DXF" in capsys.readouterr().err


def test_cli_convert_prints_summary(monkeypatch, tmp_path: Path, capsys) -> None:
    sample = _write_sample(tmp_path / "in.dxf")
    calls: dict[str, object] = {}

    def fake_to_ezdxf(source, output_path, **kwargs):  # noqa: ANN001
        calls.update(kwargs, source=source, output_path=output_path)
        return ConvertResult(
            source_path=source,
            output_path=output_path,
            total_entities=3,
            written_entities=2,
            skipped_entities=1,
            skipped_by_type={"LEADER": 1},
        )

    monkeypatch.setattr(cli_module, "to_ezdxf", fake_to_ezdxf)

    code = cli_module.main(["convert", str(sample), str(tmp_path / "out.dxf"), "--types", "LINE LEADER"])

    out = capsys.readouterr().out
    assert code == 0
    assert calls["types"] == "LINE LEADER"
    assert calls["dxf_version"] == "R2010"
    assert calls["strict"] is False
    assert "written_entities: 2" in out
    assert "skipped[LEADER]: 1" in out


def test_cli_convert_reports_backend_failures(monkeypatch, tmp_path: Path, capsys) -> None:
    sample = _write_sample(tmp_path / "in.dxf")

    def failing_to_ezdxf(*_args, **_kwargs):  # noqa: ANN002, ANN003
        raise ImportError("ezdxf is required for conversion.")

    monkeypatch.setattr(cli_module, "to_ezdxf", failing_to_ezdxf)

    assert cli_module._run_convert(str(sample), str(tmp_path / "out.dxf")) == 2
    assert "ezdxf is required" in capsys.readouterr().err
    assert cli_module._run_convert(str(tmp_path / "missing.dxf"), str(tmp_path / "out.dxf")) == 2


def test_cli_without_command_prints_help(capsys) -> None:
    assert cli_module.main([]) == 0
    assert "usage: dxfcodec" in capsys.readouterr().out


def test_cli_version_flag_exits(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("dxfcodec ")


def test_package_main_delegates_to_cli(monkeypatch) -> None:
    seen: list[list[str]] = []
    monkeypatch.setattr(cli_module, "main", lambda argv: seen.append(list(argv)) or 7)

    assert dxfcodec.main(["inspect", "x.dxf"]) == 7
    assert seen == [["inspect", "x.dxf"]]
