"""Tests for the command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from toolpath_layers.cli import main


def test_cli_prints_layer_summary(sample_gcode_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(sample_gcode_path)]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "layer 0 z=0: extruded 0, support 0, travel 1",
        "layer 1 z=0.2: extruded 1, support 2, travel 2",
        "layer 2 z=0.4: extruded 2, support 0, travel 0",
    ]


def test_cli_flat_json(sample_gcode_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(sample_gcode_path), "--flat", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["split_layer"] is False
    assert payload["layer_count"] == 3
    assert len(payload["extruded"]) == 3 * 6


def test_cli_tool_offset(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "offset.gcode"
    source.write_text("T1\nG1 X10 E1\n")

    assert main([str(source), "--json", "--tool-offset", "4"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["layers"][0]["extruded"][3] == 6.0


def test_cli_writes_preview(sample_gcode_path: Path, tmp_path: Path) -> None:
    target = tmp_path / "out" / "preview.png"

    assert main([str(sample_gcode_path), "--preview", str(target)]) == 0
    assert target.read_bytes().startswith(b"\x89PNG")


def test_cli_missing_source(tmp_path: Path) -> None:
    assert main([str(tmp_path / "missing.gcode")]) == 1


def test_cli_preview_without_segments(tmp_path: Path) -> None:
    source = tmp_path / "empty.gcode"
    source.write_text("G21\nG90\nM30\n")

    assert main([str(source), "--preview", str(tmp_path / "p.png")]) == 1


def test_cli_json_is_strict_for_malformed_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "bad.gcode"
    source.write_text("G1 Xoops E1\n")

    assert main([str(source), "--json"]) == 0

    def reject(token: str) -> None:
        raise ValueError(token)

    payload = json.loads(capsys.readouterr().out, parse_constant=reject)
    assert payload["layers"][0]["support"][3] is None
