"""Pytest configuration helpers for toolpath_layers tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the source directory is importable without requiring an editable install.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_parser_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure each test runs with the default parser configuration."""

    from toolpath_layers.config import TOOL_X_OFFSET_ENV_VAR, configure

    monkeypatch.delenv(TOOL_X_OFFSET_ENV_VAR, raising=False)
    configure()
    yield
    monkeypatch.delenv(TOOL_X_OFFSET_ENV_VAR, raising=False)
    configure()


@pytest.fixture()
def sample_gcode_path(tmp_path: Path) -> Path:
    target = tmp_path / "sample.gcode"
    source = FIXTURES_DIR / "two_tool_print.gcode"
    target.write_text(source.read_text())
    return target
