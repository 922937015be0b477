"""Basic smoke tests for the toolpath_layers package."""

from __future__ import annotations

import importlib


def test_package_importable() -> None:
    """Ensure that the top-level package can be imported."""

    module = importlib.import_module("toolpath_layers")
    assert module.__version__ == "0.1.0"
