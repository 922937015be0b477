"""Top-level package for the toolpath_layers interpreter.

The :mod:`toolpath_layers.gcode` subpackage holds the interpreter itself;
:mod:`toolpath_layers.loader` acquires source text for it.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
