"""Interpret G-code toolpaths into layered line segments."""

from __future__ import annotations

from ..config import ParserConfig, get_config
from .buffers import VertexBuffer, build_vertex_buffers, compute_bounds, segments_to_array
from .interpreter import (
    InterpretResult,
    MachineState,
    ParseDiagnostics,
    ParserContext,
    ToolpathInterpreter,
    classify_segment,
)
from .layers import (
    FlattenedGeometry,
    Layer,
    LayerBuilder,
    LayeredGeometry,
    Point,
    Segment,
    SegmentKind,
    aggregate,
    flatten_layers,
)
from .tokenizer import Command, ParamValue, iter_commands, tokenize_line

__all__ = [
    "Command",
    "FlattenedGeometry",
    "InterpretResult",
    "Layer",
    "LayerBuilder",
    "LayeredGeometry",
    "MachineState",
    "ParamValue",
    "ParseDiagnostics",
    "ParserContext",
    "Point",
    "Segment",
    "SegmentKind",
    "ToolpathInterpreter",
    "VertexBuffer",
    "aggregate",
    "build_vertex_buffers",
    "classify_segment",
    "compute_bounds",
    "flatten_layers",
    "iter_commands",
    "parse_toolpath",
    "segments_to_array",
    "tokenize_line",
]


def parse_toolpath(
    text: str,
    *,
    split_layer: bool | None = None,
    config: ParserConfig | None = None,
) -> LayeredGeometry:
    """Parse *text* and return its geometry.

    *split_layer* overrides the configured output form for this call only.
    """

    config = config or get_config()
    result = ToolpathInterpreter(config).interpret(text)
    if split_layer is None:
        split_layer = config.split_layer
    return aggregate(result.layers, split_layer=split_layer)
