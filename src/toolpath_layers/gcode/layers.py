"""Layered segment containers and the split/flattened output forms."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

__all__ = [
    "FlattenedGeometry",
    "Layer",
    "LayerBuilder",
    "LayeredGeometry",
    "Point",
    "Segment",
    "SegmentKind",
    "aggregate",
    "flatten_layers",
]

Point = tuple[float, float, float]


class SegmentKind(str, Enum):
    """Classification applied to every emitted segment."""

    EXTRUDED = "extruded"
    SUPPORT = "support"
    TRAVEL = "travel"


@dataclass(frozen=True, slots=True)
class Segment:
    """A straight move between two points."""

    start: Point
    end: Point
    kind: SegmentKind

    def flat(self) -> tuple[float, float, float, float, float, float]:
        return (*self.start, *self.end)


@dataclass(slots=True)
class Layer:
    """Segments recorded at one Z height, grouped by classification."""

    z: float
    extruded: list[Segment] = field(default_factory=list)
    support: list[Segment] = field(default_factory=list)
    travel: list[Segment] = field(default_factory=list)

    def segments(self, kind: SegmentKind) -> list[Segment]:
        if kind is SegmentKind.EXTRUDED:
            return self.extruded
        if kind is SegmentKind.SUPPORT:
            return self.support
        return self.travel

    def add(self, segment: Segment) -> None:
        self.segments(segment.kind).append(segment)

    @property
    def segment_count(self) -> int:
        return len(self.extruded) + len(self.support) + len(self.travel)

    @property
    def is_empty(self) -> bool:
        return self.segment_count == 0

    def flat_vertices(self, kind: SegmentKind) -> list[float]:
        """Return the coordinates of *kind* segments as ``x, y, z`` triples in pairs."""

        return _flatten_segments(self.segments(kind))

    def to_dict(self) -> dict[str, object]:
        return {
            "z": _json_number(self.z),
            **{kind.value: _json_vertices(self.flat_vertices(kind)) for kind in SegmentKind},
        }


class LayerBuilder:
    """Own the append-only layer sequence produced during one parse pass."""

    def __init__(self) -> None:
        self._layers: list[Layer] = []
        self._current: Layer | None = None

    @property
    def layers(self) -> list[Layer]:
        return self._layers

    @property
    def current(self) -> Layer | None:
        return self._current

    def start_layer(self, z: float) -> Layer:
        layer = Layer(z=z)
        self._layers.append(layer)
        self._current = layer
        return layer

    def needs_layer_at(self, z: float) -> bool:
        """Return whether recording at height *z* requires a new layer."""

        # nan never equals the current Z, matching the permissive parse policy.
        return self._current is None or z != self._current.z

    def add_segment(self, segment: Segment) -> None:
        """Append *segment*, opening a layer at its start height if none exists."""

        if self._current is None:
            self.start_layer(segment.start[2])
        assert self._current is not None
        self._current.add(segment)


@dataclass(slots=True)
class FlattenedGeometry:
    """All segments of a toolpath concatenated per classification."""

    extruded: list[Segment]
    support: list[Segment]
    travel: list[Segment]
    layer_count: int

    def segments(self, kind: SegmentKind) -> list[Segment]:
        if kind is SegmentKind.EXTRUDED:
            return self.extruded
        if kind is SegmentKind.SUPPORT:
            return self.support
        return self.travel

    def flat_vertices(self, kind: SegmentKind) -> list[float]:
        return _flatten_segments(self.segments(kind))

    def to_dict(self) -> dict[str, object]:
        return {
            "split_layer": False,
            "layer_count": self.layer_count,
            **{kind.value: _json_vertices(self.flat_vertices(kind)) for kind in SegmentKind},
        }


@dataclass(slots=True)
class LayeredGeometry:
    """Parse output in either layer-preserving or flattened form."""

    layers: list[Layer]
    flattened: FlattenedGeometry | None = None

    @property
    def split_layer(self) -> bool:
        return self.flattened is None

    @property
    def z_values(self) -> tuple[float, ...]:
        return tuple(layer.z for layer in self.layers)

    def count(self, kind: SegmentKind) -> int:
        return sum(len(layer.segments(kind)) for layer in self.layers)

    def to_dict(self) -> dict[str, object]:
        if self.flattened is not None:
            return self.flattened.to_dict()
        return {
            "split_layer": True,
            "layer_count": len(self.layers),
            "layers": [layer.to_dict() for layer in self.layers],
        }


def flatten_layers(layers: Sequence[Layer]) -> FlattenedGeometry:
    """Concatenate each classification across *layers* in layer order."""

    extruded: list[Segment] = []
    support: list[Segment] = []
    travel: list[Segment] = []
    for layer in layers:
        extruded.extend(layer.extruded)
        support.extend(layer.support)
        travel.extend(layer.travel)
    return FlattenedGeometry(extruded, support, travel, layer_count=len(layers))


def aggregate(layers: Sequence[Layer], split_layer: bool = True) -> LayeredGeometry:
    """Wrap *layers* as output, flattening them unless *split_layer* is set."""

    layer_list = list(layers)
    if split_layer:
        return LayeredGeometry(layer_list)
    return LayeredGeometry(layer_list, flattened=flatten_layers(layer_list))


def _flatten_segments(segments: Iterable[Segment]) -> list[float]:
    vertices: list[float] = []
    for segment in segments:
        vertices.extend(segment.flat())
    return vertices


def _json_number(value: float) -> float | None:
    # Non-finite coordinates from malformed input are written as null.
    return value if math.isfinite(value) else None


def _json_vertices(vertices: Iterable[float]) -> list[float | None]:
    return [_json_number(value) for value in vertices]
