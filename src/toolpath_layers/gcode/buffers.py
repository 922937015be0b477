"""Pack parsed geometry into float32 vertex arrays for line-segment renderers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .layers import LayeredGeometry, Segment, SegmentKind

__all__ = ["VertexBuffer", "build_vertex_buffers", "compute_bounds", "segments_to_array"]

# Rotation of -pi/2 about X, turning a Z-up toolpath into a Y-up scene.
_Y_UP = np.array(
    [
        [1.0, 0.0, 0.0],
        [0.0, 0.0, 1.0],
        [0.0, -1.0, 0.0],
    ],
    dtype=np.float32,
)


@dataclass(slots=True)
class VertexBuffer:
    """Vertices of one segment group, two consecutive rows per segment."""

    name: str
    kind: SegmentKind
    positions: np.ndarray

    @property
    def segment_count(self) -> int:
        return int(self.positions.shape[0] // 2)

    @property
    def is_empty(self) -> bool:
        return self.positions.shape[0] == 0

    def finite(self) -> VertexBuffer:
        """Return a copy holding only segments whose endpoints are all finite."""

        pairs = self.positions.reshape(-1, 2, 3)
        keep = np.isfinite(pairs).all(axis=(1, 2))
        return VertexBuffer(self.name, self.kind, pairs[keep].reshape(-1, 3))


def segments_to_array(segments: Sequence[Segment], *, y_up: bool = False) -> np.ndarray:
    """Return an ``(2 * len(segments), 3)`` float32 array of segment endpoints."""

    positions = np.empty((len(segments) * 2, 3), dtype=np.float32)
    for index, segment in enumerate(segments):
        positions[index * 2] = segment.start
        positions[index * 2 + 1] = segment.end
    if y_up and len(positions):
        positions = positions @ _Y_UP.T
    return positions


def build_vertex_buffers(geometry: LayeredGeometry, *, y_up: bool = False) -> list[VertexBuffer]:
    """Return three buffers per layer, or three in total for flattened geometry.

    Buffers are named ``layer<index>``; flattened buffers use the layer count
    as their index.
    """

    buffers: list[VertexBuffer] = []
    if geometry.flattened is not None:
        name = f"layer{geometry.flattened.layer_count}"
        for kind in SegmentKind:
            array = segments_to_array(geometry.flattened.segments(kind), y_up=y_up)
            buffers.append(VertexBuffer(name, kind, array))
        return buffers

    for index, layer in enumerate(geometry.layers):
        for kind in SegmentKind:
            array = segments_to_array(layer.segments(kind), y_up=y_up)
            buffers.append(VertexBuffer(f"layer{index}", kind, array))
    return buffers


def compute_bounds(buffers: Sequence[VertexBuffer]) -> tuple[np.ndarray, np.ndarray] | None:
    """Return the finite ``(minimum, maximum)`` corners of *buffers* or ``None``."""

    arrays = [buffer.positions for buffer in buffers if not buffer.is_empty]
    if not arrays:
        return None
    stacked = np.concatenate(arrays)
    finite = stacked[np.isfinite(stacked).all(axis=1)]
    if not len(finite):
        return None
    return finite.min(axis=0), finite.max(axis=0)
