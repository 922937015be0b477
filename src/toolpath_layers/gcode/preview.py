"""Render parsed toolpath geometry into top-down preview images."""

from __future__ import annotations

import io
import logging
import math
from collections.abc import Iterable, Sequence

from PIL import Image, ImageDraw, ImageFont

from .buffers import VertexBuffer, build_vertex_buffers, compute_bounds, segments_to_array
from .layers import LayeredGeometry, Segment, SegmentKind

__all__ = [
    "DEFAULT_PREVIEW_SIZE",
    "ToolpathPreviewError",
    "ToolpathPreviewRenderer",
]

logger = logging.getLogger(__name__)

Color = tuple[int, int, int, int]

DEFAULT_PREVIEW_SIZE: tuple[int, int] = (768, 512)
"""Default pixel dimensions for generated toolpath previews."""


class ToolpathPreviewError(RuntimeError):
    """Raised when a toolpath preview cannot be produced."""


class ToolpathPreviewRenderer:
    """Draw extruded, support and travel segments in the XY plane."""

    def __init__(
        self,
        *,
        background: Color = (12, 16, 22, 255),
        extruded_color: Color = (0, 255, 0, 255),
        support_color: Color = (255, 255, 255, 255),
        travel_color: Color = (255, 0, 0, 160),
        axis_color: Color = (200, 200, 210, 160),
    ) -> None:
        self._background = background
        self._colors: dict[SegmentKind, Color] = {
            SegmentKind.EXTRUDED: extruded_color,
            SegmentKind.SUPPORT: support_color,
            SegmentKind.TRAVEL: travel_color,
        }
        self._axis_color = axis_color

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def render(
        self,
        geometry: LayeredGeometry,
        *,
        layers: Iterable[int] | None = None,
        show_travel: bool = True,
        size: tuple[int, int] = DEFAULT_PREVIEW_SIZE,
    ) -> Image.Image:
        """Return a Pillow image of *geometry*.

        *layers* restricts drawing to the given layer indices and is only
        honoured for layer-preserving geometry.
        """

        kinds = [kind for kind in SegmentKind if show_travel or kind is not SegmentKind.TRAVEL]
        buffers, layer_count = _select_buffers(geometry, kinds, layers)
        buffers = [buffer.finite() for buffer in buffers]
        bounds = compute_bounds(buffers)
        if bounds is None:
            raise ToolpathPreviewError("No drawable segments were found in this toolpath.")

        width = max(1, int(size[0]))
        height = max(1, int(size[1]))
        image = Image.new("RGBA", (width, height), self._background)
        draw = ImageDraw.Draw(image, "RGBA")

        minimum, maximum = bounds
        min_x, min_y, min_z = (float(value) for value in minimum)
        max_x, max_y, max_z = (float(value) for value in maximum)

        if math.isclose(max_x, min_x):
            max_x += 1.0
            min_x -= 1.0
        if math.isclose(max_y, min_y):
            max_y += 1.0
            min_y -= 1.0

        padding = max(24, min(width, height) // 12)
        available_width = max(1.0, width - padding * 2)
        available_height = max(1.0, height - padding * 2)
        scale = available_width / (max_x - min_x)
        if (max_y - min_y) * scale > available_height:
            scale = available_height / (max_y - min_y)
        scale = max(scale, 1e-6)

        def project(point: Sequence[float]) -> tuple[float, float]:
            x, y = float(point[0]), float(point[1])
            px = padding + (x - min_x) * scale
            py = height - (padding + (y - min_y) * scale)
            return px, py

        axis_width = max(1, int(scale * 0.5))
        if min_x <= 0 <= max_x:
            draw.line([project((0.0, min_y)), project((0.0, max_y))], fill=self._axis_color, width=axis_width)
        if min_y <= 0 <= max_y:
            draw.line([project((min_x, 0.0)), project((max_x, 0.0))], fill=self._axis_color, width=axis_width)

        line_width = max(1, min(4, int(scale * 0.4)))
        counts: dict[SegmentKind, int] = {kind: 0 for kind in SegmentKind}
        # Travel first so deposited material stays visible on top.
        for buffer in sorted(buffers, key=lambda item: item.kind is not SegmentKind.TRAVEL):
            color = self._colors[buffer.kind]
            for start, end in buffer.positions.reshape(-1, 2, 3):
                draw.line([project(start), project(end)], fill=color, width=line_width)
            counts[buffer.kind] += buffer.segment_count

        font = ImageFont.load_default()
        lines = _overlay_lines(layer_count, counts, min_z, max_z)
        text_color = (240, 240, 240, 255) if self._background[0] < 200 else (20, 20, 20, 255)
        y = padding // 2
        for line in lines:
            draw.text((padding // 2, y), line, fill=text_color, font=font)
            y += _measure_text_height(font, line) + 2

        logger.debug("Rendered %d segments into a %dx%d preview", sum(counts.values()), width, height)
        return image

    def render_png(self, geometry: LayeredGeometry, **kwargs) -> bytes:
        """Return :meth:`render` output encoded as PNG bytes."""

        image = self.render(geometry, **kwargs)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()


def _select_buffers(
    geometry: LayeredGeometry,
    kinds: Sequence[SegmentKind],
    layers: Iterable[int] | None,
) -> tuple[list[VertexBuffer], int]:
    """Return one buffer per kind for the chosen layers and how many layers were chosen."""

    if geometry.flattened is not None:
        flat = [buffer for buffer in build_vertex_buffers(geometry) if buffer.kind in kinds]
        return flat, geometry.flattened.layer_count

    if layers is None:
        selected = geometry.layers
    else:
        wanted = set(layers)
        selected = [layer for index, layer in enumerate(geometry.layers) if index in wanted]

    buffers: list[VertexBuffer] = []
    for kind in kinds:
        segments: list[Segment] = []
        for layer in selected:
            segments.extend(layer.segments(kind))
        buffers.append(VertexBuffer("preview", kind, segments_to_array(segments)))
    return buffers, len(selected)


def _overlay_lines(
    layer_count: int,
    counts: dict[SegmentKind, int],
    min_z: float,
    max_z: float,
) -> list[str]:
    return [
        f"Layers: {layer_count}",
        (
            f"Extruded: {counts[SegmentKind.EXTRUDED]}  |  Support: {counts[SegmentKind.SUPPORT]}"
            f"  |  Travel: {counts[SegmentKind.TRAVEL]}"
        ),
        f"Z range: {min_z:.2f} to {max_z:.2f}",
    ]


def _measure_text_height(font: ImageFont.ImageFont, text: str) -> int:
    bbox = font.getbbox(text)
    return int(bbox[3] - bbox[1])
