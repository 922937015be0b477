"""Tests for packing geometry into vertex arrays."""

from __future__ import annotations

import numpy as np

from toolpath_layers.gcode import SegmentKind, parse_toolpath
from toolpath_layers.gcode.buffers import build_vertex_buffers, compute_bounds, segments_to_array

PROGRAM = "G1 X10 Y5 E1\nG1 Z0.5\nT1\nG1 X42 Y5 E2\n"


def test_split_geometry_yields_three_buffers_per_layer() -> None:
    buffers = build_vertex_buffers(parse_toolpath(PROGRAM))

    assert [buffer.name for buffer in buffers] == ["layer0"] * 3 + ["layer1"] * 3
    assert [buffer.kind for buffer in buffers[:3]] == list(SegmentKind)
    support = buffers[1]
    assert support.positions.dtype == np.float32
    assert support.positions.shape == (2, 3)
    assert support.segment_count == 1
    np.testing.assert_allclose(support.positions[1], [10.0, 5.0, 0.0])
    assert buffers[3].segment_count == 1
    np.testing.assert_allclose(buffers[3].positions[1], [20.0, 5.0, 0.5])


def test_flat_geometry_uses_layer_count_name() -> None:
    buffers = build_vertex_buffers(parse_toolpath(PROGRAM, split_layer=False))

    assert [buffer.name for buffer in buffers] == ["layer2"] * 3
    assert sum(buffer.segment_count for buffer in buffers) == 3


def test_y_up_rotation() -> None:
    geometry = parse_toolpath("G1 X1 Y2 Z3 E1\n")
    array = segments_to_array(geometry.layers[0].support, y_up=True)

    np.testing.assert_allclose(array[1], [1.0, 3.0, -2.0])


def test_empty_segments_produce_empty_array() -> None:
    array = segments_to_array([])
    assert array.shape == (0, 3)


def test_compute_bounds_skips_non_finite_vertices() -> None:
    buffers = build_vertex_buffers(parse_toolpath("G1 X4 Y-1 E1\nG1 Xbad E2\n"))

    minimum, maximum = compute_bounds(buffers)

    np.testing.assert_allclose(minimum, [0.0, -1.0, 0.0])
    np.testing.assert_allclose(maximum, [4.0, 0.0, 0.0])
    assert compute_bounds([]) is None


def test_finite_drops_segments_with_non_finite_endpoints() -> None:
    geometry = parse_toolpath("G1 X1 E1\nG1 Xbad E2\nG1 X3 E3\n")
    (_, support, _) = build_vertex_buffers(geometry)

    assert support.segment_count == 3
    finite = support.finite()

    assert finite.segment_count == 1
    assert finite.name == support.name and finite.kind is support.kind
    np.testing.assert_allclose(finite.positions, [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])


def test_buffer_api_exported_from_gcode_package() -> None:
    import toolpath_layers.gcode as gcode

    assert gcode.build_vertex_buffers is build_vertex_buffers
    assert gcode.compute_bounds is compute_bounds
    assert gcode.segments_to_array is segments_to_array
