"""Command line interface for inspecting toolpaths."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .config import configure
from .gcode import LayeredGeometry, SegmentKind, ToolpathInterpreter, aggregate
from .gcode.preview import ToolpathPreviewError, ToolpathPreviewRenderer
from .loader import ToolpathAcquisitionError, load_text

__all__ = ["build_parser", "main"]

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolpath-layers",
        description="Split a G-code toolpath into layers of extruded, support and travel segments.",
    )
    parser.add_argument("source", help="Path or http(s) URL of the toolpath to read.")
    parser.add_argument(
        "--flat",
        action="store_true",
        help="Merge all layers into three segment lists instead of keeping them separate.",
    )
    parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help="Print the parsed geometry as JSON.",
    )
    parser.add_argument(
        "--preview",
        type=Path,
        default=None,
        help="Write a PNG preview of the toolpath to this path.",
    )
    parser.add_argument(
        "--tool-offset",
        type=float,
        default=None,
        help="X offset subtracted from explicit X targets while tool 1 is active.",
    )
    parser.add_argument(
        "--travel-layers",
        action="store_true",
        help="Start a new layer on Z changes made while travelling, not only while extruding.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = configure(
        split_layer=not args.flat,
        secondary_tool_x_offset=args.tool_offset,
        travel_starts_layer=args.travel_layers,
    )

    try:
        text = load_text(args.source)
    except ToolpathAcquisitionError as exc:
        logger.error("%s", exc)
        return 1

    result = ToolpathInterpreter(config).interpret(text)
    geometry = aggregate(result.layers, split_layer=config.split_layer)
    diagnostics = result.diagnostics
    logger.info(
        "Parsed %d lines into %d moves across %d layers",
        diagnostics.lines,
        diagnostics.moves,
        len(geometry.layers),
    )
    if diagnostics.unsupported:
        logger.info("Skipped %d unsupported arc commands", len(diagnostics.unsupported))
    if diagnostics.invalid_params:
        logger.warning("Found %d malformed parameters", len(diagnostics.invalid_params))

    if args.as_json:
        json.dump(geometry.to_dict(), sys.stdout, allow_nan=False)
        sys.stdout.write("\n")
    else:
        _print_summary(geometry)

    if args.preview is not None:
        try:
            payload = ToolpathPreviewRenderer().render_png(geometry)
        except ToolpathPreviewError as exc:
            logger.error("%s", exc)
            return 1
        args.preview.parent.mkdir(parents=True, exist_ok=True)
        args.preview.write_bytes(payload)
        logger.info("Wrote preview to %s", args.preview)

    return 0


def _print_summary(geometry: LayeredGeometry) -> None:
    if geometry.flattened is not None:
        flat = geometry.flattened
        print(
            f"{flat.layer_count} layers: extruded {len(flat.extruded)}, "
            f"support {len(flat.support)}, travel {len(flat.travel)}"
        )
        return

    for index, layer in enumerate(geometry.layers):
        counts = ", ".join(f"{kind.value} {len(layer.segments(kind))}" for kind in SegmentKind)
        print(f"layer {index} z={layer.z:g}: {counts}")
