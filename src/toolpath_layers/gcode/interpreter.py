"""State machine that turns toolpath commands into layered segments."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from ..config import ParserConfig, get_config
from .layers import Layer, LayerBuilder, Segment, SegmentKind
from .tokenizer import Command, iter_commands

__all__ = [
    "InterpretResult",
    "MachineState",
    "ParseDiagnostics",
    "ParserContext",
    "ToolpathInterpreter",
    "classify_segment",
]

logger = logging.getLogger(__name__)

LINEAR_MOVES = frozenset({"G0", "G1"})
ARC_MOVES = frozenset({"G2", "G3"})
_MOVE_AXES = ("x", "y", "z", "e", "f")
_POSITION_AXES = ("x", "y", "z", "e")


@dataclass(frozen=True, slots=True)
class MachineState:
    """Snapshot of the machine between two commands."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    e: float = 0.0
    f: float = 0.0
    extruding: bool = False
    relative: bool = False
    tool: int = 0

    @property
    def position(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(slots=True)
class ParseDiagnostics:
    """Lines the interpreter skipped or applied only partially."""

    lines: int = 0
    moves: int = 0
    unsupported: list[tuple[int, str]] = field(default_factory=list)
    ignored: list[tuple[int, str]] = field(default_factory=list)
    invalid_params: list[tuple[int, str, str]] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.unsupported or self.invalid_params)


@dataclass(slots=True)
class ParserContext:
    """Mutable state owned by a single parse pass."""

    config: ParserConfig
    state: MachineState = field(default_factory=MachineState)
    builder: LayerBuilder = field(default_factory=LayerBuilder)
    diagnostics: ParseDiagnostics = field(default_factory=ParseDiagnostics)

    def select_tool(self, tool: int) -> None:
        self.state = replace(self.state, tool=tool)


@dataclass(slots=True)
class InterpretResult:
    """Layers and final state produced by :meth:`ToolpathInterpreter.interpret`."""

    layers: list[Layer]
    state: MachineState
    diagnostics: ParseDiagnostics


def classify_segment(extruding: bool, tool: int) -> SegmentKind:
    """Return the classification of a move made with *tool*."""

    if extruding and tool == 1:
        return SegmentKind.EXTRUDED
    if extruding and tool == 0:
        return SegmentKind.SUPPORT
    return SegmentKind.TRAVEL


class ToolpathInterpreter:
    """Apply commands to a :class:`MachineState` and record the resulting segments.

    Each call to :meth:`interpret` runs in a fresh :class:`ParserContext`, so a
    single interpreter can be reused and instances never share state.
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self._config = config or get_config()

    @property
    def config(self) -> ParserConfig:
        return self._config

    def new_context(self) -> ParserContext:
        return ParserContext(config=self._config)

    def interpret(self, text: str) -> InterpretResult:
        """Parse *text* in one forward pass and return the recorded layers."""

        context = self.new_context()
        self.run(context, iter_commands(text))
        return InterpretResult(
            layers=context.builder.layers,
            state=context.state,
            diagnostics=context.diagnostics,
        )

    def run(self, context: ParserContext, commands: Iterable[Command]) -> ParserContext:
        for command in commands:
            self.feed(context, command)
        return context

    def feed(self, context: ParserContext, command: Command) -> None:
        """Apply a single *command* to *context*."""

        context.diagnostics.lines += 1
        if command.tool is not None:
            context.select_tool(command.tool)
        if command.is_noop:
            return

        for axis in command.invalid_axes:
            context.diagnostics.invalid_params.append(
                (command.line_number, axis, command.params[axis].raw)
            )

        code = command.code
        if code in LINEAR_MOVES:
            self._linear_move(context, command)
        elif code in ARC_MOVES:
            logger.debug("Arc command %s on line %d is not supported", code, command.line_number)
            context.diagnostics.unsupported.append((command.line_number, code))
        elif code == "G90":
            context.state = replace(context.state, relative=False)
        elif code == "G91":
            context.state = replace(context.state, relative=True)
        elif code == "G92":
            self._set_position(context, command)
        else:
            logger.debug("Ignoring command %s on line %d", code, command.line_number)
            context.diagnostics.ignored.append((command.line_number, code))

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------
    def _linear_move(self, context: ParserContext, command: Command) -> None:
        state = context.state
        values: dict[str, float] = {}
        for axis in _MOVE_AXES:
            argument = command.value(axis)
            if argument is None:
                values[axis] = getattr(state, axis)
                continue
            if axis == "x" and state.tool == 1:
                argument -= self._config.secondary_tool_x_offset
            values[axis] = getattr(state, axis) + argument if state.relative else argument

        if state.relative:
            extrusion = command.value("e") or 0.0
        else:
            extrusion = values["e"] - state.e
        extruding = extrusion > 0

        target = replace(state, extruding=extruding, **values)
        builder = context.builder
        if extruding or self._config.travel_starts_layer:
            if builder.needs_layer_at(target.z):
                builder.start_layer(target.z)

        kind = classify_segment(extruding, state.tool)
        builder.add_segment(Segment(state.position, target.position, kind))
        context.diagnostics.moves += 1
        context.state = target

    def _set_position(self, context: ParserContext, command: Command) -> None:
        overrides = {
            axis: value
            for axis in _POSITION_AXES
            if (value := command.value(axis)) is not None
        }
        context.state = replace(context.state, **overrides)
