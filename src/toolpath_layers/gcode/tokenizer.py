"""Split toolpath text into commands with single-letter numeric parameters."""

from __future__ import annotations

import math
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

__all__ = [
    "COMMENT_MARKER",
    "Command",
    "ParamValue",
    "iter_commands",
    "parse_number",
    "split_lines",
    "strip_comment",
    "tokenize_line",
]

COMMENT_MARKER = ";"
"""Character that starts a comment running to the end of the line."""

_NUMBER_PREFIX = re.compile(r"\s*([-+]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?))")
_TOOL_MARKERS: tuple[tuple[str, int], ...] = (("T1", 1), ("T0", 0))


@dataclass(frozen=True, slots=True)
class ParamValue:
    """A parameter value together with whether its text parsed cleanly."""

    raw: str
    value: float
    valid: bool


@dataclass(frozen=True, slots=True)
class Command:
    """One source line decomposed into a command code and its parameters."""

    code: str
    params: Mapping[str, ParamValue] = field(default_factory=dict)
    tool: int | None = None
    line_number: int = 0

    @property
    def is_noop(self) -> bool:
        return not self.code

    @property
    def invalid_axes(self) -> tuple[str, ...]:
        return tuple(key for key, param in self.params.items() if not param.valid)

    def has(self, axis: str) -> bool:
        return axis in self.params

    def value(self, axis: str) -> float | None:
        """Return the numeric value for *axis* or ``None`` when it is absent.

        Invalid parameters yield ``nan`` so they propagate into computed state.
        """

        param = self.params.get(axis)
        if param is None:
            return None
        return param.value


def parse_number(text: str) -> ParamValue:
    """Parse the leading number of *text*, flagging it invalid when there is none.

    Trailing garbage after a number is ignored (``"1.5mm"`` reads as ``1.5``).
    """

    match = _NUMBER_PREFIX.match(text)
    if match is None:
        return ParamValue(raw=text, value=math.nan, valid=False)
    return ParamValue(raw=text, value=float(match.group(1)), valid=True)


def strip_comment(line: str) -> str:
    marker = line.find(COMMENT_MARKER)
    if marker == -1:
        return line
    return line[:marker]


def split_lines(text: str) -> list[str]:
    """Return the comment-free lines of *text* in source order."""

    return [strip_comment(line) for line in text.splitlines()]


def tokenize_line(line: str, line_number: int = 0) -> Command:
    """Decompose *line* into a :class:`Command`.

    Blank lines produce a command with an empty code which callers skip.
    """

    line = strip_comment(line)
    tool = _detect_tool(line)
    tokens = line.split()
    if not tokens:
        return Command(code="", tool=tool, line_number=line_number)

    params: dict[str, ParamValue] = {}
    for token in tokens[1:]:
        params[token[0].lower()] = parse_number(token[1:])

    return Command(
        code=tokens[0].upper(),
        params=MappingProxyType(params),
        tool=tool,
        line_number=line_number,
    )


def iter_commands(text: str) -> Iterator[Command]:
    """Yield one command per line of *text*, numbering lines from 1."""

    for line_number, line in enumerate(split_lines(text), start=1):
        yield tokenize_line(line, line_number)


def _detect_tool(line: str) -> int | None:
    # T0 is checked last so it wins when a line mentions both tools.
    tool: int | None = None
    for marker, index in _TOOL_MARKERS:
        if marker in line:
            tool = index
    return tool
