"""Configuration helpers for the toolpath interpreter."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Final

__all__ = [
    "DEFAULT_SECONDARY_TOOL_X_OFFSET",
    "ParserConfig",
    "TOOL_X_OFFSET_ENV_VAR",
    "configure",
    "get_config",
]

TOOL_X_OFFSET_ENV_VAR: Final[str] = "TOOLPATH_LAYERS_TOOL_X_OFFSET"
"""Environment variable that overrides the secondary tool X offset."""

DEFAULT_SECONDARY_TOOL_X_OFFSET: Final[float] = 22.0
"""Distance the second extruder (tool 1) is mounted from the first along X.

Explicit X targets issued while tool 1 is active are reduced by this amount.
"""


@dataclass(frozen=True, slots=True)
class ParserConfig:
    """Options recognised by the toolpath interpreter."""

    split_layer: bool = True
    secondary_tool_x_offset: float = DEFAULT_SECONDARY_TOOL_X_OFFSET
    travel_starts_layer: bool = False

    def __post_init__(self) -> None:
        offset = float(self.secondary_tool_x_offset)
        if not math.isfinite(offset):
            raise ValueError("Secondary tool offset must be a finite number")
        object.__setattr__(self, "secondary_tool_x_offset", offset)
        object.__setattr__(self, "split_layer", bool(self.split_layer))
        object.__setattr__(self, "travel_starts_layer", bool(self.travel_starts_layer))


_CONFIG: ParserConfig | None = None


def get_config() -> ParserConfig:
    """Return the cached :class:`ParserConfig` instance."""

    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _build_config()
    return _CONFIG


def configure(
    *,
    split_layer: bool | None = None,
    secondary_tool_x_offset: float | None = None,
    travel_starts_layer: bool | None = None,
) -> ParserConfig:
    """Rebuild the global configuration with optional overrides."""

    global _CONFIG
    _CONFIG = _build_config(
        split_layer=split_layer,
        secondary_tool_x_offset=secondary_tool_x_offset,
        travel_starts_layer=travel_starts_layer,
    )
    return _CONFIG


def _build_config(
    *,
    split_layer: bool | None = None,
    secondary_tool_x_offset: float | None = None,
    travel_starts_layer: bool | None = None,
) -> ParserConfig:
    offset = secondary_tool_x_offset
    if offset is None:
        offset = _offset_from_environment()

    return ParserConfig(
        split_layer=True if split_layer is None else split_layer,
        secondary_tool_x_offset=offset,
        travel_starts_layer=False if travel_starts_layer is None else travel_starts_layer,
    )


def _offset_from_environment() -> float:
    env_value = os.environ.get(TOOL_X_OFFSET_ENV_VAR)
    if env_value is None or not env_value.strip():
        return DEFAULT_SECONDARY_TOOL_X_OFFSET
    try:
        return float(env_value)
    except ValueError as exc:
        raise ValueError(f"{TOOL_X_OFFSET_ENV_VAR} must be numeric, got {env_value!r}") from exc
