from __future__ import annotations

import pytest

from toolpath_layers.config import (
    DEFAULT_SECONDARY_TOOL_X_OFFSET,
    TOOL_X_OFFSET_ENV_VAR,
    ParserConfig,
    configure,
    get_config,
)


def test_default_config() -> None:
    """The default configuration keeps layers split and uses the stock offset."""

    config = get_config()

    assert config.split_layer is True
    assert config.secondary_tool_x_offset == DEFAULT_SECONDARY_TOOL_X_OFFSET == 22.0
    assert config.travel_starts_layer is False


def test_configure_overrides() -> None:
    """Explicit overrides should update the cached configuration."""

    configure(split_layer=False, secondary_tool_x_offset=18, travel_starts_layer=True)
    config = get_config()

    assert config.split_layer is False
    assert config.secondary_tool_x_offset == 18.0
    assert config.travel_starts_layer is True


def test_environment_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """An environment variable should control the default tool offset."""

    monkeypatch.setenv(TOOL_X_OFFSET_ENV_VAR, "19.5")
    configure()

    assert get_config().secondary_tool_x_offset == 19.5


def test_invalid_environment_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(TOOL_X_OFFSET_ENV_VAR, "wide")
    with pytest.raises(ValueError):
        configure()


def test_non_finite_offset_rejected() -> None:
    with pytest.raises(ValueError):
        ParserConfig(secondary_tool_x_offset=float("inf"))
