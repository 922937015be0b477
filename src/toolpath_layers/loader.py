"""Acquire toolpath text from disk or over HTTP and hand it to the parser."""

from __future__ import annotations

import logging
from collections.abc import Callable
from os import PathLike
from pathlib import Path

import requests

from .config import ParserConfig, get_config
from .gcode import LayeredGeometry, parse_toolpath

__all__ = [
    "DEFAULT_TIMEOUT",
    "ToolpathAcquisitionError",
    "ToolpathLoader",
    "is_remote_source",
    "load_text",
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 30.0
"""Seconds to wait for a remote toolpath before giving up."""

Source = str | Path | PathLike[str]


class ToolpathAcquisitionError(RuntimeError):
    """Raised when the toolpath text itself cannot be obtained."""


def is_remote_source(source: Source) -> bool:
    return isinstance(source, str) and source.strip().lower().startswith(("http://", "https://"))


def load_text(
    source: Source,
    *,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Return the full text of *source*, a filesystem path or an HTTP(S) URL."""

    if is_remote_source(source):
        url = str(source).strip()
        http = session or requests.Session()
        try:
            response = http.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ToolpathAcquisitionError(f"Unable to fetch {url}: {exc}") from exc
        return response.text

    text = str(source).strip()
    if not text:
        raise ToolpathAcquisitionError("Toolpath source cannot be empty")
    path = Path(text).expanduser()
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        raise ToolpathAcquisitionError(f"Unable to read {path!s}: {exc}") from exc


class ToolpathLoader:
    """Fetch a toolpath and deliver its parsed geometry through callbacks."""

    def __init__(
        self,
        config: ParserConfig | None = None,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._config = config or get_config()
        self._session = session
        self._timeout = timeout

    @property
    def split_layer(self) -> bool:
        return self._config.split_layer

    def parse(self, text: str) -> LayeredGeometry:
        return parse_toolpath(text, config=self._config)

    def load(
        self,
        source: Source,
        on_load: Callable[[LayeredGeometry], None],
        on_error: Callable[[Exception], None] | None = None,
    ) -> LayeredGeometry | None:
        """Load *source*, parse it and pass the geometry to *on_load*.

        Failures go to *on_error* when given and are logged otherwise; in both
        cases ``None`` is returned.
        """

        try:
            text = load_text(source, session=self._session, timeout=self._timeout)
        except ToolpathAcquisitionError as exc:
            self._report(source, exc, on_error)
            return None

        try:
            geometry = self.parse(text)
            on_load(geometry)
        except Exception as exc:
            self._report(source, exc, on_error)
            return None
        return geometry

    def _report(
        self,
        source: Source,
        exc: Exception,
        on_error: Callable[[Exception], None] | None,
    ) -> None:
        if on_error is not None:
            on_error(exc)
            return
        logger.error("Failed to load toolpath %s", source, exc_info=exc)
