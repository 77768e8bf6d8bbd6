"""Scan settings loaded from an optional YAML file.

The file holds a single ``scan`` mapping; every key is optional and falls back
to the defaults on :class:`ScanSettings`:

.. code-block:: yaml

    scan:
      base_url: https://steamcommunity.com/sharedfiles
      timeout: 30
      retries: 3
      settle_delay: 0.3
      workers: 4
      on_fetch_failure: skip
      on_invalid_selection: reprompt

Command-line options override file values through :meth:`ScanSettings.merged`.
"""

from __future__ import annotations

import dataclasses as dc
import math
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .fetch import DEFAULT_BASE_URL

FETCH_FAILURE_POLICIES = ("skip", "abort")
INVALID_SELECTION_POLICIES = ("reprompt", "abort")


class SettingsError(ValueError):
    """Raised when the settings file or an override is invalid."""


@dc.dataclass(frozen=True, slots=True)
class ScanSettings:
    """Tunables for one collection scan.

    Attributes
    ----------
    base_url : str
        Catalog base URL; detail pages live at ``<base_url>/filedetails/``.
    timeout : float
        Per-request timeout in seconds.
    retries : int
        Retry budget per request.
    settle_delay : float
        Pause in seconds after each detail page fetch.
    workers : int
        Concurrent detail page fetches; ``1`` scans strictly sequentially.
    on_fetch_failure : str
        ``"skip"`` records a failed item with no candidates, ``"abort"`` stops
        the run.
    on_invalid_selection : str
        ``"reprompt"`` asks again after bad input, ``"abort"`` stops the run.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    retries: int = 3
    settle_delay: float = 0.3
    workers: int = 1
    on_fetch_failure: str = "skip"
    on_invalid_selection: str = "reprompt"

    def __post_init__(self) -> None:
        for name in ("timeout", "retries", "settle_delay", "workers"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int | float):
                msg = f"{name} must be a number, got {value!r}"
                raise SettingsError(msg)
        for name in ("timeout", "settle_delay"):
            if not math.isfinite(getattr(self, name)):
                msg = f"{name} must be finite, got {getattr(self, name)!r}"
                raise SettingsError(msg)
        if self.workers < 1:
            msg = f"workers must be at least 1, got {self.workers}"
            raise SettingsError(msg)
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout}"
            raise SettingsError(msg)
        if self.retries < 0:
            msg = f"retries cannot be negative, got {self.retries}"
            raise SettingsError(msg)
        if self.settle_delay < 0:
            msg = f"settle_delay cannot be negative, got {self.settle_delay}"
            raise SettingsError(msg)
        if self.on_fetch_failure not in FETCH_FAILURE_POLICIES:
            msg = (
                f"on_fetch_failure must be one of {FETCH_FAILURE_POLICIES}, "
                f"got {self.on_fetch_failure!r}"
            )
            raise SettingsError(msg)
        if self.on_invalid_selection not in INVALID_SELECTION_POLICIES:
            msg = (
                f"on_invalid_selection must be one of "
                f"{INVALID_SELECTION_POLICIES}, got {self.on_invalid_selection!r}"
            )
            raise SettingsError(msg)

    def merged(self, **overrides: typ.Any) -> ScanSettings:
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        unknown = set(changes) - {field.name for field in dc.fields(self)}
        if unknown:
            msg = f"Unknown settings: {', '.join(sorted(unknown))}"
            raise SettingsError(msg)
        return dc.replace(self, **changes)


def _to_int(value: typ.Any) -> int:
    if isinstance(value, bool):
        msg = f"expected an integer, got {value!r}"
        raise TypeError(msg)
    return int(value)


def _to_float(value: typ.Any) -> float:
    if isinstance(value, bool):
        msg = f"expected a number, got {value!r}"
        raise TypeError(msg)
    return float(value)


_CONVERTERS: dict[str, typ.Callable[[typ.Any], typ.Any]] = {
    "base_url": str,
    "timeout": _to_float,
    "retries": _to_int,
    "settle_delay": _to_float,
    "workers": _to_int,
    "on_fetch_failure": str,
    "on_invalid_selection": str,
}


def load_settings(path: Path | None) -> ScanSettings:
    """Load scan settings from ``path``.

    Parameters
    ----------
    path : Path | None
        YAML file to read. ``None`` or a missing file yields the defaults.

    Returns
    -------
    ScanSettings
        Defaults overlaid with the file's ``scan`` mapping.

    Raises
    ------
    SettingsError
        If the file cannot be read, is malformed YAML, is not a mapping, or
        holds invalid values.
    """
    if path is None or not path.exists():
        return ScanSettings()

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Settings file '{path}' is not valid YAML: {exc}"
        raise SettingsError(msg) from exc
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Settings file '{path}' could not be read: {exc}"
        raise SettingsError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"Settings file '{path}' must contain a mapping."
        raise SettingsError(msg)

    scan = loaded.get("scan") or {}
    if not isinstance(scan, dict):
        msg = f"'scan' in '{path}' must be a mapping."
        raise SettingsError(msg)

    values: dict[str, typ.Any] = {}
    for key, convert in _CONVERTERS.items():
        if key not in scan or scan[key] is None:
            continue
        try:
            values[key] = convert(scan[key])
        except (TypeError, ValueError, OverflowError) as exc:
            msg = f"Invalid value for '{key}' in '{path}': {scan[key]!r}"
            raise SettingsError(msg) from exc
    return ScanSettings(**values)


__all__ = [
    "FETCH_FAILURE_POLICIES",
    "INVALID_SELECTION_POLICIES",
    "ScanSettings",
    "SettingsError",
    "load_settings",
]
