"""Render resolved identifiers as a launcher configuration fragment.

The fragment is three semicolon-terminated lines in a fixed order::

    WorkshopItems=<id>;<id>;...;
    Mods=<id>;<id>;...;
    Map=<map>;

:func:`parse_config` reads a fragment back into a
:class:`~workshop_ids.disambiguate.ResolvedConfig`.

Example
-------
>>> print(format_config(["1", "2"], ["ModA", "ModB"], ""))
WorkshopItems=1;2;
Mods=ModA;ModB;
Map=;
"""

from __future__ import annotations

import typing as typ

from .disambiguate import ResolvedConfig

SEPARATOR = ";"
WORKSHOP_KEY = "WorkshopItems"
MODS_KEY = "Mods"
MAP_KEY = "Map"


class ConfigFragmentError(ValueError):
    """Raised when a configuration fragment cannot be parsed."""


def format_config(
    workshop_ids: typ.Sequence[str], mod_ids: typ.Sequence[str], map_id: str
) -> str:
    """Return the three-line configuration fragment."""
    return "\n".join(
        (
            f"{WORKSHOP_KEY}={SEPARATOR.join(workshop_ids)}{SEPARATOR}",
            f"{MODS_KEY}={SEPARATOR.join(mod_ids)}{SEPARATOR}",
            f"{MAP_KEY}={map_id}{SEPARATOR}",
        )
    )


def format_resolved(config: ResolvedConfig) -> str:
    return format_config(config.workshop_ids, config.mod_ids, config.map_id)


def parse_config(text: str) -> ResolvedConfig:
    """Parse a fragment produced by :func:`format_config`.

    Raises
    ------
    ConfigFragmentError
        If the three lines are missing, out of order, or not terminated by a
        semicolon.
    """
    lines = text.strip("\n").split("\n")
    if len(lines) != 3:
        msg = f"Expected 3 lines, got {len(lines)}"
        raise ConfigFragmentError(msg)
    workshop = _value(lines[0], WORKSHOP_KEY)
    mods = _value(lines[1], MODS_KEY)
    map_id = _value(lines[2], MAP_KEY)
    return ResolvedConfig(
        workshop_ids=_split(workshop), mod_ids=_split(mods), map_id=map_id
    )


def _value(line: str, key: str) -> str:
    prefix = f"{key}="
    if not line.startswith(prefix):
        msg = f"Expected a line starting with {prefix!r}, got {line!r}"
        raise ConfigFragmentError(msg)
    if not line.endswith(SEPARATOR):
        msg = f"Line {line!r} is not terminated by {SEPARATOR!r}"
        raise ConfigFragmentError(msg)
    return line[len(prefix) : -len(SEPARATOR)]


def _split(joined: str) -> list[str]:
    return joined.split(SEPARATOR) if joined else []


__all__ = [
    "ConfigFragmentError",
    "format_config",
    "format_resolved",
    "parse_config",
]
