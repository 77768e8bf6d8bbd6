"""Extract workshop, mod and map identifiers from a workshop collection.

The package scans a collection page, reads ``Mod ID:`` and ``Map Folder:``
values from every item's description and prints a launcher configuration
fragment.

Exports
-------
- ``app``: Cyclopts application with the ``scan`` command.
- ``main``: Convenience function that invokes the app.

Examples
--------
>>> from workshop_ids import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
