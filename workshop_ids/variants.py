"""Normalised spellings of description labels.

Workshop descriptions are typed by hand, so ``Mod ID:`` also shows up as
``ModID:`` or ``Mod ID``. :func:`variants_of` lists the spellings the extractor
tries, in priority order.

Example
-------
>>> variants_of("Mod ID:")
['mod id:', 'modid:', 'mod id']
"""

from __future__ import annotations


def variants_of(label: str) -> list[str]:
    """Return the lower-case, space-free and colon-free forms of ``label``."""
    lowered = label.lower()
    return [lowered, lowered.replace(" ", ""), lowered.replace(":", "")]


__all__ = ["variants_of"]
