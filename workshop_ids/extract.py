"""Pull labelled values out of free-form description text.

Descriptions carry identifiers as loosely formatted ``Label: value`` lines
mixed with markup. Extraction runs in two independent steps:

1. :func:`locate_anchor` finds the first label variant in the text and where
   it starts.
2. :func:`collect_values` strips markup from the text after that point and
   reads every value that follows the label.

Labels are matched case-insensitively, but values are always read back from
the original text so identifiers keep their casing.

Example
-------
>>> from workshop_ids.variants import variants_of
>>> extract("Prefix Mod ID: AbC123 \\n", variants_of("Mod ID:"))
['AbC123']
"""

from __future__ import annotations

import dataclasses as dc
import html
import re
import typing as typ

_MARKUP_PATTERN = re.compile(r"<[^>]*>")


@dc.dataclass(frozen=True, slots=True)
class Anchor:
    """Location of the first label variant found in a text."""

    variant: str
    offset: int


def fold_case(text: str) -> str:
    """Lower-case ``text`` without changing its length.

    Characters whose lower-case form is longer or shorter than the original
    (``"İ"`` for instance) are left untouched so offsets computed on the
    folded text index the same characters in ``text``.
    """
    return "".join(
        lowered if len(lowered := char.lower()) == 1 else char for char in text
    )


def strip_markup(text: str) -> str:
    """Replace each markup fragment with a newline and unescape entities."""
    return html.unescape(_MARKUP_PATTERN.sub("\n", text))


def locate_anchor(raw_text: str, variants: typ.Sequence[str]) -> Anchor | None:
    """Return the first variant present in ``raw_text`` and its offset."""
    folded = fold_case(raw_text)
    for variant in variants:
        if not variant:
            continue
        offset = folded.find(variant)
        if offset >= 0:
            return Anchor(variant=variant, offset=offset)
    return None


def collect_values(text: str, variant: str) -> list[str]:
    """Return every value following ``variant`` in ``text``, in order.

    A value is the remainder of the line after the label and at least one
    whitespace character, and must itself be followed by whitespace. The
    label is matched against the case-folded text; the value is sliced from
    ``text`` at the same offsets.
    """
    if not variant:
        return []
    folded = fold_case(text)
    pattern = re.compile(rf"{re.escape(variant)}\s+(.+)\s+")
    values: list[str] = []
    for match in pattern.finditer(folded):
        value = text[match.start(1) : match.end(1)].strip()
        if value:
            values.append(value)
    return values


def extract(raw_text: str, variants: typ.Sequence[str]) -> list[str]:
    """Return the values labelled by any of ``variants`` in ``raw_text``.

    The text from the first label occurrence onwards is stripped of markup and
    scanned for every occurrence of the label. Values keep their original
    casing and may repeat. Returns an empty list when no variant occurs.
    """
    anchor = locate_anchor(raw_text, variants)
    if anchor is None:
        return []
    suffix = strip_markup(raw_text[anchor.offset :])
    # Stripping can merge text across tags, so the variant is looked up again.
    relocated = locate_anchor(suffix, variants)
    if relocated is None:
        return []
    return collect_values(suffix, relocated.variant)


__all__ = [
    "Anchor",
    "collect_values",
    "extract",
    "fold_case",
    "locate_anchor",
    "strip_markup",
]
