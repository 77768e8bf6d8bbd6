"""Commit extracted identifiers and defer ambiguous choices to the operator.

:class:`Disambiguator` consumes :class:`~workshop_ids.collection.ExtractionResult`
values in collection order. Items with one mod candidate are committed
directly; items with several get the first candidate as a provisional value
plus a :class:`ReservedPlaceholder` pointing at that slot. Map candidates from
every item go into one shared pool, from which a single map is chosen.

Only the thread that drives the scan calls :meth:`Disambiguator.record` and
:meth:`Disambiguator.resolve`; results gathered by worker threads are replayed
here in order.

Example
-------
>>> from workshop_ids.collection import CollectionItem, ExtractionResult
>>> state = Disambiguator()
>>> item = CollectionItem(workshop_id="1", title="Pack")
>>> state.record(ExtractionResult(item=item, mod_candidates=("a", "b")))
>>> state.resolve(lambda prompt, options: 1).mod_ids
['b']
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

if typ.TYPE_CHECKING:
    from .collection import ExtractionResult

logger = logging.getLogger(__name__)

NO_MAP = ""

Chooser = typ.Callable[[str, typ.Sequence[str]], int]


class SelectionError(ValueError):
    """Raised when an operator selection is missing, malformed or out of range."""


@dc.dataclass(frozen=True, slots=True)
class ReservedPlaceholder:
    """A deferred choice between several candidates for one committed slot.

    Attributes
    ----------
    kind : str
        Identifier kind, ``"mod"`` or ``"map"``.
    options : tuple[str, ...]
        Candidates in extraction order; always two or more.
    committed_index : int
        Index of the provisional value in the committed list.
    item_id : str
        Workshop id of the item that produced the candidates.
    item_title : str
        Display title of that item.
    """

    kind: str
    options: tuple[str, ...]
    committed_index: int
    item_id: str
    item_title: str

    @property
    def prompt(self) -> str:
        return (
            f"Multiple {self.kind}s for {self.item_title} workshop item "
            f"{self.item_id} please select one to enable"
        )


@dc.dataclass(frozen=True, slots=True)
class ResolvedConfig:
    """Final identifiers handed to the output formatter."""

    workshop_ids: list[str]
    mod_ids: list[str]
    map_id: str = NO_MAP


MAP_PROMPT = "Multiple maps please select one to enable"


class Disambiguator:
    """Accumulate committed identifiers and resolve reserved placeholders."""

    def __init__(self) -> None:
        self.workshop_ids: list[str] = []
        self.mod_ids: list[str] = []
        self.map_pool: list[str] = []
        self.placeholders: list[ReservedPlaceholder] = []
        self._resolved = False

    def record(self, result: ExtractionResult) -> None:
        """Commit the candidates of one item, reserving a placeholder if needed."""
        if self._resolved:
            msg = "Cannot record results after resolution"
            raise RuntimeError(msg)
        item = result.item
        self.workshop_ids.append(item.workshop_id)
        candidates = result.mod_candidates
        if candidates:
            self.mod_ids.append(candidates[0])
            if len(candidates) > 1:
                self.placeholders.append(
                    ReservedPlaceholder(
                        kind="mod",
                        options=tuple(candidates),
                        committed_index=len(self.mod_ids) - 1,
                        item_id=item.workshop_id,
                        item_title=item.title,
                    )
                )
        self.map_pool.extend(result.map_candidates)

    def record_all(self, results: typ.Iterable[ExtractionResult]) -> Disambiguator:
        for result in results:
            self.record(result)
        return self

    def resolve(self, chooser: Chooser) -> ResolvedConfig:
        """Ask ``chooser`` for every deferred choice and return the final config.

        Placeholders are resolved in creation order, followed by the shared
        map pool (when it is non-empty) with a trailing "no map" option.

        Raises
        ------
        SelectionError
            If ``chooser`` returns anything but an in-range ``int``. Nothing
            is written for the rejected selection.
        RuntimeError
            If a previous call already completed.
        """
        if self._resolved:
            msg = "Placeholders have already been resolved"
            raise RuntimeError(msg)

        mod_ids = list(self.mod_ids)
        for placeholder in self.placeholders:
            options = placeholder.options
            index = _checked(chooser(placeholder.prompt, options), options)
            mod_ids[placeholder.committed_index] = placeholder.options[index]
            logger.debug(
                "Selected %s %r for workshop item %s",
                placeholder.kind,
                placeholder.options[index],
                placeholder.item_id,
            )

        map_id = NO_MAP
        if self.map_pool:
            options = (*self.map_pool, NO_MAP)
            map_id = options[_checked(chooser(MAP_PROMPT, options), options)]

        self._resolved = True
        return ResolvedConfig(
            workshop_ids=list(self.workshop_ids), mod_ids=mod_ids, map_id=map_id
        )


def _checked(index: object, options: typ.Sequence[str]) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        msg = f"Selection must be an integer, got {index!r}"
        raise SelectionError(msg)
    if not 0 <= index < len(options):
        msg = f"Selection {index} is out of range 0-{len(options) - 1}"
        raise SelectionError(msg)
    return index


__all__ = [
    "MAP_PROMPT",
    "NO_MAP",
    "Chooser",
    "Disambiguator",
    "ReservedPlaceholder",
    "ResolvedConfig",
    "SelectionError",
]
