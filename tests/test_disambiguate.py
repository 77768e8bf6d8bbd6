"""Unit tests for committing candidates and resolving placeholders."""

from __future__ import annotations

import typing as typ

import pytest

from workshop_ids.collection import CollectionItem, ExtractionResult
from workshop_ids.disambiguate import (
    MAP_PROMPT,
    Disambiguator,
    ReservedPlaceholder,
    SelectionError,
)


def _result(
    workshop_id: str,
    mods: typ.Sequence[str] = (),
    maps: typ.Sequence[str] = (),
    *,
    failed: bool = False,
) -> ExtractionResult:
    return ExtractionResult(
        item=CollectionItem(workshop_id=workshop_id, title=f"Item {workshop_id}"),
        mod_candidates=tuple(mods),
        map_candidates=tuple(maps),
        fetch_failed=failed,
    )


class RecordingChooser:
    """Answer prompts from a queue and remember what was asked."""

    def __init__(self, *answers: object) -> None:
        self.answers = list(answers)
        self.asked: list[tuple[str, tuple[str, ...]]] = []

    def __call__(self, prompt: str, options: typ.Sequence[str]) -> int:
        self.asked.append((prompt, tuple(options)))
        return typ.cast("int", self.answers.pop(0))


def test_commit_policy_by_candidate_count() -> None:
    """Zero, one and several candidates are committed differently."""
    state = Disambiguator().record_all(
        [_result("1"), _result("2", ["b"]), _result("3", ["c1", "c2", "c3"])]
    )

    assert state.workshop_ids == ["1", "2", "3"], "expected every item committed"
    assert state.mod_ids == ["b", "c1"], f"unexpected mod ids {state.mod_ids!r}"
    assert state.placeholders == [
        ReservedPlaceholder(
            kind="mod",
            options=("c1", "c2", "c3"),
            committed_index=1,
            item_id="3",
            item_title="Item 3",
        )
    ]


def test_failed_fetches_still_commit_workshop_ids() -> None:
    state = Disambiguator().record_all([_result("1", failed=True), _result("2", ["m"])])

    assert state.workshop_ids == ["1", "2"]
    assert state.mod_ids == ["m"]


def test_map_candidates_are_pooled_across_items() -> None:
    """Every item's map candidates join one flat pool without deduplication."""
    state = Disambiguator().record_all(
        [_result("1", maps=["a", "b"]), _result("2", maps=["a"]), _result("3")]
    )

    assert state.map_pool == ["a", "b", "a"]
    assert state.placeholders == [], "map candidates never create placeholders"


def test_resolve_applies_selection_to_committed_slot() -> None:
    """The selected option replaces the provisional default."""
    state = Disambiguator().record_all(
        [_result("1", ["x"]), _result("2", ["111", "222"]), _result("3", ["z"])]
    )
    chooser = RecordingChooser(1)

    resolved = state.resolve(chooser)

    assert resolved.mod_ids == ["x", "222", "z"], f"got {resolved.mod_ids!r}"
    assert resolved.map_id == ""
    assert chooser.asked == [
        (
            "Multiple mods for Item 2 workshop item 2 please select one to enable",
            ("111", "222"),
        )
    ], "expected a single prompt and no map prompt for an empty pool"


def test_resolve_asks_for_placeholders_in_creation_order_then_map() -> None:
    state = Disambiguator().record_all(
        [
            _result("1", ["a1", "a2"], ["m1"]),
            _result("2", ["b1", "b2"], ["m2"]),
        ]
    )
    chooser = RecordingChooser(0, 1, 1)

    resolved = state.resolve(chooser)

    assert [options for _, options in chooser.asked] == [
        ("a1", "a2"),
        ("b1", "b2"),
        ("m1", "m2", ""),
    ]
    assert chooser.asked[-1][0] == MAP_PROMPT
    assert resolved.mod_ids == ["a1", "b2"]
    assert resolved.map_id == "m2"


def test_resolve_allows_choosing_no_map() -> None:
    """The trailing empty option selects no map."""
    state = Disambiguator().record_all([_result("1", maps=["m1"])])
    assert state.resolve(RecordingChooser(1)).map_id == ""


@pytest.mark.parametrize("answer", [2, -1, True, "1", None])
def test_resolve_rejects_invalid_selection(answer: object) -> None:
    """Out-of-range or non-integer selections never reach the committed list."""
    state = Disambiguator().record_all([_result("1", ["a", "b"])])

    with pytest.raises(SelectionError):
        state.resolve(RecordingChooser(answer))

    assert state.mod_ids == ["a"], "expected the committed default to be untouched"


def test_resolve_runs_once() -> None:
    state = Disambiguator().record_all([_result("1", ["a"])])
    state.resolve(RecordingChooser())

    with pytest.raises(RuntimeError):
        state.resolve(RecordingChooser())
    with pytest.raises(RuntimeError):
        state.record(_result("2", ["b"]))
