"""Unit tests for the console selection prompt."""

from __future__ import annotations

import typing as typ

import pytest

from workshop_ids.disambiguate import SelectionError
from workshop_ids.prompt import ConsoleChooser


def _scripted(*lines: str) -> typ.Callable[[], str]:
    pending = list(lines)

    def read() -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return read


def test_chooser_prints_indexed_options_and_returns_choice() -> None:
    printed: list[str] = []
    chooser = ConsoleChooser(input_func=_scripted(" 1 "), output=printed.append)

    choice = chooser("Pick a map", ["mapA", "mapB", ""])

    assert choice == 1, f"expected index 1, got {choice}"
    assert printed == ["Pick a map", "0 :  mapA", "1 :  mapB", "2 :  (none)"]


def test_chooser_reprompts_on_invalid_input() -> None:
    """Bad input is explained and the operator is asked again."""
    printed: list[str] = []
    chooser = ConsoleChooser(input_func=_scripted("x", "7", "0"), output=printed.append)

    assert chooser("Pick", ["a", "b"]) == 0
    assert "'x' is not a number. Please try again." in printed
    assert "Selection 7 is out of range 0-1. Please try again." in printed


@pytest.mark.parametrize("line", ["x", "-1", "2"])
def test_chooser_aborts_when_configured(line: str) -> None:
    chooser = ConsoleChooser(
        input_func=_scripted(line), output=lambda _: None, on_invalid="abort"
    )
    with pytest.raises(SelectionError):
        chooser("Pick", ["a", "b"])


def test_chooser_fails_when_input_ends() -> None:
    """End of input is fatal even when re-prompting."""
    chooser = ConsoleChooser(input_func=_scripted("x"), output=lambda _: None)
    with pytest.raises(SelectionError, match="No selection"):
        chooser("Pick", ["a", "b"])


def test_chooser_rejects_unknown_policy() -> None:
    with pytest.raises(ValueError, match="on_invalid"):
        ConsoleChooser(on_invalid="ignore")
