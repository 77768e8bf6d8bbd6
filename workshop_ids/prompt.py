"""Console prompts for choosing between ambiguous candidates."""

from __future__ import annotations

import typing as typ

from .disambiguate import NO_MAP, SelectionError
from .settings import INVALID_SELECTION_POLICIES

NONE_LABEL = "(none)"


class ConsoleChooser:
    """Ask the operator to pick one option by index.

    With ``on_invalid="reprompt"`` bad input is explained and the question is
    asked again; with ``"abort"`` it raises :class:`SelectionError`. Running
    out of input always raises.
    """

    def __init__(
        self,
        *,
        input_func: typ.Callable[[], str] | None = None,
        output: typ.Callable[[str], None] = print,
        on_invalid: str = "reprompt",
    ) -> None:
        if on_invalid not in INVALID_SELECTION_POLICIES:
            msg = f"on_invalid must be one of {INVALID_SELECTION_POLICIES}"
            raise ValueError(msg)
        self._input = input_func or _read_line
        self._output = output
        self.on_invalid = on_invalid

    def __call__(self, prompt: str, options: typ.Sequence[str]) -> int:
        self._output(prompt)
        for index, option in enumerate(options):
            label = option if option != NO_MAP else NONE_LABEL
            self._output(f"{index} :  {label}")
        while True:
            try:
                raw = self._input()
            except EOFError as exc:
                msg = "No selection entered"
                raise SelectionError(msg) from exc
            try:
                return self._parse(raw, len(options))
            except SelectionError as exc:
                if self.on_invalid == "abort":
                    raise
                self._output(f"{exc}. Please try again.")

    @staticmethod
    def _parse(raw: str, count: int) -> int:
        try:
            index = int(raw.strip())
        except ValueError as exc:
            msg = f"{raw.strip()!r} is not a number"
            raise SelectionError(msg) from exc
        if not 0 <= index < count:
            msg = f"Selection {index} is out of range 0-{count - 1}"
            raise SelectionError(msg)
        return index


def _read_line() -> str:
    return input()


__all__ = ["NONE_LABEL", "ConsoleChooser"]
