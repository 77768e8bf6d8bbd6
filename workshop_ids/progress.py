"""Terminal progress bar for collection scans.

:class:`ScanProgress` is a :data:`~workshop_ids.collection.ProgressCallback`
backed by :mod:`tqdm`. The bar advances once per finished item and its
description shows the current step and item title.
"""

from __future__ import annotations

import threading
import typing as typ

from tqdm import tqdm

if typ.TYPE_CHECKING:
    from .collection import CollectionItem

FINAL_STEPS = frozenset({"done", "skipped"})


class ScanProgress:
    """Progress bar over the items of one scan.

    Parameters
    ----------
    total : int
        Number of items the scan will visit.
    disable : bool, optional
        Suppress all bar output when ``True``.
    """

    def __init__(self, total: int, *, disable: bool = False) -> None:
        self.bar = tqdm(total=total, desc="items", unit="item", disable=disable)
        self._lock = threading.Lock()

    def __call__(self, step: str, item: CollectionItem) -> None:
        with self._lock:
            self.bar.set_description(f"{step}: {item.title}", refresh=False)
            if step in FINAL_STEPS:
                self.bar.update(1)
            else:
                self.bar.refresh()

    def close(self) -> None:
        """Close the underlying bar."""
        self.bar.close()

    def __enter__(self) -> ScanProgress:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["FINAL_STEPS", "ScanProgress"]
