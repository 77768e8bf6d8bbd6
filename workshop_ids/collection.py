"""Walk a workshop collection and extract identifiers from each item.

The collection page lists items as ``class="collectionItem"`` elements whose
``id`` attribute carries the workshop id (``sharedfile_<id>``). For every item
the scanner downloads the detail page, locates the description region
(``id="highlightContent"``) and reads the ``Mod ID:`` and ``Map Folder:``
values out of it.

Detail pages may be fetched concurrently, but results are always returned in
collection order: each worker writes into the slot reserved for its item.

Example
-------
>>> from workshop_ids.collection import CollectionScanner
>>> from workshop_ids.fetch import WorkshopFetcher
>>> from workshop_ids.settings import ScanSettings
>>> scanner = CollectionScanner(WorkshopFetcher(), ScanSettings())  # doctest: +SKIP
>>> page = scanner.load_collection(url)  # doctest: +SKIP
>>> results = scanner.scan(page.items)  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import time
import typing as typ
from concurrent.futures import ThreadPoolExecutor

from .extract import extract
from .fetch import FetchError, detail_url
from .tree import (
    DocumentNode,
    RenderError,
    find_all,
    find_first,
    parse_document,
    render_markup,
    text_content,
)
from .variants import variants_of

if typ.TYPE_CHECKING:
    from .fetch import WorkshopFetcher
    from .settings import ScanSettings

logger = logging.getLogger(__name__)

ITEM_CLASS = "collectionItem"
TITLE_CLASS = "workshopItemTitle"
DESCRIPTION_ID = "highlightContent"
ID_SEPARATOR = "_"
MOD_LABEL = "Mod ID:"
MAP_LABEL = "Map Folder:"

MOD_VARIANTS = variants_of(MOD_LABEL)
MAP_VARIANTS = variants_of(MAP_LABEL)

ProgressCallback = typ.Callable[[str, "CollectionItem"], None]


class CollectionScanError(RuntimeError):
    """Raised when a scan is aborted by a failed detail page fetch."""


@dc.dataclass(frozen=True, slots=True)
class CollectionItem:
    """One entry of a workshop collection."""

    workshop_id: str
    title: str


@dc.dataclass(frozen=True, slots=True)
class CollectionPage:
    """Title and items of a collection page, items in document order."""

    title: str
    items: tuple[CollectionItem, ...]


@dc.dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Candidates read from one item's detail page.

    Attributes
    ----------
    item : CollectionItem
        The collection entry the candidates belong to.
    mod_candidates : tuple[str, ...]
        ``Mod ID:`` values in order of appearance.
    map_candidates : tuple[str, ...]
        ``Map Folder:`` values in order of appearance.
    fetch_failed : bool
        ``True`` when the detail page could not be downloaded.
    """

    item: CollectionItem
    mod_candidates: tuple[str, ...] = ()
    map_candidates: tuple[str, ...] = ()
    fetch_failed: bool = False


def workshop_id_from(element_id: str | None) -> str | None:
    """Return the numeric suffix of an item ``id`` such as ``sharedfile_42``."""
    if not element_id or ID_SEPARATOR not in element_id:
        return None
    suffix = element_id.split(ID_SEPARATOR)[1]
    return suffix if suffix.isdigit() else None


def read_collection(root: DocumentNode) -> CollectionPage:
    """Read the collection title and items from a parsed collection page."""
    title = text_content(find_first(root, "class", TITLE_CLASS))
    items: list[CollectionItem] = []
    for node in find_all(root, "class", ITEM_CLASS):
        workshop_id = workshop_id_from(node.attribute("id"))
        if workshop_id is None:
            logger.warning(
                "Skipping collection item without a numeric id: %r",
                node.attribute("id"),
            )
            continue
        item_title = text_content(find_first(node, "class", TITLE_CLASS))
        items.append(CollectionItem(workshop_id=workshop_id, title=item_title))
    return CollectionPage(title=title, items=tuple(items))


def extract_identifiers(text: str) -> tuple[list[str], list[str]]:
    """Return the mod and map candidates found in description ``text``."""
    return extract(text, MOD_VARIANTS), extract(text, MAP_VARIANTS)


def description_text(root: DocumentNode) -> str:
    """Render the description region of a detail page, or ``""`` if absent."""
    region = find_first(root, "id", DESCRIPTION_ID)
    if region is None:
        logger.info("No description region found")
        return ""
    try:
        return render_markup(region)
    except RenderError as exc:
        logger.warning("Could not render description region: %s", exc)
        return ""


class CollectionScanner:
    """Fetch and extract every item of a collection."""

    def __init__(
        self,
        fetcher: WorkshopFetcher,
        settings: ScanSettings,
        *,
        sleep: typ.Callable[[float], None] = time.sleep,
    ) -> None:
        self.fetcher = fetcher
        self.settings = settings
        self._sleep = sleep

    def load_collection(self, url: str) -> CollectionPage:
        """Download and read the collection page at ``url``.

        Raises
        ------
        FetchError
            If the collection page itself cannot be downloaded.
        """
        return read_collection(parse_document(self.fetcher.fetch(url)))

    def scan_item(
        self, item: CollectionItem, progress: ProgressCallback | None = None
    ) -> ExtractionResult:
        """Fetch one detail page and extract its candidates.

        A failed fetch follows ``settings.on_fetch_failure``: ``"skip"``
        returns a result with no candidates and ``fetch_failed`` set,
        ``"abort"`` raises :class:`CollectionScanError`. ``progress`` receives
        ``"fetching"``, ``"parsing"``, ``"collecting"`` and finally ``"done"``,
        or ``"skipped"`` after a skipped fetch.
        """
        _report(progress, "fetching", item)
        url = detail_url(self.settings.base_url, item.workshop_id)
        try:
            content = self.fetcher.fetch(url)
        except FetchError as exc:
            if self.settings.on_fetch_failure == "abort":
                msg = f"Aborting scan at workshop item {item.workshop_id}: {exc}"
                raise CollectionScanError(msg) from exc
            logger.warning(
                "Skipping workshop item %s (%s): %s",
                item.workshop_id,
                item.title,
                exc,
            )
            _report(progress, "skipped", item)
            return ExtractionResult(item=item, fetch_failed=True)
        finally:
            if self.settings.settle_delay:
                self._sleep(self.settings.settle_delay)

        _report(progress, "parsing", item)
        root = parse_document(content)

        _report(progress, "collecting", item)
        mods, maps = extract_identifiers(description_text(root))
        _report(progress, "done", item)
        return ExtractionResult(
            item=item, mod_candidates=tuple(mods), map_candidates=tuple(maps)
        )

    def scan(
        self,
        items: typ.Sequence[CollectionItem],
        progress: ProgressCallback | None = None,
    ) -> list[ExtractionResult]:
        """Scan ``items`` and return their results in the same order."""
        if self.settings.workers == 1 or len(items) < 2:
            return [self.scan_item(item, progress) for item in items]

        slots: list[ExtractionResult | None] = [None] * len(items)

        def fill(index: int) -> None:
            slots[index] = self.scan_item(items[index], progress)

        with ThreadPoolExecutor(max_workers=self.settings.workers) as pool:
            futures = [pool.submit(fill, index) for index in range(len(items))]
            try:
                for future in futures:
                    future.result()
            except CollectionScanError:
                for future in futures:
                    future.cancel()
                raise
        return [result for result in slots if result is not None]


def _report(
    progress: ProgressCallback | None, step: str, item: CollectionItem
) -> None:
    logger.info("%s: %s (%s)", step, item.title, item.workshop_id)
    if progress is not None:
        progress(step, item)


__all__ = [
    "CollectionItem",
    "CollectionPage",
    "CollectionScanError",
    "CollectionScanner",
    "ExtractionResult",
    "description_text",
    "extract_identifiers",
    "read_collection",
    "workshop_id_from",
]
