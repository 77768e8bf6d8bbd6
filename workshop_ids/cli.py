"""Cyclopts CLI entrypoint for extracting workshop identifiers.

The ``workshop-ids`` console script downloads a workshop collection, reads the
``Mod ID:`` and ``Map Folder:`` values from every item's description, asks the
operator to settle ambiguous items, and prints a launcher configuration
fragment. Options can also be supplied as ``WORKSHOP_IDS_<OPTION>``
environment variables or through the ``scan`` table of a YAML settings file.

Examples
--------
Scan a collection with four concurrent detail page fetches:

>>> from workshop_ids.cli import app
>>> app(["scan", "https://steamcommunity.com/sharedfiles/filedetails/?id=1",
...      "--workers", "4"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import os
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .collection import CollectionScanError, CollectionScanner
from .disambiguate import Disambiguator, SelectionError
from .fetch import FetchError, WorkshopFetcher
from .output import format_resolved
from .progress import ScanProgress
from .prompt import ConsoleChooser
from .settings import ScanSettings, SettingsError, load_settings

if typ.TYPE_CHECKING:
    from .disambiguate import Chooser

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path(
    os.getenv(
        "WORKSHOP_IDS_CONFIG",
        Path.home() / ".config" / "workshop-ids" / "settings.yaml",
    )
)
URL_PROMPT = "Enter the URL of the workshop collection you want to parse:"

app = App(name="workshop-ids", config=cyclopts.config.Env("WORKSHOP_IDS_", command=False))  # type: ignore[unknown-argument]


def run_scan(
    url: str,
    settings: ScanSettings,
    *,
    fetcher: WorkshopFetcher,
    chooser: Chooser,
    output: typ.Callable[[str], None] = print,
    show_progress: bool = False,
) -> str:
    """Scan the collection at ``url`` and return the configuration fragment.

    Parameters
    ----------
    url : str
        Collection page URL.
    settings : ScanSettings
        Scan tunables (base URL, concurrency, failure policies).
    fetcher : WorkshopFetcher
        Page downloader shared by the collection and detail fetches.
    chooser : Chooser
        Callback used to resolve ambiguous mods and the map.
    output : Callable[[str], None], optional
        Sink for status lines. Defaults to :func:`print`.
    show_progress : bool, optional
        Draw a progress bar on stderr while detail pages are scanned.

    Returns
    -------
    str
        The three-line configuration fragment.

    Raises
    ------
    FetchError
        If the collection page cannot be downloaded.
    CollectionScanError
        If a detail page fails and ``on_fetch_failure`` is ``"abort"``.
    SelectionError
        If the operator's selection is rejected and not re-prompted.
    """
    scanner = CollectionScanner(fetcher, settings)
    output(f"Parsing Workshop collection: {url}\n")
    page = scanner.load_collection(url)
    output(f"Parsing mod list: {page.title}")
    if not page.items:
        logger.warning("No collection items found at %s", url)

    with ScanProgress(len(page.items), disable=not show_progress) as progress:
        results = scanner.scan(page.items, progress)
    failed = sum(1 for result in results if result.fetch_failed)
    if failed:
        logger.warning(
            "%d of %d workshop items could not be fetched", failed, len(results)
        )

    resolved = Disambiguator().record_all(results).resolve(chooser)
    return format_resolved(resolved)


@app.command(help="Scan a workshop collection and print the launcher configuration.")
def scan(
    url: typ.Annotated[
        str | None, Parameter(help="Collection URL; prompted for when omitted")
    ] = None,
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to the YAML settings file")
    ] = DEFAULT_SETTINGS_PATH,
    base_url: typ.Annotated[
        str | None, Parameter(help="Override the catalog base URL")
    ] = None,
    workers: typ.Annotated[
        int | None, Parameter(help="Concurrent detail page fetches")
    ] = None,
    timeout: typ.Annotated[
        float | None, Parameter(help="Per-request timeout in seconds")
    ] = None,
    settle_delay: typ.Annotated[
        float | None, Parameter(help="Pause after each detail page fetch")
    ] = None,
    on_fetch_failure: typ.Annotated[
        str | None, Parameter(help="'skip' or 'abort' when a detail page fails")
    ] = None,
    on_invalid_selection: typ.Annotated[
        str | None, Parameter(help="'reprompt' or 'abort' on invalid input")
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log progress to stderr")
    ] = False,
    quiet: typ.Annotated[
        bool, Parameter(help="Hide the progress bar")
    ] = False,
) -> None:
    """Scan a collection and print its configuration fragment.

    Parameters
    ----------
    url : str or None, optional
        Collection page URL. When ``None`` the operator is asked for it.
    config : Path, optional
        YAML settings file; missing files fall back to defaults.
    base_url, workers, timeout, settle_delay : optional
        Overrides for the matching :class:`ScanSettings` fields.
    on_fetch_failure, on_invalid_selection : str or None, optional
        Overrides for the failure policies.
    verbose : bool, optional
        Log progress at INFO level when ``True``.
    quiet : bool, optional
        Hide the progress bar. It is also hidden when stdout is not a
        terminal.

    Returns
    -------
    None
        The fragment is printed to stdout. Errors exit with status 1.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        settings = load_settings(config).merged(
            base_url=base_url,
            workers=workers,
            timeout=timeout,
            settle_delay=settle_delay,
            on_fetch_failure=on_fetch_failure,
            on_invalid_selection=on_invalid_selection,
        )
    except SettingsError as exc:
        _fail(str(exc))

    if not url:
        print(URL_PROMPT)
        try:
            url = input().strip()
        except EOFError:
            url = ""
        if not url:
            _fail("An error occurred while reading input. Please try again")

    chooser = ConsoleChooser(on_invalid=settings.on_invalid_selection)
    with WorkshopFetcher(timeout=settings.timeout, retries=settings.retries) as fetcher:
        try:
            fragment = run_scan(
                url,
                settings,
                fetcher=fetcher,
                chooser=chooser,
                show_progress=not quiet and sys.stdout.isatty(),
            )
        except (FetchError, CollectionScanError, SelectionError) as exc:
            _fail(str(exc))
    print(fragment)


def _fail(message: str) -> typ.NoReturn:
    print(f"error: {message}", file=sys.stderr)
    raise SystemExit(1)


def main() -> None:
    """Invoke the Cyclopts application behind the ``workshop-ids`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
