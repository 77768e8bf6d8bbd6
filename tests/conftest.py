"""Shared fixtures for workshop_ids tests.

The :class:`FakeSite` fixture stands in for :class:`WorkshopFetcher`: it serves
canned collection and detail pages from memory, records every requested URL
and raises :class:`FetchError` for URLs it does not know or was told to fail.
"""

from __future__ import annotations

import threading
import time
import typing as typ

import pytest

from workshop_ids.fetch import DEFAULT_BASE_URL, FetchError, detail_url

COLLECTION_URL = "https://steamcommunity.com/sharedfiles/filedetails/?id=999"


def collection_html(
    items: typ.Sequence[tuple[str, str]], title: str = "Server Collection"
) -> bytes:
    """Return a collection page listing ``(workshop_id, title)`` items."""
    entries = "".join(
        f'<div class="collectionItem" id="sharedfile_{workshop_id}">'
        f'<a href="#"><div class="workshopItemTitle">{item_title}</div></a>'
        "</div>"
        for workshop_id, item_title in items
    )
    return (
        "<html><body>"
        '<div class="collectionHeader">'
        f'<div class="workshopItemTitle">{title}</div></div>'
        f'<div class="collectionChildren">{entries}</div>'
        "</body></html>"
    ).encode()


def detail_html(description: str) -> bytes:
    """Return a detail page whose description region holds ``description``."""
    return (
        "<html><body><div class=\"workshopItemTitle\">Item</div>"
        '<div class="workshopItemDescription" id="highlightContent">'
        f"{description}</div>"
        "</body></html>"
    ).encode()


class FakeSite:
    """In-memory stand-in for :class:`~workshop_ids.fetch.WorkshopFetcher`."""

    def __init__(self) -> None:
        self.pages: dict[str, bytes] = {}
        self.delays: dict[str, float] = {}
        self.failing: set[str] = set()
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def add_collection(
        self,
        items: typ.Sequence[tuple[str, str]],
        *,
        url: str = COLLECTION_URL,
        title: str = "Server Collection",
    ) -> str:
        self.pages[url] = collection_html(items, title)
        return url

    def add_detail(
        self, workshop_id: str, description: str, *, delay: float = 0.0
    ) -> str:
        url = detail_url(DEFAULT_BASE_URL, workshop_id)
        self.pages[url] = detail_html(description)
        self.delays[url] = delay
        return url

    def fail(self, workshop_id: str) -> None:
        self.failing.add(detail_url(DEFAULT_BASE_URL, workshop_id))

    def fetch(self, url: str) -> bytes:
        with self._lock:
            self.calls.append(url)
        if delay := self.delays.get(url):
            time.sleep(delay)
        if url in self.failing or url not in self.pages:
            raise FetchError(url, "connection refused")
        return self.pages[url]

    def close(self) -> None:
        pass

    def __enter__(self) -> FakeSite:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@pytest.fixture
def site() -> FakeSite:
    """Provide an empty fake workshop site."""
    return FakeSite()
