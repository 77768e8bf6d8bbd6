"""HTTP access to workshop collection and detail pages.

:class:`WorkshopFetcher` owns a ``requests.Session`` with a retrying adapter
and turns every transport or HTTP error into :class:`FetchError`, so callers
decide per page whether a failure is fatal.

Example
-------
>>> from workshop_ids.fetch import WorkshopFetcher, detail_url
>>> detail_url("https://steamcommunity.com/sharedfiles", "123")
'https://steamcommunity.com/sharedfiles/filedetails/?id=123'
>>> fetcher = WorkshopFetcher(timeout=5)  # doctest: +SKIP
>>> fetcher.fetch(detail_url(DEFAULT_BASE_URL, "123"))  # doctest: +SKIP
b'<!DOCTYPE html>...'
"""

from __future__ import annotations

import logging
import threading

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://steamcommunity.com/sharedfiles"
DEFAULT_USER_AGENT = "workshop-ids/0.1"


class FetchError(RuntimeError):
    """Raised when a page cannot be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch '{url}': {reason}")
        self.url = url
        self.reason = reason


def detail_url(base_url: str, workshop_id: str) -> str:
    """Return the detail page URL for ``workshop_id`` below ``base_url``."""
    return f"{base_url.rstrip('/')}/filedetails/?id={workshop_id}"


class WorkshopFetcher:
    """Download pages over retrying ``requests`` sessions, one per thread.

    ``requests.Session`` is not documented as thread-safe, so when the fetcher
    builds its own sessions each calling thread gets a separate one. A
    session passed in by the caller is used from every thread as-is.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        retries: int = 3,
        backoff_factor: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialise the fetcher.

        Parameters
        ----------
        session : requests.Session, optional
            Session to reuse from every thread. When ``None`` a new session
            with a retrying adapter is created lazily per thread.
        timeout : float, optional
            Per-request timeout in seconds. Defaults to ``30.0``.
        retries : int, optional
            Retry budget for connection errors, read errors and 5xx
            responses. Defaults to ``3``.
        backoff_factor : float, optional
            Exponential backoff factor between retries. Defaults to ``0.5``.
        user_agent : str, optional
            ``User-Agent`` header sent with every request.
        """
        self.timeout = timeout
        self.retries = retries
        self.backoff_factor = backoff_factor
        self._headers = {"User-Agent": user_agent}
        self._shared = session
        self._local = threading.local()
        self._owned: list[requests.Session] = []
        self._lock = threading.Lock()

    def _thread_session(self) -> requests.Session:
        """Return the session used by the calling thread."""
        if self._shared is not None:
            return self._shared
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._build_session()
            self._local.session = session
            with self._lock:
                self._owned.append(session)
        return session

    def _build_session(self) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=self.retries,
            read=self.retries,
            connect=self.retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=(500, 502, 503, 504),
            allowed_methods=("GET", "HEAD"),
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def fetch(self, url: str) -> bytes:
        """Return the body of ``url``.

        Raises
        ------
        FetchError
            On connection failures, exhausted retries, timeouts, or a 4xx/5xx
            response.
        """
        logger.debug("GET %s", url)
        try:
            response = self._thread_session().get(
                url, headers=self._headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc
        return response.content

    def close(self) -> None:
        if self._shared is not None:
            self._shared.close()
        with self._lock:
            owned, self._owned = self._owned, []
        for session in owned:
            session.close()

    def __enter__(self) -> WorkshopFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "DEFAULT_BASE_URL",
    "FetchError",
    "WorkshopFetcher",
    "detail_url",
]
