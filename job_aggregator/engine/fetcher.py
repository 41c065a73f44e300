"""HTTP and rendered-DOM fetching with bounded retries."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Lock, get_ident
from typing import Any, Callable, Dict

import httpx
import structlog

from ..config import GlobalConfig, SourceConfig
from ..errors import FetchFailure

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
MAX_BACKOFF = 8.0


@dataclass(slots=True)
class FetchRequest:
    """Input for the fetcher."""

    url: str
    params: dict[str, Any] | None = None
    headers: dict[str, str] | None = None
    timeout: float | None = None
    force_browser: bool = False
    # When rendering, wait for a CSS selector before snapshotting the DOM
    wait_selector: str | None = None
    scroll_rounds: int = 0


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)


class _RetryableStatus(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"Unexpected status {status_code}")
        self.status_code = status_code


class Fetcher:
    """Execute requests for extractors, retrying transient failures."""

    def __init__(
        self,
        global_config: GlobalConfig,
        logger: structlog.BoundLogger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.global_config = global_config
        self.logger = logger or structlog.get_logger("job_aggregator.fetcher")
        self._sleep = sleep
        self._client = httpx.Client(
            follow_redirects=True,
            timeout=20,
            headers={
                "User-Agent": global_config.user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
            },
        )
        self._browser_sessions: dict[int, _PlaywrightSession] = {}
        self._browser_lock = Lock()

    def close(self) -> None:
        self._client.close()
        with self._browser_lock:
            for session in self._browser_sessions.values():
                try:
                    session.close()
                except Exception as exc:  # noqa: BLE001
                    self.logger.warning("browser_close_failed", error=str(exc))
            self._browser_sessions.clear()

    def fetch(self, source: SourceConfig, request: FetchRequest) -> FetchResponse:
        """Fetch one page, retrying up to ``source.max_retries`` times.

        Timeouts, connection errors, 429 and 5xx are retried with exponential
        backoff. Other 4xx answers fail immediately. Raises ``FetchFailure``.
        """

        max_attempts = source.max_retries + 1
        timeout = request.timeout or source.request_timeout
        last_error: Exception | None = None
        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                self._sleep(self._backoff(attempt - 1))
            try:
                if request.force_browser:
                    response = self._fetch_via_browser(request, timeout)
                else:
                    response = self._client.request(
                        method="GET",
                        url=request.url,
                        params=request.params,
                        headers=request.headers,
                        timeout=timeout,
                    )
                status = response.status_code
                if status in RETRYABLE_STATUS:
                    raise _RetryableStatus(status)
                if status >= 400:
                    raise FetchFailure(request.url, f"HTTP {status}", status_code=status)
                return FetchResponse(
                    url=str(response.url),
                    status_code=status,
                    text=response.text,
                    headers=dict(response.headers),
                    raw=response if isinstance(response, httpx.Response) else None,
                )
            except FetchFailure:
                raise
            except Exception as exc:  # noqa: BLE001
                last_error = exc
                self.logger.warning(
                    "fetch_error",
                    url=request.url,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(exc),
                )

        status_code = last_error.status_code if isinstance(last_error, _RetryableStatus) else None
        raise FetchFailure(
            request.url, f"Fetch failed after {max_attempts} attempts", status_code=status_code
        ) from last_error

    @staticmethod
    def _backoff(retry_number: int) -> float:
        return min(1.0 * 2 ** (retry_number - 1), MAX_BACKOFF)

    def _fetch_via_browser(self, request: FetchRequest, timeout: float) -> "BrowserResponse":
        session = self._ensure_browser_session()
        return session.fetch(
            request.url,
            request.headers or {},
            timeout,
            wait_selector=request.wait_selector,
            scroll_rounds=request.scroll_rounds,
        )

    def _ensure_browser_session(self) -> "_PlaywrightSession":
        thread_id = get_ident()
        with self._browser_lock:
            session = self._browser_sessions.get(thread_id)
            if session is None:
                session = _PlaywrightSession(self.global_config.user_agent)
                self._browser_sessions[thread_id] = session
            return session


@dataclass
class BrowserResponse:
    url: str
    status_code: int
    text: str
    headers: Dict[str, str]


class _PlaywrightSession:
    """One headless Chromium page per worker thread."""

    def __init__(self, user_agent: str | None) -> None:
        self._user_agent = user_agent
        self._lock = Lock()
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    def _ensure_started(self) -> None:
        if self._playwright is not None:
            return
        try:
            from playwright.sync_api import sync_playwright
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "Rendered fetches require installing the 'playwright' package."
            ) from exc

        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(headless=True)
        self._context = self._browser.new_context(
            user_agent=self._user_agent,
            viewport={"width": 1920, "height": 1080},
        )
        self._page = self._context.new_page()

    def fetch(
        self,
        url: str,
        headers: dict[str, str],
        timeout: float,
        *,
        wait_selector: str | None = None,
        scroll_rounds: int = 0,
    ) -> BrowserResponse:
        from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

        timeout_ms = int(timeout * 1000)
        with self._lock:
            self._ensure_started()
            self._context.set_extra_http_headers(headers)
            try:
                response = self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            except PlaywrightTimeoutError as exc:
                raise RuntimeError(f"Playwright timeout: {exc}") from exc
            if wait_selector:
                try:
                    self._page.wait_for_selector(wait_selector, timeout=timeout_ms)
                except PlaywrightTimeoutError:
                    # An empty result page never renders cards; let the parser decide.
                    pass
            for _ in range(max(0, scroll_rounds)):
                self._page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
                self._page.wait_for_timeout(300)
            content = self._page.content()
            return BrowserResponse(
                url=self._page.url,
                status_code=response.status if response else 200,
                text=content,
                headers=dict(response.headers) if response else {},
            )

    def close(self) -> None:
        with self._lock:
            if self._page is not None:
                self._page.close()
                self._page = None
            if self._context is not None:
                self._context.close()
                self._context = None
            if self._browser is not None:
                self._browser.close()
                self._browser = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None


__all__ = ["BrowserResponse", "FetchRequest", "FetchResponse", "Fetcher"]
