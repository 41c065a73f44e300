"""Reachability checks for listing target URLs."""

from __future__ import annotations

import dataclasses
import time
from concurrent.futures import wait
from typing import Callable, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx
import structlog

from ..config import LinkVerificationConfig
from ..config.models import DEFAULT_USER_AGENT
from ..models import Listing
from .thread_pool import ThreadPoolManager

TRACKING_PARAMS = frozenset({"fbclid", "gclid", "msclkid", "ref", "referrer"})


def clean_url(url: str | None) -> str | None:
    """Strip tracking parameters and resolve protocol-relative links."""

    if not url or not url.strip():
        return None
    url = url.strip()
    if url.startswith("//"):
        url = f"https:{url}"
    parts = urlsplit(url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key.lower() not in TRACKING_PARAMS and not key.lower().startswith("utm_")
    ]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


class LinkVerifier:
    """Mark each listing's link as reachable or not, within a bounded time."""

    def __init__(
        self,
        config: LinkVerificationConfig | None = None,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        pool: ThreadPoolManager | None = None,
        logger: structlog.BoundLogger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or LinkVerificationConfig()
        self._clock = clock
        self.logger = logger or structlog.get_logger("job_aggregator.link_verifier")
        self._pool = pool or ThreadPoolManager(default_workers=self.config.max_workers)
        self._client = httpx.Client(
            follow_redirects=True,
            timeout=self.config.timeout,
            headers={"User-Agent": user_agent},
        )

    def close(self) -> None:
        self._client.close()

    def is_trusted(self, url: str) -> bool:
        host = (urlsplit(url).hostname or "").lower()
        return any(host == trusted or host.endswith(f".{trusted}") for trusted in self.config.trusted_hosts)

    def verify_url(self, url: str | None) -> bool:
        cleaned = clean_url(url)
        if cleaned is None or urlsplit(cleaned).scheme not in ("http", "https"):
            return False
        if self.is_trusted(cleaned):
            return True
        # HEAD and the GET fallback share one per-link timeout.
        deadline = self._clock() + self.config.timeout
        try:
            response = self._client.head(cleaned, timeout=self.config.timeout)
            if response.status_code >= 400:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    self.logger.debug("link_check_out_of_time", url=cleaned)
                    return False
                response = self._client.get(cleaned, timeout=remaining)
        except httpx.HTTPError as exc:
            self.logger.debug("link_check_failed", url=cleaned, error=str(exc))
            return False
        return 200 <= response.status_code < 400

    def verify(self, listings: Sequence[Listing]) -> list[Listing]:
        """Return the listings in order, each with ``link_verified`` set.

        Links still unchecked when ``batch_timeout`` elapses count as
        unreachable.
        """

        if not listings:
            return []
        executor = self._pool.get("link_verifier", self.config.max_workers)
        futures = [executor.submit(self.verify_url, listing.target_url) for listing in listings]
        done, not_done = wait(futures, timeout=self.config.batch_timeout)
        for future in not_done:
            future.cancel()

        verified: list[Listing] = []
        for listing, future in zip(listings, futures):
            ok = False
            if future in done:
                try:
                    ok = bool(future.result())
                except Exception as exc:  # noqa: BLE001
                    self.logger.warning("link_check_error", url=listing.target_url, error=str(exc))
            target = clean_url(listing.target_url) if ok else None
            verified.append(
                dataclasses.replace(
                    listing,
                    link_verified=ok,
                    target_url=target or listing.target_url,
                )
            )
        self.logger.info(
            "links_verified",
            total=len(listings),
            reachable=sum(1 for item in verified if item.link_verified),
            timed_out=len(not_done),
        )
        return verified

    def shutdown(self) -> None:
        self._pool.shutdown()
        self.close()


__all__ = ["LinkVerifier", "TRACKING_PARAMS", "clean_url"]
