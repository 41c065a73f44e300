from __future__ import annotations

import threading

import httpx
import pytest

from job_aggregator.config import LinkVerificationConfig
from job_aggregator.engine.link_verifier import LinkVerifier, clean_url


def _response(status: int, method: str, url: str) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request(method, url))


def test_clean_url_strips_tracking() -> None:
    assert (
        clean_url(" https://jobs.example.com/view?id=7&utm_source=mail&fbclid=abc&ref=home ")
        == "https://jobs.example.com/view?id=7"
    )
    assert clean_url("//jobs.example.com/a") == "https://jobs.example.com/a"
    assert clean_url("") is None
    assert clean_url(None) is None


def test_verify_url_uses_head_then_get(monkeypatch: pytest.MonkeyPatch) -> None:
    verifier = LinkVerifier(LinkVerificationConfig(trusted_hosts=[]))
    calls: list[str] = []

    def fake_head(url, timeout):  # noqa: ARG001
        calls.append("HEAD")
        return _response(405, "HEAD", url)

    def fake_get(url, timeout):  # noqa: ARG001
        calls.append("GET")
        return _response(200, "GET", url)

    monkeypatch.setattr(verifier._client, "head", fake_head)
    monkeypatch.setattr(verifier._client, "get", fake_get)

    assert verifier.verify_url("https://jobs.example.com/1")
    assert calls == ["HEAD", "GET"]
    verifier.shutdown()


def test_verify_url_rejects_bad_links(monkeypatch: pytest.MonkeyPatch) -> None:
    verifier = LinkVerifier(LinkVerificationConfig(trusted_hosts=[]))

    def broken(url, timeout):  # noqa: ARG001
        raise httpx.ConnectError("refused", request=httpx.Request("HEAD", url))

    monkeypatch.setattr(verifier._client, "head", broken)

    assert not verifier.verify_url("ftp://files.example.com/job")
    assert not verifier.verify_url("")
    assert not verifier.verify_url("https://down.example.com/job")
    verifier.shutdown()


def test_trusted_hosts_skip_requests(monkeypatch: pytest.MonkeyPatch) -> None:
    verifier = LinkVerifier()

    def forbidden(*_args, **_kwargs):
        raise AssertionError("trusted hosts must not be requested")

    monkeypatch.setattr(verifier._client, "head", forbidden)
    assert verifier.verify_url("https://www.naukri.com/job-listings-123")
    assert verifier.verify_url("https://in.linkedin.com/jobs/view/1")
    verifier.shutdown()


def test_verify_preserves_length_and_order(monkeypatch: pytest.MonkeyPatch, make_listing) -> None:
    verifier = LinkVerifier(LinkVerificationConfig(trusted_hosts=[]))

    def fake_head(url, timeout):  # noqa: ARG001
        return _response(404 if "missing" in url else 200, "HEAD", url)

    monkeypatch.setattr(verifier._client, "head", fake_head)
    monkeypatch.setattr(verifier._client, "get", fake_head)

    listings = [
        make_listing(target_url="https://jobs.example.com/ok?utm_campaign=x"),
        make_listing(target_url="https://jobs.example.com/missing"),
        make_listing(target_url="mailto:hr@example.com"),
    ]
    result = verifier.verify(listings)
    verifier.shutdown()

    assert [item.title for item in result] == [item.title for item in listings]
    assert [item.link_verified for item in result] == [True, False, False]
    assert result[0].target_url == "https://jobs.example.com/ok"
    assert result[1].target_url == listings[1].target_url
    assert result[0].created_at == listings[0].created_at
    assert verifier.verify([]) == []


def test_batch_timeout_marks_unfinished_links_false(monkeypatch: pytest.MonkeyPatch, make_listing) -> None:
    verifier = LinkVerifier(
        LinkVerificationConfig(trusted_hosts=[], batch_timeout=0.2, max_workers=2)
    )
    release = threading.Event()

    def slow_head(url, timeout):  # noqa: ARG001
        if "slow" in url:
            release.wait(5)
        return _response(200, "HEAD", url)

    monkeypatch.setattr(verifier._client, "head", slow_head)
    listings = [
        make_listing(target_url="https://jobs.example.com/fast"),
        make_listing(target_url="https://jobs.example.com/slow"),
    ]
    result = verifier.verify(listings)
    release.set()
    verifier.shutdown()

    assert len(result) == 2
    assert result[0].link_verified is True
    assert result[1].link_verified is False


class SteppingClock:
    """Monotonic stand-in moved forward by the fake requests."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def test_get_fallback_only_gets_remaining_time(monkeypatch: pytest.MonkeyPatch) -> None:
    clock = SteppingClock()
    verifier = LinkVerifier(LinkVerificationConfig(trusted_hosts=[], timeout=5.0), clock=clock)
    timeouts: dict[str, float] = {}

    def slow_head(url, timeout):
        timeouts["HEAD"] = timeout
        clock.now += 3.0
        return _response(405, "HEAD", url)

    def fake_get(url, timeout):
        timeouts["GET"] = timeout
        return _response(200, "GET", url)

    monkeypatch.setattr(verifier._client, "head", slow_head)
    monkeypatch.setattr(verifier._client, "get", fake_get)

    assert verifier.verify_url("https://jobs.example.com/1")
    assert timeouts["HEAD"] == 5.0
    assert timeouts["GET"] == pytest.approx(2.0)
    verifier.shutdown()


def test_get_fallback_skipped_once_time_is_spent(monkeypatch: pytest.MonkeyPatch) -> None:
    clock = SteppingClock()
    verifier = LinkVerifier(LinkVerificationConfig(trusted_hosts=[], timeout=5.0), clock=clock)

    def exhausting_head(url, timeout):  # noqa: ARG001
        clock.now += 5.0
        return _response(405, "HEAD", url)

    def forbidden(*_args, **_kwargs):
        raise AssertionError("no GET once the per-link timeout is used up")

    monkeypatch.setattr(verifier._client, "head", exhausting_head)
    monkeypatch.setattr(verifier._client, "get", forbidden)

    assert not verifier.verify_url("https://jobs.example.com/1")
    verifier.shutdown()
