"""Exception taxonomy shared by extractors, orchestrator and cache."""

from __future__ import annotations


class AggregatorError(Exception):
    """Base class for all job aggregator failures."""


class FetchFailure(AggregatorError):
    """A single outbound request failed after its retries were exhausted."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{message}: {url}")
        self.url = url
        self.status_code = status_code


class ParseFailure(AggregatorError):
    """One candidate card could not be parsed."""


class ValidationFailure(AggregatorError):
    """A parsed candidate is missing a required field."""

    def __init__(self, missing: str) -> None:
        super().__init__(f"missing_{missing}")
        self.missing = missing


class SourceFailure(AggregatorError):
    """A whole extractor run failed."""

    def __init__(self, source: str, cause: BaseException) -> None:
        super().__init__(f"{source}: {cause}")
        self.source = source
        self.cause = cause


class AggregationOutage(AggregatorError):
    """Every enabled source failed in one aggregation run."""

    def __init__(self, failed_sources: list[str]) -> None:
        super().__init__(f"all sources failed: {', '.join(failed_sources)}")
        self.failed_sources = failed_sources


class CacheComputeFailure(AggregatorError):
    """An entire cache refresh cycle failed."""

    def __init__(self, cache_name: str, cause: BaseException) -> None:
        super().__init__(f"cache '{cache_name}' compute failed: {cause}")
        self.cache_name = cache_name
        self.cause = cause


__all__ = [
    "AggregationOutage",
    "AggregatorError",
    "CacheComputeFailure",
    "FetchFailure",
    "ParseFailure",
    "SourceFailure",
    "ValidationFailure",
]
