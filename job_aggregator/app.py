"""Typer CLI entrypoint for the job aggregator."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import CacheConfig, ConfigRepository, SourceConfig
from .logging_conf import available_source_logs, log_paths, tail_log
from .models import Listing, SourceIdentity
from .service import AggregatorService, build_service

app = typer.Typer(
    help="Job aggregator command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
source_app = typer.Typer(
    name="source",
    help="Source configuration and single-source runs",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log file viewer",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()

SERVE_POLL_SECONDS = 5.0


@dataclass
class AppState:
    repository: ConfigRepository
    service: AggregatorService


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    service = build_service(repository, verbose=verbose)
    return AppState(repository=repository, service=service)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _render_sources_table(sources: Sequence[SourceConfig]) -> Table:
    table = Table(
        title=f"Sources · {len(sources)} configured",
        box=box.SIMPLE_HEAD,
        show_lines=False,
    )
    table.add_column("Source", style="cyan", no_wrap=True)
    table.add_column("Enabled", style="green")
    table.add_column("Query", style="magenta", overflow="fold")
    table.add_column("Location")
    table.add_column("Delay (s)", justify="right")
    table.add_column("Pages", justify="right")
    for source in sources:
        table.add_row(
            source.identity.value,
            "yes" if source.enabled else "no",
            source.search_query,
            source.location,
            f"{source.request_delay:g}",
            str(source.max_pages),
        )
    return table


def _render_listings_table(listings: Sequence[Listing], title: str, limit: int) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("Title", style="cyan", overflow="fold")
    table.add_column("Company", style="green")
    table.add_column("Location")
    table.add_column("Source", style="magenta")
    table.add_column("Posted")
    table.add_column("Link", overflow="fold")
    for listing in list(listings)[:limit]:
        table.add_row(
            listing.title,
            listing.company,
            listing.location or "-",
            listing.source.value if listing.source else "-",
            listing.posted_at.date().isoformat() if listing.posted_at else "-",
            listing.target_url,
        )
    return table


_STATUS_STYLES = {
    "HEALTHY": "green",
    "DEGRADED": "yellow",
    "FAILING": "red",
    "UNKNOWN": "dim",
}


def _render_health_table(health: dict[str, dict[str, Any]]) -> Table:
    table = Table(title="Source health", box=box.SIMPLE_HEAD)
    table.add_column("Source", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Jobs", justify="right")
    table.add_column("Failures", justify="right")
    table.add_column("Last success")
    table.add_column("Last error", overflow="fold")
    for name, record in health.items():
        status = str(record.get("status", "UNKNOWN"))
        table.add_row(
            name,
            f"[{_STATUS_STYLES.get(status, 'white')}]{status}[/]",
            str(record.get("last_job_count", 0)),
            str(record.get("consecutive_failures", 0)),
            str(record.get("last_success") or "-"),
            str(record.get("last_error") or "-"),
        )
    return table


def _render_groups_table(groups: dict[str, list[Listing]]) -> Table:
    clusters = {key: members for key, members in groups.items() if len(members) > 1}
    table = Table(title=f"Duplicate clusters · {len(clusters)}", box=box.SIMPLE_HEAD)
    table.add_column("Title | company", style="cyan", overflow="fold")
    table.add_column("Postings", justify="right")
    table.add_column("Links", overflow="fold")
    for key, members in clusters.items():
        table.add_row(key, str(len(members)), "\n".join(item.target_url for item in members))
    return table


def _write_json(path: Path, listings: Iterable[Listing]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [listing.to_dict() for listing in listings]
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


app.add_typer(source_app, name="source", help="Inspect sources or run one of them")
app.add_typer(log_app, name="log", help="List or show log files")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("aggregate", help="Run the full pipeline once and print the results.")
def aggregate(
    ctx: typer.Context,
    json_path: Optional[Path] = typer.Option(None, "--json", help="Also write listings to this JSON file."),
    limit: int = typer.Option(20, "--limit", min=1, help="Rows to print."),
) -> None:
    state = _get_state(ctx)
    try:
        listings = state.service.aggregate()
        console.print(
            _render_listings_table(listings, f"Listings · {len(listings)} unique", limit)
        )
        console.print(_render_health_table(state.service.health()))
        if json_path is not None:
            _write_json(json_path, listings)
            console.print(f"Wrote {len(listings)} listings to {json_path}", style="green")
    finally:
        state.service.shutdown()


@app.command("health", help="Run one aggregation and print per-source health.")
def health(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    try:
        state.service.aggregate()
        summary = state.service.health_summary()
        console.print(_render_health_table(state.service.health()))
        console.print(
            f"healthy={summary['healthy']} degraded={summary['degraded']} failing={summary['failing']}",
            style="cyan",
        )
    finally:
        state.service.shutdown()


@app.command("serve", help="Keep the cache warm on a timer until interrupted.")
def serve(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(
        None, "--interval", min=1.0, help="Refresh interval in seconds."
    ),
) -> None:
    state = _get_state(ctx)
    service = state.service
    if interval is not None:
        service.cache.config = CacheConfig(
            refresh_interval=interval,
            warm_on_start=service.cache.config.warm_on_start,
        )
    service.start()
    console.print(
        f"Refreshing every {service.cache.config.refresh_interval:g}s. Press Ctrl+C to stop.",
        style="cyan",
    )
    last_seen = None
    try:
        while True:
            snapshot = service.snapshot()
            if snapshot.ready and snapshot.computed_at != last_seen:
                last_seen = snapshot.computed_at
                console.print(
                    f"{len(snapshot.listings)} listings at {snapshot.computed_at.isoformat()}",
                    style="green",
                )
                console.print(_render_health_table(service.health()))
            time.sleep(SERVE_POLL_SECONDS)
    except KeyboardInterrupt:
        console.print("Stopping.", style="yellow")
    finally:
        service.shutdown()


@source_app.command("list", help="Show every source and its configuration.")
def source_list(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    console.print(_render_sources_table(state.repository.list_sources()))


@source_app.command("run", help="Scrape a single source right now.")
def source_run(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Source name, e.g. indeed"),
    limit: int = typer.Option(20, "--limit", min=1, help="Rows to print."),
    groups: bool = typer.Option(
        False, "--groups", help="Also list clusters of near-duplicate postings.", is_flag=True
    ),
) -> None:
    state = _get_state(ctx)
    try:
        identity = SourceIdentity.parse(name)
    except ValueError:
        known = ", ".join(item.value for item in SourceIdentity)
        console.print(f"Unknown source `{name}`. Known sources: {known}", style="red")
        raise typer.Exit(code=1)
    try:
        listings = state.service.scrape_source(identity.value)
        console.print(
            _render_listings_table(listings, f"{identity.value} · {len(listings)} listings", limit)
        )
        record = state.service.health().get(identity.value)
        if record is not None:
            console.print(_render_health_table({identity.value: record}))
        if groups:
            console.print(_render_groups_table(state.service.duplicate_groups(listings)))
    finally:
        state.service.shutdown()


@log_app.command("list", help="List available per-source log files.")
def log_list() -> None:
    logs = list(available_source_logs())
    if not logs:
        console.print("No source logs yet.", style="dim")
        return
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("File", style="green")
    for path in logs:
        table.add_row(path.name)
    console.print(table)


@log_app.command("show", help="Show the tail of a source log, or the main log.")
def log_show(
    name: Optional[str] = typer.Argument(None, help="Source name; empty for the main log."),
    lines: int = typer.Option(100, "--lines", min=1, help="Number of trailing lines."),
) -> None:
    paths = log_paths()
    path = paths.for_source(name) if name else paths.aggregator
    content = tail_log(path, lines)
    if not content:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(content)} lines", style="cyan")
    console.print("".join(content), markup=False)


def cli() -> None:
    app()


__all__ = ["AppState", "app", "build_state", "cli"]
