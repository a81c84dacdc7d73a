"""CLI interface for devsweep."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from devsweep.core.audit import AuditLog
from devsweep.core.engine import ScanEngine, sort_by_size
from devsweep.core.executor import DeletionExecutor, summarize
from devsweep.core.policy import PathPolicy
from devsweep.core.registry import SourceRegistry
from devsweep.core.source_loader import load_sources
from devsweep.core.tracker import Tracker
from devsweep.models.candidate import Candidate, ScanOptions
from devsweep.models.clean_result import CleanResult
from devsweep.settings import Settings
from devsweep.utils import bytes_to_human


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_engine() -> ScanEngine:
    registry = SourceRegistry()
    load_sources(registry)
    return ScanEngine(registry)


def _resolve_home() -> Path:
    """Return the user's home directory or exit with status 1."""
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as e:
        click.echo(f"Cannot determine home directory: {e}", err=True)
        sys.exit(1)
    if not home.is_dir() or not os.access(home, os.R_OK | os.X_OK):
        click.echo(f"Home directory is missing or unreadable: {home}", err=True)
        sys.exit(1)
    return home


def _scan_options(settings: Settings, home: Path, depth: int | None) -> ScanOptions:
    project_dirs = settings.string_list("scan.project_dirs")
    return ScanOptions.for_home(
        home,
        max_depth=depth if depth is not None else settings.max_depth(),
        project_dirs=tuple(project_dirs) if project_dirs is not None else None,
    )


def _source_ids(settings: Settings, given: tuple[str, ...]) -> list[str] | None:
    if given:
        return list(given)
    return settings.string_list("scan.sources") or None


def _candidate_dict(c: Candidate) -> dict:
    return {
        "path": str(c.path),
        "label": c.label,
        "ecosystem": c.ecosystem,
        "size_bytes": c.size_bytes,
        "file_count": c.file_count,
    }


def _result_dict(r: CleanResult) -> dict:
    return {
        "path": str(r.path),
        "size_bytes": r.size_bytes,
        "success": r.success,
        "dry_run": r.dry_run,
        "error": r.error,
    }


def _echo_candidate(c: Candidate, prefix: str = "  ") -> None:
    size = click.style(f"{bytes_to_human(c.size_bytes):>10s}", fg="green", bold=True)
    click.echo(f"{prefix}{size}  {click.style(c.ecosystem, fg='cyan'):22s} {c.label}")
    click.echo(f"{prefix}{'':10s}  {click.style(str(c.path), fg='bright_black')}")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """devsweep - reclaim disk space from developer tool caches and build output."""
    _setup_logging(verbose)


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.option("--ecosystem", "-e", default=None, help="Filter by ecosystem")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(ecosystem: str | None, as_json: bool) -> None:
    """List scan sources that have something to look at."""
    engine = _build_engine()
    sources = engine.registry.get_available(_scan_options(Settings(), _resolve_home(), None))
    if ecosystem:
        sources = [s for s in sources if s.ecosystem == ecosystem]

    if as_json:
        data = [
            {"id": s.id, "name": s.name, "ecosystem": s.ecosystem, "description": s.description}
            for s in sources
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not sources:
        click.echo("No scan sources available.")
        return

    for source in sources:
        click.echo(f"  {click.style(source.id, fg='cyan', bold=True):30s}  {source.name}")
        if source.description:
            click.echo(f"    {source.description}")


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("source_ids", nargs=-1)
@click.option("--ecosystem", "-e", "ecosystems", multiple=True, help="Only scan these ecosystems")
@click.option("--depth", type=click.IntRange(min=1), default=None, help="Project search depth")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(source_ids: tuple[str, ...], ecosystems: tuple[str, ...], depth: int | None, as_json: bool) -> None:
    """Scan for reclaimable directories (preview only, never deletes)."""
    settings = Settings()
    home = _resolve_home()
    engine = _build_engine()
    ids = _source_ids(settings, source_ids)

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning...\n")

    def on_progress(source_id: str, status: str) -> None:
        if not as_json and status == "error":
            click.echo(f"  {click.style('✗', fg='red')} {source_id:35s} error during scan")

    candidates = sort_by_size(
        engine.scan_all(
            source_ids=ids,
            options=_scan_options(settings, home, depth),
            ecosystems=list(ecosystems) or None,
            on_progress=on_progress,
        )
    )

    if as_json:
        click.echo(json.dumps([_candidate_dict(c) for c in candidates], indent=2))
        return

    if not candidates:
        click.echo("Nothing to clean.")
        return

    for c in candidates:
        _echo_candidate(c)

    total = sum(c.size_bytes for c in candidates)
    click.echo(
        f"\nTotal reclaimable: {click.style(bytes_to_human(total), fg='green', bold=True)} "
        f"in {len(candidates)} directories\n"
    )


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("source_ids", nargs=-1)
@click.option("--ecosystem", "-e", "ecosystems", multiple=True, help="Only scan these ecosystems")
@click.option("--depth", type=click.IntRange(min=1), default=None, help="Project search depth")
@click.option("--confirm", is_flag=True, help="Really delete (default is a dry run)")
@click.option("--no-tui", is_flag=True, help="Use simple prompts instead of the interactive interface")
@click.option("--yes", "-y", is_flag=True, help="Clean everything found without asking")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(
    source_ids: tuple[str, ...],
    ecosystems: tuple[str, ...],
    depth: int | None,
    confirm: bool,
    no_tui: bool,
    yes: bool,
    as_json: bool,
) -> None:
    """Scan, pick and clean reclaimable directories."""
    settings = Settings()
    home = _resolve_home()
    engine = _build_engine()
    tracker = Tracker()
    ids = _source_ids(settings, source_ids)
    options = _scan_options(settings, home, depth)
    dry_run = False if confirm else bool(settings.get("clean.dry_run", True))
    policy = PathPolicy(home, extra_allow=settings.string_list("policy.extra_allow") or ())

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning...\n")

    candidates = sort_by_size(
        engine.scan_all(source_ids=ids, options=options, ecosystems=list(ecosystems) or None)
    )

    if not candidates:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "results": []}))
        else:
            click.echo("Nothing to clean.")
        return

    with AuditLog() as audit:
        executor = DeletionExecutor(policy, audit)

        if not (no_tui or yes or as_json) and sys.stdin.isatty() and sys.stdout.isatty():
            from devsweep.tui.app import TuiApp
            from devsweep.tui.navigator import Navigator

            navigator = Navigator(candidates, dry_run=dry_run, max_depth=options.max_depth)
            TuiApp(
                navigator,
                engine,
                executor,
                options,
                source_ids=ids,
                ecosystems=list(ecosystems) or None,
                tracker=tracker,
            ).run()
            click.clear()
            _report_session(tracker, dry_run)
            tracker.save_session()
            return

        if not as_json:
            for i, c in enumerate(candidates, 1):
                _echo_candidate(c, prefix=f"  [{i}] ")
            total = sum(c.size_bytes for c in candidates)
            click.echo(f"\nTotal: {click.style(bytes_to_human(total), fg='green', bold=True)}\n")

        chosen = candidates
        if not yes and not as_json:
            choice = click.prompt("Clean all? [y/N/select]", default="n", show_default=False)
            match choice.lower():
                case "y" | "yes":
                    pass
                case "select":
                    chosen = _interactive_select(candidates)
                    if not chosen:
                        click.echo("Nothing selected.")
                        return
                case _:
                    click.echo("Aborted.")
                    return

            if not dry_run:
                total = sum(c.size_bytes for c in chosen)
                answer = click.prompt(
                    click.style(
                        f"Permanently delete {len(chosen)} directories ({bytes_to_human(total)})? "
                        "Type 'yes' to continue",
                        fg="red",
                        bold=True,
                    ),
                    default="",
                    show_default=False,
                )
                if answer.strip().lower() != "yes":
                    click.echo("Aborted.")
                    return

        if not as_json:
            verb = "Simulating" if dry_run else "Cleaning"
            click.echo(f"\n{click.style('🧹', bold=True)} {verb}...\n")

        def on_result(_index: int, r: CleanResult) -> None:
            if as_json:
                return
            if r.success:
                tag = "would free" if r.dry_run else "freed"
                click.echo(
                    f"  {click.style('✓', fg='green')} {str(r.path):60s} "
                    f"{tag} {click.style(bytes_to_human(r.size_bytes), fg='green', bold=True)}"
                )
            else:
                click.echo(f"  {click.style('✗', fg='red')} {str(r.path):60s} {r.error}")

        results = executor.execute(chosen, dry_run=dry_run, on_result=on_result)

    tracker.record(results)
    tracker.save_session()

    if as_json:
        status = "dry_run" if dry_run else "cleaned"
        click.echo(json.dumps({"status": status, "results": [_result_dict(r) for r in results]}, indent=2))
        return

    succeeded, failed, freed = summarize(results)
    click.echo(f"\n{succeeded} succeeded, {failed} failed")
    label = "Would free" if dry_run else "Total freed"
    click.echo(f"{label}: {click.style(bytes_to_human(freed), fg='green', bold=True)}")
    if dry_run:
        click.echo("(dry run - nothing was deleted; pass --confirm to delete)")
    click.echo()


def _interactive_select(candidates: list[Candidate]) -> list[Candidate]:
    """Let the user pick which directories to clean."""
    click.echo("\nSelect directories to clean (enter numbers, comma-separated):\n")
    raw = click.prompt("Selection", default="")
    if not raw.strip():
        return []
    selected: list[Candidate] = []
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit():
            idx = int(part) - 1
            if 0 <= idx < len(candidates) and candidates[idx] not in selected:
                selected.append(candidates[idx])
    return selected


def _report_session(tracker: Tracker, dry_run: bool) -> None:
    if dry_run:
        click.echo("Dry run finished; nothing was deleted.")
        return
    click.echo(
        f"Removed {tracker.session_items_removed} directories, freed "
        f"{click.style(bytes_to_human(tracker.session_bytes_freed), fg='green', bold=True)}."
    )


# ── stats ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--period", "-p", default="all", type=click.Choice(["today", "week", "month", "all"]))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(period: str, as_json: bool) -> None:
    """Show space freed statistics."""
    tracker = Tracker()
    data = tracker.get_stats(period)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"\n{click.style('📊', bold=True)} Statistics ({period})\n")
    click.echo(f"  Bytes freed:    {click.style(bytes_to_human(data['bytes_freed']), fg='green', bold=True)}")
    click.echo(f"  Dirs removed:   {data['items_removed']:,}")
    click.echo(f"  Sessions:       {data['session_count']}")
    click.echo(f"  Lifetime total: {click.style(bytes_to_human(data['lifetime_bytes_freed']), fg='cyan', bold=True)}")
    last = tracker.get_last_clean_time()
    if last:
        click.echo(f"  Last cleaned:   {last}")

    if data["largest"]:
        click.echo("\n  Largest removals:")
        for entry in data["largest"]:
            click.echo(f"    {bytes_to_human(entry['bytes_freed']):>10s}  {entry['path']}")
    click.echo()


# ── sources ──────────────────────────────────────────────────────────────

@main.group()
def sources() -> None:
    """Scan source management commands."""


@sources.command("list")
def sources_list() -> None:
    """List all installed scan sources with status."""
    engine = _build_engine()
    options = _scan_options(Settings(), _resolve_home(), None)
    for source in engine.registry:
        reason = source.unavailable_reason(options)
        status = click.style("available", fg="green") if reason is None else click.style("not available", fg="bright_black")
        click.echo(f"  {source.id:20s} {source.ecosystem:15s} {status}")


@sources.command("info")
@click.argument("source_id")
def sources_info(source_id: str) -> None:
    """Show detailed info about a scan source."""
    engine = _build_engine()
    source = engine.registry.get(source_id)
    if source is None:
        click.echo(f"Source '{source_id}' not found.", err=True)
        sys.exit(1)

    reason = source.unavailable_reason(_scan_options(Settings(), _resolve_home(), None))
    click.echo(f"\n  {click.style('ID:', bold=True)}          {source.id}")
    click.echo(f"  {click.style('Name:', bold=True)}        {source.name}")
    click.echo(f"  {click.style('Ecosystem:', bold=True)}   {source.ecosystem}")
    click.echo(f"  {click.style('Description:', bold=True)} {source.description}")
    click.echo(f"  {click.style('Available:', bold=True)}   {reason is None}")
    if reason:
        click.echo(f"  {click.style('Reason:', bold=True)}      {reason}")
    click.echo()


# ── service ──────────────────────────────────────────────────────────────

@main.group()
def service() -> None:
    """D-Bus service management."""


@service.command("start")
def service_start() -> None:
    """Start the D-Bus service in foreground."""
    from devsweep.dbus_service import start_service

    click.echo("Starting devsweep D-Bus service...")
    start_service()
