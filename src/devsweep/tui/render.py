"""Screen rendering for the interactive cleaner."""

from __future__ import annotations

import shutil

import click

from devsweep.core.executor import summarize
from devsweep.models.candidate import Candidate
from devsweep.models.tree_node import TreeNode
from devsweep.tui.keys import HELP_LINES
from devsweep.tui.navigator import Navigator, State
from devsweep.utils import bytes_to_human

SPINNER = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

# Lines used by the header, status bar and footer around the list
_CHROME_LINES = 7


def render(nav: Navigator, width: int | None = None, height: int | None = None) -> str:
    """Render the whole screen for the navigator's current state."""
    if width is None or height is None:
        size = shutil.get_terminal_size((80, 24))
        width = width or size.columns
        height = height or size.lines

    lines = [_header(nav), ""]
    if nav.show_help:
        lines.extend(_help())
    else:
        match nav.state:
            case State.SCANNING:
                lines.append(f"{_spinner(nav)} Scanning for reclaimable space...")
            case State.SELECTING:
                lines.extend(_selecting(nav, width, height))
            case State.TREE:
                lines.extend(_tree(nav, width, height))
            case State.CONFIRMING:
                lines.extend(_confirming(nav))
            case State.DELETING:
                lines.extend(_deleting(nav))
            case State.DONE:
                lines.extend(_done(nav))
    lines.append("")
    lines.extend(_status(nav))
    return "\n".join(lines)


def _header(nav: Navigator) -> str:
    title = click.style(" devsweep ", fg="black", bg="cyan", bold=True)
    if nav.dry_run:
        mode = click.style(" DRY-RUN ", fg="black", bg="green")
    else:
        mode = click.style(" DELETE ", fg="white", bg="red", bold=True)
    return f"{title} {mode}"


def _spinner(nav: Navigator) -> str:
    return click.style(SPINNER[nav.ticks % len(SPINNER)], fg="cyan")


def _window(count: int, cursor: int, height: int) -> range:
    """Rows to show so the cursor stays visible."""
    visible = max(height - _CHROME_LINES, 3)
    if count <= visible:
        return range(count)
    start = min(max(cursor - visible // 2, 0), count - visible)
    return range(start, start + visible)


def _row(nav: Navigator, index: int, size: int, name: str, extra: str, width: int) -> str:
    pointer = click.style("›", fg="cyan", bold=True) if index == nav.cursor else " "
    box = click.style("[x]", fg="green") if nav.is_selected(index) else "[ ]"
    text = f"{bytes_to_human(size):>10}  {name}"
    if extra:
        text += f"  {click.style(extra, dim=True)}"
    line = f"{pointer} {box} {text}"
    if index == nav.cursor:
        line = click.style(line, bold=True)
    return _clip(line, width)


def _clip(line: str, width: int) -> str:
    if len(click.unstyle(line)) <= width:
        return line
    return click.unstyle(line)[: max(width - 1, 1)] + "…"


def _selecting(nav: Navigator, width: int, height: int) -> list[str]:
    if not nav.candidates:
        return ["Nothing to clean. Your developer caches are tidy."]
    lines = []
    for i in _window(len(nav.candidates), nav.cursor, height):
        c: Candidate = nav.candidates[i]
        lines.append(_row(nav, i, c.size_bytes, f"{c.ecosystem:<13} {c.label}", str(c.path), width))
    total = sum(c.size_bytes for c in nav.candidates)
    lines.append("")
    lines.append(f"{len(nav.candidates)} items, {bytes_to_human(total)} total")
    return lines


def _tree(nav: Navigator, width: int, height: int) -> list[str]:
    trail = " / ".join(nav.breadcrumb_names())
    lines = [_clip(click.style(trail, fg="cyan"), width)]
    current = nav.current
    if current is None:
        return lines
    if nav.busy and not current.scanned:
        lines.append(f"{_spinner(nav)} Reading {current.path}...")
        return lines
    children = current.children or []
    if not children:
        lines.append(click.style("(empty)", dim=True))
        return lines
    for i in _window(len(children), nav.cursor, height - 1):
        child: TreeNode = children[i]
        if child.is_dir:
            marker = "▾" if child.scanned else "▸"
            name = f"{marker} {child.name}/"
        else:
            name = f"  {child.name}"
        extra = f"{child.file_count} files" if child.is_dir else ""
        lines.append(_row(nav, i, child.size_bytes, name, extra, width))
    if nav.busy:
        lines.append(f"{_spinner(nav)} Refreshing...")
    return lines


def _confirming(nav: Navigator) -> list[str]:
    total = sum(c.size_bytes for c in nav.pending)
    if nav.dry_run:
        heading = f"Dry run: simulate cleaning {len(nav.pending)} items ({bytes_to_human(total)})?"
    else:
        heading = click.style(
            f"Permanently delete {len(nav.pending)} items ({bytes_to_human(total)})?",
            fg="red",
            bold=True,
        )
    lines = [heading, ""]
    for c in nav.pending:
        lines.append(f"  {bytes_to_human(c.size_bytes):>10}  {c.path}")
    lines.append("")
    lines.append("[y] proceed   [n] cancel")
    return lines


def _deleting(nav: Navigator) -> list[str]:
    verb = "Simulating" if nav.dry_run else "Deleting"
    lines = [f"{_spinner(nav)} {verb} {len(nav.progress)}/{len(nav.pending)}...", ""]
    for i, c in enumerate(nav.pending):
        result = nav.progress.get(i)
        if result is None:
            mark = click.style("…", dim=True)
        elif result.success:
            mark = click.style("✓", fg="green")
        else:
            mark = click.style("✗", fg="red")
        lines.append(f"  {mark} {c.path}")
    return lines


def _done(nav: Navigator) -> list[str]:
    succeeded, failed, freed = summarize(nav.results)
    label = "would free" if nav.dry_run else "freed"
    lines = [
        click.style(f"{succeeded} succeeded, {failed} failed", bold=True),
        f"{bytes_to_human(freed)} {label}",
    ]
    failures = [r for r in nav.results if not r.success]
    if failures:
        lines.append("")
        for r in failures:
            lines.append(click.style(f"  ✗ {r.path}: {r.error}", fg="red"))
    lines.append("")
    lines.append("Press any key to rescan, q to quit.")
    return lines


def _help() -> list[str]:
    lines = [click.style("Keys", bold=True)]
    lines.extend(f"  {k:<10} {desc}" for k, desc in HELP_LINES)
    lines.append("")
    lines.append("Press any key to close help.")
    return lines


def _status(nav: Navigator) -> list[str]:
    lines = []
    if nav.error:
        lines.append(click.style(f"Error: {nav.error}", fg="red"))
    if nav.notice:
        lines.append(click.style(nav.notice, fg="yellow"))
    if nav.state in (State.SELECTING, State.TREE):
        selection = nav.selection()
        lines.append(
            f"{len(selection)} selected ({bytes_to_human(nav.selected_bytes())})"
            "   space select  enter clean  → explore  ? help  q quit"
        )
    return lines
