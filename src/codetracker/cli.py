# src/codetracker/cli.py
"""
CodeTracker Command Line Interface (CLI).

This module implements the terminal interface using `typer` and `rich`. It
hosts the two hook triggers and a handful of inspection commands.

Features
--------
- **Triggers**: `entry` / `exit` read the hook payload from stdin and always
  exit 0 without printing, exactly like the console-script adapters.
- **Status**: show what the agent knows about this project.
- **Preview**: dry-run scan + diff against the cached snapshot.
- **Reset**: drop the cached state to force a full re-baseline.
- **Init**: write a default `.codetracker/config.json`.

Usage
-----
    $ echo '{"prompt": "add tests", "session_id": "s1"}' | codetracker entry
    $ codetracker preview --root path/to/project
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from codetracker import __version__, hooks
from codetracker.core.contracts.change import ChangeRecord, DeletedChange
from codetracker.core.contracts.config import TrackerConfig
from codetracker.core.state.storage import JsonStateStore
from codetracker.core.workspace import Workspace
from codetracker.engine.diff import summarize
from codetracker.session.correlator import SessionCorrelator

load_dotenv()

app = typer.Typer(
    help="CodeTracker: snapshot and report what changed around each AI coding interaction.",
    rich_markup_mode="markdown",
    no_args_is_help=True,
)
console = Console()

RootOption = Annotated[
    Path | None,
    typer.Option(
        "--root",
        "-r",
        file_okay=False,
        dir_okay=True,
        help="Project root (default: $CLAUDE_PROJECT_DIR, then the current directory).",
    ),
]


# --------------------------------------------------------------------------- #
# Helpers: Rendering
# --------------------------------------------------------------------------- #


def _render_changes(changes: list[ChangeRecord], *, limit: int) -> None:
    """Helper: print a change table, capped at `limit` rows."""
    counts = summarize(changes)
    console.print(
        f"[green]+{counts['added']}[/green] added  "
        f"[yellow]~{counts['modified']}[/yellow] modified  "
        f"[red]-{counts['deleted']}[/red] deleted"
    )
    if not changes:
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Change")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    styles = {"added": "green", "modified": "yellow", "deleted": "red"}
    for change in changes[:limit]:
        size = "" if isinstance(change, DeletedChange) else str(change.size)
        style = styles[change.change_type]
        table.add_row(f"[{style}]{change.change_type}[/{style}]", change.path, size)
    console.print(table)
    if len(changes) > limit:
        console.print(f"[dim]... and {len(changes) - limit} more[/dim]")


def _presence(ok_flag: bool) -> str:
    return "[green]found[/green]" if ok_flag else "[red]missing[/red]"


# --------------------------------------------------------------------------- #
# Commands: Triggers
# --------------------------------------------------------------------------- #


@app.command("entry")  # type: ignore[misc]
def entry(root: RootOption = None) -> None:
    """
    Prompt-submit trigger: snapshot the tree before the assistant acts.

    Reads the hook payload from stdin. Always exits 0.
    """
    hooks.handle("entry", hooks.read_stdin(), root=root)


@app.command("exit")  # type: ignore[misc]
def exit_(root: RootOption = None) -> None:
    """
    Stop trigger: snapshot the tree after the assistant acts and close the interaction.

    Reads the hook payload from stdin. Always exits 0.
    """
    hooks.handle("exit", hooks.read_stdin(), root=root)


# --------------------------------------------------------------------------- #
# Commands: Inspection
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def status(root: RootOption = None) -> None:
    """Show configuration, cached snapshot, and any pending interaction."""
    ws = Workspace.locate(root)
    config = ws.load_config()
    credentials = ws.load_credentials()
    store = JsonStateStore(ws.cache_dir)
    snapshot = store.load_snapshot()
    session = store.load_session()

    lines = [
        f"Project root: [u]{ws.root}[/u]",
        f"Config:       {_presence(config.is_ok())}  {ws.config_path}",
        f"Credentials:  {_presence(credentials.is_ok())}  {ws.credentials_path}",
    ]
    if config.is_ok():
        cfg = config.unwrap()
        lines.append(f"Server:       {cfg.server_url}")
        lines.append(f"Auto-track:   {'on' if cfg.auto_track else 'off'}")
    if snapshot is not None:
        lines.append(
            f"Snapshot:     #{snapshot.snapshot_id or '?'} "
            f"({len(snapshot)} files, {snapshot.created_at})"
        )
    else:
        lines.append("Snapshot:     [dim]none (next trigger reports every file)[/dim]")
    if session is not None:
        lines.append(
            f"Pending:      since {session.started_at} "
            f"(pre-snapshot #{session.pre_snapshot_id})"
        )
    else:
        lines.append("Pending:      [dim]none[/dim]")

    console.print(
        Panel("\n".join(lines), title=f"CodeTracker {__version__}", border_style="cyan")
    )


@app.command()  # type: ignore[misc]
def preview(
    root: RootOption = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, help="Maximum number of rows to print."),
    ] = 50,
) -> None:
    """
    Scan and diff against the cached snapshot without submitting anything.

    Uses the project's config file when present, defaults otherwise.
    """
    ws = Workspace.locate(root)
    config = ws.load_config().unwrap(TrackerConfig())
    correlator = SessionCorrelator(
        ws.root, config, None, JsonStateStore(ws.cache_dir), reserved=[ws.state_dir]
    )

    result = correlator.preview()
    if result.is_err():
        console.print(f"[bold red]Scan failed:[/bold red] {result.unwrap_err().message}")
        raise typer.Exit(code=1)
    _render_changes(result.unwrap(), limit=limit)


@app.command()  # type: ignore[misc]
def reset(
    root: RootOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
) -> None:
    """Delete the cached snapshot and pending session (forces a full re-baseline)."""
    ws = Workspace.locate(root)
    if not yes and not typer.confirm(f"Delete cached state in {ws.cache_dir}?", default=False):
        raise typer.Abort()
    store = JsonStateStore(ws.cache_dir)
    result = store.clear_snapshot().flat_map(lambda _: store.clear_session())
    if result.is_err():
        console.print(f"[bold red]Reset failed:[/bold red] {result.unwrap_err().message}")
        raise typer.Exit(code=1)
    console.print("[green]Cached state cleared.[/green]")


@app.command()  # type: ignore[misc]
def init(
    root: RootOption = None,
    server_url: Annotated[
        str | None, typer.Option("--server-url", help="Override the default API base URL.")
    ] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing config.")] = False,
) -> None:
    """Write a default `.codetracker/config.json` for this project."""
    ws = Workspace.locate(root)
    if ws.config_path.exists() and not force:
        console.print(f"[yellow]{ws.config_path} already exists (use --force).[/yellow]")
        raise typer.Exit(code=1)

    try:
        config = TrackerConfig() if server_url is None else TrackerConfig(server_url=server_url)
    except ValueError as e:
        console.print(f"[bold red]Invalid server URL:[/bold red] {e}")
        raise typer.Exit(code=2) from e
    ws.state_dir.mkdir(parents=True, exist_ok=True)
    with ws.config_path.open("w", encoding="utf-8") as f:
        json.dump(config.model_dump(mode="json"), f, indent=2)
        f.write("\n")
    console.print(f"[green]Wrote {ws.config_path}[/green]")
    if ws.load_credentials().is_err():
        console.print(
            "[dim]No usable credentials.json yet; download it from the dashboard.[/dim]"
        )


if __name__ == "__main__":
    app()
