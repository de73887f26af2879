"""CLI entry point for texweave."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from texweave.build import BuildReport, Builder
from texweave.config import TexweaveConfig, load_config
from texweave.errors import ConverterNotFoundError, OutputDirectoryError
from texweave.freshness import SourceWatcher
from texweave.reporting import ConsoleReporter

app = typer.Typer(
    name="texweave",
    help="Incrementally convert a tree of LaTeX documents to HTML with pandoc.",
    add_completion=False,
)

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Seconds between checks for debounced watch events
_WATCH_POLL_INTERVAL = 0.25


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=_LOG_LEVELS[level],
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _display_summary(report: BuildReport) -> None:
    """Show per-status counts as a Rich table."""
    counts = report.counts()
    table = Table(title=f"Build summary ({len(report.results)} file(s))")
    table.add_column("Status")
    table.add_column("Files", justify="right")
    styles = {
        "converted": "green",
        "unchanged": "dim",
        "failed": "red",
        "missing": "yellow",
        "error": "red",
    }
    for status, count in counts.items():
        if count:
            table.add_row(f"[{styles[status]}]{status}[/]", str(count))
    if report.timed_out:
        table.add_row("[red]timed out[/red]", str(len(report.timed_out)))
    rprint(table)
    if report.pruned:
        rprint(f"[dim]Pruned {len(report.pruned)} ledger entr(y/ies) for deleted files.[/dim]")
    if not report.ledger_saved:
        rprint("[yellow]Ledger was not saved; the next run will rebuild these files.[/yellow]")


def _run_once(builder: Builder) -> BuildReport:
    """Run one build, turning startup failures into exit code 1."""
    try:
        report = builder.run()
    except ConverterNotFoundError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except OutputDirectoryError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    _display_summary(report)
    return report


def _watch(builder: Builder, cfg: TexweaveConfig) -> None:
    """Rebuild whenever source documents change, until interrupted."""
    watcher = SourceWatcher(
        builder.root,
        extension=cfg.source.extension,
        ignore=[builder.output_root],
        debounce_seconds=cfg.watch.debounce_seconds,
    )
    rprint(f"[bold]Watching[/bold] {escape(str(builder.root))} [dim](Ctrl+C to stop)[/dim]")
    with watcher:
        try:
            while True:
                time.sleep(_WATCH_POLL_INTERVAL)
                changed = watcher.take_ready()
                if not changed:
                    continue
                rprint(f"\n[bold]{len(changed)} change(s) detected.[/bold] Rebuilding...")
                _run_once(builder)
        except KeyboardInterrupt:
            rprint("\n[dim]Stopped watching.[/dim]")


@app.command()
def build(
    root: Annotated[
        str, typer.Argument(help="Source root directory, relative to the current directory")
    ] = ".",
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to texweave.yaml")
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", min=0.001, help="Seconds to wait for each conversion"),
    ] = None,
    watch: Annotated[
        bool, typer.Option("--watch", "-w", help="Keep running and rebuild on changes")
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Convert every new or modified document under ROOT."""
    src = Path.cwd() / root
    try:
        cfg = load_config(config, root=src)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if timeout is not None:
        cfg = cfg.model_copy(
            update={"converter": cfg.converter.model_copy(update={"timeout": timeout})}
        )
    _configure_logging("debug" if verbose else cfg.log_level)

    if not src.is_dir():
        rprint(f"[red]Error:[/red] Source directory not found: {escape(str(src))}")
        raise typer.Exit(1)

    builder = Builder(src, config=cfg, reporter=ConsoleReporter())
    _run_once(builder)
    if watch:
        _watch(builder, cfg)
