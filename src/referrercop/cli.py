"""
ReferrerCop CLI - Command Line Interface

Entry point for filtering log files, extracting referrer URLs, testing
single URLs, and updating the blacklist.
"""

import io
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from referrercop.classifier.rulelist import fingerprint_file
from referrercop.core.config import apply_overrides, load_settings
from referrercop.core.constants import UrlKind
from referrercop.core.exceptions import ReferrerCopError
from referrercop.core.log import configure_logging
from referrercop.core.models import FilterStats, Settings
from referrercop.orchestrator.pipeline import FilterPipeline
from referrercop.update.updater import BlacklistUpdater

# Version
__version__ = "1.2.0"

# Create CLI app
app = typer.Typer(
    name="referrercop",
    help="ReferrerCop - Referrer spam filter for web server logs",
    add_completion=False,
)

# Rich console for messages; filtered data goes straight to stdout
console = Console(stderr=True)


# ============================================================================
# Helpers
# ============================================================================

def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj["settings"]


def _verbose(ctx: typer.Context) -> bool:
    return ctx.obj["verbose"]


def _build_pipeline(ctx: typer.Context) -> FilterPipeline:
    return FilterPipeline.from_settings(_settings(ctx))


def _fail(error: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False, soft_wrap=True)
    raise typer.Exit(code=1)


def _preserve_bytes(*streams) -> None:
    """Carry undecodable input bytes through stdin and stdout unchanged."""
    for stream in streams:
        if isinstance(stream, io.TextIOWrapper):
            stream.reconfigure(errors="surrogateescape")


def _report(stats: FilterStats) -> None:
    """Print run statistics to stderr."""
    if stats.processed == 0:
        return
    console.print()
    console.print(
        f"Processed {stats.processed} lines in {stats.elapsed:.3f}s "
        f"({round(stats.throughput)} lines per second)",
        highlight=False,
    )
    console.print(
        f"{stats.ham} ham, {stats.spam} spam, {stats.invalid} invalid",
        highlight=False,
    )


def _run_filter(ctx: typer.Context, files: Optional[List[Path]]) -> None:
    _preserve_bytes(sys.stdin, sys.stdout)
    try:
        pipeline = _build_pipeline(ctx)
        if files:
            for path in files:
                pipeline.filter_file(path, sys.stdout)
        else:
            pipeline.filter_stream(sys.stdin, sys.stdout)
    except ReferrerCopError as e:
        _fail(e)

    if _verbose(ctx):
        _report(pipeline.totals)


def _run_extract(ctx: typer.Context, files: Optional[List[Path]], kind: UrlKind) -> None:
    _preserve_bytes(sys.stdin, sys.stdout)
    try:
        pipeline = _build_pipeline(ctx)
        if files:
            urls = pipeline.extract_files(files, kind)
        else:
            urls = sorted(pipeline.extract(sys.stdin, kind))
    except ReferrerCopError as e:
        _fail(e)

    for url in urls:
        typer.echo(url)


# ============================================================================
# Global Options
# ============================================================================

@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: search for referrercop.yaml)",
    ),
    blacklist: Optional[Path] = typer.Option(
        None,
        "--blacklist",
        "-b",
        help="Blacklist file to use instead of the configured one",
    ),
    whitelist: Optional[Path] = typer.Option(
        None,
        "--whitelist",
        "-w",
        help="Whitelist file to use instead of the configured one",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print progress and statistics to stderr",
    ),
) -> None:
    """
    Filter referrer spam from Apache combined logs, AWStats data files,
    and plain URL lists.

    Without a command, standard input is filtered to standard output.
    """
    configure_logging(verbose, console)

    try:
        settings = apply_overrides(
            load_settings(config),
            blacklist_file=blacklist,
            whitelist_file=whitelist,
        )
    except ReferrerCopError as e:
        _fail(e)

    ctx.obj = {"settings": settings, "verbose": verbose}

    if ctx.invoked_subcommand is None:
        _run_filter(ctx, None)


# ============================================================================
# Commands
# ============================================================================

@app.command("filter")
def filter_command(
    ctx: typer.Context,
    files: Optional[List[Path]] = typer.Argument(
        None,
        help="Input files (default: standard input)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Filter spam from the input and write the rest to stdout."""
    _run_filter(ctx, files)


@app.command("in-place")
def in_place(
    ctx: typer.Context,
    files: List[Path] = typer.Argument(
        ...,
        help="Files to filter; originals are kept with a .bak suffix",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Filter files in place, keeping a backup of each original."""
    try:
        pipeline = _build_pipeline(ctx)
        for path in files:
            pipeline.filter_file_in_place(path)
    except ReferrerCopError as e:
        _fail(e)

    if _verbose(ctx):
        _report(pipeline.totals)


@app.command("extract-ham")
def extract_ham(
    ctx: typer.Context,
    files: Optional[List[Path]] = typer.Argument(
        None,
        help="Input files (default: standard input)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Print the unique ham URLs found in the input."""
    _run_extract(ctx, files, UrlKind.HAM)


@app.command("extract-spam")
def extract_spam(
    ctx: typer.Context,
    files: Optional[List[Path]] = typer.Argument(
        None,
        help="Input files (default: standard input)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Print the unique spam URLs found in the input."""
    _run_extract(ctx, files, UrlKind.SPAM)


@app.command("test-url")
def test_url(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL to classify"),
) -> None:
    """Report whether a single URL is spam or ham."""
    try:
        spam = _build_pipeline(ctx).is_spam(url)
    except ReferrerCopError as e:
        _fail(e)

    typer.echo("Spam" if spam else "Ham")


@app.command()
def update(ctx: typer.Context) -> None:
    """Download the latest blacklist if it has changed."""
    settings = _settings(ctx)
    destination = settings.blacklist_file

    updater = BlacklistUpdater(settings.update_url, settings.update_sha1_url)

    try:
        local_fingerprint = fingerprint_file(destination) if destination.exists() else None
        if _verbose(ctx):
            console.print("Checking for updated blacklist...")
        updated = updater.update(destination, local_fingerprint)
    except (ReferrerCopError, OSError) as e:
        _fail(e)

    if updated:
        console.print(f"[green]✓[/green] Blacklist updated: {escape(str(destination))}", highlight=False)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"ReferrerCop version {__version__}")


if __name__ == "__main__":
    app()
