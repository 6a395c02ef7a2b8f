"""Aster CLI - find and remove unused Android string resources."""
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from aster.analyzer.cache import IndexCache
from aster.analyzer.indexer import Indexer
from aster.analyzer.resource_index import ResourceIndex, filter_unused
from aster.config import Config, get_config
from aster.errors import AsterError, CacheNotFoundError
from aster.reaper.string_remover import StringRemover
from aster.utils.safe_console import SafeConsole

app = typer.Typer(
    name="aster",
    help="Find and remove unused Android string resources",
    add_completion=False
)
console = SafeConsole()

# Snapshot management sub-command
cache_app = typer.Typer(name="cache", help="Manage the Aster index snapshot")


@dataclass
class CliState:
    """Options shared by every command, set by the top-level callback."""
    java_root: Optional[Path]
    res_root: Optional[Path]
    manifest_root: Optional[Path]
    config: Config


def _fail(message: str):
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(1)


def _load_index(state: CliState) -> ResourceIndex:
    """Load the snapshot or exit with a message; never falls back to re-walking."""
    cache = IndexCache(state.config.cache_dir)
    try:
        return cache.load()
    except CacheNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        console.print("[dim]Run `aster index` first.[/dim]")
        raise typer.Exit(1)
    except AsterError as e:
        _fail(str(e))


@app.command()
def index(ctx: typer.Context):
    """Walk the source, resource and manifest roots and save a fresh index snapshot."""
    state: CliState = ctx.obj

    if state.java_root is None or state.res_root is None:
        _fail("index needs both --java-root and --res-root")

    try:
        indexer = Indexer(
            state.java_root,
            state.res_root,
            manifest_root=state.manifest_root,
            config=state.config,
            console=console,
        )
        with console.status("[cyan]Walking source trees..."):
            resource_index = indexer.index()

        start_time = time.time()
        cache = IndexCache(state.config.cache_dir)
        cache.save(resource_index)
    except (AsterError, ValueError) as e:
        _fail(str(e))

    console.print(f"Saved index in {time.time() - start_time:.2f}s")
    console.print(f"[green]✓ {len(resource_index)} files indexed → {escape(str(cache.cache_file))}[/green]",
                  soft_wrap=True)


@app.command()
def counts(ctx: typer.Context):
    """Report how many strings are defined, used and unused."""
    state: CliState = ctx.obj
    resource_index = _load_index(state)

    console.print(f"{len(resource_index.defined_ids())} defined strings")
    console.print(f"{len(resource_index.used_ids())} used strings")
    console.print(f"{len(filter_unused(resource_index, state.config.denylist))} unused strings")


@app.command("list-unused")
def list_unused(
    ctx: typer.Context,
    show_location: bool = typer.Option(False, "--show-location", "-s", help="Also print the files declaring each string"),
):
    """Print every unused string, sorted."""
    state: CliState = ctx.obj
    resource_index = _load_index(state)
    definitions = resource_index.definitions()

    for unused in filter_unused(resource_index, state.config.denylist):
        console.print(unused, soft_wrap=True, highlight=False)
        if show_location:
            for location in definitions[unused]:
                console.print(f"  {escape(location)}", soft_wrap=True, highlight=False)


@app.command("remove-unused")
def remove_unused(
    ctx: typer.Context,
    prefix: str = typer.Option("", "--prefix", "-p", help="Only remove strings whose name starts with this prefix"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed without editing files"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
):
    """Delete unused <string> elements from the resource files declaring them."""
    state: CliState = ctx.obj
    resource_index = _load_index(state)
    definitions = resource_index.definitions()

    targets = [
        unused for unused in filter_unused(resource_index, state.config.denylist)
        if unused.startswith(prefix)
    ]

    if not targets:
        console.print("[bold green]No unused strings to remove.[/bold green]")
        return

    file_count = len({location for unused in targets for location in definitions[unused]})
    console.print(f"[bold yellow]Found {len(targets)} unused string(s) in {file_count} file(s)[/bold yellow]")

    if dry_run:
        table = Table(title="Strings to Remove")
        table.add_column("String", style="cyan")
        table.add_column("File", style="magenta", no_wrap=False)
        for unused in targets:
            for location in definitions[unused]:
                table.add_row(unused, escape(location))
        console.print(table)
        console.print("\n[bold blue]DRY RUN - No changes were made[/bold blue]")
        return

    if not yes:
        console.print("[bold yellow]Warning:[/bold yellow] This will modify resource files in place.")
        if not typer.confirm("Proceed with removal?", default=False):
            console.print("[red]Aborted[/red]")
            return

    results = StringRemover().remove_strings(targets, definitions)

    removed = [r for r in results if r.removed]
    not_found = [r for r in results if not r.removed and not r.failed]
    failed = [r for r in results if r.failed]

    for result in not_found:
        console.print(
            f"[yellow]⚠ {escape(result.identifier)} not found in {escape(result.path)} "
            f"(snapshot may be stale)[/yellow]",
            soft_wrap=True
        )
    for result in failed:
        console.print(f"[red]✗ {escape(result.identifier)}: {escape(result.error)}[/red]", soft_wrap=True)

    console.print(f"[bold green]✓ Removed {len(removed)} declaration(s)[/bold green]")

    if failed:
        console.print(f"[bold red]{len(failed)} file edit(s) failed[/bold red]")
        raise typer.Exit(1)


# =========================================================================
# SNAPSHOT MANAGEMENT COMMANDS
# =========================================================================

@cache_app.command("clear")
def cache_clear(ctx: typer.Context):
    """Delete the index snapshot."""
    state: CliState = ctx.obj
    cache = IndexCache(state.config.cache_dir)

    if cache.clear():
        console.print(f"[green]✓ Snapshot deleted: {escape(str(cache.cache_file))}[/green]", soft_wrap=True)
    else:
        console.print(f"[dim]No snapshot at {escape(str(cache.cache_file))}[/dim]", soft_wrap=True)


@cache_app.command("stats")
def cache_stats(ctx: typer.Context):
    """Describe the index snapshot."""
    state: CliState = ctx.obj
    cache = IndexCache(state.config.cache_dir)

    try:
        stats = cache.stats()
    except CacheNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        console.print("[dim]Run `aster index` first.[/dim]")
        raise typer.Exit(1)
    except AsterError as e:
        _fail(str(e))

    table = Table(title="Index Snapshot", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Path", escape(stats['path']))
    table.add_row("Size (bytes)", str(stats['size_bytes']))
    table.add_row("Files", str(stats['files']))
    table.add_row("Defined strings", str(stats['defined']))
    table.add_row("Used strings", str(stats['used']))

    console.print(table)


app.add_typer(cache_app)


@app.callback()
def main(
    ctx: typer.Context,
    java_root: Optional[Path] = typer.Option(None, "--java-root", "-j", help="Root of the Java/Kotlin sources"),
    res_root: Optional[Path] = typer.Option(None, "--res-root", "-r", help="Root of the resource XML files"),
    manifest_root: Optional[Path] = typer.Option(
        None, "--manifest-root", "-m", help="Where to look for AndroidManifest.xml (default: --res-root)"
    ),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Snapshot directory (default: ~/.cache/aster)"),
):
    """Aster - find and remove unused Android string resources."""
    config = get_config() if cache_dir is None else Config(cache_dir=cache_dir)
    ctx.obj = CliState(
        java_root=java_root,
        res_root=res_root,
        manifest_root=manifest_root,
        config=config,
    )


if __name__ == "__main__":
    app()
