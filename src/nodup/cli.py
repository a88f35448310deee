"""Command-line interface for nodup."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from nodup import __version__
from nodup.core.bin import Action, Bin, BinError, DatePathProvider
from nodup.core.collision import DETECTORS
from nodup.core.deduplicator import DeduplicationReport, build_deduplicator
from nodup.core.discriminator import BUCKETINGS
from nodup.utils.config import Config
from nodup.utils.logger import parse_level, set_level, setup_logger

console = Console()
logger = setup_logger(__name__)

LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
MAX_DISPLAYED_COLLISIONS = 10


@click.group()
@click.version_option(version=__version__, prog_name="nodup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--log",
    "log_level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Set the logging level",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (default: ~/.nodup/config.json)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_level: Optional[str],
    config_file: Optional[Path],
) -> None:
    """
    nodup - Find duplicate images and set them aside.

    Images sharing dimension, format and size are compared pixel by pixel;
    confirmed duplicates can be copied or moved into a dated bin.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config(config_file)

    if log_level:
        set_level(parse_level(log_level))
    elif verbose:
        set_level(parse_level("DEBUG"))


@cli.command()
@click.argument(
    "directory",
    required=False,
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option("--scan", "-s", "action", flag_value="scan", help="Only report duplicates (default)")
@click.option("--copy", "-c", "action", flag_value="copy", help="Copy duplicates into the bin")
@click.option("--move", "-m", "action", flag_value="move", help="Move duplicates into the bin")
@click.option(
    "--detector",
    "-d",
    type=click.Choice(sorted(DETECTORS), case_sensitive=False),
    help="Collision detector (default: from config)",
)
@click.option(
    "--bucketing",
    "-b",
    type=click.Choice(sorted(BUCKETINGS), case_sensitive=False),
    help="Bucketing strategy (default: from config)",
)
@click.option("--workers", "-w", type=click.IntRange(min=1), help="Threads comparing buckets")
@click.option(
    "--recursive/--no-recursive",
    "-r/-R",
    default=None,
    help="Recursively scan subdirectories (default: from config)",
)
@click.option(
    "--show-progress/--no-progress",
    default=True,
    help="Show progress bars",
)
@click.pass_context
def scan(
    ctx: click.Context,
    directory: Optional[Path],
    action: Optional[str],
    detector: Optional[str],
    bucketing: Optional[str],
    workers: Optional[int],
    recursive: Optional[bool],
    show_progress: bool,
) -> None:
    """
    Find duplicate images in DIRECTORY (default: current directory).

    Example:
        nodup scan ~/Pictures --move
    """
    config: Config = ctx.obj["config"]
    directory = directory or Path.cwd()
    selected = Action.parse(action or "scan")

    # Command-line options override the config for this run only
    if detector:
        config.set("detector", detector.lower(), save=False)
    if bucketing:
        config.set("bucketing", bucketing.lower(), save=False)
    if workers:
        config.set("max_workers", workers, save=False)
    if recursive is not None:
        config.set("scan.recursive", recursive, save=False)

    console.print(f"\n[bold cyan]nodup v{__version__}[/bold cyan] - {selected} duplicates in {directory}\n")

    try:
        deduplicator = build_deduplicator(config, show_progress=show_progress)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration in {config.config_file}: {e}") from e
    report = deduplicator.execute(selected, directory)

    _display_report(report)

    if not report.succeeded:
        console.print(f"[red]Could not {selected.value} duplicates:[/red] {report.error}")
        sys.exit(1)


@cli.group(name="bin")
@click.pass_context
def bin_group(ctx: click.Context) -> None:
    """Inspect and manage the bin holding duplicates."""
    config: Config = ctx.obj["config"]
    ctx.obj["bin"] = Bin(
        DatePathProvider(config.get_bin_root()),
        operations_log=config.get_operations_log(),
    )


@bin_group.command(name="list")
@click.pass_context
def bin_list(ctx: click.Context) -> None:
    """List all bin directories."""
    bin: Bin = ctx.obj["bin"]
    directories = bin.directories()
    click.echo(f"Bins: {len(directories)}")
    for directory in directories:
        click.echo(f"- {directory.absolute()}")


@bin_group.command(name="path")
@click.pass_context
def bin_path(ctx: click.Context) -> None:
    """Print the bin path."""
    click.echo(str(ctx.obj["bin"].root()))


@bin_group.command(name="clear")
@click.option(
    "--recycle-bin/--permanent",
    default=False,
    help="Move bin directories to the recycle bin instead of deleting them",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def bin_clear(ctx: click.Context, recycle_bin: bool, yes: bool) -> None:
    """Delete all bin directories."""
    bin: Bin = ctx.obj["bin"]

    if bin.is_empty():
        console.print("[yellow]Bin is already empty.[/yellow]")
        return

    if not yes:
        click.confirm(
            f"Delete {len(bin.directories())} bin directories under {bin.root()}?",
            abort=True,
        )

    try:
        bin.clear(use_recycle_bin=recycle_bin)
    except BinError as e:
        console.print(f"[red]Error clearing bin:[/red] {e}")
        sys.exit(1)

    console.print("[green]Bin cleared.[/green]")


@bin_group.command(name="open")
@click.pass_context
def bin_open(ctx: click.Context) -> None:
    """Open the bin directory (requires a GUI environment)."""
    root = ctx.obj["bin"].root()
    if not root.is_dir():
        console.print(f"[yellow]Bin directory does not exist yet:[/yellow] {root}")
        sys.exit(1)

    if click.launch(str(root)) != 0:
        console.print(f"[red]Could not open directory:[/red] {root}")
        sys.exit(1)


def _display_report(report: DeduplicationReport) -> None:
    """Display the result summary and the first collisions."""
    console.print(f"\n[green]Images found:[/green] {report.images_found}")
    console.print(f"[green]Collisions found:[/green] {len(report.collisions)}")
    console.print(f"[green]Duplicates:[/green] {len(report.duplicates)}")
    console.print(f"[dim]Elapsed time: {report.elapsed_seconds * 1000:.0f} ms[/dim]")

    if not report.collisions:
        console.print("[green]No duplicates found![/green]")
        return

    console.print()
    for collision in report.collisions[:MAX_DISPLAYED_COLLISIONS]:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Original")
        table.add_column("Duplicate")

        table.add_row(f"[bold]{collision.original.path}[/bold]", "")
        for duplicate in collision.duplicates:
            table.add_row("", str(duplicate.path))

        console.print(table)

    remaining = len(report.collisions) - MAX_DISPLAYED_COLLISIONS
    if remaining > 0:
        console.print(f"[dim]... and {remaining} more collisions[/dim]\n")

    if report.placed:
        verb = "Moved" if report.action is Action.MOVE else "Copied"
        console.print(
            f"\n[green]{verb} {len(report.placed)} duplicates to:[/green] "
            f"{report.placed[0].parent}"
        )


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
