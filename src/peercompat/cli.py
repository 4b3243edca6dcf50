"""Command-line interface for peercompat."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from peercompat import __version__
from peercompat.config import PeerCompatConfig, generate_example_config, load_config
from peercompat.core.models import DependencyEntry, ResultRecord, ScanOptions
from peercompat.engine.checker import PackageChecker
from peercompat.engine.pool import WorkerPool
from peercompat.engine.progress import ProgressPublisher, RichProgressObserver
from peercompat.errors import PeerCompatError
from peercompat.manifest import load_manifest
from peercompat.migration_links import MigrationLinkResolver
from peercompat.registry.client import NpmRegistryClient
from peercompat.report import OutputFormat, build_table, render_csv, render_json
from peercompat.utils.logging import configure_logging, get_logger, level_for, log_to_file

DEFAULT_FAST_LIMIT = 15

app = typer.Typer(
    name="peercompat",
    help="peercompat: rank npm dependency upgrades for a target framework major version.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    name="config",
    help="Inspect or create .peercompat.yml.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

console = Console()
stderr_console = Console(stderr=True)
logger = get_logger(__name__)


class _State:
    config_path: Path | None = None
    verbose: bool = False


state = _State()


def version_callback(value: bool) -> None:
    """Print the version and stop processing."""
    if value:
        console.print(f"peercompat version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log debug details and per-package results.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log warnings and errors.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Use this .peercompat.yml instead of searching for one.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Also write debug logs to this file.",
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Print the peercompat version.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """peercompat - know which dependencies block a framework upgrade."""
    configure_logging(level=level_for(verbose, quiet))
    if log_file:
        log_to_file(str(log_file))

    state.config_path = config
    state.verbose = verbose

    if config:
        logger.debug("Using configuration file: %s", config)


def _handle_cli_error(error: Exception) -> None:
    """Display a user-friendly error message and exit with code 1.

    Raises:
        typer.Exit: Always.
    """
    if isinstance(error, PeerCompatError):
        stderr_console.print(f"[bold red]Error:[/bold red] {escape(error.message)}")
        if error.hint:
            stderr_console.print(f"[yellow]Hint:[/yellow] {escape(error.hint)}")
    else:
        stderr_console.print(f"[red]Error: {escape(str(error))}[/red]")
        logger.exception("Command failed")

    raise typer.Exit(code=1)


async def _run_check(
    entries: list[DependencyEntry],
    options: ScanOptions,
    settings: PeerCompatConfig,
    progress: ProgressPublisher,
) -> tuple[list[ResultRecord], WorkerPool]:
    async with NpmRegistryClient(settings.registry) as registry:
        checker = PackageChecker(
            registry,
            options,
            settings.framework,
            MigrationLinkResolver(settings.migration_links, settings.framework.excluded_prefixes),
        )
        pool = WorkerPool(checker, options, progress)
        records = await pool.run(entries)
    return records, pool


@app.command()
def check(
    manifest: Annotated[
        Path,
        typer.Argument(
            help="package.json, or the directory containing it.",
        ),
    ] = Path("package.json"),
    framework_major: Annotated[
        int | None,
        typer.Option(
            "--framework-major",
            "-m",
            min=1,
            help="Target framework major version (default from config).",
        ),
    ] = None,
    fast: Annotated[
        bool,
        typer.Option(
            "--fast",
            help=f"Only probe the newest versions (see --fast-limit, default {DEFAULT_FAST_LIMIT}).",
        ),
    ] = False,
    fast_limit: Annotated[
        int | None,
        typer.Option(
            "--fast-limit",
            min=1,
            help="Number of newest versions probed in fast mode.",
        ),
    ] = None,
    exhaustive: Annotated[
        bool,
        typer.Option(
            "--exhaustive",
            help="Never stop early for packages without a framework peer range.",
        ),
    ] = False,
    include_prerelease: Annotated[
        bool,
        typer.Option(
            "--include-prerelease",
            help="Consider prerelease versions.",
        ),
    ] = False,
    jobs: Annotated[
        int | None,
        typer.Option(
            "--jobs",
            "-j",
            min=1,
            help="Number of concurrent workers.",
        ),
    ] = None,
    progress: Annotated[
        bool,
        typer.Option(
            "--progress/--no-progress",
            help="Show live progress on stderr.",
        ),
    ] = True,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format (csv, table, json).",
        ),
    ] = OutputFormat.CSV,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the report to this file instead of stdout.",
        ),
    ] = None,
) -> None:
    """Check every dependency in package.json against the target framework."""
    try:
        settings = load_config(state.config_path)
        entries = load_manifest(manifest, settings.framework.excluded_prefixes)
    except PeerCompatError as e:
        _handle_cli_error(e)
        return

    limit = 0
    if fast or fast_limit:
        limit = fast_limit or settings.scan.fast_limit or DEFAULT_FAST_LIMIT
    elif settings.scan.fast_limit:
        limit = settings.scan.fast_limit

    options = ScanOptions(
        target_major=framework_major or settings.framework.default_major,
        fast_limit=limit,
        exhaustive=exhaustive or settings.scan.exhaustive,
        include_prerelease=include_prerelease or settings.scan.include_prerelease,
        jobs=jobs or settings.scan.jobs,
        show_progress=progress,
        verbose=state.verbose,
    )

    publisher = ProgressPublisher()
    if options.show_progress:
        publisher.subscribe(RichProgressObserver(stderr_console))

    logger.debug(
        "Checking %d dependencies against %s %d",
        len(entries),
        settings.framework.name,
        options.target_major,
    )

    try:
        records, pool = asyncio.run(_run_check(entries, options, settings, publisher))
    except PeerCompatError as e:
        _handle_cli_error(e)
        return

    if options.show_progress and pool.summary is not None:
        stderr_console.print(pool.summary.describe(settings.framework.name), soft_wrap=True)

    if output_format == OutputFormat.TABLE:
        table = build_table(records, title=f"{settings.framework.name} {options.target_major} compatibility")
        if output:
            with output.open("w", encoding="utf-8") as fh:
                Console(file=fh, width=200).print(table)
            stderr_console.print(f"Results written to: {output}")
        else:
            console.print(table)
        return

    if output_format == OutputFormat.JSON:
        rendered = render_json(records, pool.summary)
    else:
        rendered = render_csv(records)

    if output:
        output.write_text(rendered)
        stderr_console.print(f"Results written to: {output}")
    else:
        print(rendered, end="" if rendered.endswith("\n") else "\n")


@config_app.command("init")
def config_init(
    path: Annotated[
        Path,
        typer.Argument(
            help="Directory to write .peercompat.yml into.",
        ),
    ] = Path(),
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Replace an existing .peercompat.yml.",
        ),
    ] = False,
) -> None:
    """Write an annotated example .peercompat.yml."""
    config_path = path / ".peercompat.yml"

    if config_path.exists() and not force:
        stderr_console.print(f"[yellow]{config_path} already exists; pass --force to replace it.[/yellow]")
        raise typer.Exit(code=1)

    config_path.write_text(generate_example_config())
    console.print(f"Wrote {config_path}")


def _setting_rows(data: dict, prefix: str = "") -> Iterator[tuple[str, str]]:
    """Yield dotted setting names with printable values."""
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict) and value:
            yield from _setting_rows(value, name)
        elif isinstance(value, (list, dict)):
            yield name, ", ".join(map(str, value)) or "-"
        else:
            yield name, "-" if value is None else str(value)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration (defaults, file and environment)."""
    try:
        settings = load_config(state.config_path)
    except PeerCompatError as e:
        _handle_cli_error(e)
        return

    data = settings.model_dump(mode="json")
    if data["registry"].get("token"):
        data["registry"]["token"] = "***"

    table = Table(title="Effective configuration")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for key, value in _setting_rows(data):
        table.add_row(escape(key), escape(value))

    console.print(table)


@config_app.command("dump")
def config_dump() -> None:
    """Print the effective configuration as YAML."""
    try:
        settings = load_config(state.config_path)
    except PeerCompatError as e:
        _handle_cli_error(e)
        return
    data = settings.model_dump(mode="json", exclude={"registry": {"token"}})
    print(yaml.safe_dump(data, sort_keys=False), end="")


if __name__ == "__main__":
    app()
