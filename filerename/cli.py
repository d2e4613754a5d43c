"""CLI entrypoints."""

import logging
from collections.abc import Callable

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from filerename.config import Settings, load_settings
from filerename.engine import RenameEngine
from filerename.errors import ConfigError, HistoryUnavailableError
from filerename.history import HistoryStore
from filerename.models.rename import PreviewResult, RenameOutcome, TransformSpec


console = Console()
error_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("filerename")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.addHandler(RichHandler(console=error_console, show_path=False, log_time_format="[%X]"))
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_settings() -> Settings:
    try:
        return load_settings()
    except ConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e


def _transform_options(func: Callable) -> Callable:
    """Options shared by every command that builds a transform."""
    options = [
        click.argument(
            "input_files",
            type=click.Path(exists=True, dir_okay=False, resolve_path=True),
            nargs=-1,
            required=True,
        ),
        click.option("-p", "--pattern", type=str, default=None, help="Text or regular expression to replace."),
        click.option("-r", "--replacement", type=str, default="", help="Replacement text ($1, ${name} in regex mode)."),
        click.option(
            "--regex",
            "is_regex",
            is_flag=True,
            default=False,
            help="Treat the pattern as a regular expression.",
        ),
        click.option("-i", "--ignore-case", is_flag=True, default=False, help="Match case-insensitively."),
        click.option(
            "-H",
            "--from-history",
            type=click.IntRange(min=1),
            default=None,
            help="Reuse history entry N (1 = most recent) instead of --pattern.",
        ),
        click.option("--changed-only", is_flag=True, default=False, help="Only list files whose name changes."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_spec(
    store: HistoryStore,
    pattern: str | None,
    replacement: str,
    is_regex: bool,
    ignore_case: bool,
    from_history: int | None,
) -> TransformSpec:
    """Build the transform from command-line options or a history entry."""
    if from_history is not None:
        if pattern is not None:
            raise click.UsageError("Cannot specify both --pattern and --from-history.")
        entries = store.entries()
        if from_history > len(entries):
            raise click.BadParameter(
                f"History has {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}.",
                param_hint="--from-history",
            )
        return entries[from_history - 1].to_spec()

    if pattern is None:
        raise click.UsageError("Either --pattern or --from-history must be provided.")

    return TransformSpec(pattern=pattern, replacement=replacement, is_regex=is_regex, case_insensitive=ignore_case)


def _print_preview(result: PreviewResult, changed_only: bool) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Original", style="cyan")
    table.add_column("New Name", style="green")

    for index, entry in enumerate(result.entries, start=1):
        if changed_only and not entry.has_changed:
            continue
        new_name = escape(entry.new_name) if entry.has_changed else "[dim]unchanged[/dim]"
        table.add_row(str(index), escape(entry.original_name), new_name)

    console.print(table)
    console.print(f"[bold]{result.changed_count}[/bold] of {len(result)} file(s) will be renamed.")


def _print_outcome(outcome: RenameOutcome) -> None:
    if outcome.success_count:
        console.print(f"[bold green]Successfully renamed {outcome.success_count} file(s).[/bold green]")
    if outcome.failure_count:
        console.print(f"[bold red]Failed to rename {outcome.failure_count} file(s):[/bold red]")
        for error in outcome.errors:
            console.print(f"  [red]-[/red] {escape(error)}")


def _preview(engine: RenameEngine, spec: TransformSpec, changed_only: bool) -> PreviewResult:
    console.print(f"Transform: [italic]{escape(str(spec))}[/italic]")
    console.print()

    result = engine.preview_spec(spec)
    if result.error:
        console.print(f"[bold red]Error:[/bold red] invalid regular expression: {escape(result.error)}")
        raise SystemExit(1)

    _print_preview(result, changed_only)
    return result


@click.group(context_settings=dict(show_default=True))
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """filerename - Rename files in bulk with literal or regex substitution."""
    _configure_logging(verbose)


@cli.command("preview")
@_transform_options
def preview(
    input_files: tuple[str, ...],
    pattern: str | None,
    replacement: str,
    is_regex: bool,
    ignore_case: bool,
    from_history: int | None,
    changed_only: bool,
) -> None:
    """Show the names a transform would produce, without renaming anything."""
    settings = _load_settings()
    store = settings.history_store()
    spec = _resolve_spec(store, pattern, replacement, is_regex, ignore_case, from_history)

    engine = RenameEngine(history=store, initial_files=input_files)
    _preview(engine, spec, changed_only)


@cli.command("rename")
@_transform_options
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    default=False,
    help="Automatically apply renames without asking for confirmation.",
)
@click.option("--progress", is_flag=True, default=False, help="Show a progress bar while renaming.")
@click.option("--dry-run", is_flag=True, default=False, help="Only show the preview; never rename.")
def rename(
    input_files: tuple[str, ...],
    pattern: str | None,
    replacement: str,
    is_regex: bool,
    ignore_case: bool,
    from_history: int | None,
    changed_only: bool,
    yes: bool,
    progress: bool,
    dry_run: bool,
) -> None:
    """Rename files by replacing a literal string or regular expression.

    Every match in each file name is replaced; directories are left alone.
    Files that cannot be renamed are reported and skipped.

    Examples:

        filerename rename -p draft -r final *.txt

        filerename rename --regex -p '(\\d+)' -r 'N$1' img*.png
    """
    settings = _load_settings()
    store = settings.history_store()
    spec = _resolve_spec(store, pattern, replacement, is_regex, ignore_case, from_history)

    engine = RenameEngine(history=store, initial_files=input_files)
    result = _preview(engine, spec, changed_only)

    if result.changed_count == 0:
        console.print("[yellow]No files would be renamed.[/yellow]")
        return

    if dry_run:
        console.print("[yellow]Dry run. No files were renamed.[/yellow]")
        return

    console.print()
    if not yes and not click.confirm("Apply these renames?", default=False):
        console.print("[yellow]Aborted. No files were renamed.[/yellow]")
        return

    console.print("[cyan]Applying renames...[/cyan]")
    outcome = engine.execute(show_progress=progress)
    _print_outcome(outcome)

    if engine.history_degraded:
        console.print("[yellow]Warning: history could not be saved.[/yellow]")

    if outcome.has_failures:
        raise SystemExit(1)


@cli.command("history")
@click.option("-n", "--limit", type=click.IntRange(min=1), default=None, help="Number of entries to show.")
@click.option("--clear", is_flag=True, default=False, help="Remove all history entries.")
def history(limit: int | None, clear: bool) -> None:
    """List previously used transforms, most recent first."""
    settings = _load_settings()
    store = settings.history_store()

    if clear:
        try:
            store.clear()
        except HistoryUnavailableError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise SystemExit(1) from e
        console.print("[green]History cleared.[/green]")
        return

    entries = store.entries()
    if not entries:
        console.print("[yellow]No history yet.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Pattern", style="cyan")
    table.add_column("Replacement", style="green")
    table.add_column("Mode")
    table.add_column("Last used", style="dim")

    for index, entry in enumerate(entries[: limit or settings.history_display], start=1):
        mode = "regex" if entry.is_regex else "literal"
        if entry.case_insensitive:
            mode += ", ignore case"
        table.add_row(
            str(index),
            escape(entry.pattern),
            escape(entry.replacement),
            mode,
            entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)
