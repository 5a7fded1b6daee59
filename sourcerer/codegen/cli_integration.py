"""
CLI integration for code generation functionality.

Provides the ``generate`` and ``plugins`` subcommands.
"""

import argparse

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.syntax import Syntax
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from . import GeneratorConfig, load_config
from .core.config import ConfigError
from .core.generator import GenerationResult, generate_code
from .registry import RegistryError, get_registry
from ..logging_config import get_logger
from ..utils import FileWriteError, JSONLoaderError, load_json, resolve_output_dir, write_emitted_files

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def create_generate_subparser(subparsers) -> argparse.ArgumentParser:
    """
    Create the ``generate`` subcommand parser.

    Args:
        subparsers: Subparser group from main parser

    Returns:
        Configured subparser for the generate command
    """
    parser = subparsers.add_parser(
        "generate",
        help="Generate TypeScript modules from a database snapshot",
        description="Run the plugin pipeline over an introspection snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sourcerer generate snapshot.json
  sourcerer generate snapshot.json --plugin types --plugin zod --dry-run
  sourcerer generate --url https://example.com/snapshot.json --config sourcerer.json
        """.strip(),
    )

    input_group = parser.add_mutually_exclusive_group(required=False)
    input_group.add_argument("model", nargs="?", help="Snapshot JSON file")
    input_group.add_argument("--url", help="URL to fetch the snapshot from")

    parser.add_argument("--config", "-c", help="Configuration file path (JSON)")
    parser.add_argument("--output-dir", "-o", help="Directory for generated files")
    parser.add_argument(
        "--plugin",
        "-p",
        action="append",
        dest="plugins",
        metavar="NAME",
        help="Plugin to run, in order (repeatable; overrides the config)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print generated files instead of writing them",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show generation metadata",
    )

    parser.set_defaults(func=handle_generate_command)
    return parser


def create_plugins_subparser(subparsers) -> argparse.ArgumentParser:
    """Create the ``plugins`` subcommand parser."""
    parser = subparsers.add_parser(
        "plugins",
        help="List available plugins",
        description="List registered plugins or show one plugin's details",
    )
    parser.add_argument("--info", metavar="NAME", help="Show details about one plugin")
    parser.set_defaults(func=handle_plugins_command)
    return parser


def handle_plugins_command(args: argparse.Namespace) -> int:
    if args.info:
        return _show_plugin_info(args.info)
    return _list_plugins()


def handle_generate_command(args: argparse.Namespace) -> int:
    """
    Handle the generate command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for any failure)
    """
    try:
        if not (args.model or args.url):
            raise CLIError("Input source required (MODEL file or --url)")

        snapshot = _load_snapshot(args)
        config = _build_config(args)
        return _generate_and_output(snapshot, config, args)

    except CLIError as e:
        logger.error("%s", e)
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1


def _load_snapshot(args: argparse.Namespace):
    try:
        if args.model:
            return load_json(file_path=args.model)[1]
        return load_json(url=args.url)[1]
    except (JSONLoaderError, FileNotFoundError) as e:
        raise CLIError(f"Failed to load input: {e}") from e


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from the config file and CLI overrides."""
    overrides = {}
    if args.plugins:
        overrides["plugins"] = args.plugins
    if args.output_dir:
        overrides["output_dir"] = args.output_dir

    try:
        return load_config(custom_config=overrides, config_file=args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e


def _generate_and_output(snapshot, config: GeneratorConfig, args: argparse.Namespace) -> int:
    """Generate files and handle output with rich formatting."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("[green]Running plugins...", total=None)
        result = generate_code(snapshot, config)
        progress.remove_task(task)

    if not result.success:
        console.print(f"[red]✗ {result.error_message}[/red]")
        tag = getattr(result.exception, "tag", None)
        if tag:
            console.print(f"[dim]Error type: {tag}[/dim]")
        return 1

    output_dir = resolve_output_dir(config.output_dir, config.config_dir)

    if args.dry_run:
        _print_files(result)
    else:
        try:
            written = write_emitted_files(result.files, output_dir)
        except FileWriteError as e:
            console.print(f"[red]✗ {e}[/red]")
            return 1
        console.print(
            f"[green]✓[/green] Wrote {len(written)} file(s) to [cyan]{output_dir}[/cyan]"
        )

    if args.verbose and result.metadata:
        _print_metadata(result)

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")
        console.print()

    return 0


def _print_files(result: GenerationResult):
    for emitted in result.files:
        console.print()
        console.print(
            Panel(
                Syntax(emitted.content, "typescript", theme="monokai"),
                title=f"📄 {emitted.path}",
                border_style="green",
            )
        )
    console.print(f"\n[dim]Dry run: {len(result.files)} file(s) not written[/dim]")


def _print_metadata(result: GenerationResult):
    metadata_table = Table(
        title="📊 Generation Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    metadata_table.add_column("Property", style="bold")
    metadata_table.add_column("Value", style="green")

    for key, value in result.metadata.items():
        metadata_table.add_row(key.replace("_", " ").title(), str(value))

    console.print()
    console.print(metadata_table)


def _list_plugins() -> int:
    """List registered plugins with details."""
    registry = get_registry()

    table = Table(title="📋 Available Plugins", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Plugin", style="bold green", no_wrap=True)
    table.add_column("Provides", style="cyan")
    table.add_column("Consumes", style="magenta")
    table.add_column("Aliases", style="blue")

    for name in registry.list_plugins():
        info = registry.get_plugin_info(name)
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(
            f"🔧 {name}",
            ", ".join(info["provides"]),
            ", ".join(info["consumes"]) or "[dim]none[/dim]",
            aliases,
        )

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] sourcerer generate [dim]snapshot.json[/dim] "
            "--plugin [cyan]NAME[/cyan] ...\n"
            "[bold]Info:[/bold] sourcerer plugins --info [cyan]NAME[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _show_plugin_info(name: str) -> int:
    """Show detailed information about a specific plugin."""
    registry = get_registry()
    if not registry.is_supported(name):
        console.print(f"[red]✗ Plugin '{name}' is not registered[/red]")
        console.print("[dim]Use 'sourcerer plugins' to see available options[/dim]")
        return 1

    try:
        info = registry.get_plugin_info(name)
    except RegistryError as e:
        console.print(f"[red]✗ Error getting plugin info:[/red] {e}")
        return 1

    info_text = f"""[bold]Plugin:[/bold] {info['name']}
[bold]Description:[/bold] {info['description']}
[bold]Provides:[/bold] {', '.join(info['provides'])}
[bold]Consumes:[/bold] {', '.join(info['consumes']) or 'nothing'}
[bold]Class:[/bold] {info['class']}
[bold]Module:[/bold] {info['module']}"""

    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(Panel(info_text, title=f"🔧 {info['name']}", border_style="green"))
    return 0

