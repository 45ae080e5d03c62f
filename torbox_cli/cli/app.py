"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import webbrowser
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from torbox_cli import __version__
from torbox_cli.api.client import TorboxAPIClient
from torbox_cli.core.orchestrator import DownloadOrchestrator
from torbox_cli.exceptions import TorboxCliError
from torbox_cli.models.job import ResolvedDownload
from torbox_cli.models.stats import WorkflowStats
from torbox_cli.storage.config_manager import ConfigManager
from torbox_cli.storage.credentials import ConfigCredentialStore

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_result_panel,
    print_validation_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("torbox_cli")

app = typer.Typer(
    name="torbox-cli",
    help=(
        "Send links to TorBox, wait for them to be cached and get a direct"
        " download link. Use 'torbox-cli <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "torbox-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """TorBox Web Download CLI"""
    if version:
        console.print(f"[bold]torbox-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("torbox_cli").setLevel(log_level)

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]torbox-cli init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        config_manager = ConfigManager(CONFIG_FILE)
        config = config_manager.load_config()
        print_config(CONFIG_FILE, config.model_dump(exclude={"config_path"}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    api_key: str = typer.Argument(..., help="Your TorBox API key.", metavar="<API_KEY>"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing API key without asking."
    ),
):
    """Initialize configuration with a TorBox API key."""
    api_key = api_key.strip()
    if not api_key:
        console.print("[red]✗ Please provide a non-empty API key.[/red]")
        raise typer.Exit(code=1)

    config_manager = ConfigManager(CONFIG_FILE)
    credentials = ConfigCredentialStore(config_manager, env_var=None)

    if (
        credentials.get()
        and not force
        and not typer.confirm("An API key is already configured. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        credentials.set(api_key)
    except TorboxCliError as e:
        console.print(f"[red]✗ Failed to save API key: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"\n[bold green]✓ API key saved to '{CONFIG_FILE}'[/bold green]")
    console.print("Ready! Try: [cyan]torbox-cli submit <LINK>[/cyan]")


@app.command(name="submit")
def submit_command(
    link: str = typer.Argument(..., help="The link to send to TorBox."),
    name: str | None = typer.Option(
        None, "--name", "-n", help="Display name for the download on TorBox."
    ),
    interval: float | None = typer.Option(
        None, "--interval", "-i", help="Seconds between status checks (default 3)."
    ),
    max_attempts: int | None = typer.Option(
        None,
        "--max-attempts",
        "-m",
        help="Number of status checks before giving up (default 200).",
    ),
    open_browser: bool | None = typer.Option(
        None,
        "--open/--no-open",
        help="Open the resolved link in the default web browser.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Print only the resolved URL."
    ),
):
    """Submit a link to TorBox and wait for a direct download link."""
    link = link.strip()
    if not link:
        console.print(
            "[red]✗ No link provided.[/red] Use: [cyan]torbox-cli submit <LINK>[/cyan]"
        )
        raise typer.Exit(code=1)

    cli_options = {
        key: value
        for key, value in {
            "poll_interval": interval,
            "max_poll_attempts": max_attempts,
            "open_browser": open_browser,
        }.items()
        if value is not None
    }

    config_manager = ConfigManager(CONFIG_FILE)
    try:
        config = config_manager.load_config(cli_options, missing_ok=True)
    except TorboxCliError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    credentials = ConfigCredentialStore(config_manager)
    # Keep stdout clean for the URL in quiet mode
    progress_console = Console(stderr=True) if quiet else console

    async def _submit_async() -> tuple[ResolvedDownload, WorkflowStats]:
        async with (
            TorboxAPIClient(config.api_base, config.request_timeout) as api_client,
            ProgressManager(console=progress_console) as progress_manager,
        ):
            orchestrator = DownloadOrchestrator(
                api_client,
                credentials,
                progress_sink=progress_manager,
                poll_interval=config.poll_interval,
                max_attempts=config.max_poll_attempts,
            )
            result = await orchestrator.submit(link, name)
            return result, orchestrator.stats

    try:
        result, stats = asyncio.run(_submit_async())
    except TorboxCliError as e:
        console.print(format_error_with_suggestions(e, {"link": link}))
        raise typer.Exit(code=1) from e

    if quiet:
        typer.echo(result.url)
    else:
        print_result_panel(result, stats, console)

    if config.open_browser:
        if not quiet:
            log.info("Opening download link in your browser...")
        webbrowser.open(result.url)


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config_manager = ConfigManager(CONFIG_FILE)
        config = config_manager.load_config()
        print_validation_table(config)
    except TorboxCliError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def diagnose():
    """Diagnose common configuration and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False

    config_manager = ConfigManager(CONFIG_FILE)
    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print(
            "[yellow]•[/] Config file not found, using defaults."
            " Run [cyan]torbox-cli init[/cyan] to create one."
        )

    try:
        config = config_manager.load_config(missing_ok=True)
        console.print("[green]✓[/] Configuration is valid and can be loaded.")
    except TorboxCliError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    api_key = ConfigCredentialStore(config_manager).get()
    if api_key:
        console.print("[green]✓[/] API key is present.")
    else:
        console.print("[red]✗ API key is missing.[/] Run `init` first.")
        issues_found = True

    console.print("\n[dim]Testing connectivity to the TorBox API...[/dim]")

    async def test_connection() -> bool:
        if not api_key:
            return False
        try:
            async with TorboxAPIClient(config.api_base, timeout=10) as api_client:
                jobs = await api_client.list_web_downloads(api_key)
        except TorboxCliError as e:
            console.print(f"[red]✗ TorBox API check failed: {e}[/red]")
            return False
        console.print(
            f"[green]✓[/] API key accepted ({len(jobs)} web downloads on the account)."
        )
        return True

    if not asyncio.run(test_connection()):
        issues_found = True
    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
