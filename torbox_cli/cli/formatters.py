"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from torbox_cli.models.config import TorboxConfig
from torbox_cli.models.job import ResolvedDownload
from torbox_cli.models.stats import WorkflowStats
from torbox_cli.utils.formatting import format_duration, mask_secret


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "CredentialMissingError": [
            "• Run `torbox-cli init <API_KEY>` to save your API key.",
            "• Or export TORBOX_API_KEY before running the command.",
        ],
        "InvalidSubmissionError": [
            "• Pass the full link to download, e.g. `torbox-cli submit https://...`.",
        ],
        "SubmissionRejectedError": [
            "• Check that the link is reachable and supported by TorBox.",
            "• Your plan may have hit its download quota.",
            "• Verify your API key on the TorBox settings page.",
        ],
        "MissingJobIdError": [
            "• TorBox accepted the request but returned no job.",
            "• Check the TorBox dashboard before submitting again.",
        ],
        "StatusQueryFailedError": [
            "• TorBox could not report the download status.",
            "• The API might be temporarily unavailable. Try again later.",
        ],
        "JobVanishedError": [
            "• The download was removed from TorBox while waiting.",
            "• Check the TorBox dashboard and submit the link again.",
        ],
        "RemoteJobFailedError": [
            "• TorBox could not fetch the link.",
            "• Make sure the link does not require a login or expire quickly.",
        ],
        "PollTimeoutError": [
            "• The download is still processing on TorBox.",
            "• Raise `--max-attempts` or `--interval` to wait longer.",
            "• Check the TorBox dashboard for its current state.",
        ],
        "LinkResolutionFailedError": [
            "• TorBox finished the download but returned no link.",
            "• Try requesting the link again from the TorBox dashboard.",
        ],
        "ConfigurationError": [
            "• Run `torbox-cli validate` to see what is wrong.",
            "• Run `torbox-cli init --force <API_KEY>` to start over.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• The TorBox API might be temporarily unavailable.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding sensitive data."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key == "api_key":
            value = mask_secret(value)
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: TorboxConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    api_key_state = (
        "[green]configured[/green]" if config.api_key else "[red]missing[/red]"
    )
    max_wait = config.poll_interval * config.max_poll_attempts

    table.add_row("API Key:", api_key_state)
    table.add_row("API Base:", config.api_base)
    table.add_row("Poll Interval:", f"{config.poll_interval:g}s")
    table.add_row("Max Attempts:", str(config.max_poll_attempts))
    table.add_row("Max Wait:", f"~{format_duration(max_wait)}")
    table.add_row("Open Browser:", "yes" if config.open_browser else "no")

    console.print(
        Panel(table, title="[bold green]✓ Configuration Valid[/bold green]", expand=False)
    )


def print_result_panel(
    result: ResolvedDownload, stats: WorkflowStats, console: Console | None = None
):
    """Displays the resolved download link and a short run summary."""
    console = console or Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column(overflow="fold")

    table.add_row("Web Download:", str(result.job_id))
    table.add_row("File:", str(result.file_id))
    table.add_row("Status Checks:", str(stats.attempts))
    if stats.last_status:
        percent = int(stats.last_progress * 100 + 0.5)
        table.add_row("Last Status:", f"{escape(stats.last_status)} ({percent}%)")
    table.add_row("Elapsed:", format_duration(stats.elapsed))
    if stats.events_dropped:
        table.add_row("Dropped Events:", f"[yellow]{stats.events_dropped}[/yellow]")
    table.add_row("Download URL:", f"[link={result.url}]{result.url}[/link]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Download Ready[/bold green]",
            border_style="green",
            expand=False,
        )
    )
