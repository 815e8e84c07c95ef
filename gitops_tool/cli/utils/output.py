# gitops_tool/cli/utils/output.py
"""Output formatting utilities"""

from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from ...constants import EMOJI_SUCCESS, EMOJI_ERROR, EMOJI_ARROW
from ...models.result import OperationStatus, RunResult

console = Console()


def print_error(error: Exception, title: str = "Error") -> None:
    """Display an error panel, with the error code when there is one"""
    code = getattr(error, "error_code", None)
    header = f"[red]{EMOJI_ERROR} {error}[/red]"
    if code:
        header = f"{header}\n\n[dim]Error code: {code}[/dim]"
    console.print(Panel(
        header,
        title=f"[bold red]{title}[/bold red]",
        border_style="red"
    ))


def format_run_result(result: RunResult) -> None:
    """Format and display a create-prs run summary"""
    if result.status == OperationStatus.SKIPPED:
        console.print(Panel(
            f"[yellow]{result.message or 'Nothing to do'}[/yellow]",
            title="GitOps Result",
            border_style="yellow"
        ))
        return

    lines = [
        f"[green]{EMOJI_SUCCESS}[/green] {result.message or 'Completed'}",
        "",
        f"[bold]Trains:[/bold] {len(result.trains)}",
        f"[bold]Changed branches:[/bold] {len(result.updated_branches)}",
        f"[bold]Images pushed:[/bold] {result.pushed}",
    ]
    if result.dry_run:
        lines.append("[bold]Mode:[/bold] dry run, nothing published")
    if result.duration is not None:
        lines.append(f"[bold]Duration:[/bold] {result.duration:.1f}s")

    console.print(Panel(
        "\n".join(lines),
        title="GitOps Result",
        border_style="green"
    ))

    if result.trains:
        table = Table(title="Release Trains")
        table.add_column("Train", style="cyan")
        table.add_column("Branch")
        table.add_column("Branch State")
        table.add_column("Targets", justify="right")
        table.add_column("Files", justify="right")
        table.add_column("Committed", style="green")

        for train in result.trains:
            table.add_row(
                train.train,
                train.branch,
                train.branch_state.value,
                str(len(train.targets)),
                str(len(train.modified_files)),
                EMOJI_SUCCESS if train.committed else "-",
            )
        console.print(table)

    for pull_request in result.pull_requests:
        request = pull_request.request
        state = "created" if pull_request.created else "reused"
        location = f" {pull_request.url}" if pull_request.url else ""
        console.print(
            f"  • {request.from_branch} {EMOJI_ARROW} {request.to_branch}: {state}{location}"
        )
