"""CLI UI components (Rich).

Why separate components:
- Keeps command logic free of presentation details.
- Tables/panels are reused across commands.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.errors import ClassifiedError, ErrorKind
from core.formatting import format_indian_date, format_inr


def print_banner(console: Console) -> None:
    """Print the welcome banner (interactive commands only)."""

    title = Text("JobWala Admin", style="bold cyan")
    subtitle = Text("Jobs • Candidates • Packages • Homepage", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_jobs_table(jobs: Iterable[dict[str, Any]]) -> Table:
    table = Table(title="Jobs")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Company", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Posted", style="magenta")
    for job in jobs:
        company = job.get("company")
        if isinstance(company, dict):
            company = company.get("name")
        table.add_row(
            str(job.get("_id") or job.get("id") or ""),
            str(job.get("title") or ""),
            str(company or ""),
            str(job.get("status") or ""),
            format_indian_date(job.get("createdAt")),
        )
    return table


def build_packages_table(packages: Iterable[dict[str, Any]]) -> Table:
    table = Table(title="Packages")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Type", style="cyan")
    table.add_column("Price", style="green", justify="right")
    table.add_column("Active", style="magenta")
    table.add_column("Featured", style="yellow")
    for pkg in packages:
        table.add_row(
            str(pkg.get("_id") or pkg.get("id") or ""),
            str(pkg.get("name") or ""),
            str(pkg.get("type") or ""),
            format_inr(pkg.get("price")),
            "yes" if pkg.get("isActive") else "no",
            "yes" if pkg.get("isFeatured") else "no",
        )
    return table


def build_error_panel(error: ClassifiedError) -> Panel:
    """Panel for a failed call: user message first, diagnostics dimmed."""

    title_style = "bold yellow" if error.kind is ErrorKind.AUTH_EXPIRED else "bold red"
    body = Text()
    body.append(error.message.strip() + "\n\n")
    body.append(f"kind: {error.kind.value}", style="dim")
    if error.http_status is not None:
        body.append(f"\nstatus: {error.http_status}", style="dim")
    body.append(f"\nendpoint: {error.endpoint}", style="dim")
    body.append(f"\nrequest id: {error.request_id}", style="dim")
    body.append(f"\nattempts: {error.attempts}", style="dim")
    if error.retryable:
        body.append("\n\nThis looks temporary, try again in a moment.", style="italic")

    return Panel(body, title=Text("Request failed", style=title_style), border_style="red")
