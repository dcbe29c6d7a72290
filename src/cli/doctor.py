"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.jobwala_api import JobWalaAPI, create_api
from core.config import AppSettings, get_user_env_file
from core.domain.runtime import Platform

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    # Single probe, bypassing the retry policy: we want the raw answer.
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


async def _session_state(api: JobWalaAPI) -> tuple[bool, str]:
    await api.credentials.init()
    user = await api.get_current_user_from_storage()
    if not api.is_authenticated():
        return False, "Not logged in"
    if user is None:
        return True, "Token present, no cached profile"
    return True, f"{user.email or user.name or 'unknown'} ({user.user_type or 'no role'})"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    api = create_api(settings)
    base_url = api.resolver.resolve_base_url()
    platform = settings.platform or Platform.detect()

    table = Table(title="JobWala Admin Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Platform", "OK", platform.value + ("" if settings.platform else " (detected)"))
    source = "JOBWALA_API_URL" if settings.api_url else "platform default"
    table.add_row("API base URL", "OK", f"{base_url} [{source}]")
    table.add_row("Storage", "OK", str(settings.resolved_storage_path()))
    table.add_row(
        "Retry policy",
        "OK",
        f"{settings.max_attempts} attempts, {settings.request_timeout_seconds:g}s timeout, "
        f"{settings.backoff_seconds:g}s x attempt backoff",
    )

    logged_in, detail_session = asyncio.run(_session_state(api))
    table.add_row("Session", "OK" if logged_in else "OPTIONAL", detail_session)

    ok_http, detail_http = asyncio.run(_check_http(base_url, settings))
    table.add_row("Backend connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] set JOBWALA_API_URL (or run `jobwala-admin config set-url`) "
            f"to point at a reachable backend. User config: {get_user_env_file()}"
        )
