"""jobwala-admin command line.

Each command builds the API facade, runs one coroutine and renders the result
with Rich. Failed calls surface as a `ClassifiedError` and are shown as an
error panel; the exit code is 2 for an expired session and 1 otherwise.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console

from adapters.jobwala_api import JobWalaAPI, create_api
from cli import doctor
from cli.ui_components import build_error_panel, build_jobs_table, build_packages_table, print_banner
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import ClassifiedError, ErrorKind
from core.log import setup_logging

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="JobWala admin panel from the terminal.")
jobs_app = typer.Typer(no_args_is_help=True, help="Job moderation.")
applications_app = typer.Typer(no_args_is_help=True, help="Candidate applications.")
packages_app = typer.Typer(no_args_is_help=True, help="Subscription packages.")
team_app = typer.Typer(no_args_is_help=True, help="Employer team limits.")
config_app = typer.Typer(no_args_is_help=True, help="Client configuration.")

app.add_typer(jobs_app, name="jobs")
app.add_typer(applications_app, name="applications")
app.add_typer(packages_app, name="packages")
app.add_typer(team_app, name="team-limit")
app.add_typer(config_app, name="config")
app.add_typer(doctor.app, name="doctor")

_console = Console()


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every attempt (DEBUG)."),
) -> None:
    settings = AppSettings()
    setup_logging("DEBUG" if verbose else settings.log_level)


def _run(call: Callable[[JobWalaAPI], Awaitable[T]]) -> T:
    api = create_api()
    try:
        return asyncio.run(call(api))
    except ClassifiedError as exc:
        _console.print(build_error_panel(exc))
        raise typer.Exit(code=2 if exc.kind is ErrorKind.AUTH_EXPIRED else 1) from exc


def _items(payload: Any, *keys: str) -> list[dict[str, Any]]:
    """Pull the list out of `{"jobs": [...]}`-style envelopes."""

    if isinstance(payload, list):
        return [p for p in payload if isinstance(p, dict)]
    if isinstance(payload, dict):
        for key in (*keys, "data", "items"):
            value = payload.get(key)
            if isinstance(value, list):
                return [p for p in value if isinstance(p, dict)]
            if isinstance(value, dict):
                nested = _items(value, *keys)
                if nested:
                    return nested
    return []


@app.command()
def login(
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    user_type: str = typer.Option("admin", "--user-type", help="admin, jobseeker, employer, company, consultancy."),
) -> None:
    """Authenticate and store the session token locally."""

    async def _login(api: JobWalaAPI) -> Any:
        payload = {"email": email, "password": password, "userType": user_type}
        if user_type == "company":
            return await api.company_login(payload)
        if user_type == "consultancy":
            return await api.consultancy_login(payload)
        return await api.login(payload)

    print_banner(_console)
    data = _run(_login)
    if isinstance(data, dict) and data.get("token"):
        user = data.get("user") or {}
        _console.print(f"[green]Logged in as[/green] {user.get('email') or email}")
    else:
        _console.print("[yellow]Login succeeded but no token was returned.[/yellow]")


@app.command()
def logout() -> None:
    """Invalidate the session on the server (best effort) and forget it locally."""

    _run(lambda api: api.logout())
    _console.print("[green]Logged out.[/green]")


@app.command()
def whoami() -> None:
    """Show the account behind the stored token."""

    user = _run(lambda api: api.get_current_user())
    if not isinstance(user, dict):
        _console.print("[yellow]No user returned.[/yellow]")
        return
    _console.print(f"{user.get('name') or '-'} <{user.get('email') or '-'}> ({user.get('userType') or '-'})")


@jobs_app.command("list")
def jobs_list(
    status: Optional[str] = typer.Option(None, help="pending, active, rejected..."),
    search: Optional[str] = typer.Option(None, help="Free-text search."),
    page: int = typer.Option(1, min=1),
    limit: int = typer.Option(20, min=1, max=200),
) -> None:
    """List jobs as seen by admins."""

    filters = {"status": status, "search": search, "page": page, "limit": limit}
    payload = _run(lambda api: api.get_jobs_for_admin(filters))
    _console.print(build_jobs_table(_items(payload, "jobs")))


@jobs_app.command("approve")
def jobs_approve(job_id: str) -> None:
    _run(lambda api: api.approve_job(job_id))
    _console.print(f"[green]Job {job_id} approved.[/green]")


@jobs_app.command("reject")
def jobs_reject(job_id: str, reason: str = typer.Option(..., prompt=True)) -> None:
    _run(lambda api: api.reject_job(job_id, reason))
    _console.print(f"[yellow]Job {job_id} rejected.[/yellow]")


@applications_app.command("set-status")
def applications_set_status(application_id: str, status: str) -> None:
    """Move an application to a new status (shortlisted, rejected, hired...)."""

    _run(lambda api: api.update_application_status(application_id, status))
    _console.print(f"[green]Application {application_id} -> {status}[/green]")


@packages_app.command("list")
def packages_list() -> None:
    payload = _run(lambda api: api.get_admin_packages())
    _console.print(build_packages_table(_items(payload, "packages")))


@team_app.command("set")
def team_limit_set(user_id: str, limit: int = typer.Argument(..., min=0)) -> None:
    """Set how many team members an employer account may invite."""

    _run(lambda api: api.update_team_limit(user_id, limit))
    _console.print(f"[green]Team limit for {user_id} set to {limit}.[/green]")


@config_app.command("show")
def config_show() -> None:
    settings = AppSettings()
    api = create_api(settings)
    _console.print(f"API base URL: {api.resolver.resolve_base_url()}")
    _console.print(f"Storage:      {settings.resolved_storage_path()}")


@config_app.command("set-url")
def config_set_url(url: str) -> None:
    """Persist an explicit API base URL in the user config."""

    if not url.startswith(("http://", "https://")):
        raise typer.BadParameter("URL must start with http:// or https://")
    env_path = write_user_env_vars({"JOBWALA_API_URL": url.rstrip("/")})
    _console.print(f"[green]Saved API URL to:[/green] {env_path}")


def run() -> None:
    app()
