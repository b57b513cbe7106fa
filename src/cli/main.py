"""Terminal front-end of the project-management client.

Every command opens a session with the configured credentials, then runs
its own communication synchronously and prints the decoded answer.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import typer
from rich.console import Console

from adapters.communication import (
    CommunicationBuilder,
    CommunicationResult,
    shutdown_pool,
    wait_for_detached,
)
from cli import doctor
from cli.ui_components import (
    build_messages_panel,
    build_projects_table,
    build_tasks_table,
    build_time_slots_table,
    build_user_panel,
    print_failure,
)
from core.config import AppSettings, write_user_env_vars
from core.domain.enums import MessageResource, ProjectStatus, ResourceKind
from core.domain.temporal import DateOnly, DateTime, Temporal
from core.log import configure_logging

app = typer.Typer(no_args_is_help=True, help="Project-management API client.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

_UsernameOption = typer.Option(None, "--username", "-u", help="Defaults to CLIENTPROJET_USERNAME.")
_PasswordOption = typer.Option(None, "--password", "-p", help="Defaults to CLIENTPROJET_PASSWORD.")


def _parse_when(text: str) -> Temporal:
    """`YYYY-MM-DD` is a whole day; anything longer must be an ISO date-time."""

    try:
        if len(text) == 10:
            return DateOnly(date.fromisoformat(text))
        return DateTime(datetime.fromisoformat(text))
    except ValueError as exc:
        raise typer.BadParameter(f"not an ISO date or date-time: {text}") from exc


def _run(builder: CommunicationBuilder) -> CommunicationResult:
    result = builder.start_now().sleep_until_finished().build().get_result()
    if result is None:
        print_failure(_console, result)
        raise typer.Exit(code=1)
    return result


def _login(username: str | None, password: str | None) -> None:
    settings = AppSettings()
    username = username or settings.username
    password = password or settings.password
    if not username or not password:
        raise typer.BadParameter("username and password are required (options or CLIENTPROJET_* env vars)")

    result = _run(CommunicationBuilder().connect(username, password))
    if not result.ok:
        print_failure(_console, result)
        raise typer.Exit(code=1)


def _require(result: CommunicationResult) -> CommunicationResult:
    if not result.ok:
        print_failure(_console, result)
        raise typer.Exit(code=1)
    return result


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level.")) -> None:
    configure_logging(level="DEBUG" if verbose else AppSettings().log_level)


@app.command()
def login(username: Optional[str] = _UsernameOption, password: Optional[str] = _PasswordOption) -> None:
    """Check the credentials and verify the new session."""

    _login(username, password)
    _require(_run(CommunicationBuilder().check_connection()))
    _console.print("[green]Session opened.[/green]")


@app.command()
def whoami(username: Optional[str] = _UsernameOption, password: Optional[str] = _PasswordOption) -> None:
    """Show the authenticated user."""

    _login(username, password)
    result = _require(_run(CommunicationBuilder().get_user_infos()))
    _console.print(build_user_panel(result.value))


@app.command()
def projects(username: Optional[str] = _UsernameOption, password: Optional[str] = _PasswordOption) -> None:
    """List the projects visible to the user."""

    _login(username, password)
    result = _require(_run(CommunicationBuilder().get_project_list()))
    _console.print(build_projects_table(result.value))


@app.command(name="create-project")
def create_project(
    name: str = typer.Argument(..., help="Project name."),
    deadline: str = typer.Argument(..., help="YYYY-MM-DD or ISO date-time."),
    description: str = typer.Option("", "--description", "-d"),
    status: str = typer.Option(ProjectStatus.ON_GOING.name, "--status", help="ON_GOING, FINISHED or ARCHIVED."),
    username: Optional[str] = _UsernameOption,
    password: Optional[str] = _PasswordOption,
) -> None:
    """Create a project."""

    _login(username, password)
    _require(_run(CommunicationBuilder().create_project(name, description, _parse_when(deadline), status)))
    _console.print(f"[green]Project {name!r} created.[/green]")


@app.command()
def tasks(
    project_id: int = typer.Argument(..., help="Project id."),
    username: Optional[str] = _UsernameOption,
    password: Optional[str] = _PasswordOption,
) -> None:
    """List the tasks of a project."""

    _login(username, password)
    result = _require(_run(CommunicationBuilder().get_task_list(project_id)))
    _console.print(build_tasks_table(result.value))


@app.command()
def timeslots(
    start: str = typer.Option(..., "--from", help="YYYY-MM-DD or ISO date-time."),
    end: str = typer.Option(..., "--to", help="YYYY-MM-DD or ISO date-time."),
    resource_id: Optional[int] = typer.Option(None, "--resource", help="Resource id (defaults to yourself)."),
    material: bool = typer.Option(False, "--material", help="Resource is a material resource."),
    username: Optional[str] = _UsernameOption,
    password: Optional[str] = _PasswordOption,
) -> None:
    """List time slots in a period."""

    _login(username, password)
    kind = ResourceKind.MATERIAL if material else ResourceKind.HUMAN
    builder = CommunicationBuilder().get_user_time_slot_list(_parse_when(start), _parse_when(end), resource_id, kind)
    result = _require(_run(builder))
    _console.print(build_time_slots_table(result.value))


@app.command()
def messages(
    origin: MessageResource = typer.Argument(..., help="project or user."),
    resource_id: int = typer.Argument(..., help="Project or user id."),
    page: int = typer.Option(0, "--page", min=0),
    username: Optional[str] = _UsernameOption,
    password: Optional[str] = _PasswordOption,
) -> None:
    """Show one page of a conversation."""

    _login(username, password)
    result = _require(_run(CommunicationBuilder().get_user_message_list(origin, resource_id, page)))
    _console.print(build_messages_panel(result.value))


@app.command()
def send(
    destination: MessageResource = typer.Argument(..., help="project or user."),
    resource_id: int = typer.Argument(..., help="Project or user id."),
    content: str = typer.Argument(..., help="Message text."),
    username: Optional[str] = _UsernameOption,
    password: Optional[str] = _PasswordOption,
) -> None:
    """Send a message to a project channel or a user."""

    content = content.lstrip(" ")
    if not content:
        raise typer.BadParameter("message is empty")

    _login(username, password)
    _require(_run(CommunicationBuilder().send_message(content, destination, resource_id)))
    _console.print("[green]Message sent.[/green]")


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = AppSettings()
    base_url = typer.prompt("API base URL", default=settings.api_base_url, show_default=True).strip()
    username = typer.prompt("Username", default=settings.username or "", show_default=bool(settings.username)).strip()
    password = typer.prompt("Password", hide_input=True, confirmation_prompt=False).strip()

    if not base_url:
        raise typer.BadParameter("base URL is required")

    env_path = write_user_env_vars(
        {
            "CLIENTPROJET_API_BASE_URL": base_url,
            "CLIENTPROJET_USERNAME": username or None,
            "CLIENTPROJET_PASSWORD": password or None,
        }
    )
    _console.print(f"[green]Saved config to:[/green] {env_path}")


def run() -> None:
    try:
        app()
    finally:
        wait_for_detached(timeout=AppSettings().http_timeout_seconds)
        shutdown_pool()
