"""Doctor command for environment diagnostics."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.communication import CommunicationBuilder
from adapters.http_client import build_client
from core.config import AppSettings, get_user_env_file
from core.domain.enums import HttpStatus

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        with build_client(settings) as client:
            response = client.get("")
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc)


def _check_login(settings: AppSettings) -> tuple[str, str]:
    if not settings.username or not settings.password:
        return "OPTIONAL", "No credentials set -> login check skipped"

    result = (
        CommunicationBuilder(settings=settings)
        .connect(settings.username, settings.password)
        .start_now()
        .sleep_until_finished()
        .build()
        .get_result()
    )
    if result is not None and result.ok:
        return "OK", "Session opened"
    status = result.status if result is not None else HttpStatus.CUSTOM_DEFAULT_ERROR
    return "FAIL", f"{status.name} [{int(status)}]"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="clientprojet Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("API base_url", "OK", settings.api_base_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("Workers", "OK", str(settings.max_workers))
    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "MISSING", str(env_file))

    # Connectivity (best-effort)
    ok_http, detail_http = _check_http(settings)
    table.add_row("API connectivity", "OK" if ok_http else "FAIL", detail_http)

    status, detail = _check_login(settings) if ok_http else ("SKIPPED", "API unreachable")
    table.add_row("Login", status, detail)

    _console.print(table)

    if not ok_http:
        _console.print("\n[yellow]Note:[/yellow] run `clientprojet setup` to change the API base URL.")
