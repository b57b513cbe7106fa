"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Lets several commands reuse the same tables/panels.
"""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.communication import CommunicationResult
from core.domain.models import MessageList, Project, Task, TimeSlot, User


def _fmt(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def print_failure(console: Console, result: CommunicationResult | None) -> None:
    if result is None:
        console.print("[red]No answer before the timeout.[/red]")
        return
    detail = f" ({result.error})" if result.error else ""
    console.print(f"[red]{result.operation.value} failed: {result.status.name} [{result.status_code}]{detail}[/red]")


def build_projects_table(projects: list[Project]) -> Table:
    table = Table(title="Projects")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Deadline", style="magenta")
    table.add_column("Status", style="green")
    table.add_column("Description", style="dim")
    for project in projects:
        table.add_row(
            str(project.id),
            project.name,
            _fmt(project.deadline),
            project.status.name,
            project.description,
        )
    return table


def build_tasks_table(tasks: list[Task]) -> Table:
    table = Table(title="Tasks")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Begin", style="magenta")
    table.add_column("End", style="magenta")
    for task in tasks:
        table.add_row(str(task.id), task.name, _fmt(task.date_begin), _fmt(task.date_end))
    return table


def build_time_slots_table(slots: list[TimeSlot]) -> Table:
    table = Table(title="Time slots")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Start", style="magenta")
    table.add_column("End", style="magenta")
    table.add_column("Task", style="white")
    table.add_column("Room", style="white")
    for slot in slots:
        table.add_row(
            str(slot.id),
            _fmt(slot.start),
            _fmt(slot.end),
            "-" if slot.task is None else str(slot.task),
            "-" if slot.room is None else str(slot.room),
        )
    return table


def build_messages_panel(messages: MessageList) -> Panel:
    """Conversation page, oldest first as sent by the server."""

    body = Text()
    for message in messages.messages:
        body.append(f"[{_fmt(message.date)}] ", style="dim")
        body.append(f"{message.author_name or '?'}: ", style="bold cyan")
        body.append(message.content + "\n")
    if not messages.messages:
        body.append("No messages.", style="dim")
    title = Text(f"Messages ({messages.origin or '-'} #{messages.resource_id}, page {messages.page})", style="bold yellow")
    return Panel(body, title=title, border_style="yellow")


def build_user_panel(user: User) -> Panel:
    body = Text()
    body.append(f"{user.firstname} {user.lastname}".strip() + "\n", style="bold")
    body.append(f"username: {user.username}\n")
    body.append(f"id: {user.id}")
    if user.email:
        body.append(f"\nemail: {user.email}", style="dim")
    return Panel(body, title="Current user", border_style="cyan")
