"""Fluent builder of API communications.

Usage:

    comm = (
        CommunicationBuilder()
        .get_project_list()
        .start_now()
        .sleep_until_finished()
        .build()
    )
    projects = comm.get_result().value

Each operation method selects the request (operation, path) and replaces the
payload; flag methods set how the resulting unit runs. `build()` copies the
current state into a new `Communication`; the builder itself is not reset.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import httpx

from adapters.communication.descriptor import ExecutionFlags, PayloadValue, RequestDescriptor
from adapters.communication.errors import BuilderStateError
from adapters.communication.executor import Communication
from core.config import AppSettings
from core.domain.enums import MessageResource, OperationKind, ProjectStatus, ResourceKind
from core.domain.temporal import Temporal, to_epoch_seconds
from core.interfaces.decoder import ResponseDecoder
from core.session import Session, get_session

logger = logging.getLogger(__name__)

TemporalArg = Temporal | date | datetime


def _status_code(status: Any) -> int:
    """Numeric project status; unknown values are logged and become 0."""

    if isinstance(status, ProjectStatus):
        return int(status)
    if isinstance(status, str):
        try:
            return int(ProjectStatus[status.strip().upper()])
        except KeyError:
            pass
    if isinstance(status, int) and not isinstance(status, bool):
        try:
            return int(ProjectStatus(status))
        except ValueError:
            pass
    logger.error("Unsupported project status %r; using 0", status)
    return 0


class CommunicationBuilder:
    """Builds one `Communication` at a time."""

    def __init__(
        self,
        *,
        settings: AppSettings | None = None,
        session: Session | None = None,
        transport: httpx.BaseTransport | None = None,
        decoders: dict[OperationKind, ResponseDecoder] | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or get_session()
        self._transport = transport
        self._decoders = decoders

        self._operation = OperationKind.DEFAULT
        self._payload: dict[str, PayloadValue] = {}

        self._start_now = False
        self._sleep_until_finished = False
        self._keep_alive = False

    @property
    def operation(self) -> OperationKind:
        return self._operation

    # -- execution flags -------------------------------------------------

    def start_now(self) -> "CommunicationBuilder":
        """Start the communication as soon as it is built."""

        self._start_now = True
        return self

    def sleep_until_finished(self) -> "CommunicationBuilder":
        """Run synchronously; only meaningful together with `start_now`."""

        self._sleep_until_finished = True
        return self

    def keep_alive(self) -> "CommunicationBuilder":
        """Detach the unit: it is tracked until done even if the caller drops it."""

        self._keep_alive = True
        return self

    # -- terminal --------------------------------------------------------

    def descriptor(self) -> RequestDescriptor:
        """Snapshot of the request currently selected."""

        if self._operation is OperationKind.DEFAULT:
            raise BuilderStateError("No operation selected before build()")
        return RequestDescriptor(
            operation=self._operation,
            path=self._operation.path,
            payload=self._payload,
        )

    def flags(self) -> ExecutionFlags:
        return ExecutionFlags(
            start_immediately=self._start_now,
            block_until_complete=self._sleep_until_finished,
            detached=self._keep_alive,
        )

    def build(self) -> Communication:
        return Communication(
            self.descriptor(),
            self.flags(),
            settings=self._settings,
            session=self._session,
            transport=self._transport,
            decoders=self._decoders,
        )

    # -- operations ------------------------------------------------------

    def _select(self, operation: OperationKind, payload: dict[str, PayloadValue]) -> "CommunicationBuilder":
        if operation.requires_auth:
            token = (
                self._session.current_renew_token()
                if operation is OperationKind.UPDATE_CONNECTION
                else self._session.current_access_token()
            )
            if not token:
                logger.debug("No session token for %s", operation.value)
            payload = {"token": token, **payload}
        self._operation = operation
        self._payload = payload
        return self

    def connect(self, username: str, password: str) -> "CommunicationBuilder":
        """Open a session."""

        return self._select(OperationKind.LOGIN, {"username": username, "passwd": password})

    def check_connection(self) -> "CommunicationBuilder":
        return self._select(OperationKind.CHECK_CONNECTION, {})

    def update_connection(self) -> "CommunicationBuilder":
        """Renew the session with the renew token."""

        return self._select(OperationKind.UPDATE_CONNECTION, {})

    def get_project_list(self) -> "CommunicationBuilder":
        return self._select(OperationKind.LIST_PROJECTS, {})

    def create_project(
        self,
        name: str,
        description: str,
        deadline: TemporalArg,
        status: ProjectStatus | str | int = ProjectStatus.ON_GOING,
    ) -> "CommunicationBuilder":
        return self._select(
            OperationKind.CREATE_PROJECT,
            {
                "name": name,
                "description": description,
                "deadline": to_epoch_seconds(deadline, field="deadline"),
                "status": _status_code(status),
            },
        )

    def get_task_list(self, project_id: int) -> "CommunicationBuilder":
        return self._select(OperationKind.LIST_TASKS, {"project": project_id})

    def get_user_time_slot_list(
        self,
        start: TemporalArg,
        end: TemporalArg,
        resource_id: int | None = None,
        kind: ResourceKind = ResourceKind.HUMAN,
    ) -> "CommunicationBuilder":
        """Time slots between `start` and `end`.

        Without `resource_id` the server answers for the session's own user.
        """

        payload: dict[str, PayloadValue] = {
            "from": to_epoch_seconds(start, field="from"),
            "to": to_epoch_seconds(end, field="to"),
        }
        if resource_id is not None:
            payload[kind.value] = resource_id
        return self._select(OperationKind.LIST_USER_TIME_SLOTS, payload)

    def add_time_slot(
        self,
        start: TemporalArg,
        end: TemporalArg,
        task_id: int,
        room_id: int,
    ) -> "CommunicationBuilder":
        return self._select(
            OperationKind.ADD_TIME_SLOT,
            {
                "start": to_epoch_seconds(start, field="start"),
                "end": to_epoch_seconds(end, field="end"),
                "task": task_id,
                "room": room_id,
            },
        )

    def get_user_message_list(
        self,
        origin: MessageResource,
        resource_id: int,
        page: int = 0,
    ) -> "CommunicationBuilder":
        return self._select(
            OperationKind.LIST_USER_MESSAGES,
            {"origin": MessageResource(origin).value, "id": resource_id, "page": page},
        )

    def send_message(
        self,
        content: str,
        destination: MessageResource,
        resource_id: int,
    ) -> "CommunicationBuilder":
        return self._select(
            OperationKind.SEND_MESSAGE,
            {"content": content, "destination": MessageResource(destination).value, "id": resource_id},
        )

    def get_user_infos(self) -> "CommunicationBuilder":
        return self._select(OperationKind.GET_USER_INFOS, {})

    def get_human_resource(self, resource_id: int) -> "CommunicationBuilder":
        return self._select(OperationKind.GET_HUMAN_RESOURCE, {"id": resource_id})
