"""Closed sets shared by the builder, the executor and the decoders.

Keeping them in the domain layer gives the CLI and the adapters a single
source of truth for paths, verbs and status codes.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class OperationKind(str, Enum):
    """Every request type the API client knows how to build.

    Each member carries its HTTP verb and its path relative to the API base URL.
    """

    DEFAULT = "default"
    LOGIN = "login"
    CHECK_CONNECTION = "check_connection"
    UPDATE_CONNECTION = "update_connection"
    LIST_PROJECTS = "list_projects"
    CREATE_PROJECT = "create_project"
    LIST_TASKS = "list_tasks"
    LIST_USER_TIME_SLOTS = "list_user_time_slots"
    ADD_TIME_SLOT = "add_time_slot"
    LIST_USER_MESSAGES = "list_user_messages"
    SEND_MESSAGE = "send_message"
    GET_HUMAN_RESOURCE = "get_human_resource"
    GET_USER_INFOS = "get_user_infos"

    @property
    def method(self) -> HttpMethod:
        return _ROUTES[self][0]

    @property
    def path(self) -> str:
        return _ROUTES[self][1]

    @property
    def requires_auth(self) -> bool:
        return self not in (OperationKind.DEFAULT, OperationKind.LOGIN)


_ROUTES: dict[OperationKind, tuple[HttpMethod, str]] = {
    OperationKind.DEFAULT: (HttpMethod.GET, ""),
    OperationKind.LOGIN: (HttpMethod.POST, "auth/connect"),
    OperationKind.CHECK_CONNECTION: (HttpMethod.POST, "auth/verify"),
    OperationKind.UPDATE_CONNECTION: (HttpMethod.POST, "auth/renew"),
    OperationKind.LIST_PROJECTS: (HttpMethod.GET, "project/list"),
    OperationKind.CREATE_PROJECT: (HttpMethod.POST, "project/create"),
    OperationKind.LIST_TASKS: (HttpMethod.GET, "task/list"),
    OperationKind.LIST_USER_TIME_SLOTS: (HttpMethod.GET, "timeslot/list"),
    OperationKind.ADD_TIME_SLOT: (HttpMethod.POST, "timeslot/create"),
    OperationKind.LIST_USER_MESSAGES: (HttpMethod.GET, "message/list"),
    OperationKind.SEND_MESSAGE: (HttpMethod.POST, "message/create"),
    OperationKind.GET_HUMAN_RESOURCE: (HttpMethod.GET, "resource/h/get"),
    OperationKind.GET_USER_INFOS: (HttpMethod.GET, "auth/verify"),
}


class HttpStatus(IntEnum):
    """HTTP status codes the client distinguishes.

    `CUSTOM_TIMEOUT` and `CUSTOM_DEFAULT_ERROR` never come from the server:
    they are synthesised for transport failures and unknown/undecodable answers.
    """

    CUSTOM_DEFAULT_ERROR = -1
    CUSTOM_TIMEOUT = 608
    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    TIMEOUT = 408

    @classmethod
    def from_code(cls, code: int) -> "HttpStatus":
        """Map a raw status code, falling back to `CUSTOM_DEFAULT_ERROR`."""

        try:
            return cls(code)
        except ValueError:
            return cls.CUSTOM_DEFAULT_ERROR


class MessageResource(str, Enum):
    """Where a conversation lives: a project's channel or a private user thread."""

    PROJECT = "project"
    USER = "user"


class ResourceKind(str, Enum):
    """Owner type of a time-slot listing; the value is the payload key."""

    HUMAN = "hresource"
    MATERIAL = "mresource"


class ProjectStatus(IntEnum):
    ON_GOING = 0
    FINISHED = 1
    ARCHIVED = 2
