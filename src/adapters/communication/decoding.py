"""Status mapping and per-operation body decoding.

Each operation has one decoder (see `core.interfaces.decoder.ResponseDecoder`).
Decoders raise on unexpected shapes; `decode_response` turns any such fault
into a default-error result so callers never see a parse exception.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import httpx
from pydantic import BaseModel, ValidationError

from adapters.communication.descriptor import CommunicationResult
from core.domain.enums import HttpStatus, OperationKind
from core.domain.models import (
    HumanResource,
    Message,
    MessageList,
    Project,
    Task,
    TimeSlot,
    TokenPair,
    User,
)
from core.interfaces.decoder import ResponseDecoder
from core.session import Session

logger = logging.getLogger(__name__)


def _items(body: Any, key: str) -> list[Any]:
    """Accept a bare JSON array or an object holding it under `key`."""

    if isinstance(body, dict):
        body = body.get(key)
    if not isinstance(body, list):
        raise ValueError(f"expected a list under {key!r}")
    return body


def _list_of(model: type[BaseModel], key: str) -> ResponseDecoder:
    def decode(body: Any) -> list[Any]:
        return [model.model_validate(item) for item in _items(body, key)]

    return decode


def _one(model: type[BaseModel]) -> ResponseDecoder:
    def decode(body: Any) -> Any:
        if not isinstance(body, dict):
            raise ValueError(f"expected an object for {model.__name__}")
        return model.model_validate(body)

    return decode


def _message_list(body: Any) -> MessageList:
    messages = [Message.model_validate(item) for item in _items(body, "messages")]
    meta = body if isinstance(body, dict) else {}
    return MessageList.model_validate({**{k: v for k, v in meta.items() if k != "messages"}, "messages": messages})


def _acknowledge(body: Any) -> bool:
    return True


def _status_only(body: Any) -> None:
    return None


DECODERS: dict[OperationKind, ResponseDecoder] = {
    OperationKind.LOGIN: _one(TokenPair),
    OperationKind.UPDATE_CONNECTION: _one(TokenPair),
    OperationKind.CHECK_CONNECTION: _acknowledge,
    OperationKind.LIST_PROJECTS: _list_of(Project, "projects"),
    OperationKind.LIST_TASKS: _list_of(Task, "tasks"),
    OperationKind.LIST_USER_TIME_SLOTS: _list_of(TimeSlot, "timeslots"),
    OperationKind.LIST_USER_MESSAGES: _message_list,
    OperationKind.GET_HUMAN_RESOURCE: _one(HumanResource),
    OperationKind.GET_USER_INFOS: _one(User),
    OperationKind.CREATE_PROJECT: _status_only,
    OperationKind.ADD_TIME_SLOT: _status_only,
    OperationKind.SEND_MESSAGE: _status_only,
}

# Bodies of these answers are never read.
_STATUS_ONLY = frozenset({
    OperationKind.CREATE_PROJECT,
    OperationKind.ADD_TIME_SLOT,
    OperationKind.SEND_MESSAGE,
})


def _update_session(operation: OperationKind, value: Any, body: Any, session: Session) -> None:
    if operation is OperationKind.LOGIN and isinstance(value, TokenPair):
        session.replace(value)
    elif operation is OperationKind.UPDATE_CONNECTION and isinstance(value, TokenPair):
        session.renew(value)
    elif operation is OperationKind.CHECK_CONNECTION and isinstance(body, dict) and body.get("accessToken"):
        session.renew(TokenPair.model_validate(body))


def decode_response(
    operation: OperationKind,
    response: httpx.Response,
    *,
    session: Session,
    decoders: dict[OperationKind, ResponseDecoder] | None = None,
) -> CommunicationResult:
    """Map an HTTP answer to a `CommunicationResult`.

    Non-OK statuses carry no value. On OK the body is decoded per operation and
    session-bearing answers (login, renew, check) update `session`.
    """

    status = HttpStatus.from_code(response.status_code)
    if status is not HttpStatus.OK:
        logger.info("%s answered HTTP %s", operation.value, response.status_code)
        return CommunicationResult(
            operation=operation,
            status=status,
            status_code=response.status_code,
            error=f"http_{response.status_code}",
        )

    decoder: Callable[[Any], Any] = {**DECODERS, **(decoders or {})}.get(operation, _status_only)
    try:
        if operation in _STATUS_ONLY or not response.content.strip():
            body: Any = None
        else:
            body = response.json()
        value = decoder(body)
        _update_session(operation, value, body, session)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError, TypeError, ValidationError) as exc:
        logger.warning("Could not decode %s answer: %s", operation.value, exc)
        return CommunicationResult.failure(
            operation,
            HttpStatus.CUSTOM_DEFAULT_ERROR,
            "decode_error",
        )

    return CommunicationResult(
        operation=operation,
        status=status,
        status_code=response.status_code,
        value=value,
    )
