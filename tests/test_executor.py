from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import httpx
import pytest

from adapters.communication import (
    Communication,
    CommunicationBuilder,
    ExecutionFlags,
    RequestDescriptor,
    detached_in_flight,
    wait_for_detached,
)
from core.config import AppSettings
from core.domain.enums import HttpStatus, MessageResource, OperationKind
from core.domain.models import HumanResource, MessageList, Project, Task, TimeSlot, User

PROJECTS = [
    {"id": 1, "name": "Apollo", "description": "Moon", "deadline": "2026-12-01T00:00:00", "status": 0},
    {"id": 2, "name": "Gemini", "status": 1},
]


def _json(payload, status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=payload)

    return handler


def test_inert_unit_never_sends_until_started(make_builder) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=PROJECTS)

    comm = make_builder(handler).get_project_list().build()

    assert comm.get_result(timeout=0.2) is None
    assert not comm.is_started
    assert calls == []

    comm.start()
    result = comm.get_result(timeout=5)

    assert result is not None and result.ok
    assert len(calls) == 1


def test_blocking_unit_is_finished_when_build_returns(make_builder) -> None:
    comm = make_builder(_json(PROJECTS)).get_project_list().start_now().sleep_until_finished().build()

    assert comm.is_finished
    result = comm.get_result(timeout=0)
    assert result.status is HttpStatus.OK
    assert [project.name for project in result.value] == ["Apollo", "Gemini"]
    assert all(isinstance(project, Project) for project in result.value)


def test_blocking_unit_runs_in_caller_thread(make_builder) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(threading.current_thread().name)
        return httpx.Response(200, json=[])

    make_builder(handler).get_project_list().start_now().sleep_until_finished().build()

    assert seen == [threading.current_thread().name]


def test_start_is_idempotent(make_builder) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    comm = make_builder(handler).get_project_list().start_now().sleep_until_finished().build()
    comm.start()
    comm.start()

    assert len(calls) == 1


def test_concurrent_units_resolve_in_any_order(make_builder) -> None:
    tasks_answered = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("project/list"):
            # Hold the first unit until the second one has completed.
            tasks_answered.wait(timeout=5)
            return httpx.Response(200, json=PROJECTS)
        tasks_answered.set()
        return httpx.Response(200, json={"tasks": [{"id": 4, "name": "Design", "project": 1}]})

    builder = make_builder(handler).start_now()
    projects = builder.get_project_list().build()
    tasks = builder.get_task_list(1).build()

    tasks_result = tasks.get_result(timeout=5)
    projects_result = projects.get_result(timeout=5)

    assert tasks_result is not None and projects_result is not None
    assert isinstance(tasks_result.value[0], Task)
    assert len(projects_result.value) == 2


def test_get_params_and_post_form_are_sorted(make_builder) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    builder = make_builder(handler).start_now().sleep_until_finished()
    builder.get_user_message_list(MessageResource.PROJECT, 5, 1).build()
    builder.connect("alice", "secret").build()

    listing, login = requests
    assert listing.method == "GET"
    assert listing.url.path == "/message/list"
    assert listing.url.query == b"id=5&origin=project&page=1&token="
    assert login.method == "POST"
    assert login.url.path == "/auth/connect"
    assert login.content == b"passwd=secret&username=alice"


def test_connect_error_maps_to_custom_timeout(make_builder, caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with caplog.at_level(logging.WARNING):
        result = make_builder(handler).get_project_list().start_now().sleep_until_finished().build().get_result()

    assert result.status is HttpStatus.CUSTOM_TIMEOUT
    assert result.status_code == 608
    assert result.value is None
    assert "connection refused" in caplog.text


def test_read_timeout_maps_to_custom_timeout(make_builder) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    comm = make_builder(handler).get_task_list(1).start_now().build()

    result = comm.get_result(timeout=5)
    assert result.status is HttpStatus.CUSTOM_TIMEOUT
    assert result.value is None


def test_unreachable_endpoint_maps_to_custom_timeout() -> None:
    settings = AppSettings(_env_file=None, api_base_url="http://127.0.0.1:9/", http_timeout_seconds=1.0)
    descriptor = RequestDescriptor(OperationKind.LIST_PROJECTS, "project/list", {"token": ""})

    comm = Communication(descriptor, ExecutionFlags(start_immediately=True), settings=settings)

    result = comm.get_result(timeout=10)
    assert result is not None
    assert result.status is HttpStatus.CUSTOM_TIMEOUT


@pytest.mark.parametrize(
    "code, status",
    [
        (400, HttpStatus.BAD_REQUEST),
        (401, HttpStatus.UNAUTHORIZED),
        (403, HttpStatus.FORBIDDEN),
        (404, HttpStatus.NOT_FOUND),
        (408, HttpStatus.TIMEOUT),
        (500, HttpStatus.CUSTOM_DEFAULT_ERROR),
    ],
)
def test_non_ok_status_carries_no_value(make_builder, code, status) -> None:
    result = make_builder(_json(PROJECTS, status=code)).get_project_list().start_now().sleep_until_finished().build().get_result()

    assert result.status is status
    assert result.status_code == code
    assert result.value is None
    assert not result.ok


def test_malformed_body_is_a_default_error(make_builder, caplog) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with caplog.at_level(logging.WARNING, logger="adapters.communication.decoding"):
        result = make_builder(handler).get_project_list().start_now().sleep_until_finished().build().get_result()

    assert result.status is HttpStatus.CUSTOM_DEFAULT_ERROR
    assert result.value is None
    assert result.error == "decode_error"
    assert "list_projects" in caplog.text


def test_unexpected_shape_is_a_default_error(make_builder) -> None:
    result = (
        make_builder(_json({"unexpected": True}))
        .get_project_list()
        .start_now()
        .sleep_until_finished()
        .build()
        .get_result()
    )

    assert result.status is HttpStatus.CUSTOM_DEFAULT_ERROR
    assert result.value is None


def test_messages_keep_server_order(make_builder) -> None:
    body = {
        "origin": "project",
        "id": 3,
        "page": 0,
        "messages": [
            {"id": 9, "content": "latest", "src": "Bob"},
            {"id": 2, "content": "older", "src": "Alice"},
        ],
    }

    result = (
        make_builder(_json(body))
        .get_user_message_list(MessageResource.PROJECT, 3)
        .start_now()
        .sleep_until_finished()
        .build()
        .get_result()
    )

    assert isinstance(result.value, MessageList)
    assert [message.id for message in result.value.messages] == [9, 2]
    assert result.value.messages[0].author == "Bob"
    assert result.value.resource_id == 3


def test_create_operations_return_status_only(make_builder) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"")

    result = (
        make_builder(handler)
        .create_project("Apollo", "", date(2026, 12, 1))
        .start_now()
        .sleep_until_finished()
        .build()
        .get_result()
    )

    assert result.ok
    assert result.value is None


def test_detached_units_are_tracked_until_done(make_builder) -> None:
    release = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        release.wait(timeout=5)
        return httpx.Response(200, json=[])

    comm = make_builder(handler).get_project_list().keep_alive().start_now().build()

    assert detached_in_flight() == 1
    assert not wait_for_detached(timeout=0.1)

    release.set()

    assert wait_for_detached(timeout=5)
    assert comm.get_result(timeout=5).ok
    deadline = time.monotonic() + 2
    while detached_in_flight() and time.monotonic() < deadline:
        time.sleep(0.01)
    assert detached_in_flight() == 0


def test_builder_shortcut_on_communication() -> None:
    assert isinstance(Communication.builder(), CommunicationBuilder)


def test_custom_decoder_overrides_one_operation(settings, session) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"projects": PROJECTS})

    builder = CommunicationBuilder(
        settings=settings,
        session=session,
        transport=httpx.MockTransport(handler),
        decoders={OperationKind.LIST_PROJECTS: lambda body: len(body["projects"])},
    )

    result = builder.get_project_list().start_now().sleep_until_finished().build().get_result()

    assert result.value == 2


def _decode(make_builder, payload, select):
    builder = select(make_builder(_json(payload)))
    return builder.start_now().sleep_until_finished().build().get_result()


def test_message_sender_may_be_a_human_resource(make_builder) -> None:
    body = {
        "origin": "user",
        "id": 4,
        "page": 0,
        "messages": [
            {"id": 1, "content": "hi", "src": {"id": 4, "firstname": "Ann", "lastname": "Lee"}},
            {"id": 2, "content": "hello", "src": "Bob"},
        ],
    }

    result = _decode(make_builder, body, lambda b: b.get_user_message_list(MessageResource.USER, 4))

    assert result.ok
    first, second = result.value.messages
    assert isinstance(first.author, HumanResource)
    assert first.author.id == 4
    assert first.author_name == "Ann Lee"
    assert second.author_name == "Bob"


@pytest.mark.parametrize(
    "payload",
    [
        [{"id": 7, "start": "2026-03-14T08:00:00", "end": "2026-03-14T10:00:00", "task": 3, "room": 2}],
        {"timeslots": [{"id": 7, "start": "2026-03-14T08:00:00", "end": "2026-03-14T10:00:00", "task": 3, "room": 2}]},
    ],
    ids=["bare-array", "wrapped"],
)
def test_time_slot_listing_decodes(make_builder, payload) -> None:
    result = _decode(make_builder, payload, lambda b: b.get_user_time_slot_list(date(2026, 3, 14), date(2026, 3, 15)))

    assert result.ok
    (slot,) = result.value
    assert isinstance(slot, TimeSlot)
    assert (slot.id, slot.task, slot.room) == (7, 3, 2)
    assert slot.end.hour == 10


def test_user_infos_decode(make_builder) -> None:
    payload = {"id": 12, "username": "alice", "firstname": "Alice", "lastname": "Martin", "email": "a@example.org"}

    result = _decode(make_builder, payload, lambda b: b.get_user_infos())

    assert isinstance(result.value, User)
    assert result.value.username == "alice"
    assert result.value.email == "a@example.org"


def test_human_resource_decodes(make_builder) -> None:
    payload = {"id": 4, "firstname": "Ann", "lastname": "Lee", "role": "developer"}

    result = _decode(make_builder, payload, lambda b: b.get_human_resource(4))

    assert isinstance(result.value, HumanResource)
    assert result.value.full_name == "Ann Lee"
    assert result.value.role == "developer"


@pytest.mark.parametrize(
    "payload, select",
    [
        ([{"id": 4, "firstname": "Ann"}], lambda b: b.get_human_resource(4)),
        ({"id": 12, "username": "alice"}, lambda b: b.get_user_time_slot_list(date(2026, 3, 14), date(2026, 3, 15))),
    ],
    ids=["list-for-object", "object-for-list"],
)
def test_list_object_mismatch_is_a_default_error(make_builder, payload, select) -> None:
    result = _decode(make_builder, payload, select)

    assert result.status is HttpStatus.CUSTOM_DEFAULT_ERROR
    assert result.value is None


def test_dispatch_on_stopped_pool_still_completes(make_builder, monkeypatch) -> None:
    stopped = ThreadPoolExecutor(max_workers=1)
    stopped.shutdown()
    monkeypatch.setattr("adapters.communication.executor._get_pool", lambda max_workers: stopped)

    comm = make_builder(_json([])).get_project_list().start_now().build()

    result = comm.get_result(timeout=1)
    assert result is not None
    assert result.status is HttpStatus.CUSTOM_DEFAULT_ERROR
    assert result.error == "dispatch_error"
