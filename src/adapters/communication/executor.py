"""Communication units and the worker pool that runs them.

A `Communication` owns one `RequestDescriptor` and performs at most one HTTP
round trip. Depending on its `ExecutionFlags` it stays inert until `start()`,
runs synchronously in the caller thread, or runs on a bounded process-wide
thread pool. Completion is a one-shot `threading.Event`; the result is set
once and never changes afterwards.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from typing import TYPE_CHECKING, Any

import httpx

from adapters.communication.decoding import decode_response
from adapters.communication.descriptor import CommunicationResult, ExecutionFlags, RequestDescriptor
from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.enums import HttpMethod, HttpStatus, OperationKind
from core.interfaces.decoder import ResponseDecoder
from core.session import Session, get_session

if TYPE_CHECKING:
    from adapters.communication.builder import CommunicationBuilder

logger = logging.getLogger(__name__)

_pool_lock = threading.Lock()
_pool: ThreadPoolExecutor | None = None

_detached_lock = threading.Lock()
_detached: dict["Communication", Future[None]] = {}


def _get_pool(max_workers: int) -> ThreadPoolExecutor:
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="communication")
        return _pool


def shutdown_pool(*, wait: bool = True) -> None:
    """Stop the worker pool; the next background communication recreates it."""

    global _pool
    with _pool_lock:
        pool, _pool = _pool, None
    if pool is not None:
        pool.shutdown(wait=wait)


def wait_for_detached(timeout: float | None = None) -> bool:
    """Wait for every detached (`keep_alive`) unit still in flight.

    Returns `True` when all of them finished within `timeout`.
    """

    with _detached_lock:
        futures = list(_detached.values())
    if not futures:
        return True
    _, pending = wait_futures(futures, timeout=timeout)
    return not pending


def detached_in_flight() -> int:
    with _detached_lock:
        return len(_detached)


class Communication:
    """One executable API call produced by `CommunicationBuilder.build()`."""

    def __init__(
        self,
        descriptor: RequestDescriptor,
        flags: ExecutionFlags | None = None,
        *,
        settings: AppSettings | None = None,
        session: Session | None = None,
        transport: httpx.BaseTransport | None = None,
        decoders: dict[OperationKind, ResponseDecoder] | None = None,
    ) -> None:
        self._descriptor = descriptor
        self._flags = flags or ExecutionFlags()
        self._settings = settings or AppSettings()
        self._session = session or get_session()
        self._transport = transport
        self._decoders = decoders

        self._start_lock = threading.Lock()
        self._started = False
        self._done = threading.Event()
        self._result: CommunicationResult | None = None

        if self._flags.start_immediately:
            self.start()

    @staticmethod
    def builder(**kwargs: Any) -> "CommunicationBuilder":
        from adapters.communication.builder import CommunicationBuilder  # noqa: PLC0415

        return CommunicationBuilder(**kwargs)

    @property
    def descriptor(self) -> RequestDescriptor:
        return self._descriptor

    @property
    def flags(self) -> ExecutionFlags:
        return self._flags

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_finished(self) -> bool:
        return self._done.is_set()

    def start(self) -> None:
        """Dispatch the call. A second call is a no-op."""

        with self._start_lock:
            if self._started:
                logger.debug("%s already started; ignoring start()", self._descriptor.operation.value)
                return
            self._started = True

        if self._flags.block_until_complete:
            self._run()
            return

        try:
            future = _get_pool(self._settings.max_workers).submit(self._run)
        except RuntimeError as exc:
            # Pool shut down concurrently.
            logger.warning("Could not dispatch %s: %s", self._descriptor.operation.value, exc)
            self._finish(
                CommunicationResult.failure(
                    self._descriptor.operation,
                    HttpStatus.CUSTOM_DEFAULT_ERROR,
                    "dispatch_error",
                )
            )
            return
        if self._flags.detached:
            with _detached_lock:
                _detached[self] = future
            future.add_done_callback(lambda _: self._forget())

    def wait(self, timeout: float | None = None) -> bool:
        return self._done.wait(timeout)

    def get_result(self, timeout: float | None = None) -> CommunicationResult | None:
        """Block until the result is available.

        Returns `None` only when `timeout` elapses first; an inert unit that is
        never started therefore blocks until its caller gives up.
        """

        if not self._done.wait(timeout):
            return None
        return self._result

    def _forget(self) -> None:
        with _detached_lock:
            _detached.pop(self, None)

    def _run(self) -> None:
        try:
            result = self._perform()
        except Exception as exc:
            logger.exception("Unexpected failure in %s", self._descriptor.operation.value)
            result = CommunicationResult.failure(
                self._descriptor.operation,
                HttpStatus.CUSTOM_DEFAULT_ERROR,
                f"internal_error: {exc}",
            )
        self._finish(result)

    def _finish(self, result: CommunicationResult) -> None:
        self._result = result
        self._done.set()

    def _perform(self) -> CommunicationResult:
        descriptor = self._descriptor
        params = descriptor.encoded_payload()
        logger.debug("%s %s (%s)", descriptor.method.value, descriptor.path, descriptor.operation.value)

        try:
            with build_client(self._settings, transport=self._transport) as client:
                if descriptor.method is HttpMethod.GET:
                    response = client.get(descriptor.path, params=params)
                else:
                    response = client.post(descriptor.path, data=dict(params))
        except httpx.TransportError as exc:
            # Connection refused, DNS, read/connect timeouts.
            logger.warning("%s failed: %s", descriptor.operation.value, exc)
            return CommunicationResult.failure(
                descriptor.operation,
                HttpStatus.CUSTOM_TIMEOUT,
                f"transport_error: {type(exc).__name__}",
            )
        except httpx.HTTPError as exc:
            logger.warning("%s failed: %s", descriptor.operation.value, exc)
            return CommunicationResult.failure(
                descriptor.operation,
                HttpStatus.CUSTOM_DEFAULT_ERROR,
                f"http_error: {type(exc).__name__}",
            )

        return decode_response(
            descriptor.operation,
            response,
            session=self._session,
            decoders=self._decoders,
        )

    def __repr__(self) -> str:
        state = "finished" if self.is_finished else ("running" if self._started else "inert")
        return f"<Communication {self._descriptor.operation.value} {state}>"
