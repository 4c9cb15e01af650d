"""Correlación de comandos y respuestas sobre el canal WebSocket.

The game answers every ``commandRequest`` asynchronously on the same socket.
This module turns that fire-and-forget channel into awaitable calls:

- identifier strategy: each outbound command carries a fresh id, kept in an
  in-flight table until the echoed response (or the timeout) removes it;
- polling strategy: for commands whose replies cannot be matched by id, the
  caller snapshots the "last observed response" slot and polls until it
  changes.

The in-flight table and the slot are the only shared state. Both are
cleared by ``reset()`` when the game disconnects.
"""

from __future__ import annotations

import asyncio
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from .errors import DispatchTimeout, TransportUnavailable
from .logging import get_logger
from .protocol import check_response, encode_command


DEFAULT_TIMEOUT = 10.0
POLL_INTERVAL = 0.1
POLL_TIMEOUT = 5.0


class Transport(Protocol):
    async def send(self, message: Dict[str, Any]) -> None: ...


class CorrelationStrategy(str, Enum):
    IDENTIFIER = "identifier"
    POLLING = "polling"


class RequestState(str, Enum):
    DISPATCHED = "dispatched"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"


@dataclass
class CommandEnvelope:
    """One outbound operation tracked by the correlator."""

    correlation_id: str
    payload: str
    issued_at: float
    future: "asyncio.Future[Dict[str, Any]]" = field(repr=False)
    state: RequestState = RequestState.DISPATCHED
    response: Optional[Dict[str, Any]] = field(default=None, repr=False)


@dataclass(frozen=True)
class ObservedResponse:
    """Content of the polling slot. Compared by identity, never by value."""

    payload: Dict[str, Any]
    observed_at: float


def _set_if_pending(fut: "asyncio.Future[Dict[str, Any]]", payload: Dict[str, Any]) -> None:
    if not fut.done():
        fut.set_result(payload)


class CommandCorrelator:
    """Matches inbound responses to outbound commands.

    ``handle_response`` and ``observe`` may be called from any thread; waits
    always run on the loop that dispatched the command. The correlator never
    retries a command.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        poll_timeout: float = POLL_TIMEOUT,
        encoder: Callable[[str, str], Dict[str, Any]] = encode_command,
    ) -> None:
        self._log = get_logger(__name__)
        self._transport = transport
        self._encode = encoder
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self._lock = threading.Lock()
        self._in_flight: Dict[str, CommandEnvelope] = {}
        self._last: Optional[ObservedResponse] = None

    # -- wiring --
    def attach(self, transport: Transport) -> None:
        self._transport = transport

    @property
    def in_flight_count(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def is_in_flight(self, correlation_id: str) -> bool:
        with self._lock:
            return correlation_id in self._in_flight

    # -- identifier strategy --
    async def dispatch(self, payload: str) -> CommandEnvelope:
        """Send ``payload`` under a fresh id and register it as in flight."""
        loop = asyncio.get_running_loop()
        env = CommandEnvelope(
            correlation_id=str(uuid.uuid4()),
            payload=payload,
            issued_at=time.time(),
            future=loop.create_future(),
        )
        with self._lock:
            self._in_flight[env.correlation_id] = env
        try:
            await self._send(payload, env.correlation_id)
        except BaseException:
            with self._lock:
                self._in_flight.pop(env.correlation_id, None)
            raise
        return env

    async def await_response(self, env: CommandEnvelope, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Wait for the response to ``env``.

        Raises:
            DispatchTimeout: nothing matched within ``timeout`` seconds. The id
                is removed from the table, so a late reply is ignored.
            asyncio.CancelledError: the caller was cancelled; the id is
                removed the same way.
        """
        limit = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(asyncio.shield(env.future), limit)
        except asyncio.CancelledError:
            with self._lock:
                self._in_flight.pop(env.correlation_id, None)
            raise
        except asyncio.TimeoutError:
            with self._lock:
                self._in_flight.pop(env.correlation_id, None)
                if env.state is RequestState.RESOLVED and env.response is not None:
                    # resolved on another thread while the timeout fired
                    return env.response
                env.state = RequestState.TIMED_OUT
            self._log.warning("timeout after %.3fs: %s", limit, env.payload)
            raise DispatchTimeout(
                f"no response within {limit:g}s for '{env.payload}'",
                correlation_id=env.correlation_id,
                timeout=limit,
            ) from None

    async def request(
        self,
        payload: str,
        timeout: Optional[float] = None,
        *,
        check: bool = True,
    ) -> Dict[str, Any]:
        """Dispatch and wait; with ``check`` a failed status raises RemoteOperationFailed."""
        env = await self.dispatch(payload)
        body = await self.await_response(env, timeout)
        return check_response(body, payload) if check else body

    async def fire(self, payload: str) -> str:
        """Send without tracking (non-blocking variant). Returns the id used."""
        correlation_id = str(uuid.uuid4())
        await self._send(payload, correlation_id)
        return correlation_id

    def handle_response(self, correlation_id: Optional[str], payload: Dict[str, Any]) -> bool:
        """Deliver an inbound response. Returns True when it resolved a wait.

        Every response also lands in the polling slot. Unknown, timed-out and
        duplicate ids are ignored.
        """
        self.observe(payload)
        if not correlation_id:
            return False
        with self._lock:
            env = self._in_flight.pop(correlation_id, None)
            if env is None:
                self._log.debug("ignoring response for unknown id %s", correlation_id)
                return False
            env.state = RequestState.RESOLVED
            env.response = payload
        loop = env.future.get_loop()
        try:
            same_loop = asyncio.get_running_loop() is loop
        except RuntimeError:
            same_loop = False
        if same_loop:
            _set_if_pending(env.future, payload)
        elif not loop.is_closed():
            loop.call_soon_threadsafe(_set_if_pending, env.future, payload)
        return True

    # -- polling strategy --
    def observe(self, payload: Dict[str, Any]) -> None:
        with self._lock:
            self._last = ObservedResponse(payload=payload, observed_at=time.monotonic())

    def snapshot(self) -> Optional[ObservedResponse]:
        with self._lock:
            return self._last

    async def await_change(
        self,
        since: Optional[ObservedResponse],
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Poll the slot until it holds something other than ``since``.

        Not safe with concurrent outstanding commands: any response changes
        the slot, related or not.
        """
        limit = self.poll_timeout if timeout is None else timeout
        deadline = time.monotonic() + limit
        while True:
            current = self.snapshot()
            if current is not None and current is not since:
                return current.payload
            if time.monotonic() >= deadline:
                raise DispatchTimeout(f"no response observed within {limit:g}s", timeout=limit)
            await asyncio.sleep(self.poll_interval)

    # -- single entry point --
    async def execute(
        self,
        payload: str,
        strategy: CorrelationStrategy = CorrelationStrategy.IDENTIFIER,
        timeout: Optional[float] = None,
        *,
        check: bool = True,
    ) -> Dict[str, Any]:
        strategy = CorrelationStrategy(strategy)
        if strategy is CorrelationStrategy.IDENTIFIER:
            return await self.request(payload, timeout, check=check)
        since = self.snapshot()
        await self.fire(payload)
        body = await self.await_change(since, timeout)
        return check_response(body, payload) if check else body

    # -- connection lifecycle --
    def reset(self) -> int:
        """Forget every in-flight id and the polling slot.

        Waiters already suspended keep their own deadline and end as
        timeouts. Returns the number of ids dropped.
        """
        with self._lock:
            dropped = len(self._in_flight)
            self._in_flight.clear()
            self._last = None
        if dropped:
            self._log.warning("connection lost: dropped %d in-flight commands", dropped)
        return dropped

    async def _send(self, payload: str, correlation_id: str) -> None:
        if self._transport is None:
            raise TransportUnavailable("no Minecraft client connected")
        await self._transport.send(self._encode(payload, correlation_id))
