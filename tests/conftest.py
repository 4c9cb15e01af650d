import asyncio
from typing import Any, Dict, Iterable, List, Optional

import pytest

from mcp_minecraft_bridge import commands  # noqa: F401  (registers commands)
from mcp_minecraft_bridge.server.context import SessionContext
from mcp_minecraft_bridge.server.correlator import CommandCorrelator
from mcp_minecraft_bridge.server.executor import BatchConfig


class FakeMinecraft:
    """Stands in for the game on the other end of the socket.

    Records every command line it receives and answers on the next loop
    iteration, echoing the request id. Commands whose 0-based arrival index
    is in ``fail_on`` get a negative status code.
    """

    def __init__(self, correlator: CommandCorrelator, fail_on: Iterable[int] = (), silent: bool = False) -> None:
        self.correlator = correlator
        self.fail_on = set(fail_on)
        self.silent = silent
        self.sent: List[str] = []
        self.messages: List[Dict[str, Any]] = []
        self.connected = True

    async def send(self, message: Dict[str, Any]) -> None:
        index = len(self.sent)
        line = message["body"]["commandLine"]
        self.sent.append(line)
        self.messages.append(message)
        if self.silent:
            return
        if index in self.fail_on:
            body = {"statusCode": -2147352576, "statusMessage": f"Syntax error: {line}"}
        else:
            body = {"statusCode": 0, "statusMessage": f"done: {line}"}
        request_id = message["header"]["requestId"]
        asyncio.get_running_loop().call_soon(self.correlator.handle_response, request_id, body)


@pytest.fixture
def fast_batch() -> BatchConfig:
    return BatchConfig(pace_delay=0.0, chunk_delay=0.0)


@pytest.fixture
def make_ctx(fast_batch):
    def _make(fail_on: Iterable[int] = (), silent: bool = False, batch: Optional[BatchConfig] = None):
        ctx = SessionContext.create(
            timeout=1.0,
            poll_interval=0.01,
            poll_timeout=0.5,
            batch=batch or fast_batch,
            retry_count=3,
            retry_delay=0.0,
        )
        fake = FakeMinecraft(ctx.correlator, fail_on=fail_on, silent=silent)
        ctx.correlator.attach(fake)
        ctx.transport = fake
        return ctx, fake

    return _make
