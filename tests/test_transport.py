import asyncio
import json

import pytest

from mcp_minecraft_bridge.server.correlator import CommandCorrelator
from mcp_minecraft_bridge.server.errors import RemoteOperationFailed, TransportUnavailable
from mcp_minecraft_bridge.server.protocol import (
    check_response,
    decode_message,
    encode_command,
    fill_command,
    response_succeeded,
)
from mcp_minecraft_bridge.models import Point3D
from mcp_minecraft_bridge.server.transport import BedrockTransport


class FakeWS:
    """Async-iterable socket fed from a queue; ``None`` ends the stream."""

    remote_address = ("192.168.1.20", 50123)

    def __init__(self):
        self.inbox = asyncio.Queue()
        self.sent = []
        self.closed = False

    async def send(self, text):
        self.sent.append(json.loads(text))

    async def close(self):
        self.closed = True
        await self.inbox.put(None)

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self.inbox.get()
        if frame is None:
            raise StopAsyncIteration
        return frame


def _response(request_id, status=0, message="ok", purpose="commandResponse"):
    return json.dumps(
        {
            "header": {"version": 1, "requestId": request_id, "messagePurpose": purpose},
            "body": {"statusCode": status, "statusMessage": message},
        }
    )


# ---- protocol ----

def test_encode_command_strips_slash():
    msg = encode_command("/say hi ", "abc")
    assert msg["header"]["requestId"] == "abc"
    assert msg["header"]["messagePurpose"] == "commandRequest"
    assert msg["body"]["commandLine"] == "say hi"
    assert msg["body"]["version"] == 1


def test_decode_message():
    purpose, rid, body = decode_message(_response("r1", message="Set"))
    assert (purpose, rid, body["statusMessage"]) == ("commandResponse", "r1", "Set")
    with pytest.raises(ValueError):
        decode_message('{"body": {}}')
    with pytest.raises(ValueError):
        decode_message("not json")


def test_status_code_interpretation():
    assert response_succeeded({"statusCode": 0})
    assert response_succeeded({})
    assert not response_succeeded({"statusCode": -2147483648})
    with pytest.raises(RemoteOperationFailed) as exc:
        check_response({"statusCode": -1}, "give @p diamond")
    assert exc.value.details["command"] == "give @p diamond"


def test_fill_command_normalizes_block():
    assert fill_command(Point3D(0, 1, 2), Point3D(3, 4, 5), "Oak_Planks") == "fill 0 1 2 3 4 5 minecraft:oak_planks"


# ---- transport ----

@pytest.mark.asyncio
async def test_send_without_client():
    transport = BedrockTransport(CommandCorrelator())
    assert not transport.connected
    with pytest.raises(TransportUnavailable):
        await transport.send({"header": {}})


@pytest.mark.asyncio
async def test_frames_are_routed_to_correlator():
    corr = CommandCorrelator(timeout=1)
    transport = BedrockTransport(corr)
    ws = FakeWS()
    handler = asyncio.create_task(transport._handler(ws))
    await asyncio.sleep(0)
    assert transport.connected
    assert transport.peer == "192.168.1.20:50123"

    pending = asyncio.create_task(corr.request("time set noon"))
    while not ws.sent:
        await asyncio.sleep(0)
    rid = ws.sent[0]["header"]["requestId"]
    await ws.inbox.put(_response(rid, message="Set the time to 6000"))
    body = await pending
    assert body["statusMessage"] == "Set the time to 6000"

    await ws.inbox.put(None)
    await handler
    assert not transport.connected


@pytest.mark.asyncio
async def test_error_purpose_counts_as_failure():
    corr = CommandCorrelator(timeout=1)
    transport = BedrockTransport(corr)
    ws = FakeWS()
    handler = asyncio.create_task(transport._handler(ws))
    await asyncio.sleep(0)

    pending = asyncio.create_task(corr.request("bogus"))
    while not ws.sent:
        await asyncio.sleep(0)
    rid = ws.sent[0]["header"]["requestId"]
    frame = json.dumps({"header": {"requestId": rid, "messagePurpose": "error"}, "body": {"statusMessage": "Unknown command"}})
    await ws.inbox.put(frame)
    with pytest.raises(RemoteOperationFailed):
        await pending

    await ws.inbox.put(None)
    await handler


def test_malformed_and_event_frames_are_ignored():
    corr = CommandCorrelator()
    transport = BedrockTransport(corr)
    transport.handle_frame("{broken")
    transport.handle_frame('["no", "header"]')
    transport.handle_frame(json.dumps({"header": {"messagePurpose": "event"}, "body": {"eventName": "PlayerMessage"}}))
    assert corr.snapshot() is None


@pytest.mark.asyncio
async def test_disconnect_resets_in_flight_commands():
    corr = CommandCorrelator(timeout=1)
    transport = BedrockTransport(corr)
    ws = FakeWS()
    handler = asyncio.create_task(transport._handler(ws))
    await asyncio.sleep(0)

    env = await corr.dispatch("say lost")
    assert corr.in_flight_count == 1
    await ws.inbox.put(None)
    await handler
    assert corr.in_flight_count == 0
    assert not corr.is_in_flight(env.correlation_id)
    with pytest.raises(TransportUnavailable):
        await corr.dispatch("say after")


@pytest.mark.asyncio
async def test_second_client_replaces_and_closes_the_first():
    corr = CommandCorrelator(timeout=1)
    transport = BedrockTransport(corr)
    first = FakeWS()
    first_handler = asyncio.create_task(transport._handler(first))
    await asyncio.sleep(0)
    stale = await corr.dispatch("say stale")

    second = FakeWS()
    second.remote_address = ("192.168.1.21", 50200)
    second_handler = asyncio.create_task(transport._handler(second))
    await first_handler
    assert first.closed
    assert transport.connected
    assert transport.peer == "192.168.1.21:50200"
    assert not corr.is_in_flight(stale.correlation_id)

    pending = asyncio.create_task(corr.request("say fresh"))
    while not second.sent:
        await asyncio.sleep(0)
    rid = second.sent[0]["header"]["requestId"]
    await second.inbox.put(_response(rid))
    assert (await pending)["statusMessage"] == "ok"

    await second.inbox.put(None)
    await second_handler
    assert not transport.connected
