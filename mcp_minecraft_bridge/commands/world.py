from __future__ import annotations

from typing import Any, Dict, List

from ..server.context import SessionContext
from ..server.correlator import CorrelationStrategy
from ..server.errors import ParameterOutOfRange
from ..server.protocol import say_command, setblock_command
from ..server.registry import COMMANDS, command, tool
from ..server.validation import get_bool, get_choice, get_float, get_int, get_str, get_xyz
from .building import batch_config


MAX_BATCH_COMMANDS = 10000


@command("world.command")
@tool
async def run_raw(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    """Run one command line.

    ``strategy="polling"`` is for commands whose reply does not echo the
    request id; it is unsafe while other commands are outstanding.
    """
    line = get_str(params, "command", required=True).strip()
    if not line:
        raise ParameterOutOfRange("param 'command' must not be empty")
    strategy = get_choice(params, "strategy", tuple(s.value for s in CorrelationStrategy), "identifier")
    default_timeout = ctx.correlator.poll_timeout if strategy == "polling" else ctx.correlator.timeout
    timeout = get_float(params, "timeout", default_timeout, min_value=0.01, max_value=120)
    body = await ctx.correlator.execute(line, CorrelationStrategy(strategy), timeout)
    return {
        "command": line,
        "status_code": body.get("statusCode", 0),
        "message": body.get("statusMessage", ""),
        "body": body,
    }


@command("world.message")
@tool
async def send_message(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    text = get_str(params, "message", required=True)
    if not text.strip():
        raise ParameterOutOfRange("param 'message' must not be empty")
    body = await ctx.correlator.request(say_command(text))
    return {"message": text, "status": body.get("statusMessage", "")}


@command("world.setblock")
@tool
async def set_block(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    pos = get_xyz(params, "position")
    block = get_str(params, "block", "minecraft:stone")
    line = setblock_command(pos, block)
    body = await ctx.correlator.request(line)
    return {"command": line, "message": body.get("statusMessage", "")}


@command("world.batch")
@tool
async def run_batch(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    """Execute a flat list of command lines as one paced batch."""
    raw = params.get("commands")
    if not isinstance(raw, list) or not raw:
        raise ParameterOutOfRange("param 'commands' must be a non-empty list of strings")
    commands: List[str] = []
    for i, c in enumerate(raw):
        if not isinstance(c, str) or not c.strip():
            raise ParameterOutOfRange(f"commands[{i}] must be a non-empty string")
        commands.append(c.strip())
    outcome = await ctx.executor.run(
        commands,
        stop_on_error=get_bool(params, "stop_on_error", True),
        limit=get_int(params, "limit", MAX_BATCH_COMMANDS, min_value=1, max_value=MAX_BATCH_COMMANDS),
        config=batch_config(ctx, params),
    )
    return outcome.to_dict(include_items=True)


@command("server.status")
@tool
async def status(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    transport = ctx.transport
    return {
        "connected": ctx.connected,
        "peer": getattr(transport, "peer", None),
        "in_flight": ctx.correlator.in_flight_count,
        "commands": sorted(COMMANDS),
    }
