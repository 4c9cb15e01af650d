"""Ordered multi-step plans over registered commands.

Retries live here, not in the batch executor: each step may declare
``on_error`` as ``stop`` (default), ``continue`` or ``retry`` with its own
attempt budget.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from ..server.context import SessionContext
from ..server.errors import ParameterOutOfRange
from ..server.logging import get_logger
from ..server.registry import command, run_command, tool
from ..server.validation import get_choice, get_float, get_int, get_str


log = get_logger(__name__)

MAX_STEPS = 100
ON_ERROR = ("stop", "continue", "retry")


def _parse_step(ctx: SessionContext, index: int, raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ParameterOutOfRange(f"steps[{index}] must be an object")
    name = get_str(raw, "command", required=True)
    if name.startswith("sequence."):
        raise ParameterOutOfRange(f"steps[{index}]: sequences cannot be nested")
    params = raw.get("params", {})
    if not isinstance(params, dict):
        raise ParameterOutOfRange(f"steps[{index}].params must be an object")
    return {
        "command": name,
        "params": params,
        "on_error": get_choice(raw, "on_error", ON_ERROR, "stop"),
        "retry_count": get_int(raw, "retry_count", ctx.retry_count, min_value=0, max_value=10),
        "wait_time": get_float(raw, "wait_time", 0.0, min_value=0, max_value=60),
    }


@command("sequence.run")
@tool
async def run_sequence(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    raw_steps = params.get("steps")
    if not isinstance(raw_steps, list) or not raw_steps:
        raise ParameterOutOfRange("param 'steps' must be a non-empty list")
    if len(raw_steps) > MAX_STEPS:
        raise ParameterOutOfRange(f"param 'steps' must have at most {MAX_STEPS} entries")
    steps = [_parse_step(ctx, i, s) for i, s in enumerate(raw_steps)]

    results: List[Dict[str, Any]] = []
    failed = 0
    stopped_at = None
    for i, step in enumerate(steps):
        attempts = 1 + (step["retry_count"] if step["on_error"] == "retry" else 0)
        for attempt in range(1, attempts + 1):
            payload = await run_command(ctx, step["command"], step["params"])
            if payload.get("status") == "ok":
                break
            if attempt < attempts:
                log.info("step %d (%s) failed, retry %d/%d", i + 1, step["command"], attempt, attempts - 1)
                await asyncio.sleep(ctx.retry_delay)

        ok = payload.get("status") == "ok"
        results.append(
            {
                "step": i + 1,
                "command": step["command"],
                "success": ok,
                "attempts": attempt,
                "result": payload.get("result") if ok else None,
                "error": None if ok else payload.get("message"),
            }
        )
        if not ok:
            failed += 1
            if step["on_error"] != "continue":
                stopped_at = i + 1
                break
        if step["wait_time"] > 0 and i < len(steps) - 1:
            await asyncio.sleep(step["wait_time"])

    completed = len(results) - failed
    message = f"Sequence finished: {completed}/{len(steps)} steps succeeded"
    if stopped_at is not None:
        message = f"Sequence stopped at step {stopped_at}: {results[-1]['error']}"
    return {
        "success": failed == 0,
        "message": message,
        "completed": completed,
        "failed": failed,
        "total_steps": len(steps),
        "stopped_at": stopped_at,
        "steps": results,
    }
