from __future__ import annotations

import functools
import traceback
from typing import Any, Awaitable, Callable, Dict, Optional

from .errors import BridgeError
from .logging import get_logger


log = get_logger(__name__)

ToolFn = Callable[[Any, Dict[str, Any]], Awaitable[Dict[str, Any]]]

# Global command registry: name -> async callable(ctx, params) -> normalized dict
COMMANDS: Dict[str, ToolFn] = {}


def command(name: str) -> Callable[[ToolFn], ToolFn]:
    """Decorator to register a callable under 'namespace.action'.

    Registers the function object provided (typically already wrapped by @tool)
    into the global COMMANDS dict. Rejects duplicate names.
    """

    if not isinstance(name, str) or "." not in name:
        raise ValueError("command name must be 'namespace.action'")

    def _decorator(fn: ToolFn) -> ToolFn:
        if name in COMMANDS:
            raise ValueError(f"duplicate command registration: {name}")
        COMMANDS[name] = fn
        log.debug("Registered command: %s", name)
        return fn

    return _decorator


def tool(fn: Callable[..., Awaitable[Any]]) -> ToolFn:
    """Decorator to normalize async tool responses.

    Tool functions must accept (ctx, params) where ctx is a SessionContext.
    Always returns a dict:
      - on success: {"status": "ok", "result": <fn return>}
      - on BridgeError: {"status": "error", "tool", "code", "message", "details", "trace": ""}
      - on any other exception: same shape with code "InternalError" and the trace
    """

    tool_name = getattr(fn, "__name__", "tool")

    @functools.wraps(fn)
    async def _wrapped(*args: Any, **kwargs: Any) -> Dict[str, Any]:
        try:
            result = await fn(*args, **kwargs)
            return {"status": "ok", "result": result}
        except BridgeError as e:
            log.info("%s failed: %s: %s", tool_name, e.code, e.message)
            return {
                "status": "error",
                "tool": tool_name,
                "code": e.code,
                "message": e.message,
                "details": dict(e.details),
                "trace": "",
            }
        except Exception as e:  # noqa: BLE001
            log.exception("%s crashed", tool_name)
            return {
                "status": "error",
                "tool": tool_name,
                "code": "InternalError",
                "message": str(e),
                "details": {},
                "trace": traceback.format_exc(),
            }

    return _wrapped


def get(name: str) -> Optional[ToolFn]:
    """Fetch a registered command by name, or None if not found."""
    return COMMANDS.get(name)


async def run_command(ctx: Any, name: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Look up and run a registered command, normalizing unknown names."""
    fn = get(name)
    if fn is None:
        return {
            "status": "error",
            "tool": "registry",
            "code": "UnknownCommand",
            "message": f"unknown command: {name}",
            "details": {},
            "trace": "",
        }
    return await fn(ctx, dict(params or {}))
