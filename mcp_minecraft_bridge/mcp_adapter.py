# mcp_adapter.py
"""MCP stdio server exposing the Minecraft bridge commands.

The WebSocket transport (Minecraft side) and the MCP stdio loop share one
asyncio event loop. Logging goes to stderr and the rotating file; stdout is
reserved for the MCP protocol.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from . import commands  # noqa: F401  (registers commands)
from .config_manager import ConfigManager, Settings
from .server import logging as bridge_logging
from .server.context import SessionContext
from .server.executor import BatchConfig
from .server.registry import run_command
from .server.transport import BedrockTransport


log = bridge_logging.get_logger("mcp_adapter")

# Name must match the client-side server entry
mcp = FastMCP("minecraft_bedrock")

_ctx: Optional[SessionContext] = None


def build_context(settings: Settings) -> SessionContext:
    """Create correlator, executor and transport from settings."""
    b = settings.batch
    ctx = SessionContext.create(
        timeout=settings.correlation.timeout,
        poll_interval=settings.correlation.poll_interval,
        poll_timeout=settings.correlation.poll_timeout,
        batch=BatchConfig(
            chunk_size=b.chunk_size,
            pace_every=b.pace_every,
            pace_delay=b.pace_delay,
            chunk_delay=b.chunk_delay,
            progress_threshold=b.progress_threshold,
        ),
        retry_count=settings.sequence.retry_count,
        retry_delay=settings.sequence.retry_delay,
    )
    ctx.transport = BedrockTransport(ctx.correlator, settings.server.host, settings.server.port)
    return ctx


def set_context(ctx: Optional[SessionContext]) -> None:
    global _ctx
    _ctx = ctx


def _context() -> SessionContext:
    global _ctx
    if _ctx is None:
        _ctx = build_context(ConfigManager().get())
    return _ctx


async def _call(name: str, params: Dict[str, Any]) -> str:
    response = await run_command(_context(), name, params)
    return json.dumps(response, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------


@mcp.tool()
async def minecraft_status() -> str:
    """Estado de la conexión con Minecraft y comandos disponibles."""
    return await _call("server.status", {})


@mcp.tool()
async def minecraft_command(command: str, strategy: str = "identifier", timeout: Optional[float] = None) -> str:
    """
    Ejecuta un comando de Minecraft (sin '/').

    Args:
        command: Línea de comando, p.ej. "time set day".
        strategy: "identifier" (por defecto) o "polling" para comandos cuya
            respuesta no repite el requestId.
        timeout: Segundos de espera máximos.
    """
    params: Dict[str, Any] = {"command": command, "strategy": strategy}
    if timeout is not None:
        params["timeout"] = timeout
    return await _call("world.command", params)


@mcp.tool()
async def minecraft_message(message: str) -> str:
    """Envía un mensaje al chat del mundo."""
    return await _call("world.message", {"message": message})


@mcp.tool()
async def minecraft_setblock(x: int, y: int, z: int, block: str = "minecraft:stone") -> str:
    """Coloca un bloque en una posición."""
    return await _call("world.setblock", {"position": [x, y, z], "block": block})


@mcp.tool()
async def minecraft_batch(commands: List[str], stop_on_error: bool = True) -> str:
    """
    Ejecuta una lista de comandos en orden, en lotes con pausas.

    Args:
        commands: Líneas de comando.
        stop_on_error: Detener en el primer fallo (True) o continuar y contar fallos.
    """
    return await _call("world.batch", {"commands": commands, "stop_on_error": stop_on_error})


@mcp.tool()
async def minecraft_build_shape(shape: Dict[str, Any], use_fill: bool = False, stop_on_error: bool = True) -> str:
    """
    Construye una forma geométrica.

    Args:
        shape: Parámetros con "kind" (cube, sphere, ellipsoid, cylinder, torus,
            helix, hyperboloid, paraboloid, line, bezier, rotation, transform),
            posiciones como {"x":..,"y":..,"z":..} y "material". Para
            "transform" sin material solo se admite "copy" (un comando clone).
        use_fill: Agrupar bloques en comandos fill.
        stop_on_error: Detener en el primer fallo.
    """
    params = {**shape, "use_fill": use_fill, "stop_on_error": stop_on_error}
    return await _call("build.shape", params)


@mcp.tool()
async def minecraft_preview_shape(shape: Dict[str, Any]) -> str:
    """Calcula una forma sin construirla: número de bloques y extensión."""
    return await _call("build.preview", shape)


@mcp.tool()
async def minecraft_sequence(steps: List[Dict[str, Any]]) -> str:
    """
    Ejecuta varios comandos registrados en orden.

    Cada paso: {"command": "build.cube", "params": {...}, "on_error":
    "stop"|"continue"|"retry", "retry_count": 3, "wait_time": 0}.
    """
    return await _call("sequence.run", {"steps": steps})


@mcp.tool()
def ping() -> str:
    return "pong"


# ---------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------


async def _serve(ctx: SessionContext) -> None:
    transport = ctx.transport
    await transport.start()
    try:
        await mcp.run_stdio_async()
    finally:
        await transport.stop()


def main() -> None:
    settings = ConfigManager().get()
    bridge_logging.configure(
        settings.logging.level,
        str(settings.logging.file) if settings.logging.file else None,
    )
    ctx = build_context(settings)
    set_context(ctx)
    log.info("Starting Minecraft MCP bridge on ws://%s:%d", settings.server.host, settings.server.port)
    asyncio.run(_serve(ctx))


if __name__ == "__main__":
    main()
