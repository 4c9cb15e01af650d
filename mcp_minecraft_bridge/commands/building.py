"""Shape building tools: validate, generate, then run as a paced batch."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from ..geometry import generate, limit_for
from ..models import SHAPE_KINDS, Point3D, parse_shape_request
from ..server.context import SessionContext
from ..server.executor import BatchConfig, block_operations
from ..server.protocol import clone_command
from ..server.registry import command, tool
from ..server.validation import get_bool, get_float, get_int


# Tool arguments consumed here; everything else belongs to the shape request.
_EXECUTION_KEYS = ("use_fill", "stop_on_error", "chunk_size", "pace_every", "pace_delay", "chunk_delay", "timeout")


def split_execution_params(params: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    shape = {k: v for k, v in params.items() if k not in _EXECUTION_KEYS}
    execution = {k: params[k] for k in _EXECUTION_KEYS if k in params}
    return shape, execution


def batch_config(ctx: SessionContext, execution: Dict[str, Any]) -> BatchConfig:
    """Per-call pacing overrides on top of the session defaults."""
    base = ctx.executor.config
    return base.with_overrides(
        chunk_size=get_int(execution, "chunk_size", base.chunk_size, min_value=1, max_value=1000),
        pace_every=get_int(execution, "pace_every", base.pace_every, min_value=1, max_value=1000),
        pace_delay=get_float(execution, "pace_delay", base.pace_delay, min_value=0, max_value=1),
        chunk_delay=get_float(execution, "chunk_delay", base.chunk_delay, min_value=0, max_value=5),
        timeout=get_float(execution, "timeout", base.timeout or ctx.correlator.timeout, min_value=0.01, max_value=120),
    )


def shape_operations(request: Any, points: List[Point3D], *, use_fill: bool) -> List[str]:
    """Command lines for generated cells; a material-less copy is one clone."""
    if request.material is None:
        lo, hi = request.source_bounds()
        return [clone_command(lo, hi, request.target.point())]
    return block_operations(points, request.material, use_fill=use_fill)


async def build_shape(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    shape_params, execution = split_execution_params(params)
    request = parse_shape_request(shape_params)
    use_fill = get_bool(execution, "use_fill", False)
    stop_on_error = get_bool(execution, "stop_on_error", True)
    cfg = batch_config(ctx, execution)

    points = generate(request)
    ops = shape_operations(request, points, use_fill=use_fill)
    outcome = await ctx.executor.run(
        ops,
        stop_on_error=stop_on_error,
        limit=limit_for(request.kind),
        kind=request.kind,
        config=cfg,
    )
    result = outcome.to_dict(include_items=False)
    result.update(
        {
            "shape": request.kind,
            "material": request.material,
            "blocks": len(points),
            "commands": len(ops),
        }
    )
    failures = [r.message for r in outcome.per_item if not r.success]
    if failures:
        result["failures"] = failures[:10]
    return result


@command("build.shape")
@tool
async def build(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    """Build any shape; ``params["kind"]`` selects the family."""
    return await build_shape(ctx, params)


@command("build.preview")
@tool
async def preview(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
    """Generate without dispatching: block count and extents."""
    shape_params, _ = split_execution_params(params)
    request = parse_shape_request(shape_params)
    points = generate(request)
    result: Dict[str, Any] = {"shape": request.kind, "blocks": len(points), "limit": limit_for(request.kind)}
    if points:
        result["min"] = [min(p.x for p in points), min(p.y for p in points), min(p.z for p in points)]
        result["max"] = [max(p.x for p in points), max(p.y for p in points), max(p.z for p in points)]
    return result


def _kind_tool(kind: str):
    async def _build_kind(ctx: SessionContext, params: Dict[str, Any]) -> Dict[str, Any]:
        return await build_shape(ctx, {**params, "kind": kind})

    _build_kind.__name__ = f"build_{kind}"
    _build_kind.__doc__ = f"Build a {kind}."
    return tool(_build_kind)


for _kind in SHAPE_KINDS:
    command(f"build.{_kind}")(_kind_tool(_kind))
