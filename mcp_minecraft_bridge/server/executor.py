"""Ejecutor por lotes de comandos hacia Minecraft.

Dispatches an ordered command list through the correlator, one command at a
time, in fixed-size chunks with two levels of pacing (a short pause every few
commands, a longer one between chunks). The game offers no flow control, so
pacing is the only backpressure.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..geometry.optimizer import compress_to_boxes
from ..models import Point3D
from .correlator import CommandCorrelator
from .errors import BatchAborted, BridgeError, ParameterOutOfRange, ShapeTooLarge
from .logging import get_logger
from .protocol import fill_command, setblock_command


@dataclass(frozen=True)
class ItemResult:
    success: bool
    message: str
    command: str = ""


@dataclass(frozen=True)
class BatchOutcome:
    placed: int
    failed: int
    per_item: Tuple[ItemResult, ...]
    total_requested: int

    @property
    def success(self) -> bool:
        return self.failed == 0 and self.placed == self.total_requested

    @property
    def message(self) -> str:
        return f"Batch execution completed. Successful: {self.placed}, Failed: {self.failed}"

    def to_dict(self, include_items: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "placed": self.placed,
            "failed": self.failed,
            "total_requested": self.total_requested,
        }
        if include_items:
            data["per_item"] = [{"success": r.success, "message": r.message} for r in self.per_item]
        return data


@dataclass(frozen=True)
class BatchConfig:
    """Chunking and pacing knobs (seconds for delays)."""

    chunk_size: int = 50
    pace_every: int = 10
    pace_delay: float = 0.005
    chunk_delay: float = 0.02
    progress_threshold: int = 100
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ParameterOutOfRange("chunk_size must be >= 1")
        if self.pace_every < 1:
            raise ParameterOutOfRange("pace_every must be >= 1")
        if self.pace_delay < 0 or self.chunk_delay < 0:
            raise ParameterOutOfRange("pacing delays must be >= 0")
        if self.timeout is not None and self.timeout <= 0:
            raise ParameterOutOfRange("timeout must be > 0")

    def with_overrides(self, **overrides: Any) -> "BatchConfig":
        known = {k: v for k, v in overrides.items() if v is not None and k in self.__dataclass_fields__}
        return replace(self, **known) if known else self


@dataclass
class _OutcomeBuilder:
    total: int
    items: List[ItemResult] = field(default_factory=list)
    placed: int = 0
    failed: int = 0

    def ok(self, command: str, message: str) -> None:
        self.placed += 1
        self.items.append(ItemResult(True, message, command))

    def fail(self, command: str, message: str) -> None:
        self.failed += 1
        self.items.append(ItemResult(False, message, command))

    def freeze(self) -> BatchOutcome:
        return BatchOutcome(self.placed, self.failed, tuple(self.items), self.total)


ProgressCallback = Callable[[int, int], None]


def block_operations(points: Sequence[Point3D], material: str, *, use_fill: bool = False) -> List[str]:
    """Turn cells into command lines: one setblock each, or merged fills."""
    if not use_fill:
        return [setblock_command(p, material) for p in points]
    ops = []
    for box in compress_to_boxes(points):
        if box.is_single():
            ops.append(setblock_command(box.lo, material))
        else:
            ops.append(fill_command(box.lo, box.hi, material))
    return ops


class BatchExecutor:
    """Runs command batches in order through a ``CommandCorrelator``.

    Command ``i`` is resolved (or declared failed) before ``i + 1`` is sent.
    Failed commands are never retried here.
    """

    def __init__(
        self,
        correlator: CommandCorrelator,
        config: Optional[BatchConfig] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self._log = get_logger(__name__)
        self.correlator = correlator
        self.config = config or BatchConfig()
        self.progress = progress

    async def run(
        self,
        commands: Sequence[str],
        *,
        stop_on_error: bool = True,
        limit: Optional[int] = None,
        kind: str = "batch",
        config: Optional[BatchConfig] = None,
    ) -> BatchOutcome:
        """Execute ``commands`` and return the aggregate outcome.

        Args:
            commands: Command lines, dispatched in order.
            stop_on_error: Abort on the first failure (default) instead of
                recording it and moving on.
            limit: Ceiling on ``len(commands)``, checked before anything is sent.
            kind: Label used in errors and logs.
            config: Per-call pacing override.

        Raises:
            ShapeTooLarge: more commands than ``limit``.
            BatchAborted: ``stop_on_error`` and a command failed. The partial
                outcome is attached; later commands were not sent.
        """
        cfg = config or self.config
        total = len(commands)
        if limit is not None and total > limit:
            raise ShapeTooLarge(kind, total, limit)

        builder = _OutcomeBuilder(total=total)
        started = time.perf_counter()
        self._log.info("%s: executing %d commands (stop_on_error=%s)", kind, total, stop_on_error)

        for chunk_start in range(0, total, cfg.chunk_size):
            if chunk_start > 0:
                await asyncio.sleep(cfg.chunk_delay)
                if total > cfg.progress_threshold:
                    self._report_progress(chunk_start, total)

            for index in range(chunk_start, min(chunk_start + cfg.chunk_size, total)):
                command = commands[index]
                try:
                    body = await self.correlator.request(command, cfg.timeout)
                except BridgeError as e:
                    builder.fail(command, str(e))
                    self._log.warning("%s: command %d/%d failed: %s", kind, index + 1, total, e)
                    if stop_on_error:
                        outcome = builder.freeze()
                        raise BatchAborted(
                            f"Batch aborted at command {index + 1}/{total}: {e}. "
                            f"Successful: {outcome.placed}, Failed: {outcome.failed}",
                            outcome,
                            cause=e,
                        ) from e
                else:
                    builder.ok(command, str(body.get("statusMessage") or "ok"))

                if (index + 1) % cfg.pace_every == 0:
                    await asyncio.sleep(cfg.pace_delay)

        outcome = builder.freeze()
        self._log.info(
            "%s: %s (%.2fs)", kind, outcome.message, time.perf_counter() - started
        )
        return outcome

    def _report_progress(self, done: int, total: int) -> None:
        percent = round(done / total * 100)
        self._log.info("Building progress: %d%% (%d/%d blocks)", percent, done, total)
        if self.progress is not None:
            self.progress(done, total)
