from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .correlator import CommandCorrelator
from .executor import BatchConfig, BatchExecutor


# Session-scoped context passed to command tools
@dataclass
class SessionContext:
    correlator: CommandCorrelator
    executor: BatchExecutor
    transport: Optional[Any] = None
    retry_count: int = 3
    retry_delay: float = 0.5

    @classmethod
    def create(
        cls,
        transport: Optional[Any] = None,
        *,
        timeout: float = 10.0,
        poll_interval: float = 0.1,
        poll_timeout: float = 5.0,
        batch: Optional[BatchConfig] = None,
        retry_count: int = 3,
        retry_delay: float = 0.5,
    ) -> "SessionContext":
        correlator = CommandCorrelator(
            transport,
            timeout=timeout,
            poll_interval=poll_interval,
            poll_timeout=poll_timeout,
        )
        return cls(
            correlator=correlator,
            executor=BatchExecutor(correlator, batch),
            transport=transport,
            retry_count=retry_count,
            retry_delay=retry_delay,
        )

    @property
    def connected(self) -> bool:
        return bool(getattr(self.transport, "connected", False))
