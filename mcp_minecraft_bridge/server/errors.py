from __future__ import annotations

from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .executor import BatchOutcome


class BridgeError(Exception):
    """Base class for recoverable bridge failures.

    Every subclass carries a stable ``code`` and optional structured
    ``details`` so the tool boundary can report them without parsing text.
    """

    code = "BridgeError"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}


class ParameterOutOfRange(BridgeError, ValueError):
    code = "ParameterOutOfRange"


class ShapeTooLarge(BridgeError):
    code = "ShapeTooLarge"

    def __init__(self, kind: str, count: int, limit: int, *, estimated: bool = False) -> None:
        what = "estimated" if estimated else "generated"
        super().__init__(
            f"{kind} would produce {count} blocks ({what}), limit is {limit}",
            kind=kind,
            count=count,
            limit=limit,
        )


class CoordinateOutOfBounds(BridgeError):
    code = "CoordinateOutOfBounds"


class DispatchTimeout(BridgeError):
    code = "DispatchTimeout"


class RemoteOperationFailed(BridgeError):
    code = "RemoteOperationFailed"


class TransportUnavailable(BridgeError):
    code = "TransportUnavailable"


class BatchAborted(BridgeError):
    code = "BatchAborted"

    def __init__(self, message: str, outcome: "BatchOutcome", cause: Optional[BridgeError] = None) -> None:
        super().__init__(
            message,
            placed=outcome.placed,
            failed=outcome.failed,
            total_requested=outcome.total_requested,
            failed_index=len(outcome.per_item) - 1,
        )
        self.outcome = outcome
        self.cause = cause
