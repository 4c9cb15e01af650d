"""Procedural shape generators.

Every generator maps a validated request to an ordered, deduplicated list of
``Point3D`` and refuses to pass its shape family's build limit.
"""

from .generator import GENERATORS, generate
from .limits import BUILD_LIMITS, limit_for

__all__ = ["BUILD_LIMITS", "GENERATORS", "generate", "limit_for"]
