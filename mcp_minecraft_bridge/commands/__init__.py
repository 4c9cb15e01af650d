"""Registering command modules.

Importing this package registers every ``namespace.action`` command in the
global registry.
"""

from . import building, sequence, world  # noqa: F401
