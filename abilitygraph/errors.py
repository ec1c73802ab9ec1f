"""Exceptions for defects that editing the graph cannot fix.

User mistakes in a graph are reported as `ValidationIssue` data; the classes
here signal bugs in registry content or in calling code.
"""

from __future__ import annotations


class AbilityGraphError(Exception):
    """Base class for abilitygraph exceptions."""


class RegistryError(AbilityGraphError):
    """The node registry content is malformed."""


class PinCollisionError(RegistryError):
    """A node materialized two pins with the same id."""

    def __init__(self, node_type: str, pin_ids: list[str]):
        self.node_type = node_type
        self.pin_ids = list(pin_ids)
        super().__init__(f"Node type '{node_type}' materialized duplicate pin ids: {', '.join(self.pin_ids)}")


class UnknownCompileKindError(RegistryError):
    """A compile descriptor kind has no compiler."""


class ConnectionRejected(AbilityGraphError):
    """Raised by `connect()` when `validate_connect()` rejects an edge."""

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"{code}: {reason}")
