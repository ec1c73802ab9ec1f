"""Web backend models.

The web backend re-exports the graph models from `abilitygraph.visual.models`
so the CLI and other hosts share one JSON schema with the HTTP service.
"""

from __future__ import annotations

from abilitygraph.visual.models import (  # noqa: F401
    CanvasEdge,
    CanvasNode,
    CompiledGraphResult,
    ConnectRequest,
    Graph,
    GraphEdge,
    GraphNode,
    NodeDefinition,
    PinDefinition,
    Position,
    ReconcileRequest,
    ValidationIssue,
)

__all__ = [
    "CanvasEdge",
    "CanvasNode",
    "CompiledGraphResult",
    "ConnectRequest",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "NodeDefinition",
    "PinDefinition",
    "Position",
    "ReconcileRequest",
    "ValidationIssue",
]
