"""Keep edges consistent when a node's pin set changes.

Editing a node's config (for example lowering `elseIfCount`) can remove pins.
Edges attached to a removed pin on that node are dropped; every other edge is
kept unchanged and in its original order.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from ..nodes.pins import build_pins
from ..nodes.registry import NodeRegistry, get_registry
from ..visual.models import CanvasEdge, Graph, GraphEdge, PinDefinition

logger = logging.getLogger(__name__)


def removed_pin_ids(old_pins: Iterable[PinDefinition], new_pins: Iterable[PinDefinition]) -> Set[str]:
    new_ids = {p.id for p in new_pins}
    return {p.id for p in old_pins if p.id not in new_ids}


def reconcile_graph_edges(
    node_id: str,
    old_pins: List[PinDefinition],
    new_pins: List[PinDefinition],
    edges: List[GraphEdge],
) -> List[GraphEdge]:
    removed = removed_pin_ids(old_pins, new_pins)
    if not removed:
        return list(edges)
    kept: List[GraphEdge] = []
    for e in edges:
        if e.from_.nodeId == node_id and e.from_.pinId in removed:
            continue
        if e.to.nodeId == node_id and e.to.pinId in removed:
            continue
        kept.append(e)
    return kept


def reconcile_canvas_edges(
    node_id: str,
    old_pins: List[PinDefinition],
    new_pins: List[PinDefinition],
    edges: List[CanvasEdge],
) -> List[CanvasEdge]:
    """Same as `reconcile_graph_edges` for editor canvas edges (handles = pin ids)."""
    removed = removed_pin_ids(old_pins, new_pins)
    if not removed:
        return list(edges)
    kept: List[CanvasEdge] = []
    for e in edges:
        if e.source == node_id and e.sourceHandle and e.sourceHandle in removed:
            continue
        if e.target == node_id and e.targetHandle and e.targetHandle in removed:
            continue
        kept.append(e)
    return kept


def apply_config_change(
    graph: Graph,
    node_id: str,
    config: Dict[str, Any],
    registry: Optional[NodeRegistry] = None,
) -> Graph:
    """Return a new graph with `node_id`'s config replaced and edges reconciled.

    The node's `pinsCache` is refreshed to the new pin ids. Unknown node ids
    and unknown node types raise KeyError.
    """
    if registry is None:
        registry = get_registry()

    idx = next((i for i, n in enumerate(graph.nodes) if n.id == node_id), None)
    if idx is None:
        raise KeyError(f"Node '{node_id}' not found in graph '{graph.id}'")
    node = graph.nodes[idx]
    definition = registry.lookup(node.nodeType)
    if definition is None:
        raise KeyError(f"Unknown nodeType '{node.nodeType}'")

    old_pins = build_pins(definition, node.config)
    new_pins = build_pins(definition, config)
    edges = reconcile_graph_edges(node_id, old_pins, new_pins, graph.edges)
    if len(edges) != len(graph.edges):
        logger.debug(f"Config change on '{node_id}' dropped {len(graph.edges) - len(edges)} edge(s)")

    nodes = list(graph.nodes)
    nodes[idx] = node.model_copy(update={"config": dict(config), "pinsCache": [p.id for p in new_pins]})
    return graph.model_copy(update={"nodes": nodes, "edges": edges})
