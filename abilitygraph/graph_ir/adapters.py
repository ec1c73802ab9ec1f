"""Convert between the serialized graph and the editor canvas form.

The canvas keeps node type and config under `data` and addresses pins through
edge handles; the serialized graph is what gets exported and compiled.
"""

from __future__ import annotations

from typing import Optional

from ..nodes.pins import format_data_type
from ..visual.models import CanvasEdge, CanvasNode, GraphEdge, GraphNode, PinEndpoint, PinKind

CANVAS_NODE_TYPE = "genericNode"
UNKNOWN_NODE_TYPE = "UNKNOWN"


def graph_node_to_canvas_node(node: GraphNode, selected_id: Optional[str] = None) -> CanvasNode:
    return CanvasNode(
        id=node.id,
        type=CANVAS_NODE_TYPE,
        position=node.position,
        data={"nodeType": node.nodeType, "config": dict(node.config), "pinsCache": node.pinsCache},
        selected=selected_id == node.id,
    )


def canvas_node_to_graph_node(node: CanvasNode) -> GraphNode:
    data = node.data or {}
    return GraphNode(
        id=node.id,
        nodeType=data.get("nodeType") or UNKNOWN_NODE_TYPE,
        position=node.position,
        config=dict(data.get("config") or {}),
        pinsCache=data.get("pinsCache"),
    )


def edge_label(edge: GraphEdge) -> str:
    if edge.edgeKind == PinKind.DATA and edge.dataType:
        return f"{edge.edgeKind.value} ({format_data_type(edge.dataType)})"
    return edge.edgeKind.value


def graph_edge_to_canvas_edge(edge: GraphEdge) -> CanvasEdge:
    return CanvasEdge(
        id=edge.id,
        source=edge.from_.nodeId,
        sourceHandle=edge.from_.pinId,
        target=edge.to.nodeId,
        targetHandle=edge.to.pinId,
        label=edge_label(edge),
        data={"edgeKind": edge.edgeKind.value, "dataType": edge.dataType, "createdAt": edge.createdAt},
    )


def canvas_edge_to_graph_edge(edge: CanvasEdge) -> GraphEdge:
    """Rebuild a graph edge; the kind comes from `data.edgeKind`, then the label, then CONTROL."""
    data = edge.data or {}
    kind = data.get("edgeKind")
    if kind not in (PinKind.CONTROL.value, PinKind.DATA.value):
        kind = edge.label if edge.label in (PinKind.CONTROL.value, PinKind.DATA.value) else PinKind.CONTROL.value
    return GraphEdge(
        id=edge.id,
        edgeKind=PinKind(kind),
        dataType=data.get("dataType"),
        from_=PinEndpoint(nodeId=edge.source, pinId=edge.sourceHandle or ""),
        to=PinEndpoint(nodeId=edge.target, pinId=edge.targetHandle or ""),
        createdAt=data.get("createdAt"),
    )
