"""Graph IR: edit-time rules, validation, compilation and reconciliation."""

from .adapters import (
    canvas_edge_to_graph_edge,
    canvas_node_to_graph_node,
    graph_edge_to_canvas_edge,
    graph_node_to_canvas_node,
)
from .compiler import compile_graph
from .cycle import control_reachable, find_control_cycle, would_create_cycle
from .edge_rules import ConnectOk, ConnectRejected, ConnectResult, connect, validate_connect
from .reconcile import apply_config_change, reconcile_canvas_edges, reconcile_graph_edges
from .shape import parse_graph
from .validate_graph import validate_graph

__all__ = [
    "ConnectOk",
    "ConnectRejected",
    "ConnectResult",
    "apply_config_change",
    "canvas_edge_to_graph_edge",
    "canvas_node_to_graph_node",
    "compile_graph",
    "connect",
    "control_reachable",
    "find_control_cycle",
    "graph_edge_to_canvas_edge",
    "graph_node_to_canvas_node",
    "parse_graph",
    "reconcile_canvas_edges",
    "reconcile_graph_edges",
    "validate_connect",
    "validate_graph",
    "would_create_cycle",
]
