"""abilitygraph - node-graph IR for game abilities.

Authors wire nodes on a canvas; this package checks the wiring, validates the
whole graph and compiles it into the step list the ability runtime executes.
"""

__version__ = "0.1.0"

from .errors import (
    AbilityGraphError,
    ConnectionRejected,
    PinCollisionError,
    RegistryError,
    UnknownCompileKindError,
)
from .graph_ir import (
    apply_config_change,
    compile_graph,
    connect,
    parse_graph,
    reconcile_graph_edges,
    validate_connect,
    validate_graph,
)
from .nodes import NodeRegistry, get_node_def, get_registry, load_registry, materialize_pins
from .visual.models import CompiledGraphResult, Graph, GraphEdge, GraphNode, ValidationIssue

__all__ = [
    "AbilityGraphError",
    "CompiledGraphResult",
    "ConnectionRejected",
    "Graph",
    "GraphEdge",
    "GraphNode",
    "NodeRegistry",
    "PinCollisionError",
    "RegistryError",
    "UnknownCompileKindError",
    "ValidationIssue",
    "apply_config_change",
    "compile_graph",
    "connect",
    "get_node_def",
    "get_registry",
    "load_registry",
    "materialize_pins",
    "parse_graph",
    "reconcile_graph_edges",
    "validate_connect",
    "validate_graph",
]
