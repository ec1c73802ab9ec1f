"""Shared fixtures for abilitygraph tests.

`build` gives terse constructors for graph snapshots so each test can spell
out its wiring in a few lines.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from abilitygraph.nodes.registry import DEFAULT_REGISTRY_PATH, NodeRegistry, load_registry
from abilitygraph.visual.models import Graph, GraphEdge, GraphNode, PinEndpoint, PinKind


def make_node(node_id: str, node_type: str, config: Optional[Dict[str, Any]] = None) -> GraphNode:
    return GraphNode(id=node_id, nodeType=node_type, config=dict(config or {}))


def control_edge(edge_id: str, src: str, src_pin: str, dst: str, dst_pin: str = "execIn") -> GraphEdge:
    return GraphEdge(
        id=edge_id,
        edgeKind=PinKind.CONTROL,
        from_=PinEndpoint(nodeId=src, pinId=src_pin),
        to=PinEndpoint(nodeId=dst, pinId=dst_pin),
    )


def data_edge(edge_id: str, src: str, dst: str, dst_pin: str, src_pin: str = "out", data_type: Any = None) -> GraphEdge:
    return GraphEdge(
        id=edge_id,
        edgeKind=PinKind.DATA,
        dataType=data_type,
        from_=PinEndpoint(nodeId=src, pinId=src_pin),
        to=PinEndpoint(nodeId=dst, pinId=dst_pin),
    )


def make_graph(nodes: List[GraphNode], edges: Optional[List[GraphEdge]] = None, graph_id: str = "g1") -> Graph:
    return Graph(id=graph_id, nodes=list(nodes), edges=list(edges or []))


@pytest.fixture
def registry() -> NodeRegistry:
    return load_registry(DEFAULT_REGISTRY_PATH)


@pytest.fixture
def build() -> SimpleNamespace:
    return SimpleNamespace(node=make_node, control=control_edge, data=data_edge, graph=make_graph)


@pytest.fixture
def hello_graph() -> Graph:
    """Start -> Show Text("Hello")."""
    return make_graph(
        [make_node("start", "EXEC_START"), make_node("show", "SHOW_TEXT", {"text": "Hello"})],
        [control_edge("e1", "start", "execOut", "show")],
    )


@pytest.fixture
def if_graph() -> Graph:
    """Start -> IF(true) with one else-if(false); each branch shows a line of text."""
    return make_graph(
        [
            make_node("start", "EXEC_START"),
            make_node("if", "IF", {"elseIfCount": 1}),
            make_node("trueCond", "CONST_BOOL", {"value": True}),
            make_node("falseCond", "CONST_BOOL", {"value": False}),
            make_node("thenText", "SHOW_TEXT", {"text": "then"}),
            make_node("elseIfText", "SHOW_TEXT", {"text": "elseif"}),
            make_node("elseText", "SHOW_TEXT", {"text": "else"}),
        ],
        [
            control_edge("e-start-if", "start", "execOut", "if"),
            data_edge("e-if-cond", "trueCond", "if", "ifCondIn", data_type="boolean"),
            data_edge("e-elseif-cond", "falseCond", "if", "elseIfCondIn_0", data_type="boolean"),
            control_edge("e-then", "if", "thenExecOut", "thenText"),
            control_edge("e-elseif", "if", "elseIfExecOut_0", "elseIfText"),
            control_edge("e-else", "if", "elseExecOut", "elseText"),
        ],
    )
