from __future__ import annotations

import pytest

from abilitygraph.graph_ir.adapters import graph_edge_to_canvas_edge
from abilitygraph.graph_ir.reconcile import apply_config_change, reconcile_canvas_edges, reconcile_graph_edges
from abilitygraph.nodes.pins import materialize_pins


@pytest.fixture
def two_else_if_graph(build):
    return build.graph(
        [
            build.node("start", "EXEC_START"),
            build.node("if", "IF", {"elseIfCount": 2}),
            build.node("c0", "CONST_BOOL"),
            build.node("c1", "CONST_BOOL"),
            build.node("t0", "SHOW_TEXT", {"text": "0"}),
            build.node("t1", "SHOW_TEXT", {"text": "1"}),
        ],
        [
            build.control("e-start", "start", "execOut", "if"),
            build.data("d-c0", "c0", "if", "elseIfCondIn_0"),
            build.data("d-c1", "c1", "if", "elseIfCondIn_1"),
            build.control("e-t0", "if", "elseIfExecOut_0", "t0"),
            build.control("e-t1", "if", "elseIfExecOut_1", "t1"),
        ],
    )


def test_shrinking_else_if_count_drops_only_vanished_pin_edges(registry, two_else_if_graph) -> None:
    old = materialize_pins("IF", {"elseIfCount": 2}, registry)
    new = materialize_pins("IF", {"elseIfCount": 1}, registry)
    kept = reconcile_graph_edges("if", old, new, two_else_if_graph.edges)
    assert [e.id for e in kept] == ["e-start", "d-c0", "e-t0"]


def test_unchanged_pins_keep_every_edge(registry, two_else_if_graph) -> None:
    pins = materialize_pins("IF", {"elseIfCount": 2}, registry)
    kept = reconcile_graph_edges("if", pins, pins, two_else_if_graph.edges)
    assert kept == two_else_if_graph.edges


def test_edges_of_other_nodes_with_same_pin_ids_are_kept(registry, build) -> None:
    old = materialize_pins("IF", {"elseIfCount": 1}, registry)
    new = materialize_pins("IF", {"elseIfCount": 0}, registry)
    edges = [build.control("other", "if2", "elseIfExecOut_0", "t")]
    assert reconcile_graph_edges("if", old, new, edges) == edges


def test_canvas_edges_reconcile_the_same_way(registry, two_else_if_graph) -> None:
    old = materialize_pins("IF", {"elseIfCount": 2}, registry)
    new = materialize_pins("IF", {"elseIfCount": 1}, registry)
    canvas = [graph_edge_to_canvas_edge(e) for e in two_else_if_graph.edges]
    kept = reconcile_canvas_edges("if", old, new, canvas)
    assert [e.id for e in kept] == [e.id for e in reconcile_graph_edges("if", old, new, two_else_if_graph.edges)]


def test_apply_config_change_updates_node_and_edges(registry, two_else_if_graph) -> None:
    updated = apply_config_change(two_else_if_graph, "if", {"elseIfCount": 1}, registry)

    node = next(n for n in updated.nodes if n.id == "if")
    assert node.config == {"elseIfCount": 1}
    assert node.pinsCache == [
        "execIn",
        "ifCondIn",
        "thenExecOut",
        "elseExecOut",
        "execOut",
        "elseIfCondIn_0",
        "elseIfExecOut_0",
    ]
    assert [e.id for e in updated.edges] == ["e-start", "d-c0", "e-t0"]
    # input snapshot is untouched
    assert len(two_else_if_graph.edges) == 5
    assert two_else_if_graph.nodes[1].config == {"elseIfCount": 2}


def test_apply_config_change_unknown_node(registry, two_else_if_graph) -> None:
    with pytest.raises(KeyError):
        apply_config_change(two_else_if_graph, "nope", {}, registry)
