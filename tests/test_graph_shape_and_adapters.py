from __future__ import annotations

from abilitygraph.graph_ir.adapters import (
    canvas_edge_to_graph_edge,
    canvas_node_to_graph_node,
    edge_label,
    graph_edge_to_canvas_edge,
    graph_node_to_canvas_node,
)
from abilitygraph.graph_ir.shape import parse_graph
from abilitygraph.visual.models import CanvasEdge, PinKind, Severity


def _raw_graph(**overrides):
    raw = {
        "graphVersion": "CJ-GRAPH-1.1",
        "id": "g1",
        "nodes": [
            {"id": "start", "nodeType": "EXEC_START", "position": {"x": 0, "y": 0}, "config": {}},
            {"id": "show", "nodeType": "SHOW_TEXT", "position": {"x": 200, "y": 0}, "config": {"text": "Hi"}},
        ],
        "edges": [
            {
                "id": "e1",
                "edgeKind": "CONTROL",
                "from": {"nodeId": "start", "pinId": "execOut"},
                "to": {"nodeId": "show", "pinId": "execIn"},
            }
        ],
    }
    raw.update(overrides)
    return raw


def test_parse_graph_accepts_editor_json() -> None:
    graph, issues = parse_graph(_raw_graph())
    assert issues == []
    assert graph is not None
    assert graph.edges[0].from_.nodeId == "start"
    assert graph.model_dump(by_alias=True)["edges"][0]["from"] == {"nodeId": "start", "pinId": "execOut"}


def test_parse_graph_warns_on_older_version() -> None:
    graph, issues = parse_graph(_raw_graph(graphVersion="CJ-GRAPH-1.0"))
    assert graph is not None
    assert [(i.severity, i.code) for i in issues] == [(Severity.WARN, "GRAPH_VERSION_OLD")]


def test_parse_graph_rejects_unknown_version() -> None:
    graph, issues = parse_graph(_raw_graph(graphVersion="CJ-GRAPH-9"))
    assert graph is None
    assert issues[0].code == "GRAPH_VERSION"
    assert issues[0].path == "graphVersion"


def test_parse_graph_reports_shape_errors_with_paths() -> None:
    raw = _raw_graph()
    raw["edges"][0]["edgeKind"] = "SIDEWAYS"
    del raw["nodes"][1]["nodeType"]
    graph, issues = parse_graph(raw)
    assert graph is None
    paths = {i.path for i in issues if i.code == "GRAPH_SHAPE"}
    assert "edges[0].edgeKind" in paths
    assert "nodes[1].nodeType" in paths


def test_parse_graph_rejects_non_objects() -> None:
    graph, issues = parse_graph([1, 2])
    assert graph is None
    assert issues[0].code == "GRAPH_SHAPE"


def test_node_adapters_keep_type_config_and_position() -> None:
    graph, _ = parse_graph(_raw_graph())
    node = graph.nodes[1]
    canvas = graph_node_to_canvas_node(node, selected_id="show")
    assert canvas.type == "genericNode"
    assert canvas.selected is True
    assert canvas.data["nodeType"] == "SHOW_TEXT"

    back = canvas_node_to_graph_node(canvas)
    assert back.nodeType == "SHOW_TEXT"
    assert back.config == {"text": "Hi"}
    assert back.position.x == 200


def test_edge_adapters_and_labels(build) -> None:
    data = build.data("d1", "n", "if", "ifCondIn", data_type="boolean")
    canvas = graph_edge_to_canvas_edge(data)
    assert canvas.label == "DATA (boolean)"
    assert (canvas.source, canvas.sourceHandle, canvas.target, canvas.targetHandle) == ("n", "out", "if", "ifCondIn")
    assert canvas_edge_to_graph_edge(canvas) == data

    assert edge_label(build.control("c", "a", "execOut", "b")) == "CONTROL"


def test_canvas_edge_without_data_defaults_to_control() -> None:
    edge = canvas_edge_to_graph_edge(CanvasEdge(id="x", source="a", target="b"))
    assert edge.edgeKind == PinKind.CONTROL
    assert edge.from_.pinId == ""

    labelled = canvas_edge_to_graph_edge(CanvasEdge(id="y", source="a", target="b", label="DATA"))
    assert labelled.edgeKind == PinKind.DATA
