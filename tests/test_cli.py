from __future__ import annotations

import json

from abilitygraph.cli import main
from abilitygraph.nodes.registry import DEFAULT_REGISTRY_PATH


def _write_graph(tmp_path, graph) -> str:
    path = tmp_path / "graph.json"
    path.write_text(json.dumps(graph.model_dump(mode="json", by_alias=True)), encoding="utf-8")
    return str(path)


def test_nodes_lists_registry_by_category(capsys) -> None:
    assert main(["nodes", "--category", "Values"]) == 0
    nodes = json.loads(capsys.readouterr().out)
    assert [n["nodeType"] for n in nodes] == ["CONST_BOOL", "CONST_NUMBER", "CONST_STRING", "GET_VARIABLE"]


def test_pins_materializes_dynamic_pins(capsys) -> None:
    assert main(["--registry", str(DEFAULT_REGISTRY_PATH), "pins", "IF", "--config", '{"elseIfCount": 1}']) == 0
    pins = json.loads(capsys.readouterr().out)
    assert [p["id"] for p in pins][-2:] == ["elseIfCondIn_0", "elseIfExecOut_0"]


def test_pins_unknown_node_type(capsys) -> None:
    assert main(["pins", "TELEPORT"]) == 2
    assert "Unknown nodeType" in capsys.readouterr().err


def test_validate_ok_and_error_exit_codes(tmp_path, capsys, hello_graph, build) -> None:
    assert main(["validate", _write_graph(tmp_path, hello_graph)]) == 0
    assert json.loads(capsys.readouterr().out)["issues"][0]["code"] == "OK"

    broken = build.graph([build.node("show", "SHOW_TEXT", {"text": "x"})])
    assert main(["validate", _write_graph(tmp_path, broken)]) == 1
    codes = [i["code"] for i in json.loads(capsys.readouterr().out)["issues"]]
    assert "MISSING_START" in codes


def test_validate_reports_shape_errors(tmp_path, capsys) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"graphVersion": "nope", "id": "g"}), encoding="utf-8")
    assert main(["validate", str(path)]) == 1
    assert json.loads(capsys.readouterr().out)["issues"][0]["code"] == "GRAPH_VERSION"


def test_compile_writes_steps(tmp_path, capsys, hello_graph) -> None:
    out = tmp_path / "steps.json"
    assert main(["compile", _write_graph(tmp_path, hello_graph), "--out", str(out)]) == 0
    assert capsys.readouterr().out.strip() == str(out)
    result = json.loads(out.read_text(encoding="utf-8"))
    assert result["steps"] == [{"type": "SHOW_TEXT", "text": "Hello"}]
    assert result["sourceMap"] == [{"stepPath": "[0]", "nodeId": "show"}]


def test_missing_graph_file(tmp_path, capsys) -> None:
    assert main(["compile", str(tmp_path / "missing.json")]) == 2
    assert "Failed to read graph" in capsys.readouterr().err


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "usage: abilitygraph" in capsys.readouterr().out
