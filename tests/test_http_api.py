from __future__ import annotations

from fastapi.testclient import TestClient

from web.backend.main import app


def _dump(graph) -> dict:
    return graph.model_dump(mode="json", by_alias=True)


def test_health() -> None:
    with TestClient(app) as client:
        r = client.get("/api/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "healthy"
        assert body["nodeTypes"] > 0


def test_node_catalog_endpoints() -> None:
    with TestClient(app) as client:
        r = client.get("/api/nodes", params={"category": "Flow"})
        assert r.status_code == 200
        assert [n["nodeType"] for n in r.json()] == ["EXEC_START", "IF", "REQUIRE", "REGISTER_LISTENER"]

        r = client.get("/api/nodes/IF")
        assert r.status_code == 200
        assert r.json()["compile"]["kind"] == "BRANCH_STEP"

        assert client.get("/api/nodes/TELEPORT").status_code == 404

        r = client.get("/api/nodes/REQUIRE/defaults")
        assert r.json() == {"mode": "ABORT"}

        r = client.post("/api/nodes/IF/pins", json={"elseIfCount": 2})
        assert r.status_code == 200
        assert len(r.json()) == 9


def test_validate_and_compile(hello_graph) -> None:
    with TestClient(app) as client:
        r = client.post("/api/graphs/validate", json=_dump(hello_graph))
        assert r.status_code == 200
        assert [i["code"] for i in r.json()["issues"]] == ["OK"]

        r = client.post("/api/graphs/compile", json=_dump(hello_graph))
        assert r.status_code == 200
        assert r.json()["steps"] == [{"type": "SHOW_TEXT", "text": "Hello"}]

        r = client.post("/api/graphs/compile", json={"id": "g", "graphVersion": "CJ-GRAPH-0"})
        assert r.status_code == 200
        assert r.json()["steps"] == []
        assert r.json()["issues"][0]["code"] == "GRAPH_VERSION"


def test_connect_accepts_and_rejects(build) -> None:
    graph = build.graph(
        [build.node("start", "EXEC_START"), build.node("show", "SHOW_TEXT", {"text": "x"}), build.node("num", "CONST_NUMBER")]
    )
    request = {
        "graph": _dump(graph),
        "sourceNodeId": "start",
        "sourcePinId": "execOut",
        "targetNodeId": "show",
        "targetPinId": "execIn",
    }
    with TestClient(app) as client:
        r = client.post("/api/graphs/connect", json=request)
        assert r.status_code == 200
        body = r.json()
        assert body["edge"]["from"] == {"nodeId": "start", "pinId": "execOut"}
        assert len(body["graph"]["edges"]) == 1

        request["graph"] = body["graph"]
        r = client.post("/api/graphs/connect", json=request)
        assert r.status_code == 422
        assert r.json()["detail"]["code"] == "DUPLICATE"


def test_reconcile(build) -> None:
    graph = build.graph(
        [build.node("if", "IF", {"elseIfCount": 1}), build.node("t", "SHOW_TEXT", {"text": "t"})],
        [build.control("e1", "if", "elseIfExecOut_0", "t")],
    )
    with TestClient(app) as client:
        r = client.post("/api/graphs/reconcile", json={"graph": _dump(graph), "nodeId": "if", "config": {"elseIfCount": 0}})
        assert r.status_code == 200
        body = r.json()
        assert body["edges"] == []
        assert body["nodes"][0]["config"] == {"elseIfCount": 0}

        r = client.post("/api/graphs/reconcile", json={"graph": _dump(graph), "nodeId": "ghost", "config": {}})
        assert r.status_code == 404


def test_validate_reports_registry_failure_as_server_error(hello_graph, monkeypatch) -> None:
    from abilitygraph.errors import RegistryError
    from web.backend.routes import graphs as graphs_module

    def _broken(graph):
        raise RegistryError("registry file missing")

    monkeypatch.setattr(graphs_module, "validate_graph", _broken)
    with TestClient(app) as client:
        r = client.post("/api/graphs/validate", json=_dump(hello_graph))
        assert r.status_code == 500
        assert r.json()["detail"] == "registry file missing"
