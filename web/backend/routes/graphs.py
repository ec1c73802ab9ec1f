"""Graph validation, compilation and editing endpoints.

All endpoints are stateless: the request carries the graph snapshot and the
response carries the result (or the edited graph).
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException

from abilitygraph.errors import ConnectionRejected, RegistryError
from abilitygraph.graph_ir import apply_config_change, compile_graph, connect, parse_graph, validate_graph

from ..models import CompiledGraphResult, ConnectRequest, Graph, ReconcileRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/graphs", tags=["graphs"])


def _dump_issues(issues) -> list:
    return [i.model_dump(mode="json", exclude_none=True) for i in issues]


@router.post("/validate")
async def validate(raw: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Validate a graph; shape problems are reported the same way as graph problems."""
    graph, shape_issues = parse_graph(raw)
    if graph is None:
        logger.info(f"Rejected graph shape ({len(shape_issues)} issue(s))")
        return {"issues": _dump_issues(shape_issues)}
    try:
        issues = shape_issues + validate_graph(graph)
    except RegistryError as e:
        logger.error(f"Validation failed for graph '{graph.id}': {e}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"Validated graph '{graph.id}': {len(issues)} issue(s)")
    return {"issues": _dump_issues(issues)}


@router.post("/compile", response_model=CompiledGraphResult, response_model_exclude_none=True)
async def compile_(raw: Dict[str, Any] = Body(...)):
    """Compile a graph to steps. Issues are returned next to the (best-effort) steps."""
    graph, shape_issues = parse_graph(raw)
    if graph is None:
        return CompiledGraphResult(steps=[], issues=shape_issues)
    try:
        result = compile_graph(graph)
    except RegistryError as e:
        logger.error(f"Compile failed for graph '{graph.id}': {e}")
        raise HTTPException(status_code=500, detail=str(e))
    logger.info(f"Compiled graph '{graph.id}': {len(result.steps)} step(s), errors={result.has_errors}")
    return result.model_copy(update={"issues": shape_issues + result.issues})


@router.post("/connect")
async def connect_pins(request: ConnectRequest) -> Dict[str, Any]:
    """Add one edge if the connection is legal; 422 with the rejection code otherwise."""
    try:
        graph = connect(
            request.graph,
            request.sourceNodeId,
            request.sourcePinId,
            request.targetNodeId,
            request.targetPinId,
        )
    except ConnectionRejected as e:
        logger.info(f"Connection rejected on graph '{request.graph.id}': {e.code}")
        raise HTTPException(status_code=422, detail={"code": e.code, "reason": e.reason})
    return {
        "edge": graph.edges[-1].model_dump(mode="json", by_alias=True, exclude_none=True),
        "graph": graph.model_dump(mode="json", by_alias=True, exclude_none=True),
    }


@router.post("/reconcile", response_model=Graph, response_model_exclude_none=True)
async def reconcile(request: ReconcileRequest):
    """Apply a node config change and drop edges attached to pins that no longer exist."""
    try:
        graph = apply_config_change(request.graph, request.nodeId, request.config)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]) if e.args else "Not found")
    dropped = len(request.graph.edges) - len(graph.edges)
    logger.info(f"Reconciled node '{request.nodeId}' on graph '{graph.id}': dropped {dropped} edge(s)")
    return graph
