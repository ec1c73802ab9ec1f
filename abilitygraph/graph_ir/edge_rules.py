"""Edge legality: can this (source pin -> target pin) connection be added?

`validate_connect` runs a fixed sequence of checks and stops at the first
failure, so the editor always gets exactly one reason per rejected attempt.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from ..errors import ConnectionRejected
from ..nodes.pins import data_types_compatible, find_pin, format_data_type, pin_capacity
from ..nodes.registry import NodeRegistry
from ..visual.models import Graph, GraphEdge, GraphNode, PinDirection, PinEndpoint, PinKind
from .cycle import would_create_cycle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectOk:
    edge: GraphEdge
    ok: bool = True


@dataclass(frozen=True)
class ConnectRejected:
    code: str
    reason: str
    ok: bool = False


ConnectResult = Union[ConnectOk, ConnectRejected]


def _find_node(graph: Graph, node_id: str) -> Optional[GraphNode]:
    for n in graph.nodes:
        if n.id == node_id:
            return n
    return None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_connect(
    graph: Graph,
    source_node_id: str,
    source_pin_id: str,
    target_node_id: str,
    target_pin_id: str,
    *,
    registry: Optional[NodeRegistry] = None,
) -> ConnectResult:
    """Check one prospective connection against `graph` without modifying it."""
    source_pin = find_pin(_find_node(graph, source_node_id), source_pin_id, registry)
    target_pin = find_pin(_find_node(graph, target_node_id), target_pin_id, registry)

    def reject(code: str, reason: str) -> ConnectRejected:
        logger.debug(f"Rejected {source_node_id}.{source_pin_id} -> {target_node_id}.{target_pin_id}: {code}")
        return ConnectRejected(code=code, reason=reason)

    if source_pin is None:
        return reject("SOURCE_PIN_MISSING", f"Source pin '{source_pin_id}' was not found on node '{source_node_id}'.")
    if target_pin is None:
        return reject("TARGET_PIN_MISSING", f"Target pin '{target_pin_id}' was not found on node '{target_node_id}'.")

    if source_pin.direction != PinDirection.OUT:
        return reject(
            "SOURCE_NOT_OUT",
            f"Cannot start from an {source_pin.direction.value} pin. Only OUT pins can be sources.",
        )
    if target_pin.direction != PinDirection.IN:
        return reject("TARGET_NOT_IN", f"Target must be an IN pin (found {target_pin.direction.value}).")

    if source_node_id == target_node_id:
        return reject("SELF_EDGE", "Self-connections are not allowed.")

    if source_pin.kind != target_pin.kind:
        return reject("KIND_MISMATCH", f"Cannot connect {source_pin.kind.value} -> {target_pin.kind.value}.")

    edge_kind = source_pin.kind
    if edge_kind == PinKind.DATA and not data_types_compatible(source_pin.dataType, target_pin.dataType):
        return reject(
            "DATA_TYPE_MISMATCH",
            f"Type mismatch: cannot connect DATA({format_data_type(source_pin.dataType)}) "
            f"-> DATA({format_data_type(target_pin.dataType)}).",
        )

    for e in graph.edges:
        if (
            e.edgeKind == edge_kind
            and e.from_.nodeId == source_node_id
            and e.from_.pinId == source_pin_id
            and e.to.nodeId == target_node_id
            and e.to.pinId == target_pin_id
        ):
            return reject("DUPLICATE", "This connection already exists.")

    incoming = sum(
        1
        for e in graph.edges
        if e.edgeKind == edge_kind and e.to.nodeId == target_node_id and e.to.pinId == target_pin_id
    )
    max_in = pin_capacity(target_pin)
    if max_in is not None and incoming >= max_in:
        return reject(
            "TARGET_AT_MAX",
            f"Pin already connected (max {max_in}). Set pin.multi=true to allow more.",
        )

    data_type = None
    if edge_kind == PinKind.DATA:
        data_type = source_pin.dataType if source_pin.dataType is not None else target_pin.dataType

    edge = GraphEdge(
        id=str(uuid.uuid4()),
        edgeKind=edge_kind,
        dataType=data_type,
        from_=PinEndpoint(nodeId=source_node_id, pinId=source_pin_id),
        to=PinEndpoint(nodeId=target_node_id, pinId=target_pin_id),
        createdAt=_now_iso(),
    )

    if edge_kind == PinKind.CONTROL and would_create_cycle(graph.edges, edge):
        return reject("CONTROL_CYCLE", "Would create a CONTROL cycle (not allowed).")

    return ConnectOk(edge=edge)


def connect(
    graph: Graph,
    source_node_id: str,
    source_pin_id: str,
    target_node_id: str,
    target_pin_id: str,
    *,
    registry: Optional[NodeRegistry] = None,
) -> Graph:
    """Return a copy of `graph` with the new edge appended.

    Raises ConnectionRejected when `validate_connect` refuses the edge.
    """
    result = validate_connect(
        graph, source_node_id, source_pin_id, target_node_id, target_pin_id, registry=registry
    )
    if isinstance(result, ConnectRejected):
        raise ConnectionRejected(result.code, result.reason)
    return graph.model_copy(update={"edges": [*graph.edges, result.edge]})
