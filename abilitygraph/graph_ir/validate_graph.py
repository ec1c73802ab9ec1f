"""Whole-graph structural validation.

`validate_graph` looks at one snapshot and reports every problem it finds as a
`ValidationIssue`. It never raises for graph content; only a broken registry
(pin id collisions) propagates as an exception.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional

from ..nodes.config_schema import merge_config_defaults, validate_config_field
from ..nodes.pins import build_pins, data_types_compatible, format_data_type, pin_capacity
from ..nodes.registry import PRIMARY_EXEC_OUT, START_NODE_TYPE, NodeRegistry, get_registry
from ..visual.models import (
    Graph,
    GraphEdge,
    GraphNode,
    NodeDefinition,
    PinDefinition,
    PinDirection,
    PinKind,
    Severity,
    ValidationIssue,
)
from .cycle import control_reachable, find_control_cycle


def _push(
    issues: List[ValidationIssue],
    severity: Severity,
    code: str,
    message: str,
    path: Optional[str] = None,
) -> None:
    issues.append(ValidationIssue(severity=severity, code=code, message=message, path=path))


def _is_pin_connected(edges: List[GraphEdge], node_id: str, pin: PinDefinition) -> bool:
    for e in edges:
        if e.edgeKind != pin.kind:
            continue
        if pin.direction == PinDirection.IN:
            if e.to.nodeId == node_id and e.to.pinId == pin.id:
                return True
        elif e.from_.nodeId == node_id and e.from_.pinId == pin.id:
            return True
    return False


def _check_ids(graph: Graph, issues: List[ValidationIssue]) -> None:
    for pid, count in Counter(n.id for n in graph.nodes).items():
        if count > 1:
            _push(issues, Severity.ERROR, "DUPLICATE_NODE_ID", f"Node id '{pid}' is used {count} times.", f"nodes.{pid}")
    for eid, count in Counter(e.id for e in graph.edges).items():
        if count > 1:
            _push(issues, Severity.ERROR, "DUPLICATE_EDGE_ID", f"Edge id '{eid}' is used {count} times.", f"edges.{eid}")


def _check_config(node: GraphNode, idx: int, definition: NodeDefinition, issues: List[ValidationIssue]) -> None:
    schema = definition.configSchema
    config = merge_config_defaults(schema, node.config)
    required = set(schema.required)
    for key, prop in schema.properties.items():
        problem = validate_config_field(config.get(key), prop, key in required)
        if problem is None:
            continue
        path = f"nodes[{idx}].config.{key}"
        if problem == "Required":
            _push(issues, Severity.ERROR, "CONFIG_REQUIRED", f"{node.nodeType}.{key} is required.", path)
        else:
            _push(issues, Severity.WARN, "CONFIG_INVALID", f"{node.nodeType}.{key}: {problem}.", path)


def _check_edge(
    edge: GraphEdge,
    idx: int,
    nodes: Dict[str, GraphNode],
    pins: Dict[str, List[PinDefinition]],
    issues: List[ValidationIssue],
) -> None:
    path = f"edges[{idx}]"
    if edge.from_.nodeId not in nodes or edge.to.nodeId not in nodes:
        _push(issues, Severity.ERROR, "EDGE_NODE_MISSING", f"Edge '{edge.id}' references a missing node.", path)
        return

    out_pin = next((p for p in pins.get(edge.from_.nodeId, []) if p.id == edge.from_.pinId), None)
    in_pin = next((p for p in pins.get(edge.to.nodeId, []) if p.id == edge.to.pinId), None)
    if out_pin is None or in_pin is None:
        _push(issues, Severity.ERROR, "EDGE_PIN_MISSING", f"Edge '{edge.id}' references a missing pin.", path)
        return

    if out_pin.direction != PinDirection.OUT:
        _push(issues, Severity.ERROR, "PIN_DIRECTION", "Edge source pin must be an OUT pin.", f"{path}.from.pinId")
    if in_pin.direction != PinDirection.IN:
        _push(issues, Severity.ERROR, "PIN_DIRECTION", "Edge target pin must be an IN pin.", f"{path}.to.pinId")

    if out_pin.kind != in_pin.kind:
        _push(
            issues,
            Severity.ERROR,
            "PIN_KIND_MISMATCH",
            f"Pins '{out_pin.id}' ({out_pin.kind.value}) and '{in_pin.id}' ({in_pin.kind.value}) have different kinds.",
            path,
        )
    elif edge.edgeKind != out_pin.kind:
        _push(
            issues,
            Severity.ERROR,
            "EDGE_KIND_INCORRECT",
            f"edgeKind {edge.edgeKind.value} does not match pin kind {out_pin.kind.value}.",
            f"{path}.edgeKind",
        )

    if (
        out_pin.kind == PinKind.DATA
        and in_pin.kind == PinKind.DATA
        and not data_types_compatible(out_pin.dataType, in_pin.dataType)
    ):
        _push(
            issues,
            Severity.ERROR,
            "DATA_TYPE_MISMATCH",
            f"Cannot connect DATA({format_data_type(out_pin.dataType)}) -> DATA({format_data_type(in_pin.dataType)}).",
            path,
        )


def _check_fan_out(
    graph: Graph,
    pins: Dict[str, List[PinDefinition]],
    issues: List[ValidationIssue],
) -> None:
    counts: Counter = Counter(
        (e.from_.nodeId, e.from_.pinId) for e in graph.edges if e.edgeKind == PinKind.CONTROL
    )
    for (node_id, pin_id), count in counts.items():
        pin = next((p for p in pins.get(node_id, []) if p.id == pin_id), None)
        if pin is None or pin.direction != PinDirection.OUT:
            continue
        cap = pin_capacity(pin)
        if cap is not None and count > cap:
            _push(
                issues,
                Severity.ERROR,
                "MULTIPLE_EXEC_OUT",
                f"Control output pin '{pin_id}' on node '{node_id}' has {count} outgoing edges (max {cap}).",
                f"nodes.{node_id}.pins.{pin_id}",
            )


def _has_control_pins(node_pins: List[PinDefinition]) -> bool:
    return any(p.kind == PinKind.CONTROL for p in node_pins)


def validate_graph(graph: Graph, registry: Optional[NodeRegistry] = None) -> List[ValidationIssue]:
    """Validate a whole graph snapshot.

    Returns a flat list of issues. When nothing is wrong the list holds a
    single INFO issue with code `OK`.
    """
    if registry is None:
        registry = get_registry()

    issues: List[ValidationIssue] = []
    nodes: Dict[str, GraphNode] = {}
    for n in graph.nodes:
        nodes.setdefault(n.id, n)

    _check_ids(graph, issues)

    pins: Dict[str, List[PinDefinition]] = {}
    for idx, node in enumerate(graph.nodes):
        definition = registry.lookup(node.nodeType)
        if definition is None:
            _push(issues, Severity.ERROR, "UNKNOWN_NODE", f"Unknown nodeType '{node.nodeType}'", f"nodes[{idx}].nodeType")
            continue
        node_pins = build_pins(definition, node.config)
        pins.setdefault(node.id, node_pins)

        for pin in node_pins:
            if not pin.required or "defaultValue" in pin.model_fields_set:
                continue
            if not _is_pin_connected(graph.edges, node.id, pin):
                _push(
                    issues,
                    Severity.ERROR,
                    "REQUIRED_PIN",
                    f"Pin '{pin.id}' on {node.nodeType} is required but not connected",
                    f"nodes[{idx}].pins.{pin.id}",
                )

        _check_config(node, idx, definition, issues)

    for idx, edge in enumerate(graph.edges):
        _check_edge(edge, idx, nodes, pins, issues)

    _check_fan_out(graph, pins, issues)

    cycle_at = find_control_cycle(graph.edges)
    if cycle_at is not None:
        _push(issues, Severity.ERROR, "CONTROL_CYCLE", "Control flow contains a cycle.", f"nodes.{cycle_at}")

    starts = [n for n in graph.nodes if n.nodeType == START_NODE_TYPE]
    if not starts:
        _push(issues, Severity.ERROR, "MISSING_START", f"Graph requires a {START_NODE_TYPE} node")
    else:
        if len(starts) > 1:
            _push(
                issues,
                Severity.ERROR,
                "MULTIPLE_START",
                f"Graph must contain exactly one {START_NODE_TYPE} node (found {len(starts)}).",
            )
        start = starts[0]
        connected = any(
            e.edgeKind == PinKind.CONTROL and e.from_.nodeId == start.id and e.from_.pinId == PRIMARY_EXEC_OUT
            for e in graph.edges
        )
        if not connected:
            _push(
                issues,
                Severity.ERROR,
                "START_UNCONNECTED",
                f"{START_NODE_TYPE}.{PRIMARY_EXEC_OUT} must connect to another control pin",
                f"nodes.{start.id}.pins.{PRIMARY_EXEC_OUT}",
            )

        reachable = control_reachable(start.id, graph.edges)

        for idx, node in enumerate(graph.nodes):
            if node.id in reachable or not _has_control_pins(pins.get(node.id, [])):
                continue
            _push(
                issues,
                Severity.WARN,
                "UNREACHABLE_NODE",
                f"Node '{node.nodeType}' is not reachable from {START_NODE_TYPE}.",
                f"nodes[{idx}]",
            )

    if not issues:
        _push(issues, Severity.INFO, "OK", "Graph is valid.")
    return issues
