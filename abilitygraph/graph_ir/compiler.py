"""Graph compiler - lowers an ability graph to the runtime's canonical steps.

The walk starts at the EXEC_START node and follows CONTROL edges depth-first.
Each node's compile descriptor decides what it emits:

- ENTRY: nothing; the walk continues through its control output.
- LINEAR_STEP: one step built from the node config, then its continuation.
- BRANCH_STEP: one step holding a condition plus nested step lists compiled
  from each branch output, then the optional pass-through continuation.
- LITERAL / EXPRESSION: data-only nodes, never emitted as steps. Literals are
  embedded where a condition or value pin reads from them.

A node is emitted at most once per compile. When two branches rejoin at a
shared node, the first branch to reach it owns it.

Chains and fan-out are walked with an explicit stack; only nested branch
bodies recurse, so depth is bounded by branch nesting, not graph length.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..errors import UnknownCompileKindError
from ..nodes.config_schema import merge_config_defaults
from ..nodes.pins import dynamic_pin_count
from ..nodes.registry import START_NODE_TYPE, NodeRegistry, get_registry
from ..visual.models import (
    BranchStepCompile,
    CompiledGraphResult,
    EntryCompile,
    ExpressionCompile,
    Graph,
    GraphEdge,
    GraphNode,
    LinearStepCompile,
    LiteralCompile,
    NodeDefinition,
    PinKind,
    SourceMapEntry,
)
from .validate_graph import validate_graph

logger = logging.getLogger(__name__)

Step = Dict[str, Any]
ALWAYS_CONDITION: Dict[str, Any] = {"type": "ALWAYS"}


@dataclass
class _Compiled:
    """Steps of one sequence plus their source map (paths relative to it)."""

    steps: List[Step] = field(default_factory=list)
    source_map: List[SourceMapEntry] = field(default_factory=list)


@dataclass
class _NodeOutput:
    step: Optional[Step] = None
    # (step path suffix, compiled body) for each nested list inside `step`
    nested: List[Tuple[str, _Compiled]] = field(default_factory=list)
    next_pin: Optional[str] = None


def _as_number(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    try:
        f = float(str(value))
    except (TypeError, ValueError):
        return 0
    return int(f) if f.is_integer() else f


def _literal_value(descriptor: LiteralCompile, value: Any) -> Any:
    if descriptor.provides == "CONDITION":
        return bool(value)
    if descriptor.leafType == "CONST_NUMBER":
        return _as_number(value)
    if descriptor.leafType == "CONST_STRING":
        return "" if value is None else str(value)
    return value


class _CompileContext:
    def __init__(self, graph: Graph, registry: NodeRegistry):
        self.graph = graph
        self.registry = registry
        self.visited: Set[str] = set()
        self.nodes: Dict[str, GraphNode] = {}
        for n in graph.nodes:
            self.nodes.setdefault(n.id, n)

        self._control_out: Dict[Tuple[str, str], List[GraphEdge]] = {}
        self._data_in: Dict[Tuple[str, str], List[GraphEdge]] = {}
        for e in graph.edges:
            if e.edgeKind == PinKind.CONTROL:
                self._control_out.setdefault((e.from_.nodeId, e.from_.pinId), []).append(e)
            else:
                self._data_in.setdefault((e.to.nodeId, e.to.pinId), []).append(e)

    def control_targets(self, node_id: str, pin_id: str) -> List[str]:
        return [e.to.nodeId for e in self._control_out.get((node_id, pin_id), [])]

    # -- leaves ---------------------------------------------------------------

    def _literal_leaf(self, node: GraphNode, pin_id: str, provides: Optional[str] = None) -> Optional[Step]:
        """Literal feeding `pin_id`, or None. `provides=None` accepts any literal."""
        incoming = self._data_in.get((node.id, pin_id), [])
        if not incoming:
            return None
        source = self.nodes.get(incoming[0].from_.nodeId)
        if source is None:
            return None
        definition = self.registry.lookup(source.nodeType)
        if definition is None:
            return None
        descriptor = definition.compile
        if not isinstance(descriptor, LiteralCompile) or (provides is not None and descriptor.provides != provides):
            return None
        config = merge_config_defaults(definition.configSchema, source.config)
        return {"type": descriptor.leafType, "value": _literal_value(descriptor, config.get(descriptor.valueField))}

    def condition_from_pin(self, node: GraphNode, pin_id: str) -> Step:
        leaf = self._literal_leaf(node, pin_id, "CONDITION")
        return leaf if leaf is not None else dict(ALWAYS_CONDITION)

    def value_from_pin(self, node: GraphNode, pin_id: str, fallback: Optional[Step]) -> Optional[Step]:
        leaf = self._literal_leaf(node, pin_id)
        if leaf is not None:
            return leaf
        return dict(fallback) if fallback is not None else None

    # -- walk -----------------------------------------------------------------

    def compile_sequence(self, targets: List[str]) -> _Compiled:
        out = _Compiled()
        stack = list(reversed(targets))
        while stack:
            node_id = stack.pop()
            if node_id in self.visited:
                continue
            node = self.nodes.get(node_id)
            if node is None:
                continue
            self.visited.add(node_id)

            definition = self.registry.lookup(node.nodeType)
            if definition is None:
                continue
            result = compile_node(self, node, definition)

            if result.step is not None:
                idx = len(out.steps)
                out.steps.append(result.step)
                out.source_map.append(SourceMapEntry(stepPath=f"[{idx}]", nodeId=node.id))
                for suffix, body in result.nested:
                    for entry in body.source_map:
                        out.source_map.append(
                            SourceMapEntry(stepPath=f"[{idx}].{suffix}{entry.stepPath}", nodeId=entry.nodeId)
                        )

            if result.next_pin:
                stack.extend(reversed(self.control_targets(node.id, result.next_pin)))
        return out

    def compile_branch(self, node: GraphNode, pin_id: str) -> _Compiled:
        return self.compile_sequence(self.control_targets(node.id, pin_id))


def _config_fields(
    definition: NodeDefinition, node: GraphNode, fields: Dict[str, str], string_fields: List[str]
) -> Step:
    config = merge_config_defaults(definition.configSchema, node.config)
    out: Step = {}
    for step_field, key in fields.items():
        value = config.get(key)
        if value is None:
            continue
        out[step_field] = str(value) if step_field in string_fields else value
    return out


def _compile_entry(ctx: _CompileContext, node: GraphNode, definition: NodeDefinition) -> _NodeOutput:
    descriptor = definition.compile
    assert isinstance(descriptor, EntryCompile)
    return _NodeOutput(next_pin=descriptor.execOut)


def _compile_linear(ctx: _CompileContext, node: GraphNode, definition: NodeDefinition) -> _NodeOutput:
    descriptor = definition.compile
    assert isinstance(descriptor, LinearStepCompile)
    step: Step = {"type": descriptor.stepType}
    step.update(_config_fields(definition, node, descriptor.configFields, descriptor.stringFields))
    for vi in descriptor.valueInputs:
        expr = ctx.value_from_pin(node, vi.pin, vi.fallback)
        if expr is not None:
            step[vi.field] = expr
    return _NodeOutput(step=step, next_pin=descriptor.execOut)


def _compile_branch(ctx: _CompileContext, node: GraphNode, definition: NodeDefinition) -> _NodeOutput:
    """Branch step; else-if clauses are compiled between the first branch and the rest."""
    descriptor = definition.compile
    assert isinstance(descriptor, BranchStepCompile)
    step: Step = {"type": descriptor.stepType}
    step[descriptor.conditionField] = ctx.condition_from_pin(node, descriptor.conditionPin)
    step.update(_config_fields(definition, node, descriptor.configFields, descriptor.stringFields))

    nested: List[Tuple[str, _Compiled]] = []
    branches = list(descriptor.branches)

    def _emit_branch(field_name: str, pin_id: str) -> None:
        body = ctx.compile_branch(node, pin_id)
        step[field_name] = body.steps
        nested.append((field_name, body))

    if branches:
        _emit_branch(branches[0].field, branches[0].pin)

    clauses = descriptor.elseIf
    if clauses is not None:
        entries: List[Step] = []
        for i in range(dynamic_pin_count(definition, node.config)):
            condition = ctx.condition_from_pin(node, f"{clauses.conditionPinPrefix}{i}")
            body = ctx.compile_branch(node, f"{clauses.outputPinPrefix}{i}")
            entries.append({"condition": condition, "then": body.steps})
            nested.append((f"{clauses.field}[{i}].then", body))
        step[clauses.field] = entries

    for branch in branches[1:]:
        _emit_branch(branch.field, branch.pin)

    return _NodeOutput(step=step, nested=nested, next_pin=descriptor.continuation)


def _compile_data_node(ctx: _CompileContext, node: GraphNode, definition: NodeDefinition) -> _NodeOutput:
    return _NodeOutput()


_NODE_COMPILERS: Dict[type, Callable[[_CompileContext, GraphNode, NodeDefinition], _NodeOutput]] = {
    EntryCompile: _compile_entry,
    LinearStepCompile: _compile_linear,
    BranchStepCompile: _compile_branch,
    LiteralCompile: _compile_data_node,
    ExpressionCompile: _compile_data_node,
}


def compile_node(ctx: _CompileContext, node: GraphNode, definition: NodeDefinition) -> _NodeOutput:
    handler = _NODE_COMPILERS.get(type(definition.compile))
    if handler is None:
        raise UnknownCompileKindError(
            f"Node type '{definition.nodeType}' has unsupported compile kind "
            f"'{getattr(definition.compile, 'kind', type(definition.compile).__name__)}'"
        )
    return handler(ctx, node, definition)


def compile_graph(graph: Graph, registry: Optional[NodeRegistry] = None) -> CompiledGraphResult:
    """Compile `graph` into canonical steps.

    Always validates first and returns the validator's issues with whatever
    steps could be produced, so callers can show a preview next to errors.
    A graph without a start node compiles to an empty step list.
    """
    if registry is None:
        registry = get_registry()

    issues = validate_graph(graph, registry)
    start = next((n for n in graph.nodes if n.nodeType == START_NODE_TYPE), None)
    if start is None:
        return CompiledGraphResult(steps=[], issues=issues)

    ctx = _CompileContext(graph, registry)
    compiled = ctx.compile_sequence([start.id])
    logger.debug(f"Compiled graph '{graph.id}': {len(compiled.steps)} top-level steps, {len(ctx.visited)} nodes visited")
    return CompiledGraphResult(steps=compiled.steps, issues=issues, sourceMap=compiled.source_map)
