"""Pydantic models for the ability graph IR.

Field names follow the editor's camelCase JSON so graphs authored on the canvas
can be validated with `Graph.model_validate(...)` and written back with
`model_dump(by_alias=True)` without a translation layer.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


GRAPH_SUPPORTED_VERSIONS = ["CJ-GRAPH-1.0", "CJ-GRAPH-1.1"]
GRAPH_CURRENT_VERSION = GRAPH_SUPPORTED_VERSIONS[-1]

# Data types that accept any other type on either side of a DATA edge.
WILDCARD_DATA_TYPES = frozenset({"any", "json"})


class PinKind(str, Enum):
    """What travels along an edge attached to the pin."""

    CONTROL = "CONTROL"  # execution order
    DATA = "DATA"  # values


class PinDirection(str, Enum):
    IN = "IN"
    OUT = "OUT"


class Severity(str, Enum):
    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"


# A single tag ("number") or a union of tags (["number", "string"]).
DataType = Union[str, List[str]]


class PinDefinition(BaseModel):
    """A connection point on a node instance."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str = ""
    group: Optional[str] = None
    kind: PinKind
    direction: PinDirection
    dataType: Optional[DataType] = None
    required: bool = False
    defaultValue: Optional[Any] = None
    multi: bool = False
    maxConnections: Optional[int] = Field(default=None, ge=0)


class DynamicPinSpec(BaseModel):
    """One pin of a repeated group; `{i}` / `{n}` are filled per index."""

    model_config = ConfigDict(frozen=True)

    idTemplate: str
    labelTemplate: str = ""
    group: Optional[str] = None
    kind: PinKind
    direction: PinDirection
    dataType: Optional[DataType] = None
    required: bool = False
    defaultValue: Optional[Any] = None
    multi: bool = False
    maxConnections: Optional[int] = Field(default=None, ge=0)


class DynamicPinTemplate(BaseModel):
    """Pins repeated `config[sourceField]` times (e.g. IF else-if slots)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["REPEAT"] = "REPEAT"
    sourceField: str
    pinsPerIndex: List[DynamicPinSpec] = Field(default_factory=list)


class NodePins(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    static: List[PinDefinition] = Field(default_factory=list)
    dynamic: Optional[DynamicPinTemplate] = None


class ConfigPropertySchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Optional[Literal["string", "number", "integer", "boolean", "object", "array"]] = None
    title: Optional[str] = None
    description: Optional[str] = None
    default: Optional[Any] = None
    enum: Optional[List[Any]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


class ConfigSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    properties: Dict[str, ConfigPropertySchema] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Compile descriptors (closed set, discriminated by `kind`)
# ---------------------------------------------------------------------------


class ValueInput(BaseModel):
    """A step field whose value comes from a DATA input pin."""

    model_config = ConfigDict(frozen=True)

    field: str
    pin: str
    fallback: Optional[Dict[str, Any]] = None


class BranchOutput(BaseModel):
    """A step field holding the steps compiled from one control output."""

    model_config = ConfigDict(frozen=True)

    field: str
    pin: str


class ElseIfClauses(BaseModel):
    """Numbered condition/output pin pairs compiled into `field` clauses."""

    model_config = ConfigDict(frozen=True)

    field: str = "elseIf"
    conditionPinPrefix: str = "elseIfCondIn_"
    outputPinPrefix: str = "elseIfExecOut_"


class EntryCompile(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["ENTRY"] = "ENTRY"
    execOut: str = "execOut"


class LinearStepCompile(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["LINEAR_STEP"] = "LINEAR_STEP"
    stepType: str
    # step field -> config key
    configFields: Dict[str, str] = Field(default_factory=dict)
    stringFields: List[str] = Field(default_factory=list)
    valueInputs: List[ValueInput] = Field(default_factory=list)
    execOut: str = "execOut"


class BranchStepCompile(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["BRANCH_STEP"] = "BRANCH_STEP"
    stepType: str
    conditionField: str = "condition"
    conditionPin: str
    configFields: Dict[str, str] = Field(default_factory=dict)
    stringFields: List[str] = Field(default_factory=list)
    branches: List[BranchOutput] = Field(default_factory=list)
    elseIf: Optional[ElseIfClauses] = None
    # pass-through output compiled after the branch step, when the node has one
    continuation: Optional[str] = None


class LiteralCompile(BaseModel):
    """A constant node; resolves to `{type: leafType, value: config[valueField]}`."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["LITERAL"] = "LITERAL"
    provides: Literal["CONDITION", "VALUE"]
    leafType: str
    valueField: str = "value"


class ExpressionCompile(BaseModel):
    """A data node the compiler does not lower (falls back to default leaves)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["EXPRESSION"] = "EXPRESSION"
    exprType: str


CompileDescriptor = Annotated[
    Union[EntryCompile, LinearStepCompile, BranchStepCompile, LiteralCompile, ExpressionCompile],
    Field(discriminator="kind"),
]


class NodeDefinition(BaseModel):
    """A registry entry: config schema + pin templates + compile descriptor."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    nodeType: str
    label: str
    category: str
    description: str = ""
    configSchema: ConfigSchema = Field(default_factory=ConfigSchema)
    pins: NodePins = Field(default_factory=NodePins)
    compile: CompileDescriptor


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


class Position(BaseModel):
    """2D position on canvas."""

    x: float = 0.0
    y: float = 0.0


class PinEndpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    nodeId: str
    pinId: str


class GraphNode(BaseModel):
    """A node instance in an ability graph."""

    id: str
    nodeType: str
    position: Position = Field(default_factory=Position)
    config: Dict[str, Any] = Field(default_factory=dict)
    # Derived from (nodeType, config); refreshed by `apply_config_change`.
    pinsCache: Optional[List[str]] = None


class GraphEdge(BaseModel):
    """A CONTROL or DATA connection between two pins."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    edgeKind: PinKind
    dataType: Optional[DataType] = None
    from_: PinEndpoint = Field(alias="from")
    to: PinEndpoint
    createdAt: Optional[str] = None


class Graph(BaseModel):
    """A complete ability graph snapshot."""

    graphVersion: str = GRAPH_CURRENT_VERSION
    id: str
    label: Optional[str] = None
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


class CanvasEdge(BaseModel):
    """Edge as the canvas library stores it (handles instead of endpoints)."""

    id: str
    source: str
    sourceHandle: Optional[str] = None
    target: str
    targetHandle: Optional[str] = None
    label: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class CanvasNode(BaseModel):
    """Node as the canvas library stores it."""

    id: str
    type: str = "genericNode"
    position: Position = Field(default_factory=Position)
    data: Dict[str, Any] = Field(default_factory=dict)
    selected: bool = False


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class ValidationIssue(BaseModel):
    severity: Severity
    code: str
    message: str
    path: Optional[str] = None


class SourceMapEntry(BaseModel):
    stepPath: str
    nodeId: str


class CompiledGraphResult(BaseModel):
    """Steps compiled from a graph plus the validator's issues."""

    steps: List[Dict[str, Any]] = Field(default_factory=list)
    issues: List[ValidationIssue] = Field(default_factory=list)
    sourceMap: List[SourceMapEntry] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.severity == Severity.ERROR for i in self.issues)


class ConnectRequest(BaseModel):
    """Request to check (and build) one connection."""

    graph: Graph
    sourceNodeId: str
    sourcePinId: str
    targetNodeId: str
    targetPinId: str


class ReconcileRequest(BaseModel):
    """Request to change a node's config and prune edges to vanished pins."""

    graph: Graph
    nodeId: str
    config: Dict[str, Any] = Field(default_factory=dict)
