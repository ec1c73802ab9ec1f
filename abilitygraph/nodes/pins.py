"""Pin materialization: (nodeType, config) -> ordered concrete pins.

Pins are never stored as the source of truth; they are recomputed from the
node definition and the node's config every time they are needed.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..errors import PinCollisionError
from ..visual.models import (
    WILDCARD_DATA_TYPES,
    DataType,
    DynamicPinTemplate,
    GraphNode,
    NodeDefinition,
    PinDefinition,
)
from .config_schema import coerce_count

if TYPE_CHECKING:
    from .registry import NodeRegistry


def _fill(template: str, index: int) -> str:
    return template.replace("{i}", str(index)).replace("{n}", str(index + 1))


def dynamic_pin_count(definition: NodeDefinition, config: Optional[Dict[str, Any]]) -> int:
    template = definition.pins.dynamic
    if template is None:
        return 0
    raw = config.get(template.sourceField) if isinstance(config, dict) else None
    prop = definition.configSchema.properties.get(template.sourceField)
    return coerce_count(raw, prop)


def _expand_template(template: DynamicPinTemplate, count: int) -> List[PinDefinition]:
    pins: List[PinDefinition] = []
    for i in range(count):
        for spec in template.pinsPerIndex:
            # exclude_unset keeps an explicit `defaultValue: null` distinguishable from no default
            fields = spec.model_dump(exclude={"idTemplate", "labelTemplate"}, exclude_unset=True)
            pins.append(PinDefinition(id=_fill(spec.idTemplate, i), label=_fill(spec.labelTemplate, i), **fields))
    return pins


def build_pins(definition: NodeDefinition, config: Optional[Dict[str, Any]]) -> List[PinDefinition]:
    """Static pins followed by the dynamic pins generated for `config`.

    Raises PinCollisionError when two pins share an id.
    """
    pins = list(definition.pins.static)
    if definition.pins.dynamic is not None:
        count = dynamic_pin_count(definition, config)
        pins.extend(_expand_template(definition.pins.dynamic, count))

    counts = Counter(p.id for p in pins)
    dupes = sorted(pid for pid, c in counts.items() if c > 1)
    if dupes:
        raise PinCollisionError(definition.nodeType, dupes)
    return pins


def materialize_pins(
    node_type: str,
    config: Optional[Dict[str, Any]],
    registry: Optional["NodeRegistry"] = None,
) -> List[PinDefinition]:
    """Return the ordered pins of one node instance (empty for unknown types)."""
    if registry is None:
        from .registry import get_registry

        registry = get_registry()
    definition = registry.lookup(node_type)
    if definition is None:
        return []
    return build_pins(definition, config)


def node_pins(node: GraphNode, registry: Optional["NodeRegistry"] = None) -> List[PinDefinition]:
    return materialize_pins(node.nodeType, node.config, registry)


def find_pin(node: Optional[GraphNode], pin_id: str, registry: Optional["NodeRegistry"] = None) -> Optional[PinDefinition]:
    if node is None:
        return None
    for pin in node_pins(node, registry):
        if pin.id == pin_id:
            return pin
    return None


def _as_types(data_type: Optional[DataType]) -> List[str]:
    if data_type is None:
        return []
    if isinstance(data_type, list):
        return [str(t) for t in data_type]
    return [str(data_type)]


def format_data_type(data_type: Optional[DataType]) -> str:
    types = _as_types(data_type)
    if not types:
        return "any"
    return "|".join(types)


def data_types_compatible(source: Optional[DataType], target: Optional[DataType]) -> bool:
    """Wildcard-aware DATA type check.

    Compatible when either side is absent, `any` or `json`, when both are
    equal, or when the target is a list containing every source type.
    """
    s = _as_types(source)
    t = _as_types(target)
    if not s or not t:
        return True
    if WILDCARD_DATA_TYPES.intersection(s) or WILDCARD_DATA_TYPES.intersection(t):
        return True
    if s == t:
        return True
    return isinstance(target, list) and all(x in t for x in s)


def pin_capacity(pin: PinDefinition) -> Optional[int]:
    """Maximum number of edges on this pin; None means unlimited."""
    if pin.maxConnections is not None:
        return pin.maxConnections
    if pin.multi:
        return None
    return 1
