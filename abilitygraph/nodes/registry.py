"""Node definition registry.

The registry is loaded once from JSON and never mutated afterwards. Hosts that
need custom node types build a new registry with `load_registry()` and pass it
explicitly (or point `ABILITYGRAPH_REGISTRY_PATH` at their file).
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ..errors import RegistryError
from ..visual.models import NodeDefinition
from .config_schema import schema_defaults
from .pins import build_pins

logger = logging.getLogger(__name__)

REGISTRY_PATH_ENV = "ABILITYGRAPH_REGISTRY_PATH"
DEFAULT_REGISTRY_PATH = Path(__file__).with_name("node_registry.json")

START_NODE_TYPE = "EXEC_START"
PRIMARY_EXEC_OUT = "execOut"


class NodeRegistry:
    """Read-only catalog of node definitions keyed by `nodeType`."""

    def __init__(self, definitions: Iterable[NodeDefinition], *, version: str = "", data_types: Iterable[str] = ()):
        by_type: Dict[str, NodeDefinition] = {}
        for d in definitions:
            if d.nodeType in by_type:
                raise RegistryError(f"Duplicate nodeType in registry: '{d.nodeType}'")
            by_type[d.nodeType] = d
        self._by_type = by_type
        self.version = version
        self.data_types: Tuple[str, ...] = tuple(data_types)

        for d in by_type.values():
            _check_definition(d)

    def __len__(self) -> int:
        return len(self._by_type)

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._by_type

    def __iter__(self):
        return iter(self._by_type.values())

    def lookup(self, node_type: str) -> Optional[NodeDefinition]:
        return self._by_type.get(node_type)

    def node_types(self) -> List[str]:
        return list(self._by_type)

    def list_by_category(self) -> List[Tuple[str, List[NodeDefinition]]]:
        """Group definitions by category, keeping registry order."""
        groups: Dict[str, List[NodeDefinition]] = {}
        for d in self._by_type.values():
            groups.setdefault(d.category, []).append(d)
        return list(groups.items())

    def default_config(self, node_type: str) -> Dict[str, Any]:
        d = self.lookup(node_type)
        if d is None:
            return {}
        return schema_defaults(d.configSchema)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "NodeRegistry":
        nodes = raw.get("nodes")
        if not isinstance(nodes, list):
            raise RegistryError("Registry JSON must contain a 'nodes' list")
        definitions: List[NodeDefinition] = []
        for idx, item in enumerate(nodes):
            try:
                definitions.append(NodeDefinition.model_validate(item))
            except ValidationError as e:
                node_type = item.get("nodeType") if isinstance(item, dict) else None
                raise RegistryError(f"Invalid node definition nodes[{idx}] ({node_type}): {e}") from e
        return cls(
            definitions,
            version=str(raw.get("nodeRegistryVersion") or ""),
            data_types=[str(t) for t in raw.get("dataTypes") or []],
        )


def _check_definition(definition: NodeDefinition) -> None:
    """Materialize boundary configs so pin collisions surface at load time."""
    build_pins(definition, {})
    template = definition.pins.dynamic
    if template is None:
        return
    prop = definition.configSchema.properties.get(template.sourceField)
    if prop is None:
        raise RegistryError(
            f"Node type '{definition.nodeType}' repeats pins from undeclared config field '{template.sourceField}'"
        )
    if prop.maximum is None:
        raise RegistryError(
            f"Node type '{definition.nodeType}' repeats pins from '{template.sourceField}' without a maximum"
        )
    build_pins(definition, {template.sourceField: prop.maximum})


def load_registry(path: Union[str, Path]) -> NodeRegistry:
    """Load a registry from a JSON file."""
    p = Path(path)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise RegistryError(f"Registry file not found: {p}") from None
    except json.JSONDecodeError as e:
        raise RegistryError(f"Registry file is not valid JSON: {p}: {e}") from e
    if not isinstance(raw, dict):
        raise RegistryError(f"Registry JSON must be an object: {p}")
    registry = NodeRegistry.from_dict(raw)
    logger.info(f"Loaded node registry {registry.version or '(unversioned)'} with {len(registry)} node types from {p}")
    return registry


_default_registry: Optional[NodeRegistry] = None
_default_lock = threading.Lock()


def get_registry() -> NodeRegistry:
    """Return the process-wide registry, loading it on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                path = os.getenv(REGISTRY_PATH_ENV) or DEFAULT_REGISTRY_PATH
                _default_registry = load_registry(path)
    return _default_registry


def get_node_def(node_type: str, registry: Optional[NodeRegistry] = None) -> Optional[NodeDefinition]:
    if registry is None:
        registry = get_registry()
    return registry.lookup(node_type)
