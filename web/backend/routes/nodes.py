"""Node registry endpoints for the editor palette and inspector."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException

from abilitygraph.errors import RegistryError
from abilitygraph.nodes.config_schema import schema_defaults
from abilitygraph.nodes.pins import build_pins
from abilitygraph.nodes.registry import get_registry

from ..models import NodeDefinition, PinDefinition

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/nodes", tags=["nodes"])


def _get_definition(node_type: str) -> NodeDefinition:
    definition = get_registry().lookup(node_type)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Node type '{node_type}' not found")
    return definition


@router.get("", response_model=List[NodeDefinition], response_model_exclude_none=True)
async def list_nodes(category: Optional[str] = None):
    """List node definitions, optionally filtered by category."""
    return [d for d in get_registry() if category is None or d.category == category]


@router.get("/{node_type}", response_model=NodeDefinition, response_model_exclude_none=True)
async def get_node(node_type: str):
    """Get one node definition."""
    return _get_definition(node_type)


@router.get("/{node_type}/defaults")
async def get_node_defaults(node_type: str) -> Dict[str, Any]:
    """Default config for a freshly placed node."""
    return schema_defaults(_get_definition(node_type).configSchema)


@router.post("/{node_type}/pins", response_model=List[PinDefinition], response_model_exclude_none=True)
async def materialize_node_pins(node_type: str, config: Optional[Dict[str, Any]] = Body(default=None)):
    """Materialize the pins a node of this type has for `config`."""
    definition = _get_definition(node_type)
    try:
        return build_pins(definition, config or {})
    except RegistryError as e:
        logger.error(f"Pin materialization failed for {node_type}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
