"""Node definitions and pin materialization."""

from .pins import data_types_compatible, materialize_pins, pin_capacity
from .registry import NodeRegistry, get_node_def, get_registry, load_registry

__all__ = [
    "NodeRegistry",
    "data_types_compatible",
    "get_node_def",
    "get_registry",
    "load_registry",
    "materialize_pins",
    "pin_capacity",
]
