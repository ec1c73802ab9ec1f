"""Helpers for node config schemas (defaults, coercion, field checks)."""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from ..visual.models import ConfigPropertySchema, ConfigSchema


def has_default(prop: ConfigPropertySchema) -> bool:
    return "default" in prop.model_fields_set


def schema_defaults(schema: ConfigSchema) -> Dict[str, Any]:
    """Return {field: default} for every property declaring a default."""
    out: Dict[str, Any] = {}
    for key, prop in schema.properties.items():
        if has_default(prop):
            out[key] = prop.default
    return out


def merge_config_defaults(schema: ConfigSchema, config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Schema defaults overlaid with the node's own config."""
    merged = schema_defaults(schema)
    if isinstance(config, dict):
        merged.update(config)
    return merged


def coerce_count(value: Any, prop: Optional[ConfigPropertySchema] = None) -> int:
    """Coerce a raw config value to a non-negative int clamped to the schema range.

    Non-numeric, boolean and missing values count as 0; fractions floor.
    """
    if isinstance(value, bool) or value is None:
        n = 0
    elif isinstance(value, int):
        n = value
    else:
        try:
            f = float(value)
        except (TypeError, ValueError, OverflowError):
            f = 0.0
        n = int(math.floor(f)) if math.isfinite(f) else 0

    lo = 0
    hi: Optional[int] = None
    if prop is not None:
        if prop.minimum is not None and math.isfinite(prop.minimum):
            lo = max(lo, int(math.ceil(prop.minimum)))
        if prop.maximum is not None and math.isfinite(prop.maximum):
            hi = int(math.floor(prop.maximum))
    if n < lo:
        n = lo
    if hi is not None and n > hi:
        n = hi
    return max(n, 0)


def _type_matches(value: Any, expected: Optional[str]) -> bool:
    if expected is None:
        return True
    if expected == "string":
        return isinstance(value, str)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if expected == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "object":
        return isinstance(value, dict)
    if expected == "array":
        return isinstance(value, list)
    return True


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_config_field(value: Any, prop: ConfigPropertySchema, required: bool) -> Optional[str]:
    """Return a short problem description for one config value, or None.

    Returns "Required" for a missing required value; other messages describe
    a type, enum or range violation.
    """
    if is_blank(value):
        return "Required" if required else None
    if not _type_matches(value, prop.type):
        return f"Expected {prop.type}"
    if prop.enum is not None and value not in prop.enum:
        return f"Must be one of {', '.join(str(v) for v in prop.enum)}"
    if prop.type in ("number", "integer"):
        if prop.minimum is not None and value < prop.minimum:
            return f"Min {prop.minimum:g}"
        if prop.maximum is not None and value > prop.maximum:
            return f"Max {prop.maximum:g}"
    return None
