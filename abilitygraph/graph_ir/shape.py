"""Load editor JSON into a `Graph`, reporting shape problems as issues."""

from __future__ import annotations

from typing import Any, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..visual.models import (
    GRAPH_CURRENT_VERSION,
    GRAPH_SUPPORTED_VERSIONS,
    Graph,
    Severity,
    ValidationIssue,
)


def _loc_to_path(loc: Tuple[Union[int, str], ...]) -> Optional[str]:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or None


def parse_graph(raw: Any) -> Tuple[Optional[Graph], List[ValidationIssue]]:
    """Validate the shape of `raw` and build a Graph.

    Returns `(None, issues)` when any ERROR was found. A supported but older
    `graphVersion` only yields a GRAPH_VERSION_OLD warning.
    """
    issues: List[ValidationIssue] = []
    if not isinstance(raw, dict):
        issues.append(ValidationIssue(severity=Severity.ERROR, code="GRAPH_SHAPE", message="Graph must be an object"))
        return None, issues

    version = raw.get("graphVersion", GRAPH_CURRENT_VERSION)
    if version not in GRAPH_SUPPORTED_VERSIONS:
        issues.append(
            ValidationIssue(
                severity=Severity.ERROR,
                code="GRAPH_VERSION",
                message=f"graphVersion must be one of {', '.join(GRAPH_SUPPORTED_VERSIONS)}.",
                path="graphVersion",
            )
        )
    elif version != GRAPH_CURRENT_VERSION:
        issues.append(
            ValidationIssue(
                severity=Severity.WARN,
                code="GRAPH_VERSION_OLD",
                message=f"graphVersion should be '{GRAPH_CURRENT_VERSION}' for new graphs.",
                path="graphVersion",
            )
        )

    try:
        graph = Graph.model_validate(raw)
    except ValidationError as e:
        for err in e.errors():
            issues.append(
                ValidationIssue(
                    severity=Severity.ERROR,
                    code="GRAPH_SHAPE",
                    message=err.get("msg", "Invalid value"),
                    path=_loc_to_path(tuple(err.get("loc", ()))),
                )
            )
        return None, issues

    if any(i.severity == Severity.ERROR for i in issues):
        return None, issues
    return graph, issues
