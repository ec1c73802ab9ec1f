"""CONTROL-flow cycle detection.

DATA edges do not take part in cycle detection. A DATA cycle between two
expression nodes is accepted at edit time; only execution order must be
acyclic.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Optional, Set

from ..visual.models import GraphEdge, PinKind


def control_adjacency(edges: Iterable[GraphEdge]) -> Dict[str, List[str]]:
    """Return {from_node_id: [to_node_id, ...]} for CONTROL edges only."""
    adj: Dict[str, List[str]] = {}
    for e in edges:
        if e.edgeKind != PinKind.CONTROL:
            continue
        adj.setdefault(e.from_.nodeId, []).append(e.to.nodeId)
    return adj


def control_reachable(start: str, edges: Iterable[GraphEdge]) -> Set[str]:
    """Node ids reachable from `start` over CONTROL edges (start included)."""
    adj = control_adjacency(edges)
    reachable: Set[str] = set()
    queue = deque([start])
    while queue:
        cur = queue.popleft()
        if cur in reachable:
            continue
        reachable.add(cur)
        for nxt in adj.get(cur, []):
            if nxt not in reachable:
                queue.append(nxt)
    return reachable


def would_create_cycle(existing_edges: Iterable[GraphEdge], candidate: GraphEdge) -> bool:
    """True if adding `candidate` closes a loop among CONTROL edges."""
    if candidate.edgeKind != PinKind.CONTROL:
        return False

    adj = control_adjacency(existing_edges)
    adj.setdefault(candidate.from_.nodeId, []).append(candidate.to.nodeId)

    start = candidate.from_.nodeId
    seen: Set[str] = set()
    queue = deque([candidate.to.nodeId])
    while queue:
        cur = queue.popleft()
        if cur == start:
            return True
        if cur in seen:
            continue
        seen.add(cur)
        queue.extend(adj.get(cur, []))
    return False


def find_control_cycle(edges: Iterable[GraphEdge]) -> Optional[str]:
    """Return a node id lying on a CONTROL cycle, or None when acyclic.

    Iterative three-colour DFS so deep graphs do not hit the recursion limit.
    """
    adj = control_adjacency(edges)
    state: Dict[str, int] = {}  # 1 = on stack, 2 = done

    for root in list(adj):
        if state.get(root):
            continue
        state[root] = 1
        stack = [(root, iter(adj.get(root, [])))]
        while stack:
            node_id, children = stack[-1]
            advanced = False
            for nxt in children:
                s = state.get(nxt)
                if s == 1:
                    return nxt
                if s is None:
                    state[nxt] = 1
                    stack.append((nxt, iter(adj.get(nxt, []))))
                    advanced = True
                    break
            if not advanced:
                state[node_id] = 2
                stack.pop()
    return None
