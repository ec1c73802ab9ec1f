from __future__ import annotations

from abilitygraph.graph_ir.cycle import control_reachable, find_control_cycle, would_create_cycle


def test_candidate_closing_a_loop_is_detected(build) -> None:
    edges = [build.control("e1", "a", "execOut", "b"), build.control("e2", "b", "execOut", "c")]
    assert would_create_cycle(edges, build.control("x", "c", "execOut", "a"))
    assert not would_create_cycle(edges, build.control("x", "a", "execOut", "c"))


def test_data_edges_never_form_control_cycles(build) -> None:
    edges = [build.data("d1", "a", "b", "in", src_pin="out")]
    assert not would_create_cycle(edges, build.data("d2", "b", "a", "in", src_pin="out"))
    assert not would_create_cycle(edges, build.control("c1", "b", "execOut", "a"))


def test_find_control_cycle(build) -> None:
    acyclic = [
        build.control("e1", "s", "execOut", "a"),
        build.control("e2", "a", "execOut", "b"),
        build.control("e3", "s", "execOut", "b"),
    ]
    assert find_control_cycle(acyclic) is None

    cyclic = acyclic + [build.control("e4", "b", "execOut", "a")]
    assert find_control_cycle(cyclic) in {"a", "b"}


def test_find_control_cycle_handles_long_chains(build) -> None:
    edges = [build.control(f"e{i}", f"n{i}", "execOut", f"n{i + 1}") for i in range(5000)]
    assert find_control_cycle(edges) is None
    edges.append(build.control("back", "n5000", "execOut", "n0"))
    assert find_control_cycle(edges) is not None


def test_control_reachable_ignores_data_edges(build) -> None:
    edges = [
        build.control("e1", "s", "execOut", "a"),
        build.data("d1", "lit", "a", "condIn"),
        build.control("e2", "x", "execOut", "y"),
    ]
    assert control_reachable("s", edges) == {"s", "a"}
