import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # noqa: E402

import networkx as nx  # noqa: E402
from pipeview.pipeline_model import PANEL_ROOT  # noqa: E402
from pipeview.layout.graph_types import Dyad  # noqa: E402
from pipeview.layout.connectivity import (  # noqa: E402
    collectAncestors,
    computeFanOut,
    findConnectedComponents,
    findRelatedElement,
    getMaxExtentsOfSet,
    positionElements,
    positionElementsOfSet,
    sortRootsByConnectivity,
)


def build_graph(roots, edges):
    G = nx.DiGraph()
    for root in roots:
        G.add_edge(PANEL_ROOT, root)
    G.add_edges_from(edges)
    return G


def build_forest():
    """兩個元件的森林，e42 與 e111 各有兩個父節點"""
    roots = ["e1", "e3", "e2", "e4"]
    edges = [
        ("e1", "e11"),
        ("e11", "e111"),
        ("e3", "e31"),
        ("e3", "e32"),
        ("e4", "e41"),
        ("e4", "e42"),
        ("e2", "e111"),
        ("e1", "e42"),
    ]
    return build_graph(roots, edges), roots


def test_two_disjoint_trees_are_two_components():
    G = build_graph(["A", "C"], [("A", "B"), ("C", "D")])
    components = findConnectedComponents(G, ["A", "C"])
    assert components == [{"A", "B"}, {"C", "D"}]


def test_components_follow_parents_and_skip_panel_root():
    G, roots = build_forest()
    components = findConnectedComponents(G, roots)
    assert components == [
        {"e1", "e11", "e111", "e2", "e4", "e41", "e42"},
        {"e3", "e31", "e32"},
    ]
    assert all(PANEL_ROOT not in c for c in components)


def test_components_partition_every_node_once():
    G, roots = build_forest()
    components = findConnectedComponents(G, roots)
    members = [label for c in components for label in c]
    assert len(members) == len(set(members))
    assert set(members) == set(G.nodes) - {PANEL_ROOT}


def test_empty_roots_give_empty_results():
    G = nx.DiGraph()
    assert findConnectedComponents(G, []) == []
    assert positionElements(G, []) == ({}, [])


def test_isolated_node_is_singleton_component():
    G = build_graph(["A", "B"], [("A", "C")])
    assert findConnectedComponents(G, ["A", "B"]) == [{"A", "C"}, {"B"}]


def test_cycle_is_visited_once():
    G = build_graph(["A"], [("A", "B"), ("B", "C"), ("C", "A")])
    assert findConnectedComponents(G, ["A"]) == [{"A", "B", "C"}]
    positions, _ = positionElements(G, ["A"])
    assert set(positions) == {"A", "B", "C"}


def test_fan_out_ignores_panel_root():
    G, _ = build_forest()
    assert computeFanOut(G, "e1") == 2
    assert computeFanOut(G, "e2") == 1
    assert computeFanOut(G, "e111") == 0


def test_sort_roots_by_connectivity_orders_by_fan_out():
    G, roots = build_forest()
    assert sortRootsByConnectivity(G, roots) == ["e1", "e4", "e2", "e3"]


def test_position_elements_of_set_depth_first():
    G, _ = build_forest()
    placed = {}
    newly = positionElementsOfSet(G, "e1", 0, 0, placed)
    assert newly == {"e1", "e11", "e111", "e42"}
    assert placed == {
        "e1": Dyad(0, 0),
        "e11": Dyad(0, 1),
        "e111": Dyad(0, 2),
        "e42": Dyad(0, 1),
    }


def test_position_elements_never_moves_placed_node():
    G, _ = build_forest()
    placed = {"e11": Dyad(5, 5)}
    positionElementsOfSet(G, "e1", 0, 0, placed)
    assert placed["e11"] == Dyad(5, 5)
    # e111 只能經由已配置的 e11 到達，因此不會被配置
    assert "e111" not in placed


def test_position_elements_places_trees_side_by_side():
    G, roots = build_forest()
    positions, components = positionElements(G, roots)
    assert positions["e1"] == Dyad(0, 0)
    assert positions["e4"] == Dyad(1, 0)
    assert positions["e41"] == Dyad(1, 1)
    assert positions["e2"] == Dyad(2, 0)
    assert positions["e3"] == Dyad(3, 0)
    assert positions["e31"] == Dyad(3, 1)
    assert set(positions) == set(G.nodes) - {PANEL_ROOT}
    assert len(components) == 2


def test_max_extents_of_set():
    positions = {"a": Dyad(0, 3), "b": Dyad(2, 1), "c": Dyad(1, 0)}
    assert getMaxExtentsOfSet(positions, ["a", "b", "c"]) == Dyad(2, 3)
    assert getMaxExtentsOfSet(positions, []) == Dyad(0, 0)


def test_deep_chain_does_not_recurse():
    depth = 5000
    edges = [(f"n{i}", f"n{i + 1}") for i in range(depth)]
    G = build_graph(["n0"], edges)
    positions, components = positionElements(G, ["n0"])
    assert positions[f"n{depth}"] == Dyad(0, depth)
    assert len(components[0]) == depth + 1


def test_collect_ancestors():
    G, _ = build_forest()
    assert collectAncestors(G, "e111") == {"e111", "e11", "e1", "e2"}
    assert collectAncestors(G, "e1") == {"e1"}
    assert collectAncestors(G, "missing") == set()


def test_find_related_element():
    G, _ = build_forest()
    assert findRelatedElement(G, "e1", "e41") == "e41"
    assert findRelatedElement(G, "e1", "e31") is None
    assert findRelatedElement(G, "nope", "e1") is None
