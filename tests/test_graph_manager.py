import networkx as nx
import numpy as np
import pytest

from backend.core_graph_managers.graphErrors import (
    DimensionMismatch,
    UnknownEdgeReference,
    UnknownNodeReference,
)
from backend.core_graph_managers.no1_graphDataIngestor.graphDataIngestion import build_from_edge_pairs
from backend.core_graph_managers.no2_graphManager.attributeStore import Category
from backend.core_graph_managers.no2_graphManager.graphManager import Graph, canonical_edges, edges_equal

from conftest import AGES


def test_ring_counts(ring_graph, people):
    assert ring_graph.vcount() == 10
    assert ring_graph.ecount() == 10
    assert not ring_graph.is_directed()
    assert ring_graph.node_names() == people


def test_age_set_in_creation_order(ring_graph):
    ring_graph.set_attribute("node", "age", None, AGES)

    assert ring_graph.get_attribute("node", "age", "Viv") == 25
    assert ring_graph.get_attribute("node", "age") == AGES
    assert ring_graph.get_attribute("node", "age", ["Lucy", "Kit"]) == [20, 22]


def test_set_attribute_count_mismatch(ring_graph):
    with pytest.raises(DimensionMismatch):
        ring_graph.set_attribute("node", "age", None, AGES[:9])

    assert not ring_graph.has_attribute("node", "age")


def test_single_node_round_trip(ring_graph):
    ring_graph.set_attribute("node", "gender", "Dee", Category("F"))

    assert ring_graph.get_attribute("node", "gender", "Dee") == Category("F")
    assert ring_graph.get_attribute("node", "gender", "Kit") is None
    assert ring_graph.node_attributes() == ["gender"]


def test_unknown_selectors(ring_graph):
    with pytest.raises(UnknownNodeReference):
        ring_graph.set_attribute("node", "age", "Nobody", 30)
    with pytest.raises(UnknownEdgeReference):
        ring_graph.get_attribute("edge", "weight", ("Kit", "Dee"))
    with pytest.raises(UnknownEdgeReference):
        ring_graph.get_attribute("edge", "weight", 10)
    with pytest.raises(ValueError):
        ring_graph.get_attribute("graph", "name")


def test_undirected_edge_matches_either_orientation(ring_graph):
    ring_graph.set_attribute("edge", "relationship", ("Ty", "Kit"), "friend")

    assert ring_graph.get_attribute("edge", "relationship", ("Kit", "Ty")) == "friend"
    assert ring_graph.get_attribute("edge", "relationship", 0) == "friend"
    assert ring_graph.edge(("Kit", "Ty")) == {"relationship": "friend"}


def test_directed_edge_keeps_orientation():
    graph = build_from_edge_pairs(["a", "b"], directed=True)

    assert graph.get_attribute("edge", "weight", ("a", "b")) is None
    with pytest.raises(UnknownEdgeReference):
        graph.get_attribute("edge", "weight", ("b", "a"))


def test_weighted_predicate_flips(ring_graph):
    assert not ring_graph.is_weighted()

    ring_graph.set_attribute("edge", "lor", None, 2)
    assert not ring_graph.is_weighted()

    ring_graph.set_attribute("edge", "weight", None, list(range(1, 11)))
    assert ring_graph.is_weighted()

    ring_graph.delete_attribute("edge", "weight", ("Quinn", "Lucy"))
    assert not ring_graph.is_weighted()
    assert ring_graph.has_attribute("edge", "weight")


def test_add_node_twice_updates_attributes():
    graph = Graph()
    graph.add_node("Kit", age=22)
    graph.add_node("Kit", status="single")

    assert graph.vcount() == 1
    assert graph.node("Kit") == {"age": 22, "status": "single"}


def test_add_edge_requires_known_endpoints():
    graph = Graph()
    graph.add_node("Kit")

    with pytest.raises(UnknownNodeReference):
        graph.add_edge("Kit", "Ty")
    assert graph.ecount() == 0


def test_failed_add_node_leaves_store_aligned():
    graph = Graph()
    graph.add_node("Kit", age=22)

    with pytest.raises(DimensionMismatch):
        graph.add_node("Ty", age=[21, 22])
    with pytest.raises(DimensionMismatch):
        graph.add_node("Kit", status="single", age=[22, 23])

    graph.add_node("Viv", age=25)

    assert graph.node_names() == ["Kit", "Viv"]
    assert graph.get_attribute("node", "age") == [22, 25]
    assert graph.node("Kit") == {"age": 22}


def test_failed_add_edge_leaves_edges_unchanged():
    graph = build_from_edge_pairs(["Kit", "Ty"])

    with pytest.raises(DimensionMismatch):
        graph.add_edge("Ty", "Kit", weight=[1, 2])

    assert graph.ecount() == 1
    graph.add_edge("Ty", "Kit", weight=2)
    assert graph.get_attribute("edge", "weight") == [None, 2]


def test_remove_node_drops_incident_edges(ring_graph):
    ring_graph.set_attribute("node", "age", None, AGES)
    ring_graph.set_attribute("edge", "weight", None, list(range(10)))
    ring_graph.remove_node("Viv")

    assert ring_graph.vcount() == 9
    assert ring_graph.ecount() == 8
    assert not ring_graph.has_node("Viv")
    assert ring_graph.get_attribute("node", "age", "Dee") == 26
    assert ring_graph.get_attribute("edge", "weight", ("Dee", "Chet")) == 3


def test_remove_edge(ring_graph):
    ring_graph.remove_edge(("Lucy", "Kit"))

    assert ring_graph.ecount() == 9
    assert ("Lucy", "Kit") not in ring_graph.edges()


def test_simplify_removes_loops_and_duplicates():
    graph = build_from_edge_pairs(["a", "b", "b", "a", "a", "a", "b", "c", "b", "c"])
    graph.set_attribute("edge", "weight", None, [1, 2, 3, 4, 5])

    assert not graph.is_simple()
    assert graph.count_self_loops() == 1
    assert graph.count_multiple_edges() == 2

    removed = graph.simplify()

    assert removed == 3
    assert graph.edges() == [("a", "b"), ("b", "c")]
    assert graph.get_attribute("edge", "weight") == [1, 4]
    assert graph.is_simple()


def test_simplify_is_idempotent():
    graph = build_from_edge_pairs(["x", "y", "y", "x", "y", "y", "x", "z"])
    graph.simplify()
    once = graph.edges()

    assert graph.simplify() == 0
    assert graph.edges() == once


def test_simplify_directed_keeps_reverse_edges():
    graph = build_from_edge_pairs(["a", "b", "b", "a", "a", "b"], directed=True)

    assert graph.simplify() == 1
    assert graph.edges() == [("a", "b"), ("b", "a")]


def test_construction_does_not_simplify():
    graph = build_from_edge_pairs(["a", "a", "a", "b", "a", "b"])

    assert graph.ecount() == 3


def test_canonical_edges_normalise_undirected_pairs():
    graph = build_from_edge_pairs(["b", "a", "c", "a"])

    assert canonical_edges(graph) == [("a", "b"), ("a", "c")]


def test_edges_equal_ignores_attributes_and_order():
    first = build_from_edge_pairs(["a", "b", "b", "c"])
    second = build_from_edge_pairs(["c", "b", "b", "a"])
    second.set_attribute("edge", "weight", None, 3)

    assert edges_equal(first, second)
    assert not edges_equal(first, build_from_edge_pairs(["a", "b", "a", "c"]))


def test_copy_is_independent(ring_graph):
    clone = ring_graph.copy()
    clone.set_attribute("node", "age", "Kit", 99)
    clone.remove_node("Ty")

    assert ring_graph.vcount() == 10
    assert ring_graph.get_attribute("node", "age", "Kit") is None


def test_to_dict_and_back(ring_graph):
    ring_graph.set_attribute("node", "gender", "Kit", Category("F"))
    ring_graph.set_attribute("edge", "weight", None, 1.5)

    data = ring_graph.to_dict()
    rebuilt = Graph.from_dict(data)

    assert data["nodes"][0] == {"name": "Kit", "attributes": {"gender": "F"}}
    assert data["edges"][0] == {"source": "Kit", "target": "Ty", "attributes": {"weight": 1.5}}
    assert rebuilt.node_names() == ring_graph.node_names()
    assert edges_equal(rebuilt, ring_graph)
    assert rebuilt.is_weighted()


def test_round_trip_with_reserved_attribute_keys():
    graph = Graph(directed=True)
    graph.add_node("p1")
    graph.add_node("p2")
    graph.set_attribute("node", "name", None, ["Kit", "Ty"])
    graph.add_edge("p1", "p2")
    graph.set_attribute("edge", "source", None, ["survey"])
    graph.set_attribute("edge", "target", None, ["friend"])

    rebuilt = Graph.from_dict(graph.to_dict())

    assert rebuilt.get_attribute("node", "name") == ["Kit", "Ty"]
    assert rebuilt.edge(("p1", "p2")) == {"source": "survey", "target": "friend"}
    assert edges_equal(rebuilt, graph)


def test_to_igraph_keeps_order_and_attributes(ring_graph, people):
    ring_graph.set_attribute("node", "age", None, AGES)
    ring_graph.set_attribute("edge", "weight", None, 2.0)

    ig_graph = ring_graph.to_igraph()

    assert ig_graph.vcount() == 10
    assert ig_graph.ecount() == 10
    assert ig_graph.vs["name"] == people
    assert ig_graph.vs["age"] == AGES
    assert "weight" in ig_graph.edge_attributes()
    assert not ig_graph.is_directed()


def test_to_networkx_uses_multigraph_for_duplicates():
    graph = build_from_edge_pairs(["a", "b", "a", "b"], directed=True)

    nx_graph = graph.to_networkx()

    assert isinstance(nx_graph, nx.MultiDiGraph)
    assert nx_graph.number_of_edges() == 2


def test_to_networkx_carries_attributes(ring_graph):
    ring_graph.set_attribute("node", "age", None, AGES)

    nx_graph = ring_graph.to_networkx()

    assert type(nx_graph) is nx.Graph
    assert nx_graph.nodes["Viv"]["age"] == 25
    assert nx_graph.number_of_edges() == 10


def test_adjacency_matrix(ring_graph, ring_matrix):
    matrix = ring_graph.adjacency_matrix()

    assert np.array_equal(matrix, np.array(ring_matrix))

    ring_graph.set_attribute("edge", "weight", None, 0.5)
    weighted = ring_graph.adjacency_matrix(weighted=True)
    assert weighted[0, 1] == 0.5
    assert weighted[9, 0] == 0.5


def test_summary_stats_of_ring(ring_graph):
    stats = ring_graph.summary_stats()

    assert stats["nodes"] == 10
    assert stats["edges"] == 10
    assert stats["weighted"] is False
    assert stats["isolated_nodes"] == 0
    assert stats["min_degree"] == stats["max_degree"] == 2
    assert stats["avg_degree"] == pytest.approx(2.0)
    assert stats["self_loops"] == 0
    assert stats["density"] == pytest.approx(10 / 45)
    assert stats["clustering_coefficient"] == pytest.approx(0.0)
    assert stats["connected_components"] == 1
    assert stats["largest_component_percentage"] == pytest.approx(100.0)
    assert stats["diameter"] == 5


def test_summary_stats_of_empty_and_split_graphs():
    assert Graph().summary_stats()["nodes"] == 0

    graph = build_from_edge_pairs(["a", "b", "c", "d"])
    graph.add_node("e")
    stats = graph.summary_stats()

    assert stats["connected_components"] == 3
    assert stats["isolated_nodes"] == 1
    assert stats["diameter"] is None
