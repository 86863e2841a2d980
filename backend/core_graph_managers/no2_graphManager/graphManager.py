import logging
import math

from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from backend.core_graph_managers.graphErrors import UnknownEdgeReference, UnknownNodeReference
from backend.core_graph_managers.no2_graphManager.attributeStore import AttributeStore, Category

logger = logging.getLogger(__name__)

NODE_SCOPES = {"node", "nodes", "vertex", "vertices"}
EDGE_SCOPES = {"edge", "edges"}


class Graph:
    """
    Graph: the canonical in-memory representation of a network.

    A Graph holds an ordered set of uniquely named nodes, an ordered list of
    edges between them, one directedness flag for every edge, and one
    AttributeStore per collection for node and edge attributes.

    Ordering:
     - Nodes iterate in insertion order (first time a name was added).
     - Edges iterate in construction order (the order add_edge was called).
     - Attribute values are returned in the same canonical orders.

    Topology rules:
     - Every edge endpoint names a node of the graph.
     - Re-adding an existing node name updates its attributes, it never
       duplicates the node.
     - In an undirected graph (a, b) and (b, a) are the same edge.
     - Self-loops and duplicate edges are kept until simplify() is called.

    Analysis:
     - Graph algorithms are not implemented here. to_igraph() and
       to_networkx() export the network to a mature library, and
       summary_stats() reports the igraph overview of the graph.

    The graph is mutated in place; nothing returns a modified copy unless
    copy() is called explicitly.
    """

    def __init__(self, directed: bool = False):
        self.directed = bool(directed)
        self.node_index: Dict[str, int] = {}     # Dict[name] = position
        self.edge_list: List[Tuple[str, str]] = []  # (source, target) in construction order
        self.node_attrs = AttributeStore()
        self.edge_attrs = AttributeStore()

    def __repr__(self):
        kind = "directed" if self.directed else "undirected"
        return f"<Graph {kind}: {self.vcount()} nodes, {self.ecount()} edges>"

    '''
    Core Graph Structure
    '''

    def is_directed(self) -> bool:
        return self.directed

    def vcount(self) -> int:
        return len(self.node_index)

    def ecount(self) -> int:
        return len(self.edge_list)

    def node_names(self) -> List[str]:
        return list(self.node_index.keys())

    def edges(self) -> List[Tuple[str, str]]:
        return list(self.edge_list)

    def has_node(self, name) -> bool:
        return str(name) in self.node_index

    def add_node(self, name, /, **attributes):
        '''
        Add a node, or update the attributes of an existing node with the same name.
        '''
        name = str(name)
        if name in self.node_index:
            position = self.node_index[name]
            for key, value in self.node_attrs.prepare(attributes).items():
                self.node_attrs.set(key, [position], value)
            return position

        position = self.node_attrs.append(attributes)
        self.node_index[name] = position
        return position

    def add_nodes(self, names: Iterable):
        for name in names:
            self.add_node(name)

    def add_edge(self, source, target, /, **attributes):
        source, target = str(source), str(target)
        for endpoint in (source, target):
            if endpoint not in self.node_index:
                raise UnknownNodeReference(f"Node '{endpoint}' does not exist.")

        position = self.edge_attrs.append(attributes)
        self.edge_list.append((source, target))
        return position

    def remove_node(self, name):
        '''
        Remove a node together with every edge incident to it.
        '''
        position = self._node_position(name)
        name = self.node_names()[position]

        incident = [i for i, (src, tgt) in enumerate(self.edge_list) if name in (src, tgt)]
        self._drop_edges(incident)

        self.node_attrs.remove([position])
        names = [n for n in self.node_index if n != name]
        self.node_index = {n: i for i, n in enumerate(names)}

    def remove_edge(self, selector):
        self._drop_edges(self._edge_positions(selector))

    def _drop_edges(self, positions: List[int]):
        drop = set(positions)
        self.edge_list = [edge for i, edge in enumerate(self.edge_list) if i not in drop]
        self.edge_attrs.remove(drop)

    '''
    Attributes
    '''

    def set_attribute(self, scope: str, key: str, selector, values):
        '''
        Assign attribute ``key`` on the selected nodes or edges.

        Args:
            scope: "node" or "edge"
            key: attribute name, created if absent
            selector: None for every element, a single node name / edge pair /
                      position, or a list of those
            values: one value per selected element (list, tuple, numpy array or
                    pandas Series), or a single value broadcast to all of them
        '''
        store, positions = self._resolve(scope, selector)
        store.set(key, positions, values)

    def get_attribute(self, scope: str, key: str, selector=None):
        '''
        Return the values of ``key`` in canonical order.

        A single node name, edge pair or position returns a bare value; any
        other selector returns a list.
        '''
        store, positions = self._resolve(scope, selector)
        values = store.get(key, positions)
        if self._is_single(scope, selector):
            return values[0]
        return values

    def delete_attribute(self, scope: str, key: str, selector=None):
        store, positions = self._resolve(scope, selector)
        store.delete(key, None if selector is None else positions)

    def has_attribute(self, scope: str, key: str) -> bool:
        return self._store(scope).has_attribute(key)

    def node_attributes(self) -> List[str]:
        return self.node_attrs.keys()

    def edge_attributes(self) -> List[str]:
        return self.edge_attrs.keys()

    def node(self, name) -> dict:
        return self.node_attrs.element(self._node_position(name))

    def edge(self, selector) -> dict:
        positions = self._edge_positions(selector)
        return self.edge_attrs.element(positions[0])

    def is_weighted(self) -> bool:
        """A graph is weighted iff every edge carries an attribute named 'weight'."""
        return self.edge_attrs.is_complete("weight")

    '''
    Simplification
    '''

    def edge_key(self, source: str, target: str) -> Tuple[str, str]:
        if self.directed:
            return source, target
        return (source, target) if source <= target else (target, source)

    def count_self_loops(self) -> int:
        return sum(1 for src, tgt in self.edge_list if src == tgt)

    def count_multiple_edges(self) -> int:
        seen = set()
        duplicates = 0
        for src, tgt in self.edge_list:
            key = self.edge_key(src, tgt)
            if key in seen:
                duplicates += 1
            seen.add(key)
        return duplicates

    def is_simple(self) -> bool:
        return self.count_self_loops() == 0 and self.count_multiple_edges() == 0

    def simplify(self, loops: bool = True, multiple: bool = True) -> int:
        '''
        Remove self-loops and/or duplicate edges in place.

        The first occurrence of a duplicated edge is kept along with its
        attributes. Returns the number of removed edges.
        '''
        seen = set()
        drop = []
        for position, (src, tgt) in enumerate(self.edge_list):
            if loops and src == tgt:
                drop.append(position)
                continue
            key = self.edge_key(src, tgt)
            if multiple and key in seen:
                drop.append(position)
                continue
            seen.add(key)

        self._drop_edges(drop)
        if drop:
            logger.info("Simplified graph: removed %d edges, %d remain", len(drop), self.ecount())
        return len(drop)

    '''
    Copy + Serialisation
    '''

    def copy(self) -> "Graph":
        clone = Graph(directed=self.directed)
        clone.node_index = dict(self.node_index)
        clone.edge_list = list(self.edge_list)
        clone.node_attrs = self.node_attrs.copy()
        clone.edge_attrs = self.edge_attrs.copy()
        return clone

    def to_dict(self) -> dict:
        '''
        Convert the graph to a JSON-serialisable dictionary.
        '''
        return {
            "directed": self.directed,
            "nodes": [
                {"name": name, "attributes": _export_attributes(self.node_attrs.element(position))}
                for name, position in self.node_index.items()
            ],
            "edges": [
                {"source": src, "target": tgt,
                 "attributes": _export_attributes(self.edge_attrs.element(position))}
                for position, (src, tgt) in enumerate(self.edge_list)
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Graph":
        graph = cls(directed=data.get("directed", False))
        for node in data.get("nodes", []):
            graph.add_node(node["name"], **node.get("attributes", {}))
        for edge in data.get("edges", []):
            graph.add_edge(edge["source"], edge["target"], **edge.get("attributes", {}))
        return graph

    '''
    Backend Graph Representations
    '''

    def to_igraph(self):
        """
        Builds and returns an igraph Graph with the same node order, edge order and attributes.
        Node names are stored in the 'name' vertex attribute.
        """
        import igraph as ig

        ig_graph = ig.Graph(n=self.vcount(), directed=self.directed)
        ig_graph.vs["name"] = self.node_names()
        for key in self.node_attrs.keys():
            if key == "name":
                continue
            ig_graph.vs[key] = [_export_value(v) for v in self.node_attrs.get(key)]

        ig_graph.add_edges([(self.node_index[src], self.node_index[tgt]) for src, tgt in self.edge_list])
        for key in self.edge_attrs.keys():
            ig_graph.es[key] = [_export_value(v) for v in self.edge_attrs.get(key)]

        return ig_graph

    def to_networkx(self):
        """
        Builds and returns a networkx graph. Multi-edge classes are used when the
        graph holds duplicate edges, so no edge is lost in the conversion.
        """
        import networkx as nx

        if self.count_multiple_edges():
            nx_graph = nx.MultiDiGraph() if self.directed else nx.MultiGraph()
        else:
            nx_graph = nx.DiGraph() if self.directed else nx.Graph()

        for name, position in self.node_index.items():
            nx_graph.add_node(name, **_export_attributes(self.node_attrs.element(position)))
        for position, (src, tgt) in enumerate(self.edge_list):
            nx_graph.add_edge(src, tgt, **_export_attributes(self.edge_attrs.element(position)))

        return nx_graph

    def adjacency_matrix(self, weighted: bool = False) -> np.ndarray:
        '''
        Adjacency matrix in node order. Entries count edges, or sum their
        'weight' values when weighted is True.
        '''
        n = self.vcount()
        matrix = np.zeros((n, n), dtype=float if weighted else int)
        weights = self.edge_attrs.get("weight") if weighted else [1] * self.ecount()

        for (src, tgt), weight in zip(self.edge_list, weights):
            value = 1 if weight is None else weight
            i, j = self.node_index[src], self.node_index[tgt]
            matrix[i, j] += value
            if not self.directed and i != j:
                matrix[j, i] += value

        return matrix

    def summary_stats(self) -> dict:
        """
        Generate the igraph overview of the network.

        Returns:
            Dictionary with counts, degree statistics, density, clustering
            coefficient, connected components and diameter
        """
        stats = {
            "nodes": self.vcount(),
            "edges": self.ecount(),
            "directed": self.directed,
            "weighted": self.is_weighted(),
            "isolated_nodes": 0,
            "min_degree": 0,
            "max_degree": 0,
            "avg_degree": 0.0,
            "self_loops": self.count_self_loops(),
            "density": 0.0,
            "clustering_coefficient": None,
            "connected_components": 0,
            "largest_component_size": 0,
            "largest_component_percentage": 0.0,
            "diameter": None,
        }

        # Skip further calculation if graph is empty
        if not self.vcount():
            return stats

        ig_graph = self.to_igraph()

        degrees = ig_graph.degree(mode="all")
        stats["isolated_nodes"] = sum(1 for degree in degrees if degree == 0)
        stats["min_degree"] = min(degrees)
        stats["max_degree"] = max(degrees)
        stats["avg_degree"] = sum(degrees) / len(degrees)
        stats["density"] = _finite_or_none(ig_graph.density())
        stats["clustering_coefficient"] = _finite_or_none(ig_graph.transitivity_undirected())

        components = ig_graph.connected_components(mode="weak")
        largest = max(len(component) for component in components)
        stats["connected_components"] = len(components)
        stats["largest_component_size"] = largest
        stats["largest_component_percentage"] = 100 * largest / self.vcount()

        # Only valid for connected graphs
        if len(components) == 1:
            stats["diameter"] = ig_graph.diameter(directed=self.directed)

        return stats

    '''
    Utilities
    '''

    def _store(self, scope: str) -> AttributeStore:
        if scope in NODE_SCOPES:
            return self.node_attrs
        if scope in EDGE_SCOPES:
            return self.edge_attrs
        raise ValueError(f"Unknown attribute scope '{scope}', expected 'node' or 'edge'.")

    def _resolve(self, scope: str, selector) -> Tuple[AttributeStore, List[int]]:
        store = self._store(scope)
        if store is self.node_attrs:
            return store, self._node_positions(selector)
        return store, self._edge_positions(selector)

    @staticmethod
    def _is_single(scope: str, selector) -> bool:
        if selector is None or isinstance(selector, (list, range)):
            return False
        if scope in NODE_SCOPES and isinstance(selector, tuple):
            return False
        return True

    def _node_position(self, key) -> int:
        if isinstance(key, (int, np.integer)) and not isinstance(key, bool):
            if not 0 <= key < self.vcount():
                raise UnknownNodeReference(f"Node position {key} is out of range.")
            return int(key)
        name = str(key)
        if name not in self.node_index:
            raise UnknownNodeReference(f"Node '{name}' does not exist.")
        return self.node_index[name]

    def _node_positions(self, selector) -> List[int]:
        if selector is None:
            return list(range(self.vcount()))
        if isinstance(selector, (list, tuple, range)):
            return [self._node_position(key) for key in selector]
        return [self._node_position(selector)]

    def _edge_position(self, key) -> int:
        if isinstance(key, (int, np.integer)) and not isinstance(key, bool):
            if not 0 <= key < self.ecount():
                raise UnknownEdgeReference(f"Edge position {key} is out of range.")
            return int(key)
        if isinstance(key, tuple) and len(key) == 2:
            wanted = self.edge_key(str(key[0]), str(key[1]))
            for position, (src, tgt) in enumerate(self.edge_list):
                if self.edge_key(src, tgt) == wanted:
                    return position
            raise UnknownEdgeReference(f"Edge ({key[0]} - {key[1]}) does not exist.")
        raise UnknownEdgeReference(f"Cannot select an edge with {key!r}.")

    def _edge_positions(self, selector) -> List[int]:
        if selector is None:
            return list(range(self.ecount()))
        if isinstance(selector, (list, range)):
            return [self._edge_position(key) for key in selector]
        return [self._edge_position(selector)]


def canonical_edges(graph: Graph) -> List[Tuple[str, str]]:
    '''
    Edges of ``graph`` normalised and sorted for comparison: undirected edges
    become (min(id), max(id)), directed edges stay (from, to), then the list
    is sorted by endpoint identifiers.
    '''
    return sorted(graph.edge_key(src, tgt) for src, tgt in graph.edge_list)


def edges_equal(a: Graph, b: Graph) -> bool:
    """True if both graphs have identical canonical edge sequences. Attributes are ignored."""
    return canonical_edges(a) == canonical_edges(b)


def _export_value(value: Any):
    if isinstance(value, Category):
        return value.label
    return value


def _export_attributes(attributes: dict) -> dict:
    return {key: _export_value(value) for key, value in attributes.items()}


def _finite_or_none(value: Optional[float]):
    if value is None or math.isnan(value):
        return None
    return value
