# backend/services/network_analysis_service.py
import math

from typing import Dict, List, Optional

from ..core_graph_managers.graphErrors import UnknownNodeReference
from ..core_graph_managers.no2_graphManager.graphManager import Graph


class NetworkAnalysisService:
    '''
    Network measures computed by igraph.

    Nothing here implements an algorithm; each method exports the Graph with
    Graph.to_igraph() and returns igraph's answer keyed by node name, in node
    order. When ``use_weights`` is set and the graph is weighted, the 'weight'
    edge attribute is passed to igraph.
    '''

    def degree(self, graph: Graph, mode: str = "all") -> Dict[str, int]:
        ig_graph = graph.to_igraph()
        return dict(zip(graph.node_names(), ig_graph.degree(mode=mode)))

    def betweenness(self, graph: Graph, use_weights: bool = False) -> Dict[str, Optional[float]]:
        ig_graph = graph.to_igraph()
        scores = ig_graph.betweenness(directed=graph.is_directed(), weights=self._weights(graph, use_weights))
        return self._by_name(graph, scores)

    def closeness(self, graph: Graph, use_weights: bool = False) -> Dict[str, Optional[float]]:
        ig_graph = graph.to_igraph()
        scores = ig_graph.closeness(weights=self._weights(graph, use_weights))
        return self._by_name(graph, scores)

    def pagerank(self, graph: Graph, damping: float = 0.85, use_weights: bool = False) -> Dict[str, Optional[float]]:
        ig_graph = graph.to_igraph()
        scores = ig_graph.pagerank(directed=graph.is_directed(), damping=damping,
                                   weights=self._weights(graph, use_weights))
        return self._by_name(graph, scores)

    def shortest_path(self, graph: Graph, source: str, target: str,
                      use_weights: bool = False) -> List[str]:
        """
        Node names along one shortest path from source to target, or an empty
        list when target is unreachable.
        """
        for name in (source, target):
            if not graph.has_node(name):
                raise UnknownNodeReference(f"Node '{name}' does not exist.")

        ig_graph = graph.to_igraph()
        names = graph.node_names()
        paths = ig_graph.get_shortest_paths(graph.node_index[str(source)],
                                            to=graph.node_index[str(target)],
                                            weights=self._weights(graph, use_weights),
                                            output="vpath")
        return [names[index] for index in paths[0]]

    def components(self, graph: Graph, mode: str = "weak") -> List[List[str]]:
        ig_graph = graph.to_igraph()
        names = graph.node_names()
        return [[names[index] for index in component]
                for component in ig_graph.connected_components(mode=mode)]

    @staticmethod
    def _by_name(graph: Graph, scores) -> Dict[str, Optional[float]]:
        # igraph reports NaN for nodes a measure is undefined on, e.g. closeness of an isolated node
        return {name: score if math.isfinite(score) else None
                for name, score in zip(graph.node_names(), scores)}

    @staticmethod
    def _weights(graph: Graph, use_weights: bool) -> Optional[str]:
        if use_weights and graph.is_weighted():
            return "weight"
        return None
