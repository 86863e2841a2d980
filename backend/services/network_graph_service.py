# backend/services/network_graph_service.py
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from ..core_graph_managers.no1_graphDataIngestor.graphDataIngestion import (
    MATRIX_SIZE_WARNING,
    build_from_edge_pairs,
    build_from_matrix,
    build_from_tables,
    read_table,
)
from ..Utils.file_utils import csv_separator
from ..core_graph_managers.no2_graphManager.graphManager import Graph, edges_equal

logger = logging.getLogger(__name__)


class NetworkGraphService:
    """
    In-memory registry of built networks.

    Each build call constructs a Graph through one of the builders, stores it
    under a generated id and returns that id. Graphs live as long as the
    service instance.
    """

    def __init__(self, matrix_size_warning: int = MATRIX_SIZE_WARNING):
        self.graphs: Dict[str, Graph] = {}
        self.created: Dict[str, str] = {}
        self.sources: Dict[str, str] = {}
        self.matrix_size_warning = matrix_size_warning

    def build_from_edge_pairs(self, tokens, directed=False) -> str:
        return self._register(build_from_edge_pairs(tokens, directed=directed), "edge-pairs")

    def build_from_matrix(self, matrix, labels=None, mode="undirected", weighted=False) -> str:
        graph = build_from_matrix(matrix, labels=labels, mode=mode, weighted=weighted,
                                  size_warning=self.matrix_size_warning)
        return self._register(graph, "matrix")

    def build_from_tables(self, nodes, edges, directed=False, weight_column=None) -> str:
        graph = build_from_tables(nodes, edges, directed=directed, weight_column=weight_column)
        return self._register(graph, "tables")

    def build_from_csv(self, nodes_path, edges_path, directed=False, weight_column=None) -> str:
        nodes_df = read_table(nodes_path, sep=csv_separator(nodes_path))
        edges_df = read_table(edges_path, sep=csv_separator(edges_path))
        graph = build_from_tables(nodes_df, edges_df, directed=directed, weight_column=weight_column)
        return self._register(graph, "csv")

    def get_graph(self, graph_id: str) -> Optional[Graph]:
        return self.graphs.get(graph_id)

    def get_graph_data(self, graph_id: str) -> Optional[dict]:
        """
        Retrieve graph data by its ID

        Args:
            graph_id (str): The unique identifier of the graph

        Returns:
            dict: The graph data or None if not found
        """
        graph = self.get_graph(graph_id)
        if graph is None:
            return None
        data = graph.to_dict()
        data["id"] = graph_id
        return data

    def get_summary(self, graph_id: str) -> Optional[dict]:
        graph = self.get_graph(graph_id)
        if graph is None:
            return None
        return graph.summary_stats()

    def simplify(self, graph_id: str) -> Optional[int]:
        graph = self.get_graph(graph_id)
        if graph is None:
            return None
        return graph.simplify()

    def compare(self, first_id: str, second_id: str) -> Optional[bool]:
        first, second = self.get_graph(first_id), self.get_graph(second_id)
        if first is None or second is None:
            return None
        return edges_equal(first, second)

    def remove_graph(self, graph_id: str) -> bool:
        if graph_id not in self.graphs:
            return False
        del self.graphs[graph_id]
        del self.created[graph_id]
        del self.sources[graph_id]
        return True

    def get_all_graphs(self) -> List[dict]:
        """
        Get a list of all registered graphs

        Returns:
            list: List of graph metadata dictionaries, oldest first
        """
        return [
            {
                'id': graph_id,
                'source': self.sources[graph_id],
                'directed': graph.is_directed(),
                'node_count': graph.vcount(),
                'edge_count': graph.ecount(),
                'created': self.created[graph_id],
            }
            for graph_id, graph in self.graphs.items()
        ]

    def _register(self, graph: Graph, source: str) -> str:
        graph_id = uuid.uuid4().hex[:12]
        self.graphs[graph_id] = graph
        self.created[graph_id] = datetime.now().isoformat()
        self.sources[graph_id] = source
        logger.info("Registered %s graph %s (%d nodes, %d edges)",
                    source, graph_id, graph.vcount(), graph.ecount())
        return graph_id
