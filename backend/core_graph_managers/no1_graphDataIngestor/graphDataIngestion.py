'''
Graph construction from the three input shapes a network is usually handed over in:

 - a flat sequence of adjacent node pairs
 - a square adjacency matrix with optional row/column labels
 - a node table plus an edge table (the scalable default)

Every builder validates its entire input first and only then creates the Graph,
so a failed build never leaves a partial graph behind.
'''
import logging

from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from backend.core_graph_managers.graphErrors import (
    AsymmetricMatrix,
    DimensionMismatch,
    DuplicateNodeId,
    MalformedEdgeList,
    MalformedTable,
    NonSquareMatrix,
    UnknownNodeReference,
)
from backend.core_graph_managers.no2_graphManager.attributeStore import Category
from backend.core_graph_managers.no2_graphManager.graphManager import Graph

logger = logging.getLogger(__name__)

# Above this many nodes the n x n matrix form gets expensive to hold and scan
MATRIX_SIZE_WARNING = 1000


class MatrixMode(str, Enum):
    DIRECTED = "directed"
    UNDIRECTED = "undirected"


def build_from_edge_pairs(tokens: Iterable, directed: bool = False) -> Graph:
    '''
    Build a graph from tokens read as consecutive pairs:
    (tok[0], tok[1]), (tok[2], tok[3]), ...

    Nodes appear in order of first occurrence, edges in pair order.
    '''
    if tokens is None or isinstance(tokens, (str, bytes)):
        raise MalformedEdgeList("Edge pairs must be given as a sequence of node identifiers.")
    tokens = list(tokens)
    if any(token is None for token in tokens):
        raise MalformedEdgeList("Edge pair list contains a missing node identifier.")
    tokens = [str(token) for token in tokens]
    if len(tokens) % 2:
        logger.warning("Rejected edge pair list with odd length %d", len(tokens))
        raise MalformedEdgeList(
            f"Edge pair list needs an even number of tokens, got {len(tokens)}."
        )

    graph = Graph(directed=directed)
    for source, target in zip(tokens[0::2], tokens[1::2]):
        graph.add_node(source)
        graph.add_node(target)
        graph.add_edge(source, target)

    logger.info("Built graph from edge pairs: %d nodes, %d edges", graph.vcount(), graph.ecount())
    return graph


def make_ring(names: Sequence, directed: bool = False) -> Graph:
    """Ring over ``names``: each node links to the next, the last one back to the first."""
    names = [str(name) for name in names]
    tokens = []
    for position, name in enumerate(names):
        tokens.extend([name, names[(position + 1) % len(names)]])
    return build_from_edge_pairs(tokens, directed=directed)


def build_from_matrix(matrix: Any,
                      labels: Optional[Sequence] = None,
                      mode: str = MatrixMode.UNDIRECTED,
                      weighted: bool = False,
                      size_warning: int = MATRIX_SIZE_WARNING) -> Graph:
    '''
    Build a graph from an n x n adjacency matrix.

    Args:
        matrix: nested lists, a numpy array or a pandas DataFrame. A DataFrame
                supplies its column names as labels when none are given.
        labels: one node name per row/column, in row order. Defaults to "0".."n-1".
        mode: "undirected" emits one edge per nonzero m[i][j] with i < j and
              requires a symmetric matrix; "directed" emits one edge per nonzero
              m[i][j] with i != j, row by row.
        weighted: store each nonzero entry as the edge 'weight'.

    Diagonal entries never produce edges.
    '''
    mode = _matrix_mode(mode)

    if isinstance(matrix, pd.DataFrame):
        if labels is None:
            labels = list(matrix.columns)
        matrix = matrix.to_numpy()

    values = _square_array(matrix)
    n = values.shape[0]

    if mode is MatrixMode.UNDIRECTED and not np.array_equal(values, values.T):
        rows, cols = np.nonzero(values != values.T)
        logger.warning("Rejected asymmetric matrix for undirected mode")
        raise AsymmetricMatrix(
            f"Undirected mode needs a symmetric matrix; m[{rows[0]}][{cols[0]}] != m[{cols[0]}][{rows[0]}]."
        )

    names = _matrix_labels(labels, n)

    if n > size_warning:
        logger.warning(
            "Adjacency matrix with %d nodes holds %d cells; node/edge tables scale linearly", n, n * n
        )

    graph = Graph(directed=mode is MatrixMode.DIRECTED)
    graph.add_nodes(names)

    # np.nonzero walks the matrix row by row, i outer and j inner
    for i, j in zip(*np.nonzero(values)):
        if i == j or (mode is MatrixMode.UNDIRECTED and i > j):
            continue
        if weighted:
            graph.add_edge(names[i], names[j], weight=values[i, j].item())
        else:
            graph.add_edge(names[i], names[j])

    logger.info("Built graph from %dx%d matrix: %d edges", n, n, graph.ecount())
    return graph


def build_from_tables(nodes: Any,
                      edges: Any,
                      directed: bool = False,
                      weight_column: Optional[str] = None) -> Graph:
    '''
    Build a graph from a node table and an edge table.

    The first node column holds unique node identifiers and every other node
    column becomes a node attribute. The first two edge columns hold the
    'from' and 'to' identifiers and every other edge column becomes an edge
    attribute. Rows keep their table order.

    Args:
        nodes, edges: pandas DataFrames, or anything pandas.DataFrame() accepts
        directed: directedness of every edge
        weight_column: edge column to rename to 'weight' before building
    '''
    nodes_df = _as_frame(nodes, "Node")
    edges_df = _as_frame(edges, "Edge")

    if nodes_df.shape[1] < 1:
        raise MalformedTable("Node table needs an identifier column.")
    if edges_df.shape[1] < 2:
        raise MalformedTable("Edge table needs 'from' and 'to' columns.")

    if weight_column is not None and weight_column != "weight":
        if weight_column not in edges_df.columns:
            raise MalformedTable(f"Edge table has no column '{weight_column}' to use as weight.")
        if "weight" in edges_df.columns:
            raise MalformedTable(f"Edge table already has a 'weight' column besides '{weight_column}'.")
        edges_df = edges_df.rename(columns={weight_column: "weight"})

    id_column = nodes_df.iloc[:, 0]
    if id_column.isna().any():
        raise MalformedTable("Node table has rows without an identifier.")
    node_ids = id_column.astype(str)

    duplicated = node_ids[node_ids.duplicated()].unique().tolist()
    if duplicated:
        logger.warning("Rejected node table with duplicate ids %s", duplicated)
        raise DuplicateNodeId(f"Node table repeats identifiers: {', '.join(duplicated)}.")

    if edges_df.iloc[:, :2].isna().any().any():
        raise MalformedTable("Edge table has rows without both endpoints.")
    sources = edges_df.iloc[:, 0].astype(str).tolist()
    targets = edges_df.iloc[:, 1].astype(str).tolist()

    known = set(node_ids)
    unknown = sorted({name for name in sources + targets if name not in known})
    if unknown:
        logger.warning("Rejected edge table referencing unknown nodes %s", unknown)
        raise UnknownNodeReference(f"Edge table references unknown nodes: {', '.join(unknown)}.")

    node_attributes = {str(col): _column_values(nodes_df[col]) for col in nodes_df.columns[1:]}
    edge_attributes = {str(col): _column_values(edges_df[col]) for col in edges_df.columns[2:]}

    graph = Graph(directed=directed)
    graph.add_nodes(node_ids)
    for key, values in node_attributes.items():
        graph.set_attribute("node", key, None, values)

    for source, target in zip(sources, targets):
        graph.add_edge(source, target)
    for key, values in edge_attributes.items():
        graph.set_attribute("edge", key, None, values)

    logger.info("Built graph from tables: %d nodes, %d edges", graph.vcount(), graph.ecount())
    return graph


def read_table(path: str, **read_csv_kwargs) -> pd.DataFrame:
    """Read a delimited text file into a DataFrame."""
    return pd.read_csv(path, **read_csv_kwargs)


def build_from_csv(nodes_path: str,
                   edges_path: str,
                   directed: bool = False,
                   weight_column: Optional[str] = None,
                   **read_csv_kwargs) -> Graph:
    nodes_df = read_table(nodes_path, **read_csv_kwargs)
    edges_df = read_table(edges_path, **read_csv_kwargs)
    return build_from_tables(nodes_df, edges_df, directed=directed, weight_column=weight_column)


'''
Utilities
'''

def _matrix_mode(mode) -> MatrixMode:
    try:
        return MatrixMode(mode)
    except ValueError:
        raise ValueError(f"Unknown matrix mode '{mode}', expected 'directed' or 'undirected'.")


def _square_array(matrix: Any) -> np.ndarray:
    if isinstance(matrix, np.ndarray):
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise NonSquareMatrix(f"Adjacency matrix must be square, got shape {matrix.shape}.")
        values = matrix
    else:
        rows = [list(row) for row in matrix]
        for row in rows:
            if len(row) != len(rows):
                raise NonSquareMatrix(
                    f"Adjacency matrix must be square, got {len(rows)} rows and a row of length {len(row)}."
                )
        values = np.array(rows).reshape(len(rows), len(rows))

    if values.dtype.kind not in "biuf":
        values = values.astype(float)
    return values


def _matrix_labels(labels: Optional[Sequence], n: int) -> List[str]:
    if labels is None:
        return [str(i) for i in range(n)]

    names = [str(label) for label in labels]
    if len(names) != n:
        raise DimensionMismatch(f"Got {len(names)} labels for a {n}x{n} matrix.")
    duplicated = sorted({name for name in names if names.count(name) > 1})
    if duplicated:
        raise DuplicateNodeId(f"Matrix labels repeat: {', '.join(duplicated)}.")
    return names


def _as_frame(table: Any, what: str) -> pd.DataFrame:
    if table is None:
        raise MalformedTable(f"{what} table is missing.")
    if isinstance(table, pd.DataFrame):
        return table
    try:
        return pd.DataFrame(table)
    except (TypeError, ValueError) as e:
        raise MalformedTable(f"{what} table could not be read: {e}")


def _column_values(series: pd.Series) -> list:
    if isinstance(series.dtype, pd.CategoricalDtype):
        return [None if pd.isna(value) else Category(str(value)) for value in series]
    return series.convert_dtypes().tolist()
