import os

import pandas as pd
import pytest

from backend.core_graph_managers.no1_graphDataIngestor.graphDataIngestion import make_ring

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')

PEOPLE = ["Kit", "Ty", "Viv", "Dee", "Chet", "Josh", "Ron", "Drew", "Quinn", "Lucy"]
AGES = [22, 21, 25, 26, 24, 21, 17, 18, 22, 20]


@pytest.fixture
def people():
    return list(PEOPLE)


@pytest.fixture
def ring_graph():
    return make_ring(PEOPLE)


@pytest.fixture
def ring_tokens():
    tokens = []
    for i, name in enumerate(PEOPLE):
        tokens.extend([name, PEOPLE[(i + 1) % len(PEOPLE)]])
    return tokens


@pytest.fixture
def ring_matrix():
    n = len(PEOPLE)
    matrix = [[0] * n for _ in range(n)]
    for i in range(n - 1):
        matrix[i][i + 1] = 1
        matrix[i + 1][i] = 1
    matrix[0][n - 1] = 1
    matrix[n - 1][0] = 1
    return matrix


@pytest.fixture
def nodes_csv():
    return os.path.join(DATA_DIR, 'people_nodes.csv')


@pytest.fixture
def edges_csv():
    return os.path.join(DATA_DIR, 'people_edges.csv')


@pytest.fixture
def node_table(nodes_csv):
    return pd.read_csv(nodes_csv)


@pytest.fixture
def edge_table(edges_csv):
    return pd.read_csv(edges_csv)
