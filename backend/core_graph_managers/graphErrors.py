'''
Error kinds raised while building or editing a network.

Every builder validates its whole input before a Graph is created, so any of
these errors means no graph was produced.
'''


class NetworkBuildError(ValueError):
    """Base class for every input validation failure."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class MalformedEdgeList(NetworkBuildError):
    """Edge pair token sequence has an odd length."""


class NonSquareMatrix(NetworkBuildError):
    """Adjacency matrix is not n x n."""


class AsymmetricMatrix(NetworkBuildError):
    """Undirected adjacency matrix has m[i][j] != m[j][i]."""


class UnknownNodeReference(NetworkBuildError):
    """An edge or selector names a node that is not in the graph."""


class UnknownEdgeReference(NetworkBuildError):
    """A selector names an edge that is not in the graph."""


class DuplicateNodeId(NetworkBuildError):
    """Node identifiers repeat in a node table or label list."""


class DimensionMismatch(NetworkBuildError):
    """Number of values does not match the number of selected elements."""


class MalformedTable(NetworkBuildError):
    """Node or edge table is missing its identifier columns."""


class AttributeTypeError(NetworkBuildError, TypeError):
    """Attribute value is not one of the supported value types."""
