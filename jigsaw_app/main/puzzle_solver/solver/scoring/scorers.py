"""
Edge Compatibility Scorers.

The geometric edge comparison lives upstream; the solver only sees a callable
score(edge_a, edge_b) -> float (lower = better fit, no upper bound).

This module provides:
- Scorer: Protocol for such callables
- TableScorer: Lookup in a precomputed pair table or E x E matrix
- EdgeTypeGate: Wraps a scorer, returns inf for incompatible edge types
- edges_compatible: The edge type rule used by EdgeTypeGate
"""

from __future__ import annotations
import math
from typing import Mapping, Protocol
import numpy as np

from ..models import Edge, EdgeType


class Scorer(Protocol):
    def __call__(self, edge_a: Edge, edge_b: Edge) -> float:
        ...


def edges_compatible(edge_a: Edge, edge_b: Edge) -> bool:
    """
    Check whether two classified edges are a plausible mate.

    Rules:
        - FLAT (outer border) is incompatible with everything
        - TAB <-> TAB and BLANK <-> BLANK are incompatible
        - UNKNOWN is compatible with any non-flat edge

    Notes:
        - EdgeTypeGate scores incompatible pairs inf, so they rank last.
          They are only kept out of the grid when SolverConfig.max_score
          is finite

    Example:
        >>> edges_compatible(Edge(0, 1, EdgeType.TAB), Edge(1, 3, EdgeType.BLANK))
        True
    """
    type_a, type_b = edge_a.edge_type, edge_b.edge_type
    if EdgeType.FLAT in (type_a, type_b):
        return False
    if EdgeType.UNKNOWN in (type_a, type_b):
        return True
    return type_a != type_b


class TableScorer:
    """
    Scorer backed by precomputed scores keyed by global edge index.

    Args:
        table: Mapping (edge_a, edge_b) -> score; looked up in both orders
        default: Score for pairs missing from the table

    Notes:
        - Picklable, so usable with the process executor
    """

    def __init__(self, table: Mapping[tuple[int, int], float], default: float = math.inf):
        self.table = {}
        for (edge_a, edge_b), score in table.items():
            key = (min(edge_a, edge_b), max(edge_a, edge_b))
            self.table[key] = float(score)
        self.default = float(default)

    @classmethod
    def from_matrix(cls, matrix, default: float = math.inf) -> TableScorer:
        """
        Build from a square E x E matrix; entry [i, j] with i <= j is used.

        Raises:
            ValueError: If matrix is not square
        """
        matrix = np.asarray(matrix, dtype=float)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"Expected square (E, E) matrix, got shape {matrix.shape}")

        n = matrix.shape[0]
        table = {(i, j): matrix[i, j] for i in range(n) for j in range(i, n)}
        return cls(table, default=default)

    def __call__(self, edge_a: Edge, edge_b: Edge) -> float:
        a, b = edge_a.index, edge_b.index
        return self.table.get((min(a, b), max(a, b)), self.default)

    def __len__(self):
        return len(self.table)


class EdgeTypeGate:
    """
    Scorer wrapper: inf for incompatible edge types, else delegate.

    Gated pairs rank after every finite candidate; pair with a finite
    SolverConfig.max_score to never join them.
    """

    def __init__(self, inner: Scorer):
        self.inner = inner

    def __call__(self, edge_a: Edge, edge_b: Edge) -> float:
        if not edges_compatible(edge_a, edge_b):
            return math.inf
        return self.inner(edge_a, edge_b)
