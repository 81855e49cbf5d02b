"""
Scoring Module.

Edge compatibility scorers consumed by the candidate ranker:
- TableScorer: Precomputed pair scores
- EdgeTypeGate: Edge type filter around another scorer
- edges_compatible: Edge type compatibility rule
"""

from .scorers import Scorer, TableScorer, EdgeTypeGate, edges_compatible

__all__ = [
    "Scorer",
    "TableScorer",
    "EdgeTypeGate",
    "edges_compatible",
]
