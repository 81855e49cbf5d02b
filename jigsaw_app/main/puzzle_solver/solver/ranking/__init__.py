"""
Ranking Module.

Global edge-pair candidate generation:
- rank_candidates: Score all pairs, sort ascending
- score_row: One independent scoring task
- flatten_edges: Edges in global index order
"""

from .candidates import rank_candidates, score_row, flatten_edges

__all__ = [
    "rank_candidates",
    "score_row",
    "flatten_edges",
]
