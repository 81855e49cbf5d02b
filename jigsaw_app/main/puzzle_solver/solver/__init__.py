"""
Grid Assembler: greedy edge-match puzzle solver.

Main API:
    solve_puzzle(pieces, scorer, config) -> (Solution, success)
    PuzzleAssembler(pieces, scorer, config).solve() -> Solution

Pipeline:
    pieces -> rank_candidates (all edge pairs, ascending score)
           -> GridUnionFind joins in ranked order
           -> Solution (dense grid + rotations), pieces rotated
"""

from .config import SolverConfig, RenderConfig
from .models import (
    UNPLACED,
    Side,
    EdgeType,
    Edge,
    Piece,
    MatchCandidate,
    JoinOutcome,
    SolveStatus,
    Solution,
    edge_index,
    split_edge_index,
)
from .scoring import TableScorer, EdgeTypeGate, edges_compatible
from .ranking import rank_candidates
from .grid_set import GridUnionFind, Component
from .solver import solve_puzzle, assemble, PuzzleAssembler


__all__ = [
    # Main API
    "solve_puzzle",
    "assemble",
    "PuzzleAssembler",
    "rank_candidates",
    "GridUnionFind",
    "Component",
    # Config
    "SolverConfig",
    "RenderConfig",
    # Models
    "UNPLACED",
    "Side",
    "EdgeType",
    "Edge",
    "Piece",
    "MatchCandidate",
    "JoinOutcome",
    "SolveStatus",
    "Solution",
    "edge_index",
    "split_edge_index",
    # Scoring
    "TableScorer",
    "EdgeTypeGate",
    "edges_compatible",
]
