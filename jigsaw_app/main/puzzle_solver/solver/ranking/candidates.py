"""
Match Candidate Ranking.

This module scores and ranks every edge pair of a puzzle:
- score_row: Score edge i against edges i..E-1 (one independent task)
- rank_candidates: Main API, returns all candidates sorted ascending

Enumeration:
    i in 0..E-1, j in i..E-1 with E = 4 * n_pieces, so every unordered pair
    appears exactly once (self pairs and same-piece pairs included; the
    union-find rejects those as already connected).

Ordering:
    (score, edge_a, edge_b) ascending. NaN scores are stored as +inf.
"""

from __future__ import annotations
import concurrent.futures
import functools
import logging
import math
import time
from typing import TYPE_CHECKING, Sequence

from ..models import MatchCandidate

if TYPE_CHECKING:
    from ..models import Edge, Piece
    from ..config import SolverConfig
    from ..scoring import Scorer


logger = logging.getLogger(__name__)


def flatten_edges(pieces: Sequence[Piece]) -> list[Edge]:
    """All edges in global edge index order (piece * 4 + side)."""
    return [edge for piece in pieces for edge in piece.edges]


def score_row(edges: Sequence[Edge], scorer: Scorer, i: int) -> list[MatchCandidate]:
    """
    Score edge i against every edge j >= i.

    Args:
        edges: All edges in global index order
        scorer: Edge compatibility scorer
        i: Row index

    Returns:
        Candidates (i, j, score) for j in i..E-1, in j order

    Notes:
        - Reads only edges, writes only its own list (safe to run concurrently)
        - Top-level function so it pickles for the process executor
    """
    row = []
    edge_a = edges[i]
    for j in range(i, len(edges)):
        score = float(scorer(edge_a, edges[j]))
        if math.isnan(score):
            score = math.inf
        row.append(MatchCandidate(edge_a=i, edge_b=j, score=score))
    return row


def _score_rows(edges: list[Edge], scorer: Scorer, config: SolverConfig) -> list[list[MatchCandidate]]:
    task = functools.partial(score_row, edges, scorer)
    n_edges = len(edges)

    if config.max_workers <= 1 or n_edges <= 1:
        return [task(i) for i in range(n_edges)]

    executor_cls = (concurrent.futures.ProcessPoolExecutor
                    if config.executor == "process"
                    else concurrent.futures.ThreadPoolExecutor)
    max_workers = min(config.max_workers, n_edges)

    # map() keeps row order; the final sort does not depend on it anyway
    with executor_cls(max_workers=max_workers) as executor:
        return list(executor.map(task, range(n_edges)))


def rank_candidates(
    pieces: Sequence[Piece],
    scorer: Scorer,
    config: SolverConfig | None = None
) -> list[MatchCandidate]:
    """
    Score all edge pairs and rank them globally.

    Args:
        pieces: Pieces in index order (pieces[k].index == k)
        scorer: Edge compatibility scorer, lower = better
        config: SolverConfig (max_workers, executor); default serial

    Returns:
        List of E*(E+1)/2 MatchCandidate sorted by (score, edge_a, edge_b)

    Example:
        >>> ranked = rank_candidates(pieces, TableScorer(scores))
        >>> len(ranked) == (4 * len(pieces)) * (4 * len(pieces) + 1) // 2
        True
    """
    if config is None:
        from ..config import SolverConfig
        config = SolverConfig()

    edges = flatten_edges(pieces)
    start = time.perf_counter()

    rows = _score_rows(edges, scorer, config)
    candidates = [candidate for row in rows for candidate in row]
    candidates.sort(key=lambda c: c.sort_key)

    logger.info(
        "Ranked %d candidates for %d edges in %.3fs (workers=%d, executor=%s)",
        len(candidates), len(edges), time.perf_counter() - start,
        config.max_workers, config.executor,
    )
    return candidates
