"""
Greedy grid assembler that builds the puzzle layout from ranked edge matches.

Algorithm:
1. Rank every edge pair by score (ranking.rank_candidates)
2. Start with one 1x1 component per piece
3. Walk the ranked candidates in order and join components
   (grid_set.GridUnionFind); rejected joins are skipped
4. Stop when all pieces form one component or candidates run out
5. Extract the single (or largest) component and rotate the pieces

The result is deterministic for a given candidate sequence, but greedy:
an early wrong join is never undone.
"""

from __future__ import annotations
import logging
from typing import Optional, Sequence

import numpy as np

from .config import SolverConfig
from .grid_set import GridUnionFind
from .models import JoinOutcome, MatchCandidate, Piece, Solution, SolveStatus
from .ranking import rank_candidates
from .scoring import Scorer
from .utils.conversion import validate_pieces_format


logger = logging.getLogger(__name__)


def assemble(
    candidates: Sequence[MatchCandidate],
    n_pieces: int,
    config: Optional[SolverConfig] = None
) -> tuple[GridUnionFind, list[MatchCandidate]]:
    """
    Run the join loop over an already ranked candidate sequence.

    Args:
        candidates: MatchCandidates in the order they should be tried
        n_pieces: Number of pieces
        config: SolverConfig (max_score, validate_invariants, log_rejections)

    Returns:
        Tuple (union_find, accepted):
        - union_find: GridUnionFind after the loop
        - accepted: Candidates whose join succeeded, in order

    Notes:
        - Stops as soon as every piece is in one component
        - Stops at the first candidate with score > config.max_score
    """
    config = config or SolverConfig()
    union_find = GridUnionFind(n_pieces)
    accepted = []
    rejected = {JoinOutcome.ALREADY_CONNECTED: 0, JoinOutcome.PLACEMENT_CONFLICT: 0}

    for candidate in candidates:
        if union_find.is_fully_joined():
            break
        if candidate.score > config.max_score:
            logger.info("Score cutoff %.3f reached at %r", config.max_score, candidate)
            break

        outcome = union_find.join(candidate.edge_a, candidate.edge_b)
        if outcome.accepted:
            accepted.append(candidate)
        else:
            rejected[outcome] += 1
            if config.log_rejections:
                logger.debug("Rejected %r: %s", candidate, outcome.value)

        if config.validate_invariants:
            union_find.validate_invariants()

    logger.info(
        "Join loop done: %d joins, %d already connected, %d placement conflicts, %d components left",
        len(accepted),
        rejected[JoinOutcome.ALREADY_CONNECTED],
        rejected[JoinOutcome.PLACEMENT_CONFLICT],
        union_find.component_count,
    )
    return union_find, accepted


def finalize_rotations(pieces: Sequence[Piece], solution: Solution) -> None:
    """Rotate every placed piece by its final rotation offset."""
    for piece_index, turns in solution.piece_rotations.items():
        pieces[piece_index].rotate(int(turns))


def solve_puzzle(
    pieces: Sequence[Piece],
    scorer: Scorer,
    config: Optional[SolverConfig] = None
) -> tuple[Solution, bool]:
    """
    Assemble the puzzle grid from unordered, rotated pieces.

    Args:
        pieces: Pieces in index order, four edges each
        scorer: Edge compatibility scorer, lower = better fit
        config: SolverConfig with ranking/assembly parameters

    Returns:
        Tuple (solution, success):
        - solution: Solution of the single component (SOLVED) or of the
          largest one (PARTIAL); pieces outside it are not in the grid
        - success: True iff all pieces ended up in one component

    Raises:
        ValueError: Invalid input (no pieces, piece without 4 edges, ...)

    Example:
        >>> solution, success = solve_puzzle(pieces, TableScorer(scores))
        >>> print(solution.format_grid())
    """
    validate_pieces_format(pieces)
    config = config or SolverConfig()
    n_pieces = len(pieces)

    if n_pieces == 1:
        candidates = []
    else:
        candidates = rank_candidates(pieces, scorer, config)

    union_find, accepted = assemble(candidates, n_pieces, config)

    success = union_find.is_fully_joined()
    if success:
        solution = union_find.extract(0)
        solution.status = SolveStatus.SOLVED
        logger.info("Possible solution found: %dx%d grid", solution.rows, solution.cols)
    else:
        solution = union_find.extract(union_find.largest_component().root)
        solution.status = SolveStatus.PARTIAL
        logger.warning(
            "Candidates exhausted with %d components; partial %dx%d layout, unplaced pieces: %s",
            union_find.component_count, solution.rows, solution.cols, solution.unplaced_pieces,
        )
    solution.joins = accepted

    if config.apply_rotations:
        finalize_rotations(pieces, solution)

    return solution, success


class PuzzleAssembler:
    """
    Solver front-end with an explicit lifecycle.

    UNSOLVED -> SOLVING -> SOLVED | PARTIAL

    Strategy:
    1. solve() runs solve_puzzle() exactly once and keeps the Solution
    2. solution / render() / save_image() require a finished solve;
       they never trigger solving themselves
    """

    def __init__(self, pieces: Sequence[Piece], scorer: Scorer,
                 config: Optional[SolverConfig] = None):
        validate_pieces_format(pieces)
        self.pieces = list(pieces)
        self.scorer = scorer
        self.config = config or SolverConfig()
        self._status = SolveStatus.UNSOLVED
        self._solution: Optional[Solution] = None
        self._success = False

    @property
    def status(self) -> SolveStatus:
        return self._status

    @property
    def is_finished(self) -> bool:
        return self._status in (SolveStatus.SOLVED, SolveStatus.PARTIAL)

    @property
    def success(self) -> bool:
        return self._success

    @property
    def solution(self) -> Solution:
        if not self.is_finished:
            raise RuntimeError(f"No solution available, puzzle is {self._status.value}")
        return self._solution

    def solve(self) -> Solution:
        """Solve once; later calls return the stored solution."""
        if self.is_finished:
            return self._solution
        if self._status is SolveStatus.SOLVING:
            raise RuntimeError("solve() is already running")

        self._status = SolveStatus.SOLVING
        try:
            solution, success = solve_puzzle(self.pieces, self.scorer, self.config)
        except Exception:
            self._status = SolveStatus.UNSOLVED
            raise

        self._solution = solution
        self._success = success
        self._status = solution.status
        return solution

    def render(self, visualizer=None) -> np.ndarray:
        """Assembled preview image (BGR) of the finished solution."""
        from .solver_visualizer import SolutionVisualizer

        solution = self.solution
        visualizer = visualizer or SolutionVisualizer()
        return visualizer.render_assembled(solution, self.pieces)

    def save_image(self, filename: str, visualizer=None) -> list[str]:
        """Write assembled + grid diagram PNGs; returns the file names."""
        from .solver_visualizer import SolutionVisualizer

        solution = self.solution
        visualizer = visualizer or SolutionVisualizer()
        return visualizer.visualize_solution(solution, self.pieces, filename)
