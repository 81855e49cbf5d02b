"""
Shared fixtures for solver tests.

Layouts are given as 2D lists of piece indices (the solved picture) plus
optional true_turns: piece -> clockwise quarter turns of the piece as it was
photographed. The layout scorer gives true mating edges low, distinct scores
and everything else a high default.
"""

import numpy as np
import pytest

from jigsaw_app.main.puzzle_solver.solver.models import Piece, Side, UNPLACED, edge_index
from jigsaw_app.main.puzzle_solver.solver.scoring import TableScorer


MATCH_SCORE = 0.1
MATCH_STEP = 0.01
MISMATCH_SCORE = 50.0


def true_pairs(layout, true_turns=None):
    """Mating (edge_a, edge_b) pairs of a layout, row-major order."""
    layout = np.asarray(layout)
    turns = true_turns or {}
    rows, cols = layout.shape

    def local(piece, direction):
        return edge_index(piece, (direction - turns.get(piece, 0)) % 4)

    pairs = []
    for r in range(rows):
        for c in range(cols):
            p = int(layout[r, c])
            if p == UNPLACED:
                continue
            if c + 1 < cols and layout[r, c + 1] != UNPLACED:
                q = int(layout[r, c + 1])
                pairs.append((local(p, Side.RIGHT), local(q, Side.LEFT)))
            if r + 1 < rows and layout[r + 1, c] != UNPLACED:
                q = int(layout[r + 1, c])
                pairs.append((local(p, Side.BOTTOM), local(q, Side.TOP)))
    return pairs


def build_layout_scorer(layout, true_turns=None, unmatched=()):
    """TableScorer with low scores for true pairs; pieces in `unmatched` get none."""
    table = {}
    for k, (edge_a, edge_b) in enumerate(true_pairs(layout, true_turns)):
        if edge_a // 4 in unmatched or edge_b // 4 in unmatched:
            continue
        table[(edge_a, edge_b)] = MATCH_SCORE + k * MATCH_STEP
    return TableScorer(table, default=MISMATCH_SCORE)


def solution_matches_layout(solution, layout, true_turns=None):
    """True if the solution equals the layout up to one global rotation g,
    with every placed piece rotated by (true_turn + g) % 4."""
    layout = np.asarray(layout)
    turns = true_turns or {}
    for g in range(4):
        expected = np.rot90(layout, k=-g)
        if expected.shape != solution.grid.shape or not np.array_equal(expected, solution.grid):
            continue
        rotations = solution.piece_rotations
        if all(rot == (turns.get(p, 0) + g) % 4 for p, rot in rotations.items()):
            return True
    return False


@pytest.fixture
def make_pieces():
    """make_pieces(n) -> n fresh pieces with UNKNOWN edges."""
    def _make(n):
        return [Piece.with_edge_types(i) for i in range(n)]
    return _make


@pytest.fixture
def layout_scorer():
    return build_layout_scorer


@pytest.fixture
def matches_layout():
    return solution_matches_layout


@pytest.fixture
def pairs_of():
    return true_pairs
