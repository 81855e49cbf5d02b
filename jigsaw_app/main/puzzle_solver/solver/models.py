"""
Solver Data Models.

This module defines all data structures used by the grid assembler:
- Side: Piece side in clockwise order (TOP, RIGHT, BOTTOM, LEFT)
- EdgeType: Edge shape classification
- Edge: One side of a piece
- Piece: Puzzle piece with four edges and a rotation state
- MatchCandidate: Scored pair of global edge indices
- JoinOutcome: Result of a grid union-find join
- SolveStatus: Solver lifecycle status
- Solution: Dense grid of placements + rotations

Rotation convention:
    One turn = 90° clockwise. A piece rotated by r turns shows its local
    side s in world direction (s + r) % 4.

Global edge index:
    edge_index = piece_index * 4 + side

NOTE: Component (sparse grid of one connected group) is NOT defined here.
      It lives in grid_set/component.py next to the union-find.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional
import numpy as np


UNPLACED = -1
"""Grid marker for a cell without a piece."""

SIDES_PER_PIECE = 4


class Side(IntEnum):
    """Piece side, clockwise. Opposite sides differ by 2 (mod 4)."""
    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3

    @property
    def opposite(self) -> Side:
        return Side((self + 2) % 4)


class EdgeType(Enum):
    """
    Edge shape classification (produced by the external edge classifier).

    Values:
        FLAT: Straight outer border edge, gated to inf (ranks last)
        TAB: Knob sticking out
        BLANK: Socket cut in
        UNKNOWN: Not classified, compatible with any non-flat edge
    """
    FLAT = "flat"
    TAB = "tab"
    BLANK = "blank"
    UNKNOWN = "unknown"


def edge_index(piece_index: int, side: int) -> int:
    """Flatten (piece_index, side) into a global edge index."""
    return piece_index * SIDES_PER_PIECE + side


def split_edge_index(index: int) -> tuple[int, int]:
    """Inverse of edge_index(): global edge index -> (piece_index, side)."""
    return divmod(index, SIDES_PER_PIECE)


@dataclass(frozen=True)
class Edge:
    """
    One side of a puzzle piece.

    Attributes:
        piece_index: Index of the owning piece
        side: Side index 0..3 (see Side)
        edge_type: Shape classification
        contour: Optional edge contour, shape (N, 2); opaque to the solver,
                 only read by scorers

    Notes:
        - Immutable once the piece is extracted
        - Identity is (piece_index, side); contour is excluded from eq/hash
    """
    piece_index: int
    side: int
    edge_type: EdgeType = EdgeType.UNKNOWN
    contour: Optional[np.ndarray] = field(default=None, compare=False, hash=False, repr=False)

    @property
    def index(self) -> int:
        """Global edge index."""
        return edge_index(self.piece_index, self.side)


class Piece:
    """
    Puzzle piece with four edges in side order.

    Attributes:
        index: Piece index 0..N-1
        edges: Four Edge objects, edges[k].side == k
        rotation: Clockwise quarter turns applied so far (0..3)
        label: Optional human readable ID (assigned upstream)
        image: Optional piece bitmap (H, W, 3)
        mask: Optional binary mask (H, W)
    """

    def __init__(self, index: int, edges, rotation: int = 0,
                 label: Optional[str] = None,
                 image: Optional[np.ndarray] = None,
                 mask: Optional[np.ndarray] = None):
        self.index = index
        self.edges = tuple(edges)
        self.rotation = rotation % 4
        self.label = label
        self.image = image
        self.mask = mask

    @classmethod
    def with_edge_types(cls, index: int, edge_types=None, **kwargs) -> Piece:
        """Build a piece whose edges carry the given types (default UNKNOWN)."""
        if edge_types is None:
            edge_types = [EdgeType.UNKNOWN] * SIDES_PER_PIECE
        edges = [Edge(index, side, EdgeType(edge_type)) for side, edge_type in enumerate(edge_types)]
        return cls(index, edges, **kwargs)

    def facing(self, side: int) -> int:
        """World direction the local side currently faces."""
        return (side + self.rotation) % 4

    def rotate(self, turns: int) -> None:
        """
        Rotate the piece clockwise by the given number of quarter turns.

        Args:
            turns: Quarter turns in 0..3

        Raises:
            ValueError: If turns is outside 0..3

        Notes:
            - image and mask are re-oriented (np.rot90 with negative k = clockwise)
            - Edges keep their identity; only the facing direction changes
        """
        if turns not in range(4):
            raise ValueError(f"turns must be in 0..3, got {turns}")
        if turns == 0:
            return

        self.rotation = (self.rotation + turns) % 4
        if self.image is not None:
            self.image = np.ascontiguousarray(np.rot90(self.image, k=-turns))
        if self.mask is not None:
            self.mask = np.ascontiguousarray(np.rot90(self.mask, k=-turns))

    def __repr__(self):
        name = self.label if self.label is not None else self.index
        return f"Piece({name}, rot={self.rotation})"


@dataclass(frozen=True)
class MatchCandidate:
    """
    Scored edge pair.

    Attributes:
        edge_a: Global edge index (edge_a <= edge_b)
        edge_b: Global edge index
        score: Scorer cost, lower = better fit

    Notes:
        - Ordering key for ranking is (score, edge_a, edge_b)
    """
    edge_a: int
    edge_b: int
    score: float

    @property
    def sort_key(self) -> tuple[float, int, int]:
        return (self.score, self.edge_a, self.edge_b)

    def __repr__(self):
        piece_a, side_a = split_edge_index(self.edge_a)
        piece_b, side_b = split_edge_index(self.edge_b)
        return (f"MatchCandidate(P{piece_a}.{Side(side_a).name} <-> "
                f"P{piece_b}.{Side(side_b).name}, score={self.score:.3f})")


class JoinOutcome(Enum):
    """
    Result of GridUnionFind.join().

    Values:
        JOINED: Components merged
        ALREADY_CONNECTED: Both pieces already in one component
        PLACEMENT_CONFLICT: Merge would put two pieces on one cell
    """
    JOINED = "JOINED"
    ALREADY_CONNECTED = "ALREADY_CONNECTED"
    PLACEMENT_CONFLICT = "PLACEMENT_CONFLICT"

    @property
    def accepted(self) -> bool:
        return self is JoinOutcome.JOINED


class SolveStatus(Enum):
    """
    Solver lifecycle: UNSOLVED -> SOLVING -> SOLVED | PARTIAL.

    Values:
        UNSOLVED: Nothing computed yet
        SOLVING: Join loop running
        SOLVED: All pieces in one component
        PARTIAL: Candidates exhausted, largest component reported
    """
    UNSOLVED = "UNSOLVED"
    SOLVING = "SOLVING"
    SOLVED = "SOLVED"
    PARTIAL = "PARTIAL"


@dataclass
class Solution:
    """
    Final puzzle layout.

    Attributes:
        grid: Piece index per cell, shape (rows, cols), UNPLACED = -1
        rotations: Clockwise quarter turns per cell, same shape (0 where unplaced)
        n_pieces: Total number of pieces in the puzzle
        status: SOLVED or PARTIAL
        joins: Accepted MatchCandidates in the order they were applied

    Notes:
        - (0, 0) is the top-left of the component's bounding box
        - Pieces missing from grid are reported by unplaced_pieces
    """
    grid: np.ndarray
    rotations: np.ndarray
    n_pieces: int
    status: SolveStatus = SolveStatus.PARTIAL
    joins: list[MatchCandidate] = field(default_factory=list)

    @property
    def rows(self) -> int:
        return int(self.grid.shape[0])

    @property
    def cols(self) -> int:
        return int(self.grid.shape[1])

    @property
    def is_complete(self) -> bool:
        return self.status is SolveStatus.SOLVED

    @property
    def placed_pieces(self) -> list[int]:
        return sorted(int(p) for p in self.grid.flat if p != UNPLACED)

    @property
    def unplaced_pieces(self) -> list[int]:
        placed = set(self.placed_pieces)
        return [p for p in range(self.n_pieces) if p not in placed]

    @property
    def unplaced_cells(self) -> int:
        """Number of grid cells holding the UNPLACED marker."""
        return int(np.count_nonzero(self.grid == UNPLACED))

    @property
    def piece_rotations(self) -> dict[int, int]:
        """piece index -> final rotation, placed pieces only."""
        return {
            int(piece): int(rot)
            for piece, rot in zip(self.grid.flat, self.rotations.flat)
            if piece != UNPLACED
        }

    def piece_at(self, row: int, col: int) -> Optional[int]:
        piece = int(self.grid[row, col])
        return None if piece == UNPLACED else piece

    def position_of(self, piece: int) -> Optional[tuple[int, int]]:
        hits = np.argwhere(self.grid == piece)
        if len(hits) == 0:
            return None
        row, col = hits[0]
        return int(row), int(col)

    def format_grid(self) -> str:
        """Text layout, one row per line, e.g. '  0   1\\n  2  -1'."""
        width = max(2, len(str(max(self.n_pieces - 1, 0)))) + 1
        return "\n".join(
            "".join(f"{int(p):>{width}}" for p in row)
            for row in self.grid
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dict; non-finite join scores become None."""
        return {
            "status": self.status.value,
            "rows": self.rows,
            "cols": self.cols,
            "grid": self.grid.tolist(),
            "rotations": self.rotations.tolist(),
            "unplaced_pieces": self.unplaced_pieces,
            "joins": [
                {"edge_a": j.edge_a, "edge_b": j.edge_b,
                 "score": j.score if math.isfinite(j.score) else None}
                for j in self.joins
            ],
        }
