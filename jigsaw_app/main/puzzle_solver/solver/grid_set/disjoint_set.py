"""
Grid Union-Find.

Disjoint-set over pieces where every set (Component) also carries a sparse 2D
grid and per-piece rotation offsets. join() merges two components along a
proposed edge pair, or rejects the merge when the pieces are already
connected or when two pieces would land on the same cell.

Join geometry (piece_a/side_a in component A, piece_b/side_b in component B):
    facing_a = (side_a + rot_a) % 4
    facing_b = (side_b + rot_b) % 4
    turns    = (facing_a + 2 - facing_b) % 4      # rigid rotation of all of B
    target   = neighbour(cell_a, facing_a)        # where piece_b must land
    shift    = target - rotate(cell_b, turns)

IMPORTANT: join() is not safe for concurrent callers without the lock it
           takes; the solver calls it from one thread in ranked order.
"""

from __future__ import annotations
import logging
import threading
from typing import Iterator

import numpy as np

from ..models import JoinOutcome, Solution, UNPLACED, split_edge_index
from .component import Component, neighbour, rotate_cell


logger = logging.getLogger(__name__)


class GridUnionFind:
    """
    Union-find of pieces with a grid per component.

    Args:
        n_pieces: Number of pieces (indices 0..n_pieces-1)

    Example:
        >>> uf = GridUnionFind(2)
        >>> uf.join(edge_index(0, Side.RIGHT), edge_index(1, Side.LEFT))
        <JoinOutcome.JOINED: 'JOINED'>
        >>> uf.is_fully_joined()
        True
    """

    def __init__(self, n_pieces: int):
        if n_pieces < 1:
            raise ValueError(f"n_pieces must be >= 1, got {n_pieces}")
        self.n_pieces = n_pieces
        self._parent = list(range(n_pieces))
        self._components: dict[int, Component] = {
            piece: Component.singleton(piece) for piece in range(n_pieces)
        }
        self._lock = threading.RLock()

    def find(self, piece: int) -> int:
        """Root of the component owning `piece` (path compression)."""
        root = piece
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[piece] != root:
            self._parent[piece], piece = root, self._parent[piece]
        return root

    def component(self, piece: int) -> Component:
        """Component owning `piece`."""
        return self._components[self.find(piece)]

    def components(self) -> Iterator[Component]:
        """Live components, ordered by root index."""
        for root in sorted(self._components):
            yield self._components[root]

    @property
    def component_count(self) -> int:
        return len(self._components)

    def is_fully_joined(self) -> bool:
        """True iff exactly one component covers all pieces."""
        return len(self._components) == 1

    def largest_component(self) -> Component:
        """Component with most pieces; ties go to the smallest root index."""
        return min(self._components.values(), key=lambda c: (-c.size, c.root))

    def join(self, edge_a: int, edge_b: int) -> JoinOutcome:
        """
        Try to merge the components of two pieces along an edge pair.

        Args:
            edge_a: Global edge index on piece A
            edge_b: Global edge index on piece B

        Returns:
            JoinOutcome.JOINED on success, otherwise the rejection reason.
            A rejection leaves the structure untouched.

        Notes:
            - Component B is rotated rigidly so side_b faces opposite side_a,
              then translated so piece_b sits next to piece_a
            - Union by size; the merged cells stay in A's frame
        """
        piece_a, side_a = split_edge_index(edge_a)
        piece_b, side_b = split_edge_index(edge_b)

        with self._lock:
            root_a, root_b = self.find(piece_a), self.find(piece_b)
            if root_a == root_b:
                return JoinOutcome.ALREADY_CONNECTED

            comp_a = self._components[root_a]
            comp_b = self._components[root_b]

            facing_a = comp_a.facing(piece_a, side_a)
            facing_b = comp_b.facing(piece_b, side_b)
            turns = (facing_a + 2 - facing_b) % 4

            target = neighbour(comp_a.positions[piece_a], facing_a)
            anchor = rotate_cell(comp_b.positions[piece_b], turns)
            shift = (target[0] - anchor[0], target[1] - anchor[1])

            moved_cells = comp_b.transformed_cells(turns, shift)
            if any(cell in comp_a.cells for cell in moved_cells):
                return JoinOutcome.PLACEMENT_CONFLICT

            moved_rotations = {
                piece: (rotation + turns) % 4
                for piece, rotation in comp_b.rotations.items()
            }

            # Union by size: the bigger root survives and owns A's merged grid
            root = root_a if comp_a.size >= comp_b.size else root_b
            loser = root_b if root == root_a else root_a

            comp_a.absorb(moved_cells, moved_rotations)
            self._parent[loser] = root
            del self._components[root_a]
            del self._components[root_b]
            comp_a.root = root
            self._components[root] = comp_a

            logger.debug(
                "Joined P%d.%d <-> P%d.%d (turns=%d, shift=%s) -> component %d, size %d",
                piece_a, side_a, piece_b, side_b, turns, shift, root, comp_a.size,
            )
            return JoinOutcome.JOINED

    def extract(self, piece: int) -> Solution:
        """
        Dense Solution of the component owning `piece`.

        Returns:
            Solution with grid/rotations sized to the bounding box, top-left
            at (0, 0); unoccupied cells hold UNPLACED (rotation 0).
            status is left at its default (PARTIAL); the driver sets it.
        """
        comp = self.component(piece)
        rows, cols = comp.shape
        grid = np.full((rows, cols), UNPLACED, dtype=int)
        rotations = np.zeros((rows, cols), dtype=int)
        for (row, col), member in comp.cells.items():
            r, c = row - comp.min_row, col - comp.min_col
            grid[r, c] = member
            rotations[r, c] = comp.rotations[member]
        return Solution(grid=grid, rotations=rotations, n_pieces=self.n_pieces)

    def validate_invariants(self) -> None:
        """
        Validate union-find invariants.

        Raises:
            ValueError: If any invariant is violated

        Invariants:
            - U1: every live component is keyed by its root, and find(root) == root
            - U2: every piece belongs to exactly one live component
            - U3: find(piece) is the root of the component holding the piece
            - plus C1-C4 for each component
        """
        seen: dict[int, int] = {}
        for root, comp in self._components.items():
            # U1
            if comp.root != root or self.find(root) != root:
                raise ValueError(f"U1 violated: component keyed {root} has root {comp.root}")
            comp.validate_invariants()
            for piece in comp.positions:
                # U2
                if piece in seen:
                    raise ValueError(
                        f"U2 violated: piece {piece} in components {seen[piece]} and {root}"
                    )
                seen[piece] = root

        if len(seen) != self.n_pieces:
            missing = sorted(set(range(self.n_pieces)) - set(seen))
            raise ValueError(f"U2 violated: pieces {missing} in no component")

        # U3
        for piece, root in seen.items():
            if self.find(piece) != root:
                raise ValueError(f"U3 violated: find({piece}) = {self.find(piece)}, expected {root}")
