"""
Grid Component (one connected group of pieces).

A Component owns a sparse grid in its own coordinate frame:
- cells: (row, col) -> piece index
- positions: piece index -> (row, col)   (inverse of cells)
- rotations: piece index -> clockwise quarter turns relative to the frame
- bounding box of occupied cells

Coordinate convention:
    row grows downwards, col grows to the right.
    One clockwise grid turn maps (row, col) -> (col, -row).

Invariants (validated by validate_invariants()):
    - C1: positions is the exact inverse of cells
    - C2: rotations has exactly the pieces of positions, values in 0..3
    - C3: bounding box encloses every cell and is tight
    - C4: root is one of the component's pieces
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..models import Side


Cell = tuple[int, int]

STEPS: dict[int, Cell] = {
    Side.TOP: (-1, 0),
    Side.RIGHT: (0, 1),
    Side.BOTTOM: (1, 0),
    Side.LEFT: (0, -1),
}
"""Grid step to the neighbouring cell in each world direction."""


def rotate_cell(cell: Cell, turns: int) -> Cell:
    """
    Rotate a grid coordinate clockwise about (0, 0).

    Example:
        >>> rotate_cell((0, 1), 1)   # right neighbour ends up below
        (1, 0)
    """
    row, col = cell
    for _ in range(turns % 4):
        row, col = col, -row
    return row, col


def neighbour(cell: Cell, direction: int) -> Cell:
    """Cell adjacent to `cell` in world direction `direction`."""
    d_row, d_col = STEPS[direction % 4]
    return cell[0] + d_row, cell[1] + d_col


@dataclass
class Component:
    """
    Sparse grid of one connected group of pieces.

    Attributes:
        root: Representative piece index
        cells: (row, col) -> piece index
        positions: piece index -> (row, col)
        rotations: piece index -> rotation offset (0..3) in this frame
        min_row, max_row, min_col, max_col: Bounding box (inclusive)
    """
    root: int
    cells: dict[Cell, int] = field(default_factory=dict)
    positions: dict[int, Cell] = field(default_factory=dict)
    rotations: dict[int, int] = field(default_factory=dict)
    min_row: int = 0
    max_row: int = 0
    min_col: int = 0
    max_col: int = 0

    @classmethod
    def singleton(cls, piece: int) -> Component:
        """1x1 component {(0,0): piece} with rotation 0."""
        return cls(
            root=piece,
            cells={(0, 0): piece},
            positions={piece: (0, 0)},
            rotations={piece: 0},
        )

    @property
    def size(self) -> int:
        return len(self.cells)

    @property
    def shape(self) -> tuple[int, int]:
        """(rows, cols) of the bounding box."""
        return self.max_row - self.min_row + 1, self.max_col - self.min_col + 1

    def facing(self, piece: int, side: int) -> int:
        """World direction (in this frame) of a piece's local side."""
        return (side + self.rotations[piece]) % 4

    def transformed_cells(self, turns: int, shift: Cell) -> dict[Cell, int]:
        """Cells after a rigid clockwise rotation by `turns`, then `shift`."""
        moved = {}
        for cell, piece in self.cells.items():
            row, col = rotate_cell(cell, turns)
            moved[(row + shift[0], col + shift[1])] = piece
        return moved

    def absorb(self, moved_cells: dict[Cell, int], moved_rotations: dict[int, int]) -> None:
        """
        Add already-transformed cells of another component.

        Notes:
            - Caller guarantees no cell of moved_cells is occupied here
        """
        for cell, piece in moved_cells.items():
            self.cells[cell] = piece
            self.positions[piece] = cell
        self.rotations.update(moved_rotations)
        self._recompute_bounds()

    def _recompute_bounds(self) -> None:
        rows = [row for row, _ in self.cells]
        cols = [col for _, col in self.cells]
        self.min_row, self.max_row = min(rows), max(rows)
        self.min_col, self.max_col = min(cols), max(cols)

    def validate_invariants(self) -> None:
        """
        Validate component invariants.

        Raises:
            ValueError: If any invariant is violated
        """
        # C1: positions == inverse(cells); one cell per piece, one piece per cell
        inverse = {piece: cell for cell, piece in self.cells.items()}
        if len(inverse) != len(self.cells):
            raise ValueError(f"C1 violated: a piece occupies several cells in component {self.root}")
        if inverse != self.positions:
            raise ValueError(
                f"C1 violated: positions {self.positions} do not invert cells {self.cells}"
            )

        # C2: rotations cover exactly the pieces, values 0..3
        if set(self.rotations) != set(self.positions):
            raise ValueError(
                f"C2 violated: rotations keys {set(self.rotations)} != pieces {set(self.positions)}"
            )
        bad = {p: r for p, r in self.rotations.items() if r not in range(4)}
        if bad:
            raise ValueError(f"C2 violated: rotations out of 0..3: {bad}")

        # C3: tight bounding box
        rows = [row for row, _ in self.cells]
        cols = [col for _, col in self.cells]
        if (min(rows), max(rows), min(cols), max(cols)) != (
                self.min_row, self.max_row, self.min_col, self.max_col):
            raise ValueError(
                f"C3 violated: bounds ({self.min_row}, {self.max_row}, {self.min_col}, {self.max_col}) "
                f"do not match cells"
            )

        # C4: root belongs to the component
        if self.root not in self.positions:
            raise ValueError(f"C4 violated: root {self.root} not in component")
