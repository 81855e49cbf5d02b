"""
Solver Configuration Models.

This module defines the configuration structures for the grid assembler:
- SolverConfig: Ranking, assembly and finalization parameters
- RenderConfig: Solution preview rendering parameters

Pixel sizes in px, colors in BGR (OpenCV order).
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
import math
from typing import Any, Literal


EXECUTORS = ("thread", "process")


@dataclass
class SolverConfig:
    """
    Complete solver configuration.

    Organized in 4 groups:
    1. Ranking: Candidate scoring parallelism
    2. Assembly: Join loop parameters
    3. Finalization: What happens to the pieces afterwards
    4. Debug: Invariant checks and logging

    Notes:
        - Defaults reproduce the plain greedy assembler (serial scoring,
          every candidate eligible, rotations applied)
        - Build from JSON via SolverConfig.from_dict()
    """

    # ========== 1. Ranking ==========
    max_workers: int = 1
    """Number of workers for scorer calls. 1 = serial, no executor."""

    executor: Literal["thread", "process"] = "thread"
    """Executor type when max_workers > 1.
       - 'thread': ThreadPoolExecutor (any scorer)
       - 'process': ProcessPoolExecutor (scorer and edges must be picklable)"""

    # ========== 2. Assembly ==========
    max_score: float = math.inf
    """Candidates with score > max_score are never attempted.
       Ranked order is ascending, so the join loop stops at the first one.
       Default inf: every candidate is eligible (inf scores included)."""

    # ========== 3. Finalization ==========
    apply_rotations: bool = True
    """Rotate every placed piece by its final offset after the join loop."""

    # ========== 4. Debug ==========
    validate_invariants: bool = False
    """Run GridUnionFind.validate_invariants() after every join call (slow)."""

    log_rejections: bool = False
    """Log each rejected join at DEBUG level."""

    def __post_init__(self):
        # JSON input: reject wrong types before comparing
        if not isinstance(self.max_workers, int) or isinstance(self.max_workers, bool):
            raise ValueError(f"max_workers must be an integer, got {self.max_workers!r}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.executor not in EXECUTORS:
            raise ValueError(f"executor must be one of {EXECUTORS}, got {self.executor!r}")
        if not isinstance(self.max_score, (int, float)) or isinstance(self.max_score, bool):
            raise ValueError(f"max_score must be a number, got {self.max_score!r}")
        for name in ("apply_rotations", "validate_invariants", "log_rejections"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be true or false, got {getattr(self, name)!r}")
        self.max_score = float(self.max_score)
        if math.isnan(self.max_score):
            raise ValueError("max_score must not be NaN")

    @classmethod
    def from_dict(cls, values: dict[str, Any] | None) -> SolverConfig:
        """
        Create SolverConfig from a JSON-like dict.

        Raises:
            ValueError: Unknown keys or invalid values
        """
        values = dict(values or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown solver config keys: {unknown}")
        return cls(**values)


@dataclass
class RenderConfig:
    """Configuration for solution preview rendering."""
    # Layout
    cell_size_px: int = 120  # Side length of one grid cell
    margin_px: int = 20  # Margin around the assembled grid
    gap_px: int = 0  # Spacing between cells

    # Colors (BGR)
    background_color: tuple[int, int, int] = (255, 255, 255)
    unplaced_color: tuple[int, int, int] = (200, 200, 200)
    outline_color: tuple[int, int, int] = (40, 40, 40)
    piece_colors: list[tuple[int, int, int]] = field(default_factory=lambda: [
        (70, 70, 70), (100, 60, 60), (60, 100, 60),
        (60, 60, 100), (90, 90, 60), (60, 90, 90),
    ])

    # Labels
    draw_labels: bool = True
    font_scale: float = 0.5

    def __post_init__(self):
        if self.cell_size_px < 8:
            raise ValueError(f"cell_size_px must be >= 8, got {self.cell_size_px}")
