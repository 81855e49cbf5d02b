from __future__ import annotations
import logging
import os
from typing import Optional, Sequence

import cv2
import numpy as np

from .config import RenderConfig
from .models import Piece, Solution, UNPLACED


logger = logging.getLogger(__name__)


class SolutionVisualizer:
    """Renders solved (or partial) grids: assembled preview and layout diagram."""

    def __init__(self, output_dir: str = 'output', config: Optional[RenderConfig] = None):
        self.output_dir = output_dir
        self.config = config or RenderConfig()

    def visualize_solution(self, solution: Solution,
                           pieces: Sequence[Piece],
                           name: str) -> list[str]:
        """Write assembled and grid diagram images; returns the file names."""
        os.makedirs(self.output_dir, exist_ok=True)
        output_files = []

        assembled_img = self.render_assembled(solution, pieces)
        filename = f"solution_assembled_{name}.png"
        cv2.imwrite(os.path.join(self.output_dir, filename), assembled_img)
        output_files.append(filename)

        grid_img = self.render_grid_diagram(solution)
        filename = f"solution_grid_{name}.png"
        cv2.imwrite(os.path.join(self.output_dir, filename), grid_img)
        output_files.append(filename)

        return output_files

    def _cell_origin(self, row: int, col: int) -> tuple[int, int]:
        cfg = self.config
        step = cfg.cell_size_px + cfg.gap_px
        return cfg.margin_px + col * step, cfg.margin_px + row * step

    def _canvas(self, rows: int, cols: int, extra_height: int = 0) -> np.ndarray:
        cfg = self.config
        step = cfg.cell_size_px + cfg.gap_px
        width = 2 * cfg.margin_px + cols * step - cfg.gap_px
        height = 2 * cfg.margin_px + rows * step - cfg.gap_px + extra_height
        img = np.empty((height, width, 3), dtype=np.uint8)
        img[:] = cfg.background_color
        return img

    def render_assembled(self, solution: Solution, pieces: Sequence[Piece]) -> np.ndarray:
        """
        Tile the (already rotated) piece bitmaps into the solution grid.

        Pieces without an image are drawn as colored squares with their index.
        Unplaced cells are filled with unplaced_color and crossed out.
        """
        cfg = self.config
        size = cfg.cell_size_px
        img = self._canvas(solution.rows, solution.cols)

        for row in range(solution.rows):
            for col in range(solution.cols):
                x, y = self._cell_origin(row, col)
                piece_index = int(solution.grid[row, col])

                if piece_index == UNPLACED:
                    cv2.rectangle(img, (x, y), (x + size - 1, y + size - 1), cfg.unplaced_color, -1)
                    cv2.line(img, (x, y), (x + size - 1, y + size - 1), cfg.outline_color, 1)
                    cv2.line(img, (x + size - 1, y), (x, y + size - 1), cfg.outline_color, 1)
                    continue

                piece = pieces[piece_index]
                if piece.image is not None:
                    self._paste_piece(img, piece, x, y)
                else:
                    fill_color = cfg.piece_colors[piece_index % len(cfg.piece_colors)]
                    cv2.rectangle(img, (x, y), (x + size - 1, y + size - 1), fill_color, -1)
                    cv2.rectangle(img, (x, y), (x + size - 1, y + size - 1), cfg.outline_color, 2)
                    if cfg.draw_labels:
                        label = piece.label if piece.label is not None else f"P{piece_index}"
                        cv2.putText(img, str(label), (x + 8, y + size // 2),
                                    cv2.FONT_HERSHEY_SIMPLEX, cfg.font_scale, (255, 255, 255), 1, cv2.LINE_AA)

        if solution.unplaced_cells or solution.unplaced_pieces:
            logger.warning("Failed, only partial image generated (unplaced pieces: %s)",
                           solution.unplaced_pieces)
        return img

    def _paste_piece(self, img: np.ndarray, piece: Piece, x: int, y: int) -> None:
        size = self.config.cell_size_px
        tile = piece.image.astype(np.uint8)
        if tile.ndim == 2:
            tile = cv2.cvtColor(tile, cv2.COLOR_GRAY2BGR)
        tile = np.ascontiguousarray(tile[:, :, :3])
        tile = cv2.resize(tile, (size, size), interpolation=cv2.INTER_LINEAR)
        target = img[y:y + size, x:x + size]

        if piece.mask is None:
            target[:] = tile
            return

        mask = cv2.resize(piece.mask.astype(np.uint8), (size, size), interpolation=cv2.INTER_NEAREST)
        target[mask > 0] = tile[mask > 0]

    def render_grid_diagram(self, solution: Solution) -> np.ndarray:
        """Simple grid diagram showing piece index and rotation per cell."""
        cfg = self.config
        size = cfg.cell_size_px
        header = 25
        img = self._canvas(solution.rows, solution.cols, extra_height=header)

        title = f"LAYOUT {solution.rows}x{solution.cols} ({solution.status.value})"
        cv2.putText(img, title, (cfg.margin_px, 18),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 0), 1, cv2.LINE_AA)

        for row in range(solution.rows):
            for col in range(solution.cols):
                x, y = self._cell_origin(row, col)
                y += header
                cv2.rectangle(img, (x, y), (x + size - 1, y + size - 1), (0, 0, 0), 1)

                piece_index = solution.piece_at(row, col)
                if piece_index is None:
                    text = "--"
                else:
                    text = f"P{piece_index}"
                    rot_text = f"r{int(solution.rotations[row, col])}"
                    cv2.putText(img, rot_text, (x + 3, y + size - 4),
                                cv2.FONT_HERSHEY_SIMPLEX, 0.35, (100, 100, 100), 1, cv2.LINE_AA)

                text_size = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)[0]
                text_x = x + (size - text_size[0]) // 2
                text_y = y + size // 2 + 5
                cv2.putText(img, text, (text_x, text_y),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 0), 1, cv2.LINE_AA)

        return img
