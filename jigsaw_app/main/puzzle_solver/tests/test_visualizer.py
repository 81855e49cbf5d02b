"""
Tests for SolutionVisualizer (solver_visualizer.py).

Test Groups:
- D1-D4: render_assembled / render_grid_diagram / visualize_solution
"""

import logging

import cv2
import numpy as np
import pytest

from jigsaw_app.main.puzzle_solver.solver.config import RenderConfig
from jigsaw_app.main.puzzle_solver.solver.models import Piece, Solution, SolveStatus, UNPLACED
from jigsaw_app.main.puzzle_solver.solver.solver_visualizer import SolutionVisualizer


@pytest.fixture
def render_config():
    return RenderConfig(cell_size_px=40, margin_px=10, gap_px=2)


@pytest.fixture
def solved_2x1():
    return Solution(
        grid=np.array([[0], [1]]),
        rotations=np.array([[0], [1]]),
        n_pieces=2,
        status=SolveStatus.SOLVED,
    )


def test_D1_canvas_size(render_config, solved_2x1, make_pieces):
    """D1: Canvas = margins + cells + gaps"""
    print("\nTest D1: Canvas size...", end=" ")

    img = SolutionVisualizer(config=render_config).render_assembled(solved_2x1, make_pieces(2))

    # width: 2*10 + 1*42 - 2, height: 2*10 + 2*42 - 2
    assert img.shape == (102, 60, 3)
    assert img.dtype == np.uint8

    print("✓")


def test_D2_piece_images_are_pasted(render_config):
    """D2: Piece bitmap is resized into its cell; mask limits the paste"""
    image = np.zeros((10, 10, 3), dtype=np.uint8)
    image[:] = (0, 0, 255)
    mask = np.zeros((10, 10), dtype=np.uint8)
    mask[:, :5] = 1
    pieces = [Piece.with_edge_types(0, image=image, mask=mask)]
    solution = Solution(grid=np.array([[0]]), rotations=np.array([[0]]), n_pieces=1,
                        status=SolveStatus.SOLVED)

    img = SolutionVisualizer(config=render_config).render_assembled(solution, pieces)

    # Left half red, right half background
    assert tuple(img[30, 15]) == (0, 0, 255)
    assert tuple(img[30, 45]) == render_config.background_color


def test_D3_partial_warns(render_config, make_pieces, caplog):
    """D3: Unplaced cells are grey and a warning is logged"""
    solution = Solution(grid=np.array([[0, UNPLACED]]), rotations=np.zeros((1, 2), dtype=int),
                        n_pieces=3)

    with caplog.at_level(logging.WARNING):
        img = SolutionVisualizer(config=render_config).render_assembled(solution, make_pieces(3))

    assert "only partial image generated" in caplog.text
    # Point inside the empty cell, off the diagonals
    assert tuple(img[15, 72]) == render_config.unplaced_color


def test_D4_visualize_solution_writes_files(tmp_path, render_config, solved_2x1, make_pieces):
    """D4: Both PNGs are written and readable"""
    print("\nTest D4: Write images...", end=" ")

    visualizer = SolutionVisualizer(output_dir=str(tmp_path / "out"), config=render_config)
    files = visualizer.visualize_solution(solved_2x1, make_pieces(2), "demo")

    assert files == ["solution_assembled_demo.png", "solution_grid_demo.png"]
    for name in files:
        img = cv2.imread(str(tmp_path / "out" / name))
        assert img is not None

    diagram = cv2.imread(str(tmp_path / "out" / files[1]))
    assert diagram.shape[0] == 102 + 25

    print("✓")
