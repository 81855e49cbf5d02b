"""
Input Validation and Payload Conversion.

This module checks solver input and converts between JSON-like payloads
and solver objects:
- validate_pieces_format: Precondition check before solving
- pieces_from_payload: Piece list from a count or list of piece dicts
- scorer_from_payload: TableScorer from a score matrix or score triples
- solution_to_dict: JSON-ready solution summary

Payload format (see routes /api/solve):
    {
        "pieces": 4 | [{"label": "A1", "edge_types": ["flat", "tab", "blank", "flat"]}, ...],
        "score_matrix": [[...], ...]          # E x E, or
        "scores": [[edge_a, edge_b, score], ...],
        "gate_edge_types": false,
        "config": {...}                       # SolverConfig fields
    }
"""

from __future__ import annotations
import math
from typing import Any, Sequence, TYPE_CHECKING

from ..models import Edge, EdgeType, Piece, SIDES_PER_PIECE
from ..scoring import EdgeTypeGate, TableScorer

if TYPE_CHECKING:
    from ..models import Solution
    from ..scoring import Scorer


def validate_pieces_format(pieces: Sequence[Piece]) -> None:
    """
    Validate solver input.

    Args:
        pieces: Pieces to solve

    Raises:
        ValueError: If pieces is empty, indices are not 0..N-1 in order,
                    or any piece does not carry exactly 4 consistent edges

    Checks:
        - len(pieces) >= 1
        - pieces[k].index == k
        - len(piece.edges) == 4
        - edges[s].piece_index == piece.index and edges[s].side == s
    """
    if pieces is None or len(pieces) == 0:
        raise ValueError("Cannot solve a puzzle without pieces")

    for position, piece in enumerate(pieces):
        if piece.index != position:
            raise ValueError(f"Piece at position {position} has index {piece.index}")

        edges = getattr(piece, "edges", None)
        if edges is None or len(edges) != SIDES_PER_PIECE:
            count = 0 if edges is None else len(edges)
            raise ValueError(f"Piece {position} must have {SIDES_PER_PIECE} edges, got {count}")

        for side, edge in enumerate(edges):
            if not isinstance(edge, Edge):
                raise ValueError(f"Piece {position} side {side}: expected Edge, got {type(edge).__name__}")
            if edge.piece_index != position or edge.side != side:
                raise ValueError(
                    f"Piece {position} side {side}: edge is labelled "
                    f"({edge.piece_index}, {edge.side})"
                )


def _parse_edge_types(raw: Any, position: int) -> list[EdgeType]:
    if raw is None:
        return [EdgeType.UNKNOWN] * SIDES_PER_PIECE
    if not isinstance(raw, (list, tuple)) or len(raw) != SIDES_PER_PIECE:
        raise ValueError(f"Piece {position}: edge_types must be a list of {SIDES_PER_PIECE} names")
    try:
        return [EdgeType(str(name).lower()) for name in raw]
    except ValueError:
        valid = [t.value for t in EdgeType]
        raise ValueError(f"Piece {position}: unknown edge type in {raw}, expected {valid}")


def pieces_from_payload(value: Any) -> list[Piece]:
    """
    Build pieces from a payload entry.

    Args:
        value: Piece count (int) or list of piece dicts with optional
               "label" and "edge_types"

    Returns:
        Pieces with indices 0..N-1

    Raises:
        ValueError: Malformed value
    """
    if isinstance(value, bool):
        raise ValueError("pieces must be a count or a list")

    if isinstance(value, int):
        if value < 1:
            raise ValueError(f"pieces must be >= 1, got {value}")
        return [Piece.with_edge_types(i) for i in range(value)]

    if not isinstance(value, list) or not value:
        raise ValueError("pieces must be a positive count or a non-empty list")

    pieces = []
    for position, entry in enumerate(value):
        if not isinstance(entry, dict):
            raise ValueError(f"Piece {position}: expected object, got {type(entry).__name__}")
        edge_types = _parse_edge_types(entry.get("edge_types"), position)
        pieces.append(Piece.with_edge_types(position, edge_types, label=entry.get("label")))
    return pieces


def scorer_from_payload(payload: dict[str, Any], n_edges: int) -> Scorer:
    """
    Build a scorer from "score_matrix" or "scores".

    Args:
        payload: Request payload
        n_edges: 4 * number of pieces

    Returns:
        TableScorer, wrapped in EdgeTypeGate if payload["gate_edge_types"]

    Raises:
        ValueError: Missing scores, wrong matrix size or edge index out of range
    """
    if "score_matrix" in payload:
        try:
            scorer = TableScorer.from_matrix(payload["score_matrix"])
        except TypeError:
            raise ValueError("score_matrix must be a square list of numbers")
        if len(scorer) != n_edges * (n_edges + 1) // 2:
            raise ValueError(f"score_matrix must be {n_edges} x {n_edges}")
    elif "scores" in payload:
        if not isinstance(payload["scores"], list):
            raise ValueError("scores must be a list of [edge_a, edge_b, score]")
        table = {}
        for entry in payload["scores"]:
            if not isinstance(entry, (list, tuple)) or len(entry) != 3:
                raise ValueError(f"scores entries must be [edge_a, edge_b, score], got {entry}")
            try:
                edge_a, edge_b = int(entry[0]), int(entry[1])
                score = math.inf if entry[2] is None else float(entry[2])
            except TypeError:
                raise ValueError(f"scores entries must be [edge_a, edge_b, score], got {entry}")
            for edge in (edge_a, edge_b):
                if not 0 <= edge < n_edges:
                    raise ValueError(f"Edge index {edge} out of range 0..{n_edges - 1}")
            table[(edge_a, edge_b)] = score
        scorer = TableScorer(table)
    else:
        raise ValueError("Payload needs 'score_matrix' or 'scores'")

    if payload.get("gate_edge_types", False):
        return EdgeTypeGate(scorer)
    return scorer


def solution_to_dict(solution: Solution, success: bool) -> dict[str, Any]:
    """JSON-ready summary: success flag + Solution.to_dict()."""
    result = {"success": bool(success)}
    result.update(solution.to_dict())
    return result
