"""
Solver Utility Functions.

This module provides utility functions for the puzzle solver:
- conversion: Input validation and JSON payload conversion
"""

from .conversion import (
    validate_pieces_format,
    pieces_from_payload,
    scorer_from_payload,
    solution_to_dict,
)

__all__ = [
    "validate_pieces_format",
    "pieces_from_payload",
    "scorer_from_payload",
    "solution_to_dict",
]
