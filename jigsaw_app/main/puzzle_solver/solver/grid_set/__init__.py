"""
Grid Set Module.

Disjoint-set of pieces with a 2D placement grid per set:
- GridUnionFind: find / join / extract
- Component: Sparse grid + rotations of one connected group
- rotate_cell, neighbour: Grid coordinate helpers
"""

from .component import Component, rotate_cell, neighbour, STEPS
from .disjoint_set import GridUnionFind

__all__ = [
    "GridUnionFind",
    "Component",
    "rotate_cell",
    "neighbour",
    "STEPS",
]
