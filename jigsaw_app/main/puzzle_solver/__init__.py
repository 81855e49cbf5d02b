"""Puzzle solving pipeline: edge-match ranking and grid assembly."""
