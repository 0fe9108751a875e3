"""
Wayfinder Grid Package
======================

Ready-made 2D grid graphs and the grid movement model.
"""

from wayfinder.grid.builder import (
    NodeType,
    build_grid_graph,
    grid_from_strings,
    get_node_type,
    set_node_type,
)
from wayfinder.grid.mover import GridMover

__all__ = [
    # Builder
    "NodeType",
    "build_grid_graph",
    "grid_from_strings",
    "get_node_type",
    "set_node_type",
    # Mover
    "GridMover",
]
