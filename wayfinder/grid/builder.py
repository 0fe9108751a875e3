"""
Grid Builder
============

Builds ``NodeGraph`` instances for rectangular 2D grids.

Nodes are ``(x, y)`` tuples carrying ``x``, ``y`` and ``type`` attributes.
Adjacency is wired once, in row-major neighbor order, and never changes;
occupancy is expressed by flipping a node's ``type`` between searches.
"""

from enum import Enum
from typing import Hashable, Iterable, Sequence

from wayfinder.core.graph import NodeGraph


class NodeType(str, Enum):
    """Traversability of a grid cell."""

    OPEN = "open"
    """The cell may be entered."""

    CLOSED = "closed"
    """The cell is occupied or blocked."""


# Neighbor offsets (dx, dy) in row-major order. The order decides how the
# engine breaks ties between equally good candidates.
ORTHOGONAL_OFFSETS: tuple[tuple[int, int], ...] = ((0, -1), (-1, 0), (1, 0), (0, 1))
ALL_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0), (1, 0),
    (-1, 1), (0, 1), (1, 1),
)

OPEN_CHARS = frozenset(".")
CLOSED_CHARS = frozenset("#")


def build_grid_graph(
    width: int,
    height: int,
    closed: Iterable[tuple[int, int]] = (),
    diagonal: bool = True,
) -> NodeGraph:
    """
    Build a width x height grid graph.

    Parameters
    ----------
    width, height : int
        Grid dimensions, both positive
    closed : iterable of (x, y)
        Cells that start out closed
    diagonal : bool
        Wire the four diagonal neighbors as well as the orthogonal ones

    Returns
    -------
    NodeGraph
        Graph with one node per cell

    Raises
    ------
    ValueError
        If a dimension is not positive or a closed cell lies off the grid
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")

    closed_cells = set(closed)
    for cell in closed_cells:
        x, y = cell
        if not (0 <= x < width and 0 <= y < height):
            raise ValueError(f"Closed cell {cell!r} is outside the {width}x{height} grid")

    graph = NodeGraph()
    for y in range(height):
        for x in range(width):
            node_type = NodeType.CLOSED if (x, y) in closed_cells else NodeType.OPEN
            graph.add_node((x, y), x=x, y=y, type=node_type)

    offsets = ALL_OFFSETS if diagonal else ORTHOGONAL_OFFSETS
    for y in range(height):
        for x in range(width):
            for dx, dy in offsets:
                ax, ay = x + dx, y + dy
                if 0 <= ax < width and 0 <= ay < height:
                    graph.connect((x, y), (ax, ay), bidirectional=False)

    return graph


def grid_from_strings(rows: Sequence[str], diagonal: bool = True) -> NodeGraph:
    """
    Build a grid graph from a character map.

    ``.`` is an open cell and ``#`` a closed one. Row 0 is ``y == 0``.

    Example
    -------
    >>> graph = grid_from_strings([
    ...     "...",
    ...     ".#.",
    ...     "...",
    ... ])
    >>> get_node_type(graph, (1, 1))
    <NodeType.CLOSED: 'closed'>
    """
    if not rows:
        raise ValueError("Grid map must contain at least one row")

    width = len(rows[0])
    closed: list[tuple[int, int]] = []
    for y, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"Row {y} has length {len(row)}, expected {width}")
        for x, char in enumerate(row):
            if char in CLOSED_CHARS:
                closed.append((x, y))
            elif char not in OPEN_CHARS:
                raise ValueError(f"Unknown grid character {char!r} at ({x}, {y})")

    return build_grid_graph(width, len(rows), closed=closed, diagonal=diagonal)


def get_node_type(graph: NodeGraph, node: Hashable) -> NodeType:
    """Current traversability of ``node``; unknown nodes read as closed."""
    return NodeType(graph.get_attribute(node, "type", NodeType.CLOSED))


def set_node_type(graph: NodeGraph, node: Hashable, node_type: NodeType) -> None:
    """
    Change a node's traversability.

    Takes effect for searches started after the call returns.
    """
    graph.set_attribute(node, "type", NodeType(node_type))
