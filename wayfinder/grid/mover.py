"""
Grid Mover
==========

Movement model for 2D grids built by ``wayfinder.grid.builder``.

- Orthogonal steps cost 1.0, diagonal steps 1.4 (configurable)
- Heuristic: octile distance plus a small straight-line tie-break term
- Closed cells can't be entered; diagonal steps can't cut corners
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from wayfinder.core.graph import NodeGraph
from wayfinder.core.mover import BaseMover
from wayfinder.core.schema import MoveCosts
from wayfinder.grid.builder import NodeType, get_node_type

logger = logging.getLogger(__name__)

GridNode = tuple[int, int]


class GridMover(BaseMover):
    """
    Mover for grids whose node handles are ``(x, y)`` tuples.

    The mover keeps a read-only reference to the graph and looks up each
    cell's ``type`` when an edge is evaluated, so occupancy changes made
    between searches are always honored.

    Example
    -------
    >>> from wayfinder.grid.builder import build_grid_graph
    >>> graph = build_grid_graph(3, 3)
    >>> mover = GridMover(graph)
    >>> mover.cost_for_move((0, 0), (1, 1))
    1.4
    """

    def __init__(self, graph: NodeGraph, costs: Optional[MoveCosts] = None):
        """
        Initialize the mover.

        Parameters
        ----------
        graph : NodeGraph
            Grid graph whose node attributes carry ``type``
        costs : MoveCosts, optional
            Cost configuration. If None, uses the defaults.
        """
        self._graph = graph
        self.costs = costs or MoveCosts()

    @classmethod
    def from_config(cls, graph: NodeGraph, config: dict[str, Any]) -> "GridMover":
        """Build a mover from a plain configuration dict."""
        return cls(graph, MoveCosts(**config))

    @classmethod
    def from_json_file(cls, graph: NodeGraph, path: Path | str) -> "GridMover":
        """Load cost configuration from a JSON file."""
        with open(path) as f:
            config = json.load(f)
        return cls.from_config(graph, config)

    def heuristic(self, node: GridNode, target: GridNode, start: GridNode) -> float:
        # Octile distance. A diagonal never beats two orthogonal steps, and
        # with diagonals disabled this reduces to Manhattan distance.
        dx = abs(node[0] - target[0])
        dy = abs(node[1] - target[1])
        orthogonal = self.costs.orthogonal
        diagonal = min(self.costs.diagonal, 2 * orthogonal)
        if not self.costs.allow_diagonal:
            diagonal = 2 * orthogonal
        h = orthogonal * (dx + dy) + (diagonal - 2 * orthogonal) * min(dx, dy)

        # Cross product of node->target and start->target grows as the node
        # drifts off the straight line, so straighter candidates win ties.
        dx1 = node[0] - target[0]
        dy1 = node[1] - target[1]
        dx2 = start[0] - target[0]
        dy2 = start[1] - target[1]
        cross = abs(dx1 * dy2 - dx2 * dy1)
        return h + cross * self.costs.tie_break_scale

    def cost_for_move(self, node: GridNode, adjacent: GridNode) -> float:
        source_type = get_node_type(self._graph, node)
        dest_type = get_node_type(self._graph, adjacent)

        # Leaving a closed cell (e.g. the mover's own occupied tile) is allowed
        if dest_type == NodeType.OPEN:
            return self.costs.step_cost(self.is_diagonal(node, adjacent))

        logger.error(
            "Unhandled node type combination for move %r (%s) -> %r (%s)",
            node, source_type.value, adjacent, dest_type.value,
        )
        return 0.0

    def passable(self, node: GridNode, adjacent: GridNode) -> bool:
        if get_node_type(self._graph, adjacent) == NodeType.CLOSED:
            return False

        if not self.is_diagonal(node, adjacent):
            return True

        if not self.costs.allow_diagonal:
            return False

        # Both cells flanking the diagonal must be open
        corners = ((adjacent[0], node[1]), (node[0], adjacent[1]))
        return all(get_node_type(self._graph, corner) == NodeType.OPEN for corner in corners)

    @staticmethod
    def is_diagonal(node: GridNode, adjacent: GridNode) -> bool:
        """True when the step changes both coordinates."""
        return node[0] != adjacent[0] and node[1] != adjacent[1]

    def __repr__(self) -> str:
        return (
            f"GridMover(orthogonal={self.costs.orthogonal}, diagonal={self.costs.diagonal}, "
            f"allow_diagonal={self.costs.allow_diagonal})"
        )
