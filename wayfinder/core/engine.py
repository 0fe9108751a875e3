"""
Pathfinder Engine
=================

Generic search over a ``NodeGraph`` driven by an injected mover.

Queries:
1. find_path - A* shortest path between two nodes
2. find_all_reachable - every node within a cost budget of an origin
3. cost_of_path - re-derive the cost of an existing path

Key Design Principles:
1. The graph is READ-ONLY here - searches never touch adjacency or attributes
2. All cost, heuristic and traversability decisions belong to the mover
3. Search state is built per call and discarded on return
4. Bad input never raises - it is reported through the result
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
import logging
import math
import numbers
from typing import Any, Hashable, Iterator, Optional, Sequence

from wayfinder.core.graph import NodeGraph
from wayfinder.core.mover import BaseMover
from wayfinder.core.state import OpenSet, SearchStateTable

logger = logging.getLogger(__name__)


class SearchStatus(str, Enum):
    """Outcome of a shortest-path query."""

    FOUND = "found"
    """A path from start to target was found."""

    NO_PATH = "no_path"
    """The frontier was exhausted before reaching the target."""

    INVALID_INPUT = "invalid_input"
    """Missing mover, start or target, or nodes not in the graph."""


@dataclass
class PathResult:
    """
    Result of ``Pathfinder.find_path``.

    Attributes
    ----------
    status : SearchStatus
        Distinguishes "no route right now" from "bad request"
    path : list
        Nodes from start to target, both inclusive. Empty unless found.
    cost : float
        Accumulated cost of the path as seen by the search
    nodes_expanded : int
        Number of nodes taken off the open set and expanded
    reason : str
        Short machine-readable explanation for non-found results
    """

    status: SearchStatus
    path: list[Hashable] = field(default_factory=list)
    cost: float = 0.0
    nodes_expanded: int = 0
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.status == SearchStatus.FOUND

    @property
    def start(self) -> Optional[Hashable]:
        return self.path[0] if self.path else None

    @property
    def target(self) -> Optional[Hashable]:
        return self.path[-1] if self.path else None

    def to_dict(self) -> dict[str, Any]:
        """Convert the result to a JSON-serializable dictionary."""
        return {
            "status": self.status.value,
            "path": [list(n) if isinstance(n, tuple) else n for n in self.path],
            "cost": round(self.cost, 6),
            "nodes_expanded": self.nodes_expanded,
            "reason": self.reason,
        }

    def __bool__(self) -> bool:
        return self.found

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.path)

    def __len__(self) -> int:
        return len(self.path)


class Pathfinder:
    """
    Search engine bound to one graph.

    The engine holds nothing but the graph reference; every query builds
    its own ``SearchStateTable``. One Pathfinder can therefore be shared by
    callers on different threads as long as nobody mutates adjacency while
    searches run.

    Example
    -------
    >>> from wayfinder.grid import GridMover, build_grid_graph
    >>> graph = build_grid_graph(3, 3)
    >>> mover = GridMover(graph)
    >>> finder = Pathfinder(graph)
    >>> result = finder.find_path(mover, (0, 0), (2, 2))
    >>> result.path
    [(0, 0), (1, 1), (2, 2)]
    >>> finder.find_all_reachable(mover, (0, 0), 1.0) == {(0, 0), (1, 0), (0, 1)}
    True
    """

    def __init__(self, graph: NodeGraph):
        """
        Initialize the engine.

        Parameters
        ----------
        graph : NodeGraph
            Any object exposing ``adjacent(node)`` and ``__contains__``.
        """
        if graph is None:
            raise ValueError("Pathfinder requires a graph")
        self._graph = graph

    @property
    def graph(self) -> NodeGraph:
        """The graph searched by this engine (read-only access)."""
        return self._graph

    def find_path(
        self,
        mover: BaseMover,
        start: Hashable,
        target: Hashable,
    ) -> PathResult:
        """
        Find the cheapest path from ``start`` to ``target`` using A*.

        The open set is ordered by f = g + h; equal f values pop in the
        order they were pushed, which follows adjacency order. A cheaper
        route to a node already queued or already expanded evicts it so it
        is expanded again with the better cost.

        Parameters
        ----------
        mover : BaseMover
            Strategy answering heuristic, step cost and passability
        start : Hashable
            Node to search from
        target : Hashable
            Node to reach

        Returns
        -------
        PathResult
            FOUND with the path, NO_PATH, or INVALID_INPUT
        """
        problem = self._validate(mover, start, target=target, check_target=True)
        if problem:
            logger.warning("find_path rejected input: %s", problem)
            return PathResult(status=SearchStatus.INVALID_INPUT, reason=problem)

        if start == target:
            return PathResult(status=SearchStatus.FOUND, path=[start])

        table = SearchStateTable()
        open_set = OpenSet()
        closed: set[Hashable] = set()

        table.update(start, g=0.0, h=mover.heuristic(start, target, start))
        current = start
        expanded = 0

        while current != target:
            expanded += 1
            closed.add(current)
            current_g = table.g(current)

            for adjacent in self._graph.adjacent(current):
                if not mover.passable(current, adjacent):
                    continue

                cost = current_g + mover.cost_for_move(current, adjacent)

                if cost < table.g(adjacent):
                    open_set.remove(adjacent)
                    closed.discard(adjacent)

                if adjacent not in open_set and adjacent not in closed:
                    data = table.update(
                        adjacent,
                        g=cost,
                        h=mover.heuristic(adjacent, target, start),
                        parent=current,
                    )
                    open_set.push(adjacent, data.f)

            if not open_set:
                logger.debug(
                    "No path from %r to %r after expanding %d nodes",
                    start, target, expanded,
                )
                return PathResult(
                    status=SearchStatus.NO_PATH,
                    nodes_expanded=expanded,
                    reason="frontier_exhausted",
                )

            current = open_set.pop()

        return PathResult(
            status=SearchStatus.FOUND,
            path=table.retrace(current),
            cost=table.g(current),
            nodes_expanded=expanded,
        )

    def find_all_reachable(
        self,
        mover: BaseMover,
        start: Hashable,
        max_cost: float,
    ) -> set[Hashable]:
        """
        Find every node reachable from ``start`` within ``max_cost``.

        Cost-conscious breadth-first expansion over a plain FIFO queue. When
        a cheaper route is found to a node that was already visited, the
        node is un-visited and queued again so its neighbors are re-costed.
        Nodes can therefore be processed more than once and out of cost
        order; the final set still holds exactly the nodes whose cheapest
        passable route costs at most ``max_cost``.

        Parameters
        ----------
        mover : BaseMover
            Strategy answering step cost and passability
        start : Hashable
            Origin node, always part of a valid result
        max_cost : float
            Inclusive cost budget (non-negative)

        Returns
        -------
        set
            Reachable nodes including ``start``; empty on invalid input
        """
        problem = self._validate(mover, start)
        budget = self._normalize_budget(max_cost)
        if not problem and budget is None:
            problem = f"invalid_max_cost:{max_cost!r}"
        if problem:
            logger.warning("find_all_reachable rejected input: %s", problem)
            return set()

        table = SearchStateTable()
        queue: deque[Hashable] = deque([start])
        reachable: set[Hashable] = {start}
        table.update(start, g=0.0)

        while queue:
            node = queue.popleft()
            node_g = table.g(node)

            for adjacent in self._graph.adjacent(node):
                if not mover.passable(node, adjacent):
                    continue

                cost = node_g + mover.cost_for_move(node, adjacent)

                if cost > budget:
                    continue

                if cost < table.g(adjacent) and adjacent in reachable:
                    reachable.discard(adjacent)

                if adjacent not in reachable:
                    table.update(adjacent, g=cost)
                    reachable.add(adjacent)
                    queue.append(adjacent)

        return reachable

    def cost_of_path(self, mover: BaseMover, path: Optional[Sequence[Hashable]]) -> float:
        """
        Sum the step costs along an existing path.

        Uses ``mover.cost_for_move`` for each consecutive pair, so it
        reproduces the cost the search assigned when the same mover is used.
        Malformed input is logged and costs 0.0.
        """
        if mover is None:
            logger.error("cost_of_path called without a mover")
            return 0.0

        if path is None or len(path) < 2:
            logger.error("cost_of_path: path is None or shorter than two nodes")
            return 0.0

        nodes = list(path)
        total = 0.0
        for node, nxt in zip(nodes, nodes[1:]):
            total += mover.cost_for_move(node, nxt)
        return total

    def _validate(
        self,
        mover: Optional[BaseMover],
        start: Optional[Hashable],
        target: Optional[Hashable] = None,
        check_target: bool = False,
    ) -> str:
        """Return a reason string for invalid input, or an empty string."""
        if mover is None:
            return "missing_mover"
        if start is None:
            return "missing_start"
        if check_target and target is None:
            return "missing_target"
        if start not in self._graph:
            return "start_not_in_graph"
        if check_target and target not in self._graph:
            return "target_not_in_graph"
        return ""

    @staticmethod
    def _normalize_budget(max_cost: Any) -> Optional[float]:
        """Budget as a float, or None unless it is a non-negative real number."""
        if isinstance(max_cost, bool) or not isinstance(max_cost, numbers.Real):
            return None
        value = float(max_cost)
        if math.isnan(value) or value < 0.0:
            return None
        return value

    def __repr__(self) -> str:
        return f"Pathfinder(graph={self._graph!r})"
