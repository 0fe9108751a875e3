"""
Mover Interface
===============

Defines the capability contract the search engine is generic over.

Key Principle: the engine knows nothing about terrain, occupancy or costs.
Every domain decision about an edge is asked of a mover at the moment the
edge is evaluated.
"""

from abc import ABC, abstractmethod
from typing import Hashable


class BaseMover(ABC):
    """
    Abstract base class for movement strategies.

    Subclass this to plug a new movement model into the engine. All three
    methods must be pure functions of their arguments: a mover may hold
    configuration and a read-only reference to the map it evaluates, but it
    must not cache per-node results between calls, because node state can
    change between searches.

    Example
    -------
    >>> class UniformMover(BaseMover):
    ...     def heuristic(self, node, target, start):
    ...         return 0.0
    ...
    ...     def cost_for_move(self, node, adjacent):
    ...         return 1.0
    ...
    ...     def passable(self, node, adjacent):
    ...         return True
    """

    @abstractmethod
    def heuristic(self, node: Hashable, target: Hashable, start: Hashable) -> float:
        """
        Estimate the remaining cost from ``node`` to ``target``.

        Only the shortest-path search uses this. It must never overestimate
        the true remaining cost if optimal paths are required; the engine
        does not check, and an overestimating heuristic simply trades path
        quality for speed.

        Parameters
        ----------
        node : Hashable
            The node being scored
        target : Hashable
            The search target
        start : Hashable
            The search origin, available for tie-breaking terms

        Returns
        -------
        float
            Non-negative cost estimate
        """
        ...

    @abstractmethod
    def cost_for_move(self, node: Hashable, adjacent: Hashable) -> float:
        """
        Exact cost of the single step from ``node`` into ``adjacent``.

        Must be non-negative. Zero is allowed but weakens tie-breaking.
        """
        ...

    @abstractmethod
    def passable(self, node: Hashable, adjacent: Hashable) -> bool:
        """
        Whether the step from ``node`` into ``adjacent`` is allowed at all.

        Blocked edges must be reported here, not through an infinite cost.
        """
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
