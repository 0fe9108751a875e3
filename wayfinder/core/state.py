"""
Search State
============

Per-call bookkeeping for the search engine.

A ``SearchStateTable`` is created at the start of every search and dropped
when the call returns. Nothing here is ever attached to the graph, so the
same graph can serve repeated or concurrent searches.
"""

from __future__ import annotations

import heapq
import itertools
import math
from dataclasses import dataclass
from typing import Any, Hashable, Iterator, Optional


@dataclass
class SearchRecord:
    """Search data for one node during one search."""

    g: float = math.inf
    """Best known accumulated cost from the start."""

    h: float = 0.0
    """Heuristic estimate of the remaining cost to the target."""

    parent: Optional[Hashable] = None
    """Predecessor on the best known route. None for the start node."""

    @property
    def f(self) -> float:
        """Total estimated cost, the open-set priority."""
        return self.g + self.h


class SearchStateTable:
    """
    Lazily populated map of node -> SearchRecord.

    Records are created on first lookup, so an undiscovered node reads as
    ``g = inf`` without any up-front initialization of the graph.
    """

    def __init__(self) -> None:
        self._records: dict[Hashable, SearchRecord] = {}

    def record(self, node: Hashable) -> SearchRecord:
        """Get the record for ``node``, creating a fresh one if needed."""
        data = self._records.get(node)
        if data is None:
            data = SearchRecord()
            self._records[node] = data
        return data

    def g(self, node: Hashable) -> float:
        """Accumulated cost for ``node`` without creating a record."""
        data = self._records.get(node)
        return data.g if data is not None else math.inf

    def update(
        self,
        node: Hashable,
        g: float,
        h: float = 0.0,
        parent: Optional[Hashable] = None,
    ) -> SearchRecord:
        """Overwrite the record for ``node``."""
        data = self.record(node)
        data.g = g
        data.h = h
        data.parent = parent
        return data

    def retrace(self, target: Hashable) -> list[Hashable]:
        """
        Walk parent links from ``target`` back to the start.

        Returns the path ordered start -> target, both inclusive.
        """
        path = [target]
        parent = self.record(target).parent
        while parent is not None:
            path.append(parent)
            parent = self.record(parent).parent
        path.reverse()
        return path

    def __contains__(self, node: object) -> bool:
        return node in self._records

    def __len__(self) -> int:
        return len(self._records)


class OpenSet:
    """
    Min-priority queue with membership, removal and FIFO tie-breaking.

    Entries with equal priority pop in insertion order. Removal is lazy:
    a removed node's heap entry is left in place and skipped when it
    surfaces. Re-inserting a node gives it a fresh insertion position.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, Hashable]] = []
        self._entries: dict[Hashable, int] = {}
        self._counter = itertools.count()

    def push(self, node: Hashable, priority: float) -> None:
        """Insert ``node``. A node already present is re-queued."""
        sequence = next(self._counter)
        self._entries[node] = sequence
        heapq.heappush(self._heap, (priority, sequence, node))

    def remove(self, node: Hashable) -> bool:
        """Remove ``node`` if present. Returns True when it was queued."""
        return self._entries.pop(node, None) is not None

    def pop(self) -> Hashable:
        """Remove and return the lowest-priority node."""
        while self._heap:
            _priority, sequence, node = heapq.heappop(self._heap)
            if self._entries.get(node) == sequence:
                del self._entries[node]
                return node
        raise IndexError("pop from an empty OpenSet")

    def __contains__(self, node: object) -> bool:
        return node in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._entries)
