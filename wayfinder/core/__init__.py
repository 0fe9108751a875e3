"""
Wayfinder Core: Domain-Agnostic Search Engine
=============================================

This package provides shortest-path and bounded-reachability search over an
adjacency-list graph, delegating every cost, heuristic and traversability
decision to a pluggable mover.

Public API:
- Pathfinder: The search engine
- PathResult / SearchStatus: Shortest-path outcome
- BaseMover: Movement strategy contract
- NodeGraph: Arena graph of node handles
- SearchStateTable / SearchRecord / OpenSet: Per-search bookkeeping
- MoveCosts: Validated cost configuration
"""

from wayfinder.core.graph import NodeGraph
from wayfinder.core.mover import BaseMover
from wayfinder.core.schema import MoveCosts
from wayfinder.core.state import OpenSet, SearchRecord, SearchStateTable
from wayfinder.core.engine import Pathfinder, PathResult, SearchStatus

__all__ = [
    "Pathfinder",
    "PathResult",
    "SearchStatus",
    "BaseMover",
    "NodeGraph",
    "SearchStateTable",
    "SearchRecord",
    "OpenSet",
    "MoveCosts",
]
