"""
Node Graph
==========

Arena-style graph of node handles with ordered adjacency.

Nodes are plain hashable handles (e.g. ``(x, y)`` tuples or integers) that
key into the arena. Adjacency lists hold handles, never node objects, so the
inherently cyclic neighbor relation (A -> B, B -> A) carries no ownership.

Per-node attributes (such as a grid cell's open/closed type) live alongside
the handle and may be updated between searches by whoever owns the map.
The search engine only reads ``adjacent()``.
"""

from typing import Any, Hashable, Iterator, Optional

import networkx as nx


class NodeGraph:
    """
    Directed adjacency graph keyed by hashable node handles.

    Backed by a ``networkx.DiGraph``, whose dict-based adjacency preserves
    insertion order. That order is the order neighbors are enumerated during
    search and therefore decides how ties are broken.

    Example
    -------
    >>> graph = NodeGraph()
    >>> graph.add_node("a")
    >>> graph.add_node("b", terrain="swamp")
    >>> graph.connect("a", "b")
    >>> graph.adjacent("a")
    ['b']
    """

    def __init__(self, graph: Optional[nx.DiGraph] = None):
        """
        Initialize the graph.

        Parameters
        ----------
        graph : nx.DiGraph, optional
            Existing directed graph to adopt as backing store. It is used
            as-is, not copied.
        """
        self._graph: nx.DiGraph = graph if graph is not None else nx.DiGraph()

    @classmethod
    def from_networkx(cls, graph: nx.Graph) -> "NodeGraph":
        """
        Build a NodeGraph from any networkx graph.

        Undirected graphs are converted so each edge becomes a pair of
        directed edges. Node attributes are copied; edge attributes are
        dropped since costs come from the mover.
        """
        directed = nx.DiGraph()
        for node, attrs in graph.nodes(data=True):
            directed.add_node(node, **attrs)
        for u, v in graph.edges():
            directed.add_edge(u, v)
            if not graph.is_directed():
                directed.add_edge(v, u)
        return cls(directed)

    def add_node(self, node: Hashable, **attrs: Any) -> None:
        """Add a node (or update attributes of an existing one)."""
        if node is None:
            raise ValueError("None cannot be used as a node handle")
        self._graph.add_node(node, **attrs)

    def connect(self, node: Hashable, other: Hashable, bidirectional: bool = True) -> None:
        """
        Append ``other`` to the adjacency of ``node``.

        Both nodes must already exist. Connecting an already connected pair
        is a no-op and does not change adjacency order.
        """
        for handle in (node, other):
            if handle not in self._graph:
                raise KeyError(f"Unknown node: {handle!r}")

        if not self._graph.has_edge(node, other):
            self._graph.add_edge(node, other)
        if bidirectional and not self._graph.has_edge(other, node):
            self._graph.add_edge(other, node)

    def adjacent(self, node: Hashable) -> list[Hashable]:
        """Ordered neighbors of ``node``."""
        return list(self._graph.successors(node))

    def has_node(self, node: Hashable) -> bool:
        return node in self._graph

    def node_attributes(self, node: Hashable) -> dict[str, Any]:
        """Live attribute dict of ``node`` (mutations are visible to later searches)."""
        return self._graph.nodes[node]

    def get_attribute(self, node: Hashable, key: str, default: Any = None) -> Any:
        """Read one attribute, returning ``default`` for unknown nodes or keys."""
        if node not in self._graph:
            return default
        return self._graph.nodes[node].get(key, default)

    def set_attribute(self, node: Hashable, key: str, value: Any) -> None:
        """Update one attribute of an existing node."""
        if node not in self._graph:
            raise KeyError(f"Unknown node: {node!r}")
        self._graph.nodes[node][key] = value

    def nodes(self) -> list[Hashable]:
        """All node handles in insertion order."""
        return list(self._graph.nodes())

    def to_networkx(self) -> nx.DiGraph:
        """Read-only view of the backing graph, for analysis and debugging."""
        return self._graph.copy(as_view=True)

    @property
    def edge_count(self) -> int:
        """Number of directed adjacency entries."""
        return self._graph.number_of_edges()

    def __contains__(self, node: object) -> bool:
        return node in self._graph

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._graph.nodes())

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __repr__(self) -> str:
        return f"NodeGraph(nodes={len(self)}, edges={self.edge_count})"
