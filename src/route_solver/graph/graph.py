"""Compact directed graph over index-addressed nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, Optional, Sequence, TypeVar, Union

from .small_array import SmallArray

V = TypeVar("V")

Weight = Optional[Union[int, float]]


@dataclass(frozen=True, slots=True)
class Edge:
    """Directed arc between two node positions with zero or one weight."""

    source: int
    target: int
    weights: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        if self.source < 0 or self.target < 0:
            raise ValueError(f"Edge positions must be non-negative, got {self.source}->{self.target}.")
        if self.weights is not None and len(self.weights) > 1:
            raise ValueError(f"Edges carry at most one weight, got {len(self.weights)}.")

    @property
    def weight(self) -> Weight:
        if not self.weights:
            return None
        return self.weights[0]


class Nodes(Generic[V]):
    """Node payloads addressed by position."""

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[V]) -> None:
        self._values = list(values)

    def get(self, index: int) -> V | None:
        if 0 <= index < len(self._values):
            return self._values[index]
        return None

    def contains(self, index: int) -> bool:
        return 0 <= index < len(self._values)

    def first(self) -> V | None:
        return self.get(0)

    def last(self) -> V | None:
        return self.get(len(self._values) - 1)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[V]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Nodes):
            return NotImplemented
        return self._values == other._values


class Edges:
    """Per-node adjacency lists stored as :class:`SmallArray` instances."""

    __slots__ = ("_lists",)

    def __init__(self, lists: Iterable[SmallArray[Edge]]) -> None:
        self._lists = list(lists)

    def get(self, index: int) -> SmallArray[Edge] | None:
        if 0 <= index < len(self._lists):
            return self._lists[index]
        return None

    def first(self) -> SmallArray[Edge] | None:
        return self.get(0)

    def last(self) -> SmallArray[Edge] | None:
        return self.get(len(self._lists) - 1)

    def __len__(self) -> int:
        return len(self._lists)

    def __iter__(self) -> Iterator[SmallArray[Edge]]:
        return iter(self._lists)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edges):
            return NotImplemented
        return self._lists == other._lists


class SmallGraph(Generic[V]):
    """Nodes plus outgoing edge lists. Positions index both collections."""

    __slots__ = ("nodes", "edges")

    def __init__(self, nodes: Nodes[V], edges: Edges) -> None:
        if len(edges) > len(nodes):
            raise ValueError(f"Graph has {len(edges)} edge lists for {len(nodes)} nodes.")
        for position, outgoing in enumerate(edges):
            for item in outgoing:
                if item.source != position:
                    raise ValueError(f"Edge {item.source}->{item.target} stored under node {position}.")
                if not nodes.contains(item.target):
                    raise ValueError(f"Edge {item.source}->{item.target} points to an unknown node.")
        self.nodes = nodes
        self.edges = edges

    def outgoing(self, index: int) -> SmallArray[Edge] | None:
        """Outgoing edges of a node, empty for a node without edges, ``None`` for an unknown node."""
        if not self.nodes.contains(index):
            return None
        found = self.edges.get(index)
        return found if found is not None else SmallArray()

    def __len__(self) -> int:
        return len(self.nodes)


def nodes(values: Iterable[V]) -> Nodes[V]:
    return Nodes(values)


def edges(lists: Iterable[Iterable[Edge]]) -> Edges:
    return Edges(SmallArray(items) for items in lists)


def edge(source: int, target: int) -> Edge:
    return Edge(source, target)


def weighted_edge(source: int, target: int, weights: Sequence[float] | float) -> Edge:
    if isinstance(weights, (int, float)):
        return Edge(source, target, (weights,))
    return Edge(source, target, tuple(weights))


def small_graph(graph_nodes: Nodes[V], graph_edges: Edges) -> SmallGraph[V]:
    return SmallGraph(graph_nodes, graph_edges)


def neighbors(graph: SmallGraph[V], index: int) -> SmallArray[int] | None:
    """Target positions reachable in one step from ``index``.

    Returns an empty array for a known node without outgoing edges and
    ``None`` when ``index`` is not a node of the graph.
    """
    outgoing = graph.outgoing(index)
    if outgoing is None:
        return None
    return SmallArray(item.target for item in outgoing)
