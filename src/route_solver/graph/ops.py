"""Shortest-path search over :class:`SmallGraph`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from .graph import SmallGraph, Weight
from .queue import PriorityQueue

V = TypeVar("V")


def reduce_weights(current: Weight, step: Weight) -> Weight:
    """Combine optional weights: empty + empty is empty, empty + w is w, a + b is the sum."""
    if current is None:
        return step
    if step is None:
        return current
    return current + step


def _order_key(weight: Weight) -> float:
    return 0 if weight is None else weight


@dataclass(frozen=True, slots=True)
class ShortestPath(Generic[V]):
    positions: tuple[int, ...]
    nodes: tuple[V, ...]
    weight: Weight

    @property
    def length(self) -> float:
        return _order_key(self.weight)


def find_path(graph: SmallGraph[V], source: int, target: int) -> ShortestPath[V] | None:
    """Dijkstra search from ``source`` to ``target``; ``None`` when no path exists."""
    if not graph.nodes.contains(source) or not graph.nodes.contains(target):
        return None

    best: dict[int, Weight] = {source: None}
    previous: dict[int, int] = {}
    queue: PriorityQueue[tuple[float, int]] = PriorityQueue()
    queue.push((0, source))

    while queue:
        key, position = queue.pop()
        if key > _order_key(best[position]):
            continue
        if position == target:
            return _reconstruct(graph, previous, source, target, best[target])
        for item in graph.outgoing(position):
            candidate = reduce_weights(best[position], item.weight)
            if item.target not in best or _order_key(candidate) < _order_key(best[item.target]):
                best[item.target] = candidate
                previous[item.target] = position
                queue.push((_order_key(candidate), item.target))
    return None


def _reconstruct(
    graph: SmallGraph[V],
    previous: dict[int, int],
    source: int,
    target: int,
    weight: Weight,
) -> ShortestPath[V]:
    positions = [target]
    while positions[-1] != source:
        positions.append(previous[positions[-1]])
    positions.reverse()
    return ShortestPath(
        positions=tuple(positions),
        nodes=tuple(graph.nodes.get(position) for position in positions),
        weight=weight,
    )


def shortest_path(graph: SmallGraph[V], source: int, target: int) -> list[V] | None:
    path = find_path(graph, source, target)
    if path is None:
        return None
    return list(path.nodes)


def shortest_path_length(graph: SmallGraph[V], source: int, target: int) -> float | None:
    """Reduced weight of the shortest path, unweighted edges counting as zero."""
    path = find_path(graph, source, target)
    if path is None:
        return None
    return path.length
