"""Compact graph primitives and shortest-path search."""

from .graph import Edge, Edges, Nodes, SmallGraph, edge, edges, neighbors, nodes, small_graph, weighted_edge
from .ops import ShortestPath, find_path, reduce_weights, shortest_path, shortest_path_length
from .queue import PriorityQueue
from .small_array import ArrayKind, SmallArray

__all__ = [
    "ArrayKind",
    "Edge",
    "Edges",
    "Nodes",
    "PriorityQueue",
    "ShortestPath",
    "SmallArray",
    "SmallGraph",
    "edge",
    "edges",
    "find_path",
    "neighbors",
    "nodes",
    "reduce_weights",
    "shortest_path",
    "shortest_path_length",
    "small_graph",
    "weighted_edge",
]
