"""Dense travel-cost matrix addressed by stop index."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..graph import SmallGraph, edges, nodes, weighted_edge
from .errors import ModelError, ModelErrorKind


class DistanceMatrix:
    """Square matrix of non-negative travel costs.

    Missing arcs (``None``, ``NaN`` or ``inf``) are stored as ``NaN`` and
    reported as unreachable by :meth:`distance`.
    """

    __slots__ = ("_values",)

    def __init__(self, matrix: Sequence[Sequence[float | None]] | np.ndarray) -> None:
        if isinstance(matrix, np.ndarray):
            values = matrix.astype(np.float64, copy=True)
        else:
            size = len(matrix)
            for row_index, row in enumerate(matrix):
                if len(row) != size:
                    raise ModelError(
                        ModelErrorKind.MATRIX_DIMENSIONS,
                        f"Distance matrix row {row_index} has {len(row)} entries, expected {size}.",
                        subject=row_index,
                    )
            values = np.array(
                [[math.nan if value is None else float(value) for value in row] for row in matrix],
                dtype=np.float64,
            ).reshape(size, size)
        if values.ndim != 2 or values.shape[0] != values.shape[1]:
            raise ModelError(
                ModelErrorKind.MATRIX_DIMENSIONS,
                f"Distance matrix must be square, got shape {values.shape}.",
            )
        values[np.isinf(values)] = np.nan
        if np.any(values[~np.isnan(values)] < 0):
            raise ModelError(ModelErrorKind.INVALID_VALUE, "Distance matrix contains negative entries.")
        values.setflags(write=False)
        self._values = values

    @property
    def size(self) -> int:
        return int(self._values.shape[0])

    @property
    def values(self) -> np.ndarray:
        return self._values

    def distance(self, origin: int, destination: int) -> float | None:
        value = self._values[origin, destination]
        if np.isnan(value):
            return None
        return float(value)

    def to_graph(self) -> SmallGraph[int]:
        """Weighted graph with one edge per known off-diagonal entry."""
        adjacency = []
        for origin in range(self.size):
            row = self._values[origin]
            adjacency.append(
                [
                    weighted_edge(origin, destination, float(row[destination]))
                    for destination in range(self.size)
                    if destination != origin and not np.isnan(row[destination])
                ]
            )
        return SmallGraph(nodes(range(self.size)), edges(adjacency))

    def __len__(self) -> int:
        return self.size
