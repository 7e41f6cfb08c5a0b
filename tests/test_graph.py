import pytest

from route_solver.graph import (
    ArrayKind,
    Edge,
    SmallGraph,
    edge,
    edges,
    neighbors,
    nodes,
    small_graph,
    weighted_edge,
)


def _graph() -> SmallGraph[str]:
    return small_graph(
        nodes(["a", "b", "c"]),
        edges(
            [
                [edge(0, 1), edge(0, 2)],
                [edge(1, 2)],
                [],
            ]
        ),
    )


def test_neighbors_lists_targets() -> None:
    graph = _graph()

    assert neighbors(graph, 0) == [1, 2]
    assert neighbors(graph, 1) == [2]


def test_node_without_edges_differs_from_unknown_node() -> None:
    graph = _graph()

    empty = neighbors(graph, 2)
    assert empty is not None
    assert empty.kind is ArrayKind.EMPTY
    assert len(empty) == 0
    assert neighbors(graph, 3) is None
    assert neighbors(graph, -1) is None


def test_missing_trailing_edge_lists_mean_no_edges() -> None:
    graph = small_graph(nodes([10, 20]), edges([[edge(0, 1)]]))

    assert neighbors(graph, 1) == []
    assert graph.outgoing(1) is not None


def test_edge_weight_arity_is_zero_or_one() -> None:
    assert edge(0, 1).weight is None
    assert weighted_edge(0, 1, 4).weight == 4
    assert weighted_edge(0, 1, [2.5]).weight == 2.5
    with pytest.raises(ValueError):
        weighted_edge(0, 1, [1, 2])


def test_edge_rejects_negative_positions() -> None:
    with pytest.raises(ValueError):
        Edge(-1, 0)


def test_graph_rejects_misplaced_or_dangling_edges() -> None:
    with pytest.raises(ValueError):
        small_graph(nodes([0, 1]), edges([[edge(1, 0)]]))
    with pytest.raises(ValueError):
        small_graph(nodes([0, 1]), edges([[edge(0, 5)]]))


def test_nodes_accessors() -> None:
    graph = _graph()

    assert graph.nodes.first() == "a"
    assert graph.nodes.last() == "c"
    assert graph.nodes.get(7) is None
    assert len(graph) == 3
