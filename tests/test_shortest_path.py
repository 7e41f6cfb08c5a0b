from route_solver.graph import (
    edges,
    find_path,
    nodes,
    reduce_weights,
    shortest_path,
    shortest_path_length,
    small_graph,
    weighted_edge,
    edge,
)


def _graph():
    return small_graph(
        nodes([0, 1, 2, 3]),
        edges(
            [
                [weighted_edge(0, 1, 1), weighted_edge(0, 2, 100)],
                [weighted_edge(1, 2, 1)],
                [weighted_edge(2, 0, 2)],
                [],
            ]
        ),
    )


def test_prefers_cheaper_indirect_path() -> None:
    graph = _graph()

    assert shortest_path(graph, 0, 2) == [0, 1, 2]
    assert shortest_path_length(graph, 0, 2) == 2


def test_isolated_node_is_unreachable() -> None:
    graph = _graph()

    assert shortest_path(graph, 0, 3) is None
    assert shortest_path(graph, 3, 0) is None
    assert shortest_path_length(graph, 0, 3) is None


def test_unknown_node_is_unreachable() -> None:
    assert shortest_path(_graph(), 0, 9) is None


def test_path_to_self() -> None:
    path = find_path(_graph(), 1, 1)

    assert path is not None
    assert path.positions == (1,)
    assert path.weight is None
    assert path.length == 0


def test_cycle_back_to_start() -> None:
    assert shortest_path(_graph(), 2, 1) == [2, 0, 1]
    assert shortest_path_length(_graph(), 2, 1) == 3


def test_unweighted_edges_count_as_zero() -> None:
    graph = small_graph(nodes(["x", "y", "z"]), edges([[edge(0, 1)], [edge(1, 2)], []]))

    path = find_path(graph, 0, 2)
    assert path is not None
    assert path.nodes == ("x", "y", "z")
    assert path.weight is None
    assert shortest_path_length(graph, 0, 2) == 0


def test_reduce_weights() -> None:
    assert reduce_weights(None, None) is None
    assert reduce_weights(None, 3) == 3
    assert reduce_weights(4, None) == 4
    assert reduce_weights(1.5, 2) == 3.5
