from route_solver.graph import PriorityQueue


def test_pop_returns_values_in_ascending_order() -> None:
    queue: PriorityQueue[int] = PriorityQueue()
    for value in [5, 3, 8, 1, 9, 2, 7, 4, 6, 0, 11, 10]:
        queue.push(value)

    drained = []
    while queue:
        drained.append(queue.pop())

    assert drained == list(range(12))


def test_empty_queue() -> None:
    queue: PriorityQueue[int] = PriorityQueue()

    assert queue.is_empty()
    assert queue.pop() is None
    assert queue.peek() is None
    assert len(queue) == 0


def test_peek_does_not_remove() -> None:
    queue: PriorityQueue[tuple[float, int]] = PriorityQueue()
    queue.push((2.0, 1))
    queue.push((1.0, 7))

    assert queue.peek() == (1.0, 7)
    assert len(queue) == 2
