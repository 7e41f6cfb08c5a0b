import pytest

from route_solver.graph import ArrayKind, SmallArray


def test_empty_array_is_its_own_kind() -> None:
    array = SmallArray()

    assert array.kind is ArrayKind.EMPTY
    assert array.is_empty()
    assert len(array) == 0
    assert array.pop() is None
    with pytest.raises(IndexError):
        array[0]


def test_push_moves_through_size_classes() -> None:
    array: SmallArray[int] = SmallArray()
    kinds = []
    for value in range(11):
        array.push(value)
        kinds.append(array.kind)

    assert kinds[0] is ArrayKind.ONE
    assert kinds[4] is ArrayKind.FIVE
    assert kinds[5] is ArrayKind.TEN
    assert kinds[9] is ArrayKind.TEN
    assert kinds[10] is ArrayKind.DYNAMIC
    assert list(array) == list(range(11))


def test_pop_back_to_empty() -> None:
    array = SmallArray([1, 2])

    assert array.pop() == 2
    assert array.pop() == 1
    assert array.kind is ArrayKind.EMPTY


def test_dynamic_array_stays_dynamic() -> None:
    array = SmallArray.dynamic()
    array.push(3)
    array.pop()

    assert array.kind is ArrayKind.DYNAMIC
    assert array.is_empty()


def test_swap_setitem_and_sorted() -> None:
    array = SmallArray([3, 1, 2])
    array.swap(0, 2)
    assert array == [2, 1, 3]

    array[1] = 5
    assert array == (2, 5, 3)

    assert array.sorted() == [2, 3, 5]
    assert array.sorted(descending=True) == [5, 3, 2]


def test_equality_ignores_storage_class() -> None:
    assert SmallArray([1, 2]) == SmallArray.dynamic([1, 2])
    assert SmallArray() == SmallArray.dynamic()
