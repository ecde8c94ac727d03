'''Tests for selection.'''


import functools
import random

import pytest

import selection
from selection import (BoundedHeap, greatest_k_heap, greatest_k_quick,
                       greatest_k_soft, quickselect, selection_epsilon)
from soft_heaps import CountingComparator, SoftHeap, natural_order


STRATEGIES = [greatest_k_heap, greatest_k_quick, greatest_k_soft]


def by_value(a, b):
    '''Compare (value, tag) pairs by value only.'''

    return natural_order(a[0], b[0])


def reverse_order(a, b):
    return natural_order(b, a)


def expected(cmp, elements, k):
    '''Reference result: stable descending sort, earlier equal first.'''

    ordered = list(elements)
    ordered.sort(key=functools.cmp_to_key(cmp), reverse=True)
    return ordered[:k]


def check_all(cmp, elements, k):
    '''Run all strategies on elements and compare with reference.'''

    result = expected(cmp, elements, k)
    for strategy in STRATEGIES:
        assert strategy(cmp, iter(elements), k) == result, strategy.__name__
    return result


######################################################################
#                            Scenarios
######################################################################


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_small_example(strategy):
    assert strategy(natural_order, [5, 3, 8, 1, 9, 2], 3) == [9, 8, 5]


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_k_zero(strategy):
    assert strategy(natural_order, [5, 3, 8], 0) == []
    assert strategy(natural_order, [], 0) == []


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_empty_input(strategy):
    assert strategy(natural_order, [], 1) == []
    assert strategy(natural_order, iter([]), 5) == []


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_k_at_least_input_size(strategy):
    elements = [4, 1, 3, 1, 5]
    assert strategy(natural_order, elements, 5) == [5, 4, 3, 1, 1]
    assert strategy(natural_order, elements, 50) == [5, 4, 3, 1, 1]


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_negative_k(strategy):
    consumed = []

    def elements():
        consumed.append(True)
        yield 1

    with pytest.raises(ValueError):
        strategy(natural_order, elements(), -1)
    assert consumed == []


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_missing_comparator(strategy):
    with pytest.raises(TypeError):
        strategy(None, [1, 2, 3], 2)


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_reverse_order(strategy):
    assert strategy(reverse_order, [5, 3, 8, 1, 9, 2], 2) == [1, 2]


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_ties_keep_input_order(strategy):
    elements = [(1, 'a'), (2, 'b'), (2, 'c'), (0, 'd'), (2, 'e'), (1, 'f')]
    assert strategy(by_value, elements, 2) == [(2, 'b'), (2, 'c')]
    assert strategy(by_value, elements, 4) == [(2, 'b'), (2, 'c'), (2, 'e'),
                                              (1, 'a')]


@pytest.mark.parametrize('strategy', STRATEGIES)
def test_input_consumed_once(strategy):
    elements = (x * 7 % 101 for x in range(101))
    assert strategy(natural_order, elements, 3) == [100, 99, 98]


######################################################################
#                   Agreement between strategies
######################################################################


def test_random_agreement():
    rng = random.Random(0)
    for _ in range(200):
        n = rng.randrange(300)
        k = rng.randrange(60)
        elements = [(rng.randint(0, 50), i) for i in range(n)]
        check_all(by_value, elements, k)


def test_large_random_input():
    rng = random.Random(1)
    elements = [rng.randrange(-2 ** 31, 2 ** 31) for _ in range(20000)]
    for k in [1, 2, 10, 100, 1000]:
        check_all(natural_order, elements, k)


@pytest.mark.parametrize('k', [2, 5, 64])
def test_sorted_inputs(k):
    elements = list(range(10000))
    check_all(natural_order, elements, k)
    elements.reverse()
    check_all(natural_order, elements, k)


def test_constant_input():
    elements = [(7, i) for i in range(500)]
    result = check_all(by_value, elements, 20)
    assert [tag for _, tag in result] == list(range(20))


def test_corrupting_soft_heap(monkeypatch):
    '''Results stay exact with a coarse error parameter.'''

    monkeypatch.setattr(selection, 'selection_epsilon', lambda k: 0.5)
    rng = random.Random(2)
    for k in [2, 3, 10, 40]:
        elements = [rng.randint(0, 1000) for _ in range(5000)]
        assert greatest_k_soft(natural_order, elements, k) == \
            sorted(elements, reverse=True)[:k]
        increasing = sorted(elements)
        assert greatest_k_soft(natural_order, increasing, k) == \
            sorted(elements, reverse=True)[:k]


def test_rebuild_during_filtering(monkeypatch):
    '''A heap with corruptible candidates is rebuilt before filtering.'''

    class CoarseHeap(SoftHeap):
        def __init__(self, cmp, epsilon):
            super().__init__(cmp, epsilon)
            self._cutoff = 0  # every node above the leaves may corrupt

    created = []

    def make_heap(cmp, epsilon):
        created.append(epsilon)
        return (CoarseHeap if len(created) == 1 else SoftHeap)(cmp, epsilon)

    rebuilds = []
    rebuild = selection._rebuild

    def counting_rebuild(heap, cmp, epsilon):
        rebuilds.append(heap.corruptible())
        return rebuild(heap, cmp, epsilon)

    monkeypatch.setattr(selection, 'SoftHeap', make_heap)
    monkeypatch.setattr(selection, '_rebuild', counting_rebuild)
    rng = random.Random(5)
    elements = [rng.randint(0, 10 ** 6) for _ in range(2000)]
    assert greatest_k_soft(natural_order, elements, 10) == \
        sorted(elements, reverse=True)[:10]
    # the 20 built candidates all sit above the leaves, a single rebuild
    # into an uncorrupting heap suffices
    assert rebuilds == [20]
    assert len(created) == 2


def test_rebuild_removes_corruption():
    heap = SoftHeap(natural_order, 0.5)
    heap.extend(range(1000, 0, -1))
    assert heap.corruptible() > 0
    rebuilt = selection._rebuild(heap, natural_order, selection_epsilon(500))
    rebuilt.validate()
    assert rebuilt.corruptible() == 0
    assert sorted(rebuilt) == list(range(1, 1001))


######################################################################
#                         Building blocks
######################################################################


def test_selection_epsilon():
    for k in [1, 2, 10, 100, 2047, 2048, 5000, 100000]:
        epsilon = selection_epsilon(k)
        assert 0 < epsilon < 1
        heap = SoftHeap(natural_order, epsilon)
        assert (2 * k).bit_length() - 1 <= heap.cutoff()
    heap = SoftHeap(natural_order, selection_epsilon(3000))
    heap.extend(range(6000))
    assert heap.corruptible() == 0


def test_bounded_heap():
    heap = BoundedHeap(natural_order, 3)
    assert heap.minimum() is None
    assert heap.offer(5)
    assert heap.offer(1)
    assert heap.offer(4)
    assert heap.minimum() == 1
    assert not heap.offer(0)
    assert not heap.offer(1)  # ties do not evict
    assert heap.offer(6)
    assert len(heap) == 3
    assert heap.extend([2, 7, 3]) == 2
    assert heap.drain() == [7, 6, 5]
    assert len(heap) == 0


def test_bounded_heap_capacity():
    with pytest.raises(ValueError):
        BoundedHeap(natural_order, 0)
    with pytest.raises(TypeError):
        BoundedHeap(None, 3)


def test_quickselect():
    rng = random.Random(3)
    for n in range(0, 40):
        items = rng.sample(range(1000), n)
        for k in range(0, n + 2):
            assert quickselect(natural_order, list(items), k) == \
                sorted(items, reverse=True)[:k]
    with pytest.raises(ValueError):
        quickselect(natural_order, [1, 2], -1)


def test_quickselect_duplicates():
    items = [3, 1, 3, 2, 3, 1, 2]
    assert quickselect(natural_order, items, 4) == [3, 3, 3, 2]
    assert sorted(items) == [1, 1, 2, 2, 3, 3, 3]


######################################################################
#                       Comparison counting
######################################################################


def test_max_scan_comparisons():
    cmp = CountingComparator(natural_order)
    assert greatest_k_soft(cmp, range(100), 1) == [99]
    assert cmp.comparisons == 99


def test_counting_all_strategies():
    rng = random.Random(4)
    elements = [rng.random() for _ in range(5000)]
    counts = {}
    for strategy in STRATEGIES:
        cmp = CountingComparator(natural_order)
        strategy(cmp, elements, 50)
        counts[strategy.__name__] = cmp.comparisons
    for name, count in counts.items():
        assert count >= len(elements) - 1, name


if __name__ == '__main__':
    pytest.main([__file__])
