'''
    Selection of the k greatest elements of a sequence.

    Three strategies computing identical results:

      - greatest_k_heap(cmp, elements, k) streams the input through a
        binary heap holding the k greatest elements seen so far.
      - greatest_k_quick(cmp, elements, k) materializes the input and
        applies quickselect.
      - greatest_k_soft(cmp, elements, k) filters the input through a soft
        heap of 2k candidates and resolves the survivors with quickselect.

    All return a list of min(k, len(elements)) elements in descending
    order.  Elements comparing equal are ranked by input position, the
    earlier one being the greater, so all strategies agree element by
    element.
'''


import functools
import heapq
import logging

from soft_heaps import DEFAULT_EPSILON, SoftHeap


logger = logging.getLogger(__name__)

BUILD_FACTOR = 2  # soft heap holds BUILD_FACTOR * k candidates

_MISSING = object()


def _check_arguments(cmp, k):
    '''Validate comparator and k before consuming any input.'''

    if cmp is None or not callable(cmp):
        raise TypeError('comparator must be callable')
    if k < 0:
        raise ValueError('k must be non-negative, got %r' % (k,))


def _by_position(cmp):
    '''Extend cmp to (index, element) pairs, earlier index is greater.'''

    def compare(a, b):
        return cmp(a[1], b[1]) or b[0] - a[0]

    return compare


######################################################################
#                     Exact bounded-k accumulator
######################################################################


class BoundedHeap:
    '''Retains the k greatest of all elements offered so far.

    A new element replaces the smallest retained element only if it is
    strictly greater, so among equal elements the first offered are kept.
    '''

    def __init__(self, cmp, k):
        if cmp is None or not callable(cmp):
            raise TypeError('comparator must be callable')
        if k <= 0:
            raise ValueError('capacity must be positive, got %r' % (k,))
        self._key = functools.cmp_to_key(cmp)
        self._k = k
        self._heap = []  # min-heap of cmp_to_key wrappers

    def __len__(self):
        return len(self._heap)

    def offer(self, element):
        '''Offer element. Returns if it was retained.'''

        keyed = self._key(element)
        if len(self._heap) < self._k:
            heapq.heappush(self._heap, keyed)
            return True
        if self._heap[0] < keyed:
            heapq.heapreplace(self._heap, keyed)
            return True
        return False

    def extend(self, elements):
        '''Offer all elements. Returns the number rejected.'''

        return sum(1 for element in elements if not self.offer(element))

    def minimum(self, default=None):
        '''Return the smallest retained element, or default if none.'''

        return self._heap[0].obj if self._heap else default

    def drain(self):
        '''Remove all retained elements and return them in descending order.'''

        result = []
        while self._heap:
            result.append(heapq.heappop(self._heap).obj)
        result.reverse()
        return result


def greatest_k_heap(cmp, elements, k):
    '''Return the k greatest elements in descending order using a heap.'''

    _check_arguments(cmp, k)
    if k == 0:
        return []

    heap = BoundedHeap(_by_position(cmp), k)
    rejected = heap.extend(enumerate(elements))
    logger.debug('greatest_k_heap: k=%d, %d elements rejected', k, rejected)
    return [element for _, element in heap.drain()]


######################################################################
#                            Quickselect
######################################################################


def quickselect(cmp, items, k):
    '''Return the k greatest of items in descending order.

    items must be a list; it is rearranged in place.  Partitions around
    the middle element of the current range until the elements greater
    than or equal to the pivot are exactly the first k.  Expected O(n)
    comparisons, O(n^2) in the worst case.
    '''

    if k < 0:
        raise ValueError('k must be non-negative, got %r' % (k,))
    key = functools.cmp_to_key(cmp)
    if k == 0:
        return []
    if k >= len(items):
        return sorted(items, key=key, reverse=True)

    lo, hi = 0, len(items)  # invariant: lo < k <= hi
    while True:
        mid = (lo + hi) // 2
        items[mid], items[hi - 1] = items[hi - 1], items[mid]
        pivot = items[hi - 1]
        store = lo
        for i in range(lo, hi - 1):
            if cmp(items[i], pivot) > 0:
                items[store], items[i] = items[i], items[store]
                store += 1
        items[store], items[hi - 1] = items[hi - 1], items[store]
        if store + 1 == k:
            break
        if store + 1 > k:
            hi = store
        else:
            lo = store + 1

    return sorted(items[:k], key=key, reverse=True)


def greatest_k_quick(cmp, elements, k):
    '''Return the k greatest elements in descending order using quickselect.'''

    _check_arguments(cmp, k)
    if k == 0:
        return []

    items = list(enumerate(elements))
    logger.debug('greatest_k_quick: k=%d, n=%d', k, len(items))
    return [element for _, element in quickselect(_by_position(cmp), items, k)]


######################################################################
#                       Soft heap selection
######################################################################


def selection_epsilon(k):
    '''Error parameter for a soft heap holding BUILD_FACTOR * k candidates.

    Chosen such that a heap built by BUILD_FACTOR * k insertions has no
    node above the rank cutoff, i.e. no corruptible element.
    '''

    max_rank = (BUILD_FACTOR * k).bit_length() - 1
    # rank_cutoff(2 ** -bits) == 5 + bits
    bits = max(max_rank - 5, 0)
    return min(DEFAULT_EPSILON, 2.0 ** -bits)


def _greatest_one(cmp, elements):
    '''Return a list with the first maximal element, empty if none.'''

    best = _MISSING
    for element in elements:
        if best is _MISSING or cmp(element, best) > 0:
            best = element
    return [] if best is _MISSING else [best]


def _rebuild(heap, cmp, epsilon):
    '''Return a new soft heap holding the elements of heap.'''

    rebuilt = SoftHeap(cmp, epsilon)
    rebuilt.extend(heap)
    logger.debug('rebuilt soft heap of %d candidates (%d corruptible)',
                 len(rebuilt), heap.corruptible())
    return rebuilt


def greatest_k_soft(cmp, elements, k):
    '''Return the k greatest elements in descending order using a soft heap.

    The first 2k elements are inserted into a soft heap.  Each further
    element replaces the heap minimum if it is greater than the (possibly
    corrupted) minimum key, otherwise it is dropped.  An element leaving
    this way is dropped safely as long as at least k elements in the heap
    are known to be uncorrupted, since each of those is greater.  When
    this is not the case the heap is rebuilt, which removes all corruption.
    Finally the exact answer is selected from the remaining candidates.
    '''

    _check_arguments(cmp, k)
    if k == 0:
        return []
    if k == 1:
        return _greatest_one(cmp, elements)

    compare = _by_position(cmp)
    epsilon = selection_epsilon(k)
    heap = SoftHeap(compare, epsilon)
    items = enumerate(elements)
    capacity = BUILD_FACTOR * k
    for item in items:
        heap.insert(item)
        if len(heap) == capacity:
            break
    filtered = 0
    for item in items:
        if len(heap) - heap.corruptible() < k:
            heap = _rebuild(heap, compare, epsilon)
        if compare(heap.peek_key(), item) < 0:
            heap.extract_min()
            heap.insert(item)
        filtered += 1
    logger.debug('greatest_k_soft: k=%d, epsilon=%g, %d elements filtered',
                 k, epsilon, filtered)

    candidates = list(heap)
    return [element for _, element in quickselect(compare, candidates, k)]
