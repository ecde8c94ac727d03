'''
    An implementation of soft heaps, the meldable approximate priority
    queue of Chazelle, in the simplified binary tree formulation of
    Kaplan and Zwick ("A simpler implementation and analysis of
    Chazelle's soft heaps", SODA 2009).

    A soft heap trades exactness for speed: keys of some elements may be
    raised ("corrupted") to the key of another element, so extract_min
    can return an element that is not the true minimum.  The number of
    corrupted extractions is bounded by epsilon * (number of insertions),
    and in exchange insertions take amortized O(1) time and extractions
    amortized O(log 1/epsilon) comparisons.

    Elements are never inspected, only compared by a comparator function
    cmp(a, b) returning a negative, zero or positive integer.
'''


import logging
import math


logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1 / 64


def rank_cutoff(epsilon):
    '''Return the largest rank of nodes that can never be corrupted.'''

    if not 0 < epsilon < 1:
        raise ValueError('epsilon must be in the open interval (0, 1), '
                         'got %r' % (epsilon,))
    return 5 + math.ceil(-math.log2(epsilon))


def natural_order(a, b):
    '''Comparator for elements ordered by the < operator.'''

    if a < b:
        return -1
    if b < a:
        return 1
    return 0


class CountingComparator:
    '''Wraps a comparator and counts how often it is called.

    Used by benchmarks and tests to measure the number of comparisons made
    by a heap or a selection strategy:

      counter = CountingComparator(natural_order)
      greatest_k_soft(counter, items, 10)
      counter.comparisons  # number of calls to natural_order
    '''

    def __init__(self, cmp):
        if cmp is None or not callable(cmp):
            raise TypeError('comparator must be callable')
        self._cmp = cmp
        self.comparisons = 0

    def __call__(self, a, b):
        self.comparisons += 1
        return self._cmp(a, b)

    def reset(self):
        '''Set the comparison counter to zero.'''

        self.comparisons = 0


class SoftHeap:
    '''Soft heap - a meldable priority queue with bounded corruption.

    The class supports the following operations:

      - SoftHeap(cmp, epsilon) creates an empty heap ordered by cmp.
      - H.empty() returns if the heap H is empty.
      - len(H) and H.size() return the number of elements in H.
      - H.insert(e) inserts element e into H.
      - H.extend(elements) inserts all elements of an iterable into H.
      - H1.meld(H2) moves all elements of H2 into H1 and returns H1.
        H2 is deactivated and can no longer be used.
      - H.peek_key() returns the current minimum (possibly corrupted) key.
      - H.extract_min() removes and returns an element whose true key is
        at most H.peek_key().
      - iter(H) yields all elements of H in no particular order.

    The heap is a list of binary trees of strictly increasing rank.  A node
    of rank at most rank_cutoff(epsilon) stores exactly one element and is
    never corrupted.  Higher nodes store a list of elements sharing one
    common key, the ckey, which is the largest true key among them.
    '''

    def __init__(self, cmp, epsilon=DEFAULT_EPSILON):
        '''Initialize a new empty heap.'''

        if cmp is None or not callable(cmp):
            raise TypeError('comparator must be callable')
        self._cutoff = rank_cutoff(epsilon)
        self._cmp = cmp
        self._epsilon = epsilon
        self._active = True
        self._size = 0
        self._rank = 0  # largest rank in the root list
        self._first = None  # root list head
        self._stale = None  # suffix-min pointers stale up to this tree
        self._corruptible = 0  # elements in nodes with rank > cutoff
        self._inserted = 0  # insertions, including those of melded heaps

    def __len__(self):
        self._check_active()
        return self._size

    def __iter__(self):
        '''Generator yielding all elements, tree by tree in pre-order.'''

        self._check_active()
        tree = self._first
        while tree is not None:
            yield from tree._root.elements()
            tree = tree._next

    def __repr__(self):
        return '<SoftHeap size=%d epsilon=%g>' % (self._size, self._epsilon)

    def size(self):
        '''Return the number of elements in the heap.'''

        self._check_active()

        return self._size

    def empty(self):
        '''Return if heap is empty.'''

        self._check_active()

        return self._size == 0

    def epsilon(self):
        '''Return the error parameter of the heap.'''

        return self._epsilon

    def cutoff(self):
        '''Return the largest rank of nodes holding exactly one element.'''

        return self._cutoff

    def corruptible(self):
        '''Return the number of elements that may currently be corrupted.

        Only elements held by nodes of rank above the cutoff can carry a
        raised key.  All other elements have their true key as ckey.
        '''

        self._check_active()

        return self._corruptible

    def insert(self, element):
        '''Insert element into the heap (meld with a singleton heap).'''

        self._check_active()

        self._meld_trees(Tree(Node(element)), 0)
        self._size += 1
        self._inserted += 1

    def extend(self, elements):
        '''Insert all elements from an iterable.'''

        self._check_active()
        for element in elements:
            self.insert(element)

    def meld(self, other):
        '''Meld another heap into this heap. Returns this heap.

        All elements of other are moved to this heap.  other is left empty
        and deactivated, any later use of it raises ValueError.
        '''

        self._check_active()
        if other is self:
            raise ValueError('cannot meld a heap with itself')
        if not isinstance(other, SoftHeap):
            raise TypeError('can only meld with another SoftHeap')
        other._check_active()
        if other._cmp is not self._cmp or other._cutoff != self._cutoff:
            raise ValueError('cannot meld heaps with different comparators '
                             'or error parameters')

        first, rank = other._first, other._rank
        size, corruptible = other._size, other._corruptible
        inserted = other._inserted
        other._first = None
        other._stale = None
        other._rank = 0
        other._size = 0
        other._corruptible = 0
        other._inserted = 0
        other._active = False
        self._inserted += inserted
        if first is not None:
            old_rank = self._rank
            self._meld_trees(first, rank)
            self._size += size
            self._corruptible += corruptible
            if self._rank > old_rank:
                logger.debug('meld raised heap rank from %d to %d',
                             old_rank, self._rank)
        return self

    def peek_key(self, default=None):
        '''Return the current minimum ckey, or default if heap is empty.'''

        self._check_active()

        if self._first is None:
            return default
        return self._minimum_tree()._root._ckey

    peek_min = peek_key

    def extract_min(self):
        '''Remove and return an element with true key at most peek_key().

        Raises IndexError if the heap is empty.
        '''

        self._check_active()
        if self._first is None:
            raise IndexError('extract_min from an empty soft heap')

        tree = self._minimum_tree()
        node = tree._root
        element = node._elements.pick()
        self._size -= 1
        if node._rank > self._cutoff:
            self._corruptible -= 1
        if 2 * len(node._elements) <= node._target:
            if not node.leaf():
                node.sift(self)
                self._invalidate(tree)
            elif not node._elements:
                prev = tree._prev
                self._unlink(tree)
                if prev is not None:
                    self._invalidate(prev)
        return element

    ##################################################################
    #                           Root list
    ##################################################################

    def _check_active(self):
        '''Raise ValueError if this heap has been melded into another.'''

        if not self._active:
            raise ValueError('heap was melded into another heap')

    def _less(self, x, y):
        '''Compare nodes x and y by ckey.'''

        return self._cmp(x._ckey, y._ckey) < 0

    def _meld_trees(self, first, rank):
        '''Merge a root list with largest tree rank rank into this heap.'''

        self._splice(first)
        self._combine(rank)

    def _splice(self, first):
        '''Insert trees of a root list into this root list by rank.

        Each tree is placed before the trees of this heap with equal or
        larger rank.  Afterwards at most two trees share a rank.
        '''

        before = None
        after = self._first
        tree = first
        while tree is not None:
            following = tree._next
            while after is not None and after.rank() < tree.rank():
                before, after = after, after._next
            tree._prev = before
            tree._next = after
            if before is None:
                self._first = tree
            else:
                before._next = tree
            if after is not None:
                after._prev = tree
            before = tree
            tree = following

    def _combine(self, rank):
        '''Link adjacent trees of equal rank, as carries in binary addition.

        Scanning stops at the first tree above the given rank with no
        carry, beyond which the root list is unchanged.
        '''

        tree = self._first
        while tree._next is not None:
            following = tree._next
            if tree.rank() == following.rank():
                after = following._next
                if after is None or after.rank() != tree.rank():
                    tree._root = Node.link(self, tree._root, following._root)
                    self._unlink(following)
                    continue
                # three of equal rank: link the last two
            elif tree.rank() > rank:
                break
            tree = following
        if tree._next is None:
            self._rank = tree.rank()
        self._invalidate(tree)

    def _unlink(self, tree):
        '''Remove tree from the root list.'''

        if self._stale is tree:
            self._stale = tree._prev
        if tree._prev is None:
            self._first = tree._next
        else:
            tree._prev._next = tree._next
        if tree._next is not None:
            tree._next._prev = tree._prev
        elif tree._prev is not None:
            self._rank = tree._prev.rank()
        else:
            self._rank = 0
        tree._next = tree._prev = None

    ##################################################################
    #                       Suffix minimum cache
    ##################################################################

    def _invalidate(self, tree):
        '''Mark the suffix-min pointers of tree and its predecessors stale.'''

        stale = self._stale
        if stale is None or tree.rank() > stale.rank():
            self._stale = tree

    def _minimum_tree(self):
        '''Return the tree with the minimum ckey, refreshing stale pointers.'''

        tree = self._stale
        while tree is not None:
            following = tree._next
            if following is None or not self._less(
                    following._suffix_min._root, tree._root):
                tree._suffix_min = tree
            else:
                tree._suffix_min = following._suffix_min
            tree = tree._prev
        self._stale = None
        return self._first._suffix_min

    ##################################################################
    #                      Validation methods
    ##################################################################

    def validate(self):
        '''Validate all heap structure and invariants.'''

        heap = self
        cmp = heap._cmp

        def validate_node(node, parent=None):
            '''Recursive validate tree nodes. Returns number of elements.'''

            size = len(node._elements)
            # List sizes
            if node._rank <= heap._cutoff:
                assert node._target == 1
                assert size == 1
            else:
                assert size < 3 * node._target
                if not node.leaf():
                    assert 2 * size >= node._target
            if parent is not None:
                assert size > 0
                assert node._rank == parent._rank - 1
                # Heap order on ckeys
                assert cmp(parent._ckey, node._ckey) <= 0
            # No element has a key above the ckey of its node
            for element in node._elements:
                assert cmp(element, node._ckey) <= 0
            node._elements.validate()
            for child in node.children():
                size += validate_node(child, node)
            return size

        assert heap._active
        size = 0
        corruptible = sum(len(node._elements)
                          for tree in heap.trees()
                          for node in tree._root.all_nodes()
                          if node._rank > heap._cutoff)
        assert corruptible == heap._corruptible
        # Corruption bound: at most epsilon * insertions corrupted elements
        corrupted = sum(tree._root.corrupted(cmp) for tree in heap.trees())
        assert corrupted <= corruptible
        assert corrupted <= heap._epsilon * heap._inserted
        tree = heap._first
        if tree is None:
            assert heap._size == 0
            assert heap._stale is None
        else:
            assert tree._prev is None
        while tree is not None:
            # Root list links and strictly increasing ranks
            if tree._next is not None:
                assert tree._next._prev is tree
                assert tree._next.rank() > tree.rank()
            else:
                assert tree.rank() == heap._rank
            assert len(tree._root._elements) > 0
            size += validate_node(tree._root)
            tree = tree._next
        assert size == heap._size
        # Cached suffix minima point to a tree with minimum ckey
        if heap._first is not None:
            heap._minimum_tree()
            for tree in heap.trees():
                minimum = tree._suffix_min
                for later in tree.following():
                    assert cmp(minimum._root._ckey, later._root._ckey) <= 0

    def trees(self):
        '''Generator yielding the trees of the root list.'''

        self._check_active()
        tree = self._first
        while tree is not None:
            yield tree
            tree = tree._next

    def describe(self):
        '''Return ranks and suffix-min positions of the root list.

        The result for a heap with trees of rank 0, 2 and 3, where the tree
        of rank 2 holds the overall minimum, is '[0, 2, 3] [1, 1, 2]'.
        '''

        self._check_active()

        trees = list(self.trees())
        if trees:
            self._minimum_tree()
        index = {id(tree): i for i, tree in enumerate(trees)}
        ranks = [tree.rank() for tree in trees]
        minima = [index[id(tree._suffix_min)] for tree in trees]
        return '%s %s' % (ranks, minima)


######################################################################
#                           Tree records
######################################################################


class Tree:
    '''A tree in the root list of a heap.'''

    def __init__(self, root):
        self._root = root
        self._next = None
        self._prev = None
        self._suffix_min = self

    def rank(self):
        '''Return the rank of the root node.'''

        return self._root._rank

    def following(self):
        '''Generator yielding this tree and all trees after it.'''

        tree = self
        while tree is not None:
            yield tree
            tree = tree._next


######################################################################
#                           Node records
######################################################################


class Node:
    '''A binary tree node holding a list of elements sharing a ckey.'''

    def __init__(self, element, rank=0, target=1, left=None, right=None):
        '''Create a leaf holding element, or an empty node with children.'''

        self._ckey = element
        if left is None and right is None:
            self._elements = ElementList(element)
        else:
            self._elements = ElementList()
        self._rank = rank
        self._target = target
        self._left = left
        self._right = right

    @classmethod
    def link(cls, heap, left, right):
        '''Create a node of rank r + 1 from two rank r nodes.'''

        assert left._rank == right._rank

        rank = left._rank + 1
        if rank <= heap._cutoff:
            target = 1
        else:
            target = (3 * left._target + 1) // 2
        node = cls(None, rank, target, left, right)
        node.sift(heap)
        return node

    def leaf(self):
        '''Return if node has no children.'''

        return self._left is None and self._right is None

    def children(self):
        '''Generator to return the (at most two) children of node.'''

        if self._left is not None:
            yield self._left
        if self._right is not None:
            yield self._right

    def all_nodes(self):
        '''Generator to yield all nodes in subtree rooted at node.'''

        yield self
        for child in self.children():
            yield from child.all_nodes()

    def elements(self):
        '''Generator to yield all elements in subtree rooted at node.'''

        yield from self._elements
        for child in self.children():
            yield from child.elements()

    def corrupted(self, cmp):
        '''Return number of elements in subtree with key below their ckey.'''

        count = sum(1 for element in self._elements
                    if cmp(element, self._ckey) < 0)
        for child in self.children():
            count += child.corrupted(cmp)
        return count

    def sift(self, heap):
        '''Refill the element list from the children.

        Repeatedly moves the list of the child with the smaller ckey into
        this node and takes over its ckey, until the list reaches its target
        size or the node becomes a leaf.  Elements with a true key below
        the adopted ckey become corrupted.
        '''

        cutoff = heap._cutoff
        while len(self._elements) < self._target and not self.leaf():
            if self._left is None or (self._right is not None and
                                      heap._less(self._right, self._left)):
                self._left, self._right = self._right, self._left
            child = self._left
            if child._rank <= cutoff < self._rank:
                heap._corruptible += len(child._elements)
            self._elements.consume(child._elements)
            self._ckey = child._ckey
            if child.leaf():
                self._left = None
            else:
                child.sift(heap)


######################################################################
#                         Element lists
######################################################################


class ElementList:
    '''Singly linked list of elements with O(1) concatenation.'''

    def __init__(self, *elements):
        self._head = None
        self._tail = None
        self._size = 0
        for element in elements:
            cell = [element, None]
            if self._tail is None:
                self._head = cell
            else:
                self._tail[1] = cell
            self._tail = cell
            self._size += 1

    def __len__(self):
        return self._size

    def __iter__(self):
        cell = self._head
        while cell is not None:
            yield cell[0]
            cell = cell[1]

    def consume(self, other):
        '''Append all elements of other to this list, leaving other empty.'''

        if other._size == 0:
            return
        if self._size == 0:
            self._head = other._head
        else:
            self._tail[1] = other._head
        self._tail = other._tail
        self._size += other._size
        other._head = other._tail = None
        other._size = 0

    def pick(self):
        '''Remove and return the first element.'''

        if self._head is None:
            raise IndexError('pick from an empty element list')
        element, self._head = self._head
        self._size -= 1
        if self._head is None:
            self._tail = None
        return element

    def validate(self):
        '''Validate size and end pointers.'''

        assert sum(1 for _ in self) == self._size
        assert (self._size == 0) == (self._head is None)
        assert (self._size == 0) == (self._tail is None)
        assert self._tail is None or self._tail[1] is None
