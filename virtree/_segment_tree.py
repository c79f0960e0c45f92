"""
_segment_tree.py
================
Range-minimum index over the Euler tour depth sequence.

Each node of the segment tree stores a ``(vertex, position)`` pair: the
vertex of minimum depth in the node's tour range and the tour position where
that minimum occurs.  The position is what lets the virtual-tree builder
split a sorted query range around an LCA occurrence; the vertex alone would
not be enough because an internal vertex appears several times in the tour.

Layout
------
Classic 1-indexed recursive layout in a flat ``int32 (4K, 2)`` array, where
K is the tour length.  Node ``i`` covers ``[lo, hi]``; its children are
``2i`` covering ``[lo, mid]`` and ``2i + 1`` covering ``[mid + 1, hi]`` with
``mid = (lo + hi) // 2``.  Slots that do not correspond to a node hold
``(-1, -1)``.

Ties between equal depths resolve to the left child.  Any occurrence of the
true LCA is a valid answer, so the bias only matters for determinism.

Both build and query are iterative.  The build walks node indices in
increasing order to assign ranges and in decreasing order to reduce, which
visits children before parents without a call stack.
"""

import numpy as np


# Ample for any int32-indexable tour: two pending frames per tree level.
_QUERY_STACK = 128


class RangeMinIndex:
    """
    Segment tree answering ``range_min(l, r) -> (vertex, position)`` over an
    Euler tour in O(log K).

    Attributes (read-only after construction)
    -----------------------------------------
    tour_len     : int                   Length K of the indexed tour.
    euler_tour   : int32 [K]             Vertex at each tour position.
    euler_depth  : int32 [K]             Depth at each tour position.
    segment_tree : int32 [4K, 2]         ``(vertex, position)`` per node.
    """

    def __init__(self, euler_tour, euler_depth) -> None:
        """
        Parameters
        ----------
        euler_tour : array-like of int
            Vertex id at each tour position.
        euler_depth : array-like of int
            Depth of ``euler_tour[i]`` at each position; same length.
        """
        self.euler_tour = np.ascontiguousarray(euler_tour, dtype=np.int32)
        self.euler_depth = np.ascontiguousarray(euler_depth, dtype=np.int32)
        if self.euler_tour.shape != self.euler_depth.shape:
            raise ValueError(
                f"Tour and depth lengths differ: {self.euler_tour.shape[0]} "
                f"vs {self.euler_depth.shape[0]}."
            )
        if self.euler_tour.shape[0] == 0:
            raise ValueError("Cannot index an empty tour.")

        self.tour_len: int = int(self.euler_tour.shape[0])
        self.segment_tree = RangeMinIndex._build(self.euler_tour, self.euler_depth)

    def range_min(self, l: int, r: int):
        """
        Return ``(vertex, position)`` of the minimum-depth entry of the tour
        on the inclusive range ``[l, r]``.

        Raises
        ------
        ValueError
            If the range is empty or falls outside the tour.
        """
        l = int(l)
        r = int(r)
        if not 0 <= l <= r < self.tour_len:
            raise ValueError(
                f"Invalid tour range [{l}, {r}] for tour of length {self.tour_len}."
            )
        pos = RangeMinIndex._query(
            l, r, self.tour_len, self.segment_tree, self.euler_depth
        )
        return int(self.euler_tour[pos]), pos

    def __len__(self) -> int:
        return self.tour_len

    # ================================================================== #
    # Private static methods (pure computational kernels)                  #
    #                                                                      #
    # Array arguments only, no self.  The numba twins in _cpu_kernels.py  #
    # follow the same control flow line for line.                          #
    # ================================================================== #

    @staticmethod
    def _build(euler_tour: np.ndarray, euler_depth: np.ndarray) -> np.ndarray:
        """
        **Private static.**  Construct the ``(vertex, position)`` table.

        Pass 1 (increasing index) hands each node's range to its children;
        pass 2 (decreasing index) reduces every internal node from its two
        already-filled children.
        """
        tour_len = int(euler_tour.shape[0])
        size = 4 * tour_len
        segment_tree = np.full((size, 2), -1, dtype=np.int32)
        node_lo = np.full(size, -1, dtype=np.int64)
        node_hi = np.full(size, -1, dtype=np.int64)

        node_lo[1] = 0
        node_hi[1] = tour_len - 1
        for i in range(1, size):
            lo = int(node_lo[i])
            if lo < 0:
                continue
            hi = int(node_hi[i])
            if lo == hi:
                segment_tree[i, 0] = euler_tour[lo]
                segment_tree[i, 1] = lo
                continue
            mid = (lo + hi) // 2
            node_lo[2 * i] = lo
            node_hi[2 * i] = mid
            node_lo[2 * i + 1] = mid + 1
            node_hi[2 * i + 1] = hi

        for i in range(size - 1, 0, -1):
            lo = int(node_lo[i])
            if lo < 0 or lo == node_hi[i]:
                continue
            left_pos = int(segment_tree[2 * i, 1])
            right_pos = int(segment_tree[2 * i + 1, 1])
            if euler_depth[right_pos] < euler_depth[left_pos]:
                segment_tree[i] = segment_tree[2 * i + 1]
            else:
                segment_tree[i] = segment_tree[2 * i]

        return segment_tree

    @staticmethod
    def _query(l: int, r: int, tour_len: int, segment_tree, euler_depth) -> int:
        """
        **Private static.**  Tour position of the minimum depth on ``[l, r]``.

        Descends with an explicit stack, pushing the right half before the
        left so canonical nodes are visited left to right; a candidate only
        replaces the running best when strictly shallower, which keeps the
        leftmost minimum.

        Parameters
        ----------
        l, r         : int   Inclusive range, ``0 <= l <= r < tour_len``.
        tour_len     : int
        segment_tree : int32 array shape (4 * tour_len, 2)
        euler_depth  : int32 array shape (tour_len,)

        Returns
        -------
        int   Tour position of the minimum.
        """
        stack_node = [0] * _QUERY_STACK
        stack_lo = [0] * _QUERY_STACK
        stack_hi = [0] * _QUERY_STACK
        top = 0
        stack_node[0] = 1
        stack_lo[0] = 0
        stack_hi[0] = tour_len - 1

        best = -1
        best_depth = 0
        while top >= 0:
            i = stack_node[top]
            lo = stack_lo[top]
            hi = stack_hi[top]
            top -= 1

            if r < lo or hi < l:
                continue
            if l <= lo and hi <= r:
                pos = int(segment_tree[i, 1])
                d = int(euler_depth[pos])
                if best < 0 or d < best_depth:
                    best = pos
                    best_depth = d
                continue

            mid = (lo + hi) // 2
            top += 1
            stack_node[top] = 2 * i + 1
            stack_lo[top] = mid + 1
            stack_hi[top] = hi
            top += 1
            stack_node[top] = 2 * i
            stack_lo[top] = lo
            stack_hi[top] = mid

        return best
