"""
_lca.py
=======
Lowest-common-ancestor queries on a static ``Tree``, answered by a
range-minimum query over its Euler tour.

Public API
----------
  LCAIndex(tree)
  .lca(u, v)
  .multi_lca(vertices)
  .distance(u, v)
  .get_depth(v)
  .sort_vertices(vertices)
  .lca_and_split(sorted_vertices, lo=0, hi=None)
  .partition(sorted_vertices, position, lo=0, hi=None)

All methods are read-only; an ``LCAIndex`` can be shared by any number of
concurrent queries once built.

Why first-occurrence order matters
----------------------------------
Once a vertex list is sorted by first tour occurrence, the LCA of the whole
list equals the LCA of its first and last element: every other element's
first occurrence lies inside that tour span, and the span's minimum-depth
entry is an ancestor of everything visited in it.  The tour position of
that minimum also separates the list into the parts that lie before and
after one return to the LCA, which is what ``lca_and_split`` and
``partition`` expose.
"""

import numpy as np

from virtree._segment_tree import RangeMinIndex
from virtree._tree import Tree
from virtree._utils import validate_vertex_ids


class LCAIndex:
    """
    LCA and split queries over one ``Tree``.

    Attributes
    ----------
    tree      : Tree
    rmq       : RangeMinIndex   Built once over ``tree.euler_tour``.
    """

    def __init__(self, tree: Tree) -> None:
        self.tree = tree
        self.rmq = RangeMinIndex(tree.euler_tour, tree.euler_depth)
        self.first_occurrence = tree.first_occurrence
        self.depth = tree.depth

    # ================================================================== #
    # Two-point queries                                                    #
    # ================================================================== #

    def lca(self, u: int, v: int) -> int:
        """
        Return the lowest common ancestor of *u* and *v*.

        Complexity
        ----------
        O(log N) per call.
        """
        self._check_vertex(u)
        self._check_vertex(v)
        if u == v:
            return int(u)

        l = int(self.first_occurrence[u])
        r = int(self.first_occurrence[v])
        if l > r:
            l, r = r, l
        vertex, _ = self.rmq.range_min(l, r)
        return vertex

    def distance(self, u: int, v: int) -> int:
        """Return the edge count of the path between *u* and *v*."""
        w = self.lca(u, v)
        return int(self.depth[u]) + int(self.depth[v]) - 2 * int(self.depth[w])

    def get_depth(self, v: int) -> int:
        """Return the depth of *v* (O(1))."""
        return int(self.depth[v])

    # ================================================================== #
    # Set queries                                                          #
    # ================================================================== #

    def sort_vertices(self, vertices) -> np.ndarray:
        """
        Return *vertices* as an ``int64`` array ordered by first tour
        occurrence.  The sort is stable, so duplicates stay adjacent.

        Raises
        ------
        ValueError   if any id is outside ``1..N``.
        """
        ids = validate_vertex_ids(vertices, self.tree.n_vertices)
        order = np.argsort(self.first_occurrence[ids], kind="stable")
        return ids[order]

    def multi_lca(self, vertices) -> int:
        """
        Return the LCA of all *vertices* (any order, duplicates allowed).

        Raises
        ------
        ValueError   if *vertices* is empty or holds an out-of-range id.
        """
        ids = validate_vertex_ids(vertices, self.tree.n_vertices)
        if ids.size == 0:
            raise ValueError("vertices must contain at least one element.")
        fo = self.first_occurrence[ids]
        vertex, _ = self.rmq.range_min(int(fo.min()), int(fo.max()))
        return vertex

    def lca_and_split(self, sorted_vertices, lo: int = 0, hi: int = None):
        """
        LCA of ``sorted_vertices[lo:hi]`` and the tour position where it was
        found.

        Parameters
        ----------
        sorted_vertices : np.ndarray[int]
            Vertices already ordered by first occurrence (see
            ``sort_vertices``).
        lo, hi : int
            Half-open sub-range to consider; ``hi`` defaults to the end.

        Returns
        -------
        (vertex, position) : (int, int)
            *position* is a tour index holding *vertex*; it lies inside the
            span ``[first(sorted_vertices[lo]), first(sorted_vertices[hi-1])]``.
        """
        if hi is None:
            hi = len(sorted_vertices)
        if hi <= lo:
            raise ValueError(f"Empty range [{lo}, {hi}).")
        l = int(self.first_occurrence[sorted_vertices[lo]])
        r = int(self.first_occurrence[sorted_vertices[hi - 1]])
        return self.rmq.range_min(l, r)

    def partition(self, sorted_vertices, position: int, lo: int = 0, hi: int = None) -> int:
        """
        Boundary index for splitting ``sorted_vertices[lo:hi]`` at tour
        *position*.

        Returns the first index ``k`` in ``[lo, hi]`` whose first occurrence
        is ``>= position``; everything before ``k`` lies strictly before the
        split.  Binary search on first occurrence, not on vertex id.
        """
        if hi is None:
            hi = len(sorted_vertices)
        fo = self.first_occurrence[sorted_vertices[lo:hi]]
        return lo + int(np.searchsorted(fo, position, side="left"))

    # ================================================================== #
    # Private helpers                                                      #
    # ================================================================== #

    def _check_vertex(self, v) -> None:
        if not 1 <= v <= self.tree.n_vertices:
            raise ValueError(
                f"Vertex id {v} out of range; valid ids are 1..{self.tree.n_vertices}."
            )
