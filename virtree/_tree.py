"""
_tree.py
========
A static rooted tree represented as a set of parallel numpy arrays, plus the
Euler-tour flattening used for range-minimum LCA queries.

Public API
----------
  Tree(n_vertices, edges, root=1)
      Constructor.  Validates the edge list, orients it away from *root* and
      builds the Euler tour.

  Tree.from_parents(parents)
      Alternative constructor from a parent vector.

  .children_of(v)
  .parent_of(v)

Vertex-ID conventions
---------------------
Vertex ids are 1-indexed, exactly as they appear in the input.  Every
per-vertex array therefore has length ``n_vertices + 1`` and slot 0 is an
unused sentinel (``-1`` in integer arrays).  This keeps ids and array
indices identical and avoids an off-by-one translation at every lookup.

Traversal notes
---------------
Both the rooting pass and the Euler tour are iterative.  A chain of
100 000 vertices is a legal input and must not hit the interpreter's
recursion limit, so no method in this module recurses on the tree height.
"""

import logging

import numpy as np


logger = logging.getLogger(__name__)


class TreeStructureError(ValueError):
    """Raised when an edge list does not describe a tree on 1..N."""


class Tree:
    """
    A rooted tree with arbitrary fan-out and an Euler-tour index.

    Attributes (all read-only after construction)
    ----------------------------------------------
    n_vertices : int   Number of vertices N.
    root       : int   Root vertex id.
    max_depth  : int   Maximum vertex depth (edge count from root).

    Arrays — tree structure
    -----------------------
    parent        : int32 [N+1]   Parent id; -1 for the root and slot 0.
    depth         : int32 [N+1]   Edge depth from root; -1 in slot 0.
    child_offsets : int64 [N+2]   CSR offsets; children of v are
                                  ``children[child_offsets[v]:child_offsets[v+1]]``.
    children      : int32 [N-1]   Child ids, grouped by parent, in input order.

    Arrays — Euler tour
    -------------------
    euler_tour       : int32 [2N-1]   Vertex id at each tour position.
    euler_depth      : int32 [2N-1]   Depth at each tour position.
    first_occurrence : int32 [N+1]    First tour position of each vertex.
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(self, n_vertices: int, edges, root: int = 1) -> None:
        """
        Parameters
        ----------
        n_vertices : int
            Number of vertices N (ids 1..N).
        edges : array-like, shape (N-1, 2)
            Undirected edges as 1-indexed vertex pairs.
        root : int, default 1
            Vertex to hang the tree from.

        Raises
        ------
        TreeStructureError
            If the edges do not form a single tree spanning 1..N.
        """
        n_vertices = int(n_vertices)
        if n_vertices < 1:
            raise TreeStructureError(f"A tree needs at least one vertex, got {n_vertices}.")
        if not 1 <= root <= n_vertices:
            raise TreeStructureError(f"Root {root} is not a vertex of 1..{n_vertices}.")

        edge_array = np.asarray(edges, dtype=np.int64).reshape(-1, 2)

        self.n_vertices: int = n_vertices
        self.root: int = int(root)

        self._orient(edge_array)
        self._build_euler_tour()

        self.max_depth: int = int(self.depth[1:].max())
        logger.debug(
            "Tree rooted at %d: %d vertices, max depth %d, tour length %d",
            self.root,
            self.n_vertices,
            self.max_depth,
            len(self.euler_tour),
        )

    @classmethod
    def from_parents(cls, parents, root: int = 1) -> "Tree":
        """
        Build a tree from a parent vector.

        Parameters
        ----------
        parents : sequence of int
            ``parents[v - 1]`` is the parent of vertex *v*; the entry for
            *root* is ignored.
        """
        edges = [(v, int(p)) for v, p in enumerate(parents, start=1) if v != root]
        return cls(len(parents), edges, root=root)

    # ================================================================== #
    # Public methods                                                       #
    # ================================================================== #

    def children_of(self, v: int) -> np.ndarray:
        """Return the child ids of *v* in traversal order."""
        return self.children[self.child_offsets[v] : self.child_offsets[v + 1]]

    def parent_of(self, v: int) -> int:
        """Return the parent id of *v*, or -1 for the root."""
        return int(self.parent[v])

    def __len__(self) -> int:
        return self.n_vertices

    def __repr__(self) -> str:
        return (
            f"Tree(n_vertices={self.n_vertices}, root={self.root}, "
            f"max_depth={self.max_depth})"
        )

    # ================================================================== #
    # Private instance methods                                             #
    # ================================================================== #

    def _orient(self, edges: np.ndarray) -> None:
        """
        **Private.**  Validate *edges* and orient them away from the root.

        The undirected edge list is first packed into a CSR adjacency
        structure, then an explicit-stack DFS from the root assigns parents.
        Each vertex's children keep the order in which its edges appeared in
        the input (minus the edge back to its parent).

        Populates
        ---------
        self.parent, self.depth, self.child_offsets, self.children
        """
        n = self.n_vertices
        n_edges = int(edges.shape[0])

        if n_edges != n - 1:
            raise TreeStructureError(
                f"A tree on {n} vertices has {n - 1} edges, got {n_edges}."
            )
        if n_edges and (int(edges.min()) < 1 or int(edges.max()) > n):
            raise TreeStructureError(f"Edge endpoint outside 1..{n}.")
        if n_edges and bool(np.any(edges[:, 0] == edges[:, 1])):
            v = int(edges[edges[:, 0] == edges[:, 1]][0, 0])
            raise TreeStructureError(f"Self-loop at vertex {v}.")

        # ---- CSR adjacency ------------------------------------------ #
        # Endpoints are interleaved (f0, s0, f1, s1, ...) and a stable sort
        # on the source keeps each vertex's neighbours in input order.
        src = np.empty(2 * n_edges, dtype=np.int64)
        dst = np.empty(2 * n_edges, dtype=np.int64)
        src[0::2] = edges[:, 0]
        src[1::2] = edges[:, 1]
        dst[0::2] = edges[:, 1]
        dst[1::2] = edges[:, 0]
        order = np.argsort(src, kind="stable")
        adjacency = dst[order]
        adj_offsets = np.zeros(n + 2, dtype=np.int64)
        np.cumsum(np.bincount(src, minlength=n + 1), out=adj_offsets[1:])

        # ---- Explicit-stack DFS from the root ----------------------- #
        parent = np.full(n + 1, -1, dtype=np.int32)
        depth = np.full(n + 1, -1, dtype=np.int32)
        n_children = np.zeros(n + 2, dtype=np.int64)

        root = self.root
        depth[root] = 0
        stack = [root]
        n_reached = 1

        while stack:
            v = stack.pop()
            p = int(parent[v])
            skipped_parent = False
            for k in range(int(adj_offsets[v]), int(adj_offsets[v + 1])):
                w = int(adjacency[k])
                if w == p and not skipped_parent:
                    skipped_parent = True
                    continue
                if depth[w] != -1:
                    raise TreeStructureError(
                        f"Edge ({v}, {w}) closes a cycle."
                    )
                parent[w] = v
                depth[w] = depth[v] + 1
                n_children[v + 1] += 1
                n_reached += 1
                stack.append(w)

        if n_reached != n:
            missing = np.flatnonzero(depth[1:] == -1)[:5] + 1
            raise TreeStructureError(
                f"{n - n_reached} vertices unreachable from root {root} "
                f"(e.g. {', '.join(map(str, missing))})."
            )

        # ---- Child lists in adjacency order ------------------------- #
        child_offsets = np.cumsum(n_children)
        children = np.empty(n - 1, dtype=np.int32)
        fill = child_offsets[:-1].copy()
        for v in range(1, n + 1):
            for k in range(int(adj_offsets[v]), int(adj_offsets[v + 1])):
                w = int(adjacency[k])
                if parent[w] == v:
                    children[fill[v]] = w
                    fill[v] += 1

        self.parent = parent
        self.depth = depth
        self.child_offsets = child_offsets
        self.children = children

    def _build_euler_tour(self) -> None:
        """
        **Private.**  Build the Euler tour and first-occurrence index.

        Iterative Euler tour
        --------------------
        Each stack frame is ``(vertex, next child slot)``.  A vertex is
        appended on entry and again every time one of its child subtrees
        completes, so a vertex with k children appears k + 1 times and the
        tour has exactly 2N - 1 entries.

        Populates
        ---------
        self.euler_tour, self.euler_depth, self.first_occurrence
        """
        n = self.n_vertices
        tour_len = 2 * n - 1

        euler_tour = np.zeros(tour_len, dtype=np.int32)
        euler_depth = np.zeros(tour_len, dtype=np.int32)
        first_occurrence = np.full(n + 1, -1, dtype=np.int32)

        child_offsets = self.child_offsets
        children = self.children
        depth = self.depth

        stack_vertex = np.zeros(n, dtype=np.int32)
        stack_next = np.zeros(n, dtype=np.int64)
        stack_top = 0
        stack_vertex[0] = self.root
        stack_next[0] = child_offsets[self.root]

        euler_tour[0] = self.root
        euler_depth[0] = 0
        first_occurrence[self.root] = 0
        tour_pos = 1

        while stack_top >= 0:
            v = int(stack_vertex[stack_top])
            k = int(stack_next[stack_top])

            if k < child_offsets[v + 1]:
                stack_next[stack_top] = k + 1
                w = int(children[k])
                euler_tour[tour_pos] = w
                euler_depth[tour_pos] = depth[w]
                first_occurrence[w] = tour_pos
                tour_pos += 1

                stack_top += 1
                stack_vertex[stack_top] = w
                stack_next[stack_top] = child_offsets[w]
            else:
                stack_top -= 1
                if stack_top >= 0:
                    p = int(stack_vertex[stack_top])
                    euler_tour[tour_pos] = p
                    euler_depth[tour_pos] = depth[p]
                    tour_pos += 1

        self.euler_tour = euler_tour
        self.euler_depth = euler_depth
        self.first_occurrence = first_occurrence
