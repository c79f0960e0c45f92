"""
_cpu_kernels.py
===============
CPU-accelerated query kernels using Numba.

This module contains ONLY numba-compiled code operating on flat numpy
arrays.  It mirrors the pure-Python pipeline (``RangeMinIndex._query``,
``LCAIndex.partition``, ``build_virtual_tree``, ``solve``) step for step so
the two backends can be cross-checked, but keeps the virtual tree in
parallel arrays instead of node objects.

Exported Functions
------------------
_range_min_nb : njit function
    Tour position of the minimum depth on an inclusive range.

_lower_bound_nb : njit function
    First index in a sorted slice whose value is >= a target.

_solve_query_nb : njit function
    Full per-query pipeline: virtual-tree build plus aggregation.

_solve_batch_njit : njit function
    Parallel loop of ``_solve_query_nb`` over CSR-packed queries.

Notes
-----
- Virtual-tree nodes are numbered in creation order and a parent is always
  created before any of its descendants, so a single reverse sweep over the
  node numbers is a valid post-order.  Children are folded into their
  parent one at a time using ``cross += adj_new * S_acc + W_acc * S_new``,
  which sums to the same pairwise total as the per-node formula.
- All modular products have both factors below ``MODULUS`` (~2^30), so they
  fit in int64 before reduction.
- cache=True persists compiled binary to disk for faster subsequent runs.
"""

import numpy as np
from numba import njit, prange

from virtree._utils import MODULUS


_QUERY_STACK = 128


# ======================================================================== #
# Building blocks                                                           #
# ======================================================================== #


@njit(cache=True)
def _range_min_nb(l, r, tour_len, segment_tree, euler_depth):
    """
    Leftmost tour position of minimum depth on ``[l, r]``.

    Parameters
    ----------
    l, r         : int
        Inclusive tour range, ``0 <= l <= r < tour_len``.
    tour_len     : int
    segment_tree : int32[4 * tour_len, 2]
        ``(vertex, position)`` per segment-tree node.
    euler_depth  : int32[tour_len]

    Returns
    -------
    int
        Tour position of the minimum.
    """
    stack_node = np.empty(_QUERY_STACK, dtype=np.int64)
    stack_lo = np.empty(_QUERY_STACK, dtype=np.int64)
    stack_hi = np.empty(_QUERY_STACK, dtype=np.int64)
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
            pos = segment_tree[i, 1]
            d = euler_depth[pos]
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


@njit(cache=True)
def _lower_bound_nb(arr, lo, hi, target):
    """First index ``k`` in ``[lo, hi]`` with ``arr[k] >= target``."""
    while lo < hi:
        mid = (lo + hi) // 2
        if arr[mid] < target:
            lo = mid + 1
        else:
            hi = mid
    return lo


# ======================================================================== #
# Per-query pipeline                                                        #
# ======================================================================== #


@njit(cache=True)
def _solve_query_nb(
        sorted_vertices,
        first_occurrence,
        depth,
        values,
        euler_tour,
        euler_depth,
        segment_tree,
        tour_len):
    """
    Build the virtual tree of one query and return its pairwise aggregate.

    Parameters
    ----------
    sorted_vertices  : int64[K]
        Marked vertex ids ordered by first occurrence.
    first_occurrence : int32[N+1]
    depth            : int32[N+1]
    values           : int64[N+1]
        Per-vertex values already reduced modulo MODULUS.
    euler_tour       : int32[2N-1]
    euler_depth      : int32[2N-1]
    segment_tree     : int32[4(2N-1), 2]
    tour_len         : int

    Returns
    -------
    int64
        Aggregate in ``[0, MODULUS)``; 0 when fewer than two vertices.
    """
    k = sorted_vertices.shape[0]
    if k < 2:
        return 0

    sorted_fo = np.empty(k, dtype=np.int64)
    for i in range(k):
        sorted_fo[i] = first_occurrence[sorted_vertices[i]]

    # Node 0 is the sentinel parent of the top-level range.
    max_nodes = 2 * k
    node_vertex = np.empty(max_nodes, dtype=np.int64)
    node_depth = np.empty(max_nodes, dtype=np.int64)
    node_parent = np.empty(max_nodes, dtype=np.int64)
    n_children = np.zeros(max_nodes, dtype=np.int64)
    node_vertex[0] = -1
    node_depth[0] = 0
    node_parent[0] = -1
    n_nodes = 1

    max_frames = 3 * k + 3
    stack_lo = np.empty(max_frames, dtype=np.int64)
    stack_hi = np.empty(max_frames, dtype=np.int64)
    stack_parent = np.empty(max_frames, dtype=np.int64)
    top = 0
    stack_lo[0] = 0
    stack_hi[0] = k
    stack_parent[0] = 0

    # ---- Virtual-tree build ------------------------------------------ #
    while top >= 0:
        lo = stack_lo[top]
        hi = stack_hi[top]
        parent = stack_parent[top]
        top -= 1

        if hi - lo == 0:
            continue
        if hi - lo == 1:
            v = sorted_vertices[lo]
            node_vertex[n_nodes] = v
            node_depth[n_nodes] = depth[v]
            node_parent[n_nodes] = parent
            n_children[parent] += 1
            n_nodes += 1
            continue

        pos = _range_min_nb(sorted_fo[lo], sorted_fo[hi - 1], tour_len,
                            segment_tree, euler_depth)
        lca = euler_tour[pos]
        if node_vertex[parent] == lca:
            cur = parent
        else:
            cur = n_nodes
            node_vertex[cur] = lca
            node_depth[cur] = depth[lca]
            node_parent[cur] = parent
            n_children[parent] += 1
            n_nodes += 1

        split = _lower_bound_nb(sorted_fo, lo, hi, pos)
        if split < hi and sorted_vertices[split] == lca:
            top += 1
            stack_lo[top] = split + 1; stack_hi[top] = hi; stack_parent[top] = cur
            top += 1
            stack_lo[top] = split; stack_hi[top] = split + 1; stack_parent[top] = cur
            top += 1
            stack_lo[top] = lo; stack_hi[top] = split; stack_parent[top] = cur
        else:
            top += 1
            stack_lo[top] = split; stack_hi[top] = hi; stack_parent[top] = cur
            top += 1
            stack_lo[top] = lo; stack_hi[top] = split; stack_parent[top] = cur

    # ---- Aggregation: reverse creation order is a post-order --------- #
    node_sum = np.zeros(n_nodes, dtype=np.int64)
    node_weighted = np.zeros(n_nodes, dtype=np.int64)
    node_cross = np.zeros(n_nodes, dtype=np.int64)

    for j in range(n_nodes - 1, 1, -1):
        if n_children[j] == 0:
            s = values[node_vertex[j]]
            w = 0
        else:
            s = node_sum[j]
            w = node_weighted[j]

        p = node_parent[j]
        rel = node_depth[j] - node_depth[p]
        adj = (w + (s * rel) % MODULUS) % MODULUS

        cross = node_cross[p] + node_cross[j]
        cross += (adj * node_sum[p]) % MODULUS
        cross += (node_weighted[p] * s) % MODULUS
        node_cross[p] = cross % MODULUS
        node_sum[p] = (node_sum[p] + s) % MODULUS
        node_weighted[p] = (node_weighted[p] + adj) % MODULUS

    return node_cross[1]


@njit(parallel=True, cache=True)
def _solve_batch_njit(
        query_offsets,
        query_vertices,
        first_occurrence,
        depth,
        values,
        euler_tour,
        euler_depth,
        segment_tree,
        tour_len,
        n_queries,
        results_out):
    """
    Numba-compiled batch kernel.

    The loop over queries runs in parallel via prange.  The tree index
    arrays are shared read-only; every query allocates its own scratch
    arrays inside ``_solve_query_nb`` and owns ``results_out[qi]``, so no
    synchronisation is needed.

    Parameters
    ----------
    query_offsets  : int64[n_queries + 1]
        CSR offsets into query_vertices.
    query_vertices : int64[total]
        Concatenated queries, each slice sorted by first occurrence.
    first_occurrence, depth, values, euler_tour, euler_depth,
    segment_tree, tour_len
        As for ``_solve_query_nb``.
    n_queries : int
    results_out : int64[n_queries]
        Output array.
    """
    for qi in prange(n_queries):
        start = query_offsets[qi]
        stop = query_offsets[qi + 1]
        results_out[qi] = _solve_query_nb(
            query_vertices[start:stop],
            first_occurrence,
            depth,
            values,
            euler_tour,
            euler_depth,
            segment_tree,
            tour_len,
        )
