"""
tests/examples_trees.py
=======================
Shared tree corpus and brute-force oracles for the test suite.

Reference trees
---------------
SMALL_EDGES  (N=5, the worked example)

        1
       / \\
      2   3
     / \\
    4   5

    Query {3, 4, 5}: virtual tree 1 -> (2 -> (4, 5), 3); answer
    3*4*3 + 3*5*3 + 4*5*2 = 121.

CATERPILLAR_EDGES  (N=7, a spine with two hanging leaves)

    1 - 2 - 3 - 4 - 5
    |   |
    6   7

Oracles
-------
Everything here is deliberately naive: parents from a plain BFS, LCA by
intersecting ancestor lists, distances by depth arithmetic, and the pairwise
sum by an O(K^2) double loop.  None of it touches virtree code.
"""

from collections import deque
from itertools import combinations

import numpy as np


MOD = 1_000_000_007

SMALL_N = 5
SMALL_EDGES = [(1, 2), (1, 3), (2, 4), (2, 5)]

CATERPILLAR_N = 7
CATERPILLAR_EDGES = [(1, 2), (2, 3), (3, 4), (4, 5), (1, 6), (2, 7)]

STAR_N = 6
STAR_EDGES = [(1, 2), (1, 3), (1, 4), (1, 5), (1, 6)]


def random_tree_edges(n: int, seed: int):
    """
    Random labelled tree on 1..n with shuffled edge order and orientation.

    Shape comes from a random-parent process; labels are then permuted so
    vertex ids carry no structural meaning.
    """
    rng = np.random.default_rng(seed)
    labels = rng.permutation(n) + 1
    edges = []
    for v in range(1, n):
        p = int(rng.integers(0, v))
        a, b = int(labels[v]), int(labels[p])
        if rng.random() < 0.5:
            a, b = b, a
        edges.append((a, b))
    order = rng.permutation(len(edges))
    return [edges[i] for i in order]


def chain_edges(n: int):
    """Path 1 - 2 - ... - n."""
    return [(v, v + 1) for v in range(1, n)]


def bfs_parents(n: int, edges, root: int = 1):
    """Return (parent, depth) dicts by breadth-first search from *root*."""
    adjacency = {v: [] for v in range(1, n + 1)}
    for a, b in edges:
        adjacency[a].append(b)
        adjacency[b].append(a)

    parent = {root: None}
    depth = {root: 0}
    queue = deque([root])
    while queue:
        v = queue.popleft()
        for w in adjacency[v]:
            if w not in parent:
                parent[w] = v
                depth[w] = depth[v] + 1
                queue.append(w)
    return parent, depth


def ancestors(parent, v):
    """Path from *v* up to the root, *v* included."""
    path = []
    while v is not None:
        path.append(v)
        v = parent[v]
    return path


def brute_lca(parent, depth, u, v):
    """Deepest common element of the two ancestor lists."""
    common = set(ancestors(parent, u)) & set(ancestors(parent, v))
    return max(common, key=lambda x: depth[x])


def brute_distance(parent, depth, u, v):
    w = brute_lca(parent, depth, u, v)
    return depth[u] + depth[v] - 2 * depth[w]


def brute_pairwise(parent, depth, vertices, values=None):
    """O(K^2) reference: sum of w(a) * w(b) * dist(a, b) over pairs, mod C."""
    total = 0
    for a, b in combinations(list(vertices), 2):
        wa = a if values is None else values[a - 1]
        wb = b if values is None else values[b - 1]
        total += wa * wb * brute_distance(parent, depth, a, b)
    return total % MOD


def random_queries(n: int, n_queries: int, max_k: int, seed: int):
    """Random multisets of vertex ids (duplicates possible), sizes 0..max_k."""
    rng = np.random.default_rng(seed)
    queries = []
    for _ in range(n_queries):
        k = int(rng.integers(0, max_k + 1))
        queries.append([int(x) for x in rng.integers(1, n + 1, size=k)])
    return queries
