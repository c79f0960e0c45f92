"""
tests/test_tree.py
==================
Pytest test suite for the Tree class: rooting, validation and the Euler
tour.

Reference tree (SMALL_EDGES, root 1)
------------------------------------
        1
       / \\
      2   3
     / \\
    4   5

  children: 1 -> [2, 3], 2 -> [4, 5]   (input edge order)
  euler_tour       : 1 2 4 2 5 2 1 3 1
  euler_depth      : 0 1 2 1 2 1 0 1 0
  first_occurrence : 1=0 2=1 3=7 4=2 5=4
"""

import os
import sys
from collections import Counter

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
sys.path.insert(0, os.path.dirname(__file__))

from virtree._tree import Tree, TreeStructureError
from examples_trees import (
    SMALL_N,
    SMALL_EDGES,
    STAR_N,
    STAR_EDGES,
    bfs_parents,
    chain_edges,
    random_tree_edges,
)


# ======================================================================== #
# Fixtures                                                                  #
# ======================================================================== #


@pytest.fixture(scope="module")
def small():
    return Tree(SMALL_N, SMALL_EDGES)


@pytest.fixture(scope="module", params=[2, 7, 31, 64])
def random_tree(request):
    n = request.param
    edges = random_tree_edges(n, seed=n)
    return n, edges, Tree(n, edges)


# ======================================================================== #
# 1. Rooting                                                                #
# ======================================================================== #


class TestRooting:
    def test_parents(self, small):
        assert small.parent.tolist() == [-1, -1, 1, 1, 2, 2]

    def test_depths(self, small):
        assert small.depth[1:].tolist() == [0, 1, 1, 2, 2]
        assert small.max_depth == 2

    def test_children_follow_input_order(self, small):
        assert small.children_of(1).tolist() == [2, 3]
        assert small.children_of(2).tolist() == [4, 5]
        assert small.children_of(3).tolist() == []

    def test_parent_of(self, small):
        assert small.parent_of(1) == -1
        assert small.parent_of(5) == 2

    def test_matches_bfs(self, random_tree):
        n, edges, tree = random_tree
        parent, depth = bfs_parents(n, edges)
        for v in range(1, n + 1):
            expected = -1 if parent[v] is None else parent[v]
            assert tree.parent_of(v) == expected
            assert int(tree.depth[v]) == depth[v]

    def test_every_non_root_has_one_parent(self, random_tree):
        n, _, tree = random_tree
        counts = Counter(tree.children.tolist())
        assert sorted(counts) == [v for v in range(1, n + 1) if v != tree.root]
        assert set(counts.values()) == {1}

    def test_depth_is_parent_depth_plus_one(self, random_tree):
        n, _, tree = random_tree
        for v in range(1, n + 1):
            p = tree.parent_of(v)
            if p != -1:
                assert tree.depth[v] == tree.depth[p] + 1

    def test_alternative_root(self):
        tree = Tree(SMALL_N, SMALL_EDGES, root=4)
        assert tree.root == 4
        assert tree.depth[4] == 0
        assert tree.parent_of(2) == 4
        assert tree.parent_of(1) == 2
        assert tree.depth[3] == 3

    def test_from_parents(self):
        tree = Tree.from_parents([0, 1, 1, 2, 2])
        assert tree.parent.tolist() == [-1, -1, 1, 1, 2, 2]

    def test_single_vertex(self):
        tree = Tree(1, [])
        assert tree.euler_tour.tolist() == [1]
        assert tree.first_occurrence[1] == 0
        assert tree.max_depth == 0

    def test_len_and_repr(self, small):
        assert len(small) == 5
        assert "n_vertices=5" in repr(small)


# ======================================================================== #
# 2. Validation                                                             #
# ======================================================================== #


class TestValidation:
    def test_too_few_edges(self):
        with pytest.raises(TreeStructureError, match="edges"):
            Tree(4, [(1, 2), (2, 3)])

    def test_too_many_edges(self):
        with pytest.raises(TreeStructureError, match="edges"):
            Tree(3, [(1, 2), (2, 3), (3, 1)])

    def test_endpoint_out_of_range(self):
        with pytest.raises(TreeStructureError, match="outside"):
            Tree(3, [(1, 2), (2, 4)])

    def test_zero_endpoint(self):
        with pytest.raises(TreeStructureError):
            Tree(3, [(0, 1), (1, 2)])

    def test_self_loop(self):
        with pytest.raises(TreeStructureError, match="Self-loop"):
            Tree(3, [(1, 2), (3, 3)])

    def test_cycle_with_isolated_vertex(self):
        # Right edge count, but 1-2-3 is a triangle and 4 is cut off.
        with pytest.raises(TreeStructureError):
            Tree(4, [(1, 2), (2, 3), (3, 1)])

    def test_duplicate_edge(self):
        with pytest.raises(TreeStructureError):
            Tree(4, [(1, 2), (2, 1), (3, 4)])

    def test_no_vertices(self):
        with pytest.raises(TreeStructureError):
            Tree(0, [])

    def test_root_out_of_range(self):
        with pytest.raises(TreeStructureError, match="Root"):
            Tree(SMALL_N, SMALL_EDGES, root=6)

    def test_error_is_value_error(self):
        assert issubclass(TreeStructureError, ValueError)


# ======================================================================== #
# 3. Euler tour                                                             #
# ======================================================================== #


class TestEulerTour:
    def test_small_tour(self, small):
        assert small.euler_tour.tolist() == [1, 2, 4, 2, 5, 2, 1, 3, 1]
        assert small.euler_depth.tolist() == [0, 1, 2, 1, 2, 1, 0, 1, 0]

    def test_small_first_occurrence(self, small):
        fo = small.first_occurrence
        assert [int(fo[v]) for v in range(1, 6)] == [0, 1, 7, 2, 4]

    def test_length(self, random_tree):
        n, _, tree = random_tree
        assert tree.euler_tour.shape == (2 * n - 1,)

    def test_occurrence_count_is_children_plus_one(self, random_tree):
        n, _, tree = random_tree
        counts = Counter(tree.euler_tour.tolist())
        for v in range(1, n + 1):
            assert counts[v] == len(tree.children_of(v)) + 1

    def test_first_occurrence_is_first(self, random_tree):
        n, _, tree = random_tree
        tour = tree.euler_tour.tolist()
        for v in range(1, n + 1):
            assert tour.index(v) == tree.first_occurrence[v]

    def test_consecutive_entries_are_tree_edges(self, random_tree):
        _, _, tree = random_tree
        tour = tree.euler_tour
        for a, b in zip(tour[:-1], tour[1:]):
            assert tree.parent_of(int(a)) == b or tree.parent_of(int(b)) == a

    def test_depth_column_matches_vertices(self, random_tree):
        _, _, tree = random_tree
        np.testing.assert_array_equal(tree.euler_depth, tree.depth[tree.euler_tour])

    def test_starts_and_ends_at_root(self, random_tree):
        _, _, tree = random_tree
        assert tree.euler_tour[0] == tree.root
        assert tree.euler_tour[-1] == tree.root

    def test_star(self):
        tree = Tree(STAR_N, STAR_EDGES)
        assert tree.euler_tour.tolist() == [1, 2, 1, 3, 1, 4, 1, 5, 1, 6, 1]


# ======================================================================== #
# 4. Deep trees                                                             #
# ======================================================================== #


@pytest.mark.large_scale
class TestDeepTrees:
    def test_long_chain_is_iterative(self):
        n = 100_000
        tree = Tree(n, chain_edges(n))
        assert tree.max_depth == n - 1
        assert tree.euler_tour.shape == (2 * n - 1,)
        assert tree.first_occurrence[n] == n - 1
        assert tree.euler_tour[n - 1] == n

    def test_long_chain_rooted_in_the_middle(self):
        n = 50_001
        tree = Tree(n, chain_edges(n), root=25_001)
        assert tree.max_depth == 25_000
        assert tree.depth[1] == 25_000
        assert tree.depth[n] == 25_000
