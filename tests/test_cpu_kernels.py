"""
test_cpu_kernels.py
===================
Tests for CPU kernels (_cpu_kernels.py).

The kernels are called directly on the arrays of a built QueryEngine and
compared with their pure-Python counterparts:

- _range_min_nb      vs RangeMinIndex.range_min
- _lower_bound_nb    vs np.searchsorted(side='left')
- _solve_query_nb    vs the python backend
- _solve_batch_njit  vs _solve_query_nb, one query at a time
"""

import sys
from pathlib import Path

# Add parent directory to path so we can import the kernel modules
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

import numpy as np
import pytest

# Try to import the CPU kernels
try:
    from virtree._cpu_kernels import (
        _range_min_nb,
        _lower_bound_nb,
        _solve_query_nb,
        _solve_batch_njit,
    )
    KERNELS_AVAILABLE = True
except ImportError:
    KERNELS_AVAILABLE = False

from virtree import QueryEngine, quiet
from examples_trees import SMALL_N, SMALL_EDGES, random_queries, random_tree_edges

# Skip all tests if kernels not available
pytestmark = pytest.mark.skipif(
    not KERNELS_AVAILABLE,
    reason="CPU kernels module not available"
)


def kernel_args(engine):
    """Index arrays in the order the kernels take them, after the query."""
    return (
        engine.tree.first_occurrence,
        engine.tree.depth,
        engine.values,
        engine.tree.euler_tour,
        engine.tree.euler_depth,
        engine.lca_index.rmq.segment_tree,
        engine.lca_index.rmq.tour_len,
    )


@pytest.fixture(scope="module")
def small():
    with quiet():
        return QueryEngine(SMALL_N, SMALL_EDGES)


@pytest.fixture(scope="module")
def medium():
    n = 45
    with quiet():
        return QueryEngine(n, random_tree_edges(n, seed=45))


class TestKernelImports:
    """Test that kernel imports work correctly."""

    def test_module_imports_successfully(self):
        import virtree._cpu_kernels as _cpu_kernels
        assert _cpu_kernels is not None

    def test_all_kernels_callable(self):
        for fn in (_range_min_nb, _lower_bound_nb, _solve_query_nb, _solve_batch_njit):
            assert callable(fn)


class TestRangeMinKernel:
    def test_matches_segment_tree(self, medium):
        rmq = medium.lca_index.rmq
        for l in range(0, rmq.tour_len, 2):
            for r in range(l, rmq.tour_len, 3):
                pos = _range_min_nb(l, r, rmq.tour_len, rmq.segment_tree,
                                    medium.tree.euler_depth)
                assert rmq.range_min(l, r) == (int(medium.tree.euler_tour[pos]), pos)

    def test_small_examples(self, small):
        rmq = small.lca_index.rmq
        depth = small.tree.euler_depth
        assert _range_min_nb(2, 7, rmq.tour_len, rmq.segment_tree, depth) == 6
        assert _range_min_nb(1, 5, rmq.tour_len, rmq.segment_tree, depth) == 1


class TestLowerBoundKernel:
    @pytest.mark.parametrize("target", [-1, 0, 2, 3, 7, 8, 100])
    def test_matches_searchsorted(self, target):
        arr = np.array([0, 2, 2, 5, 7, 7, 9], dtype=np.int64)
        assert _lower_bound_nb(arr, 0, len(arr), target) == np.searchsorted(
            arr, target, side="left"
        )

    def test_sub_range(self):
        arr = np.array([0, 2, 4, 6, 8, 10], dtype=np.int64)
        assert _lower_bound_nb(arr, 2, 5, 7) == 4
        assert _lower_bound_nb(arr, 2, 5, 100) == 5
        assert _lower_bound_nb(arr, 2, 5, 0) == 2


class TestSolveQueryKernel:
    def test_worked_example(self, small):
        verts = small.lca_index.sort_vertices([3, 4, 5])
        assert _solve_query_nb(verts, *kernel_args(small)) == 121

    @pytest.mark.parametrize("vertices", [[], [4], [4, 4], [2, 4], [1, 1, 3]])
    def test_small_cases(self, small, vertices):
        verts = small.lca_index.sort_vertices(vertices)
        expected = small.query(vertices, backend="python")
        assert _solve_query_nb(verts, *kernel_args(small)) == expected

    def test_matches_python_backend(self, medium):
        for q in random_queries(medium.n_vertices, 80, 20, seed=46):
            verts = medium.lca_index.sort_vertices(q)
            assert _solve_query_nb(verts, *kernel_args(medium)) == medium.query(
                q, backend="python"
            )


class TestSolveBatchKernel:
    def test_matches_per_query(self, medium):
        queries = random_queries(medium.n_vertices, 50, 20, seed=47)
        sorted_queries = [medium.lca_index.sort_vertices(q) for q in queries]
        sizes = [len(q) for q in sorted_queries]
        offsets = np.zeros(len(queries) + 1, dtype=np.int64)
        offsets[1:] = np.cumsum(sizes)
        packed = np.concatenate(sorted_queries).astype(np.int64)

        out = np.zeros(len(queries), dtype=np.int64)
        _solve_batch_njit(offsets, packed, *kernel_args(medium), len(queries), out)

        expected = [_solve_query_nb(q, *kernel_args(medium)) for q in sorted_queries]
        assert out.tolist() == expected
