"""
_engine.py
==========
Query engine: builds the static index once, then answers pairwise
distance-weighted sums over arbitrary sets of marked vertices.

Public API
----------
  QueryEngine(n_vertices, edges, values=None, root=1)
      Constructor.  Roots and validates the tree, builds the Euler tour and
      the range-minimum index.

  QueryEngine.from_text(text)
      Parse the plain-text problem format and return ``(engine, queries)``.

  .query(vertices, backend='best') -> int
  .query_batch(queries, backend='best') -> np.ndarray[int64, n_queries]
  .virtual_tree(vertices) -> VirtualNode | None

What a query computes
---------------------
For a marked multiset S with per-vertex values w (by default w(v) = v):

    sum over unordered pairs {a, b} in S of  w(a) * w(b) * dist(a, b)

modulo 1_000_000_007.  Queries with fewer than two vertices return 0.

Logging
-------
The module uses Python's standard logging framework:

  logging.getLogger('virtree._engine')
      INFO level:    System capabilities and backends (once, at import),
                     index statistics, batch sizes and selected backend,
                     first-call JIT compilation.
      WARNING level: Backend fallbacks, numba performance warnings.
      DEBUG level:   Per-query virtual-tree sizes (python backend).

    import logging
    logging.getLogger('virtree._engine').setLevel(logging.WARNING)

Backends
--------
'python'        Node-object pipeline from ``_lca``, ``_virtual_tree`` and
                ``_aggregate``; the reference implementation.
'cpu-parallel'  numba kernels from ``_cpu_kernels``; ``query_batch`` runs
                the queries in parallel.  The index arrays are shared
                read-only, every query allocates its own scratch space.
'best'          cpu-parallel when numba is importable, python otherwise.
"""

import logging
from typing import Iterable, List, Optional, Tuple

import numpy as np

from virtree._aggregate import solve
from virtree._lca import LCAIndex
from virtree._tree import Tree
from virtree._utils import normalize_values, parse_problem, validate_vertex_ids
from virtree._virtual_tree import VirtualNode, build_virtual_tree

from virtree._logging import (
    log_optimization_status,
    install_numba_warning_filter,
    log_backend_availability,
    log_index_statistics,
    log_batch_statistics,
    compute_memory_footprint,
)

from virtree._backend import (
    check_numba_available,
    get_available_backends,
    get_best_backend,
    resolve_backend,
    import_cpu_kernels,
)

from virtree._context import get_backend_override


logger = logging.getLogger(__name__)


# ── Optional numba acceleration ──────────────────────────────────────────────
_NUMBA_AVAILABLE = check_numba_available()
_cpu_import_ok, _solve_query_nb, _solve_batch_njit = import_cpu_kernels()
_BACKENDS_AVAILABLE = get_available_backends()

# Track first calls to kernels for compilation logging
_kernel_first_call = {
    "cpu-parallel-query": True,
    "cpu-parallel-batch": True,
}

log_optimization_status(_NUMBA_AVAILABLE)
log_backend_availability(_BACKENDS_AVAILABLE)
install_numba_warning_filter(_NUMBA_AVAILABLE)


class QueryEngine:
    """
    Static tree index plus per-query virtual-tree aggregation.

    Attributes (read-only after construction)
    -----------------------------------------
    tree       : Tree          Rooted tree with Euler tour.
    lca_index  : LCAIndex      LCA / split queries over the tour.
    values     : int64 [N+1]   Per-vertex values mod C; slot 0 unused.
    n_vertices : int

    Examples
    --------
    >>> engine = QueryEngine(5, [(1, 2), (1, 3), (2, 4), (2, 5)])
    >>> engine.query([3, 4, 5])
    121
    >>> engine.query_batch([[3, 4, 5], [4, 5], [2]])
    array([121,  40,   0])
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(self, n_vertices: int, edges, values=None, root: int = 1) -> None:
        """
        Parameters
        ----------
        n_vertices : int
            Number of vertices (ids 1..N).
        edges : array-like, shape (N-1, 2)
            Undirected edges.
        values : sequence of int, optional
            ``values[v - 1]`` is the weight of vertex *v*.  Defaults to the
            vertex ids themselves.
        root : int, default 1

        Raises
        ------
        TreeStructureError
            If *edges* do not form a tree on 1..N.
        ValueError
            If *values* has the wrong length.
        """
        logger.info("Rooting tree on %d vertices at %d...", n_vertices, root)
        self.tree = Tree(n_vertices, edges, root=root)
        self.n_vertices = self.tree.n_vertices

        logger.info("Building range-minimum index over Euler tour...")
        self.lca_index = LCAIndex(self.tree)
        self.values = normalize_values(values, self.n_vertices)

        self._log_statistics_method()

    @classmethod
    def from_text(cls, text, values=None) -> Tuple["QueryEngine", List[np.ndarray]]:
        """
        Build an engine from the plain-text problem format.

        Returns
        -------
        (engine, queries)
        """
        n_vertices, edges, queries = parse_problem(text)
        return cls(n_vertices, edges, values=values), queries

    def _log_statistics_method(self) -> None:
        """Log index statistics."""
        log_index_statistics(
            self.n_vertices,
            self.tree.root,
            self.tree.max_depth,
            self.lca_index.rmq.tour_len,
            int(self.lca_index.rmq.segment_tree.shape[0]),
            compute_memory_footprint(self),
        )

    # ================================================================== #
    # Public methods                                                       #
    # ================================================================== #

    def virtual_tree(self, vertices) -> Optional[VirtualNode]:
        """
        Build and return the virtual tree of *vertices* (any order).

        Returns ``None`` for an empty list.

        Raises
        ------
        ValueError   if a vertex id is outside 1..N.
        """
        sorted_vertices = self.lca_index.sort_vertices(vertices)
        return build_virtual_tree(self.lca_index, sorted_vertices)

    def query(self, vertices, backend: str = "best") -> int:
        """
        Pairwise distance-weighted sum for one set of marked vertices.

        Parameters
        ----------
        vertices : sequence of int
            Marked vertex ids; order is irrelevant, duplicates allowed.
        backend : str, default 'best'

        Returns
        -------
        int   Result in ``[0, 1_000_000_007)``.

        Raises
        ------
        ValueError   if a vertex id is outside 1..N.
        """
        sorted_vertices = self.lca_index.sort_vertices(vertices)
        resolved_backend = self._resolve_backend(backend)

        if resolved_backend == "cpu-parallel":
            self._log_first_call("cpu-parallel-query")
            return int(
                _solve_query_nb(
                    sorted_vertices,
                    self.tree.first_occurrence,
                    self.tree.depth,
                    self.values,
                    self.tree.euler_tour,
                    self.tree.euler_depth,
                    self.lca_index.rmq.segment_tree,
                    self.lca_index.rmq.tour_len,
                )
            )

        return self._query_python(sorted_vertices)

    def query_batch(self, queries: Iterable, backend: str = "best") -> np.ndarray:
        """
        Evaluate many queries against the same index.

        Parameters
        ----------
        queries : iterable of sequences of int
            Each element is one marked-vertex list.  The iterable is consumed
            once; generators are accepted.
        backend : str, default 'best'

        Returns
        -------
        np.ndarray[int64, shape=(n_queries,)]

        Pre-processing
        --------------
        All queries are validated, concatenated into one CSR-packed
        ``int64`` array and sorted by ``(query, first occurrence)`` with a
        single ``np.lexsort`` before any backend runs, so an out-of-range id
        fails the whole batch before any work is done.
        """
        # ── 1. Materialise and validate the input ────────────────────────
        query_list = [validate_vertex_ids(q, self.n_vertices) for q in queries]
        n_queries = len(query_list)
        if n_queries == 0:
            return np.zeros(0, dtype=np.int64)

        # ── 2. Pack into CSR layout, sort each slice by first occurrence ─
        sizes = np.array([q.size for q in query_list], dtype=np.int64)
        query_offsets = np.zeros(n_queries + 1, dtype=np.int64)
        np.cumsum(sizes, out=query_offsets[1:])
        total = int(query_offsets[-1])

        query_vertices = (
            np.concatenate(query_list) if total else np.zeros(0, dtype=np.int64)
        )
        owner = np.repeat(np.arange(n_queries, dtype=np.int64), sizes)
        order = np.lexsort((self.tree.first_occurrence[query_vertices], owner))
        query_vertices = np.ascontiguousarray(query_vertices[order])

        # ── 3. Resolve backend and log execution mode ────────────────────
        resolved_backend = self._resolve_backend(backend)
        log_batch_statistics(n_queries, total, resolved_backend)

        # ── 4. Dispatch to the selected backend ──────────────────────────
        results_out = np.zeros(n_queries, dtype=np.int64)

        if resolved_backend == "cpu-parallel":
            self._log_first_call("cpu-parallel-batch")
            _solve_batch_njit(
                query_offsets,
                query_vertices,
                self.tree.first_occurrence,
                self.tree.depth,
                self.values,
                self.tree.euler_tour,
                self.tree.euler_depth,
                self.lca_index.rmq.segment_tree,
                self.lca_index.rmq.tour_len,
                n_queries,
                results_out,
            )
            return results_out

        for qi in range(n_queries):
            start = int(query_offsets[qi])
            stop = int(query_offsets[qi + 1])
            results_out[qi] = self._query_python(query_vertices[start:stop])
        return results_out

    # ================================================================== #
    # Private methods                                                      #
    # ================================================================== #

    def _query_python(self, sorted_vertices: np.ndarray) -> int:
        """Reference pipeline: virtual tree, then aggregation."""
        root = build_virtual_tree(self.lca_index, sorted_vertices)
        if root is not None and logger.isEnabledFor(logging.DEBUG):
            n_nodes = sum(1 for _ in root.walk())
            logger.debug(
                "Virtual tree: %d marked vertices -> %d nodes (root %d)",
                len(sorted_vertices),
                n_nodes,
                root.vertex,
            )
        return solve(root, self.values)

    def _resolve_backend(self, backend: str) -> str:
        """Apply any ``use_backend`` override, then resolve with fallback."""
        backend_override = get_backend_override()
        if backend_override is not None:
            backend = backend_override

        try:
            return resolve_backend(backend)
        except ValueError as e:
            logger.warning(str(e))
            return get_best_backend()

    @staticmethod
    def _log_first_call(kernel_key: str) -> None:
        if _kernel_first_call.get(kernel_key, False):
            logger.info(f"  Compiling {kernel_key} kernel (cached for future calls)")
            _kernel_first_call[kernel_key] = False

    def __repr__(self) -> str:
        return (
            f"QueryEngine(n_vertices={self.n_vertices}, root={self.tree.root}, "
            f"backends={_BACKENDS_AVAILABLE})"
        )
