"""
_logging.py
===========
Logging functions for virtree.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
- Clear boundaries between analysis and reporting
"""

import logging
from typing import Any, List

import numpy as np


logger = logging.getLogger(__name__)


# ============================================================================ #
# System and Backend Logging (called at module import time)
# ============================================================================ #


def log_optimization_status(numba_available: bool) -> None:
    """
    Log system capabilities and numba availability at INFO level.

    Called once at import of the engine module. Reports CPU count, memory,
    numba/llvmlite versions (if available) and threading configuration.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import os
    import platform

    cpu_count = os.cpu_count() or 1
    logger.info(
        f"System: {platform.machine()} ({platform.system()}), "
        f"{cpu_count} CPU cores, Python {platform.python_version()}"
    )

    # Memory info (optional psutil)
    try:
        import psutil

        mem = psutil.virtual_memory()
        logger.info(
            f"Memory: {mem.total / (1024**3):.1f} GB total, "
            f"{mem.available / (1024**3):.1f} GB available"
        )
    except ImportError:
        pass  # psutil not required

    if numba_available:
        import numba

        logger.info(f"Numba {numba.__version__} loaded successfully")

        try:
            import llvmlite

            logger.info(f"LLVM backend: llvmlite {llvmlite.__version__}")
        except (ImportError, AttributeError):
            pass  # LLVM version unavailable

        # threading_layer() raises until a parallel kernel has run
        try:
            num_threads = numba.get_num_threads()
            threading_layer = numba.threading_layer()
            logger.info(
                f"Numba threading: {threading_layer} layer, "
                f"{num_threads} threads active"
            )
        except ValueError:
            logger.info(f"Numba threading: {numba.get_num_threads()} threads configured")
    else:
        logger.info("Numba not installed; queries will run on the python backend")
        logger.info("Install numba for parallel batch queries: pip install numba")


def install_numba_warning_filter(numba_available: bool) -> None:
    """
    Capture NumbaPerformanceWarning and route it through our logger.

    Parameters
    ----------
    numba_available : bool
        Whether numba was successfully imported.
    """
    import warnings

    if not numba_available:
        return

    from numba.core.errors import NumbaPerformanceWarning

    original_showwarning = warnings.showwarning

    def custom_showwarning(message, category, filename, lineno, file=None, line=None):
        if issubclass(category, NumbaPerformanceWarning):
            logger.warning(f"Numba performance issue: {message}")
            logger.warning(f"  at {filename}:{lineno}")
            return
        original_showwarning(message, category, filename, lineno, file, line)

    warnings.showwarning = custom_showwarning


def log_backend_availability(backends_available: List[str]) -> None:
    """
    Log which execution backends are available.

    Parameters
    ----------
    backends_available : List[str]
        Available backends in preference order (e.g. ['python', 'cpu-parallel']).
    """
    logger.info(f"Available backends: {', '.join(backends_available)}")

    if "cpu-parallel" in backends_available:
        logger.info("  cpu-parallel: LLVM-compiled kernels, queries in parallel (numba prange)")
    if "python" in backends_available:
        logger.info("  python: reference implementation")

    logger.info(f"Default backend='best' will use: {backends_available[-1]}")


# ============================================================================ #
# Index and Query Logging
# ============================================================================ #


def log_index_statistics(
    n_vertices: int,
    root: int,
    max_depth: int,
    tour_len: int,
    segment_nodes: int,
    memory_bytes: int,
) -> None:
    """
    Log the shape and footprint of a freshly built query index.

    Parameters
    ----------
    n_vertices : int
        Number of tree vertices.
    root : int
        Root vertex id.
    max_depth : int
        Height of the rooted tree.
    tour_len : int
        Euler tour length (2N - 1).
    segment_nodes : int
        Allocated segment-tree slots.
    memory_bytes : int
        Total footprint of the index arrays.
    """
    logger.info(
        "Index built: %d vertices, root=%d, max depth %d",
        n_vertices,
        root,
        max_depth,
    )
    logger.info(
        "Array dimensions: tour=%d, segment_tree=%d",
        tour_len,
        segment_nodes,
    )

    mem_mb = memory_bytes / (1024**2)
    if mem_mb >= 1024.0:
        logger.info("Total memory footprint: %.2f GB", mem_mb / 1024.0)
    else:
        logger.info("Total memory footprint: %.1f MB", mem_mb)

    # Chains this deep defeat any recursive port; the iterative passes cope.
    if max_depth > 10_000:
        logger.info("Deep tree (height %d); all traversals are iterative", max_depth)


def log_batch_statistics(n_queries: int, total_vertices: int, backend: str) -> None:
    """
    Log the size of a batch and the backend chosen to evaluate it.

    Parameters
    ----------
    n_queries : int
    total_vertices : int
        Sum of the query sizes.
    backend : str
        Resolved backend name.
    """
    logger.info(
        f"query_batch({n_queries} queries, {total_vertices} marked vertices, "
        f"backend={backend!r})"
    )
    if n_queries and total_vertices == 0:
        logger.warning("Every query in the batch is empty; all results are 0")


# ============================================================================ #
# Helper Functions for Computing Data (not logging)
# ============================================================================ #


def compute_memory_footprint(engine: Any) -> int:
    """
    Compute total memory footprint of an engine's index arrays.

    Parameters
    ----------
    engine : Any
        A QueryEngine.

    Returns
    -------
    int
        Total memory in bytes.
    """
    tree = engine.tree
    arrays = [
        tree.parent,
        tree.depth,
        tree.child_offsets,
        tree.children,
        tree.euler_tour,
        tree.euler_depth,
        tree.first_occurrence,
        engine.lca_index.rmq.segment_tree,
        engine.values,
    ]
    return int(sum(np.asarray(arr).nbytes for arr in arrays))
