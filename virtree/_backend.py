"""
_backend.py
===========
Backend detection and selection for query evaluation.

Two execution backends exist:

  'python'        Pure-Python reference pipeline (node objects, explicit
                  stacks).  Always available; the correctness baseline.
  'cpu-parallel'  numba-compiled kernels from ``_cpu_kernels``; batches run
                  in parallel across queries with prange.

Functions in this module have NO side effects - they only query system state.
Logging is done by the calling code, not here.
"""

from typing import List, Optional, Tuple


# ============================================================================ #
# Backend Detection (No Side Effects)
# ============================================================================ #


def check_numba_available() -> bool:
    """
    Check if numba is importable.

    Returns
    -------
    bool
        True if numba can be imported, False otherwise.
    """
    try:
        import numba  # noqa: F401

        return True
    except ImportError:
        return False


def get_available_backends() -> List[str]:
    """
    Get list of available execution backends.

    Returns
    -------
    list[str]
        Available backends in preference order (last is best).
        Always includes 'python'; includes 'cpu-parallel' when the numba
        kernels import cleanly.

    Examples
    --------
    >>> get_available_backends()
    ['python', 'cpu-parallel']
    """
    backends = ["python"]
    kernels_ok, _, _ = import_cpu_kernels()
    if kernels_ok:
        backends.append("cpu-parallel")
    return backends


def get_best_backend() -> str:
    """
    Get the most optimized available backend: 'cpu-parallel' > 'python'.
    """
    return get_available_backends()[-1]


def resolve_backend(backend: str) -> str:
    """
    Resolve a backend specification to an actual backend.

    Parameters
    ----------
    backend : str
        'best', 'python' or 'cpu-parallel'.

    Returns
    -------
    str
        Resolved backend name.

    Raises
    ------
    ValueError
        If the requested backend is unknown or not available.

    Examples
    --------
    >>> resolve_backend('best')
    'cpu-parallel'
    >>> resolve_backend('python')
    'python'
    """
    if backend == "best":
        return get_best_backend()

    available = get_available_backends()
    if backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )
    return backend


# ============================================================================ #
# Kernel Import Helpers
# ============================================================================ #


def import_cpu_kernels() -> Tuple[bool, Optional[object], Optional[object]]:
    """
    Try to import the numba kernels from ``_cpu_kernels``.

    Returns
    -------
    tuple
        (success, query_kernel, batch_kernel)
        - success: Whether import succeeded
        - query_kernel: ``_solve_query_nb`` or None
        - batch_kernel: ``_solve_batch_njit`` or None
    """
    try:
        from virtree._cpu_kernels import _solve_query_nb, _solve_batch_njit

        return (True, _solve_query_nb, _solve_batch_njit)
    except ImportError:
        return (False, None, None)


# ============================================================================ #
# Module-Level State Query (Read-Only)
# ============================================================================ #


def get_backend_info() -> dict:
    """
    Get comprehensive backend information.

    Returns
    -------
    dict
        Keys: 'numba_available', 'backends', 'best_backend',
        'cpu_kernels_available'.
    """
    kernels_ok, _, _ = import_cpu_kernels()
    backends = get_available_backends()
    return {
        "numba_available": check_numba_available(),
        "backends": backends,
        "best_backend": backends[-1],
        "cpu_kernels_available": kernels_ok,
    }
