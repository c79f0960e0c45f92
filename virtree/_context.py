"""
_context.py
===========
Context managers for virtree.

Provides context managers for temporarily changing runtime configuration:
- Logging control (suppress/change levels)
- Warning control (suppress specific warnings)
- Backend selection (force specific backend)

All context managers restore state on exit, even if exceptions occur.
"""

import logging
import warnings
from contextlib import contextmanager
from typing import Optional, Type


# Module-level state for backend override
_backend_override = None

# Loggers touched by quiet(); the engine logger carries most INFO output.
_PACKAGE_LOGGERS = ("virtree", "virtree._engine", "virtree._tree", "virtree._logging")


# ============================================================================ #
# Logging Context Managers
# ============================================================================ #


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Temporarily change a logger's level.

    Parameters
    ----------
    logger_name : str
        Name of the logger to suppress (e.g. 'virtree._engine').
    level : int, default logging.CRITICAL
        Temporary logging level.

    Examples
    --------
    >>> with suppress_logger('virtree._engine'):
    ...     engine = QueryEngine(n, edges)

    >>> with suppress_logger('virtree._engine', logging.WARNING):
    ...     results = engine.query_batch(queries)
    """
    logger = logging.getLogger(logger_name)
    original_level = logger.level

    try:
        logger.setLevel(level)
        yield
    finally:
        logger.setLevel(original_level)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Temporarily suppress all virtree logging.

    Parameters
    ----------
    level : int, default logging.CRITICAL
        Temporary logging level for every package logger.

    Examples
    --------
    >>> with quiet():
    ...     engine = QueryEngine(n, edges)

    >>> with quiet(logging.WARNING):
    ...     results = engine.query_batch(queries)
    """
    loggers = [logging.getLogger(name) for name in _PACKAGE_LOGGERS]
    original_levels = [lg.level for lg in loggers]

    try:
        for lg in loggers:
            lg.setLevel(level)
        yield
    finally:
        for lg, original in zip(loggers, original_levels):
            lg.setLevel(original)


# ============================================================================ #
# Warning Context Managers
# ============================================================================ #


@contextmanager
def suppress_warnings(category: Optional[Type[Warning]] = None):
    """
    Temporarily suppress warnings.

    Parameters
    ----------
    category : Type[Warning] or None, default None
        Warning category to suppress. If None, suppresses all warnings.

    Examples
    --------
    >>> from numba.core.errors import NumbaPerformanceWarning
    >>> with suppress_warnings(NumbaPerformanceWarning):
    ...     results = engine.query_batch(queries, backend='cpu-parallel')
    """
    with warnings.catch_warnings():
        if category is None:
            warnings.simplefilter("ignore")
        else:
            warnings.filterwarnings("ignore", category=category)
        yield


# ============================================================================ #
# Backend Context Managers
# ============================================================================ #


@contextmanager
def use_backend(backend: str):
    """
    Temporarily force a specific backend for query evaluation.

    Parameters
    ----------
    backend : str
        'python', 'cpu-parallel' or 'best'.

    Raises
    ------
    ValueError
        If requested backend is not available.

    Examples
    --------
    >>> with use_backend('python'):
    ...     reference = engine.query_batch(queries)
    >>> with use_backend('cpu-parallel'):
    ...     fast = engine.query_batch(queries)

    Notes
    -----
    **Not thread-safe**: uses module-level state.  Pass ``backend=`` to the
    query methods directly when issuing queries from several threads.
    """
    global _backend_override

    from ._backend import get_available_backends

    available = get_available_backends()

    if backend != "best" and backend not in available:
        raise ValueError(
            f"Backend '{backend}' not available. "
            f"Available backends: {', '.join(available)}"
        )

    original_override = _backend_override

    try:
        _backend_override = backend
        yield
    finally:
        _backend_override = original_override


def get_backend_override() -> Optional[str]:
    """
    Get the current backend override, or None if no override is active.

    >>> get_backend_override()
    >>> with use_backend('python'):
    ...     print(get_backend_override())
    python
    """
    return _backend_override


# ============================================================================ #
# Combined Context Managers
# ============================================================================ #


@contextmanager
def silent_benchmark(backend: str = "best"):
    """
    Suppress logging and warnings while forcing a specific backend.

    >>> with silent_benchmark('cpu-parallel'):
    ...     start = time.time()
    ...     results = engine.query_batch(queries)
    ...     elapsed = time.time() - start
    """
    with quiet():
        with use_backend(backend):
            with suppress_warnings():
                yield
