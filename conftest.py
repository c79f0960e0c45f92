"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
large_scale
    Applied to tests that build trees with tens of thousands of vertices
    (deep chains, wide stars) to exercise the iterative traversals.  They
    run by default; deselect with ``-m 'not large_scale'``.

Warning filters
---------------
NumbaPerformanceWarning messages are filtered out during tests. Warnings
about parallel under-utilisation are expected with small batches and are
not informative for correctness testing.
"""

import warnings


def pytest_configure(config):
    """
    Configure pytest before test collection begins.

    This runs before any test modules are imported, which is important for
    catching warnings from numba kernel compilation.
    """
    config.addinivalue_line(
        "markers",
        "large_scale: tests on trees with tens of thousands of vertices",
    )

    from numba.core.errors import NumbaPerformanceWarning

    warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)


def pytest_unconfigure(config):
    """Restore default warning behavior."""
    warnings.resetwarnings()
