"""
virtree
=======

Pairwise distance-weighted sums over marked vertex sets in a static tree,
answered with virtual (Steiner) trees built from Euler-tour LCA queries.

For every query set S the package computes

    sum over unordered pairs {a, b} in S of  w(a) * w(b) * dist(a, b)

modulo 1_000_000_007, where ``w`` defaults to the vertex id.  The tree is
indexed once; each query then costs O(K log N) for K marked vertices,
independent of the tree size.

Main Classes
------------
QueryEngine : Static index plus single and batched queries
Tree : Rooted tree with Euler tour
LCAIndex : LCA and split queries over the Euler tour
RangeMinIndex : Segment tree over Euler-tour depths
VirtualNode : Node of a per-query virtual tree

Functions
---------
build_virtual_tree : Compress a sorted vertex list into its virtual tree
solve : Bottom-up aggregation over a virtual tree
parse_problem, format_results : Plain-text input/output format

Context Managers
----------------
quiet : Suppress logging during operations
suppress_logger : Suppress specific logger
suppress_warnings : Suppress specific warnings
use_backend : Force specific computational backend
silent_benchmark : Combine quiet + backend selection + warning suppression

Backend Information
-------------------
get_available_backends : Query available computational backends
get_backend_info : Get comprehensive backend status
check_numba_available : Check if numba is available

Examples
--------
>>> from virtree import QueryEngine
>>> engine = QueryEngine(5, [(1, 2), (1, 3), (2, 4), (2, 5)])
>>> engine.query([3, 4, 5])
121

With context managers:

>>> from virtree import quiet, use_backend
>>> with quiet():
...     engine = QueryEngine(n, edges)
>>> with use_backend('python'):
...     results = engine.query_batch(queries)
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes
from ._engine import QueryEngine
from ._tree import Tree, TreeStructureError
from ._lca import LCAIndex
from ._segment_tree import RangeMinIndex
from ._virtual_tree import VirtualNode, build_virtual_tree
from ._aggregate import solve

# Context managers (user-facing utilities)
from ._context import (
    suppress_logger,
    quiet,
    suppress_warnings,
    use_backend,
    silent_benchmark,
)

# Utilities
from ._utils import (
    MODULUS,
    mod_sub,
    parse_problem,
    format_results,
)

# Backend information (useful for checking capabilities)
from ._backend import (
    get_available_backends,
    get_backend_info,
    check_numba_available,
)

from ._cli import main

# Public API
__all__ = [
    # Main classes
    "QueryEngine",
    "Tree",
    "TreeStructureError",
    "LCAIndex",
    "RangeMinIndex",
    "VirtualNode",
    "build_virtual_tree",
    "solve",
    # Context managers
    "suppress_logger",
    "quiet",
    "suppress_warnings",
    "use_backend",
    "silent_benchmark",
    # Utilities
    "MODULUS",
    "mod_sub",
    "parse_problem",
    "format_results",
    "main",
    # Backend information
    "get_available_backends",
    "get_backend_info",
    "check_numba_available",
    # Version info
    "__version__",
]
