"""
_utils.py
=========
General-purpose helpers for virtree: modular arithmetic, vertex-id
validation, and the plain-text problem format used by the command line.

These are standalone functions that don't depend on the main classes.
"""

from typing import Iterable, List, Sequence, Tuple

import numpy as np


MODULUS = 1_000_000_007


def mod_sub(a: int, b: int, modulus: int = MODULUS) -> int:
    """
    Return ``(a - b) mod modulus`` as a non-negative integer.

    Both operands are expected to already lie in ``[0, modulus)``; the
    modulus is added before reduction so the result never goes negative.

    Examples
    --------
    >>> mod_sub(3, 5)
    1000000005
    >>> mod_sub(5, 3)
    2
    """
    return (a - b + modulus) % modulus


def validate_vertex_ids(vertices, n_vertices: int) -> np.ndarray:
    """
    Convert *vertices* to an ``int64`` array and check that every id lies in
    ``[1, n_vertices]``.

    Parameters
    ----------
    vertices : sequence of int
        1-indexed vertex ids.  Duplicates are allowed.
    n_vertices : int
        Number of vertices in the tree.

    Returns
    -------
    np.ndarray[int64]

    Raises
    ------
    ValueError
        If any id is out of range.
    """
    ids = np.asarray(vertices, dtype=np.int64).reshape(-1)
    if ids.size == 0:
        return ids
    lo = int(ids.min())
    hi = int(ids.max())
    if lo < 1 or hi > n_vertices:
        bad = lo if lo < 1 else hi
        raise ValueError(
            f"Vertex id {bad} out of range; valid ids are 1..{n_vertices}."
        )
    return ids


def parse_problem(text) -> Tuple[int, np.ndarray, List[np.ndarray]]:
    """
    Parse the whitespace-separated problem format.

    ::

        N Q
        f s          (N - 1 edge lines)
        K v1 ... vK  (Q query records)

    Line breaks carry no meaning; the input is read as a flat token stream.

    Parameters
    ----------
    text : str | bytes

    Returns
    -------
    (n_vertices, edges, queries)
        ``edges`` is an ``int64 (N-1, 2)`` array; ``queries`` is a list of
        ``int64`` arrays, one per query.

    Raises
    ------
    ValueError
        If the token stream ends before all declared records are read.
    """
    tokens = np.array([int(tok) for tok in text.split()], dtype=np.int64)
    if tokens.size < 2:
        raise ValueError("Input must start with 'N Q'.")

    n_vertices = int(tokens[0])
    n_queries = int(tokens[1])
    pos = 2

    n_edge_tokens = 2 * max(n_vertices - 1, 0)
    if tokens.size < pos + n_edge_tokens:
        raise ValueError(
            f"Expected {n_vertices - 1} edges, input ended after "
            f"{(tokens.size - pos) // 2}."
        )
    edges = tokens[pos : pos + n_edge_tokens].reshape(-1, 2)
    pos += n_edge_tokens

    queries = []
    for qi in range(n_queries):
        if pos >= tokens.size:
            raise ValueError(f"Input ended before query {qi + 1} of {n_queries}.")
        k = int(tokens[pos])
        pos += 1
        if k < 0 or pos + k > tokens.size:
            raise ValueError(f"Query {qi + 1} declares {k} vertices; input too short.")
        queries.append(tokens[pos : pos + k])
        pos += k

    return n_vertices, edges, queries


def format_results(results: Iterable[int]) -> str:
    """Render one result per line, with a trailing newline."""
    lines = [str(int(r)) for r in results]
    return "\n".join(lines) + "\n" if lines else ""


def normalize_values(values: Sequence[int], n_vertices: int) -> np.ndarray:
    """
    Build the 1-indexed per-vertex value table, reduced modulo ``MODULUS``.

    Parameters
    ----------
    values : sequence of int or None
        ``values[v - 1]`` is the value of vertex *v*.  ``None`` selects the
        identity weighting (each vertex is worth its own id).
    n_vertices : int

    Returns
    -------
    np.ndarray[int64, n_vertices + 1]
        Slot 0 is unused and holds 0.
    """
    table = np.zeros(n_vertices + 1, dtype=np.int64)
    if values is None:
        table[1:] = np.arange(1, n_vertices + 1, dtype=np.int64) % MODULUS
        return table

    if len(values) != n_vertices:
        raise ValueError(
            f"values must have one entry per vertex: expected {n_vertices}, "
            f"got {len(values)}."
        )
    # Python ints first so arbitrarily large weights reduce exactly.
    table[1:] = [int(v) % MODULUS for v in values]
    return table
