"""
_cli.py
=======
Command-line entry point: read a problem from standard input, write one
result per query to standard output.

    python -m virtree < input.txt

Input format (whitespace-separated integers)::

    N Q
    f s              N - 1 undirected edges, 1-indexed
    K v1 v2 ... vK   Q queries

Logging goes to stderr at WARNING level so stdout carries only results.
"""

import logging
import sys


def main(stdin=None, stdout=None) -> int:
    """
    Run the solver over *stdin* and write results to *stdout*.

    Parameters
    ----------
    stdin, stdout : file-like, optional
        Binary or text streams; default to the process streams.

    Returns
    -------
    int   Exit status (0 on success).  Malformed input raises.
    """
    from virtree._context import quiet
    from virtree._engine import QueryEngine
    from virtree._utils import format_results

    if stdin is None:
        stdin = sys.stdin.buffer
    if stdout is None:
        stdout = sys.stdout

    logging.basicConfig(level=logging.WARNING, stream=sys.stderr,
                        format="%(levelname)s: %(name)s: %(message)s")

    with quiet(logging.WARNING):
        engine, queries = QueryEngine.from_text(stdin.read())
        results = engine.query_batch(queries)

    stdout.write(format_results(results))
    stdout.flush()
    return 0
