"""
_aggregate.py
=============
Bottom-up aggregation over a virtual tree.

For a set of marked vertices with values ``w`` the result is

    sum over unordered pairs {a, b} of  w(a) * w(b) * dist(a, b)   (mod C)

computed in one post-order pass.  Every node carries

    node_sum           sum of w over marked vertices below it
    tree_weighted_sum  sum of w(x) * (depth(x) - depth(node)) over the same

For child ``i`` of a node, ``adj_i = child.tree_weighted_sum +
child.node_sum * (child.depth - node.depth)`` is the child's weighted sum
measured from the node.  Pairs split between two different children meet
at the node, and ``sum_i adj_i * (node_sum - child_i.node_sum)`` counts each
such pair's ``w(a) * w(b) * (d(a) + d(b))`` exactly once.  Pairs inside one
child were already counted deeper down.

Only leaves contribute their own value: a connector node that is also a
marked vertex has a dedicated leaf child for that purpose.
"""

import numpy as np

from virtree._utils import MODULUS, mod_sub


def solve(root, values: np.ndarray, modulus: int = MODULUS) -> int:
    """
    Run the aggregation on the virtual tree rooted at *root*.

    Parameters
    ----------
    root : VirtualNode or None
        ``None`` (empty query) yields 0.
    values : np.ndarray[int64]
        1-indexed per-vertex values, already reduced modulo *modulus*.
    modulus : int

    Returns
    -------
    int   The pairwise aggregate in ``[0, modulus)``.

    Notes
    -----
    Iterative post-order: each node is pushed twice, once to schedule its
    children and once (flagged) to fold them in.  ``node_sum`` and
    ``tree_weighted_sum`` are left on every node; the per-node contribution
    is kept in a side table keyed by ``id(node)`` since a node's
    contribution is only needed by its parent.
    """
    if root is None:
        return 0

    contribution = {}
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()

        if not node.children:
            node.node_sum = int(values[node.vertex]) % modulus
            node.tree_weighted_sum = 0
            contribution[id(node)] = 0
            continue

        if not expanded:
            stack.append((node, True))
            for child in node.children:
                stack.append((child, False))
            continue

        child_sums = []
        child_weighted = []
        result = 0
        for child in node.children:
            rel_depth = child.depth - node.depth
            child_sums.append(child.node_sum)
            child_weighted.append(
                (child.tree_weighted_sum + child.node_sum * rel_depth) % modulus
            )
            result = (result + contribution.pop(id(child))) % modulus

        node.node_sum = sum(child_sums) % modulus
        node.tree_weighted_sum = sum(child_weighted) % modulus

        for s, w in zip(child_sums, child_weighted):
            result = (result + w * mod_sub(node.node_sum, s, modulus)) % modulus
        contribution[id(node)] = result

    return contribution[id(root)]
