"""
_virtual_tree.py
================
Virtual (Steiner) tree construction over a first-occurrence-sorted vertex
list.

The builder is a divide-and-conquer over the sorted list, driven by an
explicit work stack of ``(lo, hi, parent)`` frames:

  * a one-element range becomes a leaf under *parent*;
  * otherwise the range LCA ``L`` and its tour position are looked up.  If
    *parent* already wraps ``L`` it is reused as the connection point,
    otherwise a new node for ``L`` is attached under *parent*.  The range is
    then split at the tour position.  When the element sitting on the split
    boundary is ``L`` itself (``L`` was one of the marked vertices) it is
    emitted as its own one-element range between the left and right parts,
    so it becomes a dedicated leaf of the ``L`` node.

Frames are pushed right-to-left so children are attached in tour order.
Only K leaves and at most K - 1 connector nodes are ever created for a
K-vertex list.
"""

import numpy as np


class VirtualNode:
    """
    One node of a virtual tree.

    Holds the base vertex id (an index into the immutable tree, not a
    reference to it), its depth, and the child nodes it owns.  The two
    aggregation fields are filled in by ``virtree._aggregate.solve``.
    """

    __slots__ = ("vertex", "depth", "children", "node_sum", "tree_weighted_sum")

    def __init__(self, vertex: int, depth: int) -> None:
        self.vertex = vertex
        self.depth = depth
        self.children = []
        self.node_sum = 0
        self.tree_weighted_sum = 0

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self):
        """Yield this node and all its descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def base_vertices(self) -> set:
        """Set of distinct base vertex ids in this subtree."""
        return {node.vertex for node in self.walk()}

    def leaf_vertices(self) -> list:
        """Base vertex ids of the leaves, in tour order."""
        return [node.vertex for node in self.walk() if node.is_leaf]

    def __repr__(self) -> str:
        return (
            f"VirtualNode(vertex={self.vertex}, depth={self.depth}, "
            f"n_children={len(self.children)})"
        )


def build_virtual_tree(lca_index, sorted_vertices):
    """
    Build the virtual tree of *sorted_vertices*.

    Parameters
    ----------
    lca_index : LCAIndex
    sorted_vertices : np.ndarray[int]
        Vertex ids ordered by first tour occurrence (``LCAIndex.sort_vertices``).
        Duplicates are allowed; each copy becomes its own leaf.

    Returns
    -------
    VirtualNode or None
        Root of the virtual tree (the LCA of all vertices, or the single
        vertex when only one is given); ``None`` for an empty list.
    """
    n = len(sorted_vertices)
    if n == 0:
        return None

    depth = lca_index.depth
    # Placeholder parent for the top-level range; never a real vertex.
    sentinel = VirtualNode(-1, 0)

    stack = [(0, n, sentinel)]
    while stack:
        lo, hi, parent = stack.pop()
        if hi - lo == 0:
            continue
        if hi - lo == 1:
            v = int(sorted_vertices[lo])
            parent.children.append(VirtualNode(v, int(depth[v])))
            continue

        lca, position = lca_index.lca_and_split(sorted_vertices, lo, hi)
        if parent.vertex == lca:
            node = parent
        else:
            node = VirtualNode(lca, int(depth[lca]))
            parent.children.append(node)

        split = lca_index.partition(sorted_vertices, position, lo, hi)
        if split < hi and sorted_vertices[split] == lca:
            stack.append((split + 1, hi, node))
            stack.append((split, split + 1, node))
            stack.append((lo, split, node))
        else:
            stack.append((split, hi, node))
            stack.append((lo, split, node))

    return sentinel.children[0]
