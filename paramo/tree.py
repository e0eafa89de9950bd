from __future__ import annotations
from typing import Dict, List, Optional, Self, Tuple

import numpy as np
from numpy.typing import NDArray


class Node:
    """
    Rooted tree node with parent pointers, using __slots__.

    A tree is represented by its root node. Every non-root node identifies
    exactly one edge (the edge from its parent to itself), and ``length`` is
    the length of that edge. Edges are enumerated in pre-order, which fixes
    the edge index used by stochastic maps.
    """

    __slots__ = (
        "children",
        "parent",
        "name",
        "length",
        "_traverse_cache",
        "_edges_cache",
    )

    children: List[Self]
    parent: Optional[Self]
    name: str
    length: float
    _traverse_cache: Optional[List[Self]]
    _edges_cache: Optional[List[Self]]

    def __init__(
        self,
        children: Optional[List[Self]] = None,
        name: str = "",
        length: float = 0.0,
    ):
        if length is None or length < 0:
            raise ValueError(f"Edge length must be non-negative, got {length!r}")
        # Avoid mutable default arguments; create fresh containers
        self.children = list(children) if children is not None else []
        for child in self.children:
            child.parent = self
        self.parent = None
        self.name = name
        self.length = float(length)
        self._traverse_cache = None
        self._edges_cache = None

    def __repr__(self) -> str:
        return f"Node('{self.name}')"

    def __str__(self):
        return self.to_newick()

    # ------------------------------------------------------------------------
    # Traversal & edges
    # ------------------------------------------------------------------------
    def traverse(self) -> List[Self]:
        """
        Return a list of all nodes in the subtree rooted at this node (Pre-order).
        Uses an iterative stack approach to avoid recursion depth issues.
        """
        if self._traverse_cache is not None:
            return self._traverse_cache

        nodes: List[Self] = []
        stack: List[Self] = [self]

        while stack:
            current = stack.pop()
            nodes.append(current)
            # Add children in reverse to maintain left-to-right visit order
            for child in reversed(current.children):
                stack.append(child)

        self._traverse_cache = nodes
        return nodes

    def edges(self) -> List[Self]:
        """
        Return the child node of every edge below this node, in pre-order.

        The position of a node in this list is its edge index.
        """
        if self._edges_cache is None:
            self._edges_cache = self.traverse()[1:]
        return self._edges_cache

    def edge_count(self) -> int:
        return len(self.edges())

    def edge_lengths(self) -> NDArray[np.float64]:
        return np.array([node.length for node in self.edges()], dtype=np.float64)

    def edge_parents(self) -> Tuple[int, ...]:
        """
        For each edge, the index of the edge directly above it.

        Edges hanging from the root get -1. Two trees with equal
        ``edge_parents`` share the same rooted topology under the same
        child ordering.
        """
        edges = self.edges()
        position = {id(node): i for i, node in enumerate(edges)}
        return tuple(position.get(id(node.parent), -1) for node in edges)

    def node_heights(self) -> Dict[int, float]:
        """Root-to-node cumulative length keyed by ``id(node)``."""
        heights: Dict[int, float] = {id(self): 0.0}
        for node in self.traverse()[1:]:
            heights[id(node)] = heights[id(node.parent)] + node.length
        return heights

    def edge_heights(self) -> NDArray[np.float64]:
        """
        Start and end height of every edge as an array of shape (n_edges, 2).

        Row ``i`` holds (height of the parent, height of the child) for edge ``i``.
        """
        heights = self.node_heights()
        edges = self.edges()
        result = np.zeros((len(edges), 2), dtype=np.float64)
        for i, node in enumerate(edges):
            result[i, 0] = heights[id(node.parent)]
            result[i, 1] = heights[id(node)]
        return result

    def max_height(self) -> float:
        """Maximum root-to-tip height over the whole tree."""
        if not self.children:
            return 0.0
        return float(self.edge_heights()[:, 1].max())

    # ------------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------------
    def to_newick(self, lengths: bool = True) -> str:
        return self._to_newick(lengths=lengths) + ";"

    def _to_newick(self, lengths: bool = True) -> str:
        label = self.name or ""
        if self.children:
            label = (
                "(" + ",".join(ch._to_newick(lengths) for ch in self.children) + ")"
            ) + label
        if lengths and self.parent is not None:
            return f"{label}:{self.length:.6f}"
        return label
