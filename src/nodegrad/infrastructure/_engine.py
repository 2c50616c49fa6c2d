"""
Reverse-mode autodiff engine.

`backward(root)` orders the subgraph reachable from `root` topologically,
seeds `root.grad` with ones, and runs each node's backward rule exactly once
in reverse order, so every node has received all downstream contributions
before its own rule reads its gradient.
"""

from __future__ import annotations

import logging

from .graph._graph import Graph
from .graph._node import Node
from .tensor._tensor import Tensor
from ._functions import apply_backward_rule

logger = logging.getLogger(__name__)


def _topological_indices(graph: Graph, root: int) -> list[int]:
    # Iterative post-order DFS; yields the same order as the recursive
    # formulation (predecessors in list order, then the node).
    order: list[int] = []
    visited: set[int] = set()
    stack: list[tuple[int, bool]] = [(root, False)]

    while stack:
        index, expanded = stack.pop()
        if expanded:
            order.append(index)
            continue
        if index in visited:
            continue
        visited.add(index)
        stack.append((index, True))
        parents = graph.record(index).ctx.parents
        for p in reversed(parents):
            if p not in visited:
                stack.append((p, False))

    return order


def topological_order(root: Node) -> list[Node]:
    """
    Return the nodes reachable from `root` in topological order.

    Parameters
    ----------
    root : Node
        Node to start the depth-first traversal from.

    Returns
    -------
    list[Node]
        Each reachable node exactly once, leaves first and `root` last.
        Every node appears strictly after all of its predecessors. Ties
        between independent subgraphs follow predecessor-list order.

    Raises
    ------
    TypeError
        If `root` is not a Node.
    DanglingReferenceError
        If `root` refers to a cleared graph.
    """
    if not isinstance(root, Node):
        raise TypeError(f"topological_order expects a Node, got {type(root)!r}")
    graph = root.graph
    indices = _topological_indices(graph, graph.resolve(root))
    return [Node(graph, i, graph.generation) for i in indices]


def backward(root: Node) -> None:
    """
    Backpropagate gradients from `root` through the graph.

    Parameters
    ----------
    root : Node
        The node to differentiate. Its gradient is seeded with ones of its
        value's shape, so non-scalar roots differentiate the elementwise sum.

    Raises
    ------
    TypeError
        If `root` is not a Node.
    DanglingReferenceError
        If `root` refers to a cleared graph.

    Notes
    -----
    - Gradients of the non-leaf nodes reachable from `root` are reset before
      the pass, so after the call each of them holds exactly its partial
      derivative.
    - Leaf gradients accumulate across calls. Two calls without
      `zero_grad()` in between double every leaf gradient.
    """
    if not isinstance(root, Node):
        raise TypeError(f"backward expects a Node, got {type(root)!r}")

    graph = root.graph
    root_index = graph.resolve(root)
    order = _topological_indices(graph, root_index)
    logger.debug(
        "backward from node %d over %d reachable nodes", root_index, len(order)
    )

    for index in order:
        r = graph.record(index)
        if not r.kind.is_leaf():
            r.grad = Tensor.zeros_like(r.value)

    r = graph.record(root_index)
    r.grad = Tensor.ones_like(r.value)

    for index in reversed(order):
        apply_backward_rule(graph, index)
