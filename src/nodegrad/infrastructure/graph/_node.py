"""
Node handles.

A `Node` is the user-facing view of one record in a `Graph` arena. It holds
no numeric state itself: value, gradient, kind and parents are read from the
arena on every access. Handles are cheap to create and compare equal when
they point at the same record of the same graph generation.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Callable, Union

from ...domain._op_kind import OpKind

if TYPE_CHECKING:
    from ..tensor._tensor import Tensor
    from ._graph import Graph, NodeRecord

Number = Union[int, float]


class Node:
    """
    Handle to a node of a computation graph.

    Parameters
    ----------
    graph : Graph
        The arena that owns the node record.
    index : int
        Position of the record in the arena.
    generation : int
        Graph generation the handle was issued in.

    Notes
    -----
    Nodes are created by `Graph.add_node` and by the functional operations
    (`leaf`, `add`, `multiply`, ...). They are not meant to be constructed
    directly.
    """

    __slots__ = ("_graph", "_index", "_generation")

    def __init__(self, graph: "Graph", index: int, generation: int) -> None:
        self._graph = graph
        self._index = index
        self._generation = generation

    @property
    def graph(self) -> "Graph":
        """Return the owning graph."""
        return self._graph

    @property
    def index(self) -> int:
        """Return the arena index of this node."""
        return self._index

    @property
    def generation(self) -> int:
        """Return the graph generation this handle was issued in."""
        return self._generation

    def _record(self) -> "NodeRecord":
        return self._graph.record(self._graph.resolve(self))

    @property
    def value(self) -> "Tensor":
        """
        Return the forward value of this node.

        The returned tensor is read-only.

        Raises
        ------
        DanglingReferenceError
            If the owning graph was cleared after this handle was issued.
        """
        return self._record().value

    @property
    def grad(self) -> "Tensor":
        """
        Return the accumulated gradient of this node.

        The gradient always has the same shape as `value`.
        """
        return self._record().grad

    @property
    def kind(self) -> OpKind:
        """Return the operation kind that produced this node."""
        return self._record().kind

    @property
    def op_label(self) -> str:
        """Return the diagnostic label of the producing operation."""
        return self._record().kind.label

    @property
    def is_leaf(self) -> bool:
        """Return True if this node has no predecessors."""
        return self._record().kind.is_leaf()

    @property
    def predecessors(self) -> tuple["Node", ...]:
        """
        Return handles to the operand nodes, in operand order.

        Returns
        -------
        tuple[Node, ...]
            Empty for leaves.
        """
        parents = self._record().ctx.parents
        return tuple(Node(self._graph, p, self._generation) for p in parents)

    @property
    def backward_rule(self) -> Callable[[], None]:
        """
        Return a zero-argument callable applying this node's local backward
        rule.

        Invoking it reads this node's current `grad` and accumulates the
        chain-rule contribution into each predecessor's `grad`. For leaves it
        does nothing.
        """
        from .._functions import apply_backward_rule

        return partial(apply_backward_rule, self._graph, self._graph.resolve(self))

    def backward(self) -> None:
        """Backpropagate from this node. See `nodegrad.backward`."""
        from .._engine import backward

        backward(self)

    def zero_grad(self) -> None:
        """Reset this node's gradient to zeros."""
        from ..tensor._tensor import Tensor

        r = self._record()
        r.grad = Tensor.zeros_like(r.value)

    # ----------------------------
    # Operators
    # ----------------------------
    def __add__(self, other: Union["Node", Number]) -> "Node":
        from .._functions import add, add_scalar

        if isinstance(other, Node):
            return add(self, other)
        if isinstance(other, (int, float)):
            return add_scalar(self, other)
        return NotImplemented

    def __radd__(self, other: Number) -> "Node":
        from .._functions import add_scalar

        if isinstance(other, (int, float)):
            return add_scalar(self, other)
        return NotImplemented

    def __mul__(self, other: "Node") -> "Node":
        from .._functions import multiply

        if isinstance(other, Node):
            return multiply(self, other)
        return NotImplemented

    def __neg__(self) -> "Node":
        from .._functions import negate

        return negate(self)

    # ----------------------------
    # Identity
    # ----------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return (
            self._graph is other._graph
            and self._index == other._index
            and self._generation == other._generation
        )

    def __hash__(self) -> int:
        return hash((id(self._graph), self._index, self._generation))

    def __repr__(self) -> str:
        r = self._record()
        return f"Node(value={r.value}, grad={r.grad}, op={r.kind.label})"

    __str__ = __repr__
