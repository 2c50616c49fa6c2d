"""
Differentiable operations and backward-rule dispatch.

This module contains the elementwise operations of the engine, expressed in
a function-style autograd API:

- Each differentiable operation is a `Function` subclass with
  `forward(ctx, ...)` and `backward(ctx, grad_out)` static methods, and is
  registered for exactly one `OpKind`.
- `apply_backward_rule` is the single dispatch point used by the engine: it
  selects the rule from the node's kind and accumulates the returned
  gradients into the parents' `grad`.
- Public functional wrappers (`add`, `multiply`, ...) are responsible for:
  - validating operands,
  - building the `Context` with parent indices,
  - invoking `forward`,
  - appending the result node to the operands' graph.

Notes
-----
- Binary operations require identical operand shapes; no broadcasting and
  no broadcasting-aware gradient reduction is performed.
- Gradients are always accumulated (`+=`), never overwritten, so that a node
  used by several downstream operations receives the sum of all
  contributions.
"""

from typing import Callable, Optional, Sequence, Type, Union

import numpy as np

from ..domain._errors import ShapeMismatchError, GraphMismatchError
from ..domain._function import Function
from ..domain._op_kind import OpKind
from .graph._context import Context
from .graph._graph import Graph
from .graph._graph_scope import current_graph
from .graph._node import Node
from .tensor._tensor import Tensor

Number = Union[int, float]

_BACKWARD_RULES: dict[OpKind, Type[Function]] = {}


def register_backward(kind: OpKind) -> Callable[[Type[Function]], Type[Function]]:
    """
    Decorator registering a `Function` as the backward rule for `kind`.

    Raises
    ------
    ValueError
        If `kind` is `OpKind.LEAF` or already has a rule.
    """

    def deco(cls: Type[Function]) -> Type[Function]:
        if kind.is_leaf():
            raise ValueError("Leaf nodes have no backward rule.")
        if kind in _BACKWARD_RULES:
            raise ValueError(f"Backward rule for {kind.name} is already registered.")
        _BACKWARD_RULES[kind] = cls
        return cls

    return deco


def backward_rule_for(kind: OpKind) -> Optional[Type[Function]]:
    """Return the `Function` registered for `kind`, or None for leaves."""
    if kind.is_leaf():
        return None
    fn = _BACKWARD_RULES.get(kind)
    if fn is None:
        raise NotImplementedError(f"Missing backward rule for {kind!r}")
    return fn


@register_backward(OpKind.ADD)
class AddFn(Function):
    """
    Elementwise addition.

    Implements:

        out = a + b

    Backward:

        d(out)/da = 1,  d(out)/db = 1
    """

    @staticmethod
    def forward(ctx: Context, a: Tensor, b: Tensor) -> Tensor:
        return a + b

    @staticmethod
    def backward(ctx: Context, grad_out: Tensor) -> Sequence[Tensor]:
        return grad_out, grad_out


@register_backward(OpKind.MUL)
class MulFn(Function):
    """
    Elementwise multiplication.

    Implements:

        out = a * b

    Backward (product rule):

        d(out)/da = b,  d(out)/db = a

    Notes
    -----
    Both operand values are saved in the context; each operand's local
    derivative is the other operand's forward value.
    """

    @staticmethod
    def forward(ctx: Context, a: Tensor, b: Tensor) -> Tensor:
        ctx.save_for_backward(a, b)
        return a * b

    @staticmethod
    def backward(ctx: Context, grad_out: Tensor) -> Sequence[Tensor]:
        a, b = ctx.saved_tensors
        return grad_out * b, grad_out * a


@register_backward(OpKind.NEG)
class NegFn(Function):
    """
    Elementwise negation for operands of any shape.

    Backward:

        d(-a)/da = -1
    """

    @staticmethod
    def forward(ctx: Context, a: Tensor) -> Tensor:
        return -a

    @staticmethod
    def backward(ctx: Context, grad_out: Tensor) -> Sequence[Tensor]:
        return (-grad_out,)


def apply_backward_rule(graph: Graph, index: int) -> None:
    """
    Run the backward rule of the node at `index`.

    Reads the node's current gradient and adds the local chain-rule
    contribution into the gradient of each parent. Does nothing for leaves.

    Parameters
    ----------
    graph : Graph
        Arena owning the node.
    index : int
        Arena index of the node.

    Raises
    ------
    NotImplementedError
        If the node's kind has no registered rule.
    RuntimeError
        If the rule does not return exactly one gradient per parent.
    ValueError
        If a returned gradient does not match its parent's shape.
    """
    record = graph.record(index)
    fn = backward_rule_for(record.kind)
    if fn is None:
        return

    parents = record.ctx.parents
    parent_grads = fn.backward(record.ctx, record.grad)
    if len(parent_grads) != len(parents):
        raise RuntimeError(
            "backward rule must return one grad per parent. "
            f"Got {len(parent_grads)} grads for {len(parents)} parents."
        )

    for p, g in zip(parents, parent_grads):
        parent = graph.record(p)
        if g.shape != parent.value.shape:
            raise ValueError(
                f"Gradient shape mismatch for parent: expected {parent.value.shape}, got {g.shape}"
            )
        parent.grad = parent.grad + g


# ----------------------------
# Functional API
# ----------------------------
def _as_tensor(value, dtype) -> Tensor:
    if isinstance(value, Tensor):
        # The node owns a private copy; later writes to `value` do not reach it.
        return Tensor.from_numpy(value.to_numpy(), dtype=value.dtype)
    if isinstance(value, bool) or not isinstance(
        value, (int, float, np.number, np.ndarray, list, tuple)
    ):
        raise TypeError(f"Unsupported leaf value type: {type(value)!r}")
    if isinstance(value, (int, float, np.number)):
        # Raw numbers become single-element tensors.
        value = [value]
    return Tensor.from_numpy(np.asarray(value), dtype=dtype)


def _check_node(x, fn_name: str) -> None:
    if not isinstance(x, Node):
        raise TypeError(f"{fn_name} expects Node operands, got {type(x)!r}")


def leaf(value, *, graph: Optional[Graph] = None) -> Node:
    """
    Create a leaf node from a raw value.

    Parameters
    ----------
    value : Tensor | np.ndarray | list | int | float
        Forward value. Python numbers become shape-(1,) tensors.
    graph : Optional[Graph], optional
        Graph to record the leaf in. Defaults to `current_graph()`.

    Returns
    -------
    Node
        A node with zero gradient, no predecessors and a no-op backward rule.
    """
    g = graph if graph is not None else current_graph()
    return g.add_node(_as_tensor(value, g.dtype))


def constant(x: Number, *, graph: Optional[Graph] = None) -> Node:
    """Create a fresh shape-(1,) leaf holding the scalar `x`."""
    if isinstance(x, bool) or not isinstance(x, (int, float, np.number)):
        raise TypeError(f"constant expects a number, got {type(x)!r}")
    return leaf(float(x), graph=graph)


def _binary(fn: Type[Function], kind: OpKind, a: Node, b: Node) -> Node:
    _check_node(a, kind.name.lower())
    _check_node(b, kind.name.lower())
    if a.graph is not b.graph:
        raise GraphMismatchError(repr(a.graph), repr(b.graph))

    graph = a.graph
    ia, ib = graph.resolve(a), graph.resolve(b)
    va, vb = graph.record(ia).value, graph.record(ib).value
    if va.shape != vb.shape:
        raise ShapeMismatchError(kind.label, va.shape, vb.shape)

    ctx = Context(parents=(ia, ib))
    out = fn.forward(ctx, va, vb)
    return graph.add_node(out, kind, ctx)


def add(a: Node, b: Node) -> Node:
    """
    Elementwise addition of two same-shaped nodes.

    Returns
    -------
    Node
        A node with `value = a.value + b.value`, `predecessors = (a, b)` and
        `op_label = "+"`.

    Raises
    ------
    TypeError
        If an operand is not a Node.
    GraphMismatchError
        If the operands belong to different graphs.
    ShapeMismatchError
        If the operand shapes differ. No node is created in that case.
    """
    return _binary(AddFn, OpKind.ADD, a, b)


def multiply(a: Node, b: Node) -> Node:
    """
    Elementwise multiplication of two same-shaped nodes.

    Returns
    -------
    Node
        A node with `value = a.value * b.value`, `predecessors = (a, b)` and
        `op_label = "*"`.

    Raises
    ------
    TypeError
        If an operand is not a Node.
    GraphMismatchError
        If the operands belong to different graphs.
    ShapeMismatchError
        If the operand shapes differ. No node is created in that case.
    """
    return _binary(MulFn, OpKind.MUL, a, b)


def negate(a: Node) -> Node:
    """
    Elementwise negation.

    Single-element operands of shape (1,) are negated by multiplying with a
    fresh `constant(-1)` leaf, reusing the multiplication rule. Any other
    shape gets a dedicated negation node.
    """
    _check_node(a, "negate")
    graph = a.graph
    ia = graph.resolve(a)
    va = graph.record(ia).value
    if va.shape == (1,):
        return multiply(a, constant(-1.0, graph=graph))

    ctx = Context(parents=(ia,))
    out = NegFn.forward(ctx, va)
    return graph.add_node(out, OpKind.NEG, ctx)


def add_scalar(a: Node, s: Number) -> Node:
    """
    Add a raw number to a node.

    `s` is wrapped in a shape-(1,) leaf and combined with `add`, so `a` must
    itself be a shape-(1,) node.

    Raises
    ------
    TypeError
        If `s` is not a number.
    ShapeMismatchError
        If `a` is not shape (1,).
    """
    _check_node(a, "add_scalar")
    if isinstance(s, bool) or not isinstance(s, (int, float, np.number)):
        raise TypeError(f"add_scalar expects a number, got {type(s)!r}")
    if a.value.shape != (1,):
        # Fail before the constant leaf is recorded.
        raise ShapeMismatchError(OpKind.ADD.label, a.value.shape, (1,))
    return add(a, constant(s, graph=a.graph))
