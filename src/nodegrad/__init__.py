"""
nodegrad: a minimal reverse-mode automatic-differentiation engine.

Build a graph from leaves with elementwise operations, then call `backward`
on the result:

    x = leaf(2.0)
    y = leaf(3.0)
    w = (x + y) * x
    backward(w)      # x.grad == [7.], y.grad == [2.]
"""

import logging

from .domain import (
    DanglingReferenceError,
    Function,
    GraphMismatchError,
    ITensor,
    OpKind,
    ShapeMismatchError,
)
from .infrastructure.tensor import Tensor
from .infrastructure.graph import (
    Context,
    Graph,
    Node,
    current_graph,
    default_graph,
    use_graph,
)
from .infrastructure._functions import (
    AddFn,
    MulFn,
    NegFn,
    add,
    add_scalar,
    apply_backward_rule,
    constant,
    leaf,
    multiply,
    negate,
)
from .infrastructure._engine import backward, topological_order

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DanglingReferenceError",
    "GraphMismatchError",
    "ShapeMismatchError",
    "Function",
    "ITensor",
    "OpKind",
    "Tensor",
    "Context",
    "Graph",
    "Node",
    "current_graph",
    "default_graph",
    "use_graph",
    "AddFn",
    "MulFn",
    "NegFn",
    "apply_backward_rule",
    "leaf",
    "constant",
    "add",
    "multiply",
    "negate",
    "add_scalar",
    "backward",
    "topological_order",
]
