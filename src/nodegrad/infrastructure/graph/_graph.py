"""
Graph arena holding every node record of a computation.

A `Graph` is a growable table of node records indexed by integer handle.
Records reference their operands by index only, so the object graph never
contains reference cycles and the lifetime of every node equals the lifetime
of the arena.

Node objects handed to callers are lightweight handles (see `Node`) that
carry the owning graph, an index, and the graph generation at the time they
were issued. Clearing the graph bumps the generation, turning every earlier
handle into a dangling reference that fails loudly when used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from ...domain._errors import DanglingReferenceError, GraphMismatchError
from ...domain._op_kind import OpKind
from .._config import DEFAULT_DTYPE
from ..tensor._tensor import Tensor
from ._context import Context
from ._node import Node

logger = logging.getLogger(__name__)


@dataclass
class NodeRecord:
    """
    Storage for one node in the arena.

    Attributes
    ----------
    value : Tensor
        Forward result. Read-only, never modified after construction.
    grad : Tensor
        Accumulated gradient, always shaped like `value`. Read-only; the
        backward pass replaces it instead of writing into it.
    kind : OpKind
        Operation that produced the node; selects its backward rule.
    ctx : Context
        Parent indices and values saved for the backward rule.
    """

    value: Tensor
    grad: Tensor
    kind: OpKind = OpKind.LEAF
    ctx: Context = field(default_factory=Context)

    def __setattr__(self, name: str, val: Any) -> None:
        # Stored tensors are frozen; gradients change only by reassignment.
        if name in ("value", "grad") and isinstance(val, Tensor):
            val.set_readonly()
        object.__setattr__(self, name, val)


class Graph:
    """
    Arena owning the records of a computation graph.

    Parameters
    ----------
    dtype : np.dtype, optional
        Element dtype used when leaves are created from raw Python values.
        Defaults to `DEFAULT_DTYPE`.
    """

    __slots__ = ("_records", "_generation", "_dtype")

    def __init__(self, *, dtype: Any = DEFAULT_DTYPE) -> None:
        self._records: list[NodeRecord] = []
        self._generation = 0
        self._dtype = dtype

    @property
    def dtype(self) -> Any:
        """Return the dtype used for leaves built from raw values."""
        return self._dtype

    @property
    def generation(self) -> int:
        """Return the number of times this graph has been cleared."""
        return self._generation

    def __len__(self) -> int:
        return len(self._records)

    def add_node(
        self,
        value: Tensor,
        kind: OpKind = OpKind.LEAF,
        ctx: Optional[Context] = None,
    ) -> Node:
        """
        Append a new record and return a handle to it.

        Parameters
        ----------
        value : Tensor
            Forward value of the node. It is made read-only and owned by
            the graph from then on.
        kind : OpKind, optional
            Producing operation. Defaults to `OpKind.LEAF`.
        ctx : Optional[Context], optional
            Backward context. Defaults to an empty context.

        Returns
        -------
        Node
            Handle to the newly created node.

        Raises
        ------
        TypeError
            If `value` is not a Tensor.
        ValueError
            If a leaf is given parents or a derived node is given none.
        DanglingReferenceError
            If a parent index does not refer to an existing record.
        """
        if not isinstance(value, Tensor):
            raise TypeError(f"Node value must be a Tensor, got {type(value)!r}")

        ctx = ctx if ctx is not None else Context()
        if kind.is_leaf() and ctx.parents:
            raise ValueError("Leaf nodes cannot have parents.")
        if not kind.is_leaf() and not ctx.parents:
            raise ValueError(f"Node of kind {kind.name} requires parents.")

        index = len(self._records)
        # Parents must precede the new node, which keeps the graph acyclic.
        for p in ctx.parents:
            if not 0 <= p < index:
                raise DanglingReferenceError(p, "parent is not an existing node")

        self._records.append(
            NodeRecord(value=value, grad=Tensor.zeros_like(value), kind=kind, ctx=ctx)
        )
        return Node(self, index, self._generation)

    def record(self, index: int) -> NodeRecord:
        """
        Return the record stored at `index`.

        Raises
        ------
        DanglingReferenceError
            If `index` is outside the arena.
        """
        if not 0 <= index < len(self._records):
            raise DanglingReferenceError(index, "index is outside the graph")
        return self._records[index]

    def resolve(self, node: Node) -> int:
        """
        Validate that `node` is a live handle into this graph and return its
        index.

        Raises
        ------
        GraphMismatchError
            If `node` belongs to another graph.
        DanglingReferenceError
            If the graph was cleared after `node` was issued.
        """
        if node.graph is not self:
            raise GraphMismatchError(repr(node.graph), repr(self))
        if node.generation != self._generation:
            raise DanglingReferenceError(node.index, "graph was cleared")
        if not 0 <= node.index < len(self._records):
            raise DanglingReferenceError(node.index, "index is outside the graph")
        return node.index

    def node(self, index: int) -> Node:
        """Return a handle to the record at `index`."""
        self.record(index)
        return Node(self, index, self._generation)

    def nodes(self) -> Iterator[Node]:
        """Iterate over handles to every node, in creation order."""
        for index in range(len(self._records)):
            yield Node(self, index, self._generation)

    def zero_grad(self) -> None:
        """Reset the gradient of every node in the graph to zeros."""
        for r in self._records:
            r.grad = Tensor.zeros_like(r.value)

    def clear(self) -> None:
        """
        Drop every node record.

        Handles issued before the call become dangling and raise
        `DanglingReferenceError` when used.
        """
        logger.debug(
            "clearing graph generation %d (%d nodes)",
            self._generation,
            len(self._records),
        )
        self._records.clear()
        self._generation += 1

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._records)}, generation={self._generation})"
