"""
Graph- and shape-related exceptions for nodegrad.

This module defines the custom errors raised while building or traversing
a computation graph. They allow the engine to fail fast and clearly when:

- the operands of an elementwise operation have incompatible shapes,
- a node handle refers to a record the owning graph no longer holds, or
- operands that live in different graphs are combined.

Each error keeps the offending values as attributes so that callers can
inspect them without parsing the message.
"""


class ShapeMismatchError(ValueError):
    """
    Raised when the operands of an elementwise binary operation do not have
    identical shapes.

    No broadcasting is performed anywhere in the engine, so this error is
    raised eagerly at operation-construction time, before any node is
    created.

    Attributes
    ----------
    op : str
        The name or label of the operation that was attempted (e.g., "+", "*").
    shape_a : tuple[int, ...]
        Shape of the left operand.
    shape_b : tuple[int, ...]
        Shape of the right operand.
    """

    def __init__(self, op: str, shape_a: tuple, shape_b: tuple) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        op : str
            The operation that rejected its operands.
        shape_a : tuple[int, ...]
            Shape of the left operand.
        shape_b : tuple[int, ...]
            Shape of the right operand.
        """
        super().__init__(
            f"Shape mismatch for '{op}': {tuple(shape_a)} vs {tuple(shape_b)}."
        )
        self.op = op
        self.shape_a = tuple(shape_a)
        self.shape_b = tuple(shape_b)


class DanglingReferenceError(RuntimeError):
    """
    Raised when a node handle refers to a record that does not exist.

    Node records are owned by their graph and referenced by integer index.
    A handle becomes dangling when the graph is cleared after the handle was
    issued, or when an index falls outside the graph's records.

    Attributes
    ----------
    index : int
        The arena index that could not be resolved.
    reason : str
        Short description of why the reference is invalid.
    """

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"Dangling node reference (index={index}): {reason}.")
        self.index = index
        self.reason = reason


class GraphMismatchError(RuntimeError):
    """
    Raised when an operation combines nodes owned by different graphs.
    """

    def __init__(self, graph_a: str, graph_b: str) -> None:
        """
        Initialize the GraphMismatchError.

        Parameters
        ----------
        graph_a : str
            Representation of the graph owning the first operand.
        graph_b : str
            Representation of the graph owning the second operand.
        """
        super().__init__(f"Graph mismatch: {graph_a} vs {graph_b}.")
        self.graph_a = graph_a
        self.graph_b = graph_b
