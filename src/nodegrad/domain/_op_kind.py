"""
Operation kinds recorded on graph nodes.

Every node in a graph carries an `OpKind` naming the operation that produced
it. The kind selects the node's backward rule through a single dispatch
table, so the full rule set is statically enumerable.
"""

from enum import Enum


class OpKind(Enum):
    """
    Enumeration of node-producing operations.

    The enum value doubles as the node's diagnostic label.

    Attributes
    ----------
    LEAF : OpKind
        Input or parameter node. Has no predecessors and a no-op rule.
    ADD : OpKind
        Elementwise addition of two same-shaped operands.
    MUL : OpKind
        Elementwise multiplication of two same-shaped operands.
    NEG : OpKind
        Elementwise negation of a multi-element operand.
    """

    LEAF = ""
    ADD = "+"
    MUL = "*"
    NEG = "neg"

    @property
    def label(self) -> str:
        """Return the diagnostic label for this kind."""
        return self.value

    def is_leaf(self) -> bool:
        """Return True for `OpKind.LEAF`."""
        return self is OpKind.LEAF
