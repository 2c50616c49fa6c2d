from dataclasses import dataclass, field

from ...domain._tensor import ITensor


@dataclass
class Context:
    """
    Backward context stored on a node produced by an operation.

    A `Context` records the information required to compute the node's
    local gradient contributions during backpropagation.

    Attributes
    ----------
    parents : tuple[int, ...]
        Arena indices of the operand nodes, in operand order. Gradients are
        produced for these parents during the backward pass. Empty for leaves.
    saved_tensors : list[ITensor]
        Values explicitly saved during the forward pass for use in backward
        (e.g., the operands of a multiplication).

    Notes
    -----
    Parents are referenced by index rather than by node object, so a context
    never keeps another node alive and never forms a reference cycle.
    """

    parents: tuple[int, ...] = ()
    saved_tensors: list[ITensor] = field(default_factory=list)

    def save_for_backward(self, *tensors: ITensor) -> None:
        """
        Save tensors for use during the backward computation.

        Parameters
        ----------
        *tensors : ITensor
            Any number of tensors to be stored in `saved_tensors`.
        """
        self.saved_tensors.extend(tensors)
