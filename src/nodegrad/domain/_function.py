"""
Autograd function interface definitions.

This module defines the abstract base class for differentiable operations
used by the engine. Concrete subclasses of `Function` implement both the
forward computation on raw tensor values and the local backward rule that
maps the output gradient to one gradient per operand.

Functions are stateless: everything a backward rule needs is stored on the
per-node `Context` during the forward pass. This lets each rule be exercised
in isolation, without building a graph.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ._tensor import ITensor


class Function(ABC):
    """
    Abstract base class for differentiable operations.

    Subclasses must implement both `forward` and `backward` as static
    methods. Any value required for the gradient computation should be
    stored on the provided `ctx` during the forward pass.

    Notes
    -----
    - `forward` works on tensor values, never on graph nodes.
    - `backward` returns gradients in the same order as the operands that
      were passed to `forward`. Each gradient must have its operand's shape.
    """

    @staticmethod
    @abstractmethod
    def forward(ctx, *inputs: ITensor) -> ITensor:
        """
        Perform the forward computation.

        Parameters
        ----------
        ctx : Context
            Mutable per-node context used to store values required by
            `backward`.
        *inputs : ITensor
            Operand values.

        Returns
        -------
        ITensor
            The output value.
        """
        ...

    @staticmethod
    @abstractmethod
    def backward(ctx, grad_out: ITensor) -> Sequence[ITensor]:
        """
        Compute the gradient contribution for each operand.

        Parameters
        ----------
        ctx : Context
            The context populated during the forward pass.
        grad_out : ITensor
            Gradient of the backward root with respect to this operation's
            output.

        Returns
        -------
        tuple[ITensor, ...]
            One gradient per operand, in operand order.
        """
        ...
