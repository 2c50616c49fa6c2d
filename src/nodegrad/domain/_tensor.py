"""
Tensor interface definitions.

This module defines the domain-level interface for the value container held
by every graph node. The engine treats tensors as opaque elementwise
arithmetic containers: it never looks inside them, it only adds, multiplies,
negates, builds zero/one tensors of a matching shape, and queries the shape.

Notes
-----
The protocol uses structural typing so that any backend exposing this
surface can be stored in a node. The concrete NumPy implementation lives in
`nodegrad.infrastructure.tensor`.
"""

from __future__ import annotations

from typing import Protocol, Union, runtime_checkable

Number = Union[int, float]


@runtime_checkable
class ITensor(Protocol):
    """
    Value-container interface.

    An `ITensor` stores an n-dimensional array of floating-point numbers and
    exposes the minimal arithmetic the autodiff engine relies on.

    Notes
    -----
    - Binary operators require identical shapes between tensor operands.
    - Python scalars may appear on either side of `+` and `*`; they are
      lifted to a tensor of the receiver's shape.
    """

    __slots__ = ()

    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape.
        """
        ...

    def __add__(self, other: Union["ITensor", Number]) -> "ITensor":
        """Elementwise addition."""
        ...

    def __mul__(self, other: Union["ITensor", Number]) -> "ITensor":
        """Elementwise multiplication."""
        ...

    def __neg__(self) -> "ITensor":
        """Elementwise negation."""
        ...

    @staticmethod
    def zeros_like(t: "ITensor") -> "ITensor":
        """
        Create an all-zeros tensor with the same shape as `t`.
        """
        ...

    @staticmethod
    def ones_like(t: "ITensor") -> "ITensor":
        """
        Create an all-ones tensor with the same shape as `t`.
        """
        ...

    def __str__(self) -> str:
        """Human-readable rendering of the values, for debugging."""
        ...
