"""
Concrete Tensor implementation (NumPy backend).

This module provides the value container stored in every graph node. It
satisfies the domain-level `ITensor` protocol and is deliberately small:
elementwise add / multiply / negate, zero and one factories, a shape query,
and NumPy interop.

Design notes
------------
- Tensors are plain values. They carry no gradient and no graph history;
  autodiff bookkeeping lives on graph nodes.
- Broadcasting is not implemented; binary ops between tensors require exact
  shape matches. Python scalars are lifted to the receiver's shape.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain._tensor import ITensor
from .._config import DEFAULT_DTYPE

Number = Union[int, float]


class Tensor(ITensor):
    """
    Concrete tensor implementation backed by a NumPy ndarray.

    Parameters
    ----------
    shape : tuple[int, ...]
        Tensor shape. Storage is allocated and zero-initialized.
    dtype : np.dtype, optional
        Element dtype. Defaults to `DEFAULT_DTYPE`.

    Notes
    -----
    Arithmetic always returns a new tensor; operands are never modified.
    """

    __slots__ = ("_shape", "_dtype", "_data")

    def __init__(self, shape: tuple[int, ...], *, dtype: Any = DEFAULT_DTYPE) -> None:
        self._shape = tuple(int(d) for d in shape)
        self._dtype = np.dtype(dtype)
        self._data = np.zeros(self._shape, dtype=self._dtype)

    @classmethod
    def from_numpy(cls, arr: Any, *, dtype: Optional[Any] = None) -> "Tensor":
        """
        Build a tensor holding a copy of `arr`.

        Parameters
        ----------
        arr : Any
            Array-like object accepted by `np.asarray`, including NumPy
            scalars and nested lists.
        dtype : np.dtype, optional
            Element dtype. If omitted, floating arrays keep their dtype and
            everything else is converted to `DEFAULT_DTYPE`.

        Returns
        -------
        Tensor
            A new tensor with the same shape and values as `arr`.
        """
        arr_nd = np.asarray(arr)
        if dtype is None:
            dtype = (
                arr_nd.dtype
                if np.issubdtype(arr_nd.dtype, np.floating)
                else DEFAULT_DTYPE
            )
        out = cls(arr_nd.shape, dtype=dtype)
        out.copy_from_numpy(arr_nd)
        return out

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "Tensor":
        # Takes ownership of `arr` without copying.
        out = cls.__new__(cls)
        out._shape = tuple(arr.shape)
        out._dtype = arr.dtype
        out._data = arr
        return out

    def __repr__(self) -> str:
        return f"Tensor(shape={self._shape}, dtype={self._dtype})"

    def __str__(self) -> str:
        return str(self._data)

    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the tensor shape.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape.
        """
        return self._shape

    @property
    def dtype(self) -> np.dtype:
        """Return the element dtype."""
        return self._dtype

    def numel(self) -> int:
        """
        Return the total number of elements in the tensor.

        Returns
        -------
        int
            Product of all dimensions in the tensor shape.
        """
        return int(self._data.size)

    @property
    def readonly(self) -> bool:
        """Return True if in-place writes to this tensor are rejected."""
        return not self._data.flags.writeable

    def set_readonly(self) -> None:
        """
        Reject all further in-place writes to this tensor.

        Graph records freeze every value and gradient they store, so a
        node's forward value cannot change after construction.
        """
        self._data.flags.writeable = False

    def _check_writable(self) -> None:
        if self.readonly:
            raise ValueError("Tensor is read-only; it is owned by a graph node.")

    # ----------------------------
    # Factories
    # ----------------------------
    @staticmethod
    def zeros(*, shape: tuple[int, ...], dtype: Any = DEFAULT_DTYPE) -> "Tensor":
        """
        Create a tensor filled with zeros.

        Parameters
        ----------
        shape : tuple[int, ...]
            Shape of the output tensor.
        dtype : np.dtype, optional
            Element dtype. Defaults to `DEFAULT_DTYPE`.

        Returns
        -------
        Tensor
            Newly created tensor filled with zeros.
        """
        return Tensor(shape, dtype=dtype)

    @staticmethod
    def ones(*, shape: tuple[int, ...], dtype: Any = DEFAULT_DTYPE) -> "Tensor":
        """
        Create a tensor filled with ones.

        Parameters
        ----------
        shape : tuple[int, ...]
            Shape of the output tensor.
        dtype : np.dtype, optional
            Element dtype. Defaults to `DEFAULT_DTYPE`.

        Returns
        -------
        Tensor
            Newly created tensor filled with ones.
        """
        out = Tensor(shape, dtype=dtype)
        out.fill(1.0)
        return out

    @staticmethod
    def zeros_like(t: "Tensor") -> "Tensor":
        """Create an all-zeros tensor with the shape and dtype of `t`."""
        return Tensor.zeros(shape=t.shape, dtype=t.dtype)

    @staticmethod
    def ones_like(t: "Tensor") -> "Tensor":
        """Create an all-ones tensor with the shape and dtype of `t`."""
        return Tensor.ones(shape=t.shape, dtype=t.dtype)

    # ----------------------------
    # NumPy interop
    # ----------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Return a copy of the tensor data as a NumPy ndarray.

        Returns
        -------
        np.ndarray
            A copy, so callers cannot mutate values held by graph nodes.
        """
        return self._data.copy()

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Copy data from a NumPy array (or array-like / scalar) into this tensor.

        Parameters
        ----------
        arr : Any
            Array-like object accepted by `np.asarray`.

        Raises
        ------
        ValueError
            If the shape of `arr` differs from the tensor shape, or the tensor
            is read-only.
        """
        self._check_writable()
        arr_nd = np.asarray(arr, dtype=self._dtype)
        if arr_nd.shape != self._shape:
            raise ValueError(
                f"Shape mismatch: tensor {self._shape} vs array {arr_nd.shape}"
            )
        self._data[...] = arr_nd

    def fill(self, value: float) -> None:
        """
        Fill the tensor in place with a scalar value.

        Raises
        ------
        ValueError
            If the tensor is read-only.
        """
        self._check_writable()
        self._data.fill(value)

    # ----------------------------
    # Elementwise arithmetic
    # ----------------------------
    def _as_operand(self, other: Union["Tensor", Number], op: str) -> np.ndarray:
        if isinstance(other, Tensor):
            if other.shape != self.shape:
                raise ShapeMismatchError(op, self.shape, other.shape)
            return other._data
        if isinstance(other, (int, float, np.number)):
            return np.full(self._shape, other, dtype=self._dtype)
        raise TypeError(f"Unsupported operand type: {type(other)!r}")

    def __add__(self, other: Union["Tensor", Number]) -> "Tensor":
        """
        Elementwise addition.

        Raises
        ------
        ShapeMismatchError
            If `other` is a tensor with a different shape.
        """
        return Tensor._wrap(self._data + self._as_operand(other, "+"))

    def __radd__(self, other: Number) -> "Tensor":
        return self.__add__(other)

    def __mul__(self, other: Union["Tensor", Number]) -> "Tensor":
        """
        Elementwise multiplication.

        Raises
        ------
        ShapeMismatchError
            If `other` is a tensor with a different shape.
        """
        return Tensor._wrap(self._data * self._as_operand(other, "*"))

    def __rmul__(self, other: Number) -> "Tensor":
        return self.__mul__(other)

    def __neg__(self) -> "Tensor":
        return Tensor._wrap(-self._data)
