from ._errors import DanglingReferenceError, GraphMismatchError, ShapeMismatchError
from ._function import Function
from ._op_kind import OpKind
from ._tensor import ITensor

__all__ = [
    DanglingReferenceError.__name__,
    GraphMismatchError.__name__,
    ShapeMismatchError.__name__,
    Function.__name__,
    OpKind.__name__,
    ITensor.__name__,
]
