"""
Tensor- and storage-related exceptions for stridelite.

This module defines the error taxonomy used by the storage layer, the
stride/index engine, the view constructors and the elementwise operation
layer. Every recoverable error subclasses both `StrideliteError` and the
builtin exception a caller would naturally expect (`IndexError`,
`ValueError`, ...), so code can catch either the library-wide base or the
familiar builtin.

Errors never degrade into sentinel values: an invalid index or shape is
always signaled to the immediate caller of the failing operation.

Storage-level bounds violations are not part of this taxonomy. They are
programming errors inside the library and surface as `AssertionError`.
"""

from __future__ import annotations

from typing import Optional, Sequence


class StrideliteError(Exception):
    """
    Base class for all errors raised by stridelite.

    Attributes
    ----------
    op : str
        Name of the operation that failed (e.g., "reshape", "get_item").
    """

    def __init__(self, op: str, message: str) -> None:
        super().__init__(f"{op}: {message}")
        self.op = op


class AllocationFailure(StrideliteError, MemoryError):
    """
    Raised when a storage buffer cannot be allocated and the process is
    configured with the recoverable ``raise`` out-of-memory policy.

    Under the default ``abort`` policy the allocation entry point halts the
    process instead, and this error is never seen by callers.

    Attributes
    ----------
    requested_size : int
        Number of float elements that were requested.
    """

    def __init__(self, op: str, requested_size: int) -> None:
        """
        Initialize the AllocationFailure.

        Parameters
        ----------
        op : str
            Operation that requested the allocation.
        requested_size : int
            Number of elements requested.
        """
        super().__init__(
            op, f"memory allocation failed ({requested_size} elements)"
        )
        self.requested_size = requested_size


class TensorIndexError(StrideliteError, IndexError):
    """
    Raised when a logical index is out of range after negative-index
    normalization.

    Attributes
    ----------
    dim : int
        Dimension in which the offending index was found.
    index : int
        The index as supplied by the caller (before normalization).
    extent : int
        Size of the dimension.
    """

    def __init__(self, op: str, dim: int, index: int, extent: int) -> None:
        super().__init__(
            op,
            f"index {index} is out of bounds for dimension {dim} with size {extent}",
        )
        self.dim = dim
        self.index = index
        self.extent = extent


class ShapeError(StrideliteError, ValueError):
    """
    Raised on dimensionality or element-count mismatches.

    Typical triggers:
    - binary operations on tensors with different shapes,
    - `reshape` to a shape with a different number of elements,
    - indexing with the wrong number of indices,
    - invalid (non-positive) dimensions passed to a constructor.

    Attributes
    ----------
    shapes : tuple[tuple[int, ...], ...]
        Shapes involved in the failure, when known.
    """

    def __init__(
        self,
        op: str,
        message: str,
        shapes: Optional[Sequence[Sequence[int]]] = None,
    ) -> None:
        super().__init__(op, message)
        self.shapes = tuple(tuple(s) for s in shapes) if shapes else ()


class InvalidStepError(StrideliteError, ValueError):
    """
    Raised when a slice step is zero or negative.

    Attributes
    ----------
    dim : int
        Dimension whose step was rejected.
    step : int
        The rejected step value.
    """

    def __init__(self, op: str, dim: int, step: int) -> None:
        super().__init__(
            op, f"step must be a positive integer, got {step} for dimension {dim}"
        )
        self.dim = dim
        self.step = step


class TensorFreedError(StrideliteError, RuntimeError):
    """Raised when a tensor is used after `free()` released its storage."""

    def __init__(self, op: str) -> None:
        super().__init__(op, "tensor has already been freed")


class StorageReleasedError(StrideliteError, RuntimeError):
    """
    Raised when `acquire()` or `release()` is called on a storage whose
    reference count already reached zero.

    This always indicates an ownership bug: some tensor released a reference
    it never held, or released the same reference twice.
    """

    def __init__(self, op: str) -> None:
        super().__init__(op, "storage has already been released")
