"""
Concrete strided Tensor implementation (NumPy-backed storage).

This module provides `Tensor`, a lightweight shape/stride/offset descriptor
bound to a reference-counted `Storage`. Tensors do not own data: many views
may share one storage, and each view holds exactly one storage reference
until `free()` gives it back.

Design notes
------------
- Every tensor owns its own `dims`/`strides` tuples. View constructors
  compute fresh metadata; only the storage is shared.
- Factories (`empty`, `arange`, ...) live on the class. View constructors
  and indexing live in `TensorShapeAndIndexingMixin`; elementwise arithmetic
  lives in `TensorMixinArithmetic`.
- Autograd is expressed by attaching an optional `Node` (`grad_fn`) to
  operation outputs. No backward pass runs in this package.
- The element type is fixed to ``float32``.
"""

from __future__ import annotations

import operator
import warnings
from collections.abc import Sequence as SequenceABC
from typing import Iterable, Optional, Sequence, Union

import numpy as np
from numpy.lib.stride_tricks import as_strided

from ...domain._errors import ShapeError, TensorFreedError
from ...domain._tensor import ITensor
from ._shape_and_indexing import TensorShapeAndIndexingMixin
from ._storage import Storage
from ._strides import compute_strides, is_contiguous, numel
from ._tensor_context import Node
from .mixins.arithmetic import TensorMixinArithmetic

Number = Union[int, float]


def _normalize_dims(dims: Iterable[int], *, op: str, allow_zero: bool) -> tuple[int, ...]:
    """
    Validate a user-supplied shape and return it as a tuple of ints.

    Raises
    ------
    TypeError
        If `dims` is not a sequence of integers.
    ShapeError
        If `dims` is empty or contains a non-positive (or, with
        `allow_zero`, negative) extent.
    """
    if not isinstance(dims, SequenceABC):
        raise TypeError(f"{op}: dims must be a sequence of ints, got {dims!r}")
    out = tuple(operator.index(d) for d in dims)
    if len(out) == 0:
        raise ShapeError(op, "dims must contain at least one dimension")
    lowest = 0 if allow_zero else 1
    for i, d in enumerate(out):
        if d < lowest:
            kind = "non-negative" if allow_zero else "positive"
            raise ShapeError(
                op, f"dimension {i} must be {kind}, got {d}", shapes=[out]
            )
    return out


class Tensor(TensorMixinArithmetic, TensorShapeAndIndexingMixin, ITensor):
    """
    Strided view over a shared, reference-counted storage.

    Parameters
    ----------
    storage : Storage
        Backing storage. The new tensor takes ownership of **one** reference:
        pass freshly allocated storage, or call `storage.acquire()` first.
    dims : Sequence[int]
        Extent of each dimension.
    strides : Sequence[int], optional
        Element stride of each dimension. Defaults to row-major strides.
    offset : int, optional
        Physical position of the first element. Defaults to 0.
    requires_grad : bool, optional
        Whether an external autograd engine should track this tensor.
    label : str, optional
        Display name supplied by the caller. Borrowed: `free()` leaves it.

    Raises
    ------
    ShapeError
        If the layout is inconsistent or addresses elements outside storage.

    Notes
    -----
    Prefer the factories (`empty`, `zeros`, `arange`, ...) and view
    constructors (`reshape`, `slice`) over calling this directly.
    """

    def __init__(
        self,
        storage: Storage,
        dims: Sequence[int],
        strides: Optional[Sequence[int]] = None,
        offset: int = 0,
        *,
        requires_grad: bool = False,
        label: Optional[str] = None,
    ) -> None:
        self._dims: tuple[int, ...] = tuple(int(d) for d in dims)
        self._strides: tuple[int, ...] = (
            compute_strides(self._dims)
            if strides is None
            else tuple(int(s) for s in strides)
        )
        self._offset = int(offset)
        self._validate_layout(storage)
        self._storage: Optional[Storage] = storage

        # --- autograd fields (optional) ---
        self._requires_grad: bool = bool(requires_grad)
        self._is_leaf: bool = True
        self._grad: Optional["Tensor"] = None
        self._grad_fn: Optional[Node] = None

        self._label: Optional[str] = label
        self._owns_label: bool = False
        self._freed: bool = False

    def _validate_layout(self, storage: Storage) -> None:
        """Check that every logical index lands inside `storage`."""
        dims, strides = self._dims, self._strides
        if len(dims) != len(strides):
            raise ShapeError(
                "view",
                f"dims {dims} and strides {strides} differ in length",
            )
        if any(d < 0 for d in dims):
            raise ShapeError("view", f"negative extent in dims {dims}", shapes=[dims])
        if self._offset < 0:
            raise ShapeError("view", f"offset must be non-negative, got {self._offset}")
        if numel(dims) == 0:
            return

        lo = hi = self._offset
        for d, s in zip(dims, strides):
            if s >= 0:
                hi += (d - 1) * s
            else:
                lo += (d - 1) * s
        if lo < 0 or hi >= storage.size:
            raise ShapeError(
                "view",
                f"layout dims={dims} strides={strides} offset={self._offset} "
                f"addresses [{lo}, {hi}] outside storage of size {storage.size}",
                shapes=[dims],
            )

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def _allocate(
        cls,
        dims: tuple[int, ...],
        *,
        op: str,
        requires_grad: bool = False,
        label: Optional[str] = None,
    ) -> "Tensor":
        """Allocate fresh row-major storage for already-validated `dims`."""
        storage = Storage.allocate(numel(dims), op=op)
        return cls(storage, dims, requires_grad=requires_grad, label=label)

    @classmethod
    def empty(
        cls,
        dims: Sequence[int],
        *,
        requires_grad: bool = False,
        label: Optional[str] = None,
    ) -> "Tensor":
        """
        Create a tensor with freshly allocated, uninitialized storage.

        Parameters
        ----------
        dims : Sequence[int]
            Non-empty shape with positive extents.
        requires_grad : bool, optional
            Defaults to False.
        label : str, optional
            Display name for the tensor.

        Returns
        -------
        Tensor
            Leaf tensor with offset 0 and row-major strides.

        Raises
        ------
        ShapeError
            If `dims` is empty or has a non-positive extent.
        """
        shape = _normalize_dims(dims, op="empty", allow_zero=False)
        return cls._allocate(shape, op="empty", requires_grad=requires_grad, label=label)

    @classmethod
    def full(
        cls,
        dims: Sequence[int],
        fill_value: Number,
        *,
        requires_grad: bool = False,
        label: Optional[str] = None,
    ) -> "Tensor":
        """Create a tensor with every element set to `fill_value`."""
        shape = _normalize_dims(dims, op="full", allow_zero=False)
        out = cls._allocate(shape, op="full", requires_grad=requires_grad, label=label)
        out._storage.as_array().fill(fill_value)
        return out

    @classmethod
    def zeros(
        cls,
        dims: Sequence[int],
        *,
        requires_grad: bool = False,
        label: Optional[str] = None,
    ) -> "Tensor":
        """Create a zero-filled tensor."""
        return cls.full(dims, 0.0, requires_grad=requires_grad, label=label)

    @classmethod
    def from_list(
        cls,
        values: Sequence[Number],
        dims: Optional[Sequence[int]] = None,
        *,
        requires_grad: bool = False,
        label: Optional[str] = None,
    ) -> "Tensor":
        """
        Create a tensor from a flat sequence of numbers in row-major order.

        Parameters
        ----------
        values : Sequence[Number]
            Element values, flattened.
        dims : Sequence[int], optional
            Target shape. Defaults to ``(len(values),)``.

        Raises
        ------
        ShapeError
            If ``len(values)`` does not match the number of elements in `dims`.
        """
        flat = np.asarray(values, dtype=np.float32).reshape(-1)
        shape = (
            (flat.shape[0],)
            if dims is None
            else _normalize_dims(dims, op="from_list", allow_zero=False)
        )
        if numel(shape) != flat.shape[0]:
            raise ShapeError(
                "from_list",
                f"{flat.shape[0]} values cannot fill dims {shape} "
                f"({numel(shape)} elements)",
                shapes=[shape],
            )
        out = cls._allocate(shape, op="from_list", requires_grad=requires_grad, label=label)
        out._storage.as_array()[:] = flat
        return out

    @classmethod
    def arange(
        cls, n: int, *, requires_grad: bool = False, label: Optional[str] = None
    ) -> "Tensor":
        """
        Create the 1-D tensor ``[0, 1, ..., n-1]``.

        Elements are written one at a time in ascending order. ``arange(0)``
        yields a zero-length tensor.

        Raises
        ------
        ValueError
            If `n` is negative.
        """
        n = operator.index(n)
        if n < 0:
            raise ValueError(f"arange: n must be non-negative, got {n}")
        out = cls._allocate((n,), op="arange", requires_grad=requires_grad, label=label)
        storage = out._storage
        for i in range(n):
            storage.write(i, float(i))
        return out

    @classmethod
    def arange_multi_dim(
        cls,
        dims: Sequence[int],
        *,
        requires_grad: bool = False,
        label: Optional[str] = None,
    ) -> "Tensor":
        """
        Create a tensor of shape `dims` whose storage holds ``0..size-1``.

        Positions are filled sequentially in physical order, which for a fresh
        row-major tensor equals row-major logical order.
        """
        shape = _normalize_dims(dims, op="arange_multi_dim", allow_zero=False)
        out = cls._allocate(
            shape, op="arange_multi_dim", requires_grad=requires_grad, label=label
        )
        storage = out._storage
        for i in range(storage.size):
            storage.write(i, float(i))
        return out

    # ------------------------------------------------------------------
    # Descriptor
    # ------------------------------------------------------------------
    @property
    def storage(self) -> Optional[Storage]:
        """Backing storage, or None once the tensor has been freed."""
        return self._storage

    @property
    def dims(self) -> tuple[int, ...]:
        return self._dims

    @property
    def shape(self) -> tuple[int, ...]:
        """Alias of `dims`."""
        return self._dims

    @property
    def strides(self) -> tuple[int, ...]:
        return self._strides

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def ndims(self) -> int:
        return len(self._dims)

    @property
    def freed(self) -> bool:
        return self._freed

    def numel(self) -> int:
        """Return the number of logical elements."""
        return numel(self._dims)

    def is_contiguous(self) -> bool:
        """Whether the view's strides are dense row-major strides."""
        return is_contiguous(self._dims, self._strides)

    # ------------------------------------------------------------------
    # Autograd hooks
    # ------------------------------------------------------------------
    @property
    def requires_grad(self) -> bool:
        return self._requires_grad

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None:
        self._requires_grad = bool(value)

    @property
    def is_leaf(self) -> bool:
        """True unless an operation attached a `grad_fn`."""
        return self._is_leaf

    @property
    def grad_fn(self) -> Optional[Node]:
        return self._grad_fn

    def _set_grad_fn(self, node: Optional[Node]) -> None:
        """
        Attach or detach the differentiation record.

        This is an internal hook for operations; a tensor with a record is no
        longer a leaf.
        """
        self._grad_fn = node
        self._is_leaf = node is None

    @property
    def grad(self) -> Optional["Tensor"]:
        """Gradient buffer owned by this tensor, if any."""
        return self._grad

    @grad.setter
    def grad(self, value: Optional["Tensor"]) -> None:
        """
        Install a gradient buffer, transferring its ownership to this tensor.

        A previously owned gradient is freed. The new gradient must have the
        same dims as this tensor.
        """
        if value is not None:
            if not isinstance(value, Tensor):
                raise TypeError(f"grad must be a Tensor or None, got {type(value)!r}")
            if value.dims != self._dims:
                raise ShapeError(
                    "grad",
                    f"gradient dims {value.dims} do not match tensor dims {self._dims}",
                    shapes=[value.dims, self._dims],
                )
        previous = self._grad
        self._grad = value
        if previous is not None and previous is not value:
            previous.free()

    def zero_grad(self) -> None:
        """Free and clear the gradient buffer."""
        self.grad = None

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------
    @property
    def label(self) -> Optional[str]:
        return self._label

    @property
    def owns_label(self) -> bool:
        """Whether the label was generated by the operation that built this tensor."""
        return self._owns_label

    def _set_owned_label(self, label: Optional[str]) -> None:
        self._label = label
        self._owns_label = label is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _check_alive(self, op: str) -> Storage:
        """Return the storage, raising `TensorFreedError` after `free()`."""
        if self._freed:
            raise TensorFreedError(op)
        return self._storage

    def _make_view(
        self,
        dims: tuple[int, ...],
        strides: tuple[int, ...],
        offset: int,
        *,
        op: str,
    ) -> "Tensor":
        """
        Build a new view sharing this tensor's storage.

        The storage reference is acquired before construction and handed back
        if the layout turns out to be invalid.
        """
        storage = self._check_alive(op)
        storage.acquire()
        try:
            return self.__class__(
                storage,
                dims,
                strides,
                offset,
                requires_grad=self._requires_grad,
            )
        except BaseException:
            storage.release()
            raise

    def _as_ndarray(self) -> np.ndarray:
        """
        Return a read-only NumPy view with this tensor's logical layout.

        The array aliases the storage buffer and must not outlive the tensor.
        """
        buffer = self._check_alive("as_ndarray").as_array()
        itemsize = buffer.itemsize
        return as_strided(
            buffer[self._offset :],
            shape=self._dims,
            strides=tuple(s * itemsize for s in self._strides),
            writeable=False,
        )

    def to_numpy(self) -> np.ndarray:
        """Return a contiguous ``float32`` copy of the tensor's values."""
        return np.array(self._as_ndarray(), dtype=np.float32, copy=True)

    def to_list(self) -> list:
        """Return the values as nested Python lists of floats."""
        return self._as_ndarray().tolist()

    def free(self) -> None:
        """
        Release this view's storage reference and drop its metadata.

        - The storage reference is released exactly once; the buffer is freed
          when the last view lets go.
        - An owned gradient buffer is freed as well, and `grad_fn` is dropped.
        - A generated label is dropped; a caller-supplied label is kept.

        Calling `free()` again is a no-op and emits a `RuntimeWarning`.
        """
        if self._freed:
            warnings.warn(
                "free() called on a tensor that has already been freed",
                RuntimeWarning,
                stacklevel=2,
            )
            return

        self._freed = True
        storage, self._storage = self._storage, None
        self._dims = ()
        self._strides = ()

        grad, self._grad = self._grad, None
        self._grad_fn = None
        if self._owns_label:
            self._label = None
            self._owns_label = False

        storage.release()
        if grad is not None and not grad.freed:
            grad.free()

    def __enter__(self) -> "Tensor":
        return self

    def __exit__(self, *args) -> None:
        if not self._freed:
            self.free()

    def __repr__(self) -> str:
        if self._freed:
            return "Tensor(<freed>)"
        parts = [
            f"dims={self._dims}",
            f"strides={self._strides}",
            f"offset={self._offset}",
        ]
        if self._requires_grad:
            parts.append("requires_grad=True")
        if self._grad_fn is not None:
            parts.append(f"grad_fn={self._grad_fn.kind.name}")
        if self._label is not None:
            parts.append(f"label={self._label!r}")
        return f"Tensor({', '.join(parts)})"
