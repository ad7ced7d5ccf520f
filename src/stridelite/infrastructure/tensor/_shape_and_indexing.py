"""
Tensor view construction and indexing mixin.

This module defines `TensorShapeAndIndexingMixin`, which implements the
operations that read or re-describe a tensor's layout without allocating new
storage (except `contiguous()` on a strided view):

- element access by logical index (`get_item` / `set_item`),
- `reshape`, which re-describes a contiguous tensor with new dims,
- `slice`, which narrows every dimension with start/end/step,
- `contiguous`, which materializes a strided view in row-major order.

Design notes
------------
- The mixin is inherited by the concrete `Tensor` class. To avoid circular
  imports it never imports `Tensor`; new tensors are built through the host
  class (`self.__class__`, `self._make_view`).
- View constructors always compute fresh `dims`/`strides`; the storage is
  the only structure shared between a tensor and its views.
- Methods assume the host class provides `_check_alive`, `_make_view`,
  `_allocate`, `_as_ndarray` and the descriptor properties.
"""

from __future__ import annotations

import operator
from collections.abc import Sequence as SequenceABC
from typing import Any, Sequence, Union

from ...domain._errors import InvalidStepError, ShapeError
from ._strides import compute_strides, is_contiguous, logical_to_physical, numel

Number = Union[int, float]


def _as_index_tuple(indices: Any, *, op: str) -> tuple[int, ...]:
    """Convert a sequence of integer-like values to a tuple of ints."""
    if not isinstance(indices, SequenceABC):
        raise TypeError(f"{op}: indices must be a sequence of ints, got {indices!r}")
    return tuple(operator.index(i) for i in indices)


class TensorShapeAndIndexingMixin:
    """
    View constructors and element indexing for the concrete Tensor.

    Notes
    -----
    - None of these methods attach a `grad_fn`: views are leaves.
    - All methods raise `TensorFreedError` when called on a freed tensor.
    """

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def _physical_index(self, indices: Sequence[int], op: str) -> int:
        self._check_alive(op)
        return logical_to_physical(self, _as_index_tuple(indices, op=op), op=op)

    def get_item(self, indices: Sequence[int]) -> float:
        """
        Read the element at a logical multi-index.

        Parameters
        ----------
        indices : Sequence[int]
            One index per dimension; negative values count from the end.

        Returns
        -------
        float
            The element value.

        Raises
        ------
        ShapeError
            If ``len(indices) != ndims``.
        TensorIndexError
            If an index is out of range after normalization.
        """
        pos = self._physical_index(indices, "get_item")
        return self._storage.read(pos)

    def set_item(self, indices: Sequence[int], value: Number) -> None:
        """
        Write `value` at a logical multi-index.

        The write lands in shared storage, so every view aliasing that element
        observes it.
        """
        pos = self._physical_index(indices, "set_item")
        self._storage.write(pos, float(value))

    def __getitem__(self, key: Union[int, Sequence[int]]) -> float:
        if isinstance(key, SequenceABC):
            return self.get_item(key)
        return self.get_item((key,))

    def __setitem__(self, key: Union[int, Sequence[int]], value: Number) -> None:
        if isinstance(key, SequenceABC):
            self.set_item(key, value)
        else:
            self.set_item((key,), value)

    def __iter__(self):
        # Without this, iter() falls back to __getitem__ with single ints.
        raise TypeError(
            f"{type(self).__name__} is not iterable; use to_list() or get_item()"
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def reshape(self, new_dims: Sequence[int]):
        """
        Return a view of the same storage with shape `new_dims`.

        Parameters
        ----------
        new_dims : Sequence[int]
            Target shape. At most one entry may be ``-1``; it is inferred from
            the element count.

        Returns
        -------
        Tensor
            New leaf tensor sharing storage (reference acquired), with fresh
            row-major strides and the same offset.

        Raises
        ------
        ShapeError
            If the element count changes, more than one ``-1`` is given, an
            extent is invalid, or this tensor is not contiguous.
        """
        self._check_alive("reshape")
        requested = _as_index_tuple(new_dims, op="reshape")
        if len(requested) == 0:
            raise ShapeError("reshape", "new_dims must contain at least one dimension")

        total = self.numel()
        inferred = [i for i, d in enumerate(requested) if d == -1]
        if len(inferred) > 1:
            raise ShapeError("reshape", f"only one dimension can be -1, got {requested}")
        for i, d in enumerate(requested):
            if d < -1:
                raise ShapeError("reshape", f"dimension {i} must be non-negative, got {d}")

        if inferred:
            known = numel(d for d in requested if d != -1)
            if known == 0 or total % known != 0:
                raise ShapeError(
                    "reshape",
                    f"cannot infer -1 in {requested} for {total} elements",
                    shapes=[self.dims, requested],
                )
            shape = tuple(total // known if d == -1 else d for d in requested)
        else:
            shape = requested

        if numel(shape) != total:
            raise ShapeError(
                "reshape",
                f"cannot reshape dims {self.dims} ({total} elements) "
                f"into {shape} ({numel(shape)} elements)",
                shapes=[self.dims, shape],
            )
        if not is_contiguous(self.dims, self.strides):
            raise ShapeError(
                "reshape",
                f"view with dims {self.dims} and strides {self.strides} is not "
                "contiguous; call contiguous() first",
                shapes=[self.dims],
            )

        return self._make_view(shape, compute_strides(shape), self.offset, op="reshape")

    def slice(
        self,
        starts: Sequence[int],
        ends: Sequence[int],
        steps: Sequence[int],
    ):
        """
        Return a strided view selecting ``starts[i]:ends[i]:steps[i]`` per dim.

        Parameters
        ----------
        starts, ends : Sequence[int]
            Per-dimension bounds. Negative values count from the end; results
            are clamped into ``[0, dims[i]]``.
        steps : Sequence[int]
            Per-dimension positive steps.

        Returns
        -------
        Tensor
            New leaf tensor sharing storage (reference acquired) with

            - ``dims[i] = max(0, ceil((end - start) / step))``
            - ``strides[i] = self.strides[i] * step``
            - ``offset = self.offset + sum(start[i] * self.strides[i])``

        Raises
        ------
        ShapeError
            If the argument lengths do not match `ndims`.
        InvalidStepError
            If any step is zero or negative.
        """
        self._check_alive("slice")
        s = _as_index_tuple(starts, op="slice")
        e = _as_index_tuple(ends, op="slice")
        st = _as_index_tuple(steps, op="slice")
        n = self.ndims
        if not (len(s) == len(e) == len(st) == n):
            raise ShapeError(
                "slice",
                f"expected {n} starts/ends/steps for dims {self.dims}, "
                f"got {len(s)}/{len(e)}/{len(st)}",
                shapes=[self.dims],
            )

        new_dims = []
        new_strides = []
        offset = self.offset
        for i, (extent, stride) in enumerate(zip(self.dims, self.strides)):
            step = st[i]
            if step <= 0:
                raise InvalidStepError("slice", dim=i, step=step)
            start = s[i] + extent if s[i] < 0 else s[i]
            end = e[i] + extent if e[i] < 0 else e[i]
            start = min(max(start, 0), extent)
            end = min(max(end, 0), extent)

            new_dims.append(max(0, -(-(end - start) // step)))
            new_strides.append(stride * step)
            offset += start * stride

        return self._make_view(tuple(new_dims), tuple(new_strides), offset, op="slice")

    def contiguous(self):
        """
        Return a row-major tensor with the same values.

        A contiguous tensor yields a new view on the same storage; a strided
        view is copied into freshly allocated storage.
        """
        self._check_alive("contiguous")
        if is_contiguous(self.dims, self.strides):
            return self._make_view(
                self.dims, compute_strides(self.dims), self.offset, op="contiguous"
            )
        out = self.__class__._allocate(
            self.dims, op="contiguous", requires_grad=self.requires_grad
        )
        out._storage.as_array()[:] = self._as_ndarray().reshape(-1)
        return out
