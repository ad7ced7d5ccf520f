"""
Stride and index arithmetic.

Pure functions shared by the view constructors and the indexing paths:

- `compute_strides` derives row-major strides from a shape;
- `logical_to_physical` maps a logical multi-index on a strided view to a
  physical position in its storage, normalizing negative indices and
  checking bounds;
- `is_contiguous` and `numel` support the view constructors and the
  elementwise layer;
- `iter_indices` enumerates logical indices in row-major order for callers
  that walk a view element by element.

Out-of-range indices raise `TensorIndexError` and a wrong number of indices
raises `ShapeError`. No function here returns a sentinel value in place of
an error.
"""

from __future__ import annotations

import itertools
from typing import Iterator, Sequence

from ...domain._errors import ShapeError, TensorIndexError
from ...domain._tensor import IStridedView


def compute_strides(dims: Sequence[int]) -> tuple[int, ...]:
    """
    Return row-major (C-order) strides for `dims`.

    The last dimension has stride 1 and every other stride is the product of
    all trailing extents:

        strides[i] = dims[i+1] * strides[i+1]

    Examples
    --------
    >>> compute_strides((2, 3, 4))
    (12, 4, 1)
    """
    strides = [1] * len(dims)
    for i in range(len(dims) - 2, -1, -1):
        strides[i] = int(dims[i + 1]) * strides[i + 1]
    return tuple(strides)


def numel(dims: Sequence[int]) -> int:
    """Return the number of elements described by `dims`."""
    n = 1
    for d in dims:
        n *= int(d)
    return n


def is_contiguous(dims: Sequence[int], strides: Sequence[int]) -> bool:
    """
    Check whether `strides` lay out `dims` densely in row-major order.

    Extent-1 dimensions are ignored since their stride never contributes to
    an offset. A view with no elements is trivially contiguous.
    """
    if any(d == 0 for d in dims):
        return True
    expected = 1
    for d, s in zip(reversed(dims), reversed(strides)):
        if d != 1 and s != expected:
            return False
        expected *= d
    return True


def normalize_index(index: int, extent: int, dim: int, *, op: str) -> int:
    """
    Normalize a possibly negative `index` against `extent` and bounds-check it.

    Raises
    ------
    TensorIndexError
        If the normalized index falls outside ``[0, extent)``.
    """
    i = int(index)
    if i < 0:
        i += extent
    if i < 0 or i >= extent:
        raise TensorIndexError(op, dim=dim, index=int(index), extent=extent)
    return i


def logical_to_physical(
    view: IStridedView, indices: Sequence[int], *, op: str = "logical_to_physical"
) -> int:
    """
    Translate a logical multi-index into a physical storage position.

    Parameters
    ----------
    view : IStridedView
        Descriptor providing `dims`, `strides` and `offset`.
    indices : Sequence[int]
        One index per dimension. Negative entries count from the end.
    op : str, optional
        Operation name reported in errors.

    Returns
    -------
    int
        ``view.offset + sum(indices[i] * view.strides[i])`` after
        normalization.

    Raises
    ------
    ShapeError
        If ``len(indices) != len(view.dims)``.
    TensorIndexError
        If any normalized index is out of range for its dimension.
    """
    dims = tuple(view.dims)
    if len(indices) != len(dims):
        raise ShapeError(
            op,
            f"expected {len(dims)} indices for dims {dims}, got {len(indices)}",
            shapes=[dims],
        )
    pos = view.offset
    for dim, (index, extent, stride) in enumerate(
        zip(indices, view.dims, view.strides)
    ):
        pos += normalize_index(index, extent, dim, op=op) * stride
    return pos


def iter_indices(dims: Sequence[int]) -> Iterator[tuple[int, ...]]:
    """Yield every logical index of `dims` in row-major order."""
    return itertools.product(*(range(int(d)) for d in dims))
