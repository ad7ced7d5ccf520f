"""
Functional call surface.

Module-level functions mirroring the Tensor methods, for callers that prefer
``stridelite.reshape(t, dims)`` over ``t.reshape(dims)``. Each one delegates
to the corresponding method, so behavior and errors are identical.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

from .tensor._tensor import Tensor

Number = Union[int, float]


def empty(dims: Sequence[int], *, requires_grad: bool = False) -> Tensor:
    return Tensor.empty(dims, requires_grad=requires_grad)


def zeros(dims: Sequence[int], *, requires_grad: bool = False) -> Tensor:
    return Tensor.zeros(dims, requires_grad=requires_grad)


def full(dims: Sequence[int], fill_value: Number, *, requires_grad: bool = False) -> Tensor:
    return Tensor.full(dims, fill_value, requires_grad=requires_grad)


def from_list(
    values: Sequence[Number],
    dims: Optional[Sequence[int]] = None,
    *,
    requires_grad: bool = False,
) -> Tensor:
    return Tensor.from_list(values, dims, requires_grad=requires_grad)


def arange(n: int, *, requires_grad: bool = False) -> Tensor:
    return Tensor.arange(n, requires_grad=requires_grad)


def arange_multi_dim(dims: Sequence[int], *, requires_grad: bool = False) -> Tensor:
    return Tensor.arange_multi_dim(dims, requires_grad=requires_grad)


def reshape(tensor: Tensor, new_dims: Sequence[int]) -> Tensor:
    return tensor.reshape(new_dims)


def slice(  # noqa: A001 - mirrors Tensor.slice
    tensor: Tensor,
    starts: Sequence[int],
    ends: Sequence[int],
    steps: Sequence[int],
) -> Tensor:
    return tensor.slice(starts, ends, steps)


def get_item(tensor: Tensor, indices: Sequence[int]) -> float:
    return tensor.get_item(indices)


def set_item(tensor: Tensor, indices: Sequence[int], value: Number) -> None:
    tensor.set_item(indices, value)


def add(a: Tensor, b: Tensor) -> Tensor:
    return a.add(b)


def add_scalar(tensor: Tensor, scalar: Number) -> Tensor:
    return tensor.add_scalar(scalar)


def free(tensor: Optional[Tensor]) -> None:
    """
    Release `tensor`'s storage reference.

    ``free(None)`` is a no-op, so callers can free optional tensors
    unconditionally.
    """
    if tensor is None:
        return
    tensor.free()
