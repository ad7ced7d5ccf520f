"""
Tensor interface definitions.

This module defines the domain-level interface for strided tensor views using
structural typing. The interface captures the descriptor fields (shape,
strides, offset) and the autograd-facing hooks that an external gradient
engine would consume, without coupling to the concrete NumPy-backed storage.

Notes
-----
The stride/index engine only needs `dims`, `strides` and `offset`, so it is
typed against the narrower `IStridedView` protocol. Full tensors satisfy both.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, Union, runtime_checkable

Number = Union[int, float]


@runtime_checkable
class IStridedView(Protocol):
    """
    Minimal shape/stride/offset descriptor.

    Any object exposing these three attributes can be translated from a
    logical multi-index into a physical storage offset.
    """

    @property
    def dims(self) -> tuple[int, ...]: ...

    @property
    def strides(self) -> tuple[int, ...]: ...

    @property
    def offset(self) -> int: ...


@runtime_checkable
class ITensor(IStridedView, Protocol):
    """
    Tensor view interface.

    An `ITensor` is a shape-stride-offset descriptor bound to a shared,
    reference-counted storage buffer. Several tensors may view the same
    storage; each one owns its own metadata.

    Notes
    -----
    - `grad_fn` is an attachment point for an external autograd component;
      nothing in this package traverses it.
    - `free()` releases this view's storage reference exactly once.
    """

    @property
    def ndims(self) -> int: ...

    @property
    def requires_grad(self) -> bool: ...

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None: ...

    @property
    def is_leaf(self) -> bool: ...

    @property
    def grad(self) -> Optional["ITensor"]: ...

    @property
    def grad_fn(self) -> Optional[Any]: ...

    @property
    def label(self) -> Optional[str]: ...

    def numel(self) -> int: ...

    def get_item(self, indices: Sequence[int]) -> float: ...

    def set_item(self, indices: Sequence[int], value: Number) -> None: ...

    def reshape(self, new_dims: Sequence[int]) -> "ITensor": ...

    def slice(
        self,
        starts: Sequence[int],
        ends: Sequence[int],
        steps: Sequence[int],
    ) -> "ITensor": ...

    def add(self, other: "ITensor") -> "ITensor": ...

    def add_scalar(self, scalar: Number) -> "ITensor": ...

    def free(self) -> None: ...
