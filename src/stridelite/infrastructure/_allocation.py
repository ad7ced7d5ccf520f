"""
Centralized allocation entry point for storage buffers.

Every float buffer used by a `Storage` is obtained through
`allocate_buffer` and handed back through the allocator that produced it.
Funnelling allocation through one place gives two seams:

- the active allocator can be swapped (`set_allocator` / `use_allocator`),
  which tests use to count allocations and frees;
- the out-of-memory policy is decided here, once, from `Settings`.

Out-of-memory policy
--------------------
Under the default ``abort`` policy a failed allocation writes a diagnostic
naming the requesting operation to stderr and halts the process with exit
status 1: there is no partial-failure recovery. Under the ``raise`` policy
the failure surfaces as `AllocationFailure` instead.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import numpy as np

from ..domain._allocator import IAllocator
from ..domain._errors import AllocationFailure
from ._config import OOMPolicy, get_settings

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1


class NumpyAllocator:
    """
    Default allocator backed by ``np.empty``.

    Buffers are uninitialized ``float32`` arrays. `free` drops nothing by
    itself: NumPy returns the memory once the last reference to the array
    disappears, which happens when the owning storage lets go of it.
    """

    dtype = np.float32

    def allocate(self, size: int) -> np.ndarray:
        return np.empty(size, dtype=self.dtype)

    def free(self, buffer: np.ndarray) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dtype={np.dtype(self.dtype).name})"


_allocator: IAllocator = NumpyAllocator()


def get_allocator() -> IAllocator:
    """Return the allocator currently used for new storage."""
    return _allocator


def set_allocator(allocator: IAllocator) -> IAllocator:
    """
    Install `allocator` for subsequent allocations.

    Storage allocated earlier keeps returning its buffer to the allocator
    that produced it.

    Returns
    -------
    IAllocator
        The previously installed allocator.

    Raises
    ------
    TypeError
        If `allocator` does not provide ``allocate`` and ``free``.
    """
    global _allocator
    if not isinstance(allocator, IAllocator):
        raise TypeError(
            f"allocator must provide allocate(size) and free(buffer), got {allocator!r}"
        )
    previous = _allocator
    _allocator = allocator
    return previous


@contextmanager
def use_allocator(allocator: IAllocator) -> Iterator[IAllocator]:
    """Temporarily install `allocator` for the duration of a ``with`` block."""
    previous = set_allocator(allocator)
    try:
        yield allocator
    finally:
        set_allocator(previous)


def allocate_buffer(
    size: int,
    *,
    op: str = "allocate",
    allocator: Optional[IAllocator] = None,
) -> np.ndarray:
    """
    Obtain a 1-D ``float32`` buffer of `size` elements.

    Parameters
    ----------
    size : int
        Number of elements. Must be non-negative.
    op : str, optional
        Name of the requesting operation, used in diagnostics.
    allocator : IAllocator, optional
        Allocator to use. Defaults to the active allocator.

    Returns
    -------
    np.ndarray
        Uninitialized buffer.

    Raises
    ------
    ValueError
        If `size` is negative.
    AllocationFailure
        If memory is exhausted and the OOM policy is ``raise``.
    SystemExit
        If memory is exhausted and the OOM policy is ``abort``.
    """
    if size < 0:
        raise ValueError(f"{op}: buffer size must be non-negative, got {size}")

    alloc = _allocator if allocator is None else allocator
    try:
        buffer = alloc.allocate(int(size))
    except MemoryError as e:
        if get_settings().oom_policy is OOMPolicy.RAISE:
            raise AllocationFailure(op, int(size)) from e
        print(
            f"Memory allocation failed in {op} ({size} elements)",
            file=sys.stderr,
        )
        raise SystemExit(EXIT_FAILURE) from e

    if buffer.ndim != 1 or buffer.shape[0] != size:
        raise AssertionError(
            f"{alloc!r} returned a buffer of shape {buffer.shape} for size {size}"
        )

    if get_settings().debug:
        logger.debug("allocated %d elements for %s via %r", size, op, alloc)
    return buffer


def release_buffer(buffer: np.ndarray, *, allocator: Optional[IAllocator] = None) -> None:
    """
    Hand `buffer` back to `allocator` (the active one by default).

    Storage passes the allocator that produced the buffer, so swapping the
    active allocator never redirects frees of older buffers.
    """
    alloc = _allocator if allocator is None else allocator
    alloc.free(buffer)
    if get_settings().debug:
        logger.debug("returned %d elements to %r", buffer.shape[0], alloc)
