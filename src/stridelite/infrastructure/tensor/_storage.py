"""
Storage and lifetime management.

This module defines `Storage`, a reference-counted owner of one contiguous
``float32`` buffer. Tensors never own data directly: every tensor is a view
(shape, strides, offset) over a `Storage`, and several tensors may view the
same storage at once (e.g., after `reshape` or `slice`).

Core Concepts
-------------
- **Reference counting**:
    A storage is born with a count of 1, held by the tensor that requested
    it. Each additional view calls `acquire()`; each `Tensor.free()` calls
    `release()`. The buffer goes back to its allocator exactly once, when the
    count reaches zero.

- **Finalization safety**:
    A `weakref.finalize` callback returns the buffer if a storage is
    garbage-collected while still owned (tensors dropped without `free()`).
    Deterministic release invokes the same finalizer, which then becomes
    dead, so the allocator never sees the same buffer twice.

- **Raw access**:
    `read`/`write` take a *physical* index. They are internal primitives
    reached only after the stride/index engine validated the logical index,
    so an out-of-range physical index is a programming error and raises
    `AssertionError`.

Concurrency
-----------
Counts are plain integers and buffer access is unsynchronized. Sharing a
storage between threads is unsupported. Overlapping views may write the same
element; ordering such writes is the caller's responsibility.
"""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ...domain._allocator import IAllocator
from ...domain._errors import StorageReleasedError
from .._allocation import allocate_buffer, get_allocator, release_buffer
from .._config import get_settings

logger = logging.getLogger(__name__)


def _return_buffer(allocator: IAllocator, buffer: np.ndarray) -> None:
    # Module-level so the finalizer does not capture the storage itself.
    release_buffer(buffer, allocator=allocator)


@dataclass(eq=False)
class Storage:
    """
    Reference-counted contiguous buffer shared by tensor views.

    Use `Storage.allocate(size)` rather than the constructor; it routes
    through the centralized allocation entry point.

    Notes
    -----
    - This class intentionally avoids defining `__del__`; the finalizer
      covers collection-time cleanup.
    - After the count reaches zero the storage is logically invalid. Any
      further `acquire`/`release` raises `StorageReleasedError`, and any
      `read`/`write` raises `AssertionError`.
    """

    _buffer: Optional[np.ndarray]
    _allocator: IAllocator = field(repr=False)
    _size: int = 0
    _refcnt: int = 1
    _finalizer: Optional[weakref.finalize] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._size = int(self._buffer.shape[0])
        self._finalizer = weakref.finalize(
            self, _return_buffer, self._allocator, self._buffer
        )

    @classmethod
    def allocate(cls, size: int, *, op: str = "allocate") -> "Storage":
        """
        Allocate a storage holding `size` uninitialized elements.

        Parameters
        ----------
        size : int
            Number of ``float32`` elements. Must be non-negative.
        op : str, optional
            Requesting operation, used in allocation diagnostics.

        Returns
        -------
        Storage
            New storage with a reference count of 1.
        """
        allocator = get_allocator()
        buffer = allocate_buffer(size, op=op, allocator=allocator)
        storage = cls(buffer, allocator)
        if get_settings().debug:
            logger.debug("storage %#x allocated (%d elements)", id(storage), size)
        return storage

    @property
    def size(self) -> int:
        return self._size

    @property
    def refcount(self) -> int:
        return self._refcnt

    @property
    def released(self) -> bool:
        return self._buffer is None

    def _check_index(self, index: int, op: str) -> np.ndarray:
        buffer = self._buffer
        if buffer is None:
            raise AssertionError(f"{op}: storage has already been released")
        if not 0 <= index < self._size:
            raise AssertionError(
                f"{op}: physical index {index} outside storage of size {self._size}"
            )
        return buffer

    def read(self, index: int) -> float:
        """Return the element at physical position `index`."""
        return float(self._check_index(index, "read")[index])

    def write(self, index: int, value: float) -> None:
        """Store `value` at physical position `index`."""
        self._check_index(index, "write")[index] = value

    def as_array(self) -> np.ndarray:
        """
        Return the raw 1-D buffer.

        Intended for kernels that operate on whole buffers. The returned array
        aliases the storage and must not outlive it.
        """
        if self._buffer is None:
            raise AssertionError("as_array: storage has already been released")
        return self._buffer

    def acquire(self) -> None:
        """
        Increment the reference count.

        Called whenever an additional tensor view starts sharing this storage.
        """
        if self._buffer is None:
            raise StorageReleasedError("acquire")
        self._refcnt += 1
        if get_settings().debug:
            logger.debug("storage %#x acquired (refcount=%d)", id(self), self._refcnt)

    def release(self) -> None:
        """
        Decrement the reference count and free the buffer when it reaches zero.

        Each tensor calls this exactly once per reference it holds.
        """
        if self._buffer is None:
            raise StorageReleasedError("release")
        self._refcnt -= 1
        if get_settings().debug:
            logger.debug("storage %#x released (refcount=%d)", id(self), self._refcnt)
        if self._refcnt == 0:
            if self._finalizer is not None and self._finalizer.alive:
                self._finalizer()
            self._buffer = None
            if get_settings().debug:
                logger.debug("storage %#x freed (%d elements)", id(self), self._size)
