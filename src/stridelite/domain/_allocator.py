"""
Allocator contract for storage buffers.

Storage obtains and returns its float buffers through an object satisfying
`IAllocator`. Keeping this a structural protocol lets tests substitute an
allocation-tracking double without subclassing the default allocator.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class IAllocator(Protocol):
    """
    Duck-typed buffer allocator.

    Notes
    -----
    - `allocate` must return a 1-D ``float32`` ndarray of exactly `size`
      elements, or raise `MemoryError`.
    - `free` is called exactly once per buffer, when the owning storage's
      reference count reaches zero (or when an orphaned storage is collected).
    """

    def allocate(self, size: int) -> np.ndarray: ...

    def free(self, buffer: np.ndarray) -> None: ...
