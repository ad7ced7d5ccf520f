"""
stridelite - a minimal strided-tensor engine.

A contiguous ``float32`` storage buffer is shared by lightweight tensor views,
each with its own shape, strides and offset. Storage lifetime is tied to a
reference count: every view holds one reference and `free()` gives it back.

Typical use::

    import stridelite as sl

    x = sl.arange(10)
    evens = x.slice([0], [10], [2])   # shares storage with x
    print(evens.to_list())            # [0.0, 2.0, 4.0, 6.0, 8.0]
    sl.free(evens)
    sl.free(x)                        # buffer released here
"""

from __future__ import annotations

__version__ = "0.1.0"

from .domain._errors import (
    AllocationFailure,
    InvalidStepError,
    ShapeError,
    StorageReleasedError,
    StrideliteError,
    TensorFreedError,
    TensorIndexError,
)
from .domain._function import (
    OpKind,
    backward_for,
    register_backward,
    unregister_backward,
)
from .infrastructure._allocation import (
    NumpyAllocator,
    allocate_buffer,
    get_allocator,
    release_buffer,
    set_allocator,
    use_allocator,
)
from .infrastructure._config import (
    OOMPolicy,
    Settings,
    get_settings,
    load_settings,
    override_settings,
    reset_settings,
)
from .infrastructure._functional import (
    add,
    add_scalar,
    arange,
    arange_multi_dim,
    empty,
    free,
    from_list,
    full,
    get_item,
    reshape,
    set_item,
    slice,
    zeros,
)
from .infrastructure._logging import setup_logging
from .infrastructure.tensor import Node, Storage, Tensor
from .infrastructure.tensor._strides import (
    compute_strides,
    is_contiguous,
    iter_indices,
    logical_to_physical,
)

__all__ = [
    # Core types
    "Storage",
    "Tensor",
    "Node",
    # Constructors and operations
    "empty",
    "zeros",
    "full",
    "from_list",
    "arange",
    "arange_multi_dim",
    "reshape",
    "slice",
    "get_item",
    "set_item",
    "add",
    "add_scalar",
    "free",
    # Stride/index engine
    "compute_strides",
    "is_contiguous",
    "iter_indices",
    "logical_to_physical",
    # Differentiation hook
    "OpKind",
    "register_backward",
    "unregister_backward",
    "backward_for",
    # Allocation and configuration
    "NumpyAllocator",
    "allocate_buffer",
    "get_allocator",
    "release_buffer",
    "set_allocator",
    "use_allocator",
    "OOMPolicy",
    "Settings",
    "get_settings",
    "load_settings",
    "override_settings",
    "reset_settings",
    "setup_logging",
    # Exceptions
    "StrideliteError",
    "AllocationFailure",
    "TensorIndexError",
    "ShapeError",
    "InvalidStepError",
    "TensorFreedError",
    "StorageReleasedError",
]
