"""
Arithmetic mixins for Tensor operations.

- addition (``add`` / ``add_scalar`` / ``__add__`` / ``__radd__``)

Kernel functions in ``_tensor_addition`` are not part of the public API.
"""

from ._base import TensorMixinArithmetic

__all__ = [
    TensorMixinArithmetic.__name__,
]
