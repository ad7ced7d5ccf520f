"""
Arithmetic mixin defining elementwise Tensor operators.

This module declares :class:`TensorMixinArithmetic`, the public entry points
for elementwise arithmetic. Kernels live in :mod:`._tensor_addition`; this
class only validates operand types and routes to them.

Broadcasting is not supported: tensor operands must have identical dims.
"""

from __future__ import annotations

from numbers import Real
from typing import Union

from ._tensor_addition import tensor_add, tensor_add_scalar

Number = Union[int, float]


class TensorMixinArithmetic:
    """
    Elementwise arithmetic for the concrete Tensor.

    Notes
    -----
    - Every operation allocates fresh storage for its result; operands are
      never modified.
    - When any operand requires gradients, the result carries a `grad_fn`
      record whose kind identifies the operation.
    """

    def add(self, other: "TensorMixinArithmetic"):
        """
        Elementwise ``self + other``.

        Parameters
        ----------
        other : Tensor
            Operand with exactly the same dims.

        Returns
        -------
        Tensor
            Freshly allocated result.

        Raises
        ------
        TypeError
            If `other` is not a tensor.
        ShapeError
            If the dims differ.
        """
        if not isinstance(other, TensorMixinArithmetic):
            raise TypeError(
                f"add: expected a tensor operand, got {type(other).__name__}; "
                "use add_scalar() for numbers"
            )
        return tensor_add(self, other)

    def add_scalar(self, scalar: Number):
        """
        Elementwise ``self + scalar``.

        Returns
        -------
        Tensor
            Freshly allocated tensor of the same dims holding the sums.

        Raises
        ------
        TypeError
            If `scalar` is not a real number.
        """
        if isinstance(scalar, bool) or not isinstance(scalar, Real):
            raise TypeError(
                f"add_scalar: expected a real number, got {type(scalar).__name__}"
            )
        return tensor_add_scalar(self, float(scalar))

    def __add__(self, other: Union["TensorMixinArithmetic", Number]):
        if isinstance(other, TensorMixinArithmetic):
            return self.add(other)
        if isinstance(other, Real) and not isinstance(other, bool):
            return self.add_scalar(other)
        return NotImplemented

    def __radd__(self, other: Number):
        """Right-hand addition to support ``scalar + Tensor``."""
        if isinstance(other, Real) and not isinstance(other, bool):
            return self.add_scalar(other)
        return NotImplemented
