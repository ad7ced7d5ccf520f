"""
Elementwise addition kernels.

Two execution paths produce identical results:

- **dense path**: both operands are row-major with offset 0, so logical
  position ``k`` is physical position ``k`` in each storage and the buffers
  are added position by position;
- **strided path**: at least one operand is a non-contiguous or offset view
  (e.g., a slice). Operands are read through their logical layout instead,
  which is always correct but walks memory irregularly.

The result always gets fresh row-major storage.
"""

from __future__ import annotations

import logging

import numpy as np

from .....domain._errors import ShapeError
from .....domain._function import OpKind
from ...._config import get_settings
from ..._strides import is_contiguous
from ..._tensor_context import Node

logger = logging.getLogger(__name__)


def _is_dense(t) -> bool:
    """Whether physical positions ``0..numel-1`` of `t` are its logical order."""
    return t.offset == 0 and is_contiguous(t.dims, t.strides)


def _binary_op_shape_check(a, b, op: str) -> None:
    """
    Validate shape compatibility for binary elementwise operations.

    Raises
    ------
    ShapeError
        If the operands differ in ndims or in any extent.
    """
    if a.ndims != b.ndims:
        raise ShapeError(
            op,
            f"ndims mismatch: {a.ndims} ({a.dims}) vs {b.ndims} ({b.dims})",
            shapes=[a.dims, b.dims],
        )
    if a.dims != b.dims:
        raise ShapeError(
            op, f"dims mismatch: {a.dims} vs {b.dims}", shapes=[a.dims, b.dims]
        )


def tensor_add(a, b):
    """
    Compute ``a + b`` into a new tensor.

    Parameters
    ----------
    a, b : Tensor
        Live tensors with identical dims.

    Returns
    -------
    Tensor
        Result with fresh storage. If either operand requires gradients the
        result does too and carries an ``OpKind.ADD`` record.
    """
    a_storage = a._check_alive("add")
    b_storage = b._check_alive("add")
    _binary_op_shape_check(a, b, "add")

    req = a.requires_grad or b.requires_grad
    out = a.__class__._allocate(a.dims, op="add", requires_grad=req)
    out_buf = out.storage.as_array()
    n = out_buf.shape[0]

    if _is_dense(a) and _is_dense(b):
        np.add(a_storage.as_array()[:n], b_storage.as_array()[:n], out=out_buf)
    else:
        if get_settings().debug:
            logger.debug(
                "add: strided operands (%s, %s), reading by logical index",
                a.strides,
                b.strides,
            )
        np.add(a._as_ndarray(), b._as_ndarray(), out=out_buf.reshape(a.dims))

    if req:
        out._set_grad_fn(Node.record(OpKind.ADD, (a, b), out))
    if a.label is not None and b.label is not None:
        out._set_owned_label(f"({a.label} + {b.label})")
    return out


def tensor_add_scalar(t, scalar: float):
    """
    Compute ``t + scalar`` into a new tensor.

    Returns
    -------
    Tensor
        Result with fresh storage. If `t` requires gradients the result does
        too and carries an ``OpKind.ADD_SCALAR`` record with the scalar saved.
    """
    storage = t._check_alive("add_scalar")
    out = t.__class__._allocate(t.dims, op="add_scalar", requires_grad=t.requires_grad)
    out_buf = out.storage.as_array()
    n = out_buf.shape[0]
    value = np.float32(scalar)

    if _is_dense(t):
        np.add(storage.as_array()[:n], value, out=out_buf)
    else:
        np.add(t._as_ndarray(), value, out=out_buf.reshape(t.dims))

    if t.requires_grad:
        out._set_grad_fn(Node.record(OpKind.ADD_SCALAR, (t,), out, scalar=scalar))
    if t.label is not None:
        out._set_owned_label(f"({t.label} + {scalar:g})")
    return out
