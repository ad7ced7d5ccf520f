"""
Differentiation hook definitions.

This module defines the operation-kind enumeration and the backward dispatch
table that an external automatic-differentiation engine can use to interpret
the `grad_fn` records attached to tensors produced by operations.

The core never runs backward passes. Operations only record *which* kind of
operation produced a tensor; the table maps kinds to backward rules and ships
empty, so an autograd component registers its own rules:

    @register_backward(OpKind.ADD)
    def add_backward(node, grad_out):
        return (grad_out, grad_out)

Design notes
------------
- Records carry an `OpKind` instead of a raw callback, so a node never holds
  a function that refers back to its own record type.
- Lookups are lazy: a node can be created before any rule is registered.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence

BackwardFn = Callable[[Any, Any], Sequence[Optional[Any]]]
"""Signature of a backward rule: ``(node, grad_out) -> grads per input``."""


class OpKind(Enum):
    """
    Enumeration of operations that attach a differentiation record.

    Attributes
    ----------
    ADD : OpKind
        Elementwise tensor + tensor.
    ADD_SCALAR : OpKind
        Elementwise tensor + scalar.
    """

    ADD = "add"
    ADD_SCALAR = "add_scalar"


_BACKWARD_TABLE: Dict[OpKind, BackwardFn] = {}


def register_backward(kind: OpKind) -> Callable[[BackwardFn], BackwardFn]:
    """
    Build a decorator that registers a backward rule for `kind`.

    Parameters
    ----------
    kind : OpKind
        Operation kind the decorated rule handles.

    Returns
    -------
    Callable[[BackwardFn], BackwardFn]
        Decorator returning the rule unchanged.

    Raises
    ------
    TypeError
        If `kind` is not an `OpKind`.
    """
    if not isinstance(kind, OpKind):
        raise TypeError(f"kind must be an OpKind, got {kind!r}")

    def decorator(fn: BackwardFn) -> BackwardFn:
        _BACKWARD_TABLE[kind] = fn
        return fn

    return decorator


def unregister_backward(kind: OpKind) -> Optional[BackwardFn]:
    """Remove and return the rule registered for `kind`, if any."""
    return _BACKWARD_TABLE.pop(kind, None)


def backward_for(kind: OpKind) -> BackwardFn:
    """
    Resolve the backward rule registered for `kind`.

    Raises
    ------
    NotImplementedError
        If no rule has been registered for `kind`.
    """
    try:
        return _BACKWARD_TABLE[kind]
    except KeyError:
        raise NotImplementedError(
            f"No backward rule registered for {kind.name}"
        ) from None
