from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ...domain._function import BackwardFn, OpKind, backward_for
from ...domain._tensor import ITensor


@dataclass(eq=False)
class Node:
    """
    Differentiation record attached to a tensor produced by an operation.

    A `Node` is inert: it captures which operation produced a tensor and
    from which inputs, for an external autograd engine to traverse. Nothing
    in stridelite invokes `backward_fn`.

    Attributes
    ----------
    kind : OpKind
        Operation that produced `output`.
    inputs : Sequence[ITensor]
        Operands of the operation, in call order.
    saved_meta : dict[str, Any]
        Non-tensor values a backward rule may need (shapes, scalars, ...).

    Notes
    -----
    The output is held through a weak reference so that the cycle
    ``output.grad_fn.output`` does not keep tensors alive.
    """

    kind: OpKind
    inputs: Sequence["ITensor"]
    saved_meta: dict[str, Any] = field(default_factory=dict)
    _output_ref: Optional[weakref.ReferenceType] = field(default=None, repr=False)

    @classmethod
    def record(
        cls, kind: OpKind, inputs: Sequence["ITensor"], output: "ITensor", **meta: Any
    ) -> "Node":
        """Build a node for `output` and return it (does not attach it)."""
        node = cls(kind=kind, inputs=tuple(inputs), saved_meta=dict(meta))
        node._output_ref = weakref.ref(output)
        return node

    @property
    def output(self) -> Optional["ITensor"]:
        """The produced tensor, or None if it has been garbage-collected."""
        return None if self._output_ref is None else self._output_ref()

    @property
    def backward_fn(self) -> BackwardFn:
        """
        Backward rule registered for `kind`.

        Raises
        ------
        NotImplementedError
            If no autograd component registered a rule for this kind.
        """
        return backward_for(self.kind)
