"""
Arithmetic mixin for value tensors.

Implements ``+ - * /`` (and their reflected forms) plus negation. Every
operator accepts either a Python scalar or a tensor of the same rank and
returns a new tensor of the caller's concrete type.

Broadcasting
------------
Only the sample (last) dimension broadcasts, and only when one side has
exactly one sample. This is what allows ``weights.dot(x) + bias`` with a
``j x 1`` bias. Every other shape difference raises `ShapeMismatchError`
from `Tensor._operand`.
"""

from __future__ import annotations

from typing import Any, Callable, Union

import numpy as np

Number = Union[int, float]


class TensorMixinArithmetic:
    """
    Elementwise arithmetic operators.

    The host class must provide ``_data``, ``_wrap`` and ``_operand``.
    """

    # NumPy scalars on the left defer to our reflected operators
    __array_ufunc__ = None

    def _binary(self: Any, other: Any, op: str, fn: Callable) -> Any:
        rhs = self._operand(other, op)
        if rhs is NotImplemented:
            return NotImplemented
        return self._wrap(fn(self._data, rhs))

    def _rbinary(self: Any, other: Any, op: str, fn: Callable) -> Any:
        lhs = self._operand(other, op)
        if lhs is NotImplemented:
            return NotImplemented
        return self._wrap(fn(lhs, self._data))

    def __add__(self, other):
        return self._binary(other, "add", np.add)

    def __radd__(self, other):
        return self._rbinary(other, "add", np.add)

    def __sub__(self, other):
        return self._binary(other, "sub", np.subtract)

    def __rsub__(self, other):
        return self._rbinary(other, "sub", np.subtract)

    def __mul__(self, other):
        return self._binary(other, "mul", np.multiply)

    def __rmul__(self, other):
        return self._rbinary(other, "mul", np.multiply)

    def __truediv__(self, other):
        return self._binary(other, "div", np.true_divide)

    def __rtruediv__(self, other):
        return self._rbinary(other, "div", np.true_divide)

    def __neg__(self: Any):
        return self._wrap(np.negative(self._data))
