"""
Unary elementwise mixin for value tensors.

These are the building blocks of activation functions and optimizer
update rules. Each method returns a new tensor of the caller's type.
"""

from __future__ import annotations

from typing import Any, Union

import numpy as np

Number = Union[int, float]


class TensorMixinUnary:
    """
    Elementwise unary functions.

    The host class must provide ``_data`` and ``_wrap``.
    """

    def exp(self: Any):
        return self._wrap(np.exp(self._data))

    def log(self: Any):
        return self._wrap(np.log(self._data))

    def sqrt(self: Any):
        return self._wrap(np.sqrt(self._data))

    def square(self: Any):
        return self._wrap(np.square(self._data))

    def tanh(self: Any):
        return self._wrap(np.tanh(self._data))

    def abs(self: Any):
        return self._wrap(np.abs(self._data))

    def maximum(self: Any, value: Number):
        """Elementwise ``max(x, value)``."""
        return self._wrap(np.maximum(self._data, float(value)))

    def minimum(self: Any, value: Number):
        """Elementwise ``min(x, value)``."""
        return self._wrap(np.minimum(self._data, float(value)))

    def clip(self: Any, low: Number, high: Number):
        """Clamp every element into ``[low, high]``."""
        if float(low) > float(high):
            raise ValueError(f"clip requires low <= high, got {low} > {high}")
        return self._wrap(np.clip(self._data, float(low), float(high)))

    def greater_than(self: Any, value: Number):
        """
        Return a 0/1 mask with 1.0 where ``x > value``.

        Used for the ReLU derivative and for dropout masks.
        """
        return self._wrap((self._data > float(value)).astype(self._data.dtype))
