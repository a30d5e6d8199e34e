"""
Reduction mixin for value tensors.

Whole-tensor reductions return Python floats. `sum_samples` reduces only
the sample (last) dimension and keeps it with size 1, which is the shape
of a bias gradient.
"""

from __future__ import annotations

from typing import Any

import numpy as np


class TensorMixinReduction:
    """
    Reductions over all elements or over the sample dimension.

    The host class must provide ``_data`` and ``_wrap``.
    """

    def sum(self: Any) -> float:
        return float(np.sum(self._data))

    def mean(self: Any) -> float:
        if self._data.size == 0:
            raise ValueError("mean of an empty tensor is undefined")
        return float(np.mean(self._data))

    def min(self: Any) -> float:
        if self._data.size == 0:
            raise ValueError("min of an empty tensor is undefined")
        return float(np.min(self._data))

    def max(self: Any) -> float:
        if self._data.size == 0:
            raise ValueError("max of an empty tensor is undefined")
        return float(np.max(self._data))

    def sum_samples(self: Any):
        """
        Sum over the sample dimension.

        Returns
        -------
        Tensor
            Tensor with the same non-sample dimensions and one sample.
        """
        return self._wrap(np.sum(self._data, axis=-1, keepdims=True))
