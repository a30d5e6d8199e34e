"""
2D pooling layers.

Both variants pool non-overlapping ``size x size`` windows (stride equals
the window size). Trailing rows/cols that do not fill a window are dropped
by the forward pass and receive zero gradient.

Backward rules
--------------
- `AvgPooling`: every cell of a window receives ``g / (size * size)``.
- `MaxPooling`: the full gradient goes to the argmax cell recorded by the
  forward pass; all other cells of the window receive zero.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ...domain._layer import LayerKind
from ..tensor import Image
from ._layer import Layer


class _Pooling(Layer):
    kind = LayerKind.POOLING

    def __init__(self, size: int = 2) -> None:
        self.size = int(size)
        if self.size <= 0:
            raise ValueError(f"pool size must be > 0, got {size}")
        self._input_dims: Optional[tuple] = None

    def get_config(self) -> Dict[str, Any]:
        return {"size": self.size}


class AvgPooling(_Pooling):
    """Average pooling over non-overlapping windows."""

    def forward(self, input: Image) -> Image:
        self._input_dims = input.image_dims
        return input.average_pool(self.size)

    def backward(self, epoch: int, output_gradient: Image) -> Image:
        rows, cols = self._require_cached(self._input_dims)
        up = output_gradient.upsample(self.size, rows, cols)
        return up / float(self.size * self.size)


class MaxPooling(_Pooling):
    """Max pooling over non-overlapping windows."""

    def __init__(self, size: int = 2) -> None:
        super().__init__(size)
        self._mask: Optional[Image] = None

    def forward(self, input: Image) -> Image:
        pooled, mask = input.max_pool(self.size)
        self._input_dims = input.image_dims
        self._mask = mask
        return pooled

    def backward(self, epoch: int, output_gradient: Image) -> Image:
        mask = self._require_cached(self._mask, "argmax mask")
        rows, cols = mask.image_dims
        return mask * output_gradient.upsample(self.size, rows, cols)
