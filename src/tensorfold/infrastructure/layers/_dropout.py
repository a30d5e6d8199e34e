"""
Dropout regularization layer for tensorfold.

This module implements inverted dropout. While enabled, every forward call
draws a fresh Bernoulli mask, zeroes elements with probability `rate` and
rescales the survivors by ``1 / (1 - rate)`` so the expected activation is
unchanged. While disabled the layer is the identity.

Design notes
------------
- Networks enable dropout for training batches and disable it for
  prediction and evaluation; layers start disabled.
- The backward pass reuses the mask of the most recent forward call.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ...domain._layer import LayerKind
from ._layer import Layer


class Dropout(Layer):
    """
    Inverted dropout layer.

    Behavior
    --------
    - Enabled:
        y = x * mask / (1 - rate), where mask ~ Bernoulli(1 - rate)
    - Disabled:
        y = x (identity)

    Parameters
    ----------
    rate : float
        Probability of dropping an element. Must satisfy 0.0 <= rate < 1.0.
    """

    kind = LayerKind.DROPOUT

    def __init__(self, rate: float) -> None:
        self.rate = float(rate)
        if not 0.0 <= self.rate < 1.0:
            raise ValueError(f"Dropout rate must be in [0, 1), got {self.rate}")
        self.enabled = False
        self._mask: Optional[Any] = None

    def as_dropout(self) -> "Dropout":
        return self

    def enable_dropout(self) -> None:
        self.enabled = True

    def disable_dropout(self) -> None:
        self.enabled = False
        self._mask = None

    def forward(self, input: Any) -> Any:
        if not self.enabled or self.rate == 0.0:
            self._mask = None
            return input
        keep = 1.0 - self.rate
        noise = type(input).random_uniform(*input.shape)
        self._mask = noise.greater_than(self.rate) / keep
        return input * self._mask

    def backward(self, epoch: int, output_gradient: Any) -> Any:
        if self._mask is None:
            # identity pass
            return output_gradient
        return output_gradient * self._mask

    def get_config(self) -> Dict[str, Any]:
        return {"rate": self.rate}
