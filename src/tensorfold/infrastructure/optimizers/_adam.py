"""
Adam optimizer implementation.

This module provides a tensorfold implementation of the Adam optimization
algorithm (Kingma & Ba, 2015). Adam maintains exponential moving averages of
both the gradient (first moment) and the squared gradient (second moment)
for the single tensor it is bound to, and applies bias-corrected updates.

Design notes
------------
- Moment buffers are `LazyBuffer`s shaped from the first gradient.
- The bias-correction step count is derived from the epoch index passed by
  the layer (``t = epoch + 1``), not from an internal counter. Several
  batches within one epoch therefore share the same correction factor.
- Buffers are never persisted; checkpoints store parameters only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, TypeVar, Union

from ...domain._tensor import ITensor
from ._schedules import LearningRateSchedule, as_schedule
from ._state import LazyBuffer

T = TypeVar("T", bound=ITensor)


@dataclass
class Adam:
    """
    Adam optimizer.

    Update rule
    -----------
    For parameters ``p`` with gradient ``g`` at epoch ``e`` and ``t = e + 1``:

    - ``m <- beta1 * m + (1 - beta1) * g``
    - ``v <- beta2 * v + (1 - beta2) * g^2``
    - ``m_hat <- m / (1 - beta1^t)``
    - ``v_hat <- v / (1 - beta2^t)``
    - ``p <- p - lr(e) * m_hat / (sqrt(v_hat) + eps)``

    Parameters
    ----------
    lr : float or LearningRateSchedule, optional
        Learning rate or schedule. Defaults to 1e-3.
    betas : tuple[float, float], optional
        Decay rates for the first and second moments. Each must be in
        ``[0, 1)``. Defaults to (0.9, 0.999).
    eps : float, optional
        Numerical stability constant. Must be > 0. Defaults to 1e-8.
    """

    lr: LearningRateSchedule
    betas: Tuple[float, float] = (0.9, 0.999)
    eps: float = 1e-8
    m: LazyBuffer = field(repr=False, compare=False, default=None)  # type: ignore[assignment]
    v: LazyBuffer = field(repr=False, compare=False, default=None)  # type: ignore[assignment]

    def __init__(
        self,
        lr: Union[float, LearningRateSchedule] = 1e-3,
        *,
        betas: Tuple[float, float] = (0.9, 0.999),
        eps: float = 1e-8,
    ) -> None:
        """
        Construct an Adam optimizer.

        Raises
        ------
        ValueError
            If hyperparameters are outside their valid ranges.
        """
        self.lr = as_schedule(lr)
        self.betas = (float(betas[0]), float(betas[1]))
        self.eps = float(eps)

        b1, b2 = self.betas
        if not (0.0 <= b1 < 1.0):
            raise ValueError(f"beta1 must be in [0, 1), got {b1}")
        if not (0.0 <= b2 < 1.0):
            raise ValueError(f"beta2 must be in [0, 1), got {b2}")
        if self.eps <= 0.0:
            raise ValueError(f"eps must be > 0, got {self.eps}")

        self.m = LazyBuffer("Adam.m")
        self.v = LazyBuffer("Adam.v")

    def fresh(self) -> "Adam":
        return Adam(self.lr, betas=self.betas, eps=self.eps)

    def update_parameters(self, epoch: int, parameters: T, gradient: T) -> T:
        b1, b2 = self.betas
        t = int(epoch) + 1

        m_prev = self.m.initialize_like(gradient)
        v_prev = self.v.initialize_like(gradient)

        m = m_prev * b1 + gradient * (1.0 - b1)
        v = v_prev * b2 + gradient.square() * (1.0 - b2)
        self.m.value = m
        self.v.value = v

        m_hat = m / (1.0 - b1**t)
        v_hat = v / (1.0 - b2**t)

        return parameters - m_hat * self.lr(epoch) / (v_hat.sqrt() + self.eps)
