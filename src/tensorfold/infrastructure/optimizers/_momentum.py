"""
Momentum optimizer implementation.

The velocity buffer is a `LazyBuffer`: it is zero-initialized to the shape
of the first gradient it receives and lives for as long as the owning
layer. It is never persisted; checkpoints only store parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeVar, Union

from ...domain._tensor import ITensor
from ._schedules import LearningRateSchedule, as_schedule
from ._state import LazyBuffer

T = TypeVar("T", bound=ITensor)


@dataclass
class Momentum:
    """
    SGD with classical momentum.

    Update rule
    -----------
    For parameters ``p`` with gradient ``g`` at epoch ``e``:

        ``v <- momentum * v + lr(e) * g``
        ``p <- p - v``

    With a constant gradient the step ``v`` grows strictly and converges to
    ``lr * g / (1 - momentum)``.

    Parameters
    ----------
    lr : float or LearningRateSchedule, optional
        Learning rate or schedule. Defaults to 1e-2.
    momentum : float, optional
        Velocity decay. Must be in ``[0, 1)``. Defaults to 0.9.
    """

    lr: LearningRateSchedule
    momentum: float = 0.9
    velocity: LazyBuffer = field(repr=False, compare=False, default=None)  # type: ignore[assignment]

    def __init__(
        self,
        lr: Union[float, LearningRateSchedule] = 1e-2,
        momentum: float = 0.9,
    ) -> None:
        """
        Construct a Momentum optimizer.

        Raises
        ------
        ValueError
            If `lr` is a number ``<= 0`` or `momentum` is outside ``[0, 1)``.
        """
        self.lr = as_schedule(lr)
        self.momentum = float(momentum)
        if not 0.0 <= self.momentum < 1.0:
            raise ValueError(f"momentum must be in [0, 1), got {self.momentum}")
        self.velocity = LazyBuffer("Momentum.velocity")

    def fresh(self) -> "Momentum":
        return Momentum(self.lr, momentum=self.momentum)

    def update_parameters(self, epoch: int, parameters: T, gradient: T) -> T:
        v_prev = self.velocity.initialize_like(gradient)
        v = v_prev * self.momentum + gradient * self.lr(epoch)
        self.velocity.value = v
        return parameters - v
