"""
Stochastic Gradient Descent (SGD) optimizer implementation.

Design notes
------------
- One instance is bound to one learnable tensor; layers call `fresh()` on a
  prototype to obtain it.
- SGD is stateless, so `fresh()` only copies hyperparameters.
- The learning rate is a schedule evaluated with the epoch passed in by
  the layer's backward pass.

Momentum and Adam live in separate modules under the optimizers package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar, Union

from ...domain._tensor import ITensor
from ._schedules import LearningRateSchedule, as_schedule

T = TypeVar("T", bound=ITensor)


@dataclass
class SGD:
    """
    Stochastic Gradient Descent (SGD) optimizer.

    Update rule
    -----------
    For parameters ``p`` with gradient ``g`` at epoch ``e``:

        ``p <- p - lr(e) * g``

    Parameters
    ----------
    lr : float or LearningRateSchedule, optional
        Learning rate or schedule. Plain numbers must be positive and are
        wrapped in `Constant`. Defaults to 1e-2.

    Notes
    -----
    A zero gradient leaves the parameters unchanged for every epoch.
    """

    lr: LearningRateSchedule

    def __init__(self, lr: Union[float, LearningRateSchedule] = 1e-2) -> None:
        """
        Construct an SGD optimizer.

        Raises
        ------
        ValueError
            If `lr` is a number ``<= 0``.
        """
        self.lr = as_schedule(lr)

    def fresh(self) -> "SGD":
        return SGD(self.lr)

    def update_parameters(self, epoch: int, parameters: T, gradient: T) -> T:
        """
        Return ``parameters - lr(epoch) * gradient``.
        """
        return parameters - gradient * self.lr(epoch)
