"""
Optimizer primitives for tensorfold.

This module is the public entry point for optimizers and learning-rate
schedules. It re-exports the implementations from the `optimizers`
package and provides short factory helpers used when building layers:

    Dense(4, 8, adam(1e-3))
    Dense(8, 1, momentum(InverseTimeDecay(0.1, 0.01)))

Design notes
------------
- The object handed to a layer is a *prototype*. Each learnable layer calls
  `fresh()` once per learnable tensor, so optimizer state is owned 1:1 by a
  (layer, tensor) pair and never shared.
- Optimizer math is expressed entirely in terms of tensor operations;
  backend-specific numerics stay inside the tensor classes.
"""

from __future__ import annotations

from typing import Tuple, Union

from .optimizers._adam import Adam
from .optimizers._momentum import Momentum
from .optimizers._schedules import (
    Constant,
    ExponentialDecay,
    InverseTimeDecay,
    LearningRateSchedule,
    PiecewiseConstant,
)
from .optimizers._sgd import SGD

Optimizer = Union[SGD, Momentum, Adam]

LearningRate = Union[float, LearningRateSchedule]


def sgd(lr: LearningRate = 1e-2) -> SGD:
    return SGD(lr)


def momentum(lr: LearningRate = 1e-2, momentum: float = 0.9) -> Momentum:
    return Momentum(lr, momentum=momentum)


def adam(
    lr: LearningRate = 1e-3,
    *,
    betas: Tuple[float, float] = (0.9, 0.999),
    eps: float = 1e-8,
) -> Adam:
    return Adam(lr, betas=betas, eps=eps)


__all__ = [
    SGD.__name__,
    Momentum.__name__,
    Adam.__name__,
    Constant.__name__,
    InverseTimeDecay.__name__,
    ExponentialDecay.__name__,
    PiecewiseConstant.__name__,
    "Optimizer",
    "sgd",
    "momentum",
    "adam",
]
