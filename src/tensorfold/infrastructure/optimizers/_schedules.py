"""
Learning-rate schedules.

A schedule is a pure, immutable function ``epoch -> learning rate``.
Optimizers evaluate it on every update with the zero-based epoch index
they receive from the layer's backward pass.

Implemented schedules
---------------------
- `Constant`: fixed rate.
- `InverseTimeDecay`: ``rate / (1 + decay * epoch)``.
- `ExponentialDecay`: ``rate * decay ** (epoch / steps)``.
- `PiecewiseConstant`: rate looked up from sorted epoch boundaries.

Decaying variants are monotonically non-increasing for valid
hyperparameters. This is a convention, not something the type enforces.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Tuple, Union


@dataclass(frozen=True)
class Constant:
    """Fixed learning rate."""

    rate: float

    def __post_init__(self) -> None:
        if float(self.rate) <= 0.0:
            raise ValueError(f"rate must be > 0, got {self.rate}")

    def __call__(self, epoch: int) -> float:
        return float(self.rate)


@dataclass(frozen=True)
class InverseTimeDecay:
    """
    Inverse time decay: ``rate / (1 + decay * epoch)``.

    Parameters
    ----------
    rate : float
        Initial learning rate. Must be > 0.
    decay : float
        Decay coefficient. Must be >= 0.
    """

    rate: float
    decay: float

    def __post_init__(self) -> None:
        if float(self.rate) <= 0.0:
            raise ValueError(f"rate must be > 0, got {self.rate}")
        if float(self.decay) < 0.0:
            raise ValueError(f"decay must be >= 0, got {self.decay}")

    def __call__(self, epoch: int) -> float:
        return float(self.rate) / (1.0 + float(self.decay) * int(epoch))


@dataclass(frozen=True)
class ExponentialDecay:
    """
    Exponential decay: ``rate * decay ** (epoch / steps)``.

    Parameters
    ----------
    rate : float
        Initial learning rate. Must be > 0.
    decay : float
        Multiplicative factor applied every `steps` epochs. Must be in (0, 1].
    steps : int
        Number of epochs per decay period. Must be > 0.
    staircase : bool
        If True, ``epoch // steps`` is used instead of ``epoch / steps``.
    """

    rate: float
    decay: float
    steps: int = 1
    staircase: bool = False

    def __post_init__(self) -> None:
        if float(self.rate) <= 0.0:
            raise ValueError(f"rate must be > 0, got {self.rate}")
        if not 0.0 < float(self.decay) <= 1.0:
            raise ValueError(f"decay must be in (0, 1], got {self.decay}")
        if int(self.steps) <= 0:
            raise ValueError(f"steps must be > 0, got {self.steps}")

    def __call__(self, epoch: int) -> float:
        if self.staircase:
            p = float(int(epoch) // int(self.steps))
        else:
            p = int(epoch) / float(self.steps)
        return float(self.rate) * float(self.decay) ** p


@dataclass(frozen=True)
class PiecewiseConstant:
    """
    Piecewise constant rate.

    ``rates[i]`` applies to epochs in ``[boundaries[i-1], boundaries[i])``,
    with the first rate applying before the first boundary and the last rate
    from the last boundary onwards.

    Examples
    --------
    >>> s = PiecewiseConstant(boundaries=(10, 20), rates=(0.1, 0.01, 0.001))
    >>> s(5), s(10), s(25)
    (0.1, 0.01, 0.001)
    """

    boundaries: Tuple[int, ...]
    rates: Tuple[float, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "boundaries", tuple(int(b) for b in self.boundaries))
        object.__setattr__(self, "rates", tuple(float(r) for r in self.rates))
        if len(self.rates) != len(self.boundaries) + 1:
            raise ValueError(
                f"expected {len(self.boundaries) + 1} rates for "
                f"{len(self.boundaries)} boundaries, got {len(self.rates)}"
            )
        if list(self.boundaries) != sorted(self.boundaries):
            raise ValueError(f"boundaries must be sorted, got {self.boundaries}")
        if any(r <= 0.0 for r in self.rates):
            raise ValueError(f"rates must be > 0, got {self.rates}")

    def __call__(self, epoch: int) -> float:
        return self.rates[bisect.bisect_right(self.boundaries, int(epoch))]


LearningRateSchedule = Union[
    Constant, InverseTimeDecay, ExponentialDecay, PiecewiseConstant
]


def as_schedule(lr: "float | LearningRateSchedule") -> LearningRateSchedule:
    """
    Normalize a learning-rate argument.

    Plain numbers become `Constant` schedules; schedules pass through.

    Raises
    ------
    TypeError
        If `lr` is neither a number nor a callable schedule.
    """
    if isinstance(lr, bool):
        raise TypeError("learning rate must be a number or a schedule, got bool")
    if isinstance(lr, (int, float)):
        return Constant(float(lr))
    if callable(lr):
        return lr
    raise TypeError(f"learning rate must be a number or a schedule, got {type(lr)!r}")
