"""
Domain-level optimizer contracts for tensorfold.

This module defines the `IOptimizer` and `ILearningRateSchedule` protocols.

Notes
-----
- Domain contracts are backend-agnostic and must not depend on NumPy or
  infrastructure implementations.
- An optimizer instance is bound to exactly one learnable tensor of one
  layer. Layers obtain their instances by calling `fresh()` on a prototype
  so that no optimizer state is ever shared.
- Optimizers are functional with respect to parameters: they receive the
  current value and return the updated value. Only their own internal
  buffers (momentum velocity, Adam moments) are mutated.
"""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from ._tensor import ITensor

T = TypeVar("T", bound=ITensor)


@runtime_checkable
class ILearningRateSchedule(Protocol):
    """
    Pure function from a zero-based epoch index to a learning rate.
    """

    def __call__(self, epoch: int) -> float: ...


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    Required methods
    ----------------
    - `update_parameters(epoch, parameters, gradient)` returns the updated
      parameter tensor.
    - `fresh()` returns an unbound copy with identical hyperparameters and
      empty state.
    """

    def update_parameters(self, epoch: int, parameters: T, gradient: T) -> T:
        """
        Apply one update step.

        Parameters
        ----------
        epoch : int
            Zero-based epoch index, used for the learning-rate schedule and
            for bias correction.
        parameters : ITensor
            Current parameter values.
        gradient : ITensor
            Gradient of the loss with respect to `parameters`.

        Returns
        -------
        ITensor
            New parameter values with the same shape.
        """
        ...

    def fresh(self) -> "IOptimizer":
        """Return a copy with the same hyperparameters and no state."""
        ...
