"""
Abstract interfaces and utilities for weight initialization.

This module defines the abstract base class for weight initializers used
throughout the framework, along with shared helper functions for computing
fan-in and fan-out values from tensor shapes.

Shape conventions
-----------------
- Dense weights are ``(out_features, in_features)``.
- Kernel banks are ``(k_rows, k_cols, in_channels, out_channels)``.
- Bias-like tensors are ``(n, 1)`` or ``(rows, cols, channels, 1)``.

The concrete implementation and registry logic live in the infrastructure
layer.
"""

from typing import Callable, Dict, Tuple, TypeVar
from abc import ABC

from .._tensor import ITensor


T = TypeVar("T", bound=Callable[..., ITensor])


class _WeightInitializer(ABC):
    """
    Abstract base class for weight initializer dispatchers.

    Design notes
    ------------
    - Initializers are identified by string names.
    - Each initializer is a callable ``(tensor_cls, *dims) -> tensor`` that
      builds and returns a new tensor. Tensors are values, so nothing is
      filled in place.
    """

    INITIALIZERS: Dict[str, Callable] = {}

    def __init__(self, initializer_name: str) -> None: ...

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Register a weight initializer under a given name.

        Returns
        -------
        Callable
            A decorator that registers the initializer function.
        """
        ...

    @classmethod
    def available(cls) -> Tuple[str, ...]:
        """Return the names of all registered initializers (sorted)."""
        ...

    def __call__(self, tensor_cls: type, *dims: int) -> ITensor:
        """
        Build a tensor of type `tensor_cls` with shape `dims`.
        """
        ...


def _calculate_fan_in_and_fan_out(shape: Tuple[int, ...]) -> Tuple[int, int]:
    """
    Compute fan-in and fan-out values for a parameter shape.

    Fan-in represents the number of inputs to a single output unit, while
    fan-out represents the number of outputs influenced by a single input
    unit. Bias tensors are treated with the same rules as weights of their
    rank.

    Parameters
    ----------
    shape:
        Shape of the parameter tensor.

    Returns
    -------
    tuple[int, int]
        A tuple of (fan_in, fan_out).
    """
    if len(shape) == 2:
        # Dense: (out_features, in_features)
        fan_out, fan_in = shape
        return int(fan_in), int(fan_out)

    if len(shape) == 4:
        # Kernel bank: (k_rows, k_cols, in_channels, out_channels)
        receptive_field = int(shape[0]) * int(shape[1])
        return int(shape[2]) * receptive_field, int(shape[3]) * receptive_field

    size = 1
    for d in shape:
        size *= int(d)
    return size, size
