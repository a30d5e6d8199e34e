"""
Construction mixin for value tensors.

Factories take the tensor dimensions as positional arguments (two for a
`Matrix`, four for an `Image`) and any distribution parameters as keyword
arguments:

    Matrix.zeros(3, 5)
    Matrix.random_uniform(3, 5, low=-1.0, high=1.0)
    Image.random_normal(28, 28, 1, 32, std=0.1)

Random factories draw from the process generator returned by
`tensorfold.infrastructure.tensor._rng.get_rng`.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Sequence, Tuple

import numpy as np
from typing_extensions import Self

from ..._config import get_config
from ....domain._errors import ShapeMismatchError
from .._rng import get_rng


class TensorMixinFactories:
    """
    Classmethod constructors.

    The host class must define ``RANK`` and ``_wrap``.
    """

    RANK: int = 0

    @classmethod
    def _check_dims(cls, dims: Sequence[int]) -> Tuple[int, ...]:
        if len(dims) != cls.RANK:
            raise ShapeMismatchError(
                f"{cls.__name__}.create",
                tuple(dims),
                tuple(dims),
                detail=f"expected {cls.RANK} dimensions, got {len(dims)}",
            )
        out = tuple(int(d) for d in dims)
        if any(d < 0 for d in out):
            raise ValueError(f"dimensions must be >= 0, got {out}")
        return out

    @classmethod
    def zeros(cls, *dims: int) -> Self:
        shape = cls._check_dims(dims)
        return cls._wrap(np.zeros(shape, dtype=get_config().dtype))

    @classmethod
    def constant(cls, *dims: int, value: float) -> Self:
        shape = cls._check_dims(dims)
        return cls._wrap(np.full(shape, float(value), dtype=get_config().dtype))

    @classmethod
    def random_uniform(cls, *dims: int, low: float = 0.0, high: float = 1.0) -> Self:
        """
        Sample every element from ``U(low, high)``.

        Raises
        ------
        ValueError
            If ``low > high``.
        """
        shape = cls._check_dims(dims)
        if float(low) > float(high):
            raise ValueError(f"low must be <= high, got {low} > {high}")
        arr = get_rng().uniform(float(low), float(high), size=shape)
        return cls._wrap(arr)

    @classmethod
    def random_normal(cls, *dims: int, mean: float = 0.0, std: float = 1.0) -> Self:
        """
        Sample every element from ``N(mean, std^2)``.

        Raises
        ------
        ValueError
            If ``std < 0``.
        """
        shape = cls._check_dims(dims)
        if float(std) < 0.0:
            raise ValueError(f"std must be >= 0, got {std}")
        arr = get_rng().normal(float(mean), float(std), size=shape)
        return cls._wrap(arr)

    @classmethod
    def from_fn(cls, *dims: int, fn: Callable[..., float]) -> Self:
        """
        Build a tensor by calling ``fn(*index)`` for every index.

        Indices are visited in row-major order.
        """
        shape = cls._check_dims(dims)
        arr = np.empty(shape, dtype=get_config().dtype)
        for idx in itertools.product(*(range(d) for d in shape)):
            arr[idx] = float(fn(*idx))
        return cls._wrap(arr)

    @classmethod
    def from_nested(cls, nested: Sequence[Any]) -> Self:
        """
        Build a tensor from nested sequences whose depth equals ``RANK``.

        Raises
        ------
        ShapeMismatchError
            If the nesting depth does not match the tensor rank.
        ValueError
            If the nested sequences are ragged.
        """
        arr = np.array(nested, dtype=get_config().dtype)
        cls._check_dims(arr.shape)
        return cls._wrap(arr)

    @classmethod
    def from_values(cls, values: Sequence[float], *dims: int) -> Self:
        """
        Build a tensor from a flat row-major sequence of values.

        Raises
        ------
        ShapeMismatchError
            If ``len(values)`` differs from the product of `dims`.
        """
        shape = cls._check_dims(dims)
        arr = np.array(values, dtype=get_config().dtype, copy=True).ravel()
        expected = int(np.prod(shape))
        if arr.size != expected:
            raise ShapeMismatchError(
                f"{cls.__name__}.from_values",
                shape,
                (arr.size,),
                detail=f"expected {expected} values",
            )
        return cls._wrap(arr.reshape(shape))

    @classmethod
    def zeros_like(cls, other: Any) -> Self:
        return cls.zeros(*other.shape)
