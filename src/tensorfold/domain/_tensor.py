"""
Tensor interface definitions.

This module defines the domain-level interfaces for the two tensor shapes
the engine works with, using structural typing:

- `IMatrix`: rank-2, laid out as features x samples.
- `IImage`: rank-4, laid out as rows x cols x channels x samples.

Layers, losses and optimizers are written against these protocols only,
so the backing implementation (NumPy, threaded NumPy, ...) can be swapped
without touching them.

Notes
-----
- Tensors are values. Every operation returns a new tensor and never
  mutates its operands.
- Binary operations require identical non-sample dimensions. The sample
  (last) dimension broadcasts only when one operand has exactly one sample.
"""

from __future__ import annotations

from typing import Any, List, Protocol, Sequence, Tuple, Union, runtime_checkable

Number = Union[int, float]


@runtime_checkable
class ITensor(Protocol):
    """
    Operations shared by every tensor rank.
    """

    @property
    def shape(self) -> Tuple[int, ...]:
        """Return the tensor's dimensions, sample dimension last."""
        ...

    @property
    def samples(self) -> int:
        """Return the size of the sample (last) dimension."""
        ...

    def values(self) -> List[float]:
        """Return every element as a flat list in row-major order."""
        ...

    def to_numpy(self) -> Any:
        """Return a writable copy of the underlying buffer."""
        ...

    def is_finite(self) -> bool:
        """Return True when no element is NaN or infinite."""
        ...

    def slice_samples(self, start: int, stop: int) -> "ITensor":
        """Return the contiguous range of samples ``[start, stop)``."""
        ...

    def select_samples(self, indices: Sequence[int]) -> "ITensor":
        """Return the samples at the given positions, in order."""
        ...

    def sum_samples(self) -> "ITensor":
        """Sum over the sample dimension, keeping a single sample."""
        ...

    def sum(self) -> float: ...

    def mean(self) -> float: ...

    def min(self) -> float: ...

    def max(self) -> float: ...

    def __add__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __sub__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __mul__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __truediv__(self, other: Union["ITensor", Number]) -> "ITensor": ...

    def __neg__(self) -> "ITensor": ...

    def exp(self) -> "ITensor": ...

    def log(self) -> "ITensor": ...

    def sqrt(self) -> "ITensor": ...

    def square(self) -> "ITensor": ...

    def tanh(self) -> "ITensor": ...

    def maximum(self, value: Number) -> "ITensor": ...

    def greater_than(self, value: Number) -> "ITensor": ...


@runtime_checkable
class IMatrix(ITensor, Protocol):
    """
    Rank-2 tensor (features x samples).
    """

    @property
    def features(self) -> int: ...

    def dot(self, other: "IMatrix") -> "IMatrix":
        """
        Matrix product ``(a x b) . (b x n) -> (a x n)``.

        Raises
        ------
        ShapeMismatchError
            If the inner dimensions differ.
        """
        ...

    def transpose(self) -> "IMatrix": ...

    def sum_features(self) -> "IMatrix":
        """Sum over the feature dimension, returning a 1 x samples matrix."""
        ...

    def to_columns(self) -> List[List[float]]:
        """Return one list per sample (column)."""
        ...

    def to_rows(self) -> List[List[float]]:
        """Return one list per feature (row)."""
        ...


@runtime_checkable
class IImage(ITensor, Protocol):
    """
    Rank-4 tensor (rows x cols x channels x samples).
    """

    @property
    def image_dims(self) -> Tuple[int, int]: ...

    @property
    def channels(self) -> int: ...

    def flatten(self) -> IMatrix:
        """Return a (rows*cols*channels) x samples matrix."""
        ...

    def cross_correlate(self, kernels: "IImage") -> "IImage":
        """
        Valid cross-correlation against a kernel bank.

        ``kernels`` is laid out as k_rows x k_cols x in_channels x
        out_channels. The result has shape
        (rows-k_rows+1) x (cols-k_cols+1) x out_channels x samples.
        """
        ...

    def convolve_full(self, kernels: "IImage") -> "IImage":
        """
        Full (zero padded) convolution against spatially flipped kernels.

        This is the adjoint of `cross_correlate` with respect to its input.
        """
        ...

    def correlate_samples(self, output_gradient: "IImage") -> "IImage":
        """
        Correlate this input against an output gradient, summed over samples.

        This is the adjoint of `cross_correlate` with respect to its kernels.
        """
        ...
