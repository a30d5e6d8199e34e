"""
NumPy-backed value tensor base class.

`Tensor` owns a read-only, C-contiguous NumPy buffer of the configured
scalar dtype. Concrete ranks (`Matrix`, `Image`) subclass it and add
shape-specific operations; the elementwise, reduction and factory surface
comes from the mixins in `tensor.mixins`.

Design notes
------------
- Tensors are values: buffers are marked non-writeable and every operation
  allocates a new tensor. Layers can therefore cache inputs without
  defensive copies.
- `_wrap` is the internal zero-copy constructor used by operations; the
  public constructor always copies its input.
- Results keep the concrete class of the left operand (`type(self)`), so a
  backend subclass (see `_threaded.py`) propagates through every op.
"""

from __future__ import annotations

from typing import Any, ClassVar, List, Sequence, Tuple, Union

import numpy as np
from typing_extensions import Self

from ...domain._errors import ShapeMismatchError
from .._config import get_config
from .mixins._arithmetic import TensorMixinArithmetic
from .mixins._factories import TensorMixinFactories
from .mixins._reduction import TensorMixinReduction
from .mixins._unary import TensorMixinUnary

Number = Union[int, float]


class Tensor(
    TensorMixinArithmetic,
    TensorMixinUnary,
    TensorMixinReduction,
    TensorMixinFactories,
):
    """
    Immutable NumPy tensor with the sample dimension last.

    Parameters
    ----------
    data : array-like
        Initial values. Copied and cast to the configured scalar dtype.

    Raises
    ------
    ShapeMismatchError
        If `data` does not have exactly ``RANK`` dimensions.
    """

    RANK: ClassVar[int] = 0

    def __init__(self, data: Any) -> None:
        arr = np.array(data, dtype=get_config().dtype, copy=True, order="C")
        type(self)._check_dims(arr.shape)
        arr.setflags(write=False)
        self._data = arr

    @classmethod
    def _wrap(cls, arr: Any) -> Self:
        """
        Wrap an array produced by an operation without copying it.

        The array is cast (copying only if needed) and frozen.
        """
        out = np.ascontiguousarray(arr, dtype=get_config().dtype)
        if out.ndim != cls.RANK:
            raise ShapeMismatchError(
                f"{cls.__name__}._wrap",
                out.shape,
                out.shape,
                detail=f"expected rank {cls.RANK}",
            )
        if out.flags.writeable:
            out.setflags(write=False)
        obj = cls.__new__(cls)
        obj._data = out
        return obj

    def _operand(self, other: Any, op: str) -> Any:
        """
        Resolve the right-hand operand of a binary operation.

        Returns the raw buffer of a compatible tensor, a float for a
        scalar, or ``NotImplemented`` for unsupported types.

        Raises
        ------
        ShapeMismatchError
            If `other` is a tensor whose non-sample dimensions differ from
            ours, or whose sample count differs while neither side has
            exactly one sample.
        """
        if isinstance(other, Tensor):
            a, b = self._data.shape, other._data.shape
            if len(a) != len(b) or a[:-1] != b[:-1]:
                raise ShapeMismatchError(op, a, b)
            if a[-1] != b[-1] and a[-1] != 1 and b[-1] != 1:
                raise ShapeMismatchError(
                    op, a, b, detail="samples broadcast only from a single sample"
                )
            return other._data
        if isinstance(other, (bool, np.bool_)):
            return NotImplemented
        if isinstance(other, (int, float, np.integer, np.floating)):
            return float(other)
        return NotImplemented

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self._data.shape)

    @property
    def samples(self) -> int:
        return int(self._data.shape[-1])

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def values(self) -> List[float]:
        """Return every element as a flat row-major list of floats."""
        return self._data.ravel().tolist()

    def to_numpy(self) -> np.ndarray:
        """Return a writable copy of the underlying buffer."""
        return np.array(self._data, copy=True)

    def is_finite(self) -> bool:
        return bool(np.isfinite(self._data).all())

    def __len__(self) -> int:
        return self.samples

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shape={self.shape}, dtype={self.dtype})"

    # ------------------------------------------------------------------
    # Sample-axis helpers
    # ------------------------------------------------------------------
    def slice_samples(self, start: int, stop: int) -> Self:
        """Return samples ``[start, stop)`` as a new tensor."""
        return self._wrap(self._data[..., int(start) : int(stop)])

    def select_samples(self, indices: Sequence[int]) -> Self:
        """Return the samples at `indices` (in that order)."""
        idx = np.asarray(list(indices), dtype=np.intp)
        return self._wrap(np.take(self._data, idx, axis=-1))

    def get_sample(self, index: int) -> Self:
        """Return the single sample at `index`, keeping the sample axis."""
        n = self.samples
        if not -n <= int(index) < n:
            raise IndexError(f"sample index {index} out of range for {n} samples")
        i = int(index) % n
        return self._wrap(self._data[..., i : i + 1])

    @classmethod
    def join_samples(cls, tensors: Sequence["Tensor"]) -> Self:
        """
        Concatenate tensors along the sample dimension.

        Raises
        ------
        ValueError
            If `tensors` is empty.
        ShapeMismatchError
            If the non-sample dimensions differ.
        """
        if not tensors:
            raise ValueError("join_samples requires at least one tensor")
        first = tensors[0].shape
        for t in tensors[1:]:
            if t.shape[:-1] != first[:-1]:
                raise ShapeMismatchError("join_samples", first, t.shape)
        return cls._wrap(np.concatenate([t._data for t in tensors], axis=-1))
