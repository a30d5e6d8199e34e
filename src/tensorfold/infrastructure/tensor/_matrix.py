"""
Rank-2 value tensor (features x samples).

`Matrix` is the tensor consumed by dense layers, losses and trainers. Each
column is one sample; each row is one feature. Row/column conversions to
plain Python lists are provided for the parameter-set format and for the
table contract.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np
from typing_extensions import Self

from ...domain._errors import ShapeMismatchError
from .._config import get_config
from ._tensor import Tensor


class Matrix(Tensor):
    """
    Features x samples matrix backed by NumPy.

    Notes
    -----
    The matrix product is routed through `_matmul` so backend subclasses can
    change how it is computed without changing its contract.
    """

    RANK = 2

    @property
    def features(self) -> int:
        return int(self._data.shape[0])

    # ------------------------------------------------------------------
    # Constructors from Python lists
    # ------------------------------------------------------------------
    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> Self:
        """Build a matrix from one list per feature."""
        return cls(np.asarray(rows, dtype=get_config().dtype))

    @classmethod
    def from_columns(cls, columns: Sequence[Sequence[float]]) -> Self:
        """Build a matrix from one list per sample."""
        arr = np.asarray(columns, dtype=get_config().dtype)
        if arr.ndim != 2:
            raise ShapeMismatchError(
                f"{cls.__name__}.from_columns",
                arr.shape,
                arr.shape,
                detail="expected a list of equally sized columns",
            )
        return cls(arr.T)

    @classmethod
    def from_column_vector(cls, values: Sequence[float]) -> Self:
        """Build an ``n x 1`` matrix."""
        arr = np.asarray(values, dtype=get_config().dtype).reshape(-1, 1)
        return cls._wrap(arr.copy())

    # ------------------------------------------------------------------
    # Linear algebra
    # ------------------------------------------------------------------
    def _matmul(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return a @ b

    def dot(self, other: "Matrix") -> Self:
        """
        Matrix product ``(a x b) . (b x n) -> (a x n)``.

        Raises
        ------
        ShapeMismatchError
            If `other` is not a matrix or the inner dimensions differ.
        """
        if not isinstance(other, Matrix):
            raise ShapeMismatchError("dot", self.shape, getattr(other, "shape", ()))
        if self._data.shape[1] != other._data.shape[0]:
            raise ShapeMismatchError("dot", self.shape, other.shape)
        return self._wrap(self._matmul(self._data, other._data))

    def transpose(self) -> Self:
        return self._wrap(self._data.T)

    # ------------------------------------------------------------------
    # Feature-axis reductions
    # ------------------------------------------------------------------
    def sum_features(self) -> Self:
        """Sum each column, returning a ``1 x samples`` matrix."""
        return self._wrap(np.sum(self._data, axis=0, keepdims=True))

    def column_max(self) -> Self:
        """Maximum of each column, returning a ``1 x samples`` matrix."""
        return self._wrap(np.max(self._data, axis=0, keepdims=True))

    def broadcast_rows(self, n: int) -> Self:
        """
        Repeat a single-row matrix into ``n`` identical rows.

        Raises
        ------
        ShapeMismatchError
            If the matrix has more than one row.
        """
        if self.features != 1:
            raise ShapeMismatchError(
                "broadcast_rows", self.shape, (int(n), self.samples)
            )
        return self._wrap(np.repeat(self._data, int(n), axis=0))

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------
    def get_column(self, index: int) -> Self:
        """Return column `index` as a ``features x 1`` matrix."""
        return self.get_sample(index)

    def get_row(self, index: int) -> Self:
        """Return row `index` as a ``1 x samples`` matrix."""
        n = self.features
        if not -n <= int(index) < n:
            raise IndexError(f"row index {index} out of range for {n} rows")
        i = int(index) % n
        return self._wrap(self._data[i : i + 1, :])

    def to_rows(self) -> List[List[float]]:
        return self._data.tolist()

    def to_columns(self) -> List[List[float]]:
        return self._data.T.tolist()
