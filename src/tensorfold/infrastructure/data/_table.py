"""
In-memory named-column table.

`DataTable` is a small NumPy-backed implementation of the `IDataTable`
contract, sufficient for the trainers and for tests. Every column is a
float64 vector; all columns share the same length. Operations return new
tables and never modify the receiver.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ...domain._errors import MissingRequiredColumnError, ShapeMismatchError
from ..tensor import get_rng


class DataTable:
    """
    Immutable table of named float columns.

    Parameters
    ----------
    columns : Mapping[str, Sequence[float]]
        Column name to values. Insertion order is preserved.

    Raises
    ------
    ShapeMismatchError
        If columns have different lengths.
    """

    def __init__(self, columns: Mapping[str, Sequence[float]]) -> None:
        self._columns: Dict[str, np.ndarray] = {}
        length: Optional[int] = None
        for name, values in columns.items():
            arr = np.array(values, dtype=np.float64).ravel()
            if length is not None and arr.size != length:
                raise ShapeMismatchError(
                    "DataTable", (length,), (arr.size,), detail=f"column {name!r}"
                )
            length = arr.size
            arr.setflags(write=False)
            self._columns[str(name)] = arr
        self._length = length or 0

    @classmethod
    def from_rows(cls, names: Sequence[str], rows: Sequence[Sequence[float]]) -> "DataTable":
        arr = np.asarray(rows, dtype=np.float64).reshape(len(rows), len(names))
        return cls({n: arr[:, i] for i, n in enumerate(names)})

    @classmethod
    def empty(cls) -> "DataTable":
        return cls({})

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(self._columns)

    def num_rows(self) -> int:
        return self._length

    def __len__(self) -> int:
        return self._length

    def has_column(self, name: str) -> bool:
        return name in self._columns

    def _get(self, name: str) -> np.ndarray:
        try:
            return self._columns[name]
        except KeyError:
            raise MissingRequiredColumnError("table", name) from None

    def column(self, name: str) -> List[float]:
        return self._get(name).tolist()

    def __repr__(self) -> str:
        return f"DataTable(rows={self._length}, columns={list(self._columns)})"

    # ------------------------------------------------------------------
    # Column operations
    # ------------------------------------------------------------------
    def select_columns(self, names: Sequence[str]) -> "DataTable":
        return DataTable({n: self._get(n) for n in names})

    def drop_column(self, name: str) -> "DataTable":
        self._get(name)
        return DataTable({n: v for n, v in self._columns.items() if n != name})

    def add_column(self, name: str, values: Sequence[float]) -> "DataTable":
        cols = dict(self._columns)
        cols[name] = np.asarray(values, dtype=np.float64)
        if not self._columns:
            return DataTable(cols)
        if cols[name].size != self._length:
            raise ShapeMismatchError(
                "DataTable.add_column", (self._length,), (cols[name].size,)
            )
        return DataTable(cols)

    def to_rows(self, names: Optional[Sequence[str]] = None) -> List[List[float]]:
        """Return one list per row, restricted to `names` if given."""
        names = list(self._columns) if names is None else list(names)
        if not names:
            return [[] for _ in range(self._length)]
        return np.stack([self._get(n) for n in names], axis=1).tolist()

    # ------------------------------------------------------------------
    # Row operations
    # ------------------------------------------------------------------
    def select_rows(self, indices: Sequence[int]) -> "DataTable":
        idx = np.asarray(list(indices), dtype=np.intp)
        return DataTable({n: v[idx] for n, v in self._columns.items()})

    def split_ratio(self, ratio: float) -> Tuple["DataTable", "DataTable"]:
        """
        Split positionally: the first ``floor(ratio * rows)`` rows, then the rest.

        Raises
        ------
        ValueError
            If `ratio` is outside ``[0, 1]``.
        """
        if not 0.0 <= float(ratio) <= 1.0:
            raise ValueError(f"ratio must be in [0, 1], got {ratio}")
        cut = int(float(ratio) * self._length)
        return (
            DataTable({n: v[:cut] for n, v in self._columns.items()}),
            DataTable({n: v[cut:] for n, v in self._columns.items()}),
        )

    def shuffled(self) -> "DataTable":
        """Return the rows in a random order drawn from the process generator."""
        return self.select_rows(get_rng().permutation(self._length))

    def inner_join(self, other: "DataTable", on: str) -> "DataTable":
        """
        Join rows whose `on` values are equal.

        Row order follows the receiver. Columns of `other` (except `on`)
        are appended; a name present on both sides keeps the receiver's
        values.
        """
        left_key = self._get(on)
        right_key = other._get(on)
        right_pos: Dict[float, List[int]] = {}
        for j, key in enumerate(right_key.tolist()):
            right_pos.setdefault(key, []).append(j)

        li: List[int] = []
        ri: List[int] = []
        for i, key in enumerate(left_key.tolist()):
            for j in right_pos.get(key, ()):
                li.append(i)
                ri.append(j)

        l_idx = np.asarray(li, dtype=np.intp)
        r_idx = np.asarray(ri, dtype=np.intp)
        cols = {n: v[l_idx] for n, v in self._columns.items()}
        for n, v in other._columns.items():
            if n not in cols:
                cols[n] = v[r_idx]
        return DataTable(cols)

    def append(self, other: "DataTable") -> "DataTable":
        """
        Stack the rows of `other` below ours.

        An empty table (no columns) acts as the identity.

        Raises
        ------
        ShapeMismatchError
            If the column sets differ.
        """
        if not self._columns:
            return other
        if not other._columns:
            return self
        if set(self._columns) != set(other._columns):
            raise ShapeMismatchError(
                "DataTable.append",
                (len(self._columns),),
                (len(other._columns),),
                detail=f"columns {sorted(self._columns)} vs {sorted(other._columns)}",
            )
        return DataTable(
            {n: np.concatenate([v, other._columns[n]]) for n, v in self._columns.items()}
        )
