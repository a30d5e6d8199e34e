"""
Dataset contracts consumed by the trainers.

The engine does not load or preprocess data. It consumes:

- a named-column table (`IDataTable`, rows = samples) supporting column
  selection, column extraction, ratio splitting, row shuffling, joins and
  vertical appends;
- a `DatasetSpec` saying which columns are inputs, which are outputs and
  which one (if any) identifies a row.

Prediction columns produced by trainers are named ``pred_<output>``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ._errors import MissingRequiredColumnError

PREDICTION_PREFIX = "pred_"


@runtime_checkable
class IDataTable(Protocol):
    """
    Minimal named-column table contract.
    """

    @property
    def column_names(self) -> Tuple[str, ...]: ...

    def num_rows(self) -> int: ...

    def has_column(self, name: str) -> bool: ...

    def column(self, name: str) -> List[float]: ...

    def select_columns(self, names: Sequence[str]) -> "IDataTable": ...

    def drop_column(self, name: str) -> "IDataTable": ...

    def to_rows(self, names: Optional[Sequence[str]] = None) -> List[List[float]]: ...

    def split_ratio(self, ratio: float) -> Tuple["IDataTable", "IDataTable"]: ...

    def shuffled(self) -> "IDataTable": ...

    def select_rows(self, indices: Sequence[int]) -> "IDataTable": ...

    def inner_join(self, other: "IDataTable", on: str) -> "IDataTable": ...

    def append(self, other: "IDataTable") -> "IDataTable": ...


@dataclass(frozen=True)
class Feature:
    """
    One column of a dataset.

    Attributes
    ----------
    name : str
        Column name.
    out : bool
        True for a target (output) column.
    is_id : bool
        True for the row identifier column.
    """

    name: str
    out: bool = False
    is_id: bool = False

    def __post_init__(self) -> None:
        if self.out and self.is_id:
            raise ValueError(f"Feature {self.name!r} cannot be both an output and the id")


@dataclass(frozen=True)
class DatasetSpec:
    """
    Roles of the columns of a dataset.

    Parameters
    ----------
    features : tuple[Feature, ...]
        Every column the model uses, in input order.

    Raises
    ------
    ValueError
        If names are duplicated or more than one column is marked as id.
    """

    features: Tuple[Feature, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", tuple(self.features))
        names = [f.name for f in self.features]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate feature names in {names}")
        if sum(1 for f in self.features if f.is_id) > 1:
            raise ValueError("At most one feature can be the id column")

    @classmethod
    def from_names(
        cls, inputs: Sequence[str], outputs: Sequence[str], id_column: Optional[str] = None
    ) -> "DatasetSpec":
        feats = [Feature(n) for n in inputs] + [Feature(n, out=True) for n in outputs]
        if id_column is not None:
            feats.insert(0, Feature(id_column, is_id=True))
        return cls(tuple(feats))

    def input_names(self) -> List[str]:
        return [f.name for f in self.features if not f.out and not f.is_id]

    def output_names(self) -> List[str]:
        return [f.name for f in self.features if f.out]

    def predicted_names(self) -> List[str]:
        return [PREDICTION_PREFIX + n for n in self.output_names()]

    def get_id_column(self) -> Optional[str]:
        return next((f.name for f in self.features if f.is_id), None)

    def require_id_column(self) -> str:
        """
        Raises
        ------
        MissingRequiredColumnError
            If no column is marked as the id.
        """
        name = self.get_id_column()
        if name is None:
            raise MissingRequiredColumnError("id")
        return name

    def require_outputs(self) -> List[str]:
        """
        Raises
        ------
        MissingRequiredColumnError
            If no column is marked as an output.
        """
        outputs = self.output_names()
        if not outputs:
            raise MissingRequiredColumnError("output")
        return outputs

    def require_inputs(self) -> List[str]:
        inputs = self.input_names()
        if not inputs:
            raise MissingRequiredColumnError("input")
        return inputs

    def check_table(self, table: IDataTable) -> None:
        """
        Verify every configured column exists in `table`.

        Raises
        ------
        MissingRequiredColumnError
            For the first configured column the table lacks.
        """
        for f in self.features:
            if not table.has_column(f.name):
                role = "id" if f.is_id else ("output" if f.out else "input")
                raise MissingRequiredColumnError(role, f.name)
