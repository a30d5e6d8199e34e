"""
Base classes for concrete layers.

`Layer` implements the shared plumbing of the domain `ILayer` contract:
capability queries default to ``None``, `get_config` defaults to an empty
mapping, and `summary_line` renders a one-line description for
`Network.summary`.

`LearnableLayer` adds the row-based parameter protocol. Subclasses
implement `parameter_layout`, `get_learnable_parameters` and
`_load_rows`; the public `set_learnable_parameters` validates the rows
against the layout first, so a mismatch never leaves a layer half
restored.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple

from ...domain._errors import ParameterCountMismatchError, UninitializedStateError
from ...domain._layer import IDropoutLayer, ILearnableLayer, LayerKind, ParameterRows


class Layer(ABC):
    """
    Abstract forward/backward unit.
    """

    kind: ClassVar[LayerKind]

    @abstractmethod
    def forward(self, input: Any) -> Any:
        """
        Compute the layer output and cache what `backward` needs.
        """
        raise NotImplementedError

    @abstractmethod
    def backward(self, epoch: int, output_gradient: Any) -> Any:
        """
        Propagate `output_gradient` and update owned parameters.

        Raises
        ------
        UninitializedStateError
            If called before `forward`.
        """
        raise NotImplementedError

    def as_learnable(self) -> Optional[ILearnableLayer]:
        return None

    def as_dropout(self) -> Optional[IDropoutLayer]:
        return None

    def get_config(self) -> Dict[str, Any]:
        return {}

    def summary_line(self) -> str:
        cfg = ", ".join(f"{k}={v}" for k, v in self.get_config().items())
        return f"{type(self).__name__}({cfg})"

    def _require_cached(self, value: Any, what: str = "forward input") -> Any:
        if value is None:
            raise UninitializedStateError(f"{type(self).__name__}.backward", what)
        return value


class LearnableLayer(Layer):
    """
    Layer owning learnable tensors exported as rows.
    """

    def as_learnable(self) -> "LearnableLayer":
        return self

    @abstractmethod
    def parameter_layout(self) -> Tuple[int, ...]:
        raise NotImplementedError

    @abstractmethod
    def get_learnable_parameters(self) -> ParameterRows:
        raise NotImplementedError

    @abstractmethod
    def _load_rows(self, rows: Sequence[Sequence[float]]) -> None:
        """Replace parameters from already validated rows."""
        raise NotImplementedError

    def count_parameters(self) -> int:
        return int(sum(self.parameter_layout()))

    def validate_parameters(
        self, rows: Sequence[Sequence[float]], location: str = "layer"
    ) -> None:
        """
        Check `rows` against `parameter_layout()` without mutating anything.

        Raises
        ------
        ParameterCountMismatchError
            On a wrong row count or any wrong row length.
        """
        layout = self.parameter_layout()
        if len(rows) != len(layout):
            raise ParameterCountMismatchError(
                f"{location} rows", len(layout), len(rows)
            )
        for i, (row, expected) in enumerate(zip(rows, layout)):
            if len(row) != expected:
                raise ParameterCountMismatchError(
                    f"{location}, row {i}", expected, len(row)
                )

    def set_learnable_parameters(self, rows: Sequence[Sequence[float]]) -> None:
        self.validate_parameters(rows, type(self).__name__)
        self._load_rows(rows)


def split_rows(
    rows: Sequence[Sequence[float]], layouts: Sequence[Tuple[int, ...]]
) -> List[List[Sequence[float]]]:
    """
    Split concatenated rows back into one chunk per layout.

    The caller must have validated the total row count.
    """
    out: List[List[Sequence[float]]] = []
    start = 0
    for layout in layouts:
        out.append(list(rows[start : start + len(layout)]))
        start += len(layout)
    return out
