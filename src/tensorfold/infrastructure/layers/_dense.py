"""
Fully-connected (dense) layer.

The layer computes ``W . X + b`` where `W` is ``j x i``, `X` is
``i x n`` (features x samples) and `b` is a ``j x 1`` bias broadcast over
samples.

Parameter rows
--------------
`get_learnable_parameters` exports the `i` columns of `W` (each of length
`j`) followed by the bias vector (length `j`), i.e. ``i + 1`` rows.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from ...domain._errors import ShapeMismatchError
from ...domain._layer import LayerKind, ParameterRows
from ...domain._optimizers import IOptimizer
from ..tensor import Matrix
from ..utils.weight_initializer import WeightInitializer
from ._layer import LearnableLayer


class Dense(LearnableLayer):
    """
    Dense layer mapping `i` input features to `j` output features.

    Parameters
    ----------
    i : int
        Number of input features.
    j : int
        Number of output features.
    optimizer : IOptimizer
        Optimizer prototype. Two independent instances are derived from it
        with `fresh()`: one for the weights and one for the biases.
    weights_initializer : str, optional
        Registered initializer name for `W`. Defaults to "glorot_uniform".
    biases_initializer : str, optional
        Registered initializer name for `b`. Defaults to "zeros".
    """

    kind = LayerKind.DENSE

    def __init__(
        self,
        i: int,
        j: int,
        optimizer: IOptimizer,
        weights_initializer: str = "glorot_uniform",
        biases_initializer: str = "zeros",
    ) -> None:
        self.i = int(i)
        self.j = int(j)
        if self.i <= 0 or self.j <= 0:
            raise ValueError(f"Dense dimensions must be > 0, got i={i}, j={j}")

        self.weights_initializer = weights_initializer
        self.biases_initializer = biases_initializer
        self.weights: Matrix = WeightInitializer(weights_initializer)(Matrix, self.j, self.i)
        self.biases: Matrix = WeightInitializer(biases_initializer)(Matrix, self.j, 1)

        self.weights_optimizer = optimizer.fresh()
        self.biases_optimizer = optimizer.fresh()

        self._input: Optional[Matrix] = None

    def forward(self, input: Matrix) -> Matrix:
        if input.shape[0] != self.i:
            raise ShapeMismatchError("Dense.forward", (self.i, input.samples), input.shape)
        self._input = input
        return self.weights.dot(input) + self.biases

    def backward(self, epoch: int, output_gradient: Matrix) -> Matrix:
        x = self._require_cached(self._input)
        if output_gradient.shape != (self.j, x.samples):
            raise ShapeMismatchError(
                "Dense.backward", (self.j, x.samples), output_gradient.shape
            )

        weights_gradient = output_gradient.dot(x.transpose())
        biases_gradient = output_gradient.sum_samples()
        input_gradient = self.weights.transpose().dot(output_gradient)

        self.weights = self.weights_optimizer.update_parameters(
            epoch, self.weights, weights_gradient
        )
        self.biases = self.biases_optimizer.update_parameters(
            epoch, self.biases, biases_gradient
        )
        return input_gradient

    # ------------------------------------------------------------------
    # Learnable
    # ------------------------------------------------------------------
    def parameter_layout(self) -> Tuple[int, ...]:
        return (self.j,) * (self.i + 1)

    def get_learnable_parameters(self) -> ParameterRows:
        rows = self.weights.to_columns()
        rows.append(self.biases.values())
        return rows

    def _load_rows(self, rows: Sequence[Sequence[float]]) -> None:
        self.weights = Matrix.from_columns(rows[: self.i])
        self.biases = Matrix.from_column_vector(rows[self.i])

    def get_config(self) -> Dict[str, Any]:
        return {"i": self.i, "j": self.j}
