"""
Network: an ordered stack of layers.

`Network` owns its layer list and orchestrates forward/backward passes,
batched training, prediction, evaluation and parameter (de)serialization.
A network is itself a layer, so a network can be nested inside another
one (see `ConvNetwork` for the image/matrix bridge).

Training semantics
------------------
`train` splits the samples into contiguous chunks of at most
``batch_size`` samples (the last chunk may be shorter). For every chunk it
runs forward, evaluates the loss, and runs backward; learnable layers
update themselves during backward. The returned epoch loss is the
sample-count-weighted mean of the chunk losses, so a short final chunk
weighs proportionally less.

Parameter semantics
-------------------
`get_params` returns one entry per learnable top-level layer. `load_params`
validates the number of entries and the length of every row for all
layers before mutating any of them.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from ...domain._errors import ParameterCountMismatchError, ShapeMismatchError
from ...domain._layer import LayerKind, ParameterRows
from .._losses import Loss
from ..layers._layer import Layer, LearnableLayer, split_rows
from ._params import NetworkParams


class Network(LearnableLayer):
    """
    Ordered stack of layers.

    Parameters
    ----------
    layers : Sequence[Layer]
        Layers applied in order by `forward`. The network takes ownership
        of the list; layers must not be shared with another network.

    Raises
    ------
    ValueError
        If `layers` is empty.
    """

    kind = LayerKind.NETWORK

    def __init__(self, layers: Sequence[Layer]) -> None:
        if not layers:
            raise ValueError("Network requires at least one layer")
        self.layers: List[Layer] = list(layers)

    # ------------------------------------------------------------------
    # Layer contract
    # ------------------------------------------------------------------
    def forward(self, input: Any) -> Any:
        out = input
        for layer in self.layers:
            out = layer.forward(out)
        return out

    def backward(self, epoch: int, output_gradient: Any) -> Any:
        g = output_gradient
        for layer in reversed(self.layers):
            g = layer.backward(epoch, g)
        return g

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------
    def learnable_layers(self) -> List[LearnableLayer]:
        out = []
        for layer in self.layers:
            learnable = layer.as_learnable()
            if learnable is not None:
                out.append(learnable)
        return out

    def as_learnable(self) -> Optional["Network"]:
        return self if self.learnable_layers() else None

    def as_dropout(self) -> Optional["Network"]:
        return self if any(l.as_dropout() is not None for l in self.layers) else None

    def enable_dropout(self) -> None:
        for layer in self.layers:
            d = layer.as_dropout()
            if d is not None:
                d.enable_dropout()

    def disable_dropout(self) -> None:
        for layer in self.layers:
            d = layer.as_dropout()
            if d is not None:
                d.disable_dropout()

    # ------------------------------------------------------------------
    # Learnable (nested use): inner rows concatenated in layer order
    # ------------------------------------------------------------------
    def parameter_layout(self) -> Tuple[int, ...]:
        layout: Tuple[int, ...] = ()
        for layer in self.learnable_layers():
            layout += layer.parameter_layout()
        return layout

    def get_learnable_parameters(self) -> ParameterRows:
        rows: ParameterRows = []
        for layer in self.learnable_layers():
            rows.extend(layer.get_learnable_parameters())
        return rows

    def _load_rows(self, rows: Sequence[Sequence[float]]) -> None:
        layers = self.learnable_layers()
        chunks = split_rows(rows, [l.parameter_layout() for l in layers])
        for layer, chunk in zip(layers, chunks):
            layer._load_rows(chunk)

    # ------------------------------------------------------------------
    # Parameter sets
    # ------------------------------------------------------------------
    def get_params(self) -> NetworkParams:
        return NetworkParams([l.get_learnable_parameters() for l in self.learnable_layers()])

    def load_params(self, params: Sequence[Sequence[Sequence[float]]]) -> None:
        """
        Restore every learnable layer from a parameter set.

        Parameters
        ----------
        params : NetworkParams or nested sequences
            One entry per learnable top-level layer.

        Raises
        ------
        ParameterCountMismatchError
            If the number of entries, the number of rows of an entry, or
            the length of any row differs from the current topology. No
            layer is modified when this is raised.
        """
        entries = list(params)
        layers = self.learnable_layers()
        if len(entries) != len(layers):
            raise ParameterCountMismatchError("learnable layers", len(layers), len(entries))
        for i, (layer, rows) in enumerate(zip(layers, entries)):
            layer.validate_parameters(rows, f"layer {i}")
        for layer, rows in zip(layers, entries):
            layer._load_rows(rows)

    def count_parameters(self) -> int:
        return int(sum(self.parameter_layout()))

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    @staticmethod
    def _check_xy(op: str, x: Any, y: Any) -> int:
        if x.samples != y.samples:
            raise ShapeMismatchError(
                op, x.shape, y.shape, detail="x and y sample counts differ"
            )
        return int(x.samples)

    @staticmethod
    def _chunks(n: int, batch_size: Optional[int]) -> List[Tuple[int, int]]:
        bs = n if batch_size is None else int(batch_size)
        if bs <= 0:
            raise ValueError(f"batch_size must be > 0, got {batch_size}")
        return [(s, min(s + bs, n)) for s in range(0, n, bs)]

    def train(
        self,
        epoch: int,
        x: Any,
        y: Any,
        loss: Loss,
        batch_size: Optional[int] = None,
    ) -> float:
        """
        Run one epoch of mini-batch training.

        Parameters
        ----------
        epoch : int
            Zero-based epoch index passed to every optimizer.
        x, y : Matrix
            Inputs and targets, samples as columns.
        loss : Loss
            Loss used for the gradient and the returned value.
        batch_size : Optional[int]
            Maximum chunk size. ``None`` trains on all samples at once.

        Returns
        -------
        float
            Sample-count-weighted mean of the chunk losses.

        Raises
        ------
        ShapeMismatchError
            If `x` and `y` have different sample counts.
        ValueError
            If there are no samples or `batch_size <= 0`.
        """
        n = self._check_xy("Network.train", x, y)
        if n == 0:
            raise ValueError("Network.train requires at least one sample")

        self.enable_dropout()
        total = 0.0
        for start, stop in self._chunks(n, batch_size):
            xb = x.slice_samples(start, stop)
            yb = y.slice_samples(start, stop)
            pred = self.forward(xb)
            total += float(loss.loss(yb, pred)) * (stop - start)
            self.backward(epoch, loss.loss_prime(yb, pred))
        return total / n

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def predict(self, x: Any) -> Any:
        """Forward pass with dropout disabled."""
        self.disable_dropout()
        return self.forward(x)

    def predict_evaluate(self, x: Any, y: Any, loss: Loss) -> Tuple[Any, float]:
        """Predict and return ``(predictions, batch loss)``."""
        self._check_xy("Network.predict_evaluate", x, y)
        pred = self.predict(x)
        return pred, float(loss.loss(y, pred))

    def predict_many(self, x: Any, batch_size: Optional[int] = None) -> Any:
        """
        Predict in chunks of at most `batch_size` samples and join the results.
        """
        n = int(x.samples)
        if n == 0:
            raise ValueError("Network.predict_many requires at least one sample")
        self.disable_dropout()
        preds = [self.forward(x.slice_samples(a, b)) for a, b in self._chunks(n, batch_size)]
        return preds[0] if len(preds) == 1 else type(preds[0]).join_samples(preds)

    def predict_evaluate_many(
        self, x: Any, y: Any, loss: Loss, batch_size: Optional[int] = None
    ) -> Tuple[Any, float, float]:
        """
        Predict in chunks and score every sample independently.

        Returns
        -------
        tuple[Matrix, float, float]
            Predictions, mean of the per-sample losses and their population
            standard deviation.
        """
        self._check_xy("Network.predict_evaluate_many", x, y)
        preds = self.predict_many(x, batch_size)
        losses = np.asarray(loss.sample_losses(y, preds), dtype=np.float64)
        return preds, float(losses.mean()), float(losses.std())

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def summary(self) -> str:
        lines = [f"{type(self).__name__} ({len(self.layers)} layers)"]
        for i, layer in enumerate(self.layers):
            learnable = layer.as_learnable()
            n_params = learnable.count_parameters() if learnable is not None else 0
            lines.append(f"  [{i}] {layer.kind.value:<14} {layer.summary_line()}  params={n_params}")
        lines.append(f"Total params: {self.count_parameters()}")
        return "\n".join(lines)

    def summary_line(self) -> str:
        return f"{type(self).__name__}(layers={len(self.layers)})"
