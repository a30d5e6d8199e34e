"""
Shared epoch loop for the split and k-fold trainers.

One call to `_Trainer._train_fold` trains a freshly built network on a
training table and scores it on a validation table:

- every epoch: `Model.train_epoch` (shuffled, batched) and a finite check
  of the train loss;
- on the final epoch, or every epoch when `all_epochs_validation()` was
  requested: batched prediction of the validation rows, mean / population
  std of the per-sample losses, and R2 (final epoch, or every epoch when
  `all_epochs_r2()` was requested);
- an `EpochEvaluation` is recorded, checked for non-finite metrics,
  passed to the reporter and optionally printed.
"""

from __future__ import annotations

import math
from typing import Any, Callable, List, Optional, Tuple

from typing_extensions import Self

from ...domain._dataset import IDataTable
from ...domain._errors import NumericalDivergenceError
from ..models._evaluation import EpochEvaluation, TrainingEvaluation
from ..models._network import Network
from ._metrics import r2_score
from ._model import Model


class _Trainer:
    """
    Base class holding the flags and the per-fold epoch loop.

    Parameters
    ----------
    verbose : int, optional
        If non-zero, print one summary line per epoch. Default is 0.
    """

    def __init__(self, verbose: int = 0) -> None:
        self.verbose = int(verbose)
        self._validate_every_epoch = False
        self._r2_every_epoch = False

    # ------------------------------------------------------------------
    # Fluent configuration
    # ------------------------------------------------------------------
    def all_epochs_validation(self) -> Self:
        """Compute validation loss on every epoch instead of the final one only."""
        self._validate_every_epoch = True
        return self

    def all_epochs_r2(self) -> Self:
        """
        Compute R2 on every epoch. Requires `all_epochs_validation()`, checked
        when `run` starts.
        """
        self._r2_every_epoch = True
        return self

    def _check_flags(self) -> None:
        if self._r2_every_epoch and not self._validate_every_epoch:
            raise ValueError(
                "all_epochs_r2() requires all_epochs_validation() to be enabled"
            )

    @staticmethod
    def _check_data(model: Model, data: IDataTable) -> str:
        """Verify the dataset roles against `data` and return the id column."""
        id_column = model.dataset.require_id_column()
        model.dataset.require_outputs()
        model.dataset.require_inputs()
        model.dataset.check_table(data)
        return id_column

    # ------------------------------------------------------------------
    # Epoch loop
    # ------------------------------------------------------------------
    def _train_fold(
        self,
        model: Model,
        train: IDataTable,
        valid: IDataTable,
        report: Optional[Callable[[int, EpochEvaluation], None]] = None,
        prefix: str = "",
    ) -> Tuple[Network, TrainingEvaluation, Any]:
        """
        Train a new network on `train` and score it on `valid`.

        Returns
        -------
        tuple[Network, TrainingEvaluation, Matrix]
            The trained network, its per-epoch evaluations and the
            final-epoch validation predictions (samples in `valid` row order).
        """
        network = model.to_network()
        loss = model.loss_fn()
        x_val, y_val = model.to_xy(valid)
        evaluation = TrainingEvaluation()
        predictions = None

        for epoch in range(model.epochs):
            train_loss = model.train_epoch(epoch, network, train)
            if not math.isfinite(train_loss):
                raise NumericalDivergenceError("train_loss", epoch, train_loss)

            final = epoch == model.epochs - 1
            if final or self._validate_every_epoch:
                preds, mean, std = network.predict_evaluate_many(
                    x_val, y_val, loss, model.batch_size
                )
                r2 = r2_score(y_val, preds) if final or self._r2_every_epoch else None
                current = EpochEvaluation(train_loss, mean, std, r2)
                if final:
                    predictions = preds
            else:
                current = EpochEvaluation(train_loss)

            bad = current.non_finite_metric()
            if bad is not None:
                raise NumericalDivergenceError(bad[0], epoch, bad[1])

            evaluation.add_epoch(current)
            if report is not None:
                report(epoch, current)
            if self.verbose:
                print(self._format_epoch(prefix, epoch, model.epochs, current, train.num_rows()))

        return network, evaluation, predictions

    @staticmethod
    def _format_epoch(
        prefix: str, epoch: int, epochs: int, ev: EpochEvaluation, seen: int
    ) -> str:
        parts: List[str] = []
        if prefix:
            parts.append(prefix)
        parts.append(f"Epoch {epoch + 1}/{epochs}")
        for k, v in ev.to_dict().items():
            if v is not None:
                parts.append(f"{k}: {v:.6f}")
        parts.append(f"seen: {seen}")
        return " - ".join(parts)
