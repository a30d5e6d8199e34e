"""
K-fold cross-validation trainer.

The data rows are shuffled once, then cut into `k` contiguous folds whose
sizes differ by at most one row. Fold `f` validates a network trained on
the other ``k - 1`` folds; every fold builds its own network, so folds
share nothing but the read-only data table.

After `run`, two parameter sets can be derived:

- best model: the parameters of the fold with the lowest final-epoch
  validation loss mean (ties go to the earliest fold);
- averaged model: the element-wise mean of all folds' parameters.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import numpy as np
from typing_extensions import Self

from ...domain._dataset import IDataTable
from ...domain._errors import UninitializedStateError
from ..data._table import DataTable
from ..models._evaluation import EpochEvaluation, ModelEvaluation
from ..models._params import NetworkParams
from ._base import _Trainer
from ._model import Model
from ._split import predictions_table

FoldReporter = Callable[[int, int, EpochEvaluation], None]


def average_params(params: List[NetworkParams]) -> NetworkParams:
    """
    Element-wise mean of parameter sets that share one topology.

    Raises
    ------
    ValueError
        If `params` is empty.
    """
    if not params:
        raise ValueError("average_params requires at least one parameter set")
    first = params[0]
    layers = []
    for i, rows in enumerate(first):
        layer_rows = []
        for r, _ in enumerate(rows):
            stacked = np.array([p[i][r] for p in params], dtype=np.float64)
            layer_rows.append(stacked.mean(axis=0).tolist())
        layers.append(layer_rows)
    return NetworkParams(layers)


class KFolds(_Trainer):
    """
    K-fold cross-validation.

    Parameters
    ----------
    k : int
        Number of folds, at least 2.
    verbose : int, optional
        If non-zero, print one summary line per epoch, prefixed by the fold.

    Raises
    ------
    ValueError
        If ``k < 2``.
    """

    def __init__(self, k: int, verbose: int = 0) -> None:
        super().__init__(verbose)
        if int(k) < 2:
            raise ValueError(f"k must be >= 2, got {k}")
        self.k = int(k)
        self._reporter: Optional[FoldReporter] = None
        self._want_best = False
        self._want_avg = False
        self._best: Optional[NetworkParams] = None
        self._avg: Optional[NetworkParams] = None

    def attach_real_time_reporter(self, reporter: FoldReporter) -> Self:
        """
        Call ``reporter(fold, epoch, evaluation)`` once per epoch of every
        fold during the next `run`.
        """
        self._reporter = reporter
        return self

    def compute_best_model(self) -> Self:
        self._want_best = True
        return self

    def compute_avg_model(self) -> Self:
        self._want_avg = True
        return self

    def fold_indices(self, n: int) -> List[np.ndarray]:
        """Contiguous index blocks of ``range(n)``, one per fold."""
        if n < self.k:
            raise ValueError(f"{self.k} folds need at least {self.k} rows, got {n}")
        return np.array_split(np.arange(n), self.k)

    def run(self, model: Model, data: IDataTable) -> Tuple[DataTable, ModelEvaluation]:
        """
        Train and validate one network per fold.

        Returns
        -------
        tuple[DataTable, ModelEvaluation]
            Out-of-fold predictions for every row (id column plus
            ``pred_<output>`` columns, fold order) and one evaluation per fold.

        Raises
        ------
        MissingRequiredColumnError
            If the dataset has no id / output / input column, or `data`
            lacks a configured column.
        ValueError
            If there are fewer rows than folds, or the R2 flag is set
            without the validation flag.
        NumericalDivergenceError
            If a loss becomes non-finite.
        """
        self._check_flags()
        id_column = self._check_data(model, data)

        shuffled = data.shuffled()
        blocks = self.fold_indices(shuffled.num_rows())
        reporter = self._reporter

        evaluation = ModelEvaluation()
        fold_params: List[NetworkParams] = []
        table = DataTable.empty()
        try:
            for f, block in enumerate(blocks):
                rest = np.concatenate([b for j, b in enumerate(blocks) if j != f])
                train = shuffled.select_rows(rest)
                valid = shuffled.select_rows(block)

                report = None
                if reporter is not None:
                    report = lambda epoch, ev, f=f: reporter(f, epoch, ev)

                network, fold, predictions = self._train_fold(
                    model, train, valid, report, prefix=f"Fold {f + 1}/{self.k}"
                )
                evaluation.add_fold(fold)
                fold_params.append(network.get_params())
                table = table.append(predictions_table(model, valid, id_column, predictions))
        finally:
            self._reporter = None

        if self._want_best:
            finals = [e.validation_loss_mean for e in evaluation.get_final_epochs()]
            self._best = fold_params[int(np.argmin(finals))]
        if self._want_avg:
            self._avg = average_params(fold_params)
        return table, evaluation

    def take_best_model(self) -> NetworkParams:
        """
        Raises
        ------
        UninitializedStateError
            If no best model was computed since the last call.
        """
        if self._best is None:
            raise UninitializedStateError("KFolds", "best model")
        params, self._best = self._best, None
        return params

    def take_avg_model(self) -> NetworkParams:
        """
        Raises
        ------
        UninitializedStateError
            If no averaged model was computed since the last call.
        """
        if self._avg is None:
            raise UninitializedStateError("KFolds", "averaged model")
        params, self._avg = self._avg, None
        return params
