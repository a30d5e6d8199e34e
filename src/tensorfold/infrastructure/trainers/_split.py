"""
Train / validation split trainer.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from typing_extensions import Self

from ...domain._dataset import IDataTable
from ...domain._errors import UninitializedStateError
from ..data._table import DataTable
from ..models._evaluation import EpochEvaluation, ModelEvaluation
from ..models._params import NetworkParams
from ._base import _Trainer
from ._model import Model

Reporter = Callable[[int, EpochEvaluation], None]


def predictions_table(model: Model, valid: IDataTable, id_column: str, predictions) -> DataTable:
    """
    Build ``{id, pred_<output>...}`` from validation predictions.

    `predictions` holds one column per row of `valid`, in the same order.
    """
    cols: Dict[str, List[float]] = {id_column: valid.column(id_column)}
    for name, row in zip(model.dataset.predicted_names(), predictions.to_rows()):
        cols[name] = row
    return DataTable(cols)


class SplitTraining(_Trainer):
    """
    Single train / validation split.

    The data rows are shuffled with the process generator, then the first
    ``floor(ratio * rows)`` rows train and the remaining rows validate.

    Parameters
    ----------
    ratio : float
        Training share, strictly between 0 and 1.
    verbose : int, optional
        If non-zero, print one summary line per epoch.

    Raises
    ------
    ValueError
        If `ratio` is outside ``(0, 1)``.
    """

    def __init__(self, ratio: float, verbose: int = 0) -> None:
        super().__init__(verbose)
        if not 0.0 < float(ratio) < 1.0:
            raise ValueError(f"ratio must be in (0, 1), got {ratio}")
        self.ratio = float(ratio)
        self._reporter: Optional[Reporter] = None
        self._params: Optional[NetworkParams] = None

    def attach_real_time_reporter(self, reporter: Reporter) -> Self:
        """
        Call ``reporter(epoch, evaluation)`` once per epoch during the next
        `run`. The reporter is released when `run` returns.
        """
        self._reporter = reporter
        return self

    def run(self, model: Model, data: IDataTable) -> Tuple[DataTable, ModelEvaluation]:
        """
        Train one network and evaluate it on the held-out rows.

        Returns
        -------
        tuple[DataTable, ModelEvaluation]
            Final validation predictions (id column plus ``pred_<output>``
            columns) and an evaluation with a single fold.

        Raises
        ------
        MissingRequiredColumnError
            If the dataset has no id / output / input column, or `data`
            lacks a configured column.
        ValueError
            If the split leaves either side empty, or the R2 flag is set
            without the validation flag.
        NumericalDivergenceError
            If a loss becomes non-finite.
        """
        self._check_flags()
        id_column = self._check_data(model, data)

        train, valid = data.shuffled().split_ratio(self.ratio)
        if train.num_rows() == 0 or valid.num_rows() == 0:
            raise ValueError(
                f"ratio {self.ratio} leaves an empty partition for {data.num_rows()} rows"
            )

        try:
            network, fold, predictions = self._train_fold(model, train, valid, self._reporter)
        finally:
            self._reporter = None

        evaluation = ModelEvaluation()
        evaluation.add_fold(fold)
        self._params = network.get_params()
        return predictions_table(model, valid, id_column, predictions), evaluation

    def take_model(self) -> NetworkParams:
        """
        Return the parameters trained by the last `run` and forget them.

        Raises
        ------
        UninitializedStateError
            If `run` has not completed since the last call.
        """
        if self._params is None:
            raise UninitializedStateError("SplitTraining", "trained model")
        params, self._params = self._params, None
        return params
