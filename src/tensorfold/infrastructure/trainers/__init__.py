"""
Trainers: epoch / fold loops over a `Model` recipe and a data table.
"""

from ._model import Model
from ._metrics import r2_score
from ._split import SplitTraining
from ._kfolds import KFolds, average_params

__all__ = [
    Model.__name__,
    SplitTraining.__name__,
    KFolds.__name__,
    r2_score.__name__,
    average_params.__name__,
]
