"""
Validation metrics.
"""

from __future__ import annotations

import numpy as np

from ...domain._errors import ShapeMismatchError
from ...domain._tensor import IMatrix


def r2_score(y_true: IMatrix, y_pred: IMatrix) -> float:
    """
    Coefficient of determination, averaged uniformly over output features.

    For every feature row::

        R2 = 1 - sum((y - p)^2) / sum((y - mean(y))^2)

    A constant target row scores 1.0 when predicted exactly and 0.0
    otherwise.

    Raises
    ------
    ShapeMismatchError
        If the shapes differ.
    ValueError
        If there are no samples.
    """
    if tuple(y_true.shape) != tuple(y_pred.shape):
        raise ShapeMismatchError("r2_score", y_true.shape, y_pred.shape)
    y = y_true.to_numpy().astype(np.float64)
    p = y_pred.to_numpy().astype(np.float64)
    if y.shape[1] == 0:
        raise ValueError("r2_score requires at least one sample")

    ss_res = np.sum((y - p) ** 2, axis=1)
    ss_tot = np.sum((y - y.mean(axis=1, keepdims=True)) ** 2, axis=1)

    scores = np.empty_like(ss_res)
    nonconst = ss_tot > 0.0
    scores[nonconst] = 1.0 - ss_res[nonconst] / ss_tot[nonconst]
    scores[~nonconst] = np.where(ss_res[~nonconst] == 0.0, 1.0, 0.0)
    return float(scores.mean())
