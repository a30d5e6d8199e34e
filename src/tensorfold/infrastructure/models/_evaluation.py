"""
Training evaluation records.

This module defines the data structures trainers use to record metrics:

- `EpochEvaluation`: immutable metrics of one epoch.
- `TrainingEvaluation`: append-only sequence of epochs for one fold.
- `ModelEvaluation`: append-only sequence of folds for one model.

Validation metrics are only computed on some epochs (by default the final
one). Fields that were not computed are ``None`` rather than a sentinel
value.

Design goals
------------
- Minimal surface area: no dependency on tensors or networks
- Deterministic ordering and JSON export for reports
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class EpochEvaluation:
    """
    Metrics of a single epoch.

    Attributes
    ----------
    train_loss : float
        Sample-weighted mean training loss of the epoch.
    validation_loss_mean : Optional[float]
        Mean per-sample validation loss, if computed.
    validation_loss_std : Optional[float]
        Population standard deviation of per-sample validation losses.
    r2_score : Optional[float]
        Coefficient of determination of validation predictions.
    """

    train_loss: float
    validation_loss_mean: Optional[float] = None
    validation_loss_std: Optional[float] = None
    r2_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EpochEvaluation":
        names = {f.name for f in fields(cls)}
        return cls(**{k: (None if v is None else float(v)) for k, v in d.items() if k in names})

    def non_finite_metric(self) -> Optional[Tuple[str, float]]:
        """Return the first computed metric that is NaN or infinite, if any."""
        for k, v in self.to_dict().items():
            if v is not None and not math.isfinite(v):
                return k, v
        return None


class TrainingEvaluation:
    """
    Append-only per-epoch evaluations of one training run (one fold).
    """

    def __init__(self) -> None:
        self._epochs: List[EpochEvaluation] = []

    @property
    def epochs(self) -> Tuple[EpochEvaluation, ...]:
        return tuple(self._epochs)

    def __len__(self) -> int:
        return len(self._epochs)

    def add_epoch(self, epoch: EpochEvaluation) -> None:
        self._epochs.append(epoch)

    def get_final_epoch(self) -> EpochEvaluation:
        """
        Raises
        ------
        IndexError
            If no epoch has been recorded.
        """
        if not self._epochs:
            raise IndexError("TrainingEvaluation has no epochs")
        return self._epochs[-1]

    def to_dict(self) -> Dict[str, Any]:
        return {"epochs": [e.to_dict() for e in self._epochs]}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrainingEvaluation":
        out = cls()
        for e in d.get("epochs", []):
            out.add_epoch(EpochEvaluation.from_dict(e))
        return out


class ModelEvaluation:
    """
    Append-only collection of per-fold training evaluations.
    """

    def __init__(self) -> None:
        self._folds: List[TrainingEvaluation] = []

    @property
    def folds(self) -> Tuple[TrainingEvaluation, ...]:
        return tuple(self._folds)

    def __len__(self) -> int:
        return len(self._folds)

    def add_fold(self, fold: TrainingEvaluation) -> None:
        self._folds.append(fold)

    def get_final_epochs(self) -> List[EpochEvaluation]:
        return [f.get_final_epoch() for f in self._folds]

    def get_final_average(self) -> EpochEvaluation:
        """
        Average every metric of the folds' final epochs.

        Metrics missing (None) in some folds are averaged over the folds
        that have them; a metric missing everywhere stays None.
        """
        finals = self.get_final_epochs()
        if not finals:
            raise IndexError("ModelEvaluation has no folds")
        avg: Dict[str, Optional[float]] = {}
        for f in fields(EpochEvaluation):
            vals = [getattr(e, f.name) for e in finals if getattr(e, f.name) is not None]
            avg[f.name] = (sum(vals) / len(vals)) if vals else None
        return EpochEvaluation(**avg)  # type: ignore[arg-type]

    def to_dict(self) -> Dict[str, Any]:
        return {"folds": [f.to_dict() for f in self._folds]}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelEvaluation":
        out = cls()
        for f in d.get("folds", []):
            out.add_fold(TrainingEvaluation.from_dict(f))
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, text: str) -> "ModelEvaluation":
        return cls.from_dict(json.loads(text))
