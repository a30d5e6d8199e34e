"""
Loss function primitives for tensorfold.

Every loss compares a batch of predictions with a batch of targets, both
`Matrix` values of shape features x samples, and provides:

- `loss(y_true, y_pred) -> float`: scalar loss of the whole batch
- `loss_prime(y_true, y_pred) -> Matrix`: gradient w.r.t. `y_pred`
- `sample_losses(y_true, y_pred) -> list[float]`: loss of each sample on
  its own (used for validation mean / standard deviation)

Currently implemented losses:
- MSE : Mean Squared Error (``"mse"``)
- BCE : Binary Cross Entropy on probabilities (``"bce"``)
- CCE : Categorical Cross Entropy on probabilities (``"cce"``)

Design notes
------------
- All arithmetic goes through tensor methods so losses stay backend agnostic.
- `y_true` and `y_pred` must have identical shapes; the sample broadcast
  rule of tensors is not applied here.
- Probability losses clip predictions into ``[eps, 1 - eps]``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, ClassVar, Dict, List, Type, TypeVar

from ..domain._errors import ShapeMismatchError
from ..domain._tensor import IMatrix

L = TypeVar("L", bound=Type["Loss"])

EPS = 1e-12


class Loss(ABC):
    """
    Base class of batch losses.
    """

    LOSSES: ClassVar[Dict[str, Type["Loss"]]] = {}

    name: ClassVar[str] = ""

    @classmethod
    def register_loss(cls, name: str) -> Callable[[L], L]:
        """Decorator registering a loss class under `name`."""

        def decorator(loss_cls: L) -> L:
            if name in cls.LOSSES:
                raise ValueError(f"Loss already registered: {name!r}")
            loss_cls.name = name
            cls.LOSSES[name] = loss_cls
            return loss_cls

        return decorator

    @staticmethod
    def _check(op: str, y_true: IMatrix, y_pred: IMatrix) -> None:
        if tuple(y_true.shape) != tuple(y_pred.shape):
            raise ShapeMismatchError(op, y_true.shape, y_pred.shape)

    @abstractmethod
    def loss(self, y_true: IMatrix, y_pred: IMatrix) -> float:
        raise NotImplementedError

    @abstractmethod
    def loss_prime(self, y_true: IMatrix, y_pred: IMatrix) -> IMatrix:
        raise NotImplementedError

    @abstractmethod
    def sample_losses(self, y_true: IMatrix, y_pred: IMatrix) -> List[float]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def get_loss(name: str) -> Loss:
    """
    Instantiate a registered loss by name.

    Raises
    ------
    ValueError
        If `name` is not registered.
    """
    try:
        return Loss.LOSSES[name]()
    except KeyError as e:
        available = ", ".join(sorted(Loss.LOSSES)) or "<none>"
        raise ValueError(f"Unsupported loss name: {name!r}. Available: {available}") from e


@Loss.register_loss("mse")
class MSE(Loss):
    """
    Mean Squared Error.

        MSE(y, p) = mean((p - y)^2)
        dMSE/dp   = 2 * (p - y) / N

    where N is the total number of elements.
    """

    def loss(self, y_true, y_pred):
        self._check("mse", y_true, y_pred)
        return (y_pred - y_true).square().mean()

    def loss_prime(self, y_true, y_pred):
        self._check("mse", y_true, y_pred)
        n = y_true.features * y_true.samples
        return (y_pred - y_true) * (2.0 / n)

    def sample_losses(self, y_true, y_pred):
        self._check("mse", y_true, y_pred)
        per_sample = (y_pred - y_true).square().sum_features() / y_true.features
        return per_sample.values()


@Loss.register_loss("bce")
class BCE(Loss):
    """
    Binary Cross Entropy on probabilities.

        BCE(y, p) = -mean(y * log(p) + (1 - y) * log(1 - p))
        dBCE/dp   = (p - y) / (p * (1 - p)) / N
    """

    @staticmethod
    def _elementwise(y_true, p):
        return -(y_true * p.log() + (1.0 - y_true) * (1.0 - p).log())

    def loss(self, y_true, y_pred):
        self._check("bce", y_true, y_pred)
        p = y_pred.clip(EPS, 1.0 - EPS)
        return self._elementwise(y_true, p).mean()

    def loss_prime(self, y_true, y_pred):
        self._check("bce", y_true, y_pred)
        p = y_pred.clip(EPS, 1.0 - EPS)
        n = y_true.features * y_true.samples
        return (p - y_true) / (p * (1.0 - p)) / n

    def sample_losses(self, y_true, y_pred):
        self._check("bce", y_true, y_pred)
        p = y_pred.clip(EPS, 1.0 - EPS)
        return (self._elementwise(y_true, p).sum_features() / y_true.features).values()


@Loss.register_loss("cce")
class CCE(Loss):
    """
    Categorical Cross Entropy on probabilities with one-hot targets.

        CCE(y, p) = -sum(y * log(p)) / samples
        dCCE/dp   = -(y / p) / samples
    """

    def loss(self, y_true, y_pred):
        self._check("cce", y_true, y_pred)
        p = y_pred.clip(EPS, 1.0)
        return -(y_true * p.log()).sum() / y_true.samples

    def loss_prime(self, y_true, y_pred):
        self._check("cce", y_true, y_pred)
        p = y_pred.clip(EPS, 1.0)
        return -(y_true / p) / y_true.samples

    def sample_losses(self, y_true, y_pred):
        self._check("cce", y_true, y_pred)
        p = y_pred.clip(EPS, 1.0)
        return (-(y_true * p.log())).sum_features().values()
