"""
Model recipe consumed by the trainers.

A `Model` bundles everything a trainer needs to build and train a fresh
network for every run or fold: the dataset roles, a network factory, the
number of epochs, the batch size and the loss name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ...domain._dataset import DatasetSpec, IDataTable
from .._losses import Loss, get_loss
from ..models._network import Network
from ..tensor import Matrix

NetworkFactory = Callable[[int, int], Network]
"""``(n_inputs, n_outputs) -> Network``"""


@dataclass
class Model:
    """
    Training recipe.

    Attributes
    ----------
    dataset : DatasetSpec
        Input / output / id column roles.
    build_network : NetworkFactory
        Called with the number of input and output features; must return a
        freshly initialized network every time.
    epochs : int
        Number of epochs per run or fold. Must be > 0.
    loss : str
        Registered loss name. Defaults to "mse".
    batch_size : Optional[int]
        Training / prediction chunk size. None means full batch.
    """

    dataset: DatasetSpec
    build_network: NetworkFactory
    epochs: int
    loss: str = "mse"
    batch_size: Optional[int] = None

    def __post_init__(self) -> None:
        if int(self.epochs) <= 0:
            raise ValueError(f"epochs must be > 0, got {self.epochs}")
        if self.batch_size is not None and int(self.batch_size) <= 0:
            raise ValueError(f"batch_size must be > 0, got {self.batch_size}")
        get_loss(self.loss)

    def loss_fn(self) -> Loss:
        return get_loss(self.loss)

    def to_network(self) -> Network:
        return self.build_network(
            len(self.dataset.require_inputs()), len(self.dataset.require_outputs())
        )

    def to_xy(self, table: IDataTable) -> Tuple[Matrix, Matrix]:
        """Convert table rows into (inputs, outputs) matrices, samples as columns."""
        inputs: List[str] = self.dataset.require_inputs()
        outputs: List[str] = self.dataset.require_outputs()
        n = table.num_rows()
        if n == 0:
            raise ValueError("cannot build matrices from an empty table")
        x = Matrix.from_columns(table.to_rows(inputs))
        y = Matrix.from_columns(table.to_rows(outputs))
        return x, y

    def train_epoch(self, epoch: int, network: Network, table: IDataTable) -> float:
        """
        Train `network` for one epoch on `table`, visiting rows in a new
        random order.
        """
        x, y = self.to_xy(table.shuffled())
        return network.train(epoch, x, y, self.loss_fn(), self.batch_size)
