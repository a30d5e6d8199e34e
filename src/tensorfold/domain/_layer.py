"""
Domain-level layer contracts for tensorfold.

A layer is a forward/backward unit. Every layer supports the base
contract; two capabilities are optional and are discovered through query
methods that return the capability object or ``None``, never by
downcasting:

- Learnable: owns weight/bias tensors that can be exported as rows and
  restored from rows.
- Dropout: can be switched between training (random masking) and
  inference (identity) behaviour.

`LayerKind` tags every concrete layer so heterogeneous layer lists can be
inspected (e.g. for summaries) without isinstance chains.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ._tensor import ITensor

ParameterRows = List[List[float]]
"""One learnable layer's parameters: weight rows followed by the bias row."""


class LayerKind(str, Enum):
    """Tag of a concrete layer variant."""

    DENSE = "dense"
    ACTIVATION = "activation"
    CONVOLUTIONAL = "convolutional"
    POOLING = "pooling"
    DROPOUT = "dropout"
    FULL = "full"
    NETWORK = "network"
    CONV_NETWORK = "conv_network"


@runtime_checkable
class ILearnableLayer(Protocol):
    """
    Capability of layers that own learnable tensors.

    Row layout
    ----------
    Parameters are exported as a list of rows of floats. The final row of
    every single layer is its bias vector; composite layers concatenate the
    rows of their inner learnable layers in order.
    """

    def get_learnable_parameters(self) -> ParameterRows: ...

    def set_learnable_parameters(self, rows: Sequence[Sequence[float]]) -> None:
        """
        Restore parameters from rows.

        Raises
        ------
        ParameterCountMismatchError
            If the rows do not match `parameter_layout()`. Nothing is
            mutated in that case.
        """
        ...

    def parameter_layout(self) -> Tuple[int, ...]:
        """Return the expected length of every exported row, in order."""
        ...


@runtime_checkable
class IDropoutLayer(Protocol):
    """
    Capability of layers with train-time stochastic masking.
    """

    def enable_dropout(self) -> None: ...

    def disable_dropout(self) -> None: ...


@runtime_checkable
class ILayer(Protocol):
    """
    Layer interface contract.

    Required methods
    ----------------
    - `forward(input)` computes the output and caches what backward needs.
    - `backward(epoch, output_gradient)` returns the input gradient and
      updates the layer's own learnable tensors through its optimizers.
    - `as_learnable()` / `as_dropout()` expose optional capabilities.
    """

    @property
    def kind(self) -> LayerKind: ...

    def forward(self, input: ITensor) -> ITensor: ...

    def backward(self, epoch: int, output_gradient: ITensor) -> ITensor: ...

    def as_learnable(self) -> Optional[ILearnableLayer]: ...

    def as_dropout(self) -> Optional[IDropoutLayer]: ...
