"""
Composite "full" layer: learnable layer + activation + optional dropout.

This is the usual building block of dense and convolutional stacks:

    Full(Dense(16, 8, adam()), "relu", dropout=0.2)

The learnable capability and the parameter rows are those of the wrapped
layer. The dropout capability is exposed only when a dropout rate is set.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ...domain._layer import LayerKind, ParameterRows
from ._activation import Activation
from ._dropout import Dropout
from ._layer import LearnableLayer


class Full(LearnableLayer):
    """
    Learnable layer followed by an activation and optional dropout.

    Parameters
    ----------
    layer : LearnableLayer
        The learnable core (e.g. `Dense` or `Convolutional`).
    activation : str or Activation
        Activation name or instance.
    dropout : Optional[float]
        Dropout rate applied after the activation, or None.
    """

    kind = LayerKind.FULL

    def __init__(
        self,
        layer: LearnableLayer,
        activation: Union[str, Activation] = "linear",
        dropout: Optional[float] = None,
    ) -> None:
        self.layer = layer
        self.activation = (
            activation if isinstance(activation, Activation) else Activation(activation)
        )
        self.dropout = Dropout(dropout) if dropout is not None else None

    def forward(self, input: Any) -> Any:
        out = self.activation.forward(self.layer.forward(input))
        if self.dropout is not None:
            out = self.dropout.forward(out)
        return out

    def backward(self, epoch: int, output_gradient: Any) -> Any:
        g = output_gradient
        if self.dropout is not None:
            g = self.dropout.backward(epoch, g)
        g = self.activation.backward(epoch, g)
        return self.layer.backward(epoch, g)

    def as_dropout(self) -> Optional[Dropout]:
        return self.dropout

    def parameter_layout(self) -> Tuple[int, ...]:
        return self.layer.parameter_layout()

    def get_learnable_parameters(self) -> ParameterRows:
        return self.layer.get_learnable_parameters()

    def _load_rows(self, rows: Sequence[Sequence[float]]) -> None:
        self.layer._load_rows(rows)

    def summary_line(self) -> str:
        parts = [self.layer.summary_line(), self.activation.summary_line()]
        if self.dropout is not None:
            parts.append(self.dropout.summary_line())
        return "Full[" + " -> ".join(parts) + "]"

    def get_config(self) -> Dict[str, Any]:
        return {
            "layer": self.layer.summary_line(),
            "activation": self.activation.name,
            "dropout": None if self.dropout is None else self.dropout.rate,
        }
