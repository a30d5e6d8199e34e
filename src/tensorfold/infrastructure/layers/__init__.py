"""
Layer public API.

Exports every concrete layer variant together with the `Layer` and
`LearnableLayer` base classes.
"""

from ._layer import Layer, LearnableLayer
from ._dense import Dense
from ._activation import Activation, ActivationFunction
from ._convolutional import Convolutional
from ._pooling import AvgPooling, MaxPooling
from ._dropout import Dropout
from ._full import Full

__all__ = [
    Layer.__name__,
    LearnableLayer.__name__,
    Dense.__name__,
    Activation.__name__,
    ActivationFunction.__name__,
    Convolutional.__name__,
    AvgPooling.__name__,
    MaxPooling.__name__,
    Dropout.__name__,
    Full.__name__,
]
