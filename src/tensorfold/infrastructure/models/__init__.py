"""
Model public API: networks, parameter sets and evaluation records.
"""

from ._network import Network
from ._conv_network import ConvNetwork
from ._params import NetworkParams
from ._evaluation import EpochEvaluation, ModelEvaluation, TrainingEvaluation

__all__ = [
    Network.__name__,
    ConvNetwork.__name__,
    NetworkParams.__name__,
    EpochEvaluation.__name__,
    TrainingEvaluation.__name__,
    ModelEvaluation.__name__,
]
