"""
Kaiming/He weight initializers, suited to ReLU networks.

- ``kaiming``: normal with ``std = sqrt(2 / fan_in)``.
- ``kaiming_uniform``: ``U(-sqrt(6 / fan_in), +sqrt(6 / fan_in))``.
"""

import math

from ._base import WeightInitializer
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


@WeightInitializer.register_initializer("kaiming")
def kaiming(tensor_cls, *dims):
    fan_in, _ = _calculate_fan_in_and_fan_out(tuple(dims))
    std = math.sqrt(2.0 / float(max(1, fan_in)))
    return tensor_cls.random_normal(*dims, mean=0.0, std=std)


@WeightInitializer.register_initializer("kaiming_uniform")
def kaiming_uniform(tensor_cls, *dims):
    fan_in, _ = _calculate_fan_in_and_fan_out(tuple(dims))
    bound = math.sqrt(6.0 / float(max(1, fan_in)))
    return tensor_cls.random_uniform(*dims, low=-bound, high=bound)
