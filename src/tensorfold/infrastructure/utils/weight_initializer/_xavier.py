"""
Xavier/Glorot weight initializers.

Implemented variants
--------------------
- ``glorot_uniform`` / ``xavier_uniform``:
    ``U(-sqrt(6/(fan_in+fan_out)), +sqrt(6/(fan_in+fan_out)))``.
- ``xavier`` / ``glorot_normal``:
    zero-mean normal with ``std = sqrt(2 / (fan_in + fan_out))``.

Notes
-----
Fan-in and fan-out are computed from the requested dimensions via
``_calculate_fan_in_and_fan_out``.
"""

import math

from ._base import WeightInitializer
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


def _fans(dims):
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tuple(dims))
    return max(1, int(fan_in)), max(1, int(fan_out))


@WeightInitializer.register_initializer("glorot_uniform")
@WeightInitializer.register_initializer("xavier_uniform")
def glorot_uniform(tensor_cls, *dims):
    """
    Apply Xavier (Glorot) uniform initialization.

        U(-bound, +bound), where bound = sqrt(6 / (fan_in + fan_out))
    """
    fan_in, fan_out = _fans(dims)
    bound = math.sqrt(6.0 / float(fan_in + fan_out))
    return tensor_cls.random_uniform(*dims, low=-bound, high=bound)


@WeightInitializer.register_initializer("xavier")
@WeightInitializer.register_initializer("glorot_normal")
def xavier(tensor_cls, *dims):
    """
    Apply Xavier (Glorot) normal initialization.

        std = sqrt(2 / (fan_in + fan_out))
    """
    fan_in, fan_out = _fans(dims)
    std = math.sqrt(2.0 / float(fan_in + fan_out))
    return tensor_cls.random_normal(*dims, mean=0.0, std=std)
