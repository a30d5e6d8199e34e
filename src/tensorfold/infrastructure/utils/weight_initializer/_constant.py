"""
Constant and plain uniform initializers.

- ``zeros``: all zeros (default for biases).
- ``ones``: all ones.
- ``uniform``: ``U(0, 1)``.
- ``uniform_signed``: ``U(-1, 1)``.
"""

from ._base import WeightInitializer


@WeightInitializer.register_initializer("zeros")
def zeros(tensor_cls, *dims):
    return tensor_cls.zeros(*dims)


@WeightInitializer.register_initializer("ones")
def ones(tensor_cls, *dims):
    return tensor_cls.constant(*dims, value=1.0)


@WeightInitializer.register_initializer("uniform")
def uniform(tensor_cls, *dims):
    return tensor_cls.random_uniform(*dims, low=0.0, high=1.0)


@WeightInitializer.register_initializer("uniform_signed")
def uniform_signed(tensor_cls, *dims):
    return tensor_cls.random_uniform(*dims, low=-1.0, high=1.0)
