"""
Weight initialization public API.

This module aggregates the built-in initialization strategies (constants,
uniform, Xavier/Glorot, Kaiming/He) and registers them into the global
`WeightInitializer` registry via import side effects.

Exports
-------
- WeightInitializer:
    The registry-backed dispatcher used by layers to build initial tensors.

Notes
-----
Concrete initializer functions are accessed indirectly via registry names.
"""

from ._constant import *
from ._xavier import *
from ._kaiming import *
from ._base import WeightInitializer

__all__ = [
    WeightInitializer.__name__,
]
