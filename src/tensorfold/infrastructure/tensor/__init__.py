"""
Tensor public API.

This package binds the engine-wide `Matrix` and `Image` names to one
backend, chosen once at import time from ``TENSORFOLD_BACKEND``:

- ``numpy`` (default): single-threaded NumPy tensors.
- ``threaded``: NumPy tensors whose matrix product and correlation
  kernels are split across a worker pool.

Layers, losses and optimizers import `Matrix` / `Image` from here and
never branch on the backend themselves.

Exports
-------
- Matrix, Image: the bound tensor types.
- Tensor: common base class (useful for isinstance checks).
- seed, get_rng: process random generator control.
"""

from .._config import get_config
from ._tensor import Tensor
from ._matrix import Matrix as _NumpyMatrix
from ._image import Image as _NumpyImage
from ._threaded import ThreadedImage, ThreadedMatrix
from ._rng import get_rng, seed

if get_config().backend == "threaded":
    Matrix = ThreadedMatrix
    Image = ThreadedImage
else:
    Matrix = _NumpyMatrix
    Image = _NumpyImage

__all__ = [
    "Matrix",
    "Image",
    Tensor.__name__,
    seed.__name__,
    get_rng.__name__,
]
