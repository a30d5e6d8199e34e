"""
Threaded NumPy backend.

`ThreadedMatrix` and `ThreadedImage` keep the exact contract of the NumPy
tensors but split their heavy kernels (matrix product and the three
correlation kernels) across a shared `ThreadPoolExecutor`. NumPy releases
the GIL inside BLAS and einsum, so independent chunks run concurrently.

Work is always split along the sample axis. Chunks are independent slices
of read-only buffers, so no synchronization is needed beyond joining the
futures.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Callable, List

import numpy as np

from .._config import get_config
from ..ops.correlate_cpu import (
    convolve_full_cpu,
    correlate_kernel_grad_cpu,
    cross_correlate_valid_cpu,
)
from ._image import Image
from ._matrix import Matrix

MIN_SAMPLES_PER_TASK = 8
"""Below this many samples per worker the kernels run inline."""


@lru_cache(maxsize=1)
def _executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(
        max_workers=get_config().num_threads, thread_name_prefix="tensorfold"
    )


def _sample_chunks(n: int) -> List[slice]:
    workers = get_config().num_threads
    tasks = max(1, min(workers, n // MIN_SAMPLES_PER_TASK))
    bounds = np.linspace(0, n, tasks + 1).astype(int)
    return [slice(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]


def _map_samples(fn: Callable[[slice], np.ndarray], n: int) -> List[np.ndarray]:
    chunks = _sample_chunks(n)
    if len(chunks) <= 1:
        return [fn(slice(0, n))]
    return list(_executor().map(fn, chunks))


class ThreadedMatrix(Matrix):
    """Matrix whose product is computed in column blocks on worker threads."""

    def _matmul(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        parts = _map_samples(lambda s: a @ b[:, s], b.shape[1])
        return parts[0] if len(parts) == 1 else np.concatenate(parts, axis=1)


class ThreadedImage(Image):
    """Image whose correlation kernels run per sample block on worker threads."""

    MATRIX_CLS = ThreadedMatrix

    def _correlate_valid(self, x: np.ndarray, k: np.ndarray) -> np.ndarray:
        parts = _map_samples(lambda s: cross_correlate_valid_cpu(x[..., s], k), x.shape[3])
        return parts[0] if len(parts) == 1 else np.concatenate(parts, axis=3)

    def _convolve_full(self, g: np.ndarray, k: np.ndarray) -> np.ndarray:
        parts = _map_samples(lambda s: convolve_full_cpu(g[..., s], k), g.shape[3])
        return parts[0] if len(parts) == 1 else np.concatenate(parts, axis=3)

    def _kernel_grad(self, x: np.ndarray, g: np.ndarray) -> np.ndarray:
        parts = _map_samples(
            lambda s: correlate_kernel_grad_cpu(x[..., s], g[..., s]), x.shape[3]
        )
        return np.sum(parts, axis=0)
