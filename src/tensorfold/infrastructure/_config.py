"""
Process-wide engine configuration.

Configuration is read once from environment variables (optionally seeded
from a `.env` file through python-dotenv) and cached for the lifetime of
the process. The scalar dtype and the tensor backend are therefore fixed
at import time; changing the environment afterwards has no effect on
tensors already bound by `tensorfold.infrastructure.tensor`.

Recognized variables
--------------------
- ``TENSORFOLD_SCALAR``: ``float64`` (default) or ``float32``.
- ``TENSORFOLD_BACKEND``: ``numpy`` (default) or ``threaded``.
- ``TENSORFOLD_NUM_THREADS``: positive worker count for the threaded backend.
  Defaults to ``os.cpu_count()``.
- ``TENSORFOLD_SEED``: integer seed for the process random generator.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

import numpy as np
from dotenv import load_dotenv

ENV_PREFIX = "TENSORFOLD_"

SUPPORTED_SCALARS = ("float32", "float64")
SUPPORTED_BACKENDS = ("numpy", "threaded")


@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable snapshot of the engine configuration.

    Attributes
    ----------
    scalar : str
        Name of the floating dtype used by every tensor.
    backend : str
        Name of the tensor backend bound at import time.
    num_threads : int
        Worker count used by the threaded backend.
    seed : Optional[int]
        Seed for the process random generator, or None for OS entropy.
    """

    scalar: str = "float64"
    backend: str = "numpy"
    num_threads: int = 1
    seed: Optional[int] = None

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.scalar)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def load_config(environ: Mapping[str, str]) -> EngineConfig:
    """
    Build an `EngineConfig` from an environment mapping.

    Parameters
    ----------
    environ : Mapping[str, str]
        Source of ``TENSORFOLD_*`` variables (usually ``os.environ``).

    Returns
    -------
    EngineConfig
        Parsed and validated configuration.

    Raises
    ------
    ValueError
        If any variable holds an unsupported or malformed value.
    """
    scalar = environ.get(ENV_PREFIX + "SCALAR", "float64").strip().lower()
    if scalar not in SUPPORTED_SCALARS:
        raise ValueError(
            f"{ENV_PREFIX}SCALAR must be one of {SUPPORTED_SCALARS}, got {scalar!r}"
        )

    backend = environ.get(ENV_PREFIX + "BACKEND", "numpy").strip().lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"{ENV_PREFIX}BACKEND must be one of {SUPPORTED_BACKENDS}, got {backend!r}"
        )

    raw_threads = environ.get(ENV_PREFIX + "NUM_THREADS", "").strip()
    if raw_threads:
        num_threads = _parse_int(ENV_PREFIX + "NUM_THREADS", raw_threads)
        if num_threads <= 0:
            raise ValueError(
                f"{ENV_PREFIX}NUM_THREADS must be > 0, got {num_threads}"
            )
    else:
        num_threads = os.cpu_count() or 1

    raw_seed = environ.get(ENV_PREFIX + "SEED", "").strip()
    seed = _parse_int(ENV_PREFIX + "SEED", raw_seed) if raw_seed else None

    return EngineConfig(
        scalar=scalar, backend=backend, num_threads=num_threads, seed=seed
    )


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """
    Return the cached process configuration.

    The first call loads a `.env` file from the working directory (without
    overriding variables already present in the environment) and parses
    ``os.environ``.
    """
    load_dotenv(override=False)
    return load_config(os.environ)
