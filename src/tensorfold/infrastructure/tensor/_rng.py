"""
Process random generator.

All randomness in the engine (weight initialization, dropout masks, data
shuffling, fold assignment) draws from a single `numpy.random.Generator`
so that a run is reproducible from one seed. The generator is created
lazily from ``TENSORFOLD_SEED`` and can be reseeded explicitly.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .._config import get_config

_GENERATOR: Optional[np.random.Generator] = None


def seed(value: Optional[int]) -> None:
    """
    Reseed the process random generator.

    Parameters
    ----------
    value : Optional[int]
        Seed value. ``None`` draws fresh OS entropy.
    """
    global _GENERATOR
    _GENERATOR = np.random.default_rng(value)


def get_rng() -> np.random.Generator:
    """Return the process random generator, creating it on first use."""
    if _GENERATOR is None:
        seed(get_config().seed)
    assert _GENERATOR is not None
    return _GENERATOR
