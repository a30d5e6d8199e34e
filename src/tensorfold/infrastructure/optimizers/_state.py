"""
Explicit optimizer state buffers.

Momentum velocity and Adam moments cannot be shaped until the first
gradient arrives. `LazyBuffer` models that as two explicit states
instead of a nullable attribute:

- uninitialized: `value` raises `UninitializedStateError`
- initialized: `value` returns the last stored tensor

`initialize_like(gradient)` performs the one-time transition by zero-filling
a tensor with the gradient's type and shape.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from ...domain._errors import UninitializedStateError

T = TypeVar("T")


class LazyBuffer(Generic[T]):
    """
    Optimizer buffer shaped from the first gradient it sees.

    Parameters
    ----------
    name : str
        Human-readable name used in error messages (e.g. "Momentum.velocity").
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._value: Optional[T] = None

    @property
    def initialized(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> T:
        """
        Return the stored tensor.

        Raises
        ------
        UninitializedStateError
            If the buffer has never been initialized or assigned.
        """
        if self._value is None:
            raise UninitializedStateError(self.name, "buffer")
        return self._value

    @value.setter
    def value(self, new: T) -> None:
        self._value = new

    def initialize_like(self, gradient: Any) -> T:
        """
        Zero-fill the buffer with `gradient`'s type and shape if still empty.

        Returns
        -------
        T
            The (possibly pre-existing) buffer value.
        """
        if self._value is None:
            self._value = type(gradient).zeros(*gradient.shape)
        return self._value

    def reset(self) -> None:
        self._value = None

    def __repr__(self) -> str:
        state = "initialized" if self.initialized else "uninitialized"
        return f"LazyBuffer(name={self.name!r}, {state})"
