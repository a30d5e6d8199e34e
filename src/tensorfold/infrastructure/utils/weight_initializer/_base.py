"""
Weight initializer registry and dispatch utilities.

This module defines the concrete `WeightInitializer` used by layers to build
their initial weight and bias tensors from a registered strategy name.

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each initializer is a callable ``(tensor_cls, *dims) -> tensor`` that
  builds a *new* tensor. Tensors are values, so nothing is filled in place.
- The dispatcher resolves an initializer by name at construction time and
  invokes it via `__call__`.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("glorot_uniform")
    def glorot_uniform(tensor_cls, *dims):
        ...

Applying an initializer:

    init = WeightInitializer("glorot_uniform")
    weights = init(Matrix, 8, 4)

Notes
-----
- Registration keys must be unique unless explicitly overwritten.
- Initializers compute fan-in / fan-out from `dims` internally.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, TypeVar

from ....domain.utils._weight_initialization import _WeightInitializer

T = TypeVar("T", bound=Callable[..., Any])


class WeightInitializer(_WeightInitializer):
    """
    Registry-backed weight initializer dispatcher.

    Usage
    -----
    Register:
        @WeightInitializer.register_initializer("kaiming")
        def kaiming(tensor_cls, *dims): ...

    Dispatch:
        init = WeightInitializer("kaiming")
        init(Matrix, 8, 4)
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., Any]]] = {}

    def __init__(self, initializer_name: str) -> None:
        try:
            self._initializer: Callable[..., Any] = self.INITIALIZERS[
                initializer_name
            ]
        except KeyError as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise ValueError(
                f"Unsupported initializer name: {initializer_name!r}. "
                f"Available: {available}"
            ) from e
        self.name = initializer_name

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register a weight initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ValueError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    def __call__(self, tensor_cls: type, *dims: int) -> Any:
        return self._initializer(tensor_cls, *dims)

    def __repr__(self) -> str:
        return f"WeightInitializer({self.name!r})"
