"""
Activation layers.

An `Activation` applies a registered nonlinearity and carries no learnable
state. Nonlinearities are registered by name, in the same decorator style
as weight initializers:

    @Activation.register_activation("relu")
    class _ReLU(ActivationFunction): ...

Built-in names: ``linear``, ``relu``, ``leaky_relu``, ``sigmoid``, ``tanh``
and ``softmax``. Elementwise functions work on any tensor rank; ``softmax``
normalizes over the feature axis of a `Matrix` and is Matrix-only.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Optional, Type, TypeVar

from ...domain._layer import LayerKind
from ...domain._tensor import IMatrix
from ._layer import Layer

A = TypeVar("A", bound=Type["ActivationFunction"])


class ActivationFunction:
    """
    A nonlinearity and its backward rule.

    Subclasses implement `activate` and either `derivative` (for
    elementwise functions) or override `gradient` directly.
    """

    def activate(self, x: Any) -> Any:
        raise NotImplementedError

    def derivative(self, x: Any, y: Any) -> Any:
        """Elementwise derivative given input `x` and output `y`."""
        raise NotImplementedError

    def gradient(self, x: Any, y: Any, output_gradient: Any) -> Any:
        return output_gradient * self.derivative(x, y)


class Activation(Layer):
    """
    Stateless nonlinearity layer.

    Parameters
    ----------
    name : str
        Registered activation name.

    Raises
    ------
    ValueError
        If `name` is not registered.
    """

    kind = LayerKind.ACTIVATION

    ACTIVATIONS: ClassVar[Dict[str, Callable[[], ActivationFunction]]] = {}

    def __init__(self, name: str) -> None:
        try:
            factory = self.ACTIVATIONS[name]
        except KeyError as e:
            available = ", ".join(sorted(self.ACTIVATIONS)) or "<none>"
            raise ValueError(
                f"Unsupported activation name: {name!r}. Available: {available}"
            ) from e
        self.name = name
        self.function = factory()
        self._input: Optional[Any] = None
        self._output: Optional[Any] = None

    @classmethod
    def register_activation(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[A], A]:
        """
        Decorator registering an `ActivationFunction` subclass under `name`.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Activation name must be a non-empty string")

        def decorator(fn_cls: A) -> A:
            if not overwrite and name in cls.ACTIVATIONS:
                raise ValueError(f"Activation already registered: {name!r}")
            cls.ACTIVATIONS[name] = fn_cls
            return fn_cls

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        return tuple(sorted(cls.ACTIVATIONS))

    def forward(self, input: Any) -> Any:
        self._input = input
        self._output = self.function.activate(input)
        return self._output

    def backward(self, epoch: int, output_gradient: Any) -> Any:
        x = self._require_cached(self._input)
        return self.function.gradient(x, self._output, output_gradient)

    def get_config(self) -> Dict[str, Any]:
        return {"name": self.name}


@Activation.register_activation("linear")
class _Linear(ActivationFunction):
    def activate(self, x):
        return x

    def gradient(self, x, y, output_gradient):
        return output_gradient


@Activation.register_activation("relu")
class _ReLU(ActivationFunction):
    def activate(self, x):
        return x.maximum(0.0)

    def derivative(self, x, y):
        return x.greater_than(0.0)


@Activation.register_activation("leaky_relu")
class _LeakyReLU(ActivationFunction):
    negative_slope = 0.01

    def activate(self, x):
        return x.maximum(0.0) + x.minimum(0.0) * self.negative_slope

    def derivative(self, x, y):
        mask = x.greater_than(0.0)
        return mask + (1.0 - mask) * self.negative_slope


@Activation.register_activation("sigmoid")
class _Sigmoid(ActivationFunction):
    def activate(self, x):
        # clip keeps exp() finite for very negative inputs
        return 1.0 / (1.0 + (-x.clip(-500.0, 500.0)).exp())

    def derivative(self, x, y):
        return y * (1.0 - y)


@Activation.register_activation("tanh")
class _Tanh(ActivationFunction):
    def activate(self, x):
        return x.tanh()

    def derivative(self, x, y):
        return 1.0 - y.square()


@Activation.register_activation("softmax")
class _Softmax(ActivationFunction):
    """
    Column-wise softmax.

    Backward applies the full Jacobian of every column:
    ``dx = y * (g - sum_features(g * y))``.
    """

    @staticmethod
    def _require_matrix(x):
        if not isinstance(x, IMatrix):
            raise TypeError(f"softmax requires a Matrix input, got {type(x).__name__}")
        return x

    def activate(self, x):
        x = self._require_matrix(x)
        n = x.features
        shifted = x - x.column_max().broadcast_rows(n)
        e = shifted.exp()
        return e / e.sum_features().broadcast_rows(n)

    def gradient(self, x, y, output_gradient):
        g = self._require_matrix(output_gradient)
        dot = (g * y).sum_features().broadcast_rows(y.features)
        return y * (g - dot)
