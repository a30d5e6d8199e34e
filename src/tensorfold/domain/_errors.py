"""
Engine-level exceptions for tensorfold.

This module defines the error taxonomy shared by tensors, layers, networks
and trainers. Each error stores the values that triggered it as attributes
so callers (and tests) can inspect the failure without parsing messages.

All of these errors are terminal for the current training run. Nothing in
the engine retries or recovers from them.
"""

from typing import Any, Sequence, Tuple


class ShapeMismatchError(ValueError):
    """
    Raised when two tensor operands have incompatible dimensions.

    The broadcast rule only allows the sample (last) dimension to differ,
    and only when one operand holds exactly one sample. Any other mismatch
    (including a rank mismatch) raises this error.

    Attributes
    ----------
    op : str
        Name of the operation that was attempted (e.g. "add", "dot").
    left : tuple[int, ...]
        Shape of the left operand (or the expected shape).
    right : tuple[int, ...]
        Shape of the right operand (or the actual shape).
    """

    def __init__(
        self, op: str, left: Sequence[int], right: Sequence[int], detail: str = ""
    ) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        op : str
            The operation name.
        left : Sequence[int]
            Shape of the left operand.
        right : Sequence[int]
            Shape of the right operand.
        detail : str, optional
            Extra context appended to the message.
        """
        self.op = op
        self.left: Tuple[int, ...] = tuple(int(d) for d in left)
        self.right: Tuple[int, ...] = tuple(int(d) for d in right)
        msg = f"{op}: incompatible shapes {self.left} and {self.right}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg + ".")


class UninitializedStateError(RuntimeError):
    """
    Raised when state is read before it has been produced.

    Typical causes are calling `backward` on a layer that has never run
    `forward`, or reading an optimizer buffer before its first update.

    Attributes
    ----------
    owner : str
        Name of the object whose state is missing.
    what : str
        Description of the missing state.
    """

    def __init__(self, owner: str, what: str) -> None:
        super().__init__(f"{owner}: {what} is not initialized.")
        self.owner = owner
        self.what = what


class ParameterCountMismatchError(ValueError):
    """
    Raised when a parameter set does not match a network topology.

    The check covers both the number of entries / rows and the length of
    every row. It always happens before any layer is mutated.

    Attributes
    ----------
    location : str
        Where the mismatch was found (e.g. "layer 2, row 0").
    expected : Any
        Expected count or length.
    actual : Any
        Count or length found in the supplied parameters.
    """

    def __init__(self, location: str, expected: Any, actual: Any) -> None:
        super().__init__(
            f"Parameter mismatch at {location}: expected {expected}, got {actual}."
        )
        self.location = location
        self.expected = expected
        self.actual = actual


class MissingRequiredColumnError(KeyError):
    """
    Raised when a dataset specification or table lacks a required column.

    Attributes
    ----------
    role : str
        Role of the missing column (e.g. "id", "output", "input").
    column : str | None
        Name of the missing column, or None when no column has that role.
    """

    def __init__(self, role: str, column: "str | None" = None) -> None:
        if column is None:
            msg = f"No column is configured as the {role} column."
        else:
            msg = f"Required {role} column {column!r} is missing."
        super().__init__(msg)
        self.role = role
        self.column = column

    def __str__(self) -> str:
        # KeyError quotes its argument by default
        return str(self.args[0])


class NumericalDivergenceError(ArithmeticError):
    """
    Raised when a training metric becomes NaN or infinite.

    Trainers check losses at every epoch boundary and raise this error
    instead of letting non-finite values propagate silently.

    Attributes
    ----------
    metric : str
        Name of the metric that diverged (e.g. "train_loss").
    epoch : int
        Zero-based epoch index at which divergence was detected.
    value : float
        The offending value.
    """

    def __init__(self, metric: str, epoch: int, value: float) -> None:
        super().__init__(
            f"{metric} diverged at epoch {epoch}: got non-finite value {value!r}."
        )
        self.metric = metric
        self.epoch = int(epoch)
        self.value = value
