"""
Convolutional layer.

Forward is a valid cross-correlation of the input batch against a kernel
bank plus an untied bias (one bias per output pixel and channel):

    Y = X (*) K + B

with shapes

- X: rows x cols x in_channels x n
- K: k x k x in_channels x out_channels
- B: (rows - k + 1) x (cols - k + 1) x out_channels x 1
- Y: (rows - k + 1) x (cols - k + 1) x out_channels x n

Backward computes, before any update:

- kernel gradient: ``X.correlate_samples(dY)``
- bias gradient: ``dY.sum_samples()``
- input gradient: ``dY.convolve_full(K)``

Parameter rows
--------------
One row per output channel holding that channel's ``k * k * in_channels``
kernel values (row-major over row, col, in_channel), followed by the
flattened bias image.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ...domain._errors import ShapeMismatchError
from ...domain._layer import LayerKind, ParameterRows
from ...domain._optimizers import IOptimizer
from ..tensor import Image
from ..utils.weight_initializer import WeightInitializer
from ._layer import LearnableLayer


def _pair(v: Union[int, Tuple[int, int]]) -> Tuple[int, int]:
    return (int(v[0]), int(v[1])) if isinstance(v, tuple) else (int(v), int(v))


class Convolutional(LearnableLayer):
    """
    2D convolution with stride 1, no padding and untied biases.

    Parameters
    ----------
    in_channels : int
        Channels of the input image.
    out_channels : int
        Number of kernels (channels of the output image).
    kernel_size : int
        Side of the square kernels.
    image_size : int or tuple[int, int]
        ``(rows, cols)`` of the input image (an int means square).
    optimizer : IOptimizer
        Optimizer prototype; `fresh()` copies are bound to the kernels and
        the biases.
    kernels_initializer : str, optional
        Registered initializer for the kernel bank. Defaults to
        "glorot_uniform".
    biases_initializer : str, optional
        Registered initializer for the bias image. Defaults to "zeros".
    """

    kind = LayerKind.CONVOLUTIONAL

    def __init__(
        self,
        in_channels: int,
        out_channels: int,
        kernel_size: int,
        image_size: Union[int, Tuple[int, int]],
        optimizer: IOptimizer,
        kernels_initializer: str = "glorot_uniform",
        biases_initializer: str = "zeros",
    ) -> None:
        self.in_channels = int(in_channels)
        self.out_channels = int(out_channels)
        self.kernel_size = int(kernel_size)
        self.image_size = _pair(image_size)

        rows, cols = self.image_size
        k = self.kernel_size
        if min(self.in_channels, self.out_channels, k) <= 0:
            raise ValueError(
                "in_channels, out_channels and kernel_size must be > 0, got "
                f"{self.in_channels}, {self.out_channels}, {k}"
            )
        if k > rows or k > cols:
            raise ValueError(
                f"kernel_size {k} does not fit image of size {self.image_size}"
            )
        self.output_size = (rows - k + 1, cols - k + 1)

        self.kernels: Image = WeightInitializer(kernels_initializer)(
            Image, k, k, self.in_channels, self.out_channels
        )
        self.biases: Image = WeightInitializer(biases_initializer)(
            Image, self.output_size[0], self.output_size[1], self.out_channels, 1
        )

        self.kernels_optimizer = optimizer.fresh()
        self.biases_optimizer = optimizer.fresh()

        self._input: Optional[Image] = None

    def forward(self, input: Image) -> Image:
        expected = (*self.image_size, self.in_channels)
        if tuple(input.shape[:3]) != expected:
            raise ShapeMismatchError(
                "Convolutional.forward", (*expected, input.samples), input.shape
            )
        self._input = input
        return input.cross_correlate(self.kernels) + self.biases

    def backward(self, epoch: int, output_gradient: Image) -> Image:
        x = self._require_cached(self._input)
        expected = (*self.output_size, self.out_channels, x.samples)
        if tuple(output_gradient.shape) != expected:
            raise ShapeMismatchError(
                "Convolutional.backward", expected, output_gradient.shape
            )

        kernels_gradient = x.correlate_samples(output_gradient)
        biases_gradient = output_gradient.sum_samples()
        input_gradient = output_gradient.convolve_full(self.kernels)

        self.kernels = self.kernels_optimizer.update_parameters(
            epoch, self.kernels, kernels_gradient
        )
        self.biases = self.biases_optimizer.update_parameters(
            epoch, self.biases, biases_gradient
        )
        return input_gradient

    # ------------------------------------------------------------------
    # Learnable
    # ------------------------------------------------------------------
    def parameter_layout(self) -> Tuple[int, ...]:
        k = self.kernel_size
        per_kernel = k * k * self.in_channels
        bias = self.output_size[0] * self.output_size[1] * self.out_channels
        return (per_kernel,) * self.out_channels + (bias,)

    def get_learnable_parameters(self) -> ParameterRows:
        rows = [self.kernels.get_sample(o).values() for o in range(self.out_channels)]
        rows.append(self.biases.values())
        return rows

    def _load_rows(self, rows: Sequence[Sequence[float]]) -> None:
        k = self.kernel_size
        kernels = [
            Image.from_values(rows[o], k, k, self.in_channels, 1)
            for o in range(self.out_channels)
        ]
        self.kernels = Image.join_samples(kernels)
        self.biases = Image.from_values(
            rows[self.out_channels],
            self.output_size[0],
            self.output_size[1],
            self.out_channels,
            1,
        )

    def get_config(self) -> Dict[str, Any]:
        return {
            "in_channels": self.in_channels,
            "out_channels": self.out_channels,
            "kernel_size": self.kernel_size,
            "image_size": self.image_size,
        }
