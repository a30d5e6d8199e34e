"""
Convolutional sub-network with a matrix interface.

`ConvNetwork` wraps a stack of image layers (convolutions, pooling,
activations) so it can be embedded as a single layer inside a dense
network:

    Network([
        ConvNetwork([...], channels=1, image_dims=(28, 28)),
        Full(Dense(flat_size, 10, adam()), "softmax"),
    ])

At the boundary it converts flattened matrix columns into an image batch
(`Image.from_samples`) on the way in and flattens the resulting image
batch on the way out. Backward performs the inverse conversions. The
output layout seen at forward time is recorded so backward can rebuild
the gradient image.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from ...domain._layer import LayerKind
from ..layers._layer import Layer
from ..tensor import Image, Matrix
from ._network import Network


class ConvNetwork(Network):
    """
    Network of image layers exposed as a matrix-to-matrix layer.

    Parameters
    ----------
    layers : Sequence[Layer]
        Image layers applied in order.
    channels : int
        Number of channels of the input images.
    image_dims : Optional[tuple[int, int]]
        ``(rows, cols)`` of the input images. When omitted, inputs are
        assumed to be square.
    """

    kind = LayerKind.CONV_NETWORK

    def __init__(
        self,
        layers: Sequence[Layer],
        channels: int,
        image_dims: Optional[Tuple[int, int]] = None,
    ) -> None:
        super().__init__(layers)
        self.channels = int(channels)
        if self.channels <= 0:
            raise ValueError(f"channels must be > 0, got {channels}")
        self.image_dims = None if image_dims is None else (int(image_dims[0]), int(image_dims[1]))
        self._out_layout: Optional[Tuple[int, int, int]] = None

    def forward(self, input: Matrix) -> Matrix:
        images = Image.from_samples(input, self.channels, self.image_dims)
        out: Image = super().forward(images)
        rows, cols = out.image_dims
        self._out_layout = (rows, cols, out.channels)
        return out.flatten()

    def backward(self, epoch: int, output_gradient: Matrix) -> Matrix:
        rows, cols, channels = self._require_cached(self._out_layout, "output layout")
        g = Image.from_samples(output_gradient, channels, (rows, cols))
        return super().backward(epoch, g).flatten()

    def summary_line(self) -> str:
        dims = "square" if self.image_dims is None else f"{self.image_dims[0]}x{self.image_dims[1]}"
        return f"ConvNetwork(layers={len(self.layers)}, channels={self.channels}, image={dims})"
