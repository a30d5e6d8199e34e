"""
Rank-4 value tensor (rows x cols x channels x samples).

`Image` is the tensor consumed by convolutional and pooling layers. Kernel
banks reuse the same type, laid out as k_rows x k_cols x in_channels x
out_channels (the "samples" axis of a kernel bank indexes output channels).

Correlation and pooling delegate to the NumPy kernels in
`infrastructure.ops`. The three correlation entry points go through
overridable hooks (`_correlate_valid`, `_convolve_full`, `_kernel_grad`) so
a backend subclass can parallelize them.
"""

from __future__ import annotations

import math
from typing import ClassVar, Optional, Sequence, Tuple, Type

import numpy as np
from typing_extensions import Self

from ...domain._errors import ShapeMismatchError
from ..ops.correlate_cpu import (
    convolve_full_cpu,
    correlate_kernel_grad_cpu,
    cross_correlate_valid_cpu,
)
from ..ops.pool2d_cpu import (
    avgpool2d_forward_cpu,
    maxpool2d_forward_cpu,
    upsample2d_cpu,
)
from ._matrix import Matrix
from ._tensor import Tensor


class Image(Tensor):
    """
    Rows x cols x channels x samples image batch backed by NumPy.
    """

    RANK = 4

    MATRIX_CLS: ClassVar[Type[Matrix]] = Matrix
    """Matrix type produced by `flatten`."""

    @property
    def image_dims(self) -> Tuple[int, int]:
        return int(self._data.shape[0]), int(self._data.shape[1])

    @property
    def channels(self) -> int:
        return int(self._data.shape[2])

    # ------------------------------------------------------------------
    # Channel / sample access
    # ------------------------------------------------------------------
    def get_channel(self, index: int) -> Self:
        """Return channel `index` for every sample (one channel kept)."""
        c = self.channels
        if not -c <= int(index) < c:
            raise IndexError(f"channel index {index} out of range for {c} channels")
        i = int(index) % c
        return self._wrap(self._data[:, :, i : i + 1, :])

    @classmethod
    def join_channels(cls, images: Sequence["Image"]) -> Self:
        """
        Stack images along the channel dimension.

        Raises
        ------
        ShapeMismatchError
            If image dims or sample counts differ.
        """
        if not images:
            raise ValueError("join_channels requires at least one image")
        first = images[0].shape
        for img in images[1:]:
            s = img.shape
            if s[:2] != first[:2] or s[3] != first[3]:
                raise ShapeMismatchError("join_channels", first, s)
        return cls._wrap(np.concatenate([img._data for img in images], axis=2))

    # ------------------------------------------------------------------
    # Matrix bridge
    # ------------------------------------------------------------------
    def flatten(self) -> Matrix:
        """
        Flatten every sample into one column.

        Returns
        -------
        Matrix
            ``(rows * cols * channels) x samples`` matrix. Values are ordered
            row-major over (row, col, channel).
        """
        r, c, ch, n = self._data.shape
        return self.MATRIX_CLS._wrap(self._data.reshape(r * c * ch, n))

    @classmethod
    def from_samples(
        cls,
        samples: Matrix,
        channels: int,
        image_dims: Optional[Tuple[int, int]] = None,
    ) -> Self:
        """
        Rebuild an image batch from a flattened matrix.

        This is the inverse of `flatten`.

        Parameters
        ----------
        samples : Matrix
            ``(rows * cols * channels) x n`` matrix.
        channels : int
            Number of channels.
        image_dims : Optional[tuple[int, int]]
            ``(rows, cols)``. When omitted the image is assumed square.

        Raises
        ------
        ShapeMismatchError
            If the feature count cannot be split into the requested layout.
        """
        features, n = samples.shape
        channels = int(channels)
        if channels <= 0 or features % channels != 0:
            raise ShapeMismatchError(
                f"{cls.__name__}.from_samples",
                samples.shape,
                (channels,),
                detail="features must be divisible by channels",
            )
        if image_dims is None:
            side = math.isqrt(features // channels)
            image_dims = (side, side)
        rows, cols = int(image_dims[0]), int(image_dims[1])
        if rows * cols * channels != features:
            raise ShapeMismatchError(
                f"{cls.__name__}.from_samples",
                samples.shape,
                (rows, cols, channels, n),
            )
        return cls._wrap(samples._data.reshape(rows, cols, channels, n))

    # ------------------------------------------------------------------
    # Correlation
    # ------------------------------------------------------------------
    def _correlate_valid(self, x: np.ndarray, k: np.ndarray) -> np.ndarray:
        return cross_correlate_valid_cpu(x, k)

    def _convolve_full(self, g: np.ndarray, k: np.ndarray) -> np.ndarray:
        return convolve_full_cpu(g, k)

    def _kernel_grad(self, x: np.ndarray, g: np.ndarray) -> np.ndarray:
        return correlate_kernel_grad_cpu(x, g)

    def cross_correlate(self, kernels: "Image") -> Self:
        """
        Valid cross-correlation of this batch against a kernel bank.

        Parameters
        ----------
        kernels : Image
            ``k_rows x k_cols x channels x out_channels`` kernel bank.

        Returns
        -------
        Image
            ``(rows - k_rows + 1) x (cols - k_cols + 1) x out_channels x samples``.

        Raises
        ------
        ShapeMismatchError
            If the kernel channel count differs from ours or a kernel is
            larger than the image.
        """
        if not isinstance(kernels, Image):
            raise ShapeMismatchError(
                "cross_correlate", self.shape, getattr(kernels, "shape", ())
            )
        kh, kw, kc, _ = kernels.shape
        r, c, ch, _ = self.shape
        if kc != ch or kh > r or kw > c:
            raise ShapeMismatchError("cross_correlate", self.shape, kernels.shape)
        return self._wrap(self._correlate_valid(self._data, kernels._data))

    def convolve_full(self, kernels: "Image") -> Self:
        """
        Full convolution of this output gradient against a kernel bank.

        Parameters
        ----------
        kernels : Image
            ``k_rows x k_cols x in_channels x channels`` kernel bank (the same
            bank used by the forward `cross_correlate`).

        Returns
        -------
        Image
            ``(rows + k_rows - 1) x (cols + k_cols - 1) x in_channels x samples``.
        """
        if not isinstance(kernels, Image):
            raise ShapeMismatchError(
                "convolve_full", self.shape, getattr(kernels, "shape", ())
            )
        if kernels.shape[3] != self.channels:
            raise ShapeMismatchError("convolve_full", self.shape, kernels.shape)
        return self._wrap(self._convolve_full(self._data, kernels._data))

    def correlate_samples(self, output_gradient: "Image") -> Self:
        """
        Kernel gradient of `cross_correlate`, summed over samples.

        Parameters
        ----------
        output_gradient : Image
            Gradient with respect to the correlation output, with the same
            sample count as this (input) batch.

        Returns
        -------
        Image
            ``k_rows x k_cols x channels x out_channels`` kernel gradient.
        """
        if not isinstance(output_gradient, Image):
            raise ShapeMismatchError(
                "correlate_samples", self.shape, getattr(output_gradient, "shape", ())
            )
        gh, gw, _, gn = output_gradient.shape
        r, c, _, n = self.shape
        if gn != n or gh > r or gw > c:
            raise ShapeMismatchError(
                "correlate_samples", self.shape, output_gradient.shape
            )
        return self._wrap(self._kernel_grad(self._data, output_gradient._data))

    # ------------------------------------------------------------------
    # Pooling
    # ------------------------------------------------------------------
    @staticmethod
    def _check_pool_size(size: int) -> int:
        size = int(size)
        if size <= 0:
            raise ValueError(f"pool size must be > 0, got {size}")
        return size

    def max_pool(self, size: int) -> Tuple[Self, Self]:
        """
        Non-overlapping max pooling.

        Returns
        -------
        tuple[Image, Image]
            The pooled batch and a 0/1 mask with our shape marking the
            argmax cell of every window.
        """
        size = self._check_pool_size(size)
        y, mask = maxpool2d_forward_cpu(self._data, size)
        return self._wrap(y), self._wrap(mask)

    def average_pool(self, size: int) -> Self:
        """Non-overlapping average pooling."""
        size = self._check_pool_size(size)
        return self._wrap(avgpool2d_forward_cpu(self._data, size))

    def upsample(self, size: int, rows: int, cols: int) -> Self:
        """
        Repeat every cell into a ``size x size`` block of a ``rows x cols``
        image. Cells beyond the repeated region are zero.
        """
        size = self._check_pool_size(size)
        r, c = self.image_dims
        if r * size > int(rows) or c * size > int(cols):
            raise ShapeMismatchError(
                "upsample", self.shape, (int(rows), int(cols), self.channels, self.samples)
            )
        return self._wrap(upsample2d_cpu(self._data, size, int(rows), int(cols)))
