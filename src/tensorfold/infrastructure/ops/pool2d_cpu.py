"""
CPU reference implementations for 2D pooling operations (NumPy backend).

This module provides NumPy implementations of non-overlapping 2D pooling
for buffers in **HWCN** layout (rows, cols, channels, samples):

- MaxPool (forward, returning a one-hot argmax mask for backward routing)
- AveragePool (forward)
- Upsample (block repetition used by both backward passes)

Design notes
------------
- Windows are square, non-overlapping, and the stride equals the window
  size. Trailing rows/cols that do not fill a whole window are ignored by
  the forward pass and receive zero gradient in the backward pass.
- MaxPool ties are resolved in favour of the first cell in row-major order
  within the window, so exactly one cell per window is marked.
- AvgPool averages over the full window area (``size * size``).
"""

from __future__ import annotations

from typing import Tuple

import numpy as np


def _out_hw(H: int, W: int, size: int) -> Tuple[int, int]:
    """
    Compute output spatial dimensions for non-overlapping pooling.

    Parameters
    ----------
    H, W : int
        Input height and width.
    size : int
        Window size (also the stride).

    Returns
    -------
    tuple[int, int]
        Output height and width (H_out, W_out).
    """
    return H // size, W // size


def _windows(x: np.ndarray, size: int) -> np.ndarray:
    """
    Rearrange the pooled region of `x` into explicit windows.

    Returns
    -------
    np.ndarray
        Array of shape (H_out, W_out, C, N, size * size).
    """
    H, W, C, N = x.shape
    H_out, W_out = _out_hw(H, W, size)
    cropped = x[: H_out * size, : W_out * size]
    blocks = cropped.reshape(H_out, size, W_out, size, C, N)
    # -> (H_out, W_out, C, N, size, size)
    blocks = blocks.transpose(0, 2, 4, 5, 1, 3)
    return blocks.reshape(H_out, W_out, C, N, size * size)


def maxpool2d_forward_cpu(x: np.ndarray, size: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    MaxPool forward pass for HWCN buffers.

    Parameters
    ----------
    x : np.ndarray
        Input of shape (H, W, C, N).
    size : int
        Window size and stride.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        y :
            Output of shape (H // size, W // size, C, N).
        mask :
            Array with the same shape as `x`, holding 1.0 at the argmax cell
            of every window and 0.0 elsewhere (including the trailing cells
            outside any window).
    """
    H, W, C, N = x.shape
    H_out, W_out = _out_hw(H, W, size)

    win = _windows(x, size)
    argmax_idx = np.argmax(win, axis=-1)
    y = np.take_along_axis(win, argmax_idx[..., None], axis=-1)[..., 0]

    one_hot = np.zeros_like(win)
    np.put_along_axis(one_hot, argmax_idx[..., None], 1.0, axis=-1)

    # Back to (H_out, size, W_out, size, C, N) then to the cropped region
    one_hot = one_hot.reshape(H_out, W_out, C, N, size, size)
    one_hot = one_hot.transpose(0, 4, 1, 5, 2, 3).reshape(
        H_out * size, W_out * size, C, N
    )

    mask = np.zeros_like(x)
    mask[: H_out * size, : W_out * size] = one_hot
    return y, mask


def avgpool2d_forward_cpu(x: np.ndarray, size: int) -> np.ndarray:
    """
    AveragePool forward pass for HWCN buffers.

    Parameters
    ----------
    x : np.ndarray
        Input of shape (H, W, C, N).
    size : int
        Window size and stride.

    Returns
    -------
    np.ndarray
        Output of shape (H // size, W // size, C, N).
    """
    return _windows(x, size).mean(axis=-1)


def upsample2d_cpu(g: np.ndarray, size: int, H: int, W: int) -> np.ndarray:
    """
    Repeat each cell of `g` into a ``size x size`` block.

    Used by both pooling backward passes: MaxPool multiplies the result by
    its argmax mask, AvgPool divides it by the window area.

    Parameters
    ----------
    g : np.ndarray
        Pooled gradient of shape (H_out, W_out, C, N).
    size : int
        Window size.
    H, W : int
        Spatial dimensions of the original (unpooled) input.

    Returns
    -------
    np.ndarray
        Array of shape (H, W, C, N). Cells outside the pooled region are 0.
    """
    up = np.repeat(np.repeat(g, size, axis=0), size, axis=1)
    out = np.zeros((H, W) + g.shape[2:], dtype=g.dtype)
    out[: up.shape[0], : up.shape[1]] = up
    return out
