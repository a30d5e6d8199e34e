"""
CPU reference implementations for 2D correlation kernels (NumPy backend).

This module provides vectorized NumPy implementations of the three kernels
a convolutional layer needs, for buffers in **HWCN** layout
(rows, cols, channels, samples):

- `cross_correlate_valid_cpu`: forward pass, valid (unpadded) correlation
- `convolve_full_cpu`: input gradient, full convolution with flipped kernels
- `correlate_kernel_grad_cpu`: kernel gradient, summed over samples

Kernel banks are laid out as (k_rows, k_cols, in_channels, out_channels).

Design notes
------------
- All three kernels build a strided sliding-window view
  (`numpy.lib.stride_tricks.sliding_window_view`) and contract it with a
  single `numpy.einsum`, so no Python-level loop touches individual pixels.
- Inputs are never modified; outputs are freshly allocated arrays.
- Shapes are assumed to be validated by the caller (the `Image` tensor).
"""

from __future__ import annotations

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def cross_correlate_valid_cpu(x: np.ndarray, k: np.ndarray) -> np.ndarray:
    """
    Valid 2D cross-correlation (no padding, stride 1).

    Parameters
    ----------
    x : np.ndarray
        Input of shape (H, W, C, N).
    k : np.ndarray
        Kernels of shape (kH, kW, C, O).

    Returns
    -------
    np.ndarray
        Output of shape (H - kH + 1, W - kW + 1, O, N) where

            y[i, j, o, n] = sum_{a, b, c} x[i + a, j + b, c, n] * k[a, b, c, o]
    """
    k_h, k_w = k.shape[0], k.shape[1]
    # (H_out, W_out, C, N, kH, kW)
    windows = sliding_window_view(x, (k_h, k_w), axis=(0, 1))
    return np.einsum("ijcnab,abco->ijon", windows, k, optimize=True)


def convolve_full_cpu(g: np.ndarray, k: np.ndarray) -> np.ndarray:
    """
    Full 2D convolution of an output gradient against a kernel bank.

    This is the adjoint of `cross_correlate_valid_cpu` with respect to its
    input: the gradient is zero padded by (kH - 1, kW - 1) on every side and
    correlated with the spatially flipped kernels, mapping output channels
    back to input channels.

    Parameters
    ----------
    g : np.ndarray
        Output gradient of shape (H_out, W_out, O, N).
    k : np.ndarray
        Kernels of shape (kH, kW, C, O).

    Returns
    -------
    np.ndarray
        Input gradient of shape (H_out + kH - 1, W_out + kW - 1, C, N).
    """
    k_h, k_w = k.shape[0], k.shape[1]
    g_pad = np.pad(
        g,
        pad_width=((k_h - 1, k_h - 1), (k_w - 1, k_w - 1), (0, 0), (0, 0)),
        mode="constant",
        constant_values=0.0,
    )
    k_flipped = k[::-1, ::-1, :, :]
    # (H, W, O, N, kH, kW)
    windows = sliding_window_view(g_pad, (k_h, k_w), axis=(0, 1))
    return np.einsum("ijonab,abco->ijcn", windows, k_flipped, optimize=True)


def correlate_kernel_grad_cpu(x: np.ndarray, g: np.ndarray) -> np.ndarray:
    """
    Kernel gradient of a valid cross-correlation, summed over samples.

    Parameters
    ----------
    x : np.ndarray
        Cached forward input of shape (H, W, C, N).
    g : np.ndarray
        Output gradient of shape (H_out, W_out, O, N).

    Returns
    -------
    np.ndarray
        Kernel gradient of shape (H - H_out + 1, W - W_out + 1, C, O) where

            dk[a, b, c, o] = sum_{i, j, n} x[i + a, j + b, c, n] * g[i, j, o, n]
    """
    h_out, w_out = g.shape[0], g.shape[1]
    # (kH, kW, C, N, H_out, W_out)
    windows = sliding_window_view(x, (h_out, w_out), axis=(0, 1))
    return np.einsum("abcnij,ijon->abco", windows, g, optimize=True)
