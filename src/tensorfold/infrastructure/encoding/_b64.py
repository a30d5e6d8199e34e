from __future__ import annotations

import base64
from typing import Any, Dict, List, Sequence

import numpy as np

ROW_DTYPE = "<f8"
"""Parameter rows are always stored as little-endian float64."""


def bytes_to_b64_str(b: bytes) -> str:
    """
    Encode raw bytes into a base64 ASCII string (JSON-safe).
    """
    return base64.b64encode(b).decode("ascii")


def b64_str_to_bytes(s: str) -> bytes:
    """
    Decode a base64 ASCII string back into raw bytes.
    """
    return base64.b64decode(s.encode("ascii"), validate=True)


def floats_to_payload(values: Sequence[float]) -> Dict[str, Any]:
    """
    Serialize a row of floats into a JSON-safe payload.

    Python floats are IEEE-754 doubles, so storing the raw float64 buffer
    reproduces every value bit for bit, including values that came from a
    float32 tensor.

    Returns
    -------
    dict
        {
          "b64": "<base64>",
          "dtype": "<f8",
          "length": n
        }
    """
    arr = np.asarray(values, dtype=ROW_DTYPE).ravel()
    return {
        "b64": bytes_to_b64_str(arr.tobytes(order="C")),
        "dtype": ROW_DTYPE,
        "length": int(arr.size),
    }


def payload_to_floats(payload: Dict[str, Any]) -> List[float]:
    """
    Deserialize a payload produced by `floats_to_payload`.

    Raises
    ------
    ValueError
        If the payload is malformed or its length field disagrees with the
        decoded buffer.
    """
    try:
        raw = b64_str_to_bytes(str(payload["b64"]))
        dtype = np.dtype(str(payload["dtype"]))
        length = int(payload["length"])
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed parameter payload: {payload!r}") from e

    if len(raw) % dtype.itemsize != 0:
        raise ValueError(
            f"Payload size {len(raw)} is not a multiple of {dtype.itemsize}"
        )
    arr = np.frombuffer(raw, dtype=dtype)
    if arr.size != length:
        raise ValueError(f"Payload declares {length} values but holds {arr.size}")
    return arr.astype(np.float64).tolist()
