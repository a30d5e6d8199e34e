"""
Network parameter sets and their persistence.

`NetworkParams` is the ordered snapshot of every learnable top-level layer
of a network: one entry per layer, each entry a list of rows whose final
row is the bias vector. It is the unit of checkpointing.

Persistence
-----------
Two on-disk encodings are supported; both store each row as a base64
float64 payload (see `encoding._b64`) so a round trip reproduces every
value exactly:

- plain JSON (`to_json_file` / `from_json_file`)
- gzip-compressed JSON (`to_compressed_file` / `from_compressed_file`)

Optimizer state is never part of a parameter set.
"""

from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence, Union

from ..encoding._b64 import floats_to_payload, payload_to_floats

PathLike = Union[str, Path]

FORMAT_NAME = "tensorfold.params"
FORMAT_VERSION = 1

LayerRows = List[List[float]]


class NetworkParams:
    """
    Ordered list of per-layer parameter rows.

    Parameters
    ----------
    layers : Sequence[Sequence[Sequence[float]]]
        One entry per learnable layer; each entry is a list of rows.
    """

    def __init__(self, layers: Sequence[Sequence[Sequence[float]]]) -> None:
        self.layers: List[LayerRows] = [
            [[float(v) for v in row] for row in rows] for rows in layers
        ]

    def __len__(self) -> int:
        return len(self.layers)

    def __iter__(self) -> Iterator[LayerRows]:
        return iter(self.layers)

    def __getitem__(self, index: int) -> LayerRows:
        return self.layers[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkParams):
            return NotImplemented
        return self.layers == other.layers

    def __repr__(self) -> str:
        return f"NetworkParams(layers={len(self.layers)}, values={self.count()})"

    def count(self) -> int:
        """Total number of scalar values."""
        return sum(len(row) for rows in self.layers for row in rows)

    # ------------------------------------------------------------------
    # Dict / JSON
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": FORMAT_NAME,
            "version": FORMAT_VERSION,
            "layers": [[floats_to_payload(row) for row in rows] for rows in self.layers],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "NetworkParams":
        """
        Rebuild a parameter set from `to_dict` output.

        Raises
        ------
        ValueError
            If the format tag or version is not recognized, or a row payload
            is malformed.
        """
        if payload.get("format") != FORMAT_NAME:
            raise ValueError(f"Not a tensorfold parameter file: {payload.get('format')!r}")
        if int(payload.get("version", -1)) != FORMAT_VERSION:
            raise ValueError(f"Unsupported parameter format version: {payload.get('version')!r}")
        return cls(
            [[payload_to_floats(p) for p in rows] for rows in payload.get("layers", [])]
        )

    def dumps(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def loads(cls, text: Union[str, bytes]) -> "NetworkParams":
        return cls.from_dict(json.loads(text))

    def to_json_file(self, path: PathLike) -> None:
        Path(path).write_text(self.dumps(), encoding="utf-8")

    @classmethod
    def from_json_file(cls, path: PathLike) -> "NetworkParams":
        return cls.loads(Path(path).read_text(encoding="utf-8"))

    def to_compressed_file(self, path: PathLike) -> None:
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write(self.dumps())

    @classmethod
    def from_compressed_file(cls, path: PathLike) -> "NetworkParams":
        with gzip.open(path, "rt", encoding="utf-8") as f:
            return cls.loads(f.read())
