"""
scripts/bench_backends_numpy_vs_threaded.py

NumPy vs threaded backend microbenchmark (NOT a unit test) for tensorfold.

Benchmarks the two kernels that dominate training time:
- matmul: ``Matrix.dot`` (Dense forward / backward)
- correlate: ``Image.cross_correlate`` (Convolutional forward)

for both the plain NumPy tensors and their threaded counterparts, which
split the work along the sample axis.

Timing policy
-------------
- Inputs are built once per case, outside the timed region.
- Only the kernel call is timed; results are discarded.

Usage
-----
python scripts/bench_backends_numpy_vs_threaded.py --presets
python scripts/bench_backends_numpy_vs_threaded.py --op matmul --rows 512 --inner 512 --samples 2048
python scripts/bench_backends_numpy_vs_threaded.py --op correlate --size 28 --channels 8 --samples 256 --threads 4
"""

from __future__ import annotations

import argparse
import os
import statistics
import sys
import time
from dataclasses import dataclass
from typing import Callable

import numpy as np

# -------------------------
# Make repo_root/src importable
# -------------------------
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)


def _time_one(fn: Callable[[], None], *, warmup: int, repeats: int) -> list[float]:
    for _ in range(warmup):
        fn()
    ts: list[float] = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        ts.append(t1 - t0)
    return ts


def _median(xs: list[float]) -> float:
    return statistics.median(xs)


def _fmt_seconds(x: float) -> str:
    if x < 1e-6:
        return f"{x*1e9:.2f} ns"
    if x < 1e-3:
        return f"{x*1e6:.2f} µs"
    if x < 1:
        return f"{x*1e3:.2f} ms"
    return f"{x:.3f} s"


def _speedup(a: float, b: float) -> float:
    return (a / b) if b > 0 else float("inf")


@dataclass(frozen=True)
class MatmulCase:
    name: str
    rows: int
    inner: int
    samples: int


@dataclass(frozen=True)
class CorrelateCase:
    name: str
    size: int
    channels: int
    out_channels: int
    kernel: int
    samples: int


def _bench_matmul(case: MatmulCase, *, warmup: int, repeats: int, seed: int, sanity: bool) -> None:
    from tensorfold.infrastructure.tensor._matrix import Matrix
    from tensorfold.infrastructure.tensor._threaded import ThreadedMatrix

    rng = np.random.default_rng(seed)
    w_np = rng.standard_normal((case.rows, case.inner))
    x_np = rng.standard_normal((case.inner, case.samples))

    w, x = Matrix(w_np), Matrix(x_np)
    tw, tx = ThreadedMatrix(w_np), ThreadedMatrix(x_np)

    if sanity:
        np.testing.assert_allclose(tw.dot(tx).to_numpy(), w.dot(x).to_numpy(), rtol=1e-10)

    t_np = _median(_time_one(lambda: w.dot(x), warmup=warmup, repeats=repeats))
    t_th = _median(_time_one(lambda: tw.dot(tx), warmup=warmup, repeats=repeats))

    flops = 2.0 * case.rows * case.inner * case.samples
    print(
        f"matmul ({case.rows}x{case.inner} . {case.inner}x{case.samples})  "
        f"numpy={_fmt_seconds(t_np):>10} ({flops / t_np / 1e9:8.2f} GFLOP/s)  "
        f"threaded={_fmt_seconds(t_th):>10} ({flops / t_th / 1e9:8.2f} GFLOP/s)  "
        f"speedup={_speedup(t_np, t_th):>7.2f}x"
    )


def _bench_correlate(case: CorrelateCase, *, warmup: int, repeats: int, seed: int, sanity: bool) -> None:
    from tensorfold.infrastructure.tensor._image import Image
    from tensorfold.infrastructure.tensor._threaded import ThreadedImage

    rng = np.random.default_rng(seed)
    x_np = rng.standard_normal((case.size, case.size, case.channels, case.samples))
    k_np = rng.standard_normal((case.kernel, case.kernel, case.channels, case.out_channels))

    x, k = Image(x_np), Image(k_np)
    tx, tk = ThreadedImage(x_np), ThreadedImage(k_np)

    if sanity:
        np.testing.assert_allclose(
            tx.cross_correlate(tk).to_numpy(), x.cross_correlate(k).to_numpy(), rtol=1e-10
        )

    t_np = _median(_time_one(lambda: x.cross_correlate(k), warmup=warmup, repeats=repeats))
    t_th = _median(_time_one(lambda: tx.cross_correlate(tk), warmup=warmup, repeats=repeats))

    print(
        f"correlate ({case.size}x{case.size}x{case.channels} * "
        f"{case.kernel}x{case.kernel}->{case.out_channels}, n={case.samples})  "
        f"numpy={_fmt_seconds(t_np):>10}  threaded={_fmt_seconds(t_th):>10}  "
        f"speedup={_speedup(t_np, t_th):>7.2f}x"
    )


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--op", choices=["matmul", "correlate"], default="matmul")
    ap.add_argument("--rows", type=int, default=256)
    ap.add_argument("--inner", type=int, default=256)
    ap.add_argument("--samples", type=int, default=1024)
    ap.add_argument("--size", type=int, default=28)
    ap.add_argument("--channels", type=int, default=4)
    ap.add_argument("--out-channels", type=int, default=8)
    ap.add_argument("--kernel", type=int, default=3)
    ap.add_argument("--threads", type=int, default=None, help="Worker threads.")
    ap.add_argument("--warmup", type=int, default=3)
    ap.add_argument("--repeats", type=int, default=20)
    ap.add_argument("--presets", action="store_true", help="Run a preset suite.")
    ap.add_argument(
        "--sanity",
        action="store_true",
        help="Check threaded output against NumPy (not timed).",
    )
    ap.add_argument("--seed", type=int, default=0, help="RNG seed.")
    args = ap.parse_args()

    # The configuration is read once per process, so set it before importing tensors.
    if args.threads is not None:
        os.environ["TENSORFOLD_NUM_THREADS"] = str(args.threads)

    from tensorfold.infrastructure._config import get_config

    print("\n" + "=" * 98)
    print(
        f"tensorfold numpy vs threaded benchmark  dtype={get_config().scalar}  "
        f"threads={get_config().num_threads}  (warmup={args.warmup}, repeats={args.repeats})"
    )
    print("=" * 98)

    opts = dict(warmup=args.warmup, repeats=args.repeats, seed=args.seed, sanity=args.sanity)

    if args.presets:
        for m in [
            MatmulCase("small", 64, 64, 256),
            MatmulCase("mid", 256, 256, 1024),
            MatmulCase("wide", 512, 128, 4096),
        ]:
            _bench_matmul(m, **opts)
        for c in [
            CorrelateCase("mnist-like", 28, 1, 8, 3, 256),
            CorrelateCase("deep", 14, 8, 16, 3, 256),
        ]:
            _bench_correlate(c, **opts)
    elif args.op == "matmul":
        _bench_matmul(MatmulCase("single", args.rows, args.inner, args.samples), **opts)
    else:
        _bench_correlate(
            CorrelateCase(
                "single", args.size, args.channels, args.out_channels, args.kernel, args.samples
            ),
            **opts,
        )


if __name__ == "__main__":
    main()
