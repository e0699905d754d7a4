from __future__ import annotations

import argparse
import csv
import sys
import time
from functools import reduce
from pathlib import Path
from statistics import mean, pstdev

MODELS = ["matrix", "dense"]


def _fmt_mu_sigma(vals):
    mu = mean(vals)
    sd = pstdev(vals) if len(vals) > 1 else 0.0
    return f"{mu:.2f} ± {sd:.2f}"


def _time_steps(kind: str, layers, steps: int, seed: int) -> float:
    import numpy as np

    from chainnet.core.activations import LeakyRelu
    from chainnet.core.dense import Dense
    from chainnet.core.generators import UniformGenerator
    from chainnet.core.mlp import MatrixNetwork
    from chainnet.training.losses import SquareError

    activation = LeakyRelu(0.1)
    generator = UniformGenerator(seed, low=-1.0, high=1.0)
    rng = np.random.default_rng(seed)
    inputs = rng.uniform(-1.0, 1.0, size=layers[0])
    loss = SquareError(rng.uniform(0.0, 1.0, size=layers[-1]))

    if kind == "matrix":
        net = MatrixNetwork(layers, generator, activation)
        start = time.perf_counter()
        for _ in range(steps):
            net.backprop(net.eval_intermediate(inputs), loss, 0.01)
    else:
        dense = [
            Dense(layers[l], layers[l + 1], activation, generator, layer=l)
            for l in range(len(layers) - 1)
        ]
        net = reduce(lambda a, b: a.chain(b), dense).chain(loss)
        start = time.perf_counter()
        for _ in range(steps):
            net.train_step(inputs, net.intermediate(inputs), 0.01)
    elapsed = time.perf_counter() - start
    return elapsed / steps * 1e6


def main():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    ap = argparse.ArgumentParser(description="Time matrix networks against chained dense layers")
    ap.add_argument("--layers", nargs="+", type=int, default=[16, 32, 32, 8])
    ap.add_argument("--seeds", nargs="+", type=int, default=[123, 124, 125])
    ap.add_argument("--steps", type=int, default=500)
    ap.add_argument("--out", type=str, default=".artifacts/bench")
    args = ap.parse_args()

    out = Path(args.out)
    out.mkdir(parents=True, exist_ok=True)
    runs = []
    for kind in MODELS:
        for s in args.seeds:
            runs.append({"model": kind, "seed": s, "us_per_step": _time_steps(kind, args.layers, args.steps, s)})

    csv_path = out / "bench_micro.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["model", "seeds", "steps", "us_per_step_mu", "us_per_step_sd"])
        for kind in MODELS:
            vals = [r["us_per_step"] for r in runs if r["model"] == kind]
            sd = pstdev(vals) if len(vals) > 1 else 0.0
            w.writerow([kind, len(vals), args.steps, f"{mean(vals):.2f}", f"{sd:.2f}"])

    md_path = out / "bench_micro.md"
    lines = ["### Micro-Benchmark: MatrixNetwork vs chained Dense layers", ""]
    lines.append(f"- Layers: `{args.layers}`; Seeds: `{args.seeds}`; Steps: `{args.steps}`")
    lines.append("")
    lines.append("| Model | µs / step (μ±σ) | Seeds | Steps |")
    lines.append("|---|---:|---:|---:|")
    for kind in MODELS:
        vals = [r["us_per_step"] for r in runs if r["model"] == kind]
        lines.append(f"| {kind.upper()} | {_fmt_mu_sigma(vals)} | {len(vals)} | {args.steps} |")
    md_path.write_text("\n".join(lines), encoding="utf-8")
    print("Wrote:", csv_path, md_path)


if __name__ == "__main__":
    main()
