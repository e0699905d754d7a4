import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def test_bench_micro_runs_quickly(tmp_path):
    out = tmp_path / "bench"
    subprocess.check_call(
        [
            sys.executable,
            str(ROOT / "scripts" / "bench_micro.py"),
            "--layers", "4", "6", "2",
            "--seeds", "123",
            "--steps", "8",
            "--out", str(out),
        ]
    )
    md = (out / "bench_micro.md").read_text(encoding="utf-8")
    assert "| MATRIX |" in md and "| DENSE |" in md
    assert (out / "bench_micro.csv").read_text().startswith("model,seeds,steps")
