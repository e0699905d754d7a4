"""Pipeline assembly: presets, model construction and single training runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from functools import reduce
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..core.activations import make_activation
from ..core.dense import Dense
from ..core.generators import make_generator
from ..core.mlp import MatrixNetwork
from ..core.module import Network
from ..core.types import RunResult
from ..data import get_dataset
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .losses import REGISTRY as LOSS_REGISTRY
from .trainer import SGDSchedule, Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "model": {
            "kind": "matrix",
            "layers": [2, 3, 1],
            "activation": {"name": "leaky_relu", "slope": 0.1},
            "init": {"name": "uniform", "low": -2.0, "high": 2.0},
        },
        "data": {"name": "xor", "options": {}},
        "train": {
            "steps": 100000,
            "lr": 0.1,
            "loss": "square",
            "seed": 0,
            "log_every": 100,
            "run_dir": "runs/xor",
            "enable_plots": False,
        },
    },
    "dense-xor": {
        "model": {
            "kind": "dense",
            "layers": [2, 3, 1],
            "activation": {"name": "leaky_relu", "slope": 0.1},
            "init": {"name": "uniform", "low": -2.0, "high": 2.0},
        },
        "data": {"name": "xor", "options": {}},
        "train": {
            "steps": 100000,
            "lr": 0.1,
            "loss": "square",
            "seed": 0,
            "log_every": 100,
            "run_dir": "runs/dense-xor",
            "enable_plots": False,
        },
    },
    "constant-fit": {
        "model": {
            "kind": "matrix",
            "layers": [3, 5, 8],
            "activation": {"name": "leaky_relu", "slope": 0.1},
            "init": {"name": "uniform", "low": -0.5, "high": 0.5},
        },
        "data": {"name": "constant", "options": {}},
        "train": {
            "steps": 10000,
            "lr": 0.05,
            "decay": 0.999,
            "loss": "absolute",
            "seed": 0,
            "log_every": 100,
            "run_dir": "runs/constant-fit",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load preset files in YAML format") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        presets: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"model", "data", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                presets[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = presets
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def build_model(model_cfg: Mapping[str, object], seed: int = 0) -> MatrixNetwork | Network:
    """Build a :class:`MatrixNetwork` or a chain of :class:`Dense` layers."""

    sizes = [int(s) for s in model_cfg.get("layers", [])]
    activation = make_activation(model_cfg.get("activation", "leaky_relu"))
    generator = make_generator(model_cfg.get("init"), seed)
    kind = str(model_cfg.get("kind", "matrix"))
    if kind == "matrix":
        return MatrixNetwork(sizes, generator, activation)
    if kind == "dense":
        if len(sizes) < 2:
            # Let the matrix network report the same structural error.
            MatrixNetwork(sizes, generator, activation)
        layers = [
            Dense(sizes[l], sizes[l + 1], activation, generator, layer=l)
            for l in range(len(sizes) - 1)
        ]
        return reduce(lambda net, layer: net.chain(layer), layers)
    raise ValueError(f"Unknown model kind: {kind}")


def describe_model(model: MatrixNetwork | Network, sizes: Sequence[int]) -> Dict[str, object]:
    sizes = [int(s) for s in sizes]
    return {
        "type": type(model).__name__,
        "layers": sizes,
        "parameters": sum(sizes[i] * sizes[i + 1] + sizes[i + 1] for i in range(len(sizes) - 1)),
    }


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    seed = int(train_cfg.get("seed", 0))
    steps = int(train_cfg.get("steps", 1000))
    log_every = int(train_cfg.get("log_every", 1))
    loss_name = str(train_cfg.get("loss", "square"))

    dataset = get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    layers = [int(s) for s in model_cfg.get("layers", [])]
    if layers and (layers[0] != dataset.d_in or layers[-1] != dataset.d_out):
        raise ValueError(
            f"Model layers {layers} do not match dataset {dataset.name!r} "
            f"({dataset.d_in} inputs, {dataset.d_out} outputs)"
        )

    model = build_model(model_cfg, seed)
    loss = LOSS_REGISTRY.create(loss_name, dataset.samples[0].expected)
    schedule = SGDSchedule(lr=float(train_cfg.get("lr", 0.01)), decay=float(train_cfg.get("decay", 1.0)))

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    network = describe_model(model, layers)

    _print_startup_summary(
        dataset_name=dataset.name,
        layers=layers,
        kind=str(model_cfg.get("kind", "matrix")),
        loss=loss_name,
        schedule=schedule,
        steps=steps,
        param_count=int(network["parameters"]),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = Trainer(model, loss, schedule, callbacks=[jsonl, csv_sink, plots])

    result = trainer.run(dataset, steps, log_every=log_every, window=max(len(dataset), 1))
    plots.close()

    evaluation = _evaluate(trainer, dataset)
    (run_dir / "evaluation.json").write_text(json.dumps(evaluation, indent=2))

    safe_config = json.loads(json.dumps(config))
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        network=network,
        dataset=dataset.provenance,
    )
    summary_path = write_summary(
        jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )

    return RunResult(
        steps=result.steps,
        final_error=result.final_error,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _evaluate(trainer: Trainer, dataset) -> List[Dict[str, object]]:
    rows: List[Dict[str, object]] = []
    errors = trainer.evaluate(dataset)
    for sample, error in zip(dataset, errors):
        rows.append(
            {
                "inputs": sample.inputs.tolist(),
                "expected": sample.expected.tolist(),
                "outputs": [float(v) for v in trainer.model.eval(sample.inputs)],
                "error": float(error),
            }
        )
    return rows


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    layers: Sequence[int],
    kind: str,
    loss: str,
    schedule: SGDSchedule,
    steps: int,
    param_count: int,
) -> None:
    print("=== chainnet run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Layers        : {list(layers)}")
    print(f"Model         : {kind}")
    print(f"Loss          : {loss}")
    print(f"Learning rate : {schedule.lr} (decay {schedule.decay})")
    print(f"Steps         : {steps}")
    print(f"Parameters    : {param_count}")
    print("====================")


__all__ = ["build_model", "describe_model", "load_preset", "presets", "run_pipeline"]
