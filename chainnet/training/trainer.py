"""Deterministic single-sample training loops for chainnet."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence

from ..core.mlp import MatrixNetwork
from ..core.module import Network
from ..core.types import RunResult
from ..data.registry import Sample
from .losses import Loss


class DivergenceError(RuntimeError):
    """Training produced a non-finite error value."""

    def __init__(self, step: int, value: float) -> None:
        self.step = step
        self.value = value
        super().__init__(f"non-finite error {value!r} at step {step}")


@dataclass
class SGDSchedule:
    """Plain gradient descent with an optional exponential decay of the rate."""

    lr: float
    decay: float = 1.0

    def rate(self, step: int) -> float:
        if self.decay == 1.0:
            return self.lr
        return self.lr * self.decay**step


class Trainer:
    """Drive forward/backward steps over a stream of samples.

    ``model`` is either a :class:`~chainnet.core.mlp.MatrixNetwork` or any
    :class:`~chainnet.core.module.Network`. In the latter case the loss is
    chained after the model and the whole pipeline is trained with
    :meth:`~chainnet.core.module.Network.train_step`. ``loss.expected`` is
    replaced with each sample's target before the step.
    """

    def __init__(
        self,
        model: MatrixNetwork | Network,
        loss: Loss,
        schedule: SGDSchedule,
        callbacks: Sequence[object] | None = None,
        *,
        abort_on_nonfinite: bool = True,
    ) -> None:
        self.model = model
        self.loss = loss
        self.schedule = schedule
        self.callbacks = list(callbacks or [])
        self.abort_on_nonfinite = abort_on_nonfinite
        self._pipeline = None if isinstance(model, MatrixNetwork) else model.chain(loss)

    def step(self, sample: Sample, step: int = 0) -> float:
        """Train on ``sample`` once and return the error before the update."""

        lr = self.schedule.rate(step)
        self.loss.expected = sample.expected
        if self._pipeline is None:
            record = self.model.eval_intermediate(sample.inputs)
            error = self.model.backprop(record, self.loss, lr)
        else:
            record = self._pipeline.intermediate(sample.inputs)
            error = float(record.output)
            self._pipeline.train_step(sample.inputs, record, lr)
        if self.abort_on_nonfinite and not math.isfinite(error):
            raise DivergenceError(step, error)
        return error

    def evaluate(self, samples: Iterable[Sample]) -> List[float]:
        """Return the error of every sample without training."""

        errors: List[float] = []
        for sample in samples:
            self.loss.expected = sample.expected
            errors.append(self.loss.call(self.model.eval(sample.inputs)))
        return errors

    def run(
        self,
        samples: Iterable[Sample],
        steps: int,
        *,
        log_every: int = 1,
        window: int = 100,
    ) -> RunResult:
        """Train for ``steps`` steps, cycling through ``samples`` as needed.

        ``samples`` is read once up front, so one-shot iterables such as
        generators cycle like lists do.
        """

        samples = list(samples)
        if not samples:
            raise ValueError("Trainer.run needs at least one sample")
        recent: deque[float] = deque(maxlen=max(1, window))
        error = float("nan")
        for step in range(steps):
            sample = samples[step % len(samples)]
            error = self.step(sample, step)
            recent.append(error)
            if log_every and step % log_every == 0:
                self._emit_step(
                    step,
                    {
                        "error": error,
                        "mean_error": sum(recent) / len(recent),
                        "lr": self.schedule.rate(step),
                    },
                )
        return RunResult(steps=steps, final_error=error)

    def _emit_step(self, step: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_step"):
                callback.on_step(step, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(step, metrics)


__all__ = ["DivergenceError", "SGDSchedule", "Trainer"]
