import numpy as np
import pytest

from chainnet.core.activations import Identity, LeakyRelu
from chainnet.core.dense import Dense
from chainnet.core.generators import ConstantGenerator, UniformGenerator
from chainnet.core.mlp import MatrixNetwork
from chainnet.data import Sample, get_dataset
from chainnet.training.losses import SquareError
from chainnet.training.trainer import DivergenceError, SGDSchedule, Trainer


def test_schedule_decay():
    assert SGDSchedule(0.1).rate(50) == 0.1
    assert SGDSchedule(0.1, decay=0.5).rate(2) == pytest.approx(0.025)


def test_run_emits_metrics_and_cycles_samples():
    seen = []
    net = MatrixNetwork([2, 3, 1], UniformGenerator(0, low=-1.0, high=1.0), LeakyRelu(0.1))
    trainer = Trainer(
        net, SquareError([0.0]), SGDSchedule(0.01), callbacks=[lambda s, m: seen.append((s, dict(m)))]
    )
    result = trainer.run(get_dataset("xor"), 10, log_every=3, window=4)
    assert result.steps == 10
    assert np.isfinite(result.final_error)
    assert [s for s, _ in seen] == [0, 3, 6, 9]
    assert set(seen[0][1]) == {"error", "mean_error", "lr"}


def test_dense_models_are_chained_with_the_loss():
    layer = Dense(2, 1, LeakyRelu(0.1), UniformGenerator(1, low=-1.0, high=1.0))
    trainer = Trainer(layer, SquareError([0.0]), SGDSchedule(0.05))
    sample = Sample.of([1.0, 0.5], [0.25])
    first = trainer.step(sample)
    for step in range(1, 50):
        last = trainer.step(sample, step)
    assert last < first
    assert trainer.evaluate([sample])[0] < first


def test_divergence_is_reported():
    net = MatrixNetwork([1, 1], ConstantGenerator(1.0), Identity())
    trainer = Trainer(net, SquareError([0.0]), SGDSchedule(10.0))
    sample = Sample.of([1.0], [0.0])
    with pytest.raises(DivergenceError) as info:
        for step in range(2000):
            trainer.step(sample, step)
    assert not np.isfinite(info.value.value)


def test_divergence_can_be_tolerated():
    net = MatrixNetwork([1, 1], ConstantGenerator(1.0), Identity())
    trainer = Trainer(net, SquareError([0.0]), SGDSchedule(10.0), abort_on_nonfinite=False)
    result = trainer.run([Sample.of([1.0], [0.0])], 2000)
    assert not np.isfinite(result.final_error)


def test_run_cycles_one_shot_iterables():
    net = MatrixNetwork([2, 3, 1], UniformGenerator(0), LeakyRelu(0.1))
    seen = []
    trainer = Trainer(
        net, SquareError([0.0]), SGDSchedule(0.01), callbacks=[lambda s, m: seen.append(s)]
    )
    result = trainer.run((s for s in get_dataset("xor")), 10)
    assert result.steps == 10
    assert seen == list(range(10))


def test_run_cycles_in_sample_order():
    samples = [Sample.of([float(i)], [0.0]) for i in range(3)]
    seen_inputs = []

    class _Recording(Trainer):
        def step(self, sample, step=0):
            seen_inputs.append(float(sample.inputs[0]))
            return 0.0

    net = MatrixNetwork([1, 1], ConstantGenerator(0.0), Identity())
    _Recording(net, SquareError([0.0]), SGDSchedule(0.1)).run(iter(samples), 7)
    assert seen_inputs == [0.0, 1.0, 2.0, 0.0, 1.0, 2.0, 0.0]


def test_run_rejects_empty_sources():
    net = MatrixNetwork([1, 1], ConstantGenerator(0.0), Identity())
    trainer = Trainer(net, SquareError([0.0]), SGDSchedule(0.1))
    with pytest.raises(ValueError, match="at least one sample"):
        trainer.run([], 5)
