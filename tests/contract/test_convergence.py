import numpy as np
import pytest

from chainnet.core.activations import LeakyRelu
from chainnet.core.generators import UniformGenerator
from chainnet.core.mlp import MatrixNetwork
from chainnet.data import get_dataset
from chainnet.training.losses import AbsoluteError, SquareError
from chainnet.training.trainer import SGDSchedule, Trainer


def _train_xor(seed, steps=100000, lr=0.1):
    net = MatrixNetwork([2, 3, 1], UniformGenerator(seed), LeakyRelu(0.1))
    errors = []
    trainer = Trainer(
        net,
        SquareError([0.0]),
        SGDSchedule(lr),
        callbacks=[lambda step, metrics: errors.append(metrics["error"])],
        abort_on_nonfinite=False,
    )
    trainer.run(get_dataset("xor"), steps, log_every=1)
    return net, errors


def _xor_residuals(net):
    return [abs(float(net.eval(s.inputs)[0]) - float(s.expected[0])) for s in get_dataset("xor")]


@pytest.mark.parametrize("seed", [0, 1])
def test_xor_converges(seed):
    net, errors = _train_xor(seed)
    assert len(errors) == 100000
    assert np.all(np.isfinite(errors))
    residuals = _xor_residuals(net)
    assert max(residuals) < 0.1, residuals


def test_xor_stays_finite_at_high_rate():
    net = MatrixNetwork([2, 3, 1], UniformGenerator(0, low=-1.0, high=1.0), LeakyRelu(0.1))
    errors = []
    trainer = Trainer(
        net,
        AbsoluteError([0.0]),
        SGDSchedule(0.1),
        callbacks=[lambda step, metrics: errors.append(metrics["error"])],
        abort_on_nonfinite=False,
    )
    trainer.run(get_dataset("xor"), 20000, log_every=1)
    assert len(errors) == 20000
    assert np.all(np.isfinite(errors))
    assert all(np.isfinite(w).all() for w in net.weights)


def test_fixed_point_regression():
    spec = get_dataset("constant")
    sample = spec.samples[0]
    out = None
    for seed in range(4):
        net = MatrixNetwork([3, 5, 8], UniformGenerator(seed, low=-0.5, high=0.5), LeakyRelu(0.1))
        trainer = Trainer(net, AbsoluteError(sample.expected), SGDSchedule(0.05, decay=0.999))
        trainer.run(spec, 10000, log_every=0)
        out = net.eval(sample.inputs)
        if np.allclose(out, sample.expected, atol=5e-4):
            break
    assert np.round(out, 3).tolist() == pytest.approx(sample.expected.tolist())
