import numpy as np
import pytest

from chainnet.core.errors import WrongInputSize
from chainnet.training.losses import REGISTRY, AbsoluteError, SquareError


def test_square_error_value_and_gradient():
    loss = SquareError([1.0, 0.0])
    x = np.array([0.5, 2.0])
    assert loss.call(x) == pytest.approx(0.25 + 4.0)
    assert np.allclose(loss.gradient(x), [-1.0, 4.0])
    assert loss.deriv(x, 1) == pytest.approx(4.0)


def test_absolute_error_value_and_gradient():
    loss = AbsoluteError([1.0, 0.0, 0.3])
    x = np.array([0.5, 2.0, 0.3])
    assert loss.call(x) == pytest.approx(2.5)
    assert loss.gradient(x).tolist() == [-1.0, 1.0, 0.0]


def test_loss_as_network_block():
    loss = SquareError([0.0, 0.0])
    x = np.array([1.0, -2.0])
    record = loss.intermediate(x)
    assert record.output == pytest.approx(5.0)
    assert loss.eval(x) == pytest.approx(5.0)
    assert np.allclose(loss.train(x, record, 0.5, 0.1), [1.0, -2.0])
    assert np.allclose(loss.train_step(x, record, 0.1), [2.0, -4.0])


def test_expected_can_be_replaced():
    loss = SquareError([0.0])
    loss.expected = [1.0]
    assert loss.call([1.0]) == 0.0


def test_size_mismatch():
    loss = SquareError([0.0, 1.0])
    with pytest.raises(WrongInputSize):
        loss.call([1.0, 2.0, 3.0])


def test_registry_names_and_aliases():
    assert {"square", "absolute", "mse", "mae"} <= set(REGISTRY.names())
    assert isinstance(REGISTRY.create("mse", [0.0]), SquareError)
    assert isinstance(REGISTRY.create("absolute", [0.0]), AbsoluteError)
    with pytest.raises(KeyError, match="Unknown loss"):
        REGISTRY.create("hinge", [0.0])


def test_square_gradient_matches_finite_differences():
    loss = SquareError([0.3, -1.2, 0.8])
    x = np.array([0.1, 0.4, 2.0])
    eps = 1e-6
    numeric = [
        (loss.call(x + eps * np.eye(3)[k]) - loss.call(x - eps * np.eye(3)[k])) / (2 * eps)
        for k in range(3)
    ]
    assert np.allclose(loss.gradient(x), numeric, atol=1e-6)
