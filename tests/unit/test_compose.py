import numpy as np
import pytest

from chainnet.core.activations import Logistic, Tanh
from chainnet.core.compose import Chain, FunctionZipper, PairZipper, Stacker, Zip
from chainnet.core.dense import Dense
from chainnet.core.errors import WrongGradientSize
from chainnet.core.types import Weight
from chainnet.training.losses import SquareError


def _formula(request):
    """Deterministic, stateless initialisation so layers can be rebuilt identically."""

    if isinstance(request, Weight):
        return np.sin(1.3 * request.layer + 0.7 * request.source + 0.31 * request.dest + 0.1) * 0.8
    return np.cos(0.9 * request.layer + 0.37 * request.unit) * 0.3


def _layers(sizes, activation=Tanh()):
    return [
        Dense(sizes[l], sizes[l + 1], activation, _formula, layer=l) for l in range(len(sizes) - 1)
    ]


def test_chain_evaluates_in_order():
    first, second = _layers([3, 4, 2])
    net = first.chain(second)
    assert isinstance(net, Chain)
    x = np.array([0.2, -0.1, 0.5])
    assert np.allclose(net.eval(x), second.eval(first.eval(x)))


def test_chain_associativity_is_exact():
    a1, b1, c1 = _layers([2, 3, 3, 2])
    a2, b2, c2 = _layers([2, 3, 3, 2])
    loss = SquareError([0.3, -0.2])
    left = a1.chain(b1).chain(c1).chain(loss)
    right = a2.chain(b2.chain(c2)).chain(loss)

    x = np.array([0.4, -0.6])
    for _ in range(25):
        grads_left = left.train_step(x, left.intermediate(x), 0.05)
        grads_right = right.train_step(x, right.intermediate(x), 0.05)
        assert np.array_equal(grads_left, grads_right)

    assert left.eval(x) == right.eval(x)
    for one, two in [(a1, a2), (b1, b2), (c1, c2)]:
        assert np.array_equal(one.weights, two.weights)
        assert np.array_equal(one.biases, two.biases)


def test_chain_trains_both_layers():
    first, second = _layers([2, 3, 1])
    w_first, w_second = first.weights.copy(), second.weights.copy()
    net = first.chain(second).chain(SquareError([0.5]))
    x = np.array([1.0, -1.0])
    net.train_step(x, net.intermediate(x), 0.1)
    assert not np.array_equal(first.weights, w_first)
    assert not np.array_equal(second.weights, w_second)


def test_zip_routes_gradients_to_each_branch():
    top, bot = _layers([2, 2])[0], _layers([3, 3])[0]
    top_ref, bot_ref = _layers([2, 2])[0], _layers([3, 3])[0]
    net = top.zip(bot, Stacker(2, 3))
    assert isinstance(net, Zip)

    x_top, x_bot = np.array([0.1, 0.9]), np.array([-0.3, 0.4, 0.2])
    record = net.intermediate((x_top, x_bot))
    assert np.allclose(record.output, np.concatenate([top.eval(x_top), bot.eval(x_bot)]))

    gradients = np.array([0.5, -1.0, 0.25, 2.0, -0.75])
    top_grad, bot_grad = net.train((x_top, x_bot), record, gradients, 0.1)

    expected_top = top_ref.train(x_top, top_ref.intermediate(x_top), gradients[:2], 0.1)
    expected_bot = bot_ref.train(x_bot, bot_ref.intermediate(x_bot), gradients[2:], 0.1)
    assert np.allclose(top_grad, expected_top)
    assert np.allclose(bot_grad, expected_bot)
    assert np.allclose(top.weights, top_ref.weights)
    assert np.allclose(bot.weights, bot_ref.weights)


def test_composed_network_learns():
    expected = [0.99, 0.1, 0.5, 0.3, 0.789, 0.6]
    trunk = Dense(1, 5, Logistic(), _formula, layer=0).chain(Dense(5, 1, Logistic(), _formula, layer=1))
    side = Dense(5, 5, Logistic(), _formula, layer=2)
    net = trunk.zip(side, Stacker(1, 5)).chain(SquareError(expected))

    inputs = (np.array([5.0]), np.full(5, 2.0))
    start = net.eval(inputs)
    for _ in range(2000):
        net.train_step(inputs, net.intermediate(inputs), 0.5)
    assert np.isfinite(net.eval(inputs))
    assert net.eval(inputs) < start


def test_stacker_rejects_wrong_gradient_size():
    net = _layers([2, 2])[0].zip(_layers([2, 2])[0], Stacker(2, 2))
    inputs = (np.ones(2), np.ones(2))
    with pytest.raises(WrongGradientSize):
        net.train(inputs, net.intermediate(inputs), np.ones(3), 0.1)


def test_zip_requires_paired_inputs():
    net = _layers([2, 2])[0].zip(_layers([2, 2])[0], Stacker(2, 2))
    with pytest.raises(TypeError, match="pair"):
        net.intermediate(np.ones(3))


def test_zippers_invert_each_other():
    stacker = Stacker(2, 1)
    assert stacker.size == 3
    top, bot = stacker.unzip(stacker.zip([1.0, 2.0], [3.0]))
    assert top.tolist() == [1.0, 2.0] and bot.tolist() == [3.0]

    pair = PairZipper()
    assert pair.unzip(pair.zip("a", "b")) == ("a", "b")

    halves = FunctionZipper(lambda a, b: a + b, lambda m: (m[:1], m[1:]))
    assert halves.unzip(halves.zip([1], [2, 3])) == ([1], [2, 3])


def test_zip_input_gradients_match_finite_differences():
    top, bot = _layers([2, 3])[0], _layers([1, 2])[0]
    net = top.zip(bot, Stacker(3, 2)).chain(SquareError([0.1, -0.3, 0.5, 0.2, 0.0]))
    x_top, x_bot = np.array([0.4, -0.7]), np.array([0.9])
    top_grad, bot_grad = net.train_step((x_top, x_bot), net.intermediate((x_top, x_bot)), 0.0)

    eps = 1e-6
    for x, grad, pack in [
        (x_top, top_grad, lambda v: (v, x_bot)),
        (x_bot, bot_grad, lambda v: (x_top, v)),
    ]:
        numeric = np.empty_like(x)
        for k in range(x.shape[0]):
            bump = np.zeros_like(x)
            bump[k] = eps
            numeric[k] = (net.eval(pack(x + bump)) - net.eval(pack(x - bump))) / (2 * eps)
        assert np.allclose(grad, numeric, rtol=1e-5, atol=1e-7)
