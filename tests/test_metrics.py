"""
Test the mean absolute distance metrics.
"""
import numpy as np
import pytest
import jax.numpy as jnp

from leabrax import Network, ConfigurationError, MAD, mad_per_epoch


def test_mad():
    assert float(MAD(jnp.array([0.0, 1.0]), jnp.array([0.5, 0.5]))) == 0.5


def test_perfect_outputs_give_zero_error():
    targets = [[None, np.array([0.05, 0.95, 0.05])],
               [None, np.array([0.95, 0.05, 0.95])]]
    outputs = [[[np.zeros(4), target[1]] for target in targets] for _ in range(4)]
    errors = mad_per_epoch(outputs, targets, 1)
    assert errors.shape == (4,)
    np.testing.assert_array_equal(np.asarray(errors), np.zeros(4))


def test_error_per_epoch():
    targets = [[np.zeros(2)], [np.ones(2)]]
    outputs = [
        [[np.full(2, 0.5)], [np.full(2, 0.5)]],
        [[np.zeros(2)], [np.array([1.0, 0.0])]],
    ]
    np.testing.assert_allclose(np.asarray(mad_per_epoch(outputs, targets, 0)), [0.5, 0.25])


def test_error_of_network_guesses():
    """Minus phase guesses are scored against the plus phase targets."""
    net = Network([4, 3], [[0, 0], [1, 0]], seed=0)
    minus = net.create_inputs([0], 3, 0.5)
    targets = net.create_inputs([1], 3, 0.5)
    plus = [[stimulus[0], target[1]] for stimulus, target in zip(minus, targets)]

    guesses = []
    for epoch in range(2):
        outputs, minusOutputs = net.learn_error_driven(minus, plus, return_minus=True)
        guesses.append(minusOutputs)
        # the clamped plus phase reproduces the target exactly
        np.testing.assert_array_equal(np.asarray(mad_per_epoch([outputs], plus, 1)), [0.0])
    errors = np.asarray(mad_per_epoch(guesses, plus, 1))
    assert errors.shape == (2,)
    assert np.all(errors > 0)


def test_invalid_arguments():
    targets = [[None, np.zeros(2)]]
    outputs = [[[np.zeros(3), np.zeros(2)]]]
    with pytest.raises(ConfigurationError):
        mad_per_epoch(outputs, targets, 0)  # no target pattern
    with pytest.raises(ConfigurationError):
        mad_per_epoch(outputs, targets, 2)  # no such layer
    with pytest.raises(ConfigurationError):
        mad_per_epoch(outputs, [], 1)
    with pytest.raises(ConfigurationError):
        mad_per_epoch([[[np.zeros(3), np.zeros(2)]] * 2], targets, 1)
    with pytest.raises(ConfigurationError):
        mad_per_epoch([[[np.zeros(3), np.zeros(4)]]], targets, 1)
