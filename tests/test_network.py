"""
Test network construction, projections and the inspection helpers.
"""
import numpy as np
import pandas as pd
import pytest

from leabrax import Network, UniformInit, ConfigurationError


CONNECTIONS = [[0, 0, 0],
               [1, 0, 0.2],
               [0, 1, 0]]


def test_projections_follow_connection_matrix():
    """One projection per non-zero strength, keyed (target, source)."""
    net = Network([5, 10, 5], CONNECTIONS)
    assert set(net.projections) == {(1, 0), (1, 2), (2, 1)}
    assert net.afferents[0] == []
    assert net.get_weights(1, 0).shape == (10, 5)
    assert net.get_weights(1, 2).shape == (10, 5)
    assert net.get_weights(2, 1).shape == (5, 10)
    for key, weights in net.weights.items():
        weights = np.asarray(weights)
        assert np.all(weights >= 0.3) and np.all(weights <= 0.7), key


def test_layer_without_afferents_receives_no_input():
    net = Network([5, 10, 5], CONNECTIONS)
    pattern = np.full(10, 0.95)
    outputs = net.test_inputs([[None, pattern, None]])
    np.testing.assert_array_equal(np.asarray(outputs[0][0]), np.zeros(5))
    np.testing.assert_array_equal(np.asarray(net.layers[0].GeRaw.value), np.zeros(5))
    assert float(np.max(outputs[0][2])) > 0


def test_relative_strength_scaling():
    """Input is divided by the summed strengths and the expected number of
    active senders."""
    net = Network([5, 10, 5], CONNECTIONS, layerConfig={"ActAvg": {"Init": 0.2}})
    # 0.2 * 5 -> 1 active sender, 0.2 * 10 -> 2 active senders
    np.testing.assert_allclose(float(net.projections[(1, 0)].Gscale.value), 1 / 1.2)
    np.testing.assert_allclose(float(net.projections[(1, 2)].Gscale.value), 0.2 / 1.2)
    np.testing.assert_allclose(float(net.projections[(2, 1)].Gscale.value), 1 / 2)


def test_sparse_senders_count_at_least_one():
    net = Network([3, 40], [[0, 0], [1, 0]], layerConfig={"ActAvg": {"Init": 0.1}})
    assert float(net.projections[(1, 0)].Gscale.value) == 1.0
    net = Network([40, 3], [[0, 0], [1, 0]], layerConfig={"ActAvg": {"Init": 0.1}})
    np.testing.assert_allclose(float(net.projections[(1, 0)].Gscale.value), 1 / 4)


def test_two_dimensional_layers():
    net = Network([(2, 3), 4], [[0, 0], [1, 0]])
    assert net.layers[0].shape == (2, 3)
    assert net.get_weights(1, 0).shape == (4, 6)


@pytest.mark.parametrize("dims, connections", [
    ([5, 5], [[0, 1]]),                         # not square
    ([5, 5], CONNECTIONS),                      # wrong dimension
    ([5, 5], [[0, 0], [-1, 0]]),                # negative strength
    ([5, 5], [[0, 0], [np.nan, 0]]),            # non-finite strength
    ([5, 5], [["a", 0], [1, 0]]),               # non-numeric
    ([], []),                                   # no layers
    ([5, 0], [[0, 0], [1, 0]]),                 # empty layer
])
def test_invalid_topology(dims, connections):
    with pytest.raises(ConfigurationError):
        Network(dims, connections)


def test_invalid_parameters():
    with pytest.raises(ConfigurationError):
        Network([3, 3], [[0, 0], [1, 0]], inhibition_gain=[1.8])
    with pytest.raises(ConfigurationError):
        Network([3, 3], [[0, 0], [1, 0]], inhibition_gain=-1)
    with pytest.raises(ConfigurationError):
        Network([3, 3], [[0, 0], [1, 0]], lrate=np.inf)
    with pytest.raises(ConfigurationError):
        Network([3, 3], [[0, 0], [1, 0]], weight_init=0.5)


def test_invalid_weight_init():
    with pytest.raises(ConfigurationError):
        Network([3, 3], [[0, 0], [1, 0]], weight_init=lambda n: [0.5] * (n - 1))
    with pytest.raises(ConfigurationError):
        Network([3, 3], [[0, 0], [1, 0]], weight_init=lambda n: [1.5] * n)


def test_custom_weight_init():
    net = Network([3, 4], [[0, 0], [1, 0]], weight_init=lambda n: np.full(n, 0.5))
    np.testing.assert_array_equal(np.asarray(net.get_weights(1, 0)), np.full((4, 3), 0.5))

    net = Network([3, 4], [[0, 0], [1, 0]], weight_init=UniformInit(0.45, 0.55))
    weights = np.asarray(net.get_weights(1, 0))
    assert np.all(weights >= 0.45) and np.all(weights <= 0.55)


def test_same_seed_same_weights():
    first = Network([5, 10, 5], CONNECTIONS, seed=7)
    second = Network([5, 10, 5], CONNECTIONS, seed=7)
    other = Network([5, 10, 5], CONNECTIONS, seed=8)
    for key in first.projections:
        np.testing.assert_array_equal(np.asarray(first.get_weights(*key)),
                                      np.asarray(second.get_weights(*key)))
    assert not np.array_equal(np.asarray(first.get_weights(1, 0)),
                              np.asarray(other.get_weights(1, 0)))


def test_inhibition_gains():
    net = Network([3, 3, 3], np.zeros((3, 3)), inhibition_gain=2.0)
    assert [layer.inhibitionGain for layer in net.layers] == [2.0, 2.0, 2.0]

    net = Network([3, 3, 3], np.zeros((3, 3)), inhibition_gain=[None, 1.5, 2.2])
    assert [layer.inhibitionGain for layer in net.layers] == [1.8, 1.5, 2.2]

    net = Network([3, 3], np.zeros((2, 2)), layerConfig={"FFFBparams": {"Gi": 2.0}})
    assert [layer.inhibitionGain for layer in net.layers] == [2.0, 2.0]


def test_invalid_config():
    with pytest.raises(ConfigurationError):
        Network([3, 3], np.zeros((2, 2)), layerConfig={"Unknown": 1})
    with pytest.raises(ConfigurationError):
        Network([3, 3], np.zeros((2, 2)), layerConfig={"DtParams": {"VmTau": 0}})
    with pytest.raises(ConfigurationError):
        Network([3, 3], np.zeros((2, 2)), runConfig={"Lrate": -1})
    with pytest.raises(ConfigurationError):
        Network([3, 3], np.zeros((2, 2)), runConfig={"LrnVar": "AvgX"})


def test_set_weights():
    net = Network([3, 4], [[0, 0], [1, 0]])
    net.set_weights(1, 0, np.full((4, 3), 0.25))
    np.testing.assert_array_equal(np.asarray(net.get_weights(1, 0)), np.full((4, 3), 0.25))

    with pytest.raises(ConfigurationError):
        net.set_weights(1, 0, np.full((3, 4), 0.25))
    with pytest.raises(ConfigurationError):
        net.set_weights(0, 1, np.full((3, 4), 0.25))
    with pytest.raises(ConfigurationError):
        net.get_weights(0, 1)


def test_reset_weights():
    net = Network([3, 4], [[0, 0], [1, 0]])
    before = np.asarray(net.get_weights(1, 0))
    net.reset_weights()
    after = np.asarray(net.get_weights(1, 0))
    assert not np.array_equal(before, after)
    assert np.all(after >= 0.3) and np.all(after <= 0.7)


def test_inspection_frames():
    net = Network([5, 10, 5], CONNECTIONS)
    net.test_inputs([[np.full(5, 0.95), None, None]])

    units = net.unit_vars()
    assert isinstance(units, pd.DataFrame)
    assert len(units) == 20
    for column in ("layer", "unit", "Act", "AvgS", "AvgM", "AvgL", "GeRaw", "Ge", "Gi", "Vm"):
        assert column in units.columns
    assert list(units[units["layer"] == 1]["unit"]) == list(range(10))

    layers = net.layer_vars()
    assert len(layers) == 3
    assert list(layers["n_units"]) == [5, 10, 5]
    assert list(layers["inhibition_gain"]) == [1.8, 1.8, 1.8]

    print(net)


def test_layer_order_does_not_matter():
    """Declaring the same layers in another order gives the same activity."""
    order = [2, 0, 1]  # layer k of the permuted network is layer order[k]
    net = Network([5, 10, 5], CONNECTIONS, seed=3)
    dims = [len(net.layers[index]) for index in order]
    connections = np.asarray(CONNECTIONS)[np.ix_(order, order)]
    permuted = Network(dims, connections, seed=3)
    for target, source in permuted.projections:
        permuted.set_weights(target, source, net.get_weights(order[target], order[source]))

    stimuli = [[np.full(5, 0.95), None, None],
               [np.array([0.95, 0.05, 0.95, 0.05, 0.95]), None, np.full(5, 0.05)]]
    outputs = net.test_inputs(stimuli)
    permutedOutputs = permuted.test_inputs([[stimulus[index] for index in order]
                                            for stimulus in stimuli])
    for stimulus, permutedStimulus in zip(outputs, permutedOutputs):
        for position, index in enumerate(order):
            np.testing.assert_allclose(np.asarray(permutedStimulus[position]),
                                       np.asarray(stimulus[index]), atol=1e-9)


def test_activity_advances_one_layer_per_cycle():
    """Layers read the activity of the previous cycle, never the current one."""
    net = Network([5, 10, 5], CONNECTIONS)
    stimulus = net.ValidateInputs([[np.full(5, 0.95), None, None]])[0]
    net.resetActivity()

    net.StepPhase(stimulus, 1)
    np.testing.assert_array_equal(np.asarray(net.layers[0].getActivity()), np.full(5, 0.95))
    np.testing.assert_array_equal(np.asarray(net.layers[1].GeRaw.value), np.zeros(10))
    np.testing.assert_array_equal(np.asarray(net.layers[2].GeRaw.value), np.zeros(5))

    net.StepPhase(stimulus, 1)
    assert np.all(np.asarray(net.layers[1].GeRaw.value) > 0)
    np.testing.assert_array_equal(np.asarray(net.layers[2].GeRaw.value), np.zeros(5))
