'''Defines the Network class: a set of layers fully connected according to a
    connection-strength matrix, together with the cycle scheduler and the
    learning rules.
'''

# type checking
from __future__ import annotations
from typing import Callable, Optional, Sequence

import numpy as np

import jax
from jax import numpy as jnp
from flax import nnx
import pandas as pd

from .config import layerConfig_std, runConfig_std, merge_config
from .errors import ConfigurationError, check_finite, check_unit_interval
from .initializers import UniformInit
from .layers import Layer
from .learningRules import CHL, Hebbian
from .logger import log
from .patterns import create_inputs
from .projections import Projection


class Network:
    '''A Leabra network of layers connected by dense projections.

        dims: one entry per layer, either a unit count or a (rows, columns)
            pair. Units are always handled as a flat vector.
        connections: square matrix, connections[i][j] is the relative
            strength of the projection from layer j to layer i (0 = none).
        weight_init: callable mapping a count to that many initial weights
            in [0, 1]. Defaults to UniformInit(0.3, 0.7) drawing from the
            network's random streams.
        inhibition_gain: None, one gain for every layer, or a sequence with
            one gain (or None for the default) per layer.
        lrate: learning rate, overrides runConfig["Lrate"].
        seed/rngs: the network owns one nnx.Rngs used for weights ("Params"),
            generated patterns ("Inputs") and stimulus order ("Order").

        The network is the only owner of its state. Every learning call
        mutates the weights of this object in place; activations are reset at
        the start of each stimulus, so the weights are the only state carried
        from one stimulus to the next.
    '''
    count = 0
    def __init__(self,
                 dims: Sequence,
                 connections,
                 weight_init: Optional[Callable[[int], Sequence[float]]] = None,
                 inhibition_gain = None,
                 lrate: float = None,
                 seed: int = 0,
                 rngs: nnx.Rngs = None,
                 layerConfig: dict = None,
                 runConfig: dict = None,
                 name = None,
                 dtype = jnp.float64,
                 ):
        self.layerConfig = merge_config(layerConfig_std, layerConfig)
        self.runConfig = merge_config(runConfig_std, runConfig)
        if lrate is not None:
            self.runConfig["Lrate"] = self._checkLrate(lrate)
        self.dtype = dtype
        if rngs is None:
            rngs = nnx.Rngs(seed, Params=seed, Inputs=seed + 1, Order=seed + 2)
        self.rngs = rngs

        self.name = f"NET_{Network.count}" if name is None else name
        Network.count += 1

        dims = list(dims)
        if len(dims) == 0:
            raise ConfigurationError("A network needs at least one layer")
        self.connections = self._checkConnections(connections, len(dims))
        gains = self._checkInhibitionGains(inhibition_gain, len(dims))

        self.layers: list[Layer] = [Layer(dim, self.layerConfig,
                                          inhibitionGain=gain,
                                          name=f"{self.name}_LAYER_{index}",
                                          dtype=dtype)
                                    for index, (dim, gain) in enumerate(zip(dims, gains))]

        self.weight_init = self._bindWeightInit(weight_init)
        self.projections: dict[tuple[int, int], Projection] = {}
        self._buildProjections()

        log.info("Created %s: layers=%s, projections=%s", self.name,
                 [layer.shape for layer in self.layers],
                 sorted(self.projections))

    ###<------ CONSTRUCTION ------>###

    @staticmethod
    def _checkConnections(connections, numLayers: int) -> np.ndarray:
        try:
            connections = np.asarray(connections, dtype=np.float64)
        except (TypeError, ValueError):
            raise ConfigurationError("Connection matrix must be numeric")
        if connections.ndim != 2 or connections.shape[0] != connections.shape[1]:
            raise ConfigurationError(f"Connection matrix must be square, got"
                                     f" shape {connections.shape}")
        if connections.shape[0] != numLayers:
            raise ConfigurationError(f"Connection matrix has dimension"
                                     f" {connections.shape[0]} but there are"
                                     f" {numLayers} layers")
        if not np.all(np.isfinite(connections)):
            raise ConfigurationError("Connection matrix contains non-finite values")
        if np.any(connections < 0):
            raise ConfigurationError("Connection strengths must not be negative")
        return connections

    @staticmethod
    def _checkInhibitionGains(inhibition_gain, numLayers: int) -> list:
        if inhibition_gain is None:
            return [None] * numLayers
        if np.ndim(inhibition_gain) == 0:
            gains = [inhibition_gain] * numLayers
        else:
            gains = list(inhibition_gain)
            if len(gains) != numLayers:
                raise ConfigurationError(f"Expected {numLayers} inhibition gains,"
                                         f" got {len(gains)}")
        checked = []
        for gain in gains:
            if gain is not None:
                gain = check_finite(gain, "Inhibition gain")
                if gain < 0:
                    raise ConfigurationError(f"Inhibition gain must not be negative, got {gain}")
            checked.append(gain)
        return checked

    @staticmethod
    def _checkLrate(lrate) -> float:
        lrate = check_finite(lrate, "Learning rate")
        if lrate < 0:
            raise ConfigurationError(f"Learning rate must not be negative, got {lrate}")
        return lrate

    def _bindWeightInit(self, weight_init):
        if weight_init is None:
            WtInit = self.runConfig["WtInit"]
            if not 0 <= WtInit["Low"] <= WtInit["High"] <= 1:
                raise ConfigurationError("runConfig['WtInit'] must satisfy"
                                         " 0 <= Low <= High <= 1")
            return UniformInit(WtInit["Low"], WtInit["High"], self.rngs)
        if isinstance(weight_init, UniformInit):
            return weight_init.bind(self.rngs)
        if not callable(weight_init):
            raise ConfigurationError("weight_init must be callable")
        return weight_init

    def _drawWeights(self, shape: tuple[int, int]) -> jnp.ndarray:
        count = shape[0] * shape[1]
        values = check_unit_interval(self.weight_init(count),
                                     "Weights returned by weight_init", count)
        return jnp.asarray(values.reshape(shape), dtype=self.dtype)

    def _buildProjections(self):
        '''Creates one projection per non-zero connection strength, in row
            major order of the connection matrix.
        '''
        projections = {}
        for receiver, sender in zip(*np.nonzero(self.connections)):
            receiver, sender = int(receiver), int(sender)
            shape = (len(self.layers[receiver]), len(self.layers[sender]))
            projections[(receiver, sender)] = Projection(
                sender, receiver, self._drawWeights(shape),
                strength=self.connections[receiver, sender],
                sendActAvg=self.layerConfig["ActAvg"]["Init"],
                dtype=self.dtype)

        for (receiver, sender), projection in projections.items():
            projection.setGscale(np.sum(self.connections[receiver]))

        self.projections = projections
        self.afferents: list[list[Projection]] = [
            [projection for (receiver, _), projection in projections.items()
             if receiver == index]
            for index in range(len(self.layers))]

    def reset_weights(self):
        '''Draws a fresh set of weights for every projection from the
            network's weight initializer.
        '''
        for projection in self.projections.values():
            projection.set(self._drawWeights(projection.shape))
        log.info("%s: weights reset", self.name)

    ###<------ WEIGHT ACCESS ------>###

    @property
    def weights(self) -> dict[tuple[int, int], jnp.ndarray]:
        '''Weight matrices keyed by (target layer, source layer). The arrays
            are immutable; use set_weights to change them.
        '''
        return {key: projection.get() for key, projection in self.projections.items()}

    def get_weights(self, target: int, source: int) -> jnp.ndarray:
        return self._getProjection(target, source).get()

    def set_weights(self, target: int, source: int, matrix):
        '''Replaces the weights of the projection source -> target.

            This is an unchecked escape hatch: only the shape is validated.
            Values outside [0, 1] are stored as given and the learning rule
            clips them back into range at the next update.
        '''
        self._getProjection(target, source).set(matrix)

    def _getProjection(self, target: int, source: int) -> Projection:
        if (target, source) not in self.projections:
            raise ConfigurationError(f"There is no projection from layer"
                                     f" {source} to layer {target}")
        return self.projections[(target, source)]

    ###<------ SIMULATION ------>###

    def ValidateInputs(self, inputs, name: str = "inputs") -> list[list[Optional[jnp.ndarray]]]:
        '''Ensures that a batch of input specifications is properly
            constructed: one entry per stimulus, each with one entry per
            layer that is either None or a vector in [0, 1] of the layer's
            length. Returns the batch converted to arrays.
        '''
        try:
            inputs = list(inputs)
        except TypeError:
            raise ConfigurationError(f"{name} must be a sequence of stimuli")
        validated = []
        for stimIndex, stimulus in enumerate(inputs):
            if stimulus is None or len(stimulus) != len(self.layers):
                raise ConfigurationError(f"{name}[{stimIndex}] must have one entry"
                                         f" per layer ({len(self.layers)})")
            validated.append([
                None if pattern is None else jnp.asarray(
                    check_unit_interval(pattern, f"{name}[{stimIndex}][{layerIndex}]",
                                        len(self.layers[layerIndex])),
                    dtype=self.dtype)
                for layerIndex, pattern in enumerate(stimulus)
            ])
        return validated

    @staticmethod
    def _checkCycles(numCycles, name: str) -> int:
        try:
            valid = (not isinstance(numCycles, bool) and
                     int(numCycles) == numCycles and numCycles >= 1)
        except (TypeError, ValueError, OverflowError):
            valid = False
        if not valid:
            raise ConfigurationError(f"{name} must be a positive integer, got {numCycles!r}")
        return int(numCycles)

    def resetActivity(self):
        for layer in self.layers:
            layer.reset()

    reset_activity = resetActivity

    def ClampLayers(self, stimulus: list[Optional[jnp.ndarray]]):
        '''Clamps every layer with a pattern and releases all the others.'''
        for layer, pattern in zip(self.layers, stimulus):
            if pattern is None:
                layer.Unclamp()
            else:
                layer.Clamp(pattern)

    def StepCycle(self):
        '''Advances every layer by one cycle. All layers read the activities
            of the previous cycle, so the result does not depend on the
            order in which layers are visited.
        '''
        acts = [layer.getActivity() for layer in self.layers]
        for layer, projections in zip(self.layers, self.afferents):
            layer.cycle([(projection, acts[projection.sender])
                         for projection in projections])

    def StepPhase(self, stimulus: list[Optional[jnp.ndarray]], numCycles: int):
        '''Runs one phase: clamps the stimulus and settles for `numCycles`.'''
        self.ClampLayers(stimulus)
        for _ in range(numCycles):
            self.StepCycle()

    def _lrnSnapshot(self) -> list[jnp.ndarray]:
        '''End-of-phase values of the learning variable for every layer.'''
        return [layer.snapshot()[self.runConfig["LrnVar"]] for layer in self.layers]

    def _activities(self) -> list[jnp.ndarray]:
        return [layer.getActivity() for layer in self.layers]

    def _order(self, numStimuli: int, random_order: bool) -> list[int]:
        if random_order:
            return [int(i) for i in jax.random.permutation(self.rngs["Order"](), numStimuli)]
        return list(range(numStimuli))

    def _progress(self, verbosity: int, runType: str, count: int, numStimuli: int):
        if verbosity > 0:
            print(f"\r{runType} [{self.name}], "
                  f"stimulus: ({count+1}/{numStimuli})", end="" if count+1 < numStimuli else "\n")

    ###<------ ENTRY POINTS ------>###

    def learn_error_driven(self,
                           inputs_minus,
                           inputs_plus,
                           n_cycles_minus: int = None,
                           n_cycles_plus: int = None,
                           lrate: float = None,
                           random_order: bool = False,
                           verbosity: int = 0,
                           return_minus: bool = False,
                           ):
        '''Error-driven learning over one epoch.

            For each stimulus the network settles for `n_cycles_minus` cycles
            with `inputs_minus` clamped (minus phase), then continues for
            `n_cycles_plus` cycles with `inputs_plus` clamped (plus phase).
            Every projection then changes by lrate * CHL of the end-of-phase
            activity, and is clipped to [0, 1].

            Returns, for each stimulus in the order given, the activity of
            every layer on the last plus phase cycle, captured before the
            weights were changed. With `return_minus` a second list holds the
            activity on the last minus phase cycle, i.e. the network's own
            guess for every unclamped layer.

            Side effect: mutates the weights of this network.
        '''
        n_cycles_minus = self._checkCycles(
            self.runConfig["NumCyclesMinus"] if n_cycles_minus is None else n_cycles_minus,
            "n_cycles_minus")
        n_cycles_plus = self._checkCycles(
            self.runConfig["NumCyclesPlus"] if n_cycles_plus is None else n_cycles_plus,
            "n_cycles_plus")
        lrate = self.runConfig["Lrate"] if lrate is None else self._checkLrate(lrate)
        inputs_minus = self.ValidateInputs(inputs_minus, "inputs_minus")
        inputs_plus = self.ValidateInputs(inputs_plus, "inputs_plus")
        if len(inputs_minus) != len(inputs_plus):
            raise ConfigurationError(f"inputs_minus has {len(inputs_minus)} stimuli"
                                     f" but inputs_plus has {len(inputs_plus)}")

        numStimuli = len(inputs_minus)
        outputs = [None] * numStimuli
        minusOutputs = [None] * numStimuli
        for count, stimIndex in enumerate(self._order(numStimuli, random_order)):
            self._progress(verbosity, "Learning (error driven)", count, numStimuli)
            self.resetActivity()

            self.StepPhase(inputs_minus[stimIndex], n_cycles_minus)
            minus = self._lrnSnapshot()
            minusOutputs[stimIndex] = self._activities()

            self.StepPhase(inputs_plus[stimIndex], n_cycles_plus)
            plus = self._lrnSnapshot()
            outputs[stimIndex] = self._activities()

            for (receiver, sender), projection in self.projections.items():
                delta = CHL(plus[sender], minus[sender], plus[receiver], minus[receiver])
                projection.ApplyDelta(lrate * delta)

            log.debug("%s: error driven trial %d done", self.name, stimIndex)

        self.ClampLayers([None] * len(self.layers))
        if return_minus:
            return outputs, minusOutputs
        return outputs

    def learn_self_organized(self,
                             inputs,
                             random_order: bool = False,
                             n_cycles: int = None,
                             lrate: float = None,
                             verbosity: int = 0,
                             ) -> list[list[jnp.ndarray]]:
        '''Self-organized (Hebbian) learning over one epoch.

            Each stimulus is presented in a single phase of `n_cycles`
            cycles; every projection then changes by lrate * the product of
            receiving and sending end-of-phase activity, clipped to [0, 1].
            With `random_order` the stimuli are presented in a random order
            drawn from the network's "Order" stream.

            A few receiving units tend to take over most inputs ("hogging");
            this is a property of the rule and is left as is.

            Returns the final activity of every layer for each stimulus, in
            the order given. Side effect: mutates the weights of this network.
        '''
        n_cycles = self._checkCycles(
            self.runConfig["NumCycles"] if n_cycles is None else n_cycles, "n_cycles")
        lrate = self.runConfig["Lrate"] if lrate is None else self._checkLrate(lrate)
        inputs = self.ValidateInputs(inputs)

        numStimuli = len(inputs)
        outputs = [None] * numStimuli
        for count, stimIndex in enumerate(self._order(numStimuli, random_order)):
            self._progress(verbosity, "Learning (self organized)", count, numStimuli)
            self.resetActivity()

            self.StepPhase(inputs[stimIndex], n_cycles)
            acts = self._lrnSnapshot()
            outputs[stimIndex] = self._activities()

            for (receiver, sender), projection in self.projections.items():
                projection.ApplyDelta(lrate * Hebbian(acts[sender], acts[receiver]))

            log.debug("%s: self organized trial %d done", self.name, stimIndex)

        self.ClampLayers([None] * len(self.layers))
        return outputs

    def test_inputs(self,
                    inputs,
                    n_cycles: int = None,
                    verbosity: int = 0,
                    ) -> list[list[jnp.ndarray]]:
        '''Presents each stimulus for one phase of `n_cycles` cycles without
            learning. Returns the final activity of every layer per stimulus.
            The weights are not touched.
        '''
        n_cycles = self._checkCycles(
            self.runConfig["NumCycles"] if n_cycles is None else n_cycles, "n_cycles")
        inputs = self.ValidateInputs(inputs)

        outputs = []
        for stimIndex, stimulus in enumerate(inputs):
            self._progress(verbosity, "Testing", stimIndex, len(inputs))
            self.resetActivity()
            self.StepPhase(stimulus, n_cycles)
            outputs.append(self._activities())

        self.ClampLayers([None] * len(self.layers))
        return outputs

    def create_inputs(self,
                      which_layers: Sequence[int],
                      n_inputs: int,
                      prop_active: float,
                      ) -> list[list[Optional[jnp.ndarray]]]:
        '''Random patterns for the layers in `which_layers` (0.95 with
            probability `prop_active`, 0.05 otherwise), drawn from the
            network's "Inputs" stream. Other layers are None.
        '''
        return create_inputs([len(layer) for layer in self.layers],
                             which_layers, n_inputs, prop_active,
                             self.rngs["Inputs"]())

    ###<------ INSPECTION ------>###

    def unit_vars(self) -> pd.DataFrame:
        '''One row per unit with its current dynamic variables.'''
        frames = []
        for layerIndex, layer in enumerate(self.layers):
            snapshot = {key: np.asarray(value) for key, value in layer.snapshot().items()}
            frame = pd.DataFrame(snapshot)
            frame.insert(0, "unit", np.arange(len(layer)))
            frame.insert(0, "layer", layerIndex)
            frames.append(frame)
        return pd.concat(frames, ignore_index=True)

    def layer_vars(self) -> pd.DataFrame:
        '''One row per layer with its size, inhibition and mean activity.'''
        return pd.DataFrame({
            "layer": np.arange(len(self.layers)),
            "name": [layer.name for layer in self.layers],
            "n_units": [len(layer) for layer in self.layers],
            "inhibition_gain": [layer.inhibitionGain for layer in self.layers],
            "fbi": [float(layer.FFFB.fbi.value) for layer in self.layers],
            "avg_act": [float(jnp.mean(layer.getActivity())) for layer in self.layers],
        })

    def __len__(self):
        return len(self.layers)

    def __str__(self) -> str:
        strs = [f"{self.name}:"]
        for layer in self.layers:
            strs.append(str(layer))
        for projection in self.projections.values():
            strs.append(str(projection))
        return "\n".join(strs)
