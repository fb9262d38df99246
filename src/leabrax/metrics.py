import numpy as np
import jax.numpy as jnp
from jax import jit

from .errors import ConfigurationError

@jit
def MAD(predictions: jnp.ndarray, targets: jnp.ndarray):
    '''Mean Absolute Distance, averaged over units and samples'''
    return jnp.mean(jnp.abs(predictions - targets))

def mad_per_epoch(outputs, targets, layer_index: int) -> jnp.ndarray:
    '''Mean absolute distance between output and target activity of one
        layer, averaged over the stimuli of each epoch.

            - outputs: outputs[epoch][stimulus][layer], e.g. one call of
              Network.test_inputs per epoch, or the minus phase outputs of
              Network.learn_error_driven(..., return_minus=True). Plus phase
              outputs have the target layer clamped and always score 0.
            - targets: targets[stimulus][layer], e.g. the plus phase inputs
            - layer_index: the layer to compare

        Returns one error per epoch.
    '''
    numStimuli = len(targets)
    if numStimuli == 0:
        raise ConfigurationError("targets contains no stimuli")

    target = []
    for stimIndex, stimulus in enumerate(targets):
        if not 0 <= layer_index < len(stimulus):
            raise ConfigurationError(f"layer_index {layer_index} out of range"
                                     f" for target {stimIndex}")
        if stimulus[layer_index] is None:
            raise ConfigurationError(f"target {stimIndex} has no pattern for"
                                     f" layer {layer_index}")
        target.append(np.asarray(stimulus[layer_index], dtype=np.float64).ravel())
    target = jnp.asarray(np.stack(target))

    errors = []
    for epochIndex, epoch in enumerate(outputs):
        if len(epoch) != numStimuli:
            raise ConfigurationError(f"Epoch {epochIndex} has {len(epoch)} outputs"
                                     f" but there are {numStimuli} targets")
        output = np.stack([np.asarray(stimulus[layer_index], dtype=np.float64).ravel()
                           for stimulus in epoch])
        if output.shape != target.shape:
            raise ConfigurationError(f"Outputs of epoch {epochIndex} have shape"
                                     f" {output.shape}, targets {target.shape}")
        errors.append(MAD(jnp.asarray(output), target))

    return jnp.asarray(errors, dtype=jnp.float64).reshape(len(errors))
