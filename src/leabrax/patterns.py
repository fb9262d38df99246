'''Random noisy-binary input patterns for clamping.'''

from __future__ import annotations
from typing import Optional, Sequence

import jax
from jax import numpy as jnp

from .errors import ConfigurationError, check_finite

ACTIVE = 0.95
INACTIVE = 0.05


def create_inputs(sizes: Sequence[int],
                  which_layers: Sequence[int],
                  n_inputs: int,
                  prop_active: float,
                  key: jax.Array,
                  ) -> list[list[Optional[jnp.ndarray]]]:
    '''Generates `n_inputs` patterns. In every pattern, each unit of the
        layers in `which_layers` is independently ACTIVE with probability
        `prop_active` and INACTIVE otherwise; all other layers are None
        (not clamped).

        Returns a list with one entry per pattern, each a list with one
        entry per layer.
    '''
    which_layers = _check_layers(which_layers, len(sizes))
    if isinstance(n_inputs, bool) or int(n_inputs) != n_inputs or n_inputs < 0:
        raise ConfigurationError(f"n_inputs must be a non-negative integer, got {n_inputs!r}")
    n_inputs = int(n_inputs)
    prop_active = check_finite(prop_active, "prop_active")
    if not 0 <= prop_active <= 1:
        raise ConfigurationError(f"prop_active must lie in [0, 1], got {prop_active}")

    columns = {}
    for layerIndex in which_layers:
        key, subkey = jax.random.split(key)
        active = jax.random.bernoulli(subkey, prop_active,
                                      shape=(n_inputs, sizes[layerIndex]))
        columns[layerIndex] = jnp.where(active, ACTIVE, INACTIVE)

    return [[columns[layerIndex][index] if layerIndex in columns else None
             for layerIndex in range(len(sizes))]
            for index in range(n_inputs)]


def _check_layers(which_layers, numLayers: int) -> list[int]:
    checked = []
    for layerIndex in which_layers:
        if isinstance(layerIndex, bool) or int(layerIndex) != layerIndex:
            raise ConfigurationError(f"Layer index {layerIndex!r} is not an integer")
        layerIndex = int(layerIndex)
        if not 0 <= layerIndex < numLayers:
            raise ConfigurationError(f"Layer index {layerIndex} out of range"
                                     f" for a network of {numLayers} layers")
        checked.append(layerIndex)
    return checked
