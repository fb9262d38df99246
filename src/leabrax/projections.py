'''Defines the Projection class, the dense weight matrix of one directed
    connection between two layers.
'''

# type checking
from __future__ import annotations

import warnings

import numpy as np

from jax import numpy as jnp
from flax import nnx

from .errors import ConfigurationError, NumericAnomaly
from .logger import log


class Projection(nnx.Module):
    '''Directed connection from a sending layer to a receiving layer.

        The weight matrix has shape (receiving units, sending units) and
        entries in [0, 1]. Its contribution to the receiving layer's
        excitatory input is scaled by `Gscale`: the strength relative to all
        projections into the same layer, divided by the
        expected number of active sending units, so a projection delivers
        roughly the average weight from the active part of its sender.
    '''
    def __init__(self,
                 sender: int, # index of the sending layer
                 receiver: int, # index of the receiving layer
                 matrix: jnp.ndarray,
                 strength: float = 1,
                 sendActAvg: float = 0.15, # expected proportion of active sending units
                 dtype = jnp.float64,
                 ):
        self.sender = sender
        self.receiver = receiver
        self.shape = tuple(matrix.shape)
        self.strength = float(strength)
        self.sendActAvg = float(sendActAvg)
        self.dtype = dtype

        self.matrix = nnx.Variable(jnp.asarray(matrix, dtype=dtype))
        self.Gscale = nnx.Variable(1.0)
        self.setGscale(self.strength)

        self.name = f"PROJ_{sender}->{receiver}"

    def setGscale(self, totalStrength: float):
        '''Sets the input scaling from the summed strength of every
            projection into the receiving layer.
        '''
        rel = self.strength / totalStrength if totalStrength > 0 else self.strength

        # average number of active neurons in the sending layer
        sendActN = max(round(self.sendActAvg * self.shape[1]), 1)
        self.Gscale.value = rel / sendActN

    def apply(self, act: jnp.ndarray) -> jnp.ndarray:
        '''Scaled excitatory input delivered to each receiving unit.'''
        return self.Gscale.value * (self.matrix.value @ act)

    def get(self) -> jnp.ndarray:
        return self.matrix.value

    def set(self, matrix):
        '''Replaces the weight matrix. Only the shape is checked: values
            outside [0, 1] are accepted and remain the caller's responsibility.
        '''
        matrix = jnp.asarray(matrix, dtype=self.dtype)
        if matrix.shape != self.shape:
            raise ConfigurationError(f"Shape of weights {matrix.shape} does not"
                                     f" match shape of {self.name} {self.shape}")
        self.matrix.value = matrix

    def ApplyDelta(self, delta: jnp.ndarray):
        '''Adds a weight change and clips the result to [0, 1]. Non-finite
            entries are replaced (NaN -> 0, +/-Inf -> bounds) and reported.
        '''
        newMatrix = self.matrix.value + delta
        if not bool(jnp.all(jnp.isfinite(newMatrix))):
            count = int(np.sum(~np.isfinite(np.asarray(newMatrix))))
            log.warning("%s: %d non-finite weights clamped", self.name, count)
            warnings.warn(f"{count} non-finite weights in {self.name} were clamped"
                          " to [0, 1]; check the learning rate",
                          NumericAnomaly, stacklevel=3)
            newMatrix = jnp.nan_to_num(newMatrix, nan=0.0, posinf=1.0, neginf=0.0)
        self.matrix.value = jnp.clip(newMatrix, 0, 1)

    def __len__(self):
        return self.shape[0]

    def __str__(self):
        return f"{self.name} (strength={self.strength}, shape={self.shape})"
