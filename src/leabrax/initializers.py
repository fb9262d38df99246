'''Weight initialization strategies.

    A strategy is any callable that takes a count and returns that many
    initial weight values in [0, 1]. The network validates whatever comes
    back before building its projections.
'''

from __future__ import annotations
from typing import Optional

import jax
from jax import numpy as jnp
from flax import nnx


class UniformInit:
    '''Draws weights uniformly from [low, high]. When no `rngs` are given
        the strategy is bound to the random streams of the network that
        uses it.
    '''
    def __init__(self,
                 low: float = 0.3,
                 high: float = 0.7,
                 rngs: Optional[nnx.Rngs] = None,
                 ):
        self.low = low
        self.high = high
        self.rngs = rngs

    def bind(self, rngs: nnx.Rngs) -> UniformInit:
        '''Returns this strategy, or a copy drawing from `rngs` if it has no
            random streams of its own.
        '''
        if self.rngs is not None:
            return self
        return UniformInit(self.low, self.high, rngs)

    def __call__(self, count: int) -> jnp.ndarray:
        if self.rngs is None:
            raise RuntimeError("UniformInit has no random streams; pass rngs"
                               " or bind it to a network")
        return jax.random.uniform(self.rngs["Params"](),
                                  shape=(count,),
                                  minval=self.low,
                                  maxval=self.high,
                                  )

    def __repr__(self):
        return f"UniformInit(low={self.low}, high={self.high})"
