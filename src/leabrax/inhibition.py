# type checking
from __future__ import annotations

from jax import numpy as jnp
from flax import nnx

from .core.layer import fffb_inhibition


class FFFB(nnx.Module):
    '''Runs the FFFB inhibitory mechanism developed by Prof. O'Reilly. This
        mechanism acts as lateral inhibitory neurons within a pool and
        produces sparse activity without requiring the additional neural
        units and inhibitory synapses, approximating k-winners-take-all.

        There is both a feedforward component which inhibits large jumps in
        activity across a pool, and a feeback component which more dynamically
        smooths the activity over time. The result is one inhibitory
        conductance shared by every unit of the pool: units with the
        strongest excitatory drive are the only ones left above threshold.
    '''
    def __init__(self,
                 layer_length: int,
                 Gi: float = 1.8, # [1.5-2.3 typical, can go lower or higher as needed] overall inhibition gain -- this is main parameter to adjust to change overall activation levels -- it scales both the the ff and fb factors uniformly
                 FF: float = 1, # overall inhibitory contribution from feedforward inhibition -- multiplies average netinput (i.e., synaptic drive into layer)
                 FB: float = 1, # overall inhibitory contribution from feedback inhibition -- multiplies average activation
                 FBTau: float = 1.4, # time constant in cycles for integrating feedback inhibitory values -- prevents oscillations that otherwise occur
                 MaxVsAvg: float = 0, # what proportion of the maximum vs. average netinput to use in the feedforward inhibition computation -- 0 = all average, 1 = all max
                 FF0: float = 0.1, # feedforward zero point for average netinput -- below this level, no FF inhibition is computed
                 dtype = jnp.float64,
                 ):
        self.layer_length = layer_length
        self.Gi = Gi
        self.FF = FF
        self.FB = FB
        self.FBTau = FBTau
        self.FBDt = 1 / FBTau  # Convert tau to dt
        self.MaxVsAvg = MaxVsAvg
        self.FF0 = FF0
        self.dtype = dtype

        self.poolAct = nnx.Variable(jnp.zeros(layer_length, dtype=dtype))
        self.fbi = nnx.Variable(jnp.zeros((), dtype=dtype))
        self.Gi_FFFB = nnx.Variable(jnp.zeros((), dtype=dtype))

    def StepTime(self, poolGe: jnp.ndarray) -> jnp.ndarray:
        '''Computes the inhibitory conductance for this cycle from the pool's
            excitatory conductances and its activity on the previous cycle.
        '''
        self.Gi_FFFB.value, self.fbi.value = fffb_inhibition(
            poolGe, self.poolAct.value, self.fbi.value,
            self.Gi, self.FF, self.FB, self.FBDt, self.MaxVsAvg, self.FF0)
        return self.Gi_FFFB.value

    def UpdateAct(self, Act: jnp.ndarray):
        self.poolAct.value = Act

    def Reset(self):
        self.fbi.value = jnp.zeros((), dtype=self.dtype)
        self.Gi_FFFB.value = jnp.zeros((), dtype=self.dtype)
        self.poolAct.value = jnp.zeros(self.layer_length, dtype=self.dtype)
