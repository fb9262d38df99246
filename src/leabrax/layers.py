'''Defines a Layer class corresponding to a pool of point neurons.
'''

# type checking
from __future__ import annotations
from typing import TYPE_CHECKING, Optional, Sequence
if TYPE_CHECKING:
    from .projections import Projection

import math

from jax import numpy as jnp
from flax import nnx

from .config import layerConfig_std
from .core.layer import integrate_conductance
from .errors import ConfigurationError, check_unit_interval
from .inhibition import FFFB
from .units import Unit


class Layer(nnx.Module):
    '''A homogeneous pool of units with shared FFFB inhibition.

        The layer aggregates weighted activity from its incoming projections
        into each unit's excitatory conductance, computes one inhibitory
        conductance for the whole pool and advances every unit by one cycle.
        While an external input is present the units are clamped to it
        instead.
    '''
    count = 0
    def __init__(self,
                 dims, # number of units, or a (rows, columns) tuple
                 layerConfig: dict = layerConfig_std,
                 inhibitionGain: float = None, # overrides FFFBparams["Gi"]
                 name = None,
                 dtype = jnp.float64,
                 ):
        self.shape = self._parseDims(dims)
        self.length = math.prod(self.shape)
        self.dtype = dtype

        DtParams = layerConfig["DtParams"]
        self.Integ = DtParams["Integ"]
        self.GDt = 1 / DtParams["GTau"] # rate = Integ / tau

        self.units = Unit(self.length, layerConfig, dtype=dtype)

        FFFBparams = dict(layerConfig["FFFBparams"])
        if inhibitionGain is not None:
            FFFBparams["Gi"] = inhibitionGain
        self.FFFB = FFFB(self.length, dtype=dtype, **FFFBparams)

        self.GeRaw = nnx.Variable(jnp.zeros(self.length, dtype=dtype))
        self.hasExternal = nnx.Variable(False)
        self.EXTERNAL = nnx.Variable(jnp.zeros(self.length, dtype=dtype)) # external input to layer

        self.name = f"LAYER_{Layer.count}" if name is None else name
        Layer.count += 1

    @staticmethod
    def _parseDims(dims) -> tuple[int, int]:
        if isinstance(dims, (int,)) and not isinstance(dims, bool):
            dims = (1, dims)
        try:
            dims = tuple(int(d) for d in dims)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Layer dimensions must be an int or a"
                                     f" (rows, columns) pair, got {dims!r}")
        if len(dims) != 2 or min(dims) < 1:
            raise ConfigurationError(f"Layer dimensions must be two positive"
                                     f" integers, got {dims!r}")
        return dims

    @property
    def inhibitionGain(self) -> float:
        return self.FFFB.Gi

    def Clamp(self, clampData):
        '''Stores an external input that overrides the layer's own dynamics
            until Unclamp is called.
        '''
        clampData = check_unit_interval(clampData, f"External input to {self.name}",
                                        self.length)
        self.EXTERNAL.value = jnp.asarray(clampData, dtype=self.dtype)
        self.hasExternal.value = True

    def Unclamp(self):
        self.hasExternal.value = False

    @property
    def external(self) -> Optional[jnp.ndarray]:
        return self.EXTERNAL.value if self.hasExternal.value else None

    def cycle(self,
              afferents: Sequence[tuple[Projection, jnp.ndarray]],
              external: Optional[jnp.ndarray] = None,
              ) -> jnp.ndarray:
        '''Advances the layer by one cycle.

            afferents: (projection, sending activity) pairs for every
                projection into this layer.
            external: clamped activity for this cycle; defaults to the input
                stored by Clamp.

            Returns the activity vector after the cycle.
        '''
        if external is None:
            external = self.external
        else:
            external = check_unit_interval(external, f"External input to {self.name}",
                                           self.length)

        if external is not None:
            Act = self.units.clamp(external)
        elif len(afferents) == 0:
            Act = self.units.hold()
        else:
            GeRaw = afferents[0][0].apply(afferents[0][1])
            for projection, sendAct in afferents[1:]:
                GeRaw = GeRaw + projection.apply(sendAct)
            self.GeRaw.value = GeRaw

            Ge = integrate_conductance(self.units.Ge.value, GeRaw,
                                       self.Integ, self.GDt)
            Gi = self.FFFB.StepTime(Ge)
            Act = self.units.update(Ge, Gi)

        self.FFFB.UpdateAct(Act)
        return Act

    def getActivity(self) -> jnp.ndarray:
        return self.units.getActivity()

    def reset(self):
        '''Resets all activation traces and the inhibition state.'''
        self.units.reset()
        self.FFFB.Reset()
        self.GeRaw.value = jnp.zeros(self.length, dtype=self.dtype)
        self.Unclamp()

    def snapshot(self) -> dict[str, jnp.ndarray]:
        return {
            "Act": self.units.Act.value,
            "AvgS": self.units.AvgS.value,
            "AvgM": self.units.AvgM.value,
            "AvgL": self.units.AvgL.value,
            "GeRaw": self.GeRaw.value,
            "Ge": self.units.Ge.value,
            "Gi": self.units.Gi.value,
            "Vm": self.units.Vm.value,
        }

    def __len__(self):
        return self.length

    def __str__(self) -> str:
        layStr = f"{self.name} {self.shape}:"
        layStr += f"\n\tInhibition gain = {self.inhibitionGain}"
        layStr += f"\n\tActivity: \n\t\t{self.getActivity()}"
        return layStr
