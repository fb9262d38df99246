'''Defines the Unit class, a pool of Leabra point neurons.

    Each element of the state arrays is one point neuron: it integrates
    excitatory, inhibitory and leak conductances into a membrane potential
    and converts it into a rate-coded activation in [0, 1]. Three cascaded
    running averages of the activation (short, medium and long time scale)
    are kept for the learning rules.
'''

# type checking
from __future__ import annotations

import warnings

from jax import numpy as jnp
from flax import nnx

from .activations import NoisyXX1
from .config import layerConfig_std
from .core.unit import step_unit, step_averages, clamp_unit
from .errors import NumericAnomaly
from .logger import log


class Unit(nnx.Module):
    '''A homogeneous pool of point neurons sharing one parameter set.

        `update` takes conductances that are assumed finite and non-negative;
        passing anything else is a programming error of the caller. The only
        recovery performed is the clamping of non-finite results, which is
        reported through a NumericAnomaly warning.
    '''
    def __init__(self,
                 length: int,
                 layerConfig: dict = layerConfig_std,
                 activation: NoisyXX1 = None,
                 dtype = jnp.float64,
                 ):
        self.length = length
        self.dtype = dtype
        self.actFn = NoisyXX1(**layerConfig["ActFn"]) if activation is None else activation

        Gbar = layerConfig["Gbar"]
        Erev = layerConfig["Erev"]
        DtParams = layerConfig["DtParams"]
        ActAvg = layerConfig["ActAvg"]
        self.VmInit = layerConfig["VmInit"]
        self.AvgInit = ActAvg["Init"]

        # flat constants handed to the jitted kernel
        self.params = {
            "GbarE": Gbar["E"], "GbarL": Gbar["L"], "GbarI": Gbar["I"],
            "ErevE": Erev["E"], "ErevL": Erev["L"], "ErevI": Erev["I"],
            "Integ": DtParams["Integ"],
            "VmDt": 1 / DtParams["VmTau"], # nominal rate = Integ / tau
            "VmInit": self.VmInit,
            "VmMin": layerConfig["VmRange"]["Min"],
            "VmMax": layerConfig["VmRange"]["Max"],
            "Thr": self.actFn.Thr,
            "Gain": self.actFn.Gain,
            "VmActThr": self.actFn.VmActThr,
            "XMin": self.actFn.XMin,
            "XMax": self.actFn.XMax,
            "Resolution": self.actFn.Resolution,
        }
        self.SDt = 1 / ActAvg["STau"]
        self.MDt = 1 / ActAvg["MTau"]
        self.LDt = 1 / ActAvg["LTau"]

        self.Vm = nnx.Variable(jnp.full(length, self.VmInit, dtype=dtype))
        self.Ge = nnx.Variable(jnp.zeros(length, dtype=dtype))
        self.Gi = nnx.Variable(jnp.zeros(length, dtype=dtype))
        self.Act = nnx.Variable(jnp.zeros(length, dtype=dtype))

        self.AvgS = nnx.Variable(jnp.full(length, self.AvgInit, dtype=dtype))
        self.AvgM = nnx.Variable(jnp.full(length, self.AvgInit, dtype=dtype))
        self.AvgL = nnx.Variable(jnp.full(length, self.AvgInit, dtype=dtype))

    def update(self, Ge: jnp.ndarray, Gi) -> jnp.ndarray:
        '''Advances every neuron by one cycle given its excitatory conductance
            and the (possibly shared) inhibitory conductance. Returns the new
            activations.
        '''
        self.Ge.value = jnp.broadcast_to(jnp.asarray(Ge, dtype=self.dtype), (self.length,))
        self.Gi.value = jnp.broadcast_to(jnp.asarray(Gi, dtype=self.dtype), (self.length,))

        Vm, Act, anomaly = step_unit(self.Vm.value, self.Act.value,
                                     self.Ge.value, self.Gi.value,
                                     self.actFn.table.value, self.params)
        if bool(anomaly):
            log.warning("Non-finite unit state clamped (Ge max=%s, Gi max=%s)",
                        jnp.max(self.Ge.value), jnp.max(self.Gi.value))
            warnings.warn("Non-finite membrane potential or activation was "
                          "clamped; check the inhibition gain and learning rate",
                          NumericAnomaly, stacklevel=3)
        self.Vm.value = Vm
        self.Act.value = Act

        self.StepAverages()
        return self.Act.value

    def clamp(self, act: jnp.ndarray) -> jnp.ndarray:
        '''Forces the activations to `act` (already validated to lie in
            [0, 1]) and sets the membrane potential accordingly.
        '''
        act = jnp.asarray(act, dtype=self.dtype)
        self.Vm.value, self.Act.value = clamp_unit(act, self.actFn.Thr, self.actFn.Gain)
        self.StepAverages()
        return self.Act.value

    def hold(self) -> jnp.ndarray:
        '''Keeps the current activation for this cycle.'''
        self.StepAverages()
        return self.Act.value

    def StepAverages(self):
        self.AvgS.value, self.AvgM.value, self.AvgL.value = step_averages(
            self.Act.value, self.AvgS.value, self.AvgM.value, self.AvgL.value,
            self.SDt, self.MDt, self.LDt)

    def reset(self):
        '''Returns potentials, conductances, activations and averages to
            their initial values.
        '''
        self.Vm.value = jnp.full(self.length, self.VmInit, dtype=self.dtype)
        self.Ge.value = jnp.zeros(self.length, dtype=self.dtype)
        self.Gi.value = jnp.zeros(self.length, dtype=self.dtype)
        self.Act.value = jnp.zeros(self.length, dtype=self.dtype)
        self.AvgS.value = jnp.full(self.length, self.AvgInit, dtype=self.dtype)
        self.AvgM.value = jnp.full(self.length, self.AvgInit, dtype=self.dtype)
        self.AvgL.value = jnp.full(self.length, self.AvgInit, dtype=self.dtype)

    def getActivity(self) -> jnp.ndarray:
        return self.Act.value

    def __len__(self):
        return self.length

    def __str__(self) -> str:
        return f"Unit pool ({self.length}): Act = {self.Act.value}"
