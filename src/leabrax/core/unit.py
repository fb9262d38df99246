"""
JAX-jitted, stateless unit functions.
All functions are pure: they take the current unit arrays and parameters and
return the next arrays. The stateful wrapper lives in leabrax.units.
"""

import jax
import jax.numpy as jnp

from ..activations import nxx1_lookup


@jax.jit
def step_unit(Vm: jnp.ndarray,
              Act: jnp.ndarray,
              Ge: jnp.ndarray,
              Gi: jnp.ndarray,
              table: jnp.ndarray,
              params: dict):
    """
    Advance a pool of rate-coded point neurons by one cycle.
    Args:
        Vm: membrane potentials
        Act: activations of the previous cycle
        Ge: excitatory conductances (already time integrated)
        Gi: inhibitory conductances
        table: noisy XX1 lookup table
        params: flat dict of unit constants (see Unit.params)
    Returns:
        (Vm, Act, anomaly) where anomaly flags non-finite intermediate values
    """
    p = params

    def actFn(x):
        return nxx1_lookup(x, table, p["XMin"], p["XMax"], p["Resolution"],
                           p["Gain"])

    # Update membrane potentials
    Inet = (Ge * p["GbarE"] * (p["ErevE"] - Vm) +
            p["GbarL"] * (p["ErevL"] - Vm) +
            Gi * p["GbarI"] * (p["ErevI"] - Vm)
            )
    newVm = Vm + p["Integ"] * p["VmDt"] * Inet

    # Calculate conductance threshold
    geThr = (Gi * p["GbarI"] * (p["ErevI"] - p["Thr"]) +
             p["GbarL"] * (p["ErevL"] - p["Thr"])
             )
    geThr /= (p["Thr"] - p["ErevE"])

    # Firing rate above threshold governed by conductance-based rate coding
    newAct = actFn(Ge * p["GbarE"] - geThr)

    # Activity below threshold is nearly zero
    mask = jnp.logical_and(Act < p["VmActThr"], newVm <= p["Thr"])
    newAct = jnp.where(mask, actFn(newVm - p["Thr"]), newAct)

    newAct = Act + p["Integ"] * p["VmDt"] * (newAct - Act)

    anomaly = jnp.logical_not(jnp.all(jnp.isfinite(newVm)) &
                              jnp.all(jnp.isfinite(newAct)))

    newVm = jnp.where(jnp.isfinite(newVm), newVm, p["VmInit"])
    newVm = jnp.clip(newVm, p["VmMin"], p["VmMax"])
    newAct = jnp.clip(jnp.nan_to_num(newAct, nan=0.0), 0.0, 1.0)

    return newVm, newAct, anomaly


@jax.jit
def step_averages(Act: jnp.ndarray,
                  AvgS: jnp.ndarray,
                  AvgM: jnp.ndarray,
                  AvgL: jnp.ndarray,
                  SDt: float,
                  MDt: float,
                  LDt: float):
    """
    Cascaded running averages: the short average integrates the activation,
    the medium average integrates the short one and the long average
    integrates the medium one.
    Returns:
        (AvgS, AvgM, AvgL)
    """
    AvgS = AvgS + SDt * (Act - AvgS)
    AvgM = AvgM + MDt * (AvgS - AvgM)
    AvgL = AvgL + LDt * (AvgM - AvgL)
    return AvgS, AvgM, AvgL


@jax.jit
def clamp_unit(act: jnp.ndarray, Thr: float, Gain: float):
    """
    Membrane potential consistent with an externally imposed activation.
    Returns:
        (Vm, Act)
    """
    return Thr + act / Gain, act
