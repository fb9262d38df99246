"""
JAX-jitted, stateless layer functions.
"""

import jax
import jax.numpy as jnp


@jax.jit
def integrate_conductance(Ge: jnp.ndarray, GeRaw: jnp.ndarray, Integ: float, GDt: float):
    """
    Time integration of the excitatory conductance toward the raw synaptic
    input of the current cycle.
    """
    return Ge + Integ * GDt * (GeRaw - Ge)


@jax.jit
def fffb_inhibition(poolGe: jnp.ndarray,
                    poolAct: jnp.ndarray,
                    fbi: float,
                    Gi: float,
                    FF: float,
                    FB: float,
                    FBDt: float,
                    MaxVsAvg: float,
                    FF0: float):
    """
    Feedforward/feedback inhibition for a whole pool.
    Args:
        poolGe: excitatory conductances of the pool on this cycle
        poolAct: activations of the pool on the previous cycle
        fbi: feedback inhibition of the previous cycle
        Gi, FF, FB, FBDt, MaxVsAvg, FF0: FFFB parameters
    Returns:
        (Gi_FFFB, fbi) -- a single inhibitory conductance for every unit in
        the pool and the updated feedback term
    """
    avgGe = jnp.mean(poolGe)
    maxGe = jnp.max(poolGe)
    avgAct = jnp.mean(poolAct)

    # Scalar feedforward inhibition proportional to max and avg Ge
    ffNetin = avgGe + MaxVsAvg * (maxGe - avgGe)
    ffi = FF * jnp.maximum(ffNetin - FF0, 0)

    # Scalar feedback inhibition based on average activity in the pool
    fbi = fbi + FBDt * FB * (avgAct - fbi)

    return Gi * (ffi + fbi), fbi
