from __future__ import annotations
import jax.numpy as jnp
from jax import jit

@jit
def CHL(xp: jnp.ndarray, xm: jnp.ndarray, yp: jnp.ndarray, ym: jnp.ndarray) -> jnp.ndarray:
    '''Contrastive Hebbian Learning rule (CHL).

        x* are sending activities, y* receiving activities, p/m the plus and
        minus phase. Returns a (receiving x sending) weight change that moves
        weights toward the plus phase correlation and away from the minus
        phase correlation.
    '''
    return yp[:,None] @ xp[None,:] - ym[:,None] @ xm[None,:]

@jit
def Hebbian(x: jnp.ndarray, y: jnp.ndarray) -> jnp.ndarray:
    '''Plain Hebbian correlation of receiving and sending activity.'''
    return y[:,None] @ x[None,:]
