'''Rate-code activation functions for Leabra point neurons.

    The noisy XX1 function of Leabra is the XX1 function convolved with a
    gaussian kernel, which softens the hard threshold. Instead of evaluating
    the convolution on every cycle, NoisyXX1 samples it once on a grid and
    returns the value of the grid step the input falls into. The result is a
    step-function approximation of the continuous function: cheaper, and
    accurate to within one grid step.
'''

import numpy as np

import jax
import jax.numpy as jnp
from flax import nnx


@jax.jit
def XX1(x: jnp.ndarray, thr=0) -> jnp.ndarray:
    '''Computes X/(X+1) for X > 0 and returns 0 elsewhere.'''
    inp = jnp.asarray(x) - thr
    safe = jnp.where(inp > 0, inp, 0.0)
    return jnp.where(inp > 0, safe / (safe + 1), 0.0)


def noisy_xx1_table(Gain = 100,
                    NVar = 0.005,
                    XMin = -0.05,
                    XMax = 0.05,
                    Resolution = 0.0001,
                    ) -> np.ndarray:
    '''Samples XX1(Gain * x) convolved with a gaussian kernel (standard
        deviation NVar, truncated at 3 deviations) on the grid
        XMin, XMin + Resolution, ..., up to XMax.
    '''
    x = XMin + Resolution * np.arange(int(round((XMax - XMin) / Resolution)))
    halfWidth = int(np.ceil(3 * NVar / Resolution))
    kx = Resolution * np.arange(-halfWidth, halfWidth + 1)
    kernel = np.exp(-np.square(kx) / (2 * NVar**2))
    kernel /= np.sum(kernel)

    pts = Gain * (x[:, None] - kx[None, :])
    vals = np.where(pts > 0, pts / (np.maximum(pts, 0) + 1), 0.0)
    return vals @ kernel


@jax.jit
def nxx1_lookup(x: jnp.ndarray,
                table: jnp.ndarray,
                XMin: float,
                XMax: float,
                Resolution: float,
                Gain: float,
                ) -> jnp.ndarray:
    '''Step lookup into a table built by noisy_xx1_table. Inputs below the
        table map to its first entry (zero), inputs at or above XMax use the
        plain XX1 function where the kernel no longer matters.
    '''
    index = jnp.clip(jnp.floor((x - XMin) / Resolution), 0, table.shape[0] - 1)
    index = index.astype(jnp.int32)
    return jnp.where(x >= XMax, XX1(Gain * x), table[index])


class NoisyXX1(nnx.Module):
    def __init__(self,
                 Thr = 0.5, # threshold value Theta (Q) for firing output activation
                 Gain = 100, # gain (gamma) of the rate-coded activation function -- use lower values for more graded signals
                 NVar = 0.005, # standard deviation of the gaussian kernel convolved with XX1 -- determines the curvature of the function near threshold
                 VmActThr = 0.01, # threshold on activation below which the direct vm - act.thr is used
                 XMin = -0.05,
                 XMax = 0.05,
                 Resolution = 0.0001,
                 ):
        self.Thr = Thr
        self.Gain = Gain
        self.NVar = NVar
        self.VmActThr = VmActThr
        self.XMin = XMin
        self.XMax = XMax
        self.Resolution = Resolution

        self.table = nnx.Variable(jnp.asarray(
            noisy_xx1_table(Gain, NVar, XMin, XMax, Resolution)))

    def __call__(self, x: jnp.ndarray) -> jnp.ndarray:
        return nxx1_lookup(jnp.asarray(x), self.table.value,
                           self.XMin, self.XMax, self.Resolution, self.Gain)

    def __str__(self) -> str:
        return (f"NoisyXX1(Thr={self.Thr}, Gain={self.Gain}, NVar={self.NVar},"
                f" steps={len(self.table.value)})")
