'''
A library for simulating small Leabra networks of rate-coded point neurons,
based on the work of O'Reilly et al. [1] in computational neuroscience (see
https://github.com/emer/leabra).

The networks defined here are dynamic systems: every stimulus is settled over
many cycles in which each unit integrates its conductances, and layers
compete through shared feedforward/feedback inhibition. Error-driven learning
contrasts the activity of a minus phase (input only) with a plus phase
(input and target) using local activation differences [2]; self-organized
learning uses the plain Hebbian correlation of a single phase.

REFERENCES:
[1] O'Reilly, R. C., Munakata, Y., Frank, M. J., Hazy, T. E., and
    Contributors (2012). Computational Cognitive Neuroscience. Wiki Book,
    4th Edition (2020). URL: https://CompCogNeuro.org

[2] R. C. O'Reilly, “Biologically Plausible Error-Driven Learning Using
    Local Activation Differences: The Generalized Recirculation Algorithm,”
    Neural Comput., vol. 8, no. 5, pp. 895-938, Jul. 1996, 
    doi: 10.1162/neco.1996.8.5.895.
'''

import jax
# clamped patterns are stored exactly, so state is kept in 64 bit
jax.config.update("jax_enable_x64", True)

from .errors import LeabraxError, ConfigurationError, NumericAnomaly
from .config import layerConfig_std, runConfig_std
from .activations import NoisyXX1
from .units import Unit
from .layers import Layer
from .projections import Projection
from .initializers import UniformInit
from .nets import Network
from .patterns import create_inputs
from .metrics import MAD, mad_per_epoch

__all__ = ['nets',
           'layers',
           'units',
           'projections',
           'activations',
           'metrics',
           'learningRules',
           'Network',
           'Layer',
           'Unit',
           'Projection',
           'NoisyXX1',
           'UniformInit',
           'create_inputs',
           'mad_per_epoch',
           'MAD',
           'LeabraxError',
           'ConfigurationError',
           'NumericAnomaly',
           'layerConfig_std',
           'runConfig_std',
            ]

__version__ = "0.1.0"
