'''Exception and warning classes used throughout leabrax, together with a
    few validation helpers shared by the network, layers and metrics.
'''

from __future__ import annotations

import numpy as np


class LeabraxError(Exception):
    '''Base class for all errors raised by leabrax.'''


class ConfigurationError(LeabraxError, ValueError):
    '''Invalid topology, parameters, or input patterns.

        Raised at construction or at the start of the offending call, always
        before any network state is mutated.
    '''


class NumericAnomaly(LeabraxError, RuntimeWarning):
    '''Warning category for non-finite activations, potentials or weights.

        The simulator never propagates NaN/Inf: the offending activations and
        weights are clamped back into [0, 1] and this warning is issued so the
        misconfigured gain or learning rate can be found.
    '''


def check_finite(value, name: str) -> float:
    '''Returns `value` as a float, raising if it is not a finite number.'''
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not np.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")
    return value


def check_unit_interval(values, name: str, length: int = None) -> np.ndarray:
    '''Validates a vector of values in [0, 1] (optionally of a given length)
        and returns it as a flat float64 numpy array.
    '''
    try:
        values = np.asarray(values, dtype=np.float64).ravel()
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} could not be converted to a numeric vector")
    if length is not None and len(values) != length:
        raise ConfigurationError(f"{name} has length {len(values)}, expected {length}")
    if not np.all(np.isfinite(values)):
        raise ConfigurationError(f"{name} contains non-finite values")
    if np.any(values < 0) or np.any(values > 1):
        raise ConfigurationError(f"{name} contains values outside [0, 1]")
    return values
