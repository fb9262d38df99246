'''Default parameter dictionaries for layers and simulation runs.

    Parameters follow the naming of the reference Leabra implementation
    (https://github.com/emer/leabra). A network copies these dictionaries at
    construction, so editing a network's config never touches the defaults.
'''

from __future__ import annotations

import copy

import numpy as np

from .errors import ConfigurationError


###<------ DEFAULT CONFIGURATIONS ------>###

layerConfig_std = {
    "VmInit": 0.4,
    "VmRange": { # bounds on the membrane potential
        "Min": 0.0,
        "Max": 2.0,
    },
    "Gbar": { # Max conductances for each effective channel
        "E": 1.0, # Excitatory
        "L": 0.1, # Leak
        "I": 1.0, # Inhibitory
    },
    "Erev": { # Reversal potential for each effective channel
        "E": 1.0, # Excitatory
        "L": 0.3, # Leak
        "I": 0.25, # Inhibitory
    },
    "DtParams": {
        "Integ": 1, # overall rate constant for numerical integration -- one cycle = 1 msec, all time constants are in cycles
        "VmTau": 3.3, # membrane potential and rate-code activation time constant in cycles
        "GTau": 1.4, # time constant for integrating synaptic conductances, in cycles
    },
    "ActFn": {
        "Thr": 0.5, # threshold value Theta (Q) for firing output activation
        "Gain": 100, # gain (gamma) of the rate-coded activation function
        "NVar": 0.005, # standard deviation of the gaussian noise kernel convolved with XX1 -- not actual noise, just smoothness of the function near threshold
        "VmActThr": 0.01, # threshold on activation below which the direct vm - act.thr is used
        "XMin": -0.05, # lower edge of the noisy XX1 lookup table
        "XMax": 0.05, # upper edge of the lookup table -- above this the plain XX1 function is used
        "Resolution": 0.0001, # step width of the lookup table
    },
    "ActAvg": {
        "Init": 0.15, # initial value for all averages
        "STau": 2, # short time-scale average, integrates activation, in cycles
        "MTau": 10, # medium time-scale average, integrates the short average, in cycles
        "LTau": 100, # long time-scale average, integrates the medium average, in cycles
    },
    "FFFBparams": {
        "Gi": 1.8, # [1.5-2.3 typical] overall inhibition gain -- main parameter to adjust to change overall activation levels -- it scales both the ff and fb factors uniformly
        "FF": 1, # overall inhibitory contribution from feedforward inhibition -- multiplies average netinput
        "FB": 1, # overall inhibitory contribution from feedback inhibition -- multiplies average activation
        "FBTau": 1.4, # time constant in cycles for integrating feedback inhibitory values -- prevents oscillations
        "MaxVsAvg": 0, # proportion of the maximum vs. average netinput to use in the feedforward inhibition (0 = all average, 1 = all max)
        "FF0": 0.1, # feedforward zero point for average netinput -- below this level no FF inhibition is computed
    },
}

runConfig_std = {
    "Lrate": 0.04, # learning rate shared by error-driven and self-organized learning
    "LrnVar": "AvgS", # unit variable whose end-of-phase value feeds the learning rules ("AvgS" or "Act")
    "NumCyclesMinus": 50,
    "NumCyclesPlus": 25,
    "NumCycles": 50, # single-phase runs (self-organized learning and inference)
    "WtInit": { # default uniform weight initialization
        "Low": 0.3,
        "High": 0.7,
    },
}

# keys whose values must be strictly positive
_POSITIVE_KEYS = {"VmTau", "GTau", "FBTau", "STau", "MTau", "LTau", "Integ",
                  "Gain", "NVar", "Resolution", "NumCyclesMinus",
                  "NumCyclesPlus", "NumCycles"}
# keys whose values must not be negative
_NON_NEGATIVE_KEYS = {"Gi", "FF", "FB", "FF0", "Lrate", "E", "L", "I",
                      "VmActThr", "Init"}
_LRN_VARS = ("AvgS", "Act")


def merge_config(default: dict, override: dict = None, path: str = "") -> dict:
    '''Returns a deep copy of `default` updated with the (possibly nested)
        values in `override`. Unknown keys and invalid values raise a
        ConfigurationError.
    '''
    merged = copy.deepcopy(default)
    if override is None:
        return merged
    if not isinstance(override, dict):
        raise ConfigurationError(f"config{path} must be a dict, got {type(override).__name__}")

    for key, value in override.items():
        keyPath = f"{path}[{key!r}]"
        if key not in merged:
            raise ConfigurationError(f"Unknown configuration key config{keyPath}")
        if isinstance(merged[key], dict):
            merged[key] = merge_config(merged[key], value, keyPath)
            continue
        merged[key] = _check_value(key, value, keyPath)

    return merged


def _check_value(key, value, keyPath):
    if key == "LrnVar":
        if value not in _LRN_VARS:
            raise ConfigurationError(f"config{keyPath} must be one of {_LRN_VARS}")
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        raise ConfigurationError(f"config{keyPath} must be a number, got {value!r}")
    if not np.isfinite(value):
        raise ConfigurationError(f"config{keyPath} must be finite")
    if key in _POSITIVE_KEYS and value <= 0:
        raise ConfigurationError(f"config{keyPath} must be positive")
    if key in _NON_NEGATIVE_KEYS and value < 0:
        raise ConfigurationError(f"config{keyPath} must not be negative")
    return value
