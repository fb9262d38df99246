"""Stateless, jitted kernels for unit and layer dynamics."""

from .unit import step_unit, step_averages, clamp_unit
from .layer import integrate_conductance, fffb_inhibition
