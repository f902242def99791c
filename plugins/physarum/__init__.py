"""
Physarum - GPU slime-mold pattern formation

Millions of agents move over a 2D grid, deposit a trail, sense it and
steer toward it. All agent and grid state lives on the GPU; this package
orchestrates the compute passes that advance it each frame.
"""

from .errors import (
    PhysarumError, GPUUnavailableError, UnknownParameterError,
    ParameterValueError, CapacityError, FrozenParameterError,
    UnknownPresetError, PassOrderError,
)
from .params import Parameter, ParameterRegistry
from .dispatch import DispatchPlan, plan_dispatch
from .simulator import PhysarumSimulator

__all__ = [
    "PhysarumError", "GPUUnavailableError", "UnknownParameterError",
    "ParameterValueError", "CapacityError", "FrozenParameterError",
    "UnknownPresetError", "PassOrderError",
    "Parameter", "ParameterRegistry",
    "DispatchPlan", "plan_dispatch",
    "PhysarumSimulator",
]
