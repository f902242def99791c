"""
Exception types

Every failure in this package is fatal to the session: nothing here is
retried or degraded. Callers (viewer, CLI) let these propagate.
"""


class PhysarumError(RuntimeError):
    """Base class for all simulation errors."""


class GPUUnavailableError(PhysarumError):
    """No WebGPU backend, adapter or device could be obtained."""


class UnknownParameterError(PhysarumError, KeyError):
    """An edit named a parameter the registry does not hold."""

    def __str__(self):
        return RuntimeError.__str__(self)


class ParameterValueError(PhysarumError, ValueError):
    """A value does not fit the parameter's encoding or arity."""


class CapacityError(PhysarumError, ValueError):
    """An edit would overrun buffers that were already allocated."""


class FrozenParameterError(PhysarumError):
    """The parameter sizes device buffers and cannot change after creation."""


class UnknownPresetError(PhysarumError, KeyError):
    """A preset was selected by a name that does not exist."""

    def __str__(self):
        return RuntimeError.__str__(self)


class PassOrderError(PhysarumError):
    """A frame's pass list reads state no earlier pass has written."""
