"""
Physarum Parameter Presets

Each preset is a named, literal bundle of the four steering parameters.
Applying one overwrites exactly those four values; resolution, agent
count and time are left alone.
"""

import math
from types import MappingProxyType

from .errors import UnknownPresetError


# Parameters a preset is allowed to carry
PRESET_KEYS = ("sensor_angle", "sensor_distance", "rotation_angle", "velocity")

# Label shown by the preset selector before anything has been chosen
NO_PRESET = "SELECT A PRESET"

_PRESETS = {
    "DEFAULT": {
        "description": "Fine branching veins (registry defaults)",
        "sensor_angle": math.pi / 6.0, "sensor_distance": 12.0,
        "rotation_angle": math.pi / 32.0, "velocity": 0.7,
    },
    "MICRO": {
        "description": "Dense, tight cellular mesh",
        "sensor_angle": 0.52, "sensor_distance": 10.0,
        "rotation_angle": 0.13, "velocity": 1.5,
    },
    "LACE": {
        "description": "Long open strands with lace-like gaps",
        "sensor_angle": 0.35, "sensor_distance": 35.0,
        "rotation_angle": 0.13, "velocity": 1.25,
    },
    "UNDULATE": {
        "description": "Fast, sharply turning agents forming rippling bands",
        "sensor_angle": 0.63, "sensor_distance": 18.5,
        "rotation_angle": 0.9, "velocity": 8.6,
    },
    "AURA": {
        "description": "Wide-sensing swarm with soft glowing halos",
        "sensor_angle": 1.3, "sensor_distance": 190.0,
        "rotation_angle": 0.095, "velocity": 9.9,
    },
}

# Read-only views so a preset can never be edited in place
PRESETS = MappingProxyType({k: MappingProxyType(v) for k, v in _PRESETS.items()})

# UI order; number keys 1-5 map here
PRESET_ORDER = ["DEFAULT", "MICRO", "LACE", "UNDULATE", "AURA"]


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def preset_values(name):
    """Parameter values of a preset, without its description.

    Raises UnknownPresetError for names not in PRESETS.
    """
    preset = PRESETS.get(name)
    if preset is None:
        raise UnknownPresetError(f"unknown preset: {name}")
    return {k: preset[k] for k in PRESET_KEYS if k in preset}


def list_presets():
    """Return list of (key, description, values) in UI order."""
    return [(k, PRESETS[k]["description"], preset_values(k)) for k in PRESET_ORDER]
