"""
Simulation Parameter Registry

Typed, named constants shared by every compute kernel. Each parameter is
mirrored on the GPU by its own uniform buffer with an identical byte
layout, bound at an index equal to its position in the registry.

The registry is fixed at startup: parameters are never added or removed
at runtime, and an edit replaces a value without touching its encoding.

Default table (name, value, encoding):
    resolution        2048       f32
    time              0          f32
    agent_count       2000000    u32
    sensor_angle      pi/6       f32
    sensor_distance   12         f32
    rotation_angle    pi/32      f32
    velocity          0.7        f32
"""

import math
import numpy as np

from .errors import UnknownParameterError, ParameterValueError


# Scalar encodings understood by the device program
ENCODINGS = {
    "f32": np.float32,
    "u32": np.uint32,
    "i32": np.int32,
}
SCALAR_BYTES = 4
ARITIES = (1, 2, 4)  # scalar, vec2, vec4

DEFAULT_PARAMETERS = (
    ("resolution", 2048.0, "f32"),
    ("time", 0.0, "f32"),
    ("agent_count", 2000000, "u32"),
    ("sensor_angle", math.pi / 6.0, "f32"),
    ("sensor_distance", 12.0, "f32"),
    ("rotation_angle", math.pi / 32.0, "f32"),
    ("velocity", 0.7, "f32"),
)

# Live-tunable parameters and their slider ranges
SLIDER_DEFS = [
    {"key": "sensor_angle", "label": "Sensor angle",
     "min": 0.0, "max": math.pi / 2.0, "fmt": ".3f", "step": None},
    {"key": "sensor_distance", "label": "Sensor distance",
     "min": 0.0, "max": 1024.0, "fmt": ".1f", "step": None},
    {"key": "rotation_angle", "label": "Rotation angle",
     "min": 0.0, "max": math.pi / 2.0, "fmt": ".3f", "step": None},
    {"key": "agent_count", "label": "Agents",
     "min": 0, "max": 3000000, "fmt": ",.0f", "step": 1},
    {"key": "velocity", "label": "Velocity",
     "min": 0.0, "max": 15.0, "fmt": ".2f", "step": None},
]


class Parameter:
    """One named simulation constant.

    Args:
        name: Registry key, also the uniform's name in the device program
        value: Scalar, or a sequence of 2 or 4 components for vectors
        encoding: "f32", "u32" or "i32"
    """

    def __init__(self, name, value, encoding="f32"):
        if encoding not in ENCODINGS:
            raise ParameterValueError(f"{name}: unsupported encoding {encoding!r}")
        arity = 1 if np.ndim(value) == 0 else len(value)
        if arity not in ARITIES:
            raise ParameterValueError(f"{name}: unsupported arity {arity}")

        self.name = name
        self.encoding = encoding
        self.arity = arity
        self.byte_size = SCALAR_BYTES * arity
        self.value = self.coerce(value)

    def __repr__(self):
        return f"Parameter({self.name!r}, {self.value!r}, {self.encoding!r})"

    @property
    def dtype(self):
        return ENCODINGS[self.encoding]

    def coerce(self, value):
        """Check a candidate value against this parameter's layout.

        Returns the normalized value (int/float, or a tuple for vectors).
        Raises ParameterValueError if it cannot be encoded losslessly
        as this parameter's type.
        """
        try:
            arr = np.asarray(value, dtype=np.float64)
        except (TypeError, ValueError):
            raise ParameterValueError(f"{self.name}: not numeric: {value!r}") from None

        expected = () if self.arity == 1 else (self.arity,)
        if arr.shape != expected:
            raise ParameterValueError(
                f"{self.name}: expected shape {expected}, got {arr.shape}"
            )
        if not np.all(np.isfinite(arr)):
            raise ParameterValueError(f"{self.name}: value must be finite: {value!r}")

        if self.encoding == "f32":
            if np.any(np.abs(arr) > np.finfo(np.float32).max):
                raise ParameterValueError(f"{self.name}: out of f32 range: {value!r}")
            items = [float(v) for v in arr.ravel()]
        else:
            if np.any(arr != np.round(arr)):
                raise ParameterValueError(f"{self.name}: {self.encoding} must be integral: {value!r}")
            info = np.iinfo(self.dtype)
            if np.any(arr < info.min) or np.any(arr > info.max):
                raise ParameterValueError(f"{self.name}: out of {self.encoding} range: {value!r}")
            items = [int(v) for v in arr.ravel()]

        return items[0] if self.arity == 1 else tuple(items)

    def encode(self):
        """Little-endian bytes for the uniform buffer (exactly byte_size long)."""
        return np.asarray(self.value, dtype=self.dtype).reshape(-1).tobytes()

    def decode(self, raw):
        """Inverse of encode() for bytes read back from a buffer."""
        arr = np.frombuffer(bytes(raw)[:self.byte_size], dtype=self.dtype)
        items = [v.item() for v in arr]
        return items[0] if self.arity == 1 else tuple(items)


class ParameterRegistry:
    """Fixed, ordered mapping from name to Parameter.

    Insertion order is the uniform binding index. Edits mark a parameter
    dirty; the uniform synchronizer collects dirty names in one batch.
    """

    def __init__(self, parameters):
        self._params = {}
        for param in parameters:
            if param.name in self._params:
                raise ParameterValueError(f"duplicate parameter: {param.name}")
            self._params[param.name] = param
        # Nothing has been uploaded yet
        self._dirty = set(self._params)

    @classmethod
    def defaults(cls, **overrides):
        """Registry built from DEFAULT_PARAMETERS, with optional value overrides."""
        unknown = set(overrides) - {name for name, _, _ in DEFAULT_PARAMETERS}
        if unknown:
            raise UnknownParameterError(f"unknown parameter(s): {', '.join(sorted(unknown))}")
        return cls(
            Parameter(name, overrides.get(name, value), encoding)
            for name, value, encoding in DEFAULT_PARAMETERS
        )

    def __len__(self):
        return len(self._params)

    def __contains__(self, name):
        return name in self._params

    def __iter__(self):
        return iter(self._params.values())

    def names(self):
        return list(self._params)

    def get(self, name):
        try:
            return self._params[name]
        except KeyError:
            raise UnknownParameterError(f"unknown parameter: {name}") from None

    def value(self, name):
        return self.get(name).value

    def set(self, name, value):
        """Replace a parameter's value. Encoding and byte size never change."""
        param = self.get(name)
        param.value = param.coerce(value)
        self._dirty.add(name)

    def for_each(self, fn):
        """Call fn(name, parameter) in binding order."""
        for name, param in self._params.items():
            fn(name, param)

    def binding_index(self, name):
        self.get(name)
        return list(self._params).index(name)

    def snapshot(self):
        """Plain dict of current values (for comparisons and display)."""
        return {name: param.value for name, param in self._params.items()}

    def mark_dirty(self, name=None):
        if name is None:
            self._dirty.update(self._params)
        else:
            self.get(name)
            self._dirty.add(name)

    def take_dirty(self):
        """Names edited since the last call, in binding order. Clears the set."""
        dirty = [name for name in self._params if name in self._dirty]
        self._dirty.clear()
        return dirty
