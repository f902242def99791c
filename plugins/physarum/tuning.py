"""
Tuning Controller

Live edits arrive as commands (SetParameter, ApplyPreset) on a queue that
the frame scheduler drains between ticks, so the core never depends on a
particular UI toolkit's callbacks.

Every edit is validated against the registry and the already-allocated
buffers before anything is written:
  - unknown names are a configuration error
  - resolution sizes the grid and pixel buffers and is frozen
  - agent_count may not exceed the agent buffers' capacity
A preset is checked in full first, so it is applied entirely or not at all.
After the edit, dirty uniforms are uploaded in one batch and the dispatch
plan is recomputed if agent_count moved.
"""

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import CapacityError, FrozenParameterError
from .presets import PRESET_KEYS, preset_values


@dataclass(frozen=True)
class SetParameter:
    name: str
    value: Any


@dataclass(frozen=True)
class ApplyPreset:
    preset: Any  # preset name, or a mapping of parameter -> value


class TuningController:
    def __init__(self, session):
        self.session = session
        self.preset_key = None
        self._pending = deque()

    @property
    def pending(self):
        return len(self._pending)

    def submit(self, command):
        """Queue a command for the next drain()."""
        if not isinstance(command, (SetParameter, ApplyPreset)):
            raise TypeError(f"not a tuning command: {command!r}")
        self._pending.append(command)

    def drain(self):
        """Apply every queued command in arrival order. Returns how many ran."""
        count = 0
        while self._pending:
            self.execute(self._pending.popleft())
            count += 1
        return count

    def execute(self, command):
        if isinstance(command, SetParameter):
            self.set_parameter(command.name, command.value)
        elif isinstance(command, ApplyPreset):
            self.apply_preset(command.preset)
        else:
            raise TypeError(f"not a tuning command: {command!r}")

    def set_parameter(self, name, value):
        self._apply({name: value})
        # Hand-tuned away from the selected preset
        if self.preset_key is not None and name in PRESET_KEYS:
            if self.session.registry.value(name) != preset_values(self.preset_key)[name]:
                self.preset_key = None

    def apply_preset(self, preset):
        """Overwrite every parameter the preset lists, then resync once."""
        if isinstance(preset, Mapping):
            self._apply(dict(preset))
            return
        self._apply(preset_values(preset))
        self.preset_key = preset

    def _apply(self, values):
        registry = self.session.registry
        checked = {name: self._validate(name, value) for name, value in values.items()}
        for name, value in checked.items():
            registry.set(name, value)

        self.session.resources.sync_uniforms()
        if "agent_count" in checked:
            self.session.replan()

    def _validate(self, name, value):
        param = self.session.registry.get(name)
        value = param.coerce(value)

        if name == "resolution" and value != param.value:
            raise FrozenParameterError(
                f"resolution is fixed at {param.value:g} once buffers exist"
            )
        if name == "agent_count":
            capacity = self.session.resources.agent_capacity
            if value > capacity:
                raise CapacityError(
                    f"agent_count {value:,} exceeds buffer capacity {capacity:,}"
                )
        return value
