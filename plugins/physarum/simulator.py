"""
PhysarumSimulator - headless simulation core

Wires the parameter registry, device resources, kernel set, tuning
controller and frame scheduler into one session with zero pygame
dependency. viewer.py drives it from a window; __main__.py drives it
headless for snapshots.

Usage:
    from physarum.simulator import PhysarumSimulator
    sim = PhysarumSimulator("MICRO", resolution=512, agent_count=200000)
    sim.step(300)
    rgb = sim.render_rgb()  # (H, W, 3) uint8
"""

from .device import request_device
from .kernels import KernelSet
from .params import ParameterRegistry
from .presets import preset_values
from .resources import DeviceResources
from .scheduler import FrameScheduler, SessionState
from .surface import pixels_to_rgb
from .tuning import TuningController, SetParameter, ApplyPreset


class PhysarumSimulator:
    """One simulation session on one device.

    Args:
        preset_key: Preset whose steering values seed the registry
        resolution: Grid side in cells; fixed for the session
        agent_count: Initial live agent count
        agent_capacity: Agents the state buffers hold (>= agent_count);
            agent_count can later be tuned anywhere up to this
        device: wgpu device; requested from the default adapter if None
        program: WGSL source override for the kernels
        surface: DisplaySurface presented to at the end of each tick
    """

    def __init__(self, preset_key="DEFAULT", resolution=2048, agent_count=2000000,
                 agent_capacity=None, device=None, program=None, surface=None):
        overrides = preset_values(preset_key)
        overrides["resolution"] = float(resolution)
        overrides["agent_count"] = int(agent_count)
        self.registry = ParameterRegistry.defaults(**overrides)

        if device is None:
            device = request_device()
        self.device = device

        self.resources = DeviceResources(device, self.registry, agent_capacity)
        self.kernels = KernelSet(device, self.resources.pipeline_layout, program)
        self.session = SessionState(self.registry, self.resources, self.kernels)

        self.controller = TuningController(self.session)
        self.controller.preset_key = preset_key
        self.scheduler = FrameScheduler(self.session, self.controller, surface)

        r = self.resources
        print(f"[physarum] {r.resolution}x{r.resolution} grid, "
              f"{self.registry.value('agent_count'):,} agents "
              f"(capacity {r.agent_capacity:,}), "
              f"{r.footprint / 2 ** 20:.1f} MiB on device")

    @property
    def preset_key(self):
        return self.controller.preset_key

    @property
    def resolution(self):
        return self.resources.resolution

    @property
    def agent_capacity(self):
        return self.resources.agent_capacity

    @property
    def ticks(self):
        return self.session.ticks

    @property
    def plan(self):
        return self.session.plan

    @property
    def surface(self):
        return self.scheduler.surface

    @surface.setter
    def surface(self, surface):
        self.scheduler.surface = surface

    def start(self):
        self.scheduler.start()

    def step(self, n=1):
        """Advance n ticks (the first call also runs the reset pass)."""
        return self.scheduler.run(frames=n)

    def set_parameter(self, name, value):
        """Queue an edit; it lands before the next tick's passes."""
        self.controller.submit(SetParameter(name, value))

    def apply_preset(self, key):
        self.controller.submit(ApplyPreset(key))

    def params(self):
        return self.registry.snapshot()

    def render_rgb(self):
        """Read the pixel buffer back as an (H, W, 3) uint8 image."""
        return pixels_to_rgb(self.resources.read("pixels"), self.resolution)
