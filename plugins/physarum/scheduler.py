"""
Frame Scheduler

Two states. INITIALIZING uploads the uniforms and runs the reset pass
once; RUNNING repeats, each tick:

    drain tuning commands
    encode diffuse -> simulate -> render into one command buffer, submit
    present the pixel buffer
    time += 1, upload time

Submission does not wait for the GPU. Nothing guarantees tick n has
retired before tick n+1 is submitted; pacing comes from whoever calls
tick() (the display's frame clock).
"""

import enum

from .dispatch import plan_from_registry


class Phase(enum.Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"


class SessionState:
    """Everything one simulation session owns, passed by reference."""

    def __init__(self, registry, resources, kernels):
        self.registry = registry
        self.resources = resources
        self.kernels = kernels
        self.phase = Phase.INITIALIZING
        self.ticks = 0
        self.plan = plan_from_registry(registry, resources.agent_capacity)

    @property
    def device(self):
        return self.resources.device

    def replan(self):
        self.plan = plan_from_registry(self.registry, self.resources.agent_capacity)
        return self.plan


class FrameScheduler:
    def __init__(self, session, controller=None, surface=None):
        self.session = session
        self.controller = controller
        self.surface = surface

    @property
    def phase(self):
        return self.session.phase

    def start(self):
        """Run the init passes. Only the first call does anything."""
        s = self.session
        if s.phase is Phase.RUNNING:
            return
        s.resources.sync_uniforms()
        self._submit(s.kernels.init_passes)
        s.phase = Phase.RUNNING

    def tick(self):
        s = self.session
        if s.phase is Phase.INITIALIZING:
            self.start()

        if self.controller is not None:
            self.controller.drain()

        self._submit(s.kernels.frame_passes)

        if self.surface is not None:
            self.surface.present(s.resources)

        s.registry.set("time", s.registry.value("time") + 1)
        s.resources.sync_uniforms()
        s.ticks += 1

    def run(self, frames=None, should_continue=None):
        """Tick until `frames` ticks have run or should_continue() is false.

        With neither given this never returns.
        """
        done = 0
        while frames is None or done < frames:
            if should_continue is not None and not should_continue():
                break
            self.tick()
            done += 1
        return done

    def _submit(self, passes):
        s = self.session
        encoder = s.device.create_command_encoder()
        for frame_pass in passes:
            s.kernels.encode(encoder, frame_pass, s.plan, s.resources.bind_groups)
        s.device.queue.submit([encoder.finish()])
