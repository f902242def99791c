"""
Kernel Set

Four compute entry points compiled from one WGSL program against the
shared pipeline layout. Their numerics live in compute.wgsl; this module
only knows their names, what state each one reads and writes, and which
dispatch domain sizes it.

The frame is an ordered list of passes. Correctness depends entirely on
that order (any kernel can write any bound buffer), so the order is
declared here and checked when the kernel set is built.
"""

import os
from dataclasses import dataclass

from .errors import PassOrderError
from .resources import TOPOLOGY, PARAMS


PROGRAM_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "compute.wgsl")

KERNEL_NAMES = ("reset", "diffuse", "simulate", "render")


@dataclass(frozen=True)
class FramePass:
    """One dispatch: kernel name, dispatch domain, declared data flow.

    domain is a DispatchPlan field (pixels, agents, grid, capacity).
    after lists passes that must already have run in the same frame.
    """
    name: str
    domain: str
    reads: frozenset
    writes: frozenset
    after: tuple = ()


RESET = FramePass(
    "reset", "capacity",
    reads=frozenset({PARAMS}),
    writes=frozenset({"positions", "headings", "grid", "pixels"}),
)
DIFFUSE = FramePass(
    "diffuse", "grid",
    reads=frozenset({PARAMS, "grid"}),
    writes=frozenset({"grid"}),
)
SIMULATE = FramePass(
    "simulate", "agents",
    reads=frozenset({PARAMS, "grid", "positions", "headings"}),
    writes=frozenset({"positions", "headings", "grid"}),
    after=("diffuse",),
)
RENDER = FramePass(
    "render", "pixels",
    reads=frozenset({PARAMS, "grid"}),
    writes=frozenset({"pixels"}),
    after=("simulate",),
)

INIT_PASSES = (RESET,)
FRAME_PASSES = (DIFFUSE, SIMULATE, RENDER)


def validate_pass_order(init_passes, frame_passes):
    """Raise PassOrderError unless every read in the frame is produced first.

    A frame pass may read a buffer if an earlier pass of the same frame
    wrote it, or if it is the first pass of the frame to touch it and the
    init passes seeded it (state carried over from the previous tick).
    """
    known = set(TOPOLOGY) | {PARAMS}
    names = [p.name for p in tuple(init_passes) + tuple(frame_passes)]
    if len(set(names)) != len(names):
        raise PassOrderError(f"duplicate pass names: {names}")

    seeded = set()
    for p in init_passes:
        _check_known(p, known)
        missing = (p.reads - {PARAMS}) - seeded
        if missing:
            raise PassOrderError(f"{p.name} reads {sorted(missing)} before they exist")
        seeded |= p.writes

    ran = []
    written = set()
    touched = set()
    for p in frame_passes:
        _check_known(p, known)
        for dep in p.after:
            if dep not in ran:
                raise PassOrderError(f"{p.name} must run after {dep}")
        for buf in sorted(p.reads - {PARAMS}):
            if buf in written:
                continue
            if buf not in touched and buf in seeded:
                continue
            raise PassOrderError(f"{p.name} reads {buf} before any pass writes it")
        touched |= p.reads | p.writes
        written |= p.writes
        ran.append(p.name)


def _check_known(frame_pass, known):
    if frame_pass.name not in KERNEL_NAMES:
        raise PassOrderError(f"no kernel entry point named {frame_pass.name}")
    unknown = (frame_pass.reads | frame_pass.writes) - known
    if unknown:
        raise PassOrderError(f"{frame_pass.name} names unbound resources {sorted(unknown)}")


def load_program(path=PROGRAM_PATH):
    with open(path, encoding="utf-8") as f:
        return f.read()


class KernelSet:
    """Compiled compute pipelines, one per entry point.

    Args:
        device: wgpu device
        pipeline_layout: The shared layout from DeviceResources
        program: WGSL source; defaults to the bundled compute.wgsl
    """

    def __init__(self, device, pipeline_layout, program=None,
                 init_passes=INIT_PASSES, frame_passes=FRAME_PASSES):
        validate_pass_order(init_passes, frame_passes)
        self.init_passes = tuple(init_passes)
        self.frame_passes = tuple(frame_passes)

        if program is None:
            program = load_program()
        self.module = device.create_shader_module(label="physarum", code=program)
        self.pipelines = {
            name: device.create_compute_pipeline(
                label=name,
                layout=pipeline_layout,
                compute={"module": self.module, "entry_point": name},
            )
            for name in KERNEL_NAMES
        }

    def encode(self, encoder, frame_pass, plan, bind_groups):
        """Record one pass into encoder, sized from plan."""
        compute_pass = encoder.begin_compute_pass(label=frame_pass.name)
        compute_pass.set_pipeline(self.pipelines[frame_pass.name])
        for index, group in enumerate(bind_groups):
            compute_pass.set_bind_group(index, group)
        compute_pass.dispatch_workgroups(*plan.size_for(frame_pass.domain))
        compute_pass.end()
