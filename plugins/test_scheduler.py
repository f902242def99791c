"""
Tests for frame ordering, pass-graph validation and uniform upload, run
against the recording fake device.
"""

import math

import numpy as np
import pytest

from physarum.errors import PassOrderError
from physarum.kernels import (
    FramePass, KernelSet, validate_pass_order, KERNEL_NAMES,
    INIT_PASSES, FRAME_PASSES, RESET, DIFFUSE, SIMULATE, RENDER,
)
from physarum.scheduler import Phase
from physarum.surface import DisplaySurface


class RecordingSurface(DisplaySurface):
    def __init__(self, device):
        self.device = device
        self.seen = []

    def present(self, resources):
        self.seen.append(len(self.device.queue.submissions))


def uniform_bytes(device, name):
    return next(bytes(b.data) for b in device.buffers if b.label == f"uniform:{name}")


def test_reset_once_then_frames_in_order(make_sim, fake_device):
    sim = make_sim()
    assert sim.scheduler.phase is Phase.INITIALIZING
    sim.step(3)
    assert sim.scheduler.phase is Phase.RUNNING

    assert fake_device.pass_log() == ["reset"] + ["diffuse", "simulate", "render"] * 3
    # One command buffer per tick
    assert [len(sub) for sub in fake_device.queue.submissions] == [1, 3, 3, 3]
    assert sim.ticks == 3


def test_start_is_idempotent(make_sim, fake_device):
    sim = make_sim()
    sim.start()
    sim.start()
    sim.step(2)
    assert fake_device.pass_log().count("reset") == 1


def test_dispatch_sizes_per_domain(make_sim, fake_device):
    sim = make_sim(resolution=64, agent_count=1000)
    sim.step()
    assert fake_device.dispatches("reset") == [(4, 1, 1)]
    assert fake_device.dispatches("diffuse") == [(4, 4, 1)]
    assert fake_device.dispatches("simulate") == [(4, 1, 1)]
    assert fake_device.dispatches("render") == [(16, 1, 1)]


def test_every_pass_binds_all_groups(make_sim, fake_device):
    sim = make_sim()
    sim.step(2)
    groups = sim.resources.bind_groups
    for sub in fake_device.queue.submissions:
        for compute_pass in sub:
            assert compute_pass.ended
            assert compute_pass.pipeline.label == compute_pass.label
            assert [compute_pass.bind_groups[i] for i in range(3)] == list(groups)


def test_present_follows_submission(make_sim, fake_device):
    surface = RecordingSurface(fake_device)
    sim = make_sim(surface=surface)
    sim.step(3)
    # Presented after each frame's submit (the first submit is reset)
    assert surface.seen == [2, 3, 4]


def test_time_advances_after_each_tick(make_sim, fake_device):
    sim = make_sim()
    sim.start()
    assert uniform_bytes(fake_device, "time") == np.float32(0.0).tobytes()

    sim.step(5)
    assert sim.params()["time"] == 5.0
    assert uniform_bytes(fake_device, "time") == np.float32(5.0).tobytes()


def test_start_uploads_every_uniform(make_sim, fake_device):
    sim = make_sim(agent_count=1000)
    sim.start()
    assert uniform_bytes(fake_device, "agent_count") == np.uint32(1000).tobytes()
    assert uniform_bytes(fake_device, "resolution") == np.float32(64.0).tobytes()
    assert uniform_bytes(fake_device, "sensor_angle") == np.float32(math.pi / 6.0).tobytes()
    written = {label for label, _ in fake_device.queue.writes}
    assert written == {f"uniform:{name}" for name in sim.registry.names()}


def test_only_time_is_rewritten_between_idle_ticks(make_sim, fake_device):
    sim = make_sim()
    sim.step()
    count = len(fake_device.queue.writes)
    sim.step()
    assert [label for label, _ in fake_device.queue.writes[count:]] == ["uniform:time"]


def test_run_until_should_continue_fails(make_sim):
    sim = make_sim()
    budget = iter([True, True, False])
    done = sim.scheduler.run(should_continue=lambda: next(budget))
    assert done == 2
    assert sim.ticks == 2


def test_declared_passes_are_valid():
    validate_pass_order(INIT_PASSES, FRAME_PASSES)


def test_simulate_before_diffuse_is_rejected():
    with pytest.raises(PassOrderError):
        validate_pass_order(INIT_PASSES, (SIMULATE, DIFFUSE, RENDER))
    with pytest.raises(PassOrderError):
        validate_pass_order(INIT_PASSES, (DIFFUSE, RENDER, SIMULATE))


def test_frame_without_reset_is_rejected():
    with pytest.raises(PassOrderError):
        validate_pass_order((), FRAME_PASSES)


def test_duplicate_and_unknown_passes_are_rejected():
    with pytest.raises(PassOrderError):
        validate_pass_order(INIT_PASSES, (DIFFUSE, DIFFUSE, SIMULATE, RENDER))

    blur = FramePass("blur", "grid", frozenset({"grid"}), frozenset({"grid"}))
    with pytest.raises(PassOrderError):
        validate_pass_order(INIT_PASSES, (blur,) + FRAME_PASSES)

    trail = FramePass("render", "pixels", frozenset({"trail"}), frozenset({"pixels"}))
    with pytest.raises(PassOrderError):
        validate_pass_order(INIT_PASSES, (DIFFUSE, SIMULATE, trail))


def test_reset_must_not_read_unseeded_state():
    greedy = FramePass("reset", "capacity", frozenset({"grid"}), frozenset({"grid"}))
    with pytest.raises(PassOrderError):
        validate_pass_order((greedy,), FRAME_PASSES)


def test_kernel_set_checks_order_before_compiling(fake_device):
    with pytest.raises(PassOrderError):
        KernelSet(fake_device, None, program="", frame_passes=(RENDER, DIFFUSE, SIMULATE))
    assert fake_device.pipelines == []


def test_kernel_set_builds_one_pipeline_per_entry_point(fake_device):
    kernels = KernelSet(fake_device, "layout")
    assert sorted(kernels.pipelines) == sorted(KERNEL_NAMES)
    assert [p.entry_point for p in fake_device.pipelines] == list(KERNEL_NAMES)
    assert all(p.layout == "layout" for p in fake_device.pipelines)
    assert "fn simulate" in kernels.module.code
    assert kernels.init_passes == (RESET,)
