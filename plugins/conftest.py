"""
Shared test fixtures.

FakeDevice records what the orchestration layer asks of a wgpu device
(buffers, layouts, pipelines, encoded passes, queue writes) without a
GPU, so ordering, sizing and tuning can be checked anywhere. Tests that
need real numerics use the gpu_device fixture, which skips when no
WebGPU adapter is available.
"""

import pytest

from physarum.errors import GPUUnavailableError


class FakeBuffer:
    def __init__(self, label, size, usage):
        self.label = label
        self.size = size
        self.usage = usage
        self.data = bytearray(size)


class FakeObject:
    """Bind group layouts, bind groups, pipeline layouts, shader modules."""

    def __init__(self, kind, **kwargs):
        self.kind = kind
        self.__dict__.update(kwargs)


class FakeComputePass:
    def __init__(self, label):
        self.label = label
        self.pipeline = None
        self.bind_groups = {}
        self.workgroups = None
        self.ended = False

    def set_pipeline(self, pipeline):
        self.pipeline = pipeline

    def set_bind_group(self, index, group):
        self.bind_groups[index] = group

    def dispatch_workgroups(self, x, y=1, z=1):
        self.workgroups = (x, y, z)

    def end(self):
        self.ended = True


class FakeEncoder:
    def __init__(self):
        self.passes = []

    def begin_compute_pass(self, label=None):
        compute_pass = FakeComputePass(label)
        self.passes.append(compute_pass)
        return compute_pass

    def finish(self):
        return list(self.passes)


class FakeQueue:
    def __init__(self):
        self.submissions = []
        self.writes = []

    def submit(self, command_buffers):
        self.submissions.append([p for cb in command_buffers for p in cb])

    def write_buffer(self, buffer, offset, data):
        data = bytes(data)
        buffer.data[offset:offset + len(data)] = data
        self.writes.append((buffer.label, data))

    def read_buffer(self, buffer):
        return memoryview(bytes(buffer.data))


class FakeDevice:
    def __init__(self):
        self.queue = FakeQueue()
        self.buffers = []
        self.pipelines = []

    def create_buffer(self, label="", size=0, usage=0):
        buffer = FakeBuffer(label, size, usage)
        self.buffers.append(buffer)
        return buffer

    def create_bind_group_layout(self, entries):
        return FakeObject("bind_group_layout", entries=entries)

    def create_bind_group(self, layout, entries):
        return FakeObject("bind_group", layout=layout, entries=entries)

    def create_pipeline_layout(self, bind_group_layouts):
        return FakeObject("pipeline_layout", bind_group_layouts=bind_group_layouts)

    def create_shader_module(self, label="", code=""):
        return FakeObject("shader_module", label=label, code=code)

    def create_compute_pipeline(self, label="", layout=None, compute=None):
        pipeline = FakeObject("compute_pipeline", label=label, layout=layout,
                              entry_point=compute["entry_point"])
        self.pipelines.append(pipeline)
        return pipeline

    def create_command_encoder(self):
        return FakeEncoder()

    # Inspection helpers

    def pass_log(self):
        """Entry points dispatched, in submission order."""
        return [p.pipeline.entry_point for sub in self.queue.submissions for p in sub]

    def dispatches(self, entry_point):
        return [p.workgroups for sub in self.queue.submissions for p in sub
                if p.pipeline.entry_point == entry_point]


@pytest.fixture
def fake_device():
    return FakeDevice()


@pytest.fixture
def make_sim(fake_device):
    """Build a PhysarumSimulator on the fake device."""
    from physarum.simulator import PhysarumSimulator

    def factory(preset_key="DEFAULT", resolution=64, agent_count=1000, **kwargs):
        return PhysarumSimulator(preset_key, resolution=resolution,
                                 agent_count=agent_count, device=fake_device, **kwargs)
    return factory


@pytest.fixture(scope="session")
def gpu_device():
    from physarum.device import request_device
    try:
        return request_device()
    except GPUUnavailableError as e:
        pytest.skip(f"no WebGPU adapter: {e}")
