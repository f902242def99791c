"""
Device Resource Set & Binding Topology

Allocates the GPU-resident state once per session and binds it in three
fixed groups shared by every kernel:

    group 0  pixels                          rgba record per cell (16 B)
    group 1  one uniform per parameter       binding = registry order
    group 2  positions, headings, grid       vec2 / vec2 / f32

Storage capacity comes from the *initial* resolution and agent capacity.
Neither can grow afterwards; the tuning controller refuses edits that
would overrun these buffers.
"""

import wgpu

from .errors import CapacityError, ParameterValueError


PIXEL_RECORD_BYTES = 16   # vec4<f32>
AGENT_VEC_BYTES = 8       # vec2<f32>
GRID_CELL_BYTES = 4       # f32
MIN_STORAGE_BYTES = 16    # zero-sized storage bindings are invalid

PIXEL_GROUP = 0
PARAMETER_GROUP = 1
AGENT_GROUP = 2

# Storage buffer -> (group, binding)
TOPOLOGY = {
    "pixels": (PIXEL_GROUP, 0),
    "positions": (AGENT_GROUP, 0),
    "headings": (AGENT_GROUP, 1),
    "grid": (AGENT_GROUP, 2),
}
# Pseudo-resource naming the whole uniform group
PARAMS = "params"


def _storage_entry(binding):
    return {
        "binding": binding,
        "visibility": wgpu.ShaderStage.COMPUTE,
        "buffer": {"type": wgpu.BufferBindingType.storage},
    }


def _uniform_entry(binding):
    return {
        "binding": binding,
        "visibility": wgpu.ShaderStage.COMPUTE,
        "buffer": {"type": wgpu.BufferBindingType.uniform},
    }


def _resource(binding, buffer):
    return {"binding": binding, "resource": {"buffer": buffer, "offset": 0, "size": buffer.size}}


class DeviceResources:
    """Buffers, bind groups and the shared pipeline layout.

    Args:
        device: wgpu device (or anything with the same create_* surface)
        registry: ParameterRegistry providing initial sizes and uniforms
        agent_capacity: Agents the state buffers hold. Defaults to the
            registry's initial agent_count.
    """

    def __init__(self, device, registry, agent_capacity=None):
        self.device = device
        self.registry = registry

        resolution = registry.value("resolution")
        if resolution != int(resolution) or resolution < 0:
            raise ParameterValueError(f"resolution must be a whole number of cells, got {resolution:g}")
        self.resolution = int(resolution)
        agent_count = registry.value("agent_count")
        if agent_capacity is None:
            agent_capacity = agent_count
        agent_capacity = int(agent_capacity)
        if agent_capacity < agent_count:
            raise CapacityError(
                f"agent_capacity {agent_capacity:,} is below agent_count {agent_count:,}"
            )
        self.agent_capacity = agent_capacity
        self.cell_count = self.resolution * self.resolution

        self.buffers = {
            "pixels": self._create_storage("pixels", self.cell_count * PIXEL_RECORD_BYTES),
            "positions": self._create_storage("positions", agent_capacity * AGENT_VEC_BYTES),
            "headings": self._create_storage("headings", agent_capacity * AGENT_VEC_BYTES),
            "grid": self._create_storage("grid", self.cell_count * GRID_CELL_BYTES),
        }

        self.uniforms = {}
        for param in registry:
            self.uniforms[param.name] = device.create_buffer(
                label=f"uniform:{param.name}",
                size=param.byte_size,
                usage=wgpu.BufferUsage.UNIFORM | wgpu.BufferUsage.COPY_DST,
            )

        self._build_topology()

    def _create_storage(self, label, nbytes):
        return self.device.create_buffer(
            label=label,
            size=max(nbytes, MIN_STORAGE_BYTES),
            usage=wgpu.BufferUsage.STORAGE | wgpu.BufferUsage.COPY_SRC,
        )

    def _build_topology(self):
        device = self.device
        agent_names = [name for name, (group, _) in TOPOLOGY.items() if group == AGENT_GROUP]

        self.pixel_layout = device.create_bind_group_layout(entries=[_storage_entry(0)])
        self.parameter_layout = device.create_bind_group_layout(
            entries=[_uniform_entry(i) for i in range(len(self.registry))]
        )
        self.agent_layout = device.create_bind_group_layout(
            entries=[_storage_entry(TOPOLOGY[name][1]) for name in agent_names]
        )

        self.pixel_group = device.create_bind_group(
            layout=self.pixel_layout,
            entries=[_resource(0, self.buffers["pixels"])],
        )
        self.parameter_group = device.create_bind_group(
            layout=self.parameter_layout,
            entries=[_resource(i, self.uniforms[name])
                     for i, name in enumerate(self.registry.names())],
        )
        self.agent_group = device.create_bind_group(
            layout=self.agent_layout,
            entries=[_resource(TOPOLOGY[name][1], self.buffers[name]) for name in agent_names],
        )

        # One layout for all kernels: any kernel may touch any bound buffer
        self.pipeline_layout = device.create_pipeline_layout(
            bind_group_layouts=[self.pixel_layout, self.parameter_layout, self.agent_layout]
        )

    @property
    def bind_groups(self):
        """Bind groups in group-index order."""
        return (self.pixel_group, self.parameter_group, self.agent_group)

    @property
    def footprint(self):
        """Total bytes allocated on the device."""
        return (sum(b.size for b in self.buffers.values())
                + sum(b.size for b in self.uniforms.values()))

    def sync_uniforms(self):
        """Upload every parameter edited since the last sync, in one batch.

        Returns the names that were written.
        """
        names = self.registry.take_dirty()
        queue = self.device.queue
        for name in names:
            queue.write_buffer(self.uniforms[name], 0, self.registry.get(name).encode())
        return names

    def read(self, name):
        """Copy a storage buffer back to host memory (blocks on the GPU)."""
        return self.device.queue.read_buffer(self.buffers[name])
