"""
Dispatch Sizer

Workgroup counts derived from the live parameters. The kernels run 256
invocations per workgroup along one axis, except diffuse which tiles the
grid in 16x16 blocks:

    pixels  = ceil(resolution^2 / 256)
    agents  = ceil(agent_count / 256)
    grid    = ceil(resolution / 16)      (used on both axes)

A count of zero yields zero workgroups. Dispatching zero workgroups is
legal and does nothing, so it is not treated as an error.
"""

from dataclasses import dataclass

WORKGROUP_SIZE = 256
GRID_TILE = 16


def workgroups(items, per_group):
    """ceil(items / per_group) on integers."""
    items = int(items)
    if items < 0:
        raise ValueError(f"item count must be non-negative, got {items}")
    return -(-items // per_group)


@dataclass(frozen=True)
class DispatchPlan:
    pixels: int
    agents: int
    grid: int
    capacity: int

    def size_for(self, domain):
        """(x, y, z) workgroup counts for a pass domain name."""
        if domain == "grid":
            return (self.grid, self.grid, 1)
        return (getattr(self, domain), 1, 1)


def plan_dispatch(resolution, agent_count, agent_capacity=None):
    """Build a DispatchPlan from current values.

    Args:
        resolution: Grid side length in cells (may arrive as a float)
        agent_count: Live agent count
        agent_capacity: Agents the state buffers can hold; the reset pass
            seeds all of them. Defaults to agent_count.
    """
    side = int(resolution)
    if agent_capacity is None:
        agent_capacity = agent_count
    return DispatchPlan(
        pixels=workgroups(side * side, WORKGROUP_SIZE),
        agents=workgroups(agent_count, WORKGROUP_SIZE),
        grid=workgroups(side, GRID_TILE),
        capacity=workgroups(agent_capacity, WORKGROUP_SIZE),
    )


def plan_from_registry(registry, agent_capacity=None):
    return plan_dispatch(
        registry.value("resolution"),
        registry.value("agent_count"),
        agent_capacity,
    )
