"""
Tests for workgroup sizing.
"""

import pytest

from physarum.dispatch import (
    DispatchPlan, plan_dispatch, plan_from_registry, workgroups, WORKGROUP_SIZE,
)
from physarum.params import ParameterRegistry


def test_workgroups_is_ceiling_division():
    assert workgroups(0, 256) == 0
    assert workgroups(1, 256) == 1
    assert workgroups(256, 256) == 1
    assert workgroups(257, 256) == 2
    assert workgroups(2000000, 256) == 7813
    with pytest.raises(ValueError):
        workgroups(-1, 256)


def test_default_plan():
    plan = plan_dispatch(2048, 2000000)
    assert plan == DispatchPlan(pixels=16384, agents=7813, grid=128, capacity=7813)


def test_zero_sized_domains():
    assert plan_dispatch(0, 0) == DispatchPlan(0, 0, 0, 0)
    plan = plan_dispatch(64, 0)
    assert plan.agents == 0
    assert plan.pixels == 16


def test_partial_workgroups_round_up():
    plan = plan_dispatch(17, 257)
    assert plan.pixels == 2   # 289 cells
    assert plan.agents == 2
    assert plan.grid == 2


def test_resolution_may_be_float():
    assert plan_dispatch(2048.0, 1000) == plan_dispatch(2048, 1000)


def test_capacity_sizes_reset_only():
    plan = plan_dispatch(64, 1000, agent_capacity=3000000)
    assert plan.agents == 4
    assert plan.capacity == -(-3000000 // WORKGROUP_SIZE)


def test_size_for_domains():
    plan = plan_dispatch(2048, 2000000)
    assert plan.size_for("grid") == (128, 128, 1)
    assert plan.size_for("agents") == (7813, 1, 1)
    assert plan.size_for("pixels") == (16384, 1, 1)
    assert plan.size_for("capacity") == (7813, 1, 1)


def test_plan_from_registry():
    registry = ParameterRegistry.defaults(resolution=512.0, agent_count=100000)
    plan = plan_from_registry(registry)
    assert plan.grid == 32
    assert plan.agents == 391
    assert plan.pixels == 1024
