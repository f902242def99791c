"""
GPU device acquisition

Either the simulation gets a full WebGPU device or it does not start.
There is no retry and no CPU fallback.
"""

import wgpu

from .errors import GPUUnavailableError


def request_device(power_preference="high-performance"):
    """Return a wgpu device, or raise GPUUnavailableError."""
    try:
        adapter = wgpu.gpu.request_adapter_sync(power_preference=power_preference)
    except Exception as e:
        raise GPUUnavailableError(f"WebGPU not supported: {e}") from e
    if adapter is None:
        raise GPUUnavailableError("Couldn't request WebGPU adapter.")

    try:
        device = adapter.request_device_sync()
    except Exception as e:
        raise GPUUnavailableError(f"Couldn't request WebGPU device: {e}") from e

    info = adapter.info
    print(f"[physarum] adapter: {info.get('device', '?')} "
          f"({info.get('backend_type', '?')})")
    return device
