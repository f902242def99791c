"""
Display surface contract

The scheduler hands the device resources to a surface once per tick;
what "presenting" means is up to the surface. The pygame window reads
the pixel buffer back every frame, the snapshot surface only on demand.
"""

from abc import ABC, abstractmethod

import numpy as np
from PIL import Image

from .errors import PhysarumError
from .resources import PIXEL_RECORD_BYTES

CANVAS_FILL = 0.95  # fraction of the smaller viewport side the canvas covers


def canvas_scale(viewport_width, viewport_height, resolution):
    """Screen pixels per grid cell for a square canvas that fits the viewport."""
    return CANVAS_FILL * min(viewport_height, viewport_width) / resolution


def canvas_side(viewport_width, viewport_height, resolution):
    return int(resolution * canvas_scale(viewport_width, viewport_height, resolution))


def pixels_to_rgb(raw, resolution):
    """Decode rgba float records into an (H, W, 3) uint8 image."""
    cells = resolution * resolution
    records = np.frombuffer(raw, dtype=np.float32, count=cells * (PIXEL_RECORD_BYTES // 4))
    rgba = records.reshape(resolution, resolution, 4)
    return (np.clip(rgba[..., :3], 0.0, 1.0) * 255).astype(np.uint8)


class DisplaySurface(ABC):
    """Receives the pixel buffer at the end of every tick."""

    @abstractmethod
    def present(self, resources):
        """Show resources.buffers["pixels"]. Must not mutate device state."""


class SnapshotSurface(DisplaySurface):
    """Headless surface: remembers what was presented, reads back on request."""

    def __init__(self):
        self.presented = 0
        self._resources = None

    def present(self, resources):
        self._resources = resources
        self.presented += 1

    def capture(self):
        if self._resources is None:
            raise PhysarumError("nothing has been presented yet")
        res = self._resources
        return pixels_to_rgb(res.read("pixels"), res.resolution)

    def save(self, path):
        Image.fromarray(self.capture()).save(path)
        print(f"[physarum] saved: {path}")
        return path
