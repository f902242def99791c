"""
Interactive Pygame Viewer for the Physarum simulation

The simulation runs entirely on the GPU; this window reads the pixel
buffer back once per frame and blits it. Slider and preset edits are
queued on the tuning controller and land before the next frame's passes.

Controls:
  1-5         Select preset
  TAB         Toggle control panel
  H           Toggle HUD overlay
  S           Save screenshot
  Q / ESC     Quit
"""

import os
import time

import numpy as np
import pygame

from .controls import ControlPanel, THEME
from .params import SLIDER_DEFS
from .presets import PRESET_ORDER, NO_PRESET
from .simulator import PhysarumSimulator
from .surface import DisplaySurface, canvas_side, pixels_to_rgb
from .tuning import SetParameter, ApplyPreset


PANEL_WIDTH = 300
CUSTOM_LABEL = "CUSTOM"  # HUD label once sliders leave the selected preset
AGENT_SLIDER_MAX = next(d["max"] for d in SLIDER_DEFS if d["key"] == "agent_count")


class PygameSurface(DisplaySurface):
    """Reads the pixel buffer back into a pygame Surface every tick."""

    def __init__(self):
        self.frame = None

    def present(self, resources):
        rgb = pixels_to_rgb(resources.read("pixels"), resources.resolution)
        self.frame = pygame.surfarray.make_surface(rgb.swapaxes(0, 1).copy())


class Viewer:
    def __init__(self, resolution=2048, agent_count=2000000, start_preset="DEFAULT",
                 window=None):
        self.resolution = resolution
        self.agent_count = agent_count
        self.start_preset = start_preset
        self.window = window  # (w, h) viewport override, else the desktop size
        self.canvas_size = 0
        self.panel_visible = True
        self.show_hud = True
        self.running = True
        self.fps_history = []

        self.sim = None
        self.surface = PygameSurface()
        self.panel = None
        self.preset_buttons = None
        self.preset_header = None
        self.sliders = {}

    @property
    def total_w(self):
        return self.canvas_size + (PANEL_WIDTH if self.panel_visible else 0)

    def _build_panel(self):
        panel = ControlPanel(self.canvas_size, 0, PANEL_WIDTH, self.canvas_size)
        registry = self.sim.registry

        preset = self.sim.preset_key
        self.preset_header = panel.add_section(preset or NO_PRESET)
        selected = PRESET_ORDER.index(preset) if preset in PRESET_ORDER else None
        self.preset_buttons = panel.add_button_row(
            PRESET_ORDER, selected=selected, on_select=self._on_preset_select
        )

        panel.add_section("AGENTS")
        for sdef in SLIDER_DEFS:
            max_val = sdef["max"]
            if sdef["key"] == "agent_count":
                max_val = min(max_val, self.sim.agent_capacity)
            self.sliders[sdef["key"]] = panel.add_slider(
                sdef["label"], sdef["min"], max_val, registry.value(sdef["key"]),
                fmt=sdef["fmt"], step=sdef["step"],
                on_change=self._make_param_callback(sdef["key"]),
            )

        panel.add_button("Screenshot  [S]", on_click=self._save_screenshot)
        self.panel = panel

    def _make_param_callback(self, key):
        def callback(val):
            self.sim.controller.submit(SetParameter(key, val))
        return callback

    def _on_preset_select(self, idx, name):
        self.sim.controller.submit(ApplyPreset(name))

    def _sync_sliders(self):
        """Follow the registry (presets move sliders too)."""
        registry = self.sim.registry
        for key, slider in self.sliders.items():
            if not slider.dragging:
                slider.set_value(registry.value(key))
        if self.sim.preset_key is None:
            self.preset_buttons.select(None)
        self.preset_header.title = self.sim.preset_key or NO_PRESET

    def _draw_hud(self, screen, fps):
        if not self.show_hud:
            return
        registry = self.sim.registry
        preset = self.sim.preset_key or CUSTOM_LABEL
        line = (f"{preset}  |  Tick: {self.sim.ticks:,}  |  "
                f"Agents: {registry.value('agent_count'):,}  |  "
                f"{self.resolution}x{self.resolution}  |  FPS: {fps:.0f}")

        bg = pygame.Surface((self.canvas_size, 24), pygame.SRCALPHA)
        bg.fill((0, 0, 0, 140))
        screen.blit(bg, (0, 0))
        screen.blit(self.hud_font.render(line, True, (210, 215, 225)), (10, 6))

    def _save_screenshot(self):
        if self.surface.frame is None:
            return
        screenshots_dir = os.path.join(
            os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
            "screenshots"
        )
        os.makedirs(screenshots_dir, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        name = (self.sim.preset_key or "custom").lower()
        path = os.path.join(screenshots_dir, f"physarum_{name}_{timestamp}.png")
        pygame.image.save(self.surface.frame, path)
        pygame.image.save(self.surface.frame, os.path.join(screenshots_dir, "latest.png"))
        print(f"[physarum] screenshot saved: {path}")

    def _handle_keydown(self, event):
        key = event.key

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_TAB:
            self.panel_visible = not self.panel_visible
            pygame.display.set_mode((self.total_w, self.canvas_size))

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        elif key == pygame.K_s:
            self._save_screenshot()

        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            if idx < len(PRESET_ORDER):
                self.sim.controller.submit(ApplyPreset(PRESET_ORDER[idx]))
                self.preset_buttons.select(idx)

    def run(self):
        """Main viewer loop. The display clock paces the ticks."""
        pygame.init()

        info = pygame.display.Info()
        vw, vh = self.window or (info.current_w, info.current_h)
        self.canvas_size = canvas_side(vw, vh, self.resolution)

        self.sim = PhysarumSimulator(
            self.start_preset,
            resolution=self.resolution,
            agent_count=self.agent_count,
            agent_capacity=max(self.agent_count, AGENT_SLIDER_MAX),
            surface=self.surface,
        )

        screen = pygame.display.set_mode((self.total_w, self.canvas_size))
        pygame.display.set_caption("Physarum")
        clock = pygame.time.Clock()
        self.hud_font = pygame.font.SysFont("menlo", 13)
        self.panel_font = pygame.font.SysFont("menlo", 12)
        self._build_panel()

        self.sim.start()

        while self.running:
            frame_start = time.time()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.KEYDOWN:
                    self._handle_keydown(event)
                elif self.panel_visible:
                    self.panel.handle_event(event)

            if not self.running:
                break

            self.sim.scheduler.tick()
            self._sync_sliders()

            screen = pygame.display.get_surface()
            screen.fill(THEME["bg"])
            scaled = pygame.transform.smoothscale(
                self.surface.frame, (self.canvas_size, self.canvas_size)
            )
            screen.blit(scaled, (0, 0))

            self.fps_history.append(time.time() - frame_start)
            if len(self.fps_history) > 30:
                self.fps_history.pop(0)
            self._draw_hud(screen, 1.0 / max(np.mean(self.fps_history), 0.001))

            if self.panel_visible:
                self.panel.draw(screen, self.panel_font)

            pygame.display.flip()
            clock.tick(60)

        pygame.quit()
