"""
Physarum Viewer - Entry Point

Usage:
    python -m physarum [preset] [--size N] [--agents N] [--window WxH]
    python -m physarum [preset] --snap N [--out PATH]

Examples:
    python -m physarum
    python -m physarum LACE
    python -m physarum AURA --size 1024 --agents 500000
    python -m physarum MICRO --window 1200x1200
    python -m physarum UNDULATE --snap 600 --out undulate.png

--snap runs N ticks without a window and saves the pixel buffer as PNG.
Use --list to see all available presets.
"""

import os
import sys

from .presets import PRESET_ORDER, list_presets


def snap(preset, resolution, agent_count, steps, out=None):
    """Headless mode: run N ticks, save a PNG, exit."""
    # No pygame needed here
    from .simulator import PhysarumSimulator
    from .surface import SnapshotSurface

    if out is None:
        screenshots_dir = os.path.join(
            os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
            "screenshots"
        )
        os.makedirs(screenshots_dir, exist_ok=True)
        out = os.path.join(screenshots_dir, f"physarum_{preset.lower()}.png")

    surface = SnapshotSurface()
    sim = PhysarumSimulator(preset, resolution=resolution, agent_count=agent_count,
                            surface=surface)

    print(f"  {preset}: running {steps} ticks...", flush=True)
    sim.step(steps)
    surface.save(out)
    return out


def main(argv=None):
    preset = "DEFAULT"
    resolution = 2048
    agent_count = 2000000
    window = None
    snap_steps = 0
    out = None

    args = sys.argv[1:] if argv is None else list(argv)
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--size" and i + 1 < len(args):
            resolution = int(args[i + 1])
            i += 2
        elif arg == "--agents" and i + 1 < len(args):
            agent_count = int(args[i + 1])
            i += 2
        elif arg == "--window" and i + 1 < len(args):
            parts = args[i + 1].split("x")
            window = (int(parts[0]), int(parts[1]))
            i += 2
        elif arg == "--snap" and i + 1 < len(args):
            snap_steps = int(args[i + 1])
            i += 2
        elif arg == "--out" and i + 1 < len(args):
            out = args[i + 1]
            i += 2
        elif arg == "--list":
            print("\nAvailable presets:\n")
            for key, desc, values in list_presets():
                print(f"  {key:10s} {desc}")
                print("             " + "  ".join(f"{k}={v:g}" for k, v in values.items()))
            print()
            return 0
        elif arg in ("--help", "-h"):
            print(__doc__)
            return 0
        elif arg.upper() in PRESET_ORDER:
            preset = arg.upper()
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return 2

    if snap_steps > 0:
        print(f"Headless snap mode: {preset} @ {resolution}x{resolution}, "
              f"{agent_count:,} agents, {snap_steps} ticks")
        snap(preset, resolution, agent_count, snap_steps, out)
        return 0

    from .viewer import Viewer

    print("Starting Physarum Viewer")
    print(f"  Preset: {preset}")
    print(f"  Grid: {resolution}x{resolution}")
    print(f"  Agents: {agent_count:,}")
    if window:
        print(f"  Window: {window[0]}x{window[1]}")
    print()

    viewer = Viewer(
        resolution=resolution,
        agent_count=agent_count,
        start_preset=preset,
        window=window,
    )
    viewer.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
