"""
Lenia Engine - Headless Runner

Usage:
    python -m lenia_engine [preset] [--size WxH] [--steps N] [--every N]
                           [--strategy auto|direct|fft] [--seed N]
                           [--modulate] [--driver-seed N] [--save PATH]

Examples:
    python -m lenia_engine
    python -m lenia_engine glider --size 128x128 --steps 500
    python -m lenia_engine lorenz --seed 3 --driver-seed 7 --save out.npy
    python -m lenia_engine disc --strategy fft --every 50

Use --list to see all available presets.
"""

import sys
import time

import numpy as np

from .errors import LeniaError
from .lenia import Lenia
from .presets import PRESET_ORDER, list_presets


def parse_args(args):
    """Parse command line arguments into an options dict.

    Returns None (after printing) for --list, --help, unknown arguments
    and malformed values.
    """
    opts = {
        "preset": "lorenz",
        "width": None,
        "height": None,
        "steps": 200,
        "every": 50,
        "strategy": None,
        "seed": None,
        "modulate": None,
        "driver_seed": None,
        "save": None,
    }
    int_flags = {"--steps": "steps", "--every": "every", "--seed": "seed",
                 "--driver-seed": "driver_seed"}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in int_flags and i + 1 < len(args):
            try:
                opts[int_flags[arg]] = int(args[i + 1])
            except ValueError:
                print(f"Invalid value for {arg}: {args[i + 1]!r} (expected an integer)")
                return None
            i += 2
        elif arg == "--size" and i + 1 < len(args):
            parts = args[i + 1].split("x")
            try:
                if len(parts) > 2:
                    raise ValueError(args[i + 1])
                opts["width"], opts["height"] = int(parts[0]), int(parts[-1])
            except ValueError:
                print(f"Invalid value for --size: {args[i + 1]!r} (expected WxH, e.g. 128x96)")
                return None
            i += 2
        elif arg == "--strategy" and i + 1 < len(args):
            opts["strategy"] = args[i + 1]
            i += 2
        elif arg == "--save" and i + 1 < len(args):
            opts["save"] = args[i + 1]
            i += 2
        elif arg == "--modulate":
            opts["modulate"] = True
            i += 1
        elif arg == "--no-modulate":
            opts["modulate"] = False
            i += 1
        elif arg == "--list":
            print("\nAvailable presets:")
            for key, name, desc in list_presets():
                print(f"    {key:12s} {name:16s} {desc}")
            print()
            return None
        elif arg in ("--help", "-h"):
            print(__doc__)
            return None
        elif arg in PRESET_ORDER:
            opts["preset"] = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return None
    return opts


def run(opts):
    """Run a preset headless, printing stats every `every` steps. Returns the engine."""
    overrides = {}
    if opts["strategy"] is not None:
        overrides["strategy"] = opts["strategy"]
    if opts["modulate"] is not None:
        overrides["modulate"] = opts["modulate"]
    if opts["driver_seed"] is not None:
        overrides["driver_seed"] = opts["driver_seed"]

    engine = Lenia.from_preset(opts["preset"], width=opts["width"], height=opts["height"],
                               seed=opts["seed"], **overrides)
    with engine:
        p = engine.get_params()
        print(f"Lenia headless run: {opts['preset']} @ {engine.width}x{engine.height}, "
              f"{opts['steps']} steps, {p['strategy']} convolution"
              f"{', modulated' if engine.modulating else ''}")

        every = max(1, opts["every"])
        start = time.perf_counter()
        for n in range(1, opts["steps"] + 1):
            engine.step()
            if n % every == 0 or n == opts["steps"]:
                s = engine.stats
                g = engine.growth_params
                print(f"  gen {s['generation']:6d}  mass {s['mass']:10.2f}  "
                      f"max {s['max']:.3f}  alive {s['alive_pct']:5.1f}%  "
                      f"mu {g.mu:.4f}  sigma {g.sigma:.4f}  dt {g.dt:.4f}")
        elapsed = time.perf_counter() - start
        if opts["steps"] > 0 and elapsed > 0:
            print(f"  {opts['steps'] / elapsed:.1f} steps/s")

        if opts["save"]:
            np.save(opts["save"], engine.read_field())
            print(f"  saved: {opts['save']}")
    return engine


def main(argv=None):
    opts = parse_args(sys.argv[1:] if argv is None else argv)
    if opts is None:
        return 0
    try:
        run(opts)
    except LeniaError as e:
        print(f"Error: {e}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
