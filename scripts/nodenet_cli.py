#!/usr/bin/env python3
"""
nodenet CLI

Usage modes:
- Default run: load config, simulate headless ticks, print summary or write JSON
- Validation: check state invariants after the run, non-zero exit on violations
- Export: write the final connection graph as GraphML, or the final frame as PNG
- Window: open an interactive pygame window
- Utility: list themes and bundled presets, show version, dry-run config load
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from glob import glob
from pathlib import Path
from typing import Any, Dict, List

from nodenet_core import Engine, THEME_VARIANTS, get_theme
from nodenet_core.config import SimulationConfig
from nodenet_core.loader import config_from_file
from nodenet_core.metrics import summarize


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Simulate the animated node network and dump metrics",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Utilities / meta
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v, -vv)")
    p.add_argument("--list-themes", action="store_true", help="List theme presets and exit")
    p.add_argument("--list-presets", action="store_true", help="List bundled YAML presets and exit")

    # Primary input
    p.add_argument("config", nargs="?", help="Path to YAML config (e.g., scripts/presets/default.yaml)")

    # Surface
    p.add_argument("--width", type=float, default=960.0, help="Logical surface width")
    p.add_argument("--height", type=float, default=600.0, help="Logical surface height")
    p.add_argument("--dpr", type=float, default=1.0, help="Device pixel ratio for rendering")

    # Execution
    p.add_argument("--ticks", type=int, default=600, help="Number of ticks to simulate")
    p.add_argument("--frame-ms", type=float, default=1000.0 / 60.0, help="Milliseconds between ticks")
    p.add_argument("--seed", type=int, default=None, help="Random seed")
    p.add_argument("--pointer", type=float, nargs=2, metavar=("X", "Y"), default=None, help="Fixed pointer position")
    p.add_argument("--dry-run", action="store_true", help="Load config only; do not simulate")
    p.add_argument("--out", type=str, default="", help="Optional output JSON file path")

    # Config overrides
    p.add_argument("--theme", type=str, default=None, help="Theme preset name")
    p.add_argument("--node-count", type=int, default=None, help="Number of nodes")
    p.add_argument("--capacity", type=int, default=None, help="Connection capacity")
    p.add_argument("--overlay", action="store_true", help="Enable the radial overlay pass")

    # Analysis / export
    p.add_argument("--validate", action="store_true", help="Check state invariants after the run")
    p.add_argument("--export-graphml", type=str, default="", help="Export final connection graph to GraphML")
    p.add_argument("--png", type=str, default="", help="Render the final frame to a PNG file")
    p.add_argument("--window", action="store_true", help="Open an interactive window instead of running headless")

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulationConfig:
    cfg = config_from_file(args.config) if args.config else SimulationConfig()
    overrides: Dict[str, Any] = {}
    if args.theme is not None:
        overrides["theme"] = get_theme(args.theme)
    if args.node_count is not None:
        overrides["node_count"] = args.node_count
    if args.capacity is not None:
        overrides["connection_capacity"] = args.capacity
    if args.overlay:
        overrides["overlay_enabled"] = True
    return cfg.with_overrides(**overrides) if overrides else cfg


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def find_presets() -> List[str]:
    here = Path(__file__).resolve()
    return sorted(glob(str(here.parent / "presets" / "*.yaml")))


def render_png(engine: Engine, path: str, dpr: float) -> None:
    import pygame

    from nodenet_render.renderer import Renderer

    size = (max(1, int(engine.state.width * dpr)), max(1, int(engine.state.height * dpr)))
    surface = pygame.Surface(size)
    Renderer(engine.config).draw(surface, engine.state, engine.now, dpr=dpr)
    pygame.image.save(surface, path)


def main(argv: List[str] | None = None) -> int:
    try:
        from nodenet_core import __version__ as nodenet_version
    except Exception:
        nodenet_version = "unknown"

    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.version:
        print(nodenet_version)
        return 0

    if args.list_themes:
        print(json.dumps(sorted(THEME_VARIANTS), indent=2))
        return 0

    if args.list_presets:
        print(json.dumps(find_presets(), indent=2))
        return 0

    if args.config and not Path(args.config).is_file():
        print(f"error: config file not found: {args.config}", file=sys.stderr)
        return 2

    cfg = build_config(args)

    if args.dry_run:
        minimal = {
            "node_count": cfg.effective_node_count,
            "clusters": cfg.cluster_count,
            "connection_capacity": cfg.connection_capacity,
            "theme_background": cfg.theme.background,
        }
        if args.out:
            with open(args.out, "w", encoding="utf-8") as f:
                json.dump(minimal, f, indent=2)
        else:
            print(json.dumps(minimal, indent=2))
        return 0

    if args.window:
        from nodenet_render.runner.window import run_window

        run_window(cfg, width=int(args.width), height=int(args.height), dpr=args.dpr, seed=args.seed)
        return 0

    engine = Engine(cfg, args.width, args.height, seed=args.seed)
    pointer = tuple(args.pointer) if args.pointer else None
    logging.info("Simulating %d ticks at %.2f ms/tick", args.ticks, args.frame_ms)
    engine.run(args.ticks, frame_ms=args.frame_ms, pointer=pointer)

    summary: Dict[str, Any] = summarize(engine)
    exit_code = 0

    if args.validate:
        issues = engine.state.validate_invariants(cfg.connection_capacity)
        total = sum(len(v) for v in issues.values())
        logging.info("Invariant issues: %d", total)
        summary["validation"] = {"total_issues": total, "issues": issues}
        if total:
            exit_code = 1

    if args.export_graphml:
        logging.info("Exporting GraphML to %s", args.export_graphml)
        engine.state.export_graphml(args.export_graphml)

    if args.png:
        logging.info("Rendering final frame to %s", args.png)
        render_png(engine, args.png, args.dpr)

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
    else:
        print(json.dumps(summary, indent=2))

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
