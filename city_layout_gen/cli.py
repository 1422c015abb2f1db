"""
Command-line entry point for one city generation pass.

Usage:
    python -m city_layout_gen.cli [--config path/to/conf.json] [--seed N]
"""

from __future__ import annotations

import argparse
import logging

from . import config as cfg
from .core import generate_from_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Procedural city layout generator")
    parser.add_argument("--config", type=str, help="Optional config JSON path.")
    parser.add_argument("--seed", type=int, help="Override the master seed.")
    parser.add_argument("--output", type=str, help="Override the output directory.")
    parser.add_argument("--workers", type=int, help="Worker processes (1 = in-process).")
    parser.add_argument("--dump-config", type=str, help="Write the effective config JSON and exit.")
    parser.add_argument("--no-export", action="store_true", help="Skip writing PNG/JSON files.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def resolve_config(args: argparse.Namespace) -> dict:
    conf = cfg.load_config(args.config) if args.config else cfg.default_config()
    if args.seed is not None:
        conf["seed"] = args.seed
    if args.output:
        conf["output_dir"] = args.output
    if args.workers is not None:
        conf["workers"] = args.workers
    if args.no_export:
        conf.setdefault("export", {})["enabled"] = False
    return conf


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    conf = resolve_config(args)

    level = "DEBUG" if args.verbose else str(conf.get("logging", {}).get("level", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format="%(message)s")

    if args.dump_config:
        cfg.save_config(conf, args.dump_config)
        logging.info("Wrote config -> %s", args.dump_config)
        return 0

    layout = generate_from_config(conf)
    logging.info(
        "%d districts, %d border edges, %d lots, %d buildings",
        len(layout.districts),
        len(layout.borders),
        sum(len(v) for v in layout.lots.values()),
        len(layout.buildings),
    )
    for issue in layout.issues:
        logging.info("  [%s] %s", issue.stage, issue.message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
