"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from conservation_priority import __version__
from conservation_priority.config import (
    ConfigurationError,
    PipelineConfig,
    get_settings,
    load_config,
)
from conservation_priority.flows.build import build_all
from conservation_priority.flows.fetch import fetch_all


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="conservation-priority",
        description="Species and area conservation priorities from GBIF + iNaturalist occurrences",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file overriding pipeline defaults (default: config_path from settings)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info and effective configuration")

    # 'fetch' command - download raw occurrences
    fetch_parser = subparsers.add_parser("fetch", help="Fetch raw GBIF and iNaturalist data")
    fetch_parser.add_argument(
        "--force",
        action="store_true",
        help="Re-fetch even if cached data is still fresh",
    )

    # 'process' command - run the pipeline on cached raw data
    subparsers.add_parser("process", help="Clean, score and write priority tables")

    # 'refresh' command - fetch then process
    subparsers.add_parser("refresh", help="Fetch data and rebuild priority tables")

    return parser


def _load_config(args: argparse.Namespace) -> PipelineConfig:
    path = getattr(args, "config", None) or get_settings().config_path
    return load_config(path)


def cmd_info(args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug or getattr(args, 'debug', False)}")

    config = _load_config(args)
    bbox = config.bounding_box
    print(f"Region: {config.region_name}")
    print(f"Bounding box: lat {bbox.lat_min}..{bbox.lat_max}, lon {bbox.lon_min}..{bbox.lon_max}")
    print(f"Grid cell size: {config.grid_cell_size_deg} deg")
    print(f"Uncertainty ceiling: {config.uncertainty_ceiling_m:g} m")
    print(f"Trend split year: {config.trend_split_year}")
    return 0


def cmd_fetch(args: argparse.Namespace) -> int:
    """Handle the 'fetch' command."""
    config = _load_config(args)
    result = fetch_all(config=config, force=args.force)
    print(f"GBIF records: {result['gbif_records']}")
    print(f"iNaturalist records: {result['inat_records']}")
    return 0


def cmd_process(args: argparse.Namespace) -> int:
    """Handle the 'process' command."""
    config = _load_config(args)
    if args.debug:
        print(f"Debug mode enabled. Config: {config.model_dump()}")

    result = build_all(config=config)
    if "error" in result:
        print(f"Error: {result['error']}. Run the fetch command first.", file=sys.stderr)
        return 1

    print(f"Occurrences: {result['occurrences']}")
    print(f"Species scored: {result['species']}")
    print(f"Grid cells scored: {result['grid_cells']}")
    print(f"Report: {result['report']}")
    return 0


def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command: fetch data then process it."""
    config = _load_config(args)
    print("Fetching data...")
    fetch_all(config=config)

    print("Building priority tables...")
    result = build_all(config=config)
    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1

    print("Done.")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "fetch": cmd_fetch,
        "process": cmd_process,
        "refresh": cmd_refresh,
    }

    handler = commands.get(args.command)
    if not handler:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
