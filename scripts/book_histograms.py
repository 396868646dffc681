#!/usr/bin/env python3
"""Book histograms from a configuration file and write them to a ROOT file.

The histograms are written empty; the point is to check a booking file and
to produce the directory layout an analysis job will fill.

Usage:
    # Book and write
    python scripts/book_histograms.py histos.cfg -o histos.root

    # Append to an existing file instead of recreating it
    python scripts/book_histograms.py histos.yaml -o histos.root --update

    # Only show what would be booked
    python scripts/book_histograms.py histos.cfg --dry-run

Defaults come from HISTOMANAGER_CONFIG and HISTOMANAGER_OUTPUT.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

import uproot

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from histomanager.histograms.registry import HistogramRegistry  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "config",
        nargs="?",
        default=os.environ.get("HISTOMANAGER_CONFIG"),
        help="Booking file (.cfg line format or .yaml)",
    )
    parser.add_argument(
        "-o", "--output",
        default=os.environ.get("HISTOMANAGER_OUTPUT", "histograms.root"),
        help="Output ROOT file",
    )
    parser.add_argument("--update", action="store_true", help="Append to an existing output file")
    parser.add_argument("--dry-run", action="store_true", help="Book only, do not write")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)
    if args.config is None:
        parser.error("no config file given (argument or HISTOMANAGER_CONFIG)")
    return args


def print_summary(registry: HistogramRegistry) -> None:
    for s in registry.list_summaries():
        binning = f"{s.nbinsx} [{s.xmin:g}, {s.xmax:g})"
        if s.nbinsy is not None:
            binning += f" x {s.nbinsy} [{s.ymin:g}, {s.ymax:g})"
        print(f"  {s.kind.value:<11} /{s.directory + '/' if s.directory else ''}{s.name}  {binning}")


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.dry_run:
        registry = HistogramRegistry()
        if not registry.load_config(args.config):
            return 1
        print_summary(registry)
        print(f"\nDry run: {registry.count()} histograms booked, nothing written")
        return 0

    if args.update and Path(args.output).exists():
        output_file = uproot.update(args.output)
    else:
        output_file = uproot.recreate(args.output)

    with output_file:
        registry = HistogramRegistry(output_file)
        if not registry.load_config(args.config):
            return 1
        written = registry.write_all(flush=True)
        print_summary(registry)

    print(f"\nDone! Wrote {written} histograms to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
