"""
Convert Green Button XML files to CSV, InfluxDB line protocol or Parquet.

Usage:
    greenbuttonlogic --filetype csv [--out out.csv] feed1.xml feed2.xml
    greenbuttonlogic --filetype parquet --out out.parquet feeds/*.xml
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import canon, ingest, transform
from .config import ParseConfig
from .exceptions import EncodingError, GreenButtonError
from .io.formats import encode

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="greenbuttonlogic",
        description="Convert Green Button XML feeds into one time series.",
    )
    parser.add_argument("-f", "--filetype", required=True, choices=canon.FILETYPES)
    parser.add_argument(
        "-o", "--out", type=Path, help="Output file (optional, except for parquet)"
    )
    parser.add_argument("--sort", action="store_true", help="Sort rows by title then time")
    parser.add_argument(
        "--raw-timestamps",
        action="store_true",
        help="Keep UTC interval starts instead of applying DST/timezone offsets",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("paths", nargs="+", type=Path, help="Paths of input files")
    return parser


def run(args: argparse.Namespace) -> int:
    config = ParseConfig(apply_local_time=not args.raw_timestamps)

    if args.filetype == "parquet" and args.out is None:
        raise EncodingError("--out is required with parquet.")

    result = ingest.from_paths(args.paths, config=config)
    ts = result.timeseries
    if args.sort:
        ts = transform.sort(ts)
    log.info(
        "%d rows from %d file(s); %d failed", len(ts), len(result.parsed), len(result.failed)
    )

    out = encode(ts, args.filetype, config)
    if args.out is not None:
        if isinstance(out, bytes):
            args.out.write_bytes(out)
        else:
            args.out.write_text(out, encoding="utf-8")
    else:
        sys.stdout.write(out)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    try:
        return run(args)
    except GreenButtonError as err:
        log.error("%s", err)
        return 1


if __name__ == "__main__":
    sys.exit(main())
