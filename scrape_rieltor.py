#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger as log

from rieltor_listings.common import OUTPUT_ROOT, PersistenceError, ScrapeError, ensure_dir
from rieltor_listings.models import Apartment
from rieltor_listings.rieltor import parse_apartment, parse_apartment_list

VERSION = "1.0.0"


def _resolve(path: str) -> Path:
    p = Path(path)
    return p if p.is_absolute() else OUTPUT_ROOT / p


def _write_json(apartment: Apartment, target: Path) -> Path:
    try:
        ensure_dir(target.parent)
        target.write_text(apartment.to_json(), encoding="utf-8")
    except OSError as e:
        raise PersistenceError(f"Failed to write {target}: {e}") from e
    return target


def _file_name(apartment: Apartment, index: Optional[int] = None) -> str:
    if apartment.id:
        return f"{apartment.id}.json"
    return "apartment.json" if index is None else f"apartment_{index}.json"


def save_to_json(apartment: Apartment, file_path: str = "") -> Path:
    """
    Relative paths land under RIELTOR_OUTDIR. A directory (existing, empty
    or ending with a separator) gets ``<id>.json``; any other name is forced
    to the ``.json`` extension.
    """
    target = _resolve(file_path)
    if not file_path or file_path.endswith(("/", "\\")) or target.is_dir():
        target = target / _file_name(apartment)
    else:
        target = target.with_suffix(".json")
    return _write_json(apartment, target)


def save_apartments_to_directory(apartments: Iterable[Apartment], file_path: str = "") -> Path:
    name = file_path or datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    outdir = _resolve(name)
    if outdir.is_file():
        raise PersistenceError("The specified path is a file. Please provide a directory.")
    try:
        ensure_dir(outdir)
    except OSError as e:
        raise PersistenceError(f"Failed to create output directory: {outdir}. Error: {e}") from e

    for i, apartment in enumerate(apartments):
        if not apartment.id:
            log.warning("Apartment #{} has no id, saving as {}", i, _file_name(apartment, i))
        try:
            _write_json(apartment, outdir / _file_name(apartment, i))
        except PersistenceError as e:
            # one bad file does not lose the rest of the batch
            log.error("Failed to save apartment {}: {}", apartment.id, e)
    return outdir


def _setup_logging() -> None:
    log.remove()
    log.add(sys.stderr, level="DEBUG" if os.getenv("RIELTOR_DEBUG", "0") != "0" else "INFO")


def _credits() -> None:
    print("Rieltor.ua apartment parser")
    print(f"Version: {VERSION}")
    print("Use this tool for educational or personal purposes only.")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="scrape_rieltor",
        description="Parse rieltor.ua apartment pages (URL or saved HTML) to JSON.",
    )
    sub = ap.add_subparsers(dest="command")

    p = sub.add_parser("parse", help="Parse a single apartment page")
    p.add_argument("source", help="Apartment URL or path to a saved HTML page")
    p.add_argument("output", nargs="?", default="",
                   help="JSON file or directory (default: RIELTOR_OUTDIR/<id>.json)")

    pl = sub.add_parser("parse_list", help="Parse every apartment linked from a list page")
    pl.add_argument("source", help="Apartment list URL or path to a saved HTML page")
    pl.add_argument("output", nargs="?", default="",
                    help="Output directory (default: RIELTOR_OUTDIR/<timestamp>)")

    sub.add_parser("credits", help="Show version and credits")
    return ap


def main(argv: Optional[list] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if not args.command:
        print("No command provided. Use `--help` for more information.", file=sys.stderr)
        return 2
    if args.command == "credits":
        _credits()
        return 0

    _setup_logging()
    print(f"[.] Processing: {args.source}")
    try:
        if args.command == "parse":
            apartment = parse_apartment(args.source)
            result = save_to_json(apartment, args.output)
        else:
            apartments = asyncio.run(parse_apartment_list(args.source))
            result = save_apartments_to_directory(apartments, args.output)
            print(f"[OK] {len(apartments)} apartments parsed")
    except ScrapeError as e:
        print(f"[FAIL] {args.source} → {e}", file=sys.stderr)
        return 1

    print(f"[OK] Parsed apartment data saved to '{result}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
