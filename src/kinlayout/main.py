"""
Command line entry point:
1) Load a graph snapshot (JSON document or SQLite store).
2) Validate it for cycles, impossible ages and date ordering.
3) Compute the generational layout.
4) Write the projected positions, and optionally a plot and a DOT document.
"""

import argparse
from dataclasses import asdict
import json
import logging
from pathlib import Path
import sqlite3
import sys

from kinlayout.config import DEFAULT_VIEW_TYPE, VIEW_TYPES, LayoutConfig, load_config
from kinlayout.database import load_snapshot
from kinlayout.engine import compute_layout
from kinlayout.parsing import Snapshot, load_snapshot_json
from kinlayout.plotting import plot_layout, render_dot, write_dot
from kinlayout.validation import validate_graph
from kinlayout.views import project

SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")
MAX_WARNINGS_SHOWN = 10


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kinlayout", description="Compute a generational layout for a family graph snapshot."
    )
    parser.add_argument("input", type=Path, help="Graph snapshot: JSON {nodes, edges} or SQLite database.")
    parser.add_argument(
        "--format",
        choices=("json", "sqlite"),
        help="Input format (default: guessed from the file extension).",
    )
    parser.add_argument("--family-id", help="Only lay out this family (SQLite input).")
    parser.add_argument("--view", choices=VIEW_TYPES, default=DEFAULT_VIEW_TYPE, help="View type.")
    parser.add_argument("--config", type=Path, help="JSON file of layout parameter overrides.")
    parser.add_argument(
        "-o",
        "--positions",
        type=Path,
        help="Write projected positions as JSON here (default: stdout).",
    )
    parser.add_argument("--plot", type=Path, help="Save a matplotlib rendering (png, svg or pdf).")
    parser.add_argument(
        "--dot",
        type=Path,
        help="Save a Graphviz document; .dot/.gv saves source, png/svg/pdf renders with Graphviz.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser


def read_snapshot(path: Path, fmt: str | None, family_id: str | None) -> Snapshot:
    if fmt is None:
        fmt = "sqlite" if path.suffix.lower() in SQLITE_SUFFIXES else "json"
    if fmt == "sqlite":
        if not path.exists():
            raise ValueError(f"Database not found: {path}")
        conn = sqlite3.connect(path)
        try:
            return load_snapshot(conn, family_id)
        finally:
            conn.close()
    return load_snapshot_json(path)


def run(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else LayoutConfig()

    print(f"Loading graph snapshot: {args.input}", file=sys.stderr)
    nodes, edges = read_snapshot(args.input, args.format, args.family_id)
    print(f"  Found {len(nodes)} persons and {len(edges)} relationships", file=sys.stderr)

    print("Computing layout...", file=sys.stderr)
    result = compute_layout(nodes, edges, config=config)
    print(
        f"  Placed {len(result)} persons over {result.max_level + 1} generations "
        f"in {len(result.units)} family units",
        file=sys.stderr,
    )

    print("Validating graph...", file=sys.stderr)
    warnings = validate_graph(result.graph)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:", file=sys.stderr)
        for w in warnings[:MAX_WARNINGS_SHOWN]:
            print(f"    - {w}", file=sys.stderr)
        if len(warnings) > MAX_WARNINGS_SHOWN:
            print(f"    ... and {len(warnings) - MAX_WARNINGS_SHOWN} more", file=sys.stderr)
    else:
        print("  No validation issues found", file=sys.stderr)

    points = {pid: asdict(point) for pid, point in project(result, args.view).items()}
    document = json.dumps({"view": args.view, "positions": points}, indent=2)
    if args.positions:
        args.positions.write_text(document + "\n", encoding="utf-8")
        print(f"Positions saved to {args.positions}", file=sys.stderr)
    else:
        print(document)

    if args.plot:
        plot_layout(result, args.view, args.plot)

    if args.dot:
        if args.dot.suffix.lower() in (".dot", ".gv"):
            write_dot(result, args.dot, args.view)
        else:
            render_dot(result, args.dot, args.view)

    print("Done!", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args)
    except (ValueError, OSError, sqlite3.Error) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
