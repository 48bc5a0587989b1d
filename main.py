#!/usr/bin/env python3
"""
CSV Plotter - Main Entry Point

Load one or more CSV files, overlay their columns as line series, and
export the plot.

Usage:
    python main.py run1.csv run2.csv                     # Print the file list
    python main.py run1.csv --export out/                # Save plot_run1.png in out/
    python main.py a.csv b.csv --style b.csv=dot --hide a.csv --html plot.html
    python main.py data.csv --x-title "Time (s)" --y-title "Voltage (V)" --show
    python main.py data.csv --verbose                    # Show debug log on the console
"""

import argparse
import sys

from data_ops.ingest import UploadedFile
from rendering.figure import write_html
from rendering.styles import LINE_STYLES, style_label
from session.controller import PlotSession
from session.logging import setup_logging


def parse_style_arg(value: str) -> tuple[str, str]:
    """Parse a ``NAME=STYLE`` command-line argument."""
    name, sep, style = value.rpartition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Expected NAME=STYLE, got '{value}'")
    if style not in LINE_STYLES:
        raise argparse.ArgumentTypeError(
            f"Unknown style '{style}'. Choose from: {', '.join(LINE_STYLES)}"
        )
    return name, style


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Upload and compare CSV files.")
    parser.add_argument("files", nargs="+", help="CSV files to load (first column is the x axis)")
    parser.add_argument("--x-title", default="", help="X-axis title (default: first column header)")
    parser.add_argument("--y-title", default="", help="Y-axis title (default: 'Value')")
    parser.add_argument("--style", action="append", type=parse_style_arg, default=[],
                        metavar="NAME=STYLE", help="Line style for a file (repeatable)")
    parser.add_argument("--hide", action="append", default=[], metavar="NAME",
                        help="Deselect a loaded file (repeatable)")
    parser.add_argument("--export", metavar="DIR", help="Export the plot as PNG into DIR")
    parser.add_argument("--format", choices=["png", "pdf"], default="png",
                        help="Image format for --export")
    parser.add_argument("--html", metavar="PATH", help="Write an interactive HTML page")
    parser.add_argument("--show", action="store_true", help="Open the plot in a browser")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")
    return parser


def print_file_list(session: PlotSession) -> None:
    """Print the loaded files with their selection, style and trace count."""
    rows = session.file_list()
    if not rows:
        print("No data to display.")
        return
    print("Uploaded Files")
    print("-" * 60)
    for row in rows:
        mark = "[x]" if row["selected"] else "[ ]"
        flag = " (downsampled)" if row["downsampled"] else ""
        count = row["trace_count"]
        print(f"  {mark} {row['name']}{flag}  "
              f"{style_label(row['style'])}, {count} trace{'s' if count != 1 else ''}")
    print()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)

    session = PlotSession()
    result = session.submit_files([UploadedFile.from_path(p) for p in args.files])

    for name, reason in result.skipped.items():
        print(f"Skipped {name}: {reason.replace('_', ' ')}")

    exit_code = 0
    try:
        for name, style in args.style:
            session.set_style(name, style)
        for name in args.hide:
            session.set_selected(name, False)
    except KeyError as e:
        print(f"Error: {e.args[0]} is not a loaded file", file=sys.stderr)
        exit_code = 2

    session.set_axis_titles(args.x_title, args.y_title)
    print_file_list(session)

    if session.last_error:
        print(f"Error: {session.last_error}", file=sys.stderr)
        exit_code = exit_code or 1

    request = session.plot_request()
    if request.is_empty:
        return exit_code

    if args.export:
        out = session.export_image(args.export, format=args.format)
        print(out.get("filepath") or f"Export failed: {out['message']}")
        if out["status"] != "success":
            exit_code = exit_code or 1
    if args.html:
        out = write_html(request, args.html)
        print(out["filepath"])
    if args.show:
        session.figure().show(config=request.config)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
