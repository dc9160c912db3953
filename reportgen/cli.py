"""
reportgen/cli.py — Command line wrapper around engine.generate_report.

    reportgen --template template.xlsx --request request.json --output-dir out/
    reportgen -t template.xlsx -r request.json --mode zip-files -o reports.zip

Exit status: 0 on success (warnings are printed, not fatal), 1 on AppError,
2 on bad arguments.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .engine import generate_report
from .errors import AppError, friendly_message
from .logger import set_level
from .naming import suggested_filename
from .request import ReportRequest


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="reportgen",
        description="Fill an XLSX template with log data according to mapping rules.",
    )
    parser.add_argument("-t", "--template", required=True, help="Template XLSX file.")
    parser.add_argument("-r", "--request", required=True, help="Request JSON (exportMode, mappingRules, logData).")
    parser.add_argument(
        "--mode",
        default=None,
        help="Override the request's exportMode (single-sheet, multi-sheet, zip-files).",
    )
    parser.add_argument("-o", "--output", default=None, help="Output file path.")
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory for the output when --output is not given (default: current directory).",
    )
    parser.add_argument(
        "--legacy-rules",
        action="store_true",
        help="Read mappingRules in the old one-source-per-rule shape.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)

    try:
        request = ReportRequest.load_json(args.request, legacy=args.legacy_rules)
        template_bytes = Path(args.template).read_bytes()
        mode = args.mode or request.export_mode
        result = generate_report(request.mapping_table, request.records, mode, template_bytes)

        if args.output:
            out_path = Path(args.output)
        else:
            out_path = Path(args.output_dir) / suggested_filename(result.export_mode)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(result.content)
    except AppError as e:
        print(f"[error] {friendly_message(e)}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    for warning in result.warnings:
        print(f"[warn] {warning.message}")
    print(f"Wrote {out_path} ({len(result.outputs)} output(s), {result.cells_written} cell(s) filled)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
