from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .api import list_sheets, number_formats_frame
from .errors import ExcelFmtError
from .model import ExtractOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract per-cell number formats from one .xlsx column")
    parser.add_argument("input", type=Path, help="Input .xlsx file")
    parser.add_argument("--sheet", help="Worksheet name (default: first sheet)")
    parser.add_argument(
        "--column",
        default="1",
        help="Column as a 1-based number or letters, e.g. 3 or C (default: 1)",
    )
    parser.add_argument(
        "--exclude-hidden",
        action="store_true",
        help="Ignore hidden sheets when selecting the worksheet",
    )
    parser.add_argument("-o", "--output", type=Path, help="Output path (default: stdout)")
    parser.add_argument(
        "--format",
        choices=("csv", "json"),
        default="csv",
        help="Output format",
    )
    parser.add_argument(
        "--list-sheets",
        action="store_true",
        help="List the workbook's sheets and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.list_sheets:
            lines = [f"{s.index}\t{s.name}\t{s.state}\t{s.path}" for s in list_sheets(args.input)]
            text = "\n".join(lines) + "\n" if lines else ""
        else:
            options = ExtractOptions(
                sheet=args.sheet,
                column=args.column,
                include_hidden_sheets=not args.exclude_hidden,
            )
            frame = number_formats_frame(args.input, options=options)
            if args.format == "json":
                text = frame.to_json(orient="records") + "\n"
            else:
                text = frame.to_csv(index=False)
    except (ExcelFmtError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
