"""Command line interface.

Usage:
    tallybook -f books.journal export
    tallybook -f books.journal export -o books.json
    tallybook -f books.journal --default-commodity JPY --log-level DEBUG export
"""

import argparse
import sys
from pathlib import Path

from . import compile_string
from .errors import JournalError
from .journal import JournalHeader
from .logging_setup import configure_logging, get_logger
from .report import format_error, indent_string

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tallybook", description="Compile a plain-text double-entry journal"
    )
    parser.add_argument("-f", "--file", type=Path, required=True, help="Journal file to compile")
    parser.add_argument(
        "--default-commodity",
        default=None,
        help="Commodity used by postings that omit one, until the journal sets its own",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: $TALLYBOOK_LOG_LEVEL, else WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    export = subparsers.add_parser("export", help="Write the compiled journal as JSON")
    export.add_argument(
        "-o", "--output", type=Path, default=None, help="Output file (default: stdout)"
    )
    export.add_argument("--indent", type=int, default=None, help="Indent the JSON output")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        configure_logging(args.log_level)
    except ValueError as e:
        parser.error(str(e))

    try:
        source = args.file.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Other Error:\n{indent_string(str(e))}", file=sys.stderr)
        return 1

    header = JournalHeader(default_commodity=args.default_commodity or "")
    try:
        journal = compile_string(source, header)
    except JournalError as e:
        print(format_error(e, source, str(args.file)), file=sys.stderr)
        return 1

    if args.command == "export":
        output = journal.to_json(indent=args.indent)
        if args.output is None:
            print(output)
        else:
            args.output.write_text(output + "\n", encoding="utf-8")
            logger.info("wrote %d transactions to %s", len(journal.transactions), args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
