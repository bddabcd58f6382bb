"""
camt_reader - Main Entry Point

Reads one camt.053 file and prints a statement report.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from camt_reader.core.config import ReaderConfig, load_config
from camt_reader.core.exceptions import CamtReaderException
from camt_reader.iso20022.camt.camt053 import Camt053Parser
from camt_reader.report import format_json_report, format_text_report

logger = logging.getLogger("camt_reader")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="camt-reader",
        description="Read an ISO 20022 camt.053.001.02 bank statement and print a report",
    )
    parser.add_argument("path", type=Path, help="camt.053 XML file")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides configuration)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["text", "json"],
        default="text",
        help="Report format",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else ReaderConfig.load_from_env()
        config.validate()
    except CamtReaderException as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    level = args.log_level or config.log_level.value
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        data = args.path.read_bytes()
        document = Camt053Parser(config).parse(data)
    except OSError as e:
        logger.debug(f"Cannot read {args.path}", exc_info=True)
        print(f"error: cannot read {args.path}: {e}", file=sys.stderr)
        return 1
    except CamtReaderException as e:
        logger.debug(f"Failed to parse {args.path}", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.output_format == "json":
        print(format_json_report(document, indent=config.json_indent))
    else:
        print(format_text_report(document))
    return 0


if __name__ == "__main__":
    sys.exit(main())
