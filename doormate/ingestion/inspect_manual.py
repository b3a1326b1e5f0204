"""Print the sections the assistant would select from a manual."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from doormate.config import get_settings
from doormate.context.composer import read_manual_sections
from doormate.errors import DoorMateError
from doormate.ingestion.extractor import extract_section

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("pdf", type=Path, help="Path to the manual PDF")
    parser.add_argument("--query", help="Question used to filter sections")
    parser.add_argument("--start", type=int, help="First page of a raw page range")
    parser.add_argument("--end", type=int, help="Last page of a raw page range")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=get_settings().log_level)
    args = build_parser().parse_args(argv)
    try:
        if args.start is not None or args.end is not None:
            start = args.start if args.start is not None else 1
            end = args.end if args.end is not None else start
            print(extract_section(args.pdf, start, end))
            return 0
        sections = read_manual_sections(args.pdf, args.query)
    except DoorMateError as exc:
        logger.error("%s", exc)
        return 1

    for section in sections:
        print(json.dumps(section.model_dump(), ensure_ascii=False))
    logger.info("Printed %s sections from %s", len(sections), args.pdf)
    return 0


if __name__ == "__main__":
    sys.exit(main())
