#!/usr/bin/env python3
"""
Runs one extraction on a lab report file and prints the JSON result.

Usage:
    python scripts/extract_report.py path/to/report.pdf
    python scripts/extract_report.py scan.jpg --force ocr --no-insights
    python scripts/extract_report.py scan.png --timeout 60 --stats
"""

import argparse
import json
import sys
from pathlib import Path

from loguru import logger

# Project root on the path for clean imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import LOG_LEVEL, PREFER_AI, validate_config  # noqa: E402
from contracts.extraction_result_dto import ExtractionOptions, RawDocument  # noqa: E402
from medextract.extraction.application import (  # noqa: E402
    ExtractionComponentFactory,
    extraction_stats,
    validate_extraction_result,
)

MIME_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract health parameters from a lab report")
    parser.add_argument("path", help="Report file (PDF, PNG or JPEG)")
    parser.add_argument("--force", choices=["ai", "ocr"], help="Run only this method")
    parser.add_argument("--no-ai-first", action="store_true", help="In auto mode, skip the AI attempt")
    parser.add_argument("--no-insights", action="store_true", help="Do not attach insights")
    parser.add_argument("--timeout", type=float, help="Request deadline in seconds")
    parser.add_argument("--stats", action="store_true", help="Print validation report and stats to stderr")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Loguru level (default from settings)")
    return parser


def main() -> int:
    args = build_parser().parse_args()

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    try:
        validate_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    path = Path(args.path)
    mime_type = MIME_TYPES.get(path.suffix.lower())
    if mime_type is None:
        logger.error(f"Unsupported file type: {path.suffix} (expected one of {sorted(MIME_TYPES)})")
        return 2
    if not path.exists():
        logger.error(f"File not found: {path}")
        return 2

    document = RawDocument(buffer=path.read_bytes(), mime_type=mime_type)
    options = ExtractionOptions(
        force_method=args.force,
        prefer_ai=PREFER_AI and not args.no_ai_first,
        include_insights=not args.no_insights,
        timeout_seconds=args.timeout,
    )

    orchestrator = ExtractionComponentFactory.create_orchestrator()
    result = orchestrator.extract(document, options)

    print(json.dumps(result.to_wire(), indent=2, ensure_ascii=False))

    if args.stats:
        report = validate_extraction_result(result)
        logger.info(f"Stats: {extraction_stats(result)}")
        if report.is_valid:
            logger.info("Validation: OK")
        else:
            for issue in report.issues:
                logger.warning(f"Validation: {issue}")

    return 0 if result.method.value != "failed" else 1


if __name__ == "__main__":
    sys.exit(main())
