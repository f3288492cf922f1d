#!/usr/bin/env python3
"""
Summarize a UTF-8 text document from the command line.

This script:
1. Reads the text file
2. Runs the summarization pipeline (direct or chunked, depending on size)
3. Prints the summary followed by coverage metadata

Usage:
    python scripts/summarize_document.py book.txt
    python scripts/summarize_document.py book.txt --model haiku --concurrency 3
    python scripts/summarize_document.py book.txt --max-chunk-size 4000 --output summary.md
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
import uuid
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import get_summarization_config
from core.errors import AuthInvalidError, SummarizationFailed
from core.logging import configure_logging, end_run, start_run
from workflows.document_summarization import summarize

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize a text document")
    parser.add_argument("path", type=Path, help="UTF-8 text file to summarize")
    parser.add_argument(
        "--model",
        default=None,
        help="Model tier (haiku, sonnet, opus) or full model id",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Section jobs dispatched per batch",
    )
    parser.add_argument(
        "--max-chunk-size",
        type=int,
        default=None,
        help="Maximum characters per chunk",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the summary to this file instead of stdout",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo log records to stderr",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    if not args.path.exists():
        print(f"Error: File not found: {args.path}", file=sys.stderr)
        return 1

    text = args.path.read_text(encoding="utf-8")

    overrides = {}
    if args.concurrency is not None:
        overrides["concurrency_limit"] = args.concurrency
    if args.max_chunk_size is not None:
        overrides["max_chunk_size"] = args.max_chunk_size
    config = dataclasses.replace(get_summarization_config(), **overrides)

    logger.info(f"Summarizing {args.path} ({len(text):,} characters)")
    try:
        result = await summarize(text, args.model, config=config)
    except (SummarizationFailed, AuthInvalidError) as e:
        logger.error(f"Summarization failed: {e}")
        print(f"Error: {getattr(e, 'user_message', e)}", file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(result.summary_text, encoding="utf-8")
        print(f"Summary written to: {args.output}")
    else:
        print(result.summary_text)

    print("\n" + "=" * 60)
    print(f"Model: {result.model_name}")
    print(f"Sections summarized: {result.chunks_processed}/{result.total_chunks}")
    print(f"All sections included: {result.all_sections_included}")
    return 0


def main() -> None:
    args = parse_args()
    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        console=args.verbose,
    )
    start_run(f"cli-{uuid.uuid4().hex[:8]}")
    try:
        exit_code = asyncio.run(run(args))
    finally:
        end_run()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
