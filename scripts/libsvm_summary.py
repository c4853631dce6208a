#!/usr/bin/env python3
"""Parse a LibSVM / SVM-light file and report what it contains.

Prints a JSON summary (row count, nnz, index range, optional-field
presence, label distribution) and optionally exports the parsed rows to a
DuckDB file for ad-hoc SQL.

Usage::

    python3 scripts/libsvm_summary.py data/train.svm
    python3 scripts/libsvm_summary.py data/train.svm --indexing-mode auto --threads 4
    python3 scripts/libsvm_summary.py data/rank.svm --strict --duckdb out/rank.duckdb
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from svmblock.errors import SvmBlockError
from svmblock.export import summarize_block, write_duckdb
from svmblock.io_utils import dumps_json, save_json
from svmblock.source import DEFAULT_CHUNK_SIZE, load_file
from svmblock.types import IndexingMode, ParserConfig

log = logging.getLogger("libsvm_summary")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize a LibSVM / SVM-light file.",
    )
    parser.add_argument("input", type=Path, help="Path to the LibSVM text file")
    parser.add_argument(
        "--indexing-mode", default="0",
        help="Feature index origin: 'auto', '0' (zero-based) or '1' (one-based) "
             "(default: 0)",
    )
    parser.add_argument(
        "--threads", type=int, default=1,
        help="Number of parser threads per chunk (default: 1)",
    )
    parser.add_argument(
        "--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE,
        help=f"Bytes read per chunk (default: {DEFAULT_CHUNK_SIZE})",
    )
    parser.add_argument(
        "--strict", action="store_true",
        help="Fail on incomplete index:value pairs instead of skipping them",
    )
    parser.add_argument("--duckdb", type=Path, default=None, help="Export rows to DuckDB")
    parser.add_argument("--output", type=Path, default=None, help="Write summary JSON here")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ParserConfig(
            indexing_mode=IndexingMode.parse(args.indexing_mode),
            on_incomplete_pair="error" if args.strict else "skip",
        )
        block = load_file(
            args.input, config, nthread=args.threads, chunk_size=args.chunk_size,
        )
    except SvmBlockError as exc:
        log.error("Failed to parse %s: %s", args.input, exc)
        return 1

    summary = summarize_block(block)
    summary["input"] = str(args.input)
    summary["indexing_mode"] = config.indexing_mode.value

    if args.duckdb is not None:
        try:
            write_duckdb(block, args.duckdb)
        except FileExistsError as exc:
            log.error("DuckDB export failed: %s", exc)
            return 1
        log.info("Exported %d rows to %s", block.size, args.duckdb)

    if args.output is not None:
        save_json(summary, args.output)
        log.info("Summary written to %s", args.output)
    else:
        sys.stdout.write(dumps_json(summary).decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
