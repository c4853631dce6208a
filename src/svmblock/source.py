"""Splitting input into line-aligned blocks and parsing them in parallel.

The block parser only ever sees whole lines.  This module carves a buffer
(or a file read in chunks) into such ranges, fans the ranges out to a
thread pool, and stitches the resulting blocks back together in input
order.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path

from svmblock.block import RowBlock, merge_blocks, resolve_indexing_mode
from svmblock.parser import LibSVMParser
from svmblock.types import IndexingMode, ParserConfig

log = logging.getLogger("svmblock.source")

DEFAULT_CHUNK_SIZE = 64 * 1024 * 1024  # 64MB per read


def _last_line_break(data: bytes, start: int, stop: int) -> int:
    """Position of the last ``\\n``/``\\r`` in ``data[start:stop]``, or -1."""
    return max(data.rfind(b"\n", start, stop), data.rfind(b"\r", start, stop))


def split_line_aligned(data: bytes, nparts: int) -> list[tuple[int, int]]:
    """Cut ``data`` into at most ``nparts`` ranges that end on line breaks.

    Each nominal cut point is moved back to just after the preceding line
    break, so a range never begins mid-line.  The ranges cover ``data``
    exactly and empty ranges are dropped.
    """
    if nparts < 1:
        raise ValueError(f"nparts must be >= 1, got {nparts}")
    size = len(data)
    if size == 0:
        return []
    step = -(-size // nparts)
    cuts = [0]
    for part in range(1, nparts):
        nominal = min(part * step, size)
        cut = _last_line_break(data, cuts[-1], nominal) + 1
        cuts.append(max(cut, cuts[-1]))
    cuts.append(size)
    return [(lo, hi) for lo, hi in zip(cuts, cuts[1:]) if hi > lo]


def iter_file_chunks(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the file's bytes in chunks that end on a line break.

    The partial line at the end of each read is carried into the next
    chunk; only the final chunk may lack a terminator.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    carry = b""
    with open(path, "rb") as f:
        while True:
            raw = f.read(chunk_size)
            if not raw:
                break
            buf = carry + raw
            cut = _last_line_break(buf, len(carry), len(buf)) + 1
            if cut == 0:
                carry = buf
                continue
            carry = buf[cut:]
            yield buf[:cut]
    if carry:
        yield carry


def _deferred_parser(parser: LibSVMParser) -> LibSVMParser:
    """Zero-based twin of an AUTO parser, so the base can be decided later."""
    if parser.config.indexing_mode is not IndexingMode.AUTO:
        return parser
    return LibSVMParser(replace(parser.config, indexing_mode=IndexingMode.ZERO_BASED))


def _resolve_jointly(blocks: list[RowBlock], mode: IndexingMode) -> bool:
    """Apply one index-base decision, taken from all blocks, to each block."""
    if mode is not IndexingMode.AUTO:
        return False
    mins = [min(block.index) for block in blocks if block.index]
    global_min = min(mins) if mins else None
    shifted = False
    for block in blocks:
        shifted |= resolve_indexing_mode(block.index, mode, global_min)
    return shifted


def _parse_ranges(parser: LibSVMParser, data: bytes, nthread: int) -> list[RowBlock]:
    ranges = split_line_aligned(data, max(1, nthread))
    if len(ranges) <= 1:
        return [parser.parse_block(data, lo, hi) for lo, hi in ranges]
    with ThreadPoolExecutor(max_workers=nthread) as pool:
        futures = [pool.submit(parser.parse_block, data, lo, hi) for lo, hi in ranges]
        return [future.result() for future in futures]


def parse_blocks(parser: LibSVMParser, data: bytes, nthread: int = 1) -> list[RowBlock]:
    """Parse ``data`` as ``nthread`` line-aligned blocks, in input order.

    Each block gets its own ``RowBlock``; the parser config is shared
    read-only.  The first block error propagates to the caller.  In AUTO
    mode the index base is decided once over all blocks, so the result
    does not depend on ``nthread``.
    """
    blocks = _parse_ranges(_deferred_parser(parser), data, nthread)
    _resolve_jointly(blocks, parser.config.indexing_mode)
    return blocks


def load_file(
    path: Path,
    config: ParserConfig | None = None,
    *,
    nthread: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> RowBlock:
    """Parse a whole LibSVM file into one merged ``RowBlock``.

    In AUTO mode the index base is decided once for the whole file.
    """
    parser = LibSVMParser(config)
    raw_parser = _deferred_parser(parser)
    blocks: list[RowBlock] = []
    t0 = time.monotonic()
    total_bytes = 0
    for chunk_no, chunk in enumerate(iter_file_chunks(path, chunk_size), 1):
        total_bytes += len(chunk)
        parsed = _parse_ranges(raw_parser, chunk, nthread)
        blocks.extend(parsed)
        log.debug(
            "Chunk %d: %d bytes, %d blocks, %d rows",
            chunk_no, len(chunk), len(parsed), sum(b.size for b in parsed),
        )
    merged = merge_blocks(blocks)
    if _resolve_jointly([merged], parser.config.indexing_mode):
        log.debug("No feature index 0 in %s, treating indices as 1-based", path)
    log.info(
        "Parsed %s: %d rows, %d features from %d bytes in %.2fs",
        path, merged.size, merged.nnz, total_bytes, time.monotonic() - t0,
    )
    return merged
