"""Byte-level scanning primitives for LibSVM text.

Every helper works on a bytes-like buffer plus explicit ``[pos, end)``
bounds and never reads at or beyond ``end``.  Positions are plain ints into
the caller's buffer; nothing here copies a line.

Token classes:
  blank   — space or tab
  number  — maximal run of ``0-9 . + - e E``; the converter decides whether
            the run is actually a valid int/float
  line    — terminated by ``\\n`` or ``\\r`` (terminators excluded)
"""
from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

type Buffer = bytes | bytearray | memoryview
type Converter = Callable[[bytes], object]

BLANK_BYTES: frozenset[int] = frozenset(b" \t")
NUMBER_BYTES: frozenset[int] = frozenset(b"0123456789.+-eE")
DIGIT_BYTES: frozenset[int] = frozenset(b"0123456789")

_TERMINATOR_RE = re.compile(rb"[\r\n]")


# ---------------------------------------------------------------------------
# NumberPairParser
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PairResult:
    """Outcome of ``parse_number_pair``.

    ``count`` is 0, 1 or 2.  ``first``/``second`` are ``None`` when not
    parsed.  ``cursor`` is where scanning should resume.
    """

    count: int
    first: object | None
    second: object | None
    cursor: int


def skip_blanks(data: Buffer, pos: int, end: int) -> int:
    """Return the first position at or after ``pos`` that is not a blank."""
    while pos < end and data[pos] in BLANK_BYTES:
        pos += 1
    return pos


def scan_number(data: Buffer, pos: int, end: int) -> int:
    """Return the end of the number-character run starting at ``pos``."""
    while pos < end and data[pos] in NUMBER_BYTES:
        pos += 1
    return pos


def _convert(data: Buffer, start: int, stop: int, convert: Converter) -> object | None:
    if start == stop:
        return None
    try:
        return convert(bytes(data[start:stop]))
    except ValueError:
        return None


def parse_number_pair(
    data: Buffer,
    pos: int,
    end: int,
    first: Converter = float,
    second: Converter = float,
    sep: int = ord(":"),
) -> PairResult:
    """Parse ``<number>[<sep><number>]`` from ``data[pos:end]``.

    Leading blanks are skipped.  When the first number is missing or does
    not convert, the result has ``count == 0`` and the cursor is left at
    ``pos``.  When the separator does not follow the first number directly,
    or the second number is missing/malformed, the result has ``count == 1``
    and the cursor sits right after the first number.
    """
    start = skip_blanks(data, pos, end)
    stop = scan_number(data, start, end)
    value1 = _convert(data, start, stop, first)
    if value1 is None:
        return PairResult(0, None, None, pos)
    if stop >= end or data[stop] != sep:
        return PairResult(1, value1, None, stop)
    start2 = stop + 1
    stop2 = scan_number(data, start2, end)
    value2 = _convert(data, start2, stop2, second)
    if value2 is None:
        return PairResult(1, value1, None, stop)
    return PairResult(2, value1, value2, stop2)


def parse_unsigned(data: Buffer, pos: int, end: int) -> tuple[int | None, int]:
    """Parse a run of decimal digits; returns ``(value, cursor)``.

    ``value`` is ``None`` when no digit is present at ``pos``.
    """
    stop = pos
    while stop < end and data[stop] in DIGIT_BYTES:
        stop += 1
    if stop == pos:
        return None, pos
    return int(bytes(data[pos:stop])), stop


# ---------------------------------------------------------------------------
# LineScanner
# ---------------------------------------------------------------------------


class LineSpans:
    """Restartable iterable of ``(line_begin, line_end)`` spans.

    Both ``\\n`` and ``\\r`` terminate a line.  Runs of terminators (CRLF,
    blank lines) produce no span; a final line without a terminator is
    still yielded.
    """

    __slots__ = ("_data", "_begin", "_end")

    def __init__(self, data: Buffer, begin: int = 0, end: int | None = None) -> None:
        stop = len(data) if end is None else end
        if not 0 <= begin <= stop <= len(data):
            raise ValueError(
                f"Invalid range [{begin}, {stop}) for buffer of length {len(data)}",
            )
        self._data = data
        self._begin = begin
        self._end = stop

    def __iter__(self) -> Iterator[tuple[int, int]]:
        data, pos, end = self._data, self._begin, self._end
        search = _TERMINATOR_RE.search
        while pos < end:
            match = search(data, pos, end)
            line_end = end if match is None else match.start()
            if line_end > pos:
                yield pos, line_end
            pos = line_end + 1


def iter_line_spans(data: Buffer, begin: int = 0, end: int | None = None) -> LineSpans:
    return LineSpans(data, begin, end)


# ---------------------------------------------------------------------------
# BlankCommentSkipper
# ---------------------------------------------------------------------------


def skip_blank_and_comment(
    data: Buffer,
    pos: int,
    line_end: int,
    comment: int = ord("#"),
) -> int:
    """Return how many positions to advance from ``pos``.

    The distance to the first non-blank byte, or the whole remainder of the
    line when a comment marker comes first or the line holds only blanks.
    """
    p = pos
    while p < line_end:
        byte = data[p]
        if byte == comment:
            return line_end - pos
        if byte not in BLANK_BYTES:
            return p - pos
        p += 1
    return line_end - pos


def skip_token(data: Buffer, pos: int, line_end: int, comment: int = ord("#")) -> int:
    """Return the end of the blank-delimited token at ``pos``.

    Stops early at a comment marker so that ``junk#note`` leaves the
    comment for the caller.  Always advances at least one byte when
    ``pos < line_end``.
    """
    p = pos + 1 if pos < line_end else pos
    while p < line_end and data[p] not in BLANK_BYTES and data[p] != comment:
        p += 1
    return p
