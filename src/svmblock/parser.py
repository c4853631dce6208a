"""LibSVM block parser.

Grammar handled per line (blank = space or tab)::

    line    := blank* row? blank* comment?
    row     := label (':' weight)? (blank+ 'qid:' uint)? (blank+ index ':' value)*
    comment := '#' any-text-to-end-of-line

A line whose label does not parse contributes no row.  Feature tokens that
are not a complete ``index:value`` pair are skipped unless the config asks
for strict pairs.
"""
from __future__ import annotations

from svmblock.block import (
    UINT64_MAX,
    BlockAccumulator,
    RowBlock,
    resolve_indexing_mode,
)
from svmblock.errors import IncompleteFeaturePairError, MalformedQidError, ParseError
from svmblock.scanning import (
    Buffer,
    iter_line_spans,
    parse_number_pair,
    parse_unsigned,
    skip_blank_and_comment,
    skip_blanks,
    skip_token,
)
from svmblock.types import ParserConfig

_QID_PREFIX = b"qid:"


class LibSVMParser:
    """Parses line-aligned byte ranges into ``RowBlock`` columns.

    The parser holds only its frozen config, so one instance can parse
    independent blocks from several threads at once.
    """

    __slots__ = ("config", "_comment", "_strict")

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config if config is not None else ParserConfig()
        self._comment = self.config.comment[0]
        self._strict = self.config.strict_pairs

    def parse_block(
        self,
        data: Buffer | str,
        begin: int = 0,
        end: int | None = None,
        out: RowBlock | None = None,
    ) -> RowBlock:
        """Parse ``data[begin:end]`` into ``out`` (cleared first) and return it."""
        if isinstance(data, str):
            try:
                data = data.encode("ascii")
            except UnicodeEncodeError as exc:
                bad = exc.start
                line_start = max(data.rfind("\n", 0, bad), data.rfind("\r", 0, bad)) + 1
                raise ParseError(
                    f"Input must be ASCII text, found {data[bad]!r}",
                    position=line_start,
                ) from None
        block = out if out is not None else RowBlock()
        acc = BlockAccumulator(block)
        for line_begin, line_end in iter_line_spans(data, begin, end):
            self._parse_line(data, line_begin, line_end, acc)
        acc.finish()
        resolve_indexing_mode(block.index, self.config.indexing_mode, acc.min_index)
        return block

    def _parse_line(
        self,
        data: Buffer,
        line_begin: int,
        line_end: int,
        acc: BlockAccumulator,
    ) -> None:
        comment = self._comment
        p = line_begin + skip_blank_and_comment(data, line_begin, line_end, comment)

        # label[:weight]
        head = parse_number_pair(data, p, line_end)
        if head.count == 0:
            return
        weight = head.second if head.count == 2 else None
        acc.start_row(head.first, weight, position=line_begin)  # type: ignore[arg-type]

        # qid:<uint>
        p = skip_blanks(data, head.cursor, line_end)
        qid: int | None = None
        if p + len(_QID_PREFIX) <= line_end and data[p:p + len(_QID_PREFIX)] == _QID_PREFIX:
            qid, p = parse_unsigned(data, p + len(_QID_PREFIX), line_end)
            if qid is None or qid > UINT64_MAX:
                raise MalformedQidError(
                    "qid must be an unsigned 64-bit integer",
                    position=line_begin,
                )
        acc.set_qid(qid, position=line_begin)

        # index:value ...
        while p < line_end:
            p += skip_blank_and_comment(data, p, line_end, comment)
            if p >= line_end:
                break
            pair = parse_number_pair(data, p, line_end, int, float)
            if pair.count == 2:
                acc.add_feature(pair.first, pair.second)  # type: ignore[arg-type]
                p = pair.cursor
                continue
            if self._strict:
                token = bytes(data[p:skip_token(data, p, line_end, comment)])
                raise IncompleteFeaturePairError(
                    f"Found incomplete feature:value pair {token!r}",
                    position=line_begin,
                )
            p = pair.cursor if pair.count == 1 else skip_token(data, p, line_end, comment)


def parse_block(
    data: Buffer | str,
    config: ParserConfig | None = None,
    *,
    begin: int = 0,
    end: int | None = None,
) -> RowBlock:
    """One-shot helper: parse a block with a throwaway parser."""
    return LibSVMParser(config).parse_block(data, begin, end)
