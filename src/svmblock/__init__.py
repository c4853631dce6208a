"""svmblock: LibSVM / SVM-light text to CSR-style columnar blocks."""

from svmblock.block import (
    BlockAccumulator,
    BlockArrays,
    Row,
    RowBlock,
    merge_blocks,
    resolve_indexing_mode,
)
from svmblock.errors import (
    BlockInvariantError,
    ConfigurationError,
    FieldConsistencyError,
    IncompleteFeaturePairError,
    MalformedQidError,
    ParseError,
    SvmBlockError,
)
from svmblock.parser import LibSVMParser, parse_block
from svmblock.source import iter_file_chunks, load_file, parse_blocks, split_line_aligned
from svmblock.types import IndexingMode, ParserConfig

__all__ = [
    "BlockAccumulator",
    "BlockArrays",
    "BlockInvariantError",
    "ConfigurationError",
    "FieldConsistencyError",
    "IncompleteFeaturePairError",
    "IndexingMode",
    "LibSVMParser",
    "MalformedQidError",
    "ParseError",
    "ParserConfig",
    "Row",
    "RowBlock",
    "SvmBlockError",
    "iter_file_chunks",
    "load_file",
    "merge_blocks",
    "parse_block",
    "parse_blocks",
    "resolve_indexing_mode",
    "split_line_aligned",
]
