"""Exception hierarchy for LibSVM block parsing.

All errors raised while configuring or running a parser derive from
``SvmBlockError``; parse failures are scoped to the block being parsed and
leave the caller's output columns in an unspecified, partially filled state.
"""
from __future__ import annotations


class SvmBlockError(Exception):
    """Base class for every error raised by svmblock."""


class ConfigurationError(SvmBlockError, ValueError):
    """Raised when a ``ParserConfig`` is built from unsupported options."""


class ParseError(SvmBlockError, ValueError):
    """Raised when a block cannot be parsed.

    ``position`` is the byte offset (within the parsed buffer) of the start
    of the offending line, or ``None`` when the error is not tied to a line.
    """

    def __init__(self, message: str, *, position: int | None = None) -> None:
        if position is not None:
            message = f"{message} (line at byte {position})"
        super().__init__(message)
        self.position = position


class FieldConsistencyError(ParseError):
    """Weight or qid presence differs from earlier rows of the same block."""


class IncompleteFeaturePairError(ParseError):
    """A feature token is not a complete ``index:value`` pair (strict mode)."""


class MalformedQidError(ParseError):
    """A ``qid:`` prefix is not followed by an unsigned 64-bit integer."""


class BlockInvariantError(SvmBlockError, AssertionError):
    """A ``RowBlock`` violates the CSR column invariants."""
