"""Parser configuration types."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from svmblock.errors import ConfigurationError

SUPPORTED_FORMAT = "libsvm"

type IncompletePairPolicy = Literal["skip", "error"]

_PAIR_POLICIES: frozenset[str] = frozenset({"skip", "error"})


class IndexingMode(Enum):
    """Origin of the feature indices found in the text.

    Internal storage is always 0-based once a block has been resolved.
    """

    AUTO = "auto"
    ZERO_BASED = "zero_based"
    ONE_BASED = "one_based"

    @classmethod
    def from_int(cls, value: int) -> IndexingMode:
        """Map the signed-int convention: >0 one-based, 0 zero-based, <0 auto."""
        if value > 0:
            return cls.ONE_BASED
        if value == 0:
            return cls.ZERO_BASED
        return cls.AUTO

    @classmethod
    def parse(cls, raw: str | int | IndexingMode) -> IndexingMode:
        """Accept an enum member, a signed int, or a name such as ``"auto"``."""
        if isinstance(raw, IndexingMode):
            return raw
        if isinstance(raw, int):
            return cls.from_int(raw)
        text = raw.strip().lower()
        aliases = {
            "auto": cls.AUTO,
            "zero_based": cls.ZERO_BASED,
            "zero": cls.ZERO_BASED,
            "one_based": cls.ONE_BASED,
            "one": cls.ONE_BASED,
        }
        if text in aliases:
            return aliases[text]
        try:
            return cls.from_int(int(text))
        except ValueError:
            raise ConfigurationError(f"Unknown indexing mode: {raw!r}") from None


@dataclass(frozen=True, slots=True)
class ParserConfig:
    """Immutable settings shared by every block parse of one parser.

    ``on_incomplete_pair`` decides what happens to a feature token that is
    not a full ``index:value`` pair: ``"skip"`` drops it and keeps scanning
    the line, ``"error"`` fails the block.
    """

    format: str = SUPPORTED_FORMAT
    indexing_mode: IndexingMode = IndexingMode.ZERO_BASED
    comment: bytes = b"#"
    on_incomplete_pair: IncompletePairPolicy = "skip"

    def __post_init__(self) -> None:
        if self.format != SUPPORTED_FORMAT:
            raise ConfigurationError(
                f"Unsupported format {self.format!r}, expected {SUPPORTED_FORMAT!r}",
            )
        if not isinstance(self.indexing_mode, IndexingMode):
            raise ConfigurationError(
                f"indexing_mode must be an IndexingMode, got {self.indexing_mode!r}",
            )
        if (
            not isinstance(self.comment, bytes)
            or len(self.comment) != 1
            or self.comment in (b" ", b"\t", b"\n", b"\r")
        ):
            raise ConfigurationError(
                f"comment must be a single non-blank byte, got {self.comment!r}",
            )
        if self.on_incomplete_pair not in _PAIR_POLICIES:
            raise ConfigurationError(
                f"on_incomplete_pair must be one of {sorted(_PAIR_POLICIES)}, "
                f"got {self.on_incomplete_pair!r}",
            )

    @property
    def strict_pairs(self) -> bool:
        return self.on_incomplete_pair == "error"

    @classmethod
    def from_mapping(cls, args: Mapping[str, str]) -> ParserConfig:
        """Build a config from string key/value options (e.g. URI arguments).

        Unknown keys are rejected so that typos do not silently fall back to
        defaults.
        """
        known = {"format", "indexing_mode", "comment", "on_incomplete_pair"}
        unknown = sorted(set(args) - known)
        if unknown:
            raise ConfigurationError(f"Unknown parser option(s): {', '.join(unknown)}")
        kwargs: dict[str, object] = {}
        if "format" in args:
            kwargs["format"] = args["format"]
        if "indexing_mode" in args:
            kwargs["indexing_mode"] = IndexingMode.parse(args["indexing_mode"])
        if "comment" in args:
            try:
                kwargs["comment"] = args["comment"].encode("ascii")
            except UnicodeEncodeError:
                raise ConfigurationError(
                    f"comment must be an ASCII character, got {args['comment']!r}",
                ) from None
        if "on_incomplete_pair" in args:
            kwargs["on_incomplete_pair"] = args["on_incomplete_pair"]
        return cls(**kwargs)  # type: ignore[arg-type]
