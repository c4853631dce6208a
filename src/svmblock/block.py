"""Columnar row blocks, the per-block accumulator and index-base resolution.

A ``RowBlock`` stores one parsed block in CSR-like form:

    label   [R]          float per row
    weight  [R] or []    float per row, all-or-nothing
    qid     [R] or []    unsigned 64-bit per row, all-or-nothing
    index   [nnz]        feature indices, rows concatenated
    value   [nnz]        feature values, parallel to ``index``
    offset  [R + 1]      row i spans index[offset[i]:offset[i + 1]]
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from svmblock.errors import BlockInvariantError, FieldConsistencyError
from svmblock.types import IndexingMode

UINT64_MAX = (1 << 64) - 1


@dataclass(frozen=True, slots=True)
class Row:
    """Read-only view of a single row, detached from the block."""

    label: float
    weight: float | None
    qid: int | None
    index: tuple[int, ...]
    value: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class BlockArrays:
    """Typed numpy columns of a ``RowBlock``."""

    label: np.ndarray
    weight: np.ndarray
    qid: np.ndarray
    index: np.ndarray
    value: np.ndarray
    offset: np.ndarray


@dataclass(slots=True)
class RowBlock:
    """Output columns for one parsed block.  Append-only while parsing."""

    label: list[float] = field(default_factory=list)
    weight: list[float] = field(default_factory=list)
    qid: list[int] = field(default_factory=list)
    index: list[int] = field(default_factory=list)
    value: list[float] = field(default_factory=list)
    offset: list[int] = field(default_factory=lambda: [0])

    def clear(self) -> None:
        self.label.clear()
        self.weight.clear()
        self.qid.clear()
        self.index.clear()
        self.value.clear()
        self.offset[:] = [0]

    @property
    def size(self) -> int:
        return len(self.label)

    @property
    def nnz(self) -> int:
        return len(self.index)

    @property
    def has_weight(self) -> bool:
        return bool(self.weight)

    @property
    def has_qid(self) -> bool:
        return bool(self.qid)

    @property
    def max_index(self) -> int | None:
        return max(self.index) if self.index else None

    def __len__(self) -> int:
        return len(self.label)

    def row(self, i: int) -> Row:
        if not 0 <= i < len(self.label):
            raise IndexError(f"row {i} out of range for block of {len(self.label)} rows")
        lo, hi = self.offset[i], self.offset[i + 1]
        return Row(
            label=self.label[i],
            weight=self.weight[i] if self.weight else None,
            qid=self.qid[i] if self.qid else None,
            index=tuple(self.index[lo:hi]),
            value=tuple(self.value[lo:hi]),
        )

    def rows(self) -> Iterator[Row]:
        for i in range(len(self.label)):
            yield self.row(i)

    def validate(self) -> None:
        """Check the CSR invariants; raises ``BlockInvariantError``."""
        n = len(self.label)
        if len(self.offset) != n + 1:
            raise BlockInvariantError(
                f"offset has {len(self.offset)} entries, expected {n + 1}",
            )
        if self.offset[0] != 0:
            raise BlockInvariantError(f"offset[0] must be 0, got {self.offset[0]}")
        if any(a > b for a, b in zip(self.offset, self.offset[1:])):
            raise BlockInvariantError("offset must be non-decreasing")
        if self.offset[-1] != len(self.index):
            raise BlockInvariantError(
                f"offset[-1] = {self.offset[-1]} does not match {len(self.index)} indices",
            )
        if self.weight and len(self.weight) != n:
            raise BlockInvariantError(f"weight has {len(self.weight)} entries for {n} rows")
        if self.qid and len(self.qid) != n:
            raise BlockInvariantError(f"qid has {len(self.qid)} entries for {n} rows")
        if len(self.value) != len(self.index):
            raise BlockInvariantError(
                f"value has {len(self.value)} entries for {len(self.index)} indices",
            )

    def extend(self, other: RowBlock) -> None:
        """Append the rows of ``other``, shifting its offsets past our features."""
        if not other.label:
            return
        if self.label:
            if self.has_weight != other.has_weight:
                raise FieldConsistencyError(
                    "Cannot merge blocks: weight present in one block but not the other",
                )
            if self.has_qid != other.has_qid:
                raise FieldConsistencyError(
                    "Cannot merge blocks: qid present in one block but not the other",
                )
        base = len(self.index)
        self.label.extend(other.label)
        self.weight.extend(other.weight)
        self.qid.extend(other.qid)
        self.index.extend(other.index)
        self.value.extend(other.value)
        self.offset.extend(base + off for off in other.offset[1:])

    def to_numpy(
        self,
        *,
        real_dtype: Any = np.float32,
        index_dtype: Any = None,
    ) -> BlockArrays:
        """Return typed copies of the columns.

        Indices default to ``uint64``; ``int64`` is used when the block holds
        a negative index (only possible for 0-based input that contains one).
        """
        if index_dtype is None:
            index_dtype = np.int64 if self.index and min(self.index) < 0 else np.uint64
        return BlockArrays(
            label=np.asarray(self.label, dtype=real_dtype),
            weight=np.asarray(self.weight, dtype=real_dtype),
            qid=np.asarray(self.qid, dtype=np.uint64),
            index=np.asarray(self.index, dtype=index_dtype),
            value=np.asarray(self.value, dtype=real_dtype),
            offset=np.asarray(self.offset, dtype=np.uint64),
        )

    def to_dict(self) -> dict[str, list[Any]]:
        return {
            "label": list(self.label),
            "weight": list(self.weight),
            "qid": list(self.qid),
            "index": list(self.index),
            "value": list(self.value),
            "offset": list(self.offset),
        }


def merge_blocks(blocks: Iterable[RowBlock]) -> RowBlock:
    """Concatenate blocks in order into a new ``RowBlock``."""
    merged = RowBlock()
    for block in blocks:
        merged.extend(block)
    return merged


# ---------------------------------------------------------------------------
# BlockAccumulator
# ---------------------------------------------------------------------------


class BlockAccumulator:
    """Appends parsed rows into a ``RowBlock`` and enforces field presence.

    ``has_weight``/``has_qid`` start as ``None`` (unknown) and are fixed by
    the first row; every later row must agree.
    """

    __slots__ = ("out", "has_weight", "has_qid", "min_index")

    def __init__(self, out: RowBlock) -> None:
        out.clear()
        self.out = out
        self.has_weight: bool | None = None
        self.has_qid: bool | None = None
        self.min_index: int | None = None

    def start_row(self, label: float, weight: float | None, *, position: int) -> None:
        present = weight is not None
        if self.has_weight is None:
            self.has_weight = present
        elif self.has_weight != present:
            raise FieldConsistencyError(
                "Weight should be provided for all rows when used",
                position=position,
            )
        out = self.out
        if out.label:
            out.offset.append(len(out.index))
        out.label.append(label)
        if weight is not None:
            out.weight.append(weight)

    def set_qid(self, qid: int | None, *, position: int) -> None:
        present = qid is not None
        if self.has_qid is None:
            self.has_qid = present
        elif self.has_qid != present:
            raise FieldConsistencyError(
                "Qid should be provided for all rows when used",
                position=position,
            )
        if qid is not None:
            self.out.qid.append(qid)

    def add_feature(self, index: int, value: float) -> None:
        self.out.index.append(index)
        self.out.value.append(value)
        if self.min_index is None or index < self.min_index:
            self.min_index = index

    def finish(self) -> RowBlock:
        """Close the last row's offset."""
        out = self.out
        if out.label:
            out.offset.append(len(out.index))
        if len(out.offset) != len(out.label) + 1:
            raise BlockInvariantError(
                f"offset has {len(out.offset)} entries for {len(out.label)} rows",
            )
        return out


# ---------------------------------------------------------------------------
# IndexingModeResolver
# ---------------------------------------------------------------------------


def resolve_indexing_mode(
    index: list[int],
    mode: IndexingMode,
    min_index: int | None,
) -> bool:
    """Normalize ``index`` to 0-based in place; returns True if shifted.

    AUTO treats a block that never uses index 0 as 1-based (the heuristic
    from sklearn's ``load_svmlight_file``).
    """
    if mode is IndexingMode.ZERO_BASED:
        return False
    if mode is IndexingMode.AUTO and (not index or min_index is None or min_index <= 0):
        return False
    index[:] = [i - 1 for i in index]
    return True
