"""Tests for svmblock.block — RowBlock columns, accumulator, index resolution."""
from __future__ import annotations

import numpy as np
import pytest

from svmblock.block import (
    BlockAccumulator,
    RowBlock,
    merge_blocks,
    resolve_indexing_mode,
)
from svmblock.errors import BlockInvariantError, FieldConsistencyError
from svmblock.types import IndexingMode


def _block(rows: list[tuple[float, list[tuple[int, float]]]]) -> RowBlock:
    block = RowBlock()
    acc = BlockAccumulator(block)
    for pos, (label, features) in enumerate(rows):
        acc.start_row(label, None, position=pos)
        acc.set_qid(None, position=pos)
        for idx, val in features:
            acc.add_feature(idx, val)
    return acc.finish()


# ── BlockAccumulator ─────────────────────────────────────────────────


class TestBlockAccumulator:
    def test_offsets_close_each_row(self) -> None:
        block = _block([(1.0, [(0, 1.0), (2, 2.0)]), (0.0, []), (1.0, [(1, 3.0)])])
        assert block.offset == [0, 2, 2, 3]
        block.validate()

    def test_empty_block(self) -> None:
        block = _block([])
        assert block.offset == [0]
        block.validate()

    def test_tracks_min_index(self) -> None:
        acc = BlockAccumulator(RowBlock())
        acc.start_row(1.0, None, position=0)
        acc.set_qid(None, position=0)
        acc.add_feature(4, 1.0)
        acc.add_feature(2, 1.0)
        assert acc.min_index == 2

    def test_weight_presence_fixed_by_first_row(self) -> None:
        acc = BlockAccumulator(RowBlock())
        acc.start_row(1.0, 0.5, position=0)
        with pytest.raises(FieldConsistencyError, match="Weight"):
            acc.start_row(0.0, None, position=10)

    def test_qid_presence_fixed_by_first_row(self) -> None:
        acc = BlockAccumulator(RowBlock())
        acc.start_row(1.0, None, position=0)
        acc.set_qid(None, position=0)
        acc.start_row(1.0, None, position=5)
        with pytest.raises(FieldConsistencyError, match="Qid"):
            acc.set_qid(7, position=5)

    def test_clears_output(self) -> None:
        out = RowBlock(label=[1.0], index=[3], value=[1.0], offset=[0, 1])
        BlockAccumulator(out)
        assert out.label == [] and out.index == [] and out.offset == [0]


# ── resolve_indexing_mode ────────────────────────────────────────────


class TestResolveIndexingMode:
    def test_zero_based_unchanged(self) -> None:
        index = [1, 2]
        assert resolve_indexing_mode(index, IndexingMode.ZERO_BASED, 1) is False
        assert index == [1, 2]

    def test_one_based_shifts(self) -> None:
        index = [0, 2]
        assert resolve_indexing_mode(index, IndexingMode.ONE_BASED, 0) is True
        assert index == [-1, 1]

    def test_auto_shifts_when_zero_unused(self) -> None:
        index = [3, 1]
        assert resolve_indexing_mode(index, IndexingMode.AUTO, 1) is True
        assert index == [2, 0]

    def test_auto_keeps_when_zero_used(self) -> None:
        index = [3, 0]
        assert resolve_indexing_mode(index, IndexingMode.AUTO, 0) is False
        assert index == [3, 0]

    def test_auto_on_empty(self) -> None:
        index: list[int] = []
        assert resolve_indexing_mode(index, IndexingMode.AUTO, None) is False


# ── RowBlock ─────────────────────────────────────────────────────────


class TestRowBlock:
    def test_row_view(self) -> None:
        block = RowBlock(
            label=[1.0, 0.0],
            weight=[0.5, 2.0],
            qid=[7, 8],
            index=[1, 3, 2],
            value=[1.0, 1.0, 0.5],
            offset=[0, 2, 3],
        )
        row = block.row(1)
        assert row.label == 0.0
        assert row.weight == 2.0
        assert row.qid == 8
        assert row.index == (2,)
        assert row.value == (0.5,)
        assert [r.label for r in block.rows()] == [1.0, 0.0]

    def test_row_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            RowBlock().row(0)

    def test_summary_properties(self) -> None:
        block = _block([(1.0, [(4, 1.0)]), (0.0, [(9, 1.0), (2, 1.0)])])
        assert block.size == len(block) == 2
        assert block.nnz == 3
        assert block.max_index == 9
        assert block.has_weight is False
        assert RowBlock().max_index is None

    def test_validate_detects_bad_offsets(self) -> None:
        block = RowBlock(label=[1.0], index=[1], value=[1.0], offset=[0])
        with pytest.raises(BlockInvariantError, match="offset has"):
            block.validate()

    def test_validate_detects_short_weight(self) -> None:
        block = RowBlock(label=[1.0, 2.0], weight=[1.0], offset=[0, 0, 0])
        with pytest.raises(BlockInvariantError, match="weight"):
            block.validate()

    def test_validate_detects_unparallel_values(self) -> None:
        block = RowBlock(label=[1.0], index=[1, 2], value=[1.0], offset=[0, 2])
        with pytest.raises(BlockInvariantError, match="value"):
            block.validate()

    def test_to_numpy(self) -> None:
        block = RowBlock(
            label=[1.0],
            qid=[5],
            index=[1, 3],
            value=[0.5, 1.5],
            offset=[0, 2],
        )
        arrays = block.to_numpy()
        assert arrays.label.dtype == np.float32
        assert arrays.qid.dtype == np.uint64
        assert arrays.index.dtype == np.uint64
        assert arrays.offset.dtype == np.uint64
        assert arrays.weight.size == 0
        assert arrays.index.tolist() == [1, 3]
        assert arrays.value.tolist() == [0.5, 1.5]

    def test_to_numpy_negative_index(self) -> None:
        block = RowBlock(label=[1.0], index=[-1], value=[1.0], offset=[0, 1])
        assert block.to_numpy().index.dtype == np.int64

    def test_to_dict(self) -> None:
        block = _block([(1.0, [(2, 0.5)])])
        assert block.to_dict() == {
            "label": [1.0],
            "weight": [],
            "qid": [],
            "index": [2],
            "value": [0.5],
            "offset": [0, 1],
        }


class TestMergeBlocks:
    def test_offsets_are_shifted(self) -> None:
        a = _block([(1.0, [(0, 1.0), (1, 1.0)])])
        b = _block([(0.0, [(2, 2.0)]), (1.0, [(3, 3.0)])])
        merged = merge_blocks([a, b])
        assert merged.label == [1.0, 0.0, 1.0]
        assert merged.index == [0, 1, 2, 3]
        assert merged.offset == [0, 2, 3, 4]
        merged.validate()

    def test_empty_blocks_are_ignored(self) -> None:
        a = _block([(1.0, [(0, 1.0)])])
        merged = merge_blocks([RowBlock(), a, RowBlock()])
        assert merged.offset == [0, 1]

    def test_mismatched_weight_presence(self) -> None:
        a = _block([(1.0, [])])
        b = RowBlock(label=[1.0], weight=[2.0], offset=[0, 0])
        with pytest.raises(FieldConsistencyError, match="weight"):
            merge_blocks([a, b])

    def test_merge_nothing(self) -> None:
        assert merge_blocks([]).offset == [0]
