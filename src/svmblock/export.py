"""Summaries and DuckDB export for parsed row blocks.

DuckDB layout:
    samples   — one row per sample (row_id, label, weight, qid, nnz)
    features  — one row per stored feature (row_id, feature_index, feature_value)
    _schema_version — schema version tracking
"""
from __future__ import annotations

import importlib
from collections import Counter
from pathlib import Path
from typing import Any

from svmblock.block import RowBlock

# DuckDB: dynamic import for pyright compatibility
_duckdb = importlib.import_module("duckdb")

SCHEMA_VERSION = "0.1.0"

_SCHEMA_DDL = f"""\
CREATE TABLE _schema_version (
    table_name VARCHAR PRIMARY KEY,
    version VARCHAR NOT NULL,
    created_at TIMESTAMP DEFAULT current_timestamp
);

INSERT INTO _schema_version VALUES ('svmblock', '{SCHEMA_VERSION}', current_timestamp);

CREATE TABLE samples (
    row_id BIGINT PRIMARY KEY,
    label DOUBLE NOT NULL,
    weight DOUBLE,
    qid UBIGINT,
    nnz INTEGER NOT NULL
);

CREATE TABLE features (
    row_id BIGINT NOT NULL,
    feature_index BIGINT NOT NULL,
    feature_value DOUBLE NOT NULL
)
"""

_BATCH_SIZE = 50_000


def _format_label(label: float) -> str:
    return f"{label:g}"


def summarize_block(block: RowBlock) -> dict[str, Any]:
    """Return a JSON-ready overview of a block."""
    nnz_per_row = [hi - lo for lo, hi in zip(block.offset, block.offset[1:])]
    labels = Counter(_format_label(label) for label in block.label)
    return {
        "rows": block.size,
        "nnz": block.nnz,
        "max_index": block.max_index,
        "min_index": min(block.index) if block.index else None,
        "has_weight": block.has_weight,
        "has_qid": block.has_qid,
        "distinct_qids": len(set(block.qid)),
        "max_row_nnz": max(nnz_per_row, default=0),
        "mean_row_nnz": round(block.nnz / block.size, 4) if block.size else 0.0,
        "label_counts": dict(sorted(labels.items())),
    }


def _batched(rows: list[tuple[Any, ...]], size: int) -> list[list[tuple[Any, ...]]]:
    return [rows[i:i + size] for i in range(0, len(rows), size)]


def write_duckdb(block: RowBlock, output_path: Path) -> None:
    """Write ``block`` to a fresh DuckDB file at ``output_path``."""
    if output_path.exists():
        raise FileExistsError(f"Refusing to overwrite existing database: {output_path}")
    block.validate()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    conn: Any = _duckdb.connect(str(output_path))
    try:
        for stmt in _SCHEMA_DDL.split(";"):
            stmt = stmt.strip()
            if stmt:
                conn.execute(stmt)

        row_tuples = [
            (
                i,
                row.label,
                row.weight,
                row.qid,
                len(row.index),
            )
            for i, row in enumerate(block.rows())
        ]
        feature_tuples = [
            (i, idx, val)
            for i, row in enumerate(block.rows())
            for idx, val in zip(row.index, row.value, strict=True)
        ]
        for batch in _batched(row_tuples, _BATCH_SIZE):
            conn.executemany(
                "INSERT INTO samples (row_id, label, weight, qid, nnz) VALUES (?, ?, ?, ?, ?)",
                batch,
            )
        for batch in _batched(feature_tuples, _BATCH_SIZE):
            conn.executemany(
                """INSERT INTO features (row_id, feature_index, feature_value)
                   VALUES (?, ?, ?)""",
                batch,
            )
    finally:
        conn.close()
