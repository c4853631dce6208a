"""JSON output helpers backed by orjson."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import orjson


def _default(obj: Any) -> Any:
    """orjson fallback for numpy scalars and bytes."""
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, bytes):
        return obj.decode("ascii", errors="replace")
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def dumps_json(obj: Any, *, pretty: bool = True) -> bytes:
    option = orjson.OPT_SORT_KEYS | orjson.OPT_SERIALIZE_NUMPY
    if pretty:
        option |= orjson.OPT_INDENT_2
    return orjson.dumps(obj, default=_default, option=option)


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Write ``obj`` as JSON, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps_json(obj, pretty=pretty) + b"\n")
