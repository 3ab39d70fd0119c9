from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from voxforge.application.errors import MergeError


def merge_buffers(buffers: Sequence[np.ndarray]) -> np.ndarray:
    """Concatenate sample buffers in the given order, with nothing in between."""
    if not buffers:
        return np.zeros(0, dtype=np.float32)

    try:
        return np.concatenate(
            [np.asarray(buffer, dtype=np.float32).reshape(-1) for buffer in buffers]
        )
    except (MemoryError, ValueError) as e:
        total = sum(len(buffer) for buffer in buffers)
        raise MergeError(
            f"Failed to merge {len(buffers)} buffers ({total} samples): {e}"
        ) from e
