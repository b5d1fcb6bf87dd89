from __future__ import annotations

import numpy as np

from passportframe.core.errors import SegmentationError


def apply_white_background(canvas_bgr: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """
    Keep canvas pixels where `mask` is non-zero, paint everything else pure white.

    Returns a new array; neither input is modified.
    """
    if mask.ndim != 2 or mask.shape != canvas_bgr.shape[:2]:
        raise SegmentationError(
            f"Mask shape {mask.shape} does not match canvas {canvas_bgr.shape[:2]}"
        )
    out = np.full_like(canvas_bgr, 255)
    fg = mask > 0
    out[fg] = canvas_bgr[fg]
    return out
