from __future__ import annotations

import cv2
import numpy as np

from passportframe.core.errors import SegmentationError


def refine_mask(
    mask: np.ndarray,
    kernel_size: int = 5,
    blur_size: int = 9,
    threshold: int = 128,
) -> np.ndarray:
    """
    Clean a raw foreground mask and re-binarize it to {0, 255}.

    Close then open with an elliptical kernel (fills pinholes, drops specks),
    blur to round off jagged edges, then threshold. Returns a new array.
    """
    if mask.ndim != 2:
        raise SegmentationError(f"Expected a single-channel mask, got shape {mask.shape}")
    if mask.dtype == bool:
        mask = mask.astype(np.uint8) * 255
    elif mask.dtype != np.uint8:
        raise SegmentationError(f"Expected a uint8 mask, got {mask.dtype}")

    try:
        kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (kernel_size, kernel_size))
        out = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel)
        out = cv2.morphologyEx(out, cv2.MORPH_OPEN, kernel)
        out = cv2.GaussianBlur(out, (blur_size, blur_size), 0)
        _, out = cv2.threshold(out, threshold, 255, cv2.THRESH_BINARY)
    except cv2.error as exc:
        raise SegmentationError(f"Mask refinement failed: {exc}") from exc
    return out
