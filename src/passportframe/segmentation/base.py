from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import cv2
import numpy as np

from passportframe.core.errors import SegmentationError
from passportframe.core.models import BoundingBox


class Segmenter(ABC):
    """
    Produces a foreground mask for a canvas.

    The mask is uint8, shaped like the canvas (H, W); higher values mean
    foreground. Strategies that need a seed region use the face box given in
    canvas coordinates.
    """

    name = "segmenter"

    def produce_mask(self, canvas_bgr: np.ndarray, face: Optional[BoundingBox] = None) -> np.ndarray:
        if canvas_bgr.ndim != 3 or canvas_bgr.shape[2] != 3 or canvas_bgr.size == 0:
            raise SegmentationError(f"Expected a non-empty 3-channel canvas, got shape {canvas_bgr.shape}")
        try:
            mask = self._segment(canvas_bgr, face)
        except (cv2.error, RuntimeError, ValueError) as exc:
            raise SegmentationError(f"{self.name} segmentation failed: {exc}") from exc

        if mask is None or mask.shape != canvas_bgr.shape[:2]:
            got = None if mask is None else mask.shape
            raise SegmentationError(f"{self.name} produced a mask of shape {got}, expected {canvas_bgr.shape[:2]}")
        if mask.dtype != np.uint8:
            mask = mask.astype(np.uint8)
        return mask

    @abstractmethod
    def _segment(self, canvas_bgr: np.ndarray, face: Optional[BoundingBox]) -> np.ndarray:
        ...
