from __future__ import annotations

from typing import Optional

import cv2
import numpy as np

from passportframe.core.errors import SegmentationError
from passportframe.core.models import BoundingBox
from passportframe.segmentation.base import Segmenter

# Body proportions relative to the face box.
BODY_WIDTH_FACTOR = 2
BODY_HEIGHT_FACTOR = 4


def estimate_body_box(face: BoundingBox, canvas_width: int, canvas_height: int) -> Optional[BoundingBox]:
    """
    Rough head-and-shoulders box: twice the face width, four face heights tall,
    centered on the face horizontally, starting half a face above it. Clamped to
    the canvas; None if nothing of it lies on the canvas.
    """
    body_w = BODY_WIDTH_FACTOR * face.width
    body_h = BODY_HEIGHT_FACTOR * face.height
    x = face.x + face.width // 2 - body_w // 2
    y = face.y - face.height // 2

    left = max(x, 0)
    top = max(y, 0)
    right = min(x + body_w, canvas_width)
    bottom = min(y + body_h, canvas_height)
    if right <= left or bottom <= top:
        return None
    return BoundingBox(left, top, right - left, bottom - top)


class GrabCutSegmenter(Segmenter):
    """Energy-based cut seeded by the estimated body box."""

    name = "grabcut"

    def __init__(self, iterations: int = 5):
        self._iterations = iterations

    def _segment(self, canvas_bgr: np.ndarray, face: Optional[BoundingBox]) -> np.ndarray:
        if face is None:
            raise SegmentationError("grabcut needs the face box to seed the body region")
        h, w = canvas_bgr.shape[:2]
        body = estimate_body_box(face, w, h)
        if body is None:
            raise SegmentationError(f"Body region for face {face} falls outside the canvas")

        # GrabCut needs some pixels outside the rectangle to model the background.
        if body.width >= w and body.height >= h:
            body = BoundingBox(1, 1, w - 2, h - 2)
            if body.width <= 0 or body.height <= 0:
                raise SegmentationError(f"Canvas {w}x{h} too small for grabcut")

        labels = np.zeros((h, w), dtype=np.uint8)
        bgd_model = np.zeros((1, 65), np.float64)
        fgd_model = np.zeros((1, 65), np.float64)
        cv2.grabCut(
            canvas_bgr,
            labels,
            (body.x, body.y, body.width, body.height),
            bgd_model,
            fgd_model,
            self._iterations,
            cv2.GC_INIT_WITH_RECT,
        )
        fg = (labels == cv2.GC_FGD) | (labels == cv2.GC_PR_FGD)
        return np.where(fg, 255, 0).astype(np.uint8)
