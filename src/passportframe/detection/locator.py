from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import cv2
import numpy as np

from passportframe.core.errors import FaceDetectionError, NoFaceDetected
from passportframe.core.models import BoundingBox, FaceCandidate

logger = logging.getLogger(__name__)


class FaceDetector(ABC):
    """
    Finds frontal faces in a BGR image.

    Implementations hold a loaded model handle and must be safe to call from
    several threads at once (serialize internally if the engine is not).
    """

    @abstractmethod
    def detect(self, img_bgr: np.ndarray) -> List[FaceCandidate]:
        """Return candidate boxes in source pixel coordinates (possibly empty)."""


def clip_box(x1: float, y1: float, x2: float, y2: float, width: int, height: int) -> Optional[BoundingBox]:
    """Clip corner coordinates to the image; None if nothing is left."""
    left = max(0, int(x1))
    top = max(0, int(y1))
    right = min(width, int(x2))
    bottom = min(height, int(y2))
    if right <= left or bottom <= top:
        return None
    return BoundingBox(left, top, right - left, bottom - top)


def select_largest_face(candidates: Sequence[FaceCandidate]) -> Optional[FaceCandidate]:
    """
    Pick the candidate with the largest box area.

    Ties keep the first one encountered. Returns None for an empty sequence.
    """
    best: Optional[FaceCandidate] = None
    for cand in candidates:
        if best is None or cand.box.area > best.box.area:
            best = cand
    return best


def locate_face(detector: FaceDetector, img_bgr: np.ndarray) -> BoundingBox:
    """Run `detector` and return the box of the main subject, or raise NoFaceDetected."""
    try:
        candidates = detector.detect(img_bgr)
    except (cv2.error, RuntimeError, ValueError) as exc:
        raise FaceDetectionError(f"Face detection failed: {exc}") from exc

    if len(candidates) > 1:
        logger.warning("Found %d faces; using the largest one", len(candidates))

    best = select_largest_face(candidates)
    if best is None:
        raise NoFaceDetected()
    logger.debug("Selected face %s (score %.3f)", best.box, best.score)
    return best.box
