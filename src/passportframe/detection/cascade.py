from __future__ import annotations

import threading
from typing import Any, List, Tuple

import cv2
import numpy as np

from passportframe.core.errors import ModelLoadError
from passportframe.core.models import BoundingBox, FaceCandidate
from passportframe.detection.locator import FaceDetector


class HaarFaceDetector(FaceDetector):
    """Viola-Jones cascade detector. Reports no confidence, so every score is 1.0."""

    def __init__(
        self,
        classifier: Any,
        scale_factor: float = 1.1,
        min_neighbors: int = 5,
        min_size: Tuple[int, int] = (30, 30),
    ):
        self._classifier = classifier
        self._scale_factor = scale_factor
        self._min_neighbors = min_neighbors
        self._min_size = min_size
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, cascade_path: str, **kwargs: Any) -> "HaarFaceDetector":
        classifier = cv2.CascadeClassifier(cascade_path)
        if classifier.empty():
            raise ModelLoadError(f"Could not load cascade from {cascade_path}")
        return cls(classifier, **kwargs)

    def detect(self, img_bgr: np.ndarray) -> List[FaceCandidate]:
        gray = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2GRAY)
        gray = cv2.equalizeHist(gray)
        # detectMultiScale returns () when nothing is found, else an (N, 4) array
        with self._lock:
            faces = self._classifier.detectMultiScale(
                gray,
                scaleFactor=self._scale_factor,
                minNeighbors=self._min_neighbors,
                minSize=self._min_size,
            )
        return [
            FaceCandidate(box=BoundingBox(int(x), int(y), int(fw), int(fh)))
            for (x, y, fw, fh) in faces
            if fw > 0 and fh > 0
        ]
