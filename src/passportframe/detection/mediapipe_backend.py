from __future__ import annotations

import threading
from typing import Any, List

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from passportframe.core.models import FaceCandidate
from passportframe.detection.locator import FaceDetector, clip_box


class MediaPipeFaceDetector(FaceDetector):
    """MediaPipe Tasks face detector (BlazeFace)."""

    def __init__(self, detector: Any):
        self._detector = detector
        self._lock = threading.Lock()

    @classmethod
    def from_model_path(cls, model_path: str, min_confidence: float = 0.5) -> "MediaPipeFaceDetector":
        options = vision.FaceDetectorOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.IMAGE,
            min_detection_confidence=min_confidence,
        )
        return cls(vision.FaceDetector.create_from_options(options))

    def detect(self, img_bgr: np.ndarray) -> List[FaceCandidate]:
        h, w = img_bgr.shape[:2]
        # MediaPipe expects RGB
        rgb = np.ascontiguousarray(cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB))
        with self._lock:
            result = self._detector.detect(mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb))

        faces: List[FaceCandidate] = []
        for detection in result.detections:
            bb = detection.bounding_box
            box = clip_box(bb.origin_x, bb.origin_y, bb.origin_x + bb.width, bb.origin_y + bb.height, w, h)
            if box is None:
                continue
            score = float(detection.categories[0].score) if detection.categories else 1.0
            faces.append(FaceCandidate(box=box, score=score))
        return faces
