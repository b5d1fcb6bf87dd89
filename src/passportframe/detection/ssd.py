from __future__ import annotations

import threading
from typing import Any, List

import cv2
import numpy as np

from passportframe.core.models import FaceCandidate
from passportframe.detection.locator import FaceDetector, clip_box

# res10_300x300_ssd_iter_140000 was trained on 300x300 BGR inputs with this mean.
SSD_INPUT_SIZE = (300, 300)
SSD_MEAN_BGR = (104.0, 177.0, 123.0)


class SsdFaceDetector(FaceDetector):
    """OpenCV DNN face detector (Caffe ResNet-10 SSD)."""

    def __init__(self, net: Any, min_confidence: float = 0.5):
        self._net = net
        self._min_confidence = min_confidence
        # cv2.dnn.Net keeps its input blob as state
        self._lock = threading.Lock()

    @classmethod
    def from_files(cls, prototxt_path: str, model_path: str, min_confidence: float = 0.5) -> "SsdFaceDetector":
        return cls(cv2.dnn.readNetFromCaffe(prototxt_path, model_path), min_confidence=min_confidence)

    def detect(self, img_bgr: np.ndarray) -> List[FaceCandidate]:
        h, w = img_bgr.shape[:2]
        blob = cv2.dnn.blobFromImage(img_bgr, 1.0, SSD_INPUT_SIZE, SSD_MEAN_BGR)
        with self._lock:
            self._net.setInput(blob)
            detections = self._net.forward()

        faces: List[FaceCandidate] = []
        # detections: (1, 1, N, 7) rows of [image_id, label, conf, x1, y1, x2, y2]
        for i in range(detections.shape[2]):
            conf = float(detections[0, 0, i, 2])
            if conf < self._min_confidence:
                continue
            x1, y1, x2, y2 = detections[0, 0, i, 3:7] * np.array([w, h, w, h])
            box = clip_box(x1, y1, x2, y2, w, h)
            if box is not None:
                faces.append(FaceCandidate(box=box, score=conf))
        return faces
