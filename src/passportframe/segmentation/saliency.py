from __future__ import annotations

import threading
from typing import Any, Optional

import cv2
import numpy as np

from passportframe.core.errors import SegmentationError
from passportframe.core.models import BoundingBox
from passportframe.segmentation.base import Segmenter


class U2NetSegmenter(Segmenter):
    """
    Salient-object mask from a U^2-Net ONNX model run through OpenCV DNN.

    The canvas is squashed to the square network input, the first output map is
    min-max stretched to [0, 255] and upscaled back bilinearly.
    """

    name = "u2net"

    def __init__(self, net: Any, input_size: int = 320):
        self._net = net
        self._input_size = input_size
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, onnx_path: str, input_size: int = 320) -> "U2NetSegmenter":
        return cls(cv2.dnn.readNetFromONNX(onnx_path), input_size=input_size)

    def _segment(self, canvas_bgr: np.ndarray, face: Optional[BoundingBox]) -> np.ndarray:
        h, w = canvas_bgr.shape[:2]
        size = self._input_size
        blob = cv2.dnn.blobFromImage(canvas_bgr, 1 / 255.0, (size, size), (0, 0, 0), swapRB=True, crop=False)
        with self._lock:
            self._net.setInput(blob)
            outputs = self._net.forward(self._net.getUnconnectedOutLayersNames())

        pred = np.asarray(outputs[0], dtype=np.float32)
        if pred.size != size * size:
            raise SegmentationError(f"u2net output has {pred.size} values, expected {size}x{size}")
        pred = pred.reshape(size, size)

        lo, hi = float(pred.min()), float(pred.max())
        if hi - lo < 1e-6:
            # flat saliency: nothing stands out
            small = np.zeros((size, size), dtype=np.uint8)
        else:
            small = ((pred - lo) * (255.0 / (hi - lo))).astype(np.uint8)
        return cv2.resize(small, (w, h), interpolation=cv2.INTER_LINEAR)
