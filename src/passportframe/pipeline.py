"""
Passport photo pipeline.

decode -> equalize lightness -> locate face -> face-centered canvas ->
segment -> refine mask -> white background -> encode PNG.

Each call works on its own buffers; the detector and segmenter handles are
shared read-only between calls, so one pipeline can serve several threads.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import numpy as np

from passportframe.compose.background import apply_white_background
from passportframe.compose.canvas import place_on_canvas
from passportframe.core.models import ProcessingParams
from passportframe.detection.locator import FaceDetector, locate_face
from passportframe.imaging.codec import decode_image, encode_image
from passportframe.imaging.quality import equalize_lightness
from passportframe.segmentation.base import Segmenter
from passportframe.segmentation.refine import refine_mask

logger = logging.getLogger(__name__)


class PassportPhotoPipeline:
    def __init__(
        self,
        face_detector: FaceDetector,
        segmenter: Segmenter,
        params: Optional[ProcessingParams] = None,
    ):
        self.face_detector = face_detector
        self.segmenter = segmenter
        self.params = params if params is not None else ProcessingParams()

    def run(self, img_bgr: np.ndarray) -> np.ndarray:
        """
        Turn a decoded BGR photo into the final target-sized, white-background image.

        `img_bgr` is equalized in place. Raises NoFaceDetected, FaceDetectionError
        or SegmentationError.
        """
        p = self.params
        t0 = time.perf_counter()

        equalize_lightness(img_bgr)

        face = locate_face(self.face_detector, img_bgr)
        t_detect = time.perf_counter()

        placement = place_on_canvas(img_bgr, face, p.target_size)
        logger.debug("Crop geometry %s, face on canvas %s", placement.geometry, placement.face)

        raw_mask = self.segmenter.produce_mask(placement.canvas, placement.face)
        t_segment = time.perf_counter()

        mask = refine_mask(
            raw_mask,
            kernel_size=p.mask_kernel_size,
            blur_size=p.mask_blur_size,
            threshold=p.mask_threshold,
        )
        result = apply_white_background(placement.canvas, mask)

        logger.debug(
            "Timings: detect %.1fms, segment (%s) %.1fms, total %.1fms",
            (t_detect - t0) * 1000,
            self.segmenter.name,
            (t_segment - t_detect) * 1000,
            (time.perf_counter() - t0) * 1000,
        )
        return result

    def process_image(self, data: bytes, fmt: str = "PNG") -> bytes:
        """Encoded image bytes in, encoded passport photo out (PNG unless `fmt` says otherwise)."""
        logger.info("Received image processing request (%d bytes)", len(data))
        img = decode_image(data)
        result = self.run(img)
        out = encode_image(result, fmt)
        logger.info("Image processing completed (%dx%d, %d bytes)", result.shape[1], result.shape[0], len(out))
        return out
