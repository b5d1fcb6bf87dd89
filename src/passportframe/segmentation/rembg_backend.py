from __future__ import annotations

from typing import Any, Optional

import numpy as np
from rembg import new_session, remove

from passportframe.core.models import BoundingBox
from passportframe.imaging.codec import bgr_np_to_pil
from passportframe.segmentation.base import Segmenter


class RembgSegmenter(Segmenter):
    """Alpha matte from rembg, used directly as the foreground mask."""

    name = "rembg"

    def __init__(self, session: Any = None):
        self._session = session

    @classmethod
    def from_model_name(cls, model_name: str = "u2net") -> "RembgSegmenter":
        return cls(new_session(model_name))

    def _segment(self, canvas_bgr: np.ndarray, face: Optional[BoundingBox]) -> np.ndarray:
        cut = remove(bgr_np_to_pil(canvas_bgr), session=self._session, only_mask=True)
        return np.asarray(cut.convert("L"), dtype=np.uint8)
