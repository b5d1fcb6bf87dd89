"""
Model asset lookup and construction of detector/segmenter handles.

Handles are built once at startup and injected into the pipeline; they are
not rebuilt per request.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import cv2

from passportframe.core.config import get_env
from passportframe.core.errors import ModelLoadError
from passportframe.core.models import ProcessingParams
from passportframe.detection.locator import FaceDetector
from passportframe.pipeline import PassportPhotoPipeline
from passportframe.segmentation.base import Segmenter

logger = logging.getLogger(__name__)

MODELS_DIR_ENV = "PASSPORTFRAME_MODELS_DIR"

SSD_PROTOTXT = "deploy.prototxt"
SSD_CAFFEMODEL = "res10_300x300_ssd_iter_140000.caffemodel"
HAAR_CASCADE = "haarcascade_frontalface_alt2.xml"
U2NET_ONNX = "u2net.onnx"
MEDIAPIPE_FACE_MODEL = "blaze_face_short_range.tflite"


@dataclass(frozen=True)
class ModelPaths:
    """
    Where the model files live. Only the files of the selected strategies
    need to exist.
    """
    base_dir: Path
    ssd_prototxt: Path
    ssd_model: Path
    haar_cascade: Path
    u2net_model: Path
    mediapipe_model: Path

    @staticmethod
    def from_dir(base_dir: os.PathLike) -> "ModelPaths":
        base = Path(base_dir).expanduser()
        cascade = base / HAAR_CASCADE
        if not cascade.exists():
            # opencv-python ships the stock cascades
            cascade = Path(cv2.data.haarcascades) / HAAR_CASCADE
        return ModelPaths(
            base_dir=base,
            ssd_prototxt=base / SSD_PROTOTXT,
            ssd_model=base / SSD_CAFFEMODEL,
            haar_cascade=cascade,
            u2net_model=base / U2NET_ONNX,
            mediapipe_model=base / MEDIAPIPE_FACE_MODEL,
        )

    @staticmethod
    def default(environ: Optional[Mapping[str, str]] = None) -> "ModelPaths":
        base = get_env(MODELS_DIR_ENV, environ)
        if base is None:
            return ModelPaths.from_dir(Path.home() / ".passportframe" / "models")
        return ModelPaths.from_dir(base)


def _require(path: Path, what: str) -> str:
    if not path.is_file():
        raise ModelLoadError(f"{what} not found at {path}")
    return str(path)


def load_face_detector(params: ProcessingParams, paths: ModelPaths) -> FaceDetector:
    kind = params.face_detector
    try:
        if kind == "ssd":
            from passportframe.detection.ssd import SsdFaceDetector

            detector = SsdFaceDetector.from_files(
                _require(paths.ssd_prototxt, "SSD prototxt"),
                _require(paths.ssd_model, "SSD weights"),
                min_confidence=params.min_face_confidence,
            )
        elif kind == "haar":
            from passportframe.detection.cascade import HaarFaceDetector

            detector = HaarFaceDetector.from_file(_require(paths.haar_cascade, "Haar cascade"))
        elif kind == "mediapipe":
            from passportframe.detection.mediapipe_backend import MediaPipeFaceDetector

            detector = MediaPipeFaceDetector.from_model_path(
                _require(paths.mediapipe_model, "MediaPipe face model"),
                min_confidence=params.min_face_confidence,
            )
        else:
            raise ModelLoadError(f"Unknown face detector {kind!r}")
    except (cv2.error, ImportError, RuntimeError, ValueError, AttributeError, OSError) as exc:
        raise ModelLoadError(f"Could not load {kind} face detector: {exc}") from exc

    logger.info("Loaded %s face detector", kind)
    return detector


def load_segmenter(params: ProcessingParams, paths: ModelPaths) -> Segmenter:
    kind = params.segmenter
    try:
        if kind == "u2net":
            from passportframe.segmentation.saliency import U2NetSegmenter

            segmenter = U2NetSegmenter.from_file(
                _require(paths.u2net_model, "U2-Net model"),
                input_size=params.u2net_input_size,
            )
        elif kind == "grabcut":
            from passportframe.segmentation.grabcut import GrabCutSegmenter

            segmenter = GrabCutSegmenter(iterations=params.grabcut_iterations)
        elif kind == "rembg":
            from passportframe.segmentation.rembg_backend import RembgSegmenter

            segmenter = RembgSegmenter.from_model_name()
        else:
            raise ModelLoadError(f"Unknown segmenter {kind!r}")
    except (cv2.error, ImportError, RuntimeError, ValueError, AttributeError, OSError) as exc:
        raise ModelLoadError(f"Could not load {kind} segmenter: {exc}") from exc

    logger.info("Loaded %s segmenter", kind)
    return segmenter


def build_pipeline(params: ProcessingParams, paths: Optional[ModelPaths] = None) -> PassportPhotoPipeline:
    paths = paths if paths is not None else ModelPaths.default()
    return PassportPhotoPipeline(
        face_detector=load_face_detector(params, paths),
        segmenter=load_segmenter(params, paths),
        params=params,
    )
