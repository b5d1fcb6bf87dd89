from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

FACE_DETECTORS = ("ssd", "haar", "mediapipe")
SEGMENTERS = ("u2net", "grabcut", "rembg")


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned rectangle in pixel coordinates.

    Boxes coming out of a detector are non-negative with positive size; boxes
    produced by crop arithmetic may carry negative offsets.
    """
    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def shifted(self, dx: int, dy: int) -> "BoundingBox":
        return BoundingBox(self.x + dx, self.y + dy, self.width, self.height)


@dataclass(frozen=True)
class FaceCandidate:
    box: BoundingBox
    score: float = 1.0


@dataclass(frozen=True)
class CropGeometry:
    """
    Placement of a source region onto the target canvas.

    ideal_x/ideal_y:
        Top-left of the face-centered window in source coordinates (may be negative).
    src_x/src_y, src_width/src_height:
        The part of the source that overlaps the window (size may be 0).
    dest_x/dest_y:
        Where that overlap lands on the canvas.
    """
    ideal_x: int
    ideal_y: int
    src_x: int
    src_y: int
    dest_x: int
    dest_y: int
    src_width: int
    src_height: int

    @property
    def is_empty(self) -> bool:
        return self.src_width <= 0 or self.src_height <= 0


@dataclass(frozen=True)
class ProcessingParams:
    """
    Parameters that control how the passport photo is generated.

    target_width/target_height:
        Output canvas size in pixels. Default 700x900 (7:9).
    face_detector:
        One of "ssd" (OpenCV DNN), "haar" (cascade) or "mediapipe".
    segmenter:
        One of "u2net" (saliency model), "grabcut" (body-estimate cut) or "rembg".
    min_face_confidence:
        Detections scoring below this are discarded (ssd/mediapipe only).
    grabcut_iterations:
        Iteration budget for the energy-based cut.
    mask_kernel_size/mask_blur_size/mask_threshold:
        Mask refinement: elliptical morphology kernel, Gaussian kernel (odd),
        re-binarization threshold.
    u2net_input_size:
        Square input resolution of the saliency network.
    """
    target_width: int = 700
    target_height: int = 900
    face_detector: str = "ssd"
    segmenter: str = "u2net"
    min_face_confidence: float = 0.5
    grabcut_iterations: int = 5
    mask_kernel_size: int = 5
    mask_blur_size: int = 9
    mask_threshold: int = 128
    u2net_input_size: int = 320

    def __post_init__(self) -> None:
        if self.target_width <= 0 or self.target_height <= 0:
            raise ValueError("target size must be positive")
        if self.face_detector not in FACE_DETECTORS:
            raise ValueError(f"unknown face detector {self.face_detector!r}; expected one of {FACE_DETECTORS}")
        if self.segmenter not in SEGMENTERS:
            raise ValueError(f"unknown segmenter {self.segmenter!r}; expected one of {SEGMENTERS}")
        if not (0.0 <= self.min_face_confidence <= 1.0):
            raise ValueError("min_face_confidence must be within [0, 1]")
        if self.grabcut_iterations < 1:
            raise ValueError("grabcut_iterations must be >= 1")
        if self.mask_kernel_size < 1:
            raise ValueError("mask_kernel_size must be >= 1")
        if self.mask_blur_size < 1 or self.mask_blur_size % 2 == 0:
            raise ValueError("mask_blur_size must be a positive odd number")
        if not (0 < self.mask_threshold < 255):
            raise ValueError("mask_threshold must be within (0, 255)")
        if self.u2net_input_size <= 0:
            raise ValueError("u2net_input_size must be positive")

    @property
    def target_size(self) -> Tuple[int, int]:
        """(width, height) of the output canvas."""
        return (self.target_width, self.target_height)
