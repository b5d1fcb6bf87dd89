from __future__ import annotations

from typing import NamedTuple, Tuple

import numpy as np

from passportframe.core.models import BoundingBox, CropGeometry

WHITE_BGR = (255, 255, 255)


class CanvasPlacement(NamedTuple):
    canvas: np.ndarray
    face: BoundingBox  # face box in canvas coordinates
    geometry: CropGeometry


def compute_crop_geometry(
    source_width: int,
    source_height: int,
    face: BoundingBox,
    target_width: int,
    target_height: int,
) -> CropGeometry:
    """
    Work out which part of the source lands where on a face-centered canvas.

    The ideal window is target-sized and centered on the face; it may start
    before the source origin or run past its far edges. Only the overlap is
    copied, the rest of the canvas stays padding.
    """
    cx, cy = face.center
    # int() truncates toward zero for negative windows as well
    ideal_x = int(cx - target_width / 2.0)
    ideal_y = int(cy - target_height / 2.0)

    src_x = max(ideal_x, 0)
    src_y = max(ideal_y, 0)

    dest_x = src_x - ideal_x
    dest_y = src_y - ideal_y

    src_width = max(0, min(target_width - dest_x, source_width - src_x))
    src_height = max(0, min(target_height - dest_y, source_height - src_y))

    return CropGeometry(
        ideal_x=ideal_x,
        ideal_y=ideal_y,
        src_x=src_x,
        src_y=src_y,
        dest_x=dest_x,
        dest_y=dest_y,
        src_width=src_width,
        src_height=src_height,
    )


def place_on_canvas(
    img_bgr: np.ndarray,
    face: BoundingBox,
    target_size: Tuple[int, int],
    pad_color_bgr: Tuple[int, int, int] = WHITE_BGR,
) -> CanvasPlacement:
    """
    Copy the face-centered window of `img_bgr` onto a fresh padded canvas.

    The canvas is always exactly target_size (width, height). The returned face
    box is translated into canvas coordinates.
    """
    target_width, target_height = target_size
    h, w = img_bgr.shape[:2]
    geo = compute_crop_geometry(w, h, face, target_width, target_height)

    canvas = np.full((target_height, target_width, 3), pad_color_bgr, dtype=np.uint8)
    if not geo.is_empty:
        canvas[geo.dest_y:geo.dest_y + geo.src_height, geo.dest_x:geo.dest_x + geo.src_width] = img_bgr[
            geo.src_y:geo.src_y + geo.src_height, geo.src_x:geo.src_x + geo.src_width
        ]

    shifted = face.shifted(-geo.ideal_x, -geo.ideal_y)
    return CanvasPlacement(canvas=canvas, face=shifted, geometry=geo)
