"""
Conversion between encoded image bytes and OpenCV BGR arrays.

Decoding goes through Pillow so EXIF orientation is honored; any mode
(grayscale, palette, RGBA) is flattened to 3-channel color.
"""

from __future__ import annotations

import io

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from passportframe.core.errors import DecodeError, EncodeError

_FORMATS = {"PNG": "PNG", "JPG": "JPEG", "JPEG": "JPEG"}


def pil_to_bgr_np(img: Image.Image) -> np.ndarray:
    """PIL RGB -> OpenCV BGR numpy array."""
    arr = np.array(img)  # RGB
    return cv2.cvtColor(arr, cv2.COLOR_RGB2BGR)


def bgr_np_to_pil(img_bgr: np.ndarray) -> Image.Image:
    """OpenCV BGR numpy array -> PIL RGB."""
    rgb = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)
    return Image.fromarray(rgb)


def decode_image(data: bytes) -> np.ndarray:
    """Decode PNG/JPEG (or any Pillow-readable raster) bytes into a BGR uint8 array."""
    if not data:
        raise DecodeError("Empty input; expected encoded image bytes.")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGB":
            img = img.convert("RGB")
        return pil_to_bgr_np(img)
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Unrecognized image data: {exc}") from exc
    except (OSError, ValueError, SyntaxError) as exc:
        # truncated or corrupt files surface from the plugin decoders
        raise DecodeError(f"Could not decode image: {exc}") from exc


def encode_image(img_bgr: np.ndarray, fmt: str = "PNG") -> bytes:
    """Encode a BGR uint8 array as PNG (default) or JPEG bytes."""
    pil_format = _FORMATS.get(fmt.upper())
    if pil_format is None:
        raise EncodeError(f"Unsupported output format {fmt!r}")
    if img_bgr is None or img_bgr.ndim != 3 or img_bgr.shape[2] != 3 or img_bgr.size == 0:
        raise EncodeError("Expected a non-empty 3-channel image to encode.")

    buf = io.BytesIO()
    try:
        pil = bgr_np_to_pil(np.ascontiguousarray(img_bgr, dtype=np.uint8))
        if pil_format == "JPEG":
            pil.save(buf, format="JPEG", quality=95, optimize=True)
        else:
            pil.save(buf, format="PNG")
    except (OSError, ValueError, cv2.error) as exc:
        raise EncodeError(f"Could not encode image as {pil_format}: {exc}") from exc
    return buf.getvalue()


def encode_png(img_bgr: np.ndarray) -> bytes:
    return encode_image(img_bgr, "PNG")
