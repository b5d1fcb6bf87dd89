from __future__ import annotations

import cv2
import numpy as np


def equalize_lightness(img_bgr: np.ndarray) -> np.ndarray:
    """
    Equalize the L channel of the Lab representation, in place.

    Only lightness is touched so hue and saturation survive; no denoising is
    applied since segmentation relies on the texture at edges. Returns the
    same array for chaining.
    """
    lab = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2LAB)
    l_chan, a_chan, b_chan = cv2.split(lab)
    l_chan = cv2.equalizeHist(l_chan)
    lab = cv2.merge((l_chan, a_chan, b_chan))
    img_bgr[...] = cv2.cvtColor(lab, cv2.COLOR_LAB2BGR)
    return img_bgr
