import unittest

import numpy as np

from tests._test_path import SRC  # noqa: F401

from passportframe.imaging.quality import equalize_lightness


def _gray(values: np.ndarray) -> np.ndarray:
    return np.repeat(values[:, :, None], 3, axis=2).astype(np.uint8)


class TestEqualizeLightness(unittest.TestCase):
    def test_mutates_in_place_and_returns_same_array(self):
        img = _gray(np.random.default_rng(0).integers(100, 140, (32, 32)))
        out = equalize_lightness(img)
        self.assertIs(out, img)
        self.assertEqual(out.shape, (32, 32, 3))
        self.assertEqual(out.dtype, np.uint8)

    def test_stretches_low_contrast(self):
        img = _gray(np.random.default_rng(1).integers(100, 141, (64, 64)))
        before = int(img.max()) - int(img.min())
        equalize_lightness(img)
        after = int(img.max()) - int(img.min())
        self.assertLessEqual(before, 40)
        self.assertGreater(after, 150)

    def test_near_idempotent(self):
        img = _gray(np.random.default_rng(2).integers(0, 256, (64, 64)))
        once = equalize_lightness(img.copy())
        twice = equalize_lightness(once.copy())
        delta = np.abs(once.astype(np.int16) - twice.astype(np.int16))
        self.assertLess(float(delta.mean()), 4.0)

    def test_neutral_gray_stays_neutral(self):
        img = _gray(np.random.default_rng(3).integers(30, 220, (16, 16)))
        equalize_lightness(img)
        spread = img.astype(np.int16).max(axis=2) - img.astype(np.int16).min(axis=2)
        self.assertLessEqual(int(spread.max()), 4)
