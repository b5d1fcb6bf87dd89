import unittest

from tests._test_path import SRC  # noqa: F401

from passportframe.core.config import get_env, load_params_from_env
from passportframe.core.errors import ConfigError
from passportframe.core.models import ProcessingParams


class TestEnvConfig(unittest.TestCase):
    def test_get_env_strips_and_defaults(self):
        env = {"A": "  value\n", "B": "   "}
        self.assertEqual(get_env("A", env), "value")
        self.assertIsNone(get_env("B", env))
        self.assertEqual(get_env("C", env, default="x"), "x")

    def test_empty_environment_gives_defaults(self):
        self.assertEqual(load_params_from_env({}), ProcessingParams())

    def test_overrides(self):
        env = {
            "PASSPORTFRAME_WIDTH": "350",
            "PASSPORTFRAME_HEIGHT": " 450 ",
            "PASSPORTFRAME_FACE_DETECTOR": "HAAR",
            "PASSPORTFRAME_SEGMENTER": "grabcut",
            "PASSPORTFRAME_MIN_FACE_CONFIDENCE": "0.7",
        }
        p = load_params_from_env(env)
        self.assertEqual(p.target_size, (350, 450))
        self.assertEqual(p.face_detector, "haar")
        self.assertEqual(p.segmenter, "grabcut")
        self.assertAlmostEqual(p.min_face_confidence, 0.7)

    def test_base_params_are_kept(self):
        base = ProcessingParams(grabcut_iterations=2)
        p = load_params_from_env({"PASSPORTFRAME_SEGMENTER": "grabcut"}, base=base)
        self.assertEqual(p.grabcut_iterations, 2)

    def test_malformed_number(self):
        with self.assertRaises(ConfigError):
            load_params_from_env({"PASSPORTFRAME_WIDTH": "wide"})

    def test_unknown_strategy(self):
        with self.assertRaises(ConfigError):
            load_params_from_env({"PASSPORTFRAME_SEGMENTER": "photoshop"})

    def test_config_error_is_value_error(self):
        with self.assertRaises(ValueError):
            load_params_from_env({"PASSPORTFRAME_HEIGHT": "-1"})
