import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
from pathlib import Path
from unittest.mock import patch

from tests._test_path import SRC  # noqa: F401
from tests._fakes import FakeDetector, NonWhiteSegmenter, gradient_image, png_bytes

from passportframe import cli
from passportframe.core.errors import ModelLoadError
from passportframe.core.models import BoundingBox
from passportframe.imaging.codec import decode_image
from passportframe.pipeline import PassportPhotoPipeline

FACE = BoundingBox(100, 100, 80, 80)


def _fake_build(boxes):
    def build(params, paths=None):
        return PassportPhotoPipeline(FakeDetector(boxes), NonWhiteSegmenter(), params)
    return build


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory(prefix="passportframe_cli_")
        self.dir = Path(self._tmp.name)
        self.src = self.dir / "in.png"
        self.src.write_bytes(png_bytes(gradient_image(300, 300)))
        env = {k: v for k, v in os.environ.items() if not k.startswith("PASSPORTFRAME_")}
        self._env = patch.dict(os.environ, env, clear=True)
        self._env.start()

    def tearDown(self):
        self._env.stop()
        self._tmp.cleanup()

    def _run(self, argv, boxes=(FACE,)):
        out, err = StringIO(), StringIO()
        with patch.object(cli, "build_pipeline", side_effect=_fake_build(list(boxes))), \
                redirect_stdout(out), redirect_stderr(err):
            code = cli.main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_single_image(self):
        dst = self.dir / "out.png"
        code, out, _ = self._run(["-i", str(self.src), "-o", str(dst)])
        self.assertEqual(code, 0)
        self.assertIn("Saved:", out)
        self.assertEqual(decode_image(dst.read_bytes()).shape, (900, 700, 3))

    def test_size_flags(self):
        dst = self.dir / "out.jpg"
        code, _, _ = self._run(["-i", str(self.src), "-o", str(dst), "--width", "350", "--height", "450"])
        self.assertEqual(code, 0)
        data = dst.read_bytes()
        self.assertTrue(data.startswith(b"\xff\xd8"))
        self.assertEqual(decode_image(data).shape, (450, 350, 3))

    def test_no_face_exit_code(self):
        code, _, err = self._run(["-i", str(self.src), "-o", str(self.dir / "out.png")], boxes=())
        self.assertEqual(code, cli.EXIT_NO_FACE)
        self.assertIn("No face detected", err)

    def test_batch_into_directory(self):
        second = self.dir / "second.png"
        second.write_bytes(png_bytes(gradient_image(280, 320)))
        out_dir = self.dir / "results"
        code, _, _ = self._run(["-i", str(self.src), "-i", str(second), "-o", str(out_dir), "--jobs", "2"])
        self.assertEqual(code, 0)
        self.assertTrue((out_dir / "in_passport.png").is_file())
        self.assertTrue((out_dir / "second_passport.png").is_file())

    def test_batch_into_existing_file(self):
        second = self.dir / "second.png"
        second.write_bytes(png_bytes(gradient_image(280, 320)))
        existing = self.dir / "already.png"
        existing.write_bytes(b"keep me")
        code, _, err = self._run(["-i", str(self.src), "-i", str(second), "-o", str(existing)])
        self.assertEqual(code, cli.EXIT_ERROR)
        self.assertIn("ERROR:", err)
        self.assertEqual(existing.read_bytes(), b"keep me")

    def test_batch_inputs_sharing_a_stem(self):
        (self.dir / "a").mkdir()
        (self.dir / "b").mkdir()
        first = self.dir / "a" / "photo.png"
        second = self.dir / "b" / "photo.png"
        first.write_bytes(png_bytes(gradient_image(300, 300)))
        second.write_bytes(png_bytes(gradient_image(280, 320)))
        out_dir = self.dir / "results"
        code, _, _ = self._run(["-i", str(first), "-i", str(second), "-o", str(out_dir)])
        self.assertEqual(code, 0)
        self.assertTrue((out_dir / "photo_passport.png").is_file())
        self.assertTrue((out_dir / "photo_passport_2.png").is_file())

    def test_single_input_into_directory(self):
        out_dir = self.dir / "single"
        code, _, _ = self._run(["-i", str(self.src), "-o", str(out_dir) + os.sep])
        self.assertEqual(code, 0)
        self.assertTrue(out_dir.is_dir())
        self.assertTrue((out_dir / "in_passport.png").is_file())

    def test_unreadable_input(self):
        code, _, err = self._run(["-i", str(self.dir / "missing.png"), "-o", str(self.dir / "out.png")])
        self.assertEqual(code, cli.EXIT_ERROR)
        self.assertIn("ERROR:", err)

    def test_model_load_failure(self):
        err = StringIO()
        with patch.object(cli, "build_pipeline", side_effect=ModelLoadError("u2net.onnx not found")), \
                redirect_stderr(err):
            code = cli.main(["-i", str(self.src), "-o", str(self.dir / "out.png")])
        self.assertEqual(code, cli.EXIT_ERROR)
        self.assertIn("u2net.onnx not found", err.getvalue())

    def test_bad_env_config(self):
        with patch.dict(os.environ, {"PASSPORTFRAME_WIDTH": "abc"}):
            code, _, err = self._run(["-i", str(self.src), "-o", str(self.dir / "out.png")])
        self.assertEqual(code, cli.EXIT_ERROR)
        self.assertIn("PASSPORTFRAME_WIDTH", err)
