#!/usr/bin/env python3
"""
Command line front-end for the passport photo pipeline.

Produces a 700x900 (7:9) photo with the face centered and the background
replaced by white.

Usage:
  passportframe --input in.jpg --output out.png
  passportframe -i in.jpg -o out.jpg --segmenter grabcut --detector haar
  passportframe -i a.jpg -i b.jpg -o out_dir/ --jobs 2

Model files are looked up in --models-dir, $PASSPORTFRAME_MODELS_DIR or
~/.passportframe/models.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Set, Tuple

from passportframe.app.resources import ModelPaths, build_pipeline
from passportframe.core.config import load_params_from_env
from passportframe.core.errors import NoFaceDetected, PassportFrameError
from passportframe.core.models import FACE_DETECTORS, SEGMENTERS
from passportframe.pipeline import PassportPhotoPipeline

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 2
EXIT_NO_FACE = 3


def _output_format(path: Path) -> str:
    return "JPEG" if path.suffix.lower() in (".jpg", ".jpeg") else "PNG"


def _plan_outputs(inputs: List[Path], output: Path, as_dir: bool = False) -> List[Tuple[Path, Path]]:
    """
    Pair each input with its output path.

    A single input writes to `output` unless it is (or is spelled as) a
    directory. Several inputs always go into a directory; inputs sharing a
    stem get a numeric suffix instead of overwriting each other.
    """
    if len(inputs) == 1 and not as_dir and not output.is_dir():
        return [(inputs[0], output)]
    output.mkdir(parents=True, exist_ok=True)

    plan: List[Tuple[Path, Path]] = []
    taken: Set[str] = set()
    for src in inputs:
        name = f"{src.stem}_passport.png"
        n = 1
        while name in taken:
            n += 1
            name = f"{src.stem}_passport_{n}.png"
        taken.add(name)
        plan.append((src, output / name))
    return plan


def process_file(pipeline: PassportPhotoPipeline, src: Path, dst: Path) -> None:
    try:
        data = src.read_bytes()
    except OSError as exc:
        raise PassportFrameError(f"Could not read {src}: {exc}") from exc
    out = pipeline.process_image(data, fmt=_output_format(dst))
    try:
        dst.write_bytes(out)
    except OSError as exc:
        raise PassportFrameError(f"Could not write {dst}: {exc}") from exc


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate a 700x900 passport-style photo on a white background.")
    p.add_argument("--input", "-i", required=True, action="append", help="Input image (repeatable)")
    p.add_argument("--output", "-o", required=True, help="Output image, or directory when several inputs are given")
    p.add_argument("--width", type=int, default=None, help="Output width in pixels (default: 700)")
    p.add_argument("--height", type=int, default=None, help="Output height in pixels (default: 900)")
    p.add_argument("--detector", choices=FACE_DETECTORS, default=None, help="Face detector (default: ssd)")
    p.add_argument("--segmenter", choices=SEGMENTERS, default=None, help="Background segmentation (default: u2net)")
    p.add_argument("--models-dir", default=None, help="Directory holding the model files")
    p.add_argument("--jobs", "-j", type=int, default=1, help="Images processed in parallel (default: 1)")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        params = load_params_from_env()
        overrides = {
            "target_width": args.width,
            "target_height": args.height,
            "face_detector": args.detector,
            "segmenter": args.segmenter,
        }
        params = replace(params, **{k: v for k, v in overrides.items() if v is not None})
        paths = ModelPaths.from_dir(args.models_dir) if args.models_dir else ModelPaths.default()
        pipeline = build_pipeline(params, paths)
    except (PassportFrameError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR

    as_dir = args.output.endswith(("/", os.sep))
    try:
        jobs = _plan_outputs([Path(p) for p in args.input], Path(args.output), as_dir=as_dir)
    except OSError as e:
        print(f"ERROR: cannot use {args.output} as output directory: {e}", file=sys.stderr)
        return EXIT_ERROR

    status = EXIT_OK
    with ThreadPoolExecutor(max_workers=max(1, args.jobs)) as pool:
        futures = [(src, dst, pool.submit(process_file, pipeline, src, dst)) for src, dst in jobs]
        for src, dst, fut in futures:
            try:
                fut.result()
            except NoFaceDetected as e:
                print(f"ERROR: {src}: {e}", file=sys.stderr)
                status = status or EXIT_NO_FACE
            except PassportFrameError as e:
                print(f"ERROR: {src}: {e}", file=sys.stderr)
                status = EXIT_ERROR
            else:
                print(f"Saved: {dst}")
    return status


if __name__ == "__main__":
    raise SystemExit(main())
