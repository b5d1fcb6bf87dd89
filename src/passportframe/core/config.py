"""
Environment configuration for the passport photo pipeline.

Recognized variables (all optional):
    PASSPORTFRAME_WIDTH, PASSPORTFRAME_HEIGHT       output canvas size
    PASSPORTFRAME_FACE_DETECTOR                     ssd | haar | mediapipe
    PASSPORTFRAME_SEGMENTER                         u2net | grabcut | rembg
    PASSPORTFRAME_MIN_FACE_CONFIDENCE               float in [0, 1]
    PASSPORTFRAME_MODELS_DIR                        see app.resources.ModelPaths
"""

from __future__ import annotations

import os
from dataclasses import replace
from typing import Callable, Mapping, Optional, TypeVar

from passportframe.core.errors import ConfigError
from passportframe.core.models import ProcessingParams

T = TypeVar("T")

ENV_PREFIX = "PASSPORTFRAME_"


def get_env(name: str, environ: Optional[Mapping[str, str]] = None, default: Optional[str] = None) -> Optional[str]:
    """Return a stripped environment value, or `default` when unset or blank."""
    env = os.environ if environ is None else environ
    value = env.get(name, "")
    value = value.strip().replace("\n", "").replace("\r", "")
    return value or default


def _parse(name: str, raw: str, convert: Callable[[str], T]) -> T:
    try:
        return convert(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from exc


def load_params_from_env(
    environ: Optional[Mapping[str, str]] = None,
    base: Optional[ProcessingParams] = None,
) -> ProcessingParams:
    """Overlay PASSPORTFRAME_* variables on `base` (defaults when omitted)."""
    params = base if base is not None else ProcessingParams()
    overrides = {}

    fields = (
        ("WIDTH", "target_width", int),
        ("HEIGHT", "target_height", int),
        ("FACE_DETECTOR", "face_detector", str.lower),
        ("SEGMENTER", "segmenter", str.lower),
        ("MIN_FACE_CONFIDENCE", "min_face_confidence", float),
    )
    for suffix, attr, convert in fields:
        name = ENV_PREFIX + suffix
        raw = get_env(name, environ)
        if raw is not None:
            overrides[attr] = _parse(name, raw, convert)

    if not overrides:
        return params
    try:
        return replace(params, **overrides)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
