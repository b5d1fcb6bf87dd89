"""Typed failures raised by the passport photo pipeline."""


class PassportFrameError(Exception):
    """Base class for every failure the pipeline reports to its caller."""


class DecodeError(PassportFrameError):
    """Input bytes are not a recognizable raster image."""


class NoFaceDetected(PassportFrameError):
    """The face locator found no candidate to anchor the crop on."""

    def __init__(self, message: str = "No face detected. Try a clearer, front-facing photo with good lighting."):
        super().__init__(message)


class FaceDetectionError(PassportFrameError):
    """The face detector itself failed while running."""


class SegmentationError(PassportFrameError):
    """No foreground mask matching the canvas could be produced."""


class EncodeError(PassportFrameError):
    """The final image could not be serialized."""


class ModelLoadError(PassportFrameError):
    """A detector or segmentation model asset is missing or unreadable."""


class ConfigError(PassportFrameError, ValueError):
    """A configuration value is missing or malformed."""
